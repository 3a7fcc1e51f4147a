"""
Launch path resolution.

Registry data is Windows data, so paths are joined and expanded with
``ntpath`` regardless of the host running the code:

    combine_if_present("C:\\VSCode", "Code.exe")        -> "C:\\VSCode\\Code.exe"
    extract_executable_path('"C:\\App\\app.exe",0')    -> "C:\\App\\app.exe"
    expand_candidates(["%ProgramFiles%\\{name}\\{exe}"], "Code.exe")
"""
import logging
import ntpath
import os
from typing import Callable, Iterable, List, Optional

logger = logging.getLogger(__name__)

EXE_MARKER = ".exe"

FileExists = Callable[[str], bool]

DEFAULT_KNOWN_PATHS = [
    r"%LOCALAPPDATA%\Programs\Microsoft VS Code\{exe}",
    r"%ProgramFiles%\Microsoft VS Code\{exe}",
    r"%ProgramFiles(x86)%\Microsoft VS Code\{exe}",
    r"%ProgramFiles%\{name}\{exe}",
    r"%ProgramFiles(x86)%\{name}\{exe}",
    r"%LOCALAPPDATA%\{name}\{exe}",
]


def file_exists(path: str) -> bool:
    return bool(path) and os.path.isfile(path)


def exe_stem(exe_file_name: str) -> str:
    """``Code.exe`` -> ``Code``."""
    return ntpath.splitext(ntpath.basename(exe_file_name or ""))[0]


def combine_if_present(directory: Optional[str], file_name: str) -> str:
    """Join ``directory`` and ``file_name``; empty when there is no directory."""
    if not directory or not directory.strip():
        return ""
    directory = directory.strip().strip('"')
    if not directory:
        return ""
    return ntpath.join(directory, file_name)


def extract_executable_path(icon_value: Optional[str], marker: str = EXE_MARKER) -> Optional[str]:
    """
    Recover an executable path from a DisplayIcon-style value.

    The value is ``path[,iconIndex]``, possibly quoted. Everything up to and
    including the first (case-insensitive) ``.exe`` is taken.
    """
    if not icon_value or not icon_value.strip():
        return None
    value = icon_value.strip().strip('"')
    idx = value.lower().find(marker.lower())
    if idx < 0:
        return None
    path = value[: idx + len(marker)].strip().strip('"')
    return path or None


def resolve_launch_path(
    install_location: Optional[str],
    exe_file_name: str,
    display_icon: Optional[str] = None,
    exists: FileExists = file_exists,
) -> str:
    """
    InstallLocation + exe name first, then the DisplayIcon path. A candidate is
    only accepted if it exists on disk. Returns "" when neither works.
    """
    candidate = combine_if_present(install_location, exe_file_name)
    if candidate and exists(candidate):
        return candidate

    icon_exe = extract_executable_path(display_icon)
    if icon_exe and exists(icon_exe):
        return icon_exe

    return ""


def expand_candidates(templates: Iterable[str], exe_file_name: str) -> List[str]:
    """Fill ``{exe}``/``{name}`` and expand ``%VAR%`` references, in order."""
    name = exe_stem(exe_file_name)
    candidates: List[str] = []
    for template in templates:
        filled = template.replace("{exe}", exe_file_name).replace("{name}", name)
        candidates.append(ntpath.expandvars(filled))
    return candidates


def first_existing(candidates: Iterable[str], exists: FileExists = file_exists) -> str:
    for candidate in candidates:
        if candidate and candidate.strip() and exists(candidate):
            return candidate
    return ""
