"""
Version extraction with fallbacks.

Resolution order (first non-blank wins):
    1. DisplayVersion
    2. VersionMajor + "." + VersionMinor     (both must be present)
    3. Version
    4. Executable metadata: ProductVersion, then FileVersion
       (only when a launch path is known and exists)

Nothing found is not an error; the version is just "".
"""
import logging
import os
from typing import Callable, Dict, Optional

from appscout.models import RegistryView
from appscout.registry.port import RegistryPort

logger = logging.getLogger(__name__)

VersionReader = Callable[[str], str]


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _dword_text(value: str) -> str:
    """reg.exe prints REG_DWORD data as hex (``0x5f``); render it in decimal."""
    value = value.strip()
    if value.lower().startswith("0x"):
        try:
            return str(int(value, 16))
        except ValueError:
            return value
    return value


def version_from_values(values: Dict[str, str]) -> str:
    """Steps 1-3 over the values of an uninstall entry (names lower-cased)."""
    display_version = values.get("displayversion")
    if not _blank(display_version):
        return display_version.strip()

    major = values.get("versionmajor")
    minor = values.get("versionminor")
    if not _blank(major) and not _blank(minor):
        return f"{_dword_text(major)}.{_dword_text(minor)}"

    version = values.get("version")
    if not _blank(version):
        return version.strip()

    return ""


def registry_version(port: RegistryPort, subkey: str, view: Optional[RegistryView] = None) -> str:
    return version_from_values(port.read_values(subkey, view))


def _string_file_info(path: str, field: str) -> str:
    import win32api

    translations = win32api.GetFileVersionInfo(path, "\\VarFileInfo\\Translation") or []
    # 040904b0 (US English, Unicode) is the usual table when no translation is listed
    codepages = [f"{lang:04x}{codepage:04x}" for lang, codepage in translations] or ["040904b0"]
    for cp in codepages:
        try:
            value = win32api.GetFileVersionInfo(path, f"\\StringFileInfo\\{cp}\\{field}")
        except Exception:
            continue
        if value and str(value).strip():
            return str(value).strip()
    return ""


def _fixed_file_info(path: str, prefix: str) -> str:
    import win32api

    info = win32api.GetFileVersionInfo(path, "\\")
    ms = info[f"{prefix}VersionMS"]
    ls = info[f"{prefix}VersionLS"]
    return (
        f"{win32api.HIWORD(ms)}.{win32api.LOWORD(ms)}."
        f"{win32api.HIWORD(ls)}.{win32api.LOWORD(ls)}"
    )


def exe_product_version(path: str) -> str:
    """
    ProductVersion of a PE file, falling back to FileVersion.

    Uses pywin32. Returns "" when the file has no version resource, cannot be
    read, or pywin32 is unavailable on this host.
    """
    if not path or not os.path.isfile(path):
        return ""
    try:
        import win32api  # noqa: F401
    except ImportError:
        logger.debug("pywin32 not installed, cannot read version resource")
        return ""

    try:
        version = _string_file_info(path, "ProductVersion")
        if not version:
            version = _string_file_info(path, "FileVersion")
        if not version:
            version = _fixed_file_info(path, "Product")
        return version
    except Exception as e:
        # pywintypes.error when the file carries no version resource
        logger.debug(f"No version resource in {path}: {e}")
        return ""


def metadata_version(launch_path: str, reader: VersionReader = exe_product_version) -> str:
    if not launch_path:
        return ""
    version = reader(launch_path) or ""
    if version.strip():
        logger.info(f"Version filled from EXE metadata: '{version.strip()}'")
    return version.strip()
