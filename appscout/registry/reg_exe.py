"""
reg.exe transport for the Registry Access Port.

One blocking subprocess per operation, with a hard timeout. On timeout the
child is killed by ``subprocess.run`` and RegistryTimeoutError is raised; a
non-zero exit raises RegistryCommandError carrying reg.exe's stderr. No
retries are made.
"""
import logging
import subprocess
import sys
from typing import List, Optional

from appscout.errors import RegistryCommandError, RegistryNotFoundError, RegistryTimeoutError
from appscout.models import RegistryView
from appscout.registry.port import RegistryPort

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

# reg.exe exits 1 for every error and localizes the message, so this English
# text only marks "not found" on English hosts. Discovery reads values from
# key listings and does not depend on it.
_NOT_FOUND_MARKERS = ("unable to find",)


def _view_args(view: Optional[RegistryView]) -> List[str]:
    return [f"/reg:{view.value}"] if view else []


class RegExeRegistry(RegistryPort):
    """
    RegistryPort backed by the Windows ``reg.exe`` command-line tool.

    Usage:
        reg = RegExeRegistry(timeout=10)
        reg.read_value(r"HKCU\\Software\\X", "DemoString")
    """

    def __init__(self, executable: str = "reg.exe", timeout: float = DEFAULT_TIMEOUT):
        self.executable = executable
        self.timeout = timeout

    def run(self, args: List[str]) -> str:
        """Run reg.exe with ``args`` and return its stdout."""
        cmd = [self.executable, *args]
        args_line = " ".join(args)
        logger.debug(f"reg {args_line}")

        kwargs = {}
        if sys.platform == "win32":
            kwargs["creationflags"] = subprocess.CREATE_NO_WINDOW

        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                **kwargs,
            )
        except subprocess.TimeoutExpired:
            logger.error(f"reg.exe timed out after {self.timeout}s: {args_line}")
            raise RegistryTimeoutError(args_line, self.timeout)
        except OSError as e:
            raise RegistryCommandError(args_line, -1, str(e)) from e

        if proc.returncode != 0:
            stderr = proc.stderr or ""
            if any(marker in stderr.lower() for marker in _NOT_FOUND_MARKERS):
                raise RegistryNotFoundError(args_line, proc.returncode, stderr)
            raise RegistryCommandError(args_line, proc.returncode, stderr)

        return proc.stdout or ""

    # ─────────────────────────── Queries ───────────────────────────

    def query_key(self, key: str, view: Optional[RegistryView] = None, recursive: bool = False) -> str:
        args = ["query", key]
        if recursive:
            args.append("/s")
        return self.run(args + _view_args(view))

    def query_value(self, key: str, name: str, view: Optional[RegistryView] = None) -> str:
        return self.run(["query", key, "/v", name] + _view_args(view))

    def query_default(self, key: str, view: Optional[RegistryView] = None) -> str:
        return self.run(["query", key, "/ve"] + _view_args(view))

    # ─────────────────────────── Writes ───────────────────────────

    def add_key(self, key: str) -> None:
        self.run(["add", key, "/f"])

    def set_string(self, key: str, name: str, data: str) -> None:
        self.run(["add", key, "/v", name, "/t", "REG_SZ", "/d", data or "", "/f"])

    def set_default(self, key: str, data: str) -> None:
        self.run(["add", key, "/ve", "/t", "REG_SZ", "/d", data or "", "/f"])

    def set_dword(self, key: str, name: str, data: int) -> None:
        self.run(["add", key, "/v", name, "/t", "REG_DWORD", "/d", str(int(data)), "/f"])

    def delete_value(self, key: str, name: str, missing_ok: bool = True) -> None:
        try:
            self.run(["delete", key, "/v", name, "/f"])
        except RegistryNotFoundError:
            if not missing_ok:
                raise
            logger.debug(f"Value already absent: {key}\\{name}")
