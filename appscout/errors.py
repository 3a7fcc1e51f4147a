"""
AppScout exceptions.

Transport errors raised by the registry port propagate to the caller.
"Not found" is modelled as its own subclass so the port helpers can turn it
into an empty result without hiding real failures.
"""
from typing import Optional


class AppScoutError(Exception):
    """Base class for every error raised by appscout."""
    pass


# ─────────────────────────── Registry transport ───────────────────────────

class RegistryError(AppScoutError):
    """A registry operation could not be completed."""
    pass


class RegistryTimeoutError(RegistryError):
    """reg.exe exceeded its deadline and was killed."""

    def __init__(self, args_line: str, timeout: float):
        self.args_line = args_line
        self.timeout = timeout
        super().__init__(f"reg.exe timed out after {timeout:g}s: {args_line}")


class RegistryCommandError(RegistryError):
    """reg.exe exited with a non-zero status."""

    def __init__(self, args_line: str, returncode: int, stderr: Optional[str] = None):
        self.args_line = args_line
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        super().__init__(f"reg.exe failed ({returncode}): {self.stderr or args_line}")


class RegistryNotFoundError(RegistryCommandError):
    """The queried key or value does not exist."""
    pass


# ─────────────────────────── Run control ───────────────────────────

class RunAborted(AppScoutError):
    """The verification run was aborted; the message says why."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ProcessStartError(AppScoutError):
    """The target application did not come up within its timeout."""
    pass
