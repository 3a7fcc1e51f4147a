"""
Value types shared across the discovery pipeline.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RegistryView(Enum):
    """Bit-width view of the registry (``/reg:32`` or ``/reg:64``)."""
    BIT32 = "32"
    BIT64 = "64"


class Presence(Enum):
    """Outcome of an existence probe."""
    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"   # query failed for a reason other than "not found"


@dataclass(frozen=True)
class RegistryRow:
    name: str
    type: str
    data: str


@dataclass(frozen=True)
class SearchRoot:
    path: str
    view: Optional[RegistryView] = None


@dataclass(frozen=True)
class DiscoveryResult:
    """
    Outcome of a single locate call.

    Each pipeline stage returns a new value (``dataclasses.replace``); nothing
    is shared between calls.
    """
    found: bool = False
    display_name: str = ""
    version: str = ""
    launch_path: str = ""
    install_location: str = ""
    source_key: str = ""
    strategy: str = ""

    def __post_init__(self):
        if self.found and not self.display_name.strip():
            raise ValueError("a found DiscoveryResult needs a display name")

    def to_dict(self) -> dict:
        return {
            "found": self.found,
            "display_name": self.display_name,
            "version": self.version,
            "launch_path": self.launch_path,
            "install_location": self.install_location,
            "source_key": self.source_key,
            "strategy": self.strategy,
        }


NOT_FOUND = DiscoveryResult()
