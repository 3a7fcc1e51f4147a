"""
Reporting sinks for check outcomes.

A Reporter records named timers and (title, description) events. The
LoggingReporter writes both to the log and keeps them in a RunReport so the
CLI can print the run as JSON afterwards.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

TIMER_NAME_MAX = 32
TIMER_NAME_PREFIX = "t_"


def sanitize_timer_name(name: Optional[str]) -> str:
    """
    Make ``name`` usable as a timer name.

    Every character that is not alphanumeric or '_' becomes '_'. Names that
    are empty or do not start with an alphanumeric get a ``t_`` prefix. The
    result is cut to 32 characters. Never raises.
    """
    s = "".join(ch if ch.isalnum() or ch == "_" else "_" for ch in (name or ""))
    if not s or not s[0].isalnum():
        s = TIMER_NAME_PREFIX + s
    return s[:TIMER_NAME_MAX]


@dataclass
class ReportEntry:
    kind: str                       # "timer" | "event"
    name: str
    value: Any = None
    at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "name": self.name, "value": self.value, "at": self.at.isoformat()}


@dataclass
class RunReport:
    entries: List[ReportEntry] = field(default_factory=list)
    aborted: Optional[str] = None

    @property
    def timers(self) -> Dict[str, Any]:
        return {e.name: e.value for e in self.entries if e.kind == "timer"}

    @property
    def events(self) -> List[ReportEntry]:
        return [e for e in self.entries if e.kind == "event"]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "aborted": self.aborted,
            "timers": self.timers,
            "events": [{"title": e.name, "description": e.value} for e in self.events],
        }


class Reporter(ABC):

    @abstractmethod
    def set_timer(self, name: str, duration_ms: int) -> None:
        pass

    @abstractmethod
    def create_event(self, title: str, description: str = "") -> None:
        pass


class LoggingReporter(Reporter):
    """Reporter that logs every timer/event and keeps them in ``self.report``."""

    def __init__(self, report: Optional[RunReport] = None):
        self.report = report if report is not None else RunReport()
        self.logger = logging.getLogger("appscout.report")

    def set_timer(self, name: str, duration_ms: int) -> None:
        self.logger.info(f"timer {name} = {duration_ms}ms")
        self.report.entries.append(ReportEntry(kind="timer", name=name, value=duration_ms))

    def create_event(self, title: str, description: str = "") -> None:
        self.logger.info(f"event {title}: {description}")
        self.report.entries.append(ReportEntry(kind="event", name=title, value=description))
