"""
AppScout: locate an installed Windows application from the registry and
verify its identity.
"""

from .harness import AssertionHarness, Outcome
from .locator import AppLocator
from .matching import compile_wildcard, wildcard_match
from .models import DiscoveryResult, Presence, RegistryRow, RegistryView, SearchRoot
from .reporting import LoggingReporter, sanitize_timer_name
from .versions import parse_version, versions_equal

__version__ = "0.1.0"

__all__ = [
    "AppLocator",
    "AssertionHarness",
    "DiscoveryResult",
    "LoggingReporter",
    "Outcome",
    "Presence",
    "RegistryRow",
    "RegistryView",
    "SearchRoot",
    "compile_wildcard",
    "parse_version",
    "sanitize_timer_name",
    "versions_equal",
    "wildcard_match",
]
