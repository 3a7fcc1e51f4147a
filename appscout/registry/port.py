"""
Registry Access Port: the abstract capability the discovery engine depends on.

Subclasses MUST implement the raw-text primitives, modelled on reg.exe:
    query_key(key, view, recursive)   child keys and values of a key
    query_value(key, name, view)      one named value
    query_default(key, view)          the unnamed/default value
    add_key / set_string / set_default / set_dword / delete_value

Every primitive raises RegistryError subclasses on failure; a missing key or
value is signalled with RegistryNotFoundError. The helpers below turn that
case into None / ABSENT and let every other failure through.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from appscout.errors import RegistryCommandError, RegistryNotFoundError
from appscout.models import Presence, RegistryView
from appscout.registry.parser import parse_rows, parse_subkey_paths, parse_value_data

logger = logging.getLogger(__name__)


class RegistryPort(ABC):

    # ─────────────────────────── Raw primitives ───────────────────────────

    @abstractmethod
    def query_key(self, key: str, view: Optional[RegistryView] = None, recursive: bool = False) -> str:
        pass

    @abstractmethod
    def query_value(self, key: str, name: str, view: Optional[RegistryView] = None) -> str:
        pass

    @abstractmethod
    def query_default(self, key: str, view: Optional[RegistryView] = None) -> str:
        pass

    @abstractmethod
    def add_key(self, key: str) -> None:
        pass

    @abstractmethod
    def set_string(self, key: str, name: str, data: str) -> None:
        pass

    @abstractmethod
    def set_default(self, key: str, data: str) -> None:
        pass

    @abstractmethod
    def set_dword(self, key: str, name: str, data: int) -> None:
        pass

    @abstractmethod
    def delete_value(self, key: str, name: str, missing_ok: bool = True) -> None:
        pass

    # ─────────────────────────── Parsed reads ───────────────────────────

    def read_value(self, key: str, name: str, view: Optional[RegistryView] = None) -> Optional[str]:
        """Data of ``key\\name`` or None when the value does not exist."""
        try:
            raw = self.query_value(key, name, view)
        except RegistryNotFoundError:
            return None
        return parse_value_data(raw, key, name)

    def read_default(self, key: str, view: Optional[RegistryView] = None) -> Optional[str]:
        try:
            raw = self.query_default(key, view)
        except RegistryNotFoundError:
            return None
        return parse_value_data(raw, key)

    def read_values(self, key: str, view: Optional[RegistryView] = None) -> Dict[str, str]:
        """
        Every value of ``key`` from a single listing, keyed by lower-cased name.

        A value that is not there is simply missing from the dict, so no
        per-value query (and no localized reg.exe error text) is involved.
        Empty when the key itself does not exist.
        """
        try:
            raw = self.query_key(key, view, recursive=False)
        except RegistryNotFoundError:
            return {}
        values: Dict[str, str] = {}
        for row in parse_rows(raw, key):
            values.setdefault(row.name.lower(), row.data)
        return values

    def list_subkeys(self, key: str, view: Optional[RegistryView] = None) -> List[str]:
        """Immediate children of ``key``; never recursive."""
        try:
            raw = self.query_key(key, view, recursive=False)
        except RegistryNotFoundError:
            return []
        return parse_subkey_paths(raw, key)

    # ─────────────────────────── Existence ───────────────────────────

    def probe_key(self, key: str, view: Optional[RegistryView] = None) -> Presence:
        try:
            self.query_key(key, view)
        except RegistryNotFoundError:
            return Presence.ABSENT
        except RegistryCommandError as e:
            logger.warning(f"Could not probe key {key}: {e}")
            return Presence.UNKNOWN
        return Presence.PRESENT

    def probe_value(self, key: str, name: str, view: Optional[RegistryView] = None) -> Presence:
        try:
            self.query_value(key, name, view)
        except RegistryNotFoundError:
            return Presence.ABSENT
        except RegistryCommandError as e:
            logger.warning(f"Could not probe value {key}\\{name}: {e}")
            return Presence.UNKNOWN
        return Presence.PRESENT

    def key_exists(self, key: str, view: Optional[RegistryView] = None) -> bool:
        return self.probe_key(key, view) is Presence.PRESENT

    def value_exists(self, key: str, name: str, view: Optional[RegistryView] = None) -> bool:
        return self.probe_value(key, name, view) is Presence.PRESENT

    # ─────────────────────────── Comparisons ───────────────────────────

    def value_equals_dword(self, key: str, name: str, expected: int) -> bool:
        """
        reg.exe prints DWORDs as hex (``0x1``); plain decimal data is accepted
        as well.
        """
        data = self.read_value(key, name)
        if not data or not data.strip():
            return False
        data = data.strip()

        try:
            if int(data) == expected:
                return True
        except ValueError:
            pass

        if data.lower().startswith("0x"):
            try:
                return int(data[2:], 16) == expected
            except ValueError:
                return False
        return False

    def value_equals_string(self, key: str, name: str, expected: str, ignore_case: bool = False) -> bool:
        data = self.read_value(key, name)
        if data is None:
            return False
        if ignore_case:
            return data.casefold() == expected.casefold()
        return data == expected
