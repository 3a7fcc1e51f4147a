"""
Parser for reg.exe query output.

reg.exe echoes the queried key as a header line and then prints one row per
value::

    HKEY_CURRENT_USER\\Software\\X
        DemoString    REG_SZ    Hello from Login Enterprise

Rows are split on runs of whitespace. The first token is the value name, the
second its type, and everything from the third token on is the data,
re-joined with single spaces so that data containing spaces survives.
Subkey listings are plain lines holding the full child path.

The text comes from an external tool, so anything that does not fit the
shape is skipped rather than raised.
"""
from typing import List, Optional

from appscout.models import RegistryRow


def _lines(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [line for line in raw.splitlines() if line.strip()]


# reg.exe accepts the short hive names but always prints the long ones.
HIVE_ALIASES = {
    "HKCU": "HKEY_CURRENT_USER",
    "HKLM": "HKEY_LOCAL_MACHINE",
    "HKCR": "HKEY_CLASSES_ROOT",
    "HKU": "HKEY_USERS",
    "HKCC": "HKEY_CURRENT_CONFIG",
}


def canonical_key(path: str) -> str:
    """Lower-cased key path with the hive spelled out in full."""
    hive, sep, rest = path.strip().partition("\\")
    hive = HIVE_ALIASES.get(hive.upper(), hive)
    return f"{hive}{sep}{rest}".lower()


def _starts_with(text: str, prefix: str) -> bool:
    return canonical_key(text).startswith(canonical_key(prefix))


def parse_rows(raw: Optional[str], key: str) -> List[RegistryRow]:
    """Return every usable (name, type, data) row, skipping the header echo."""
    rows: List[RegistryRow] = []
    for line in _lines(raw):
        if _starts_with(line.strip(), key):
            continue
        parts = line.split()
        if len(parts) < 3:
            continue
        rows.append(RegistryRow(name=parts[0], type=parts[1], data=" ".join(parts[2:])))
    return rows


def parse_value_data(raw: Optional[str], key: str, value_name: Optional[str] = None) -> Optional[str]:
    """
    Extract the data of one value from ``reg query`` output.

    Args:
        raw: Output of ``reg query <key> /v <name>`` or ``/ve``.
        key: The key that was queried (used to drop the header echo).
        value_name: Name to look for (case-insensitive). ``None`` means the
            default value query, where the first usable row is taken since
            the "(Default)" label is localized.

    Returns:
        The data string, or None if no matching row exists.
    """
    for row in parse_rows(raw, key):
        if value_name is None or row.name.lower() == value_name.lower():
            return row.data
    return None


def parse_subkey_paths(raw: Optional[str], parent: str) -> List[str]:
    """Return immediate child key paths in the order reg.exe reported them."""
    children: List[str] = []
    parent_c = canonical_key(parent)
    for line in _lines(raw):
        s = line.strip()
        if _starts_with(s, parent) and canonical_key(s) != parent_c:
            children.append(s)
    return children
