"""
Registry access: text parser, abstract port and the reg.exe transport.
"""

from .parser import canonical_key, parse_rows, parse_subkey_paths, parse_value_data
from .port import RegistryPort
from .reg_exe import RegExeRegistry

__all__ = [
    "RegistryPort",
    "RegExeRegistry",
    "canonical_key",
    "parse_rows",
    "parse_subkey_paths",
    "parse_value_data",
]
