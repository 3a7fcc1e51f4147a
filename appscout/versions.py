"""
Version comparison as zero-padded integer segment sequences.

"1.95" == "1.95.0", but "1.95" != "1.95.1". Anything that is not a digit
separates segments, so "1.95.0-insider" parses as (1, 95, 0).
"""
from typing import Optional, Tuple

MAX_SEGMENTS = 4


def parse_version(text: Optional[str]) -> Tuple[int, ...]:
    """Split ``text`` on runs of non-digits; blank or digit-free -> (0,)."""
    if not text or not text.strip():
        return (0,)

    segments = []
    current = ""
    for ch in text:
        if "0" <= ch <= "9":
            current += ch
        elif current:
            segments.append(int(current))
            current = ""
    if current:
        segments.append(int(current))

    if not segments:
        return (0,)
    return tuple(segments[:MAX_SEGMENTS])


def _pad(segments: Tuple[int, ...], length: int) -> Tuple[int, ...]:
    return segments + (0,) * (length - len(segments))


def versions_equal(detected: Optional[str], expected: Optional[str]) -> bool:
    a = parse_version(detected)
    b = parse_version(expected)
    width = max(len(a), len(b))
    return _pad(a, width) == _pad(b, width)
