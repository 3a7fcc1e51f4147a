"""
Wildcard matching for registry display names.

    *   any run of characters, including none
    ?   exactly one character

Everything else is literal (periods, parentheses and other regex
metacharacters included) and compared case-insensitively. Matches are
anchored: the whole candidate must match.

    >>> wildcard_match("Visual Studio Code - Insiders", "Visual Studio Code*")
    True
"""
from functools import lru_cache
from typing import Callable, Optional, Sequence

Matcher = Callable[[Optional[str]], bool]


def _glob(pattern: Sequence[str], text: Sequence[str]) -> bool:
    # Greedy two-pointer scan; on mismatch, backtrack to the last '*' and let
    # it swallow one more character.
    p = t = 0
    star = -1
    mark = 0
    plen, tlen = len(pattern), len(text)

    while t < tlen:
        if p < plen and (pattern[p] == "?" or pattern[p] == text[t]):
            p += 1
            t += 1
        elif p < plen and pattern[p] == "*":
            star = p
            mark = t
            p += 1
        elif star != -1:
            p = star + 1
            mark += 1
            t = mark
        else:
            return False

    while p < plen and pattern[p] == "*":
        p += 1
    return p == plen


@lru_cache(maxsize=64)
def compile_wildcard(pattern: str) -> Matcher:
    """Compile ``pattern`` into a case-insensitive, anchored predicate."""
    # lowered per character so "?" still stands for exactly one character
    folded = [ch.lower() for ch in (pattern or "")]

    def match(text: Optional[str]) -> bool:
        return _glob(folded, [ch.lower() for ch in (text or "")])

    match.pattern = pattern  # type: ignore[attr-defined]
    return match


def wildcard_match(text: Optional[str], pattern: str) -> bool:
    return compile_wildcard(pattern)(text)
