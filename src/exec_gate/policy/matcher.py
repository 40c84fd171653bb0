"""Glob pattern matching for policy rules.

Rule patterns use glob syntax: ``*`` matches any run of characters
(including none) and ``?`` matches exactly one character.  Matching is
case-insensitive and anchored -- the pattern must cover the whole
command string, so ``rm *`` matches ``rm -rf /`` but not ``sudo rm -rf /``.

Compiled patterns are cached per :class:`RuleMatcher` instance.  The
mapping pattern -> regex is pure, so a cached entry is never wrong; the
cache is cleared on every policy mutation only to bound its size.
"""
from __future__ import annotations

import re

# Literal pattern that matches every command without compiling a regex.
MATCH_ALL = "*"


def glob_to_regex(pattern: str) -> str:
    """Translate a glob *pattern* into an anchored regular expression.

    Every regex metacharacter is escaped first; the escaped wildcards
    are then re-expanded so that only ``*`` and ``?`` keep a special
    meaning.

    >>> glob_to_regex("Get-*")
    '^Get\\\\-.*$'
    """
    escaped = re.escape(pattern)
    return "^" + escaped.replace(r"\*", ".*").replace(r"\?", ".") + "$"


class RuleMatcher:
    """Match command strings against glob patterns, caching compiled regexes."""

    def __init__(self) -> None:
        self._cache: dict[str, re.Pattern[str]] = {}

    def compile(self, pattern: str) -> re.Pattern[str]:
        """Return the compiled, cached regex for *pattern*."""
        compiled = self._cache.get(pattern)
        if compiled is None:
            compiled = re.compile(glob_to_regex(pattern), re.IGNORECASE | re.DOTALL)
            self._cache[pattern] = compiled
        return compiled

    def matches(self, command: str, pattern: str) -> bool:
        """Return ``True`` if *pattern* matches the whole of *command*."""
        if pattern == MATCH_ALL:
            return True
        return self.compile(pattern).fullmatch(command) is not None

    # -- cache management ---------------------------------------------------

    def clear_cache(self) -> None:
        """Drop every compiled pattern."""
        self._cache.clear()

    @property
    def cache_size(self) -> int:
        """Return the number of compiled patterns currently cached."""
        return len(self._cache)
