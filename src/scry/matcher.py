"""Bounded execution of detection patterns over untrusted text.

Patterns are declared with the standard ``re`` syntax and executed with the
``regex`` engine, which accepts a per-search timeout. Each search gets the
time left in the execution budget, so one pathological pattern/input pair
cannot run past ``timeout_ms``. Time, match-count and content-length limits
are soft: hitting one returns the matches found so far.
"""

import logging
import re
import time
from typing import NamedTuple, Optional, Union

import regex

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 1000
DEFAULT_MAX_MATCHES = 1000
DEFAULT_MAX_CONTENT_LENGTH = 1_000_000

PatternLike = Union[str, "re.Pattern[str]", "regex.Pattern[str]"]


class ExecutionLimits(NamedTuple):
    """Soft bounds applied to every pattern execution."""

    timeout_ms: int = DEFAULT_TIMEOUT_MS
    max_matches: int = DEFAULT_MAX_MATCHES
    max_content_length: int = DEFAULT_MAX_CONTENT_LENGTH


DEFAULT_LIMITS = ExecutionLimits()


class RawMatch(NamedTuple):
    """An unfiltered pattern hit, before suppression."""

    pattern_name: str
    start: int
    end: int
    text: str
    groups: tuple[Optional[str], ...]
    named: dict[str, Optional[str]]

    def group(self, key: Union[int, str]) -> Optional[str]:
        """Return a capture group by 1-based index or by name (0 is the whole match)."""
        if isinstance(key, str):
            return self.named.get(key)
        if key == 0:
            return self.text
        if 0 < key <= len(self.groups):
            return self.groups[key - 1]
        return None


def truncate_content(content: str, max_content_length: int) -> str:
    """Cut ``content`` to at most ``max_content_length`` characters."""
    if len(content) > max_content_length:
        logger.debug(f"Truncating content from {len(content)} to {max_content_length} characters")
        return content[:max_content_length]
    return content


# re and regex share these flag values; re.ASCII does not (it is regex.VERSION1).
_SHARED_FLAGS = re.IGNORECASE | re.MULTILINE | re.DOTALL | re.VERBOSE


def translate_flags(flags: int) -> int:
    """Map ``re`` flag bits onto the ``regex`` engine's."""
    translated = int(flags & _SHARED_FLAGS)
    if flags & re.ASCII:
        translated |= regex.ASCII
    return translated


def compile_pattern(pattern: PatternLike) -> "regex.Pattern[str]":
    """Compile ``pattern`` for the ``regex`` engine.

    ``re`` patterns are recompiled from their source and flags; compiled
    pattern objects carry no cursor state between searches.
    """
    if isinstance(pattern, regex.Pattern):
        return pattern
    if isinstance(pattern, re.Pattern):
        return regex.compile(pattern.pattern, translate_flags(pattern.flags))
    return regex.compile(pattern)


def execute(
    pattern: PatternLike,
    content: str,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    max_matches: int = DEFAULT_MAX_MATCHES,
    max_content_length: int = DEFAULT_MAX_CONTENT_LENGTH,
    name: str = "",
) -> list[RawMatch]:
    """Find all matches of ``pattern`` in ``content`` under soft bounds.

    Args:
        pattern: Pattern to run (``re``/``regex`` pattern or source string).
        content: Text to scan. Truncated to ``max_content_length`` first.
        timeout_ms: Wall-clock budget for the whole execution.
        max_matches: Stop after this many matches.
        max_content_length: Maximum number of characters scanned.
        name: Pattern name recorded on each RawMatch.

    Returns:
        Matches in offset order. A timeout, the match cap or an engine error
        ends the scan early; matches found before that are returned.
    """
    compiled = compile_pattern(pattern)
    text = truncate_content(content, max_content_length)
    label = name or compiled.pattern[:40]

    matches: list[RawMatch] = []
    deadline = time.monotonic() + timeout_ms / 1000
    pos = 0

    while pos <= len(text):
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            logger.debug(f"Pattern '{label}' hit {timeout_ms}ms budget after {len(matches)} matches")
            break

        try:
            match = compiled.search(text, pos, timeout=remaining)
        except TimeoutError:
            logger.debug(f"Pattern '{label}' timed out after {len(matches)} matches")
            break
        except Exception as e:
            logger.warning(f"Pattern '{label}' raised during matching, keeping {len(matches)} matches: {e}")
            break

        if match is None:
            break

        matches.append(
            RawMatch(
                pattern_name=name,
                start=match.start(),
                end=match.end(),
                text=match.group(0),
                groups=match.groups(),
                named=match.groupdict(),
            )
        )
        if len(matches) >= max_matches:
            logger.debug(f"Pattern '{label}' reached the {max_matches} match cap")
            break

        # Zero-width matches advance one code point to guarantee progress.
        pos = match.end() if match.end() > match.start() else match.start() + 1

    return matches
