"""Contextual false-positive suppression applied to raw matches.

Every suppressor is a pure function of (content, match, file path) and its
own frozen configuration.
"""

import re
from dataclasses import dataclass
from typing import Protocol, Union

from .matcher import RawMatch


class Suppressor(Protocol):
    def suppresses(self, content: str, match: RawMatch, file_path: str) -> bool:
        ...


def context_window(content: str, match: RawMatch, before: int, after: int) -> str:
    """Text from ``before`` characters ahead of the match start to ``after`` past it."""
    start = max(0, match.start - before)
    end = min(len(content), match.start + after)
    return content[start:end]


@dataclass(frozen=True)
class ContextWindow:
    """Suppress unless one of ``keywords`` appears near the match (case-insensitive).

    For patterns whose shape alone is not security relevant, e.g. a random
    number call that only matters next to "token" or "session".
    """

    keywords: tuple[str, ...]
    window: int = 100

    def suppresses(self, content: str, match: RawMatch, file_path: str) -> bool:
        text = context_window(content, match, self.window, self.window).lower()
        return not any(keyword.lower() in text for keyword in self.keywords)


@dataclass(frozen=True)
class SafeContext:
    """Suppress when one of ``keywords`` appears near the match.

    The inverse of ContextWindow: the keywords indicate the code already
    handles the value safely (hashing, constant-time compare, dotenv).
    """

    keywords: tuple[str, ...]
    window: int = 200
    case_sensitive: bool = False

    def suppresses(self, content: str, match: RawMatch, file_path: str) -> bool:
        text = context_window(content, match, self.window, self.window)
        if self.case_sensitive:
            return any(keyword in text for keyword in self.keywords)
        text = text.lower()
        return any(keyword.lower() in text for keyword in self.keywords)


@dataclass(frozen=True)
class NumericThreshold:
    """Suppress when a captured integer is at or above ``safe_minimum``."""

    group: Union[int, str]
    safe_minimum: int

    def suppresses(self, content: str, match: RawMatch, file_path: str) -> bool:
        value = match.group(self.group)
        if value is None:
            return False
        try:
            return int(value) >= self.safe_minimum
        except ValueError:
            return False


_REPEATED_CHAR_RE = re.compile(r"^(.)\1+$", re.DOTALL)

# Vocabulary around a hex string that marks it as an identifier, not a secret
_NON_SECRET_CONTEXT_RES = [
    # Git / VCS
    re.compile(r"\b(?:commit|sha|revision|ref)\b", re.IGNORECASE),
    re.compile(r"git\s+(?:commit|sha|log|rev-parse)", re.IGNORECASE),
    re.compile(r"github\.com/[^/]+/[^/]+/(?:commit|tree)/", re.IGNORECASE),
    re.compile(r"gitlab|bitbucket.*commit", re.IGNORECASE),
    re.compile(r"submodule|checkout|branch|tag", re.IGNORECASE),
    # File / content hashes
    re.compile(r"\b(?:checksum|hash|digest|fingerprint|etag)\b", re.IGNORECASE),
    re.compile(r"\b(?:md5|sha1|sha256|sha512)\b", re.IGNORECASE),
    re.compile(r"(?:file|build|content|data).{0,10}(?:hash|checksum)", re.IGNORECASE),
    # Database / record ids
    re.compile(r"\b(?:_id|objectid|recordid|uuid|guid)\b", re.IGNORECASE),
    re.compile(r"\b(?:database|mongo|dynamodb).{0,20}id", re.IGNORECASE),
    # Build artifacts and versions
    re.compile(r"\b(?:version|build|artifact|bundle|dist)\b.{0,10}:", re.IGNORECASE),
    re.compile(r"\.(?:js|css|html|map)['\"]?\s*:\s*['\"]?[a-f0-9]{40}", re.IGNORECASE),
]

_IDENTIFIER_NAME_RE = re.compile(
    r"\b(?:checksum|filehash|contenthash|objectid|recordid)\b", re.IGNORECASE
)


@dataclass(frozen=True)
class DummyDataCheck:
    """Suppress repeated-character runs and values labelled as non-secret ids."""

    before: int = 80
    after: int = 120
    immediate: int = 40

    def suppresses(self, content: str, match: RawMatch, file_path: str) -> bool:
        if _REPEATED_CHAR_RE.match(match.text):
            return True

        preceding = content[max(0, match.start - self.before):match.start]
        following = content[match.start:min(len(content), match.start + self.after)]
        context = preceding + following
        if any(pattern.search(context) for pattern in _NON_SECRET_CONTEXT_RES):
            return True

        return bool(_IDENTIFIER_NAME_RE.search(preceding[-self.immediate:]))


_TEST_FILE_RE = re.compile(r"\.(?:test|spec|mock)\.(?:js|ts|jsx|tsx)$")


@dataclass(frozen=True)
class LowRisk:
    """Suppress low-risk patterns inside test, spec and mock files."""

    def suppresses(self, content: str, match: RawMatch, file_path: str) -> bool:
        return bool(_TEST_FILE_RE.search(file_path))
