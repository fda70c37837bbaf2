"""Tests for contextual false-positive suppression."""

import re

from scry.matcher import RawMatch, execute
from scry.suppression import (
    ContextWindow,
    DummyDataCheck,
    LowRisk,
    NumericThreshold,
    SafeContext,
    context_window,
)

HEX40 = "9f86d081884c7d659a2feaa0c55ad015a3bf4f1b"


def _first(pattern: str, content: str) -> RawMatch:
    matches = execute(re.compile(pattern), content)
    assert matches, pattern
    return matches[0]


class TestContextWindow:
    """Test keyword-window suppression (suppress unless a keyword is near)."""

    def test_keyword_nearby_keeps_match(self):
        """Test that a nearby keyword keeps the match."""
        content = "const sessionToken = Math.random().toString(36);"
        match = _first(r"Math\.random\(\)", content)
        assert not ContextWindow(("token", "session")).suppresses(content, match, "app.js")

    def test_no_keyword_suppresses(self):
        """Test that a match with no keyword nearby is suppressed."""
        content = "const x = Math.random() * 100;"
        match = _first(r"Math\.random\(\)", content)
        assert ContextWindow(("token", "session")).suppresses(content, match, "app.js")

    def test_keyword_outside_window(self):
        """Test that keywords beyond the window are not considered."""
        content = "const token = 1;" + " " * 300 + "const x = Math.random();"
        match = _first(r"Math\.random\(\)", content)
        assert ContextWindow(("token",), window=100).suppresses(content, match, "app.js")

    def test_case_insensitive(self):
        """Test that keyword matching ignores case."""
        content = "const API_TOKEN = Math.random();"
        match = _first(r"Math\.random\(\)", content)
        assert not ContextWindow(("token",)).suppresses(content, match, "app.js")


class TestSafeContext:
    """Test inverse keyword-window suppression (suppress when a keyword is near)."""

    def test_hashing_nearby_suppresses(self):
        """Test that hashing near a password assignment suppresses it."""
        content = "const hash = await bcrypt.hash(pw, 12);\nuser.password = hash;"
        match = _first(r"\.password\s*=", content)
        assert SafeContext(("bcrypt", "hash")).suppresses(content, match, "app.js")

    def test_no_keyword_keeps_match(self):
        """Test that a match without safe keywords is kept."""
        content = "user.password = req.body.password;"
        match = _first(r"\.password\s*=", content)
        assert not SafeContext(("bcrypt", "hash")).suppresses(content, match, "app.js")

    def test_case_sensitive(self):
        """Test case-sensitive keyword matching."""
        content = "if (password === HASHED) {}"
        match = _first(r"password\s*===", content)
        assert not SafeContext(("hash", "Hash"), case_sensitive=True).suppresses(content, match, "app.js")
        assert SafeContext(("hash",), case_sensitive=False).suppresses(content, match, "app.js")


class TestNumericThreshold:
    """Test numeric-threshold suppression."""

    def _match(self, rounds: str) -> RawMatch:
        return _first(r"hash\(pw, (?P<rounds>\w+)\)", f"bcrypt.hash(pw, {rounds})")

    def test_equal_to_minimum_is_suppressed(self):
        """Test that a value exactly at the safe minimum is suppressed."""
        assert NumericThreshold("rounds", 10).suppresses("", self._match("10"), "app.js")

    def test_one_below_minimum_is_flagged(self):
        """Test that one unit below the minimum is not suppressed."""
        assert not NumericThreshold("rounds", 10).suppresses("", self._match("9"), "app.js")

    def test_above_minimum_is_suppressed(self):
        """Test that a strong value is suppressed."""
        assert NumericThreshold("rounds", 10).suppresses("", self._match("12"), "app.js")

    def test_positional_group(self):
        """Test threshold lookup by 1-based group index."""
        assert not NumericThreshold(1, 10).suppresses("", self._match("8"), "app.js")

    def test_non_numeric_is_flagged(self):
        """Test that an unparsable capture is not suppressed."""
        assert not NumericThreshold("rounds", 10).suppresses("", self._match("ROUNDS"), "app.js")

    def test_missing_group_is_flagged(self):
        """Test that a missing capture group is not suppressed."""
        match = RawMatch("p", 0, 1, "a", (None,), {"rounds": None})
        assert not NumericThreshold("rounds", 10).suppresses("", match, "app.js")


class TestDummyDataCheck:
    """Test dummy-data / non-secret identifier suppression."""

    def test_repeated_character_run(self):
        """Test that a single repeated character is suppressed."""
        content = f"const value = '{'a' * 40}';"
        match = _first(r"\b[a-f0-9]{40}\b", content)
        assert DummyDataCheck().suppresses(content, match, "app.js")

    def test_commit_vocabulary(self):
        """Test that a hex string labelled as a commit is suppressed."""
        content = f"const commit = '{HEX40}';"
        match = _first(r"\b[a-f0-9]{40}\b", content)
        assert DummyDataCheck().suppresses(content, match, "app.js")

    def test_checksum_identifier(self):
        """Test that a checksum identifier right before the value is suppressed."""
        content = f"const fileChecksum = '{HEX40}';"
        match = _first(r"\b[a-f0-9]{40}\b", content)
        assert DummyDataCheck().suppresses(content, match, "app.js")

    def test_build_artifact_map(self):
        """Test that asset-name-to-hex maps are suppressed."""
        content = f'const assets = {{ "main.js": "{HEX40}" }};'
        match = _first(r"\b[a-f0-9]{40}\b", content)
        assert DummyDataCheck().suppresses(content, match, "app.js")

    def test_unlabelled_hex_is_kept(self):
        """Test that an unlabelled hex token is not suppressed."""
        content = f"const auth = '{HEX40}';"
        match = _first(r"\b[a-f0-9]{40}\b", content)
        assert not DummyDataCheck().suppresses(content, match, "app.js")


class TestLowRisk:
    """Test test-file suppression."""

    def test_test_files_suppressed(self):
        """Test that test, spec and mock files are suppressed."""
        match = RawMatch("p", 0, 1, "a", (), {})
        for path in ("src/login.test.js", "src/login.spec.ts", "src/api.mock.tsx"):
            assert LowRisk().suppresses("", match, path)

    def test_source_files_kept(self):
        """Test that regular source files are not suppressed."""
        match = RawMatch("p", 0, 1, "a", (), {})
        assert not LowRisk().suppresses("", match, "src/login.js")


class TestPurity:
    """Test that suppressors are deterministic."""

    def test_repeated_calls_agree(self):
        """Test that the same inputs always give the same decision."""
        content = "const token = Math.random();"
        match = _first(r"Math\.random\(\)", content)
        suppressor = ContextWindow(("token",))
        results = {suppressor.suppresses(content, match, "a.js") for _ in range(5)}
        assert results == {False}

    def test_context_window_bounds(self):
        """Test the extracted window around a match."""
        content = "0123456789MATCH0123456789"
        match = _first(r"MATCH", content)
        assert context_window(content, match, 3, 8) == "789MATCH012"
