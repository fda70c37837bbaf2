"""Base rule and pattern descriptor shared by all detectors."""

import re
from typing import NamedTuple, Optional

from ..builder import build_finding
from ..classifier import is_in_comment
from ..matcher import DEFAULT_LIMITS, ExecutionLimits, RawMatch, execute, truncate_content
from ..models import Finding, Severity
from ..suppression import Suppressor


class PatternSpec(NamedTuple):
    """One detection pattern with its severity, texts and suppression mode.

    ``message``, ``explanation`` and ``fix`` are ``string.Template`` texts
    filled from the match's named groups and ``$match``.
    """

    name: str
    pattern: re.Pattern
    message: str
    explanation: str = ""
    fix: str = ""
    severity: Optional[Severity] = None
    suppressor: Optional[Suppressor] = None


JS_FILES = re.compile(r"\.(?:js|ts|jsx|tsx)$")
JS_MODULE_FILES = re.compile(r"\.(?:js|ts|jsx|tsx|mjs|cjs)$")


class Rule:
    """A named, severity-tagged bundle of patterns for one vulnerability class.

    Subclasses declare ``id``, ``name``, ``description``, ``severity``,
    ``tags``, ``file_pattern`` and ``patterns``. ``check`` holds no state
    between calls; ``enabled`` and ``severity_override`` are only changed by
    configuration before a scan starts.
    """

    id: str = ""
    name: str = ""
    description: str = ""
    severity: Severity = Severity.high
    tags: list[str] = []
    file_pattern: Optional[re.Pattern] = None
    patterns: list[PatternSpec] = []

    def __init__(self, limits: Optional[ExecutionLimits] = None):
        self.enabled = True
        self.severity_override: Optional[Severity] = None
        self.limits = limits or DEFAULT_LIMITS

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r} enabled={self.enabled}>"

    def applies_to(self, file_path: str) -> bool:
        return self.file_pattern is None or bool(self.file_pattern.search(file_path))

    def severity_for(self, spec: Optional[PatternSpec] = None) -> Severity:
        """Severity of a finding: config override, then pattern, then rule."""
        if self.severity_override is not None:
            return self.severity_override
        if spec is not None and spec.severity is not None:
            return spec.severity
        return self.severity

    def prepare(self, content: str) -> str:
        """Truncate content once; matching and line numbers use the result."""
        return truncate_content(content, self.limits.max_content_length)

    def find(self, spec: PatternSpec, content: str) -> list[RawMatch]:
        """Run one pattern under this rule's limits, dropping commented-out matches."""
        matches = execute(
            spec.pattern,
            content,
            timeout_ms=self.limits.timeout_ms,
            max_matches=self.limits.max_matches,
            max_content_length=self.limits.max_content_length,
            name=spec.name,
        )
        return [match for match in matches if not is_in_comment(content, match.start)]

    def accepts(self, spec: PatternSpec, content: str, match: RawMatch, file_path: str) -> bool:
        return spec.suppressor is None or not spec.suppressor.suppresses(content, match, file_path)

    def build(
        self,
        spec: PatternSpec,
        content: str,
        file_path: str,
        match: RawMatch,
        severity: Optional[Severity] = None,
        variables: Optional[dict[str, str]] = None,
    ) -> Finding:
        """Build a Finding; a configured severity override beats ``severity``."""
        if severity is None or self.severity_override is not None:
            severity = self.severity_for(spec)
        return build_finding(
            self.id,
            severity,
            content,
            file_path,
            match,
            message=spec.message,
            explanation=spec.explanation,
            fix=spec.fix,
            tags=self.tags,
            variables=variables,
        )

    def check(self, content: str, file_path: str) -> list[Finding]:
        """Run every pattern against ``content`` and return accepted findings."""
        if not self.applies_to(file_path):
            return []

        content = self.prepare(content)
        findings: list[Finding] = []

        for spec in self.patterns:
            for match in self.find(spec, content):
                if self.accepts(spec, content, match, file_path):
                    findings.append(self.build(spec, content, file_path, match))

        return findings
