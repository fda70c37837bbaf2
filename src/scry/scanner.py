"""Run enabled rules over files with per-file and per-rule failure isolation."""

import asyncio
import logging
import os
import time
from pathlib import Path
from typing import Iterable, NamedTuple

from .config import ScanConfig
from .discovery import discover_files
from .errors import FileReadError, RuleExecutionError, ScanOperationError, ScryError
from .models import Finding, RuleFailure, ScanResult, Severity, SkippedFile
from .rules import Rule

logger = logging.getLogger(__name__)


class RuleOutcome(NamedTuple):
    """Settled result of one rule against one file."""

    rule: Rule
    findings: list[Finding]
    error: RuleExecutionError | None = None


def read_source(path: str | Path) -> str:
    """Read a file as strict UTF-8.

    Raises:
        FileReadError: the file cannot be opened or is not valid UTF-8.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise FileReadError("File is not valid UTF-8", context={"path": str(path)}, cause=e) from e
    except OSError as e:
        raise FileReadError(f"Failed to read file: {e.strerror or e}", context={"path": str(path)}, cause=e) from e


def display_path(path: str | Path, base_path: str | Path | None = None) -> str:
    """Path relative to ``base_path`` with ``/`` separators; unchanged when outside it."""
    if base_path is None:
        return str(path)
    base = Path(base_path).resolve()
    if base.is_file():
        base = base.parent
    try:
        return Path(path).resolve().relative_to(base).as_posix()
    except ValueError:
        return str(path)


class Scanner:
    """Scan orchestrator.

    Files are processed one at a time; the enabled rules for a file run
    concurrently in worker threads and every outcome is collected, so a
    failing rule never affects its siblings. Findings are filtered by
    ``config.min_severity`` and returned in a deterministic order.
    """

    def __init__(self, rules: list[Rule], config: ScanConfig | None = None):
        self.config = config or ScanConfig()
        self.rules: dict[str, Rule] = {rule.id: rule for rule in rules}
        self.rule_order: dict[str, int] = {rule.id: index for index, rule in enumerate(rules)}

    def get_enabled_rules(self) -> list[Rule]:
        return [rule for rule in self.rules.values() if rule.enabled]

    def set_rule_enabled(self, rule_id: str, enabled: bool) -> None:
        rule = self.rules.get(rule_id)
        if rule is not None:
            rule.enabled = enabled

    def should_include(self, finding: Finding) -> bool:
        return Severity(finding.severity).meets(self.config.min_severity)

    async def run_rule(self, rule: Rule, content: str, file_path: str) -> list[Finding]:
        return await asyncio.to_thread(rule.check, content, file_path)

    async def check_file(self, content: str, file_path: str, rules: list[Rule]) -> list[RuleOutcome]:
        """Run ``rules`` concurrently against one file and collect every outcome."""
        results = await asyncio.gather(
            *[self.run_rule(rule, content, file_path) for rule in rules],
            return_exceptions=True,
        )

        outcomes = []
        for rule, result in zip(rules, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                error = RuleExecutionError(
                    f"Rule {rule.id} failed: {result}",
                    context={"rule": rule.id, "file": file_path},
                    cause=result,
                )
                logger.warning(f"Rule {rule.id} failed on {file_path}: {result}")
                outcomes.append(RuleOutcome(rule, [], error))
            else:
                outcomes.append(RuleOutcome(rule, result))
        return outcomes

    def sort_key(self, item: tuple[int, Finding]) -> tuple:
        emitted, finding = item
        return (
            finding.file,
            finding.line,
            finding.column or 0,
            self.rule_order.get(finding.rule, len(self.rule_order)),
            emitted,
        )

    async def scan(
        self,
        files: Iterable[str | Path],
        base_path: str | Path | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> ScanResult:
        """Scan ``files`` with every enabled rule.

        Args:
            files: Paths to read, in the order they should be dispatched.
            base_path: Findings and skip records use paths relative to it.
            cancel_event: When set, no further files are dispatched and the
                partial result is returned with ``cancelled=True``.

        Returns:
            ScanResult with severity-filtered findings sorted by file, line,
            column and rule declaration order.
        """
        started = time.monotonic()
        result = ScanResult()
        collected: list[tuple[int, Finding]] = []
        rules = self.get_enabled_rules()

        logger.info(f"Scanning with {len(rules)} rules: {', '.join(rule.id for rule in rules)}")

        for path in files:
            if cancel_event is not None and cancel_event.is_set():
                result.cancelled = True
                logger.info(f"Scan cancelled after {result.files_scanned + result.files_skipped} files")
                break

            file_path = display_path(path, base_path)
            try:
                content = await asyncio.to_thread(read_source, path)
            except FileReadError as e:
                logger.warning(f"Skipping {file_path}: {e.message}")
                result.files_skipped += 1
                result.skipped_files.append(SkippedFile(path=file_path, reason=e.message))
                continue

            result.files_scanned += 1

            for outcome in await self.check_file(content, file_path, rules):
                if outcome.error is not None:
                    result.rule_failures.append(
                        RuleFailure(file=file_path, rule=outcome.rule.id, reason=str(outcome.error.cause))
                    )
                    continue
                for finding in outcome.findings:
                    if self.should_include(finding):
                        collected.append((len(collected), finding))

        collected.sort(key=self.sort_key)
        result.findings = [finding for _, finding in collected]
        result.duration_ms = int((time.monotonic() - started) * 1000)

        logger.info(
            f"Scan complete: {len(result.findings)} findings in {result.files_scanned} files "
            f"({result.files_skipped} skipped, {len(result.rule_failures)} rule failures) "
            f"in {result.duration_ms}ms"
        )
        return result

    async def scan_path(self, path: str | Path, cancel_event: asyncio.Event | None = None) -> ScanResult:
        """Discover files under ``path`` and scan them.

        Raises:
            ScanOperationError: discovery failed; no file was scanned.
        """
        try:
            files = await asyncio.to_thread(
                discover_files, path, self.config.extensions, self.config.ignore
            )
        except ScanOperationError:
            raise
        except (ScryError, OSError) as e:
            raise ScanOperationError(
                f"File discovery failed: {e}", context={"path": str(path)}, cause=e
            ) from e

        base_path = path if os.path.isdir(path) else os.path.dirname(os.path.abspath(path))
        return await self.scan(files, base_path=base_path, cancel_event=cancel_event)
