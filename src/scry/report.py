"""Render scan results as table, JSON, markdown or compact text."""

import json
from datetime import datetime, timezone

from .models import Finding, FindingStats, OutputFormat, ScanResult

MAX_LISTED_SKIPS = 10

_SEVERITY_LABELS = {"high": "HIGH", "medium": "MEDIUM", "low": "LOW"}


def summarize(findings: list[Finding]) -> FindingStats:
    """Count findings per rule and per severity."""
    stats = FindingStats(total=len(findings))
    for finding in findings:
        stats.by_rule[finding.rule] = stats.by_rule.get(finding.rule, 0) + 1
        stats.by_severity[finding.severity.value] = stats.by_severity.get(finding.severity.value, 0) + 1
    return stats


def _location(finding: Finding) -> str:
    if finding.column:
        return f"{finding.file}:{finding.line}:{finding.column}"
    return f"{finding.file}:{finding.line}"


def _skip_lines(result: ScanResult) -> list[str]:
    if not result.skipped_files:
        return []
    if len(result.skipped_files) > MAX_LISTED_SKIPS:
        return [f"Skipped {len(result.skipped_files)} files (unreadable or not UTF-8)"]
    return [f"Skipped {skipped.path}: {skipped.reason}" for skipped in result.skipped_files]


def _failure_lines(result: ScanResult) -> list[str]:
    return [f"Rule {failure.rule} failed on {failure.file}: {failure.reason}" for failure in result.rule_failures]


def format_json(result: ScanResult) -> str:
    data = result.model_dump(mode="json")
    data["summary"] = summarize(result.findings).model_dump()
    data["timestamp"] = datetime.now(timezone.utc).isoformat()
    return json.dumps(data, indent=2)


def format_table(result: ScanResult, show_summary: bool = True) -> str:
    findings = result.findings
    lines: list[str] = []

    if not findings:
        lines.append("No security issues found!")
    else:
        rows = [("SEVERITY", "RULE", "LOCATION", "MESSAGE")]
        rows += [
            (_SEVERITY_LABELS[f.severity.value], f.rule, _location(f), f.message)
            for f in findings
        ]
        widths = [max(len(row[i]) for row in rows) for i in range(3)]
        for row in rows:
            cells = [row[i].ljust(widths[i]) for i in range(3)]
            lines.append("  ".join(cells + [row[3]]).rstrip())

    if show_summary:
        lines.extend(_summary_lines(result))
    return "\n".join(lines)


def _summary_lines(result: ScanResult) -> list[str]:
    stats = summarize(result.findings)
    lines = [
        "",
        "Summary:",
        f"Files scanned: {result.files_scanned}",
        f"Files skipped: {result.files_skipped}",
        f"Duration: {result.duration_ms}ms",
        "",
        "Results:",
        f"High: {stats.by_severity['high']}",
        f"Medium: {stats.by_severity['medium']}",
        f"Low: {stats.by_severity['low']}",
        f"Total: {stats.total}",
    ]
    if result.cancelled:
        lines.append("Scan was cancelled before all files were processed")
    extra = _skip_lines(result) + _failure_lines(result)
    if extra:
        lines.append("")
        lines.extend(extra)
    return lines


def format_compact(result: ScanResult) -> str:
    findings = result.findings
    if not findings:
        return f"No issues found ({result.files_scanned} files, {result.duration_ms}ms)"

    lines: list[str] = []
    by_file: dict[str, list[Finding]] = {}
    for finding in findings:
        by_file.setdefault(finding.file, []).append(finding)

    for file, file_findings in by_file.items():
        lines.append(file)
        for f in file_findings:
            lines.append(f"  {_SEVERITY_LABELS[f.severity.value]} L{f.line} {f.rule} {f.message}")
        lines.append("")

    stats = summarize(findings)
    lines.append("-" * 60)
    lines.append(
        f"{stats.by_severity['high']} high {stats.by_severity['medium']} medium "
        f"{stats.by_severity['low']} low | {result.files_scanned} files | {result.duration_ms}ms"
    )
    lines.extend(_skip_lines(result))
    return "\n".join(lines)


def format_markdown(result: ScanResult) -> str:
    stats = summarize(result.findings)
    lines = [
        "# Security Scan Report",
        "",
        f"Scanned **{result.files_scanned}** files in {result.duration_ms}ms "
        f"({result.files_skipped} skipped).",
        "",
        "| Severity | Count |",
        "|---|---|",
        f"| High | {stats.by_severity['high']} |",
        f"| Medium | {stats.by_severity['medium']} |",
        f"| Low | {stats.by_severity['low']} |",
        f"| **Total** | **{stats.total}** |",
        "",
    ]

    skips = _skip_lines(result) + _failure_lines(result)
    if skips:
        lines.append("## Skipped")
        lines.append("")
        lines.extend(f"- {line}" for line in skips)
        lines.append("")

    if not result.findings:
        lines.append("No security issues found.")
        return "\n".join(lines)

    lines.append("## Findings")
    lines.append("")
    for index, f in enumerate(result.findings, start=1):
        lines.append(f"### {index}. [{_SEVERITY_LABELS[f.severity.value]}] {f.message}")
        lines.append("")
        lines.append(f"- **Rule:** `{f.rule}`")
        lines.append(f"- **Location:** `{_location(f)}`")
        if f.snippet:
            lines.append("")
            lines.append("```")
            lines.append(f.snippet)
            lines.append("```")
        if f.explanation:
            lines.append("")
            lines.append("**Why this matters**")
            lines.append("")
            lines.append(f.explanation)
        if f.fix:
            lines.append("")
            lines.append("**Suggested fix**")
            lines.append("")
            lines.append("```")
            lines.append(f.fix)
            lines.append("```")
        lines.append("")
    return "\n".join(lines)


def format_details(findings: list[Finding], show_explanations: bool, show_fixes: bool) -> str:
    """Per-finding explanation/fix blocks appended to the text formats."""
    rule = "=" * 45
    lines = ["", rule, "DETAILED FINDINGS", rule, ""]
    for f in findings:
        lines.append(f"[{_SEVERITY_LABELS[f.severity.value]}] {f.rule}")
        lines.append(f"File: {f.file}:{f.line}")
        lines.append(f"Message: {f.message}")
        if f.snippet:
            lines.append(f"Code: {f.snippet}")
        if show_explanations and f.explanation:
            lines.append("")
            lines.append("Why this matters:")
            lines.append(f.explanation)
        if show_fixes and f.fix:
            lines.append("")
            lines.append("Suggested fix:")
            lines.append(f.fix)
        lines.append("")
    return "\n".join(lines)


def render(
    result: ScanResult,
    output: OutputFormat = "table",
    show_summary: bool = True,
    show_explanations: bool = False,
    show_fixes: bool = False,
) -> str:
    """Render ``result`` in the requested format.

    Markdown and JSON always carry explanations and fixes; the table and
    compact formats append a details section when either flag is set.
    """
    if output == "json":
        return format_json(result)
    if output == "markdown":
        return format_markdown(result)

    if output == "compact":
        text = format_compact(result)
    else:
        text = format_table(result, show_summary=show_summary)

    if (show_explanations or show_fixes) and result.findings:
        text += "\n" + format_details(result.findings, show_explanations, show_fixes)
    return text
