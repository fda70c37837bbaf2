"""Turn accepted matches into Findings."""

from string import Template
from typing import Optional

from .matcher import RawMatch
from .models import Finding, Severity


def line_number(content: str, index: int) -> int:
    """1-based line number of ``index`` in ``content``."""
    return content.count("\n", 0, index) + 1


def line_bounds(content: str, index: int) -> tuple[int, int]:
    """Start and end offsets of the line containing ``index``."""
    start = content.rfind("\n", 0, index) + 1
    end = content.find("\n", index)
    if end == -1:
        end = len(content)
    return start, end


def line_content(content: str, line: int) -> str:
    """Return line ``line`` (1-based) of ``content``, or "" if out of range."""
    lines = content.split("\n")
    if 1 <= line <= len(lines):
        return lines[line - 1]
    return ""


def render_template(text: str, variables: dict[str, str]) -> str:
    """Substitute ``$name`` placeholders, leaving unknown ``$`` sequences intact."""
    if "$" not in text:
        return text
    return Template(text).safe_substitute(variables)


def match_variables(match: RawMatch) -> dict[str, str]:
    """Template variables for a match: named groups plus ``match``."""
    variables = {key: value or "" for key, value in match.named.items()}
    variables["match"] = match.text
    return variables


def build_finding(
    rule_id: str,
    severity: Severity,
    content: str,
    file_path: str,
    match: RawMatch,
    message: str,
    explanation: str = "",
    fix: str = "",
    tags: Optional[list[str]] = None,
    variables: Optional[dict[str, str]] = None,
) -> Finding:
    """Build a Finding for ``match``.

    ``content`` must be the exact text the match was found in so the line
    number and snippet refer to the same buffer. Templates in ``message``,
    ``explanation`` and ``fix`` are filled from the match's named groups,
    then from ``variables``.
    """
    start, end = line_bounds(content, match.start)
    values = match_variables(match)
    if variables:
        values.update(variables)

    return Finding(
        rule=rule_id,
        severity=severity,
        file=file_path,
        line=line_number(content, match.start),
        column=match.start - start + 1,
        message=render_template(message, values),
        snippet=content[start:end].strip(),
        explanation=render_template(explanation, values),
        fix=render_template(fix, values),
        tags=list(tags) if tags else None,
    )
