"""Scan configuration: defaults, ``.scryrc.json`` files and per-run overrides."""

import json
import logging
import re
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from .discovery import DEFAULT_EXTENSIONS, DEFAULT_IGNORE
from .errors import ConfigError
from .matcher import DEFAULT_MAX_CONTENT_LENGTH, DEFAULT_MAX_MATCHES, DEFAULT_TIMEOUT_MS, ExecutionLimits
from .models import OutputFormat, Severity
from .rules import Rule

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES = (".scryrc.json", ".scryrc")

_CAMEL_BOUNDARY_RE = re.compile(r"(?<!^)(?=[A-Z])")

RULE_SHORTHANDS = {
    "off": {"enabled": False},
    "warn": {"enabled": True, "severity": "medium"},
    "error": {"enabled": True, "severity": "high"},
}


class RuleConfig(BaseModel):
    """Per-rule settings."""

    enabled: bool = Field(default=True, description="Whether the rule runs")
    severity: Optional[Severity] = Field(default=None, description="Severity override for every finding")


class ScanConfig(BaseModel):
    """Effective configuration for one scan."""

    rules: dict[str, RuleConfig] = Field(default_factory=dict, description="Rule id -> settings")
    ignore: list[str] = Field(default_factory=lambda: list(DEFAULT_IGNORE), description="Glob patterns to skip")
    extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXTENSIONS), description="File extensions to scan"
    )
    output: OutputFormat = Field(default="table", description="Report format")
    strict: bool = Field(default=False, description="Exit non-zero when findings are reported")
    min_severity: Severity = Field(default=Severity.low, description="Minimum severity to report")
    show_fixes: bool = Field(default=False, description="Append fix guidance to the report")
    show_explanations: bool = Field(default=False, description="Append explanations to the report")
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0, description="Per-pattern time budget")
    max_matches: int = Field(default=DEFAULT_MAX_MATCHES, gt=0, description="Per-pattern match cap")
    max_content_length: int = Field(
        default=DEFAULT_MAX_CONTENT_LENGTH, gt=0, description="Characters scanned per file"
    )

    @field_validator("rules", mode="before")
    @classmethod
    def expand_shorthands(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        expanded = {}
        for rule_id, rule_config in value.items():
            if isinstance(rule_config, str):
                if rule_config not in RULE_SHORTHANDS:
                    raise ValueError(
                        f'Invalid rule shorthand "{rule_config}" for {rule_id}. Must be "off", "warn", or "error"'
                    )
                rule_config = RULE_SHORTHANDS[rule_config]
            expanded[rule_id] = rule_config
        return expanded

    @property
    def limits(self) -> ExecutionLimits:
        return ExecutionLimits(self.timeout_ms, self.max_matches, self.max_content_length)


def discover_config_file(cwd: Union[str, Path, None] = None) -> Path | None:
    """Return the first of ``.scryrc.json`` / ``.scryrc`` in ``cwd``."""
    base = Path(cwd) if cwd is not None else Path.cwd()
    for name in CONFIG_FILE_NAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def snake_case(key: str) -> str:
    """``minSeverity`` -> ``min_severity``; snake_case keys pass through."""
    return _CAMEL_BOUNDARY_RE.sub("_", key).lower()


def read_config_file(path: Path) -> dict[str, Any]:
    """Parse a config file into a plain dict with snake_case keys; values are validated later."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(
            "Invalid JSON in config file", context={"config_path": str(path), "parse_error": str(e)}, cause=e
        ) from e
    except OSError as e:
        raise ConfigError("Failed to load config file", context={"config_path": str(path)}, cause=e) from e

    if not isinstance(raw, dict):
        raise ConfigError("Config file must contain a JSON object", context={"config_path": str(path)})
    return {snake_case(key): value for key, value in raw.items()}


def _rule_fields(rule_config: Any) -> Any:
    if isinstance(rule_config, str):
        return RULE_SHORTHANDS.get(rule_config, rule_config)
    return rule_config


def merge_rules(base: dict[str, Any], layer: dict[str, Any]) -> dict[str, Any]:
    """Merge per-rule settings field by field; a later layer only replaces the fields it sets."""
    merged = dict(base)
    for rule_id, rule_config in layer.items():
        earlier = _rule_fields(merged.get(rule_id, {}))
        later = _rule_fields(rule_config)
        if isinstance(earlier, dict) and isinstance(later, dict):
            later = {**earlier, **{k: v for k, v in later.items() if v is not None}}
        merged[rule_id] = later
    return merged


def merge_config(base: dict[str, Any], file_values: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Merge with priority overrides > file > base.

    ``rules`` merge per rule and per field, override ``ignore`` patterns are
    appended and ``json: true`` is an alias for ``output: "json"``.
    """
    merged = dict(base)

    for layer in (file_values, overrides):
        for key, value in layer.items():
            if value is None or key == "json":
                continue
            if key == "rules" and isinstance(value, dict):
                merged["rules"] = merge_rules(merged.get("rules", {}), value)
            elif key == "ignore" and layer is overrides:
                merged["ignore"] = [*merged.get("ignore", []), *value]
            else:
                merged[key] = value

    if overrides.get("json"):
        merged["output"] = "json"
    return merged


def load_config(
    config_path: Union[str, Path, None] = None,
    cwd: Union[str, Path, None] = None,
    overrides: dict[str, Any] | None = None,
) -> ScanConfig:
    """Build the effective ScanConfig.

    Args:
        config_path: Explicit config file; must exist.
        cwd: Directory searched for ``.scryrc.json`` / ``.scryrc`` when no
            explicit path is given. Defaults to the process working directory.
        overrides: Per-run settings (CLI / request values), highest priority.

    Raises:
        ConfigError: missing explicit file, invalid JSON or invalid values.
    """
    if config_path is not None:
        path = Path(config_path).resolve()
        if not path.is_file():
            raise ConfigError("Config file not found", context={"config_path": str(path)})
    else:
        path = discover_config_file(cwd)

    file_values = read_config_file(path) if path is not None else {}
    if path is not None:
        logger.info(f"Loaded config from {path}")

    defaults = ScanConfig().model_dump()
    merged = merge_config(defaults, file_values, overrides or {})

    try:
        return ScanConfig.model_validate(merged)
    except ValidationError as e:
        context: dict[str, Any] = {"errors": [err["msg"] for err in e.errors()]}
        if path is not None:
            context["config_path"] = str(path)
        raise ConfigError("Invalid configuration", context=context, cause=e) from e


def apply_rule_configs(rules: list[Rule], rule_configs: dict[str, RuleConfig]) -> list[Rule]:
    """Apply enabled flags and severity overrides to ``rules`` in place.

    Raises:
        ConfigError: a configured rule id does not exist.
    """
    valid_ids = {rule.id for rule in rules}
    invalid_ids = [rule_id for rule_id in rule_configs if rule_id not in valid_ids]
    if invalid_ids:
        plural = "s" if len(invalid_ids) > 1 else ""
        raise ConfigError(
            f"Unknown rule ID{plural}: {', '.join(repr(rule_id) for rule_id in invalid_ids)}",
            context={"invalid_rule_ids": invalid_ids, "valid_rule_ids": sorted(valid_ids)},
        )

    for rule in rules:
        rule_config = rule_configs.get(rule.id)
        if rule_config is None:
            continue
        rule.enabled = rule_config.enabled
        if rule_config.severity is not None:
            rule.severity_override = rule_config.severity
    return rules
