#!/usr/bin/env python3
"""
Sandbox entrypoint for scry.
Reads scan parameters from stdin JSON, scans a local path, prints the rendered report to stdout.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

sys.path.insert(0, str(Path(__file__).parent / "src"))

from scry.config import ScanConfig, apply_rule_configs, load_config
from scry.errors import ConfigError, ScanOperationError, format_error, wrap_error
from scry.models import ScanResult
from scry.report import render
from scry.rules import get_all_rules
from scry.scanner import Scanner

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

OVERRIDE_KEYS = (
    "min_severity",
    "output",
    "strict",
    "ignore",
    "show_fixes",
    "show_explanations",
    "json",
    "rules",
)


def _fail(message: str, **extra: Any) -> None:
    print(json.dumps({"error": message, **extra}, default=str))
    sys.exit(1)


async def _run_scan(path: str, config_path: str | None, overrides: dict[str, Any]) -> tuple[ScanResult, ScanConfig]:
    config = load_config(config_path=config_path, overrides=overrides)
    rules = apply_rule_configs(get_all_rules(config.limits), config.rules)
    scanner = Scanner(rules, config)
    result = await scanner.scan_path(path)
    return result, config


def main() -> None:
    try:
        input_data = json.load(sys.stdin)
    except json.JSONDecodeError as e:
        _fail(f"Invalid JSON input: {e}")

    if not isinstance(input_data, dict):
        _fail("Input must be a JSON object")

    path = input_data.get("path") or input_data.get("directory")
    if not path:
        _fail(
            "Missing required input. Provide 'path' or 'directory' (local file or directory)",
            examples={"local": {"path": "."}},
        )

    overrides = {key: input_data[key] for key in OVERRIDE_KEYS if key in input_data}

    try:
        result, config = asyncio.run(_run_scan(path, input_data.get("config"), overrides))
    except (ConfigError, ScanOperationError) as e:
        logger.error(format_error(e))
        _fail(e.message, code=e.code, context=e.context)
    except Exception as e:
        logger.error(format_error(wrap_error(e, "Scan failed", {"path": path}), verbose=True))
        _fail(str(e))

    print(
        render(
            result,
            output=config.output,
            show_explanations=config.show_explanations,
            show_fixes=config.show_fixes,
        )
    )

    if config.strict and result.findings:
        sys.exit(1)


if __name__ == "__main__":
    main()
