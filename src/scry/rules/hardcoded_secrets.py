"""Hardcoded API keys, tokens, private keys and passwords."""

import re

from ..models import Severity
from ..suppression import DummyDataCheck
from .base import PatternSpec, Rule

_EXPLANATION = (
    "Hardcoded secrets can be leaked via source control, logs, or decompiled code. "
    "These credentials can grant unauthorized access to your systems and data, and "
    "they stay in version control history even after the line is removed."
)

_FIX = """Move secrets to environment variables:
1. Add to .env file (ensure .env is in .gitignore)
2. Access via process.env.SECRET_NAME
3. Use a secrets manager in production (AWS Secrets Manager, Azure Key Vault, HashiCorp Vault)

// [BAD] Before
const API_KEY = "sk_live_1234567890abcdef";

// [GOOD] After
const API_KEY = process.env.API_KEY;

Rotate any credential that has already been committed."""


def _secret(name: str, pattern: re.Pattern, **kwargs) -> PatternSpec:
    return PatternSpec(
        name=name,
        pattern=pattern,
        message=f"Hardcoded {name} detected",
        explanation=_EXPLANATION,
        fix=_FIX,
        **kwargs,
    )


class HardcodedSecretsRule(Rule):
    id = "hardcoded-secrets"
    name = "Hardcoded Secrets"
    description = "Detects hardcoded secrets, API keys, and credentials"
    severity = Severity.high
    tags = ["security", "secrets"]

    patterns = [
        _secret("AWS Access Key", re.compile(r"AKIA[0-9A-Z]{16}")),
        _secret(
            "Generic API Key",
            re.compile(r"""['"](?:api[_-]?key|apikey)['"]\s*[:=]\s*['"](?P<value>[^'"]{20,})['"]""", re.IGNORECASE),
        ),
        # ghp_ prefix + 36-255 alphanumerics
        _secret("GitHub Token", re.compile(r"ghp_[a-zA-Z0-9]{36,255}")),
        # Bare 40-char hex collides with commit SHAs and checksums
        _secret(
            "GitHub Token (Legacy)",
            re.compile(r"\b[a-f0-9]{40}\b"),
            suppressor=DummyDataCheck(),
        ),
        _secret("Private Key", re.compile(r"-----BEGIN\s+(?:RSA\s+)?PRIVATE\s+KEY-----")),
        _secret(
            "Generic Password",
            re.compile(r"""(?:password|passwd|pwd)\s*[:=]\s*['"](?P<value>[^'"]{8,})['"]""", re.IGNORECASE),
            severity=Severity.medium,
        ),
    ]
