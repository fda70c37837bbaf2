"""Cookies set without HttpOnly / Secure flags."""

import re
from typing import Callable, NamedTuple

from ..matcher import RawMatch
from ..models import Finding, Severity
from .base import JS_FILES, PatternSpec, Rule


class CookieFlags(NamedTuple):
    name: str
    http_only: bool
    secure: bool
    same_site: bool
    client_side: bool = False

    @property
    def missing(self) -> list[str]:
        missing = []
        if not self.http_only and not self.client_side:
            missing.append("HttpOnly")
        if not self.secure:
            missing.append("Secure")
        return missing

    @property
    def severity(self) -> Severity:
        return Severity.medium if self.http_only else Severity.high


_HTTP_ONLY_OPTION = re.compile(r"httpOnly\s*:\s*true", re.IGNORECASE)
_SECURE_OPTION = re.compile(r"secure\s*:\s*true", re.IGNORECASE)
_SAME_SITE_OPTION = re.compile(r"""sameSite\s*:\s*['"`]?(?:strict|lax)['"`]?""", re.IGNORECASE)

_HTTP_ONLY_ATTR = re.compile(r";\s*HttpOnly", re.IGNORECASE)
_SECURE_ATTR = re.compile(r";\s*Secure", re.IGNORECASE)
_SAME_SITE_ATTR = re.compile(r";\s*SameSite=(?:Strict|Lax|None)", re.IGNORECASE)


def _options_flags(match: RawMatch) -> CookieFlags:
    """Flags from an options object literal (Express / Koa)."""
    options = match.group("options") or ""
    return CookieFlags(
        name=match.group("name") or "unknown",
        http_only=bool(_HTTP_ONLY_OPTION.search(options)),
        secure=bool(_SECURE_OPTION.search(options)),
        same_site=bool(_SAME_SITE_OPTION.search(options)),
    )


def _header_flags(match: RawMatch, client_side: bool = False) -> CookieFlags:
    """Flags from a raw ``name=value; Attr; ...`` cookie string."""
    cookie = match.group("cookie") or ""
    return CookieFlags(
        name=cookie.split("=")[0] or "unknown",
        http_only=False if client_side else bool(_HTTP_ONLY_ATTR.search(cookie)),
        secure=bool(_SECURE_ATTR.search(cookie)),
        same_site=bool(_SAME_SITE_ATTR.search(cookie)),
        client_side=client_side,
    )


def _client_flags(match: RawMatch) -> CookieFlags:
    return _header_flags(match, client_side=True)


_MISSING_EXPLANATIONS = {
    "HttpOnly": (
        "HttpOnly: without this flag, JavaScript can read the cookie via document.cookie, "
        "so an XSS payload can steal session tokens."
    ),
    "Secure": (
        "Secure: without this flag, the cookie can be sent over unencrypted HTTP "
        "and intercepted by a man-in-the-middle."
    ),
}

_CLIENT_SIDE_EXPLANATION = (
    "Client-side cookie: cookies set via document.cookie can never be HttpOnly. "
    "Set sensitive cookies on the server instead."
)

_SERVER_FIX = """Set cookies with proper security flags:

// [GOOD] Secure configuration
res.cookie('$name', value, {
  httpOnly: true,    // Prevent JavaScript access (XSS protection)
  secure: true,      // HTTPS only (MITM protection)
  sameSite: 'strict' // CSRF protection
});

// Conditional secure flag for local development:
res.cookie('$name', value, {
  httpOnly: true,
  secure: process.env.NODE_ENV === 'production',
  sameSite: 'strict'
});"""

_HEADER_FIX = """Set the Set-Cookie header with proper flags:

// [GOOD] Secure configuration
res.setHeader('Set-Cookie',
  '$name=value; HttpOnly; Secure; SameSite=Strict; Max-Age=3600'
);"""

_CLIENT_FIX = """Avoid setting sensitive cookies client-side. Set them on the server instead:

// [BAD] Client-side
document.cookie = '$name=value';

// [GOOD] Server-side (Express)
res.cookie('$name', value, { httpOnly: true, secure: true, sameSite: 'strict' });

For non-sensitive client-side cookies at least add Secure:
document.cookie = '$name=value; Secure; SameSite=Strict';"""


def _cookie(name: str, pattern: str, fix: str) -> PatternSpec:
    return PatternSpec(
        name=name,
        pattern=re.compile(pattern, re.IGNORECASE),
        message="Cookie '$name' missing $missing",
        fix=fix,
    )


# one level of nested calls, e.g. sign(token) or sign(a, b)
_VALUE = r"(?P<value>(?:[^,()]|\([^()]*\))+)"
_OPTIONS = r"""(?:\s*,\s*\{(?P<options>[^}]*)\})?\s*\)"""


class CookieSecurityRule(Rule):
    id = "cookie-security"
    name = "Insecure Cookie Configuration"
    description = "Detects cookies set without HttpOnly and Secure flags"
    severity = Severity.high
    tags = ["security", "cookies", "auth"]
    file_pattern = JS_FILES

    patterns = [
        _cookie(
            "Express cookie",
            r"""res\.cookie\s*\(\s*['"`](?P<name>[^'"`]+)['"`]\s*,\s*""" + _VALUE + _OPTIONS,
            _SERVER_FIX,
        ),
        _cookie(
            "Set-Cookie header",
            r"""(?:setHeader|set)\s*\(\s*['"`]Set-Cookie['"`]\s*,\s*['"`](?P<cookie>[^'"`]+)['"`]\s*\)""",
            _HEADER_FIX,
        ),
        _cookie(
            "document.cookie",
            r"""document\.cookie\s*=\s*['"`](?P<cookie>[^'"`]+)['"`]""",
            _CLIENT_FIX,
        ),
        _cookie(
            "Koa cookie",
            r"""ctx\.cookies\.set\s*\(\s*['"`](?P<name>[^'"`]+)['"`]\s*,\s*""" + _VALUE + _OPTIONS,
            _SERVER_FIX,
        ),
    ]

    flag_parsers: dict[str, Callable[[RawMatch], CookieFlags]] = {
        "Express cookie": _options_flags,
        "Set-Cookie header": _header_flags,
        "document.cookie": _client_flags,
        "Koa cookie": _options_flags,
    }

    def explain(self, flags: CookieFlags) -> str:
        parts = [_MISSING_EXPLANATIONS[flag] for flag in flags.missing]
        if flags.client_side:
            parts.append(_CLIENT_SIDE_EXPLANATION)
        parts.append(
            "Both flags are essential for protecting session tokens and authentication credentials."
        )
        return "\n\n".join(parts)

    def check(self, content: str, file_path: str) -> list[Finding]:
        if not self.applies_to(file_path):
            return []

        content = self.prepare(content)
        findings: list[Finding] = []

        for spec in self.patterns:
            parse_flags = self.flag_parsers[spec.name]
            for match in self.find(spec, content):
                flags = parse_flags(match)
                missing = flags.missing
                if not missing:
                    continue

                label = " and ".join(missing) + (" flags" if len(missing) > 1 else " flag")
                findings.append(
                    self.build(
                        spec._replace(explanation=self.explain(flags)),
                        content,
                        file_path,
                        match,
                        severity=flags.severity,
                        variables={"name": flags.name, "missing": label},
                    )
                )

        return findings
