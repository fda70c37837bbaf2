"""JWTs kept in localStorage / sessionStorage."""

import re

from ..models import Severity
from .base import JS_FILES, PatternSpec, Rule

_EXPLANATION = (
    "Storing JWT tokens in localStorage or sessionStorage is vulnerable to XSS attacks. "
    "Any JavaScript running on the page can read these values, so an injected script "
    "can steal the token and impersonate the user."
)

_FIX = """Use secure, httpOnly cookies instead:

// Backend (Express)
res.cookie('token', jwtToken, {
  httpOnly: true,     // Prevent JavaScript access
  secure: true,       // HTTPS only
  sameSite: 'strict'  // CSRF protection
});

// Frontend: cookies are sent automatically, no token in storage.
// For SPAs that must hold a token, keep it in memory only:
let authToken = null;
function setToken(token) { authToken = token; }"""

_KEY = r"""\(\s*['"](?P<key>\w*token\w*|jwt|auth)['"]"""


def _storage(storage: str, method: str) -> PatternSpec:
    tail = r"(?P<args>[^)]*)\)" if method == "setItem" else r"[^)]*\)"
    label = storage if method == "setItem" else f"{storage}.getItem"
    return PatternSpec(
        name=label,
        pattern=re.compile(storage + r"\s*\.\s*" + method + r"\s*" + _KEY + tail, re.IGNORECASE),
        message=f"JWT token stored in {label}",
        explanation=_EXPLANATION,
        fix=_FIX,
    )


class JWTStorageRule(Rule):
    id = "jwt-storage"
    name = "JWT in Client Storage"
    description = "Detects JWT tokens stored in localStorage or sessionStorage"
    severity = Severity.high
    tags = ["security", "auth", "storage"]
    file_pattern = JS_FILES

    patterns = [
        _storage("localStorage", "setItem"),
        _storage("sessionStorage", "setItem"),
        _storage("localStorage", "getItem"),
        _storage("sessionStorage", "getItem"),
    ]
