"""Overly permissive CORS configuration."""

import re

from ..models import Finding, Severity
from .base import JS_FILES, PatternSpec, Rule

_WHITELIST_FIX = """Use a whitelist of allowed origins:

// [GOOD] Whitelist specific origins
const allowedOrigins = ['https://yourdomain.com', 'https://app.yourdomain.com'];

const origin = req.headers.origin;
if (allowedOrigins.includes(origin)) {
  res.setHeader('Access-Control-Allow-Origin', origin);
}

// Or from the environment:
const allowedOrigins = process.env.ALLOWED_ORIGINS?.split(',') || [];"""

_EXPRESS_FIX = """Configure Express CORS with a whitelist:

const allowedOrigins = ['https://yourdomain.com', 'https://app.yourdomain.com'];

app.use(cors({
  origin: function (origin, callback) {
    if (!origin || allowedOrigins.includes(origin)) {
      callback(null, true);
    } else {
      callback(new Error('Not allowed by CORS'));
    }
  }
}));

// Or simply:
app.use(cors({ origin: allowedOrigins }));"""

WILDCARD = "Wildcard CORS"
CREDENTIALS = "CORS with credentials and wildcard"


class CORSConfigRule(Rule):
    id = "cors-config"
    name = "CORS Misconfiguration"
    description = "Detects overly permissive CORS configurations"
    severity = Severity.medium
    tags = ["security", "cors", "web"]
    file_pattern = JS_FILES

    patterns = [
        PatternSpec(
            name=WILDCARD,
            pattern=re.compile(r"""(?:Access-Control-Allow-Origin|origin)\s*[:=]\s*['"`]\*['"`]""", re.IGNORECASE),
            message="Wildcard (*) CORS origin allows any website to access your API",
            explanation="""Setting Access-Control-Allow-Origin to '*' allows ANY website to make requests to your API:

- Any malicious website can read your API responses
- Data behind cookies or other ambient authentication can be stolen
- Same-origin policy protections are bypassed

This is especially dangerous for authenticated APIs or APIs returning sensitive data.""",
            fix=_WHITELIST_FIX,
            severity=Severity.high,
        ),
        PatternSpec(
            name=CREDENTIALS,
            pattern=re.compile(r"""Access-Control-Allow-Credentials\s*[:=]\s*['"`]?true['"`]?""", re.IGNORECASE),
            message="CRITICAL: CORS with credentials and wildcard origin (browsers will block this)",
            explanation=(
                "Setting Access-Control-Allow-Credentials to true with a wildcard (*) origin is "
                "blocked by browsers because it would let any website make authenticated requests "
                "to your API."
            ),
            fix="""Remove the wildcard origin and specify exact origins:

// [BAD] Blocked by browsers
res.setHeader('Access-Control-Allow-Origin', '*');
res.setHeader('Access-Control-Allow-Credentials', 'true');

// [GOOD]
const allowedOrigins = ['https://yourdomain.com'];
if (allowedOrigins.includes(req.headers.origin)) {
  res.setHeader('Access-Control-Allow-Origin', req.headers.origin);
  res.setHeader('Access-Control-Allow-Credentials', 'true');
}""",
            severity=Severity.high,
        ),
        PatternSpec(
            name="Reflected origin without validation",
            pattern=re.compile(
                r"""(?:Access-Control-Allow-Origin|setHeader\s*\(\s*['"`]Access-Control-Allow-Origin['"`])\s*[,:]\s*(?:req\.headers?\.origin|origin)""",
                re.IGNORECASE,
            ),
            message="CORS origin reflects request origin without validation",
            explanation=(
                "Reflecting the request Origin header without validation is equivalent to wildcard "
                "CORS. An attacker can send any origin and your server will allow it."
            ),
            fix=_WHITELIST_FIX,
            severity=Severity.high,
        ),
        PatternSpec(
            name="Express CORS wildcard",
            pattern=re.compile(r"""cors\s*\(\s*\{\s*origin\s*:\s*['"`]\*['"`]""", re.IGNORECASE),
            message="Express CORS configured with wildcard origin",
            explanation=(
                "The Express cors middleware configured with origin: '*' allows any website to "
                "access your API endpoints, bypassing browser same-origin protections."
            ),
            fix=_EXPRESS_FIX,
            severity=Severity.high,
        ),
        PatternSpec(
            name="Express CORS permissive function",
            pattern=re.compile(
                r"cors\s*\(\s*\{\s*origin\s*:\s*(?:function|=>|\([^)]*\)\s*=>)[^}]*return\s+true", re.IGNORECASE
            ),
            message="CORS origin function always returns true",
            explanation=(
                "A CORS origin function that always returns true is equivalent to wildcard CORS. "
                "The function should check the origin against a whitelist."
            ),
            fix=_EXPRESS_FIX,
            severity=Severity.medium,
        ),
        PatternSpec(
            name="Null origin allowed",
            pattern=re.compile(r"""(?:Access-Control-Allow-Origin|origin)\s*[:=]\s*['"`]null['"`]""", re.IGNORECASE),
            message="CORS allows null origin (exploitable via sandboxed iframes)",
            explanation="""Allowing the 'null' origin is dangerous:

- Sandboxed iframes and local files send a 'null' origin
- Attackers can therefore forge requests with a null origin

Reject the null origin explicitly.""",
            fix="""Reject the null origin:

if (!origin || origin === 'null') {
  return callback(new Error('Origin not allowed'));
}""",
            severity=Severity.medium,
        ),
    ]

    def check(self, content: str, file_path: str) -> list[Finding]:
        """Report each pattern; credentials only when the file also has a wildcard origin."""
        if not self.applies_to(file_path):
            return []

        content = self.prepare(content)
        findings: list[Finding] = []
        has_wildcard = False
        credentials = []

        for spec in self.patterns:
            for match in self.find(spec, content):
                if spec.name == CREDENTIALS:
                    credentials.append((spec, match))
                    continue
                if spec.name == WILDCARD:
                    has_wildcard = True
                findings.append(self.build(spec, content, file_path, match))

        if has_wildcard:
            for spec, match in credentials:
                findings.append(self.build(spec, content, file_path, match))

        return findings
