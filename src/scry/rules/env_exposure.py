"""Environment files committed to the tree or exposed to clients."""

import os
import re

from ..models import Finding, Severity
from ..suppression import SafeContext
from .base import JS_MODULE_FILES, PatternSpec, Rule

ENV_FILE_EXPLANATION = """Environment files (.env, .env.local, .env.production) contain sensitive configuration and secrets. These files should:

1. Never be committed to version control: add them to .gitignore
2. Never be deployed to production: use the platform's secret management
3. Never be served as static files: keep them outside public directories

Committing .env files is one of the most common ways secrets are leaked. Even if you delete the file later, it remains in Git history."""

ENV_FILE_FIX = """Protect your .env file:

1. Add to .gitignore:
   .env
   .env.local
   .env.*.local

2. If already committed, remove it from history and rotate every secret:
   bfg --delete-files .env

3. Commit a .env.example template instead:
   DATABASE_URL=your_database_url_here
   API_KEY=your_api_key_here

4. In production use platform environment variables or a secrets manager."""

_SERVE_FIX = """Never serve directories that contain .env files:

// [BAD]
app.use(express.static('.'));

// [GOOD] Serve a dedicated directory
app.use(express.static('public'));

Keep .env at the project root, outside every served or built directory."""

_CLIENT_FIX = """Inject configuration at build time instead of fetching .env:

// [BAD]
fetch('.env').then((res) => res.text());

// [GOOD] Bundler-provided public variables only
const apiUrl = import.meta.env.VITE_API_URL;

Only expose values that are safe to be public."""


def _env(name: str, pattern: str, message: str, explanation: str, fix: str, **kwargs) -> PatternSpec:
    return PatternSpec(
        name=name,
        pattern=re.compile(pattern, re.IGNORECASE),
        message=message,
        explanation=explanation,
        fix=fix,
        **kwargs,
    )


def is_env_file(file_path: str) -> bool:
    return os.path.basename(file_path).startswith(".env")


class EnvExposureRule(Rule):
    id = "env-exposure"
    name = ".env File Exposure"
    description = "Detects potential .env file exposure risks"
    severity = Severity.high
    tags = ["security", "secrets", "configuration"]

    patterns = [
        _env(
            "Static .env serving",
            r"""(?:express\.static|serve-static|app\.use)\s*\([^)]*['".]env""",
            ".env file potentially served as static content",
            """Your application serves static files from a location that may include .env files:

- .env files could be downloaded by anyone over HTTP
- Every secret, API key and database credential in them is exposed
- Attackers routinely probe http://yoursite.com/.env""",
            _SERVE_FIX,
        ),
        _env(
            ".env in public directory reference",
            r"(?:public|static|dist|build)/\.env",
            ".env file referenced in public/static directory",
            """.env files must never be placed in public, static, dist or build directories:

- These directories are served as static content
- Build processes may copy them to production""",
            _SERVE_FIX,
        ),
        _env(
            "Reading .env in client code",
            r"""(?:fetch|axios|http\.get|XMLHttpRequest)\s*\([^)]*['"`]\.env['"`]""",
            "Attempting to fetch .env file from client-side code",
            """Client-side code fetching a .env file implies the file is reachable over HTTP.

Environment variables should be injected at build time, not fetched at runtime,
and anything fetched is visible in the browser's network tab.""",
            _CLIENT_FIX,
        ),
        _env(
            ".env file path in code",
            r"""['"]/?\.env(?:\.local|\.production|\.development)?['"]""",
            ".env file path reference in code (review context)",
            """Referencing a .env path is sometimes legitimate (loading it with dotenv on the server).

Review whether this code runs client-side or serves the file; both expose its secrets.""",
            """Load .env only on the server:

require('dotenv').config();
const apiKey = process.env.API_KEY;""",
            severity=Severity.low,
            suppressor=SafeContext(("dotenv",), window=50),
        ),
    ]

    def env_file_finding(self, file_path: str) -> Finding:
        return Finding(
            rule=self.id,
            severity=self.severity_override or self.severity,
            file=file_path,
            line=1,
            column=1,
            message="Environment file detected - ensure it's in .gitignore",
            snippet="",
            explanation=ENV_FILE_EXPLANATION,
            fix=ENV_FILE_FIX,
            tags=list(self.tags),
        )

    def check(self, content: str, file_path: str) -> list[Finding]:
        if is_env_file(file_path):
            return [self.env_file_finding(file_path)]
        if not JS_MODULE_FILES.search(file_path):
            return []
        return super().check(content, file_path)
