"""FastAPI application for scry."""

import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .config import apply_rule_configs, load_config
from .errors import ConfigError, ScanOperationError
from .models import ScanRequest, ScanResult
from .rules import get_all_rules
from .scanner import Scanner

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="scry",
    description="Security anti-pattern scanner for JavaScript and TypeScript code",
    version="0.1.0",
)

# CORS - allow common development origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://localhost:3000",
        "http://localhost:8000",
    ],
    allow_methods=["POST", "GET"],
    allow_headers=["*"],
)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


def build_scanner(request: ScanRequest) -> Scanner:
    """Scanner for one request; request values override any config file."""
    overrides = {
        "min_severity": request.min_severity,
        "rules": {rule_id: {"enabled": enabled} for rule_id, enabled in request.rules.items()},
        "ignore": request.ignore,
        "extensions": request.extensions,
    }
    config = load_config(overrides=overrides)
    rules = apply_rule_configs(get_all_rules(config.limits), config.rules)
    return Scanner(rules, config)


@app.post("/scan", response_model=ScanResult)
async def scan(request: ScanRequest) -> ScanResult:
    """Scan a local file or directory for security anti-patterns."""
    logger.info(f"Scan request for {request.path}")

    try:
        scanner = build_scanner(request)
        return await scanner.scan_path(request.path)
    except (ScanOperationError, ConfigError) as e:
        raise HTTPException(status_code=400, detail=e.message)
    except Exception as e:
        logger.error(f"Scan failed: {e}")
        raise HTTPException(status_code=500, detail=f"Scan failed: {e}")
