"""FastAPI application for the Moviefy catalog API.

Health detail (upstream circuits and errors) is only returned to admin key
holders and hosts on the health allowlist.
"""

import ipaddress
import logging
from typing import Any

from fastapi import FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware

from moviefy.api.deps import is_admin_key
from moviefy.api.router import api_router
from moviefy.core.config import settings
from moviefy.db.session import init_models
from moviefy.sources.observability import source_monitor

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    force=True,
)

REPEATED_FAILURE_THRESHOLD = 3

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router, prefix=settings.api_prefix)


@app.on_event("startup")
async def _create_tables() -> None:
    await init_models()


def _source_issues(source: str, state: dict[str, Any]) -> list[dict[str, Any]]:
    issues: list[dict[str, Any]] = []
    cooldown = float(state.get("circuit", {}).get("remaining_cooldown") or 0.0)
    if cooldown > 0:
        issues.append({"source": source, "reason": "circuit_open", "remaining_cooldown": round(cooldown, 2)})
    for operation, counters in state.get("operations", {}).items():
        if counters.get("last_error"):
            issues.append(
                {"source": source, "operation": operation, "reason": "last_error", "error": counters["last_error"]}
            )
        failed = int(counters.get("failed") or 0)
        if failed >= REPEATED_FAILURE_THRESHOLD:
            issues.append({"source": source, "operation": operation, "reason": "repeated_failures", "failed": failed})
    return issues


def _upstream_report(snapshot: dict[str, Any]) -> dict[str, Any]:
    """Per-source state plus a flat list of everything that looks wrong."""
    report: dict[str, Any] = {"sources": {}, "issues": []}
    for source, state in snapshot.items():
        issues = _source_issues(source, state)
        operations = state.get("operations", {})
        errors = [counters["last_error"] for counters in operations.values() if counters.get("last_error")]
        report["sources"][source] = {
            "state": "degraded" if issues else "ok",
            "circuit_open": any(issue["reason"] == "circuit_open" for issue in issues),
            "circuit": state.get("circuit", {}),
            "operations": operations,
            "failure_total": sum(int(counters.get("failed") or 0) for counters in operations.values()),
            "last_error": errors[-1] if errors else None,
        }
        report["issues"].extend(issues)
    return report


def _allowlisted(request: Request) -> bool:
    """Match the client address or Host header against CIDRs and hostnames."""
    candidates = [request.client.host] if request.client and request.client.host else []
    if host := request.headers.get("host"):
        candidates.append(host.split(":")[0])
    for entry in filter(None, settings.health_allowlist):
        try:
            network = ipaddress.ip_network(entry, strict=False)
        except ValueError:
            if any(entry.casefold() == candidate.casefold() for candidate in candidates):
                return True
            continue
        for candidate in candidates:
            try:
                if ipaddress.ip_address(candidate) in network:
                    return True
            except ValueError:
                continue
    return False


@app.get("/health", tags=["internal"])
@app.get(f"{settings.api_prefix}/health", tags=["internal"])
async def health(
    request: Request,
    x_admin_key: str | None = Header(default=None, alias="X-Admin-Key"),
) -> dict[str, Any]:
    if not (is_admin_key(x_admin_key) or _allowlisted(request)):
        return {"status": "ok"}

    report = _upstream_report(await source_monitor.snapshot())
    return {"status": "degraded" if report["issues"] else "ok", "upstream": report}
