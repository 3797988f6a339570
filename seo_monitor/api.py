"""HTTP API for the public audit."""

from typing import Any, Awaitable, Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, ValidationError, field_validator

from . import __version__
from .audit.public_audit import run_public_audit
from .audit.rate_limiter import FixedWindowRateLimiter, get_rate_limiter
from .exceptions import SiteUnreachableError
from .models import PublicAuditResult

UNREACHABLE_MESSAGE = "Could not reach the website. Please check the URL and try again."
INVALID_URL_MESSAGE = "Invalid URL. Please enter a valid website address."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again."

PublicAuditRunner = Callable[[str], Awaitable[PublicAuditResult]]


class PublicAuditRequest(BaseModel):
    url: str

    @field_validator("url")
    @classmethod
    def check_url(cls, value: str) -> str:
        clean = value.strip()
        if not clean.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        host = clean.split("://", 1)[1].split("/", 1)[0]
        if not host or " " in clean:
            raise ValueError("URL has no host")
        return clean


def client_ip(request: Request) -> str:
    """First ``X-Forwarded-For`` entry, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client is not None:
        return request.client.host
    return "unknown"


def _rate_limit_headers(remaining: int, reset_at: float) -> dict[str, str]:
    return {
        "X-RateLimit-Remaining": str(remaining),
        "X-RateLimit-Reset": str(int(reset_at)),
    }


def create_app(
    limiter: Optional[FixedWindowRateLimiter] = None,
    runner: PublicAuditRunner = run_public_audit,
) -> FastAPI:
    """Build the API app.

    Args:
        limiter: Per-IP limiter; the process-wide one by default.
        runner: Coroutine that audits a URL.
    """
    app = FastAPI(title="SEO Monitor API", version=__version__)
    if limiter is None:
        limiter = get_rate_limiter()

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {"ok": True, "version": __version__}

    @app.post("/api/audit/public")
    async def public_audit(request: Request) -> JSONResponse:
        ip = client_ip(request)
        decision = limiter.check(ip)
        headers = _rate_limit_headers(decision.remaining, decision.reset_at)
        if not decision.allowed:
            return JSONResponse(
                {"error": "Rate limit exceeded. Try again later.", "resetAt": int(decision.reset_at)},
                status_code=429,
                headers=headers,
            )

        try:
            body = await request.json()
        except ValueError:
            return JSONResponse({"error": "Invalid JSON body"}, status_code=400)

        try:
            payload = PublicAuditRequest.model_validate(body)
        except ValidationError as exc:
            return JSONResponse(
                {"error": INVALID_URL_MESSAGE, "issues": [e["msg"] for e in exc.errors()]},
                status_code=400,
            )

        try:
            result = await runner(payload.url)
        except SiteUnreachableError as exc:
            logger.warning("Public audit of {} failed: {}", payload.url, exc.reason)
            return JSONResponse({"error": UNREACHABLE_MESSAGE}, status_code=422)
        except Exception:
            logger.exception("Public audit of {} failed unexpectedly", payload.url)
            return JSONResponse({"error": UNEXPECTED_ERROR_MESSAGE}, status_code=500)

        return JSONResponse(result.to_dict(), headers=headers)

    return app
