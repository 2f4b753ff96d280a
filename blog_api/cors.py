"""CORS header composition for every response the gateway sends."""

from __future__ import annotations

from typing import Iterable, Optional

ALLOW_METHODS = "GET, POST, OPTIONS"
DEFAULT_ALLOW_HEADERS = "Content-Type, Authorization"
EXPOSE_HEADERS = "Content-Type, Authorization"
MAX_AGE_SECONDS = 86400

PREFLIGHT_VARY = "Origin, Access-Control-Request-Method, Access-Control-Request-Headers"


def is_allowed_origin(origin: Optional[str], allowed_origins: Iterable[str]) -> bool:
    """Exact match only: no wildcards, no subdomain matching."""
    if not origin:
        return False
    return origin in allowed_origins


def compute_cors(
    method: str,
    origin: Optional[str],
    requested_headers: Optional[str],
    allowed_origins: Iterable[str],
) -> dict[str, str]:
    headers: dict[str, str] = {}

    # caches must key preflight answers on the request method/headers too
    if method.upper() == "OPTIONS":
        headers["Vary"] = PREFLIGHT_VARY
    else:
        headers["Vary"] = "Origin"

    if is_allowed_origin(origin, allowed_origins):
        # credentials are allowed, so the origin is echoed and never "*"
        headers["Access-Control-Allow-Origin"] = origin
        headers["Access-Control-Allow-Credentials"] = "true"

    headers["Access-Control-Allow-Methods"] = ALLOW_METHODS
    headers["Access-Control-Allow-Headers"] = requested_headers or DEFAULT_ALLOW_HEADERS
    headers["Access-Control-Expose-Headers"] = EXPOSE_HEADERS
    headers["Access-Control-Max-Age"] = str(MAX_AGE_SECONDS)
    return headers


__all__ = ["compute_cors", "is_allowed_origin"]
