"""
CORS handling.
"""
from __future__ import annotations

from typing import Sequence

from fastapi.middleware.cors import CORSMiddleware
from starlette.datastructures import Headers
from starlette.requests import Request
from starlette.responses import Response


class PreflightCORSMiddleware(CORSMiddleware):
    """Starlette's CORS middleware, but accepted preflights answer ``204``."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response
        headers = {
            k: v
            for k, v in response.headers.items()
            if k not in ("content-length", "content-type")
        }
        return Response(status_code=204, headers=headers)


def cors_headers(request: Request, allow_origins: Sequence[str]) -> dict[str, str]:
    """CORS headers for responses produced outside the middleware (server errors)."""
    if "*" in allow_origins:
        return {"Access-Control-Allow-Origin": "*"}
    origin = request.headers.get("origin")
    if origin and origin in allow_origins:
        return {"Access-Control-Allow-Origin": origin, "Vary": "Origin"}
    return {}
