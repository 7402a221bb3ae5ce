"""Transport security for the API.

install_security() wires two pieces onto the app:
- HTTPS redirection (Starlette's HTTPSRedirectMiddleware), on whenever
  settings.redirect_to_https is true
- SecurityHeadersMiddleware, which stamps hardening headers on every
  response and marks token-bearing responses as uncacheable
"""

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware
from starlette.requests import Request
from starlette.responses import Response

# Routes whose bodies contain a freshly issued access token.
TOKEN_PATHS = frozenset({"/register", "/login"})

HARDENING_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Hardening headers; no-store on token responses; HSTS over HTTPS."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers.update(HARDENING_HEADERS)
        if request.url.path in TOKEN_PATHS:
            response.headers["Cache-Control"] = "no-store"
            response.headers["Pragma"] = "no-cache"
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response


def install_security(app: FastAPI, redirect_to_https: bool) -> None:
    """Register the security middleware on ``app``.

    The redirect is added last so it is the outermost layer: plain-HTTP
    requests bounce before reaching auth or handlers.
    """
    app.add_middleware(SecurityHeadersMiddleware)
    if redirect_to_https:
        app.add_middleware(HTTPSRedirectMiddleware)
