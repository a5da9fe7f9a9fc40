"""
Receipegram Security Middleware
Security headers and request validation
"""

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import structlog
from typing import Optional

from core.config import settings
from utils.request_utils import get_client_ip

logger = structlog.get_logger()

TRAVERSAL_PATTERNS = ("../", "..\\", "..%2f", "..%5c", "%2e%2e%2f", "%2e%2e%5c")


def has_path_traversal(path: str) -> bool:
    """Check for path traversal attempts"""
    path_lower = path.lower()
    return any(pattern in path_lower for pattern in TRAVERSAL_PATTERNS)


class SecurityMiddleware(BaseHTTPMiddleware):
    """
    Security middleware that adds:
    - Security headers
    - Request validation (path traversal, declared body size)
    """

    async def dispatch(self, request: Request, call_next):
        violation = self._validate_request(request)
        if violation:
            return violation

        response = await call_next(request)
        self._add_security_headers(response, request)
        return response

    def _validate_request(self, request: Request) -> Optional[JSONResponse]:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > settings.MAX_REQUEST_SIZE:
            self._record_security_violation(request, "oversized_request")
            return JSONResponse(
                status_code=413,
                content={"message": "Request too large"}
            )

        # Check the raw path as well; the decoded one has %2e%2e folded away
        raw_path = request.scope.get("raw_path", b"").decode("latin-1")
        if has_path_traversal(request.url.path) or has_path_traversal(raw_path):
            self._record_security_violation(request, "path_traversal")
            return JSONResponse(
                status_code=403,
                content={"message": "Forbidden"}
            )

        return None

    def _record_security_violation(self, request: Request, violation_type: str):
        logger.warning(
            "Security violation detected",
            client_ip=get_client_ip(request),
            path=request.url.path,
            violation_type=violation_type,
        )

    def _add_security_headers(self, response: Response, request: Request):
        """Add security headers to response"""
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["X-Permitted-Cross-Domain-Policies"] = "none"

        # HSTS (only for HTTPS)
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        # API-specific headers
        if request.url.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
            response.headers["Pragma"] = "no-cache"
