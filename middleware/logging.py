"""
Receipegram Logging Middleware
Structured request/response logging with request ids and timing
"""

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import structlog
import time
import uuid
from typing import Dict, Any
from contextvars import ContextVar

from utils.request_utils import filter_headers, get_client_ip, get_user_agent

logger = structlog.get_logger()

# Context variable for request tracking
request_id_var: ContextVar[str] = ContextVar('request_id', default='')


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Logging middleware that provides:
    - Request/response logging with unique IDs
    - Status-derived log levels
    - Masking of credentials in logged headers
    """

    def __init__(self, app):
        super().__init__(app)

        # Paths to exclude from detailed logging
        self.exclude_paths = ("/api/health", "/favicon.ico")

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request_id_var.set(request_id)

        if request.url.path.startswith(self.exclude_paths):
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response

        request_info = self._extract_request_info(request, request_id)
        logger.info("Request started", **request_info, event_type="request_start")

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                process_time=round(time.time() - start_time, 4),
                error=str(e),
                error_type=type(e).__name__,
                event_type="request_error"
            )
            raise

        response_info = self._extract_response_info(response, time.time() - start_time)

        # Set by the auth dependencies once the bearer token is verified
        user_id = getattr(request.state, "user_id", None)
        if user_id is not None:
            response_info["user_id"] = user_id

        logger.log(
            self._determine_log_level(response.status_code),
            "Request completed",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            **response_info,
            event_type="request_complete"
        )

        response.headers["X-Request-ID"] = request_id
        return response

    def _extract_request_info(self, request: Request, request_id: str) -> Dict[str, Any]:
        return {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client_ip": get_client_ip(request),
            "user_agent": get_user_agent(request),
            "content_type": request.headers.get("content-type", ""),
            "content_length": request.headers.get("content-length", 0),
            "headers": filter_headers(dict(request.headers)),
        }

    def _extract_response_info(self, response: Response, process_time: float) -> Dict[str, Any]:
        return {
            "status_code": response.status_code,
            "process_time": round(process_time, 4),
        }

    def _determine_log_level(self, status_code: int) -> int:
        """Determine appropriate log level based on status code"""
        if status_code >= 500:
            return 40  # ERROR
        elif status_code >= 400:
            return 30  # WARNING
        else:
            return 20  # INFO


def get_request_id() -> str:
    """Get current request ID from context"""
    return request_id_var.get()
