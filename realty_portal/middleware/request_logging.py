"""
Request logging middleware.
Tags every request with a short id, echoes it in X-Request-ID and logs
method, path, status and timing.
"""

from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import logging
import time
import uuid

from realty_portal.services.error_handler import ErrorHandlerService

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware assigning request ids and logging request/response pairs.
    """

    def __init__(
        self,
        app: ASGIApp,
        enable_request_logging: bool = True,
        slow_request_threshold: float = 1.0  # seconds
    ):
        super().__init__(app)
        self.enable_request_logging = enable_request_logging
        self.slow_request_threshold = slow_request_threshold

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request through the logging middleware.

        Args:
            request: FastAPI request object
            call_next: Next middleware/handler in chain

        Returns:
            Response object carrying X-Request-ID and X-Processing-Time
        """
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        request.state.request_id = request_id

        start_time = time.time()

        if self.enable_request_logging:
            self._log_request(request, request_id)

        try:
            response = await call_next(request)
        except Exception as exc:
            processing_time = time.time() - start_time
            logger.error(
                f"Request error [{request_id}]: {type(exc).__name__} - {str(exc)} "
                f"(processing_time: {processing_time:.3f}s)",
                extra={
                    "request_id": request_id,
                    "path": request.url.path,
                    "method": request.method,
                    "processing_time": processing_time
                },
                exc_info=True
            )
            response = ErrorHandlerService.handle_unexpected_error(exc, request)

        processing_time = time.time() - start_time

        if self.enable_request_logging:
            self._log_response(request, response, request_id, processing_time)

        if processing_time > self.slow_request_threshold:
            logger.warning(
                f"Slow request [{request_id}]: {request.method} {request.url.path} "
                f"took {processing_time:.3f}s"
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time"] = f"{processing_time:.3f}"
        return response

    def _log_request(self, request: Request, request_id: str) -> None:
        logger.info(
            f"Request [{request_id}]: {request.method} {request.url.path}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "query_params": str(request.query_params),
                "client_ip": request.client.host if request.client else "unknown",
                "user_agent": request.headers.get("user-agent", "unknown")
            }
        )

    def _log_response(
        self,
        request: Request,
        response: Response,
        request_id: str,
        processing_time: float
    ) -> None:
        """
        Log response details.

        Args:
            request: FastAPI request object
            response: FastAPI response object
            request_id: Unique request identifier
            processing_time: Request processing time in seconds
        """
        logger.info(
            f"Response [{request_id}]: {response.status_code} - {processing_time:.3f}s",
            extra={
                "request_id": request_id,
                "status_code": response.status_code,
                "processing_time": processing_time,
                "path": request.url.path,
                "method": request.method
            }
        )
