"""
Error handling service for consistent error response formatting and logging.
Every error leaves the API as {"error": {code, message, timestamp, request_id, details?}}.
"""

from typing import Dict, Any, Optional, List
from datetime import datetime, timezone
from fastapi import Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from realty_portal.utils.exceptions import APIException, ValidationError
import logging
import uuid

logger = logging.getLogger(__name__)


class ErrorHandlerService:
    """
    Service for handling and formatting errors consistently across the application.
    Internal causes are logged; callers only ever see the error code and a safe message.
    """

    @staticmethod
    def format_error_response(
        error_code: str,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
        request_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Format error response in a consistent structure.

        Args:
            error_code: Error code identifier
            message: Human-readable error message
            details: Optional list of field-level errors
            request_id: Optional request identifier for tracking

        Returns:
            Formatted error response dictionary
        """
        response = {
            "error": {
                "code": error_code,
                "message": message,
                "timestamp": ErrorHandlerService._get_current_timestamp(),
            }
        }

        if details:
            response["error"]["details"] = details

        if request_id:
            response["error"]["request_id"] = request_id

        return response

    @staticmethod
    def handle_api_exception(
        exception: APIException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle custom API exceptions with structured response.

        Args:
            exception: API exception instance
            request: Optional FastAPI request object

        Returns:
            JSON response with formatted error
        """
        request_id = ErrorHandlerService._get_request_id(request)

        log = logger.error if exception.status_code >= 500 else logger.warning
        log(
            f"API Exception [{request_id}]: {exception.error_code} - {exception.detail}",
            extra={
                "error_code": exception.error_code,
                "status_code": exception.status_code,
                "request_id": request_id,
                "path": request.url.path if request else None
            }
        )

        details = exception.field_errors if isinstance(exception, ValidationError) else None

        error_response = ErrorHandlerService.format_error_response(
            error_code=exception.error_code or "API_ERROR",
            message=exception.detail,
            details=details,
            request_id=request_id
        )

        return JSONResponse(
            status_code=exception.status_code,
            content=error_response,
            headers=exception.headers
        )

    @staticmethod
    def handle_validation_error(
        exception: RequestValidationError,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle request validation errors with detailed field information.

        Args:
            exception: Request validation error raised by FastAPI
            request: Optional FastAPI request object

        Returns:
            JSON response with validation error details
        """
        request_id = ErrorHandlerService._get_request_id(request)

        validation_details = []
        for error in exception.errors():
            # Drop the leading "body"/"query" segment, keep the field path
            location = [str(loc) for loc in error.get("loc", ())]
            if len(location) > 1 and location[0] in ("body", "query", "path"):
                location = location[1:]
            validation_details.append({
                "field": " -> ".join(location),
                "message": error["msg"],
                "type": error["type"]
            })

        logger.warning(
            f"Validation Error [{request_id}]: {len(validation_details)} field errors",
            extra={
                "error_count": len(validation_details),
                "request_id": request_id,
                "path": request.url.path if request else None
            }
        )

        error_response = ErrorHandlerService.format_error_response(
            error_code="VALIDATION_ERROR",
            message="Request validation failed",
            details=validation_details,
            request_id=request_id
        )

        return JSONResponse(
            status_code=422,
            content=error_response
        )

    @staticmethod
    def handle_database_error(
        exception: SQLAlchemyError,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle database errors that escaped the service layer.

        The driver message is logged with traceback and never returned.
        """
        request_id = ErrorHandlerService._get_request_id(request)

        logger.error(
            f"Database Error [{request_id}]: {type(exception).__name__} - {str(exception)}",
            extra={
                "request_id": request_id,
                "path": request.url.path if request else None,
                "exception_type": type(exception).__name__
            },
            exc_info=exception
        )

        error_response = ErrorHandlerService.format_error_response(
            error_code="STORAGE_ERROR",
            message="Storage operation failed",
            request_id=request_id
        )

        return JSONResponse(
            status_code=500,
            content=error_response
        )

    @staticmethod
    def handle_http_exception(
        exception: HTTPException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle plain HTTP exceptions raised by FastAPI/Starlette (404 routes, 405, ...).
        """
        request_id = ErrorHandlerService._get_request_id(request)

        logger.warning(
            f"HTTP Exception [{request_id}]: {exception.status_code} - {exception.detail}",
            extra={
                "status_code": exception.status_code,
                "request_id": request_id,
                "path": request.url.path if request else None
            }
        )

        error_response = ErrorHandlerService.format_error_response(
            error_code=f"HTTP_{exception.status_code}",
            message=str(exception.detail),
            request_id=request_id
        )

        return JSONResponse(
            status_code=exception.status_code,
            content=error_response,
            headers=getattr(exception, "headers", None)
        )

    @staticmethod
    def handle_unexpected_error(
        exception: Exception,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle unexpected errors with secure error responses.

        Args:
            exception: Unexpected exception
            request: Optional FastAPI request object

        Returns:
            JSON response with generic error message
        """
        request_id = ErrorHandlerService._get_request_id(request)

        logger.error(
            f"Unexpected Error [{request_id}]: {type(exception).__name__} - {str(exception)}",
            extra={
                "request_id": request_id,
                "path": request.url.path if request else None,
                "exception_type": type(exception).__name__
            },
            exc_info=exception
        )

        error_response = ErrorHandlerService.format_error_response(
            error_code="INTERNAL_SERVER_ERROR",
            message="An unexpected error occurred. Please try again later.",
            request_id=request_id
        )

        return JSONResponse(
            status_code=500,
            content=error_response
        )

    @staticmethod
    def _get_request_id(request: Optional[Request]) -> str:
        """Reuse the id assigned by the logging middleware, or mint one."""
        if request is not None:
            request_id = getattr(request.state, "request_id", None)
            if request_id:
                return request_id
        return str(uuid.uuid4())[:8]

    @staticmethod
    def _get_current_timestamp() -> str:
        """Get current UTC timestamp in ISO format."""
        return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
