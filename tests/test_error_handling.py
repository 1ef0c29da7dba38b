"""
Tests for error handling.
Tests custom exceptions and error response formatting.
"""

import json
from unittest.mock import Mock
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from realty_portal.services.error_handler import ErrorHandlerService
from realty_portal.utils.exceptions import (
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    InsufficientPermissionsError,
    DuplicatePendingRequestError,
    RequestAlreadyResolvedError,
    StorageError
)


def _request_with_id(request_id: str) -> Mock:
    request = Mock()
    request.state.request_id = request_id
    request.url.path = "/api/v1/test"
    return request


class TestErrorHandlerService:
    """Test error handler service functionality."""

    def test_format_error_response(self):
        response = ErrorHandlerService.format_error_response(
            error_code="TEST_ERROR",
            message="Test error message",
            details=[{"field": "test", "message": "Test field error"}],
            request_id="test123"
        )

        assert response["error"]["code"] == "TEST_ERROR"
        assert response["error"]["message"] == "Test error message"
        assert response["error"]["request_id"] == "test123"
        assert response["error"]["details"] == [{"field": "test", "message": "Test field error"}]
        assert response["error"]["timestamp"].endswith("Z")

    def test_format_error_response_without_details(self):
        response = ErrorHandlerService.format_error_response("NOT_FOUND", "Missing")

        assert "details" not in response["error"]

    def test_handle_api_exception_with_field_errors(self):
        exception = ValidationError.for_field("justification", "Justification is required")

        response = ErrorHandlerService.handle_api_exception(exception, _request_with_id("abc12345"))

        assert response.status_code == 422
        data = json.loads(response.body)
        assert data["error"]["code"] == "VALIDATION_ERROR"
        assert data["error"]["request_id"] == "abc12345"
        assert data["error"]["details"] == [{"field": "justification", "message": "Justification is required"}]

    def test_handle_api_exception_without_request(self):
        response = ErrorHandlerService.handle_api_exception(NotFoundError("Property", 7))

        assert response.status_code == 404
        data = json.loads(response.body)
        assert data["error"]["message"] == "Property not found with ID: 7"
        assert len(data["error"]["request_id"]) == 8

    def test_handle_validation_error_strips_location(self):
        exception = RequestValidationError([
            {"loc": ("body", "price"), "msg": "Input should be greater than 0", "type": "greater_than"},
            {"loc": ("query", "page"), "msg": "Input should be greater than or equal to 1", "type": "greater_than_equal"}
        ])

        response = ErrorHandlerService.handle_validation_error(exception)

        assert response.status_code == 422
        details = json.loads(response.body)["error"]["details"]
        assert [detail["field"] for detail in details] == ["price", "page"]
        assert details[0]["type"] == "greater_than"

    def test_handle_database_error_hides_cause(self):
        exception = IntegrityError("INSERT INTO users ...", {}, Exception("UNIQUE constraint failed: users.email"))

        response = ErrorHandlerService.handle_database_error(exception)

        assert response.status_code == 500
        data = json.loads(response.body)
        assert data["error"]["code"] == "STORAGE_ERROR"
        assert "UNIQUE" not in data["error"]["message"]

    def test_handle_http_exception(self):
        response = ErrorHandlerService.handle_http_exception(
            StarletteHTTPException(status_code=405, detail="Method Not Allowed")
        )

        assert response.status_code == 405
        assert json.loads(response.body)["error"]["code"] == "HTTP_405"

    def test_handle_unexpected_error(self):
        response = ErrorHandlerService.handle_unexpected_error(RuntimeError("secret stack detail"))

        assert response.status_code == 500
        data = json.loads(response.body)
        assert data["error"]["code"] == "INTERNAL_SERVER_ERROR"
        assert "secret" not in data["error"]["message"]


class TestCustomExceptions:
    """Test status codes and error codes of the exception hierarchy."""

    def test_unauthorized_carries_challenge(self):
        exception = UnauthorizedError()

        assert exception.status_code == 401
        assert exception.headers == {"WWW-Authenticate": "Bearer"}

    def test_insufficient_permissions(self):
        exception = InsufficientPermissionsError("edit property 3")

        assert exception.status_code == 403
        assert exception.error_code == "FORBIDDEN"
        assert exception.detail == "Insufficient permissions to edit property 3"

    def test_conflict_codes(self):
        duplicate = DuplicatePendingRequestError("add", None)
        resolved = RequestAlreadyResolvedError(5, "approved")

        assert duplicate.status_code == resolved.status_code == 409
        assert duplicate.error_code == "DUPLICATE_PENDING"
        assert "all properties" in duplicate.detail
        assert resolved.error_code == "REQUEST_ALREADY_RESOLVED"
        assert resolved.detail == "Access request 5 is already approved"

    def test_storage_error(self):
        exception = StorageError()

        assert exception.status_code == 500
        assert exception.error_code == "STORAGE_ERROR"

    def test_validation_error_status(self):
        exception = ValidationError("Invalid property data")

        assert exception.status_code == 422
        assert exception.error_code == "VALIDATION_ERROR"
