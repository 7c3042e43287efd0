"""
Shared error handling for the Access Layer authorization service.

Authorization misses are ordinary return values (see
``service_authz.app.domain.models.AuthorizationDecision``); the exceptions
here are reserved for bad configuration, malformed requests and
programming errors.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class AuthzException(Exception):
    """Base exception for the authorization service."""

    status_code = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class ConfigurationError(AuthzException):
    """Static configuration could not be loaded or is malformed."""

    status_code = 500

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class AuthorizationError(AuthzException):
    """Access was denied. Carries the same message for every deny reason."""

    status_code = 403

    def __init__(self, message: str = "Access denied", details: Optional[Dict[str, Any]] = None):
        super().__init__("FORBIDDEN", message, details)
