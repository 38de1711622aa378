"""
Custom Exception Classes for DocFlow

This module defines the error kinds raised by the service layer. Every
exception carries an HTTP status code and a machine-readable error code so
the global handlers can render a consistent error response.
"""

from enum import Enum
from typing import Any

from fastapi import status


class ErrorCode(str, Enum):
    """Machine-readable error codes returned to API clients."""

    AUTH_FAILED = "AUTH_FAILED"
    AUTH_INVALID_CREDENTIALS = "AUTH_INVALID_CREDENTIALS"
    AUTH_INVALID_TOKEN = "AUTH_INVALID_TOKEN"
    AUTH_PERMISSION_DENIED = "AUTH_PERMISSION_DENIED"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_USER_NOT_FOUND = "RESOURCE_USER_NOT_FOUND"
    RESOURCE_ORGANIZATION_NOT_FOUND = "RESOURCE_ORGANIZATION_NOT_FOUND"
    RESOURCE_DOCUMENT_NOT_FOUND = "RESOURCE_DOCUMENT_NOT_FOUND"
    RESOURCE_MEMBERSHIP_NOT_FOUND = "RESOURCE_MEMBERSHIP_NOT_FOUND"
    CONFLICT = "CONFLICT"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    VALIDATION_DUPLICATE_RESOURCE = "VALIDATION_DUPLICATE_RESOURCE"
    VALIDATION_INVALID_SUBDOMAIN = "VALIDATION_INVALID_SUBDOMAIN"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class DocFlowError(Exception):
    """Base exception class for all DocFlow errors"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.error_code = error_code
        super().__init__(self.message)


# ============================================================================
# Authentication & Authorization Exceptions
# ============================================================================


class AuthenticationError(DocFlowError):
    """Raised when authentication fails"""

    def __init__(
        self,
        message: str = "Authentication failed",
        details: dict[str, Any] | None = None,
        error_code: ErrorCode = ErrorCode.AUTH_FAILED,
    ):
        super().__init__(
            message=message, status_code=status.HTTP_401_UNAUTHORIZED, details=details, error_code=error_code
        )


class InvalidCredentialsError(AuthenticationError):
    """Raised when login credentials are invalid"""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message=message, error_code=ErrorCode.AUTH_INVALID_CREDENTIALS)


class InvalidTokenError(AuthenticationError):
    """Raised when a bearer token is missing, expired or malformed"""

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message=message, error_code=ErrorCode.AUTH_INVALID_TOKEN)


class AuthorizationError(DocFlowError):
    """Raised when the principal lacks the required role or ownership"""

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        required_roles: list[str] | None = None,
    ):
        details = {"required_roles": required_roles} if required_roles else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
            error_code=ErrorCode.AUTH_PERMISSION_DENIED,
        )


# ============================================================================
# Resource Not Found Exceptions
# ============================================================================


class ResourceNotFoundError(DocFlowError):
    """Base class for resource not found errors"""

    def __init__(
        self,
        resource_type: str,
        resource_id: Any | None = None,
        error_code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND,
    ):
        message = f"{resource_type} not found"
        if resource_id is not None:
            message = f"{resource_type} with id '{resource_id}' not found"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
            error_code=error_code,
        )


class UserNotFoundError(ResourceNotFoundError):
    """Raised when a user is not found"""

    def __init__(self, user_id: Any | None = None):
        super().__init__(resource_type="User", resource_id=user_id, error_code=ErrorCode.RESOURCE_USER_NOT_FOUND)


class OrganizationNotFoundError(ResourceNotFoundError):
    """Raised when an organization is absent, inactive or not public"""

    def __init__(self, organization_id: Any | None = None):
        super().__init__(
            resource_type="Organization",
            resource_id=organization_id,
            error_code=ErrorCode.RESOURCE_ORGANIZATION_NOT_FOUND,
        )


class DocumentNotFoundError(ResourceNotFoundError):
    """Raised when a document is not found"""

    def __init__(self, document_id: Any | None = None):
        super().__init__(
            resource_type="Document", resource_id=document_id, error_code=ErrorCode.RESOURCE_DOCUMENT_NOT_FOUND
        )


class MembershipNotFoundError(ResourceNotFoundError):
    """Raised when no active membership matches"""

    def __init__(self, member_id: Any | None = None):
        super().__init__(
            resource_type="Membership", resource_id=member_id, error_code=ErrorCode.RESOURCE_MEMBERSHIP_NOT_FOUND
        )


# ============================================================================
# Conflict Exceptions
# ============================================================================


class ConflictError(DocFlowError):
    """Raised when a write would violate a uniqueness or format rule"""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        error_code: ErrorCode = ErrorCode.CONFLICT,
    ):
        super().__init__(
            message=message, status_code=status.HTTP_409_CONFLICT, details=details, error_code=error_code
        )


class DuplicateResourceError(ConflictError):
    """Raised when attempting to create a duplicate resource"""

    def __init__(self, resource_type: str, field: str, value: Any):
        super().__init__(
            message=f"{resource_type} with {field} '{value}' already exists",
            details={"resource_type": resource_type, "field": field, "value": value},
            error_code=ErrorCode.VALIDATION_DUPLICATE_RESOURCE,
        )


class InvalidSubdomainError(ConflictError):
    """Raised when a subdomain fails format or reserved-name validation"""

    def __init__(self, subdomain: str):
        super().__init__(
            message="Invalid subdomain format",
            details={"subdomain": subdomain},
            error_code=ErrorCode.VALIDATION_INVALID_SUBDOMAIN,
        )
