# 📄 File: sproutsync/shared/core/exceptions.py
# 🧭 Purpose (Layman Explanation):
# This file defines all the special error types SproutSync uses to say clearly what went
# wrong (a missing plant, an expired gift, a broken Google connection) instead of generic errors.
# 🧪 Purpose (Technical Summary):
# Custom exception hierarchy providing specific error types with HTTP status codes,
# error codes and details that the handlers in sproutsync.main render as the error envelope.
# 🔗 Dependencies:
# FastAPI status constants, typing
# 🔄 Connected Modules / Calls From:
# All modules for error handling, sproutsync.main exception handlers, API endpoints, domain services

from typing import Any, Dict, List, Optional
from fastapi import status


class SproutSyncException(Exception):
    """
    Base exception class for the SproutSync backend.
    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Any] = None,
        error_code: Optional[str] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details if details is not None else {}
        self.error_code = error_code or self.__class__.__name__.upper()
        super().__init__(self.message)


# =============================================================================
# AUTHENTICATION & AUTHORIZATION EXCEPTIONS
# =============================================================================

class AuthenticationError(SproutSyncException):
    """
    Exception raised for authentication failures.
    Used when the bearer token is missing, malformed or expired.
    """

    def __init__(
        self,
        message: str = "Authentication failed",
        details: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None
    ):
        if not details:
            details = {}
        if user_id:
            details["user_id"] = user_id

        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            details=details,
            error_code="AUTHENTICATION_ERROR"
        )


class AuthorizationError(SproutSyncException):
    """
    Exception raised for authorization failures.
    Used when a user touches a plant or task they do not own.
    """

    def __init__(
        self,
        message: str = "Access denied",
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        user_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id
        if user_id:
            details["user_id"] = user_id

        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
            error_code="AUTHORIZATION_ERROR"
        )


# =============================================================================
# VALIDATION & DATA EXCEPTIONS
# =============================================================================

class ValidationError(SproutSyncException):
    """
    Exception raised for data validation failures.
    Used when input data doesn't meet validation requirements.
    """

    def __init__(
        self,
        message: str = "Validation error",
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[Any] = None
    ):
        if details is None:
            details = {}

        if isinstance(details, dict):
            if field:
                details["field"] = field
            if value is not None:
                details["value"] = str(value)
            if constraint:
                details["constraint"] = constraint

        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
            error_code="VALIDATION_ERROR"
        )


class NotFoundError(SproutSyncException):
    """
    Exception raised when requested resource is not found.
    Used for missing plants, tasks, tags, gifts and users.
    """

    def __init__(
        self,
        message: str = "Resource not found",
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id

        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
            error_code="NOT_FOUND"
        )


class BusinessRuleViolationError(SproutSyncException):
    """
    Exception raised when a request breaks a domain rule.
    Used for re-gifting a gifted plant, accepting your own gift, reusing a username, etc.
    """

    def __init__(
        self,
        message: str = "Business rule violation",
        rule: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if rule:
            details["rule"] = rule
        if context:
            details["context"] = context

        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
            error_code="BUSINESS_RULE_VIOLATION"
        )


class GoneError(SproutSyncException):
    """
    Exception raised when a resource existed but is no longer usable.
    Used for gifts whose expiry has passed.
    """

    def __init__(
        self,
        message: str = "Resource is no longer available",
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id

        super().__init__(
            message=message,
            status_code=status.HTTP_410_GONE,
            details=details,
            error_code="GONE"
        )


# =============================================================================
# FILE UPLOAD EXCEPTIONS
# =============================================================================

class FileTooLargeError(SproutSyncException):
    """Exception raised when an uploaded image exceeds the size limit."""

    def __init__(
        self,
        message: str = "File too large",
        max_bytes: Optional[int] = None,
        actual_bytes: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if max_bytes is not None:
            details["max_bytes"] = max_bytes
        if actual_bytes is not None:
            details["actual_bytes"] = actual_bytes

        super().__init__(
            message=message,
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            details=details,
            error_code="FILE_TOO_LARGE"
        )


class InvalidFileTypeError(SproutSyncException):
    """Exception raised when an uploaded file has a disallowed content type."""

    def __init__(
        self,
        message: str = "Invalid file type",
        content_type: Optional[str] = None,
        allowed_types: Optional[List[str]] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if content_type:
            details["content_type"] = content_type
        if allowed_types:
            details["allowed_types"] = allowed_types

        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
            error_code="INVALID_FILE_TYPE"
        )


# =============================================================================
# EXTERNAL SERVICE EXCEPTIONS
# =============================================================================

class ExternalServiceError(SproutSyncException):
    """
    Exception raised when a third-party service fails.
    Used for Google, Firebase, Cloudinary and Gemini failures.
    """

    def __init__(
        self,
        message: str = "External service error",
        service: Optional[str] = None,
        service_response: Optional[str] = None,
        status_code: int = status.HTTP_502_BAD_GATEWAY,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if service:
            details["service"] = service
        if service_response:
            details["service_response"] = service_response

        super().__init__(
            message=message,
            status_code=status_code,
            details=details,
            error_code="EXTERNAL_SERVICE_ERROR"
        )


class ConfigurationError(SproutSyncException):
    """Exception raised when a required setting is missing."""

    def __init__(
        self,
        message: str = "Service is not properly configured",
        setting: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if setting:
            details["setting"] = setting

        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
            error_code="CONFIGURATION_ERROR"
        )


# =============================================================================
# DATABASE EXCEPTIONS
# =============================================================================

class DatabaseError(SproutSyncException):
    """
    Exception raised for database operation failures.
    """

    def __init__(
        self,
        message: str = "Database operation failed",
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
            error_code="DATABASE_ERROR"
        )


class TransactionError(SproutSyncException):
    """
    Exception raised when a database transaction fails.
    Used to wrap commit/rollback errors in DB sessions.
    """

    def __init__(
        self,
        message: str = "Database transaction failed",
        operation: Optional[str] = None,
        entity: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if operation:
            details["operation"] = operation
        if entity:
            details["entity"] = entity

        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
            error_code="TRANSACTION_ERROR"
        )

