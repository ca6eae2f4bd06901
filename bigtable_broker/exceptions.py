"""Custom exception classes for the Bigtable service broker."""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for different types of failures."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Request and plan errors
    PARAMETER_DECODE_ERROR = "PARAMETER_DECODE_ERROR"
    PLAN_CONFIGURATION_ERROR = "PLAN_CONFIGURATION_ERROR"

    # Authentication errors
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"

    # Storage errors
    STORAGE_OPERATION_FAILED = "STORAGE_OPERATION_FAILED"

    # Provider errors
    PROVIDER_OPERATION_FAILED = "PROVIDER_OPERATION_FAILED"

    # Service Broker errors
    INSTANCE_NOT_FOUND = "INSTANCE_NOT_FOUND"
    INSTANCE_ALREADY_EXISTS = "INSTANCE_ALREADY_EXISTS"


class BrokerError(Exception):
    """Base exception class for the Bigtable service broker."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Specific error code for the failure
            details: Additional context about the error
            cause: The underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        result = {
            'error': self.error_code.value,
            'message': self.message,
            'details': self.details
        }

        if self.cause:
            result['cause'] = str(self.cause)

        return result

    def __str__(self) -> str:
        base_str = f"{self.error_code.value}: {self.message}"

        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            base_str += f" ({details_str})"

        return base_str


class ValidationError(BrokerError):
    """Exception for validation failures."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        cause: Optional[Exception] = None
    ):
        details = {}
        if field:
            details['field'] = field
        if value is not None:
            details['value'] = str(value)

        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            cause=cause
        )


class ParameterDecodeError(ValidationError):
    """Request parameters or plan features could not be decoded."""

    def __init__(self, source: str, cause: Exception):
        super().__init__(
            message=f"Error unmarshalling {source}: {cause}",
            field=source,
            error_code=ErrorCode.PARAMETER_DECODE_ERROR,
            cause=cause
        )


class PlanConfigurationError(ValidationError):
    """A plan feature holds a value the broker cannot use."""

    def __init__(self, message: str, feature: str, value: Optional[Any] = None,
                 cause: Optional[Exception] = None):
        super().__init__(
            message=message,
            field=feature,
            value=value,
            error_code=ErrorCode.PLAN_CONFIGURATION_ERROR,
            cause=cause
        )


class ConfigurationError(BrokerError):
    """Exception for configuration-related errors."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        details = {}
        if config_key:
            details['config_key'] = config_key

        super().__init__(
            message=message,
            error_code=ErrorCode.CONFIGURATION_ERROR,
            details=details
        )


class AuthenticationError(BrokerError):
    """Exception for authentication failures."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(
            message=message,
            error_code=ErrorCode.AUTHENTICATION_FAILED
        )


class StorageError(BrokerError):
    """Exception for storage-related errors."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 cause: Optional[Exception] = None):
        details = {}
        if operation:
            details['operation'] = operation

        super().__init__(
            message=message,
            error_code=ErrorCode.STORAGE_OPERATION_FAILED,
            details=details,
            cause=cause
        )


class ProviderError(BrokerError):
    """Exception for failures reported by the instance-administration API."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 instance_name: Optional[str] = None, cause: Optional[Exception] = None):
        details = {}
        if operation:
            details['operation'] = operation
        if instance_name:
            details['instance_name'] = instance_name

        super().__init__(
            message=message,
            error_code=ErrorCode.PROVIDER_OPERATION_FAILED,
            details=details,
            cause=cause
        )


class ServiceBrokerError(BrokerError):
    """Base exception for Service Broker API errors."""

    def __init__(self, message: str, error_code: ErrorCode, instance_id: Optional[str] = None):
        details = {}
        if instance_id:
            details['instance_id'] = instance_id

        super().__init__(
            message=message,
            error_code=error_code,
            details=details
        )


class InstanceNotFoundError(ServiceBrokerError):
    """The service instance does not exist."""

    def __init__(self, instance_id: str):
        super().__init__(
            message="instance does not exist",
            error_code=ErrorCode.INSTANCE_NOT_FOUND,
            instance_id=instance_id
        )


class InstanceAlreadyExistsError(ServiceBrokerError):
    """Exception for when a service instance already exists."""

    def __init__(self, instance_id: str):
        super().__init__(
            message=f"Service instance '{instance_id}' already exists",
            error_code=ErrorCode.INSTANCE_ALREADY_EXISTS,
            instance_id=instance_id
        )
