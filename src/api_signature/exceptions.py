"""
Exception classes for the api-signature package
"""

from typing import Optional, Dict, Any


class ApiSignatureError(Exception):
    """Base exception for all api-signature errors"""

    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (code: {self.error_code}, details: {self.details})"
        return f"{self.message} (code: {self.error_code})"


class ValidationError(ApiSignatureError):
    """Exception raised for invalid signing inputs"""
    pass


class ConfigurationError(ApiSignatureError):
    """Exception raised when options or the surrounding system are misconfigured"""
    pass


class AuthenticationError(ApiSignatureError):
    """
    Base exception for a rejected request.

    Every subclass maps to the same generic denial at the HTTP boundary;
    the concrete kind is only meant for logs and for callers that need
    to tell them apart.
    """

    http_status = 401
    default_code = "AUTHENTICATION_FAILED"
    default_message = "Request authentication failed"

    def __init__(self, message: Optional[str] = None, error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message or self.default_message,
            error_code or self.default_code,
            details
        )


class MalformedAuthorizationError(AuthenticationError):
    """Authorization header absent, wrong scheme, or unparsable"""
    default_code = "MALFORMED_AUTHORIZATION"
    default_message = "Authorization header is missing or malformed"


class MissingRequiredHeaderError(AuthenticationError):
    """A required header is not signed, or a signed header is absent from the request"""
    default_code = "MISSING_REQUIRED_HEADER"
    default_message = "A required header is missing"


class UnsupportedAlgorithmError(AuthenticationError):
    """The signature names an algorithm that is not registered"""
    default_code = "UNSUPPORTED_ALGORITHM"
    default_message = "Unsupported signature algorithm"


class ExpiredRequestError(AuthenticationError):
    """The signed date lies outside the allowed request lifetime"""
    default_code = "EXPIRED_REQUEST"
    default_message = "Request has expired"


class UnauthorizedError(AuthenticationError):
    """The secret resolver rejected the key identifier"""
    default_code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class BadSignatureError(AuthenticationError):
    """The recomputed digest does not match the supplied signature"""
    default_code = "BAD_SIGNATURE"
    default_message = "Bad signature"
