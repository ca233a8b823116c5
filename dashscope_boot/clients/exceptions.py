"""DashScope API client exceptions."""

from typing import Optional


class DashScopeApiException(Exception):
    """Base exception for DashScope API operations."""

    def __init__(self, message: str, request_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.request_id = request_id


class ExternalApiException(DashScopeApiException):
    """The DashScope API answered with an error status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(message, request_id)
        self.status_code = status_code
        self.response_body = response_body


class AuthenticationException(ExternalApiException):
    """Invalid or missing API key."""

    pass


class AuthorizationException(ExternalApiException):
    """API key is not allowed to use the model or workspace."""

    pass


class RateLimitException(ExternalApiException):
    pass


class ExternalApiNotFoundException(ExternalApiException):
    pass


class ExternalApiServerException(ExternalApiException):
    pass


class TaskFailedException(ExternalApiException):
    """An asynchronous DashScope task finished with FAILED or CANCELED status."""

    pass


class HttpClientException(DashScopeApiException):
    """Transport-level failure talking to the DashScope API."""

    pass
