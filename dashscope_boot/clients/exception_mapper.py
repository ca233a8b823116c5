"""Maps httpx errors onto DashScope API exceptions."""

from typing import Optional

import httpx
from fastapi import status as Status

from .exceptions import (
    AuthenticationException,
    AuthorizationException,
    DashScopeApiException,
    ExternalApiException,
    ExternalApiNotFoundException,
    ExternalApiServerException,
    HttpClientException,
    RateLimitException,
)

REQUEST_ID_HEADER = 'x-request-id'


class HttpExceptionMapper:
    """Maps HTTP exceptions to domain exceptions."""

    def map_httpx_exception(self, exc: httpx.HTTPError) -> DashScopeApiException:
        if isinstance(exc, httpx.HTTPStatusError):
            return self._map_status_error(exc)
        elif isinstance(exc, httpx.RequestError):
            return HttpClientException(f'HTTP client error: {exc}')
        else:
            return HttpClientException(f'Unknown HTTP error: {exc}')

    def _map_status_error(self, exc: httpx.HTTPStatusError) -> ExternalApiException:
        response = exc.response
        status_code = response.status_code
        response_text = response.text if response.is_stream_consumed else ''
        request_id: Optional[str] = response.headers.get(REQUEST_ID_HEADER)

        error_message = f'DashScope API error {status_code}: {response_text}' if response_text else str(exc)
        kwargs = dict(status_code=status_code, response_body=response_text, request_id=request_id)

        match status_code:
            case Status.HTTP_401_UNAUTHORIZED:
                return AuthenticationException(error_message, **kwargs)
            case Status.HTTP_403_FORBIDDEN:
                return AuthorizationException(error_message, **kwargs)
            case Status.HTTP_404_NOT_FOUND:
                return ExternalApiNotFoundException(error_message, **kwargs)
            case Status.HTTP_429_TOO_MANY_REQUESTS:
                return RateLimitException(error_message, **kwargs)
            case code if code >= 500:
                return ExternalApiServerException(error_message, **kwargs)
            case _:
                return ExternalApiException(error_message, **kwargs)
