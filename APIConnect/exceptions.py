from typing import Dict, Optional, Type

# Exceptions
class APIError(Exception):
    """Base exception for API-related errors."""
    def __init__(self, message: str, status_code: Optional[int] = None,
                 headers: Optional[Dict[str, str]] = None, body: Optional[str] = None,
                 request_id: Optional[str] = None, response=None):
        super().__init__(message)
        self.status_code = status_code
        self.headers = headers or {}
        self.body = body
        self.request_id = request_id
        self.response = response
        self.retry_after = self._parse_retry_after()

    def _parse_retry_after(self) -> Optional[float]:
        """Parse Retry-After header."""
        for name, value in self.headers.items():
            if name.lower() == 'retry-after':
                try:
                    return float(value)
                except ValueError:
                    return None
        return None

class ClientError(APIError):
    """Raised for 4xx responses without a more specific class."""
    pass

class AuthenticationError(ClientError):
    """Raised when authentication fails."""
    pass

class ForbiddenError(ClientError):
    """Raised when the credentials lack permission."""
    pass

class NotFoundError(ClientError):
    """Raised when the resource does not exist."""
    pass

class UnprocessableEntityError(ClientError):
    """Raised when the API rejects the payload."""
    pass

class RateLimitError(ClientError):
    """Raised when rate limit is exceeded."""
    pass

class TimeoutError(APIError):
    """Raised when request times out."""
    pass

class ConnectionError(APIError):
    """Raised when connection fails."""
    pass

class RetryableError(APIError):
    """Base class for errors that should be retried."""
    pass

class ServerError(RetryableError):
    """Raised for 5xx responses."""
    pass


class LogicError(Exception):
    """Raised when the library is asked to do something that cannot make sense,
    e.g. building a DTO from a failed response."""
    pass


STATUS_EXCEPTIONS: Dict[int, Type[APIError]] = {
    401: AuthenticationError,
    403: ForbiddenError,
    404: NotFoundError,
    422: UnprocessableEntityError,
    429: RateLimitError,
}


def exception_class_for_status(status_code: int) -> Type[APIError]:
    """Pick the exception class that best describes an HTTP error status."""
    if status_code in STATUS_EXCEPTIONS:
        return STATUS_EXCEPTIONS[status_code]
    if status_code >= 500:
        return ServerError
    if status_code >= 400:
        return ClientError
    return APIError
