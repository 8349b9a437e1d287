import logging
from typing import Optional

from .models import HTTPRequest, HTTPResponse

_REDACTED = ('authorization', 'proxy-authorization', 'cookie')


# Middleware System
class BaseMiddleware:
    """Base class for HTTP middleware."""

    async def process_request(self, request: HTTPRequest) -> HTTPRequest:
        """Process the merged request before the transport sees it."""
        return request

    async def process_response(self, response: HTTPResponse) -> HTTPResponse:
        """Process the final response, error statuses included."""
        return response

    async def process_error(self, error: Exception, request: HTTPRequest) -> Exception:
        """Process a transport error raised while sending the request."""
        return error


def _label(request: HTTPRequest) -> str:
    # "GetServerRequest GET https://..." when sent through a connector
    origin = request.api_request
    prefix = f"{type(origin).__name__} " if origin is not None else ""
    return f"{prefix}{request.method} {request.url}"


class LoggingMiddleware(BaseMiddleware):
    """Logs each call under the name of the ``Request`` that produced it.

    Responses with an error status are logged at INFO, everything else at
    DEBUG. With ``log_headers`` the outgoing headers are logged too, with
    credentials masked.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, log_headers: bool = False):
        self.logger = logger or logging.getLogger(__name__)
        self.log_headers = log_headers

    async def process_request(self, request: HTTPRequest) -> HTTPRequest:
        self.logger.debug(f"Sending {_label(request)}")
        if self.log_headers:
            self.logger.debug(f"Headers: {self.masked_headers(request)}")
        return request

    async def process_response(self, response: HTTPResponse) -> HTTPResponse:
        level = logging.INFO if response.status_code >= 400 else logging.DEBUG
        self.logger.log(level, f"{_label(response.request)} answered {response.status_code} "
                               f"in {response.elapsed:.3f}s")
        return response

    async def process_error(self, error: Exception, request: HTTPRequest) -> Exception:
        self.logger.error(f"{_label(request)} could not be sent: {error}")
        return error

    @staticmethod
    def masked_headers(request: HTTPRequest):
        return {name: '***' if name.lower() in _REDACTED else value
                for name, value in request.headers.items()}
