import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlparse

from .contracts import WithResponse
from .exceptions import APIError, LogicError, exception_class_for_status
from .utils import get_by_path

logger = logging.getLogger(__name__)

_UNSET = object()


# Request/Response Models
@dataclass
class HTTPRequest:
    """Represents a fully merged HTTP request, ready for the transport."""
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    timeout: float = 30.0
    # where the request came from; not part of the wire request
    api_request: Any = field(default=None, repr=False, compare=False)
    connector: Any = field(default=None, repr=False, compare=False)

    @property
    def parsed_url(self):
        return urlparse(self.url)

@dataclass
class HTTPResponse:
    """Represents an HTTP response."""
    status_code: int
    headers: Dict[str, str]
    body: bytes
    request: HTTPRequest
    elapsed: float = 0.0
    _json: Any = field(default=_UNSET, init=False, repr=False, compare=False)
    _dto: Any = field(default=_UNSET, init=False, repr=False, compare=False)

    @property
    def status(self) -> int:
        return self.status_code

    @property
    def api_request(self):
        """The ``Request`` object this response answers, if any."""
        return self.request.api_request

    @property
    def connector(self):
        return self.request.connector

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default

    def text(self) -> str:
        return self.body.decode('utf-8', errors='replace')

    def json(self, key: Optional[str] = None, default: Any = None) -> Any:
        """Decode the body as JSON (once) and optionally pick a dot-path key.

        An empty body decodes to ``{}``. Malformed JSON raises
        ``json.JSONDecodeError``.
        """
        if self._json is _UNSET:
            self._json = json.loads(self.body.decode('utf-8')) if self.body.strip() else {}
        if key is None:
            return self._json
        return get_by_path(self._json, key, default)

    # Status classification
    def successful(self) -> bool:
        return 200 <= self.status_code < 300

    def ok(self) -> bool:
        return self.status_code == 200

    def redirect(self) -> bool:
        return 300 <= self.status_code < 400

    def client_error(self) -> bool:
        return 400 <= self.status_code < 500

    def server_error(self) -> bool:
        return self.status_code >= 500

    def failed(self) -> bool:
        """Whether the API call failed.

        The request gets the first say, then the connector (which applies any
        injected failure predicate). When both abstain the status code
        decides.
        """
        for source in (self.api_request, self.connector):
            if source is None:
                continue
            verdict = source.has_request_failed(self)
            if verdict is not None:
                return bool(verdict)
        return self.client_error() or self.server_error()

    def to_exception(self) -> Optional[APIError]:
        """Build the status-specific exception for a failed response."""
        if not self.failed():
            return None
        exc_class = exception_class_for_status(self.status_code)
        return exc_class(
            f"{exc_class.__name__}: {self.status_code} from {self.request.method} {self.request.url}",
            status_code=self.status_code,
            headers=self.headers,
            body=self.text(),
            request_id=self.header('x-request-id'),
            response=self,
        )

    def throw(self) -> 'HTTPResponse':
        """Raise the status exception if the response failed."""
        error = self.to_exception()
        if error is not None:
            raise error
        return self

    def on_error(self, callback: Callable[['HTTPResponse'], Any]) -> 'HTTPResponse':
        if self.failed():
            callback(self)
        return self

    # DTO mapping
    def dto(self) -> Any:
        """Map this response into the caller's DTO.

        The mapping runs whatever the status, so failed responses can still
        produce an "error" DTO. The first result is cached; errors raised by
        the mapping function propagate untouched and cache nothing.
        """
        if self._dto is _UNSET:
            self._dto = self._create_dto()
        return self._dto

    def dto_or_fail(self) -> Any:
        """Like ``dto()`` but refuses to map a failed response."""
        error = self.to_exception()
        if error is not None:
            raise LogicError(
                "Unable to create data transfer object as the response has failed."
            ) from error
        return self.dto()

    def _create_dto(self) -> Any:
        dto = None
        if self.api_request is not None:
            dto = self.api_request.create_dto_from_response(self)
        if dto is None and self.connector is not None:
            dto = self.connector.create_dto_from_response(self)

        if isinstance(dto, WithResponse) and dto.get_response() is None:
            dto.set_response(self)
            logger.debug(f"Attached response to {type(dto).__name__}")
        return dto
