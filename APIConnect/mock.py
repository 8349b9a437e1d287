"""
Fake transport for connectors.

    mock = MockClient({
        GetServerRequest: MockResponse({"id": 1, "name": "srv1", "ip": "10.0.0.1"}),
        "*/servers/*": MockResponse({"error": "down"}, status=500),
    })
    connector = ForgeConnector("token", mock_client=mock)

Keys are ``Request`` subclasses or URL glob patterns, checked in insertion
order. A list of responses is served one per request, in order.
"""

import fnmatch
import json
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from .models import HTTPRequest


class MockResponse:
    """A canned response. Dict and list bodies are sent as JSON."""

    def __init__(self, body: Any = None, status: int = 200,
                 headers: Optional[Dict[str, str]] = None):
        self.status = status
        self.headers = dict(headers or {})

        if isinstance(body, (dict, list)):
            self.body = json.dumps(body).encode('utf-8')
            self.headers.setdefault('Content-Type', 'application/json')
        elif isinstance(body, str):
            self.body = body.encode('utf-8')
        else:
            self.body = body or b''

    def as_tuple(self) -> Tuple[int, Dict[str, str], bytes]:
        return self.status, dict(self.headers), self.body


Responder = Union[MockResponse, Callable[[HTTPRequest], MockResponse]]


class MockClient:
    """A transport that answers from canned responses and records what was sent."""

    def __init__(self, responses: Union[Sequence[Responder], Dict[Any, Responder]]):
        if isinstance(responses, dict):
            self._mapping = dict(responses)
            self._sequence: Optional[List[Responder]] = None
        else:
            self._mapping = {}
            self._sequence = list(responses)
        self.recorded: List[HTTPRequest] = []
        self._lock = threading.Lock()

    def __call__(self, request: HTTPRequest) -> Tuple[int, Dict[str, str], bytes]:
        with self._lock:
            self.recorded.append(request)
            responder = self._next_responder(request)

        if isinstance(responder, MockResponse):
            return responder.as_tuple()
        return responder(request).as_tuple()

    def _next_responder(self, request: HTTPRequest) -> Responder:
        if self._sequence is not None:
            if not self._sequence:
                raise LookupError(f"No mock response left for {request.method} {request.url}")
            return self._sequence.pop(0)

        for key, responder in self._mapping.items():
            if self._matches(key, request):
                return responder
        raise LookupError(f"No mock response matches {request.method} {request.url}")

    @staticmethod
    def _matches(key: Any, request: HTTPRequest) -> bool:
        if isinstance(key, str):
            return fnmatch.fnmatchcase(request.url, key)
        return isinstance(key, type) and isinstance(request.api_request, key)

    # Assertions
    def sent(self, key: Any) -> List[HTTPRequest]:
        return [request for request in self.recorded if self._matches(key, request)]

    def assert_sent(self, key: Any):
        if not self.sent(key):
            raise AssertionError(f"Expected a request matching {key!r} to be sent")

    def assert_not_sent(self, key: Any):
        if self.sent(key):
            raise AssertionError(f"Unexpected request matching {key!r} was sent")

    def assert_sent_count(self, count: int):
        if len(self.recorded) != count:
            raise AssertionError(f"Expected {count} requests, {len(self.recorded)} were sent")

    @property
    def last_request(self) -> Optional[HTTPRequest]:
        return self.recorded[-1] if self.recorded else None
