"""
Requests describe a single API endpoint.

Subclass ``Request`` per endpoint, set ``method`` and implement
``resolve_endpoint``. Anything the endpoint sends by default goes in the
``default_*`` hooks; a request may take a DTO in its constructor and read its
fields there:

    class UpdateServerRequest(Request):
        method = Method.PUT

        def __init__(self, server: Server):
            self.server = server

        def resolve_endpoint(self) -> str:
            return f"/servers/{self.server.id}"

        def default_body(self):
            return {"name": self.server.name, "ip_address": self.server.ip_address}

``create_dto_from_response`` turns the response into a DTO and is what
``HTTPResponse.dto()`` calls.
"""

import json
from enum import Enum
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlencode


class Method(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class BodyFormat(Enum):
    JSON = "json"
    FORM = "form"
    NONE = "none"


class _DefaultsStore:
    """A per-instance dict seeded from a ``default_*`` hook the first time it is read.

    Lives in the instance ``__dict__``, so subclasses are free to skip
    ``super().__init__()``.
    """

    def __init__(self, hook: str):
        self.hook = hook

    def __set_name__(self, owner, name):
        self.slot = f"_{name}"

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        if self.slot not in instance.__dict__:
            instance.__dict__[self.slot] = dict(getattr(instance, self.hook)() or {})
        return instance.__dict__[self.slot]

    def __set__(self, instance, value):
        instance.__dict__[self.slot] = dict(value)


class Request:
    """Base class for API requests."""

    method: Method = Method.GET
    body_format: BodyFormat = BodyFormat.JSON

    def resolve_endpoint(self) -> str:
        raise NotImplementedError(f"{type(self).__name__} must implement resolve_endpoint()")

    def default_headers(self) -> Dict[str, str]:
        return {}

    def default_query(self) -> Dict[str, Any]:
        return {}

    def default_body(self) -> Dict[str, Any]:
        return {}

    def default_config(self) -> Dict[str, Any]:
        return {}

    headers = _DefaultsStore('default_headers')
    query = _DefaultsStore('default_query')
    body = _DefaultsStore('default_body')
    config = _DefaultsStore('default_config')

    def encode_body(self) -> Tuple[Optional[bytes], Optional[str]]:
        """Serialize ``body`` according to ``body_format``.

        Returns the payload and its content type, ``(None, None)`` when there
        is nothing to send.
        """
        body = self.body
        if not body or self.body_format is BodyFormat.NONE:
            return None, None
        if self.body_format is BodyFormat.FORM:
            return urlencode(body, doseq=True).encode('utf-8'), 'application/x-www-form-urlencoded'
        return json.dumps(body).encode('utf-8'), 'application/json'

    def create_dto_from_response(self, response) -> Any:
        """Map a response into a DTO. Returning ``None`` defers to the connector."""
        return None

    def has_request_failed(self, response) -> Optional[bool]:
        """Override to classify responses for this endpoint; ``None`` abstains."""
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.method.value}>"
