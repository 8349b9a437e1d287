"""
Capabilities a DTO can opt into.

A DTO that wants to know which response it was built from implements
``WithResponse``. ``HTTPResponse.dto()`` checks for the capability at runtime
and attaches itself right after the mapping function returns. The easiest way
to get it is to inherit ``HasResponse``:

    @dataclass
    class Server(HasResponse):
        id: int
        name: str

    server = response.dto()
    server.get_response() is response  # True
"""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class WithResponse(Protocol):
    """A DTO that carries the response it was created from."""

    def set_response(self, response) -> None:
        ...

    def get_response(self):
        ...


class HasResponse:
    """Default ``WithResponse`` implementation.

    The slot is write-once: the first response attached stays and later
    calls are ignored, so a DTO shared between responses keeps its origin.
    It lives outside the dataclass fields, so it does not take part in
    ``__eq__``/``__repr__``, and is set through ``object.__setattr__`` so
    frozen dataclasses work too.
    """

    _response = None

    def set_response(self, response) -> None:
        if self._response is not None:
            return
        object.__setattr__(self, '_response', response)

    def get_response(self) -> Optional[object]:
        return self._response
