from dataclasses import dataclass

import pytest

from APIConnect import Connector, HasResponse, Method, MockClient, MockResponse, Request


@dataclass
class Server(HasResponse):
    id: int
    name: str
    ip_address: str


@dataclass(frozen=True)
class PlainServer:
    id: int
    name: str


@dataclass
class ErrorDetails(HasResponse):
    status: int
    error: str


class ExampleConnector(Connector):
    base_url = "https://api.example.test/v1"


class GetServer(Request):
    method = Method.GET

    def __init__(self, server_id: int = 1):
        self.server_id = server_id
        self.calls = 0

    def resolve_endpoint(self) -> str:
        return f"/servers/{self.server_id}"

    def create_dto_from_response(self, response):
        self.calls += 1
        data = response.json()
        return Server(id=data['id'], name=data['name'], ip_address=data['ip'])


class GetPlainServer(GetServer):
    def create_dto_from_response(self, response):
        data = response.json()
        return PlainServer(id=data['id'], name=data['name'])


class GetStatus(Request):
    """Mapping that always succeeds, whatever the status."""

    def resolve_endpoint(self) -> str:
        return "/status"

    def create_dto_from_response(self, response):
        if 'error' in response.json():
            return ErrorDetails(status=response.status_code, error=response.json('error'))
        return Server(id=response.json('id'), name=response.json('name'), ip_address=response.json('ip'))


class UpdateServer(Request):
    method = Method.PUT

    def __init__(self, server: Server):
        self.server = server

    def resolve_endpoint(self) -> str:
        return f"/servers/{self.server.id}"

    def default_body(self):
        return {'name': self.server.name, 'ip_address': self.server.ip_address}


SERVER_JSON = {"id": 1, "name": "srv1", "ip": "10.0.0.1"}


def make_connector(*responses: MockResponse, **kwargs) -> Connector:
    return ExampleConnector(mock_client=MockClient(list(responses)), **kwargs)


@pytest.fixture
def server_json():
    return dict(SERVER_JSON)


@pytest.fixture
def send():
    """Send ``request`` through a connector answering with ``mock_response``."""

    def _send(request: Request, mock_response: MockResponse, **kwargs):
        return make_connector(mock_response, **kwargs).send(request)

    return _send
