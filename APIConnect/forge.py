"""
Laravel Forge connector: servers as DTOs.

    forge = ForgeConnector.from_env()
    server = forge.send(GetServerRequest(1)).dto_or_fail()
    server.name = "web-2"
    forge.send(UpdateServerRequest(server)).throw()
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .config import load_connector_configs
from .connector import Connector
from .contracts import HasResponse
from .models import HTTPResponse
from .request import Method, Request


@dataclass
class Server(HasResponse):
    id: Optional[int]
    name: str
    ip_address: str

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'Server':
        # a missing field raises KeyError
        return cls(id=data['id'], name=data['name'], ip_address=data['ip'])


@dataclass
class ForgeError(HasResponse):
    """What Forge tells us when a call fails."""
    status: int
    message: str


class ForgeConnector(Connector):
    base_url = "https://forge.laravel.com/api/v1"

    def __init__(self, api_token: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        if api_token:
            self.authenticate(api_token)

    @classmethod
    def from_env(cls, api_token: Optional[str] = None, **kwargs) -> 'ForgeConnector':
        """Build from the bundled "forge" config, reading FORGE_API_TOKEN if no token is given."""
        return cls.from_config(load_connector_configs()['forge'], api_key=api_token, **kwargs)

    def default_headers(self) -> Dict[str, str]:
        return {'Accept': 'application/json'}

    def create_dto_from_response(self, response: HTTPResponse) -> Any:
        # Anything the requests don't map themselves becomes an error DTO when it failed
        if response.failed():
            return ForgeError(status=response.status_code, message=self._error_message(response))
        return None

    @staticmethod
    def _error_message(response: HTTPResponse) -> str:
        # proxies in front of Forge answer with HTML pages
        try:
            return str(response.json('error', response.text()))
        except ValueError:
            return response.text()


class ServerRequest(Request):
    """Requests answered with a single server. Failed responses fall through to
    the connector, which maps them to ``ForgeError``."""

    def create_dto_from_response(self, response: HTTPResponse) -> Optional[Server]:
        if response.failed():
            return None
        return Server.from_json(response.json())


class GetServerRequest(ServerRequest):
    method = Method.GET

    def __init__(self, server_id: int):
        self.server_id = server_id

    def resolve_endpoint(self) -> str:
        return f"/servers/{self.server_id}"


class ListServersRequest(Request):
    method = Method.GET

    def resolve_endpoint(self) -> str:
        return "/servers"

    def create_dto_from_response(self, response: HTTPResponse):
        if response.failed():
            return None
        return [Server.from_json(item) for item in response.json('servers', [])]


class CreateServerRequest(ServerRequest):
    """Create a server; the body defaults to the fields of the given DTO."""
    method = Method.POST

    def __init__(self, server: Server):
        self.server = server

    def resolve_endpoint(self) -> str:
        return "/servers"

    def default_body(self) -> Dict[str, Any]:
        return {'name': self.server.name, 'ip_address': self.server.ip_address}


class UpdateServerRequest(CreateServerRequest):
    method = Method.PUT

    def resolve_endpoint(self) -> str:
        return f"/servers/{self.server.id}"
