"""APIConnect - A Python HTTP API client that maps responses to DTOs."""

# Import key classes for easier access
from .connector import Connector
from .request import Request, Method, BodyFormat
from .models import HTTPRequest, HTTPResponse
from .contracts import WithResponse, HasResponse
from .exceptions import (
    APIError,
    ClientError,
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    UnprocessableEntityError,
    RateLimitError,
    ServerError,
    LogicError,
)
from .mock import MockClient, MockResponse
from .config import ConnectorConfig, load_connector_configs
from .base import RetryConfig

__version__ = "0.1.0"
__author__ = "Moises-Tohias"
