"""
Connectors describe one API and send requests to it.

A connector owns everything shared by the API's endpoints: base URL,
headers, authentication, timeouts, retries, middleware and the policy that
decides whether a response counts as failed. Requests are sent with
``send`` (sync) or ``send_async``; both return an ``HTTPResponse`` for every
HTTP status and only raise on transport failures.
"""

import logging
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlencode

from .base import AsyncHTTPClient, ConnectionPool, RetryConfig, SyncHTTPClient
from .config import ConnectorConfig
from .middlewares import BaseMiddleware, LoggingMiddleware
from .models import HTTPRequest, HTTPResponse
from .request import Method, Request
from .utils import join_url, merge_dicts, merge_headers

logger = logging.getLogger(__name__)

FailurePredicate = Callable[[HTTPResponse], bool]


class Connector:
    """Base class for API connectors."""

    base_url: str = ""
    timeout: float = 30.0
    max_retries: int = 0
    user_agent: str = "APIConnect/0.1.0"

    def __init__(self, *,
                 http_client: Optional[SyncHTTPClient] = None,
                 async_http_client: Optional[AsyncHTTPClient] = None,
                 middleware: Optional[List[BaseMiddleware]] = None,
                 connection_pool: Optional[ConnectionPool] = None,
                 retry_config: Optional[RetryConfig] = None,
                 mock_client=None,
                 failure_predicate: Optional[FailurePredicate] = None):
        self.headers: Dict[str, str] = {}
        self.failure_predicate = failure_predicate
        self.mock_client = mock_client

        self._middleware = middleware
        self._connection_pool = connection_pool
        self._retry_config = retry_config
        self._authorization: Optional[str] = None

        # Use provided clients or create our own on first send
        self._http_client = http_client
        self._async_http_client = async_http_client
        self._owns_client = http_client is None
        self._owns_async_client = async_http_client is None

    @classmethod
    def from_config(cls, config: ConnectorConfig, api_key: Optional[str] = None, **kwargs) -> 'Connector':
        """Build a connector from a ``ConnectorConfig``."""
        connector = cls(**kwargs)
        connector.base_url = config.base_url
        connector.timeout = config.timeout
        connector.max_retries = config.max_retries
        connector.user_agent = config.user_agent
        connector.headers.update(config.default_headers)

        key = config.get_api_key(api_key)
        if key:
            connector.authenticate(key, config.auth_type)
        return connector

    # Hooks
    def resolve_base_url(self) -> str:
        return self.base_url

    def default_headers(self) -> Dict[str, str]:
        return {}

    def default_query(self) -> Dict[str, Any]:
        return {}

    def default_config(self) -> Dict[str, Any]:
        return {}

    def default_middleware(self) -> List[BaseMiddleware]:
        return [LoggingMiddleware()]

    def create_dto_from_response(self, response: HTTPResponse) -> Any:
        """Fallback DTO mapping, used when the request's own mapping returns ``None``."""
        return None

    def has_request_failed(self, response: HTTPResponse) -> Optional[bool]:
        """Apply the injected failure predicate; ``None`` lets the status code decide."""
        if self.failure_predicate is None:
            return None
        return self.failure_predicate(response)

    def authenticate(self, token: str, auth_type: str = "Bearer") -> 'Connector':
        """Send ``Authorization: <auth_type> <token>`` with every request.

        Requests that set their own ``Authorization`` header keep it.
        """
        self._authorization = f"{auth_type} {token}"
        logger.debug(f"{type(self).__name__} authenticates with {auth_type}")
        return self

    # Sending
    def create_pending_request(self, request: Request) -> HTTPRequest:
        """Merge connector and request settings into a ready-to-send ``HTTPRequest``."""
        headers = merge_headers(
            {'User-Agent': self.user_agent},
            {'Authorization': self._authorization} if self._authorization else None,
            self.default_headers(),
            self.headers,
            request.headers,
        )
        query = merge_dicts(self.default_query(), request.query)
        config = merge_dicts({'timeout': self.timeout}, self.default_config(), request.config)

        body, content_type = request.encode_body()
        if content_type and not any(name.lower() == 'content-type' for name in headers):
            headers['Content-Type'] = content_type

        url = join_url(self.resolve_base_url(), request.resolve_endpoint())
        if query:
            url += ('&' if '?' in url else '?') + urlencode(query, doseq=True)

        return HTTPRequest(
            method=Method(request.method).value,
            url=url,
            headers=headers,
            body=body,
            timeout=float(config['timeout']),
            api_request=request,
            connector=self,
        )

    def send(self, request: Request) -> HTTPResponse:
        """Send a request synchronously."""
        return self._get_http_client().send(self.create_pending_request(request))

    async def send_async(self, request: Request) -> HTTPResponse:
        """Send a request asynchronously."""
        return await self._get_async_http_client().send(self.create_pending_request(request))

    def _client_options(self) -> Dict[str, Any]:
        middleware = list(self._middleware) if self._middleware is not None else self.default_middleware()
        return {
            'connection_pool': self._connection_pool,
            'retry_config': self._retry_config or RetryConfig(max_retries=self.max_retries),
            'middleware': middleware,
            'transport': self.mock_client,
        }

    def _get_http_client(self) -> SyncHTTPClient:
        if self._http_client is None:
            self._http_client = SyncHTTPClient(**self._client_options())
        return self._http_client

    def _get_async_http_client(self) -> AsyncHTTPClient:
        if self._async_http_client is None:
            self._async_http_client = AsyncHTTPClient(**self._client_options())
        return self._async_http_client

    def close(self):
        """Close the connector and cleanup owned clients."""
        if self._owns_client and self._http_client is not None:
            self._http_client.close()

    async def aclose(self):
        self.close()
        if self._owns_async_client and self._async_http_client is not None:
            await self._async_http_client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
