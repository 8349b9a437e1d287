import asyncio, time, ssl, socket, http.client, threading, random
import logging
from contextlib import contextmanager

from typing import Callable, Dict, List, Optional, Tuple

from .exceptions import *
from .middlewares import BaseMiddleware
from .models import HTTPRequest, HTTPResponse

logger = logging.getLogger(__name__)

# A transport takes a ready request and returns (status, headers, body).
Transport = Callable[[HTTPRequest], Tuple[int, Dict[str, str], bytes]]


# Connection Management
class ConnectionPool:
    """Thread-safe HTTP connection pool."""

    def __init__(self, max_connections_per_host: int = 10):
        self.max_connections_per_host = max_connections_per_host
        self._connections: Dict[str, List[http.client.HTTPConnection]] = {}
        self._lock = threading.Lock()

    def _get_pool_key(self, parsed_url) -> str:
        """Get the pool key for a URL."""
        return f"{parsed_url.scheme}://{parsed_url.netloc}"

    def _create_connection(self, parsed_url, timeout: float) -> http.client.HTTPConnection:
        """Create a new connection for the given URL."""
        if parsed_url.scheme == 'https':
            return http.client.HTTPSConnection(
                parsed_url.hostname,
                parsed_url.port,
                timeout=timeout,
                context=ssl.create_default_context()
            )
        return http.client.HTTPConnection(parsed_url.hostname, parsed_url.port, timeout=timeout)

    @contextmanager
    def get_connection(self, parsed_url, timeout: float = 30.0):
        """Borrow a connection; it goes back to the pool only if the block succeeds."""
        pool_key = self._get_pool_key(parsed_url)
        connection = None

        with self._lock:
            if self._connections.get(pool_key):
                connection = self._connections[pool_key].pop()

        if connection is None:
            connection = self._create_connection(parsed_url, timeout)
        connection.timeout = timeout

        try:
            yield connection
        except BaseException:
            connection.close()
            raise

        with self._lock:
            idle = self._connections.setdefault(pool_key, [])
            if len(idle) < self.max_connections_per_host:
                idle.append(connection)
            else:
                connection.close()

    def close_all(self):
        """Close all connections in the pool."""
        with self._lock:
            for connections in self._connections.values():
                for conn in connections:
                    conn.close()
            self._connections.clear()

# Retry Logic
class RetryConfig:
    """Configuration for retry behavior."""

    RETRYABLE_STATUS_CODES = (408, 429)

    def __init__(self, max_retries: int = 3, base_delay: float = 1.0,
                 backoff_factor: float = 2.0, jitter: bool = True):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.backoff_factor = backoff_factor
        self.jitter = jitter

    def should_retry(self, attempt: int, error: Exception) -> bool:
        """Determine if a request should be retried."""
        if attempt >= self.max_retries:
            return False

        if isinstance(error, (TimeoutError, ConnectionError, RetryableError, RateLimitError)):
            return True

        if isinstance(error, APIError) and error.status_code:
            return error.status_code in self.RETRYABLE_STATUS_CODES or error.status_code >= 500

        return False

    def get_delay(self, attempt: int, error: Optional[Exception] = None) -> float:
        """Calculate the delay before retrying."""
        # Retry-After wins over backoff
        if isinstance(error, APIError) and error.retry_after:
            return error.retry_after

        delay = self.base_delay * (self.backoff_factor ** attempt)

        if self.jitter:
            delay = delay * (0.5 + random.random() * 0.5)

        return delay

# Core Request Execution Logic
class RequestExecutor:
    """
    Core request execution logic shared between the sync and async clients.

    Error statuses are not raised: the final ``HTTPResponse`` is handed back
    whatever its status, so callers can inspect it, map it to a DTO or throw.
    Only transport failures surface as exceptions, once retries run out.
    """

    def __init__(self, connection_pool: Optional[ConnectionPool] = None,
                 retry_config: Optional[RetryConfig] = None,
                 middleware: Optional[List[BaseMiddleware]] = None,
                 transport: Optional[Transport] = None):
        self.connection_pool = connection_pool or ConnectionPool()
        self.retry_config = retry_config or RetryConfig()
        self.middleware = middleware or []
        self.transport = transport or self._sync_request
        self._closed = False

    async def execute_request(self, request: HTTPRequest) -> HTTPResponse:
        """Execute an HTTP request with retry logic and middleware."""
        if self._closed:
            raise RuntimeError("Client is closed")

        for middleware in self.middleware:
            request = await middleware.process_request(request)

        last_error = None
        for attempt in range(self.retry_config.max_retries + 1):
            try:
                response = await self._execute_single_request(request)
            except Exception as error:
                for middleware in self.middleware:
                    error = await middleware.process_error(error, request)

                last_error = error
                if not self.retry_config.should_retry(attempt, error):
                    break
                await self._wait_before_retry(attempt, error)
                continue

            status_error = self._status_error(response)
            if status_error is not None and self.retry_config.should_retry(attempt, status_error):
                await self._wait_before_retry(attempt, status_error)
                continue

            for middleware in reversed(self.middleware):
                response = await middleware.process_response(response)
            return response

        if last_error is not None:
            raise last_error
        raise RuntimeError("No attempts were made")

    async def _wait_before_retry(self, attempt: int, error: Exception):
        delay = self.retry_config.get_delay(attempt, error)
        logger.debug(f"Retrying request in {delay:.2f}s (attempt {attempt + 1}): {error}")
        await asyncio.sleep(delay)

    @staticmethod
    def _status_error(response: HTTPResponse) -> Optional[APIError]:
        if response.status_code < 400:
            return None
        exc_class = exception_class_for_status(response.status_code)
        return exc_class(
            f"HTTP error: {response.status_code}",
            status_code=response.status_code,
            headers=response.headers,
            response=response,
        )

    async def _execute_single_request(self, request: HTTPRequest) -> HTTPResponse:
        """Execute a single HTTP request."""
        start_time = time.time()
        loop = asyncio.get_running_loop()

        status_code, headers, body = await loop.run_in_executor(None, self.transport, request)

        return HTTPResponse(
            status_code=status_code,
            headers=headers,
            body=body,
            request=request,
            elapsed=time.time() - start_time
        )

    def _sync_request(self, request: HTTPRequest) -> Tuple[int, Dict[str, str], bytes]:
        """Execute synchronous HTTP request using connection pool."""
        parsed_url = request.parsed_url
        path = parsed_url.path or '/'
        if parsed_url.query:
            path += '?' + parsed_url.query

        try:
            with self.connection_pool.get_connection(parsed_url, request.timeout) as conn:
                conn.putrequest(request.method, path)

                for header_name, header_value in request.headers.items():
                    conn.putheader(header_name, header_value)

                if request.body:
                    conn.putheader('Content-Length', str(len(request.body)))
                    conn.endheaders()
                    conn.send(request.body)
                else:
                    conn.endheaders()

                response = conn.getresponse()
                body = response.read()
                return response.status, dict(response.headers), body

        except socket.timeout:
            raise TimeoutError(f"Request timed out after {request.timeout} seconds")
        except (socket.error, http.client.HTTPException) as e:
            raise ConnectionError(f"Connection error: {str(e)}")

    def close(self):
        """Close the executor and all connections."""
        self._closed = True
        self.connection_pool.close_all()

# Synchronous Client
class SyncHTTPClient:
    """Synchronous HTTP client with connection pooling, retry logic, and middleware."""

    def __init__(self, connection_pool: Optional[ConnectionPool] = None,
                 retry_config: Optional[RetryConfig] = None,
                 middleware: Optional[List[BaseMiddleware]] = None,
                 transport: Optional[Transport] = None):
        self._executor = RequestExecutor(connection_pool, retry_config, middleware, transport)

    def send(self, request: HTTPRequest) -> HTTPResponse:
        """Send a request synchronously with retry logic."""
        return self._run_async(self._executor.execute_request(request))

    def _run_async(self, coro):
        """Run an async coroutine in sync context."""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # No event loop running, we can use asyncio.run
            return asyncio.run(coro)

        # Already inside an event loop: run on a fresh loop in a worker thread
        import concurrent.futures
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
            return executor.submit(asyncio.run, coro).result()

    def close(self):
        """Close the client and all connections."""
        self._executor.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

# Asynchronous Client
class AsyncHTTPClient:
    """Asynchronous HTTP client with connection pooling, retry logic, and middleware."""

    def __init__(self, connection_pool: Optional[ConnectionPool] = None,
                 retry_config: Optional[RetryConfig] = None,
                 middleware: Optional[List[BaseMiddleware]] = None,
                 transport: Optional[Transport] = None):
        self._executor = RequestExecutor(connection_pool, retry_config, middleware, transport)

    async def send(self, request: HTTPRequest) -> HTTPResponse:
        """Send a request asynchronously with retry logic."""
        return await self._executor.execute_request(request)

    async def close(self):
        """Close the client and all connections."""
        self._executor.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
