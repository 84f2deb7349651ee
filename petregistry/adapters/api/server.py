"""HTTP server adapter for the registry.

Provides a simple async HTTP server using Python's built-in http.server
module and asyncio for handling JSON API requests.

Routes:
    POST /api/<operation>  JSON body with the operation's arguments
    GET  /health           Public health check

The caller identity is read from the X-Caller-Identity header.
Supports optional API key authentication via the Authorization header
(Bearer token) or X-API-Key.
"""

import asyncio
import hmac
import json
import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any

from petregistry.adapters.dispatch import (
    UnknownOperationError,
    dispatch,
    error_envelope,
)
from petregistry.core.errors import RegistryError
from petregistry.core.ports import RegistryPort

logger = logging.getLogger(__name__)

IDENTITY_HEADER = "X-Caller-Identity"
MAX_BODY_SIZE = 1024 * 1024
REQUEST_TIMEOUT_SECONDS = 30

ERROR_STATUS_CODES = {
    "NotFound": 404,
    "InvalidPayload": 409,
    "ValidationError": 422,
}


def status_for_error(error: RegistryError) -> int:
    """Map a registry error kind to an HTTP status code."""
    return ERROR_STATUS_CODES.get(error.kind, 400)


async def handle_api_request(
    registry: RegistryPort,
    operation: str,
    data: dict[str, Any],
    caller: str | None,
) -> tuple[int, dict[str, Any]]:
    """Run one API operation and build the (status, body) response.

    Args:
        registry: RegistryPort implementation.
        operation: Operation name taken from the request path.
        data: Parsed JSON body.
        caller: Value of the identity header, if any.

    Returns:
        HTTP status code and JSON response body.
    """
    try:
        result = await dispatch(registry, operation, data, caller=caller)
    except UnknownOperationError as e:
        return 404, error_envelope(operation, "UnknownOperation", str(e))
    except RegistryError as e:
        logger.info(
            f"Request {operation} rejected: {e.kind}",
            extra={"operation": operation, "detail": e.detail},
        )
        return status_for_error(e), {
            "status": "error",
            "operation": operation,
            "error": e.to_dict(),
        }
    except ValueError as e:
        return 400, error_envelope(operation, "BadRequest", str(e))

    return 200, {"status": "success", "operation": operation, "data": result}


def make_registry_handler(
    registry: RegistryPort,
    event_loop: asyncio.AbstractEventLoop,
    api_key: str | None,
    require_auth: bool,
) -> type[BaseHTTPRequestHandler]:
    """Factory to create a RegistryHTTPHandler class with instance-specific state.

    Creates a handler class with closure-captured dependencies instead
    of using class-level mutable state.

    Args:
        registry: RegistryPort implementation to serve
        event_loop: Event loop the registry runs on
        api_key: Optional API key for authentication
        require_auth: Whether authentication is required

    Returns:
        A RegistryHTTPHandler class configured with the provided dependencies
    """

    class RegistryHTTPHandler(BaseHTTPRequestHandler):
        """HTTP request handler for registry endpoints."""

        def _check_auth(self) -> bool:
            """Check if request is authenticated.

            Supports two authentication methods:
            1. Authorization: Bearer <api_key>
            2. X-API-Key: <api_key>

            Returns:
                True if authenticated or auth not required, False otherwise.
            """
            if not require_auth:
                return True

            if not api_key:
                return False

            auth_header = self.headers.get("Authorization", "")
            if auth_header.startswith("Bearer "):
                return hmac.compare_digest(auth_header[7:], api_key)

            api_key_header = self.headers.get("X-API-Key", "")
            if api_key_header:
                return hmac.compare_digest(api_key_header, api_key)

            return False

        def do_POST(self) -> None:
            """Handle POST requests to /api/<operation>."""
            if self.path == "/health":
                self._send_json(200, {"status": "healthy"})
                return

            if not self.path.startswith("/api/"):
                self.send_error(404, "Not found")
                return

            operation = self.path[len("/api/"):].strip("/")

            if not self._check_auth():
                self._send_json(
                    401,
                    error_envelope(
                        operation,
                        "Unauthorized",
                        "Invalid or missing API key",
                    ),
                )
                return

            try:
                content_length = int(self.headers.get("Content-Length", 0))
            except ValueError:
                content_length = -1
            if content_length < 0:
                self._send_json(
                    400,
                    error_envelope(operation, "BadRequest", "Invalid Content-Length"),
                )
                return
            if content_length > MAX_BODY_SIZE:
                self._send_json(
                    413,
                    error_envelope(
                        operation, "PayloadTooLarge", "Request body too large"
                    ),
                )
                return

            body = self.rfile.read(content_length) if content_length > 0 else b""
            try:
                data = json.loads(body) if body else {}
            except json.JSONDecodeError:
                self._send_json(
                    400, error_envelope(operation, "BadRequest", "Invalid JSON body")
                )
                return
            if not isinstance(data, dict):
                self._send_json(
                    400,
                    error_envelope(
                        operation, "BadRequest", "JSON body must be an object"
                    ),
                )
                return

            caller = self.headers.get(IDENTITY_HEADER)

            future = asyncio.run_coroutine_threadsafe(
                handle_api_request(registry, operation, data, caller), event_loop
            )
            try:
                status, payload = future.result(timeout=REQUEST_TIMEOUT_SECONDS)
            except TimeoutError:
                # Stop the operation so nothing is stored after the client gave up
                future.cancel()
                logger.error(
                    f"Request {operation} timed out after "
                    f"{REQUEST_TIMEOUT_SECONDS}s and was cancelled"
                )
                self._send_json(
                    504,
                    error_envelope(operation, "Timeout", "Request timed out"),
                )
                return
            except Exception as e:
                # Log full exception server-side; return generic error to client
                logger.error(f"Error handling request {operation}: {e}", exc_info=True)
                self._send_json(
                    500,
                    error_envelope(operation, "InternalError", "Internal server error"),
                )
                return

            self._send_json(status, payload)

        def do_GET(self) -> None:
            """Handle GET requests. Health check is public (no auth required)."""
            if self.path == "/health":
                self._send_json(200, {"status": "healthy"})
            else:
                self.send_error(404, "Not found")

        def _send_json(self, status: int, data: dict[str, Any]) -> None:
            """Send JSON response."""
            encoded = json.dumps(data).encode()
            self.send_response(status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(encoded)))
            self.end_headers()
            self.wfile.write(encoded)

        def log_message(self, format: str, *args: Any) -> None:
            """Log HTTP request."""
            logger.debug(f"HTTP {self.client_address[0]}: {format % args}")

    return RegistryHTTPHandler


class RegistryHTTPServer:
    """Registry HTTP server adapter.

    Serves the registry's operations as a JSON API. Optionally requires
    API key authentication for /api endpoints.
    """

    def __init__(
        self,
        registry: RegistryPort,
        host: str = "0.0.0.0",
        port: int = 8080,
        api_key: str | None = None,
        require_auth: bool = False,
    ):
        """Initialize the HTTP server.

        Args:
            registry: RegistryPort implementation to serve.
            host: Host to listen on (default 0.0.0.0).
            port: Port to listen on (default 8080).
            api_key: Optional API key for authentication.
            require_auth: Whether to require authentication (default False).
                         If True, api_key must be provided.

        Raises:
            ValueError: If require_auth is True but no api_key is given.
        """
        if require_auth and not api_key:
            raise ValueError(
                "HTTP server configured with require_auth=True but no API key provided"
            )

        self.registry = registry
        self.host = host
        self.port = port
        self.api_key = api_key
        self.require_auth = require_auth
        self.server: ThreadingHTTPServer | None = None
        self._server_task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        """Start the HTTP server."""
        if self.require_auth:
            logger.info(
                f"Starting registry HTTP server on {self.host}:{self.port} "
                "(with API key authentication)"
            )
        else:
            logger.info(f"Starting registry HTTP server on {self.host}:{self.port}")

        handler_class = make_registry_handler(
            registry=self.registry,
            event_loop=asyncio.get_running_loop(),
            api_key=self.api_key,
            require_auth=self.require_auth,
        )

        self.server = ThreadingHTTPServer((self.host, self.port), handler_class)
        self._server_task = asyncio.create_task(self._run_server())
        logger.info("Registry HTTP server started")

    async def _run_server(self) -> None:
        """Run the HTTP server loop in a thread pool."""
        if not self.server:
            return

        try:
            await asyncio.to_thread(self.server.serve_forever)
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"Registry HTTP server error: {e}", exc_info=True)

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self.server:
            self.server.shutdown()
            self.server.server_close()
        if self._server_task:
            self._server_task.cancel()
            try:
                await self._server_task
            except asyncio.CancelledError:
                pass
        logger.info("Registry HTTP server stopped")
