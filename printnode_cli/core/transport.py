"""
HTTP transport used by the API client.

The client only depends on the Transport protocol: send one request, get a
Response back. UrllibTransport is the default implementation.
"""

import http.client
import ssl
import time
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Protocol

from loguru import logger

from printnode_cli.core.errors import SerializationError, TransportError
from printnode_cli.core.message import METHOD_GET, METHOD_HEAD, Response, ServerRequest

DEFAULT_USER_AGENT = "printnode-cli/0.1.0"


class Transport(Protocol):
    """Sends a single request and returns the parsed response."""

    def send(
        self,
        request: ServerRequest,
        headers: list[tuple[str, str]],
        timeout: float,
    ) -> Response:
        """
        Perform the request.

        Must set request.timestamp right before dispatch, request.actual_headers
        to the header block actually transmitted, and the response timestamp as
        soon as the response arrives. HTTP error statuses are returned as
        responses; only failures to complete the exchange raise TransportError.
        """
        ...


@dataclass(frozen=True)
class TransportConfig:
    """Settings fixed when a transport is created."""

    user_agent: str = DEFAULT_USER_AGENT
    verify_tls: bool = True
    # None uses the environment's proxy settings, {} disables proxies
    proxies: dict[str, str] | None = None
    default_content_type: str = "application/json"


class UrllibTransport:
    """Transport built on urllib.request."""

    def __init__(self, config: TransportConfig | None = None):
        self.config = config or TransportConfig()
        handlers: list[urllib.request.BaseHandler] = []
        if self.config.proxies is not None:
            handlers.append(urllib.request.ProxyHandler(self.config.proxies))
        if not self.config.verify_tls:
            context = ssl.create_default_context()
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
            handlers.append(urllib.request.HTTPSHandler(context=context))
        self._opener = urllib.request.build_opener(*handlers)

    def send(
        self,
        request: ServerRequest,
        headers: list[tuple[str, str]],
        timeout: float,
    ) -> Response:
        data = None
        if request.method not in (METHOD_GET, METHOD_HEAD):
            data = (request.body or "").encode("utf-8")

        req = urllib.request.Request(request.uri, data=data, method=request.method)
        req.add_header("User-Agent", self.config.user_agent)
        if data is not None:
            req.add_header("Content-Type", self.config.default_content_type)
        for name, value in headers:
            # An empty value only suppresses the header (e.g. "Expect:")
            if value == "":
                continue
            req.add_header(name, value)

        request.timestamp = time.time()
        try:
            resp = self._opener.open(req, timeout=timeout)
        except urllib.error.HTTPError as e:
            # Error statuses are responses; the body is read below
            resp = e
        except (http.client.HTTPException, OSError) as e:
            raise _transport_error(request, e, timeout) from e

        received_at = time.time()
        request.actual_headers = _sent_headers(req)
        try:
            return self._build_response(resp, received_at)
        except (http.client.HTTPException, OSError) as e:
            raise _transport_error(request, e, timeout) from e
        finally:
            resp.close()

    def _build_response(self, resp, received_at: float) -> Response:
        version = getattr(resp, "version", 11)
        status = resp.status if hasattr(resp, "status") else resp.code
        reason = resp.reason or ""
        status_line = f"HTTP/{'1.0' if version == 10 else '1.1'} {status} {reason}".rstrip()
        header_lines = [f"{name}: {value}" for name, value in resp.headers.items()]
        header_block = "\r\n".join([status_line, *header_lines]) + "\r\n\r\n"

        raw = resp.read()
        try:
            body = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SerializationError(f"Response body is not valid UTF-8: {e}") from e

        response = Response.from_raw(header_block, body)
        response.timestamp = received_at
        return response


def _transport_error(request: ServerRequest, error: Exception, timeout: float) -> TransportError:
    """Map a failure raised while sending or reading onto TransportError."""
    reason = error.reason if isinstance(error, urllib.error.URLError) else error
    if isinstance(reason, TimeoutError):
        logger.debug("Timeout for {} {} after {}s", request.method, request.uri, timeout)
        return TransportError(f"Request timed out after {timeout} seconds", code="timeout", request=request)

    logger.debug("Transport failure for {} {}: {}", request.method, request.uri, reason)
    if isinstance(error, urllib.error.URLError):
        return TransportError(f"Connection error: {reason}", code=_error_code(reason), request=request)
    return TransportError(str(error) or type(error).__name__, code=_error_code(error), request=request)


def _sent_headers(req: urllib.request.Request) -> str:
    """Reconstruct the request header block, with credentials redacted."""
    parsed = urllib.parse.urlsplit(req.full_url)
    target = parsed.path or "/"
    if parsed.query:
        target = f"{target}?{parsed.query}"
    lines = [f"{req.get_method()} {target} HTTP/1.1"]
    for name, value in req.header_items():
        if name.lower() == "authorization":
            value = value.split(" ", 1)[0] + " ***"
        lines.append(f"{name}: {value}")
    return "\r\n".join(lines) + "\r\n\r\n"


def _error_code(reason: object) -> int | str | None:
    errno = getattr(reason, "errno", None)
    if errno is not None:
        return errno
    if isinstance(reason, str):
        return None
    return type(reason).__name__
