"""
HTTP message model shared by outbound requests and API responses.

A message carries a body, the header block actually sent or received by the
transport, and a timestamp. Each of those is written once; the difference
between a request and a response timestamp is the call latency.
"""

import json
import re
from typing import Any

from printnode_cli.core.entity import hydrate
from printnode_cli.core.errors import InvalidArgumentError, SerializationError

METHOD_GET = "GET"
METHOD_HEAD = "HEAD"
METHOD_POST = "POST"
METHOD_PUT = "PUT"
METHOD_DELETE = "DELETE"
METHOD_PATCH = "PATCH"
METHOD_OPTIONS = "OPTIONS"

METHODS = (
    METHOD_GET,
    METHOD_HEAD,
    METHOD_POST,
    METHOD_PUT,
    METHOD_DELETE,
    METHOD_PATCH,
    METHOD_OPTIONS,
)

CODE_OK = 200
CODE_CREATED = 201
CODE_NO_CONTENT = 204

_STATUS_LINE = re.compile(r"^HTTP/(\d(?:\.\d)?)\s+(\d{3})(?:\s+(.*))?$")
_CHUNKED = re.compile(r"Transfer-Encoding:\s*chunked\r?\n", re.IGNORECASE)
_PROXY_ESTABLISHED = re.compile(r"HTTP/\d(?:\.\d)?\s*200\s*Connection\s*established\r?\n\r?\n", re.IGNORECASE)
_BLOCK_SEPARATOR = re.compile(r"(?:\r?\n){2}")


class Message:
    """Body, actual headers and timestamp, each set at most once."""

    def __init__(self) -> None:
        self._body: str | None = None
        self._actual_headers: str | None = None
        self._timestamp: float | None = None

    @property
    def body(self) -> str | None:
        return self._body

    @body.setter
    def body(self, value: str | None) -> None:
        if self._body is not None:
            raise InvalidArgumentError("Message body is already set")
        if value is not None and not isinstance(value, str):
            raise InvalidArgumentError("Message body must be a string")
        self._body = value

    @property
    def actual_headers(self) -> str | None:
        """The header block exactly as the transport sent or received it."""
        return self._actual_headers

    @actual_headers.setter
    def actual_headers(self, value: str) -> None:
        if self._actual_headers is not None:
            raise InvalidArgumentError("Actual headers are already set; use append_actual_headers")
        self._actual_headers = value

    def append_actual_headers(self, extra: str) -> None:
        """Append headers observed later without touching the original block."""
        if self._actual_headers is None:
            self._actual_headers = extra
            return
        original = self._actual_headers.rstrip("\r\n")
        self._actual_headers = f"{original}\r\n{extra}"

    @property
    def timestamp(self) -> float | None:
        """Unix timestamp with sub-second precision."""
        return self._timestamp

    @timestamp.setter
    def timestamp(self, value: float) -> None:
        if self._timestamp is not None:
            raise InvalidArgumentError("Message timestamp is already set")
        self._timestamp = float(value)


class ServerRequest(Message):
    """An outbound request to the API."""

    def __init__(self, uri: str, method: str | None = None):
        super().__init__()
        method = (method or METHOD_GET).upper()
        if method not in METHODS:
            raise InvalidArgumentError(f"Unsupported HTTP method: {method}")
        self.uri = uri
        self.method = method

    def __repr__(self) -> str:
        return f"ServerRequest({self.method} {self.uri})"


class Response(Message):
    """An API response: status, reason phrase, raw headers and body."""

    def __init__(self, status_code: int = CODE_OK, reason_phrase: str = ""):
        super().__init__()
        if isinstance(status_code, bool) or not isinstance(status_code, int) or not 100 <= status_code <= 599:
            raise InvalidArgumentError("Code is expected to be int and between 100 and 599")
        if not isinstance(reason_phrase, str):
            raise InvalidArgumentError("Reason phrase expected to be type of string")
        self._status_code = status_code
        self._reason_phrase = reason_phrase

    def __repr__(self) -> str:
        return f"Response({self._status_code} {self._reason_phrase})".rstrip()

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def reason_phrase(self) -> str:
        return self._reason_phrase

    @property
    def content(self) -> str | None:
        return self.body

    @property
    def headers(self) -> list[str]:
        """Header lines, status line first."""
        if not self.actual_headers:
            return []
        return [line for line in self.actual_headers.split("\r\n") if line]

    @property
    def status_message(self) -> str:
        """The reason phrase as written in the stored status line."""
        for line in self.headers:
            match = _STATUS_LINE.match(line)
            if match:
                return match.group(3) or ""
        raise InvalidArgumentError("Could not determine HTTP status from API response")

    def decoded_content(self) -> Any:
        """Parsed JSON body, or None when there is no body."""
        if not self.body:
            return None
        return _decode(self.body)

    def decoded_as_entity(self, entity_type: type) -> Any:
        """Hydrate the body as entity_type (or a list of them)."""
        content = _decode(self.body) if self.body else {}
        return hydrate(entity_type, content)

    @classmethod
    def from_raw(cls, header_block: str, body: str | None = None) -> "Response":
        """
        Build a response from the raw header block a transport received.

        Proxy "Connection established" preambles and interim responses
        (100 Continue, redirects) are dropped; only the final header block
        is kept.
        """
        block = _CHUNKED.sub("", header_block)
        block = _PROXY_ESTABLISHED.sub("", block)
        blocks = [b for b in _BLOCK_SEPARATOR.split(block.strip("\r\n")) if b.strip()]
        final = blocks[-1] if blocks else ""
        lines = re.split(r"\r?\n", final)

        match = _STATUS_LINE.match(lines[0]) if lines else None
        if not match:
            raise InvalidArgumentError("Could not determine HTTP status from API response")

        response = cls(int(match.group(2)), (match.group(3) or "").strip())
        response.actual_headers = "\r\n".join(lines) + "\r\n\r\n"
        response.body = body if body is not None else ""
        return response


def _decode(body: str) -> Any:
    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        raise SerializationError(f"Invalid JSON response: {e}") from e
