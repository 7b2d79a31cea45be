"""Pytest configuration - loads .env for integration tests, fakes the transport for unit tests."""

import json
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from printnode_cli.core.client import APIClient
from printnode_cli.core.credentials import ApiKeyCredentials
from printnode_cli.core.message import Response, ServerRequest
from printnode_cli.sdk import PrintNodeClient

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

TEST_API_KEY = "test-api-key"
TEST_BASE_URL = "https://api.test.printnode.invalid"


def make_response(status: int = 200, body: Any = None, reason: str = "", raw: str | None = None) -> Response:
    """Build a Response the way a transport would. Non-string bodies are JSON encoded."""
    if raw is None:
        raw = json.dumps(body) if body is not None else ""
    header_block = f"HTTP/1.1 {status} {reason}".rstrip() + "\r\nContent-Type: application/json\r\n\r\n"
    return Response.from_raw(header_block, raw)


class FakeTransport:
    """Records every request and answers from a queue of prepared responses."""

    def __init__(self) -> None:
        self.calls: list[tuple[ServerRequest, list[tuple[str, str]], float]] = []
        self.responses: list[Response] = []

    def queue(self, status: int = 200, body: Any = None, reason: str = "", raw: str | None = None) -> None:
        self.responses.append(make_response(status, body, reason, raw))

    def send(self, request: ServerRequest, headers: list[tuple[str, str]], timeout: float) -> Response:
        request.timestamp = 1000.0
        self.calls.append((request, headers, timeout))
        if not self.responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.uri}")
        response = self.responses.pop(0)
        if response.timestamp is None:
            response.timestamp = 1000.25
        return response

    @property
    def last(self) -> ServerRequest:
        return self.calls[-1][0]

    @property
    def last_headers(self) -> list[tuple[str, str]]:
        return self.calls[-1][1]

    @property
    def paths(self) -> list[str]:
        return [f"{r.method} {r.uri.removeprefix(TEST_BASE_URL)}" for r, _h, _t in self.calls]


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def api(transport: FakeTransport) -> APIClient:
    """Low-level client wired to the fake transport."""
    return APIClient(
        credentials=ApiKeyCredentials(TEST_API_KEY),
        base_url=TEST_BASE_URL,
        transport=transport,
    )


@pytest.fixture
def client(transport: FakeTransport) -> PrintNodeClient:
    """SDK client wired to the fake transport."""
    return PrintNodeClient(api_key=TEST_API_KEY, base_url=TEST_BASE_URL, transport=transport)
