"""
Core layer - Entities, messages, transport and the API client.

This layer provides:
- Typed entity dataclasses with strict JSON hydration
- Credentials and the HTTP message model
- A pluggable transport with a urllib default
- The low-level APIClient that routes, authenticates and decodes requests
"""

from printnode_cli.core.client import APIClient, apply_offset_limit, format_set
from printnode_cli.core.credentials import (
    ApiKeyCredentials,
    ChildAccountSelector,
    Credentials,
    UsernamePasswordCredentials,
)
from printnode_cli.core.entity import Entity, hydrate
from printnode_cli.core.errors import (
    HTTPError,
    InvalidArgumentError,
    MissingChildAccountError,
    NoSuchOperationError,
    PrintNodeError,
    SerializationError,
    TransportError,
    TypeMismatchError,
    UnexpectedFieldError,
)
from printnode_cli.core.message import Response, ServerRequest
from printnode_cli.core.transport import Transport, TransportConfig, UrllibTransport
from printnode_cli.core.types import (
    Account,
    ApiKey,
    ChildAccount,
    Client,
    Computer,
    Download,
    Printer,
    PrinterCapabilities,
    PrintJob,
    PrintJobState,
    Scale,
    Tag,
    Whoami,
)

__all__ = [
    "APIClient",
    "Account",
    "ApiKey",
    "ApiKeyCredentials",
    "ChildAccount",
    "ChildAccountSelector",
    "Client",
    "Computer",
    "Credentials",
    "Download",
    "Entity",
    "HTTPError",
    "InvalidArgumentError",
    "MissingChildAccountError",
    "NoSuchOperationError",
    "PrintJob",
    "PrintJobState",
    "PrintNodeError",
    "Printer",
    "PrinterCapabilities",
    "Response",
    "Scale",
    "SerializationError",
    "ServerRequest",
    "Tag",
    "Transport",
    "TransportConfig",
    "TransportError",
    "TypeMismatchError",
    "UnexpectedFieldError",
    "UrllibTransport",
    "UsernamePasswordCredentials",
    "Whoami",
    "apply_offset_limit",
    "format_set",
    "hydrate",
]
