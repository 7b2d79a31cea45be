"""
Entity types for the PrintNode API.

Each dataclass declares exactly the properties the API returns for that
resource; hydration rejects anything else.
"""

import base64
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from printnode_cli.core.entity import Entity, encode_json

# =============================================================================
# Account Types
# =============================================================================


@dataclass
class Account(Entity):
    """A PrintNode account, as created or returned for a child account."""

    id: int | None = None
    firstname: str | None = None
    lastname: str | None = None
    email: str | None = None
    password: str | None = None
    creator_ref: str | None = None
    creator_email: str | None = None
    can_create_sub_accounts: bool | None = None
    child_accounts: list[Any] | None = None
    credits: int | None = None
    num_computers: int | None = None
    total_prints: int | None = None
    versions: list[Any] | None = None
    connected: list[Any] | None = None
    tags: dict[str, Any] | list[Any] | None = field(default=None, metadata={"json": "Tags"})
    api_keys: dict[str, Any] | list[Any] | None = field(default=None, metadata={"json": "ApiKeys"})
    state: str | None = None
    permissions: list[str] | None = None

    MUTABLE_FIELDS = ("firstname", "lastname", "email", "password", "creatorRef")

    def format_for_update(self) -> str:
        """Only the profile fields an account owner may change."""
        data = self.to_dict()
        return encode_json({k: data[k] for k in self.MUTABLE_FIELDS if k in data})


@dataclass
class Whoami(Account):
    """The account the current credentials authenticate as."""


@dataclass
class ChildAccount(Entity):
    """An account together with the API keys and tags to create it with."""

    account: Account | None = field(default=None, metadata={"json": "Account"})
    api_keys: list[str] | dict[str, str] | None = field(default=None, metadata={"json": "ApiKeys"})
    tags: dict[str, str] | list[Any] | None = field(default=None, metadata={"json": "Tags"})

    @classmethod
    def foreign_key_map(cls) -> dict[str, type[Entity]]:
        return {"account": Account}


@dataclass
class ApiKey(Entity):
    """An API key, addressed by its description."""

    description: str | None = None

    def endpoint_url_argument(self) -> str | None:
        return self.description


@dataclass
class Tag(Entity):
    """A named tag value stored on an account."""

    name: str | None = None
    value: Any = None

    def endpoint_url_argument(self) -> str | None:
        return self.name

    def format_for_create(self) -> str:
        return encode_json(self.value)


# =============================================================================
# Computer Types
# =============================================================================


@dataclass
class Computer(Entity):
    """A computer running the PrintNode client."""

    id: int | None = None
    name: str | None = None
    inet: str | None = None
    inet6: str | None = None
    hostname: str | None = None
    version: str | None = None
    jre: str | None = None
    system_info: dict[str, Any] | None = None
    accept_offline_print_jobs: bool | None = None
    create_timestamp: str | None = None
    state: str | None = None


@dataclass
class Scale(Entity):
    """A reading from a scale attached to a computer."""

    mass: list[Any] | None = None
    device_name: str | None = None
    device_num: int | None = None
    port: str | None = None
    count: int | None = None
    measurement: dict[str, Any] | None = None
    client_reported_create_timestamp: str | None = None
    ntp_offset: int | None = None
    age_of_data: int | None = None
    computer_id: int | None = None
    vendor: str | None = None
    product: str | None = None
    vendor_id: int | None = None
    product_id: int | None = None


# =============================================================================
# Printer Types
# =============================================================================


@dataclass
class PrinterCapabilities(Entity):
    """Capabilities reported by the client for a printer."""

    bins: list[str] | None = None
    collate: bool | None = None
    color: bool | None = None
    copies: int | None = None
    dpis: list[str] | None = None
    duplex: bool | None = None
    extent: list[Any] | None = None
    medias: list[str] | None = None
    nup: list[int] | None = None
    papers: dict[str, Any] | None = None
    printrate: dict[str, Any] | None = None
    supports_custom_paper_size: bool | None = field(
        default=None, metadata={"json": "supports_custom_paper_size"}
    )


@dataclass
class Printer(Entity):
    """A printer attached to a computer."""

    id: int | None = None
    computer: Computer | None = None
    name: str | None = None
    description: str | None = None
    capabilities: PrinterCapabilities | None = None
    default: bool | None = None
    create_timestamp: str | None = None
    state: str | None = None

    @classmethod
    def foreign_key_map(cls) -> dict[str, type[Entity]]:
        return {"computer": Computer, "capabilities": PrinterCapabilities}


# =============================================================================
# Print Job Types
# =============================================================================


@dataclass
class PrintJob(Entity):
    """A print job, either as submitted or as reported back by the API."""

    id: int | None = None
    printer: Printer | None = None
    printer_id: int | None = None
    title: str | None = None
    content_type: str | None = None
    content: str | None = None
    source: str | None = None
    options: dict[str, Any] | None = None
    qty: int | None = None
    authentication: dict[str, Any] | None = None
    expire_after: int | None = None
    expire_at: str | None = None
    create_timestamp: str | None = None
    state: str | None = None

    CREATE_FIELDS = (
        "printerId",
        "title",
        "contentType",
        "content",
        "source",
        "options",
        "qty",
        "authentication",
        "expireAfter",
    )

    @classmethod
    def foreign_key_map(cls) -> dict[str, type[Entity]]:
        return {"printer": Printer}

    def format_for_create(self) -> str:
        """Only the properties accepted when submitting a job."""
        data = self.to_dict()
        return encode_json({k: data[k] for k in self.CREATE_FIELDS if k in data})

    def attach_file(self, path: str | Path, content_type: str = "pdf_base64") -> None:
        """Read a file and attach it as base64 content."""
        self.content = base64.b64encode(Path(path).read_bytes()).decode("ascii")
        self.content_type = content_type

    def attach_url(self, url: str, content_type: str = "pdf_uri") -> None:
        """Attach a document the client will fetch from a URL."""
        self.content = url
        self.content_type = content_type


@dataclass
class PrintJobState(Entity):
    """One state transition of a print job."""

    print_job_id: int | None = None
    state: str | None = None
    message: str | None = None
    data: Any = None
    client_version: str | None = None
    create_timestamp: str | None = None
    age: int | None = None


# =============================================================================
# Download Types
# =============================================================================


@dataclass
class Client(Entity):
    """A PrintNode client release that can be enabled for an account."""

    id: int | None = None
    enabled: bool | None = None
    edition: str | None = None
    version: str | None = None
    os: str | None = None
    filename: str | None = None
    filesize: int | str | None = None
    sha1: str | None = None
    release_timestamp: str | None = None
    url: str | None = None

    def endpoint_url_argument(self) -> str | None:
        return None if self.id is None else str(self.id)

    def format_for_update(self) -> str:
        return encode_json({"enabled": self.enabled})


@dataclass
class Download(Entity):
    """The latest client installer for an operating system."""

    edition: str | None = None
    version: str | None = None
    os: str | None = None
    filename: str | None = None
    filesize: int | str | None = None
    sha1: str | None = None
    release_timestamp: str | None = None
    url: str | None = None
