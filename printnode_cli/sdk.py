"""
PrintNode SDK - High-level client with nice ergonomics.

This layer provides a clean, typed interface for common PrintNode operations.
Built on top of the core APIClient.
"""

import builtins
import urllib.parse
from collections.abc import Iterator, Sequence
from typing import Any

from printnode_cli.core.client import DEFAULT_TIMEOUT, APIClient, format_set
from printnode_cli.core.credentials import ApiKeyCredentials, ChildAccountSelector, Credentials
from printnode_cli.core.errors import InvalidArgumentError, PrintNodeError
from printnode_cli.core.message import CODE_CREATED, CODE_NO_CONTENT, CODE_OK, Response
from printnode_cli.core.transport import Transport
from printnode_cli.core.types import (
    Account,
    ApiKey,
    ChildAccount,
    Client,
    Computer,
    Download,
    Printer,
    PrintJob,
    PrintJobState,
    Scale,
    Tag,
    Whoami,
)

IdSet = int | str | Sequence[int | str]


def _as_list(result: Any) -> list[Any]:
    if result is None:
        return []
    if isinstance(result, list):
        return result
    return [result]


def _first(result: Any, what: str, identifier: Any) -> Any:
    items = _as_list(result)
    if not items:
        raise PrintNodeError(f"{what} {identifier} not found", details={"id": identifier})
    return items[0]


def _segment(value: Any) -> str:
    return urllib.parse.quote(str(value), safe=",")


class PrintNodeClient:
    """
    High-level PrintNode API client with typed methods and nice ergonomics.

    Example:
        client = PrintNodeClient(api_key="...")

        # Find a printer and print a PDF on it
        printer = client.printers.list()[0]
        job = PrintJob(printer_id=printer.id, title="Invoice")
        job.attach_file("invoice.pdf")
        job = client.print_jobs.create(job, return_object=True)

        # Act as a child account
        client.act_as(email="child@example.com")
        computers = client.computers.list()

    """

    def __init__(
        self,
        api_key: str | None = None,
        credentials: Credentials | None = None,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        pretty: bool = False,
        dont_log: bool = False,
        transport: Transport | None = None,
    ):
        """
        Initialize the PrintNode client.

        Args:
            api_key: PrintNode API key (or PRINTNODE_API_KEY env var)
            credentials: Explicit credentials, takes precedence over api_key
            base_url: API base URL (or PRINTNODE_BASE_URL env var)
            timeout: Request timeout in seconds
            pretty: Ask the API for indented JSON
            dont_log: Ask the API not to log requests
            transport: Transport override

        """
        if credentials is None and api_key:
            credentials = ApiKeyCredentials(api_key)

        self._client = APIClient(
            credentials=credentials,
            base_url=base_url,
            timeout=timeout,
            pretty=pretty,
            dont_log=dont_log,
            transport=transport,
        )

        # Sub-clients for different domains
        self.account = AccountOperations(self._client)
        self.api_keys = ApiKeyOperations(self._client)
        self.tags = TagOperations(self._client)
        self.computers = ComputerOperations(self._client)
        self.printers = PrinterOperations(self._client)
        self.print_jobs = PrintJobOperations(self._client)
        self.downloads = DownloadOperations(self._client)

    @property
    def api(self) -> APIClient:
        """The underlying low-level client."""
        return self._client

    def act_as(
        self,
        child_id: int | str | None = None,
        email: str | None = None,
        creator_ref: str | None = None,
    ) -> None:
        """Send subsequent requests on behalf of a child account."""
        self._client.set_child_account(ChildAccountSelector(id=child_id, email=email, creator_ref=creator_ref))

    def act_as_self(self) -> None:
        """Stop acting as a child account."""
        self._client.clear_child_account()


# =============================================================================
# Account Operations
# =============================================================================


class AccountOperations:
    """Operations on the authenticated account and its child accounts."""

    def __init__(self, client: APIClient):
        self._client = client

    def whoami(self) -> Whoami:
        """
        Get the account the credentials authenticate as.

        Returns:
            Whoami with account details

        """
        return self._client.get_entities("/whoami", Whoami)

    def create_child(
        self,
        account: Account,
        api_keys: builtins.list[str] | None = None,
        tags: dict[str, str] | None = None,
    ) -> ChildAccount:
        """
        Create a child account. Requires an integrator account.

        Args:
            account: The new account's details (firstname, lastname, email, password)
            api_keys: Descriptions of API keys to create for the account
            tags: Tags to set on the account

        Returns:
            ChildAccount with the created Account, ApiKeys and Tags

        """
        child = ChildAccount(account=account, api_keys=api_keys or None, tags=tags or None)
        response = self._client.expect_status(self._client.post(child), CODE_OK, CODE_CREATED)
        return response.decoded_as_entity(ChildAccount)

    def update(self, account: Account) -> Response:
        """
        Update the current (or selected child) account.

        Args:
            account: Account carrying only the fields to change

        Returns:
            API response

        """
        return self._client.expect_status(self._client.patch(account), CODE_OK)

    def delete(self) -> Any:
        """
        Delete the selected child account.

        Returns:
            Decoded API response

        Raises:
            MissingChildAccountError: If no child account is selected

        """
        response = self._client.delete(Account())
        return self._client.expect_status(response, CODE_OK, CODE_NO_CONTENT).decoded_content()

    def client_key(self, uuid: str, edition: str, version: str) -> Any:
        """
        Get a client key for a client installation.

        Args:
            uuid: Client installation UUID
            edition: Client edition
            version: Client version

        Returns:
            The client key

        """
        query = urllib.parse.urlencode({"edition": edition, "version": version})
        response = self._client.get(f"/client/key/{_segment(uuid)}?{query}")
        return self._client.validate_response(response).decoded_content()


# =============================================================================
# API Key and Tag Operations
# =============================================================================


class ApiKeyOperations:
    """Operations on the account's API keys."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(self) -> Any:
        """List the account's API keys."""
        return self._client.fetch("api_keys")

    def get(self, description: str) -> Any:
        """Get the key stored under a description."""
        response = self._client.get(f"/account/apikey/{_segment(description)}")
        return self._client.validate_response(response).decoded_content()

    def create(self, description: str) -> Any:
        """
        Create an API key.

        Returns:
            The new key

        """
        response = self._client.post(ApiKey(description=description))
        return self._client.expect_status(response, CODE_OK, CODE_CREATED).decoded_content()

    def delete(self, description: str) -> Any:
        """Delete an API key. Requires a child account to be selected."""
        response = self._client.delete(ApiKey(description=description))
        return self._client.expect_status(response, CODE_OK, CODE_NO_CONTENT).decoded_content()


class TagOperations:
    """Operations on the account's tags."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(self) -> Any:
        """List the account's tags."""
        return self._client.fetch("tags")

    def get(self, name: str) -> Any:
        """Get a tag's value."""
        response = self._client.get(f"/account/tag/{_segment(name)}")
        return self._client.validate_response(response).decoded_content()

    def set(self, name: str, value: Any) -> Any:
        """Create or overwrite a tag."""
        response = self._client.post(Tag(name=name, value=value))
        return self._client.expect_status(response, CODE_OK, CODE_CREATED).decoded_content()

    def delete(self, name: str) -> Any:
        """Delete a tag. Requires a child account to be selected."""
        response = self._client.delete(Tag(name=name))
        return self._client.expect_status(response, CODE_OK, CODE_NO_CONTENT).decoded_content()


# =============================================================================
# Computer Operations
# =============================================================================


class ComputerOperations:
    """Operations on computers running the PrintNode client."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(
        self,
        computer_set: IdSet | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> builtins.list[Computer]:
        """
        List computers.

        Args:
            computer_set: Optional id or ids to restrict the list to
            limit: Maximum number of results
            offset: Pagination offset

        Returns:
            List of Computers

        """
        path = "/computers"
        if computer_set is not None:
            path = f"{path}/{format_set(computer_set)}"
        return _as_list(self._client.get_entities(path, Computer, limit=limit, offset=offset))

    def list_all(self) -> builtins.list[Computer]:
        """List all computers."""
        return self._client.paginate_all("/computers", Computer)

    def get(self, computer_id: int) -> Computer:
        """Get a computer by ID."""
        return _first(self.list(computer_id), "Computer", computer_id)

    def printers(self, computer_set: IdSet, printer_set: IdSet | None = None) -> builtins.list[Printer]:
        """List printers attached to one or more computers."""
        return PrinterOperations(self._client).list(printer_set=printer_set, computer_set=computer_set)

    def scales(
        self,
        computer_id: int,
        device_name: str | None = None,
        device_number: int | None = None,
    ) -> builtins.list[Scale]:
        """
        List scales attached to a computer.

        Args:
            computer_id: The computer ID
            device_name: Only scales with this device name
            device_number: Only the scale with this device number (needs device_name)

        Returns:
            List of Scales

        """
        if device_number is not None and device_name is None:
            raise InvalidArgumentError("device_number requires device_name")

        path = f"/computer/{_segment(computer_id)}/scales"
        if device_name is not None and device_number is not None:
            path = f"/computer/{_segment(computer_id)}/scale/{_segment(device_name)}/{_segment(device_number)}"
        elif device_name is not None:
            path = f"{path}/{_segment(device_name)}"
        return _as_list(self._client.get_entities(path, Scale))


# =============================================================================
# Printer Operations
# =============================================================================


class PrinterOperations:
    """Operations on printers."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(
        self,
        printer_set: IdSet | None = None,
        computer_set: IdSet | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> builtins.list[Printer]:
        """
        List printers, optionally restricted to printer ids and/or computers.

        Args:
            printer_set: Optional printer id or ids
            computer_set: Optional computer id or ids the printers belong to
            limit: Maximum number of results
            offset: Pagination offset

        Returns:
            List of Printers

        """
        if computer_set is not None:
            path = f"/computers/{format_set(computer_set)}/printers"
        else:
            path = "/printers"
        if printer_set is not None:
            path = f"{path}/{format_set(printer_set)}"
        return _as_list(self._client.get_entities(path, Printer, limit=limit, offset=offset))

    def list_all(self) -> builtins.list[Printer]:
        """List all printers."""
        return self._client.paginate_all("/printers", Printer)

    def get(self, printer_id: int) -> Printer:
        """Get a printer by ID."""
        return _first(self.list(printer_id), "Printer", printer_id)


# =============================================================================
# Print Job Operations
# =============================================================================


class PrintJobOperations:
    """Operations on print jobs."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(
        self,
        print_job_set: IdSet | None = None,
        printer_set: IdSet | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> builtins.list[PrintJob]:
        """
        List print jobs, optionally restricted to job ids and/or printers.

        Args:
            print_job_set: Optional print job id or ids
            printer_set: Optional printer id or ids the jobs were sent to
            limit: Maximum number of results
            offset: Pagination offset

        Returns:
            List of PrintJobs

        """
        if printer_set is not None:
            path = f"/printers/{format_set(printer_set)}/printjobs"
        else:
            path = "/printjobs"
        if print_job_set is not None:
            path = f"{path}/{format_set(print_job_set)}"
        return _as_list(self._client.get_entities(path, PrintJob, limit=limit, offset=offset))

    def list_all(self) -> builtins.list[PrintJob]:
        """List all print jobs."""
        return self._client.paginate_all("/printjobs", PrintJob)

    def iterate(self, limit: int = 100) -> Iterator[PrintJob]:
        """
        Iterate through all print jobs.

        Args:
            limit: Items per page

        Yields:
            PrintJob objects

        """
        return self._client.paginate("/printjobs", PrintJob, limit=limit)

    def get(self, print_job_id: int) -> PrintJob:
        """Get a print job by ID."""
        return _first(self.list(print_job_id), "PrintJob", print_job_id)

    def create(self, print_job: PrintJob, return_object: bool = False) -> PrintJob | Response:
        """
        Submit a print job.

        Args:
            print_job: The job to submit (printer_id, content_type, content, ...)
            return_object: Fetch and return the created job instead of the raw response

        Returns:
            The created PrintJob when return_object is set, else the API response
            (whose decoded content is the new job id)

        Raises:
            HTTPError: Unless the API answers 201 Created

        """
        response = self._client.expect_status(self._client.post(print_job), CODE_CREATED)
        if not return_object:
            return response
        return self.get(response.decoded_content())

    def states(self, print_job_set: IdSet | None = None) -> builtins.list[Any]:
        """
        Get the state history of print jobs.

        Args:
            print_job_set: Optional print job id or ids

        Returns:
            One list of PrintJobStates per job

        """
        path = "/printjobs"
        if print_job_set is not None:
            path = f"{path}/{format_set(print_job_set)}"
        return _as_list(self._client.get_entities(f"{path}/states", PrintJobState))


# =============================================================================
# Download Operations
# =============================================================================


class DownloadOperations:
    """Operations on PrintNode client downloads."""

    def __init__(self, client: APIClient):
        self._client = client

    def clients(self, client_set: IdSet | None = None) -> builtins.list[Client]:
        """List client releases available to the account."""
        path = "/download/clients"
        if client_set is not None:
            path = f"{path}/{format_set(client_set)}"
        return _as_list(self._client.get_entities(path, Client))

    def latest(self, os_name: str, edition: str | None = None) -> Download:
        """
        Get the latest client installer for an operating system.

        Args:
            os_name: "windows", "osx" or "linux"
            edition: Optional client edition

        Returns:
            Download with the installer's URL and checksum

        """
        path = f"/download/client/{_segment(os_name.lower())}"
        if edition:
            path = f"{path}?{urllib.parse.urlencode({'edition': edition})}"
        return _first(self._client.get_entities(path, Download), "Download", os_name)

    def set_enabled(self, client: Client | int, enabled: bool) -> Response:
        """Enable or disable a client release for the account."""
        client_id = client.id if isinstance(client, Client) else client
        response = self._client.patch(Client(id=client_id, enabled=enabled))
        return self._client.expect_status(response, CODE_OK)
