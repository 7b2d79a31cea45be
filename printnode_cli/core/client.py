"""
Core HTTP client for the PrintNode API.

Handles endpoint routing, authentication headers, request bodies, response
validation and mapping responses onto entities.
"""

import functools
import numbers
import os
import urllib.parse
from collections.abc import Callable, Iterator, Sequence
from typing import Any, TypeVar

from loguru import logger

from printnode_cli.core.credentials import ApiKeyCredentials, ChildAccountSelector, Credentials
from printnode_cli.core.entity import Entity
from printnode_cli.core.errors import (
    HTTPError,
    InvalidArgumentError,
    MissingChildAccountError,
    NoSuchOperationError,
)
from printnode_cli.core.message import (
    CODE_OK,
    METHOD_DELETE,
    METHOD_GET,
    METHOD_PATCH,
    METHOD_POST,
    METHOD_PUT,
    Response,
    ServerRequest,
)
from printnode_cli.core.transport import Transport, UrllibTransport
from printnode_cli.core.types import (
    Account,
    ApiKey,
    ChildAccount,
    Client,
    Computer,
    Download,
    Printer,
    PrintJob,
    Tag,
    Whoami,
)

# Configuration
DEFAULT_BASE_URL = "https://api.printnode.com"
DEFAULT_TIMEOUT = 5
MIN_TIMEOUT = 5
DEFAULT_OFFSET = 0
DEFAULT_LIMIT = 10

E = TypeVar("E", bound=Entity)

END_POINT_URLS: dict[type[Entity], str] = {
    Client: "/download/clients",
    Download: "/download/client",
    ApiKey: "/account/apikey",
    Account: "/account",
    ChildAccount: "/account",
    Tag: "/account/tag",
    Whoami: "/whoami",
    Computer: "/computers",
    Printer: "/printers",
    PrintJob: "/printjobs",
}

# Names accepted by fetch() and the get_<name>() accessors
METHOD_NAME_ENTITY_MAP: dict[str, type[Entity]] = {
    "clients": Client,
    "downloads": Download,
    "api_keys": ApiKey,
    "account": Account,
    "tags": Tag,
    "whoami": Whoami,
    "computers": Computer,
    "printers": Printer,
    "print_jobs": PrintJob,
}


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def apply_offset_limit(url: str, offset: int, limit: int) -> str:
    """
    Set the offset and limit query arguments on a URL.

    Existing query arguments are kept; offset and limit replace any values
    already present.

    Raises:
        InvalidArgumentError: If offset is negative or limit is below 1

    """
    if not _is_number(offset) or offset < 0:
        raise InvalidArgumentError("offset should be a non-negative number", details={"offset": offset})
    if not _is_number(limit) or limit < 1:
        raise InvalidArgumentError("limit should be a positive number", details={"limit": limit})

    parts = urllib.parse.urlsplit(url)
    query = [
        (k, v)
        for k, v in urllib.parse.parse_qsl(parts.query, keep_blank_values=True)
        if k not in ("offset", "limit")
    ]
    query += [("offset", str(offset)), ("limit", str(limit))]
    return urllib.parse.urlunsplit(parts._replace(query=urllib.parse.urlencode(query)))


def format_set(value: int | str | Sequence[int | str]) -> str:
    """Render a set parameter: one identifier, or several joined with commas."""
    if isinstance(value, bool):
        raise InvalidArgumentError("Set parameters must be ids or strings")
    if isinstance(value, int | str):
        text = str(value)
    elif isinstance(value, Sequence):
        if not value:
            raise InvalidArgumentError("Set parameters must not be empty")
        text = ",".join(format_set(item) for item in value)
    else:
        raise InvalidArgumentError(f"Invalid set parameter type: {type(value).__name__}")
    if not text:
        raise InvalidArgumentError("Set parameters must not be empty")
    return text


class APIClient:
    """
    Low-level HTTP client for the PrintNode API.

    Handles:
    - Authentication and child account headers
    - Endpoint routing per entity type
    - Request bodies per HTTP verb
    - Response validation and entity mapping
    - Offset/limit pagination for GET requests
    """

    def __init__(
        self,
        credentials: Credentials | None = None,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        offset: int = DEFAULT_OFFSET,
        limit: int = DEFAULT_LIMIT,
        headers: dict[str, str] | None = None,
        pretty: bool = False,
        dont_log: bool = False,
        transport: Transport | None = None,
    ):
        """
        Initialize the API client.

        Args:
            credentials: API key or username/password (or PRINTNODE_API_KEY env var)
            base_url: API base URL (or PRINTNODE_BASE_URL env var)
            timeout: Request timeout in seconds, never below MIN_TIMEOUT
            offset: Default offset for GET requests
            limit: Default limit for GET requests
            headers: Extra headers sent with every request
            pretty: Ask the API for indented JSON
            dont_log: Ask the API not to log requests
            transport: Transport override (defaults to UrllibTransport)

        """
        self.credentials = credentials if credentials is not None else ApiKeyCredentials.from_env()
        self.base_url = base_url or os.environ.get("PRINTNODE_BASE_URL", DEFAULT_BASE_URL)
        self.transport: Transport = transport or UrllibTransport()
        self.pretty = pretty
        self.dont_log = dont_log
        self._headers: list[tuple[str, str]] = []
        self.set_timeout(timeout)
        self.set_offset(offset)
        self.set_limit(limit)
        if headers:
            self.set_headers(headers)

    # =========================================================================
    # Configuration
    # =========================================================================

    @property
    def base_url(self) -> str:
        return self._base_url

    @base_url.setter
    def base_url(self, value: str) -> None:
        parsed = urllib.parse.urlsplit(value or "")
        if not parsed.scheme or not parsed.netloc:
            raise InvalidArgumentError(f"Invalid API URL: {value!r}", details={"base_url": value})
        self._base_url = value.rstrip("/")

    def set_offset(self, offset: int) -> None:
        """Set the offset for GET requests."""
        if not _is_number(offset) or offset < 0:
            raise InvalidArgumentError("offset should be a non-negative number", details={"offset": offset})
        self.offset = offset

    def set_limit(self, limit: int) -> None:
        """Set the limit for GET requests."""
        if not _is_number(limit) or limit < 1:
            raise InvalidArgumentError("limit should be a positive number", details={"limit": limit})
        self.limit = limit

    def set_timeout(self, timeout: float) -> None:
        """Set the request timeout; values below MIN_TIMEOUT are raised to it."""
        if not _is_number(timeout):
            raise InvalidArgumentError("timeout should be a number", details={"timeout": timeout})
        self.timeout = max(timeout, MIN_TIMEOUT)

    def set_headers(self, headers: dict[str, str] | Sequence[tuple[str, str]]) -> None:
        """Replace the custom headers sent with every request."""
        items = headers.items() if isinstance(headers, dict) else headers
        self._headers = [(str(name), str(value)) for name, value in items]

    def set_child_account_by_id(self, child_id: int | str) -> None:
        self.set_child_account(ChildAccountSelector(id=child_id))

    def set_child_account_by_email(self, email: str) -> None:
        self.set_child_account(ChildAccountSelector(email=email))

    def set_child_account_by_creator_ref(self, creator_ref: str) -> None:
        self.set_child_account(ChildAccountSelector(creator_ref=creator_ref))

    def clear_child_account(self) -> None:
        self.set_child_account(None)

    def set_child_account(self, selector: ChildAccountSelector | None) -> None:
        """Act as the selected child account, or as the account itself when None."""
        if self.credentials is None:
            raise InvalidArgumentError("Credentials are required to act as a child account")
        self.credentials = self.credentials.with_child_account(selector)

    # =========================================================================
    # Request construction
    # =========================================================================

    def _build_url(self, path: str) -> str:
        """Build full URL from path."""
        if path.startswith("http"):
            return path
        return f"{self.base_url}{path}"

    def end_point_url(self, entity_type: type[Entity]) -> str:
        """
        Full URL of the collection endpoint for an entity type.

        Raises:
            InvalidArgumentError: If the entity type has no endpoint

        """
        path = END_POINT_URLS.get(entity_type)
        if path is None:
            raise InvalidArgumentError(
                f'Missing endPointUrl for entityName "{entity_type.__name__}"',
                details={"entity": entity_type.__name__},
            )
        return self._build_url(path)

    def entity_url(self, entity: Entity, *segments: str) -> str:
        """Endpoint URL for a single entity, plus any extra path segments."""
        url = self.end_point_url(type(entity))
        argument = entity.endpoint_url_argument()
        parts = ([argument] if argument is not None else []) + [str(s) for s in segments]
        for part in parts:
            url = f"{url}/{urllib.parse.quote(str(part), safe=',')}"
        return url

    def build_headers(self) -> list[tuple[str, str]]:
        """Headers for a request, in the order the API expects them."""
        headers: list[tuple[str, str]] = []
        if self.credentials is not None:
            auth = self.credentials.auth_header_value()
            if auth:
                headers.append(("Authorization", auth))
                if self.credentials.uses_account_credentials:
                    headers.append(("X-Auth-With-Account-Credentials", "true"))
            child = self.credentials.child_account_header()
            if child:
                headers.append(child)
        headers.append(("Expect", ""))
        if self.pretty:
            headers.append(("X-Pretty", "1"))
        if self.dont_log:
            headers.append(("X-Dont-Log", "1"))
        headers.extend(self._headers)
        return headers

    def request(self, method: str, url: str, body: str | None = None) -> Response:
        """
        Dispatch one request through the transport.

        Args:
            method: HTTP method
            url: Full request URL
            body: Request body for POST/PUT/PATCH

        Returns:
            The API response, whatever its status

        Raises:
            TransportError: If the request could not be completed

        """
        request = ServerRequest(url, method)
        if body is not None:
            request.body = body

        logger.debug("{} {}", method, url)
        response = self.transport.send(request, self.build_headers(), self.timeout)
        if request.timestamp is not None and response.timestamp is not None:
            logger.debug(
                "{} {} -> {} {} in {:.3f}s",
                method,
                url,
                response.status_code,
                response.reason_phrase,
                response.timestamp - request.timestamp,
            )
        return response

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def get(self, url: str, offset: int | None = None, limit: int | None = None) -> Response:
        """Make a paginated GET request."""
        url = apply_offset_limit(
            self._build_url(url),
            self.offset if offset is None else offset,
            self.limit if limit is None else limit,
        )
        return self.request(METHOD_GET, url)

    def post(self, entity: Entity) -> Response:
        """POST (create) an entity."""
        return self.request(METHOD_POST, self.entity_url(entity), entity.format_for_create())

    def patch(self, entity: Entity) -> Response:
        """PATCH (update) an entity."""
        return self.request(METHOD_PATCH, self.entity_url(entity), entity.format_for_update())

    def put(self, entity: Entity, *segments: str) -> Response:
        """PUT (replace) an entity."""
        return self.request(METHOD_PUT, self.entity_url(entity, *segments), entity.to_json())

    def delete(self, entity: Entity) -> Response:
        """DELETE an entity. Requires a child account to be selected."""
        return self.delete_url(self.entity_url(entity))

    def delete_url(self, url: str) -> Response:
        """
        DELETE a URL.

        Raises:
            MissingChildAccountError: If no child account is selected

        """
        if self.credentials is None or self.credentials.child_account is None:
            raise MissingChildAccountError("No child authentication set - cannot call DELETE")
        return self.request(METHOD_DELETE, self._build_url(url))

    # =========================================================================
    # Responses
    # =========================================================================

    def validate_response(self, response: Response) -> Response:
        """
        Check a read response.

        Raises:
            HTTPError: Unless the status code is 200

        """
        if response.status_code != CODE_OK:
            raise HTTPError(response.status_code, response.reason_phrase, response)
        return response

    def expect_status(self, response: Response, *codes: int) -> Response:
        """
        Check a write response against the status codes the operation allows.

        Raises:
            HTTPError: If the status code is not one of codes

        """
        if response.status_code not in codes:
            raise HTTPError(response.status_code, response.reason_phrase, response)
        return response

    def response_to_entity(self, response: Response, entity_type: type[E]) -> Any:
        """Decode a response body as entity_type (or a list of them)."""
        return response.decoded_as_entity(entity_type)

    def get_entities(self, url: str, entity_type: type[E], **kwargs: Any) -> Any:
        """GET, validate and decode in one step."""
        response = self.validate_response(self.get(url, **kwargs))
        return self.response_to_entity(response, entity_type)

    # =========================================================================
    # Dynamic accessors
    # =========================================================================

    def fetch(self, name: str, identifier: str | None = None) -> Any:
        """
        Fetch a collection, or a set within it, by accessor name.

        Args:
            name: One of the names in METHOD_NAME_ENTITY_MAP, e.g. "printers"
            identifier: Optional id or comma separated set of ids

        Raises:
            NoSuchOperationError: If name is not a known accessor
            InvalidArgumentError: If identifier is not a string

        """
        entity_type = METHOD_NAME_ENTITY_MAP.get(name)
        if entity_type is None:
            raise NoSuchOperationError(
                f"{type(self).__name__} has no accessor named get_{name}",
                details={"available": sorted(METHOD_NAME_ENTITY_MAP)},
            )

        url = self.end_point_url(entity_type)
        if identifier is not None:
            if not isinstance(identifier, str):
                raise InvalidArgumentError(
                    f"Invalid argument type passed to get_{name}. Expecting a string got {type(identifier).__name__}"
                )
            url = f"{url}/{identifier}"
        return self.get_entities(url, entity_type)

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("get_"):
            accessor = name[len("get_"):]
            if accessor not in METHOD_NAME_ENTITY_MAP:
                raise NoSuchOperationError(
                    f"{type(self).__name__} has no accessor named {name}",
                    details={"available": sorted(METHOD_NAME_ENTITY_MAP)},
                )
            return functools.partial(self.fetch, accessor)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    # =========================================================================
    # Pagination
    # =========================================================================

    def paginate(self, url: str, entity_type: type[E], limit: int = 100) -> Iterator[E]:
        """
        Iterate through all pages of a list endpoint.

        Args:
            url: Endpoint path or URL
            entity_type: Entity type of each item
            limit: Items per page

        Yields:
            Entities from all pages

        """
        offset = 0
        while True:
            page = self.get_entities(url, entity_type, offset=offset, limit=limit)
            if not isinstance(page, list):
                yield page
                break
            yield from page

            offset += len(page)
            if len(page) < limit:
                break

    def paginate_all(self, url: str, entity_type: type[E], limit: int = 100) -> list[E]:
        """Fetch all items from a list endpoint."""
        return list(self.paginate(url, entity_type, limit))
