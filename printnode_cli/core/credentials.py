"""
Credentials used to authenticate against the PrintNode API.

Both credential kinds produce a single Basic authorization header value and,
when a child account is selected, one impersonation header.
"""

import base64
import dataclasses
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass

from printnode_cli.core.errors import InvalidArgumentError

HEADER_CHILD_BY_ID = "X-Child-Account-By-Id"
HEADER_CHILD_BY_EMAIL = "X-Child-Account-By-Email"
HEADER_CHILD_BY_CREATOR_REF = "X-Child-Account-By-CreatorRef"


def _require_string(value: object, name: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"{name} must be a non-empty string")


@dataclass(frozen=True)
class ChildAccountSelector:
    """Selects which child account an integrator credential acts as."""

    id: int | str | None = None
    email: str | None = None
    creator_ref: str | None = None

    def __post_init__(self) -> None:
        if self.id is None and self.email is None and self.creator_ref is None:
            raise InvalidArgumentError("A child account selector needs an id, email or creator_ref")
        if self.email is not None:
            _require_string(self.email, "email")
        if self.creator_ref is not None:
            _require_string(self.creator_ref, "creator_ref")
        if self.id is not None and (isinstance(self.id, bool) or not isinstance(self.id, int | str)):
            raise InvalidArgumentError("id must be an int or a string")

    def header(self) -> tuple[str, str]:
        """Return the impersonation header, email first, then creator ref, then id."""
        if self.email is not None:
            return HEADER_CHILD_BY_EMAIL, self.email
        if self.creator_ref is not None:
            return HEADER_CHILD_BY_CREATOR_REF, self.creator_ref
        return HEADER_CHILD_BY_ID, str(self.id)


@dataclass(frozen=True)
class Credentials(ABC):
    """Base for credential kinds. Subclasses provide the token."""

    @abstractmethod
    def token(self) -> str:
        """The "user:password" pair encoded into the Basic auth header."""

    @property
    def child_account(self) -> ChildAccountSelector | None:
        return None

    @property
    def uses_account_credentials(self) -> bool:
        """True when authenticating with an account's username and password."""
        return False

    def auth_header_value(self) -> str | None:
        """Return the Authorization header value for this credential."""
        token = self.token()
        if not token:
            return None
        encoded = base64.b64encode(token.encode("utf-8")).decode("ascii")
        return f"Basic {encoded}"

    def child_account_header(self) -> tuple[str, str] | None:
        """Return the child account header, if a child account is selected."""
        if self.child_account is None:
            return None
        return self.child_account.header()

    def with_child_account(self, selector: ChildAccountSelector | None) -> "Credentials":
        """Return a copy of these credentials acting as another child account."""
        return dataclasses.replace(self, child_account=selector)


@dataclass(frozen=True, repr=False)
class ApiKeyCredentials(Credentials):
    """Authenticate with an API key."""

    api_key: str
    child_account: ChildAccountSelector | None = None

    def __post_init__(self) -> None:
        _require_string(self.api_key, "api_key")

    def __repr__(self) -> str:
        return f"ApiKeyCredentials(api_key='***', child_account={self.child_account!r})"

    def token(self) -> str:
        return f"{self.api_key}:"

    @classmethod
    def from_env(cls) -> "ApiKeyCredentials | None":
        """Build credentials from PRINTNODE_API_KEY, if it is set."""
        api_key = os.environ.get("PRINTNODE_API_KEY")
        if not api_key:
            return None
        return cls(api_key)


@dataclass(frozen=True, repr=False)
class UsernamePasswordCredentials(Credentials):
    """Authenticate with an account's username (email) and password."""

    username: str
    password: str
    child_account: ChildAccountSelector | None = None

    def __post_init__(self) -> None:
        _require_string(self.username, "username")
        _require_string(self.password, "password")

    def __repr__(self) -> str:
        return f"UsernamePasswordCredentials(username={self.username!r}, password='***')"

    @property
    def uses_account_credentials(self) -> bool:
        return True

    def token(self) -> str:
        return f"{self.username}:{self.password}"
