"""
Error types raised by the PrintNode client.

Every failure is surfaced as a subclass of PrintNodeError so callers can
catch the whole family, or pick out the specific kind they can act on.
"""

from typing import Any


class PrintNodeError(Exception):
    """Base error class for all client errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class InvalidArgumentError(PrintNodeError, ValueError):
    """Malformed caller input, raised before any network activity."""


class NoSuchOperationError(PrintNodeError, AttributeError):
    """A dynamic accessor was called with a name that is not in the table."""


class MissingChildAccountError(PrintNodeError):
    """A DELETE was attempted without a child account selected."""


class SerializationError(PrintNodeError):
    """JSON encoding or decoding of an entity body failed."""


class TypeMismatchError(PrintNodeError, TypeError):
    """Hydration was given a value of the wrong JSON shape."""


class UnexpectedFieldError(PrintNodeError):
    """A response carried a property the target entity does not declare."""

    def __init__(self, entity_type: type, field: str):
        super().__init__(
            f"{entity_type.__name__} does not have a property named {field}",
            details={"entity": entity_type.__name__, "field": field},
        )
        self.entity_type = entity_type
        self.field = field


class TransportError(PrintNodeError):
    """The request could not be completed at the transport level."""

    def __init__(
        self,
        message: str,
        code: int | str | None = None,
        request: Any = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.code = code
        self.request = request

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.code is not None:
            result["code"] = self.code
        return result


class HTTPError(PrintNodeError):
    """The API answered with a status code the operation does not accept."""

    def __init__(self, status_code: int, reason_phrase: str = "", response: Any = None):
        super().__init__(f"HTTP Error ({status_code}): {reason_phrase}".rstrip(": "))
        self.status_code = status_code
        self.reason_phrase = reason_phrase
        self.response = response

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        result["status"] = self.status_code
        if self.response is not None and self.response.body:
            result["body"] = self.response.body
        return result
