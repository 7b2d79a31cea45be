"""
Base entity model.

Entities are dataclasses whose fields are the declared properties of a
remote resource. A field maps to a camelCase JSON key unless its metadata
names one explicitly, e.g. ``field(default=None, metadata={"json": "Tags"})``.
Fields marked ``{"serialize": False}`` are never written out.
"""

import dataclasses
import json
from datetime import date, datetime
from typing import Any, ClassVar, TypeVar

from printnode_cli.core.errors import SerializationError, TypeMismatchError, UnexpectedFieldError

E = TypeVar("E", bound="Entity")


def camelize(name: str) -> str:
    """create_timestamp -> createTimestamp"""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def json_key(f: dataclasses.Field) -> str:
    """The JSON property name of a dataclass field."""
    return f.metadata.get("json", camelize(f.name))


@dataclasses.dataclass
class Entity:
    """Base class for entity objects."""

    _json_fields: ClassVar[dict[type, dict[str, dataclasses.Field]]] = {}

    @classmethod
    def declared_fields(cls) -> dict[str, dataclasses.Field]:
        """JSON key -> dataclass field, for every declared property."""
        cached = Entity._json_fields.get(cls)
        if cached is None:
            cached = {json_key(f): f for f in dataclasses.fields(cls)}
            Entity._json_fields[cls] = cached
        return cached

    @classmethod
    def field_types(cls) -> dict[str, Any]:
        """JSON key -> declared type."""
        return {key: f.type for key, f in cls.declared_fields().items()}

    @classmethod
    def foreign_key_map(cls) -> dict[str, type["Entity"]]:
        """Attribute name -> entity type for properties hydrated as nested entities."""
        return {}

    @classmethod
    def from_dict(cls: type[E], data: dict[str, Any]) -> E:
        """
        Hydrate an entity from a decoded JSON object.

        Keys in the foreign key map are hydrated recursively; everything else
        is assigned as decoded. Unknown keys are rejected.

        Raises:
            TypeMismatchError: If data is not a JSON object
            UnexpectedFieldError: If data has a key this entity does not declare

        """
        if not isinstance(data, dict):
            raise TypeMismatchError(
                f"{cls.__name__} must be hydrated from a JSON object, got {type(data).__name__}",
                details={"entity": cls.__name__},
            )

        declared = cls.declared_fields()
        foreign_keys = cls.foreign_key_map()
        values: dict[str, Any] = {}

        for key, value in data.items():
            f = declared.get(key)
            if f is None:
                raise UnexpectedFieldError(cls, key)
            nested = foreign_keys.get(f.name)
            if nested is not None and value is not None:
                value = hydrate(nested, value)
            values[f.name] = value

        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Flatten to JSON-ready data, keyed by JSON property name."""
        result: dict[str, Any] = {}
        for key, f in self.declared_fields().items():
            if not f.metadata.get("serialize", True):
                continue
            value = getattr(self, f.name)
            if value is None:
                continue
            result[key] = _flatten(value)
        return result

    def to_json(self) -> str:
        """Encode to_dict() as a JSON string."""
        return encode_json(self.to_dict())

    def format_for_create(self) -> str:
        """Body sent when creating this entity."""
        return self.to_json()

    def format_for_update(self) -> str:
        """Body sent when updating this entity."""
        return self.to_json()

    def endpoint_url_argument(self) -> str | None:
        """Path segment identifying this entity under its endpoint, if any."""
        return None


def hydrate(entity_type: type[E], content: Any) -> Any:
    """
    Map decoded JSON content onto entity_type.

    Lists are hydrated element by element, objects become a single entity,
    and scalars (e.g. the id of a newly created print job) pass through.
    """
    if isinstance(content, list):
        return [hydrate(entity_type, item) for item in content]
    if isinstance(content, dict):
        return entity_type.from_dict(content)
    return content


def encode_json(data: Any) -> str:
    """json.dumps, raising SerializationError on failure."""
    try:
        return json.dumps(data)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Could not encode JSON: {e}") from e


def _flatten(value: Any) -> Any:
    if isinstance(value, Entity):
        return value.to_dict()
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, list | tuple):
        return [_flatten(item) for item in value]
    if isinstance(value, dict):
        return {k: _flatten(v) for k, v in value.items()}
    return value
