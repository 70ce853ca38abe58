#!/usr/bin/env python3
"""
Resource schema and state record

A resource declares its attributes with a Schema. The lifecycle operations of
a component work on a ResourceData record: the declared attribute values plus
the identifier slot that ties the record to an object on the device.
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional, List


class SchemaError(ValueError):
    """Raised when a configuration block does not fit the declared schema."""


@dataclass(frozen=True)
class Attribute:
    """Declaration of one configurable attribute."""
    type: type = str
    required: bool = False
    default: Any = None
    force_new: bool = False
    description: str = ""

    def empty_value(self) -> Any:
        if self.default is not None:
            return self.default
        return self.type()


class Schema:
    """Set of declared attributes for one resource type."""

    def __init__(self, attributes: Dict[str, Attribute]):
        self.attributes = attributes

    def __contains__(self, key: str) -> bool:
        return key in self.attributes

    def __iter__(self):
        return iter(self.attributes)

    @property
    def force_new_keys(self) -> List[str]:
        return [key for key, attr in self.attributes.items() if attr.force_new]

    def empty(self) -> Dict[str, Any]:
        """Values of a record nothing has been declared for yet."""
        return {key: attr.empty_value() for key, attr in self.attributes.items()}

    def coerce(self, key: str, value: Any) -> Any:
        """YAML booleans for string attributes become "true"/"false"."""
        if self.attributes[key].type is str and isinstance(value, bool):
            return "true" if value else "false"
        return value

    def check_value(self, key: str, value: Any) -> None:
        if key not in self.attributes:
            raise SchemaError(f"Unsupported argument: {key!r}")
        expected = self.attributes[key].type
        if not isinstance(value, expected):
            raise SchemaError(
                f"Attribute {key!r} must be of type {expected.__name__}, got {type(value).__name__}"
            )

    def validate(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Check a declared configuration block and fill in defaults.

        Args:
            config: Attribute values as declared by the user

        Returns:
            Complete attribute values with defaults applied

        Raises:
            SchemaError: on unknown attributes, missing required ones or wrong types
        """
        values = self.empty()
        for key, value in config.items():
            if key not in self.attributes:
                raise SchemaError(f"Unsupported argument: {key!r}")
            if value is None:
                continue
            value = self.coerce(key, value)
            self.check_value(key, value)
            values[key] = value

        missing = [key for key, attr in self.attributes.items()
                   if attr.required and not config.get(key)]
        if missing:
            raise SchemaError(f"Missing required argument(s): {', '.join(missing)}")

        return values


class ResourceData:
    """
    Mutable state of one resource instance.

    Holds a value for every attribute of the schema and the identifier of the
    device object. An empty identifier means the resource is not tracked.
    """

    def __init__(self, schema: Schema, config: Optional[Dict[str, Any]] = None, resource_id: str = ""):
        self.schema = schema
        self._values = schema.validate(config) if config is not None else schema.empty()
        self._original = dict(self._values)
        self._id = resource_id

    @property
    def id(self) -> str:
        return self._id

    def set_id(self, resource_id: str) -> None:
        self._id = resource_id or ""

    def get(self, key: str) -> Any:
        if key not in self.schema:
            raise SchemaError(f"Unsupported argument: {key!r}")
        return self._values[key]

    def set(self, key: str, value: Any) -> None:
        self.schema.check_value(key, value)
        self._values[key] = value

    def has_change(self, key: str) -> bool:
        """True when the attribute differs from the value the record was built with."""
        return self.get(key) != self._original[key]

    def changed_keys(self) -> List[str]:
        return [key for key in self.schema if self.has_change(key)]

    def diff(self, other: "ResourceData") -> List[str]:
        """Attributes whose values differ between two records of the same schema."""
        return [key for key in self.schema if self.get(key) != other.get(key)]

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self._id, **self._values}

    def __repr__(self) -> str:
        return f"ResourceData(id={self._id!r}, values={self._values!r})"


def import_state_passthrough(schema: Schema, resource_id: str) -> List[ResourceData]:
    """Start an import from the bare identifier; the read operation fills in the rest."""
    return [ResourceData(schema, resource_id=resource_id)]
