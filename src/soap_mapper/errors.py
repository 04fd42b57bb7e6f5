"""Error types raised by the mapping engine and its transport."""

from __future__ import annotations

from typing import Any


class MappingError(Exception):
    """Base class for all soap-mapper errors."""

    code = "mapping_error"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = {key: value for key, value in details.items() if value is not None}


class InvalidParameterError(MappingError):
    """Raised when a node has the wrong shape, e.g. a scalar where a structure is required."""

    code = "invalid_parameter"


class MissingMappingError(MappingError):
    """Raised when an element has no class map entry and no fallback namespace."""

    code = "missing_mapping"


class InvalidMappingError(MappingError):
    """Raised when a mapping points at something unusable.

    Covers unknown target types, types that cannot be built without
    arguments, rejected field assignments, setters that do not take exactly
    one argument and setter annotations that cannot be resolved.
    """

    code = "invalid_mapping"


class StrictMappingError(InvalidMappingError):
    """Raised in strict mode for a remote field with no local field or setter."""

    code = "strict_violation"


class CoercionError(MappingError):
    """Raised when a raw value cannot be converted to the setter's declared type."""

    code = "coercion_failed"


class MissingItemError(MappingError):
    """Raised when a required named item is absent from a response."""

    code = "missing_item"


class UnwrappingError(MappingError):
    """Raised when implicit envelope unwrapping cannot pick a single field."""

    code = "ambiguous_envelope"


class TransportError(MappingError):
    """Raised when the remote endpoint cannot be reached or stops answering."""

    code = "transport_error"


class RemoteCallError(MappingError):
    """Raised when the remote side answers a call with an error result."""

    code = "remote_error"
