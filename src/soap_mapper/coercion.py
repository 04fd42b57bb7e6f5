"""Coercion of raw scalars into the types declared by target setters.

Only date/time parameters are converted out of the box. Other declared
types receive the raw value unchanged; ``register_coercer`` adds more.
"""

from __future__ import annotations

import logging
import types
import typing
from datetime import date, datetime
from typing import Any, Callable

from soap_mapper.descriptors import TypeDescriptor, describe
from soap_mapper.errors import CoercionError, InvalidMappingError

logger = logging.getLogger("soap-mapper.coercion")

Coercer = Callable[[Any], Any]


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        raise TypeError(f"expected a textual timestamp, got {type(value).__name__}")
    text = value.strip()
    if " " in text and "T" not in text:
        text = text.replace(" ", "T", 1)
    return datetime.fromisoformat(text)


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise TypeError(f"expected a textual date, got {type(value).__name__}")
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        return _parse_datetime(text).date()


# datetime must be checked before date: it is a subclass.
_COERCERS: dict[type, Coercer] = {
    datetime: _parse_datetime,
    date: _parse_date,
}


def register_coercer(target: type, coercer: Coercer) -> None:
    """Convert values passed to setters declared with ``target``."""
    _COERCERS[target] = coercer


def _unwrap_optional(declared: Any) -> Any:
    origin = typing.get_origin(declared)
    if origin is typing.Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(declared) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return declared


def coercer_for(declared: Any) -> Coercer | None:
    declared = _unwrap_optional(declared)
    if not isinstance(declared, type):
        return None
    if declared in _COERCERS:
        return _COERCERS[declared]
    for target, coercer in _COERCERS.items():
        if issubclass(declared, target):
            return coercer
    return None


def coerce(
    target_type: type,
    field_name: str,
    raw: Any,
    descriptor: TypeDescriptor | None = None,
) -> Any:
    """Convert ``raw`` for the setter of ``field_name`` on ``target_type``."""
    descriptor = descriptor or describe(target_type)
    setter = descriptor.setter_for(field_name)
    if setter is None:
        raise InvalidMappingError(
            f"no setter for property {descriptor.name}::{field_name}",
            field=field_name,
        )

    declared = setter.parameter_type()
    if declared is None:
        return raw

    coercer = coercer_for(declared)
    if coercer is None:
        return raw

    try:
        value = coercer(raw)
    except (TypeError, ValueError) as exc:
        raise CoercionError(
            f"cannot convert {raw!r} for {descriptor.name}.{setter.name}: {exc}",
            field=field_name,
            setter=setter.name,
        ) from exc
    logger.debug("Coerced %s.%s value %r -> %r", descriptor.name, field_name, raw, value)
    return value
