"""Flattening of typed request objects into parameter trees."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from datetime import date, datetime, time
from enum import Enum
from typing import Any

from soap_mapper.errors import InvalidParameterError

_SCALARS = (str, int, float, bool, bytes, datetime, date, time, Enum)


def render_scalar(value: Any) -> str:
    """Render a scalar leaf as text."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Enum):
        return render_scalar(value.value)
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


_MISSING = object()


def _slot_names(cls: type) -> list[str]:
    """Public slots declared along the MRO, base classes first."""
    names: list[str] = []
    for klass in reversed(cls.__mro__):
        slots = vars(klass).get("__slots__", ())
        for name in [slots] if isinstance(slots, str) else slots:
            if not name.startswith("_") and name not in names:
                names.append(name)
    return names


def _is_object(value: Any) -> bool:
    if isinstance(value, (_SCALARS, type)):
        return False
    return (
        hasattr(value, "__dict__")
        or dataclasses.is_dataclass(value)
        or bool(_slot_names(type(value)))
    )


def _items(value: Any) -> list[tuple[Any, Any]]:
    if isinstance(value, Mapping):
        return list(value.items())
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return [(f.name, getattr(value, f.name)) for f in dataclasses.fields(value)]
    if isinstance(getattr(type(value), "model_fields", None), Mapping):
        return [(name, getattr(value, name)) for name in type(value).model_fields]
    items = []
    for name in _slot_names(type(value)):
        # Unset slots have no value to send.
        item = getattr(value, name, _MISSING)
        if item is not _MISSING:
            items.append((name, item))
    items.extend(
        (name, item)
        for name, item in getattr(value, "__dict__", {}).items()
        if not name.startswith("_")
    )
    return items


def flatten(value: Any, keep_nulls: bool = True) -> Any:
    """Flatten ``value`` into dicts, lists and text leaves.

    Null fields become ``""`` when ``keep_nulls`` is set and are dropped
    otherwise.
    """
    if value is None:
        return "" if keep_nulls else None
    if isinstance(value, (list, tuple)):
        result = []
        for item in value:
            if item is None and not keep_nulls:
                continue
            result.append(flatten(item, keep_nulls))
        return result
    if isinstance(value, Mapping) or _is_object(value):
        tree: dict[str, Any] = {}
        for key, item in _items(value):
            if item is None and not keep_nulls:
                continue
            tree[str(key)] = flatten(item, keep_nulls)
        return tree
    return render_scalar(value)


def bare_type_name(value: Any) -> str:
    """Type name of ``value`` without module or enclosing-class qualifiers."""
    return type(value).__qualname__.rsplit(".", 1)[-1]


def to_parameters(
    request: Any,
    lower_case_first: bool = False,
    keep_nulls: bool = True,
) -> dict[str, Any]:
    """Wrap a flattened request object under its bare type name."""
    if isinstance(request, Mapping) or not _is_object(request):
        raise InvalidParameterError(
            f"request is not an object: {type(request).__name__}",
            shape=type(request).__name__,
        )
    root = bare_type_name(request)
    if lower_case_first:
        root = root[:1].lower() + root[1:]
    return {root: flatten(request, keep_nulls)}


def as_array(obj: Any, strict_array: bool = False, keep_nulls: bool = True) -> Any:
    """Flatten ``obj``; unless ``strict_array``, return only its first value."""
    tree = flatten(obj, keep_nulls)
    if strict_array or not isinstance(tree, dict):
        return tree
    return next(iter(tree.values()), None)
