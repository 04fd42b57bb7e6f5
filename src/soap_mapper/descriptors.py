"""Introspection of target types.

A ``TypeDescriptor`` lists what the materializer may write on a target
type: plain fields and single-argument setters. Descriptors are built once
per type and cached.
"""

from __future__ import annotations

import dataclasses
import inspect
import typing
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Protocol, runtime_checkable

from soap_mapper.errors import InvalidMappingError


@runtime_checkable
class Mappable(Protocol):
    """Capability of target types that rename remote fields.

    ``get_map`` returns ``{remote_name: local_name}``.
    """

    def get_map(self) -> Mapping[str, str]: ...


def aliases_for(instance: Any) -> Mapping[str, str]:
    """Return the alias table of a freshly constructed target instance."""
    if isinstance(instance, Mappable):
        return dict(instance.get_map())
    return {}


def setter_names(field_name: str) -> tuple[str, str]:
    """Candidate setter names for a field: ``setFieldName`` then ``set_fieldName``."""
    return "set" + field_name[:1].upper() + field_name[1:], "set_" + field_name


@dataclass(frozen=True)
class Setter:
    """A setter method on a target type."""

    owner: type
    name: str
    function: Callable[..., Any]

    def parameters(self) -> list[inspect.Parameter]:
        params = list(inspect.signature(self.function).parameters.values())
        # Drop the bound instance.
        return params[1:]

    def single_parameter(self) -> inspect.Parameter:
        params = self.parameters()
        if len(params) != 1:
            raise InvalidMappingError(
                f"wrong argument count in setter {self.owner.__name__}.{self.name}: "
                f"expected 1, got {len(params)}",
                setter=self.name,
            )
        return params[0]

    def parameter_type(self) -> Any | None:
        """Declared type of the single parameter, or None when unannotated."""
        param = self.single_parameter()
        if param.annotation is inspect.Parameter.empty:
            return None
        try:
            hints = typing.get_type_hints(self.function)
        except (NameError, AttributeError, TypeError, SyntaxError) as exc:
            raise InvalidMappingError(
                f"invalid type hint for method {self.owner.__name__}.{self.name}: {exc}",
                setter=self.name,
            ) from exc
        return hints.get(param.name)

    def invoke(self, instance: Any, value: Any) -> None:
        self.function(instance, value)


@dataclass(frozen=True)
class TypeDescriptor:
    """Writable surface of a target type."""

    cls: type
    fields: frozenset[str]
    setters: Mapping[str, Setter]

    @property
    def name(self) -> str:
        return self.cls.__name__

    def has_field(self, field_name: str, instance: Any = None) -> bool:
        """Whether ``field_name`` is writable.

        Attributes that ``__init__`` assigned on ``instance`` count as fields.
        """
        if field_name in self.fields:
            return True
        if field_name.startswith("_") or instance is None:
            return False
        return field_name in getattr(instance, "__dict__", {})

    def setter_for(self, field_name: str) -> Setter | None:
        for candidate in setter_names(field_name):
            setter = self.setters.get(candidate)
            if setter is not None:
                return setter
        return None


def _is_field_attribute(value: Any) -> bool:
    if isinstance(value, property):
        return value.fset is not None
    if isinstance(value, (staticmethod, classmethod)):
        return False
    return not callable(value)


def _field_names(cls: type) -> set[str]:
    names: set[str] = set()

    if dataclasses.is_dataclass(cls):
        names.update(f.name for f in dataclasses.fields(cls))

    model_fields = getattr(cls, "model_fields", None)
    if isinstance(model_fields, Mapping):
        # pydantic models: class namespaces also carry model_config and friends
        names.update(model_fields)
    else:
        for klass in cls.__mro__:
            if klass is object:
                continue
            names.update(inspect.get_annotations(klass))
            names.update(
                name for name, value in vars(klass).items() if _is_field_attribute(value)
            )
            slots = vars(klass).get("__slots__", ())
            names.update([slots] if isinstance(slots, str) else slots)

    return {name for name in names if not name.startswith("_")}


def _setters(cls: type) -> dict[str, Setter]:
    setters: dict[str, Setter] = {}
    for name in dir(cls):
        if not name.startswith("set") or name == "set":
            continue
        function = inspect.getattr_static(cls, name)
        if isinstance(function, (staticmethod, classmethod)) or not inspect.isfunction(function):
            continue
        setters[name] = Setter(owner=cls, name=name, function=function)
    return setters


@lru_cache(maxsize=None)
def describe(cls: type) -> TypeDescriptor:
    """Build (once) the descriptor of a target type."""
    return TypeDescriptor(cls=cls, fields=frozenset(_field_names(cls)), setters=_setters(cls))
