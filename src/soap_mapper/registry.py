"""Target type registry and element-name resolution.

Class maps name target types by string. Strings are resolved against a
``TypeRegistry`` populated at composition time, so nothing outside the
registry can be instantiated from response data.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from threading import Lock
from typing import Any, Callable, TypeVar, Union

from soap_mapper.errors import InvalidMappingError, MissingMappingError

T = TypeVar("T", bound=type)

ARRAY_PREFIX = "array|"

TypeRef = Union[str, type]


def qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def array_key(name: str) -> str:
    """Class map key marking that ``name`` elements of a sequence are mapped."""
    return ARRAY_PREFIX + name


class TypeRegistry:
    """Name -> type table used to check existence and instantiate targets."""

    def __init__(self) -> None:
        self._types: dict[str, type] = {}
        self._lock = Lock()

    def register(self, cls: type, *names: str) -> type:
        """Register ``cls`` under its qualified name plus any extra ``names``."""
        with self._lock:
            for name in (qualified_name(cls), *names):
                existing = self._types.get(name)
                if existing is not None and existing is not cls:
                    raise ValueError(f"type name already registered: {name}")
                self._types[name] = cls
        return cls

    def exists(self, name: str) -> bool:
        return name in self._types

    def get(self, name: str) -> type:
        try:
            return self._types[name]
        except KeyError:
            raise InvalidMappingError(f"type not found: {name}", type_name=name) from None

    def instantiate(self, name: str) -> Any:
        return self.get(name)()

    def names(self) -> list[str]:
        return sorted(self._types)


default_registry = TypeRegistry()


def mappable_type(*names: str, registry: TypeRegistry | None = None) -> Callable[[T], T]:
    """Class decorator registering a target type.

    >>> @mappable_type("Quote")
    ... class Quote: ...
    """

    def decorator(cls: T) -> T:
        (registry or default_registry).register(cls, *names)
        return cls

    return decorator


class ClassMap(Mapping[str, TypeRef]):
    """Read-only element name -> type name table.

    Values are type names or type objects. Keys of the form
    ``"array|<element>"`` enable element-wise mapping of sequences.
    """

    def __init__(self, entries: Mapping[str, TypeRef] | None = None) -> None:
        self._entries: dict[str, TypeRef] = dict(entries or {})

    def __getitem__(self, key: str) -> TypeRef:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ClassMap({self._entries!r})"

    def has_array(self, name: str) -> bool:
        return array_key(name) in self._entries

    def layered(self, overrides: Mapping[str, TypeRef]) -> "ClassMap":
        """Return a new map with ``overrides`` taking precedence."""
        return ClassMap({**self._entries, **overrides})


def _collapse_separators(name: str) -> str:
    while ".." in name:
        name = name.replace("..", ".")
    return name


def resolve_name(
    element_name: str,
    class_map: Mapping[str, TypeRef],
    namespace: str | None = None,
) -> TypeRef:
    """Return the target type name (or type) for an element, without checking it exists."""
    if element_name in class_map:
        return class_map[element_name]
    if namespace:
        return _collapse_separators(f"{namespace}.{element_name}")
    raise MissingMappingError(
        f"no mapping for element {element_name}",
        element=element_name,
    )


def resolve(
    element_name: str,
    class_map: Mapping[str, TypeRef],
    namespace: str | None = None,
    registry: TypeRegistry | None = None,
) -> type:
    """Resolve an element name to a registered target type.

    The class map wins; otherwise the namespace fallback is tried. The
    existence check runs on the resolved name.
    """
    mapped = resolve_name(element_name, class_map, namespace)
    if isinstance(mapped, type):
        return mapped
    return (registry or default_registry).get(mapped)
