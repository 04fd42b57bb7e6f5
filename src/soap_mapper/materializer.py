"""Recursive mapping of decoded trees onto target types."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from soap_mapper.coercion import coerce
from soap_mapper.descriptors import aliases_for, describe
from soap_mapper.errors import InvalidMappingError, StrictMappingError
from soap_mapper.nodes import NodeKind, classify
from soap_mapper.registry import TypeRef, TypeRegistry, array_key, default_registry, resolve

logger = logging.getLogger("soap-mapper.materializer")


class StructuralMapper:
    """Materializes keyed structures into registered target types.

    The element name of a node selects its type: the class map entry for
    that name, or ``namespace.<name>`` when no entry exists. Nested
    structures are resolved by their own field names, so the shape of the
    response drives the shape of the result.

    With ``strict`` enabled, a remote field that has neither a setter nor a
    plain field on the target type raises ``StrictMappingError``. Otherwise
    such fields are skipped.
    """

    def __init__(self, registry: TypeRegistry | None = None, strict: bool = False) -> None:
        self.registry = registry or default_registry
        self.strict = strict

    def materialize(
        self,
        node: Any,
        class_name: str,
        class_map: Mapping[str, TypeRef],
        namespace: str | None = None,
    ) -> Any:
        kind = classify(node)
        if kind is NodeKind.SCALAR:
            return node
        if kind is NodeKind.SEQUENCE:
            return self.map_sequence(node, class_name, class_map, namespace)
        return self._map_structure(node, class_name, class_map, namespace)

    def map_sequence(
        self,
        elements: Sequence[Any],
        class_name: str,
        class_map: Mapping[str, TypeRef],
        namespace: str | None = None,
    ) -> list[Any]:
        """Map sequence elements when ``array|<class_name>`` is registered.

        Unregistered sequences come back as a new list with the same items.
        """
        key = array_key(class_name)
        if key not in class_map:
            return list(elements)
        return [self.materialize(element, key, class_map, namespace) for element in elements]

    def _instantiate(self, target: type) -> Any:
        try:
            return target()
        except (TypeError, ValueError) as exc:
            raise InvalidMappingError(
                f"type {target.__name__} cannot be constructed without arguments: {exc}",
                type_name=target.__name__,
            ) from exc

    def _map_structure(
        self,
        node: Mapping[str, Any],
        class_name: str,
        class_map: Mapping[str, TypeRef],
        namespace: str | None,
    ) -> Any:
        target = resolve(class_name, class_map, namespace, self.registry)
        descriptor = describe(target)
        instance = self._instantiate(target)
        aliases = aliases_for(instance)

        for remote_name, value in node.items():
            if value is None:
                continue

            field_name = aliases.get(remote_name, remote_name)
            setter = descriptor.setter_for(field_name)

            if setter is None and not descriptor.has_field(field_name, instance):
                if self.strict:
                    raise StrictMappingError(
                        f"property {descriptor.name}::{field_name} doesn't exist",
                        type_name=descriptor.name,
                        field=field_name,
                    )
                logger.debug("Skipping unknown property %s::%s", descriptor.name, field_name)
                continue

            if classify(value) is not NodeKind.SCALAR:
                value = self.materialize(value, field_name, class_map, namespace)

            if setter is not None:
                value = coerce(target, field_name, value, descriptor)
            try:
                if setter is not None:
                    setter.invoke(instance, value)
                else:
                    setattr(instance, field_name, value)
            except (TypeError, ValueError, AttributeError) as exc:
                raise InvalidMappingError(
                    f"cannot assign property {descriptor.name}::{field_name}: {exc}",
                    type_name=descriptor.name,
                    field=field_name,
                ) from exc

        return instance


def map_object(
    node: Any,
    class_name: str,
    class_map: Mapping[str, TypeRef],
    namespace: str | None = None,
    *,
    strict: bool = False,
    registry: TypeRegistry | None = None,
) -> Any:
    """Materialize ``node`` as ``class_name`` with a one-off mapper."""
    return StructuralMapper(registry=registry, strict=strict).materialize(
        node, class_name, class_map, namespace
    )
