"""Per-method response unwrapping and mapping."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from soap_mapper.contracts import EndpointConfig, load_endpoint_config
from soap_mapper.errors import InvalidParameterError, MissingItemError, UnwrappingError
from soap_mapper.materializer import StructuralMapper
from soap_mapper.nodes import NodeKind, classify
from soap_mapper.registry import ClassMap, TypeRef

logger = logging.getLogger("soap-mapper.endpoint")


def _require_structure(data: Any) -> Mapping[str, Any]:
    if classify(data) is not NodeKind.STRUCTURE:
        raise InvalidParameterError(
            f"response is not a keyed structure: {type(data).__name__}",
            shape=classify(data).value,
        )
    return data


def unwrap_single(data: Any) -> Any:
    """Return the value of a single-field envelope."""
    structure = _require_structure(data)
    if len(structure) != 1:
        raise UnwrappingError(
            f"cannot unwrap envelope with {len(structure)} fields",
            fields=list(structure),
        )
    return next(iter(structure.values()))


def unwrap_item(item_name: str, data: Any) -> Any:
    """Return the named field of a structure."""
    structure = _require_structure(data)
    if structure.get(item_name) is None:
        raise MissingItemError(f"item mismatch: {item_name}", item=item_name)
    return structure[item_name]


class EndpointResponseMapper:
    """Turns raw call responses into mapped results using endpoint configuration.

    Methods without configuration get their response unwrapped and
    returned as-is.
    """

    def __init__(
        self,
        endpoints: Mapping[str, EndpointConfig | Mapping[str, Any]] | None = None,
        class_map: Mapping[str, TypeRef] | None = None,
        namespace: str | None = None,
        mapper: StructuralMapper | None = None,
    ) -> None:
        self.endpoints = load_endpoint_config(endpoints or {})
        self.class_map = class_map if isinstance(class_map, ClassMap) else ClassMap(class_map)
        self.namespace = namespace
        self.mapper = mapper or StructuralMapper()

    def config_for(self, method: str) -> EndpointConfig | None:
        return self.endpoints.get(method)

    def handle(self, method: str, raw: Any) -> Any:
        config = self.config_for(method)

        if config is not None and config.item:
            data = unwrap_item(config.item, raw)
        else:
            data = unwrap_single(raw)

        if config is None:
            return data

        if config.root:
            data = unwrap_item(config.root, data)

        if self._is_empty_structure(data):
            logger.debug("Empty result for %s", method)
            return None

        if config.source and classify(data) is NodeKind.STRUCTURE and data.get(config.source) is not None:
            data = data[config.source]
            if self._is_empty_structure(data):
                logger.debug("Empty %s.%s result", method, config.source)
                return None

        if not config.class_name:
            return data

        class_map = self.class_map.layered({method: config.class_name})
        if classify(data) is NodeKind.SEQUENCE:
            return [
                self.mapper.materialize(element, method, class_map, self.namespace)
                for element in data
            ]
        return self.mapper.materialize(data, method, class_map, self.namespace)

    @staticmethod
    def _is_empty_structure(data: Any) -> bool:
        return classify(data) is NodeKind.STRUCTURE and not data
