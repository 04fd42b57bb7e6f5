"""Remote client composing a transport with request flattening and response mapping."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from soap_mapper.config import MapperConfig, get_mapper_config
from soap_mapper.contracts import EndpointConfig
from soap_mapper.endpoint import EndpointResponseMapper
from soap_mapper.errors import InvalidParameterError
from soap_mapper.flattener import as_array, flatten, to_parameters
from soap_mapper.materializer import StructuralMapper
from soap_mapper.nodes import NodeKind, classify
from soap_mapper.registry import ClassMap, TypeRef, TypeRegistry

logger = logging.getLogger("soap-mapper.client")


class RemoteClient:
    """Calls remote methods with typed requests and returns mapped results.

    Requests that are plain objects are flattened under their bare type
    name; mappings and scalars are sent unchanged. Responses go through
    ``EndpointResponseMapper`` with the configured endpoint table.
    """

    def __init__(
        self,
        transport: Any,
        endpoints: Mapping[str, EndpointConfig | Mapping[str, Any]] | None = None,
        class_map: Mapping[str, TypeRef] | None = None,
        namespace: str | None = None,
        *,
        registry: TypeRegistry | None = None,
        config: MapperConfig | None = None,
    ) -> None:
        config = config or get_mapper_config()
        self.transport = transport
        self.lower_case_first = config.lower_case_first
        self.keep_nulls = config.keep_nulls
        self.mapper = StructuralMapper(registry=registry, strict=config.strict)
        self.responses = EndpointResponseMapper(
            endpoints,
            class_map=class_map,
            namespace=namespace if namespace is not None else config.namespace,
            mapper=self.mapper,
        )

    @property
    def strict(self) -> bool:
        return self.mapper.strict

    def set_strict_mapping(self, strict: bool = True) -> "RemoteClient":
        self.mapper.strict = strict
        return self

    def set_lower_case_first(self, lower_case_first: bool) -> "RemoteClient":
        """Lowercase the first character of the request root element name."""
        self.lower_case_first = lower_case_first
        return self

    def set_keep_null_properties(self, keep_nulls: bool) -> "RemoteClient":
        """Send null request fields as empty text instead of dropping them."""
        self.keep_nulls = keep_nulls
        return self

    def build_parameters(self, request: Any) -> Any:
        if request is None or isinstance(request, (Mapping, list, tuple, str, int, float, bool)):
            return request
        return to_parameters(request, self.lower_case_first, self.keep_nulls)

    async def call(self, method: str, request: Any = None) -> Any:
        params = self.build_parameters(request)
        logger.debug("Calling %s", method)
        raw = await self.transport.request(method, params)
        return self.responses.handle(method, raw)

    def as_class(
        self,
        result: Any,
        class_map: Mapping[str, TypeRef] | None = None,
        namespace: str | None = None,
    ) -> Any:
        """Map a raw result using its first field name as the root element."""
        if classify(result) is not NodeKind.STRUCTURE:
            raise InvalidParameterError(
                f"result is not a keyed structure: {type(result).__name__}",
                shape=classify(result).value,
            )
        if not result:
            raise InvalidParameterError("result has no root element")
        root_name = next(iter(result))
        return self.mapper.materialize(
            result[root_name],
            root_name,
            ClassMap(class_map),
            namespace if namespace is not None else self.responses.namespace,
        )

    def as_array(self, obj: Any, strict_array: bool = False) -> Any:
        return as_array(obj, strict_array, self.keep_nulls)

    def flatten(self, value: Any) -> Any:
        return flatten(value, self.keep_nulls)
