"""Structural mapping between decoded RPC responses and typed objects."""

from soap_mapper.client import RemoteClient
from soap_mapper.contracts import EndpointConfig, load_endpoint_config
from soap_mapper.descriptors import Mappable, aliases_for, describe
from soap_mapper.endpoint import EndpointResponseMapper, unwrap_item, unwrap_single
from soap_mapper.errors import (
    CoercionError,
    InvalidMappingError,
    InvalidParameterError,
    MappingError,
    MissingItemError,
    MissingMappingError,
    RemoteCallError,
    StrictMappingError,
    TransportError,
    UnwrappingError,
)
from soap_mapper.flattener import as_array, flatten, to_parameters
from soap_mapper.materializer import StructuralMapper, map_object
from soap_mapper.nodes import NodeKind, classify
from soap_mapper.registry import ClassMap, TypeRegistry, default_registry, mappable_type, resolve
from soap_mapper.transport import Transport, WebSocketTransport

__version__ = "0.1.0"

__all__ = [
    "ClassMap",
    "CoercionError",
    "EndpointConfig",
    "EndpointResponseMapper",
    "InvalidMappingError",
    "InvalidParameterError",
    "Mappable",
    "MappingError",
    "MissingItemError",
    "MissingMappingError",
    "NodeKind",
    "RemoteCallError",
    "RemoteClient",
    "StrictMappingError",
    "StructuralMapper",
    "Transport",
    "TransportError",
    "TypeRegistry",
    "UnwrappingError",
    "WebSocketTransport",
    "aliases_for",
    "as_array",
    "classify",
    "default_registry",
    "describe",
    "flatten",
    "load_endpoint_config",
    "mappable_type",
    "map_object",
    "resolve",
    "to_parameters",
    "unwrap_item",
    "unwrap_single",
]
