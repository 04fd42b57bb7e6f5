"""Tests for per-method response unwrapping and mapping."""

from __future__ import annotations

from dataclasses import dataclass

import pytest
from pydantic import ValidationError

from soap_mapper.endpoint import EndpointResponseMapper, unwrap_item, unwrap_single
from soap_mapper.errors import InvalidParameterError, MissingItemError, UnwrappingError
from soap_mapper.materializer import StructuralMapper
from soap_mapper.registry import TypeRegistry


@dataclass
class Item:
    id: str | None = None
    name: str | None = None


@dataclass
class Quote:
    symbol: str | None = None
    price: str | None = None


@dataclass
class Customer:
    name: str | None = None


@dataclass
class Order:
    number: str | None = None
    Customer: Customer | None = None


ENDPOINTS = {
    "GetQuote": {"class": "Quote"},
    "GetItems": {"class": "Item"},
    "SearchItems": {"class": "Item", "source": "Items"},
    "GetNamedQuote": {"class": "Quote", "item": "QuoteResult"},
    "GetWrappedQuote": {"class": "Quote", "root": "Quote"},
    "GetOrder": {"class": "Order"},
    "GetRaw": {},
}


@pytest.fixture()
def responses():
    registry = TypeRegistry()
    for cls in (Item, Quote, Customer, Order):
        registry.register(cls, cls.__name__, f"shop.{cls.__name__}")
    return EndpointResponseMapper(
        ENDPOINTS,
        namespace="shop",
        mapper=StructuralMapper(registry=registry),
    )


class TestUnwrap:
    def test_single_key_envelope(self):
        raw = {"GetQuoteResult": {"symbol": "USD", "price": "1.00"}}
        assert unwrap_single(raw) == {"symbol": "USD", "price": "1.00"}

    def test_ambiguous_envelope(self):
        with pytest.raises(UnwrappingError):
            unwrap_single({"first": 1, "second": 2})

    def test_empty_envelope(self):
        with pytest.raises(UnwrappingError):
            unwrap_single({})

    def test_not_a_structure(self):
        with pytest.raises(InvalidParameterError):
            unwrap_single("Not object")
        with pytest.raises(InvalidParameterError):
            unwrap_item("item", ["value"])

    def test_named_item(self):
        assert unwrap_item("item", {"item": "value", "other": 1}) == "value"

    def test_missing_named_item(self):
        with pytest.raises(MissingItemError):
            unwrap_item("anotherItem", {"item": "value"})


class TestHandle:
    def test_unconfigured_method_returns_unwrapped_data(self, responses):
        raw = {"GetQuoteResult": {"symbol": "USD", "price": "1.00"}}
        assert responses.handle("Unknown", raw) == {"symbol": "USD", "price": "1.00"}

    def test_unconfigured_method_still_requires_single_root(self, responses):
        with pytest.raises(UnwrappingError):
            responses.handle("Unknown", {"a": 1, "b": 2})

    def test_configured_class(self, responses):
        result = responses.handle("GetQuote", {"GetQuoteResult": {"symbol": "USD", "price": "1.00"}})
        assert result == Quote(symbol="USD", price="1.00")

    def test_empty_object_is_absent(self, responses):
        assert responses.handle("GetItems", {"GetItemsResult": {}}) is None

    def test_sequence_is_mapped_per_element(self, responses):
        raw = {"GetItemsResult": [{"id": "1"}, {"id": "2", "name": "Two"}]}
        assert responses.handle("GetItems", raw) == [Item(id="1"), Item(id="2", name="Two")]

    def test_source_sub_field(self, responses):
        raw = {"SearchItemsResult": {"Items": [{"id": "1"}], "total": "1"}}
        assert responses.handle("SearchItems", raw) == [Item(id="1")]

    def test_source_sub_field_absent_falls_back(self, responses):
        raw = {"SearchItemsResult": {"id": "7"}}
        assert responses.handle("SearchItems", raw) == Item(id="7")

    def test_empty_source_is_absent(self, responses):
        assert responses.handle("SearchItems", {"SearchItemsResult": {"Items": {}}}) is None

    def test_named_item_envelope(self, responses):
        raw = {"QuoteResult": {"symbol": "EUR"}, "Header": {"trace": "x"}}
        assert responses.handle("GetNamedQuote", raw) == Quote(symbol="EUR")

    def test_named_item_missing(self, responses):
        with pytest.raises(MissingItemError):
            responses.handle("GetNamedQuote", {"Other": {}})

    def test_root_unwraps_after_envelope(self, responses):
        raw = {"GetWrappedQuoteResponse": {"Quote": {"symbol": "GBP"}}}
        assert responses.handle("GetWrappedQuote", raw) == Quote(symbol="GBP")

    def test_root_missing(self, responses):
        with pytest.raises(MissingItemError):
            responses.handle("GetWrappedQuote", {"GetWrappedQuoteResponse": {"Price": {}}})

    def test_nested_objects_use_namespace(self, responses):
        raw = {"GetOrderResult": {"number": "42", "Customer": {"name": "Ann"}}}
        assert responses.handle("GetOrder", raw) == Order(number="42", Customer=Customer(name="Ann"))

    def test_scalar_result_with_class(self, responses):
        assert responses.handle("GetQuote", {"GetQuoteResult": "n/a"}) == "n/a"

    def test_configured_without_class(self, responses):
        assert responses.handle("GetRaw", {"GetRawResult": {"a": "1"}}) == {"a": "1"}

    def test_base_class_map_is_not_modified(self, responses):
        responses.handle("GetQuote", {"GetQuoteResult": {"symbol": "USD"}})
        assert "GetQuote" not in responses.class_map


def test_invalid_endpoint_config_is_rejected():
    with pytest.raises(ValidationError):
        EndpointResponseMapper({"GetQuote": {"klass": "Quote"}})
