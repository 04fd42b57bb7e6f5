"""End-to-end tests: typed request -> transport -> mapped result."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from soap_mapper.client import RemoteClient
from soap_mapper.config import MapperConfig
from soap_mapper.errors import InvalidParameterError, StrictMappingError
from soap_mapper.registry import TypeRegistry
from soap_mapper.transport import WebSocketTransport

from conftest import CALLS


@dataclass
class GetQuote:
    symbol: str | None = None
    exchange: str | None = None


@dataclass
class Quote:
    symbol: str | None = None
    price: str | None = None


@dataclass
class Item:
    id: str | None = None


ENDPOINTS = {"GetQuote": {"class": "Quote"}, "GetItems": {"class": "Item"}}

CONFIG = MapperConfig(strict=False, namespace=None, lower_case_first=False, keep_nulls=True)


class FakeTransport:
    """In-memory transport returning canned responses."""

    def __init__(self, responses):
        self.responses = responses
        self.sent = []

    async def request(self, method, params):
        self.sent.append((method, params))
        return self.responses[method]


@pytest.fixture()
def registry():
    reg = TypeRegistry()
    for cls in (Quote, Item):
        reg.register(cls, cls.__name__)
    return reg


@pytest.mark.asyncio
async def test_call_over_websocket(mock_endpoint, registry):
    transport = WebSocketTransport(url=mock_endpoint, max_retries=0, auto_reconnect=False)
    client = RemoteClient(transport, ENDPOINTS, registry=registry, config=CONFIG)
    try:
        quote = await client.call("GetQuote", GetQuote(symbol="USD"))
        items = await client.call("GetItems")
    finally:
        await transport.disconnect()

    assert quote == Quote(symbol="USD", price="1.00")
    assert items is None
    assert CALLS[0]["params"] == {"GetQuote": {"symbol": "USD", "exchange": ""}}
    assert CALLS[1]["params"] is None


@pytest.mark.asyncio
async def test_request_options(registry):
    transport = FakeTransport({"GetQuote": {"GetQuoteResult": {"symbol": "EUR"}}})
    client = RemoteClient(transport, ENDPOINTS, registry=registry, config=CONFIG)
    client.set_lower_case_first(True).set_keep_null_properties(False)

    quote = await client.call("GetQuote", GetQuote(symbol="EUR"))

    assert quote == Quote(symbol="EUR")
    assert transport.sent == [("GetQuote", {"getQuote": {"symbol": "EUR"}})]


@pytest.mark.asyncio
async def test_mapping_requests_are_sent_unchanged(registry):
    transport = FakeTransport({"Ping": {"PingResult": "pong"}})
    client = RemoteClient(transport, registry=registry, config=CONFIG)

    assert await client.call("Ping", {"raw": "tree"}) == "pong"
    assert transport.sent == [("Ping", {"raw": "tree"})]


@pytest.mark.asyncio
async def test_strict_mapping(registry):
    transport = FakeTransport({"GetQuote": {"GetQuoteResult": {"symbol": "EUR", "volume": "9"}}})
    client = RemoteClient(transport, ENDPOINTS, registry=registry, config=CONFIG)

    assert (await client.call("GetQuote")) == Quote(symbol="EUR")

    client.set_strict_mapping()
    assert client.strict is True
    with pytest.raises(StrictMappingError):
        await client.call("GetQuote")


def test_as_class(registry):
    client = RemoteClient(FakeTransport({}), registry=registry, config=CONFIG)

    result = client.as_class({"Quote": {"symbol": "USD"}}, {"Quote": "Quote"})
    assert result == Quote(symbol="USD")

    with pytest.raises(InvalidParameterError):
        client.as_class(["not", "a", "structure"])
    with pytest.raises(InvalidParameterError):
        client.as_class({})


def test_as_array_and_flatten():
    client = RemoteClient(FakeTransport({}), config=CONFIG)
    assert client.as_array(GetQuote(symbol="USD")) == "USD"
    assert client.flatten(GetQuote()) == {"symbol": "", "exchange": ""}
