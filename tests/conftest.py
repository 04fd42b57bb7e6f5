"""Shared fixtures: a mock RPC endpoint speaking the transport's JSON protocol."""

import json

import pytest
import websockets


CALLS = []
HEADERS = {}


async def _mock_endpoint_handler(websocket):
    """Answer calls the way a remote endpoint would after payload decoding."""
    HEADERS.update(
        {
            "user_agent": websocket.request.headers.get("User-Agent"),
            "cookie": websocket.request.headers.get("Cookie"),
        }
    )
    async for raw in websocket:
        req = json.loads(raw)
        req_id = req.get("request_id", "unknown")
        method = req.get("method")
        params = req.get("params")
        CALLS.append({"method": method, "params": params})

        if method == "GetQuote":
            request = (params or {}).get("GetQuote") or {}
            resp = {
                "type": "result",
                "request_id": req_id,
                "status": "success",
                "data": {"GetQuoteResult": {"symbol": request.get("symbol", ""), "price": "1.00"}},
            }
        elif method == "GetItems":
            resp = {
                "type": "result",
                "request_id": req_id,
                "status": "success",
                "data": {"GetItemsResult": {}},
            }
        elif method == "Echo":
            resp = {"type": "result", "request_id": req_id, "status": "success", "data": params}
        elif method == "Slow":
            continue
        else:
            resp = {
                "type": "result",
                "request_id": req_id,
                "status": "error",
                "message": f"unsupported: {method}",
            }

        await websocket.send(json.dumps({"type": "notice", "text": "ignored"}))
        await websocket.send(json.dumps(resp))


@pytest.fixture()
async def mock_endpoint():
    """Start the mock endpoint and yield its URL."""
    CALLS.clear()
    HEADERS.clear()

    server = await websockets.serve(_mock_endpoint_handler, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]

    yield f"ws://127.0.0.1:{port}"

    server.close()
    await server.wait_closed()
