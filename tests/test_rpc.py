from __future__ import annotations

import json

import httpx
import pytest

from chain_lotto.rpc import RpcClient, load_block_from_file

BLOCK = {
    "number": "0x10",
    "hash": "0x" + "ab" * 32,
    "timestamp": "0x6553f100",
    "mixHash": "0x" + "cd" * 32,
}


def _client(handler) -> RpcClient:
    return RpcClient("http://node.test", transport=httpx.MockTransport(handler))


def test_get_block_number():
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert body["method"] == "eth_blockNumber"
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": "0x1b4"})

    with _client(handler) as rpc:
        assert rpc.get_block_number() == 436


def test_get_block_latest():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        calls.append(body)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": BLOCK})

    with _client(handler) as rpc:
        header = rpc.get_block()
        rpc.get_block(16)

    assert calls[0]["method"] == "eth_getBlockByNumber"
    assert calls[0]["params"] == ["latest", False]
    assert calls[1]["params"] == ["0x10", False]
    assert calls[0]["id"] != calls[1]["id"]
    assert header.number == 16
    assert header.timestamp == 0x6553F100
    assert header.prev_randao == bytes.fromhex("cd" * 32)


def test_rpc_error_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "boom"}})

    with _client(handler) as rpc:
        with pytest.raises(RuntimeError, match="RPC error"):
            rpc.get_block_number()


def test_missing_block_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": None})

    with _client(handler) as rpc:
        with pytest.raises(RuntimeError, match="returned nothing"):
            rpc.get_block(99)


def test_http_error_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    with _client(handler) as rpc:
        with pytest.raises(httpx.HTTPStatusError):
            rpc.get_block_number()


def test_load_block_from_file(tmp_path):
    plain = tmp_path / "block.json"
    plain.write_text(json.dumps(BLOCK), encoding="utf-8")
    wrapped = tmp_path / "response.json"
    wrapped.write_text(json.dumps({"jsonrpc": "2.0", "id": 1, "result": BLOCK}), encoding="utf-8")

    assert load_block_from_file(str(plain)) == load_block_from_file(str(wrapped))
    assert load_block_from_file(str(plain)).number == 16


def test_load_block_from_bad_file(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("not json", encoding="utf-8")
    with pytest.raises(RuntimeError, match="not valid JSON"):
        load_block_from_file(str(bad))

    partial = tmp_path / "partial.json"
    partial.write_text(json.dumps({"number": "0x1"}), encoding="utf-8")
    with pytest.raises(RuntimeError, match="missing"):
        load_block_from_file(str(partial))
