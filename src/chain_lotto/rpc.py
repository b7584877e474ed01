from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict
import httpx


@dataclass(frozen=True)
class BlockHeader:
    number: int
    hash: str
    timestamp: int
    prev_randao: bytes  # mixHash after the merge


def _hex_to_int(v: Any) -> int:
    if isinstance(v, int):
        return v
    return int(str(v), 16)


def _hex_to_bytes(v: str) -> bytes:
    v = v[2:] if v.startswith("0x") else v
    return bytes.fromhex(v)


def _block_tag(block: int | str) -> str:
    if isinstance(block, int):
        return hex(block)
    return block


def parse_block(result: Dict[str, Any]) -> BlockHeader:
    for key in ("number", "hash", "timestamp"):
        if result.get(key) is None:
            raise RuntimeError(f"Block is missing {key!r}")
    randao = result.get("mixHash") or result.get("prevRandao") or result["hash"]
    return BlockHeader(
        number=_hex_to_int(result["number"]),
        hash=result["hash"],
        timestamp=_hex_to_int(result["timestamp"]),
        prev_randao=_hex_to_bytes(randao),
    )


class RpcClient:
    def __init__(
        self,
        rpc_url: str,
        timeout_s: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.client = httpx.Client(timeout=timeout_s, transport=transport)
        self._next_id = 1

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "RpcClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def _post(self, method: str, params: list) -> Dict[str, Any]:
        payload = {
            "jsonrpc": "2.0",
            "id": self._next_id,
            "method": method,
            "params": params,
        }
        self._next_id += 1
        resp = self.client.post(self.rpc_url, json=payload)
        resp.raise_for_status()
        data = resp.json()
        if "error" in data:
            raise RuntimeError(f"RPC error: {data['error']}")
        return data

    def get_block_number(self) -> int:
        """Returns the number of the most recent block."""
        data = self._post("eth_blockNumber", [])
        return _hex_to_int(data["result"])

    def get_block(self, block: int | str = "latest") -> BlockHeader:
        """Returns the header fields of a block, by number or tag."""
        data = self._post("eth_getBlockByNumber", [_block_tag(block), False])
        result = data.get("result")
        if not result:
            raise RuntimeError(f"Block {block}: eth_getBlockByNumber returned nothing.")
        return parse_block(result)


def load_block_from_file(path: str) -> BlockHeader:
    """
    Supports:
    1) {"number": "0x..", "hash": "0x..", "timestamp": "0x..", "mixHash": "0x.."}
    2) a saved JSON-RPC response: {"result": {...same fields...}}
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = f.read().strip()

    try:
        j = json.loads(raw)
    except ValueError as e:
        raise RuntimeError(f"Block file is not valid JSON: {e}")

    if isinstance(j, dict) and isinstance(j.get("result"), dict):
        j = j["result"]
    if not isinstance(j, dict):
        raise RuntimeError("Block file must contain a JSON object.")
    return parse_block(j)
