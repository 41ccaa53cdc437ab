"""RpcClient -- async client for the blockchain node's JSON-RPC and REST APIs.

Every JSON-RPC call is a POST of a 2.0 envelope whose params always carry
``protoVer``.  The node wraps results twice (``result.result``) and reports
application errors either as a top-level ``error`` or as a non-zero
``code`` inside the outer result.  All of these, plus transport failures,
surface as ``DataSourceUnavailableError`` (``RpcError`` for node-reported
errors) so callers handle a single error channel.

Responses are reused for ``cache_ttl`` seconds, matching the explorer's
short revalidation window.  Expired entries are dropped whenever a new
response is stored, and every caller gets its own copy of a cached value.

Public API:
    DEFAULT_RPC_URL: Devnet JSON-RPC endpoint.
    PROTO_VER: Protocol version sent with every call.
    RpcClient: The client.
"""

from __future__ import annotations

import asyncio
import copy
import itertools
import json
import logging
import re
import time
from typing import Any

import aiohttp

from .exceptions import DataSourceUnavailableError, RpcError

logger = logging.getLogger(__name__)

DEFAULT_RPC_URL = "https://devnet-api.ainetwork.ai/json-rpc"
PROTO_VER = "1.0.0"


def rest_base_for(rpc_url: str) -> str:
    """Strip the ``/json-rpc`` suffix to get the REST base URL."""
    return re.sub(r"/json-rpc/?$", "", rpc_url)


class RpcClient:
    """Async client for one blockchain node.

    Use as an async context manager to share one ``aiohttp`` session across
    calls; otherwise each call opens its own short-lived session.

    Args:
        rpc_url: JSON-RPC endpoint.
        rest_base: Base URL of the REST helpers; derived from *rpc_url* when None.
        timeout: Total per-request timeout in seconds.
        cache_ttl: Seconds a response may be reused; 0 disables reuse.
        session: Externally owned session (not closed by the client).
    """

    def __init__(
        self,
        rpc_url: str = DEFAULT_RPC_URL,
        *,
        rest_base: str | None = None,
        timeout: float = 15.0,
        cache_ttl: float = 10.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._rpc_url = rpc_url
        self._rest_base = (rest_base or rest_base_for(rpc_url)).rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._cache_ttl = cache_ttl
        self._session = session
        self._owns_session = False
        # Correlates requests with responses only; values may interleave.
        self._request_ids = itertools.count(1)
        self._cache: dict[str, tuple[float, Any]] = {}

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    @property
    def rest_base(self) -> str:
        return self._rest_base

    # ── lifecycle ─────────────────────────────────────────────

    async def __aenter__(self) -> RpcClient:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the session if this client opened it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
        self._session = None
        self._owns_session = False

    def clear_cache(self) -> None:
        self._cache.clear()

    # ── transport ─────────────────────────────────────────────

    def _cached(self, key: str) -> tuple[bool, Any]:
        if self._cache_ttl <= 0:
            return False, None
        entry = self._cache.get(key)
        if entry is None:
            return False, None
        stored_at, value = entry
        if time.monotonic() - stored_at > self._cache_ttl:
            self._cache.pop(key, None)
            return False, None
        return True, copy.deepcopy(value)

    def _remember(self, key: str, value: Any) -> None:
        if self._cache_ttl <= 0:
            return
        now = time.monotonic()
        expired = [k for k, (stored_at, _) in self._cache.items() if now - stored_at > self._cache_ttl]
        for k in expired:
            del self._cache[k]
        self._cache[key] = (now, copy.deepcopy(value))

    async def _request_json(self, method: str, url: str, payload: Any = None) -> Any:
        """Send one HTTP request and decode the JSON body.

        Raises:
            DataSourceUnavailableError: On connection errors, timeouts or
                a body that is not JSON.
        """
        try:
            if self._session is not None:
                return await self._send(self._session, method, url, payload)
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                return await self._send(session, method, url, payload)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DataSourceUnavailableError(f"Request to {url} failed: {e}") from e
        except ValueError as e:
            raise DataSourceUnavailableError(f"Malformed JSON from {url}: {e}") from e

    @staticmethod
    async def _send(session: aiohttp.ClientSession, method: str, url: str, payload: Any) -> Any:
        async with session.request(method, url, json=payload) as resp:
            body = await resp.text()
            if resp.status >= 500 and not body:
                raise DataSourceUnavailableError(f"{url} answered HTTP {resp.status}")
            return json.loads(body)

    # ── JSON-RPC ──────────────────────────────────────────────

    def _envelope(self, method: str, params: dict[str, Any] | None) -> dict[str, Any]:
        return {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
            "params": {"protoVer": PROTO_VER, **(params or {})},
        }

    async def call_raw(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """Send a call and return the node's envelope untouched."""
        logger.debug("RPC %s %s", method, params)
        return await self._request_json("POST", self._rpc_url, self._envelope(method, params))

    async def call(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """Send a call and return the unwrapped result.

        Raises:
            RpcError: If the node reports an error.
            DataSourceUnavailableError: On transport failure or a malformed envelope.
        """
        cache_key = f"rpc:{method}:{json.dumps(params or {}, sort_keys=True, default=str)}"
        hit, value = self._cached(cache_key)
        if hit:
            return value

        envelope = await self.call_raw(method, params)
        value = self._unwrap(method, envelope)
        self._remember(cache_key, value)
        return value

    @staticmethod
    def _unwrap(method: str, envelope: Any) -> Any:
        if not isinstance(envelope, dict):
            raise DataSourceUnavailableError(f"Malformed response envelope for {method}")

        error = envelope.get("error")
        if error:
            if isinstance(error, dict):
                raise RpcError(str(error.get("message") or error), error.get("code"))
            raise RpcError(str(error))

        wrapper = envelope.get("result")
        if isinstance(wrapper, dict):
            code = wrapper.get("code")
            if code is not None and code != 0 and wrapper.get("result") is None:
                raise RpcError(wrapper.get("message") or f"RPC error code {code}", code)
            if "result" in wrapper:
                return wrapper["result"]
        return wrapper

    # ── block methods ─────────────────────────────────────────

    async def get_last_block_number(self) -> int:
        return await self.call("ain_getLastBlockNumber")

    async def get_last_block(self) -> Any:
        return await self.call("ain_getLastBlock")

    async def get_block_by_number(self, number: int, get_full_transactions: bool = False) -> Any:
        return await self.call(
            "ain_getBlockByNumber",
            {"number": number, "getFullTransactions": get_full_transactions},
        )

    async def get_block_by_hash(self, block_hash: str, get_full_transactions: bool = False) -> Any:
        return await self.call(
            "ain_getBlockByHash",
            {"hash": block_hash, "getFullTransactions": get_full_transactions},
        )

    async def get_block_list(self, start: int, end: int) -> Any:
        return await self.call("ain_getBlockList", {"from": start, "to": end})

    async def get_block_headers_list(self, start: int, end: int) -> Any:
        return await self.call("ain_getBlockHeadersList", {"from": start, "to": end})

    async def get_block_transaction_count_by_number(self, number: int) -> int:
        return await self.call("ain_getBlockTransactionCountByNumber", {"number": number})

    # ── transaction methods ───────────────────────────────────

    async def get_transaction_by_hash(self, tx_hash: str) -> Any:
        return await self.call("ain_getTransactionByHash", {"hash": tx_hash})

    async def get_transaction_by_block_number_and_index(self, block_number: int, tx_index: int) -> Any:
        return await self.call(
            "ain_getTransactionByBlockNumberAndIndex",
            {"block_number": block_number, "tx_index": tx_index},
        )

    # ── account / validator / network methods ─────────────────

    async def get_balance(self, address: str) -> Any:
        return await self.call("ain_getBalance", {"address": address})

    async def get_nonce(self, address: str) -> Any:
        return await self.call("ain_getNonce", {"address": address})

    async def get_validators_by_number(self, number: int) -> Any:
        return await self.call("ain_getValidatorsByNumber", {"number": number})

    async def get_validator_info(self, address: str) -> Any:
        return await self.call("ain_getValidatorInfo", {"address": address})

    async def get_consensus_status(self) -> Any:
        return await self.call("net_consensusStatus")

    async def get_peer_count(self) -> Any:
        return await self.call("net_peerCount")

    async def get_network_id(self) -> Any:
        return await self.call("net_getNetworkId")

    # ── database methods ──────────────────────────────────────

    async def get_value(self, ref: str) -> Any:
        """Read the value tree at *ref* (None when nothing is stored there)."""
        return await self.call("ain_get", {"type": "GET_VALUE", "ref": ref})

    async def get_rule(self, ref: str) -> Any:
        return await self.call("ain_get", {"type": "GET_RULE", "ref": ref})

    async def get_function(self, ref: str) -> Any:
        return await self.call("ain_get", {"type": "GET_FUNCTION", "ref": ref})

    async def get_owner(self, ref: str) -> Any:
        return await self.call("ain_get", {"type": "GET_OWNER", "ref": ref})

    async def match_function(self, ref: str) -> Any:
        return await self.call("ain_matchFunction", {"ref": ref})

    async def match_rule(self, ref: str) -> Any:
        return await self.call("ain_matchRule", {"ref": ref})

    async def match_owner(self, ref: str) -> Any:
        return await self.call("ain_matchOwner", {"ref": ref})

    # ── REST helpers ──────────────────────────────────────────

    async def rest(self, path: str) -> Any:
        """GET a REST convenience endpoint and unwrap its ``result``."""
        url = f"{self._rest_base}{path}"
        cache_key = f"rest:{url}"
        hit, value = self._cached(cache_key)
        if hit:
            return value

        body = await self._request_json("GET", url)
        if isinstance(body, dict) and body.get("result") is not None:
            value = body["result"]
        else:
            value = body
        self._remember(cache_key, value)
        return value

    async def get_recent_blocks_with_transactions(self, count: int = 10) -> list[Any]:
        result = await self.rest(f"/recent_blocks_with_transactions?count={count}")
        return result if isinstance(result, list) else []

    async def get_recent_transactions(self, count: int = 50) -> list[Any]:
        result = await self.rest(f"/recent_transactions?count={count}")
        return result if isinstance(result, list) else []


__all__ = ["DEFAULT_RPC_URL", "PROTO_VER", "RpcClient", "rest_base_for"]
