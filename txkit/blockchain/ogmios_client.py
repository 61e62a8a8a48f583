"""Ogmios WebSocket client for chain tip and protocol parameter queries."""

import asyncio
import base64
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import WebSocketException

from txkit.errors import ProviderError

logger = logging.getLogger(__name__)


@dataclass
class ChainTip:
    slot: int
    block_hash: str
    block_height: Optional[int] = None


class OgmiosError(ProviderError):
    """Base exception for Ogmios errors."""

class OgmiosConnectionError(OgmiosError):
    """Connection-related errors."""

class OgmiosQueryError(OgmiosError):
    """Query-related errors."""


def websocket_url(url: str) -> str:
    """Ogmios serves HTTP and WebSocket on the same port; map http(s) to ws(s)."""
    if url.startswith("https://"):
        return "wss://" + url[len("https://"):]
    if url.startswith("http://"):
        return "ws://" + url[len("http://"):]
    return url


class OgmiosClient:
    """Async client for the Ogmios v6 JSON-RPC WebSocket API."""

    def __init__(self, url: str = "ws://localhost:1337", username: Optional[str] = None, password: Optional[str] = None):
        self.url = websocket_url(url)
        self.username = username
        self.password = password
        self._ws: Optional[ClientConnection] = None
        self._request_id = 0

    def _get_headers(self) -> Dict[str, str]:
        if self.username and self.password:
            encoded = base64.b64encode(f"{self.username}:{self.password}".encode()).decode()
            return {"Authorization": f"Basic {encoded}"}
        return {}

    async def connect(self) -> None:
        try:
            headers = self._get_headers()
            # Protocol parameters and large UTxO answers exceed the default frame size
            connect_kwargs: Dict[str, Any] = {"max_size": 50 * 1024 * 1024}
            if headers:
                connect_kwargs["additional_headers"] = headers
            self._ws = await connect(self.url, **connect_kwargs)
            logger.info(f"Connected to Ogmios at {self.url}")
        except (OSError, WebSocketException) as e:
            raise OgmiosConnectionError(f"Failed to connect to Ogmios at {self.url}: {e}") from e

    async def disconnect(self):
        if self._ws:
            await self._ws.close()
            self._ws = None
            logger.info("Disconnected from Ogmios")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()

    def _next_request_id(self) -> int:
        self._request_id += 1
        return self._request_id

    async def _send_request(self, method: str, params: Optional[Dict[str, Any]] = None, timeout: float = 30.0) -> Any:
        """Send JSON-RPC request and wait for response."""
        if not self._ws:
            raise OgmiosConnectionError("Not connected to Ogmios")

        request: Dict[str, Any] = {"jsonrpc": "2.0", "method": method, "id": self._next_request_id()}
        if params:
            request["params"] = params

        try:
            await self._ws.send(json.dumps(request))
            response = json.loads(await asyncio.wait_for(self._ws.recv(), timeout=timeout))
        except asyncio.TimeoutError:
            raise OgmiosQueryError(f"Request timed out after {timeout}s: {method}")
        except (OSError, ValueError, WebSocketException) as e:
            raise OgmiosQueryError(f"Request failed: {e}") from e

        if "result" in response:
            return response["result"]
        if "error" in response:
            err = response["error"]
            raise OgmiosQueryError(f"Ogmios error: {err.get('message', err) if isinstance(err, dict) else err}")
        return response

    async def get_chain_tip(self) -> ChainTip:
        """Query current chain tip."""
        for method in ["queryLedgerState/tip", "queryNetwork/tip"]:
            try:
                r = await self._send_request(method)
                if isinstance(r, dict):
                    return ChainTip(
                        slot=r.get("slot", r.get("slotNo", 0)),
                        block_hash=r.get("id", r.get("hash", r.get("headerHash", ""))),
                        block_height=r.get("height", r.get("blockNo")),
                    )
            except OgmiosQueryError:
                continue
        raise OgmiosQueryError("Failed to query chain tip")

    async def get_protocol_parameters(self) -> Dict[str, Any]:
        return await self._send_request("queryLedgerState/protocolParameters")
