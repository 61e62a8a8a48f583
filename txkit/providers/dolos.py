"""Dolos fallback backend (minibf, a Blockfrost-compatible REST surface)."""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pycardano import BlockFrostChainContext, ChainContext, Network

from txkit.config import Settings, settings as default_settings
from txkit.errors import ProviderError

logger = logging.getLogger(__name__)

PAGE_SIZE = 100  # Blockfrost maximum per page


class DolosRestClient:
    """
    Dolos REST implementing the ChainClient protocol.

    UTxOs come back Blockfrost-shaped:
        {"tx_hash": str, "output_index": int, "address": str,
         "amount": [{"unit": "lovelace", "quantity": "1000000"}, ...], ...}
    """

    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or default_settings
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self.settings.dolos_rest_url.rstrip("/")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            transport=self._transport,
            timeout=self.settings.request_timeout,
        )

    async def _get_json(self, client: httpx.AsyncClient, path: str, **params: Any) -> Any:
        try:
            response = await client.get(path, params=params or None)
        except httpx.HTTPError as e:
            raise ProviderError(f"Dolos REST request failed: {e}") from e
        if response.status_code == 404:
            return None
        if not response.is_success:
            raise ProviderError(f"Dolos REST error: {response.status_code}")
        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(f"Dolos REST returned invalid JSON for {path}") from e

    async def utxos_at(self, address: str) -> List[Dict[str, Any]]:
        utxos: List[Dict[str, Any]] = []
        async with self._client() as client:
            page = 1
            while True:
                batch = await self._get_json(
                    client, f"/api/v0/addresses/{address}/utxos", count=PAGE_SIZE, page=page
                )
                # 404: address never seen on chain
                if not isinstance(batch, list):
                    break
                utxos.extend(batch)
                if len(batch) < PAGE_SIZE:
                    break
                page += 1
        logger.debug(f"Dolos returned {len(utxos)} UTxOs for {address[:20]}...")
        return utxos

    async def protocol_parameters(self) -> Dict[str, Any]:
        async with self._client() as client:
            params = await self._get_json(client, "/api/v0/epochs/latest/parameters")
        if not isinstance(params, dict):
            raise ProviderError("Dolos REST returned no protocol parameters")
        return params

    async def version(self) -> Dict[str, Any]:
        """Root document: ``{"url": ..., "version": ..., "revision": ...}``."""
        async with self._client() as client:
            data = await self._get_json(client, "/")
        if not isinstance(data, dict):
            raise ProviderError("Dolos REST root returned no version document")
        return data

    async def health(self) -> Dict[str, Any]:
        async with self._client() as client:
            data = await self._get_json(client, self.settings.dolos_health_path)
        return data if isinstance(data, dict) else {"is_healthy": data is not None}

    def chain_context(self) -> ChainContext:
        # BlockFrostApi appends the /v0 version segment itself
        return BlockFrostChainContext(
            project_id=self.settings.blockfrost_project_id or "dolos",
            network=Network.MAINNET if self.settings.is_mainnet else Network.TESTNET,
            base_url=f"{self.base_url}/api",
        )
