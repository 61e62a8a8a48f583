"""Kupmios backend: Kupo for UTxO lookups, Ogmios for ledger state."""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit

import httpx
from pycardano import ChainContext, Network
from pycardano.backend.kupo import KupoChainContextExtension
from pycardano.backend.ogmios_v6 import OgmiosV6ChainContext

from txkit.blockchain import OgmiosClient
from txkit.config import Settings, settings as default_settings
from txkit.errors import ProviderError

logger = logging.getLogger(__name__)


class KupmiosClient:
    """
    Ogmios + Kupo pair implementing the ChainClient protocol.

    Kupo matches come back as
        {"transaction_id": str, "output_index": int, "address": str,
         "value": {"coins": int, "assets": {"<policy>.<name>": int}}, ...}
    """

    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or default_settings
        self._transport = transport

    async def utxos_at(self, address: str) -> List[Dict[str, Any]]:
        url = f"{self.settings.kupo_url.rstrip('/')}/matches/{address}?unspent"
        async with httpx.AsyncClient(transport=self._transport, timeout=self.settings.request_timeout) as client:
            try:
                response = await client.get(url)
            except httpx.HTTPError as e:
                raise ProviderError(f"Kupo request failed: {e}") from e
        if not response.is_success:
            raise ProviderError(f"Kupo error: {response.status_code}")
        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError("Kupo returned invalid JSON") from e
        return data if isinstance(data, list) else []

    async def protocol_parameters(self) -> Dict[str, Any]:
        async with OgmiosClient(
            url=self.settings.ogmios_url,
            username=self.settings.ogmios_username,
            password=self.settings.ogmios_password,
        ) as ogmios:
            return await ogmios.get_protocol_parameters()

    def chain_context(self) -> ChainContext:
        parts = urlsplit(self.settings.ogmios_url)
        secure = parts.scheme in ("https", "wss")
        ogmios = OgmiosV6ChainContext(
            host=parts.hostname or "localhost",
            port=parts.port or (443 if secure else 1337),
            path=parts.path.strip("/"),
            secure=secure,
            network=Network.MAINNET if self.settings.is_mainnet else Network.TESTNET,
        )
        return KupoChainContextExtension(ogmios, kupo_url=self.settings.kupo_url)
