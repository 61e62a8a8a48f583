"""
LedgerService: the inbound operations HTTP collaborators call.

    build_from_dsl(from_address, actions) -> UnsignedTransaction
    build_send_value(from_address, to_address, lovelace) -> UnsignedTransaction
    address_balance(address) / address_utxos(address)
    readiness() -> ReadinessVerdict

Validation always runs before any network call, and readiness is checked
before a builder is created, so a request either compiles completely or
leaves nothing behind.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

import httpx

from txkit.blockchain import ChainTip, OgmiosClient
from txkit.config import Settings, settings as default_settings
from txkit.dsl import UnsignedTransaction, compile_actions, pycardano_builder_factory, validate_actions, validate_address
from txkit.dsl.actions import BaseAction
from txkit.errors import CompilationError, ProviderUnavailableError, TxKitError
from txkit.fetching import AddressBalance, Fetcher, NormalizedUtxo
from txkit.providers import (
    ChainClient,
    DolosRestClient,
    KupmiosClient,
    ProviderKind,
    ReadinessResolver,
    ReadinessVerdict,
)

logger = logging.getLogger(__name__)


class LedgerService:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        builder_factory: Optional[Callable[[ProviderKind, str], Any]] = None,
        client_factory: Optional[Callable[[ProviderKind], ChainClient]] = None,
    ):
        self.settings = settings or default_settings
        self._transport = transport
        self.resolver = ReadinessResolver(self.settings, transport)
        self.client_factory = client_factory or self._default_client
        self.builder_factory = builder_factory or pycardano_builder_factory(self.client_factory)
        self.fetcher = Fetcher(self.resolver, self.client_factory)

    def _default_client(self, provider: ProviderKind) -> ChainClient:
        if provider is ProviderKind.KUPMIOS:
            return KupmiosClient(self.settings, self._transport)
        return DolosRestClient(self.settings, self._transport)

    async def _require_provider(self) -> ProviderKind:
        verdict = await self.resolver.resolve()
        if verdict.chosen_provider is None:
            raise ProviderUnavailableError("No reachable provider (Kupmios/Dolos)")
        return verdict.chosen_provider

    # ------------------------------------------------------------------
    # Readiness
    # ------------------------------------------------------------------

    async def readiness(self) -> ReadinessVerdict:
        return await self.resolver.resolve()

    # ------------------------------------------------------------------
    # Transaction building
    # ------------------------------------------------------------------

    def _compile(self, provider: ProviderKind, from_address: str, actions: Sequence[BaseAction]) -> UnsignedTransaction:
        try:
            builder = self.builder_factory(provider, from_address)
        except TxKitError:
            raise
        except Exception as e:
            logger.warning(f"Could not start a transaction for {from_address[:20]}...: {e}")
            raise CompilationError(f"Could not start a transaction: {e}") from e
        return compile_actions(builder, actions)

    async def build_from_dsl(self, from_address: Any, actions: Any) -> UnsignedTransaction:
        """Validate, check readiness, then compile into an unsigned transaction."""
        network = self.settings.network
        from_address = validate_address(from_address, field="fromAddress", network=network)
        validated = validate_actions(actions, network=network)

        provider = await self._require_provider()
        logger.info(f"Building {len(validated)} actions for {from_address[:20]}... via {provider.value}")
        # Ledger SDKs block on chain-context queries
        return await asyncio.to_thread(self._compile, provider, from_address, validated)

    async def build_send_value(self, from_address: Any, to_address: Any, lovelace: Any) -> UnsignedTransaction:
        """Single payLovelace action."""
        return await self.build_from_dsl(
            from_address,
            [{"type": "payLovelace", "toAddress": to_address, "lovelace": lovelace}],
        )

    # ------------------------------------------------------------------
    # Balances and UTxOs
    # ------------------------------------------------------------------

    async def address_balance(self, address: Any) -> AddressBalance:
        address = validate_address(address, network=self.settings.network)
        return await self.fetcher.fetch_balance(address)

    async def address_utxos(self, address: Any) -> List[NormalizedUtxo]:
        address = validate_address(address, network=self.settings.network)
        return await self.fetcher.fetch_utxos(address)

    # ------------------------------------------------------------------
    # Chain queries
    # ------------------------------------------------------------------

    async def protocol_parameters(self) -> Dict[str, Any]:
        provider = await self._require_provider()
        return await self.client_factory(provider).protocol_parameters()

    async def chain_tip(self) -> ChainTip:
        async with OgmiosClient(
            url=self.settings.ogmios_url,
            username=self.settings.ogmios_username,
            password=self.settings.ogmios_password,
        ) as ogmios:
            return await ogmios.get_chain_tip()

    async def fallback_version(self) -> Dict[str, Any]:
        return await DolosRestClient(self.settings, self._transport).version()

    async def fallback_health(self) -> Dict[str, Any]:
        return await DolosRestClient(self.settings, self._transport).health()
