"""Balance and UTxO aggregation over whichever provider is ready."""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from txkit.errors import ProviderError, ProviderUnavailableError
from txkit.providers import ChainClient, ProviderKind, ReadinessResolver, ReadinessVerdict
from .normalize import NormalizedUtxo, normalize_utxo, sum_assets, sum_lovelace

logger = logging.getLogger(__name__)

ClientFactory = Callable[[ProviderKind], ChainClient]


def _normalize_all(raw: List[dict], provider: ProviderKind) -> List[NormalizedUtxo]:
    try:
        return [normalize_utxo(u) for u in raw]
    except (TypeError, ValueError) as e:
        raise ProviderError(f"{provider.value} returned an unrecognised UTxO record: {e}") from e


@dataclass(frozen=True)
class AddressBalance:
    address: str
    lovelace: int
    assets: Dict[str, int] = field(default_factory=dict)
    provider: Optional[ProviderKind] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "success": True,
            "address": self.address,
            "lovelace": str(self.lovelace),
            "assets": {unit: str(qty) for unit, qty in self.assets.items()},
            "provider": self.provider.value if self.provider else None,
        }


class Fetcher:
    """
    Fetches UTxOs for an address from the ready provider.

    Prefers Kupmios, falls back to Dolos when only its health check passes,
    and raises ProviderUnavailableError when neither is usable.
    """

    def __init__(self, resolver: ReadinessResolver, client_factory: ClientFactory):
        self.resolver = resolver
        self.client_factory = client_factory

    async def _client(self, verdict: Optional[ReadinessVerdict] = None) -> Tuple[ChainClient, ProviderKind]:
        verdict = verdict or await self.resolver.resolve()
        provider = verdict.chosen_provider
        if provider is None:
            raise ProviderUnavailableError("No reachable provider (Kupmios/Dolos)")
        return self.client_factory(provider), provider

    async def fetch_utxos(self, address: str, verdict: Optional[ReadinessVerdict] = None) -> List[NormalizedUtxo]:
        """Fetch and normalise all UTxOs at ``address``."""
        client, provider = await self._client(verdict)
        raw = await client.utxos_at(address)
        logger.debug(f"{provider.value}: {len(raw)} UTxOs at {address[:20]}...")
        return _normalize_all(raw, provider)

    async def fetch_balance(self, address: str, verdict: Optional[ReadinessVerdict] = None) -> AddressBalance:
        """Sum lovelace and native assets over all UTxOs at ``address``."""
        client, provider = await self._client(verdict)
        raw = await client.utxos_at(address)
        utxos = _normalize_all(raw, provider)
        return AddressBalance(
            address=address,
            lovelace=sum_lovelace(raw),
            assets=sum_assets(utxos),
            provider=provider,
        )
