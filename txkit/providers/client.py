"""Chain client protocol shared by the Kupmios and Dolos backends."""

from typing import Any, Dict, List, Protocol

from pycardano import ChainContext


class ChainClient(Protocol):
    """
    Interface for chain data providers (Kupmios, Dolos REST, ...).

    UTxO records are returned in the provider's native shape; see
    txkit.fetching.normalize for the shapes that are understood.
    """

    async def utxos_at(self, address: str) -> List[Dict[str, Any]]:
        """Fetch unspent outputs at a bech32 address."""
        ...

    async def protocol_parameters(self) -> Dict[str, Any]:
        """Fetch current protocol parameters."""
        ...

    def chain_context(self) -> ChainContext:
        """pycardano chain context bound to this provider (blocking)."""
        ...
