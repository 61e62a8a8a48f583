"""Direct node-side clients."""

from .ogmios_client import (
    ChainTip,
    OgmiosClient,
    OgmiosConnectionError,
    OgmiosError,
    OgmiosQueryError,
)

__all__ = ["ChainTip", "OgmiosClient", "OgmiosConnectionError", "OgmiosError", "OgmiosQueryError"]
