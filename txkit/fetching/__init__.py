"""UTxO fetching and normalisation."""

from .fetcher import AddressBalance, Fetcher
from .normalize import NormalizedUtxo, normalize_utxo, split_value, sum_assets, sum_lovelace

__all__ = [
    "AddressBalance",
    "Fetcher",
    "NormalizedUtxo",
    "normalize_utxo",
    "split_value",
    "sum_assets",
    "sum_lovelace",
]
