"""
UTxO shape normalisation.

Providers disagree on how an output's value is spelled. Recognised shapes:

    Kupo:        {"transaction_id", "output_index", "value": {"coins": n, "assets": {"p.n": n}}}
    Blockfrost:  {"tx_hash", "output_index", "amount": [{"unit": "lovelace", "quantity": "n"}]}
    SDK-style:   {"txHash", "outputIndex", "assets": {"lovelace": n, "<unit>": n}}
    Ogmios v6:   {"transaction": {"id"}, "index", "value": {"ada": {"lovelace": n}, "<policy>": {"<name>": n}}}

All quantities stay ints end to end.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

from txkit.types import Token, to_quantity


@dataclass(frozen=True)
class NormalizedUtxo:
    tx_hash: str
    output_index: int
    address: str
    lovelace: int
    assets: Dict[str, int] = field(default_factory=dict)  # "<policy>.<name>" -> quantity
    datum_hash: Optional[str] = None
    inline_datum: Optional[str] = None
    script_hash: Optional[str] = None

    @property
    def ref(self) -> str:
        return f"{self.tx_hash}#{self.output_index}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "txHash": self.tx_hash,
            "outputIndex": self.output_index,
            "address": self.address,
            "lovelace": str(self.lovelace),
            "assets": {unit: str(qty) for unit, qty in self.assets.items()},
            "datumHash": self.datum_hash,
            "inlineDatum": self.inline_datum,
            "scriptHash": self.script_hash,
        }


def _add(assets: Dict[str, int], unit: str, quantity: Any) -> int:
    """Accumulate a unit into ``assets``; returns the lovelace part."""
    token = Token.from_unit(unit)
    qty = to_quantity(quantity)
    if token.is_ada:
        return qty
    assets[token.unit] = assets.get(token.unit, 0) + qty
    return 0


def split_value(utxo: Dict[str, Any]) -> Tuple[int, Dict[str, int]]:
    """Extract (lovelace, assets) from any recognised UTxO shape."""
    lovelace = 0
    assets: Dict[str, int] = {}

    amount = utxo.get("amount")
    if isinstance(amount, list):
        for entry in amount:
            if isinstance(entry, dict):
                lovelace += _add(assets, entry.get("unit", ""), entry.get("quantity", 0))
    elif amount is not None:
        lovelace += to_quantity(amount)

    value = utxo.get("value")
    if isinstance(value, dict):
        if "coins" in value:
            lovelace += to_quantity(value["coins"])
            for unit, qty in (value.get("assets") or {}).items():
                lovelace += _add(assets, unit, qty)
        else:
            for policy_id, entries in value.items():
                if policy_id == "ada" and isinstance(entries, dict):
                    lovelace += to_quantity(entries.get("lovelace", 0))
                elif isinstance(entries, dict):
                    for name, qty in entries.items():
                        lovelace += _add(assets, f"{policy_id}.{name}", qty)
    elif value is not None:
        lovelace += to_quantity(value)

    sdk_assets = utxo.get("assets")
    if isinstance(sdk_assets, dict):
        for unit, qty in sdk_assets.items():
            lovelace += _add(assets, unit, qty)

    return lovelace, assets


def _first(utxo: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if utxo.get(key) is not None:
            return utxo[key]
    return None


def normalize_utxo(utxo: Dict[str, Any]) -> NormalizedUtxo:
    """Normalise one provider-native UTxO record. Raises ValueError on unknown shapes."""
    if not isinstance(utxo, dict):
        raise ValueError(f"UTxO record must be an object, got {type(utxo).__name__}")

    transaction = utxo.get("transaction")
    tx_hash = _first(utxo, "tx_hash", "transaction_id", "txHash", "transactionId")
    if tx_hash is None and isinstance(transaction, dict):
        tx_hash = transaction.get("id")
    index = _first(utxo, "output_index", "outputIndex", "index", "tx_index")
    if tx_hash is None or index is None:
        raise ValueError("UTxO record has no transaction reference")

    lovelace, assets = split_value(utxo)
    inline = _first(utxo, "inline_datum", "datum")
    return NormalizedUtxo(
        tx_hash=str(tx_hash),
        output_index=to_quantity(index),
        address=str(utxo.get("address", "")),
        lovelace=lovelace,
        assets=assets,
        datum_hash=_first(utxo, "data_hash", "datum_hash", "datumHash"),
        inline_datum=inline if isinstance(inline, str) else None,
        script_hash=_first(utxo, "reference_script_hash", "script_hash", "scriptHash"),
    )


def sum_lovelace(utxos: Iterable[Dict[str, Any]]) -> int:
    """Total lovelace over provider-native records of any recognised shape."""
    return sum((split_value(u)[0] for u in utxos), 0)


def sum_assets(utxos: Iterable[NormalizedUtxo]) -> Dict[str, int]:
    totals: Dict[str, int] = {}
    for u in utxos:
        for unit, qty in u.assets.items():
            totals[unit] = totals.get(unit, 0) + qty
    return totals
