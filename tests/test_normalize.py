import pytest

from conftest import POLICY, SENDER, TX_HASH
from txkit.fetching import normalize_utxo, split_value, sum_assets, sum_lovelace
from txkit.types import Token, to_quantity

NAME = "74657374"
UNIT = f"{POLICY}.{NAME}"

KUPO = {
    "transaction_id": TX_HASH,
    "output_index": 1,
    "address": SENDER,
    "value": {"coins": 3_000_000, "assets": {UNIT: 7}},
    "datum_hash": "d" * 64,
}
BLOCKFROST = {
    "tx_hash": TX_HASH,
    "output_index": 0,
    "address": SENDER,
    "amount": [{"unit": "lovelace", "quantity": "1000000"}, {"unit": POLICY + NAME, "quantity": "5"}],
    "inline_datum": "d87980",
}
SDK = {"txHash": TX_HASH, "outputIndex": 2, "address": SENDER, "assets": {"lovelace": 2_500_000, UNIT: 3}}
OGMIOS = {
    "transaction": {"id": TX_HASH},
    "index": 3,
    "address": SENDER,
    "value": {"ada": {"lovelace": 4_000_000}, POLICY: {NAME: 11}},
}


@pytest.mark.parametrize(
    "utxo, lovelace, assets",
    [
        (KUPO, 3_000_000, {UNIT: 7}),
        (BLOCKFROST, 1_000_000, {UNIT: 5}),
        (SDK, 2_500_000, {UNIT: 3}),
        (OGMIOS, 4_000_000, {UNIT: 11}),
        ({"amount": "42"}, 42, {}),
        ({"value": 9}, 9, {}),
        ({}, 0, {}),
    ],
)
def test_split_value_shapes(utxo, lovelace, assets):
    assert split_value(utxo) == (lovelace, assets)


def test_normalize_reads_every_reference_spelling():
    refs = [normalize_utxo(u).ref for u in (KUPO, BLOCKFROST, SDK, OGMIOS)]
    assert refs == [f"{TX_HASH}#1", f"{TX_HASH}#0", f"{TX_HASH}#2", f"{TX_HASH}#3"]


def test_normalize_keeps_datums():
    assert normalize_utxo(KUPO).datum_hash == "d" * 64
    assert normalize_utxo(BLOCKFROST).inline_datum == "d87980"
    assert normalize_utxo(SDK).inline_datum is None


def test_normalize_requires_reference():
    with pytest.raises(ValueError):
        normalize_utxo({"address": SENDER, "amount": "1"})
    with pytest.raises(ValueError):
        normalize_utxo("abc#0")


def test_to_dict_serialises_quantities_as_strings():
    data = normalize_utxo(KUPO).to_dict()
    assert data["lovelace"] == "3000000"
    assert data["assets"] == {UNIT: "7"}
    assert data["txHash"] == TX_HASH
    assert data["outputIndex"] == 1


def test_mixed_shapes_sum_exactly_at_large_magnitudes():
    a = 123_456_789_012_345_678
    b = 987_654_321_098_765_432
    c = 100_000_000_000_000_001
    utxos = [
        {"amount": [{"unit": "lovelace", "quantity": str(a)}]},
        {"assets": {"lovelace": b}},
        {"value": {"coins": str(c), "assets": {}}},
    ]
    total = sum_lovelace(utxos)
    assert total == a + b + c
    assert total == 1_211_111_110_111_111_111
    # floating point would have lost the low digits
    assert total != int(float(a) + float(b) + float(c))


def test_asset_totals_across_shapes():
    normalized = [normalize_utxo(u) for u in (KUPO, BLOCKFROST, SDK, OGMIOS)]
    assert sum_assets(normalized) == {UNIT: 7 + 5 + 3 + 11}
    assert sum((u.lovelace for u in normalized), 0) == 10_500_000


@pytest.mark.parametrize("quantity", [1.5, 1e18, True, None, "1.0", "0x10"])
def test_non_integer_quantities_are_rejected(quantity):
    with pytest.raises((TypeError, ValueError)):
        split_value({"amount": [{"unit": "lovelace", "quantity": quantity}]})


def test_to_quantity():
    assert to_quantity("  +15 ") == 15
    assert to_quantity("-3") == -3
    assert to_quantity(10**30) == 10**30
    assert to_quantity(str(10**30)) == 10**30


@pytest.mark.parametrize(
    "unit, policy, name",
    [
        ("lovelace", "", ""),
        (f"{POLICY}.{NAME}", POLICY, NAME),
        (f"{POLICY}{NAME}", POLICY, NAME),
        (POLICY, POLICY, ""),
        (f"{POLICY.upper()}.{NAME}", POLICY, NAME),
    ],
)
def test_token_from_unit(unit, policy, name):
    token = Token.from_unit(unit)
    assert (token.policy_id, token.name) == (policy, name)


def test_token_display():
    assert Token.from_unit("lovelace").unit == "lovelace"
    assert str(Token.from_unit("lovelace")) == "ADA"
    assert str(Token.from_unit(UNIT)) == f"{POLICY[:8]}..test"
