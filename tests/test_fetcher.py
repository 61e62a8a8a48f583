import asyncio
from types import SimpleNamespace

import httpx
import pytest
from blockfrost import BlockFrostApi
from pycardano import BlockFrostChainContext, Network
from pycardano.backend.kupo import KupoChainContextExtension

from conftest import POLICY, SENDER, TX_HASH, mock_transport
from txkit.errors import ProviderError, ProviderUnavailableError
from txkit.fetching import Fetcher
from txkit.providers import DolosRestClient, KupmiosClient, ProviderKind, Reachability, ReadinessVerdict
from txkit.providers.dolos import PAGE_SIZE

UNIT = f"{POLICY}.74657374"


class StaticResolver:
    def __init__(self, reachability: Reachability):
        self.verdict = ReadinessVerdict(reachability)
        self.calls = 0

    async def resolve(self):
        self.calls += 1
        return self.verdict


class StaticClient:
    def __init__(self, utxos):
        self.utxos = utxos
        self.addresses = []

    async def utxos_at(self, address):
        self.addresses.append(address)
        return self.utxos


KUPMIOS_UP = Reachability(ogmios=True, kupo=True)
DOLOS_UP = Reachability(dolos_rest=True, dolos_rest_healthy=True)
NOTHING_UP = Reachability()


def test_balance_from_kupmios():
    clients = {}

    def factory(kind):
        clients[kind] = StaticClient([
            {"transaction_id": TX_HASH, "output_index": 0, "value": {"coins": 1_000_000, "assets": {UNIT: 2}}},
            {"transaction_id": TX_HASH, "output_index": 1, "value": {"coins": "2000000", "assets": {UNIT: "3"}}},
        ])
        return clients[kind]

    balance = asyncio.run(Fetcher(StaticResolver(KUPMIOS_UP), factory).fetch_balance(SENDER))

    assert list(clients) == [ProviderKind.KUPMIOS]
    assert balance.lovelace == 3_000_000
    assert balance.assets == {UNIT: 5}
    assert balance.to_dict() == {
        "success": True,
        "address": SENDER,
        "lovelace": "3000000",
        "assets": {UNIT: "5"},
        "provider": "kupmios",
    }


def test_utxos_from_dolos_fallback():
    client = StaticClient([{"tx_hash": TX_HASH, "output_index": 4, "amount": [{"unit": "lovelace", "quantity": "7"}]}])
    fetcher = Fetcher(StaticResolver(DOLOS_UP), lambda kind: client if kind is ProviderKind.DOLOS else None)

    utxos = asyncio.run(fetcher.fetch_utxos(SENDER))

    assert [(u.ref, u.lovelace) for u in utxos] == [(f"{TX_HASH}#4", 7)]
    assert client.addresses == [SENDER]


def test_no_provider_raises_unavailable():
    fetcher = Fetcher(StaticResolver(NOTHING_UP), lambda kind: pytest.fail("no client expected"))
    with pytest.raises(ProviderUnavailableError) as exc:
        asyncio.run(fetcher.fetch_balance(SENDER))
    assert exc.value.status_code == 503


def test_given_verdict_skips_resolution():
    resolver = StaticResolver(NOTHING_UP)
    fetcher = Fetcher(resolver, lambda kind: StaticClient([]))
    balance = asyncio.run(fetcher.fetch_balance(SENDER, verdict=ReadinessVerdict(DOLOS_UP)))
    assert balance.lovelace == 0
    assert balance.provider is ProviderKind.DOLOS
    assert resolver.calls == 0


def test_balance_over_mixed_record_shapes_is_exact():
    records = [
        {"transaction": {"id": TX_HASH}, "index": 0, "value": {"ada": {"lovelace": 2**60}, POLICY: {"74657374": 1}}},
        {"tx_hash": TX_HASH, "output_index": 1, "amount": [{"unit": "lovelace", "quantity": str(2**60 + 1)}]},
    ]
    fetcher = Fetcher(StaticResolver(DOLOS_UP), lambda kind: StaticClient(records))

    balance = asyncio.run(fetcher.fetch_balance(SENDER))

    assert balance.lovelace == 2**61 + 1
    assert balance.to_dict()["lovelace"] == str(2**61 + 1)


def test_unrecognised_records_are_provider_errors():
    fetcher = Fetcher(StaticResolver(KUPMIOS_UP), lambda kind: StaticClient([{"value": {"coins": 1}}]))
    with pytest.raises(ProviderError):
        asyncio.run(fetcher.fetch_utxos(SENDER))


# ---------------------------------------------------------------------------
# Backend clients over MockTransport
# ---------------------------------------------------------------------------


def test_kupo_matches_only_unspent(settings):
    seen = []

    def kupo(request):
        seen.append(str(request.url))
        return httpx.Response(200, json=[{"transaction_id": TX_HASH, "output_index": 0, "value": {"coins": 5}}])

    client = KupmiosClient(settings, mock_transport({"kupo.test": kupo}))
    utxos = asyncio.run(client.utxos_at(SENDER))

    assert seen == [f"http://kupo.test:1442/matches/{SENDER}?unspent"]
    assert utxos[0]["value"]["coins"] == 5


def test_kupo_error_status(settings):
    client = KupmiosClient(settings, mock_transport({"kupo.test": 503}))
    with pytest.raises(ProviderError):
        asyncio.run(client.utxos_at(SENDER))


def test_kupo_unreachable(settings):
    client = KupmiosClient(settings, mock_transport({}))
    with pytest.raises(ProviderError):
        asyncio.run(client.utxos_at(SENDER))


def _page(n, offset=0):
    return [
        {"tx_hash": TX_HASH, "output_index": offset + i, "amount": [{"unit": "lovelace", "quantity": "1"}]}
        for i in range(n)
    ]


def test_dolos_paginates_address_utxos(settings):
    pages = []

    def dolos(request):
        assert request.url.path == f"/api/v0/addresses/{SENDER}/utxos"
        page = int(request.url.params["page"])
        pages.append(page)
        assert request.url.params["count"] == str(PAGE_SIZE)
        return httpx.Response(200, json=_page(PAGE_SIZE if page == 1 else 5, (page - 1) * PAGE_SIZE))

    utxos = asyncio.run(DolosRestClient(settings, mock_transport({"dolos.test": dolos})).utxos_at(SENDER))

    assert pages == [1, 2]
    assert len(utxos) == PAGE_SIZE + 5


def test_dolos_unknown_address_has_no_utxos(settings):
    client = DolosRestClient(settings, mock_transport({"dolos.test": (404, {"status_code": 404})}))
    assert asyncio.run(client.utxos_at(SENDER)) == []


def test_dolos_server_error(settings):
    client = DolosRestClient(settings, mock_transport({"dolos.test": 500}))
    with pytest.raises(ProviderError):
        asyncio.run(client.utxos_at(SENDER))


def test_dolos_version_and_health(settings):
    def dolos(request):
        if request.url.path == "/":
            return httpx.Response(200, json={"url": "https://dolos.test", "version": "0.19.1", "revision": "abc"})
        if request.url.path == "/api/v0/health":
            return httpx.Response(200, json={"is_healthy": True})
        return httpx.Response(404)

    client = DolosRestClient(settings, mock_transport({"dolos.test": dolos}))
    assert asyncio.run(client.version())["version"] == "0.19.1"
    assert asyncio.run(client.health()) == {"is_healthy": True}


def test_dolos_protocol_parameters(settings):
    def dolos(request):
        assert request.url.path == "/api/v0/epochs/latest/parameters"
        return httpx.Response(200, json={"min_fee_a": 44, "min_fee_b": 155381})

    client = DolosRestClient(settings, mock_transport({"dolos.test": dolos}))
    assert asyncio.run(client.protocol_parameters())["min_fee_a"] == 44


def test_kupmios_chain_context_pairs_ogmios_with_kupo(settings):
    context = KupmiosClient(settings).chain_context()

    assert isinstance(context, KupoChainContextExtension)
    assert context.network == Network.TESTNET


def test_dolos_chain_context_targets_rest_surface(settings, monkeypatch):
    monkeypatch.setattr(BlockFrostApi, "epoch_latest", lambda self, **kwargs: SimpleNamespace(epoch=100, end_time=0), raising=False)

    context = DolosRestClient(settings).chain_context()

    assert isinstance(context, BlockFrostChainContext)
    assert context.network == Network.TESTNET
