import sys
from pathlib import Path
from typing import Any, List, Tuple

import httpx
import pytest

# Make the repository root importable without installing the package.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from txkit.config import Settings  # noqa: E402

# Lexically valid bech32 bodies (no 1, b, i, o).
SENDER = "addr_test1qz2fxv2umyhttkxyxp8x0dlpdt3k6cwng5pxj3jhsydzer3jcu5d8ps7zex2k2xt3uqxgjqnnj83ws8lhrn648jjxtwq2ytjqp"
RECEIVER = "addr_test1vrgvfs0hw6zr5cy98yhcq7wa87sz2dpgk3n6fqv8t7ugsjsqhg5dz"
MAINNET_ADDRESS = "addr1qx2fxv2umyhttkxyxp8x0dlpdt3k6cwng5pxj3jhsydzer3jcu5d8ps7zex2k2xt3uqxgjqnnj83ws8lhrn648jjxtwqfjkjv7"
STAKE = "stake_test1uqehkck0lajq8gr28t9uxnuvgcqrc6070x3k9r8048z8y5gssrtvn"
KEY_HASH = "a" * 56
POLICY = "1" * 56
TX_HASH = "f" * 64


class RecordingBuilder:
    """Builder exposing the canonical operation names; records every call."""

    def __init__(self, cbor: Any = "84a400"):
        self.calls: List[Tuple[str, tuple]] = []
        self.cbor = cbor

    def _record(self, name, *args):
        self.calls.append((name, args))

    def pay_lovelace(self, *args):
        self._record("pay_lovelace", *args)

    def pay_assets(self, *args):
        self._record("pay_assets", *args)

    def pay_many(self, *args):
        self._record("pay_many", *args)

    def add_metadata(self, *args):
        self._record("add_metadata", *args)

    def valid_from(self, *args):
        self._record("valid_from", *args)

    def valid_to(self, *args):
        self._record("valid_to", *args)

    def add_required_signer(self, *args):
        self._record("add_required_signer", *args)

    def set_change_address(self, *args):
        self._record("set_change_address", *args)

    def add_collateral(self, *args):
        self._record("add_collateral", *args)

    def spend_utxo(self, *args):
        self._record("spend_utxo", *args)

    def mint_assets(self, *args):
        self._record("mint_assets", *args)

    def burn_assets(self, *args):
        self._record("burn_assets", *args)

    def set_fee_policy(self, *args):
        self._record("set_fee_policy", *args)

    def complete(self):
        self._record("complete")
        return self.cbor

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.calls]


class ChainingBuilder:
    """Older camelCase/alias naming; every call returns the next handle."""

    def __init__(self, log=None):
        self.log = log if log is not None else []

    def _next(self, name, *args):
        self.log.append((name, args))
        return ChainingBuilder(self.log)

    def payLovelace(self, *args):
        return self._next("payLovelace", *args)

    def attach_metadata(self, *args):
        return self._next("attach_metadata", *args)

    def set_validity_start(self, *args):
        return self._next("set_validity_start", *args)

    def set_ttl(self, *args):
        return self._next("set_ttl", *args)

    def required_signer(self, *args):
        return self._next("required_signer", *args)

    def build_unsigned(self):
        self.log.append(("build_unsigned", ()))
        return bytes.fromhex("84a5")


@pytest.fixture
def settings():
    return Settings(
        ogmios_url="http://ogmios.test:1337",
        kupo_url="http://kupo.test:1442",
        dolos_grpc_url="http://dolos-grpc.test:50051",
        dolos_rest_url="http://dolos.test:4000",
        network="preprod",
        ping_timeout=0.5,
        health_timeout=0.5,
    )


@pytest.fixture
def recording_builder():
    return RecordingBuilder()


def mock_transport(routes):
    """
    MockTransport answering by host. ``routes`` maps host -> status code,
    (status, json) tuple, a callable taking the request, or an exception
    instance to raise.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        route = routes.get(request.url.host)
        if route is None:
            raise httpx.ConnectError("connection refused", request=request)
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(request)
        if isinstance(route, tuple):
            status, body = route
            return httpx.Response(status, json=body)
        return httpx.Response(route)

    return httpx.MockTransport(handler)
