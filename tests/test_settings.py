from txkit.blockchain.ogmios_client import websocket_url
from txkit.config import Settings


def test_defaults_point_at_local_services():
    s = Settings.from_env({})
    assert s.ogmios_url == "http://localhost:1337"
    assert s.kupo_url == "http://localhost:1442"
    assert s.dolos_grpc_url == "http://localhost:50051"
    assert s.dolos_rest_url == "http://localhost:4000"
    assert s.network == "preprod"
    assert s.is_mainnet is False


def test_environment_overrides():
    s = Settings.from_env({
        "OGMIOS_URL": "https://ogmios.example:443",
        "KUPO_URL": "https://kupo.example",
        "DOLOS_REST_URL": "http://dolos:3000/",
        "CARDANO_NETWORK": "mainnet",
        "PROBE_PING_TIMEOUT": "0.25",
        "OGMIOS_USERNAME": "alice",
    })
    assert s.ogmios_url == "https://ogmios.example:443"
    assert s.kupo_url == "https://kupo.example"
    assert s.is_mainnet is True
    assert s.ping_timeout == 0.25
    assert s.health_timeout == 2.0
    assert s.ogmios_username == "alice"
    assert s.dolos_health_url == "http://dolos:3000/api/v0/health"


def test_empty_values_keep_defaults():
    s = Settings.from_env({"OGMIOS_URL": "", "KUPO_URL": "   ", "PROBE_HEALTH_TIMEOUT": ""})
    assert s.ogmios_url == "http://localhost:1337"
    assert s.kupo_url == "http://localhost:1442"
    assert s.health_timeout == 2.0


def test_websocket_url():
    assert websocket_url("http://localhost:1337") == "ws://localhost:1337"
    assert websocket_url("https://ogmios.example") == "wss://ogmios.example"
    assert websocket_url("ws://node:1337") == "ws://node:1337"
