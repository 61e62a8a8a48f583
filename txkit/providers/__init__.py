"""Provider probes, readiness resolution and backend clients."""

from .client import ChainClient
from .dolos import DolosRestClient
from .kupmios import KupmiosClient
from .probe import health, ping
from .readiness import ProviderKind, Reachability, ReadinessResolver, ReadinessVerdict

__all__ = [
    "ChainClient",
    "DolosRestClient",
    "KupmiosClient",
    "ProviderKind",
    "Reachability",
    "ReadinessResolver",
    "ReadinessVerdict",
    "health",
    "ping",
]
