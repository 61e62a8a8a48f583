"""Readiness resolution across the Kupmios pair and the Dolos fallback."""

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from txkit.config import Settings, settings as default_settings
from .probe import health, ping

logger = logging.getLogger(__name__)


class ProviderKind(str, enum.Enum):
    KUPMIOS = "kupmios"  # Ogmios + Kupo, usable only as a pair
    DOLOS = "dolos"      # self-sufficient Blockfrost-compatible REST


@dataclass(frozen=True)
class Reachability:
    """Per-endpoint probe results."""
    ogmios: bool = False
    kupo: bool = False
    dolos_grpc: bool = False  # reported only, never part of the verdict
    dolos_rest: bool = False
    dolos_rest_healthy: bool = False

    @property
    def kupmios(self) -> bool:
        return self.ogmios and self.kupo


@dataclass(frozen=True)
class ReadinessVerdict:
    """Computed fresh for every request; never cached."""
    reachability: Reachability
    endpoints: Dict[str, str] = field(default_factory=dict)

    @property
    def ready(self) -> bool:
        return self.reachability.kupmios or self.reachability.dolos_rest_healthy

    @property
    def chosen_provider(self) -> Optional[ProviderKind]:
        if self.reachability.kupmios:
            return ProviderKind.KUPMIOS
        if self.reachability.dolos_rest_healthy:
            return ProviderKind.DOLOS
        return None

    @property
    def status_code(self) -> int:
        return 200 if self.ready else 503

    def to_dict(self) -> Dict[str, Any]:
        r = self.reachability
        return {
            "success": self.ready,
            "ready": self.ready,
            "provider": self.chosen_provider.value if self.chosen_provider else None,
            "ogmiosReachable": r.ogmios,
            "kupoReachable": r.kupo,
            "dolosGrpcReachable": r.dolos_grpc,
            "dolosRestReachable": r.dolos_rest,
            "dolosRestHealthy": r.dolos_rest_healthy,
            **{f"{name}Url": url for name, url in self.endpoints.items()},
        }


class ReadinessResolver:
    """
    Probes every configured endpoint concurrently and combines the results.

    ready = (ogmios AND kupo) OR dolos-health. Network errors and timeouts
    count as unreachable and are never raised.
    """

    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or default_settings
        self._transport = transport

    async def resolve(self) -> ReadinessVerdict:
        s = self.settings
        async with httpx.AsyncClient(transport=self._transport) as client:
            og, kp, dg, dr, dh = await asyncio.gather(
                ping(client, s.ogmios_url, s.ping_timeout),
                ping(client, s.kupo_url, s.ping_timeout),
                ping(client, s.dolos_grpc_url, s.ping_timeout),
                ping(client, s.dolos_rest_url, s.ping_timeout),
                health(client, s.dolos_health_url, s.health_timeout),
            )

        verdict = ReadinessVerdict(
            reachability=Reachability(ogmios=og, kupo=kp, dolos_grpc=dg, dolos_rest=dr, dolos_rest_healthy=dh),
            endpoints={
                "ogmios": s.ogmios_url,
                "kupo": s.kupo_url,
                "dolosGrpc": s.dolos_grpc_url,
                "dolosRest": s.dolos_rest_url,
            },
        )
        if verdict.ready:
            logger.info(f"Provider ready: {verdict.chosen_provider.value}")
        else:
            logger.warning(
                f"No provider ready (ogmios={og}, kupo={kp}, dolos_rest={dr}, dolos_health={dh})"
            )
        return verdict
