"""
Configuration settings - edit values directly here or override via environment
"""

import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional


@dataclass
class Settings:
    """Application settings - configure values below"""

    # ===================
    # Dual indexer (Kupmios: Ogmios + Kupo)
    # ===================
    ogmios_url: str = "http://localhost:1337"
    ogmios_username: Optional[str] = None
    ogmios_password: Optional[str] = None
    kupo_url: str = "http://localhost:1442"

    # ===================
    # Fallback service (Dolos, Blockfrost-compatible REST)
    # ===================
    dolos_grpc_url: str = "http://localhost:50051"
    dolos_rest_url: str = "http://localhost:4000"
    dolos_health_path: str = "/api/v0/health"
    blockfrost_project_id: Optional[str] = None  # Dolos ignores it, pycardano wants one

    # ===================
    # Network
    # ===================
    network: str = "preprod"  # mainnet | preprod | preview

    # ===================
    # Timeouts (seconds)
    # ===================
    ping_timeout: float = 1.5
    health_timeout: float = 2.0
    request_timeout: float = 10.0

    @property
    def is_mainnet(self) -> bool:
        return self.network == "mainnet"

    @property
    def dolos_health_url(self) -> str:
        return f"{self.dolos_rest_url.rstrip('/')}{self.dolos_health_path}"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables; empty values keep defaults."""
        env = os.environ if environ is None else environ
        defaults = cls()
        values = {}
        for f in fields(cls):
            raw = env.get(_ENV_NAMES.get(f.name, f.name.upper()))
            if raw is None or raw.strip() == "":
                continue
            current = getattr(defaults, f.name)
            values[f.name] = float(raw) if isinstance(current, float) else raw.strip()
        return cls(**values)


_ENV_NAMES = {
    "network": "CARDANO_NETWORK",
    "ping_timeout": "PROBE_PING_TIMEOUT",
    "health_timeout": "PROBE_HEALTH_TIMEOUT",
    "request_timeout": "PROVIDER_REQUEST_TIMEOUT",
}


# Global settings instance - import this
settings = Settings.from_env()
