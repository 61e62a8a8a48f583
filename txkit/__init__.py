"""
Cardano transaction DSL toolkit.

Structure:
    txkit/
    ├── types.py          # Token, quantity coercion
    ├── errors.py         # Error taxonomy
    ├── config/           # Settings
    ├── blockchain/       # Ogmios client
    ├── providers/        # Probes, readiness, Kupmios / Dolos clients
    ├── fetching/         # UTxO normalisation and balances
    ├── dsl/              # Action schemas, dispatch, compiler
    └── service.py        # LedgerService facade

Usage:
    from txkit import LedgerService
    from txkit.dsl import validate_actions, compile_actions
    from txkit.providers import ReadinessResolver
"""

from .types import Token, to_quantity
from .errors import (
    TxKitError,
    ValidationError,
    ProviderUnavailableError,
    CompilationError,
    UnsupportedActionError,
    ProviderError,
    TransientNetworkError,
)
from .service import LedgerService

__all__ = [
    # Types
    "Token",
    "to_quantity",
    # Errors
    "TxKitError",
    "ValidationError",
    "ProviderUnavailableError",
    "CompilationError",
    "UnsupportedActionError",
    "ProviderError",
    "TransientNetworkError",
    # Service
    "LedgerService",
]
