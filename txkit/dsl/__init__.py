"""Transaction DSL: action schemas, validation, capability dispatch and compilation."""

from .actions import ACTION_ADAPTER, ACTION_TYPES, ACTIONS, Action, BaseAction
from .builder import PyCardanoTxBuilder, pycardano_builder_factory
from .capabilities import CAPABILITIES, resolve_operation
from .compiler import UnsignedTransaction, compile_actions
from .validation import validate_action, validate_actions, validate_address

__all__ = [
    "ACTION_ADAPTER",
    "ACTION_TYPES",
    "ACTIONS",
    "Action",
    "BaseAction",
    "CAPABILITIES",
    "PyCardanoTxBuilder",
    "UnsignedTransaction",
    "compile_actions",
    "pycardano_builder_factory",
    "resolve_operation",
    "validate_action",
    "validate_actions",
    "validate_address",
]
