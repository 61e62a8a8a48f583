"""Folds a validated action sequence into an unsigned transaction."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple

from txkit.errors import CompilationError, TxKitError, ValidationError
from .actions import BaseAction
from .capabilities import resolve_operation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnsignedTransaction:
    """Serialized unsigned transaction. Signing happens elsewhere."""
    cbor_hex: str
    operations: Tuple[str, ...] = ()  # builder methods applied, in order

    def to_dict(self) -> Dict[str, Any]:
        return {"success": True, "unsignedCbor": self.cbor_hex}


def compile_actions(builder: Any, actions: Sequence[BaseAction]) -> UnsignedTransaction:
    """
    Apply every action to ``builder`` in order, then finalize it.

    Builder operations run strictly in sequence: later actions may override
    earlier ones. Any failure aborts the whole sequence and no transaction
    is returned. Builders with a chaining API may return the next handle
    from each call.
    """
    if not actions:
        raise ValidationError.single("actions", "at least one action is required")

    applied = []
    for index, action in enumerate(actions):
        for capability, args in action.steps():
            name, operation = resolve_operation(builder, capability, action.type, index)
            try:
                result = operation(*args)
            except CompilationError as e:
                if e.action_index is None:
                    e.action_index, e.action_type = index, action.type
                raise
            except TxKitError:
                raise
            except Exception as e:
                logger.warning(f"Action {index} ({action.type}) failed in {name}: {e}")
                raise CompilationError(f"{action.type} failed: {e}", index, action.type) from e
            if result is not None:
                builder = result
            applied.append(name)

    name, complete = resolve_operation(builder, "complete")
    try:
        cbor = complete()
    except TxKitError:
        raise
    except Exception as e:
        logger.warning(f"Finalizing transaction failed: {e}")
        raise CompilationError(f"Failed to finalize transaction: {e}") from e

    if isinstance(cbor, (bytes, bytearray)):
        cbor = bytes(cbor).hex()
    if not cbor:
        raise CompilationError("Builder produced an empty transaction")
    logger.info(f"Compiled {len(actions)} actions into {len(cbor) // 2} bytes")
    return UnsignedTransaction(cbor_hex=cbor, operations=tuple(applied))
