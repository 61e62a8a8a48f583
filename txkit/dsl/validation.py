"""
Action sequence validation.

Runs every action through the schema union and reports every field-level
issue at once so a caller can fix a whole batch in one round trip.
Synchronous and side-effect free.
"""

from typing import Any, Dict, List, Optional, Sequence

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from txkit.errors import FieldIssue, ValidationError
from .actions import ACTION_ADAPTER, Address, BaseAction

_ADDRESS_ADAPTER: TypeAdapter = TypeAdapter(Address)


def _network_group(network: Optional[str]) -> Optional[str]:
    if network is None:
        return None
    return "mainnet" if network == "mainnet" else "testnet"


def _field_path(loc: Sequence[Any]) -> str:
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path


def _issues_from(error: SchemaError, raw: Dict[str, Any], index: Optional[int]) -> List[FieldIssue]:
    issues = []
    tag = raw.get("type")
    for err in error.errors():
        kind = err.get("type")
        if kind == "union_tag_invalid":
            issues.append(FieldIssue("type", f"unknown action type {tag!r}", index))
            continue
        if kind == "union_tag_not_found":
            issues.append(FieldIssue("type", "missing action type", index))
            continue
        loc = list(err.get("loc", ()))
        # discriminated unions prefix the location with the tag
        if loc and loc[0] == tag:
            loc = loc[1:]
        message = str(err.get("msg", "invalid"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        issues.append(FieldIssue(_field_path(loc) or "action", message, index))
    return issues


def _check(raw: Any, network: Optional[str], index: Optional[int]):
    if not isinstance(raw, dict):
        return None, [FieldIssue("action", "must be a JSON object", index)]
    try:
        action = ACTION_ADAPTER.validate_python(raw, context={"network": _network_group(network)})
    except SchemaError as e:
        return None, _issues_from(e, raw, index)
    return action, []


def validate_action(raw: Any, *, network: Optional[str] = None) -> BaseAction:
    """Validate and normalise one action. Raises ValidationError listing every issue."""
    action, issues = _check(raw, network, None)
    if issues:
        raise ValidationError(issues)
    return action


def validate_actions(raw_actions: Any, *, network: Optional[str] = None) -> List[BaseAction]:
    """Validate a whole, non-empty action sequence, preserving its order."""
    if not isinstance(raw_actions, (list, tuple)):
        raise ValidationError.single("actions", "must be a list of actions")
    if not raw_actions:
        raise ValidationError.single("actions", "at least one action is required")

    actions: List[BaseAction] = []
    issues: List[FieldIssue] = []
    for index, raw in enumerate(raw_actions):
        action, found = _check(raw, network, index)
        issues.extend(found)
        if action is not None:
            actions.append(action)
    if issues:
        raise ValidationError(issues)
    return actions


def _validate_with(adapter: TypeAdapter, value: Any, field: str, network: Optional[str]) -> str:
    if not isinstance(value, str):
        raise ValidationError.single(field, "must be a string")
    try:
        return adapter.validate_python(value, context={"network": _network_group(network)})
    except SchemaError as e:
        message = str(e.errors()[0].get("msg", "invalid"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        raise ValidationError.single(field, message) from e


def validate_address(address: Any, *, field: str = "address", network: Optional[str] = None) -> str:
    """Check a payment address against the bech32 lexical grammar."""
    return _validate_with(_ADDRESS_ADAPTER, address, field, network)
