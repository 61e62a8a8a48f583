"""
Capability-probe dispatch.

Ledger SDKs rename builder methods between versions. Every capability the
DSL needs maps to an ordered tuple of known equivalent method names; the
first one the active builder exposes wins. Naming drift is absorbed here
and nowhere else.
"""

from typing import Any, Callable, Dict, Optional, Tuple

from txkit.errors import UnsupportedActionError

CAPABILITIES: Dict[str, Tuple[str, ...]] = {
    "pay_lovelace": ("pay_lovelace", "payLovelace", "pay_to_address"),
    "pay_assets": ("pay_assets", "payAssets", "pay_tokens"),
    "pay_many": ("pay_many", "payMany", "pay_outputs"),
    "add_metadata": ("add_metadata", "addMetadata", "attach_metadata"),
    "valid_from": ("valid_from", "validFrom", "set_validity_start"),
    "valid_to": ("valid_to", "validTo", "set_ttl"),
    "add_required_signer": ("add_required_signer", "addRequiredSigner", "required_signer"),
    "set_change_address": ("set_change_address", "setChangeAddress", "change_address"),
    "add_collateral": ("add_collateral", "collateral", "set_collateral"),
    "add_reference_input": ("add_reference_input", "reference_input", "read_from"),
    "spend_utxo": ("spend_utxo", "spendUtxo", "collect_from"),
    "mint_assets": ("mint_assets", "mintAssets"),
    "burn_assets": ("burn_assets", "burnAssets"),
    "attach_script": ("attach_script", "attachScript", "attach_spending_validator", "attach_minting_policy"),
    "register_stake": ("register_stake", "registerStake", "add_stake_registration"),
    "deregister_stake": ("deregister_stake", "deregisterStake", "add_stake_deregistration"),
    "withdraw_rewards": ("withdraw_rewards", "withdrawRewards", "add_withdrawal"),
    "set_fee_policy": ("set_fee_policy", "setFeePolicy", "fee_policy"),
    "complete": ("complete", "build_unsigned"),
}


def resolve_operation(
    builder: Any,
    capability: str,
    action_type: Optional[str] = None,
    action_index: Optional[int] = None,
) -> Tuple[str, Callable[..., Any]]:
    """Return ``(name, bound method)`` for the first candidate the builder exposes."""
    candidates = CAPABILITIES.get(capability, (capability,))
    for name in candidates:
        operation = getattr(builder, name, None)
        if callable(operation):
            return name, operation
    raise UnsupportedActionError(action_type or capability, candidates, action_index)

