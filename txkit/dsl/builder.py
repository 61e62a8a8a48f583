"""
pycardano adapter exposing the DSL's canonical builder operations.

pycardano's TransactionBuilder is mostly attribute-driven (``ttl``,
``validity_start``, ``mint``, ...). This adapter turns that surface into the
method-per-capability shape the dispatcher probes for.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from pycardano import (
    Address,
    AlonzoMetadata,
    AuxiliaryData,
    ChainContext,
    DatumHash,
    Metadata,
    MultiAsset,
    NativeScript,
    PlutusV1Script,
    PlutusV2Script,
    PlutusV3Script,
    RawPlutusData,
    Redeemer,
    StakeCredential,
    StakeDeregistration,
    StakeRegistration,
    Transaction,
    TransactionBuilder,
    TransactionInput,
    TransactionOutput,
    UTxO,
    Value,
    VerificationKeyHash,
    Withdrawals,
)
from pycardano.utils import min_lovelace_post_alonzo

from txkit.errors import CompilationError
from txkit.fetching.normalize import normalize_utxo
from txkit.providers import ChainClient, ProviderKind
from txkit.types import Token

logger = logging.getLogger(__name__)

PLUTUS_SCRIPTS = {
    "plutusV1": PlutusV1Script,
    "plutusV2": PlutusV2Script,
    "plutusV3": PlutusV3Script,
}


def multi_asset(assets: Dict[str, int], sign: int = 1) -> MultiAsset:
    """Build a MultiAsset from dotted asset ids."""
    grouped: Dict[bytes, Dict[bytes, int]] = {}
    for unit, quantity in assets.items():
        token = Token.from_unit(unit)
        grouped.setdefault(bytes.fromhex(token.policy_id), {})[bytes.fromhex(token.name)] = sign * quantity
    return MultiAsset.from_primitive(grouped)


class PyCardanoTxBuilder:
    """Builder handle bound to one source address and one chain context."""

    def __init__(self, context: ChainContext, from_address: str):
        self.context = context
        self.from_address = Address.from_primitive(from_address)
        self.builder = TransactionBuilder(context)
        self.builder.add_input_address(self.from_address)
        self._change_address: Optional[Address] = None
        self._metadata: Dict[int, Any] = {}
        self._withdrawals: Dict[bytes, int] = {}
        self._plutus_script = None
        self._fee_buffer: Optional[int] = None
        self._source_utxos: Optional[List[UTxO]] = None

    # -- helpers -------------------------------------------------------------

    def _output(self, to_address: str, lovelace: Optional[int], assets: Optional[Dict[str, int]]) -> TransactionOutput:
        output = TransactionOutput(
            Address.from_primitive(to_address),
            Value(lovelace or 0, multi_asset(assets) if assets else MultiAsset()),
        )
        if not lovelace:
            output.amount.coin = min_lovelace_post_alonzo(output, self.context)
        return output

    def _resolve(self, tx_hash: Optional[str], index: Optional[int], utxo: Optional[Dict[str, Any]]) -> UTxO:
        """Turn an explicit reference or a provider UTxO record into a pycardano UTxO."""
        if utxo is not None:
            n = normalize_utxo(utxo)
            if not n.address:
                raise CompilationError(f"UTxO record {n.ref} carries no address")
            output = TransactionOutput(
                Address.from_primitive(n.address),
                Value(n.lovelace, multi_asset(n.assets) if n.assets else MultiAsset()),
            )
            if n.inline_datum:
                output.datum = RawPlutusData.from_cbor(n.inline_datum)
            elif n.datum_hash:
                output.datum_hash = DatumHash.from_primitive(n.datum_hash)
            return UTxO(TransactionInput.from_primitive([n.tx_hash, n.output_index]), output)

        if self._source_utxos is None:
            self._source_utxos = list(self.context.utxos(self.from_address))
        for candidate in self._source_utxos:
            if candidate.input.transaction_id.payload.hex() == tx_hash and candidate.input.index == index:
                return candidate
        raise CompilationError(f"UTxO {tx_hash}#{index} not found at the source address")

    def _require_plutus_script(self, action: str):
        if self._plutus_script is None:
            raise CompilationError(f"{action} with a redeemer requires a Plutus script attached first (attachScript)")
        return self._plutus_script

    def _stake_credential(self, stake_address: str) -> StakeCredential:
        staking_part = Address.from_primitive(stake_address).staking_part
        if staking_part is None:
            raise CompilationError(f"{stake_address} has no staking credential")
        return StakeCredential(staking_part)

    def _mint(self, policy_id: str, assets: Dict[str, int], redeemer: Optional[str], sign: int, action: str):
        delta = multi_asset({f"{policy_id}.{name}": qty for name, qty in assets.items()}, sign)
        self.builder.mint = delta if self.builder.mint is None else self.builder.mint + delta
        if redeemer:
            script = self._require_plutus_script(action)
            self.builder.add_minting_script(script, Redeemer(RawPlutusData.from_cbor(redeemer)))

    # -- payments ------------------------------------------------------------

    def pay_lovelace(self, to_address: str, lovelace: int):
        self.builder.add_output(TransactionOutput(Address.from_primitive(to_address), lovelace))

    def pay_assets(self, to_address: str, assets: Dict[str, int], lovelace: Optional[int] = None):
        self.builder.add_output(self._output(to_address, lovelace, assets))

    def pay_many(self, outputs: Sequence[Any]):
        for out in outputs:
            self.builder.add_output(self._output(out.to_address, out.lovelace, out.assets))

    # -- body settings -------------------------------------------------------

    def add_metadata(self, label: int, metadata: Any):
        self._metadata[label] = metadata
        self.builder.auxiliary_data = AuxiliaryData(AlonzoMetadata(metadata=Metadata(dict(self._metadata))))

    def valid_from(self, slot: int):
        self.builder.validity_start = slot

    def valid_to(self, slot: int):
        self.builder.ttl = slot

    def add_required_signer(self, key_hash: str):
        signers = list(self.builder.required_signers or [])
        signers.append(VerificationKeyHash(bytes.fromhex(key_hash)))
        self.builder.required_signers = signers

    def set_change_address(self, address: str):
        self._change_address = Address.from_primitive(address)

    def set_fee_policy(self, strategy: str, multiplier: Optional[float], fee_buffer: Optional[int]):
        # Staged only; applied in complete() once every other action is in
        if multiplier is not None and multiplier != 1:
            raise CompilationError("feePolicy multiplier is not supported by the pycardano builder; use feeBuffer")
        self._fee_buffer = fee_buffer if strategy == "buffer" else None

    # -- inputs --------------------------------------------------------------

    def add_collateral(self, tx_hash: Optional[str], index: Optional[int], utxo: Optional[Dict[str, Any]]):
        self.builder.collaterals.append(self._resolve(tx_hash, index, utxo))

    def add_reference_input(self, tx_hash: Optional[str], index: Optional[int], utxo: Optional[Dict[str, Any]]):
        if utxo is not None:
            self.builder.reference_inputs.add(self._resolve(tx_hash, index, utxo))
        else:
            self.builder.reference_inputs.add(TransactionInput.from_primitive([tx_hash, index]))

    def spend_utxo(
        self,
        tx_hash: Optional[str],
        index: Optional[int],
        utxo: Optional[Dict[str, Any]],
        redeemer: Optional[str] = None,
    ):
        resolved = self._resolve(tx_hash, index, utxo)
        if redeemer:
            script = self._require_plutus_script("spendUtxo")
            self.builder.add_script_input(resolved, script=script, redeemer=Redeemer(RawPlutusData.from_cbor(redeemer)))
        else:
            self.builder.add_input(resolved)

    # -- minting and scripts -------------------------------------------------

    def mint_assets(self, policy_id: str, assets: Dict[str, int], redeemer: Optional[str] = None):
        self._mint(policy_id, assets, redeemer, 1, "mint")

    def burn_assets(self, policy_id: str, assets: Dict[str, int], redeemer: Optional[str] = None):
        self._mint(policy_id, assets, redeemer, -1, "burn")

    def attach_script(self, script_cbor: str, kind: str = "plutusV2"):
        if kind == "native":
            self.builder.native_scripts = list(self.builder.native_scripts or []) + [NativeScript.from_cbor(script_cbor)]
        else:
            self._plutus_script = PLUTUS_SCRIPTS[kind](bytes.fromhex(script_cbor))

    # -- staking -------------------------------------------------------------

    def register_stake(self, stake_address: str):
        certificates = list(self.builder.certificates or [])
        certificates.append(StakeRegistration(self._stake_credential(stake_address)))
        self.builder.certificates = certificates

    def deregister_stake(self, stake_address: str):
        certificates = list(self.builder.certificates or [])
        certificates.append(StakeDeregistration(self._stake_credential(stake_address)))
        self.builder.certificates = certificates

    def withdraw_rewards(self, stake_address: str, amount: Optional[int] = None):
        if amount is None:
            raise CompilationError("withdrawRewards needs an explicit amount with the pycardano builder")
        self._withdrawals[bytes(Address.from_primitive(stake_address))] = amount
        self.builder.withdrawals = Withdrawals(dict(self._withdrawals))

    # -- finalize ------------------------------------------------------------

    def complete(self) -> str:
        if self._fee_buffer is not None:
            self.builder.fee_buffer = self._fee_buffer
        body = self.builder.build(change_address=self._change_address or self.from_address)
        witness_set = self.builder.build_witness_set()
        tx = Transaction(body, witness_set, auxiliary_data=self.builder.auxiliary_data)
        return tx.to_cbor_hex()


BuilderFactory = Callable[[ProviderKind, str], Any]


def pycardano_builder_factory(client_factory: Callable[[ProviderKind], ChainClient]) -> BuilderFactory:
    """Builder handles bound to the chain context of the chosen provider."""

    def factory(provider: ProviderKind, from_address: str) -> PyCardanoTxBuilder:
        context = client_factory(provider).chain_context()
        logger.debug(f"Builder for {from_address[:20]}... on {provider.value}")
        return PyCardanoTxBuilder(context, from_address)

    return factory
