"""
DSL action schemas.

One strict pydantic model per action ``type``, joined in a discriminated
union. Amounts arrive as JSON strings or integers and are always held as
Python ints; addresses and hashes are checked against their lexical shape
only (no checksum or network calls).

Each model knows the builder capabilities it needs via ``steps()``:
an ordered list of ``(capability, args)`` pairs the compiler dispatches.
"""

import re
from typing import Annotated, Any, ClassVar, Dict, List, Literal, Optional, Tuple, Union

from pydantic import (
    AfterValidator,
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationInfo,
    model_validator,
)

from txkit.fetching.normalize import normalize_utxo
from txkit.types import to_quantity

Step = Tuple[str, Tuple[Any, ...]]

# ---------------------------------------------------------------------------
# Lexical shapes
# ---------------------------------------------------------------------------

_BECH32_BODY = r"[02-9ac-hj-np-z]{6,}"
_HEX_RE = re.compile(r"^(?:[0-9a-f]{2})*$")
_HASH28_RE = re.compile(r"^[0-9a-f]{56}$")
_HASH32_RE = re.compile(r"^[0-9a-f]{64}$")
_ASSET_ID_RE = re.compile(r"^([0-9a-f]{56})\.((?:[0-9a-f]{2}){0,32})$")

PAYMENT_PREFIXES = {"mainnet": ("addr",), "testnet": ("addr_test",)}
STAKE_PREFIXES = {"mainnet": ("stake",), "testnet": ("stake_test",)}


def _prefixes(table: Dict[str, Tuple[str, ...]], info: ValidationInfo) -> Tuple[str, ...]:
    network = (info.context or {}).get("network") if info is not None else None
    if network is None:
        return table["mainnet"] + table["testnet"]
    return table["mainnet"] if network == "mainnet" else table["testnet"]


def _bech32(value: str, prefixes: Tuple[str, ...], kind: str) -> str:
    if not value:
        raise ValueError(f"{kind} must not be empty")
    for prefix in prefixes:
        if re.fullmatch(rf"{prefix}1{_BECH32_BODY}", value):
            return value
    raise ValueError(f"not a valid {kind} (expected {' or '.join(p + '1…' for p in prefixes)})")


def _payment_address(value: str, info: ValidationInfo) -> str:
    return _bech32(value, _prefixes(PAYMENT_PREFIXES, info), "address")


def _stake_address(value: str, info: ValidationInfo) -> str:
    return _bech32(value, _prefixes(STAKE_PREFIXES, info), "stake address")


def _lower(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


def _hash28(value: str) -> str:
    if not _HASH28_RE.match(value):
        raise ValueError("must be exactly 56 hexadecimal characters")
    return value


def _hash32(value: str) -> str:
    if not _HASH32_RE.match(value):
        raise ValueError("must be exactly 64 hexadecimal characters")
    return value


def _hex(value: str) -> str:
    if not value or not _HEX_RE.match(value):
        raise ValueError("must be a non-empty, even-length hexadecimal string")
    return value


def _asset_id(value: str) -> str:
    if not _ASSET_ID_RE.match(value):
        raise ValueError("asset id must be '<56-hex policy id>.<hex asset name>'")
    return value


def _asset_name(value: str) -> str:
    if len(value) > 64 or not _HEX_RE.match(value):
        raise ValueError("asset name must be even-length hex, at most 32 bytes")
    return value


def _quantity(value: Any) -> int:
    try:
        return to_quantity(value)
    except TypeError as e:
        # pydantic only reports ValueError/AssertionError as field errors
        raise ValueError(str(e)) from e


METADATA_MAX_STR = 64
METADATA_INT_BOUND = 2**64


def _metadatum(value: Any, path: str = "metadata") -> None:
    """Transaction metadata: maps, lists, integers and strings of at most 64 bytes."""
    if isinstance(value, dict):
        for key, item in value.items():
            if isinstance(key, bool) or not isinstance(key, (str, int)):
                raise ValueError(f"{path}: keys must be strings or integers")
            _metadatum(key, f"{path} key {key!r}")
            _metadatum(item, f"{path}.{key}")
    elif isinstance(value, list):
        for i, item in enumerate(value):
            _metadatum(item, f"{path}[{i}]")
    elif isinstance(value, str):
        if len(value.encode("utf-8")) > METADATA_MAX_STR:
            raise ValueError(f"{path}: strings are limited to {METADATA_MAX_STR} bytes")
    elif isinstance(value, int) and not isinstance(value, bool):
        if not -METADATA_INT_BOUND < value < METADATA_INT_BOUND:
            raise ValueError(f"{path}: integer out of range")
    else:
        raise ValueError(f"{path}: {type(value).__name__} is not allowed (objects, arrays, integers and strings only)")


def _metadata(value: Any) -> Any:
    _metadatum(value)
    return value


Address = Annotated[str, BeforeValidator(_lower), AfterValidator(_payment_address)]
StakeAddress = Annotated[str, BeforeValidator(_lower), AfterValidator(_stake_address)]
KeyHash = Annotated[str, BeforeValidator(_lower), AfterValidator(_hash28)]
PolicyId = KeyHash
TxHash = Annotated[str, BeforeValidator(_lower), AfterValidator(_hash32)]
HexString = Annotated[str, BeforeValidator(_lower), AfterValidator(_hex)]
AssetId = Annotated[str, BeforeValidator(_lower), AfterValidator(_asset_id)]
AssetName = Annotated[str, BeforeValidator(_lower), AfterValidator(_asset_name)]
PositiveAmount = Annotated[int, BeforeValidator(_quantity), Field(gt=0)]
NonNegativeAmount = Annotated[int, BeforeValidator(_quantity), Field(ge=0)]


# ---------------------------------------------------------------------------
# Base models
# ---------------------------------------------------------------------------


class _StrictModel(BaseModel):
    """Strict model: reject unknown keys."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)


class BaseAction(_StrictModel):
    ACTION_TYPE: ClassVar[str] = ""

    def steps(self) -> List[Step]:
        raise NotImplementedError


class _UtxoRefAction(BaseAction):
    """Either an explicit (txHash, index) pair or an opaque provider UTxO record."""
    tx_hash: Optional[TxHash] = Field(default=None, alias="txHash")
    index: Optional[NonNegativeAmount] = None
    utxo: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def _pair_or_record(self):
        has_pair = self.tx_hash is not None and self.index is not None
        if self.utxo is None and not has_pair:
            raise ValueError("requires either txHash and index, or a utxo record")
        if self.utxo is not None:
            try:
                normalize_utxo(self.utxo)
            except (TypeError, ValueError) as e:
                raise ValueError(f"utxo record not understood: {e}") from e
        return self

    @property
    def ref(self) -> Tuple[Optional[str], Optional[int], Optional[Dict[str, Any]]]:
        return self.tx_hash, self.index, self.utxo


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------


class PayLovelace(BaseAction):
    ACTION_TYPE: ClassVar[str] = "payLovelace"
    type: Literal["payLovelace"]
    to_address: Address = Field(alias="toAddress")
    lovelace: PositiveAmount

    def steps(self) -> List[Step]:
        return [("pay_lovelace", (self.to_address, self.lovelace))]


class PayAssets(BaseAction):
    ACTION_TYPE: ClassVar[str] = "payAssets"
    type: Literal["payAssets"]
    to_address: Address = Field(alias="toAddress")
    assets: Dict[AssetId, PositiveAmount] = Field(min_length=1)
    lovelace: Optional[PositiveAmount] = None

    def steps(self) -> List[Step]:
        return [("pay_assets", (self.to_address, dict(self.assets), self.lovelace))]


class PaymentOutput(_StrictModel):
    to_address: Address = Field(alias="toAddress")
    lovelace: Optional[PositiveAmount] = None
    assets: Optional[Dict[AssetId, PositiveAmount]] = None


class PayMany(BaseAction):
    ACTION_TYPE: ClassVar[str] = "payMany"
    type: Literal["payMany"]
    outputs: List[PaymentOutput] = Field(min_length=1)

    def steps(self) -> List[Step]:
        return [("pay_many", (list(self.outputs),))]


# ---------------------------------------------------------------------------
# Transaction body settings
# ---------------------------------------------------------------------------


class AttachMetadata(BaseAction):
    ACTION_TYPE: ClassVar[str] = "metadata"
    type: Literal["metadata"]
    label: NonNegativeAmount = Field(default=721, le=2**64 - 1)
    metadata: Annotated[Any, AfterValidator(_metadata)]

    def steps(self) -> List[Step]:
        return [("add_metadata", (self.label, self.metadata))]


class SetValidity(BaseAction):
    ACTION_TYPE: ClassVar[str] = "validity"
    type: Literal["validity"]
    valid_from: Optional[NonNegativeAmount] = Field(default=None, alias="validFrom")
    valid_to: Optional[NonNegativeAmount] = Field(default=None, alias="validTo")

    @model_validator(mode="after")
    def _window(self):
        if self.valid_from is None and self.valid_to is None:
            raise ValueError("requires validFrom, validTo, or both")
        if self.valid_from is not None and self.valid_to is not None and self.valid_to <= self.valid_from:
            raise ValueError("validTo must be greater than validFrom")
        return self

    def steps(self) -> List[Step]:
        steps: List[Step] = []
        if self.valid_from is not None:
            steps.append(("valid_from", (self.valid_from,)))
        if self.valid_to is not None:
            steps.append(("valid_to", (self.valid_to,)))
        return steps


class AddRequiredSigner(BaseAction):
    ACTION_TYPE: ClassVar[str] = "requiredSigner"
    type: Literal["requiredSigner"]
    key_hash: KeyHash = Field(validation_alias=AliasChoices("keyHash", "pubKeyHash", "key_hash"))

    def steps(self) -> List[Step]:
        return [("add_required_signer", (self.key_hash,))]


class SetChangeAddress(BaseAction):
    ACTION_TYPE: ClassVar[str] = "changeAddress"
    type: Literal["changeAddress"]
    change_address: Address = Field(validation_alias=AliasChoices("changeAddress", "address", "change_address"))

    def steps(self) -> List[Step]:
        return [("set_change_address", (self.change_address,))]


class SetFeePolicy(BaseAction):
    """Staged by the builder and evaluated after every other action."""
    model_config = ConfigDict(extra="ignore")

    ACTION_TYPE: ClassVar[str] = "feePolicy"
    type: Literal["feePolicy"]
    strategy: Literal["default", "buffer"] = "default"
    multiplier: Optional[float] = Field(default=None, ge=1)
    fee_buffer: Optional[NonNegativeAmount] = Field(default=None, alias="feeBuffer")

    @model_validator(mode="after")
    def _buffer(self):
        if self.strategy == "buffer" and self.fee_buffer is None:
            raise ValueError("strategy 'buffer' requires feeBuffer")
        return self

    def steps(self) -> List[Step]:
        return [("set_fee_policy", (self.strategy, self.multiplier, self.fee_buffer))]


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


class AddCollateral(_UtxoRefAction):
    ACTION_TYPE: ClassVar[str] = "collateral"
    type: Literal["collateral"]

    def steps(self) -> List[Step]:
        return [("add_collateral", self.ref)]


class AddReferenceInput(_UtxoRefAction):
    ACTION_TYPE: ClassVar[str] = "referenceInput"
    type: Literal["referenceInput"]

    def steps(self) -> List[Step]:
        return [("add_reference_input", self.ref)]


class SpendUtxo(_UtxoRefAction):
    ACTION_TYPE: ClassVar[str] = "spendUtxo"
    type: Literal["spendUtxo"]
    redeemer: Optional[HexString] = None  # CBOR hex

    def steps(self) -> List[Step]:
        return [("spend_utxo", self.ref + (self.redeemer,))]


# ---------------------------------------------------------------------------
# Minting and scripts
# ---------------------------------------------------------------------------


class Mint(BaseAction):
    ACTION_TYPE: ClassVar[str] = "mint"
    type: Literal["mint"]
    policy_id: PolicyId = Field(alias="policyId")
    assets: Dict[AssetName, PositiveAmount] = Field(min_length=1)
    redeemer: Optional[HexString] = None

    def steps(self) -> List[Step]:
        return [("mint_assets", (self.policy_id, dict(self.assets), self.redeemer))]


class Burn(BaseAction):
    """Quantities are given positive; the builder negates them."""
    ACTION_TYPE: ClassVar[str] = "burn"
    type: Literal["burn"]
    policy_id: PolicyId = Field(alias="policyId")
    assets: Dict[AssetName, PositiveAmount] = Field(min_length=1)
    redeemer: Optional[HexString] = None

    def steps(self) -> List[Step]:
        return [("burn_assets", (self.policy_id, dict(self.assets), self.redeemer))]


class AttachScript(BaseAction):
    ACTION_TYPE: ClassVar[str] = "attachScript"
    type: Literal["attachScript"]
    script_cbor: HexString = Field(alias="scriptCbor")
    kind: Literal["native", "plutusV1", "plutusV2", "plutusV3"] = "plutusV2"

    def steps(self) -> List[Step]:
        return [("attach_script", (self.script_cbor, self.kind))]


# ---------------------------------------------------------------------------
# Staking
# ---------------------------------------------------------------------------


class RegisterStake(BaseAction):
    ACTION_TYPE: ClassVar[str] = "stakeRegister"
    type: Literal["stakeRegister"]
    stake_address: StakeAddress = Field(alias="stakeAddress")

    def steps(self) -> List[Step]:
        return [("register_stake", (self.stake_address,))]


class DeregisterStake(BaseAction):
    ACTION_TYPE: ClassVar[str] = "stakeDeregister"
    type: Literal["stakeDeregister"]
    stake_address: StakeAddress = Field(alias="stakeAddress")

    def steps(self) -> List[Step]:
        return [("deregister_stake", (self.stake_address,))]


class WithdrawRewards(BaseAction):
    ACTION_TYPE: ClassVar[str] = "withdrawRewards"
    type: Literal["withdrawRewards"]
    stake_address: StakeAddress = Field(alias="stakeAddress")
    amount: Optional[NonNegativeAmount] = None

    def steps(self) -> List[Step]:
        return [("withdraw_rewards", (self.stake_address, self.amount))]


# ---------------------------------------------------------------------------
# Union
# ---------------------------------------------------------------------------

ACTION_TYPES = (
    PayLovelace,
    PayAssets,
    PayMany,
    AttachMetadata,
    SetValidity,
    AddRequiredSigner,
    SetChangeAddress,
    AddCollateral,
    AddReferenceInput,
    SpendUtxo,
    Mint,
    Burn,
    AttachScript,
    RegisterStake,
    DeregisterStake,
    WithdrawRewards,
    SetFeePolicy,
)

Action = Annotated[
    Union[
        PayLovelace,
        PayAssets,
        PayMany,
        AttachMetadata,
        SetValidity,
        AddRequiredSigner,
        SetChangeAddress,
        AddCollateral,
        AddReferenceInput,
        SpendUtxo,
        Mint,
        Burn,
        AttachScript,
        RegisterStake,
        DeregisterStake,
        WithdrawRewards,
        SetFeePolicy,
    ],
    Field(discriminator="type"),
]

ACTION_ADAPTER: TypeAdapter = TypeAdapter(Action)

# type tag -> model
ACTIONS: Dict[str, type] = {cls.ACTION_TYPE: cls for cls in ACTION_TYPES}
