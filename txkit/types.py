"""
Core value types.

Minimal Token type and quantity coercion. Uses pycardano for everything ledger-shaped.
"""

from dataclasses import dataclass
from typing import Any

POLICY_ID_LENGTH = 56  # hex chars (28 bytes)


@dataclass(frozen=True)
class Token:
    """
    Represents a Cardano native token.

    ADA is represented with empty policy_id and name.
    Name is stored as hex (not decoded).
    """
    policy_id: str
    name: str  # hex encoded

    @property
    def is_ada(self) -> bool:
        return self.policy_id == "" and self.name == ""

    @property
    def unit(self) -> str:
        """Dotted asset id (``<policy>.<name>``), or ``lovelace`` for ADA."""
        if self.is_ada:
            return "lovelace"
        return f"{self.policy_id}.{self.name}"

    @classmethod
    def ada(cls) -> "Token":
        return cls(policy_id="", name="")

    @classmethod
    def from_unit(cls, unit: str) -> "Token":
        """
        Create from a provider unit string.

        Accepts ``lovelace``, the dotted form ``<policy>.<name>`` and the
        concatenated Blockfrost form ``<policy><name>``.
        """
        if not unit or unit == "lovelace" or unit == ".":
            return cls.ada()
        unit = unit.lower()
        if "." in unit:
            policy_id, _, name = unit.partition(".")
            return cls(policy_id=policy_id, name=name)
        if len(unit) <= POLICY_ID_LENGTH:
            return cls(policy_id=unit, name="")
        return cls(policy_id=unit[:POLICY_ID_LENGTH], name=unit[POLICY_ID_LENGTH:])

    def __str__(self) -> str:
        if self.is_ada:
            return "ADA"
        try:
            decoded = bytes.fromhex(self.name).decode("utf-8")
            return f"{self.policy_id[:8]}..{decoded}"
        except (ValueError, UnicodeDecodeError):
            return f"{self.policy_id[:8]}..{self.name[:8]}"

    def __repr__(self) -> str:
        if self.is_ada:
            return "Token(ADA)"
        return f"Token({self.policy_id[:8]}..{self.name[:8] if self.name else ''})"


def to_quantity(value: Any) -> int:
    """
    Coerce a JSON quantity (int or decimal string) to an int.

    Floats and booleans are refused: amounts must never pass through
    floating point.
    """
    if isinstance(value, bool):
        raise TypeError("quantity must be an integer, not a boolean")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        digits = text[1:] if text[:1] in "+-" else text
        if not (digits.isascii() and digits.isdigit()):
            raise ValueError(f"quantity {value!r} is not an integer")
        return int(text)
    raise TypeError(f"quantity must be an integer or integer string, got {type(value).__name__}")

