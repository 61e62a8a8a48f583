"""Error taxonomy shared by the validator, compiler, and provider layers."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence


class TxKitError(Exception):
    """Base exception. Every failure is scoped to a single request."""
    status_code: int = 500

    def to_dict(self) -> Dict[str, Any]:
        return {"success": False, "error": str(self)}


@dataclass(frozen=True)
class FieldIssue:
    """One field-level validation problem."""
    field: str
    message: str
    index: Optional[int] = None  # position in the action sequence, if any

    def __str__(self) -> str:
        where = f"actions[{self.index}]." if self.index is not None else ""
        return f"{where}{self.field}: {self.message}"


class ValidationError(TxKitError):
    """Malformed or unknown action, address or amount. Caller-fixable."""
    status_code = 400

    def __init__(self, issues: Sequence[FieldIssue]):
        self.issues: List[FieldIssue] = list(issues)
        summary = "; ".join(str(i) for i in self.issues[:5])
        if len(self.issues) > 5:
            summary += f" (+{len(self.issues) - 5} more)"
        super().__init__(f"Validation failed: {summary}")

    @classmethod
    def single(cls, field: str, message: str, index: Optional[int] = None) -> "ValidationError":
        return cls([FieldIssue(field=field, message=message, index=index)])

    @property
    def fields(self) -> List[str]:
        return [i.field for i in self.issues]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": str(self),
            "issues": [
                {"index": i.index, "field": i.field, "message": i.message}
                for i in self.issues
            ],
        }


class ProviderUnavailableError(TxKitError):
    """Neither the dual indexer nor the fallback service is usable."""
    status_code = 503


class ProviderError(TxKitError):
    """A usable provider answered the request with an error."""
    status_code = 502


class CompilationError(TxKitError):
    """A valid action could not be applied to the builder. Never retried."""
    status_code = 422

    def __init__(self, message: str, action_index: Optional[int] = None, action_type: Optional[str] = None):
        self.action_index = action_index
        self.action_type = action_type
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.action_index is not None:
            data["actionIndex"] = self.action_index
        if self.action_type is not None:
            data["actionType"] = self.action_type
        return data


class UnsupportedActionError(CompilationError):
    """The active builder exposes none of the candidate operations for an action."""

    def __init__(self, action_type: str, candidates: Sequence[str], action_index: Optional[int] = None):
        self.candidates = tuple(candidates)
        super().__init__(
            f"Unsupported action '{action_type}': none of methods [{', '.join(self.candidates)}] found",
            action_index=action_index,
            action_type=action_type,
        )


class TransientNetworkError(TxKitError):
    """Probe timeout, abort or transport failure. Absorbed as 'not reachable'."""
    status_code = 504
