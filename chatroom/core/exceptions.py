"""
Core errors.

Every error carries a machine code and a message, the same shape the HTTP
layer renders as {"code": ..., "message": ...}. Services raise these
internally and return them as values from their public operations.
"""
from typing import Any, Dict, FrozenSet, Iterable

from chatroom.core.violations import ViolationKind


class ChatError(Exception):
    code: str = "CHAT_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_detail(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class ValidationError(ChatError):
    """One or more invariant violations. Nothing was written."""

    code = "VALIDATION_FAILED"

    def __init__(self, kinds: Iterable[ViolationKind]):
        self.kinds: FrozenSet[ViolationKind] = frozenset(kinds)
        names = ", ".join(sorted(k.value for k in self.kinds))
        super().__init__(f"Validation failed: {names}")

    def __contains__(self, kind: ViolationKind) -> bool:
        return kind in self.kinds

    def to_detail(self) -> Dict[str, Any]:
        detail = super().to_detail()
        detail["violations"] = sorted(k.value for k in self.kinds)
        return detail


class NotFound(ChatError):
    code = "NOT_FOUND"

    def __init__(self, entity: str = "Resource"):
        super().__init__(f"{entity} not found.")
        self.entity = entity


class Forbidden(ChatError):
    code = "FORBIDDEN"

    def __init__(self, message: str = "Access denied."):
        super().__init__(message)


class TransactionConflict(ChatError):
    """Exclusive access could not be obtained in time. Nothing was applied; retry the whole call."""

    code = "TRANSACTION_CONFLICT"

    def __init__(self, message: str = "Could not obtain exclusive access. Please try again."):
        super().__init__(message)
