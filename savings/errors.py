from typing import Any, Dict


class LedgerError(Exception):
    """Base class for validation failures raised by ledger operations.

    A failed operation never changes ledger state, so callers may report the
    error and carry on with the same ledger.
    """

    code = "ledger_error"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, **self.details}

    def __eq__(self, other) -> bool:
        return (
            type(other) is type(self)
            and other.message == self.message
            and other.details == self.details
        )

    __hash__ = Exception.__hash__


class InvalidAmount(LedgerError):
    code = "invalid_amount"


class InsufficientFunds(LedgerError):
    code = "insufficient_funds"


class GoalNotFound(LedgerError):
    code = "goal_not_found"


class OperationTimeout(LedgerError):
    code = "operation_timeout"
