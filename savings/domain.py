from dataclasses import dataclass
from typing import Optional

DEPOSIT = "deposit"
WITHDRAWAL = "withdrawal"
GOAL_CONTRIBUTION = "goal_contribution"

KINDS = (DEPOSIT, WITHDRAWAL, GOAL_CONTRIBUTION)


@dataclass(frozen=True)
class Account:
    id: str
    owner: str
    balance: int     # minor units
    currency: str = "NGN"
    pending_fees: int = 0


@dataclass(frozen=True)
class Goal:
    id: str
    name: str
    target: int
    current: int
    frequency: str   # label only, e.g. "Monthly"


@dataclass(frozen=True)
class Transaction:
    id: str
    kind: str
    amount: int                    # principal, always positive
    ts: str                        # e.g. "2024-01-15T09:30:00"
    description: str = ""
    fee: Optional[int] = None      # withdrawals only
    goal_id: Optional[str] = None  # contributions only
    method: Optional[str] = None   # deposits only

    @property
    def date(self) -> str:
        return self.ts[:10]


# Full snapshot of one account's ledger; transactions are oldest first
@dataclass(frozen=True)
class LedgerState:
    account: Account
    goals: tuple[Goal, ...]
    transactions: tuple[Transaction, ...]
    opening_balance: int
    next_id: int


@dataclass(frozen=True)
class OperationResult:
    balance: int
    transaction: Transaction
    goal: Optional[Goal] = None
