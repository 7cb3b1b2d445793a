import threading
import time
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Optional

from savings import config
from savings.domain import Account, Goal, LedgerState, OperationResult, Transaction
from savings.errors import GoalNotFound, OperationTimeout
from savings.functional import safe_goal, validate_contribution, validate_deposit, validate_withdrawal
from savings.transforms import (
    apply_contribution,
    apply_deposit,
    apply_withdrawal,
    display_progress,
    initial_state,
    load_seed,
    recent_transactions,
    replay_balance,
)


class Ledger:
    """Owns one account's balance, goals and transaction log.

    Every operation validates against the current state, builds the complete
    next state with the pure functions in ``savings.transforms`` and commits it
    with a single assignment under the ledger's lock. A rejected operation
    raises a ``LedgerError`` and leaves the state untouched, including one
    that misses its ``deadline`` (a ``time.monotonic()`` value).
    """

    def __init__(
        self,
        account: Account,
        goals: tuple[Goal, ...] = (),
        transactions: tuple[Transaction, ...] = (),
        *,
        withdrawal_fee: int = config.WITHDRAWAL_FEE,
        min_deposit: int = config.MIN_DEPOSIT,
        history_limit: int = config.HISTORY_LIMIT,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if account.balance < 0:
            raise ValueError("Account balance cannot be negative")
        self.withdrawal_fee = withdrawal_fee
        self.min_deposit = min_deposit
        self.history_limit = history_limit
        self._clock = clock or datetime.now
        self._lock = threading.RLock()
        self._state = initial_state(account, tuple(goals), tuple(transactions))

    @classmethod
    def from_seed(cls, path: Optional[str] = None, **kwargs) -> "Ledger":
        account, goals, transactions = load_seed(path or config.get_seed_path())
        return cls(account, goals, transactions, **kwargs)

    def _now(self) -> str:
        return self._clock().isoformat(timespec="seconds")

    @property
    def state(self) -> LedgerState:
        return self._state

    @property
    def account(self) -> Account:
        return self._state.account

    @property
    def balance(self) -> int:
        return self._state.account.balance

    @property
    def goals(self) -> tuple[Goal, ...]:
        return self._state.goals

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return self._state.transactions

    @property
    def history(self) -> tuple[Transaction, ...]:
        return recent_transactions(self._state.transactions, self.history_limit)

    def goal(self, goal_id: str) -> Goal:
        found = safe_goal(self._state.goals, goal_id).get_or_else(None)
        if found is None:
            raise GoalNotFound(f"Goal with ID {goal_id} does not exist", goal_id=goal_id)
        return found

    def progress(self, goal_id: str) -> int:
        return display_progress(self.goal(goal_id))

    @contextmanager
    def _locked(self, deadline: Optional[float]):
        if deadline is None:
            self._lock.acquire()
        elif not self._lock.acquire(timeout=max(0.0, deadline - time.monotonic())):
            raise OperationTimeout("Operation timed out waiting for the account", account_id=self.account.id)
        try:
            yield
        finally:
            self._lock.release()

    def _commit(self, state: LedgerState, deadline: Optional[float]) -> None:
        # last point where an operation can still be rejected without effect
        if deadline is not None and time.monotonic() > deadline:
            raise OperationTimeout("Operation timed out before commit", account_id=self.account.id)
        self._state = state

    def deposit(self, amount: int, method: str = "bank", *, deadline: Optional[float] = None) -> OperationResult:
        with self._locked(deadline):
            state = self._state
            amount = validate_deposit(state, amount, self.min_deposit).unwrap()
            state, t = apply_deposit(state, amount, method, self._now())
            self._commit(state, deadline)
        return OperationResult(balance=state.account.balance, transaction=t)

    def withdraw(self, amount: int, *, deadline: Optional[float] = None) -> OperationResult:
        with self._locked(deadline):
            state = self._state
            amount = validate_withdrawal(state, amount, self.withdrawal_fee).unwrap()
            state, t = apply_withdrawal(state, amount, self.withdrawal_fee, self._now())
            self._commit(state, deadline)
        return OperationResult(balance=state.account.balance, transaction=t)

    def contribute(self, goal_id: str, amount: int, *, deadline: Optional[float] = None) -> OperationResult:
        with self._locked(deadline):
            state = self._state
            goal, amount = validate_contribution(state, goal_id, amount).unwrap()
            state, t = apply_contribution(state, goal, amount, self._now())
            self._commit(state, deadline)
        updated = safe_goal(state.goals, goal_id).get_or_else(goal)
        return OperationResult(balance=state.account.balance, transaction=t, goal=updated)

    def verify(self) -> bool:
        """Check the balance against a replay of the full transaction log."""
        state = self._state
        return replay_balance(state.opening_balance, state.transactions) == state.account.balance

    def __repr__(self) -> str:
        return f"Ledger(account={self.account.id!r}, balance={self.balance})"
