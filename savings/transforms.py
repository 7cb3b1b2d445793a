import json
import math
from dataclasses import replace
from functools import lru_cache, reduce
from itertools import islice
from typing import Optional, Tuple

from savings.domain import (
    Account,
    Goal,
    LedgerState,
    Transaction,
    DEPOSIT,
    WITHDRAWAL,
    GOAL_CONTRIBUTION,
)
from savings.errors import InvalidAmount


def check_goal(goal: Goal) -> Goal:
    if isinstance(goal.target, bool) or not isinstance(goal.target, int) or goal.target <= 0:
        raise InvalidAmount("Goal target must be a positive integer", goal_id=goal.id, target=goal.target)
    if goal.current < 0:
        raise InvalidAmount("Goal progress cannot be negative", goal_id=goal.id, current=goal.current)
    return goal


def check_goals(goals: Tuple[Goal, ...]) -> Tuple[Goal, ...]:
    seen = set()
    for goal in goals:
        if goal.id in seen:
            raise ValueError(f"Duplicate goal id: {goal.id}")
        seen.add(goal.id)
        check_goal(goal)
    return tuple(goals)


def make_goal(id: str, name: str, target: int, current: int = 0, frequency: str = "Monthly") -> Goal:
    return check_goal(Goal(id=str(id), name=name, target=target, current=current, frequency=frequency))


def load_seed(path: str) -> Tuple[Account, Tuple[Goal, ...], Tuple[Transaction, ...]]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    # ids may be stored as JSON numbers
    account = Account(**{**data["account"], "id": str(data["account"]["id"])})
    goals = check_goals(tuple(make_goal(**g) for g in data["goals"]))
    transactions = tuple(
        Transaction(**{**t, "id": str(t["id"]), "goal_id": None if t.get("goal_id") is None else str(t["goal_id"])})
        for t in data["transactions"]
    )

    return account, goals, transactions


def signed_effect(t: Transaction) -> int:
    if t.kind == DEPOSIT:
        return t.amount
    if t.kind == WITHDRAWAL:
        return -(t.amount + (t.fee or 0))
    if t.kind == GOAL_CONTRIBUTION:
        return -t.amount
    raise ValueError(f"Unknown transaction kind: {t.kind}")


def replay_balance(opening: int, trans: Tuple[Transaction, ...]) -> int:
    return reduce(lambda acc, t: acc + signed_effect(t), trans, opening)


def initial_state(
    account: Account,
    goals: Tuple[Goal, ...] = (),
    trans: Tuple[Transaction, ...] = (),
) -> LedgerState:
    # account.balance already includes the effect of any prior history
    opening = account.balance - sum(map(signed_effect, trans))
    numeric_ids = [int(t.id) for t in trans if str(t.id).isdigit()]
    return LedgerState(
        account=account,
        goals=check_goals(tuple(goals)),
        transactions=tuple(trans),
        opening_balance=opening,
        next_id=max(numeric_ids, default=0) + 1,
    )


def add_transaction(trans: Tuple[Transaction, ...], t: Transaction) -> Tuple[Transaction, ...]:
    return trans + (t,)


def update_goal(goals: Tuple[Goal, ...], goal_id: str, amount: int) -> Tuple[Goal, ...]:
    return tuple(
        replace(g, current=g.current + amount) if g.id == goal_id else g
        for g in goals
    )


def _commit(state: LedgerState, delta: int, t: Transaction, goals: Optional[Tuple[Goal, ...]] = None) -> LedgerState:
    return replace(
        state,
        account=replace(state.account, balance=state.account.balance + delta),
        goals=state.goals if goals is None else goals,
        transactions=add_transaction(state.transactions, t),
        next_id=state.next_id + 1,
    )


def apply_deposit(state: LedgerState, amount: int, method: str, ts: str) -> Tuple[LedgerState, Transaction]:
    t = Transaction(
        id=str(state.next_id),
        kind=DEPOSIT,
        amount=amount,
        ts=ts,
        description=f"Money added via {method}",
        method=method,
    )
    return _commit(state, signed_effect(t), t), t


def apply_withdrawal(state: LedgerState, amount: int, fee: int, ts: str) -> Tuple[LedgerState, Transaction]:
    t = Transaction(
        id=str(state.next_id),
        kind=WITHDRAWAL,
        amount=amount,
        ts=ts,
        description="Withdrawal",
        fee=fee,
    )
    return _commit(state, signed_effect(t), t), t


def apply_contribution(state: LedgerState, goal: Goal, amount: int, ts: str) -> Tuple[LedgerState, Transaction]:
    t = Transaction(
        id=str(state.next_id),
        kind=GOAL_CONTRIBUTION,
        amount=amount,
        ts=ts,
        description=f"{goal.name} goal contribution",
        goal_id=goal.id,
    )
    goals = update_goal(state.goals, goal.id, amount)
    return _commit(state, signed_effect(t), t, goals), t


def recent_transactions(trans: Tuple[Transaction, ...], limit: int) -> Tuple[Transaction, ...]:
    return tuple(islice(reversed(trans), max(0, limit)))


@lru_cache(maxsize=1024)
def progress_percentage(current: int, target: int) -> float:
    if not target or target <= 0:
        raise InvalidAmount("Goal target must be a positive integer", target=target)
    return min(current / target * 100, 100.0)


def display_progress(goal: Goal) -> int:
    # half-up, so 72.5 shows as 73 rather than banker's 72
    return int(math.floor(progress_percentage(goal.current, goal.target) + 0.5))


def total_saved(goals: Tuple[Goal, ...]) -> int:
    return sum(g.current for g in goals)


def total_fees(trans: Tuple[Transaction, ...]) -> int:
    return sum(t.fee or 0 for t in trans)
