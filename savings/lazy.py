from typing import Callable, Iterable, Iterator

from savings.domain import Goal, Transaction
from savings.transforms import progress_percentage


def iter_transactions(
    trans: Iterable[Transaction], pred: Callable[[Transaction], bool]
) -> Iterator[Transaction]:
    for t in trans:
        if pred(t):
            yield t


def by_kind(kind: str):
    def _filter(t: Transaction) -> bool:
        return t.kind == kind

    return _filter


def by_date_range(start: str, end: str):
    def _filter(t: Transaction) -> bool:
        return start <= t.date <= end

    return _filter


def by_amount_range(min: int, max: int):
    def _filter(t: Transaction) -> bool:
        return min <= t.amount <= max

    return _filter


def by_goal(goal_id: str):
    def _filter(t: Transaction) -> bool:
        return t.goal_id == goal_id

    return _filter


def lazy_top_goals(goals: Iterable[Goal], k: int) -> Iterator[tuple[str, float]]:
    ordered = sorted(
        ((g.name, progress_percentage(g.current, g.target)) for g in goals),
        key=lambda item: item[1],
        reverse=True,
    )
    for name, pct in ordered[: max(0, k)]:
        yield name, pct
