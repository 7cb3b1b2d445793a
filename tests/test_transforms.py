import json

import pytest

from savings import config
from savings.domain import Account, Goal, Transaction, DEPOSIT, WITHDRAWAL, GOAL_CONTRIBUTION
from savings.errors import InvalidAmount
from savings.ledger import Ledger
from savings.transforms import (
    add_transaction,
    apply_contribution,
    apply_deposit,
    apply_withdrawal,
    display_progress,
    initial_state,
    load_seed,
    make_goal,
    progress_percentage,
    recent_transactions,
    replay_balance,
    signed_effect,
    total_fees,
    total_saved,
    update_goal,
)


def make_tx(id, kind, amount, fee=None):
    return Transaction(id=id, kind=kind, amount=amount, ts="2024-01-15T10:00:00", fee=fee)


def test_signed_effect():
    assert signed_effect(make_tx("1", DEPOSIT, 5000)) == 5000
    assert signed_effect(make_tx("2", WITHDRAWAL, 2000, fee=50)) == -2050
    assert signed_effect(make_tx("3", GOAL_CONTRIBUTION, 3000)) == -3000
    with pytest.raises(ValueError):
        signed_effect(make_tx("4", "refund", 10))


def test_replay_balance():
    trans = (
        make_tx("1", DEPOSIT, 5000),
        make_tx("2", WITHDRAWAL, 2000, fee=50),
        make_tx("3", GOAL_CONTRIBUTION, 3000),
    )
    assert replay_balance(45750, trans) == 45700
    assert replay_balance(100, ()) == 100


def test_initial_state_derives_opening_balance():
    trans = (make_tx("1", DEPOSIT, 5000), make_tx("7", WITHDRAWAL, 100, fee=50))
    state = initial_state(Account("acc1", "John", 10000), (), trans)

    assert state.opening_balance == 5150
    assert state.next_id == 8
    assert replay_balance(state.opening_balance, state.transactions) == 10000


def test_apply_functions_do_not_mutate_input():
    goal = make_goal("g1", "Food", 30000, 18500)
    state = initial_state(Account("acc1", "John", 48700), (goal,))

    s1, t1 = apply_deposit(state, 500, "card", "2024-01-16T09:00:00")
    s2, t2 = apply_withdrawal(s1, 1000, 50, "2024-01-16T09:01:00")
    s3, t3 = apply_contribution(s2, goal, 3000, "2024-01-16T09:02:00")

    assert state.account.balance == 48700
    assert state.transactions == ()
    assert s1.account.balance == 49200 and t1.method == "card"
    assert s2.account.balance == 48150 and t2.fee == 50
    assert s3.account.balance == 45150 and s3.goals[0].current == 21500
    assert goal.current == 18500
    assert [t.id for t in s3.transactions] == ["1", "2", "3"]


def test_update_goal_only_touches_target_goal():
    goals = (Goal("a", "A", 100, 10, "Monthly"), Goal("b", "B", 100, 20, "Monthly"))
    updated = update_goal(goals, "b", 5)
    assert updated[0] is goals[0]
    assert updated[1].current == 25


def test_add_transaction_immutability():
    t1 = make_tx("1", DEPOSIT, 100)
    trans = (t1,)
    new_trans = add_transaction(trans, t1)
    assert new_trans is not trans
    assert len(trans) == 1 and len(new_trans) == 2


def test_recent_transactions_newest_first():
    trans = tuple(make_tx(str(i), DEPOSIT, 100 + i) for i in range(8))
    recent = recent_transactions(trans, 5)
    assert [t.id for t in recent] == ["7", "6", "5", "4", "3"]
    assert recent_transactions(trans, 0) == ()


def test_progress_percentage_scenario():
    assert progress_percentage(21500, 30000) == pytest.approx(71.6666, rel=1e-4)
    assert display_progress(Goal("g", "Food", 30000, 21500, "Monthly")) == 72


def test_progress_saturates_and_is_monotonic():
    values = [progress_percentage(c, 1000) for c in range(0, 2001, 50)]
    assert values == sorted(values)
    assert values[-1] == 100
    assert progress_percentage(1000, 1000) == 100
    assert progress_percentage(5000, 1000) == 100


def test_display_progress_rounds_half_up():
    assert display_progress(Goal("g", "Half", 8, 1, "Monthly")) == 13


def test_progress_requires_positive_target():
    with pytest.raises(InvalidAmount):
        progress_percentage(10, 0)


def test_make_goal_validates_target():
    with pytest.raises(InvalidAmount):
        make_goal("g", "Broken", 0)
    with pytest.raises(InvalidAmount):
        make_goal("g", "Broken", -100)
    with pytest.raises(InvalidAmount):
        make_goal("g", "Broken", 100, -1)
    assert make_goal("g", "Ok", 100).current == 0


def test_totals():
    goals = (Goal("a", "A", 100, 10, "Monthly"), Goal("b", "B", 100, 20, "Monthly"))
    assert total_saved(goals) == 30
    trans = (make_tx("1", WITHDRAWAL, 10, fee=50), make_tx("2", DEPOSIT, 10), make_tx("3", WITHDRAWAL, 10, fee=50))
    assert total_fees(trans) == 100


def test_load_seed():
    account, goals, transactions = load_seed(config.get_seed_path())

    assert account.balance == 45750
    assert [g.name for g in goals] == ["Food", "House Rent", "School Fees"]
    assert len(transactions) == 3
    assert {t.kind for t in transactions} == {DEPOSIT, WITHDRAWAL, GOAL_CONTRIBUTION}


def test_load_seed_with_numeric_ids(tmp_path):
    seed = {
        "account": {"id": 1, "owner": "John", "balance": 45750},
        "goals": [{"id": 1, "name": "Food", "target": 30000, "current": 18500}],
        "transactions": [
            {"id": 2, "kind": "withdrawal", "amount": 2000, "ts": "2024-01-14T10:00:00", "fee": 50},
            {"id": 3, "kind": "goal_contribution", "amount": 3000, "ts": "2024-01-13T10:00:00", "goal_id": 1},
        ],
    }
    path = tmp_path / "seed.json"
    path.write_text(json.dumps(seed), encoding="utf-8")

    account, goals, transactions = load_seed(str(path))
    assert account.id == "1"
    assert goals[0].id == "1"
    assert [t.id for t in transactions] == ["2", "3"]
    assert transactions[1].goal_id == "1"

    ledger = Ledger.from_seed(str(path))
    assert ledger.verify()
    assert ledger.contribute("1", 500).transaction.id == "4"


def test_initial_state_tolerates_integer_ids():
    trans = (Transaction(id=5, kind=DEPOSIT, amount=100, ts="2024-01-15T10:00:00"),)
    assert initial_state(Account("acc1", "John", 100), (), trans).next_id == 6


def test_initial_state_rejects_duplicate_goals():
    goals = (Goal("g", "A", 100, 0, "Monthly"), Goal("g", "B", 100, 0, "Monthly"))
    with pytest.raises(ValueError):
        initial_state(Account("acc1", "John", 100), goals)
