import logging
import threading
from dataclasses import asdict
from typing import Callable, Dict, Any, Optional, Sequence

from savings import config
from savings.domain import Account, Goal, OperationResult, Transaction, KINDS
from savings.errors import LedgerError
from savings.events import (
    EventBus,
    build_default_bus,
    DEPOSIT_COMPLETED,
    WITHDRAWAL_COMPLETED,
    GOAL_CONTRIBUTED,
    BALANCE_CHECK,
)
from savings.ledger import Ledger
from savings.transforms import display_progress, total_fees, total_saved

logger = logging.getLogger(__name__)


class AccountRegistry:
    """Holds one Ledger per account id.

    Each ledger serializes its own operations; the registry lock only guards
    the mapping, so operations on different accounts never wait on each other.
    """

    def __init__(self):
        self._ledgers: Dict[str, Ledger] = {}
        self._lock = threading.Lock()

    def open(
        self,
        account_id: str,
        owner: str = "",
        balance: int = 0,
        goals: Sequence[Goal] = (),
        transactions: Sequence[Transaction] = (),
        **kwargs,
    ) -> Ledger:
        ledger = Ledger(Account(id=account_id, owner=owner, balance=balance), tuple(goals), tuple(transactions), **kwargs)
        return self.add(ledger)

    def add(self, ledger: Ledger) -> Ledger:
        with self._lock:
            if ledger.account.id in self._ledgers:
                raise ValueError(f"Account {ledger.account.id} is already open")
            self._ledgers[ledger.account.id] = ledger
        logger.info("opened account %s with balance %s", ledger.account.id, ledger.balance)
        return ledger

    def get(self, account_id: str) -> Ledger:
        with self._lock:
            try:
                return self._ledgers[account_id]
            except KeyError:
                raise KeyError(f"Unknown account {account_id}") from None

    def ids(self) -> list[str]:
        with self._lock:
            return list(self._ledgers)

    def __contains__(self, account_id: str) -> bool:
        with self._lock:
            return account_id in self._ledgers

    def __len__(self) -> int:
        with self._lock:
            return len(self._ledgers)


class LedgerService:
    """Facade the presentation layer talks to.

    Runs one ledger operation, publishes the matching events and folds the
    handler outputs into a plain result dict. Ledger validation failures come
    back as ``{"ok": False, "error": {...}}`` instead of raising.
    """

    def __init__(self, registry: AccountRegistry, bus: Optional[EventBus] = None):
        self.registry = registry
        self.bus = bus or build_default_bus()

    def deposit(self, account_id: str, amount: int, method: str = "bank", deadline: Optional[float] = None) -> Dict[str, Any]:
        ledger = self.registry.get(account_id)
        return self._run(
            ledger, "deposit", DEPOSIT_COMPLETED,
            lambda: ledger.deposit(amount, method, deadline=deadline),
            amount=amount, method=method,
        )

    def withdraw(self, account_id: str, amount: int, deadline: Optional[float] = None) -> Dict[str, Any]:
        ledger = self.registry.get(account_id)
        return self._run(
            ledger, "withdraw", WITHDRAWAL_COMPLETED,
            lambda: ledger.withdraw(amount, deadline=deadline),
            amount=amount,
        )

    def contribute(self, account_id: str, goal_id: str, amount: int, deadline: Optional[float] = None) -> Dict[str, Any]:
        ledger = self.registry.get(account_id)
        return self._run(
            ledger, "contribute", GOAL_CONTRIBUTED,
            lambda: ledger.contribute(goal_id, amount, deadline=deadline),
            amount=amount, goal_id=goal_id,
        )

    def _run(self, ledger: Ledger, op: str, event: str, call: Callable[[], OperationResult], **params) -> Dict[str, Any]:
        try:
            result = call()
        except LedgerError as e:
            logger.warning("%s rejected on %s: %s %s", op, ledger.account.id, e.code, e.details)
            return {"ok": False, "account_id": ledger.account.id, "error": e.to_dict()}

        logger.info(
            "%s applied on %s: tx=%s amount=%s balance=%s",
            op, ledger.account.id, result.transaction.id, result.transaction.amount, result.balance,
        )
        payload = {
            "account_id": ledger.account.id,
            "balance": result.balance,
            "amount": result.transaction.amount,
            "fee": result.transaction.fee,
            **params,
        }
        if result.goal is not None:
            payload.update(
                goal_name=result.goal.name,
                goal_current=result.goal.current,
                goal_target=result.goal.target,
            )

        outputs = self.bus.publish(event, payload)
        outputs += self.bus.publish(BALANCE_CHECK, {"balance": result.balance})
        return {
            "ok": True,
            "account_id": ledger.account.id,
            "balance": result.balance,
            "transaction": asdict(result.transaction),
            "goal": asdict(result.goal) if result.goal is not None else None,
            "notifications": [o["notification"] for o in outputs if "notification" in o],
            "alerts": [o["alert"] for o in outputs if "alert" in o],
        }


def balance_aggregator(ledger: Ledger, acc: Optional[dict] = None) -> Dict[str, Any]:
    balance = ledger.balance
    return {
        "balance": balance,
        "fee_active": balance >= config.FEE_MINIMUM_BALANCE,
        "monthly_fee": config.MONTHLY_FEE if balance >= config.FEE_MINIMUM_BALANCE else 0,
        "pending_fees": ledger.account.pending_fees,
    }


def goals_aggregator(ledger: Ledger, acc: Optional[dict] = None) -> Dict[str, Any]:
    goals = ledger.goals
    return {
        "total_saved": total_saved(goals),
        "total_target": sum(g.target for g in goals),
        "goals": [
            {"id": g.id, "name": g.name, "current": g.current, "target": g.target, "progress": display_progress(g)}
            for g in goals
        ],
    }


def history_aggregator(ledger: Ledger, acc: Optional[dict] = None) -> Dict[str, Any]:
    trans = ledger.transactions
    return {
        "counts": {kind: sum(1 for t in trans if t.kind == kind) for kind in KINDS},
        "total_fees": total_fees(trans),
        "recent": [asdict(t) for t in ledger.history],
    }


DEFAULT_AGGREGATORS = (balance_aggregator, goals_aggregator, history_aggregator)


class ReportService:
    """Facade for building a dashboard summary of one ledger using injected aggregators."""

    def __init__(self, aggregators: Sequence[Callable[..., Dict[str, Any]]] = DEFAULT_AGGREGATORS):
        self.aggregators = aggregators

    def account_report(self, ledger: Ledger) -> Dict[str, Any]:
        report = {"account": ledger.account.id, "steps": [], "result": {}}
        acc: Dict[str, Any] = {}
        for agg in self.aggregators:
            out = agg(ledger, acc)
            report["steps"].append({"aggregator": getattr(agg, "__name__", str(agg)), "output": out})
            if isinstance(out, dict):
                acc.update(out)
        report["result"] = acc
        return report
