import asyncio
import logging
import time
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

from savings import config
from savings.services import AccountRegistry, LedgerService

logger = logging.getLogger(__name__)


async def run_operation(func: Callable[..., Any], *args, timeout: Optional[float] = None, **kwargs) -> Any:
    """Run a ledger or service operation off the event loop.

    ``func`` must accept a ``deadline`` keyword. The ledger checks it under its
    lock before committing, so an operation that runs out of time is rejected
    without effect instead of committing after the caller stopped waiting.
    The call is always awaited to its definite outcome. Nothing is retried.
    """
    limit = config.OPERATION_TIMEOUT if timeout is None else timeout
    deadline = time.monotonic() + limit
    return await asyncio.to_thread(func, *args, deadline=deadline, **kwargs)


def _failure(op: Dict[str, Any], code: str, message: str) -> Dict[str, Any]:
    return {"ok": False, "account_id": op.get("account_id"), "error": {"error": code, "message": message}}


async def _dispatch(service: LedgerService, op: Dict[str, Any], timeout: Optional[float]) -> Dict[str, Any]:
    kind = op.get("op")
    account_id = op.get("account_id")
    if account_id not in service.registry:
        return _failure(op, "account_not_found", f"Unknown account {account_id}")
    if kind == "deposit":
        return await run_operation(service.deposit, account_id, op["amount"], op.get("method", "bank"), timeout=timeout)
    if kind == "withdraw":
        return await run_operation(service.withdraw, account_id, op["amount"], timeout=timeout)
    if kind == "contribute":
        return await run_operation(service.contribute, account_id, op["goal_id"], op["amount"], timeout=timeout)
    return _failure(op, "unknown_operation", f"Unknown operation: {kind}")


async def apply_batch(
    service: LedgerService,
    operations: List[Dict[str, Any]],
    timeout: Optional[float] = None,
) -> List[Dict[str, Any]]:
    """Apply operations, one account at a time in order, accounts in parallel.

    operations: dicts like {"op": "deposit", "account_id": "acc1", "amount": 5000}
    Returns one result dict per operation, in the same order as ``operations``.
    Every account worker runs to completion before an unexpected error is re-raised.
    """
    by_account: Dict[str, List[int]] = defaultdict(list)
    for idx, op in enumerate(operations):
        by_account[op.get("account_id")].append(idx)

    results: List[Optional[Dict[str, Any]]] = [None] * len(operations)

    async def account_worker(account_id: str, indexes: List[int]) -> None:
        for idx in indexes:
            results[idx] = await _dispatch(service, operations[idx], timeout)

    outcomes = await asyncio.gather(
        *(account_worker(a, idxs) for a, idxs in by_account.items()),
        return_exceptions=True,
    )
    errors = [o for o in outcomes if isinstance(o, BaseException)]
    if errors:
        logger.error("batch stopped early on %d accounts: %r", len(errors), errors[0])
        raise errors[0]

    logger.info("applied batch of %d operations across %d accounts", len(operations), len(by_account))
    return results  # type: ignore[return-value]


async def balance_snapshot(registry: AccountRegistry) -> Dict[str, int]:
    """Read every account balance concurrently."""
    async def read(account_id: str) -> tuple[str, int]:
        ledger = registry.get(account_id)
        await asyncio.sleep(0)
        return account_id, ledger.balance

    results = await asyncio.gather(*(read(a) for a in registry.ids()))
    return {k: v for k, v in results}
