from typing import Callable, Dict, List, NamedTuple
from datetime import datetime

from savings import config
from savings.formatting import format_currency

__all__ = [
    'DEPOSIT_COMPLETED', 'WITHDRAWAL_COMPLETED', 'GOAL_CONTRIBUTED', 'BALANCE_CHECK',
    'Event', 'EventBus', 'build_default_bus',
]

DEPOSIT_COMPLETED = "DEPOSIT_COMPLETED"
WITHDRAWAL_COMPLETED = "WITHDRAWAL_COMPLETED"
GOAL_CONTRIBUTED = "GOAL_CONTRIBUTED"
BALANCE_CHECK = "BALANCE_CHECK"


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        handlers = self._subscribers.get(name, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = list(self._subscribers.get(name, []))
        if not handlers:
            return []
        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in handlers]


def deposit_notification_handler(event: Event, payload: dict) -> dict:
    amount = payload.get("amount", 0)
    return {"notification": f"{format_currency(amount)} added successfully!", "type": "success"}


def withdrawal_notification_handler(event: Event, payload: dict) -> dict:
    amount = payload.get("amount", 0)
    return {"notification": f"{format_currency(amount)} withdrawn successfully!", "type": "success"}


def contribution_notification_handler(event: Event, payload: dict) -> dict:
    amount = payload.get("amount", 0)
    goal_name = payload.get("goal_name", "")
    return {"notification": f"{format_currency(amount)} added to {goal_name} goal!", "type": "success"}


def goal_reached_handler(event: Event, payload: dict) -> dict:
    current = payload.get("goal_current", 0)
    target = payload.get("goal_target", 0)
    # only the contribution that crosses the target raises the alert
    if target > 0 and current >= target and current - payload.get("amount", 0) < target:
        return {
            "alert": f"{payload.get('goal_name', '')} goal reached: {format_currency(current)} of {format_currency(target)}",
            "goal_id": payload.get("goal_id"),
        }
    return {}


def check_balance_handler(event: Event, payload: dict) -> dict:
    balance = payload.get("balance", 0)
    minimum = payload.get("minimum", config.FEE_MINIMUM_BALANCE)

    if balance < minimum:
        return {
            "alert": f"Below {format_currency(minimum)} minimum",
            "balance": balance,
            "minimum": minimum,
        }
    return {"status": f"Monthly fee: {format_currency(config.MONTHLY_FEE)} (Active)"}


def register_default_handlers(bus: EventBus) -> EventBus:
    bus.subscribe(DEPOSIT_COMPLETED, deposit_notification_handler)
    bus.subscribe(WITHDRAWAL_COMPLETED, withdrawal_notification_handler)
    bus.subscribe(GOAL_CONTRIBUTED, contribution_notification_handler)
    bus.subscribe(GOAL_CONTRIBUTED, goal_reached_handler)
    bus.subscribe(BALANCE_CHECK, check_balance_handler)
    return bus


def build_default_bus() -> EventBus:
    return register_default_handlers(EventBus())
