from datetime import datetime

from savings.events import (
    Event, EventBus, build_default_bus,
    DEPOSIT_COMPLETED, WITHDRAWAL_COMPLETED, GOAL_CONTRIBUTED, BALANCE_CHECK,
    check_balance_handler, goal_reached_handler,
)


def test_event_bus_subscribe_and_publish():
    bus = EventBus()
    seen = []

    def handler(event: Event, payload: dict) -> dict:
        seen.append(event.name)
        return {"processed": True}

    bus.subscribe(DEPOSIT_COMPLETED, handler)
    assert bus.publish(DEPOSIT_COMPLETED, {"amount": 100}) == [{"processed": True}]
    assert seen == [DEPOSIT_COMPLETED]

    bus.unsubscribe(DEPOSIT_COMPLETED, handler)
    assert bus.publish(DEPOSIT_COMPLETED, {"amount": 100}) == []


def test_publish_without_subscribers():
    assert EventBus().publish("NOTHING", {}) == []


def test_default_notifications():
    bus = build_default_bus()
    assert bus.publish(DEPOSIT_COMPLETED, {"amount": 5000})[0]["notification"] == "₦5,000 added successfully!"
    assert bus.publish(WITHDRAWAL_COMPLETED, {"amount": 2000})[0]["notification"] == "₦2,000 withdrawn successfully!"
    results = bus.publish(GOAL_CONTRIBUTED, {"amount": 3000, "goal_name": "Food", "goal_current": 21500, "goal_target": 30000})
    assert results[0]["notification"] == "₦3,000 added to Food goal!"
    assert results[1] == {}


def test_default_buses_are_independent():
    a = build_default_bus()
    b = build_default_bus()
    a.subscribe(DEPOSIT_COMPLETED, lambda e, p: {"extra": True})
    assert len(a.publish(DEPOSIT_COMPLETED, {"amount": 1})) == 2
    assert len(b.publish(DEPOSIT_COMPLETED, {"amount": 1})) == 1


def test_goal_reached_only_when_crossing_target():
    event = Event(GOAL_CONTRIBUTED, datetime.now().isoformat(), {})
    crossing = {"amount": 3000, "goal_name": "Food", "goal_id": "1", "goal_current": 31500, "goal_target": 30000}
    already = {"amount": 3000, "goal_name": "Food", "goal_id": "1", "goal_current": 40000, "goal_target": 30000}

    assert "Food goal reached" in goal_reached_handler(event, crossing)["alert"]
    assert goal_reached_handler(event, already) == {}


def test_check_balance_handler():
    event = Event(BALANCE_CHECK, datetime.now().isoformat(), {})
    low = check_balance_handler(event, {"balance": 2000})
    assert low["alert"] == "Below ₦2,500 minimum"
    ok = check_balance_handler(event, {"balance": 2500})
    assert ok == {"status": "Monthly fee: ₦100 (Active)"}
