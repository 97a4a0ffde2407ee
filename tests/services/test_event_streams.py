from __future__ import annotations

from openmarket.services.feed import EventStream


def test_values_fan_out_in_subscription_order() -> None:
    stream: EventStream[int] = EventStream("numbers")
    seen: list[tuple[str, int]] = []

    stream.subscribe(lambda value: seen.append(("first", value)))
    stream.subscribe(lambda value: seen.append(("second", value)))
    stream.emit(1)

    assert seen == [("first", 1), ("second", 1)]
    assert stream.subscriber_count == 2


def test_late_subscriber_gets_no_replay() -> None:
    stream: EventStream[str] = EventStream("messages")
    stream.emit("missed")

    seen: list[str] = []
    stream.subscribe(seen.append)
    stream.emit("delivered")

    assert seen == ["delivered"]


def test_cancelled_subscription_stops_receiving() -> None:
    stream: EventStream[int] = EventStream("numbers")
    seen: list[int] = []
    subscription = stream.subscribe(seen.append)

    stream.emit(1)
    subscription.cancel()
    subscription.cancel()
    stream.emit(2)

    assert seen == [1]
    assert not subscription.active
    assert stream.subscriber_count == 0


def test_raising_subscriber_is_isolated() -> None:
    stream: EventStream[int] = EventStream("numbers")
    seen: list[int] = []

    def broken(_value: int) -> None:
        raise ValueError("boom")

    stream.subscribe(broken)
    stream.subscribe(seen.append)
    stream.emit(7)

    assert seen == [7]


def test_subscribing_during_emit_waits_for_next_value() -> None:
    stream: EventStream[int] = EventStream("numbers")
    late: list[int] = []
    added: list[bool] = []

    def subscribe_another(_value: int) -> None:
        if not added:
            added.append(True)
            stream.subscribe(late.append)

    stream.subscribe(subscribe_another)
    stream.emit(1)
    assert late == []

    stream.emit(2)
    assert late == [2]
