"""Tests for the in-process event bus.

Covers per-listener ordering, independence of listeners, error isolation
and listener lifecycle.
"""

import asyncio

from build_notifier.events import EventBus


def test_emit_without_listeners():
    async def scenario():
        bus = EventBus()
        return bus.emit("build_status", {"status": "SUCCESS"})

    assert asyncio.run(scenario()) == 0


def test_listener_receives_payloads_in_order():
    received = []

    async def handler(payload):
        # Yield to the loop so interleaving would show up if it were possible
        await asyncio.sleep(0)
        received.append(payload)

    async def scenario():
        bus = EventBus()
        bus.on("build_status", handler)
        for i in range(5):
            bus.emit("build_status", i)
        await bus.join()
        await bus.close()

    asyncio.run(scenario())

    assert received == [0, 1, 2, 3, 4]


def test_one_event_finishes_before_the_next_starts():
    log = []

    async def handler(payload):
        log.append(f"start {payload}")
        await asyncio.sleep(0.01)
        log.append(f"end {payload}")

    async def scenario():
        bus = EventBus()
        bus.on("build_status", handler)
        bus.emit("build_status", "a")
        bus.emit("build_status", "b")
        await bus.join()
        await bus.close()

    asyncio.run(scenario())

    assert log == ["start a", "end a", "start b", "end b"]


def test_sync_handlers_are_supported():
    received = []

    async def scenario():
        bus = EventBus()
        bus.on("build_status", received.append)
        bus.emit("build_status", "payload")
        await bus.join()
        await bus.close()

    asyncio.run(scenario())

    assert received == ["payload"]


def test_every_listener_gets_each_event():
    first, second = [], []

    async def scenario():
        bus = EventBus()
        bus.on("build_status", first.append)
        bus.on("build_status", second.append)
        bus.on("other_event", lambda payload: first.append("wrong"))
        delivered = bus.emit("build_status", 1)
        await bus.join()
        await bus.close()
        return delivered

    assert asyncio.run(scenario()) == 2
    assert first == [1]
    assert second == [1]


def test_handler_error_does_not_stop_listener():
    received = []

    def handler(payload):
        if payload == "bad":
            raise ValueError("bad payload")
        received.append(payload)

    async def scenario():
        bus = EventBus()
        bus.on("build_status", handler)
        bus.emit("build_status", "bad")
        bus.emit("build_status", "good")
        await bus.join()
        await bus.close()

    asyncio.run(scenario())

    assert received == ["good"]


def test_off_drains_queued_deliveries():
    received = []

    async def scenario():
        bus = EventBus()
        bus.on("build_status", received.append)
        bus.emit("build_status", 1)
        bus.emit("build_status", 2)
        removed = bus.off("build_status", received.append)
        bus.emit("build_status", 3)
        await bus.join()
        await bus.close()
        return removed

    assert asyncio.run(scenario()) is True
    assert received == [1, 2]


def test_off_unknown_handler():
    bus = EventBus()

    assert bus.off("build_status", print) is False


def test_off_stops_new_deliveries():
    async def scenario():
        bus = EventBus()
        bus.on("build_status", print)
        bus.on("build_status", repr)
        bus.off("build_status", print)
        delivered = bus.emit("build_status", "payload")
        await bus.join()
        await bus.close()
        return delivered

    assert asyncio.run(scenario()) == 1
