from finsync.events import Event, EventBus, SUMMARY_CHANGED, STATE_CHANGED


def test_event_bus_subscribe_and_publish():
    bus = EventBus()
    seen = []

    def handler(event: Event):
        seen.append(event.payload)
        return {"processed": True}

    bus.subscribe(SUMMARY_CHANGED, handler)
    results = bus.publish(SUMMARY_CHANGED, {"balance": 600})

    assert results == [{"processed": True}]
    assert seen == [{"balance": 600}]


def test_publish_without_subscribers():
    assert EventBus().publish(STATE_CHANGED, None) == []


def test_unsubscribe_handle():
    bus = EventBus()
    seen = []
    stop = bus.subscribe(SUMMARY_CHANGED, lambda e: seen.append(e.name))
    bus.publish(SUMMARY_CHANGED)
    stop()
    bus.publish(SUMMARY_CHANGED)
    assert seen == [SUMMARY_CHANGED]


def test_failing_handler_does_not_stop_others():
    bus = EventBus()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe(SUMMARY_CHANGED, broken)
    bus.subscribe(SUMMARY_CHANGED, lambda e: seen.append(e.payload))
    bus.publish(SUMMARY_CHANGED, 1)
    assert seen == [1]
