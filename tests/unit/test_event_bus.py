from pathlib import Path
from hevcify.infrastructure.event_bus import EventBus
from hevcify.domain.events import Event, FileSkipped, DiscoveryStarted


def test_publish_reaches_exact_and_base_subscribers():
    bus = EventBus()
    exact, base = [], []
    bus.subscribe(FileSkipped, exact.append)
    bus.subscribe(Event, base.append)

    event = FileSkipped(path=Path("a.txt"), reason="nope")
    bus.publish(event)
    bus.publish(DiscoveryStarted(path=Path(".")))

    assert exact == [event]
    assert len(base) == 2


def test_unsubscribe():
    bus = EventBus()
    seen = []
    bus.subscribe(FileSkipped, seen.append)
    bus.unsubscribe(FileSkipped, seen.append)
    bus.publish(FileSkipped(path=Path("a.txt"), reason="nope"))
    assert seen == []
