from pathlib import Path
from toav1.infrastructure.event_bus import EventBus
from toav1.domain.events import Event, JobEvent, JobStarted, MoveFailed
from toav1.domain.models import TranscodeJob

class MockEvent(Event):
    message: str

def _job() -> TranscodeJob:
    return TranscodeJob(
        source_path=Path("/in/a.mp4"),
        temp_path=Path("/tmp/a [AV1 10bit].mkv"),
        output_path=Path("/out/a [AV1 10bit].mkv"),
        archive_path=Path("/done/a.mp4"),
        display_height=-1,
    )

def test_event_bus_subscribe_publish():
    bus = EventBus()
    received_events = []

    bus.subscribe(MockEvent, received_events.append)
    bus.publish(MockEvent(message="hello"))

    assert len(received_events) == 1
    assert received_events[0].message == "hello"

def test_event_bus_decorator_subscribe():
    bus = EventBus()
    received = []

    @bus.subscribe(MockEvent)
    def on_event(event: MockEvent):
        received.append(event)

    bus.publish(MockEvent(message="decorator"))
    assert [e.message for e in received] == ["decorator"]

def test_event_bus_base_class_receives_subclasses():
    bus = EventBus()
    received = []
    bus.subscribe(JobEvent, lambda e: received.append(type(e).__name__))

    job = _job()
    bus.publish(JobStarted(job=job))
    bus.publish(MoveFailed(job=job, stage="output", error_message="denied"))
    bus.publish(MockEvent(message="unrelated"))

    assert received == ["JobStarted", "MoveFailed"]

def test_event_bus_calls_in_subscription_order():
    bus = EventBus()
    order = []
    bus.subscribe(MockEvent, lambda e: order.append("a"))
    bus.subscribe(MockEvent, lambda e: order.append("b"))

    bus.publish(MockEvent(message="test"))

    assert order == ["a", "b"]
