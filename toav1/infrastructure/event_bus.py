from typing import Type, Callable, List, Tuple, Any, Optional
from toav1.domain.events import Event


class EventBus:
    """Synchronous in-process event bus.

    Subscribers registered for a base event class also receive its subclasses,
    so a logger can listen to every JobEvent with a single subscription.
    Callbacks run in subscription order on the publishing thread.
    """

    def __init__(self):
        self._subscribers: List[Tuple[Type[Event], Callable[[Any], None]]] = []

    def subscribe(self, event_type: Type[Event], callback: Optional[Callable[[Any], None]] = None):
        """Subscribes a callback to an event type. Can be used as a decorator."""
        if callback is None:
            def decorator(func: Callable[[Any], None]):
                self.subscribe(event_type, func)
                return func
            return decorator

        self._subscribers.append((event_type, callback))
        return callback

    def publish(self, event: Event):
        for event_type, callback in list(self._subscribers):
            if isinstance(event, event_type):
                callback(event)
