from typing import Type, Callable, List, Dict, Any
from hevcify.domain.events import Event

class EventBus:
    """A simple synchronous event bus for decoupled communication.

    Subscribers registered for a base event class also receive its subclasses.
    """

    def __init__(self):
        self._subscribers: Dict[Type[Event], List[Callable[[Any], None]]] = {}

    def subscribe(self, event_type: Type[Event], callback: Callable[[Any], None]):
        self._subscribers.setdefault(event_type, []).append(callback)

    def unsubscribe(self, event_type: Type[Event], callback: Callable[[Any], None]):
        callbacks = self._subscribers.get(event_type, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def publish(self, event: Event):
        for event_type in type(event).__mro__:
            for callback in list(self._subscribers.get(event_type, ())):
                callback(event)
