"""
Abstract combat notifications.

The core reports what happened (an attack landed, a piece was knocked
back, a charge crossed some tiles) without knowing who listens. Renderers,
audio and telemetry subscribe to the bus; nothing in the core depends on
them existing.

    bus = CombatEventBus()
    bus.subscribe("attack", on_attack)
    ...
    bus.drain()        # delivers queued events in FIFO order
"""

from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, List, Literal, Optional, Protocol

from settings import EVENT_HISTORY_SIZE
from engine.error_handler import log_error


EventKind = Literal[
    "attack", "bump", "knockback", "defeat", "combo",
    "charge", "horse_charge", "move", "pitfall", "blocked",
]

# Subscribing to this kind receives every event.
ALL_EVENTS = "*"


@dataclass
class CombatEvent:
    """Something happened at (x, y). ``data`` carries kind-specific details."""
    kind: EventKind
    actor_id: Optional[str] = None
    x: Optional[int] = None
    y: Optional[int] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        # Event fields win over same-named keys in data
        return {
            **self.data,
            "kind": self.kind,
            "actor_id": self.actor_id,
            "x": self.x,
            "y": self.y,
        }


class EventSink(Protocol):
    """Anything that accepts combat notifications."""

    def emit(self, event: CombatEvent) -> None:
        ...


class NullEventSink:
    """Sink that drops everything."""

    def emit(self, event: CombatEvent) -> None:
        return None


class CombatEventBus:
    """
    Queue-and-drain event bus with a bounded history.

    emit() only appends; handlers run on drain(). A failing handler is
    logged and does not stop delivery to the others.
    """

    def __init__(self, history_size: int = EVENT_HISTORY_SIZE) -> None:
        self._queue: List[CombatEvent] = []
        self._subs: Dict[str, List[Callable[[CombatEvent], None]]] = defaultdict(list)
        self.history: Deque[CombatEvent] = deque(maxlen=history_size)

    def emit(self, event: CombatEvent) -> None:
        """Queue an event for the next drain()."""
        self._queue.append(event)
        self.history.append(event)

    def subscribe(self, kind: str, handler: Callable[[CombatEvent], None]) -> None:
        """Register handler for one event kind, or ALL_EVENTS for every kind."""
        self._subs[kind].append(handler)

    def drain(self) -> int:
        """
        Deliver every queued event. Returns how many were processed.

        Events emitted by handlers are delivered in the same pass.
        """
        processed = 0
        while self._queue:
            batch = self._queue[:]
            self._queue.clear()
            for event in batch:
                for handler in self._subs.get(event.kind, []) + self._subs.get(ALL_EVENTS, []):
                    try:
                        handler(event)
                    except Exception as exc:
                        log_error(exc, f"event handler for {event.kind}")
            processed += len(batch)
        return processed

    def pending_count(self) -> int:
        return len(self._queue)

    def kinds(self) -> List[str]:
        """Kinds of every event in history, oldest first."""
        return [e.kind for e in self.history]

    def clear(self) -> None:
        """Discard pending events and history."""
        self._queue.clear()
        self.history.clear()

    def __repr__(self) -> str:
        return f"CombatEventBus(pending={len(self._queue)}, subs={len(self._subs)})"
