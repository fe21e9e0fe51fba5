#!/usr/bin/env python3
"""
Track lifecycle events.

The tracker itself never emits anything; a TrackingSession turns the
per-frame state transitions into TrackEvents and publishes them on an
EventBus so consumers (rendering, logging, alerting) can react without
polling the track list. Dispatch is synchronous, in frame order.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Deque, Dict, List, Optional

from .models import Box

logger = logging.getLogger(__name__)


class EventType(Enum):
    """All event types emitted by a tracking session."""
    TRACK_BORN = auto()        # Unmatched detection started a new track
    TRACK_CONFIRMED = auto()   # Tentative track matched again
    TRACK_COASTING = auto()    # Track missed its first frame
    TRACK_RECOVERED = auto()   # Coasting track matched again
    TRACK_RETIRED = auto()     # Track exceeded the miss ceiling
    SESSION_RESET = auto()     # Id counter and track state cleared


@dataclass(frozen=True)
class TrackEvent:
    """
    One lifecycle change of one track.

    `track_id` and `box` are None only for SESSION_RESET. For retirements
    `box` is the last box the track had.
    """
    type: EventType
    frame: int
    camera: str = "default"
    track_id: Optional[int] = None
    box: Optional[Box] = None
    reason: str = ""
    timestamp: float = field(default_factory=time.time)

    @property
    def label(self) -> str:
        return f"{self.track_id:04d}" if self.track_id is not None else "----"


EventHandler = Callable[[TrackEvent], None]


class EventBus:
    """
    Fan-out of TrackEvents to subscribed handlers.

    A handler that raises is logged and skipped; the remaining handlers
    and the frame loop keep running.
    """

    def __init__(self, history_size: int = 100):
        # None key holds handlers subscribed to every event type
        self._handlers: Dict[Optional[EventType], List[EventHandler]] = {}
        self._history: Deque[TrackEvent] = deque(maxlen=history_size)

    def subscribe(self, event_type: Optional[EventType], handler: EventHandler) -> None:
        """Call `handler` for `event_type`, or for every event when None."""
        self._handlers.setdefault(event_type, []).append(handler)

    def emit(self, event: TrackEvent) -> None:
        self._history.append(event)

        for handler in self._handlers.get(None, []) + self._handlers.get(event.type, []):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Event handler error for {event.type.name} on track {event.label}: {e}")

    def recent(self, event_type: Optional[EventType] = None) -> List[TrackEvent]:
        """Events still in history, newest first, optionally of one type."""
        return [e for e in reversed(self._history) if event_type is None or e.type == event_type]


class EventLogger:
    """Handler that logs every event it receives."""

    def __init__(self, log_level: int = logging.INFO):
        self.log_level = log_level
        self._logger = logging.getLogger("boxtrack.events")

    def __call__(self, event: TrackEvent) -> None:
        self._logger.log(
            self.log_level,
            f"[{event.type.name}] {event.camera} frame {event.frame} track {event.label}: {event.reason}"
        )
