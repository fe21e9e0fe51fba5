#!/usr/bin/env python3
"""
Tracking session: the per-camera frame loop around the tracker.

The tracker is a function of (detections, previous tracks). A session is
the caller that owns the previous-track list, feeds each frame through the
detection filter and the tracker, and reports lifecycle changes as events.
One session per camera stream; calls must be made in frame order from a
single thread.
"""

import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

from ..core.models import Box, RawDetection, Track, TrackPhase
from ..core.config import DEFAULT_CONFIG, SessionConfig
from ..core.events import EventBus, EventType, TrackEvent
from .detections import filter_detections
from .state_machine import StateTransition, TransitionType, diff_tracks
from .tracker import MultiObjectTracker

logger = logging.getLogger(__name__)


_EVENT_TYPES = {
    TransitionType.BORN: EventType.TRACK_BORN,
    TransitionType.CONFIRM: EventType.TRACK_CONFIRMED,
    TransitionType.COAST: EventType.TRACK_COASTING,
    TransitionType.RECOVER: EventType.TRACK_RECOVERED,
    TransitionType.RETIRE: EventType.TRACK_RETIRED,
}


@dataclass(frozen=True)
class TrackingFrame:
    """Result of one session step."""
    frame_index: int
    tracks: Tuple[Track, ...]
    transitions: Tuple[StateTransition, ...] = ()
    process_time_ms: float = 0.0

    @property
    def born_ids(self) -> List[int]:
        return [t.track_id for t in self.transitions if t.transition_type == TransitionType.BORN]

    @property
    def retired_ids(self) -> List[int]:
        return [t.track_id for t in self.transitions if t.transition_type == TransitionType.RETIRE]

    @property
    def sorted_tracks(self) -> List[Track]:
        return sorted(self.tracks, key=lambda t: t.id)

    def to_dict(self) -> dict:
        return {
            "frame": self.frame_index,
            "tracks": [t.to_dict() for t in self.sorted_tracks],
            "born": self.born_ids,
            "retired": self.retired_ids,
            "process_time_ms": self.process_time_ms,
        }


class TrackingSession:
    """
    Stateful wrapper that threads track lists between frames.

    Features:
    - Accepts filtered Boxes or raw detector output
    - Emits lifecycle events on an optional EventBus
    - Reset for a new capture session (camera restart)
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        event_bus: Optional[EventBus] = None
    ):
        """
        Initialize session.

        Args:
            config: Session configuration
            event_bus: Optional event bus for lifecycle events
        """
        self.config = config or DEFAULT_CONFIG
        self.event_bus = event_bus
        self.tracker = MultiObjectTracker(self.config.tracker)

        self._tracks: List[Track] = []
        self._frame_index = 0

        # Statistics
        self._retired_count = 0
        self._total_process_ms = 0.0

    @property
    def tracks(self) -> List[Track]:
        """Current track list, sorted by id."""
        return sorted(self._tracks, key=lambda t: t.id)

    @property
    def frame_index(self) -> int:
        """Number of frames processed since the last reset."""
        return self._frame_index

    def _to_boxes(self, detections: Sequence[Union[Box, RawDetection]]) -> List[Box]:
        raw = [d for d in detections if isinstance(d, RawDetection)]
        if not raw:
            return list(detections)
        if len(raw) != len(detections):
            raise TypeError("Detections must be all Box or all RawDetection, not a mix")
        return filter_detections(raw, self.config.detections, self.config.scale)

    def step(self, detections: Sequence[Union[Box, RawDetection]]) -> TrackingFrame:
        """
        Process one frame of detections.

        Args:
            detections: Boxes in frame coordinates, or raw detector output
                (filtered and rescaled with the session config)

        Returns:
            TrackingFrame with the new tracks and their transitions
        """
        start = time.perf_counter()
        self._frame_index += 1

        boxes = self._to_boxes(detections)
        previous = self._tracks
        self._tracks = self.tracker.update(boxes, previous)

        transitions = diff_tracks(previous, self._tracks, self._frame_index)
        elapsed_ms = (time.perf_counter() - start) * 1000
        self._total_process_ms += elapsed_ms

        frame = TrackingFrame(
            frame_index=self._frame_index,
            tracks=tuple(self._tracks),
            transitions=tuple(transitions),
            process_time_ms=elapsed_ms,
        )
        self._retired_count += len(frame.retired_ids)

        if self.event_bus:
            self._emit_transitions(transitions, previous)

        return frame

    def _emit_transitions(
        self,
        transitions: Sequence[StateTransition],
        previous: Sequence[Track]
    ) -> None:
        by_id: Dict[int, Track] = {t.id: t for t in previous}
        by_id.update({t.id: t for t in self._tracks})

        for transition in transitions:
            track = by_id[transition.track_id]
            self.event_bus.emit(TrackEvent(
                type=_EVENT_TYPES[transition.transition_type],
                frame=transition.frame_index,
                camera=self.config.camera_name,
                track_id=track.id,
                box=track.box,
                reason=transition.reason,
            ))

    def reset(self) -> None:
        """Drop all tracks and restart ids (e.g., camera restarted)."""
        dropped = len(self._tracks)
        self._tracks = []
        self._frame_index = 0
        self._retired_count = 0
        self._total_process_ms = 0.0
        self.tracker.reset()
        logger.info(f"Session {self.config.camera_name} reset, dropped {dropped} tracks")

        if self.event_bus:
            self.event_bus.emit(TrackEvent(
                type=EventType.SESSION_RESET,
                frame=0,
                camera=self.config.camera_name,
                reason=f"Dropped {dropped} tracks",
            ))

    def get_statistics(self) -> dict:
        """Get session statistics."""
        phases = [t.phase for t in self._tracks]
        frames = self._frame_index

        return {
            "frames_processed": frames,
            "total_tracks_created": self.tracker.next_id - 1,
            "current_tracks": len(self._tracks),
            "tentative_tracks": phases.count(TrackPhase.TENTATIVE),
            "confirmed_tracks": phases.count(TrackPhase.CONFIRMED),
            "coasting_tracks": phases.count(TrackPhase.COASTING),
            "retired_tracks": self._retired_count,
            "avg_process_ms": self._total_process_ms / frames if frames else 0.0,
        }
