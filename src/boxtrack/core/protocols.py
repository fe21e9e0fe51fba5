#!/usr/bin/env python3
"""
Protocol definitions for swappable components.

Using Python's Protocol for structural subtyping.
Any detector or tracker implementing these methods can be plugged in
without inheriting from anything in this package.
"""

from typing import Any, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from .models import Box, RawDetection, Track
from .config import DetectionFilterConfig


# =============================================================================
# DETECTOR PROTOCOL
# =============================================================================

@runtime_checkable
class Detector(Protocol):
    """Interface for an external object detector."""

    def detect(self, frame: Any) -> Sequence[RawDetection]:
        """
        Detect objects in a frame.

        Args:
            frame: Image in whatever form the detector accepts

        Returns:
            Detections in the detector's own order, unfiltered
        """
        ...


# =============================================================================
# TRACKER PROTOCOL
# =============================================================================

@runtime_checkable
class Tracker(Protocol):
    """Interface for a frame-to-frame box tracker."""

    def update(self, detections: Sequence[Box], previous_tracks: Sequence[Track]) -> List[Track]:
        """
        Produce this frame's tracks from its detections and last frame's tracks.
        """
        ...

    def reset(self) -> None:
        """Restart id generation."""
        ...


# =============================================================================
# ADAPTERS
# =============================================================================

class DetectorAdapter:
    """Wraps a Detector so each call yields tracker-ready boxes."""

    def __init__(
        self,
        detector: Detector,
        config: Optional[DetectionFilterConfig] = None,
        scale: Tuple[float, float] = (1.0, 1.0)
    ):
        """
        Args:
            detector: Any object with detect(frame) -> Sequence[RawDetection]
            config: Filter applied to the detector's output
            scale: (sx, sy) from detector coordinates to frame coordinates
        """
        self._detector = detector
        self.config = config or DetectionFilterConfig()
        self.scale = scale

    def detect(self, frame: Any) -> List[Box]:
        from ..tracking.detections import filter_detections
        return filter_detections(self._detector.detect(frame), self.config, self.scale)
