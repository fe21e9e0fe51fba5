#!/usr/bin/env python3
"""
Core data models for the box tracker.

Everything here is an immutable (frozen) dataclass. A Track is never
updated in place: the tracker builds a fresh Track for every frame, so the
list returned by one update can be handed straight back as the input of
the next.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Tuple
from enum import Enum, auto


# =============================================================================
# BOUNDING BOXES
# =============================================================================

@dataclass(frozen=True)
class Box:
    """
    Axis-aligned box as top-left corner plus size.

    Units are whatever the detector produced (pixels or normalized), as
    long as they stay consistent between frames. A box with non-positive
    width or height has zero area.
    """
    x: float
    y: float
    w: float
    h: float

    @property
    def x2(self) -> float:
        return self.x + self.w

    @property
    def y2(self) -> float:
        return self.y + self.h

    @property
    def area(self) -> float:
        if self.w <= 0 or self.h <= 0:
            return 0.0
        return self.w * self.h

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.w / 2, self.y + self.h / 2)

    def iou(self, other: Box) -> float:
        """Intersection over Union with another box."""
        from ..tracking.geometry import intersection_over_union
        return intersection_over_union(self, other)

    def to_xywh(self) -> Tuple[float, float, float, float]:
        """Return as (x, y, width, height) tuple."""
        return (self.x, self.y, self.w, self.h)

    def to_xyxy(self) -> Tuple[float, float, float, float]:
        """Return as (x1, y1, x2, y2) tuple."""
        return (self.x, self.y, self.x2, self.y2)

    @classmethod
    def from_xyxy(cls, x1: float, y1: float, x2: float, y2: float) -> Box:
        """Create from corner format."""
        return cls(x=x1, y=y1, w=x2 - x1, h=y2 - y1)

    @classmethod
    def from_center(cls, cx: float, cy: float, w: float, h: float) -> Box:
        """Create from center point and size."""
        return cls(x=cx - w / 2, y=cy - h / 2, w=w, h=h)


# =============================================================================
# DETECTIONS
# =============================================================================

@dataclass(frozen=True)
class RawDetection:
    """Single detector output before class/confidence filtering."""
    box: Box
    score: float = 1.0   # 0.0 to 1.0
    label: str = "person"

    @property
    def area(self) -> float:
        return self.box.area


# =============================================================================
# TRACKS
# =============================================================================

class TrackPhase(Enum):
    """
    Lifecycle phase of a track.

    Derived from age/missed, never stored on the Track itself.
    """
    TENTATIVE = auto()   # Just born (age 0)
    CONFIRMED = auto()   # Matched at least once, not missing
    COASTING = auto()    # Missed for one or more frames, still alive
    RETIRED = auto()     # Dropped from the track set


@dataclass(frozen=True)
class Track:
    """
    One tracked object at one frame.

    `id` is assigned at birth and never changes. `vx`/`vy` are the last
    observed per-frame displacement and only feed the next prediction.
    """
    id: int
    x: float
    y: float
    w: float
    h: float
    vx: float = 0.0
    vy: float = 0.0
    age: int = 0       # Frames survived since birth
    missed: int = 0    # Consecutive frames without a matching detection

    @property
    def box(self) -> Box:
        return Box(self.x, self.y, self.w, self.h)

    @property
    def center(self) -> Tuple[float, float]:
        return self.box.center

    @property
    def label(self) -> str:
        """Display label, e.g. '0007'."""
        return f"{self.id:04d}"

    @property
    def phase(self) -> TrackPhase:
        if self.missed > 0:
            return TrackPhase.COASTING
        if self.age == 0:
            return TrackPhase.TENTATIVE
        return TrackPhase.CONFIRMED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "label": self.label,
            "x": self.x,
            "y": self.y,
            "w": self.w,
            "h": self.h,
            "vx": self.vx,
            "vy": self.vy,
            "age": self.age,
            "missed": self.missed,
            "phase": self.phase.name.lower(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Track:
        """Rebuild a track from `to_dict` output (derived keys ignored)."""
        return cls(
            id=int(data["id"]),
            x=float(data["x"]),
            y=float(data["y"]),
            w=float(data["w"]),
            h=float(data["h"]),
            vx=float(data.get("vx", 0.0)),
            vy=float(data.get("vy", 0.0)),
            age=int(data.get("age", 0)),
            missed=int(data.get("missed", 0)),
        )


# =============================================================================
# TEST
# =============================================================================

if __name__ == "__main__":
    print("Testing core models...")

    box1 = Box(0, 0, 100, 100)
    box2 = Box(50, 50, 100, 100)
    print(f"Box1: {box1}, area={box1.area}, center={box1.center}")
    print(f"Box2: {box2}, area={box2.area}, center={box2.center}")
    print(f"IoU: {box1.iou(box2):.3f}")

    track = Track(id=7, x=0, y=0, w=100, h=100)
    print(f"Track: {track.label}, phase={track.phase.name}")
    print(f"Round trip: {Track.from_dict(track.to_dict()) == track}")

    print("\nAll models work correctly!")
