#!/usr/bin/env python3
"""
boxtrack - identity-persistent tracking of per-frame bounding boxes.

Feed each frame's detector boxes to MultiObjectTracker.update together
with the previous frame's tracks; keep the returned list for the next call.
"""

from .core.models import Box, RawDetection, Track, TrackPhase
from .core.config import TrackerConfig, DetectionFilterConfig, SessionConfig
from .tracking.tracker import MultiObjectTracker
from .tracking.session import TrackingSession, TrackingFrame

__version__ = "0.1.0"

__all__ = [
    "Box",
    "RawDetection",
    "Track",
    "TrackPhase",
    "TrackerConfig",
    "DetectionFilterConfig",
    "SessionConfig",
    "MultiObjectTracker",
    "TrackingSession",
    "TrackingFrame",
]
