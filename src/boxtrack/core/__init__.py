#!/usr/bin/env python3
"""
Core module for boxtrack.

Contains data models, protocols, configuration, and events.
"""

from .models import (
    Box,
    RawDetection,
    TrackPhase,
    Track,
)

from .protocols import (
    Detector,
    Tracker,
    DetectorAdapter,
)

from .config import (
    TrackerConfig,
    DetectionFilterConfig,
    SessionConfig,
    DEFAULT_CONFIG,
    STICKY_CONFIG,
    STRICT_CONFIG,
)

from .events import (
    EventType,
    TrackEvent,
    EventBus,
    EventLogger,
)

__all__ = [
    # Models
    "Box",
    "RawDetection",
    "TrackPhase",
    "Track",
    # Protocols
    "Detector",
    "Tracker",
    "DetectorAdapter",
    # Config
    "TrackerConfig",
    "DetectionFilterConfig",
    "SessionConfig",
    "DEFAULT_CONFIG",
    "STICKY_CONFIG",
    "STRICT_CONFIG",
    # Events
    "EventType",
    "TrackEvent",
    "EventBus",
    "EventLogger",
]
