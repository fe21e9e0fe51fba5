#!/usr/bin/env python3
"""
Tracking configuration with validation.

All configs are frozen dataclasses for immutability.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Optional, Tuple


# Accepted spellings for tracker options in dict/YAML input
_TRACKER_ALIASES = {
    "iouThreshold": "iou_threshold",
    "maxMisses": "max_misses",
    "posSmoothing": "pos_smoothing",
    "sizeSmoothing": "size_smoothing",
    "predictionDilation": "prediction_dilation",
}

_FILTER_ALIASES = {
    "minScore": "min_score",
    "maxDetections": "max_detections",
    "minBoxArea": "min_box_area",
}


def _normalize_keys(data: Dict[str, Any], aliases: Dict[str, str]) -> Dict[str, Any]:
    return {aliases.get(key, key): value for key, value in data.items()}


# =============================================================================
# COMPONENT CONFIGS
# =============================================================================

@dataclass(frozen=True)
class TrackerConfig:
    """Multi-object tracker tunables."""
    # Matching
    iou_threshold: float = 0.2         # Min IoU between prediction and detection

    # Lifecycle
    max_misses: int = 10               # Consecutive misses before a track is dropped

    # Smoothing (higher = follow detections more)
    pos_smoothing: float = 0.6
    size_smoothing: float = 0.6

    # Prediction
    prediction_dilation: float = 1.05  # Inflate predicted box to absorb jitter

    def __post_init__(self):
        if not 0 <= self.iou_threshold <= 1:
            raise ValueError(f"iou_threshold must be 0-1, got {self.iou_threshold}")
        if self.max_misses < 0:
            raise ValueError(f"max_misses must be >= 0, got {self.max_misses}")
        if not 0 < self.pos_smoothing < 1:
            raise ValueError(f"pos_smoothing must be in (0, 1), got {self.pos_smoothing}")
        if not 0 < self.size_smoothing < 1:
            raise ValueError(f"size_smoothing must be in (0, 1), got {self.size_smoothing}")
        if self.prediction_dilation <= 1.0:
            raise ValueError(
                f"prediction_dilation must be > 1.0, got {self.prediction_dilation}"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrackerConfig":
        """Create from a dict using snake_case or camelCase option names."""
        return cls(**_normalize_keys(data, _TRACKER_ALIASES))


@dataclass(frozen=True)
class DetectionFilterConfig:
    """Which detector outputs are handed to the tracker."""
    labels: Tuple[str, ...] = ("person",)  # Empty = accept every label
    min_score: float = 0.5        # Detections must score strictly above this
    max_detections: int = 5       # Max boxes per frame, in detector order
    min_box_area: float = 0.0     # Min box area in detector units

    def __post_init__(self):
        if not 0 <= self.min_score <= 1:
            raise ValueError(f"min_score must be 0-1, got {self.min_score}")
        if self.max_detections < 1:
            raise ValueError(f"max_detections must be >= 1, got {self.max_detections}")
        if self.min_box_area < 0:
            raise ValueError(f"min_box_area must be >= 0, got {self.min_box_area}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DetectionFilterConfig":
        data = _normalize_keys(data, _FILTER_ALIASES)
        if "labels" in data:
            labels = data["labels"]
            data["labels"] = (labels,) if isinstance(labels, str) else tuple(labels)
        return cls(**data)


# =============================================================================
# SESSION CONFIG
# =============================================================================

@dataclass(frozen=True)
class SessionConfig:
    """Complete tracking session configuration."""
    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    detections: DetectionFilterConfig = field(default_factory=DetectionFilterConfig)

    camera_name: str = "default"

    # Detector input size vs. frame size; boxes are rescaled when both are set
    source_size: Optional[Tuple[int, int]] = None
    frame_size: Optional[Tuple[int, int]] = None

    def __post_init__(self):
        for name in ("source_size", "frame_size"):
            size = getattr(self, name)
            if size is not None and (len(size) != 2 or min(size) <= 0):
                raise ValueError(f"{name} must be (width, height) > 0, got {size}")

    @property
    def scale(self) -> Tuple[float, float]:
        """(sx, sy) multiplier from detector coordinates to frame coordinates."""
        if self.source_size is None or self.frame_size is None:
            return (1.0, 1.0)
        return (
            self.frame_size[0] / self.source_size[0],
            self.frame_size[1] / self.source_size[1],
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionConfig":
        """Create config from dictionary (e.g., YAML file)."""
        source_size = data.get("source_size", data.get("sourceSize"))
        frame_size = data.get("frame_size", data.get("frameSize"))
        return cls(
            tracker=TrackerConfig.from_dict(data.get("tracker", {})),
            detections=DetectionFilterConfig.from_dict(data.get("detections", {})),
            camera_name=data.get("camera_name", data.get("cameraName", "default")),
            source_size=tuple(source_size) if source_size else None,
            frame_size=tuple(frame_size) if frame_size else None,
        )

    @classmethod
    def from_yaml(cls, path: str) -> "SessionConfig":
        """Load config from YAML file."""
        import yaml
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config not found: {config_path.resolve()}")
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "tracker": {
                "iou_threshold": self.tracker.iou_threshold,
                "max_misses": self.tracker.max_misses,
                "pos_smoothing": self.tracker.pos_smoothing,
                "size_smoothing": self.tracker.size_smoothing,
                "prediction_dilation": self.tracker.prediction_dilation,
            },
            "detections": {
                "labels": list(self.detections.labels),
                "min_score": self.detections.min_score,
                "max_detections": self.detections.max_detections,
                "min_box_area": self.detections.min_box_area,
            },
            "camera_name": self.camera_name,
            "source_size": list(self.source_size) if self.source_size else None,
            "frame_size": list(self.frame_size) if self.frame_size else None,
        }


# =============================================================================
# DEFAULT CONFIGS
# =============================================================================

DEFAULT_CONFIG = SessionConfig()

# Keeps ids through long occlusions at the cost of more stale boxes
STICKY_CONFIG = SessionConfig(
    tracker=TrackerConfig(iou_threshold=0.1, max_misses=30, prediction_dilation=1.15),
)

# Crowded scenes: demand real overlap, drop missing tracks quickly
STRICT_CONFIG = SessionConfig(
    tracker=TrackerConfig(iou_threshold=0.4, max_misses=3, pos_smoothing=0.8),
    detections=DetectionFilterConfig(min_score=0.6, max_detections=20),
)


# =============================================================================
# TEST
# =============================================================================

if __name__ == "__main__":
    print("Testing configuration...")

    config = SessionConfig()
    print(f"Default config created: {config.camera_name}")

    try:
        TrackerConfig(pos_smoothing=1.5)
        print("ERROR: Should have raised ValueError")
    except ValueError as e:
        print(f"Validation works: {e}")

    data = {
        "camera_name": "webcam",
        "tracker": {"iouThreshold": 0.3, "maxMisses": 5},
        "source_size": [320, 240],
        "frame_size": [640, 480],
    }
    config2 = SessionConfig.from_dict(data)
    print(f"From dict: {config2.camera_name}, iou={config2.tracker.iou_threshold}, scale={config2.scale}")

    d = config.to_dict()
    print(f"To dict keys: {list(d.keys())}")

    print("\nConfiguration module OK!")
