#!/usr/bin/env python3
"""
Detector output → tracker input.

The tracker does no class or confidence interpretation; this is where raw
detector results are narrowed down to the boxes worth tracking.
"""

import logging
from typing import Iterable, List, Tuple

from ..core.models import Box, RawDetection
from ..core.config import DetectionFilterConfig
from .geometry import scale_box

logger = logging.getLogger(__name__)


def filter_detections(
    detections: Iterable[RawDetection],
    config: DetectionFilterConfig = DetectionFilterConfig(),
    scale: Tuple[float, float] = (1.0, 1.0)
) -> List[Box]:
    """
    Keep the detections worth tracking and return their boxes.

    Args:
        detections: Raw detector output, in detector order
        config: Label, score, area and count limits
        scale: (sx, sy) applied to every kept box

    Returns:
        At most `config.max_detections` boxes, in detector order
    """
    labels = set(config.labels)
    kept: List[Box] = []
    dropped = 0

    for det in detections:
        if labels and det.label not in labels:
            dropped += 1
            continue
        if det.score <= config.min_score:
            dropped += 1
            continue
        if det.area < config.min_box_area:
            dropped += 1
            continue
        kept.append(det.box)

    if len(kept) > config.max_detections:
        dropped += len(kept) - config.max_detections
        kept = kept[:config.max_detections]

    if dropped:
        logger.debug(f"Dropped {dropped} detections, kept {len(kept)}")

    sx, sy = scale
    if (sx, sy) != (1.0, 1.0):
        kept = [scale_box(box, sx, sy) for box in kept]

    return kept
