#!/usr/bin/env python3
"""
Box geometry helpers: overlap, scaling and padded regions.

All functions are pure and work on (x, y, w, h) boxes.
"""

from typing import Sequence

import numpy as np

from ..core.models import Box


def intersection_over_union(a: Box, b: Box) -> float:
    """
    Standard axis-aligned IoU in [0, 1].

    Boxes with non-positive width or height contribute zero area, so any
    comparison involving one resolves to 0 instead of failing.
    """
    x1 = max(a.x, b.x)
    y1 = max(a.y, b.y)
    x2 = min(a.x + a.w, b.x + b.w)
    y2 = min(a.y + a.h, b.y + b.h)

    intersection = max(0.0, x2 - x1) * max(0.0, y2 - y1)
    if a.area == 0 or b.area == 0:
        intersection = 0.0
    union = a.area + b.area - intersection

    return intersection / union if union > 0 else 0.0


def iou_matrix(detections: Sequence[Box], boxes: Sequence[Box]) -> np.ndarray:
    """
    Compute IoU matrix between detections and boxes.

    Returns:
        Array of shape (len(detections), len(boxes))
    """
    matrix = np.zeros((len(detections), len(boxes)))

    for i, det in enumerate(detections):
        for j, box in enumerate(boxes):
            matrix[i, j] = intersection_over_union(det, box)

    return matrix


def scale_box(box: Box, sx: float, sy: float) -> Box:
    """Rescale a box, e.g. from a downsampled detector input to full frame."""
    return Box(box.x * sx, box.y * sy, box.w * sx, box.h * sy)


def expand_box(box: Box, pad: float, frame_width: float, frame_height: float) -> Box:
    """
    Grow a box by `pad` on every side, clipped to the frame.

    Used to cut a region of interest around a track for downstream models
    (segmentation, pose) that want some context around the object.
    """
    x = max(0.0, box.x - pad)
    y = max(0.0, box.y - pad)
    w = max(0.0, min(frame_width - x, box.w + pad * 2))
    h = max(0.0, min(frame_height - y, box.h + pad * 2))
    return Box(x, y, w, h)
