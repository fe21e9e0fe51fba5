#!/usr/bin/env python3
"""
Greedy IoU association of detections to predicted track boxes.

Detections are processed in input order and each one claims the best
still-unclaimed prediction. This is not an optimal bipartite matching: an
earlier detection can take the track a later detection overlaps more.
When the detector's output order is unstable between frames (e.g. sorted
by confidence), which detection wins a contested track can flip, and id
stability under contention is not guaranteed.
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..core.models import Box
from .geometry import iou_matrix


# det index -> track index, or None for "start a new track"
Assignments = List[Optional[int]]


def assign(
    predictions: Sequence[Box],
    detections: Sequence[Box],
    iou_threshold: float = 0.2
) -> Assignments:
    """
    Greedy detection-to-track assignment.

    Args:
        predictions: Predicted boxes, one per previous track
        detections: This frame's detections, in detector order
        iou_threshold: Minimum IoU for a valid match

    Returns:
        One entry per detection: the matched track index, or None
    """
    assignments: Assignments = [None] * len(detections)
    if not predictions or not detections:
        return assignments

    ious = iou_matrix(detections, predictions)
    used = np.zeros(len(predictions), dtype=bool)

    for det_idx in range(len(detections)):
        candidates = np.where(used, -1.0, ious[det_idx])
        # argmax returns the first maximum, so ties go to the lowest track index
        trk_idx = int(np.argmax(candidates))
        best = candidates[trk_idx]

        if best > 0 and best >= iou_threshold:
            assignments[det_idx] = trk_idx
            used[trk_idx] = True

    return assignments


def split_assignments(
    assignments: Assignments,
    n_tracks: int
) -> Tuple[List[Tuple[int, int]], List[int], List[int]]:
    """
    Split assignments into matches and leftovers.

    Returns:
        Tuple of:
        - matches: List of (detection_idx, track_idx) pairs
        - unmatched_detections: List of detection indices
        - unmatched_tracks: List of track indices
    """
    matches = [(d, t) for d, t in enumerate(assignments) if t is not None]
    unmatched_dets = [d for d, t in enumerate(assignments) if t is None]
    matched_trks = {t for _, t in matches}
    unmatched_trks = [t for t in range(n_tracks) if t not in matched_trks]

    return matches, unmatched_dets, unmatched_trks
