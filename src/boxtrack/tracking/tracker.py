#!/usr/bin/env python3
"""
Multi-Object Tracker with IoU-based matching.

Each update runs four steps over the previous frame's tracks:
- Constant-velocity prediction of every previous track
- Greedy IoU assignment of detections to predictions
- Exponential-moving-average update of matched tracks
- Birth of tracks for unmatched detections, aging and retirement of
  unmatched tracks

The tracker keeps no track state of its own. The caller passes the
previous track list in and stores the returned list for the next frame;
the only internal state is the id counter.
"""

import itertools
import logging
from typing import List, Optional, Sequence

from ..core.models import Box, Track
from ..core.config import TrackerConfig
from .association import assign, split_assignments
from .prediction import predict, project

logger = logging.getLogger(__name__)


class MultiObjectTracker:
    """
    Greedy IoU tracker with smoothed constant-velocity state.

    Coordinates are never validated: boxes with NaN or infinite values
    must be filtered by the caller, otherwise they propagate into the
    track they match or spawn.
    """

    def __init__(self, config: Optional[TrackerConfig] = None, first_id: int = 1):
        """
        Initialize tracker.

        Args:
            config: Tracker configuration
            first_id: First id handed out, and the value reset() restores
        """
        self.config = config or TrackerConfig()
        self._first_id = first_id
        self._ids = itertools.count(first_id)
        self._next_id = first_id

    @property
    def next_id(self) -> int:
        """Id the next born track will receive."""
        return self._next_id

    def _generate_track_id(self) -> int:
        track_id = next(self._ids)
        self._next_id = track_id + 1
        return track_id

    def update(
        self,
        detections: Sequence[Box],
        previous_tracks: Sequence[Track] = ()
    ) -> List[Track]:
        """
        Advance the track set by one frame.

        Args:
            detections: This frame's boxes, already filtered by the caller
            previous_tracks: Track list returned by the previous call

        Returns:
            New track list: matched tracks, then births, then coasting
            tracks. Sort by id if a stable order is needed.
        """
        cfg = self.config

        # Predictions come from the previous state only
        predictions = [predict(t, cfg.prediction_dilation) for t in previous_tracks]

        assignments = assign(predictions, detections, cfg.iou_threshold)
        matches, unmatched_dets, unmatched_trks = split_assignments(
            assignments, len(previous_tracks)
        )

        updated: List[Track] = []

        for det_idx, trk_idx in matches:
            updated.append(self._update_matched(previous_tracks[trk_idx], detections[det_idx]))

        # Restored tracks may carry ids this counter has not handed out yet
        highest = max((t.id for t in previous_tracks), default=0)
        if unmatched_dets and highest >= self._next_id:
            self._ids = itertools.count(highest + 1)
            self._next_id = highest + 1

        for det_idx in unmatched_dets:
            det = detections[det_idx]
            track = Track(id=self._generate_track_id(), x=det.x, y=det.y, w=det.w, h=det.h)
            updated.append(track)
            logger.debug(f"Created new track {track.label}")

        for trk_idx in unmatched_trks:
            prev = previous_tracks[trk_idx]
            missed = prev.missed + 1
            if missed > cfg.max_misses:
                logger.debug(f"Retired track {prev.label} after {missed} missed frames")
                continue

            drift = project(prev)
            updated.append(Track(
                id=prev.id,
                x=drift.x, y=drift.y, w=prev.w, h=prev.h,
                vx=prev.vx, vy=prev.vy,
                age=prev.age + 1,
                missed=missed,
            ))

        return updated

    def _update_matched(self, prev: Track, det: Box) -> Track:
        """Blend a matched detection with the track's own forward step."""
        alpha = self.config.pos_smoothing
        beta = self.config.size_smoothing

        return Track(
            id=prev.id,
            x=alpha * det.x + (1 - alpha) * (prev.x + prev.vx),
            y=alpha * det.y + (1 - alpha) * (prev.y + prev.vy),
            w=beta * det.w + (1 - beta) * prev.w,
            h=beta * det.h + (1 - beta) * prev.h,
            # Raw displacement between observations, used for the next prediction
            vx=det.x - prev.x,
            vy=det.y - prev.y,
            age=prev.age + 1,
            missed=0,
        )

    def reset(self) -> None:
        """Restart id generation; callers start again from an empty track list."""
        self._ids = itertools.count(self._first_id)
        self._next_id = self._first_id
        logger.debug(f"Tracker ids reset to {self._first_id}")


# =============================================================================
# TEST
# =============================================================================

if __name__ == "__main__":
    print("Testing MultiObjectTracker...")

    tracker = MultiObjectTracker()

    print("\n1. First detection...")
    tracks = tracker.update([Box(0, 0, 100, 100)], [])
    for t in tracks:
        print(f"   - {t.label}: {t.box} phase={t.phase.name}")

    print("\n2. Detection moves right...")
    tracks = tracker.update([Box(10, 0, 100, 100)], tracks)
    for t in tracks:
        print(f"   - {t.label}: x={t.x:.1f} vx={t.vx:.1f} age={t.age}")

    print("\n3. Detection disappears...")
    for frame in range(12):
        tracks = tracker.update([], tracks)
        print(f"   Frame {frame + 3}: tracks={[(t.label, t.missed) for t in tracks]}")

    print("\nMultiObjectTracker OK!")
