#!/usr/bin/env python3
"""
Constant-velocity motion prediction for tracks.
"""

from ..core.models import Box, Track


def predict(track: Track, dilation: float = 1.05) -> Box:
    """
    Expected box of `track` in the current frame, used as matching target.

    The center moves by one step of the track's velocity and the size is
    inflated by `dilation` to tolerate detector jitter. The result is never
    written back into the track.
    """
    cx = track.x + track.vx + track.w / 2
    cy = track.y + track.vy + track.h / 2
    return Box.from_center(cx, cy, track.w * dilation, track.h * dilation)


def project(track: Track) -> Box:
    """One constant-velocity step without dilation (where a missing track drifts to)."""
    return predict(track, dilation=1.0)
