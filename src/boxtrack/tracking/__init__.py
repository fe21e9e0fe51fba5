#!/usr/bin/env python3
"""
Object tracking module for boxtrack.

Provides greedy IoU multi-object tracking with derived lifecycle phases.
"""

from .geometry import intersection_over_union, iou_matrix, scale_box, expand_box
from .prediction import predict, project
from .association import assign, split_assignments
from .tracker import MultiObjectTracker
from .state_machine import StateTransition, TransitionType, diff_tracks
from .detections import filter_detections
from .session import TrackingSession, TrackingFrame

__all__ = [
    "intersection_over_union",
    "iou_matrix",
    "scale_box",
    "expand_box",
    "predict",
    "project",
    "assign",
    "split_assignments",
    "MultiObjectTracker",
    "StateTransition",
    "TransitionType",
    "diff_tracks",
    "filter_detections",
    "TrackingSession",
    "TrackingFrame",
]
