#!/usr/bin/env python3
"""
Track lifecycle state machine.

Tracks do not store their state; it is implied by age and missed:

    TENTATIVE ──match──→ CONFIRMED ──miss──→ COASTING ──missed > max──→ RETIRED
        │                    ↑                  │
        └───────miss─────────┼──────────────────┘
                             └──────match───────┘

This module classifies what happened to each track between two
consecutive track lists so callers can react to lifecycle changes.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence
from enum import Enum, auto

from ..core.models import Track, TrackPhase

logger = logging.getLogger(__name__)


# =============================================================================
# STATE TRANSITIONS
# =============================================================================

class TransitionType(Enum):
    """Types of state transitions."""
    BORN = auto()      # (none) → TENTATIVE
    CONFIRM = auto()   # TENTATIVE → CONFIRMED
    COAST = auto()     # TENTATIVE/CONFIRMED → COASTING
    RECOVER = auto()   # COASTING → CONFIRMED
    RETIRE = auto()    # COASTING → RETIRED


@dataclass(frozen=True)
class StateTransition:
    """Record of a state transition."""
    track_id: int
    from_phase: Optional[TrackPhase]
    to_phase: TrackPhase
    transition_type: TransitionType
    frame_index: int = 0
    reason: str = ""


def _classify(prev: Track, curr: Track) -> Optional[TransitionType]:
    before, after = prev.phase, curr.phase
    if before == after:
        return None
    if after == TrackPhase.COASTING:
        return TransitionType.COAST
    if before == TrackPhase.COASTING:
        return TransitionType.RECOVER
    if before == TrackPhase.TENTATIVE:
        return TransitionType.CONFIRM
    return None


def diff_tracks(
    previous: Sequence[Track],
    current: Sequence[Track],
    frame_index: int = 0
) -> List[StateTransition]:
    """
    List the transitions between two consecutive track lists.

    Args:
        previous: Track list passed into the update
        current: Track list returned by the update
        frame_index: Frame number recorded on each transition

    Returns:
        Transitions ordered by track id, retirements last
    """
    prev_by_id: Dict[int, Track] = {t.id: t for t in previous}
    transitions: List[StateTransition] = []

    for curr in sorted(current, key=lambda t: t.id):
        prev = prev_by_id.get(curr.id)

        if prev is None:
            transitions.append(StateTransition(
                track_id=curr.id,
                from_phase=None,
                to_phase=curr.phase,
                transition_type=TransitionType.BORN,
                frame_index=frame_index,
                reason="Unmatched detection",
            ))
            continue

        kind = _classify(prev, curr)
        if kind is None:
            continue

        reason = {
            TransitionType.COAST: "Detection lost",
            TransitionType.RECOVER: f"Recovered after {prev.missed} missed frames",
            TransitionType.CONFIRM: "Matched after birth",
        }[kind]
        transitions.append(StateTransition(
            track_id=curr.id,
            from_phase=prev.phase,
            to_phase=curr.phase,
            transition_type=kind,
            frame_index=frame_index,
            reason=reason,
        ))

    current_ids = {t.id for t in current}
    for prev in sorted(previous, key=lambda t: t.id):
        if prev.id not in current_ids:
            transitions.append(StateTransition(
                track_id=prev.id,
                from_phase=prev.phase,
                to_phase=TrackPhase.RETIRED,
                transition_type=TransitionType.RETIRE,
                frame_index=frame_index,
                reason=f"Missed {prev.missed + 1} consecutive frames",
            ))

    for transition in transitions:
        logger.debug(
            f"Track {transition.track_id:04d}: "
            f"{transition.from_phase.name if transition.from_phase else '-'} → "
            f"{transition.to_phase.name} ({transition.reason})"
        )

    return transitions
