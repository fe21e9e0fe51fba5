#!/usr/bin/env python3
"""
Tracker behaviour tests: id stability, lifecycle counters, retirement,
determinism and the reference frame-by-frame scenario.
"""

import sys
import unittest
from pathlib import Path

import numpy as np

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from boxtrack.core.models import Box, Track, TrackPhase
from boxtrack.core.config import TrackerConfig
from boxtrack.tracking.tracker import MultiObjectTracker
from boxtrack.tracking.state_machine import TransitionType, diff_tracks


def run_frames(tracker, frames, tracks=None):
    """Feed a list of detection lists, returning the track list after each frame."""
    history = []
    tracks = tracks or []
    for detections in frames:
        tracks = tracker.update(detections, tracks)
        history.append(tracks)
    return history


class TestReferenceScenario(unittest.TestCase):
    """One person steps right, then disappears for good."""

    def setUp(self):
        self.tracker = MultiObjectTracker()

    def test_scenario(self):
        frame1 = self.tracker.update([Box(0, 0, 100, 100)], [])
        self.assertEqual(len(frame1), 1)
        track = frame1[0]
        self.assertEqual(track.id, 1)
        self.assertEqual(track.box, Box(0, 0, 100, 100))
        self.assertEqual((track.age, track.missed, track.vx, track.vy), (0, 0, 0, 0))

        frame2 = self.tracker.update([Box(10, 0, 100, 100)], frame1)
        self.assertEqual(len(frame2), 1)
        track = frame2[0]
        self.assertEqual(track.id, 1)
        self.assertAlmostEqual(track.x, 6.0)   # 0.6 * 10 + 0.4 * (0 + 0)
        self.assertAlmostEqual(track.y, 0.0)
        self.assertAlmostEqual(track.w, 100.0)
        self.assertAlmostEqual(track.vx, 10.0)
        self.assertEqual((track.age, track.missed), (1, 0))

        frame3 = self.tracker.update([], frame2)
        track = frame3[0]
        self.assertEqual(track.id, 1)
        self.assertEqual(track.missed, 1)
        self.assertEqual(track.age, 2)
        self.assertAlmostEqual(track.x, 16.0)
        self.assertAlmostEqual(track.w, 100.0)

        tracks = frame3
        for frame in range(4, 13):
            tracks = self.tracker.update([], tracks)
            self.assertEqual(len(tracks), 1, f"frame {frame}")
            self.assertEqual(tracks[0].missed, frame - 2)
            self.assertAlmostEqual(tracks[0].x, 6.0 + 10 * (frame - 2))

        self.assertEqual(tracks[0].missed, 10)
        frame13 = self.tracker.update([], tracks)
        self.assertEqual(frame13, [])


class TestTrackerLifecycle(unittest.TestCase):
    """Birth, matching, coasting and retirement."""

    def setUp(self):
        self.tracker = MultiObjectTracker(TrackerConfig(max_misses=3))

    def test_empty_frame_without_tracks(self):
        self.assertEqual(self.tracker.update([], []), [])

    def test_birth_on_no_match(self):
        """N detections with no previous tracks give N fresh tentative tracks."""
        dets = [Box(0, 0, 50, 50), Box(200, 0, 50, 50), Box(400, 0, 50, 50)]
        tracks = self.tracker.update(dets, [])
        self.assertEqual(len(tracks), 3)
        self.assertEqual(sorted(t.id for t in tracks), [1, 2, 3])
        for det, track in zip(dets, tracks):
            self.assertEqual(track.box, det)
            self.assertEqual((track.age, track.missed, track.vx, track.vy), (0, 0, 0, 0))
            self.assertEqual(track.phase, TrackPhase.TENTATIVE)

    def test_new_object_gets_new_id(self):
        tracks = self.tracker.update([Box(0, 0, 50, 50)], [])
        tracks = self.tracker.update([Box(0, 0, 50, 50), Box(300, 300, 50, 50)], tracks)
        self.assertEqual(sorted(t.id for t in tracks), [1, 2])

    def test_id_stability_while_moving(self):
        """A box moving steadily keeps one id."""
        frames = [[Box(5 * i, 2 * i, 100, 200)] for i in range(30)]
        history = run_frames(self.tracker, frames)
        for tracks in history:
            self.assertEqual([t.id for t in tracks], [1])
        self.assertEqual(history[-1][0].age, 29)

    def test_missed_resets_on_match(self):
        """Missed counts consecutive misses and resets on a match."""
        det = Box(0, 0, 100, 100)
        history = run_frames(self.tracker, [[det], [det], [], [], [det]])
        self.assertEqual([tracks[0].missed for tracks in history], [0, 0, 1, 2, 0])
        self.assertEqual([tracks[0].age for tracks in history], [0, 1, 2, 3, 4])
        self.assertEqual({tracks[0].id for tracks in history}, {1})

    def test_retirement_after_max_misses(self):
        """Present while coasting, absent on the (max_misses + 1)-th miss."""
        history = run_frames(self.tracker, [[Box(0, 0, 100, 100)]] + [[]] * 4)
        self.assertEqual([len(tracks) for tracks in history], [1, 1, 1, 1, 0])
        self.assertEqual([t.missed for tracks in history[1:4] for t in tracks], [1, 2, 3])

    def test_zero_max_misses_drops_immediately(self):
        tracker = MultiObjectTracker(TrackerConfig(max_misses=0))
        tracks = tracker.update([Box(0, 0, 10, 10)], [])
        self.assertEqual(tracker.update([], tracks), [])

    def test_coasting_keeps_size_and_velocity(self):
        prev = [Track(id=4, x=10, y=10, w=40, h=80, vx=3, vy=-1, age=5)]
        tracks = self.tracker.update([], prev)
        self.assertEqual(tracks, [Track(id=4, x=13, y=9, w=40, h=80, vx=3, vy=-1, age=6, missed=1)])

    def test_coasting_track_recovers(self):
        """A coasting track matched again keeps its id and becomes confirmed."""
        prev = [Track(id=9, x=0, y=0, w=100, h=100, age=4, missed=2)]
        tracks = self.tracker.update([Box(0, 0, 100, 100)], prev)
        self.assertEqual(tracks[0].id, 9)
        self.assertEqual(tracks[0].phase, TrackPhase.CONFIRMED)

    def test_smoothing_uses_config(self):
        tracker = MultiObjectTracker(TrackerConfig(pos_smoothing=0.5, size_smoothing=0.25))
        prev = [Track(id=1, x=0, y=0, w=100, h=100, vx=4, age=1)]
        track = tracker.update([Box(10, 0, 120, 100)], prev)[0]
        self.assertAlmostEqual(track.x, 0.5 * 10 + 0.5 * (0 + 4))
        self.assertAlmostEqual(track.w, 0.25 * 120 + 0.75 * 100)
        self.assertAlmostEqual(track.vx, 10)

    def test_ids_unique_under_random_input(self):
        """No frame ever contains the same id twice."""
        rng = np.random.RandomState(0)
        tracks = []
        for _ in range(100):
            count = rng.randint(0, 6)
            dets = [
                Box(float(rng.uniform(0, 500)), float(rng.uniform(0, 500)),
                    float(rng.uniform(20, 120)), float(rng.uniform(20, 120)))
                for _ in range(count)
            ]
            tracks = self.tracker.update(dets, tracks)
            ids = [t.id for t in tracks]
            self.assertEqual(len(ids), len(set(ids)))

    def test_ids_not_reused_after_retirement(self):
        tracks = self.tracker.update([Box(0, 0, 10, 10)], [])
        for _ in range(4):
            tracks = self.tracker.update([], tracks)
        self.assertEqual(tracks, [])
        tracks = self.tracker.update([Box(0, 0, 10, 10)], tracks)
        self.assertEqual(tracks[0].id, 2)

    def test_restored_tracks_do_not_collide_with_births(self):
        """A fresh tracker fed deserialized tracks skips past their ids."""
        restored = [Track.from_dict(Track(id=1, x=0, y=0, w=100, h=100, age=3).to_dict())]
        tracker = MultiObjectTracker()
        tracks = tracker.update([Box(500, 500, 10, 10)], restored)
        ids = [t.id for t in tracks]
        self.assertEqual(len(ids), len(set(ids)))
        self.assertEqual(sorted(ids), [1, 2])
        self.assertEqual(tracker.next_id, 3)


class TestTrackerDeterminism(unittest.TestCase):
    """Same inputs and counter state give the same output."""

    def test_repeatable(self):
        frames = [
            [Box(0, 0, 100, 100), Box(300, 0, 80, 160)],
            [Box(8, 2, 102, 98), Box(310, 0, 80, 160)],
            [Box(18, 3, 99, 100)],
            [],
            [Box(30, 5, 100, 100), Box(600, 600, 10, 10)],
        ]
        first = run_frames(MultiObjectTracker(), frames)
        second = run_frames(MultiObjectTracker(), frames)
        self.assertEqual(first, second)

    def test_same_counter_state(self):
        prev = [Track(id=1, x=0, y=0, w=100, h=100, age=2)]
        dets = [Box(2, 0, 100, 100), Box(500, 500, 20, 20)]
        a = MultiObjectTracker(first_id=42).update(dets, prev)
        b = MultiObjectTracker(first_id=42).update(dets, prev)
        self.assertEqual(a, b)
        self.assertEqual(sorted(t.id for t in a), [1, 42])

    def test_independent_counters(self):
        """Each tracker instance owns its own id counter."""
        one, two = MultiObjectTracker(), MultiObjectTracker()
        one.update([Box(0, 0, 1, 1), Box(5, 5, 1, 1)], [])
        self.assertEqual(two.update([Box(0, 0, 1, 1)], [])[0].id, 1)

    def test_reset_restarts_ids(self):
        tracker = MultiObjectTracker()
        tracker.update([Box(0, 0, 1, 1), Box(5, 5, 1, 1)], [])
        self.assertEqual(tracker.next_id, 3)
        tracker.reset()
        self.assertEqual(tracker.next_id, 1)
        self.assertEqual(tracker.update([Box(0, 0, 1, 1)], [])[0].id, 1)

    def test_inputs_not_mutated(self):
        prev = [Track(id=1, x=0, y=0, w=100, h=100)]
        snapshot = list(prev)
        MultiObjectTracker().update([Box(5, 0, 100, 100)], prev)
        self.assertEqual(prev, snapshot)


class TestStateTransitions(unittest.TestCase):
    """Transition classification between consecutive track lists."""

    def test_lifecycle_sequence(self):
        tracker = MultiObjectTracker(TrackerConfig(max_misses=1))
        det = Box(0, 0, 100, 100)
        kinds = []
        tracks = []
        for frame, dets in enumerate([[det], [det], [], [det], [], []], start=1):
            new_tracks = tracker.update(dets, tracks)
            kinds.append([t.transition_type for t in diff_tracks(tracks, new_tracks, frame)])
            tracks = new_tracks
        self.assertEqual(kinds, [
            [TransitionType.BORN],
            [TransitionType.CONFIRM],
            [TransitionType.COAST],
            [TransitionType.RECOVER],
            [TransitionType.COAST],
            [TransitionType.RETIRE],
        ])

    def test_tentative_track_can_coast(self):
        prev = [Track(id=1, x=0, y=0, w=1, h=1)]
        curr = [Track(id=1, x=0, y=0, w=1, h=1, age=1, missed=1)]
        (transition,) = diff_tracks(prev, curr, frame_index=7)
        self.assertEqual(transition.transition_type, TransitionType.COAST)
        self.assertEqual(transition.from_phase, TrackPhase.TENTATIVE)
        self.assertEqual(transition.frame_index, 7)

    def test_no_change_no_transition(self):
        prev = [Track(id=1, x=0, y=0, w=1, h=1, age=3)]
        curr = [Track(id=1, x=1, y=0, w=1, h=1, age=4)]
        self.assertEqual(diff_tracks(prev, curr), [])

    def test_retirement_records_phase(self):
        prev = [Track(id=5, x=0, y=0, w=1, h=1, age=9, missed=4)]
        (transition,) = diff_tracks(prev, [])
        self.assertEqual(transition.to_phase, TrackPhase.RETIRED)
        self.assertEqual(transition.track_id, 5)


if __name__ == "__main__":
    unittest.main(verbosity=2)
