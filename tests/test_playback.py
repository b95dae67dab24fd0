"""
Unit tests for the playback controller.

Playback is driven by calling tick() with explicit elapsed times; the
ticker, media player and clock are fakes.
"""

import os
import sys
import unittest

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from terratracer.config import ViewerConfig
from terratracer.models import DetectionEvent, FlightSample
from terratracer.playback import PlaybackController, PlaybackState


def make_samples(times):
    return [FlightSample(time_ms=t, datetime_utc=f"t{t}", height_takeoff=t / 10.0,
                         z_speed=0.0, fly_state="P-GPS") for t in times]


def make_detections(times):
    return [DetectionEvent(time_ms=t, timestamp=f"t{t}", label="alien", probability=0.9,
                           x=1, y=2, width=3, height=4) for t in times]


class FakeTicker:
    def __init__(self):
        self.running = False
        self.interval_ms = None
        self.callback = None
        self.starts = 0

    def start(self, interval_ms, callback):
        self.running = True
        self.interval_ms = interval_ms
        self.callback = callback
        self.starts += 1

    def stop(self):
        self.running = False


class FakeMedia:
    def __init__(self):
        self.calls = []

    def restart(self):
        self.calls.append('restart')

    def pause(self):
        self.calls.append('pause')


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now


class PlaybackTestCase(unittest.TestCase):
    """Base fixture with fakes."""

    flight_times = [0, 100, 200]
    detection_times = []

    def setUp(self):
        self.ticker = FakeTicker()
        self.media = FakeMedia()
        self.clock = FakeClock()
        self.detections = make_detections(self.detection_times)
        self.controller = PlaybackController(
            make_samples(self.flight_times), self.detections,
            clock=self.clock, ticker=self.ticker, media=self.media)


class TestStateMachine(PlaybackTestCase):
    """Test start/stop transitions."""

    detection_times = [10, 1000]

    def test_initial_state(self):
        self.assertFalse(self.controller.playing)
        self.assertEqual(self.controller.current_index, 0)
        self.assertEqual(self.controller.seen_detections, [])
        self.assertFalse(self.controller.detected_now)

    def test_start(self):
        self.controller.start()

        self.assertTrue(self.controller.playing)
        self.assertTrue(self.ticker.running)
        self.assertEqual(self.ticker.interval_ms, 10)
        self.assertEqual(self.media.calls, ['restart'])
        self.assertEqual(self.controller.state.start_instant, 100.0)

    def test_ticker_drives_tick(self):
        """Test that the ticker callback advances playback from the clock."""
        self.controller.start()
        self.clock.now = 100.15
        self.ticker.callback()
        self.assertEqual(self.controller.current_index, 1)
        self.assertAlmostEqual(self.controller.state.elapsed_ms, 150.0)

    def test_start_then_stop(self):
        """Test start() immediately followed by stop()."""
        self.controller.start()
        self.controller.stop()

        self.assertFalse(self.controller.playing)
        self.assertFalse(self.ticker.running)
        self.assertEqual(self.controller.current_index, 0)
        self.assertEqual(self.controller.seen_detections, [])
        self.assertEqual(self.media.calls, ['restart', 'pause'])

    def test_stop_when_stopped_is_noop(self):
        self.controller.stop()
        self.assertEqual(self.media.calls, [])

    def test_start_when_playing_is_noop(self):
        """Test that a second start() keeps the session state."""
        self.controller.start()
        self.controller.tick(150)
        seen = list(self.controller.seen_detections)

        self.clock.now = 200.0
        self.controller.start()

        self.assertEqual(self.controller.current_index, 1)
        self.assertEqual(self.controller.seen_detections, seen)
        self.assertEqual(self.controller.state.start_instant, 100.0)
        self.assertEqual(self.ticker.starts, 1)
        self.assertEqual(self.media.calls, ['restart'])

    def test_stop_keeps_last_observed_state(self):
        self.controller.start()
        self.controller.tick(1060)
        self.controller.stop()

        self.assertEqual(self.controller.current_index, 2)
        self.assertEqual(len(self.controller.seen_detections), 2)

    def test_tick_after_stop_is_ignored(self):
        self.controller.start()
        self.controller.tick(60)
        self.controller.stop()
        self.controller.tick(1060)

        self.assertEqual(self.controller.current_index, 0)
        self.assertEqual(len(self.controller.seen_detections), 1)

    def test_restart_clears_session(self):
        """Test that restarting clears seen detections and the index."""
        self.controller.start()
        self.controller.tick(1060)
        self.controller.stop()
        self.controller.start()

        self.assertEqual(self.controller.current_index, 0)
        self.assertEqual(self.controller.seen_detections, [])
        self.assertFalse(self.controller.detected_now)

        self.controller.tick(60)
        self.assertEqual(self.controller.seen_detections, [self.detections[0]])

    def test_toggle(self):
        self.controller.toggle()
        self.assertTrue(self.controller.playing)
        self.controller.toggle()
        self.assertFalse(self.controller.playing)


class TestFlightIndex(PlaybackTestCase):
    """Test current flight sample selection."""

    def setUp(self):
        super().setUp()
        self.controller.start()

    def test_between_samples(self):
        self.controller.tick(150)
        self.assertEqual(self.controller.current_index, 1)
        self.assertEqual(self.controller.current_sample.time_ms, 100)

    def test_past_last_sample(self):
        self.controller.tick(250)
        self.assertEqual(self.controller.current_index, 2)

    def test_before_first_sample(self):
        self.controller.tick(-10)
        self.assertEqual(self.controller.current_index, 0)

    def test_exact_timestamp(self):
        self.controller.tick(100)
        self.assertEqual(self.controller.current_index, 1)


class TestEmptyFlightLog(PlaybackTestCase):
    """Test playback with no flight samples."""

    flight_times = []

    def test_index_stays_zero(self):
        self.controller.start()
        self.controller.tick(500)
        self.assertEqual(self.controller.current_index, 0)
        self.assertIsNone(self.controller.current_sample)


class TestDetectedNow(PlaybackTestCase):
    """Test the detected-now window."""

    detection_times = [500]

    def setUp(self):
        super().setUp()
        self.controller.start()

    def test_inside_window(self):
        for elapsed in (200, 350, 500, 650, 800):
            self.controller.tick(elapsed)
            self.assertTrue(self.controller.detected_now, elapsed)

    def test_outside_window(self):
        for elapsed in (150, 850):
            self.controller.tick(elapsed)
            self.assertFalse(self.controller.detected_now, elapsed)

    def test_custom_window(self):
        controller = PlaybackController([], self.detections,
                                        ViewerConfig(detected_now_window_ms=50))
        controller.start()
        controller.tick(400)
        self.assertFalse(controller.detected_now)
        controller.tick(460)
        self.assertTrue(controller.detected_now)


class TestSeenDetections(PlaybackTestCase):
    """Test the append-only seen detection list."""

    detection_times = [10, 1000]

    def setUp(self):
        super().setUp()
        self.controller.start()

    def test_only_due_detections_seen(self):
        self.controller.tick(60)
        self.assertEqual(self.controller.seen_detections, [self.detections[0]])

    def test_later_tick_adds_rest_once(self):
        self.controller.tick(60)
        self.controller.tick(1060)
        self.controller.tick(2000)
        self.assertEqual(self.controller.seen_detections, self.detections)

    def test_lookahead(self):
        """Test that a detection shows up just before its timestamp."""
        self.controller.tick(950)
        self.assertEqual(len(self.controller.seen_detections), 2)

    def test_identical_rows_are_both_seen(self):
        twins = make_detections([10, 10])
        controller = PlaybackController([], twins)
        controller.start()
        controller.tick(60)
        self.assertEqual(len(controller.seen_detections), 2)

    def test_source_order_preserved(self):
        events = make_detections([30, 10, 20])
        controller = PlaybackController([], events)
        controller.start()
        controller.tick(100)
        self.assertEqual(controller.seen_detections, events)


class TestPointCloudDelay(PlaybackTestCase):
    """Test the point cloud delay."""

    def test_visible_after_delay(self):
        self.controller.start()
        self.controller.tick(490)
        self.assertFalse(self.controller.state.point_cloud_visible)
        self.controller.tick(500)
        self.assertTrue(self.controller.state.point_cloud_visible)

    def test_hidden_after_stop(self):
        self.controller.start()
        self.controller.tick(600)
        self.controller.stop()
        self.assertFalse(self.controller.state.point_cloud_visible)


class TestListeners(PlaybackTestCase):
    """Test change notifications."""

    detection_times = [10, 1000]

    def setUp(self):
        super().setUp()
        self.changes = []
        self.batches = []
        self.controller.add_listener(lambda c: self.changes.append(c.state.playing))
        self.controller.add_detection_listener(self.batches.append)

    def test_state_listener(self):
        self.controller.start()
        self.controller.tick(60)
        self.controller.stop()
        self.assertEqual(self.changes, [True, True, False])

    def test_detection_listener_gets_new_batches(self):
        self.controller.start()
        self.controller.tick(60)
        self.controller.tick(70)
        self.controller.tick(1060)
        self.assertEqual(self.batches, [[self.detections[0]], [self.detections[1]]])

    def test_noop_does_not_notify(self):
        self.controller.stop()
        self.assertEqual(self.changes, [])


class TestPlaybackState(unittest.TestCase):
    def test_defaults(self):
        state = PlaybackState()
        self.assertFalse(state.playing)
        self.assertIsNone(state.start_instant)
        self.assertEqual(state.seen, [])


if __name__ == '__main__':
    unittest.main()
