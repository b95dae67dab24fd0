"""
Playback Controller

Drives synchronized replay of the flight log and detection log. The
controller owns all playback state; a periodic ticker calls tick(), which
re-derives the current flight sample, the detected-now flag and any newly
visible detections from the elapsed time since start().

The clock, ticker and media player are injected so playback can be driven
without real timers. Listeners are notified synchronously after every state
change, on whichever thread calls start(), stop() or tick().
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

import numpy as np

from .config import ViewerConfig
from .models import DetectionEvent, FlightSample

logger = logging.getLogger(__name__)


class NullTicker:
    """Ticker that never fires. Used when playback is driven by hand."""

    def start(self, interval_ms: int, callback: Callable[[], None]):
        pass

    def stop(self):
        pass


class NullMedia:
    """Media stand-in with no video attached."""

    def restart(self):
        pass

    def pause(self):
        pass


@dataclass
class PlaybackState:
    """
    Transient playback state.

    Attributes:
        playing: Whether playback is running
        start_instant: Clock reading (seconds) when playback started
        elapsed_ms: Elapsed time seen by the last tick
        current_index: Index of the current flight sample
        detected_now: Whether a detection is within the window right now
        point_cloud_visible: Whether the point cloud delay has passed
        seen: Detections shown so far this session, in source order
    """
    playing: bool = False
    start_instant: Optional[float] = None
    elapsed_ms: float = 0.0
    current_index: int = 0
    detected_now: bool = False
    point_cloud_visible: bool = False
    seen: List[DetectionEvent] = field(default_factory=list)


class PlaybackController:
    """
    Start/stop state machine over the flight and detection logs.

    Stopped is the initial state. start() resets the session and begins
    ticking; stop() halts the ticker and pauses media but leaves the last
    observed index and seen detections in place.
    """

    def __init__(self, flight_samples: Sequence[FlightSample],
                 detection_events: Sequence[DetectionEvent],
                 config: Optional[ViewerConfig] = None,
                 clock: Callable[[], float] = time.monotonic,
                 ticker=None, media=None):
        """
        Initialize the controller.

        Args:
            flight_samples: Flight samples ordered by time
            detection_events: Detection events in source order
            config: Timing windows (defaults to ViewerConfig())
            clock: Returns the current time in seconds
            ticker: Object with start(interval_ms, callback) and stop()
            media: Object with restart() and pause()
        """
        self.flight_samples = list(flight_samples)
        self.detection_events = list(detection_events)
        self.config = config or ViewerConfig()
        self.clock = clock
        self.ticker = ticker or NullTicker()
        self.media = media or NullMedia()
        self.state = PlaybackState()

        self._flight_times = np.array([s.time_ms for s in self.flight_samples], dtype=float)
        self._detection_times = np.array([d.time_ms for d in self.detection_events], dtype=float)
        self._seen_ids = set()

        self._listeners: List[Callable[['PlaybackController'], None]] = []
        self._detection_listeners: List[Callable[[List[DetectionEvent]], None]] = []

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def add_listener(self, callback: Callable[['PlaybackController'], None]):
        """Register a callback invoked with the controller after each state change."""
        self._listeners.append(callback)

    def add_detection_listener(self, callback: Callable[[List[DetectionEvent]], None]):
        """Register a callback invoked with each batch of newly seen detections."""
        self._detection_listeners.append(callback)

    def _notify(self):
        for callback in self._listeners:
            callback(self)

    # ------------------------------------------------------------------
    # Convenience accessors
    # ------------------------------------------------------------------

    @property
    def playing(self) -> bool:
        return self.state.playing

    @property
    def current_index(self) -> int:
        return self.state.current_index

    @property
    def seen_detections(self) -> List[DetectionEvent]:
        return self.state.seen

    @property
    def detected_now(self) -> bool:
        return self.state.detected_now

    @property
    def current_sample(self) -> Optional[FlightSample]:
        """The current flight sample, or None if there is none."""
        if 0 <= self.state.current_index < len(self.flight_samples):
            return self.flight_samples[self.state.current_index]
        return None

    # ------------------------------------------------------------------
    # Playback control
    # ------------------------------------------------------------------

    def start(self):
        """Begin a new play session. No-op if already playing."""
        if self.state.playing:
            return

        self.state = PlaybackState(playing=True, start_instant=self.clock())
        self._seen_ids.clear()

        self.media.restart()
        self.ticker.start(self.config.tick_interval_ms, self.tick)
        logger.info("Playback started")
        self._notify()

    def stop(self):
        """Halt playback. No-op if already stopped."""
        if not self.state.playing:
            return

        self.ticker.stop()
        self.state.playing = False
        self.state.point_cloud_visible = False
        self.media.pause()
        logger.info(f"Playback stopped at {self.state.elapsed_ms:.0f}ms "
                    f"({len(self.state.seen)} detections seen)")
        self._notify()

    def toggle(self):
        """Start if stopped, stop if playing."""
        if self.state.playing:
            self.stop()
        else:
            self.start()

    def elapsed_ms(self) -> float:
        """Milliseconds since start() according to the clock."""
        if self.state.start_instant is None:
            return 0.0
        return (self.clock() - self.state.start_instant) * 1000.0

    def tick(self, elapsed_ms: Optional[float] = None):
        """
        Advance playback to the given elapsed time.

        Args:
            elapsed_ms: Elapsed time in milliseconds; read from the clock
                when omitted. Ignored while stopped.
        """
        if not self.state.playing:
            return

        if elapsed_ms is None:
            elapsed_ms = self.elapsed_ms()

        self.state.elapsed_ms = elapsed_ms
        self.state.current_index = self.flight_index_at(elapsed_ms)
        self.state.detected_now = self.detected_at(elapsed_ms)
        self.state.point_cloud_visible = elapsed_ms >= self.config.point_cloud_delay_ms

        new_detections = self._collect_new_detections(elapsed_ms)
        if new_detections:
            self.state.seen.extend(new_detections)
            logger.debug(f"Added {len(new_detections)} new detections. "
                         f"Total: {len(self.state.seen)}")
            for callback in self._detection_listeners:
                callback(new_detections)

        self._notify()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def flight_index_at(self, elapsed_ms: float) -> int:
        """
        Index of the last flight sample at or before elapsed_ms.

        Falls back to the last sample once playback runs past the log and to
        0 before the first sample or when there are no samples.
        """
        count = len(self._flight_times)
        later = np.flatnonzero(self._flight_times > elapsed_ms)
        index = int(later[0]) - 1 if later.size else count - 1
        return max(0, min(index, count - 1))

    def detected_at(self, elapsed_ms: float) -> bool:
        """Whether any detection lies within the detected-now window."""
        window = self.config.detected_now_window_ms
        times = self._detection_times
        return bool(np.any((times >= elapsed_ms - window) & (times <= elapsed_ms + window)))

    def _collect_new_detections(self, elapsed_ms: float) -> List[DetectionEvent]:
        due = np.flatnonzero(self._detection_times <= elapsed_ms + self.config.seen_lookahead_ms)
        new_detections = []
        for i in due:
            event = self.detection_events[i]
            if id(event) in self._seen_ids:
                continue
            self._seen_ids.add(id(event))
            new_detections.append(event)
            logger.debug(f"Detection at {event.time_ms}ms: {event.summary}")
        return new_detections
