"""
TerraTracer - drone flight playback viewer.

Replays a recorded flight log and alien detection log in sync with the
drone video.
"""

from .config import ViewerConfig, load_config
from .loaders import (AssetMissingError, load_detection_csv, load_flight_csv,
                      parse_detection_csv, parse_flight_csv)
from .models import DetectionEvent, FlightSample, format_clock, format_detection
from .playback import PlaybackController, PlaybackState

__version__ = "0.1.0"

__all__ = [
    "AssetMissingError",
    "DetectionEvent",
    "FlightSample",
    "PlaybackController",
    "PlaybackState",
    "ViewerConfig",
    "format_clock",
    "format_detection",
    "load_config",
    "load_detection_csv",
    "load_flight_csv",
    "parse_detection_csv",
    "parse_flight_csv",
]
