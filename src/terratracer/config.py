"""
Viewer Configuration

Playback timing windows and asset file names, with optional overrides
loaded from a JSON file.
"""

import json
import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)


@dataclass
class ViewerConfig:
    """
    Configuration for the playback viewer.

    Attributes:
        tick_interval_ms: Period of the playback timer
        detected_now_window_ms: Half-width of the window around a detection
            during which the alien indicator is lit
        seen_lookahead_ms: How far ahead of elapsed time a detection is
            added to the detection log
        point_cloud_delay_ms: Delay after start before the point cloud shows
        flight_csv: Flight log file name
        detection_csv: Detection log file name
        video_file: Drone video file name
        point_cloud_image: Point cloud stand-in image
        alien_image: Indicator image while an alien is detected
        alien_idle_image: Indicator image otherwise
        drone_image: Title bar drone image
        window_title: Main window title
    """
    tick_interval_ms: int = 10
    detected_now_window_ms: float = 300.0
    seen_lookahead_ms: float = 50.0
    point_cloud_delay_ms: float = 500.0
    flight_csv: str = "flight_data.csv"
    detection_csv: str = "alien_detection.csv"
    video_file: str = "drone_video.mp4"
    point_cloud_image: str = "point_cloud.png"
    alien_image: str = "aliens.png"
    alien_idle_image: str = "aliens_grayscale.png"
    drone_image: str = "white_drone.png"
    window_title: str = "TerraTracer"


def load_config(path: Optional[Union[str, Path]] = None) -> ViewerConfig:
    """
    Load configuration, applying overrides from a JSON file if given.

    Unknown keys are ignored with a warning. An unreadable or invalid file
    is logged and the defaults are used.

    Args:
        path: Optional path to a JSON object of ViewerConfig fields

    Returns:
        ViewerConfig instance
    """
    config = ViewerConfig()
    if not path:
        return config

    try:
        with open(path, 'r') as f:
            overrides = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to load configuration: {e}")
        logger.info("Using default configuration")
        return config

    if not isinstance(overrides, dict):
        logger.error(f"Configuration in {path} must be a JSON object")
        return config

    known = {f.name for f in fields(ViewerConfig)}
    for key in sorted(set(overrides) - known):
        logger.warning(f"Ignoring unknown configuration key: {key}")

    config = replace(config, **{k: v for k, v in overrides.items() if k in known})
    logger.info(f"Loaded configuration from {path}")
    return config
