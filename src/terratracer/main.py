#!/usr/bin/env python3
"""
TerraTracer - Drone Flight Playback Viewer

Replays a recorded drone flight log and alien detection log in sync with
the drone video.

Usage:
    terratracer [--data-dir DIR] [--config FILE] [--verbose | --quiet]
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import ViewerConfig, load_config
from .loaders import AssetMissingError, load_detection_csv, load_flight_csv
from .playback import PlaybackController

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

BUNDLED_ASSETS = Path(__file__).parent / 'assets'


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        description='Replay a drone flight log and alien detections alongside the flight video.'
    )
    parser.add_argument(
        '--data-dir',
        type=Path,
        default=BUNDLED_ASSETS,
        help='Directory containing the flight log, detection log, video and images '
             '(default: bundled assets)'
    )
    parser.add_argument(
        '--config',
        type=str,
        help='JSON file overriding viewer configuration'
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )
    verbosity.add_argument(
        '-q', '--quiet',
        action='store_true',
        help='Only log errors'
    )

    return parser.parse_args(argv)


def require_asset(path: Path, what: str) -> Path:
    """Check that a required startup asset exists."""
    if not path.is_file():
        raise AssetMissingError(f"Missing {what}: {path}")
    return path


def load_logs(data_dir: Path, config: ViewerConfig):
    """
    Load the flight log and the detection log.

    Returns:
        Tuple of (flight samples, detection events)

    Raises:
        AssetMissingError: If the flight log is missing
    """
    flight_samples = load_flight_csv(require_asset(data_dir / config.flight_csv, 'flight log'))
    detection_events = load_detection_csv(data_dir / config.detection_csv)
    return flight_samples, detection_events


def run(args) -> int:
    config = load_config(args.config)
    data_dir = Path(args.data_dir)

    flight_samples, detection_events = load_logs(data_dir, config)
    video_path = require_asset(data_dir / config.video_file, 'drone video')

    # Qt is only needed once we actually open the window
    from PyQt6.QtWidgets import QApplication
    from .viewer import QtMedia, QtTicker, TerraTracerWindow

    app = QApplication(sys.argv)
    media = QtMedia(video_path)
    controller = PlaybackController(flight_samples, detection_events, config,
                                    ticker=QtTicker(), media=media)

    window = TerraTracerWindow(controller, media, data_dir, config)
    window.show()
    return app.exec()


def main(argv=None) -> int:
    args = parse_arguments(argv)

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    try:
        return run(args)
    except AssetMissingError as e:
        logger.error(f"Fatal error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
