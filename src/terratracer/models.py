"""
Flight and Detection Records

This module defines the immutable records produced by the CSV loaders:
one FlightSample per row of the flight log and one DetectionEvent per row
of the alien detection log.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FlightSample:
    """
    One row of the flight log.

    Attributes:
        time_ms: Elapsed flight time in milliseconds
        datetime_utc: UTC timestamp string as recorded by the aircraft
        height_takeoff: Height above takeoff point (feet)
        z_speed: Vertical speed (mph)
        fly_state: Flight controller state label
    """
    time_ms: float
    datetime_utc: str
    height_takeoff: float
    z_speed: float
    fly_state: str = ""


@dataclass(frozen=True, eq=False)
class DetectionEvent:
    """
    One row of the detection log.

    Events compare and hash by identity: two rows with identical fields are
    still two separate detections.

    Attributes:
        time_ms: Elapsed time (ms) at which the detection fired
        timestamp: Timestamp string from the detector
        label: Classification label
        probability: Detector confidence in [0, 1]
        x, y, width, height: Bounding box in image coordinates
        summary: Fixed-format one-line description (see format_detection)
    """
    time_ms: float
    timestamp: str
    label: str
    probability: float
    x: float
    y: float
    width: float
    height: float = 0.0
    summary: str = field(init=False)

    def __post_init__(self):
        # frozen dataclass, so bypass __setattr__ for the derived field
        object.__setattr__(self, 'summary', format_detection(self))


def format_detection(event: DetectionEvent) -> str:
    """
    Build the one-line summary shown in the detection log.

    The elapsed time is truncated to whole milliseconds; probability is shown
    as a rounded percentage and the bounding box values are rounded.
    """
    return (f"{int(event.time_ms)}, {event.timestamp}, {event.label}, "
            f"{event.probability * 100:.0f}%, "
            f"{event.x:.0f}, {event.y:.0f}, {event.width:.0f}, {event.height:.0f}")


def format_clock(milliseconds: float) -> str:
    """Format milliseconds as MM:SS:CC (minutes, seconds, hundredths)."""
    total_seconds = int(milliseconds / 1000)
    minutes = total_seconds // 60
    seconds = total_seconds % 60
    hundredths = int((milliseconds % 1000) / 10)
    return f"{minutes:02d}:{seconds:02d}:{hundredths:02d}"
