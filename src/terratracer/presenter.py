"""
Display formatting for the viewer panels.

Kept free of Qt so the text shown in each panel can be checked directly.
"""

from typing import List, Optional, Tuple

from .models import DetectionEvent, FlightSample, format_clock

DETECTION_HEADER = "ms    datetime          label prob%  x  y  w  h"
NO_DETECTIONS_TEXT = "No aliens detected yet"

# Flight panel shown when there is no current sample
PLACEHOLDER_ROWS = [
    ("Time", "00:00:00"),
    ("UTC", "--:--:--"),
    ("Height Above Takeoff", "0 ft"),
    ("Z Speed", "0 mph"),
    ("Fly State", "Unknown"),
]


def flight_rows(sample: Optional[FlightSample]) -> List[Tuple[str, str]]:
    """Label/value pairs for the flight data panel."""
    if sample is None:
        return list(PLACEHOLDER_ROWS)

    return [
        ("Time", format_clock(sample.time_ms)),
        ("Datetime", sample.datetime_utc),
        ("Height Above Takeoff", f"{sample.height_takeoff:.3f} ft"),
        ("Z Speed", f"{sample.z_speed:.3f} mph"),
        ("Fly State", sample.fly_state),
    ]


def detection_lines(seen: List[DetectionEvent]) -> List[str]:
    """Lines for the detection pane: header plus one row per detection."""
    if not seen:
        return [NO_DETECTIONS_TEXT]
    return [DETECTION_HEADER] + [event.summary for event in seen]


def toggle_label(playing: bool) -> str:
    return "Stop" if playing else "Start"


def toggle_color(playing: bool) -> str:
    return "#FF0000" if playing else "#00FF00"


def appended_lines(new_detections: List[DetectionEvent], already_shown: int) -> List[str]:
    """
    Lines to add to the detection pane for a batch of new detections.

    The header goes in front of the first batch of a session only.
    """
    if not new_detections:
        return []
    lines = detection_lines(new_detections)
    return lines[1:] if already_shown else lines
