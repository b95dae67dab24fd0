"""
CSV Loaders

Parses the flight log and the alien detection log into ordered lists of
FlightSample and DetectionEvent records.

Flight log (header row, then data rows):
    timeMs, dateTimeUTC, <ignored>, heightTakeoff, zSpeed, flyState, ...

Detection log (no header):
    timeMs, timestamp, label, probability, x, y, width[, height]

Fields are split on every comma; quoting is not supported. Rows with too
few fields or a non-numeric value in a numeric column are dropped.
"""

import logging
from pathlib import Path
from typing import List, Union

import pandas as pd

from .models import DetectionEvent, FlightSample

logger = logging.getLogger(__name__)

# Minimum fields per row
FLIGHT_MIN_FIELDS = 5
DETECTION_MIN_FIELDS = 7

# Column positions
FLIGHT_NUMERIC_COLUMNS = [0, 3, 4]
DETECTION_NUMERIC_COLUMNS = [0, 3, 4, 5, 6]
DETECTION_HEIGHT_COLUMN = 7


class AssetMissingError(FileNotFoundError):
    """Raised when a required startup asset cannot be found or read."""


def _split_rows(text: str, skip_header: bool) -> pd.DataFrame:
    """
    Split raw CSV text into a DataFrame of string fields.

    Short rows are padded with None, so a missing field can be told apart
    from an empty one.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if skip_header:
        lines = lines[1:]

    return pd.DataFrame([line.split(',') for line in lines])


def _blank(values: pd.Series) -> pd.Series:
    """True where a field is missing or only whitespace."""
    return values.fillna('').astype(str).str.strip() == ''


def _coerce_numeric(frame: pd.DataFrame, columns: List[int]) -> pd.DataFrame:
    """
    Convert columns to floats, turning bad values into NaN.

    Values with leading or trailing whitespace count as bad.
    """
    for col in columns:
        text = frame[col].fillna('').astype(str)
        padded = text != text.str.strip()
        frame[col] = pd.to_numeric(frame[col], errors='coerce').mask(padded)
    return frame


def parse_flight_csv(text: str) -> List[FlightSample]:
    """
    Parse flight log text (with header row) into flight samples.

    Args:
        text: Raw CSV text

    Returns:
        FlightSample list in file order
    """
    frame = _split_rows(text, skip_header=True)
    if frame.empty:
        return []

    total = len(frame)
    # Keep the first six positional fields; extras are ignored
    frame = frame.reindex(columns=range(FLIGHT_MIN_FIELDS + 1))
    frame = frame[frame[FLIGHT_MIN_FIELDS - 1].notna()]
    frame = _coerce_numeric(frame.copy(), FLIGHT_NUMERIC_COLUMNS)
    frame = frame.dropna(subset=FLIGHT_NUMERIC_COLUMNS)
    frame[5] = frame[5].fillna('')

    dropped = total - len(frame)
    if dropped:
        logger.debug(f"Dropped {dropped} malformed flight rows")

    return [
        FlightSample(
            time_ms=float(row[0]),
            datetime_utc=str(row[1]),
            height_takeoff=float(row[3]),
            z_speed=float(row[4]),
            fly_state=str(row[5]),
        )
        for row in frame.itertuples(index=False, name=None)
    ]


def parse_detection_csv(text: str) -> List[DetectionEvent]:
    """
    Parse detection log text (no header) into detection events.

    The height column is optional and defaults to 0 when missing or empty,
    but a height that is present and not numeric drops the row.

    Args:
        text: Raw CSV text

    Returns:
        DetectionEvent list in file order
    """
    frame = _split_rows(text, skip_header=False)
    if frame.empty:
        return []

    total = len(frame)
    frame = frame.reindex(columns=range(DETECTION_HEIGHT_COLUMN + 1))
    frame = frame[frame[DETECTION_MIN_FIELDS - 1].notna()]

    height_raw = frame[DETECTION_HEIGHT_COLUMN]
    frame = _coerce_numeric(frame.copy(), DETECTION_NUMERIC_COLUMNS + [DETECTION_HEIGHT_COLUMN])
    # An empty trailing height counts as absent
    height_absent = _blank(height_raw)
    frame.loc[height_absent, DETECTION_HEIGHT_COLUMN] = 0.0
    bad_height = frame[DETECTION_HEIGHT_COLUMN].isna()
    frame = frame[~bad_height].dropna(subset=DETECTION_NUMERIC_COLUMNS)

    dropped = total - len(frame)
    if dropped:
        logger.debug(f"Dropped {dropped} malformed detection rows")

    return [
        DetectionEvent(
            time_ms=float(row[0]),
            timestamp=str(row[1]),
            label=str(row[2]),
            probability=float(row[3]),
            x=float(row[4]),
            y=float(row[5]),
            width=float(row[6]),
            height=float(row[7]),
        )
        for row in frame.itertuples(index=False, name=None)
    ]


def load_flight_csv(path: Union[str, Path]) -> List[FlightSample]:
    """
    Load the flight log from disk.

    Raises:
        AssetMissingError: If the file is missing or unreadable. The viewer
            cannot run without a flight log.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise AssetMissingError(f"Could not load flight log {path}: {e}") from e

    samples = parse_flight_csv(text)
    logger.info(f"Loaded {len(samples)} flight samples from {path.name}")
    return samples


def load_detection_csv(path: Union[str, Path]) -> List[DetectionEvent]:
    """
    Load the detection log from disk.

    A missing or unreadable file is not fatal: the error is logged and an
    empty list is returned.
    """
    path = Path(path)
    if not path.exists():
        logger.error(f"Could not find detection log {path}")
        return []

    try:
        text = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Could not read detection log {path}: {e}")
        return []

    events = parse_detection_csv(text)
    logger.info(f"Loaded {len(events)} detection events from {path.name}")
    for event in events:
        logger.debug(f"Detection at {event.time_ms}ms: {event.summary}")
    return events
