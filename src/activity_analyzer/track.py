"""Helpers shared by the GPX, FIT and TCX parsers.

Every parser collects its points, then hands them to build_activity together
with whatever totals the document declares. Totals the document does not
declare are recomputed from the points.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import PurePath

from activity_analyzer.distance import compute_bounds, point_distance
from activity_analyzer.errors import NoTrackDataError
from activity_analyzer.models import Activity, Point

logger = logging.getLogger(__name__)

DEFAULT_ACTIVITY_NAME = "Activity"


@dataclass
class TrackTotals:
    total_distance: float  # meters
    total_elevation_gain: float  # meters
    total_time: float  # seconds
    average_hr: float | None = None
    max_hr: float | None = None


def is_valid_coordinate(lat: float | None, lon: float | None) -> bool:
    """True when lat/lon are finite and inside the WGS84 degree ranges."""
    if lat is None or lon is None:
        return False
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def as_utc(value) -> datetime | None:
    """Attach UTC to naive timestamps so every point in a track is comparable.

    Documents that omit the zone are taken to be in UTC. Anything that is not
    a datetime becomes None.
    """
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def name_from_filename(filename: str | None) -> str:
    """Activity name fallback: the file name without its extension."""
    if not filename:
        return DEFAULT_ACTIVITY_NAME
    return PurePath(filename).stem or DEFAULT_ACTIVITY_NAME


def elapsed_seconds(start: datetime | None, end: datetime | None) -> float:
    """Seconds from start to end, or 0 if either timestamp is missing."""
    if start is None or end is None:
        return 0.0
    return (end - start).total_seconds()


def positive_elevation_gain(points) -> float:
    """Sum of climbing between consecutive points that both have elevation.

    Descents never subtract from the total.
    """
    gain = 0.0
    for i in range(1, len(points)):
        prev_elev = points[i - 1].elevation
        curr_elev = points[i].elevation
        if prev_elev is not None and curr_elev is not None and curr_elev > prev_elev:
            gain += curr_elev - prev_elev
    return gain


def calculate_totals(points: list[Point]) -> TrackTotals:
    """Recompute distance, climbing, elapsed time and HR stats from points."""
    total_distance = 0.0
    for i in range(1, len(points)):
        total_distance += point_distance(points[i - 1], points[i])

    heart_rates = [pt.heart_rate for pt in points if pt.heart_rate is not None]

    return TrackTotals(
        total_distance=total_distance,
        total_elevation_gain=positive_elevation_gain(points),
        total_time=elapsed_seconds(points[0].time, points[-1].time) if points else 0.0,
        average_hr=sum(heart_rates) / len(heart_rates) if heart_rates else None,
        max_hr=max(heart_rates) if heart_rates else None,
    )


def average_pace(total_time: float, total_distance: float) -> float:
    """Seconds per meter, 0 when either total is missing."""
    if total_time <= 0 or total_distance <= 0:
        return 0.0
    return total_time / total_distance


def build_activity(
    points: list[Point],
    name: str,
    date: datetime | None,
    source_format: str,
    declared: dict | None = None,
) -> Activity:
    """Assemble an immutable Activity from parsed points.

    Args:
        points: Points in recording order, already filtered to valid coordinates
        name: Activity name
        date: Activity start, if known
        source_format: "gpx", "fit" or "tcx"
        declared: Totals stated by the document itself, keyed like TrackTotals
            fields. Entries that are None are recomputed from the points.

    Raises:
        NoTrackDataError: If there are no points.
    """
    if not points:
        raise NoTrackDataError(f"No valid track points found in {source_format.upper()} data")

    totals = calculate_totals(points)
    for key, value in (declared or {}).items():
        if value is not None:
            setattr(totals, key, float(value))
            logger.debug("Using declared %s=%s from %s summary", key, value, source_format)

    return Activity(
        name=name,
        date=date,
        points=tuple(points),
        total_distance=totals.total_distance,
        total_elevation_gain=totals.total_elevation_gain,
        total_time=totals.total_time,
        average_pace=average_pace(totals.total_time, totals.total_distance),
        bounds=compute_bounds(points),
        average_hr=totals.average_hr,
        max_hr=totals.max_hr,
        source_format=source_format,
    )
