"""Per-point metrics: distance, speed, pace, grade and normalized scores."""

import math
from dataclasses import fields, replace
from typing import Sequence

from activity_analyzer.distance import point_distance
from activity_analyzer.models import Point, ProcessedPoint, ProcessingParams
from activity_analyzer.smoothing import smooth_series

_DEFAULTS = ProcessingParams()
DEFAULT_PACE_WINDOW = _DEFAULTS.pace_window
DEFAULT_GRADE_WINDOW = _DEFAULTS.grade_window
DEFAULT_PERCENTILE_LOW = _DEFAULTS.percentile_low
DEFAULT_PERCENTILE_HIGH = _DEFAULTS.percentile_high

# Seconds assumed between points when either timestamp is missing
_UNTIMED_STEP_SECONDS = 1.0


def compute_metrics(
    points: Sequence[Point],
    pace_window: int = DEFAULT_PACE_WINDOW,
    grade_window: int = DEFAULT_GRADE_WINDOW,
) -> list[ProcessedPoint]:
    """Annotate each point with cumulative distance, speed, pace and grade.

    The first point is the origin: zero distance, pace and grade. For every
    later point the values describe the step from the previous point:

    - speed (m/s) uses the timestamp difference, or 1 s when either point
      lacks a time; a non-positive interval gives speed 0
    - pace is minutes per 1000 m (0 when not moving)
    - grade is elevation change over horizontal distance in percent, with
      zero elevation change unless both points have elevation

    Pace and grade are then smoothed with a trailing average over the
    preceding points (see smoothing.trailing_average).
    """
    distances: list[float] = []
    speeds: list[float] = []
    raw_paces: list[float] = []
    raw_grades: list[float] = []
    cumulative_distance = 0.0

    for i, curr in enumerate(points):
        prev = points[i - 1] if i > 0 else curr

        segment_distance = point_distance(prev, curr) if i > 0 else 0.0
        cumulative_distance += segment_distance

        if curr.time is not None and prev.time is not None:
            time_delta = (curr.time - prev.time).total_seconds()
        else:
            time_delta = _UNTIMED_STEP_SECONDS

        speed = segment_distance / time_delta if time_delta > 0 else 0.0
        pace = 1000 / (speed * 60) if speed > 0 else 0.0

        if curr.elevation is not None and prev.elevation is not None:
            elevation_delta = curr.elevation - prev.elevation
        else:
            elevation_delta = 0.0
        grade = (elevation_delta / segment_distance) * 100 if segment_distance > 0 else 0.0

        distances.append(cumulative_distance)
        speeds.append(speed)
        raw_paces.append(pace)
        raw_grades.append(grade)

    paces = smooth_series(raw_paces, pace_window)
    grades = smooth_series(raw_grades, grade_window)

    return [
        ProcessedPoint(
            **{f.name: getattr(pt, f.name) for f in fields(Point)},
            distance=distances[i],
            pace=paces[i],
            grade=grades[i],
            speed=speeds[i],
        )
        for i, pt in enumerate(points)
    ]


def percentile(values: Sequence[float], p: float) -> float:
    """Nearest-rank percentile: the sorted element at floor(n * p).

    Returns 0.0 for an empty sequence. p=1.0 returns the maximum.
    """
    if not values:
        return 0.0
    ordered = sorted(values)
    index = min(int(math.floor(len(ordered) * p)), len(ordered) - 1)
    return ordered[index]


def normalize(value: float, low: float, high: float) -> float:
    """Scale value into [0, 1] relative to the low..high band.

    Values outside the band are clamped. A degenerate band (low == high)
    maps everything to 0.5.
    """
    if high == low:
        return 0.5
    return max(0.0, min(1.0, (value - low) / (high - low)))


def normalize_metrics(
    points: Sequence[ProcessedPoint],
    low: float = DEFAULT_PERCENTILE_LOW,
    high: float = DEFAULT_PERCENTILE_HIGH,
) -> list[ProcessedPoint]:
    """Attach percentile-normalized pace, heart rate and power to each point.

    Each metric is scaled against its own [low, high] percentile band. The
    pace band only considers moving points (pace > 0); every point still
    gets a normalized pace. Heart rate and power stay None on points that
    have no reading.
    """
    paces = [pt.pace for pt in points if pt.pace > 0]
    heart_rates = [pt.heart_rate for pt in points if pt.heart_rate is not None]
    powers = [pt.power for pt in points if pt.power is not None]

    pace_band = (percentile(paces, low), percentile(paces, high))
    hr_band = (percentile(heart_rates, low), percentile(heart_rates, high))
    power_band = (percentile(powers, low), percentile(powers, high))

    normalized = []
    for pt in points:
        normalized.append(
            replace(
                pt,
                normalized_pace=normalize(pt.pace, *pace_band),
                normalized_hr=normalize(pt.heart_rate, *hr_band) if pt.heart_rate is not None else None,
                normalized_power=normalize(pt.power, *power_band) if pt.power is not None else None,
            )
        )
    return normalized
