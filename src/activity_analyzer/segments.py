"""Splits and highlight segments over processed points.

Splits are the regular fixed-distance grid (every kilometre by default).
Segments are single highlights that ignore the grid: the steepest sustained
climb and the stretch around the peak heart rate.
"""

from typing import Sequence

from activity_analyzer.models import ProcessedPoint, ProcessingParams, Segment, Split
from activity_analyzer.track import elapsed_seconds, positive_elevation_gain

_DEFAULTS = ProcessingParams()
DEFAULT_SPLIT_DISTANCE = _DEFAULTS.split_distance
DEFAULT_CLIMB_MIN_DISTANCE = _DEFAULTS.climb_min_distance
DEFAULT_HR_HALF_WIDTH = _DEFAULTS.hr_half_width


def _build_split(index: int, points: Sequence[ProcessedPoint], start: int, end: int, distance: float) -> Split:
    """Summarize points[start..end] (inclusive) as one split."""
    split_points = points[start:end + 1]
    heart_rates = [pt.heart_rate for pt in split_points if pt.heart_rate is not None]

    return Split(
        index=index,
        distance=distance,
        end_distance=split_points[-1].distance,
        duration=elapsed_seconds(split_points[0].time, split_points[-1].time),
        pace=sum(pt.pace for pt in split_points) / len(split_points),
        elevation_gain=positive_elevation_gain(split_points),
        start_index=start,
        end_index=end,
        average_hr=sum(heart_rates) / len(heart_rates) if heart_rates else None,
    )


def detect_splits(
    points: Sequence[ProcessedPoint], split_distance: float = DEFAULT_SPLIT_DISTANCE
) -> list[Split]:
    """Cut the track into consecutive splits of at least split_distance meters.

    A split closes at the first point where the distance covered since the
    previous boundary reaches split_distance; that point is both the last
    point of this split and the first of the next. A trailing remainder
    shorter than split_distance is not reported.
    """
    splits: list[Split] = []
    split_start = 0
    accumulated = 0.0

    for i in range(1, len(points)):
        accumulated += points[i].distance - points[i - 1].distance
        if accumulated >= split_distance:
            splits.append(_build_split(len(splits), points, split_start, i, accumulated))
            split_start = i
            accumulated = 0.0

    return splits


def find_fastest_split(splits: Sequence[Split]) -> Split | None:
    """Split with the lowest average pace; the earliest one wins a tie."""
    fastest = None
    for split in splits:
        if fastest is None or split.pace < fastest.pace:
            fastest = split
    return fastest


def find_steepest_climb(
    points: Sequence[ProcessedPoint], min_distance: float = DEFAULT_CLIMB_MIN_DISTANCE
) -> Segment | None:
    """Find the steepest climb of at least min_distance meters.

    From every start index the search looks ahead only until it has covered
    2 * min_distance, so the cost grows with the track length times the
    window size. Every end point in that window that is higher than the
    start and at least min_distance away is a candidate; a candidate replaces
    the current best only if its grade is strictly greater, so among equally
    steep climbs the first one found is kept.

    Returns None if no candidate climbs (e.g. a flat track or no elevation).
    """
    steepest: Segment | None = None
    max_grade = 0.0
    window = min_distance * 2

    for i in range(len(points) - 1):
        start = points[i]
        j = i + 1
        segment_distance = 0.0

        while j < len(points) and segment_distance < window:
            end = points[j]
            segment_distance = end.distance - start.distance

            if start.elevation is not None and end.elevation is not None:
                elevation_gain = end.elevation - start.elevation
                if elevation_gain > 0 and segment_distance >= min_distance:
                    grade = elevation_gain / segment_distance * 100
                    if grade > max_grade:
                        max_grade = grade
                        steepest = Segment(
                            start_index=i,
                            end_index=j,
                            distance=segment_distance,
                            grade=grade,
                            description=f"{grade:.1f}% over {segment_distance / 1000:.2f} km",
                        )
            j += 1

    return steepest


def find_max_hr_segment(
    points: Sequence[ProcessedPoint], half_width: int = DEFAULT_HR_HALF_WIDTH
) -> Segment | None:
    """Window of half_width samples either side of the highest heart rate.

    The first occurrence of the maximum is used. The window is clamped to the
    track. Returns None when no point has heart rate data.
    """
    max_hr = None
    max_hr_index = -1
    for i, pt in enumerate(points):
        if pt.heart_rate is not None and (max_hr is None or pt.heart_rate > max_hr):
            max_hr = pt.heart_rate
            max_hr_index = i

    if max_hr is None:
        return None

    start = max(0, max_hr_index - half_width)
    end = min(len(points) - 1, max_hr_index + half_width)

    return Segment(
        start_index=start,
        end_index=end,
        distance=points[end].distance - points[start].distance,
        grade=0.0,
        description=f"Max HR: {max_hr:.0f} bpm",
    )
