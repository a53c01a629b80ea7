import logging

from activity_analyzer.metrics import compute_metrics, normalize_metrics
from activity_analyzer.models import Activity, ProcessedActivity, ProcessingParams
from activity_analyzer.segments import (
    detect_splits,
    find_fastest_split,
    find_max_hr_segment,
    find_steepest_climb,
)

logger = logging.getLogger(__name__)


def process_activity(activity: Activity, params: ProcessingParams | None = None) -> ProcessedActivity:
    """Run the metrics and segmentation passes over an Activity.

    Pure: the activity is not modified and nothing is cached, so calling it
    twice with the same input gives equal results. Never raises for a
    well-formed Activity; highlights that cannot be found are None.
    """
    if params is None:
        params = ProcessingParams()

    points = compute_metrics(
        activity.points,
        pace_window=params.pace_window,
        grade_window=params.grade_window,
    )
    points = normalize_metrics(points, low=params.percentile_low, high=params.percentile_high)

    splits = detect_splits(points, split_distance=params.split_distance)
    result = ProcessedActivity(
        activity=activity,
        points=tuple(points),
        splits=tuple(splits),
        fastest_split=find_fastest_split(splits),
        steepest_climb=find_steepest_climb(points, min_distance=params.climb_min_distance),
        max_hr_segment=find_max_hr_segment(points, half_width=params.hr_half_width),
    )

    logger.debug(
        "Processed %r: %d points, %d splits, climb=%s, max HR segment=%s",
        activity.name,
        len(points),
        len(splits),
        result.steepest_climb is not None,
        result.max_hr_segment is not None,
    )
    return result
