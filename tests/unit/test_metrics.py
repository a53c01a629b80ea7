from dataclasses import replace
from datetime import datetime, timezone

import pytest

from activity_analyzer.metrics import compute_metrics, normalize, normalize_metrics, percentile
from activity_analyzer.models import Point

from conftest import make_points, make_processed


class TestComputeMetrics:
    def test_preserves_length_and_order(self):
        points = make_points([100.0, 101.0, 99.0, 105.0, 110.0])
        processed = compute_metrics(points)
        assert len(processed) == len(points)
        for orig, pt in zip(points, processed):
            assert (pt.lat, pt.lon, pt.elevation, pt.time) == (orig.lat, orig.lon, orig.elevation, orig.time)

    def test_first_point_is_origin(self):
        processed = compute_metrics(make_points([100.0, 110.0, 120.0]))
        assert processed[0].distance == 0.0
        assert processed[0].pace == 0.0
        assert processed[0].grade == 0.0
        assert processed[0].speed == 0.0

    def test_cumulative_distance_non_decreasing(self):
        processed = compute_metrics(make_points([0.0] * 12, spacing_m=50.0))
        distances = [pt.distance for pt in processed]
        assert distances == sorted(distances)
        assert distances[-1] == pytest.approx(550.0, rel=1e-4)

    def test_speed_from_timestamps(self):
        # 100 m every 30 s
        processed = compute_metrics(make_points([0.0] * 3, spacing_m=100.0, seconds_per_point=30))
        assert processed[1].speed == pytest.approx(100.0 / 30, rel=1e-4)

    def test_pace_is_smoothed_with_previous_points(self):
        # Raw pace is 5 min/km everywhere except the origin, which is 0
        processed = compute_metrics(make_points([0.0] * 4, spacing_m=100.0, seconds_per_point=30))
        assert processed[1].pace == pytest.approx(2.5, rel=1e-4)  # (0 + 5) / 2
        assert processed[2].pace == pytest.approx(2.5, rel=1e-4)  # (0 + 2.5 + 5) / 3

    def test_grade_is_smoothed(self, uphill_track_points):
        processed = compute_metrics(uphill_track_points)
        # Raw grades 0, 10, 15 with up to 2 previous smoothed values
        assert processed[1].grade == pytest.approx(5.0, rel=1e-4)
        assert processed[2].grade == pytest.approx((0.0 + 5.0 + 15.0) / 3, rel=1e-4)

    def test_missing_timestamps_use_one_second(self):
        processed = compute_metrics(make_points([0.0, 0.0], spacing_m=100.0, seconds_per_point=None))
        assert processed[1].speed == pytest.approx(100.0, rel=1e-4)

    def test_zero_duration_step(self):
        t = datetime(2024, 6, 15, 8, 0, 0, tzinfo=timezone.utc)
        points = [Point(lat=45.0, lon=6.0, time=t), Point(lat=45.001, lon=6.0, time=t)]
        processed = compute_metrics(points)
        assert processed[1].speed == 0.0
        assert processed[1].pace == 0.0

    def test_missing_elevation_gives_zero_grade(self):
        processed = compute_metrics(make_points([100.0, None, 130.0]))
        assert processed[1].grade == 0.0
        assert processed[2].grade == 0.0

    def test_coincident_points(self):
        points = make_points([100.0, 200.0], spacing_m=0.0)
        processed = compute_metrics(points)
        assert processed[1].distance == 0.0
        assert processed[1].grade == 0.0

    def test_single_point(self):
        processed = compute_metrics([Point(lat=45.0, lon=6.0)])
        assert len(processed) == 1
        assert processed[0].distance == 0.0

    def test_empty(self):
        assert compute_metrics([]) == []

    def test_optional_fields_carried_through(self):
        points = [Point(lat=45.0, lon=6.0, heart_rate=150.0, cadence=80.0, power=200.0, temperature=20.0)]
        processed = compute_metrics(points)
        assert processed[0].heart_rate == 150.0
        assert processed[0].cadence == 80.0
        assert processed[0].power == 200.0
        assert processed[0].temperature == 20.0


class TestPercentile:
    def test_empty(self):
        assert percentile([], 0.5) == 0

    def test_median(self):
        assert percentile([1, 2, 3, 4, 5], 0.5) == 3

    def test_unsorted_input(self):
        assert percentile([5, 1, 4, 2, 3], 0.5) == 3

    def test_floor_index(self):
        values = list(range(1, 21))  # 20 values
        assert percentile(values, 0.05) == 2  # index 1
        assert percentile(values, 0.5) == 11  # index 10

    def test_p_one_returns_max(self):
        assert percentile([3, 1, 2], 1.0) == 3


class TestNormalize:
    def test_scales_into_band(self):
        assert normalize(150.0, 100.0, 200.0) == 0.5

    def test_clamps(self):
        assert normalize(50.0, 100.0, 200.0) == 0.0
        assert normalize(250.0, 100.0, 200.0) == 1.0

    def test_degenerate_band(self):
        assert normalize(123.0, 7.0, 7.0) == 0.5


class TestNormalizeMetrics:
    def test_values_within_unit_interval(self):
        points = make_processed(
            [i * 10.0 for i in range(40)],
            heart_rates=[120.0 + (i * 7) % 60 for i in range(40)],
            paces=[4.0 + (i % 9) * 0.3 for i in range(40)],
        )
        normalized = normalize_metrics(points)
        for pt in normalized:
            assert 0.0 <= pt.normalized_pace <= 1.0
            assert 0.0 <= pt.normalized_hr <= 1.0
            assert pt.normalized_power is None

    def test_equal_values_normalize_to_half(self):
        points = make_processed([0.0, 10.0, 20.0], heart_rates=[150.0] * 3, paces=[5.0] * 3)
        normalized = normalize_metrics(points)
        assert [pt.normalized_hr for pt in normalized] == [0.5, 0.5, 0.5]
        assert [pt.normalized_pace for pt in normalized] == [0.5, 0.5, 0.5]

    def test_missing_heart_rate_stays_missing(self):
        points = make_processed([0.0, 10.0, 20.0], heart_rates=[140.0, None, 160.0])
        normalized = normalize_metrics(points)
        assert normalized[1].normalized_hr is None
        assert normalized[0].normalized_hr is not None
        assert normalized[1].heart_rate is None

    def test_zero_heart_rate_is_still_a_reading(self):
        points = make_processed([0.0, 10.0], heart_rates=[0.0, 100.0])
        normalized = normalize_metrics(points)
        assert normalized[0].normalized_hr == 0.0

    def test_stationary_pace_excluded_from_band(self):
        paces = [0.0] + [4.0 + i * 0.1 for i in range(20)]
        points = make_processed([i * 10.0 for i in range(21)], paces=paces)
        normalized = normalize_metrics(points)
        # The band comes from moving points only; 0 pace clamps to 0
        assert normalized[0].normalized_pace == 0.0
        assert normalized[-1].normalized_pace == 1.0

    def test_all_stationary(self):
        points = make_processed([0.0, 0.0], paces=[0.0, 0.0])
        assert [pt.normalized_pace for pt in normalize_metrics(points)] == [0.5, 0.5]

    def test_power_normalized_independently(self):
        points = [
            replace(pt, power=power)
            for pt, power in zip(make_processed([0.0, 10.0, 20.0]), [100.0, None, 300.0])
        ]
        normalized = normalize_metrics(points)
        assert normalized[0].normalized_power == 0.0
        assert normalized[1].normalized_power is None
        assert normalized[2].normalized_power == 1.0

    def test_custom_band(self):
        points = make_processed([i * 10.0 for i in range(10)], heart_rates=[float(i) for i in range(10)])
        normalized = normalize_metrics(points, low=0.0, high=1.0)
        assert normalized[0].normalized_hr == 0.0
        assert normalized[-1].normalized_hr == 1.0

    def test_does_not_mutate_input(self):
        points = make_processed([0.0, 10.0], heart_rates=[100.0, 200.0])
        normalize_metrics(points)
        assert points[0].normalized_hr is None
