import dataclasses
import json
from datetime import datetime, timezone

import pytest

from activity_analyzer.models import (
    Activity,
    Bounds,
    Point,
    ProcessedActivity,
    ProcessedPoint,
    ProcessingParams,
    Segment,
    Split,
)


class TestPoint:
    def test_construction(self):
        pt = Point(lat=37.7749, lon=-122.4194, elevation=10.0)
        assert pt.lat == 37.7749
        assert pt.lon == -122.4194
        assert pt.elevation == 10.0
        assert pt.time is None

    def test_optional_fields_default_to_none(self):
        pt = Point(lat=0.0, lon=0.0)
        assert pt.elevation is None
        assert pt.heart_rate is None
        assert pt.cadence is None
        assert pt.power is None
        assert pt.temperature is None

    def test_frozen(self):
        pt = Point(lat=0.0, lon=0.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            pt.lat = 1.0

    def test_to_dict_serializes_time(self):
        t = datetime(2024, 6, 15, 8, 0, 0, tzinfo=timezone.utc)
        data = Point(lat=1.0, lon=2.0, time=t, heart_rate=150.0).to_dict()
        assert data["time"] == "2024-06-15T08:00:00+00:00"
        assert data["heart_rate"] == 150.0
        assert data["power"] is None


class TestProcessedPoint:
    def test_is_a_point(self):
        pt = ProcessedPoint(lat=1.0, lon=2.0, distance=100.0, pace=5.0)
        assert isinstance(pt, Point)
        assert pt.grade == 0.0
        assert pt.normalized_hr is None

    def test_to_dict_includes_metrics(self):
        data = ProcessedPoint(lat=1.0, lon=2.0, distance=100.0, normalized_pace=0.5).to_dict()
        assert data["distance"] == 100.0
        assert data["normalized_pace"] == 0.5
        assert data["lat"] == 1.0


class TestProcessingParams:
    def test_defaults(self):
        params = ProcessingParams()
        assert params.split_distance == 1000.0
        assert params.climb_min_distance == 100.0
        assert params.hr_half_width == 30
        assert params.pace_window == 10
        assert params.grade_window == 5
        assert params.percentile_low == 0.05
        assert params.percentile_high == 0.95

    def test_custom_values(self):
        params = ProcessingParams(split_distance=1609.34, hr_half_width=10)
        assert params.split_distance == 1609.34
        assert params.hr_half_width == 10


class TestProcessedActivity:
    def test_to_dict_is_json_serializable(self):
        t = datetime(2024, 6, 15, 8, 0, 0, tzinfo=timezone.utc)
        activity = Activity(
            name="Run",
            date=t,
            points=(Point(lat=1.0, lon=2.0, time=t),),
            total_distance=0.0,
            total_elevation_gain=0.0,
            total_time=0.0,
            average_pace=0.0,
            bounds=Bounds(min_lat=1.0, max_lat=1.0, min_lon=2.0, max_lon=2.0),
            source_format="gpx",
        )
        split = Split(
            index=0, distance=1000.0, end_distance=1000.0, duration=300.0, pace=5.0,
            elevation_gain=10.0, start_index=0, end_index=0,
        )
        processed = ProcessedActivity(
            activity=activity,
            points=(ProcessedPoint(lat=1.0, lon=2.0, time=t),),
            splits=(split,),
            fastest_split=split,
            steepest_climb=Segment(start_index=0, end_index=0, distance=0.0, grade=0.0, description="flat"),
        )

        data = processed.to_dict()
        json.dumps(data)
        assert data["name"] == "Run"
        assert data["date"] == "2024-06-15T08:00:00+00:00"
        assert data["points"][0]["distance"] == 0.0
        assert data["splits"][0]["duration"] == 300.0
        assert data["fastest_split"]["index"] == 0
        assert data["steepest_climb"]["description"] == "flat"
        assert data["max_hr_segment"] is None
        assert data["bounds"] == {"min_lat": 1.0, "max_lat": 1.0, "min_lon": 2.0, "max_lon": 2.0}
