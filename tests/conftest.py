import os
from datetime import datetime, timedelta, timezone

import pytest

from activity_analyzer.models import Point, ProcessedPoint

DATA_DIR = os.path.join(os.path.dirname(__file__), "functional", "data")
SAMPLE_GPX_PATH = os.path.join(DATA_DIR, "sample_run.gpx")
SAMPLE_TCX_PATH = os.path.join(DATA_DIR, "sample_run.tcx")

BASE_TIME = datetime(2024, 6, 15, 8, 0, 0, tzinfo=timezone.utc)

# Degrees of latitude per meter along a meridian (R = 6,371,000 m)
LAT_DEG_PER_M = 1 / 111_194.93


def make_points(elevations, spacing_m=100.0, seconds_per_point=30, heart_rates=None):
    """Points heading due north, spacing_m apart, one every seconds_per_point."""
    points = []
    for i, elev in enumerate(elevations):
        points.append(
            Point(
                lat=45.0 + i * spacing_m * LAT_DEG_PER_M,
                lon=6.0,
                elevation=elev,
                time=BASE_TIME + timedelta(seconds=i * seconds_per_point) if seconds_per_point else None,
                heart_rate=heart_rates[i] if heart_rates is not None else None,
            )
        )
    return points


def make_processed(distances, elevations=None, heart_rates=None, paces=None, seconds_per_point=None):
    """ProcessedPoints with exact cumulative distances, bypassing geodesy."""
    points = []
    for i, dist in enumerate(distances):
        points.append(
            ProcessedPoint(
                lat=45.0,
                lon=6.0,
                elevation=elevations[i] if elevations is not None else None,
                time=BASE_TIME + timedelta(seconds=i * seconds_per_point) if seconds_per_point else None,
                heart_rate=heart_rates[i] if heart_rates is not None else None,
                distance=dist,
                pace=paces[i] if paces is not None else 5.0,
            )
        )
    return points


@pytest.fixture
def simple_track_points():
    """A short list of points for unit testing: flat, ~100m apart, 20s each."""
    return make_points([10.0, 10.0, 10.0], seconds_per_point=20)


@pytest.fixture
def uphill_track_points():
    """Points going uphill."""
    return make_points([10.0, 20.0, 35.0], seconds_per_point=30)


@pytest.fixture
def downhill_track_points():
    """Points going downhill."""
    return make_points([50.0, 30.0, 10.0], seconds_per_point=15)
