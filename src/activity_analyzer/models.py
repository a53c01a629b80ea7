from dataclasses import asdict, dataclass, fields
from datetime import datetime


def _serialize(value):
    if isinstance(value, datetime):
        return value.isoformat()
    return value


@dataclass(frozen=True)
class Point:
    lat: float  # degrees
    lon: float  # degrees
    elevation: float | None = None  # meters
    time: datetime | None = None
    heart_rate: float | None = None  # bpm
    cadence: float | None = None
    power: float | None = None  # watts
    temperature: float | None = None  # °C

    def to_dict(self) -> dict:
        return {f.name: _serialize(getattr(self, f.name)) for f in fields(self)}


@dataclass(frozen=True)
class ProcessedPoint(Point):
    distance: float = 0.0  # cumulative meters from the first point
    pace: float = 0.0  # minutes per 1000 m, 0 when stationary
    grade: float = 0.0  # percent
    speed: float = 0.0  # m/s
    normalized_pace: float | None = None
    normalized_hr: float | None = None
    normalized_power: float | None = None


@dataclass(frozen=True)
class Bounds:
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Activity:
    name: str
    date: datetime | None
    points: tuple[Point, ...]
    total_distance: float  # meters
    total_elevation_gain: float  # meters
    total_time: float  # seconds
    average_pace: float  # seconds per meter
    bounds: Bounds
    average_hr: float | None = None
    max_hr: float | None = None
    source_format: str | None = None  # "gpx", "fit" or "tcx"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "date": _serialize(self.date),
            "source_format": self.source_format,
            "total_distance": self.total_distance,
            "total_elevation_gain": self.total_elevation_gain,
            "total_time": self.total_time,
            "average_pace": self.average_pace,
            "average_hr": self.average_hr,
            "max_hr": self.max_hr,
            "bounds": self.bounds.to_dict(),
            "points": [pt.to_dict() for pt in self.points],
        }


@dataclass(frozen=True)
class Split:
    index: int  # 0-based
    distance: float  # length of this split (meters)
    end_distance: float  # cumulative distance at the closing point (meters)
    duration: float  # seconds, 0 without timestamps
    pace: float  # average pace over the split (min per 1000 m)
    elevation_gain: float  # meters
    start_index: int
    end_index: int
    average_hr: float | None = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Segment:
    """A contiguous highlight range, e.g. the steepest climb."""
    start_index: int
    end_index: int
    distance: float  # meters
    grade: float  # percent
    description: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ProcessedActivity:
    activity: Activity
    points: tuple[ProcessedPoint, ...]
    splits: tuple[Split, ...]
    fastest_split: Split | None = None
    steepest_climb: Segment | None = None
    max_hr_segment: Segment | None = None

    def to_dict(self) -> dict:
        data = self.activity.to_dict()
        data["points"] = [pt.to_dict() for pt in self.points]
        data["splits"] = [split.to_dict() for split in self.splits]
        data["fastest_split"] = self.fastest_split.to_dict() if self.fastest_split else None
        data["steepest_climb"] = self.steepest_climb.to_dict() if self.steepest_climb else None
        data["max_hr_segment"] = self.max_hr_segment.to_dict() if self.max_hr_segment else None
        return data


@dataclass(frozen=True)
class ProcessingParams:
    split_distance: float = 1000.0  # meters per split
    climb_min_distance: float = 100.0  # meters; search window is capped at 2x
    hr_half_width: int = 30  # samples either side of the peak HR
    pace_window: int = 10  # samples
    grade_window: int = 5  # samples
    percentile_low: float = 0.05
    percentile_high: float = 0.95
