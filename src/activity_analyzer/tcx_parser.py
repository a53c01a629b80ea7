"""TCX (Garmin Training Center XML) parser.

Only the first Activity of a document is read. Its laps are flattened
Lap → Track → Trackpoint into one point sequence. Tags are matched by local
name so files with and without the TrainingCenterDatabase namespace both work.
"""

import logging
import xml.etree.ElementTree as ET
from datetime import datetime

import gpxpy.gpx
import gpxpy.gpxfield

from activity_analyzer.errors import MalformedDocumentError, NoTrackDataError
from activity_analyzer.models import Activity, Point
from activity_analyzer.track import as_utc, build_activity, is_valid_coordinate, name_from_filename

logger = logging.getLogger(__name__)


def _local_name(tag) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _children(element: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in element if _local_name(child.tag) == name]


def _child(element: ET.Element | None, *path: str) -> ET.Element | None:
    """Follow a path of local tag names, returning the first match or None."""
    for name in path:
        if element is None:
            return None
        matches = _children(element, name)
        element = matches[0] if matches else None
    return element


def _float(element: ET.Element | None) -> float | None:
    if element is None or element.text is None:
        return None
    try:
        return float(element.text.strip())
    except ValueError:
        return None


def _parse_time(text: str | None) -> datetime | None:
    if not text:
        return None
    # Same ISO 8601 variants GPX uses: any fraction length, Z or offset, or no zone
    try:
        return as_utc(gpxpy.gpxfield.parse_time(text.strip()))
    except (gpxpy.gpx.GPXException, ValueError):
        return None


def _trackpoint_power(trackpoint: ET.Element) -> float | None:
    """Power lives under Extensions/TPX/Watts, or directly as Watts on some exports."""
    power = _float(_child(trackpoint, "Extensions", "TPX", "Watts"))
    if power is None:
        power = _float(_child(trackpoint, "Watts"))
    return power


def _parse_trackpoint(trackpoint: ET.Element) -> Point | None:
    position = _child(trackpoint, "Position")
    if position is None:
        return None
    lat = _float(_child(position, "LatitudeDegrees"))
    lon = _float(_child(position, "LongitudeDegrees"))
    if not is_valid_coordinate(lat, lon):
        return None

    return Point(
        lat=lat,
        lon=lon,
        elevation=_float(_child(trackpoint, "AltitudeMeters")),
        time=_parse_time(getattr(_child(trackpoint, "Time"), "text", None)),
        heart_rate=_float(_child(trackpoint, "HeartRateBpm", "Value")),
        cadence=_float(_child(trackpoint, "Cadence")),
        power=_trackpoint_power(trackpoint),
    )


def _lap_total(laps: list[ET.Element], name: str) -> float | None:
    """Sum a per-lap total; None unless the laps declare a positive sum."""
    total = 0.0
    for lap in laps:
        value = _float(_child(lap, name))
        if value is not None:
            total += value
    return total if total > 0 else None


def parse_tcx(data: str | bytes, filename: str | None = None) -> Activity:
    """Parse a TCX document into an Activity.

    Lap-level DistanceMeters and TotalTimeSeconds are preferred over values
    recomputed from the trackpoints when they are present.

    Raises:
        MalformedDocumentError: If the document is not well-formed XML.
        NoTrackDataError: If there is no Activity or no usable trackpoint.
    """
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise MalformedDocumentError(f"Failed to parse TCX data: {exc}") from exc

    activities = _child(root, "Activities")
    activity_list = _children(activities if activities is not None else root, "Activity")
    if not activity_list:
        raise NoTrackDataError("No activities found in TCX data")
    activity = activity_list[0]
    if len(activity_list) > 1:
        logger.debug("TCX contains %d activities, using the first", len(activity_list))

    laps = _children(activity, "Lap")
    points: list[Point] = []
    skipped = 0
    for lap in laps:
        for track in _children(lap, "Track"):
            for trackpoint in _children(track, "Trackpoint"):
                point = _parse_trackpoint(trackpoint)
                if point is None:
                    skipped += 1
                    continue
                points.append(point)

    if skipped:
        logger.debug("Skipped %d TCX trackpoints without a usable position", skipped)

    return build_activity(
        points,
        name=activity.get("Sport") or name_from_filename(filename),
        date=_parse_time(getattr(_child(activity, "Id"), "text", None)),
        source_format="tcx",
        declared={
            "total_distance": _lap_total(laps, "DistanceMeters"),
            "total_time": _lap_total(laps, "TotalTimeSeconds"),
        },
    )
