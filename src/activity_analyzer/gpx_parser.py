import codecs
import logging
import re

import gpxpy
import gpxpy.gpx

from activity_analyzer.errors import MalformedDocumentError
from activity_analyzer.models import Activity, Point
from activity_analyzer.track import as_utc, build_activity, is_valid_coordinate, name_from_filename

logger = logging.getLogger(__name__)

_XML_DECLARATION = re.compile(rb"^\s*<\?xml[^>]*\?>")
_DECLARED_ENCODING = re.compile(rb"encoding\s*=\s*[\"']([A-Za-z0-9._-]+)[\"']")

# Local tag names used by Garmin TrackPointExtension and similar schemas
_EXTENSION_FIELDS = {
    "hr": "heart_rate",
    "heartrate": "heart_rate",
    "cad": "cadence",
    "cadence": "cadence",
    "power": "power",
    "watts": "power",
    "atemp": "temperature",
    "temp": "temperature",
}


def _local_name(tag) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1].lower()


def _read_extensions(extensions) -> dict[str, float]:
    """Pull sensor values out of a point's <extensions> elements."""
    values: dict[str, float] = {}
    for element in extensions or []:
        for node in element.iter():
            field = _EXTENSION_FIELDS.get(_local_name(node.tag))
            if field is None or field in values or node.text is None:
                continue
            try:
                values[field] = float(node.text.strip())
            except ValueError:
                continue
    return values


def _decode(data: bytes) -> str:
    """Decode a GPX payload using its BOM or XML declaration, else UTF-8.

    The declaration is removed from the returned text since it no longer
    describes a str.
    """
    if data.startswith(codecs.BOM_UTF8):
        encoding = "utf-8-sig"
    else:
        encoding = "utf-8"
        declaration = _XML_DECLARATION.match(data)
        if declaration:
            declared = _DECLARED_ENCODING.search(declaration.group(0))
            if declared:
                encoding = declared.group(1).decode("ascii")
            data = data[declaration.end():]
    try:
        return data.decode(encoding)
    except (LookupError, UnicodeDecodeError) as exc:
        raise MalformedDocumentError(f"GPX data could not be decoded as {encoding}: {exc}") from exc


def _line_geometries(gpx: gpxpy.gpx.GPX):
    """Yield (name, points) for every track segment, then every route."""
    for track in gpx.tracks:
        for segment in track.segments:
            yield track.name, segment.points
    for route in gpx.routes:
        yield route.name, route.points


def parse_gpx(data: str | bytes, filename: str | None = None) -> Activity:
    """Parse a GPX document into an Activity.

    All track segments and routes are concatenated in document order. Points
    with invalid coordinates are dropped.

    Raises:
        MalformedDocumentError: If the document is not valid GPX/XML.
        NoTrackDataError: If no usable points remain.
    """
    if isinstance(data, bytes):
        data = _decode(data)

    try:
        gpx = gpxpy.parse(data)
    except gpxpy.gpx.GPXException as exc:
        raise MalformedDocumentError(f"Failed to parse GPX data: {exc}") from exc

    points: list[Point] = []
    geometry_name = None
    dropped = 0
    for line_name, line_points in _line_geometries(gpx):
        if geometry_name is None and line_name:
            geometry_name = line_name
        for pt in line_points:
            if not is_valid_coordinate(pt.latitude, pt.longitude):
                dropped += 1
                continue
            sensors = _read_extensions(getattr(pt, "extensions", None))
            points.append(
                Point(
                    lat=pt.latitude,
                    lon=pt.longitude,
                    elevation=pt.elevation,
                    time=as_utc(pt.time),
                    heart_rate=sensors.get("heart_rate"),
                    cadence=sensors.get("cadence"),
                    power=sensors.get("power"),
                    temperature=sensors.get("temperature"),
                )
            )

    if dropped:
        logger.debug("Dropped %d GPX points with invalid coordinates", dropped)

    name = gpx.name or geometry_name or name_from_filename(filename)
    date = as_utc(gpx.time)
    if date is None:
        date = next((pt.time for pt in points if pt.time is not None), None)

    return build_activity(points, name=name, date=date, source_format="gpx")
