"""
FIT parser: converts Garmin .fit binary containers into an Activity.

The container is decoded with fitparse, CRC checking enabled, so a corrupt
or truncated file is rejected before any record is read. Messages are then
grouped by name and three groups are used:

  session  → activity totals and start time (positive totals are preferred
             over recomputation)
  sport    → activity name fallback
  record   → one Point per message

Record fields have been written under several spellings by different
devices and SDK versions, so each Point field is resolved from an ordered
table of (candidate name, converter) pairs; the first candidate holding a
non-null value wins.
"""

import io
import logging
import math
from typing import Any, Callable

import fitparse
from fitparse.utils import FitCRCError, FitEOFError, FitHeaderError, FitParseError

from activity_analyzer.errors import IntegrityError, MalformedDocumentError
from activity_analyzer.models import Activity, Point
from activity_analyzer.track import as_utc, build_activity, is_valid_coordinate, name_from_filename

logger = logging.getLogger(__name__)

# Garmin stores lat/lon as 32-bit signed integers in "semicircles"
# Degrees = semicircles * (180 / 2^31)
_SEMICIRCLE_TO_DEGREES = 180.0 / (2**31)

Messages = dict[str, list[dict[str, Any]]]
FieldCandidates = tuple[tuple[str, Callable[[Any], Any]], ...]


def semicircles_to_degrees(semicircles: float | None) -> float:
    """Convert a semicircle angle to degrees; missing values become NaN."""
    if semicircles is None:
        return math.nan
    return float(semicircles) * _SEMICIRCLE_TO_DEGREES


RECORD_FIELDS: dict[str, FieldCandidates] = {
    "lat": (
        ("position_lat", semicircles_to_degrees),
        ("positionLat", semicircles_to_degrees),
        ("enhanced_latitude", semicircles_to_degrees),
    ),
    "lon": (
        ("position_long", semicircles_to_degrees),
        ("positionLong", semicircles_to_degrees),
        ("enhanced_longitude", semicircles_to_degrees),
    ),
    "elevation": (
        ("altitude", float),
        ("enhanced_altitude", float),
        ("enhancedAltitude", float),
    ),
    # fitparse returns naive datetimes in UTC
    "time": (("timestamp", as_utc),),
    "heart_rate": (
        ("heart_rate", float),
        ("heartRate", float),
    ),
    "cadence": (("cadence", float),),
    "power": (("power", float),),
    "temperature": (("temperature", float),),
}

# Session totals, keyed by the build_activity name they feed
SESSION_FIELDS: dict[str, FieldCandidates] = {
    "total_distance": (("total_distance", float),),
    "total_elevation_gain": (("total_ascent", float),),
    "total_time": (
        ("total_elapsed_time", float),
        ("total_timer_time", float),
    ),
    "average_hr": (("avg_heart_rate", float),),
    "max_hr": (("max_heart_rate", float),),
}


def resolve_field(values: dict[str, Any], candidates: FieldCandidates) -> Any:
    """Return the converted value of the first candidate present and non-null."""
    for name, convert in candidates:
        raw = values.get(name)
        if raw is not None:
            return convert(raw)
    return None


def session_total(values: dict[str, Any], candidates: FieldCandidates) -> float | None:
    """Return the first candidate holding a positive total.

    Devices write 0 for totals they did not track, so zero counts as absent
    and the total is recomputed from the records instead.
    """
    for name, convert in candidates:
        raw = values.get(name)
        if raw is None:
            continue
        value = convert(raw)
        if value > 0:
            return value
    return None


def decode_messages(data: bytes) -> Messages:
    """Decode a FIT container into lists of field dicts grouped by message name.

    Raises:
        IntegrityError: If the header, CRC or declared length do not check out.
        MalformedDocumentError: If decoding fails for any other reason.
    """
    try:
        fit = fitparse.FitFile(io.BytesIO(data), check_crc=True)
        fit.parse()
    except (FitHeaderError, FitCRCError, FitEOFError) as exc:
        raise IntegrityError(f"FIT file integrity check failed: {exc}") from exc
    except FitParseError as exc:
        raise MalformedDocumentError(f"Failed to decode FIT data: {exc}") from exc

    messages: Messages = {}
    for message in fit.get_messages():
        if message.name is None:
            continue
        messages.setdefault(message.name, []).append(message.get_values())
    return messages


def _activity_name(session: dict[str, Any] | None, messages: Messages, filename: str | None) -> str:
    # Unknown sport enums come back from fitparse as plain ints
    if session and isinstance(session.get("sport"), str) and session["sport"]:
        sport = session["sport"].replace("_", " ").title()
        return f"{sport} Activity"
    for sport in messages.get("sport", [])[:1]:
        if sport.get("name"):
            return str(sport["name"])
        if isinstance(sport.get("sport"), str) and sport["sport"]:
            return sport["sport"]
    return name_from_filename(filename)


def activity_from_messages(messages: Messages, filename: str | None = None) -> Activity:
    """Build an Activity from decoded FIT message groups.

    Raises:
        NoTrackDataError: If no record carries a usable position.
    """
    sessions = messages.get("session", [])
    session = sessions[0] if sessions else None

    points: list[Point] = []
    for values in messages.get("record", []):
        fields = {name: resolve_field(values, candidates) for name, candidates in RECORD_FIELDS.items()}
        if not is_valid_coordinate(fields["lat"], fields["lon"]):
            continue
        points.append(Point(**fields))

    logger.debug(
        "FIT records: %d total, %d with position",
        len(messages.get("record", [])),
        len(points),
    )

    declared = {}
    date = None
    if session is not None:
        declared = {name: session_total(session, candidates) for name, candidates in SESSION_FIELDS.items()}
        date = as_utc(session.get("start_time"))

    return build_activity(
        points,
        name=_activity_name(session, messages, filename),
        date=date,
        source_format="fit",
        declared=declared,
    )


def parse_fit(data: bytes, filename: str | None = None) -> Activity:
    """Parse a FIT container into an Activity.

    Raises:
        IntegrityError: If the container fails its integrity check.
        MalformedDocumentError: If the container cannot be decoded.
        NoTrackDataError: If no usable points remain.
    """
    return activity_from_messages(decode_messages(data), filename)
