"""Activity Analyzer - turn GPX, FIT and TCX recordings into analysis-ready tracks."""

from activity_analyzer.analyzer import process_activity
from activity_analyzer.config import load_config, params_from_config
from activity_analyzer.errors import (
    ActivityParseError,
    IntegrityError,
    MalformedDocumentError,
    NoTrackDataError,
    UnsupportedFormatError,
)
from activity_analyzer.parser import parse_bytes, parse_file

__version_date__ = "2026-10-19"

__all__ = [
    "ActivityParseError",
    "IntegrityError",
    "MalformedDocumentError",
    "NoTrackDataError",
    "UnsupportedFormatError",
    "load_config",
    "parse_bytes",
    "parse_file",
    "params_from_config",
    "process_activity",
]
