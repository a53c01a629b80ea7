"""Pick a parser for an activity file by its extension."""

from pathlib import Path
from typing import Callable

from activity_analyzer.errors import UnsupportedFormatError
from activity_analyzer.fit_parser import parse_fit
from activity_analyzer.gpx_parser import parse_gpx
from activity_analyzer.models import Activity
from activity_analyzer.tcx_parser import parse_tcx

PARSERS: dict[str, Callable[..., Activity]] = {
    "gpx": parse_gpx,
    "fit": parse_fit,
    "tcx": parse_tcx,
}


def parse_bytes(data: bytes, fmt: str, filename: str | None = None) -> Activity:
    """Parse an already-read payload with the parser registered for fmt.

    Raises:
        UnsupportedFormatError: If fmt is not one of gpx, fit or tcx.
    """
    parser = PARSERS.get(fmt.lower().lstrip("."))
    if parser is None:
        raise UnsupportedFormatError(f"Unsupported activity format: {fmt}")
    return parser(data, filename=filename)


def parse_file(filepath: str | Path) -> Activity:
    """Read an activity file and parse it according to its extension."""
    path = Path(filepath)
    fmt = path.suffix.lower().lstrip(".")
    if fmt not in PARSERS:
        raise UnsupportedFormatError(f"Unsupported activity file type: {path.name}")
    return parse_bytes(path.read_bytes(), fmt, filename=path.name)
