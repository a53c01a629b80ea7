"""Exceptions raised while turning raw activity files into an Activity."""


class ActivityParseError(ValueError):
    """Base class for every failure to produce an Activity from a document."""


class NoTrackDataError(ActivityParseError):
    """The document parsed but yielded no usable track points."""


class IntegrityError(ActivityParseError):
    """A FIT container failed its header, CRC or length check."""


class MalformedDocumentError(ActivityParseError):
    """The document could not be decoded or parsed at all."""


class UnsupportedFormatError(ValueError):
    """No adapter is registered for the given file type."""
