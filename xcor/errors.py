"""Error types raised while reading traces and correlating them."""


class XcorError(Exception):
    """Base class for every failure that aborts a correlation run."""


class InvalidIntegerError(XcorError):
    """A text token is not a canonical unsigned decimal integer."""


class FileOpenError(XcorError):
    """A trace file cannot be opened for reading."""


class EmptyInputError(XcorError):
    """An empty sequence was given where at least one value is required."""


class DegenerateStatisticsError(XcorError):
    """Too few samples to compute a sample variance."""
