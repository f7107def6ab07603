"""
Exception hierarchy for raster-codecs

Distinguishes between:
- FormatError: malformed or inconsistent file content (open failures)
- ConfigError: invalid or contradictory creation options, raised before
  any byte of the output is written
- UserCancelled: a progress callback asked to abort a write

Underlying stream failures are left as the built-in OSError so callers can
handle them the same way as any other file I/O problem.
"""


class RasterCodecError(Exception):
    """Base class for all codec failures."""

    pass


class FormatError(RasterCodecError):
    """
    Raised when a file header is malformed or inconsistent.

    Examples:
        - header shorter than the mandatory size
        - feature flags outside the allowed sentinel values
        - raster dimensions that are non-positive or overflow a row size
    """

    pass


class ConfigError(RasterCodecError):
    """
    Raised when write options are invalid or cannot be resolved.

    Examples:
        - unsupported band count
        - unit option with no matching code
        - latitude neither supplied nor derivable from the source
    """

    pass


class UserCancelled(RasterCodecError):
    """
    Raised when the progress callback requests an abort.

    Partial output may remain on disk; the caller owns the cleanup.
    """

    pass
