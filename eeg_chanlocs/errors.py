"""Error taxonomy for channel-location import.

Only the classes below terminate an import. Column-count mismatches and failed
coordinate conversions are reported as ``WARNING:`` notices on the result
instead of being raised.
"""

from __future__ import annotations


class ChanlocsError(Exception):
    """Base class for fatal import errors."""


class UsageError(ChanlocsError, ValueError):
    """No file or in-memory source was given, or the source type is unsupported."""


class ConfigError(ChanlocsError, ValueError):
    """The import cannot be configured (format, column roles, channel numbers, options)."""


class ReaderUnavailableError(ConfigError):
    """A format delegated to an external reader has no registered reader."""
