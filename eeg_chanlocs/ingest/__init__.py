"""Ingest package - format detection, column parsing and delegated readers.

This package handles:
- Resolving the effective file format (custom layout, explicit tag, extension)
- Loading whitespace/tab-delimited text into cell tables
- Column-literal parsing into ChannelRecord objects (sign flips, header self-healing)
- Delegated readers for formats that are not column-literal (mat, lay, ...)

Key entry points:
- read_locs / LocsReader: full import pipeline returning ChannelLocations
- register_reader: plug in external readers (polhemus, elc, asc, dat)
"""
from .readers import LocsFileReader, get_reader, register_reader
from .readlocs import LocsReader, ReadLocsConfig, read_locs

__all__ = [
    "LocsFileReader",
    "get_reader",
    "register_reader",
    "LocsReader",
    "ReadLocsConfig",
    "read_locs",
]
