"""EEG Chanlocs -- import electrode/sensor locations into one normalized record model.

This package provides tools for:
- Resolving which of the supported location-file conventions applies
  (EEGLAB .loc/.ced, Matlab .xyz/.sph, BESA .elp/.eps/.sfp, BIDS .tsv,
  FieldTrip .txt/.lay, Brainstorm .mat, custom column layouts)
- Parsing column-oriented text into typed per-channel fields
- Normalizing polar, spherical, BESA-spherical and Cartesian coordinates
- Repairing labels, resequencing channels and tagging fiducials

Key principles:
- Best-effort recovery: conversion problems become warnings, not failures
- One output contract (ChannelLocations) whatever the input convention

Main subpackages:
- ingest: format detection, column parsing, delegated readers, import pipeline
- analysis: coordinate conversions, normalization, post-processing, projection
- models: format registry and record/result data models
- scripts: command-line entry point
"""

from .errors import ChanlocsError, ConfigError, ReaderUnavailableError, UsageError
from .ingest.readlocs import LocsReader, ReadLocsConfig, read_locs
from .models.formats import get_infos
from .models.records import ChannelLocations, ChannelRecord

__all__ = [
    "ChanlocsError",
    "ConfigError",
    "ReaderUnavailableError",
    "UsageError",
    "LocsReader",
    "ReadLocsConfig",
    "read_locs",
    "get_infos",
    "ChannelLocations",
    "ChannelRecord",
]
