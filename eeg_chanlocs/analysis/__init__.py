"""Coordinate normalization and post-processing of imported channel records.

Design principle:
  - Ingest produces raw :class:`~eeg_chanlocs.models.records.ChannelRecord` lists.
  - Analysis fills every coordinate family from the primary one, repairs labels,
    resequences channels and builds the derived output vectors.

Conversion failures never abort an import; they are reported as warnings.
"""

from .convert import cart2all, sph2all, sphbesa2all, topo2all
from .normalize import normalize_coordinates
from .postprocess import FIDUCIAL_NAMES, postprocess
from .project import project_outputs, select_channels

__all__ = [
    "cart2all",
    "sph2all",
    "sphbesa2all",
    "topo2all",
    "normalize_coordinates",
    "FIDUCIAL_NAMES",
    "postprocess",
    "project_outputs",
    "select_channels",
]
