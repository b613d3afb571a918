from __future__ import annotations

from dataclasses import dataclass, fields
from numbers import Real
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from eeg_chanlocs.models.formats import FormatTag


# Raw cell values may be text or numbers until post-processing coerces labels.
Cell = Any


def is_empty(value: Any) -> bool:
    """Missing cell: None or empty text. NaN counts as a value."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    return False


def is_number(value: Any) -> bool:
    return isinstance(value, (Real, np.number)) and not isinstance(value, (bool, np.bool_))


@dataclass
class ChannelRecord:
    """
    One imported channel/electrode.

    Coordinate conventions:
      - theta/radius: polar angle in degrees and arc length (head disk radius 0.5).
      - X/Y/Z: Cartesian, X toward nose, Y toward left ear, Z toward vertex.
      - sph_theta/sph_phi/sph_radius: Matlab spherical (azimuth, elevation, radius).
      - sph_theta_besa/sph_phi_besa: BESA spherical; import-only, cleared after normalization.
      - channum: explicit channel number; import-only, cleared after resequencing.
    """
    labels: Cell = None
    channum: Cell = None
    theta: Cell = None
    radius: Cell = None
    X: Cell = None
    Y: Cell = None
    Z: Cell = None
    sph_theta: Cell = None
    sph_phi: Cell = None
    sph_radius: Cell = None
    sph_theta_besa: Cell = None
    sph_phi_besa: Cell = None
    type: Cell = None
    gain: Cell = None
    calib: Cell = None
    custom1: Cell = None
    custom2: Cell = None
    custom3: Cell = None
    custom4: Cell = None

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ChannelRecord":
        """Build a record from a chanlocs-like mapping; unknown keys (e.g. 'ignore') are dropped."""
        known = set(cls.field_names())
        return cls(**{k: v for k, v in data.items() if k in known})

    def has(self, name: str) -> bool:
        return not is_empty(getattr(self, name))

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in self.field_names()}


@dataclass(frozen=True)
class ChannelLocations:
    """
    Result of one import.

    Notes
    - theta/radius are aligned with chanlocs; a channel contributes real values only
      when it has both a polar angle and a Cartesian X, otherwise both are NaN.
    - indices are 0-based positions of the channels meeting that joint condition.
    - warnings holds all non-fatal notices; FormatWarnings are prefixed 'WARNING:'.
    """
    chanlocs: Tuple[ChannelRecord, ...]
    labels: Tuple[str, ...]
    theta: np.ndarray
    radius: np.ndarray
    indices: np.ndarray
    filetype: Optional[FormatTag] = None
    importmode: str = "eeglab"
    warnings: Tuple[str, ...] = ()
    source_path: Optional[Path] = None

    @property
    def n_channels(self) -> int:
        return len(self.chanlocs)

    def to_dataframe(self) -> pd.DataFrame:
        """One row per channel, one column per ChannelRecord field."""
        return pd.DataFrame(
            [rec.to_dict() for rec in self.chanlocs],
            columns=list(ChannelRecord.field_names()),
        )
