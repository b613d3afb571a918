"""
Delegated readers for formats that are not column-literal.

Readers are registered per format tag and looked up by the import
orchestrator; the engine does not inspect their internals. Each reader returns
``(records, notices)`` and the engine then runs the usual normalization.

Built-in readers
----------------
mat : Brainstorm channel files and FieldTrip layout structs (scipy.io.loadmat).
lay : FieldTrip text layouts.

Digitizer (polhemus), scanned 3-D (elc) and Neuroscan (asc, dat) readers are
not shipped; register them with :func:`register_reader`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from scipy.io import loadmat

from eeg_chanlocs.errors import ReaderUnavailableError
from eeg_chanlocs.models.formats import FormatTag
from eeg_chanlocs.models.records import ChannelRecord


logger = logging.getLogger(__name__)

ReaderOutput = Tuple[List[ChannelRecord], List[str]]

LAYOUT_NOTICE = (
    "WARNING: 2-D layout file; do not use these channel coordinates for source localization"
)


class LocsFileReader(ABC):
    """Reads one delegated format into channel records."""

    @abstractmethod
    def read(self, path: Path) -> ReaderOutput:
        """
        Parse *path*.

        Returns
        -------
        records : list of ChannelRecord
        notices : list of str
        """
        ...


_readers: Dict[FormatTag, LocsFileReader] = {}


def register_reader(tag: Union[str, FormatTag]):
    """Class decorator registering a reader instance for *tag* (replaces any previous one)."""
    key = FormatTag(tag)

    def decorator(cls):
        _readers[key] = cls()
        return cls

    return decorator


def unregister_reader(tag: Union[str, FormatTag]) -> Optional[LocsFileReader]:
    return _readers.pop(FormatTag(tag), None)


def get_reader(tag: Union[str, FormatTag]) -> LocsFileReader:
    try:
        return _readers[FormatTag(tag)]
    except KeyError as err:
        raise ReaderUnavailableError(f"No reader registered for '{FormatTag(tag).value}' files") from err


# ---------------------------------------------------------------------------
# FieldTrip layouts
# ---------------------------------------------------------------------------


def layout_to_polar(pos: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """2-D layout positions -> (theta, radius); theta measured from +y toward +x."""
    pos = np.asarray(pos, dtype=np.float64).reshape(-1, 2)
    x = pos[:, 0]
    y = pos[:, 1]
    return np.rad2deg(np.arctan2(x, y)), np.hypot(x, y)


def rescale_layout_pixels(pos: np.ndarray) -> np.ndarray:
    """Bring pixel-unit layouts back to head units."""
    pos = np.asarray(pos, dtype=np.float64)
    if np.any(pos[:, 0] > 700):
        return (pos - 400.0) / 800.0
    if np.any(pos[:, 0] > 400):
        return (pos - 250.0) / 500.0
    return pos


def _layout_records(labels: Sequence[Any], pos: np.ndarray) -> List[ChannelRecord]:
    theta, radius = layout_to_polar(pos)
    return [
        ChannelRecord(labels=_text(lab), theta=float(t), radius=float(r))
        for lab, t, r in zip(labels, theta, radius)
    ]


def _text(value: Any) -> str:
    if isinstance(value, np.ndarray):
        value = value.item() if value.size == 1 else "".join(map(str, value.ravel()))
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    return str(value).strip()


@register_reader(FormatTag.LAY)
class LayoutTextReader(LocsFileReader):
    """
    FieldTrip text layout: one line per channel, ``num x y width height label``.

    Rows with fewer than 6 columns take the label from the first column.
    """

    def read(self, path: Path) -> ReaderOutput:
        df = pd.read_csv(path, sep=r"\s+", header=None, engine="python", dtype=object)
        if df.shape[1] < 3:
            raise ValueError(f"{Path(path).name}: layout needs at least 3 columns, got {df.shape[1]}")
        pos = df.iloc[:, 1:3].to_numpy(dtype=np.float64)
        label_col = 5 if df.shape[1] >= 6 else 0
        labels = df.iloc[:, label_col].tolist()
        return _layout_records(labels, pos), [LAYOUT_NOTICE]


# ---------------------------------------------------------------------------
# Matlab files
# ---------------------------------------------------------------------------


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, np.ndarray):
        return list(value.ravel())
    return [value]


def _loc3(loc: Any) -> Tuple[float, float, float]:
    arr = np.asarray(loc, dtype=np.float64)
    if arr.ndim == 2:
        # Brainstorm stores one 3-D point per column
        arr = arr[:, 0] if arr.shape[0] == 3 else arr[0, :]
    arr = arr.ravel()
    if arr.size < 3:
        return (float("nan"),) * 3
    return float(arr[0]), float(arr[1]), float(arr[2])


@register_reader(FormatTag.MAT)
class MatFileReader(LocsFileReader):
    """
    Matlab channel files.

    - Brainstorm: ``Channel`` struct array (Name, Loc, Type); fiducials from an
      optional ``SCS`` struct (NAS, LPA, RPA) are appended as extra channels.
    - FieldTrip: ``lay`` (or ``layout``) struct with ``pos`` and ``label``.
    """

    _FIDUCIALS = ("NAS", "LPA", "RPA")

    def read(self, path: Path) -> ReaderOutput:
        content = loadmat(str(path), squeeze_me=True, struct_as_record=False)
        if "Channel" in content:
            return self._read_brainstorm(content), []
        lay = content.get("lay", content.get("layout"))
        if lay is None:
            raise ValueError(f"{Path(path).name}: neither 'Channel' nor 'lay'/'layout' found")
        pos = rescale_layout_pixels(np.asarray(lay.pos, dtype=np.float64).reshape(-1, 2))
        return _layout_records(_as_list(lay.label), pos), [LAYOUT_NOTICE]

    def _read_brainstorm(self, content: Dict[str, Any]) -> List[ChannelRecord]:
        records: List[ChannelRecord] = []
        for ch in _as_list(content["Channel"]):
            x, y, z = _loc3(ch.Loc)
            kind = getattr(ch, "Type", None)
            records.append(ChannelRecord(
                labels=_text(ch.Name), X=x, Y=y, Z=z,
                type=_text(kind) if kind is not None else None,
            ))
        scs = content.get("SCS")
        if scs is not None:
            for name in self._FIDUCIALS:
                if hasattr(scs, name):
                    x, y, z = _loc3(getattr(scs, name))
                    records.append(ChannelRecord(labels=name, X=x, Y=y, Z=z))
        return records
