from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np

from eeg_chanlocs.errors import ConfigError
from eeg_chanlocs.models.records import ChannelRecord, is_number


def select_channels(
    records: Sequence[ChannelRecord],
    elecind: Optional[Sequence[int]],
) -> Tuple[ChannelRecord, ...]:
    """Keep the requested 1-based channels, in the requested order."""
    if not elecind:
        return tuple(records)
    n = len(records)
    bad = [int(i) for i in elecind if not 1 <= int(i) <= n]
    if bad:
        raise ConfigError(f"channel indices out of range 1..{n}: {bad}")
    return tuple(records[int(i) - 1] for i in elecind)


def project_outputs(
    records: Sequence[ChannelRecord],
) -> Tuple[Tuple[str, ...], np.ndarray, np.ndarray, np.ndarray]:
    """
    Derived outputs aligned with *records*.

    Returns
    -------
    labels : tuple of str
    theta, radius : np.ndarray
        Real values only where both theta and X are non-empty, NaN elsewhere
        (for both vectors, even if one value exists).
    indices : np.ndarray
        Ascending 0-based positions meeting that joint condition.
    """
    n = len(records)
    labels = tuple("" if rec.labels is None else str(rec.labels) for rec in records)
    theta = np.full(n, np.nan, dtype=np.float64)
    radius = np.full(n, np.nan, dtype=np.float64)
    good = []
    for i, rec in enumerate(records):
        if not (rec.has("theta") and rec.has("X")) or not is_number(rec.theta):
            continue
        good.append(i)
        theta[i] = float(rec.theta)
        if is_number(rec.radius):
            radius[i] = float(rec.radius)
    return labels, theta, radius, np.asarray(good, dtype=np.intp)
