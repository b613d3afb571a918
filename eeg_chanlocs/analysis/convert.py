"""Coordinate conversions between polar, spherical, BESA-spherical and Cartesian.

Conventions
- polar (topo): theta in degrees from the nose, positive toward the right ear;
  radius is arc length with the head-disk edge (ear level) at 0.5.
- spherical (Matlab): sph_theta azimuth from +X toward +Y, sph_phi elevation
  above the XY plane, both in degrees.
- BESA spherical: sph_theta_besa is the angle from the vertex, positive on the
  right hemisphere; sph_phi_besa is the azimuth measured from the right-ear
  axis toward the nose.
- Cartesian: X toward nose, Y toward left ear, Z toward vertex.

The ``*2all`` functions return new records and only touch channels whose input
fields are all numbers; other channels (empty cells, BIDS "n/a") are left as they are.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Dict, List, Sequence, Tuple

import numpy as np

from eeg_chanlocs.models.records import ChannelRecord, is_number


Records = Sequence[ChannelRecord]


# ---------------------------------------------------------------------------
# Array primitives
# ---------------------------------------------------------------------------


def topo2sph(theta: np.ndarray, radius: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Polar (theta, radius) -> spherical (azimuth, elevation), degrees."""
    return -theta, (0.5 - radius) * 180.0


def sph2topo(sph_theta: np.ndarray, sph_phi: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Spherical (azimuth, elevation) -> polar (theta, radius)."""
    return -sph_theta, 0.5 - sph_phi / 180.0


def sph2cart(
    sph_theta: np.ndarray, sph_phi: np.ndarray, sph_radius: np.ndarray
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    az = np.deg2rad(sph_theta)
    el = np.deg2rad(sph_phi)
    x = sph_radius * np.cos(el) * np.cos(az)
    y = sph_radius * np.cos(el) * np.sin(az)
    z = sph_radius * np.sin(el)
    return x, y, z


def cart2sph(
    x: np.ndarray, y: np.ndarray, z: np.ndarray
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    az = np.rad2deg(np.arctan2(y, x))
    el = np.rad2deg(np.arctan2(z, np.hypot(x, y)))
    r = np.sqrt(x * x + y * y + z * z)
    return az, el, r


def wrap_degrees(angle: np.ndarray) -> np.ndarray:
    """Wrap to the half-open interval (-180, 180]."""
    out = np.mod(angle + 180.0, 360.0) - 180.0
    return np.where(out == -180.0, 180.0, out)


def besa2topo(theta_besa: np.ndarray, phi_besa: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """BESA spherical -> polar (theta, radius)."""
    radius = np.abs(theta_besa) / 180.0
    theta = np.where(theta_besa >= 0, 90.0 - phi_besa, 270.0 - phi_besa)
    return wrap_degrees(theta), radius


# ---------------------------------------------------------------------------
# Record-level conversions
# ---------------------------------------------------------------------------


def _select(records: Records, names: Sequence[str]) -> Tuple[List[int], List[np.ndarray]]:
    idx = [i for i, rec in enumerate(records) if all(is_number(getattr(rec, n)) for n in names)]
    cols = [np.asarray([getattr(records[i], n) for i in idx], dtype=np.float64) for n in names]
    return idx, cols


def _assign(records: Records, idx: Sequence[int], **values: np.ndarray) -> List[ChannelRecord]:
    out = list(records)
    for k, i in enumerate(idx):
        out[i] = replace(out[i], **{name: float(arr[k]) for name, arr in values.items()})
    return out


def _mean_sph_radius(records: Records, idx: Sequence[int]) -> float:
    radii = [records[i].sph_radius for i in idx if is_number(records[i].sph_radius)]
    if not radii:
        return 1.0
    return float(np.mean(np.asarray(radii, dtype=np.float64)))


def topo2all(records: Records) -> List[ChannelRecord]:
    """Polar -> spherical and Cartesian. Spherical radius is the mean existing one (or 1)."""
    idx, (theta, radius) = _select(records, ("theta", "radius"))
    if not idx:
        return list(records)
    sph_theta, sph_phi = topo2sph(theta, radius)
    sph_radius = np.full(len(idx), _mean_sph_radius(records, idx))
    x, y, z = sph2cart(sph_theta, sph_phi, sph_radius)
    return _assign(
        records, idx,
        sph_theta=sph_theta, sph_phi=sph_phi, sph_radius=sph_radius,
        X=x, Y=y, Z=z,
    )


def sph2all(records: Records) -> List[ChannelRecord]:
    """Spherical -> polar and Cartesian. Missing spherical radius defaults to 1."""
    idx, (sph_theta, sph_phi) = _select(records, ("sph_theta", "sph_phi"))
    if not idx:
        return list(records)
    sph_radius = np.asarray(
        [records[i].sph_radius if is_number(records[i].sph_radius) else 1.0 for i in idx],
        dtype=np.float64,
    )
    theta, radius = sph2topo(sph_theta, sph_phi)
    x, y, z = sph2cart(sph_theta, sph_phi, sph_radius)
    return _assign(
        records, idx,
        theta=theta, radius=radius, sph_radius=sph_radius,
        X=x, Y=y, Z=z,
    )


def cart2all(records: Records) -> List[ChannelRecord]:
    """Cartesian -> spherical and polar."""
    idx, (x, y, z) = _select(records, ("X", "Y", "Z"))
    if not idx:
        return list(records)
    sph_theta, sph_phi, sph_radius = cart2sph(x, y, z)
    theta, radius = sph2topo(sph_theta, sph_phi)
    return _assign(
        records, idx,
        sph_theta=sph_theta, sph_phi=sph_phi, sph_radius=sph_radius,
        theta=theta, radius=radius,
    )


def sphbesa2all(records: Records) -> List[ChannelRecord]:
    """BESA spherical -> polar, spherical and Cartesian."""
    idx, (theta_besa, phi_besa) = _select(records, ("sph_theta_besa", "sph_phi_besa"))
    if not idx:
        return list(records)
    theta, radius = besa2topo(theta_besa, phi_besa)
    sph_theta, sph_phi = topo2sph(theta, radius)
    sph_radius = np.asarray(
        [records[i].sph_radius if is_number(records[i].sph_radius) else 1.0 for i in idx],
        dtype=np.float64,
    )
    x, y, z = sph2cart(sph_theta, sph_phi, sph_radius)
    return _assign(
        records, idx,
        theta=theta, radius=radius,
        sph_theta=sph_theta, sph_phi=sph_phi, sph_radius=sph_radius,
        X=x, Y=y, Z=z,
    )


# input fields of each conversion
CONVERSION_INPUTS: Dict[str, Tuple[str, ...]] = {
    "topo2all": ("theta", "radius"),
    "sph2all": ("sph_theta", "sph_phi"),
    "cart2all": ("X", "Y", "Z"),
    "sphbesa2all": ("sph_theta_besa", "sph_phi_besa"),
}

CONVERSIONS: Dict[str, Callable[[Records], List[ChannelRecord]]] = {
    "topo2all": topo2all,
    "sph2all": sph2all,
    "cart2all": cart2all,
    "sphbesa2all": sphbesa2all,
}
