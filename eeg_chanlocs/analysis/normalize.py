"""Choose and drive the coordinate normalization path.

Priority (first match wins):
  1. BESA spherical fields present (with legacy field-order repair).
  2. Matlab spherical fields present with at least one value.
  3. Cartesian fields present.
  4. Polar fields (or nothing).

A failing conversion is reported as a warning and leaves the records as they
were before that conversion.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import AbstractSet, List, Sequence, Tuple

from eeg_chanlocs.analysis.convert import CONVERSION_INPUTS, CONVERSIONS
from eeg_chanlocs.models.records import ChannelRecord, is_number


logger = logging.getLogger(__name__)


def _present(records: Sequence[ChannelRecord], declared: AbstractSet[str], name: str) -> bool:
    return name in declared or any(rec.has(name) for rec in records)


def try_convert(
    command: str,
    records: Sequence[ChannelRecord],
    warnings: List[str],
) -> Tuple[List[ChannelRecord], bool]:
    """Run one conversion; on failure keep *records* and append a warning.

    Channels with text in an input field are skipped by the conversion and
    listed in a warning.
    """
    skipped = [
        i + 1
        for i, rec in enumerate(records)
        if any(rec.has(n) and not is_number(getattr(rec, n)) for n in CONVERSION_INPUTS[command])
    ]
    if skipped:
        msg = f"WARNING: non-numeric coordinates, channels {skipped} not converted ({command})"
        logger.warning(msg)
        warnings.append(msg)
    try:
        return CONVERSIONS[command](records), True
    except (ValueError, TypeError) as e:
        msg = f"WARNING: coordinate conversion failed ({command}: {e})"
        logger.warning(msg)
        warnings.append(msg)
        return list(records), False


def repair_besa_legacy(
    records: Sequence[ChannelRecord],
    declared: AbstractSet[str],
    warnings: List[str],
) -> List[ChannelRecord]:
    """Reshuffle older BESA layouts detected by a number where text is expected.

    - numeric 'type' slot: ( Theta | Phi ) files, labels are dropped.
    - numeric 'labels' slot: ( Elec | Theta | Phi ) files.
    Spherical radius defaults to 1 in both cases.
    """
    if not records:
        return list(records)
    out = list(records)

    if "type" in declared and is_number(out[0].type):
        msg = "BESA format detected ( Theta | Phi )"
        logger.info(msg)
        warnings.append(msg)
        out = [
            replace(
                rec,
                sph_theta_besa=rec.type,
                sph_phi_besa=rec.labels,
                labels=None,
                type=None,
                sph_radius=rec.sph_radius if rec.has("sph_radius") else 1.0,
            )
            for rec in out
        ]
    elif is_number(out[0].labels):
        msg = "BESA format detected ( Elec | Theta | Phi )"
        logger.info(msg)
        warnings.append(msg)
        out = [
            replace(
                rec,
                sph_phi_besa=rec.sph_theta_besa,
                sph_theta_besa=rec.labels,
                labels=rec.type,
                type=None,
                sph_radius=rec.sph_radius if rec.has("sph_radius") else 1.0,
            )
            for rec in out
        ]
    return out


def normalize_coordinates(
    records: Sequence[ChannelRecord],
    *,
    declared: AbstractSet[str] = frozenset(),
    warnings: List[str],
) -> List[ChannelRecord]:
    """
    Populate every coordinate family from the primary one.

    Parameters
    ----------
    records : sequence of ChannelRecord
    declared : set of str
        Fields assigned from a file column, even if all cells were empty.
    warnings : list of str
        Receives notices (mutated in place).

    Returns
    -------
    list of ChannelRecord
        New list; BESA fields are cleared when the BESA path was taken.
    """
    recs = list(records)

    if _present(recs, declared, "sph_theta_besa"):
        recs = repair_besa_legacy(recs, declared, warnings)
        recs, _ = try_convert("sphbesa2all", recs, warnings)
        # also repairs some EGI files that land here
        recs, _ = try_convert("topo2all", recs, warnings)
        msg = "BESA spherical coords. converted, BESA fields removed"
        logger.info(msg)
        warnings.append(msg)
        return [replace(rec, sph_theta_besa=None, sph_phi_besa=None) for rec in recs]

    if any(rec.has("sph_theta") for rec in recs):
        recs, _ = try_convert("sph2all", recs, warnings)
    elif _present(recs, declared, "X"):
        recs, _ = try_convert("cart2all", recs, warnings)
    else:
        recs, _ = try_convert("topo2all", recs, warnings)
    return recs
