"""Label repair, channel resequencing and fiducial tagging."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import AbstractSet, FrozenSet, List, Sequence

from eeg_chanlocs.errors import ConfigError
from eeg_chanlocs.models.records import ChannelRecord, is_number


logger = logging.getLogger(__name__)

FIDUCIAL_NAMES: FrozenSet[str] = frozenset({
    "nz", "lpa", "rpa", "nasion", "left", "right", "nazion", "fidnz",
    "fidt9", "fidt10", "cms", "drl", "nas", "lht", "rht", "lhj", "rhj",
})


def label_text(value) -> str:
    """Text form of a label cell (numbers rendered without a trailing '.0')."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if is_number(value):
        f = float(value)
        if f.is_integer():
            return str(int(f))
        return format(f, "g")
    return str(value)


def repair_labels(records: Sequence[ChannelRecord], warnings: List[str]) -> List[ChannelRecord]:
    """Synthesize E1..EN when no record has a label, else strip trailing dots."""
    recs = list(records)
    if not any(rec.has("labels") for rec in recs):
        msg = "inserting electrode labels automatically"
        logger.info(msg)
        warnings.append(msg)
        return [replace(rec, labels=f"E{i}") for i, rec in enumerate(recs, start=1)]
    return [
        replace(rec, labels=rec.labels.rstrip(".")) if isinstance(rec.labels, str) else rec
        for rec in recs
    ]


def resequence_channels(
    records: Sequence[ChannelRecord],
    warnings: List[str],
    *,
    declared: AbstractSet[str] = frozenset(),
) -> List[ChannelRecord]:
    """Stable-sort by channel number when not already ascending, then drop the field."""
    recs = list(records)
    if "channum" not in declared and not any(rec.has("channum") for rec in recs):
        return recs

    if not all(is_number(rec.channum) for rec in recs):
        raise ConfigError("Channel numbers must be numeric")

    channum = [float(rec.channum) for rec in recs]
    if any(b < a for a, b in zip(channum, channum[1:])):
        msg = "re-sorting channels based on 'channum' column indices"
        logger.info(msg)
        warnings.append(msg)
        order = sorted(range(len(recs)), key=lambda i: channum[i])
        recs = [recs[i] for i in order]
    return [replace(rec, channum=None) for rec in recs]


def finalize_labels(records: Sequence[ChannelRecord]) -> List[ChannelRecord]:
    return [
        rec if isinstance(rec.labels, str) else replace(rec, labels=label_text(rec.labels))
        for rec in records
    ]


def tag_fiducials(records: Sequence[ChannelRecord]) -> List[ChannelRecord]:
    """Exact, case-insensitive label match against FIDUCIAL_NAMES sets type 'FID'."""
    return [
        replace(rec, type="FID") if label_text(rec.labels).lower() in FIDUCIAL_NAMES else rec
        for rec in records
    ]


def postprocess(
    records: Sequence[ChannelRecord],
    *,
    declared: AbstractSet[str] = frozenset(),
    warnings: List[str],
) -> List[ChannelRecord]:
    recs = repair_labels(records, warnings)
    recs = resequence_channels(recs, warnings, declared=declared)
    return tag_fiducials(finalize_labels(recs))


def normalize_neuroscan_types(records: Sequence[ChannelRecord]) -> List[ChannelRecord]:
    """Neuroscan numeric type codes: 69 EEG, 88 REF, 76..82 FID, others as text."""
    out = []
    for rec in records:
        labels = rec.labels.strip() if isinstance(rec.labels, str) else rec.labels
        kind = rec.type
        if is_number(kind):
            code = float(kind)
            if code == 69:
                kind = "EEG"
            elif code == 88:
                kind = "REF"
            elif 76 <= code <= 82:
                kind = "FID"
            else:
                kind = label_text(code)
        out.append(replace(rec, labels=labels, type=kind))
    return out
