"""Tests for the normalization priority and BESA legacy repair."""

from __future__ import annotations

from typing import List

import pytest

from eeg_chanlocs.analysis.convert import CONVERSIONS
from eeg_chanlocs.analysis.normalize import normalize_coordinates, repair_besa_legacy
from eeg_chanlocs.models.records import ChannelRecord


_BESA_FIELDS = frozenset({"type", "labels", "sph_theta_besa", "sph_phi_besa", "sph_radius"})


def test_besa_path_wins_and_clears_fields() -> None:
    warnings: List[str] = []
    records = [
        ChannelRecord(type="EEG", labels="Fp1", sph_theta_besa=-92.0, sph_phi_besa=-72.0, sph_radius=1.0),
        # Cartesian values are overwritten by the BESA path
        ChannelRecord(type="EEG", labels="C3", sph_theta_besa=-46.0, sph_phi_besa=0.0, sph_radius=1.0, X=9.0),
    ]
    fp1, c3 = normalize_coordinates(records, declared=_BESA_FIELDS, warnings=warnings)
    assert fp1.theta == pytest.approx(-18.0)
    assert fp1.radius == pytest.approx(92 / 180)
    assert c3.theta == pytest.approx(-90.0)
    assert c3.X == pytest.approx(0.0, abs=1e-12)
    assert fp1.sph_theta_besa is None
    assert fp1.sph_phi_besa is None
    assert any("BESA fields removed" in w for w in warnings)


def test_besa_legacy_theta_phi() -> None:
    warnings: List[str] = []
    # ( Theta | Phi ) file read through the 5-column BESA layout
    (rec,) = normalize_coordinates(
        [ChannelRecord(type=-92.0, labels=-72.0)],
        declared=_BESA_FIELDS,
        warnings=warnings,
    )
    assert rec.theta == pytest.approx(-18.0)
    assert rec.labels is None
    assert rec.type is None
    assert rec.sph_radius == pytest.approx(1.0)
    assert "BESA format detected ( Theta | Phi )" in warnings


def test_besa_legacy_elec_theta_phi() -> None:
    warnings: List[str] = []
    (rec,) = repair_besa_legacy(
        [ChannelRecord(type="Fp1", labels=-92.0, sph_theta_besa=-72.0)],
        _BESA_FIELDS,
        warnings,
    )
    assert rec.labels == "Fp1"
    assert rec.type is None
    assert rec.sph_theta_besa == -92.0
    assert rec.sph_phi_besa == -72.0
    assert rec.sph_radius == 1.0
    assert "BESA format detected ( Elec | Theta | Phi )" in warnings


def test_besa_regular_file_not_repaired() -> None:
    warnings: List[str] = []
    records = [ChannelRecord(type="EEG", labels="Fp1", sph_theta_besa=-92.0, sph_phi_besa=-72.0)]
    assert repair_besa_legacy(records, _BESA_FIELDS, warnings) == records
    assert warnings == []


def test_spherical_path() -> None:
    warnings: List[str] = []
    (rec,) = normalize_coordinates(
        [ChannelRecord(sph_theta=18.0, sph_phi=-2.0, theta=99.0, radius=0.1)],
        declared=frozenset({"sph_theta", "sph_phi", "theta", "radius"}),
        warnings=warnings,
    )
    assert rec.theta == pytest.approx(-18.0)
    assert rec.radius == pytest.approx(0.5 + 2 / 180)


def test_empty_spherical_column_falls_through() -> None:
    warnings: List[str] = []
    (rec,) = normalize_coordinates(
        [ChannelRecord(theta=0.0, radius=0.5)],
        declared=frozenset({"sph_theta", "theta", "radius"}),
        warnings=warnings,
    )
    assert rec.X == pytest.approx(1.0)


def test_cartesian_path() -> None:
    warnings: List[str] = []
    (rec,) = normalize_coordinates(
        [ChannelRecord(labels="Fpz", X=1.0, Y=0.0, Z=0.0)],
        declared=frozenset({"labels", "X", "Y", "Z"}),
        warnings=warnings,
    )
    assert rec.theta == pytest.approx(0.0)
    assert rec.radius == pytest.approx(0.5)
    assert warnings == []


def test_polar_path() -> None:
    warnings: List[str] = []
    (rec,) = normalize_coordinates([ChannelRecord(theta=90.0, radius=0.5)], warnings=warnings)
    assert rec.Y == pytest.approx(-1.0)
    assert rec.sph_theta == pytest.approx(-90.0)


def test_non_numeric_cell_only_skips_its_channel() -> None:
    warnings: List[str] = []
    records = [
        ChannelRecord(labels="Fpz", X=1.0, Y=0.0, Z=0.0),
        ChannelRecord(labels="Cz", X="n/a", Y="n/a", Z="n/a"),
    ]
    fpz, cz = normalize_coordinates(records, declared=frozenset({"labels", "X", "Y", "Z"}), warnings=warnings)
    assert fpz.theta == pytest.approx(0.0)
    assert fpz.radius == pytest.approx(0.5)
    assert cz.theta is None
    assert any(w.startswith("WARNING: non-numeric coordinates, channels [2]") for w in warnings)


def test_failed_conversion_keeps_records(monkeypatch) -> None:
    def broken(records):
        raise ValueError("singular input")

    monkeypatch.setitem(CONVERSIONS, "topo2all", broken)
    warnings: List[str] = []
    records = [ChannelRecord(labels="Fp1", theta=0.0, radius=0.5)]
    out = normalize_coordinates(records, declared=frozenset({"theta", "radius"}), warnings=warnings)
    assert out == records
    assert out[0].X is None
    assert any(w.startswith("WARNING: coordinate conversion failed (topo2all") for w in warnings)
