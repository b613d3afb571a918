"""Tests for delegated readers and the reader registry."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import numpy as np
import pytest
from scipy.io import savemat

from eeg_chanlocs.errors import ConfigError, ReaderUnavailableError
from eeg_chanlocs.ingest.readers import (
    LAYOUT_NOTICE,
    LayoutTextReader,
    LocsFileReader,
    MatFileReader,
    get_reader,
    layout_to_polar,
    register_reader,
    rescale_layout_pixels,
    unregister_reader,
)
from eeg_chanlocs.ingest.readlocs import read_locs
from eeg_chanlocs.models.formats import FormatTag
from eeg_chanlocs.models.records import ChannelRecord


@pytest.fixture
def clean_registry() -> Iterator[None]:
    """Remove test readers for formats that ship without one."""
    yield
    for tag in (FormatTag.POLHEMUS, FormatTag.ASC, FormatTag.DAT, FormatTag.ELC):
        unregister_reader(tag)


# -----------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------


def test_builtin_readers() -> None:
    assert isinstance(get_reader("mat"), MatFileReader)
    assert isinstance(get_reader(FormatTag.LAY), LayoutTextReader)


def test_missing_reader() -> None:
    with pytest.raises(ReaderUnavailableError):
        get_reader(FormatTag.ELC)
    # ReaderUnavailableError is a configuration error
    with pytest.raises(ConfigError):
        get_reader("asc")


def test_elc_without_reader(tmp_path: Path) -> None:
    p = tmp_path / "cap.elc"
    p.write_text("NumberPositions= 1\n")
    with pytest.raises(ReaderUnavailableError):
        read_locs(p)


def test_registered_elc_reader(tmp_path: Path, clean_registry: None) -> None:
    @register_reader("elc")
    class _Elc(LocsFileReader):
        def read(self, path):
            return [ChannelRecord(labels="Fpz", X=1.0, Y=0.0, Z=0.0)], ["scanned positions"]

    p = tmp_path / "cap.elc"
    p.write_text("ignored by the fake reader\n")
    locs = read_locs(p)
    assert locs.labels == ("Fpz",)
    assert locs.theta[0] == pytest.approx(0.0)
    assert locs.radius[0] == pytest.approx(0.5)
    assert "scanned positions" in locs.warnings
    assert locs.filetype is FormatTag.ELC


def test_neuroscan_type_codes_applied(tmp_path: Path, clean_registry: None) -> None:
    @register_reader(FormatTag.ASC)
    class _Asc(LocsFileReader):
        def read(self, path):
            return [
                ChannelRecord(labels=" Fp1", theta=-18.0, radius=0.511, type=69.0),
                ChannelRecord(labels="REF ", theta=0.0, radius=0.0, type=88.0),
            ], []

    p = tmp_path / "cap.asc"
    p.write_text("binary layout\n")
    locs = read_locs(p)
    assert locs.labels == ("Fp1", "REF")
    assert [rec.type for rec in locs.chanlocs] == ["EEG", "REF"]
    assert locs.chanlocs[0].X is not None


# -----------------------------------------------------------------------
# Polhemus
# -----------------------------------------------------------------------


def test_polhemus_reader_and_y_variant(tmp_path: Path, clean_registry: None) -> None:
    @register_reader("polhemus")
    class _Polhemus(LocsFileReader):
        def read(self, path):
            return [ChannelRecord(labels="A", X=1.0, Y=2.0, Z=3.0)], []

    p = tmp_path / "cap.elp"
    p.write_text("digitizer output\n")
    assert read_locs(p).chanlocs[0].X == 1.0
    rec = read_locs(p, filetype="polhemusy").chanlocs[0]
    assert (rec.X, rec.Y, rec.Z) == (2.0, 1.0, 3.0)


def test_polhemus_failure_retries_as_besa(tmp_path: Path, clean_registry: None) -> None:
    @register_reader("polhemus")
    class _Broken(LocsFileReader):
        def read(self, path):
            raise ValueError("not a digitizer file")

    p = tmp_path / "cap.elp"
    p.write_text("EEG Fz 46 90\n")
    locs = read_locs(p)
    assert locs.filetype is FormatTag.BESA
    assert locs.labels == ("Fz",)
    assert locs.theta[0] == pytest.approx(0.0)
    assert any("not a digitizer file" in w for w in locs.warnings)


# -----------------------------------------------------------------------
# Layouts
# -----------------------------------------------------------------------


def test_layout_to_polar() -> None:
    theta, radius = layout_to_polar(np.array([[0.0, 0.5], [-0.5, 0.0], [0.5, 0.0]]))
    np.testing.assert_allclose(theta, [0.0, -90.0, 90.0])
    np.testing.assert_allclose(radius, [0.5, 0.5, 0.5])


def test_rescale_layout_pixels() -> None:
    pos = np.array([[800.0, 400.0]])
    np.testing.assert_allclose(rescale_layout_pixels(pos), [[0.5, 0.0]])
    pos = np.array([[500.0, 250.0]])
    np.testing.assert_allclose(rescale_layout_pixels(pos), [[0.5, 0.0]])
    pos = np.array([[0.1, 0.2]])
    np.testing.assert_allclose(rescale_layout_pixels(pos), pos)


def test_lay_file(tmp_path: Path) -> None:
    p = tmp_path / "cap.lay"
    p.write_text("1 0 0.5 0.1 0.1 Fz\n2 -0.5 0 0.1 0.1 T7\n")
    locs = read_locs(p)
    assert locs.labels == ("Fz", "T7")
    np.testing.assert_allclose(locs.theta, [0.0, -90.0], atol=1e-12)
    np.testing.assert_allclose(locs.radius, [0.5, 0.5])
    assert LAYOUT_NOTICE in locs.warnings
    assert locs.chanlocs[1].Y == pytest.approx(1.0)


def test_lay_file_short_rows(tmp_path: Path) -> None:
    p = tmp_path / "cap.lay"
    p.write_text("Cz 0 0\nOz 0 -0.5\n")
    records, notices = LayoutTextReader().read(p)
    assert [r.labels for r in records] == ["Cz", "Oz"]
    assert records[1].theta == pytest.approx(180.0)


# -----------------------------------------------------------------------
# Matlab files
# -----------------------------------------------------------------------


def test_fieldtrip_layout_mat(tmp_path: Path) -> None:
    p = tmp_path / "layout.mat"
    savemat(str(p), {
        "lay": {
            "pos": np.array([[0.0, 0.5], [-0.5, 0.0]]),
            "label": np.array(["Fz", "T7"], dtype=object),
        }
    })
    locs = read_locs(p)
    assert locs.labels == ("Fz", "T7")
    np.testing.assert_allclose(locs.theta, [0.0, -90.0], atol=1e-12)
    assert LAYOUT_NOTICE in locs.warnings


def test_brainstorm_channel_mat(tmp_path: Path) -> None:
    channel = np.zeros((2,), dtype=[("Name", "O"), ("Loc", "O"), ("Type", "O")])
    channel["Name"][0] = "Fpz"
    channel["Loc"][0] = np.array([0.09, 0.0, 0.0])
    channel["Type"][0] = "EEG"
    channel["Name"][1] = "Cz"
    channel["Loc"][1] = np.array([0.0, 0.0, 0.09])
    channel["Type"][1] = "EEG"
    scs = {
        "NAS": np.array([0.1, 0.0, 0.0]),
        "LPA": np.array([0.0, 0.07, 0.0]),
        "RPA": np.array([0.0, -0.07, 0.0]),
    }
    p = tmp_path / "channel.mat"
    savemat(str(p), {"Channel": channel, "SCS": scs})

    locs = read_locs(p)
    assert locs.labels == ("Fpz", "Cz", "NAS", "LPA", "RPA")
    assert [rec.type for rec in locs.chanlocs] == ["EEG", "EEG", "FID", "FID", "FID"]
    assert locs.theta[0] == pytest.approx(0.0)
    assert locs.radius[1] == pytest.approx(0.0)
    assert locs.theta[3] == pytest.approx(-90.0)


def test_mat_without_known_variable(tmp_path: Path) -> None:
    p = tmp_path / "other.mat"
    savemat(str(p), {"data": np.zeros(3)})
    with pytest.raises(ValueError):
        MatFileReader().read(p)
