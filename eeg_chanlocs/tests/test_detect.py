"""Tests for format resolution (custom layout > explicit tag > extension)."""

from __future__ import annotations

import pytest

from eeg_chanlocs.errors import ConfigError
from eeg_chanlocs.ingest.detect import parse_tag, resolve_format, tag_from_extension
from eeg_chanlocs.models.formats import FormatTag


@pytest.mark.parametrize("name", ["cap.loc", "cap.locs", "cap.eloc", "CAP.LOC"])
def test_loc_extensions(name: str) -> None:
    resolved, _ = resolve_format(name)
    assert resolved.tag is FormatTag.LOC
    assert resolved.origin == "extension"


@pytest.mark.parametrize(
    "name,tag",
    [
        ("a.sph", FormatTag.SPH),
        ("a.ced", FormatTag.CHANEDIT),
        ("a.eps", FormatTag.BESA),
        ("a.asc", FormatTag.ASC),
        ("a.dat", FormatTag.DAT),
        ("a.elc", FormatTag.ELC),
        ("a.txt", FormatTag.TXT),
        ("a.sfp", FormatTag.SFP),
        ("a.tsv", FormatTag.TSV),
        ("a.mat", FormatTag.MAT),
        ("a.lay", FormatTag.LAY),
    ],
)
def test_extension_map(name: str, tag: FormatTag) -> None:
    resolved, notices = resolve_format(name)
    assert resolved.tag is tag
    assert any("assumed from file extension" in n for n in notices)


def test_xyz_emits_ambiguity_warning() -> None:
    tag, notices = tag_from_extension("cap.xyz")
    assert tag is FormatTag.XYZ
    assert any(n.startswith("WARNING:") and "sfp" in n for n in notices)


def test_elp_uses_default() -> None:
    assert resolve_format("cap.elp")[0].tag is FormatTag.POLHEMUS
    assert resolve_format("cap.elp", defaultelp="besa")[0].tag is FormatTag.BESA


def test_elp_invalid_default() -> None:
    with pytest.raises(ConfigError):
        resolve_format("cap.elp", defaultelp="egi")


def test_custom_layout_wins() -> None:
    resolved, _ = resolve_format("cap.loc", filetype="sfp", custom_format=["labels", "X", "Y", "Z"])
    assert resolved.tag is FormatTag.CUSTOM
    assert resolved.origin == "custom"


def test_explicit_tag_beats_extension() -> None:
    resolved, notices = resolve_format("cap.loc", filetype="sfp")
    assert resolved.tag is FormatTag.SFP
    assert resolved.origin == "explicit"
    assert notices == []


def test_autodetect_falls_back_to_extension() -> None:
    assert resolve_format("cap.sph", filetype="autodetect")[0].tag is FormatTag.SPH
    assert resolve_format("cap.sph", filetype="")[0].tag is FormatTag.SPH


def test_tag_aliases() -> None:
    assert parse_tag("LOCS") == (FormatTag.LOC, None)
    assert parse_tag("eloc") == (FormatTag.LOC, None)
    assert parse_tag("polhemusy") == (FormatTag.POLHEMUS, "y")
    assert parse_tag("besa  extra words") == (FormatTag.BESA, None)


def test_unknown_explicit_tag() -> None:
    with pytest.raises(ConfigError):
        resolve_format("cap.loc", filetype="egi")


def test_unresolved_extension() -> None:
    with pytest.raises(ConfigError):
        resolve_format("cap.csv")
    with pytest.raises(ConfigError):
        resolve_format(None)
