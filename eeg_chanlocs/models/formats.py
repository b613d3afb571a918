"""Static registry of supported channel-location file formats.

The registry is built once at import time and never mutated; descriptors are
frozen and shared by reference between imports.

Each descriptor carries either a literal column layout (a tuple of
:class:`ColumnRole`) parsed by :mod:`eeg_chanlocs.ingest.columns`, or the name
of a delegated reader (see :mod:`eeg_chanlocs.ingest.readers`).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Union

from eeg_chanlocs.errors import ConfigError


class FormatTag(str, Enum):
    POLHEMUS = "polhemus"
    BESA = "besa"
    XYZ = "xyz"
    SFP = "sfp"
    LOC = "loc"
    SPH = "sph"
    ASC = "asc"
    DAT = "dat"
    ELC = "elc"
    CHANEDIT = "chanedit"
    TSV = "tsv"
    MAT = "mat"
    LAY = "lay"
    TXT = "txt"
    CUSTOM = "custom"


class ColumnRole(str, Enum):
    """Closed vocabulary of column-role tokens.

    Tokens prefixed with ``-`` store the negated value into the unsigned
    Cartesian field. ``ignore`` and ``not def`` consume a column without
    storing it.
    """

    LABELS = "labels"
    CHANNUM = "channum"
    THETA = "theta"
    RADIUS = "radius"
    SPH_THETA = "sph_theta"
    SPH_PHI = "sph_phi"
    SPH_RADIUS = "sph_radius"
    SPH_THETA_BESA = "sph_theta_besa"
    SPH_PHI_BESA = "sph_phi_besa"
    GAIN = "gain"
    CALIB = "calib"
    TYPE = "type"
    X = "X"
    Y = "Y"
    Z = "Z"
    NEG_X = "-X"
    NEG_Y = "-Y"
    NEG_Z = "-Z"
    CUSTOM1 = "custom1"
    CUSTOM2 = "custom2"
    CUSTOM3 = "custom3"
    CUSTOM4 = "custom4"
    IGNORE = "ignore"
    NOT_DEF = "not def"

    @property
    def field(self) -> Optional[str]:
        """ChannelRecord attribute written by this role (None: column is skipped)."""
        if self in (ColumnRole.IGNORE, ColumnRole.NOT_DEF):
            return None
        return self.value.lstrip("-")

    @property
    def sign(self) -> int:
        return -1 if self.value.startswith("-") else 1

    @classmethod
    def parse(cls, token: Union[str, "ColumnRole"]) -> "ColumnRole":
        """Case-insensitive token lookup; unknown tokens raise ConfigError."""
        if isinstance(token, ColumnRole):
            return token
        key = str(token).strip().lower()
        for role in cls:
            if role.value.lower() == key:
                return role
        raise ConfigError(f"undefined column role '{token}'")


@dataclass(frozen=True)
class FormatDescriptor:
    """
    Static metadata for one file format.

    columns:
      Literal column layout, in file order. Empty for delegated formats and
      for ``custom`` (the caller supplies the layout).
    reader:
      Name of the delegated reader, or None when the format is column-literal.
    header_lines:
      Number of leading lines skipped before parsing.
    """
    tag: FormatTag
    name: str
    description: str
    columns: Tuple[ColumnRole, ...] = ()
    reader: Optional[str] = None
    header_lines: int = 1

    @property
    def is_delegated(self) -> bool:
        return self.reader is not None


_R = ColumnRole

_DESCRIPTORS: Tuple[FormatDescriptor, ...] = (
    FormatDescriptor(
        FormatTag.POLHEMUS,
        "Polhemus native .elp file",
        "Polhemus native coordinate file containing scanned electrode positions. "
        "User must select the direction for the nose after importing the data file.",
        reader="readelp",
    ),
    FormatDescriptor(
        FormatTag.BESA,
        "BESA spherical .elp file",
        "BESA spherical coordinate file. Note that BESA spherical coordinates "
        "are different from Matlab spherical coordinates.",
        columns=(_R.TYPE, _R.LABELS, _R.SPH_THETA_BESA, _R.SPH_PHI_BESA, _R.SPH_RADIUS),
        header_lines=0,
    ),
    FormatDescriptor(
        FormatTag.XYZ,
        "Matlab .xyz file",
        "Standard 3-D cartesian coordinate files with electrode numbers in the first column, "
        "X, Y, and Z coordinates in columns 2, 3, and 4 and channel labels in column 5.",
        columns=(_R.CHANNUM, _R.NEG_Y, _R.X, _R.Z, _R.LABELS),
        header_lines=0,
    ),
    FormatDescriptor(
        FormatTag.SFP,
        "BESA or EGI 3-D cartesian .sfp file",
        "Standard BESA 3-D cartesian coordinate files with electrode labels in the first column "
        "and X, Y, and Z coordinates in columns 2, 3, and 4. Coordinates are re-oriented to fit "
        "the EEGLAB standard of having the nose along the +X axis.",
        columns=(_R.LABELS, _R.NEG_Y, _R.X, _R.Z),
        header_lines=0,
    ),
    FormatDescriptor(
        FormatTag.LOC,
        "EEGLAB polar .loc file",
        "EEGLAB polar .loc file.",
        columns=(_R.CHANNUM, _R.THETA, _R.RADIUS, _R.LABELS),
        header_lines=0,
    ),
    FormatDescriptor(
        FormatTag.SPH,
        "Matlab .sph spherical file",
        "Standard 3-D spherical coordinate files in Matlab format.",
        columns=(_R.CHANNUM, _R.SPH_THETA, _R.SPH_PHI, _R.LABELS),
        header_lines=0,
    ),
    FormatDescriptor(
        FormatTag.ASC,
        "Neuroscan polar .asc file",
        "Neuroscan polar .asc file, automatically recentered to fit the EEGLAB standard "
        "of having 'Cz' at (0,0).",
        reader="readneurolocs",
    ),
    FormatDescriptor(
        FormatTag.DAT,
        "Neuroscan 3-D .dat file",
        "Neuroscan 3-D cartesian .dat file. Coordinates are re-oriented to fit the EEGLAB "
        "standard of having the nose along the +X axis.",
        reader="readneurodat",
    ),
    FormatDescriptor(
        FormatTag.ELC,
        "ASA .elc 3-D file",
        "ASA .elc 3-D coordinate file containing scanned electrode positions. "
        "User must select the direction for the nose after importing the data file.",
        reader="readeetraklocs",
    ),
    FormatDescriptor(
        FormatTag.CHANEDIT,
        "EEGLAB complete 3-D file",
        "EEGLAB file containing polar, cartesian 3-D, and spherical 3-D electrode locations.",
        columns=(
            _R.CHANNUM, _R.LABELS, _R.THETA, _R.RADIUS, _R.X, _R.Y, _R.Z,
            _R.SPH_THETA, _R.SPH_PHI, _R.SPH_RADIUS, _R.TYPE,
        ),
        header_lines=1,
    ),
    FormatDescriptor(
        FormatTag.TSV,
        "BIDS .tsv file",
        "Standard 3-D cartesian coordinate files with electrode labels in the first column "
        "and X, Y, and Z coordinates in columns 2, 3, and 4.",
        columns=(_R.LABELS, _R.X, _R.Y, _R.Z),
        header_lines=1,
    ),
    FormatDescriptor(
        FormatTag.MAT,
        "Brainstorm Matlab file format",
        "Brainstorm channel file or FieldTrip layout saved as a Matlab file.",
        reader="loadmat",
    ),
    FormatDescriptor(
        FormatTag.LAY,
        "Fieldtrip layout file",
        "Fieldtrip 2-D layout file.",
        reader="readlay",
    ),
    FormatDescriptor(
        FormatTag.TXT,
        "Fieldtrip .txt spherical file",
        "Standard 3-D spherical coordinate files in text format.",
        columns=(_R.LABELS, _R.SPH_THETA_BESA, _R.SPH_PHI_BESA),
        # optional header row, recognized by text in the theta column
        header_lines=0,
    ),
    FormatDescriptor(
        FormatTag.CUSTOM,
        "Custom file format",
        "Custom ASCII file format where user can define content for each file column.",
        header_lines=0,
    ),
)

REGISTRY: Mapping[FormatTag, FormatDescriptor] = MappingProxyType({d.tag: d for d in _DESCRIPTORS})

ROLE_TOKENS: Tuple[str, ...] = tuple(r.value for r in ColumnRole)


def lookup(tag: Union[str, FormatTag]) -> Optional[FormatDescriptor]:
    """Return the descriptor for *tag*, or None when the tag is not registered."""
    try:
        key = FormatTag(tag) if not isinstance(tag, FormatTag) else tag
    except ValueError:
        return None
    return REGISTRY.get(key)


def get_infos() -> Tuple[Tuple[FormatDescriptor, ...], Tuple[str, ...]]:
    """Registry and role vocabulary, for configuration tooling. Performs no I/O."""
    return tuple(REGISTRY.values()), ROLE_TOKENS
