"""Format resolution: explicit custom layout > explicit tag > file extension."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from eeg_chanlocs.errors import ConfigError
from eeg_chanlocs.models.formats import FormatTag


logger = logging.getLogger(__name__)


_EXTENSION_MAP: Dict[str, FormatTag] = {
    "loc": FormatTag.LOC,
    "locs": FormatTag.LOC,
    "eloc": FormatTag.LOC,
    "xyz": FormatTag.XYZ,
    "sph": FormatTag.SPH,
    "ced": FormatTag.CHANEDIT,
    "asc": FormatTag.ASC,
    "dat": FormatTag.DAT,
    "elc": FormatTag.ELC,
    "eps": FormatTag.BESA,
    "txt": FormatTag.TXT,
    "sfp": FormatTag.SFP,
    "tsv": FormatTag.TSV,
    "mat": FormatTag.MAT,
    "lay": FormatTag.LAY,
}

_TAG_ALIASES: Dict[str, Tuple[FormatTag, Optional[str]]] = {
    "locs": (FormatTag.LOC, None),
    "eloc": (FormatTag.LOC, None),
    "polhemusx": (FormatTag.POLHEMUS, "x"),
    "polhemusy": (FormatTag.POLHEMUS, "y"),
}

_ELP_DEFAULTS = ("besa", "polhemus")


@dataclass(frozen=True)
class ResolvedFormat:
    """
    Effective format of one import.

    variant: Polhemus sensor orientation ('x' or 'y'), None otherwise.
    origin: 'custom', 'explicit', 'extension', or 'fallback' (BESA retry of a failed Polhemus read).
    """
    tag: FormatTag
    origin: str
    variant: Optional[str] = None


def parse_tag(value: str) -> Tuple[Optional[FormatTag], Optional[str]]:
    """Map an explicit tag (first token, any case, aliases allowed) to (tag, variant).

    Returns (None, None) for empty input and 'autodetect'.
    """
    token = (value or "").strip().split()
    key = token[0].lower() if token else ""
    if key in ("", "autodetect"):
        return None, None
    if key in _TAG_ALIASES:
        return _TAG_ALIASES[key]
    try:
        return FormatTag(key), None
    except ValueError:
        raise ConfigError(f"unknown file format '{value}'") from None


def tag_from_extension(
    path: Union[str, Path],
    *,
    defaultelp: str = "polhemus",
) -> Tuple[Optional[FormatTag], List[str]]:
    """Resolve a tag from the file extension (case-insensitive).

    Returns (tag or None, notices).
    """
    notices: List[str] = []
    ext = Path(path).suffix.lower().lstrip(".")
    if ext == "elp":
        if defaultelp not in _ELP_DEFAULTS:
            raise ConfigError(f"defaultelp must be one of {_ELP_DEFAULTS}, got '{defaultelp}'")
        tag: Optional[FormatTag] = FormatTag(defaultelp)
    else:
        tag = _EXTENSION_MAP.get(ext)
    if tag is FormatTag.XYZ:
        notices.append(
            "WARNING: Matlab Cartesian coord. file extension ('.xyz') detected. "
            "If importing EGI Cartesian coords, force type 'sfp' instead."
        )
    if tag is not None:
        notices.append(f"'{tag.value}' format assumed from file extension")
    return tag, notices


def resolve_format(
    path: Optional[Union[str, Path]],
    *,
    filetype: Optional[str] = None,
    custom_format: Optional[Sequence[str]] = None,
    defaultelp: str = "polhemus",
) -> Tuple[ResolvedFormat, List[str]]:
    """
    Resolve the effective format for one import.

    Parameters
    ----------
    path : str or Path, optional
        Source file; only its extension is inspected. None for in-memory tables.
    filetype : str, optional
        Explicit tag (or alias, or 'autodetect').
    custom_format : sequence of str, optional
        Explicit column layout; when non-empty the tag is forced to 'custom'.
    defaultelp : str
        Tag used for the ambiguous '.elp' extension ('besa' or 'polhemus').

    Returns
    -------
    resolved : ResolvedFormat
    notices : list of str

    Raises
    ------
    ConfigError
        When nothing resolves.
    """
    notices: List[str] = []

    if custom_format:
        return ResolvedFormat(FormatTag.CUSTOM, origin="custom"), notices

    tag, variant = parse_tag(filetype or "")
    if tag is not None:
        return ResolvedFormat(tag, origin="explicit", variant=variant), notices

    if path is not None:
        tag, ext_notices = tag_from_extension(path, defaultelp=defaultelp)
        for msg in ext_notices:
            if msg.startswith("WARNING:"):
                logger.warning(msg)
            else:
                logger.info(msg)
        notices.extend(ext_notices)
        if tag is not None:
            return ResolvedFormat(tag, origin="extension"), notices

    raise ConfigError(
        "the file format cannot be detected from the file extension, and no custom format was specified"
    )
