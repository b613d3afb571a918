"""
Channel-location import: format dispatch, parsing, normalization, post-processing.

Pipeline
--------
1. resolve the format (custom layout > explicit tag > extension),
2. column-parse literal layouts, or call the registered delegated reader,
3. normalize coordinates (BESA > spherical > Cartesian > polar),
4. repair labels, resequence by channel number, tag fiducials,
5. apply the channel subset and build the derived vectors.

Sources other than paths:
  - sequences of ChannelRecord (or chanlocs-like mappings) pass through without
    normalization, only label coercion and fiducial tagging,
  - structures exposing ``label`` and ``pnt``/``elecpos``/``chanpos`` positions are
    remapped and converted from Cartesian,
  - pandas DataFrames (or lists of row lists) are column-parsed under an explicit
    tag or custom layout.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, FrozenSet, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from eeg_chanlocs.analysis.normalize import normalize_coordinates, try_convert
from eeg_chanlocs.analysis.postprocess import (
    finalize_labels,
    normalize_neuroscan_types,
    postprocess,
    tag_fiducials,
)
from eeg_chanlocs.analysis.project import project_outputs, select_channels
from eeg_chanlocs.errors import ConfigError, UsageError
from eeg_chanlocs.ingest.columns import parse_columns
from eeg_chanlocs.ingest.detect import ResolvedFormat, parse_tag, resolve_format
from eeg_chanlocs.ingest.readers import get_reader
from eeg_chanlocs.ingest.tabular import TableSource
from eeg_chanlocs.models.formats import ColumnRole, FormatTag, lookup
from eeg_chanlocs.models.records import ChannelLocations, ChannelRecord


logger = logging.getLogger(__name__)

IMPORT_MODES = ("eeglab", "native")
ELP_DEFAULTS = ("besa", "polhemus")

_POSITION_KEYS = ("pnt", "elecpos", "chanpos")

Source = Union[str, Path, pd.DataFrame, Sequence[Any], Mapping[str, Any], Any]


def _is_int(value: Any) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def _is_row_table(value: Any) -> bool:
    """A non-empty list/tuple of row lists (in-memory table)."""
    return (
        isinstance(value, (list, tuple))
        and len(value) > 0
        and all(isinstance(row, (list, tuple)) for row in value)
    )


@dataclass(frozen=True)
class ReadLocsConfig:
    """
    Import options.

    filetype:
      Format tag, alias ('locs', 'eloc', 'polhemusx', 'polhemusy') or 'autodetect'.
    importmode:
      'eeglab' or 'native'. Metadata only: tells downstream code which axis
      convention to assume; no coordinate is transformed here.
    defaultelp:
      Format assumed for the ambiguous '.elp' extension ('besa' or 'polhemus').
    skiplines:
      Header lines to skip; None uses the format default.
    elecind:
      1-based channel subset, in the requested order.
    format:
      Custom column layout (role tokens); forces the 'custom' format.
    """
    filetype: Optional[str] = None
    importmode: str = "eeglab"
    defaultelp: str = "polhemus"
    skiplines: Optional[int] = None
    elecind: Optional[Tuple[int, ...]] = None
    format: Optional[Tuple[str, ...]] = None

    def __post_init__(self) -> None:
        if self.filetype is not None and not isinstance(self.filetype, (str, FormatTag)):
            raise ConfigError("filetype must be a string")
        if isinstance(self.filetype, str):
            parse_tag(self.filetype)
        if self.importmode not in IMPORT_MODES:
            raise ConfigError(f"importmode must be one of {IMPORT_MODES}, got '{self.importmode}'")
        if self.defaultelp not in ELP_DEFAULTS:
            raise ConfigError(f"defaultelp must be one of {ELP_DEFAULTS}, got '{self.defaultelp}'")
        if self.skiplines is not None:
            if not _is_int(self.skiplines) or self.skiplines < 0:
                raise ConfigError(f"skiplines must be a non-negative integer, got {self.skiplines!r}")
        if self.elecind is not None:
            ind = tuple(self.elecind)
            if any(not _is_int(i) or i < 1 for i in ind):
                raise ConfigError(f"elecind must contain positive integers, got {ind!r}")
            object.__setattr__(self, "elecind", tuple(int(i) for i in ind))
        if self.format is not None:
            fmt = tuple(self.format)
            for token in fmt:
                ColumnRole.parse(token)
            object.__setattr__(self, "format", fmt)

    @property
    def tag_value(self) -> Optional[str]:
        if isinstance(self.filetype, FormatTag):
            return self.filetype.value
        return self.filetype


@dataclass
class _Parsed:
    records: List[ChannelRecord]
    declared: FrozenSet[str]
    resolved: ResolvedFormat


class LocsReader:
    """
    Reads channel locations from files, in-memory tables or structures.

    Instances are stateless apart from their configuration; reuse them freely.
    """

    def __init__(self, config: Optional[ReadLocsConfig] = None):
        self.config = config or ReadLocsConfig()

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def read(self, source: Source) -> ChannelLocations:
        warnings: List[str] = []
        cfg = self.config

        if source is None or (isinstance(source, str) and not source.strip()):
            raise UsageError("no file or channel structure specified")

        source_path: Optional[Path] = None
        filetype: Optional[FormatTag] = None

        if isinstance(source, (str, Path)):
            source_path = Path(source).expanduser()
            if not source_path.is_file():
                raise FileNotFoundError(f"Channel location file not found: {source_path}")
            parsed = self._read_file(source_path, cfg, warnings)
            records = self._normalize_and_postprocess(parsed, warnings)
            filetype = parsed.resolved.tag
        elif isinstance(source, pd.DataFrame) or _is_row_table(source):
            parsed = self._read_table(source, cfg, warnings)
            records = self._normalize_and_postprocess(parsed, warnings)
            filetype = parsed.resolved.tag
        elif self._has_positions(source):
            records = self._read_structure(source, warnings)
        elif isinstance(source, Sequence) and not isinstance(source, (str, bytes)):
            records = self._passthrough(source)
        else:
            raise UsageError(
                f"source must be a path, a DataFrame, a channel structure or records, got {type(source).__name__}"
            )

        selected = select_channels(records, cfg.elecind)
        labels, theta, radius, indices = project_outputs(selected)
        return ChannelLocations(
            chanlocs=selected,
            labels=labels,
            theta=theta,
            radius=radius,
            indices=indices,
            filetype=filetype,
            importmode=cfg.importmode,
            warnings=tuple(warnings),
            source_path=source_path,
        )

    # ------------------------------------------------------------------
    # Files and tables
    # ------------------------------------------------------------------

    def _read_file(self, path: Path, cfg: ReadLocsConfig, warnings: List[str]) -> _Parsed:
        resolved, notices = resolve_format(
            path,
            filetype=cfg.tag_value,
            custom_format=cfg.format,
            defaultelp=cfg.defaultelp,
        )
        warnings.extend(notices)
        desc = lookup(resolved.tag)
        assert desc is not None

        if desc.is_delegated:
            if resolved.tag is FormatTag.POLHEMUS:
                return self._read_polhemus(path, resolved, cfg, warnings)
            records, reader_notices = get_reader(resolved.tag).read(path)
            warnings.extend(reader_notices)
            if resolved.tag in (FormatTag.ASC, FormatTag.DAT):
                records = normalize_neuroscan_types(records)
            return _Parsed(list(records), frozenset(), resolved)

        return self._parse_columns(path, resolved, cfg, warnings)

    def _read_table(self, table: TableSource, cfg: ReadLocsConfig, warnings: List[str]) -> _Parsed:
        resolved, notices = resolve_format(
            None,
            filetype=cfg.tag_value,
            custom_format=cfg.format,
            defaultelp=cfg.defaultelp,
        )
        warnings.extend(notices)
        desc = lookup(resolved.tag)
        assert desc is not None
        if desc.is_delegated:
            raise ConfigError(f"'{resolved.tag.value}' files need a file path, not an in-memory table")
        return self._parse_columns(table, resolved, cfg, warnings, in_memory=True)

    def _parse_columns(
        self,
        source,
        resolved: ResolvedFormat,
        cfg: ReadLocsConfig,
        warnings: List[str],
        *,
        in_memory: bool = False,
    ) -> _Parsed:
        desc = lookup(resolved.tag)
        assert desc is not None
        layout = cfg.format if resolved.tag is FormatTag.CUSTOM else desc.columns
        if not layout:
            raise ConfigError("custom format requested without a column layout")
        if cfg.skiplines is not None:
            skiplines = cfg.skiplines
        else:
            # a DataFrame carries its header in the column labels, not in the rows
            skiplines = 0 if in_memory else desc.header_lines
        delimiter = "\t" if resolved.tag is FormatTag.CHANEDIT else None

        result = parse_columns(
            source,
            layout,
            skiplines=skiplines,
            filetype=resolved.tag,
            delimiter=delimiter,
        )
        warnings.extend(result.warnings)
        return _Parsed(list(result.records), result.declared, resolved)

    def _read_polhemus(
        self,
        path: Path,
        resolved: ResolvedFormat,
        cfg: ReadLocsConfig,
        warnings: List[str],
    ) -> _Parsed:
        try:
            records, reader_notices = get_reader(FormatTag.POLHEMUS).read(path)
        except Exception as e:
            msg = f"Could not read Polhemus coords ({type(e).__name__}: {e}). Trying to read BESA .elp file."
            logger.info(msg)
            warnings.append(msg)
            besa = ResolvedFormat(FormatTag.BESA, origin="fallback")
            return self._parse_columns(path, besa, replace(cfg, filetype=None, format=None), warnings)

        warnings.extend(reader_notices)
        if resolved.variant == "y":
            records = [replace(rec, X=rec.Y, Y=rec.X) for rec in records]
        return _Parsed(list(records), frozenset(), resolved)

    # ------------------------------------------------------------------
    # Structures
    # ------------------------------------------------------------------

    @staticmethod
    def _get(obj: Any, name: str) -> Any:
        if isinstance(obj, Mapping):
            return obj.get(name)
        return getattr(obj, name, None)

    @classmethod
    def _has_positions(cls, obj: Any) -> bool:
        if isinstance(obj, (str, bytes, Path, pd.DataFrame)):
            return False
        if cls._get(obj, "label") is None:
            return False
        return any(cls._get(obj, key) is not None for key in _POSITION_KEYS)

    def _read_structure(self, obj: Any, warnings: List[str]) -> List[ChannelRecord]:
        pos = next(self._get(obj, k) for k in _POSITION_KEYS if self._get(obj, k) is not None)
        pos = np.asarray(pos, dtype=np.float64).reshape(-1, 3)
        labels = self._get(obj, "label")
        labels = [labels] if isinstance(labels, str) else list(np.asarray(labels, dtype=object).ravel())
        if len(labels) != len(pos):
            raise ConfigError(f"structure has {len(labels)} labels but {len(pos)} positions")
        records = [
            ChannelRecord(labels=str(lab), X=float(x), Y=float(y), Z=float(z))
            for lab, (x, y, z) in zip(labels, pos)
        ]
        records, _ = try_convert("cart2all", records, warnings)
        return postprocess(records, warnings=warnings)

    @staticmethod
    def _passthrough(items: Sequence[Any]) -> List[ChannelRecord]:
        records = []
        for item in items:
            if isinstance(item, ChannelRecord):
                records.append(replace(item))
            elif isinstance(item, Mapping):
                records.append(ChannelRecord.from_mapping(item))
            else:
                raise UsageError(f"cannot use {type(item).__name__} as a channel record")
        return tag_fiducials(finalize_labels(records))

    # ------------------------------------------------------------------
    # Shared tail
    # ------------------------------------------------------------------

    @staticmethod
    def _normalize_and_postprocess(parsed: _Parsed, warnings: List[str]) -> List[ChannelRecord]:
        records = normalize_coordinates(parsed.records, declared=parsed.declared, warnings=warnings)
        return postprocess(records, declared=parsed.declared, warnings=warnings)


def read_locs(source: Source, **options: Any) -> ChannelLocations:
    """
    Import channel locations.

    Parameters
    ----------
    source : path, DataFrame, channel structure or sequence of records
    **options
        Fields of :class:`ReadLocsConfig` (filetype, importmode, defaultelp,
        skiplines, elecind, format).

    Returns
    -------
    ChannelLocations

    Raises
    ------
    UsageError, ConfigError, FileNotFoundError

    Examples
    --------
    >>> locs = read_locs("cap32.loc")                         # doctest: +SKIP
    >>> locs = read_locs("cap.txt", format=["labels", "-X", "Y", "Z"])  # doctest: +SKIP
    """
    if options.get("elecind") is not None:
        options["elecind"] = tuple(options["elecind"])
    if options.get("format") is not None:
        options["format"] = tuple(options["format"])
    try:
        config = ReadLocsConfig(**options)
    except TypeError as e:
        raise ConfigError(str(e)) from e
    return LocsReader(config).read(source)
