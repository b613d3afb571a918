"""Column-literal parsing of channel-location tables.

The descriptor (or a custom layout) names one role per column. Each row of the
loaded table becomes one :class:`ChannelRecord`; roles prefixed with '-' store
the negated value.

Header self-healing: when the second cell of the first retained row is empty,
the header skip count was probably one too large (one-header-row BESA dialect),
so the table is reloaded with one fewer skipped line, at most twice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Sequence, Tuple, Union

import pandas as pd

from eeg_chanlocs.errors import ConfigError
from eeg_chanlocs.ingest.tabular import COMMENT, TableSource, load_table
from eeg_chanlocs.models.formats import ColumnRole, FormatTag
from eeg_chanlocs.models.records import ChannelRecord, is_empty, is_number


logger = logging.getLogger(__name__)

_MAX_HEADER_RETRIES = 2


@dataclass(frozen=True)
class ColumnParseResult:
    """
    records:
      One record per retained row, in file order.
    declared:
      ChannelRecord fields assigned from a column, even when every cell was empty.
    skiplines:
      Header skip count finally used.
    """
    records: Tuple[ChannelRecord, ...]
    declared: FrozenSet[str]
    skiplines: int
    warnings: Tuple[str, ...] = ()


def resolve_layout(tokens: Sequence[Union[str, ColumnRole]]) -> Tuple[ColumnRole, ...]:
    """Validate a layout up front; any unknown token raises ConfigError."""
    return tuple(ColumnRole.parse(t) for t in tokens)


def _drop_leading_noise(table: pd.DataFrame) -> pd.DataFrame:
    """Skip leading rows that are blank or start with the comment marker."""
    start = 0
    n_rows = len(table)
    while start < n_rows:
        first = table.iat[start, 0]
        if is_empty(first) or (isinstance(first, str) and first.startswith(COMMENT)):
            start += 1
            continue
        break
    return table.iloc[start:].reset_index(drop=True)


def _header_misdetected(table: pd.DataFrame) -> bool:
    if table.empty or table.shape[1] < 2:
        return False
    return is_empty(table.iat[0, 1])


def _text_header(table: pd.DataFrame) -> bool:
    """First row holds text where a number is expected (column titles)."""
    if table.empty or table.shape[1] < 2:
        return False
    return isinstance(table.iat[0, 1], str)


def _skip_candidates(skiplines: int) -> List[int]:
    out = [skiplines]
    for k in range(1, _MAX_HEADER_RETRIES + 1):
        n = skiplines - k
        if n < 0:
            break
        out.append(n)
    return out


def _load_retained(
    source: TableSource,
    skiplines: int,
    delimiter: Optional[str],
) -> pd.DataFrame:
    table = load_table(source, skiplines=skiplines, delimiter=delimiter)
    if table.empty:
        return table
    return _drop_leading_noise(table)


def _negate(value):
    if is_number(value):
        return -value
    return value


def parse_columns(
    source: TableSource,
    layout: Sequence[Union[str, ColumnRole]],
    *,
    skiplines: int = 0,
    filetype: Optional[FormatTag] = None,
    delimiter: Optional[str] = None,
) -> ColumnParseResult:
    """
    Parse *source* into channel records according to *layout*.

    Parameters
    ----------
    source : path, DataFrame or sequence of rows
    layout : sequence of role tokens
    skiplines : int
        Header lines skipped on the first attempt.
    filetype : FormatTag, optional
        Enables the 4-column '.xyz' repair (implicit channel-number column).
    delimiter : str, optional
        Column separator passed to the loader (None: whitespace).

    Returns
    -------
    ColumnParseResult

    Raises
    ------
    ConfigError
        On an unknown role token (before any I/O).
    FileNotFoundError
        Propagated from the loader.
    """
    roles = resolve_layout(layout)
    warnings: List[str] = []

    candidates = _skip_candidates(int(skiplines))
    first_table: Optional[pd.DataFrame] = None
    table: Optional[pd.DataFrame] = None
    used = candidates[0]
    for attempt, n_skip in enumerate(candidates):
        table = _load_retained(source, n_skip, delimiter)
        if first_table is None:
            first_table = table
        used = n_skip
        if not _header_misdetected(table):
            break
        if attempt + 1 < len(candidates):
            msg = f"header row detected, re-reading with skiplines={candidates[attempt + 1]}"
            logger.info(msg)
            warnings.append(msg)
    else:
        if len(candidates) > 1:
            msg = "WARNING: header self-healing failed; keeping the table read with the requested skiplines"
            logger.warning(msg)
            warnings.append(msg)
        table = first_table
        used = candidates[0]

    assert table is not None
    if filetype is FormatTag.TXT and _text_header(table):
        msg = "header row detected (text in the theta column), skipping it"
        logger.info(msg)
        warnings.append(msg)
        table = table.iloc[1:].reset_index(drop=True)

    if table.empty:
        msg = "WARNING: no data rows found"
        logger.warning(msg)
        warnings.append(msg)
        return ColumnParseResult((), frozenset(), used, tuple(warnings))

    n_cols = table.shape[1]
    if n_cols != len(roles):
        which = "Fewer" if n_cols < len(roles) else "More"
        msg = f"WARNING: {which} columns in the input than expected ({n_cols} found, {len(roles)} expected)"
        logger.warning(msg)
        warnings.append(msg)

    if filetype is FormatTag.XYZ and n_cols == 4 and len(roles) == 5:
        # implicit leading channel-number column
        table = table.copy()
        table.columns = range(1, 5)
        table.insert(0, 0, [float(i) for i in range(1, len(table) + 1)])
        n_cols = 5

    records = [ChannelRecord() for _ in range(len(table))]
    declared = set()
    for col in range(min(n_cols, len(roles))):
        role = roles[col]
        field = role.field
        if field is None:
            continue
        declared.add(field)
        column = table.iloc[:, col].tolist()
        for rec, value in zip(records, column):
            setattr(rec, field, _negate(value) if role.sign < 0 else value)

    return ColumnParseResult(tuple(records), frozenset(declared), used, tuple(warnings))
