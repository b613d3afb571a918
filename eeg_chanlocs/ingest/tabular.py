"""Generic delimited-table loader.

Text files are read with pandas: trailing text after the comment marker is
discarded, lines left empty are dropped, and every cell that parses as a number
becomes a float. Short rows are padded with None, so the returned frame is
rectangular with object dtype.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Sequence, Union

import pandas as pd


COMMENT = "%"

# ragged rows are read into this many columns, trailing empty ones are dropped
_MAX_COLUMNS = 64

TableSource = Union[str, Path, pd.DataFrame, Sequence[Sequence[Any]]]


def convert_token(token: str) -> Any:
    """Number if the token parses as one, otherwise the stripped text."""
    tok = token.strip()
    try:
        return float(tok)
    except ValueError:
        return tok


def _clean_cell(value: Any) -> Any:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    if isinstance(value, str):
        return convert_token(value) if value.strip() else None
    return value


def _normalize_cells(df: pd.DataFrame) -> pd.DataFrame:
    """Numeric text -> float, blank or missing -> None; object dtype, columns 0..n-1."""
    if df.empty:
        return pd.DataFrame(dtype=object)
    out = df.astype(object).apply(lambda col: col.map(_clean_cell)).astype(object)
    out = out.where(out.notna(), None)
    out.columns = list(range(out.shape[1]))
    return out.reset_index(drop=True)


def read_text_table(
    path: Union[str, Path],
    *,
    skiplines: int = 0,
    delimiter: Optional[str] = None,
    comment: str = COMMENT,
) -> pd.DataFrame:
    """
    Read a whitespace- (or *delimiter*-) separated text table, no header.

    Consecutive delimiters collapse, so a tab-delimited file never yields blank
    cells between two values.
    """
    p = Path(path).expanduser()
    sep = r"\s+" if delimiter is None else f"(?:{delimiter})+"
    try:
        df = pd.read_csv(
            p,
            sep=sep,
            header=None,
            names=list(range(_MAX_COLUMNS)),
            index_col=False,
            comment=comment or None,
            skiprows=max(0, int(skiplines)),
            skip_blank_lines=True,
            engine="python",
            dtype=object,
            keep_default_na=False,
            encoding_errors="ignore",
        )
    except pd.errors.EmptyDataError:
        return pd.DataFrame(dtype=object)
    df = _normalize_cells(df)
    if df.empty:
        return df
    df = df.dropna(axis=1, how="all").dropna(axis=0, how="all")
    if df.empty:
        return pd.DataFrame(dtype=object)
    df.columns = list(range(df.shape[1]))
    return df.reset_index(drop=True)


def load_table(
    source: TableSource,
    *,
    skiplines: int = 0,
    delimiter: Optional[str] = None,
    comment: str = COMMENT,
) -> pd.DataFrame:
    """
    Load a table of cells.

    Parameters
    ----------
    source : path, DataFrame or sequence of rows
        Files are read as text. In-memory tables are taken as-is (their header,
        if any, is already in the column labels), except that numeric text is
        converted and empty cells become None.
    skiplines : int
        Leading lines (files) or rows (in-memory tables) to drop.
    delimiter : str, optional
        Column separator for files; None splits on any whitespace.

    Returns
    -------
    pandas.DataFrame
        Object dtype, integer column labels 0..n-1, None for missing cells.

    Raises
    ------
    FileNotFoundError
        If *source* is a path that does not exist.
    """
    if isinstance(source, (str, Path)):
        return read_text_table(source, skiplines=skiplines, delimiter=delimiter, comment=comment)

    if isinstance(source, pd.DataFrame):
        df = source.reset_index(drop=True)
    else:
        # ragged row lists are padded by the constructor
        df = pd.DataFrame(list(source))
    return _normalize_cells(df.iloc[max(0, int(skiplines)):])
