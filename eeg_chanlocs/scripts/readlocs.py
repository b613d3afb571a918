"""
Command-line import of a channel-location file.

Prints one row per channel (label, type, theta, radius, X, Y, Z) followed by
the import notices. With ``--infos`` prints the format registry and the
column-role vocabulary instead, without touching any file.

Examples
--------
$ python -m eeg_chanlocs.scripts.readlocs cap32.loc
$ python -m eeg_chanlocs.scripts.readlocs cap.elp --defaultelp besa --elecind 1,2,3
$ python -m eeg_chanlocs.scripts.readlocs cap.txt --format "labels,-X,Y,Z"
$ python -m eeg_chanlocs.scripts.readlocs --infos
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional, Sequence

import pandas as pd

from eeg_chanlocs.errors import ChanlocsError
from eeg_chanlocs.ingest.readlocs import ELP_DEFAULTS, IMPORT_MODES, read_locs
from eeg_chanlocs.models.formats import get_infos


_COLUMNS = ["labels", "type", "theta", "radius", "X", "Y", "Z"]


def _split_list(value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None
    return [tok.strip() for tok in value.replace(";", ",").split(",") if tok.strip()]


def _index_list(value: str) -> List[int]:
    try:
        return [int(x) for x in _split_list(value) or []]
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected comma-separated channel numbers, got '{value}'") from None


def format_infos() -> str:
    descriptors, roles = get_infos()
    rows = []
    for d in descriptors:
        if d.is_delegated:
            layout = f"<{d.reader}>"
        else:
            layout = " ".join(r.value for r in d.columns) or "<user defined>"
        rows.append({"type": d.tag.value, "name": d.name, "skiplines": d.header_lines, "columns": layout})
    table = pd.DataFrame(rows).to_string(index=False)
    return f"{table}\n\ncolumn roles: {', '.join(roles)}"


def main(argv: Optional[Sequence[str]] = None) -> int:
    import textwrap

    p = argparse.ArgumentParser(
        prog="python -m eeg_chanlocs.scripts.readlocs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=textwrap.dedent(
            """\
            Import an electrode location file and print the normalized channels.

            The format is taken from --format (custom column layout), then --filetype,
            then the file extension.
            """
        ),
    )
    p.add_argument("path", nargs="?", default=None, help="Channel location file")
    p.add_argument("--filetype", default=None, help="Format tag (loc, sph, xyz, sfp, besa, chanedit, ...) or 'autodetect'")
    p.add_argument("--importmode", default="eeglab", choices=IMPORT_MODES, help="Axis convention metadata")
    p.add_argument("--defaultelp", default="polhemus", choices=ELP_DEFAULTS, help="Format assumed for .elp files")
    p.add_argument("--skiplines", type=int, default=None, help="Header lines to skip (default: format dependent)")
    p.add_argument("--elecind", type=_index_list, default=None, help="Comma-separated 1-based channel subset (e.g. '1,2,5')")
    p.add_argument("--format", default=None, help="Comma-separated custom column roles (e.g. 'labels,-Y,X,Z')")
    p.add_argument("--infos", action="store_true", help="Print supported formats and column roles, then exit")
    p.add_argument("--verbose", action="store_true", help="Log notices while importing")

    ns = p.parse_args(list(argv) if argv is not None else None)

    if ns.infos:
        print(format_infos())
        return 0

    if ns.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        locs = read_locs(
            ns.path,
            filetype=ns.filetype,
            importmode=ns.importmode,
            defaultelp=ns.defaultelp,
            skiplines=ns.skiplines,
            elecind=ns.elecind or None,
            format=_split_list(ns.format),
        )
    except (ChanlocsError, OSError) as e:
        print(f"[error] {type(e).__name__}: {e}")
        return 2

    df = locs.to_dataframe()[_COLUMNS]
    print(df.to_string(index=True))
    ft = locs.filetype.value if locs.filetype is not None else "-"
    print(f"\n{locs.n_channels} channels ({ft}), {len(locs.indices)} with polar and Cartesian coordinates")
    for msg in locs.warnings:
        tag = "[warn]" if msg.startswith("WARNING:") else "[info]"
        print(f"{tag} {msg.removeprefix('WARNING: ')}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
