"""
Reader for RFMix `.msp.tsv` window calls.

An MSP file holds one comment line naming the subpopulation codes, a header
line, then one row per genomic window::

    #Subpopulation order/codes: AFR=0	EUR=1	NAT=2
    #chm	spos	epos	sgpos	egpos	n snps	HG01565.0	HG01565.1	...
    chr22	16050075	16451201	0.0	2.4	34	0	1	...
"""
import logging
from re import search
from typing import Dict, List, Sequence, Tuple

from tqdm import tqdm
from pandas import Series, to_numeric
from numpy import (
    asarray,
    concatenate,
    empty,
    ndarray,
    uint8,
    uint32,
)

from ._chunk import Chunk
from ._schema import MSP_SCHEMA
from ._utils import batched_lines, open_text, read_header_lines
from ._errorhandling import EmptyFileError, MalformedRowError, WindowOrderError

__all__ = ["read_msp", "read_populations", "MISSING"]

MISSING = uint8(255)
_MAX_COORD = 2**32 - 1

logger = logging.getLogger(__name__)


def read_msp(
        fn: str, indices: Sequence[int], chunk: Chunk = Chunk(),
        verbose: bool = True,
) -> Tuple[ndarray, ndarray, List[str]]:
    """
    Read the windows and ancestry calls of the selected haplotype columns.

    Parameters
    ----------
    fn : str
        Path to the `.msp.tsv` (or `.msp.tsv.gz`) file.
    indices : sequence of int
        Haplotype column offsets, as returned by
        :func:`resolve_haplotype_indices`.
    chunk : Chunk
        Streaming settings; only `nloci` is used.
    verbose : bool
        :const:`True` for progress information; :const:`False` otherwise.

    Returns
    -------
    windows : ndarray
        `uint32` array (windows, 2) of start and end positions.
    labels : ndarray
        `uint8` array (windows, haplotypes) of ancestry codes, columns in
        `indices` order. Cells that are not valid codes hold :data:`MISSING`.
    haplotypes : list of str
        Haplotype identifiers matching the label columns.

    Raises
    ------
    EmptyFileError
        If the comment or header line is missing.
    MalformedRowError
        If a row is too short or a window boundary is not an integer.
    WindowOrderError
        If windows are not ordered and non-overlapping.
    """
    if len(indices) == 0:
        raise ValueError("At least one haplotype column is required.")
    columns = [MSP_SCHEMA.column(i) for i in indices]
    width = MSP_SCHEMA.required_width(max(indices))

    windows, labels, n_coerced = [], [], 0
    with open_text(fn) as f:
        header = read_header_lines(f, MSP_SCHEMA.n_header_lines)
        if len(header) == 0:
            raise EmptyFileError(fn, "comment line")
        if len(header) < MSP_SCHEMA.n_header_lines:
            raise EmptyFileError(fn, "header line")
        names = MSP_SCHEMA.split(header[-1])
        if len(names) < width:
            raise MalformedRowError(fn, MSP_SCHEMA.n_header_lines,
                                    f"expected at least {width} columns")
        haplotypes = [names[c] for c in columns]

        with tqdm(desc="Reading windows", unit=" windows",
                  disable=not verbose) as pbar:
            for batch in batched_lines(f, chunk.nloci,
                                       MSP_SCHEMA.n_header_lines + 1):
                w, raw = _parse_batch(fn, batch, columns, width)
                lab, bad = _coerce_labels(raw)
                windows.append(w)
                labels.append(lab)
                n_coerced += bad
                pbar.update(len(batch))

    if n_coerced:
        logger.warning("%d label cells in '%s' were not valid ancestry "
                       "codes and were set to %d.", n_coerced, fn, MISSING)
    if windows:
        windows = concatenate(windows, axis=0)
        labels = concatenate(labels, axis=0)
    else:
        windows = empty((0, 2), dtype=uint32)
        labels = empty((0, len(indices)), dtype=uint8)
    _check_window_order(fn, windows)
    return windows, labels, haplotypes


def _parse_batch(fn: str, batch: List[Tuple[int, str]], columns: List[int],
                 width: int) -> Tuple[ndarray, List[List[str]]]:
    start_col, end_col = MSP_SCHEMA.position_columns
    windows, raw = [], []
    for lineno, line in batch:
        fields = MSP_SCHEMA.split(line)
        if len(fields) < width:
            raise MalformedRowError(
                fn, lineno,
                f"expected at least {width} columns, found {len(fields)}")
        try:
            start, end = int(fields[start_col]), int(fields[end_col])
        except ValueError:
            start = end = -1
        if not (0 <= start <= _MAX_COORD and 0 <= end <= _MAX_COORD):
            raise MalformedRowError(
                fn, lineno,
                f"window boundaries '{fields[start_col]}', "
                f"'{fields[end_col]}' are not unsigned 32-bit integers")
        windows.append((start, end))
        raw.append([fields[c] for c in columns])
    return asarray(windows, dtype=uint32), raw


def _coerce_labels(raw: List[List[str]]) -> Tuple[ndarray, int]:
    """Convert label strings to codes, mapping invalid cells to MISSING."""
    n_rows, n_cols = len(raw), len(raw[0])
    cells = Series([v for row in raw for v in row], dtype=str)
    digits = cells.str.fullmatch(r"\+?[0-9]+").to_numpy(dtype=bool)
    values = to_numeric(cells.where(digits), errors="coerce").to_numpy(
        dtype=float)
    valid = digits & (values <= 255)
    out = values.copy()
    out[~valid] = MISSING
    return out.astype(uint8).reshape(n_rows, n_cols), int((~valid).sum())


def _check_window_order(fn: str, windows: ndarray) -> None:
    first_row = MSP_SCHEMA.n_header_lines + 1
    for w, (start, end) in enumerate(windows):
        if start > end:
            raise WindowOrderError(fn, first_row + w,
                                   f"window start {start} exceeds end {end}")
        if w and start <= windows[w - 1, 1]:
            raise WindowOrderError(
                fn, first_row + w,
                f"window starting at {start} overlaps or precedes the "
                f"previous window ending at {windows[w - 1, 1]}")


def read_populations(fn: str) -> Dict[str, int]:
    """
    Parse the subpopulation codes from the MSP comment line.

    Example
    -------
    ``#Subpopulation order/codes: AFR=0	EUR=1`` gives
    ``{"AFR": 0, "EUR": 1}``.
    """
    with open_text(fn) as f:
        lines = read_header_lines(f, 1)
    if not lines:
        raise EmptyFileError(fn, "comment line")
    m = search(r":\s*(.+)$", lines[0].strip())
    if not m:
        return {}
    populations = {}
    for pair in m.group(1).split():
        label, _, code = pair.partition("=")
        if code.isdigit():
            populations[label] = int(code)
    return populations
