"""
Windowed aggregation of RFMix `.fb.tsv` posterior probabilities.

The FB file holds a population line, a header line, and one row per locus
with `L` posterior probabilities per haplotype, haplotype-major::

    #reference_panel_population:	AFR	EUR	NAT
    chromosome	physical_position	genetic_position	genetic_marker_index	...
    chr22	16050075	0.0	0	0.98	0.01	0.01	...

Loci are grouped into the windows of the matching `.msp.tsv` file and the
mean posterior of each haplotype's called ancestry decides whether that
window is kept for comparison.
"""
import logging
from typing import Callable, List, Optional, Sequence, Tuple
from concurrent.futures import Future, ThreadPoolExecutor

from tqdm import tqdm
from pandas import Series, to_numeric
from numpy import (
    asarray,
    concatenate,
    flatnonzero,
    float64,
    int64,
    ndarray,
    searchsorted,
    zeros,
)

from ._chunk import Chunk
from ._schema import FB_SCHEMA
from ._utils import batched_lines, open_text, read_header_lines
from ._errorhandling import EmptyFileError, MalformedRowError

__all__ = ["window_filter", "read_fb_populations"]

logger = logging.getLogger(__name__)


def window_filter(
        fn: str, indices: Sequence[int], windows: ndarray, labels: ndarray,
        threshold: Optional[float] = None, chunk: Chunk = Chunk(),
        verbose: bool = True,
) -> ndarray:
    """
    Decide per window and haplotype whether the called ancestry is confident.

    Parameters
    ----------
    fn : str
        Path to the `.fb.tsv` (or `.fb.tsv.gz`) file of the same run as
        `labels`.
    indices : sequence of int
        Haplotype column offsets resolved from the run's MSP header. FB
        haplotype blocks follow the MSP column order.
    windows : ndarray
        (windows, 2) start and end positions from :func:`read_msp`.
    labels : ndarray
        (windows, haplotypes) called ancestry codes from :func:`read_msp`.
    threshold : float, optional
        Minimum mean posterior of the called ancestry. :const:`None` means
        `0.0`, which keeps every window that has loci.
    chunk : Chunk
        Lines per batch and worker pool size.
    verbose : bool
        :const:`True` for progress information; :const:`False` otherwise.

    Returns
    -------
    ndarray
        Boolean array shaped like `labels`. Windows without loci and
        haplotypes whose call is unknown are rejected.

    Raises
    ------
    EmptyFileError
        If the population or header line is missing.
    MalformedRowError
        If a row is too short, a position is not an integer, or positions
        decrease.
    """
    threshold = 0.0 if threshold is None else float(threshold)
    n_windows, n_haps = windows.shape[0], len(indices)
    if n_haps == 0:
        raise ValueError("At least one haplotype column is required.")
    if labels.shape != (n_windows, n_haps):
        raise ValueError(
            f"Labels shape {labels.shape} does not match {n_windows} "
            f"windows and {n_haps} haplotypes.")

    with open_text(fn) as f:
        header = read_header_lines(f, FB_SCHEMA.n_header_lines)
        if len(header) == 0:
            raise EmptyFileError(fn, "population line")
        n_labels = len(FB_SCHEMA.split(header[0])) - 1
        if n_labels < 1:
            raise MalformedRowError(fn, 1, "no ancestry labels in header")
        if len(header) < FB_SCHEMA.n_header_lines:
            raise EmptyFileError(fn, "header line")

        unknown = int((labels >= n_labels).sum())
        if unknown:
            logger.warning("%d window calls are not among the %d ancestries "
                           "of '%s' and will be rejected.", unknown,
                           n_labels, fn)

        columns = FB_SCHEMA.strided_columns(indices, n_labels)
        width = max(FB_SCHEMA.required_width(0), max(columns) + 1)
        slots: List[Optional[Future]] = [None] * n_windows

        with tqdm(desc="Aggregating windows", total=n_windows,
                  unit=" windows", disable=not verbose) as pbar, \
                ThreadPoolExecutor(max_workers=chunk.workers) as executor:
            def dispatch(w: int, block: Optional[ndarray]) -> None:
                if block is not None:
                    slots[w] = executor.submit(_reduce_window, block,
                                               labels[w], n_labels, threshold)
                pbar.update(1)

            stream = _WindowStream(windows[:, 0], windows[:, 1], dispatch)
            last_position, n_coerced = None, 0
            for batch in batched_lines(f, chunk.nloci,
                                       FB_SCHEMA.n_header_lines + 1):
                positions, probs, bad = _parse_batch(fn, batch, columns,
                                                     width, last_position)
                last_position = positions[-1]
                n_coerced += bad
                stream.feed(positions, probs)
                if stream.closed:
                    break
            stream.finish()

            filt = zeros((n_windows, n_haps), dtype=bool)
            for w, slot in enumerate(slots):
                if slot is not None:
                    filt[w] = slot.result()

    if n_coerced:
        logger.warning("%d probability cells in '%s' were not numbers and "
                       "were read as 0.", n_coerced, fn)
    empty = sum(slot is None for slot in slots)
    if empty:
        logger.warning("%d of %d windows have no loci in '%s' and are "
                       "rejected.", empty, n_windows, fn)
    return filt


class _WindowStream:
    """
    Assign position-ordered loci to consecutive windows.

    A locus joins the open window while its position lies within the
    window's start and end; loci before the start are outside every window
    and are skipped. The first locus past the end closes the window, handing
    its block to `on_close`, and opens the next window as that window's
    first locus.
    """
    def __init__(self, starts: ndarray, ends: ndarray,
                 on_close: Callable[[int, Optional[ndarray]], None]):
        self.starts = starts
        self.ends = ends
        self.on_close = on_close
        self.window = 0
        self.block: List[ndarray] = []
        self.opening = False

    @property
    def closed(self) -> bool:
        return self.window >= len(self.ends)

    def feed(self, positions: ndarray, probs: ndarray) -> None:
        i, n = 0, len(positions)
        while i < n and not self.closed:
            # the opening locus belongs to this window whatever its position
            j = i + 1 if self.opening else i
            if self.opening:
                self.block.append(probs[i:j])
            past = flatnonzero(positions[j:] > self.ends[self.window])
            k = j + past[0] if past.size else n
            inside = j + searchsorted(positions[j:k],
                                      self.starts[self.window], side="left")
            self.block.append(probs[inside:k])
            if past.size == 0:
                self.opening = False
                return
            self._close()
            i, self.opening = k, True

    def finish(self) -> None:
        """Close the open window once input is exhausted."""
        if not self.closed:
            self._close()

    def _close(self) -> None:
        block = concatenate(self.block, axis=0) if self.block else None
        if block is not None and block.shape[0] == 0:
            block = None
        self.on_close(self.window, block)
        self.window += 1
        self.block = []


def _parse_batch(
        fn: str, batch: List[Tuple[int, str]], columns: List[int], width: int,
        last_position: Optional[int],
) -> Tuple[ndarray, ndarray, int]:
    pos_col = FB_SCHEMA.position_columns[0]
    positions, raw = [], []
    for lineno, line in batch:
        fields = FB_SCHEMA.split(line)
        if len(fields) < width:
            raise MalformedRowError(
                fn, lineno,
                f"expected at least {width} columns, found {len(fields)}")
        try:
            position = int(fields[pos_col])
        except ValueError:
            raise MalformedRowError(
                fn, lineno, f"position '{fields[pos_col]}' is not an integer")
        if last_position is not None and position < last_position:
            raise MalformedRowError(
                fn, lineno,
                f"position {position} precedes position {last_position}")
        last_position = position
        positions.append(position)
        raw.extend(fields[c] for c in columns)

    values = to_numeric(Series(raw, dtype=object), errors="coerce")
    bad = int(values.isna().sum())
    probs = values.fillna(0.0).to_numpy(dtype=float64)
    return (asarray(positions, dtype=int64),
            probs.reshape(len(positions), len(columns)), bad)


def _reduce_window(block: ndarray, called: ndarray, n_labels: int,
                   threshold: float) -> ndarray:
    """Mean posterior of each haplotype's called ancestry against threshold."""
    means = block.reshape(block.shape[0], -1, n_labels).mean(axis=0)
    keep = zeros(len(called), dtype=bool)
    known = flatnonzero(called < n_labels)
    keep[known] = means[known, called[known]] >= threshold
    return keep


def read_fb_populations(fn: str) -> List[str]:
    """Return the ancestry labels named on the FB population line."""
    with open_text(fn) as f:
        header = read_header_lines(f, 1)
    if not header:
        raise EmptyFileError(fn, "population line")
    return FB_SCHEMA.split(header[0])[1:]
