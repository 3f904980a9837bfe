import logging
from typing import Optional

from pandas import DataFrame
from numpy import flatnonzero, ndarray

from ._chunk import Chunk
from ._schema import MSP_SCHEMA
from ._utils import get_prefixes
from ._msp_read import read_msp, read_populations
from ._fb_read import window_filter, read_fb_populations
from ._errorhandling import MalformedRowError
from ._concordance import concordance
from ._samples import (
    read_samples,
    check_resolved,
    align_haplotypes,
    resolve_haplotype_indices,
)

__all__ = ["compare"]

logger = logging.getLogger(__name__)


def compare(
        samples: str, reference: str, target: str,
        threshold: Optional[float] = None, chunk: Chunk = Chunk(),
        verbose: bool = True,
) -> DataFrame:
    """
    Compare the local ancestry calls of two RFMix runs, a reference and a
    target, over the haplotypes of a shared sample list.

    Requires `<reference>.msp.tsv` and `<target>.msp.tsv`, and
    `<reference>.fb.tsv` when a threshold is given. Gzip-compressed files
    (`.gz`) are used when the plain ones are absent.

    Parameters
    ----------
    samples : str
        Newline-separated file of sample names to compare.
    reference : str
        Path and prefix of the reference run.
    target : str
        Path and prefix of the target run.
    threshold : float, optional
        Minimum mean posterior probability of the reference call for a
        window to be compared. :const:`None` compares every window.
    chunk : Chunk
        Streaming and worker pool settings.
    verbose : bool
        :const:`True` for progress information; :const:`False` otherwise.

    Returns
    -------
    DataFrame
        One row per haplotype, in reference column order, with columns
        'haplotype', 'shared' and 'total'.

    Raises
    ------
    SampleMismatchError
        If either MSP file lacks a requested haplotype.
    MalformedRowError
        If the target windows differ from the reference windows, or the
        FB ancestries do not match the MSP subpopulation codes.
    ValueError
        If the two runs have different numbers of windows.
    """
    ref_fn = get_prefixes(reference)
    target_fn = get_prefixes(target, ("msp.tsv",))

    haplotypes = read_samples(samples)
    ref_indices = resolve_haplotype_indices(ref_fn["msp.tsv"], haplotypes)
    target_indices = resolve_haplotype_indices(target_fn["msp.tsv"],
                                               haplotypes)
    check_resolved(ref_fn["msp.tsv"], ref_indices, haplotypes)
    check_resolved(target_fn["msp.tsv"], target_indices, haplotypes)
    logger.info("Comparing %d haplotypes.", len(haplotypes))

    windows, ref_labels, ref_haps = read_msp(ref_fn["msp.tsv"], ref_indices,
                                             chunk, verbose)
    target_windows, target_labels, target_haps = read_msp(
        target_fn["msp.tsv"], target_indices, chunk, verbose)
    _check_windows(target_fn["msp.tsv"], windows, target_windows)
    alignment = align_haplotypes(ref_haps, target_haps)

    filt = None
    if threshold is not None:
        _check_populations(ref_fn["msp.tsv"], ref_fn["fb.tsv"])
        filt = window_filter(ref_fn["fb.tsv"], ref_indices, windows,
                             ref_labels, threshold, chunk, verbose)

    shared, total = concordance(ref_labels, target_labels, alignment, filt)
    return DataFrame({"haplotype": ref_haps, "shared": shared,
                      "total": total})


def _check_windows(fn: str, windows: ndarray, target_windows: ndarray) -> None:
    if target_windows.shape[0] != windows.shape[0]:
        raise ValueError(
            f"Reference has {windows.shape[0]} windows but target '{fn}' has "
            f"{target_windows.shape[0]}.")
    differ = flatnonzero((target_windows != windows).any(axis=1))
    if differ.size:
        w = differ[0]
        raise MalformedRowError(
            fn, MSP_SCHEMA.n_header_lines + 1 + w,
            f"window {target_windows[w, 0]}-{target_windows[w, 1]} differs "
            f"from reference window {windows[w, 0]}-{windows[w, 1]}")


def _check_populations(msp_fn: str, fb_fn: str) -> None:
    """FB probability blocks must follow the MSP subpopulation codes."""
    codes = read_populations(msp_fn)
    labels = read_fb_populations(fb_fn)
    expected = sorted(codes, key=codes.get)
    if codes and labels != expected:
        raise MalformedRowError(
            fb_fn, 1,
            f"ancestries {labels} do not match the subpopulation codes "
            f"{expected} of '{msp_fn}'")
