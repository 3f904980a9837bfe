from typing import FrozenSet, Iterable, List, Sequence

from numpy import asarray, intp, ndarray

from ._schema import MSP_SCHEMA
from ._utils import open_text, read_header_lines
from ._errorhandling import EmptyFileError, SampleMismatchError

__all__ = [
    "read_samples",
    "expand_haplotypes",
    "resolve_haplotype_indices",
    "check_resolved",
    "align_haplotypes",
]

HAPLOTYPE_SUFFIXES = (".0", ".1")


def expand_haplotypes(sample_names: Iterable[str]) -> FrozenSet[str]:
    """Expand diploid sample names into their two haplotype identifiers."""
    return frozenset(f"{s}{suffix}" for s in sample_names
                     for suffix in HAPLOTYPE_SUFFIXES)


def read_samples(fn: str) -> FrozenSet[str]:
    """
    Read a newline-separated list of sample names into a haplotype set.

    Parameters
    ----------
    fn : str
        Path to the sample list. Blank lines are ignored.

    Returns
    -------
    frozenset of str
        Two identifiers per sample, suffixed `.0` and `.1`.

    Raises
    ------
    EmptyFileError
        If the file names no samples.
    """
    with open_text(fn) as f:
        names = [line.strip() for line in f if line.strip()]
    if not names:
        raise EmptyFileError(fn, "sample names")
    return expand_haplotypes(names)


def _read_msp_header(fn: str) -> List[str]:
    with open_text(fn) as f:
        lines = read_header_lines(f, MSP_SCHEMA.n_header_lines)
    if len(lines) < MSP_SCHEMA.n_header_lines:
        raise EmptyFileError(fn, "header line")
    return MSP_SCHEMA.split(lines[-1])


def resolve_haplotype_indices(fn: str, haplotypes: FrozenSet[str]
                              ) -> List[int]:
    """
    Return the offsets, in file order, of the haplotype columns of an MSP
    file whose header label is in `haplotypes`.

    Offsets count from the first column after the metadata block. The
    result is not checked for completeness; see :func:`check_resolved`.
    """
    header = MSP_SCHEMA.data_columns(_read_msp_header(fn))
    return [i for i, hap in enumerate(header) if hap in haplotypes]


def check_resolved(fn: str, indices: Sequence[int],
                   haplotypes: FrozenSet[str]) -> None:
    """Raise :class:`SampleMismatchError` unless every haplotype resolved."""
    if len(indices) == len(haplotypes):
        return
    header = MSP_SCHEMA.data_columns(_read_msp_header(fn))
    found = {header[i] for i in indices}
    raise SampleMismatchError(fn, len(haplotypes), len(indices),
                              haplotypes - found)


def align_haplotypes(reference_ids: Sequence[str],
                     target_ids: Sequence[str]) -> ndarray:
    """
    Map each reference haplotype position to the position of the same
    haplotype in the target.

    Raises
    ------
    SampleMismatchError
        If a reference haplotype does not occur in the target.
    """
    position = {hap: j for j, hap in enumerate(target_ids)}
    missing = [hap for hap in reference_ids if hap not in position]
    if missing:
        raise SampleMismatchError("target", len(reference_ids),
                                  len(reference_ids) - len(missing), missing)
    return asarray([position[hap] for hap in reference_ids], dtype=intp)
