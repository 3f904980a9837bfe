from typing import Optional, Tuple

from numpy import int64, ndarray, ones

__all__ = ["concordance"]


def concordance(
        reference: ndarray, target: ndarray, alignment: ndarray,
        filt: Optional[ndarray] = None,
) -> Tuple[ndarray, ndarray]:
    """
    Count, per reference haplotype, the compared windows and the windows
    whose ancestry calls agree with the target.

    Parameters
    ----------
    reference : ndarray
        (windows, haplotypes) reference ancestry codes.
    target : ndarray
        (windows, haplotypes) target ancestry codes.
    alignment : ndarray
        Target column of each reference column, see
        :func:`align_haplotypes`.
    filt : ndarray, optional
        Boolean mask shaped like `reference`; only :const:`True` cells are
        compared. :const:`None` compares every window.

    Returns
    -------
    shared : ndarray
        Agreeing windows per reference haplotype.
    total : ndarray
        Compared windows per reference haplotype.
    """
    if reference.shape[0] != target.shape[0]:
        raise ValueError(
            f"Reference has {reference.shape[0]} windows but target has "
            f"{target.shape[0]}.")
    if len(alignment) != reference.shape[1]:
        raise ValueError("Alignment must map every reference haplotype.")
    if filt is None:
        filt = ones(reference.shape, dtype=bool)
    elif filt.shape != reference.shape:
        raise ValueError(
            f"Filter shape {filt.shape} does not match labels "
            f"{reference.shape}.")

    agree = reference == target[:, alignment]
    total = filt.sum(axis=0, dtype=int64)
    shared = (agree & filt).sum(axis=0, dtype=int64)
    return shared, total
