from typing import Optional
from dataclasses import dataclass

__all__ = ["Chunk"]


@dataclass(frozen=True)
class Chunk:
    """
    Settings for streaming RFMix text files.

    Parameters
    ----------
    nloci : int
        Number of lines read per batch. Default: 100,000.
    n_threads : int, optional
        Size of the worker pool reducing windows. :const:`None` uses every
        available CPU.
    """
    nloci: int = 100_000
    n_threads: Optional[int] = None

    def __post_init__(self):
        if self.nloci <= 0:
            raise ValueError("nloci must be a positive integer.")
        if self.n_threads is not None and self.n_threads <= 0:
            raise ValueError("n_threads must be a positive integer.")

    @property
    def workers(self) -> int:
        from multiprocessing import cpu_count
        return self.n_threads if self.n_threads is not None else cpu_count()
