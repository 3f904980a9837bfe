import gzip
from os.path import exists
from typing import Dict, IO, Iterator, List, Tuple

__all__ = [
    "batched_lines",
    "get_prefixes",
    "open_text",
    "read_header_lines",
]


def get_prefixes(file_prefix: str, suffixes=("msp.tsv", "fb.tsv")
                 ) -> Dict[str, str]:
    """
    Map each RFMix output suffix to its file for a run prefix.

    The plain file is preferred; a gzip-compressed `<prefix>.<suffix>.gz` is
    used when only that exists. When neither exists the plain path is kept
    so that opening it reports the missing file.
    """
    fn = {}
    for s in suffixes:
        path = f"{file_prefix}.{s}"
        if not exists(path) and exists(path + ".gz"):
            path += ".gz"
        fn[s] = path
    return fn


def open_text(path: str) -> IO[str]:
    if path.endswith(".gz"):
        return gzip.open(path, "rt")
    return open(path, "r")


def read_header_lines(handle: IO[str], n: int) -> List[str]:
    """Read up to `n` lines, stopping early at end of file."""
    lines = []
    for _ in range(n):
        line = handle.readline()
        if not line:
            break
        lines.append(line)
    return lines


def batched_lines(handle: IO[str], size: int, start: int = 1
                  ) -> Iterator[List[Tuple[int, str]]]:
    """Yield non-blank lines with their 1-based line numbers in batches."""
    batch = []
    for lineno, line in enumerate(handle, start):
        if not line.strip():
            continue
        batch.append((lineno, line))
        if len(batch) == size:
            yield batch
            batch = []
    if batch:
        yield batch
