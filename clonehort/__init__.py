from pathlib import Path
from sys import version_info

from ._chunk import Chunk
from ._compare import compare
from ._concordance import concordance
from ._fb_read import window_filter, read_fb_populations
from ._msp_read import read_msp, read_populations, MISSING
from ._report import concordance_table, format_report
from ._schema import ColumnSchema, MSP_SCHEMA, FB_SCHEMA
from ._vcf_read import count_alleles, write_allele_counts
from ._samples import (
    read_samples,
    check_resolved,
    align_haplotypes,
    expand_haplotypes,
    resolve_haplotype_indices,
)
from ._errorhandling import (
    ClonehortError,
    EmptyFileError,
    WindowOrderError,
    MalformedRowError,
    SampleMismatchError,
)

if version_info >= (3, 11):
    from tomllib import load
else:
    from toml import load

def get_version():
    """Read version dynamically from pyproject.toml"""
    pyproject_path = Path(__file__).resolve().parent.parent / "pyproject.toml"
    if pyproject_path.exists():
        mode = "rb" if version_info >= (3, 11) else "r"
        with pyproject_path.open(mode) as f:
            return load(f)["tool"]["poetry"]["version"]
    return "0.0.0" # Default fallback

__version__ = get_version()

__all__ = [
    "Chunk",
    "MISSING",
    "compare",
    "FB_SCHEMA",
    "read_msp",
    "MSP_SCHEMA",
    "__version__",
    "concordance",
    "ColumnSchema",
    "read_samples",
    "count_alleles",
    "format_report",
    "window_filter",
    "check_resolved",
    "ClonehortError",
    "EmptyFileError",
    "read_populations",
    "align_haplotypes",
    "WindowOrderError",
    "concordance_table",
    "expand_haplotypes",
    "MalformedRowError",
    "read_fb_populations",
    "write_allele_counts",
    "SampleMismatchError",
    "resolve_haplotype_indices",
]
