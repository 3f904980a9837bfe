from dataclasses import dataclass
from typing import List, Sequence, Tuple

__all__ = ["ColumnSchema", "MSP_SCHEMA", "FB_SCHEMA"]


@dataclass(frozen=True)
class ColumnSchema:
    """
    Column layout of one RFMix text format.

    Haplotype data columns are addressed by their offset from the first
    column after the metadata block, which is how the header resolves them.

    Parameters
    ----------
    n_header_lines : int
        Lines preceding the first data row.
    n_meta_columns : int
        Leading annotation columns on every row.
    position_columns : tuple of int
        Columns holding genomic coordinates.
    """
    n_header_lines: int
    n_meta_columns: int
    position_columns: Tuple[int, ...]

    @staticmethod
    def split(line: str) -> List[str]:
        return line.strip().split("\t")

    def data_columns(self, fields: Sequence[str]) -> Sequence[str]:
        return fields[self.n_meta_columns:]

    def column(self, offset: int) -> int:
        return self.n_meta_columns + offset

    def required_width(self, max_offset: int) -> int:
        """Smallest field count of a row holding data offset `max_offset`."""
        return max(self.column(max_offset) + 1, max(self.position_columns) + 1)

    def strided_columns(self, indices: Sequence[int], stride: int) -> List[int]:
        """
        Absolute columns of the `stride` contiguous values stored per
        haplotype, in haplotype-major order.
        """
        return [self.column(h * stride + k)
                for h in indices for k in range(stride)]


# chm, spos, epos, sgpos, egpos, n snps
MSP_SCHEMA = ColumnSchema(n_header_lines=2, n_meta_columns=6,
                          position_columns=(1, 2))
# chromosome, physical_position, genetic_position, genetic_marker_index
FB_SCHEMA = ColumnSchema(n_header_lines=2, n_meta_columns=4,
                         position_columns=(1,))
