from pandas import DataFrame
from numpy import nan

__all__ = ["concordance_table", "format_report"]


def concordance_table(tally: DataFrame) -> DataFrame:
    """
    Add the fraction of compared windows that agree.

    Haplotypes without compared windows get a :data:`numpy.nan` ratio.
    """
    df = tally.copy()
    df["ratio"] = (df["shared"] / df["total"].where(df["total"] > 0, nan))
    return df


def format_report(tally: DataFrame) -> str:
    """
    Render per-haplotype concordance and the grand total, one line each::

        Sample HG01565.0: 7/7 = 1 shared
        ...
        Total: 43/56 = 0.7678571 shared
    """
    df = concordance_table(tally)
    lines = [
        f"Sample {row.haplotype}: {row.shared}/{row.total} = "
        f"{_fmt(row.ratio)} shared"
        for row in df.itertuples(index=False)
    ]
    shared, total = int(df["shared"].sum()), int(df["total"].sum())
    lines.append(f"Total: {shared}/{total} = "
                 f"{_fmt(shared / total if total else nan)} shared")
    return "\n".join(lines)


def _fmt(ratio: float) -> str:
    return f"{ratio:.7g}"
