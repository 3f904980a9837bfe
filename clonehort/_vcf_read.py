from os.path import exists
from typing import Iterator, TextIO

from tqdm import tqdm
from cyvcf2 import VCF
from pandas import DataFrame

__all__ = ["count_alleles", "write_allele_counts"]


def count_alleles(vcf_file: str, chunk_size: int = 100_000,
                  verbose: bool = False) -> Iterator[DataFrame]:
    """
    Count reference, alternate and missing alleles per sample and locus.

    Parameters
    ----------
    vcf_file : str
        Path to a VCF or BCF file, optionally BGZF compressed.
    chunk_size : int
        Number of variant records per yielded chunk.
    verbose : bool
        :const:`True` for progress information; :const:`False` otherwise.

    Yields
    ------
    DataFrame
        Columns 'chromosome', 'physical_position', 'alleles', 'sample',
        'n_ref', 'n_alt' and 'n_missing', one row per sample and record.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be a positive integer.")
    if not exists(vcf_file):
        raise FileNotFoundError(f"VCF file not found: {vcf_file}")

    vcf = VCF(vcf_file)
    samples = vcf.samples
    records, count = [], 0
    for rec in tqdm(vcf, desc="Counting alleles", unit=" records",
                    disable=not verbose):
        alleles = ",".join([rec.REF] + rec.ALT)
        for sample, gt in zip(samples, rec.genotypes):
            called = gt[:-1]  # last entry is the phasing flag
            records.append({
                "chromosome": rec.CHROM,
                "physical_position": rec.POS,
                "alleles": alleles,
                "sample": sample,
                "n_ref": sum(a == 0 for a in called),
                "n_alt": sum(a > 0 for a in called),
                "n_missing": sum(a < 0 for a in called),
            })
        count += 1
        if count % chunk_size == 0:
            yield DataFrame(records)
            records = []
    vcf.close()

    if records:
        yield DataFrame(records)


def write_allele_counts(vcf_file: str, out: TextIO,
                        chunk_size: int = 100_000,
                        verbose: bool = False) -> int:
    """Write :func:`count_alleles` output as TSV; return the rows written."""
    n = 0
    for df in count_alleles(vcf_file, chunk_size, verbose):
        df.to_csv(out, sep="\t", index=False, header=n == 0)
        n += df.shape[0]
    return n
