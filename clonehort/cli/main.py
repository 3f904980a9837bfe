import sys
import logging
import argparse

from .. import __version__
from .._chunk import Chunk
from .._compare import compare
from .._report import format_report
from .._vcf_read import write_allele_counts
from .._errorhandling import ClonehortError


DESCRIPTION = (
    "Compare local ancestry calls between two RFMix runs."
)
COMPARE_DESCRIPTION = (
    "Compare the calls of a reference and a target run. Requires "
    "<reference>.msp.tsv and <target>.msp.tsv, and <reference>.fb.tsv when "
    "a threshold is given."
)
PREPARE_DESCRIPTION = (
    "Count reference, alternate and missing alleles per sample from a "
    "VCF/BCF file."
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="clonehort",
                                     description=DESCRIPTION)
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
        help="Show the version of the program and exit.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    cmp = subparsers.add_parser("compare", help="Compare two runs.",
                                description=COMPARE_DESCRIPTION)
    cmp.add_argument(
        "-s", "--samples", required=True,
        help="Newline-separated file of sample names to compare.",
    )
    cmp.add_argument(
        "-r", "--reference", required=True,
        help="Path and prefix of the reference run.",
    )
    cmp.add_argument(
        "-t", "--target", required=True,
        help="Path and prefix of the target run.",
    )
    cmp.add_argument(
        "--threshold", type=float, default=None,
        help="Posterior probability threshold for the inclusion of a "
             "window in the comparison.",
    )
    cmp.add_argument(
        "--threads", type=int, default=None,
        help="Worker threads for window aggregation (default: all CPUs).",
    )
    cmp.add_argument(
        "--chunk-size", type=int, default=100_000,
        help="Lines read per batch (default: 100000).",
    )
    cmp.add_argument(
        "--verbose",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Print progress messages (default: enabled).",
    )

    prep = subparsers.add_parser("prepare", help="Count VCF alleles.",
                                 description=PREPARE_DESCRIPTION)
    prep.add_argument(
        "vcf_path",
        help="Path to a VCF/BCF file.",
    )
    prep.add_argument(
        "-o", "--output", default=None,
        help="Output TSV path (default: standard output).",
    )
    prep.add_argument(
        "--chunk-size", type=int, default=100_000,
        help="Variant records per chunk (default: 100000).",
    )
    return parser


def _run_compare(args) -> None:
    df = compare(
        args.samples,
        args.reference,
        args.target,
        threshold=args.threshold,
        chunk=Chunk(nloci=args.chunk_size, n_threads=args.threads),
        verbose=args.verbose,
    )
    print(format_report(df))


def _run_prepare(args) -> None:
    if args.output is None:
        write_allele_counts(args.vcf_path, sys.stdout, args.chunk_size)
        return
    with open(args.output, "w") as out:
        write_allele_counts(args.vcf_path, out, args.chunk_size, verbose=True)


def main(argv=None) -> None:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if getattr(args, "verbose", False)
        else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    try:
        if args.command == "compare":
            _run_compare(args)
        else:
            _run_prepare(args)
    except (ClonehortError, OSError, ValueError) as e:
        print(f"clonehort: error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
