import pytest
import numpy as np

from clonehort import (
    EmptyFileError,
    SampleMismatchError,
    align_haplotypes,
    check_resolved,
    expand_haplotypes,
    read_samples,
    resolve_haplotype_indices,
)
from conftest import SAMPLES

# ---------------------------
# SAMPLE INDEX RESOLVER TESTS
# ---------------------------

def test_expand_haplotypes():
    assert expand_haplotypes(["A", "B"]) == {"A.0", "A.1", "B.0", "B.1"}


def test_read_samples_ignores_blank_lines(tmp_path):
    fn = tmp_path / "samples.txt"
    fn.write_text("A\n\nB\n\n")
    assert read_samples(str(fn)) == {"A.0", "A.1", "B.0", "B.1"}


def test_read_samples_empty(tmp_path):
    fn = tmp_path / "samples.txt"
    fn.write_text("\n")
    with pytest.raises(EmptyFileError):
        read_samples(str(fn))


def test_resolve_in_file_order(toy_dataset):
    haplotypes = expand_haplotypes(SAMPLES)
    ref = resolve_haplotype_indices(toy_dataset["reference"] + ".msp.tsv",
                                    haplotypes)
    target = resolve_haplotype_indices(toy_dataset["target"] + ".msp.tsv",
                                       haplotypes)
    assert ref == [0, 1, 4, 5, 6, 7, 8, 9]
    assert target == [0, 1, 2, 3, 4, 5, 6, 7]


def test_resolve_is_deterministic(toy_dataset):
    haplotypes = expand_haplotypes(SAMPLES)
    fn = toy_dataset["reference"] + ".msp.tsv"
    assert (resolve_haplotype_indices(fn, haplotypes)
            == resolve_haplotype_indices(fn, haplotypes))


def test_resolve_missing_header(tmp_path):
    fn = tmp_path / "run.msp.tsv"
    fn.write_text("#Subpopulation order/codes: AFR=0\n")
    with pytest.raises(EmptyFileError, match="header line"):
        resolve_haplotype_indices(str(fn), frozenset({"A.0"}))


def test_check_resolved_mismatch(toy_dataset):
    haplotypes = expand_haplotypes(SAMPLES + ["HG99999"])
    fn = toy_dataset["reference"] + ".msp.tsv"
    indices = resolve_haplotype_indices(fn, haplotypes)
    assert len(indices) == 8
    with pytest.raises(SampleMismatchError) as excinfo:
        check_resolved(fn, indices, haplotypes)
    assert excinfo.value.missing == ["HG99999.0", "HG99999.1"]


def test_check_resolved_complete(toy_dataset):
    haplotypes = expand_haplotypes(SAMPLES)
    fn = toy_dataset["target"] + ".msp.tsv"
    check_resolved(fn, resolve_haplotype_indices(fn, haplotypes), haplotypes)


def test_align_haplotypes():
    alignment = align_haplotypes(["A.0", "A.1", "B.0"], ["B.0", "A.1", "A.0"])
    assert alignment.tolist() == [2, 1, 0]
    assert alignment.dtype == np.intp


def test_align_haplotypes_missing():
    with pytest.raises(SampleMismatchError, match="A.1"):
        align_haplotypes(["A.0", "A.1"], ["A.0", "B.0"])
