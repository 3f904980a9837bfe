from pathlib import Path
import sys

import pytest

REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

POPULATIONS = ["AFR", "EUR", "NAT"]
SAMPLES = ["HG01565", "HG01566", "NA19648", "NA19649"]

# Seven windows of calls per haplotype, in reference column order.
REFERENCE_CALLS = {
    "HG01565.0": [0, 0, 0, 1, 1, 1, 2],
    "HG01565.1": [1, 1, 1, 1, 0, 0, 0],
    "HG01566.0": [2, 2, 0, 0, 0, 1, 1],
    "HG01566.1": [0, 0, 0, 0, 2, 2, 2],
    "NA19648.0": [0, 1, 2, 0, 1, 2, 0],
    "NA19648.1": [2, 2, 2, 2, 2, 2, 2],
    "NA19649.0": [1, 1, 1, 2, 2, 2, 0],
    "NA19649.1": [0, 0, 1, 1, 2, 2, 2],
}
TARGET_CALLS = {
    "HG01565.0": [0, 0, 0, 1, 1, 1, 2],
    "HG01565.1": [1, 1, 1, 1, 0, 0, 0],
    "HG01566.0": [1, 1, 0, 0, 0, 1, 1],
    "HG01566.1": [0, 0, 0, 0, 2, 2, 1],
    "NA19648.0": [1, 2, 0, 1, 2, 0, 1],
    "NA19648.1": [2, 2, 2, 2, 2, 2, 2],
    "NA19649.0": [0, 1, 0, 2, 0, 2, 0],
    "NA19649.1": [0, 0, 1, 1, 2, 2, 2],
}
# An unrequested sample present in both runs.
EXTRA_CALLS = {
    "NA12878.0": [0, 1, 0, 1, 0, 1, 0],
    "NA12878.1": [2, 2, 2, 1, 1, 1, 0],
}
EXPECTED_SHARED = [7, 7, 5, 6, 0, 7, 4, 7]

# Reference columns place the extra sample after the first sample; the
# target uses a different order altogether.
REFERENCE_ORDER = ["HG01565.0", "HG01565.1", "NA12878.0", "NA12878.1",
                   "HG01566.0", "HG01566.1", "NA19648.0", "NA19648.1",
                   "NA19649.0", "NA19649.1"]
TARGET_ORDER = ["NA19649.0", "NA19649.1", "HG01566.0", "HG01566.1",
                "HG01565.0", "HG01565.1", "NA19648.0", "NA19648.1",
                "NA12878.0", "NA12878.1"]

WINDOWS = [((k + 1) * 100_000, (k + 2) * 100_000 - 1) for k in range(7)]
LOCI_OFFSETS = (50_000, 90_000)


def msp_text(calls, order, windows=WINDOWS, chrom="chr22"):
    """Render an RFMix `.msp.tsv` file for `calls` in column `order`."""
    codes = "\t".join(f"{p}={i}" for i, p in enumerate(POPULATIONS))
    lines = [
        f"#Subpopulation order/codes: {codes}",
        "\t".join(["#chm", "spos", "epos", "sgpos", "egpos", "n snps"]
                  + list(order)),
    ]
    for w, (start, end) in enumerate(windows):
        row = [chrom, str(start), str(end), f"{w * 1.5:.2f}",
               f"{(w + 1) * 1.5:.2f}", str(len(LOCI_OFFSETS))]
        row += [str(calls[hap][w]) for hap in order]
        lines.append("\t".join(row))
    return "\n".join(lines) + "\n"


def fb_text(calls, order, confidence=0.9, windows=WINDOWS, chrom="chr22"):
    """
    Render an RFMix `.fb.tsv` file with two loci per window, giving each
    haplotype's called ancestry probability `confidence`.
    """
    rest = (1 - confidence) / (len(POPULATIONS) - 1)
    lines = [
        "\t".join(["#reference_panel_population:"] + POPULATIONS),
        "\t".join(["chromosome", "physical_position", "genetic_position",
                   "genetic_marker_index"]
                  + [f"{hap}:::hap{int(hap[-1]) + 1}:::{p}"
                     for hap in order for p in POPULATIONS]),
    ]
    marker = 0
    for w, (start, _) in enumerate(windows):
        for offset in LOCI_OFFSETS:
            row = [chrom, str(start + offset), f"{w * 1.5:.4f}", str(marker)]
            for hap in order:
                row += [f"{confidence if calls[hap][w] == p else rest:.5f}"
                        for p in range(len(POPULATIONS))]
            lines.append("\t".join(row))
            marker += 1
    return "\n".join(lines) + "\n"


@pytest.fixture
def toy_dataset(tmp_path):
    """
    Reference and target runs over four samples, with a sample list, in
    `tmp_path`. Returns the sample list path and both run prefixes.
    """
    ref_calls = {**REFERENCE_CALLS, **EXTRA_CALLS}
    target_calls = {**TARGET_CALLS, **EXTRA_CALLS}

    samples = tmp_path / "toy_samples.txt"
    samples.write_text("\n".join(SAMPLES) + "\n")
    (tmp_path / "toy_ref.msp.tsv").write_text(
        msp_text(ref_calls, REFERENCE_ORDER))
    (tmp_path / "toy_ref.fb.tsv").write_text(
        fb_text(ref_calls, REFERENCE_ORDER))
    (tmp_path / "toy_target.msp.tsv").write_text(
        msp_text(target_calls, TARGET_ORDER))
    return {
        "samples": str(samples),
        "reference": str(tmp_path / "toy_ref"),
        "target": str(tmp_path / "toy_target"),
    }
