from clonehort import FB_SCHEMA, MSP_SCHEMA, ColumnSchema

# ---------------------------
# COLUMN SCHEMA TESTS
# ---------------------------

def test_split_strips_line_ending():
    assert ColumnSchema.split("a\tb\tc\n") == ["a", "b", "c"]


def test_msp_offsets():
    fields = ["chr22", "1", "9", "0.1", "0.2", "3", "HG.0", "HG.1"]
    assert list(MSP_SCHEMA.data_columns(fields)) == ["HG.0", "HG.1"]
    assert MSP_SCHEMA.column(0) == 6
    assert MSP_SCHEMA.required_width(1) == 8


def test_fb_strided_columns_are_haplotype_major():
    # haplotypes 0 and 2 with three ancestries each
    assert FB_SCHEMA.strided_columns([0, 2], 3) == [4, 5, 6, 10, 11, 12]


def test_required_width_covers_positions():
    schema = ColumnSchema(n_header_lines=1, n_meta_columns=0,
                          position_columns=(3,))
    assert schema.required_width(0) == 4
