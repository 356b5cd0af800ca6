from isodump.services.dump import render, render_raw, render_structured

# offset label + hex area of a full row + separator
ASCII_COLUMN = 10 + 97 + 1


def test_full_row():
    data = bytes(range(0x40, 0x60))
    expected = (
        "00000000  "
        + "".join(f"{b:02x} " for b in data[:16])
        + " "
        + "".join(f"{b:02x} " for b in data[16:])
        + " "
        + data.decode("ascii")
        + "\n"
    )
    assert render_structured(data) == expected


def test_non_printable_bytes_show_as_dots():
    line = render_structured(b"\x00A\x7fB\xff")
    assert line.endswith(" .A.B.\n")


def test_short_row_is_padded():
    line = render_structured(b"ABCDE", indent=2)

    assert line.startswith("  00000000  41 42 43 44 45 ")
    assert line.endswith(" ABCDE\n")
    assert len(line) == 2 + ASCII_COLUMN + 5 + 1


def test_ascii_column_is_aligned():
    for length in (1, 15, 17, 31, 32):
        line = render_structured(b"x" * length)
        assert line.index("x" * length) == ASCII_COLUMN, length


def test_row_of_exactly_one_group_has_no_gap_padding():
    line = render_structured(b"y" * 16)

    assert line.index("y" * 16) == ASCII_COLUMN - 1
    assert line == "00000000  " + "79 " * 16 + "   " * 16 + " " + "y" * 16 + "\n"


def test_final_row_of_one_group_after_full_row():
    lines = render_structured(b"z" * 48).splitlines()

    assert lines[0].index("z" * 32) == ASCII_COLUMN
    assert lines[1].index("z" * 16) == ASCII_COLUMN - 1


def test_multiple_rows():
    lines = render_structured(b"a" * 40, indent=13).splitlines()

    assert len(lines) == 2
    assert lines[0].startswith(" " * 13 + "00000000  ")
    assert lines[1].startswith(" " * 13 + "00000020  ")
    assert lines[0].endswith(" " + "a" * 32)
    assert lines[1].endswith(" " + "a" * 8)


def test_empty_structured():
    assert render_structured(b"") == ""


def test_raw_mode():
    assert render_raw(b"ab\x00\n\tc\xff") == "ab\\x00\n\tc\\xff\n"


def test_raw_empty():
    assert render_raw(b"") == "\n"


def test_render_dispatch():
    data = b"isom\x00\x00\x02\x00"
    assert render(data, indent=4) == render_structured(data, 4)
    assert render(data, indent=4, raw=True) == render_raw(data)
