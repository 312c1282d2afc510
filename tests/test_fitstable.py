import numpy as np
import pytest

from specfit.fitstable import read_table, write_table


def _block(cards):
    text = "".join(c.ljust(80) for c in cards) + "END".ljust(80)
    text = text.ljust(-(-len(text) // 2880) * 2880)
    return text.encode("ascii")


def test_scalar_columns_round_trip(tmp_path):
    path = tmp_path / "t.fits"
    write_table(path, {"l": [4000.0, 4001.5, 4003.0], "f": np.array([1.0, 0.5, 0.25])})
    table = read_table(path, 1)
    assert list(table) == ["l", "f"]
    np.testing.assert_array_equal(table["l"], [4000.0, 4001.5, 4003.0])
    np.testing.assert_array_equal(table["f"], [1.0, 0.5, 0.25])


def test_vector_column_round_trip(tmp_path):
    path = tmp_path / "v.fits"
    data = np.arange(6.0).reshape(2, 3)
    write_table(path, {"v": data})
    table = read_table(path)
    assert table["v"].shape == (2, 3)
    np.testing.assert_array_equal(table["v"], data)


def test_variable_length_round_trip(tmp_path):
    path = tmp_path / "p.fits"
    write_table(
        path,
        {"t": [np.array([1.0, 2.0, 3.0]), np.array([7.0])], "s": [9.0, 8.0]},
    )
    table = read_table(path, 1)
    assert len(table["t"]) == 2
    np.testing.assert_array_equal(table["t"][0], [1.0, 2.0, 3.0])
    np.testing.assert_array_equal(table["t"][1], [7.0])
    np.testing.assert_array_equal(table["s"], [9.0, 8.0])


def test_file_layout(tmp_path):
    path = tmp_path / "x.fits"
    write_table(path, {"a": [1.0]})
    raw = path.read_bytes()
    assert len(raw) % 2880 == 0
    assert raw.startswith(b"SIMPLE  =                    T")
    assert b"XTENSION= 'BINTABLE'" in raw


def test_primary_hdu_is_not_a_table(tmp_path):
    path = tmp_path / "x.fits"
    write_table(path, {"a": [1.0]})
    with pytest.raises(ValueError):
        read_table(path, 0)


def test_missing_hdu(tmp_path):
    path = tmp_path / "x.fits"
    write_table(path, {"a": [1.0]})
    with pytest.raises(ValueError):
        read_table(path, 2)


def test_not_fits(tmp_path):
    path = tmp_path / "bad.fits"
    path.write_bytes(b" " * 2880)
    with pytest.raises(ValueError):
        read_table(path, 1)


def test_row_count_mismatch(tmp_path):
    with pytest.raises(ValueError):
        write_table(tmp_path / "x.fits", {"a": [1.0, 2.0], "b": [1.0]})


def test_no_columns(tmp_path):
    with pytest.raises(ValueError):
        write_table(tmp_path / "x.fits", {})


def test_reads_integer_and_text_columns(tmp_path):
    primary = _block(["SIMPLE  =                    T", "BITPIX  =                    8",
                      "NAXIS   =                    0", "EXTEND  =                    T"])
    header = _block([
        "XTENSION= 'BINTABLE'",
        "BITPIX  =                    8",
        "NAXIS   =                    2",
        "NAXIS1  =                    8",
        "NAXIS2  =                    3",
        "PCOUNT  =                    0",
        "GCOUNT  =                    1",
        "TFIELDS =                    2",
        "TTYPE1  = 'n       '",
        "TFORM1  = 'J       '",
        "TTYPE2  = 'name    '",
        "TFORM2  = '4A      '",
    ])
    rows = b""
    for value, text in [(1, b"ab  "), (-2, b"cdef"), (3, b"g   ")]:
        rows += np.array([value], dtype=">i4").tobytes() + text
    payload = rows.ljust(2880, b"\x00")
    path = tmp_path / "hand.fits"
    path.write_bytes(primary + header + payload)

    table = read_table(path, 1)
    np.testing.assert_array_equal(table["n"], [1, -2, 3])
    assert list(table["name"]) == ["ab", "cdef", "g"]