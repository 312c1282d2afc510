import numpy as np
import pytest

from specfit.loaders import load_ascii_2col, load_ascii_3col, load_spectrum


def _write(path, rows):
    path.write_text("\n".join(" ".join(repr(float(v)) for v in row) for row in rows) + "\n")
    return path


def test_3col_reads_and_sorts(tmp_path):
    path = tmp_path / "spec.txt"
    path.write_text(
        "# header\n"
        "   # indented comment\n"
        "\n"
        "5002.0 3.0 0.3\n"
        "5000.0 1.0 0.1\n"
        "garbage line here\n"
        "5001.0 2.0 0.2\n"
    )
    sp = load_ascii_3col(path)
    assert sp.lam.tolist() == [5000.0, 5001.0, 5002.0]
    assert sp.flux.tolist() == [1.0, 2.0, 3.0]
    assert sp.sigma.tolist() == [0.1, 0.2, 0.3]


def test_3col_rejects_two_column_file(tmp_path):
    path = _write(tmp_path / "two.txt", [(1.0, 2.0), (2.0, 3.0)])
    with pytest.raises(ValueError):
        load_ascii_3col(path)


def test_empty_file_raises(tmp_path):
    path = tmp_path / "empty.txt"
    path.write_text("# only a comment\n\n")
    with pytest.raises(ValueError):
        load_ascii_2col(path)


def test_missing_file_raises(tmp_path):
    with pytest.raises(OSError):
        load_ascii_3col(tmp_path / "absent.txt")


def test_2col_noise_for_linear_flux_is_zero(tmp_path):
    lam = 4000.0 + 0.5 * np.arange(200)
    flux = 2.0 + 0.001 * lam
    path = _write(tmp_path / "lin.txt", zip(lam, flux))
    sp = load_ascii_2col(path)
    assert sp.sigma.size == lam.size
    np.testing.assert_allclose(sp.sigma, 0.0, atol=1e-9)


def test_2col_estimates_white_noise(tmp_path):
    rng = np.random.default_rng(1)
    lam = 4000.0 + 0.5 * np.arange(400)
    flux = 1.0 + rng.normal(0.0, 0.05, lam.size)
    order = rng.permutation(lam.size)
    path = _write(tmp_path / "noisy.txt", zip(lam[order], flux[order]))
    sp = load_ascii_2col(path)
    assert np.all(np.diff(sp.lam) > 0)
    np.testing.assert_array_equal(sp.lam, lam)
    np.testing.assert_array_equal(sp.flux, flux)
    assert np.all(sp.sigma > 0.025)
    assert np.all(sp.sigma < 0.1)


def test_2col_too_short_for_noise_estimate(tmp_path):
    path = _write(tmp_path / "short.txt", [(float(i), 1.0) for i in range(10)])
    with pytest.raises(ValueError):
        load_ascii_2col(path)


def test_load_spectrum_named_format(tmp_path):
    path = _write(tmp_path / "s.txt", [(1.0, 2.0, 0.5), (2.0, 4.0, 0.25)])
    sp = load_spectrum(path, "ASCII_with_3_columns")
    assert sp.sigma.tolist() == [0.5, 0.25]


def test_load_spectrum_unknown_format(tmp_path):
    path = _write(tmp_path / "s.txt", [(1.0, 2.0, 0.5)])
    with pytest.raises(ValueError, match="Unsupported spectrum format"):
        load_spectrum(path, "NO_SUCH_FORMAT")


def test_load_spectrum_auto_three_columns(tmp_path):
    path = _write(tmp_path / "s.txt", [(1.0, 2.0, 0.5), (2.0, 4.0, 0.25)])
    sp = load_spectrum(path)
    assert sp.sigma.tolist() == [0.5, 0.25]


def test_load_spectrum_auto_two_columns(tmp_path):
    lam = 4000.0 + 0.5 * np.arange(200)
    flux = 2.0 + 0.001 * lam
    path = _write(tmp_path / "lin.txt", zip(lam, flux))
    sp = load_spectrum(path, "auto")
    np.testing.assert_array_equal(sp.lam, lam)
    assert sp.sigma.size == lam.size


def test_load_spectrum_auto_fails(tmp_path):
    path = tmp_path / "bad.txt"
    path.write_text("not numbers at all\n")
    with pytest.raises(ValueError, match="none of the registered readers"):
        load_spectrum(path, "auto")