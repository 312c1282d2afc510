"""Spectrum container and a reader for plain-text spectra."""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np


def _empty() -> np.ndarray:
    return np.zeros(0, dtype=float)


@dataclass(eq=False)
class Spectrum:
    """Wavelengths in Angstrom, fluxes, 1-sigma errors and a per-pixel use flag.

    ``ignoreflag`` holds 1 for pixels that take part in a fit and 0 for
    pixels that are ignored.
    """

    lam: np.ndarray = field(default_factory=_empty)
    flux: np.ndarray = field(default_factory=_empty)
    sigma: np.ndarray = field(default_factory=_empty)
    ignoreflag: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=int))

    def __post_init__(self) -> None:
        self.lam = np.array(self.lam, dtype=float).reshape(-1)
        self.flux = np.array(self.flux, dtype=float).reshape(-1)
        self.sigma = np.array(self.sigma, dtype=float).reshape(-1)
        self.ignoreflag = np.array(self.ignoreflag, dtype=int).reshape(-1)

    def __len__(self) -> int:
        return int(self.lam.size)

    def copy(self) -> "Spectrum":
        """Return a deep copy."""
        return Spectrum(self.lam, self.flux, self.sigma, self.ignoreflag)


def _read_rows(path: str | Path, columns: int) -> Iterator[list[float]]:
    with open(path, encoding="utf-8") as handle:
        for lineno, raw in enumerate(handle, start=1):
            line = raw.rstrip("\r\n")
            if not line.strip() or line.startswith("#"):
                continue
            tokens = line.split()
            if len(tokens) < columns:
                raise ValueError(
                    f"{path}:{lineno}: expected {columns} columns, got {len(tokens)}"
                )
            try:
                yield [float(token) for token in tokens[:columns]]
            except ValueError as exc:
                raise ValueError(f"{path}:{lineno}: malformed number") from exc


def _safe_sigma(value: float) -> float:
    return value if value > 0.0 and math.isfinite(value) else 1.0


def load_ascii(path: str | Path, three_col: bool) -> Spectrum:
    """Read a two- or three-column text spectrum.

    Lines that are empty or start with ``#`` are skipped.  With two columns
    the error is taken as the square root of the flux (1 where the flux is
    not positive); non-positive or non-finite errors are replaced by 1.
    All pixels are flagged for use.
    """
    columns = 3 if three_col else 2
    lam: list[float] = []
    flux: list[float] = []
    sigma: list[float] = []
    for row in _read_rows(path, columns):
        wavelength, value = row[0], row[1]
        if three_col:
            error = row[2]
        else:
            error = math.sqrt(value) if value > 0 else 1.0
        lam.append(wavelength)
        flux.append(value)
        sigma.append(_safe_sigma(error))
    return Spectrum(lam, flux, sigma, np.ones(len(lam), dtype=int))