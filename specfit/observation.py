"""An observed spectrum together with its masks and continuum model."""

from __future__ import annotations

from dataclasses import dataclass, field

from .continuum import ContinuumModel
from .spectrum import Spectrum


@dataclass(frozen=True)
class IgnoreInterval:
    """Closed wavelength interval excluded from the fit."""

    lo: float
    hi: float


@dataclass(frozen=True, eq=False)
class Observation:
    """A spectrum, the wavelength intervals it ignores and its continuum."""

    data: Spectrum
    ignore: list[IgnoreInterval] = field(default_factory=list)
    continuum: ContinuumModel | None = None