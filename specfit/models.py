"""Data bundles shared by the fitting stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from .spectrum import Spectrum


@dataclass(eq=False)
class DataSet:
    """One observed spectrum on its fitting grid with its continuum anchors.

    ``keep`` holds 1 for pixels in use and 0 for ignored ones.
    """

    name: str = ""
    obs: Spectrum = field(default_factory=Spectrum)
    cont_x: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=float))
    cont_y: list[float] = field(default_factory=list)
    keep: list[int] = field(default_factory=list)
    res_offset: float = 0.0
    res_slope: float = 0.0
    cont_param_offset: int = 0

    def __post_init__(self) -> None:
        self.cont_x = np.array(self.cont_x, dtype=float).reshape(-1)
        self.cont_y = [float(v) for v in self.cont_y]
        self.keep = [int(v) for v in self.keep]


@dataclass
class SharedModel:
    """Model grids and stellar parameters common to all data sets."""

    grids: list[Any] = field(default_factory=list)
    params: list[Any] = field(default_factory=list)


@dataclass
class FitPlan:
    """Options that steer the staged fit."""

    freeze_vrad_initial: bool = True
    freeze_vsini_initial: bool = True
    vrad_free_in_stage2: bool = True
    n_outlier_iter: int = 3
    verbose: bool = True
    debug_plots: bool = True