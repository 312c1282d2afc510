# specfit

Building blocks for fitting observed stellar spectra. The package offers:

- a spectrum container and readers for plain-text spectra;
- a continuum spline that extrapolates linearly;
- flux-conserving rebinning;
- resolution degradation and rotational broadening;
- signal-to-noise estimates;
- a bounded Levenberg-Marquardt solver;
- a reader and writer for FITS binary tables.

It is a library. It needs only NumPy.

## Installation

```
pip install .
```

To install the test dependencies as well and run the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
import numpy as np

from specfit.rebin import trapezoidal_rebin
from specfit.resolution import degrade_resolution
from specfit.rotation import rotational_broaden
from specfit.snr import der_snr, snr_curve

lam = np.linspace(4000.0, 5000.0, 5000)
flux = 1.0 + 0.01 * np.random.default_rng(1).standard_normal(lam.size)

coarse = np.linspace(4000.0, 5000.0, 1000)
rebinned = trapezoidal_rebin(lam, flux, coarse)

print(der_snr(flux).snr)
curve = snr_curve(lam, flux, "der_snr", 300, True, 2)   # noise per pixel in curve.noise

smoothed = degrade_resolution(lam, flux, 20000.0, 0.0)  # R = 20000 + 0 * lambda
broadened = rotational_broaden(lam, flux, 50.0, 0.6)    # vsini = 50 km/s, limb darkening 0.6
```

## Modules

### `specfit.spectrum`

- `Spectrum` holds the arrays `lam`, `flux`, `sigma` and `ignoreflag`. In
  `ignoreflag`, 1 marks a pixel that is used and 0 one that is ignored.
- `load_ascii(path, three_col)` reads a text file with two or three columns.
  It skips empty lines and lines that begin with `#`. With two columns the
  error is the square root of the flux, or 1 where the flux is not positive.
  Errors that are not positive or not finite become 1.

### `specfit.loaders`

- `load_ascii_3col(path)` reads wavelength, flux and error. The rows are
  sorted by wavelength.
- `load_ascii_2col(path)` reads wavelength and flux. It estimates the error
  of every pixel from the scatter of the data in overlapping windows.
- `load_spectrum(path, format="auto")` dispatches on `format`. The known
  formats are `"ASCII_with_2_columns"` and `"ASCII_with_3_columns"`.
  `"auto"` tries each reader in turn. Any other format raises `ValueError`.

### `specfit.akima` and `specfit.continuum`

- `AkimaSpline(x, y)` is a modified Akima interpolant. It needs at least four
  strictly increasing abscissas. Beyond the first and last anchor it
  continues as a straight line. It accepts a scalar or an array.
- `ContinuumModel(anchors_x, anchors_y)` wraps the spline.
  `evaluate(lam)` gives the continuum at `lam`. `update_y(new_y)` replaces the
  anchor values.
- `anchors_from_intervals(intervals, spectrum)` places anchors from
  `(start, end, step)` triples, within the range of the pixels in use. Two
  boundary anchors are added.
- `interp_linear(x_in, y_in, x_out)` interpolates linearly and holds the end
  values constant outside the input range.

### `specfit.rebin`

`trapezoidal_rebin(lam_in, flux_in, lam_out)` averages the piecewise-linear
input spectrum over each output pixel. The pixel edges lie half-way between
the centres.

### `specfit.resolution` and `specfit.rotation`

- `degrade_resolution(lam, flux, res_offset, res_slope)` convolves with a
  Gaussian. The FWHM is `lam / R`, where `R = res_offset + res_slope * lam`.
- `rotational_broaden(lam, flux, vsini_kms, epsilon=0.6)` convolves with a
  limb-darkened rotation profile. If `vsini_kms` is not positive, the flux is
  returned unchanged.

### `specfit.snr`

- `get_signal_to_noise(flux, neighbor=2)` estimates the noise from
  neighbour differences, after 2-sigma clipping.
- `der_snr(flux)` is the DER_SNR estimate. It needs at least six pixels.

Both return an `SNRResult` with `noise` and `snr`.

The window versions are `get_signal_to_noise_curve(lam, flux, data_points=3000,
neighbor=2)`, `der_snr_curve(lam, flux, data_points=300)` and
`snr_curve(lam, flux, method="der_snr", data_points=300, interpolate_back=True,
neighbor=2)`. They return an `SNRCurveResult` with `lam`, `noise` and `snr`.

### `specfit.lm`

`levenberg_marquardt(func, x, free_mask=None, lower=None, upper=None,
options=None)` minimises the sum of squared residuals. The call
`func(p, True)` must return the residual vector and the full Jacobian. Only
the parameters flagged in `free_mask` move, and trial points are clipped to
the bounds. The result is an `LMSolverSummary` with these fields:

- `x`;
- `iterations`;
- `initial_chi2` and `final_chi2`;
- `converged`;
- `param_uncertainties`, the 1-sigma errors, which are 0 for fixed parameters.

`LMSolverOptions` sets the iteration limit, the tolerances, the initial
damping and verbosity.

```python
import numpy as np
from specfit.lm import levenberg_marquardt

x = np.linspace(0.0, 1.0, 50)
y = 2.0 * x + 0.5

def residuals(p, want_jacobian):
    return p[0] * x + p[1] - y, np.column_stack([x, np.ones_like(x)])

summary = levenberg_marquardt(residuals, [0.0, 0.0])
print(summary.x, summary.param_uncertainties)
```

### `specfit.fitstable`

- `read_table(path, hdu=1)` returns the columns of a FITS binary table by
  name. It handles scalar, fixed-length vector and variable-length columns,
  and applies TSCAL/TZERO scaling.
- `write_table(path, columns)` writes double-precision columns to the first
  extension.

### Other modules

- `specfit.indexer.ParameterIndexer` maps each combination of component,
  dataset and stellar parameter to a slot in one parameter vector. Untied
  parameters get one slot per dataset. The parameters are `vrad`, `vsini`,
  `zeta`, `teff`, `logg`, `xi`, `z` and `he`. Set it up with
  `build(n_components, n_datasets, untie_params)` and look slots up with
  `get(comp, dataset, par)`.
- `specfit.parameters.FitParameters` maps names to `Parameter(value, frozen)`.
- `specfit.models` holds the `DataSet`, `SharedModel` and `FitPlan`
  containers.
- `specfit.observation` holds the `Observation` and `IgnoreInterval`
  containers.
- `specfit.jsonutils.load_json(path)` reads a JSON file.
  `expand_env(value)` replaces `${NAME}` in strings with the value of the
  environment variable `NAME`.

## What the package does not do

The package does not:

- provide a command-line program;
- interpolate synthetic spectra from a model grid or cache them;
- build wavelength grids sampled to the instrumental resolution;
- run a complete multi-stage fit of several spectra;
- write parameter tables or plots.

The modules above are the pieces from which such a fit can be assembled.