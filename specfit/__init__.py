"""Building blocks for fitting stellar spectra: I/O, splines, rebinning, broadening, S/N and least squares."""

__version__ = "0.1.0"