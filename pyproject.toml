[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "specfit"
version = "0.1.0"
description = "Building blocks for fitting stellar spectra: splines, rebinning, broadening, noise estimates and a bounded least-squares solver"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "astronomy",
    "spectroscopy",
    "stellar spectra",
    "spectral fitting",
    "levenberg-marquardt",
    "signal-to-noise",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Astronomy",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["specfit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 99
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
