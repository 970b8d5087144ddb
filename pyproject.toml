[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netcdf3"
version = "0.1.0"
description = "Pure Python parsing of NetCDF-3 headers (classic and 64-bit offset formats) with typed data vectors"
requires-python = ">=3.10"
dependencies = []
keywords = ["netcdf", "netcdf3", "scientific-data", "file-format", "header"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Atmospheric Science",
    "Topic :: File Formats",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["netcdf3"]

[tool.pytest.ini_options]
addopts = "-ra"
