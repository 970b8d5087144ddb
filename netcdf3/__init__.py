"""NetCDF-3 (classic and 64-bit offset) header parsing and typed data vectors."""

__version__ = "0.1.0"