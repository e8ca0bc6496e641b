"""Trace record readers, dumpers and converters, ELF64 header reports and plugin argument parsing."""

__version__ = "0.1.0"

__all__ = ["__version__"]