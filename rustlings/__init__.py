"""Rust exercise tool: loads, compiles, runs, verifies, watches and grades exercises."""

__version__ = "5.5.1"
__all__ = ["__version__"]