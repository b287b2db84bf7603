"""Easel - artist portfolio content service."""

from easel.__version__ import __version__

__all__ = ["__version__"]
