"""
Configuration package for the MakePDF conversion service.

This package contains configuration modules for the conversion engine.
"""

from .engine import EngineSettings

__all__ = [
    "EngineSettings",
]
