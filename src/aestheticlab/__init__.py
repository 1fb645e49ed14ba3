"""Aesthetic Lab - vary one aesthetic parameter across an image prompt."""

__version__ = "0.1.0"

from aestheticlab.core.catalog import AESTHETIC_OPTIONS, AestheticParameter
from aestheticlab.core.config import AestheticLabConfig, config

__all__ = [
    "AESTHETIC_OPTIONS",
    "AestheticParameter",
    "AestheticLabConfig",
    "config",
]
