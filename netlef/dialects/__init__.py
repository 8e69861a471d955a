"""
# Dialect Parsers

One `DialectParser` sub-class per input format.
"""

from .base import DialectParser
from .spice import SpiceDialectParser
from .lef import LefDialectParser

__all__ = ["DialectParser", "SpiceDialectParser", "LefDialectParser"]
