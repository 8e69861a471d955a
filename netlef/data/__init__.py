"""
# netlef Data Model

All elements of the parsed SPICE and LEF representations,
primarily in the form of dataclasses.
"""

from .shared import *
from .shared import datatype, datatypes
from .spice import *
from .lef import *

from . import shared, spice, lef

__all__ = shared.__all__ + spice.__all__ + lef.__all__
