"""
netlef

Parsing SPICE circuit netlists and LEF technology libraries.
"""

__version__ = "0.1.0"


from .data import *
from .dialects import *
from .write import *
from .parse import (
    parse_str,
    parse_files,
    parse_spice,
    parse_lef,
    default_dialect,
    ParseOptions,
)
