"""
# Netlist Writer Base Class

"""

# Std-Lib Imports
from warnings import warn
from typing import IO, Any
from enum import Enum
from dataclasses import dataclass, field


# Local Imports
from ..data import *


class ErrorMode(Enum):
    """Enumerated Error-Response Strategies"""

    RAISE = "raise"  # Raise any generated exceptions
    COMMENT = "comment"  # Write errant entries as commments instead


@dataclass
class Indent:
    """
    # Indentation Helper

    Supports in-place addition and subtraction of indentation levels, e.g. via
    ```python
    indent = Indent()
    indent += 1 # Adds one "tab", or indentation level
    indent += 1 # Adds another
    indent -= 1 # Drops back by one
    ```
    The current indentation-string is available via the `state` attribute.
    """

    # Per-"tab" indentation characters. Defaults to two spaces.
    chars: str = 2 * " "
    # Current (integer) indentation-level, in number of "tabs"
    num: int = field(init=False, default=0)
    # Current indentation-string. Always equals `num * chars`.
    state: str = field(init=False, default="")

    def __iadd__(self, other: int) -> "Indent":
        """In-place add, i.e. `indent += 1`"""
        self.num += other
        self.state = self.chars * self.num
        return self

    def __isub__(self, other: int) -> "Indent":
        """In-place subtract, i.e. `indent -= 1`"""
        self.num = self.num - other
        if self.num < 0:
            raise ValueError("Negative indentation")
        self.state = self.chars * self.num
        return self


class Netlister:
    """# Abstract Base `Netlister` Class

    `Netlister` is not directly instantiable, and none of its sub-classes are intended
    for usage outside the `netlef` package. The primary API method `netlist` is designed to
    create, use, and drop a `Netlister` instance.
    Once instantiated a `Netlister`'s primary API method is `netlist`.
    This writes all content in its `src` field to destination `dest`.

    Internal methods come in two primary flavors:
    * `write_*` methods, which write to `self.dest`. These methods are generally format-specific.
    * `format_*` methods, which return format-specific strings, but *do not* write to `dest`.
    """

    def __init__(
        self, src: SpiceDocument, dest: IO, *, errormode: ErrorMode = ErrorMode.RAISE
    ) -> None:
        self.src = src
        self.dest = dest
        self.errormode = errormode
        self.indent = Indent(chars="  ")

    def netlist(self) -> None:
        """Primary API Method.
        Convert everything in `self.src` and write to `self.dest`."""
        raise NotImplementedError

    def handle_error(self, entry: Any, msg: str) -> None:
        """React to an error, depending on `self.errormode`."""
        if self.errormode is ErrorMode.RAISE:
            raise RuntimeError(msg)
        elif self.errormode is ErrorMode.COMMENT:
            msg = f"Warning: invalid Entry {entry}".replace("\n", " ")
            warn(msg)
            self.write_comment(msg)
        else:
            raise ValueError(f"Unknown error mode {self.errormode}")

    def write(self, s: str) -> None:
        """Helper/wrapper, passing to `self.dest`"""
        self.dest.write(s)

    def writeln(self, s: str) -> None:
        """Write `s` as a line, at our current `indent` level."""
        self.write(f"{self.indent.state}{s}\n")

    def write_comment(self, comment: str) -> None:
        """Format-specific string-formatting of a comment line"""
        raise NotImplementedError

    def format_number(self, num: Number) -> str:
        """Format a unit-`Number` as its magnitude and scale-suffix, less any unit letter"""
        value = repr(float(num.value))
        if value.endswith(".0"):
            value = value[:-2]
        return value + num.suffix.value
