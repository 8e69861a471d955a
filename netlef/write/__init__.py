"""
# Netlist Writing

Exports a `SpiceDocument` to a netlist format.
"""

# Std-Lib Imports
from typing import IO, Optional

# PyPi Imports
from pydantic.dataclasses import dataclass

# Local Imports
from ..data import Dialects, SpiceDocument
from .base import ErrorMode
from .spice import SpiceNetlister


def writer(fmt: Dialects = Dialects.SPICE) -> type:
    """Get the writer-class paired with the netlist-format."""
    if fmt == Dialects.SPICE:
        return SpiceNetlister
    raise ValueError(f"Unsupported netlist format {fmt}")


@dataclass
class WriteOptions:
    """Netlist Writing Options"""

    fmt: Dialects = Dialects.SPICE  # Target format, in enumerated or string form
    errormode: ErrorMode = ErrorMode.RAISE  # Error-handling mode, enumerated in `ErrorMode`


def netlist(
    src: SpiceDocument, dest: IO, options: Optional[WriteOptions] = None
) -> None:
    """Write `SpiceDocument` `src` to destination `dest`.

    Example usages:
    ```python
    netlist(doc, dest=open('mynetlist.sp', 'w'))
    ```
    ```python
    s = StringIO()
    netlist(doc, dest=s)
    ```

    Destination `dest` may be anything that supports the `typing.IO` bundle,
    commonly including open file-handles. `StringIO` is particularly helpful
    for producing a netlist in an in-memory string.

    Optional `WriteOptions` argument `options` sets the target format and error-handling strategy.
    """
    if options is None:
        # Create the default options
        options = WriteOptions()

    netlister_cls = writer(options.fmt)
    netlister = netlister_cls(src=src, dest=dest, errormode=options.errormode)
    netlister.netlist()


# Set our exported content for star-imports
__all__ = ["netlist", "writer", "WriteOptions", "ErrorMode", "SpiceNetlister"]
