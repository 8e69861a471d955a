"""
# Shared Data

Core types used by both the SPICE and LEF data models:
dialects, source-info, parse errors, and unit-suffixed numbers.
"""

# Std-Lib Imports
from enum import Enum
from dataclasses import field
from typing import Optional, Union, List, Tuple, ClassVar

# PyPi Imports
from pydantic.dataclasses import dataclass


class Dialects(Enum):
    """Enumerated, Supported Input Dialects"""

    SPICE = "spice"
    LEF = "lef"

    @staticmethod
    def get(spec: "DialectSpec") -> "Dialects":
        """Get the dialect specified by `spec`, in either enum or string terms.
        Only does real work in the case when `spec` is a string, otherwise returns it unchanged."""
        if isinstance(spec, (Dialects, str)):
            return Dialects(spec)
        raise TypeError


# Type-alias for specifying dialect, either in enum or string terms
DialectSpec = Union[Dialects, str]


class NetlistParseError(Exception):
    """
    # Committed Parse Failure

    Raised once a production has committed to its grammar alternative and a later step fails.
    Carries a stack of `(offset, label)` pairs, innermost first.
    Each enclosing production adds its own label as the error propagates.
    Recoverable no-matches are *not* exceptions; they are `None` return values.
    """

    def __init__(self, pos: int = 0, label: str = "", *, txt: Optional[str] = None):
        super().__init__(label)
        self.errors: List[Tuple[int, str]] = [(pos, label)]
        self.txt = txt  # Full input text, set by the document drivers

    @property
    def pos(self) -> int:
        """Offset of the innermost failure"""
        return self.errors[0][0]

    @property
    def label(self) -> str:
        """Label of the innermost failure"""
        return self.errors[0][1]

    def push(self, pos: int, label: str) -> None:
        """Add an enclosing context breadcrumb"""
        self.errors.append((pos, label))

    def __str__(self) -> str:
        return " <- ".join(label for _, label in self.errors)

    @staticmethod
    def throw(*args, **kwargs):
        """Exception-raising debug wrapper. Breakpoint to catch `NetlistParseError`s."""
        raise NetlistParseError(*args, **kwargs)


class NetlistReadError(Exception):
    """Document-Level Read Error
    The only user-facing parse failure. Always carries a 1-based line number."""

    def __init__(self, line: int, message: str):
        super().__init__(message)
        self.line = line
        self.message = message


class UnknownStatementError(NetlistReadError):
    """No statement alternative matched the text at `line`"""

    def __init__(self, line: int, text: str):
        super().__init__(line, f"At line {line}: Unknown statement: {text}")
        self.text = text


def to_json(arg) -> str:
    """Dump any `pydantic.dataclass` or simple combination thereof to JSON string."""
    from pydantic import TypeAdapter

    return TypeAdapter(type(arg)).dump_json(arg, indent=2).decode("utf-8")


@dataclass
class SourceInfo:
    """Parser Source Information"""

    line: int  # Source-File Line Number
    dialect: Dialects  # Input Dialect


# Keep a list of datatypes defined in the data-model modules,
# primarily for star-exports.
datatypes = [SourceInfo]


def datatype(cls: type) -> type:
    """Register a class as a datatype."""

    # Add an `Optional[SourceInfo]` field to the class, defaulting to `None`.
    # It is left out of equality comparisons and the repr.
    anno = getattr(cls, "__annotations__", {})
    anno["source_info"] = Optional[SourceInfo]
    cls.__annotations__ = anno
    cls.source_info = field(default=None, repr=False, compare=False)

    # Convert it to a `pydantic.dataclasses.dataclass`
    cls = dataclass(cls)

    # And add it to the list of datatypes
    datatypes.append(cls)
    return cls


class Suffix(Enum):
    """Enumerated Scale Suffixes
    Values are the text written back out to SPICE."""

    MEGA = "Meg"
    KILO = "k"
    NONE = ""
    MILLI = "m"
    MICRO = "u"
    NANO = "n"
    PICO = "p"

    @property
    def scale(self) -> float:
        """Power-of-ten multiplier"""
        return _scales[self]


_scales = {
    Suffix.MEGA: 1e6,
    Suffix.KILO: 1e3,
    Suffix.NONE: 1.0,
    Suffix.MILLI: 1e-3,
    Suffix.MICRO: 1e-6,
    Suffix.NANO: 1e-9,
    Suffix.PICO: 1e-12,
}


@dataclass(frozen=True)
class Number:
    """
    # Unit-Suffixed Number

    Stores the literal magnitude and its scale suffix separately,
    so that `1.5k` can be printed back as `1.5k`, or converted via `to_float`.

    Equality is structural: `Number(1, Suffix.KILO) != Number(1000)`.
    Ordering comparisons are on the scaled value.
    Arithmetic produces unscaled results of the same class.
    """

    value: float
    suffix: Suffix = Suffix.NONE

    unit: ClassVar[str] = ""  # Unit letter, for printing

    def to_float(self) -> float:
        return self.value * self.suffix.scale

    def __str__(self) -> str:
        return f"{self.value}{self.suffix.value}{self.unit}"

    def __float__(self) -> float:
        return self.to_float()

    def _check(self, other: "Number") -> None:
        if not isinstance(other, Number) or (
            type(other) is not Number and type(self) is not Number
            and type(other) is not type(self)
        ):
            raise TypeError(f"Incompatible quantities {self!r} and {other!r}")

    def __add__(self, other: "Number") -> "Number":
        self._check(other)
        return type(self)(self.to_float() + other.to_float())

    def __sub__(self, other: "Number") -> "Number":
        self._check(other)
        return type(self)(self.to_float() - other.to_float())

    def __neg__(self) -> "Number":
        return type(self)(-self.value, self.suffix)

    def __mul__(self, other: float) -> "Number":
        if isinstance(other, Number):
            return NotImplemented
        return type(self)(self.to_float() * other)

    __rmul__ = __mul__

    def __truediv__(self, other: Union[float, "Number"]):
        """Division by a scalar keeps the quantity; division by another number is a plain ratio."""
        if isinstance(other, Number):
            return self.to_float() / other.to_float()
        return type(self)(self.to_float() / other)

    def __lt__(self, other: "Number") -> bool:
        self._check(other)
        return self.to_float() < other.to_float()

    def __le__(self, other: "Number") -> bool:
        self._check(other)
        return self.to_float() <= other.to_float()

    def __gt__(self, other: "Number") -> bool:
        self._check(other)
        return self.to_float() > other.to_float()

    def __ge__(self, other: "Number") -> bool:
        self._check(other)
        return self.to_float() >= other.to_float()


@dataclass(frozen=True)
class Voltage(Number):
    unit: ClassVar[str] = "V"


@dataclass(frozen=True)
class Current(Number):
    unit: ClassVar[str] = "A"


@dataclass(frozen=True)
class Resistance(Number):
    unit: ClassVar[str] = "Ω"


@dataclass(frozen=True)
class Capacitance(Number):
    unit: ClassVar[str] = "F"


@dataclass(frozen=True)
class Inductance(Number):
    unit: ClassVar[str] = "H"


@dataclass(frozen=True)
class Time(Number):
    unit: ClassVar[str] = "s"


@dataclass(frozen=True)
class Frequency(Number):
    unit: ClassVar[str] = "Hz"

    def to_period(self) -> Time:
        return Time(1.0 / self.to_float())


@dataclass(frozen=True)
class Angle(Number):
    """Angle, in degrees"""

    unit: ClassVar[str] = ""


__all__ = [
    "Dialects",
    "DialectSpec",
    "NetlistParseError",
    "NetlistReadError",
    "UnknownStatementError",
    "SourceInfo",
    "Suffix",
    "Number",
    "Voltage",
    "Current",
    "Resistance",
    "Capacitance",
    "Inductance",
    "Time",
    "Frequency",
    "Angle",
    "to_json",
]
