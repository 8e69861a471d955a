"""
# LEF Data Model

Technology-library content produced by the LEF grammar:
library header, units, and the four layer kinds with their spacing and enclosure rules.
Distances are plain floats, in microns.
"""

# Std-Lib Imports
import os
from enum import Enum
from dataclasses import field
from typing import Optional, Union, List

# PyPi Imports
from pydantic.dataclasses import dataclass

# Local Imports
from .shared import datatype


@dataclass
class LefUnits:
    """`UNITS ... END UNITS`"""

    database_microns: Optional[int] = None  # Database units per micron
    time: Optional[float] = None  # NANOSECONDS
    capacitance: Optional[float] = None  # PICOFARADS
    resistance: Optional[float] = None  # OHMS
    power: Optional[float] = None  # MILLIWATTS
    current: Optional[float] = None  # MILLIAMPS
    voltage: Optional[float] = None  # VOLTS
    frequency: Optional[float] = None  # MEGAHERTZ


class LefUseMinSpacing(Enum):
    ON = "ON"
    OFF = "OFF"


@dataclass
class LefProperty:
    """Generic key-value property"""

    key: str
    value: str


# Cut-layer spacing constraints


@dataclass
class LefCutSpacingLayer:
    """`LAYER name [STACK]`"""

    name: str
    stack: bool = False


@dataclass
class LefCutSpacingAdjacentCuts:
    """`ADJACENTCUTS count WITHIN distance [EXCEPTSAMEPGNET]`"""

    count: int
    within: float
    except_same_pg_net: bool = False


@dataclass
class LefCutSpacingParallelOverlap:
    """`PARALLELOVERLAP`"""


@dataclass
class LefCutSpacingArea:
    """`AREA value`"""

    value: float


LefCutSpacingConstraint = Union[
    LefCutSpacingLayer,
    LefCutSpacingAdjacentCuts,
    LefCutSpacingParallelOverlap,
    LefCutSpacingArea,
]


@dataclass
class LefCutSpacing:
    """`SPACING distance [CENTERTOCENTER] [SAMENET] [constraint] ;`
    At most one constraint per clause."""

    spacing: float
    center_to_center: bool = False
    same_net: bool = False
    constraint: Optional[LefCutSpacingConstraint] = None


@dataclass
class LefEnclosureWidth:
    """`WIDTH minWidth [EXCEPTEXTRACUT cutWithin]`"""

    min_width: float
    except_extra_cut: Optional[float] = None


@dataclass
class LefEnclosureLength:
    """`LENGTH minLength`"""

    min_length: float


LefEnclosureConstraint = Union[LefEnclosureWidth, LefEnclosureLength]


@dataclass
class LefEnclosure:
    """`ENCLOSURE [ABOVE|BELOW] overhang1 overhang2 [constraint] ;`"""

    overhang1: float
    overhang2: float
    above: bool = True
    constraint: Optional[LefEnclosureConstraint] = None

    @property
    def below(self) -> bool:
        return not self.above


@datatype
class LefCutLayer:
    """`LAYER name TYPE CUT ;` ... `END name`"""

    name: str
    mask: Optional[int] = None
    width: Optional[float] = None
    spacing: List[LefCutSpacing] = field(default_factory=list)
    enclosures: List[LefEnclosure] = field(default_factory=list)


@dataclass
class LefImplantSpacing:
    """`SPACING distance [LAYER name] ;`"""

    spacing: float
    layer: Optional[str] = None


@datatype
class LefImplantLayer:
    """`LAYER name TYPE IMPLANT ;` ... `END name`"""

    name: str
    mask: Optional[int] = None
    width: Optional[float] = None
    spacings: List[LefImplantSpacing] = field(default_factory=list)
    properties: List[LefProperty] = field(default_factory=list)


class LefDirection(Enum):
    HORIZONTAL = "HORIZONTAL"
    VERTICAL = "VERTICAL"
    DIAG45 = "DIAG45"
    DIAG135 = "DIAG135"


@dataclass
class LefPitch:
    """`PITCH x [y]`. A single value is a uniform pitch."""

    x: float
    y: Optional[float] = None

    @property
    def is_uniform(self) -> bool:
        return self.y is None


# Routing-layer spacing constraints


@dataclass
class LefSpacingRange:
    """`RANGE minWidth maxWidth`"""

    min: float
    max: float


@dataclass
class LefSpacingLengthThreshold:
    """`LENGTHTHRESHOLD maxLength`"""

    max_length: float


@dataclass
class LefSpacingSameNet:
    """`SAMENET [PGONLY]`"""

    pg_only: bool = False


@dataclass
class LefSpacingEndOfLine:
    """`ENDOFLINE eolWidth WITHIN eolWithin`"""

    width: float
    within: float


@dataclass
class LefSpacingNotchLength:
    """`NOTCHLENGTH minNotchLength`"""

    length: float


LefRoutingSpacingConstraint = Union[
    LefSpacingRange,
    LefSpacingLengthThreshold,
    LefSpacingSameNet,
    LefSpacingEndOfLine,
    LefSpacingNotchLength,
]


@dataclass
class LefRoutingSpacing:
    """`SPACING distance [constraint] ;`"""

    spacing: float
    constraint: Optional[LefRoutingSpacingConstraint] = None


@datatype
class LefRoutingLayer:
    """`LAYER name TYPE ROUTING ;` ... `END name`"""

    name: str
    direction: LefDirection
    pitch: LefPitch
    width: float
    mask: Optional[int] = None
    area: Optional[float] = None
    spacing_rules: List[LefRoutingSpacing] = field(default_factory=list)
    max_width: Optional[float] = None
    min_width: Optional[float] = None


class LefSpecialLayerType(Enum):
    MASTERSLICE = "MASTERSLICE"
    OVERLAP = "OVERLAP"


class Lef58Type(Enum):
    """`LEF58_TYPE` property values, as `"TYPE <value>"`"""

    NWELL = "NWELL"
    PWELL = "PWELL"
    ABOVEDIEEDGE = "ABOVEDIEEDGE"
    BELOWDIEEDGE = "BELOWDIEEDGE"
    DIFFUSION = "DIFFUSION"
    TRIMPOLY = "TRIMPOLY"
    TRIMMETAL = "TRIMMETAL"
    REGION = "REGION"


@dataclass
class Lef58TrimmedMetal:
    """`LEF58_TRIMMEDMETAL` property payload, `TRIMMEDMETAL layer [MASK num]`"""

    metal_layer: str
    mask: Optional[int] = None


@datatype
class LefSpecialLayer:
    """`LAYER name TYPE {MASTERSLICE|OVERLAP} ;` ... `END name`"""

    name: str
    layer_type: LefSpecialLayerType
    mask: Optional[int] = None
    properties: List[LefProperty] = field(default_factory=list)
    lef58_type: Optional[Lef58Type] = None
    lef58_trimmed_metal: Optional[Lef58TrimmedMetal] = None


# Union of all layer kinds
LefLayer = Union[LefCutLayer, LefImplantLayer, LefRoutingLayer, LefSpecialLayer]


@datatype
class LefTechLibrary:
    """
    # LEF Technology Library

    Header statements plus the ordered list of `LAYER` blocks.
    """

    version: float
    busbitchars: str
    dividerchar: str
    units: LefUnits
    manufacturing_grid: Optional[float] = None
    use_min_spacing: Optional[LefUseMinSpacing] = None
    layers: List[LefLayer] = field(default_factory=list)

    def layer(self, name: str) -> Optional[LefLayer]:
        """Get the layer named `name`, or `None` if not defined"""
        return next((layer for layer in self.layers if layer.name == name), None)

    @classmethod
    def from_file(cls, path: os.PathLike) -> "LefTechLibrary":
        from ..parse import parse_files, ParseOptions
        from .shared import Dialects

        return parse_files(path, options=ParseOptions(dialect=Dialects.LEF))


__all__ = [
    "LefUnits",
    "LefUseMinSpacing",
    "LefProperty",
    "LefCutSpacingLayer",
    "LefCutSpacingAdjacentCuts",
    "LefCutSpacingParallelOverlap",
    "LefCutSpacingArea",
    "LefCutSpacingConstraint",
    "LefCutSpacing",
    "LefEnclosureWidth",
    "LefEnclosureLength",
    "LefEnclosureConstraint",
    "LefEnclosure",
    "LefCutLayer",
    "LefImplantSpacing",
    "LefImplantLayer",
    "LefDirection",
    "LefPitch",
    "LefSpacingRange",
    "LefSpacingLengthThreshold",
    "LefSpacingSameNet",
    "LefSpacingEndOfLine",
    "LefSpacingNotchLength",
    "LefRoutingSpacingConstraint",
    "LefRoutingSpacing",
    "LefRoutingLayer",
    "LefSpecialLayerType",
    "Lef58Type",
    "Lef58TrimmedMetal",
    "LefSpecialLayer",
    "LefLayer",
    "LefTechLibrary",
]
