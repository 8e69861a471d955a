"""
# SPICE Data Model

Every construct produced by the SPICE statement grammar,
primarily in the form of `pydantic.dataclasses`.
Tagged variants are `Union`s of these dataclasses.
"""

# Std-Lib Imports
import math
import os
from enum import Enum
from dataclasses import field
from typing import Optional, Union, List, Tuple, Dict

# Local Imports
from .shared import (
    datatype,
    Number,
    Voltage,
    Current,
    Resistance,
    Capacitance,
    Inductance,
    Time,
    Frequency,
    Angle,
)


@datatype
class Resistor:
    """Resistor, `Rname N+ N- value`"""

    name: str  # Designator, less its `R` prefix
    node_pos: str
    node_neg: str
    value: Resistance


@datatype
class Capacitor:
    """Capacitor, `Cname N+ N- value`"""

    name: str
    node_pos: str
    node_neg: str
    value: Capacitance


@datatype
class Inductor:
    """Inductor, `Lname N+ N- value`"""

    name: str
    node_pos: str
    node_neg: str
    value: Inductance


@datatype
class Diode:
    """Diode, `Dname N+ N- model`"""

    name: str
    node_pos: str
    node_neg: str
    model_name: str


@datatype
class Bjt:
    """Bipolar Transistor, `Qname C B E model`"""

    name: str
    collector: str
    base: str
    emitter: str
    model_name: str


@datatype
class Mosfet:
    """
    # MOS Transistor

    `Mname D G S B model L=val W=val key=val ...`

    `L` and `W` are required, and stored in `length` and `width`.
    All other key-value pairs land in `parameters`, in source order.
    """

    name: str
    drain: str
    gate: str
    source: str
    bulk: str
    model_name: str
    length: Number
    width: Number
    parameters: Dict[str, Number] = field(default_factory=dict)


# Union of all circuit elements
Component = Union[Resistor, Capacitor, Inductor, Diode, Bjt, Mosfet]


class SourceKind(Enum):
    """Independent Source Kinds, keyed by their instance-name prefix"""

    VOLTAGE = "V"
    CURRENT = "I"


@datatype
class DcVoltage:
    value: Voltage


@datatype
class DcCurrent:
    value: Current


@datatype
class AcVoltage:
    magnitude: Voltage
    phase: Angle


@datatype
class AcCurrent:
    magnitude: Current
    phase: Angle


@datatype
class SineVoltage:
    """Damped Sine Waveform, `SIN(vo va freq [td] [damping] [phase])`"""

    offset: Voltage
    amplitude: Voltage
    frequency: Frequency
    delay: Time = Time(0)
    damping: Frequency = Frequency(0)
    phase: Number = Number(0)  # Degrees

    @classmethod
    def sin(cls, amplitude: Voltage, frequency: Frequency) -> "SineVoltage":
        return cls(offset=Voltage(0), amplitude=amplitude, frequency=frequency)

    @classmethod
    def cos(cls, amplitude: Voltage, frequency: Frequency) -> "SineVoltage":
        delay = frequency.to_period() * -0.25
        return cls(
            offset=Voltage(0), amplitude=amplitude, frequency=frequency, delay=delay
        )

    def voltage_at(self, time: Time) -> Voltage:
        if time < self.delay:
            return self.offset
        td = (time - self.delay).to_float()
        envelope = math.exp(-self.damping.to_float() * td)
        omega = 2 * math.pi * self.frequency.to_float()
        sine = math.sin(omega * td + math.radians(self.phase.to_float()))
        return self.offset + self.amplitude * (envelope * sine)


@datatype
class PwlVoltage:
    """
    Piece-Wise Linear Waveform, `PWL(t1 v1 t2 v2 ...)`

    Points are kept in source order, and are not sorted.
    Interpolation walks them in that order.
    """

    points: List[Tuple[Time, Voltage]]

    def voltage_at(self, time: Time) -> Voltage:
        if not self.points:
            return Voltage(0)
        if time < self.points[0][0]:
            return self.points[0][1]
        for (t0, v0), (t1, v1) in zip(self.points, self.points[1:]):
            if t0 <= time <= t1:
                if t1.to_float() == t0.to_float():
                    return v1
                ratio = (time - t0) / (t1 - t0)
                return v0 + (v1 - v0) * ratio
        return self.points[-1][1]


@datatype
class PulseVoltage:
    """Periodic Pulse, `PULSE(v0 v1 td tr tf pw period)`"""

    initial: Voltage
    pulsed: Voltage
    delay: Time
    rise: Time
    fall: Time
    width: Time
    period: Time

    @classmethod
    def clock(cls, vdd: Voltage, period: Time, slew: Time) -> "PulseVoltage":
        """50%-duty clock between zero and `vdd`"""
        return cls(
            initial=Voltage(0),
            pulsed=vdd,
            delay=Time(0),
            rise=slew,
            fall=slew,
            width=(period - slew * 2) / 2,
            period=period,
        )

    def voltage_at(self, time: Time) -> Voltage:
        if time <= self.delay:
            return self.initial
        t = (time - self.delay).to_float()
        period = self.period.to_float()
        if period > 0:  # Otherwise a single, non-repeating pulse
            t = t % period
        rise, width, fall = (x.to_float() for x in (self.rise, self.width, self.fall))
        delta = self.pulsed - self.initial
        if t < rise:
            return self.initial + delta * (t / rise)
        if t < rise + width:
            return self.pulsed
        if t < rise + width + fall:
            return self.pulsed - delta * ((t - rise - width) / fall)
        return self.initial


# Union of source values
SourceValue = Union[
    DcVoltage, DcCurrent, AcVoltage, AcCurrent, SineVoltage, PwlVoltage, PulseVoltage
]


@datatype
class Source:
    """Independent Voltage or Current Source"""

    name: str  # Designator, less its `V` or `I` prefix
    kind: SourceKind
    node_pos: str
    node_neg: str
    value: SourceValue


class AcSweepType(Enum):
    LIN = "LIN"
    DEC = "DEC"
    OCT = "OCT"


@datatype
class DcCommand:
    """`.DC src start stop step`"""

    src_name: str
    start: Voltage
    stop: Voltage
    step: Voltage


@datatype
class AcCommand:
    """`.AC {LIN|DEC|OCT} points fstart fstop`"""

    sweep_type: AcSweepType
    points: int
    f_start: Frequency
    f_stop: Frequency


@datatype
class TranCommand:
    """`.TRAN tstep tstop [tstart [tmax]] [UIC]`"""

    t_step: Time
    t_stop: Time
    t_start: Optional[Time] = None
    t_max: Optional[Time] = None
    uic: bool = False


# Union of simulation-control commands
SimCommand = Union[DcCommand, AcCommand, TranCommand]


class AnalysisType(Enum):
    DC = "DC"
    AC = "AC"
    TRAN = "TRAN"


class EdgeType(Enum):
    RISE = "RISE"
    FALL = "FALL"


class MeasureFunction(Enum):
    """Statistic Functions of `.MEAS`"""

    AVG = "AVG"
    RMS = "RMS"
    MIN = "MIN"
    MAX = "MAX"
    PP = "PP"  # Peak to peak
    DERIV = "DERIV"
    INTEGRATE = "INTEGRATE"


class OutputSuffix(Enum):
    """
    AC output-variable qualifiers.
    Derived from the trailing letters of the variable's inner text.
    """

    MAGNITUDE = "M"
    DECIBEL = "DB"
    PHASE = "P"
    REAL = "R"
    IMAG = "I"


@datatype
class VoltageVariable:
    """`V(node1[, node2])`"""

    node1: str
    node2: Optional[str] = None
    suffix: Optional[OutputSuffix] = None


@datatype
class CurrentVariable:
    """`I(element)`"""

    element_name: str
    suffix: Optional[OutputSuffix] = None


OutputVariable = Union[VoltageVariable, CurrentVariable]


@datatype
class TriggerCondition:
    """`var VAL=value {RISE|FALL}=count`, either side of a `TRIG ... TARG ...` pair"""

    variable: OutputVariable
    value: Number
    edge: EdgeType
    count: int


@datatype
class MeasureRise:
    analysis: AnalysisType
    name: str
    trig: TriggerCondition
    targ: TriggerCondition


@datatype
class MeasureBasicStat:
    analysis: AnalysisType
    name: str
    stat: MeasureFunction
    variable: OutputVariable
    from_time: Time
    to_time: Time


@datatype
class MeasureFindWhen:
    analysis: AnalysisType
    name: str
    variable: OutputVariable
    when_variable: OutputVariable
    when_value: Number


# Union of measurement commands
MeasureCommand = Union[MeasureRise, MeasureBasicStat, MeasureFindWhen]


@datatype
class Instance:
    """Sub-Circuit Instance, `Xname pin1 pin2 ... subckt`"""

    name: str  # Full designator, including its `X`
    pins: List[str]
    subckt_name: str  # Reference by name, not resolved


def _quantity(cls: type, value: Union[Number, float]) -> Number:
    """Convert plain floats to quantity `cls`. Numbers pass through unchanged."""
    if isinstance(value, Number):
        return value
    return cls(value)


class ComponentAdder:
    """
    # Component-Construction Methods

    Shared by `Subckt` and `SpiceDocument`, both of which hold a `components` list.
    Values may be given as unit-`Number`s, or as plain floats in base units.
    """

    def add_resistor(
        self, name: str, node_pos: str, node_neg: str, value: Union[Resistance, float]
    ) -> Resistor:
        r = Resistor(name, node_pos, node_neg, _quantity(Resistance, value))
        self.components.append(r)
        return r

    def add_capacitor(
        self, name: str, node_pos: str, node_neg: str, value: Union[Capacitance, float]
    ) -> Capacitor:
        c = Capacitor(name, node_pos, node_neg, _quantity(Capacitance, value))
        self.components.append(c)
        return c

    def add_inductor(
        self, name: str, node_pos: str, node_neg: str, value: Union[Inductance, float]
    ) -> Inductor:
        ind = Inductor(name, node_pos, node_neg, _quantity(Inductance, value))
        self.components.append(ind)
        return ind

    def add_diode(self, name: str, node_pos: str, node_neg: str, model_name: str) -> Diode:
        d = Diode(name, node_pos, node_neg, model_name)
        self.components.append(d)
        return d

    def add_bjt(
        self, name: str, collector: str, base: str, emitter: str, model_name: str
    ) -> Bjt:
        q = Bjt(name, collector, base, emitter, model_name)
        self.components.append(q)
        return q

    def add_mosfet(
        self,
        name: str,
        drain: str,
        gate: str,
        source: str,
        bulk: str,
        model_name: str,
        length: Union[Number, float],
        width: Union[Number, float],
        **parameters: Union[Number, float],
    ) -> Mosfet:
        m = Mosfet(
            name=name,
            drain=drain,
            gate=gate,
            source=source,
            bulk=bulk,
            model_name=model_name,
            length=_quantity(Number, length),
            width=_quantity(Number, width),
            parameters={k: _quantity(Number, v) for k, v in parameters.items()},
        )
        self.components.append(m)
        return m

    def add_instance(self, name: str, pins: List[str], subckt_name: str) -> Instance:
        """Add an instance of sub-circuit `subckt_name`. `name` must include its leading `X`."""
        inst = Instance(name=name, pins=list(pins), subckt_name=subckt_name)
        self.instances.append(inst)
        return inst


@datatype
class Subckt(ComponentAdder):
    """Sub-Circuit Definition, `.SUBCKT name ports ... .ENDS`"""

    name: str
    ports: List[str]
    components: List[Component] = field(default_factory=list)
    instances: List[Instance] = field(default_factory=list)


class ModelKind(Enum):
    """Device kinds of `.MODEL` cards"""

    NPN = "NPN"
    PNP = "PNP"
    D = "D"
    NMOS = "NMOS"
    PMOS = "PMOS"


@datatype
class Model:
    """Model Definition, `.MODEL name kind (key=val ...)`"""

    name: str
    kind: ModelKind
    parameters: Dict[str, Number] = field(default_factory=dict)


@datatype
class Include:
    """Include (a File) Statement. Recorded, not followed."""

    path: str


@datatype
class Title:
    """`.TITLE` Statement"""

    text: str


@datatype
class End:
    """Empty class represents `.END` Statements"""

    ...


# Union of top-level statements
Statement = Union[
    Component, Source, SimCommand, MeasureCommand, Instance, Subckt, Model, Include, Title, End
]


@datatype
class SpiceDocument(ComponentAdder):
    """
    # Parsed SPICE Netlist

    Ordered lists of each kind of top-level statement, in source order.
    Nothing is removed after insertion.

    Documents can also be built programmatically, via the `add_*` methods, e.g.
    ```python
    doc = SpiceDocument()
    doc.add_resistor("1", "in", "out", Resistance(10, Suffix.KILO))
    doc.add_dc_voltage("1", "in", "0", 5.0)
    ```
    """

    title: Optional[str] = None
    components: List[Component] = field(default_factory=list)
    sources: List[Source] = field(default_factory=list)
    simulation: List[SimCommand] = field(default_factory=list)
    measures: List[MeasureCommand] = field(default_factory=list)
    subckts: List[Subckt] = field(default_factory=list)
    instances: List[Instance] = field(default_factory=list)
    models: List[Model] = field(default_factory=list)
    includes: List[Include] = field(default_factory=list)

    @classmethod
    def from_file(cls, path: os.PathLike) -> "SpiceDocument":
        from ..parse import parse_files, ParseOptions
        from .shared import Dialects

        return parse_files(path, options=ParseOptions(dialect=Dialects.SPICE))

    def add_source(
        self, name: str, kind: SourceKind, node_pos: str, node_neg: str, value: SourceValue
    ) -> Source:
        src = Source(
            name=name, kind=kind, node_pos=node_pos, node_neg=node_neg, value=value
        )
        self.sources.append(src)
        return src

    def add_dc_voltage(
        self, name: str, node_pos: str, node_neg: str, value: Union[Voltage, float]
    ) -> Source:
        value = DcVoltage(_quantity(Voltage, value))
        return self.add_source(name, SourceKind.VOLTAGE, node_pos, node_neg, value)

    def add_dc_current(
        self, name: str, node_pos: str, node_neg: str, value: Union[Current, float]
    ) -> Source:
        value = DcCurrent(_quantity(Current, value))
        return self.add_source(name, SourceKind.CURRENT, node_pos, node_neg, value)

    def add_ac_voltage(
        self,
        name: str,
        node_pos: str,
        node_neg: str,
        magnitude: Union[Voltage, float],
        phase: Union[Angle, float] = 0.0,
    ) -> Source:
        value = AcVoltage(_quantity(Voltage, magnitude), _quantity(Angle, phase))
        return self.add_source(name, SourceKind.VOLTAGE, node_pos, node_neg, value)

    def add_ac_current(
        self,
        name: str,
        node_pos: str,
        node_neg: str,
        magnitude: Union[Current, float],
        phase: Union[Angle, float] = 0.0,
    ) -> Source:
        value = AcCurrent(_quantity(Current, magnitude), _quantity(Angle, phase))
        return self.add_source(name, SourceKind.CURRENT, node_pos, node_neg, value)

    def add_sine_voltage(
        self, name: str, node_pos: str, node_neg: str, value: SineVoltage
    ) -> Source:
        return self.add_source(name, SourceKind.VOLTAGE, node_pos, node_neg, value)

    def add_pwl_voltage(
        self, name: str, node_pos: str, node_neg: str, points: List[Tuple[Time, Voltage]]
    ) -> Source:
        value = PwlVoltage(points=list(points))
        return self.add_source(name, SourceKind.VOLTAGE, node_pos, node_neg, value)

    def add_pulse_voltage(
        self, name: str, node_pos: str, node_neg: str, value: PulseVoltage
    ) -> Source:
        return self.add_source(name, SourceKind.VOLTAGE, node_pos, node_neg, value)

    def add_model(self, model: Model) -> Model:
        self.models.append(model)
        return model

    def add_subckt(self, subckt: Subckt) -> Subckt:
        self.subckts.append(subckt)
        return subckt


__all__ = [
    "Resistor",
    "Capacitor",
    "Inductor",
    "Diode",
    "Bjt",
    "Mosfet",
    "Component",
    "SourceKind",
    "DcVoltage",
    "DcCurrent",
    "AcVoltage",
    "AcCurrent",
    "SineVoltage",
    "PwlVoltage",
    "PulseVoltage",
    "SourceValue",
    "Source",
    "AcSweepType",
    "DcCommand",
    "AcCommand",
    "TranCommand",
    "SimCommand",
    "AnalysisType",
    "EdgeType",
    "MeasureFunction",
    "OutputSuffix",
    "VoltageVariable",
    "CurrentVariable",
    "OutputVariable",
    "TriggerCondition",
    "MeasureRise",
    "MeasureBasicStat",
    "MeasureFindWhen",
    "MeasureCommand",
    "Instance",
    "ComponentAdder",
    "Subckt",
    "ModelKind",
    "Model",
    "Include",
    "Title",
    "End",
    "Statement",
    "SpiceDocument",
]
