"""
# SPICE Parsing Tests

"""

from textwrap import dedent

import pytest


def test_resistor():
    from netlef import SpiceDialectParser, Resistor, Resistance, Suffix

    p = SpiceDialectParser.from_str("R1 in out 10k")
    r = p.parse(p.parse_statement)
    assert r == Resistor(
        name="1", node_pos="in", node_neg="out", value=Resistance(10, Suffix.KILO)
    )

    p = SpiceDialectParser.from_str("rload out 0 1.5meg \n")
    r = p.parse(p.parse_statement)
    assert r.name == "load"
    assert r.value == Resistance(1.5, Suffix.MEGA)


def test_passives_and_devices():
    from netlef import (
        SpiceDialectParser,
        Capacitor,
        Inductor,
        Diode,
        Bjt,
        Capacitance,
        Inductance,
        Suffix,
    )

    p = SpiceDialectParser.from_str("C1 out 0 1uF")
    assert p.parse(p.parse_statement) == Capacitor(
        name="1", node_pos="out", node_neg="0", value=Capacitance(1, Suffix.MICRO)
    )
    p = SpiceDialectParser.from_str("L2 a b 10nH")
    assert p.parse(p.parse_statement) == Inductor(
        name="2", node_pos="a", node_neg="b", value=Inductance(10, Suffix.NANO)
    )
    p = SpiceDialectParser.from_str("D1 anode cathode dmod")
    assert p.parse(p.parse_statement) == Diode(
        name="1", node_pos="anode", node_neg="cathode", model_name="dmod"
    )
    p = SpiceDialectParser.from_str("Q1 c b e npn1")
    assert p.parse(p.parse_statement) == Bjt(
        name="1", collector="c", base="b", emitter="e", model_name="npn1"
    )


def test_mosfet():
    from netlef import SpiceDialectParser, Mosfet, Number, Suffix

    txt = "M1 d g s b nmos W=2u l=1u\n+ nf=2 m=4"
    p = SpiceDialectParser.from_str(txt)
    m = p.parse(p.parse_statement)
    assert m == Mosfet(
        name="1",
        drain="d",
        gate="g",
        source="s",
        bulk="b",
        model_name="nmos",
        length=Number(1, Suffix.MICRO),
        width=Number(2, Suffix.MICRO),
        parameters=dict(nf=Number(2), m=Number(4)),
    )
    assert list(m.parameters.keys()) == ["nf", "m"]


def test_mosfet_missing_wl():
    from netlef import SpiceDialectParser, NetlistParseError

    p = SpiceDialectParser.from_str("M1 d g s b nmos W=2u")
    with pytest.raises(NetlistParseError) as e:
        p.parse_statement()
    assert e.value.label == "no w/l given"


def test_commitment():
    """Once the type-letter matches, failures are fatal. Before, they are recoverable."""
    from netlef import SpiceDialectParser, NetlistParseError

    p = SpiceDialectParser.from_str("Rhhh 1 n2 _")
    with pytest.raises(NetlistParseError) as e:
        p.parse_resistor()
    assert e.value.label == "resistor_value"
    assert [label for _, label in e.value.errors] == ["resistor_value", "resistor"]

    p = SpiceDialectParser.from_str("Xhhh 1 n2 1.5k")
    assert p.parse_resistor() is None
    assert p.pos == 0
    # And alternation carries on to the instance
    i = p.parse(p.parse_statement)
    assert i.name == "Xhhh"
    assert i.pins == ["1", "n2"]
    assert i.subckt_name == "1.5k"


def test_sources():
    from netlef import (
        SpiceDialectParser,
        Source,
        SourceKind,
        DcVoltage,
        DcCurrent,
        AcVoltage,
        Voltage,
        Current,
        Angle,
        Suffix,
    )

    def source(txt: str) -> Source:
        p = SpiceDialectParser.from_str(txt)
        return p.parse(p.parse_statement)

    s = source("V1 in 0 DC 5")
    assert s == Source(
        name="1",
        kind=SourceKind.VOLTAGE,
        node_pos="in",
        node_neg="0",
        value=DcVoltage(Voltage(5)),
    )
    assert source("V1 in 0 dc=5").value == DcVoltage(Voltage(5))
    assert source("V1 in 0 5").value == DcVoltage(Voltage(5))
    assert source("V2 a b AC 1 90").value == AcVoltage(Voltage(1), Angle(90))

    i = source("I1 a b DC 1mA")
    assert i.kind == SourceKind.CURRENT
    assert i.value == DcCurrent(Current(1, Suffix.MILLI))


def test_continuation():
    """Line continuations parse identically to a single line"""
    from netlef import SpiceDialectParser

    p = SpiceDialectParser.from_str("V1 1 0 \n+ DC 5")
    joined = p.parse(p.parse_statement)
    p = SpiceDialectParser.from_str("V1 1 0 DC 5")
    assert joined == p.parse(p.parse_statement)


def test_waveform_sources():
    from netlef import (
        SpiceDialectParser,
        SineVoltage,
        PwlVoltage,
        PulseVoltage,
        Voltage,
        Time,
        Frequency,
        Number,
        Suffix,
    )

    p = SpiceDialectParser.from_str("V1 a 0 SIN(0 1 1k 1n 0 45)")
    assert p.parse(p.parse_statement).value == SineVoltage(
        offset=Voltage(0),
        amplitude=Voltage(1),
        frequency=Frequency(1, Suffix.KILO),
        delay=Time(1, Suffix.NANO),
        damping=Frequency(0),
        phase=Number(45),
    )

    p = SpiceDialectParser.from_str("V1 a 0 SIN(0 1 1k)")
    sine = p.parse(p.parse_statement).value
    assert sine.delay == Time(0)
    assert sine.phase == Number(0)

    # Points are kept in source order
    p = SpiceDialectParser.from_str("V1 a 0 PWL(0 0 2n 1 1n 0.5)")
    assert p.parse(p.parse_statement).value == PwlVoltage(
        points=[
            (Time(0), Voltage(0)),
            (Time(2, Suffix.NANO), Voltage(1)),
            (Time(1, Suffix.NANO), Voltage(0.5)),
        ]
    )

    p = SpiceDialectParser.from_str("Vclk clk 0 PULSE(0 1.8 0 10p 10p 1n 2n)")
    assert p.parse(p.parse_statement).value == PulseVoltage(
        initial=Voltage(0),
        pulsed=Voltage(1.8),
        delay=Time(0),
        rise=Time(10, Suffix.PICO),
        fall=Time(10, Suffix.PICO),
        width=Time(1, Suffix.NANO),
        period=Time(2, Suffix.NANO),
    )

    # PULSE requires all seven fields
    from netlef import NetlistParseError

    p = SpiceDialectParser.from_str("V1 a 0 PULSE(0 1 0 1n 1n 1n)")
    with pytest.raises(NetlistParseError) as e:
        p.parse_statement()
    assert e.value.label == "to"


def test_sim_commands():
    from netlef import (
        SpiceDialectParser,
        DcCommand,
        AcCommand,
        AcSweepType,
        TranCommand,
        Voltage,
        Frequency,
        Time,
        Suffix,
    )

    def cmd(txt: str):
        p = SpiceDialectParser.from_str(txt)
        return p.parse(p.parse_statement)

    assert cmd(".DC V1 0 1.8 0.1") == DcCommand(
        src_name="V1", start=Voltage(0), stop=Voltage(1.8), step=Voltage(0.1)
    )
    assert cmd(".ac dec 10 1 1g") == AcCommand(
        sweep_type=AcSweepType.DEC,
        points=10,
        f_start=Frequency(1),
        f_stop=Frequency(1, Suffix.MEGA),
    )
    assert cmd(".TRAN 1n 10n") == TranCommand(
        t_step=Time(1, Suffix.NANO), t_stop=Time(10, Suffix.NANO)
    )
    assert cmd(".TRAN 1n 10n 0 1p UIC") == TranCommand(
        t_step=Time(1, Suffix.NANO),
        t_stop=Time(10, Suffix.NANO),
        t_start=Time(0),
        t_max=Time(1, Suffix.PICO),
        uic=True,
    )

    from netlef import NetlistParseError

    p = SpiceDialectParser.from_str(".TRAN 1n 10n bogus")
    with pytest.raises(NetlistParseError) as e:
        p.parse_statement()
    assert e.value.label == "expected UIC or end of line"

    p = SpiceDialectParser.from_str(".DC V1 0 1.8")
    with pytest.raises(NetlistParseError) as e:
        p.parse_statement()
    assert e.value.label == "step_value"


def test_measures():
    from netlef import (
        SpiceDialectParser,
        MeasureRise,
        MeasureBasicStat,
        MeasureFindWhen,
        MeasureFunction,
        TriggerCondition,
        VoltageVariable,
        CurrentVariable,
        OutputSuffix,
        AnalysisType,
        EdgeType,
        Number,
        Time,
        Suffix,
    )

    def meas(txt: str):
        p = SpiceDialectParser.from_str(txt)
        return p.parse(p.parse_statement)

    m = meas(".MEAS TRAN tpd TRIG V(in) VAL=0.9 RISE=1 TARG V(out) VAL=0.9 FALL=2")
    assert m == MeasureRise(
        analysis=AnalysisType.TRAN,
        name="tpd",
        trig=TriggerCondition(
            variable=VoltageVariable(node1="in"),
            value=Number(0.9),
            edge=EdgeType.RISE,
            count=1,
        ),
        targ=TriggerCondition(
            variable=VoltageVariable(node1="out"),
            value=Number(0.9),
            edge=EdgeType.FALL,
            count=2,
        ),
    )

    m = meas(".measure tran iavg AVG I(Vdd) FROM=1n TO=10n")
    assert m == MeasureBasicStat(
        analysis=AnalysisType.TRAN,
        name="iavg",
        stat=MeasureFunction.AVG,
        variable=CurrentVariable(element_name="Vdd"),
        from_time=Time(1, Suffix.NANO),
        to_time=Time(10, Suffix.NANO),
    )

    m = meas(".MEAS AC gain FIND V(outDB) WHEN V(a, b)=1V")
    assert m == MeasureFindWhen(
        analysis=AnalysisType.AC,
        name="gain",
        variable=VoltageVariable(node1="outDB", suffix=OutputSuffix.DECIBEL),
        when_variable=VoltageVariable(node1="a", node2="b"),
        when_value=Number(1),
    )

    from netlef import NetlistParseError

    p = SpiceDialectParser.from_str(".MEAS TRAN x BOGUS V(a)")
    with pytest.raises(NetlistParseError) as e:
        p.parse_statement()
    assert e.value.label == "measure_kind"


def test_output_suffix():
    """Suffixes are sniffed in order M, DB, P, R, I"""
    from netlef.dialects.spice import output_suffix
    from netlef import OutputSuffix

    assert output_suffix("outM") == OutputSuffix.MAGNITUDE
    assert output_suffix("outDB") == OutputSuffix.DECIBEL
    assert output_suffix("outP") == OutputSuffix.PHASE
    assert output_suffix("outR") == OutputSuffix.REAL
    assert output_suffix("outI") == OutputSuffix.IMAG
    assert output_suffix("DBM") == OutputSuffix.MAGNITUDE
    assert output_suffix("outB") is None
    assert output_suffix("out") is None


def test_instance():
    from netlef import SpiceDialectParser, Instance, NetlistParseError

    p = SpiceDialectParser.from_str("X1 a b vdd gnd inv")
    assert p.parse(p.parse_statement) == Instance(
        name="X1", pins=["a", "b", "vdd", "gnd"], subckt_name="inv"
    )

    p = SpiceDialectParser.from_str("X1")
    with pytest.raises(NetlistParseError) as e:
        p.parse_statement()
    assert e.value.label == "missing subckt name"


def test_model():
    from netlef import SpiceDialectParser, Model, ModelKind, Number, Suffix

    p = SpiceDialectParser.from_str(".model nch NMOS (vth0=0.4 tox=2n)")
    assert p.parse(p.parse_statement) == Model(
        name="nch",
        kind=ModelKind.NMOS,
        parameters=dict(vth0=Number(0.4), tox=Number(2, Suffix.NANO)),
    )

    p = SpiceDialectParser.from_str(".MODEL q1 pnp ()")
    assert p.parse(p.parse_statement).kind == ModelKind.PNP

    from netlef import NetlistParseError

    p = SpiceDialectParser.from_str(".MODEL q1 JFET ()")
    with pytest.raises(NetlistParseError) as e:
        p.parse_statement()
    assert e.value.label == "unknown model kind"


def test_subckt():
    from netlef import parse_spice

    txt = dedent(
        """\
        * An inverter
        .SUBCKT inv in out vdd gnd
        M1 out in vdd vdd pmos L=1u W=2u
        M2 out in gnd gnd nmos L=1u W=1u
        .ENDS inv
        X1 a b vdd gnd inv
        """
    )
    doc = parse_spice(txt)
    assert len(doc.subckts) == 1
    subckt = doc.subckts[0]
    assert subckt.name == "inv"
    assert subckt.ports == ["in", "out", "vdd", "gnd"]
    assert len(subckt.components) == 2
    assert subckt.instances == []
    assert subckt.components[1].source_info.line == 4
    assert len(doc.instances) == 1
    assert doc.instances[0].source_info.line == 6
    assert doc.components == []


def test_subckt_errors():
    from netlef import parse_spice, NetlistReadError

    with pytest.raises(NetlistReadError) as e:
        parse_spice(".SUBCKT inv a b\nR1 a b 1k\n")
    assert "missing .ENDS" in e.value.message

    with pytest.raises(NetlistReadError) as e:
        parse_spice(".SUBCKT inv a b\n.TRAN 1n 10n\n.ENDS\n")
    assert e.value.line == 2
    assert "unknown line in subckt" in e.value.message


def test_end_to_end():
    from netlef import (
        parse_spice,
        Resistance,
        Capacitance,
        DcVoltage,
        Voltage,
        TranCommand,
        MeasureRise,
        Time,
        Suffix,
    )

    txt = dedent(
        """\
        R1 in out 10k
        C1 out 0 1u
        V1 in 0 DC 5
        .TRAN 1n 10n
        .MEAS TRAN rise_time TRIG V(out) VAL=0.2 RISE=1 TARG V(out) VAL=0.8 RISE=1
        """
    )
    doc = parse_spice(txt)

    assert len(doc.components) == 2
    r1, c1 = doc.components
    assert r1.name == "1"
    assert r1.value == Resistance(10, Suffix.KILO)
    assert c1.value == Capacitance(1, Suffix.MICRO)

    assert len(doc.sources) == 1
    assert doc.sources[0].value == DcVoltage(Voltage(5))

    assert doc.simulation == [
        TranCommand(t_step=Time(1, Suffix.NANO), t_stop=Time(10, Suffix.NANO))
    ]
    assert len(doc.measures) == 1
    assert isinstance(doc.measures[0], MeasureRise)
    assert doc.measures[0].name == "rise_time"

    assert [c.source_info.line for c in doc.components] == [1, 2]
    assert doc.measures[0].source_info.line == 5


def test_comments_and_blank_lines():
    from netlef import parse_spice

    txt = dedent(
        """\
        * Header comment

        ; Another comment
        R1 a b 1k

        *R2 a b 2k
        R3 a b
        + 3k
        """
    )
    doc = parse_spice(txt)
    assert [c.name for c in doc.components] == ["1", "3"]
    assert doc.components[1].source_info.line == 7


def test_unknown_statement():
    from netlef import parse_spice, UnknownStatementError

    with pytest.raises(UnknownStatementError) as e:
        parse_spice("R1 in out 1k\nTHIS_IS_INVALID")
    assert e.value.line == 2
    assert e.value.text == "THIS_IS_INVALID"
    assert "THIS_IS_INVALID" in str(e.value)
    assert "line 2" in str(e.value)


def test_read_error_trace():
    from netlef import parse_spice, NetlistReadError, NetlistParseError

    with pytest.raises(NetlistReadError) as e:
        parse_spice("R1 in out 1k\nC2 out 0 oops\n")
    assert e.value.line == 2
    msg = e.value.message
    assert msg.startswith("Error at line 2:")
    assert "in capacitor_value" in msg
    assert "in capacitor:" in msg
    assert "C2 out 0 oops" in msg
    assert isinstance(e.value.__cause__, NetlistParseError)


def test_trailing_content():
    from netlef import parse_spice, NetlistReadError

    with pytest.raises(NetlistReadError) as e:
        parse_spice("R1 in out 1k extra\n")
    assert "unexpected trailing content" in e.value.message


def test_control_statements():
    from netlef import parse_spice, Include

    txt = dedent(
        """\
        .TITLE My Circuit
        .include "models/devices.sp"
        .INC other.sp
        R1 a b 1k
        .END
        This text is after the end
        """
    )
    doc = parse_spice(txt)
    assert doc.title == "My Circuit"
    assert doc.includes == [Include("models/devices.sp"), Include("other.sp")]
    assert len(doc.components) == 1


def test_to_json():
    from netlef import parse_spice, to_json

    doc = parse_spice("R1 a b 1k\n")
    js = to_json(doc)
    assert '"node_pos": "a"' in js
    assert '"suffix": "k"' in js


def test_eat_blanks_from_cursor():
    """Blank-skipping starts at the cursor, not at the start of the input"""
    from netlef import SpiceDialectParser

    p = SpiceDialectParser("R1 in out 1k\n\n  THIS_IS_INVALID", pos=12)
    p.eat_blanks()
    assert p.rest == "THIS_IS_INVALID"


def test_indented_statement_after_subckt():
    from netlef import parse_spice

    txt = ".SUBCKT inv a b\nR1 a b 1k\n.ENDS inv\n  R2 a b 2k\n"
    doc = parse_spice(txt)
    assert [c.name for c in doc.components] == ["2"]
    assert doc.components[0].source_info.line == 4
    assert doc.subckts[0].components[0].name == "1"


def test_subckt_body_one_entry_per_line():
    from netlef import parse_spice, NetlistReadError

    with pytest.raises(NetlistReadError) as e:
        parse_spice(".SUBCKT inv a b\nR1 a b 1k X2 a inv\n.ENDS\n")
    assert e.value.line == 2
    assert "unexpected trailing content" in e.value.message
    assert "in subckt" in e.value.message

    # Continuations still join body lines
    doc = parse_spice(".SUBCKT inv a b\nR1 a b\n+ 1k\n.ENDS\n")
    assert len(doc.subckts[0].components) == 1
