"""
# Unit-Number & Lexical Tests

"""

import math
import pytest


def test_version():
    from netlef import __version__

    assert __version__ == "0.1.0"


def test_suffix_scales():
    from netlef import Suffix

    assert Suffix.MEGA.scale == 1e6
    assert Suffix.KILO.scale == 1e3
    assert Suffix.NONE.scale == 1
    assert Suffix.MILLI.scale == 1e-3
    assert Suffix.MICRO.scale == 1e-6
    assert Suffix.NANO.scale == 1e-9
    assert Suffix.PICO.scale == 1e-12


def test_number_suffixes():
    """Test the suffix table of each quantity, including `meg` precedence over `m`"""
    from netlef import SpiceDialectParser, Number, Voltage, Resistance, Time, Suffix

    def num(txt: str) -> Number:
        p = SpiceDialectParser.from_str(txt)
        return p.parse(p.parse_number)

    assert num("1.5meg") == Number(1.5, Suffix.MEGA)
    assert num("1.5MEG") == Number(1.5, Suffix.MEGA)
    assert num("2g") == Number(2, Suffix.MEGA)
    assert num("10k") == Number(10, Suffix.KILO)
    assert num("3m") == Number(3, Suffix.MILLI)
    assert num("4u") == Number(4, Suffix.MICRO)
    assert num("5n") == Number(5, Suffix.NANO)
    assert num("6p") == Number(6, Suffix.PICO)
    assert num("7") == Number(7, Suffix.NONE)
    assert num("-1.") == Number(-1, Suffix.NONE)
    assert num("1e-3") == Number(1e-3, Suffix.NONE)

    p = SpiceDialectParser.from_str("1.5mV")
    assert p.parse(p.parse_voltage) == Voltage(1.5, Suffix.MILLI)
    p = SpiceDialectParser.from_str("2megV")
    assert p.parse(p.parse_voltage) == Voltage(2, Suffix.MEGA)
    p = SpiceDialectParser.from_str("5V")
    assert p.parse(p.parse_voltage) == Voltage(5, Suffix.NONE)
    p = SpiceDialectParser.from_str("1kΩ")
    assert p.parse(p.parse_resistance) == Resistance(1, Suffix.KILO)
    p = SpiceDialectParser.from_str("10ns")
    assert p.parse(p.parse_time) == Time(10, Suffix.NANO)


def test_number_arithmetic():
    from netlef import Number, Voltage, Time, Frequency, Suffix

    a = Voltage(1, Suffix.MILLI)
    b = Voltage(2, Suffix.MILLI)
    assert (a + b).to_float() == pytest.approx(3e-3)
    assert isinstance(a + b, Voltage)
    assert (b - a).to_float() == pytest.approx(1e-3)
    assert (a * 2).to_float() == pytest.approx(2e-3)
    assert (2 * a).to_float() == pytest.approx(2e-3)
    assert (b / 2).to_float() == pytest.approx(1e-3)
    assert b / a == pytest.approx(2)
    assert -a == Voltage(-1, Suffix.MILLI)
    assert a < b
    assert b >= a
    assert float(Number(1.5, Suffix.KILO)) == 1500

    # Equality is structural, ordering is by value
    assert Number(1, Suffix.KILO) != Number(1000)
    assert Number(1, Suffix.KILO) <= Number(1000)

    assert Frequency(1, Suffix.KILO).to_period().to_float() == pytest.approx(1e-3)

    with pytest.raises(TypeError):
        Voltage(1) + Time(1)


def test_number_str():
    from netlef import Voltage, Resistance, Suffix

    assert str(Voltage(1.5, Suffix.MILLI)) == "1.5mV"
    assert str(Resistance(10.0, Suffix.KILO)) == "10.0kΩ"


def test_uint():
    from netlef import SpiceDialectParser

    p = SpiceDialectParser.from_str("4294967295")
    assert p.parse(p.parse_uint) == 4294967295

    # Overflow is a recoverable no-match
    p = SpiceDialectParser.from_str("4294967296")
    assert p.parse_uint() is None
    assert p.pos == 0


def test_lef_floats():
    from netlef import LefDialectParser

    p = LefDialectParser.from_str("1_000.000_5")
    assert p.parse(p.parse_float) == pytest.approx(1000.0005)
    p = LefDialectParser.from_str("  # comment \n  -0.5")
    assert p.parse(p.parse_float) == -0.5


def test_keywords():
    """Keywords require a trailing non-word character"""
    from netlef import SpiceDialectParser

    p = SpiceDialectParser.from_str(".ENDS")
    assert not p.match_keyword(".END")
    assert p.match_keyword(".ends")
    assert p.at_end


def test_waveforms():
    from netlef import (
        Number,
        SineVoltage,
        PwlVoltage,
        PulseVoltage,
        Voltage,
        Time,
        Frequency,
        Suffix,
    )

    sine = SineVoltage.sin(amplitude=Voltage(1), frequency=Frequency(1))
    assert sine.voltage_at(Time(0)).to_float() == pytest.approx(0)
    assert sine.voltage_at(Time(0.25)).to_float() == pytest.approx(1)

    cos = SineVoltage.cos(amplitude=Voltage(1), frequency=Frequency(1))
    assert cos.voltage_at(Time(0)).to_float() == pytest.approx(1)

    shifted = SineVoltage(
        offset=Voltage(0), amplitude=Voltage(1), frequency=Frequency(1), phase=Number(90)
    )
    assert shifted.voltage_at(Time(0)).to_float() == pytest.approx(1)

    damped = SineVoltage(
        offset=Voltage(1),
        amplitude=Voltage(1),
        frequency=Frequency(1),
        delay=Time(1),
        damping=Frequency(1),
    )
    assert damped.voltage_at(Time(0.5)) == Voltage(1)
    expected = 1 + math.exp(-0.25)
    assert damped.voltage_at(Time(1.25)).to_float() == pytest.approx(expected)

    pwl = PwlVoltage(
        points=[(Time(1), Voltage(0)), (Time(2), Voltage(1)), (Time(3), Voltage(-1))]
    )
    assert pwl.voltage_at(Time(0)) == Voltage(0)
    assert pwl.voltage_at(Time(1.5)).to_float() == pytest.approx(0.5)
    assert pwl.voltage_at(Time(2.5)).to_float() == pytest.approx(0)
    assert pwl.voltage_at(Time(5)) == Voltage(-1)

    clk = PulseVoltage.clock(
        vdd=Voltage(1), period=Time(10, Suffix.NANO), slew=Time(1, Suffix.NANO)
    )
    assert clk.width.to_float() == pytest.approx(4e-9)
    assert clk.voltage_at(Time(0)) == Voltage(0)
    assert clk.voltage_at(Time(0.5, Suffix.NANO)).to_float() == pytest.approx(0.5)
    assert clk.voltage_at(Time(3, Suffix.NANO)).to_float() == pytest.approx(1)
    assert clk.voltage_at(Time(5.5, Suffix.NANO)).to_float() == pytest.approx(0.5)
    assert clk.voltage_at(Time(8, Suffix.NANO)).to_float() == pytest.approx(0)
    assert clk.voltage_at(Time(13, Suffix.NANO)).to_float() == pytest.approx(1)


def test_pulse_zero_period():
    """A zero period is a single pulse, which does not repeat"""
    from netlef import parse_spice, Time, Voltage, Suffix

    doc = parse_spice("V1 a 0 PULSE(0 1 0 1n 1n 5n 0)\n")
    pulse = doc.sources[0].value
    assert pulse.voltage_at(Time(3, Suffix.NANO)) == Voltage(1)
    assert pulse.voltage_at(Time(6.5, Suffix.NANO)).to_float() == pytest.approx(0.5)
    assert pulse.voltage_at(Time(20, Suffix.NANO)) == Voltage(0)
