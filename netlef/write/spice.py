"""
# Spice Format Netlisting

Writes a `SpiceDocument` back to SPICE text, in the same statement forms the SPICE grammar reads.
Each document list is written in source order, list by list:
title, includes, models, sub-circuits, components, sources, instances, commands, measurements.

Numbers are written as magnitude plus scale-suffix, e.g. `10k` or `1.5Meg`,
with no unit letter, so that re-parsing the output produces equal values.
"""

# Std-Lib Imports
from typing import Any, Optional

# Local Imports
from ..data import *
from .base import Netlister


class SpiceNetlister(Netlister):
    """
    # Spice Netlister

    Walks a `SpiceDocument`, dispatching each entry to its `write_*` method.
    """

    @property
    def enum(self):
        """Get our entry in the `Dialects` enumeration"""
        return Dialects.SPICE

    def netlist(self) -> None:
        """Primary API Method.
        Convert everything in `self.src` and write to `self.dest`."""

        doc = self.src
        if doc.title is not None:
            self.writeln(f".TITLE {doc.title}")

        for entry in doc.includes:
            self.write_entry(entry)
        for entry in doc.models:
            self.write_entry(entry)
        for entry in doc.subckts:
            self.write_entry(entry)
        for entry in doc.components:
            self.write_entry(entry)
        for entry in doc.sources:
            self.write_entry(entry)
        for entry in doc.instances:
            self.write_entry(entry)
        for entry in doc.simulation:
            self.write_entry(entry)
        for entry in doc.measures:
            self.write_entry(entry)

        self.writeln(".END")

        # And ensure all output makes it to `self.dest`
        self.dest.flush()

    def write_entry(self, entry: Any) -> None:
        """Write an entry. Primarily dispatches across the statement union-types."""

        if isinstance(entry, Include):
            return self.write_include(entry)
        if isinstance(entry, Model):
            return self.write_model(entry)
        if isinstance(entry, Subckt):
            return self.write_subckt(entry)
        if isinstance(entry, (Resistor, Capacitor, Inductor)):
            return self.write_passive(entry)
        if isinstance(entry, Diode):
            return self.write_diode(entry)
        if isinstance(entry, Bjt):
            return self.write_bjt(entry)
        if isinstance(entry, Mosfet):
            return self.write_mosfet(entry)
        if isinstance(entry, Source):
            return self.write_source(entry)
        if isinstance(entry, Instance):
            return self.write_instance(entry)
        if isinstance(entry, DcCommand):
            return self.write_dc_command(entry)
        if isinstance(entry, AcCommand):
            return self.write_ac_command(entry)
        if isinstance(entry, TranCommand):
            return self.write_tran_command(entry)
        if isinstance(entry, MeasureRise):
            return self.write_measure_rise(entry)
        if isinstance(entry, MeasureBasicStat):
            return self.write_measure_stat(entry)
        if isinstance(entry, MeasureFindWhen):
            return self.write_measure_find(entry)

        return self.handle_error(entry, f"Invalid Entry: {entry}")

    def write_comment(self, comment: str) -> None:
        """While dialects vary, the *generic* Spice-comment begins with the asterisk."""
        self.writeln(f"* {comment}")

    def write_include(self, inc: Include) -> None:
        self.writeln(f'.INCLUDE "{inc.path}"')

    def write_model(self, model: Model) -> None:
        """`.MODEL name kind (key=val ...)`"""
        params = self.format_params(model.parameters)
        self.writeln(f".MODEL {model.name} {model.kind.value} ({params})")

    def write_subckt(self, subckt: Subckt) -> None:
        """Write the `SUBCKT` definition, its indented body, and `.ENDS`."""
        self.writeln(" ".join([".SUBCKT", subckt.name] + subckt.ports))
        self.indent += 1
        for entry in subckt.components:
            self.write_entry(entry)
        for entry in subckt.instances:
            self.write_entry(entry)
        self.indent -= 1
        self.writeln(f".ENDS {subckt.name}")

    # Components

    def write_passive(self, elem: Component) -> None:
        if isinstance(elem, Resistor):
            prefix = "R"
        elif isinstance(elem, Capacitor):
            prefix = "C"
        else:
            prefix = "L"
        value = self.format_number(elem.value)
        self.writeln(f"{prefix}{elem.name} {elem.node_pos} {elem.node_neg} {value}")

    def write_diode(self, elem: Diode) -> None:
        self.writeln(f"D{elem.name} {elem.node_pos} {elem.node_neg} {elem.model_name}")

    def write_bjt(self, elem: Bjt) -> None:
        nodes = f"{elem.collector} {elem.base} {elem.emitter}"
        self.writeln(f"Q{elem.name} {nodes} {elem.model_name}")

    def write_mosfet(self, elem: Mosfet) -> None:
        """`Mname D G S B model L=val W=val key=val ...`"""
        nodes = f"{elem.drain} {elem.gate} {elem.source} {elem.bulk}"
        line = f"M{elem.name} {nodes} {elem.model_name}"
        line += f" L={self.format_number(elem.length)} W={self.format_number(elem.width)}"
        if elem.parameters:
            line += " " + self.format_params(elem.parameters)
        self.writeln(line)

    def format_params(self, params: dict) -> str:
        """Format a mapping of parameters as space-separated `key=val` pairs"""
        return " ".join(f"{k}={self.format_number(v)}" for k, v in params.items())

    # Sources

    def write_source(self, src: Source) -> None:
        value = self.format_source_value(src.value)
        if value is None:
            return self.handle_error(src, f"Invalid Source value: {src.value}")
        self.writeln(f"{src.kind.value}{src.name} {src.node_pos} {src.node_neg} {value}")

    def format_source_value(self, value: Any) -> Optional[str]:
        """Format a source value, or return `None` if it is not a known kind"""
        fmt = self.format_number
        if isinstance(value, (DcVoltage, DcCurrent)):
            return f"DC {fmt(value.value)}"
        if isinstance(value, (AcVoltage, AcCurrent)):
            return f"AC {fmt(value.magnitude)} {fmt(value.phase)}"
        if isinstance(value, SineVoltage):
            args = [
                value.offset,
                value.amplitude,
                value.frequency,
                value.delay,
                value.damping,
                value.phase,
            ]
            return "SIN(" + " ".join(fmt(a) for a in args) + ")"
        if isinstance(value, PwlVoltage):
            points = " ".join(f"{fmt(t)} {fmt(v)}" for t, v in value.points)
            return f"PWL({points})"
        if isinstance(value, PulseVoltage):
            args = [
                value.initial,
                value.pulsed,
                value.delay,
                value.rise,
                value.fall,
                value.width,
                value.period,
            ]
            return "PULSE(" + " ".join(fmt(a) for a in args) + ")"
        return None

    def write_instance(self, inst: Instance) -> None:
        """`Xname pins ... subckt`. The name retains its `X`."""
        self.writeln(" ".join([inst.name] + inst.pins + [inst.subckt_name]))

    # Simulation commands

    def write_dc_command(self, cmd: DcCommand) -> None:
        fmt = self.format_number
        self.writeln(
            f".DC {cmd.src_name} {fmt(cmd.start)} {fmt(cmd.stop)} {fmt(cmd.step)}"
        )

    def write_ac_command(self, cmd: AcCommand) -> None:
        fmt = self.format_number
        self.writeln(
            f".AC {cmd.sweep_type.value} {cmd.points} {fmt(cmd.f_start)} {fmt(cmd.f_stop)}"
        )

    def write_tran_command(self, cmd: TranCommand) -> None:
        """`.TRAN tstep tstop [tstart [tmax]] [UIC]`.
        A `tmax` without `tstart` is written with a zero `tstart`."""
        fmt = self.format_number
        line = f".TRAN {fmt(cmd.t_step)} {fmt(cmd.t_stop)}"
        if cmd.t_start is not None or cmd.t_max is not None:
            t_start = cmd.t_start if cmd.t_start is not None else Time(0)
            line += f" {fmt(t_start)}"
        if cmd.t_max is not None:
            line += f" {fmt(cmd.t_max)}"
        if cmd.uic:
            line += " UIC"
        self.writeln(line)

    # Measurements

    def format_output_variable(self, var: Any) -> str:
        """`V(node1[,node2])` or `I(element)`.
        AC suffixes are part of the stored node names, and are not written separately."""
        if isinstance(var, VoltageVariable):
            if var.node2 is not None:
                return f"V({var.node1},{var.node2})"
            return f"V({var.node1})"
        return f"I({var.element_name})"

    def format_trigger(self, cond: TriggerCondition) -> str:
        var = self.format_output_variable(cond.variable)
        value = self.format_number(cond.value)
        return f"{var} VAL={value} {cond.edge.value}={cond.count}"

    def write_measure_rise(self, meas: MeasureRise) -> None:
        trig = self.format_trigger(meas.trig)
        targ = self.format_trigger(meas.targ)
        self.writeln(
            f".MEAS {meas.analysis.value} {meas.name} TRIG {trig} TARG {targ}"
        )

    def write_measure_stat(self, meas: MeasureBasicStat) -> None:
        var = self.format_output_variable(meas.variable)
        from_time = self.format_number(meas.from_time)
        to_time = self.format_number(meas.to_time)
        self.writeln(
            f".MEAS {meas.analysis.value} {meas.name} {meas.stat.value} {var} FROM={from_time} TO={to_time}"
        )

    def write_measure_find(self, meas: MeasureFindWhen) -> None:
        var = self.format_output_variable(meas.variable)
        when = self.format_output_variable(meas.when_variable)
        value = self.format_number(meas.when_value)
        self.writeln(
            f".MEAS {meas.analysis.value} {meas.name} FIND {var} WHEN {when}={value}"
        )
