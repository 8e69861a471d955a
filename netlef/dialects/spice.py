"""
# SPICE Dialect Parsing

Statement grammar for the supported SPICE subset:
components, sources, simulation commands, measurements, instances, sub-circuits and models.

Statements are line-oriented. The whitespace skipper stops at a bare newline,
which ends the statement, but passes through `\\n+` line-continuations.
"""

# Std-Lib Imports
from typing import Callable, Optional, Tuple, Type

# Local Imports
from ..data import *
from ..lex import Tokens, pats, suffixes
from .base import DialectParser


class SpiceDialectParser(DialectParser):
    """SPICE-Format Dialect Parser"""

    enum = Dialects.SPICE
    ident_pattern = pats[Tokens.SPICE_IDENT]
    float_pattern = pats[Tokens.SPICE_FLOAT]
    nocase = True

    def eat_idle(self) -> None:
        """Skip spaces, tabs, and carriage returns.
        A newline followed by `+` is a line-continuation, and is skipped along with the `+` and any trailing blanks.
        Any other newline ends the statement, and is left in place."""
        txt, pos, end = self.txt, self.pos, len(self.txt)
        while pos < end:
            c = txt[pos]
            if c in " \t\r":
                pos += 1
            elif c == "\n" and pos + 1 < end and txt[pos + 1] == "+":
                pos += 2
                while pos < end and txt[pos] in " \t":
                    pos += 1
            else:
                break
        self.pos = pos

    def eat_blanks(self) -> None:
        """Pass over blank lines and full-line `*` or `;` comments."""
        while True:
            rest = self.txt[self.pos :]
            self.pos += len(rest) - len(rest.lstrip())
            if self.at_end or self.txt[self.pos] not in "*;":
                return
            nl = self.txt.find("\n", self.pos)
            self.pos = len(self.txt) if nl < 0 else nl + 1

    def at_line_end(self) -> bool:
        """Boolean indication of whether the cursor sits at the end of a logical line.
        Passes over trailing blanks and continuations on the way."""
        start = self.pos
        # Block statements consume through their closing newline
        if start > 0 and self.txt[start - 1] == "\n":
            return True
        self.eat_idle()
        return self.at_end or self.txt[self.pos] == "\n"

    def expect_line_end(self) -> None:
        if not self.at_line_end():
            self.fail("unexpected trailing content")

    def parse_statement(self) -> Optional[Statement]:
        """Parse a top-level statement.
        Returns `None` if no statement alternative matches, leaving the cursor in place."""
        return self.parse_first(
            self.parse_component,
            self.parse_source,
            self.parse_sim_command,
            self.parse_measure,
            self.parse_instance,
            self.parse_subckt,
            self.parse_model,
            self.parse_control,
        )

    def parse_node(self) -> Optional[str]:
        return self.token(pats[Tokens.NODE])

    def parse_designator(self, prefix: str) -> Optional[str]:
        """Instance name starting with letter `prefix`, case-insensitive.
        Returns the name less its prefix, or `None` (without consuming) on a different letter."""
        start = self.pos
        name = self.parse_ident()
        if name is None or len(name) < 2 or name[0].upper() != prefix:
            return self.reset(start)
        return name[1:]

    def parse_param_pair(self) -> Optional[Tuple[str, Number]]:
        """key=value"""
        start = self.pos
        key = self.parse_ident()
        if key is None or not self.match_tag("="):
            return self.reset(start)
        value = self.parse_number()
        if value is None:
            return self.reset(start)
        return key, value

    # Components

    def parse_component(self) -> Optional[Component]:
        return self.parse_first(
            self.parse_resistor,
            self.parse_capacitor,
            self.parse_inductor,
            self.parse_diode,
            self.parse_bjt,
            self.parse_mosfet,
        )

    def _parse_passive(
        self, prefix: str, label: str, parse_value: Callable, cls: Type
    ) -> Optional[Component]:
        """Two-terminal passive: `{prefix}name N+ N- value`"""
        with self.context(label):
            name = self.parse_designator(prefix)
            if name is None:
                return None
            node_pos = self.expect(self.parse_node(), "node_pos")
            node_neg = self.expect(self.parse_node(), "node_neg")
            value = self.expect(parse_value(), label + "_value")
            return cls(name=name, node_pos=node_pos, node_neg=node_neg, value=value)

    def parse_resistor(self) -> Optional[Resistor]:
        return self._parse_passive("R", "resistor", self.parse_resistance, Resistor)

    def parse_capacitor(self) -> Optional[Capacitor]:
        return self._parse_passive("C", "capacitor", self.parse_capacitance, Capacitor)

    def parse_inductor(self) -> Optional[Inductor]:
        return self._parse_passive("L", "inductor", self.parse_inductance, Inductor)

    def parse_diode(self) -> Optional[Diode]:
        """Dname N+ N- model"""
        with self.context("diode"):
            name = self.parse_designator("D")
            if name is None:
                return None
            node_pos = self.expect(self.parse_node(), "node_pos")
            node_neg = self.expect(self.parse_node(), "node_neg")
            model_name = self.expect(self.parse_ident(), "model_name")
            return Diode(
                name=name, node_pos=node_pos, node_neg=node_neg, model_name=model_name
            )

    def parse_bjt(self) -> Optional[Bjt]:
        """Qname C B E model"""
        with self.context("bjt"):
            name = self.parse_designator("Q")
            if name is None:
                return None
            collector = self.expect(self.parse_node(), "collector")
            base = self.expect(self.parse_node(), "base")
            emitter = self.expect(self.parse_node(), "emitter")
            model_name = self.expect(self.parse_ident(), "model_name")
            return Bjt(
                name=name,
                collector=collector,
                base=base,
                emitter=emitter,
                model_name=model_name,
            )

    def parse_mosfet(self) -> Optional[Mosfet]:
        """Mname D G S B model L=val W=val [key=val ...]"""
        with self.context("mosfet"):
            name = self.parse_designator("M")
            if name is None:
                return None
            drain = self.expect(self.parse_node(), "drain")
            gate = self.expect(self.parse_node(), "gate")
            source = self.expect(self.parse_node(), "source")
            bulk = self.expect(self.parse_node(), "bulk")
            model_name = self.expect(self.parse_ident(), "model_name")

            length = width = None
            parameters = dict()
            for key, value in self.parse_list(self.parse_param_pair):
                if key.lower() == "l":
                    length = value
                elif key.lower() == "w":
                    width = value
                else:
                    parameters[key] = value
            if length is None or width is None:
                self.fail("no w/l given")

            return Mosfet(
                name=name,
                drain=drain,
                gate=gate,
                source=source,
                bulk=bulk,
                model_name=model_name,
                length=length,
                width=width,
                parameters=parameters,
            )

    # Sources

    def parse_source(self) -> Optional[Source]:
        """{V|I}name N+ N- value"""
        with self.context("source"):
            start = self.pos
            name = self.parse_ident()
            if name is None or len(name) < 2 or name[0].upper() not in ("V", "I"):
                return self.reset(start)
            kind = SourceKind(name[0].upper())
            node_pos = self.expect(self.parse_node(), "node_pos")
            node_neg = self.expect(self.parse_node(), "node_neg")
            if kind == SourceKind.VOLTAGE:
                value = self.expect(self.parse_voltage_value(), "voltage_source_value")
            else:
                value = self.expect(self.parse_current_value(), "current_source_value")
            return Source(
                name=name[1:],
                kind=kind,
                node_pos=node_pos,
                node_neg=node_neg,
                value=value,
            )

    def parse_voltage_value(self) -> Optional[SourceValue]:
        return self.parse_first(
            lambda: self._parse_dc(self.parse_voltage, DcVoltage),
            lambda: self._parse_ac(self.parse_voltage, AcVoltage),
            self.parse_sine,
            self.parse_pwl,
            self.parse_pulse,
        )

    def parse_current_value(self) -> Optional[SourceValue]:
        return self.parse_first(
            lambda: self._parse_dc(self.parse_current, DcCurrent),
            lambda: self._parse_ac(self.parse_current, AcCurrent),
            self.parse_sine,
            self.parse_pwl,
            self.parse_pulse,
        )

    def _parse_dc(self, parse_value: Callable, cls: Type) -> Optional[SourceValue]:
        """[DC | DC=] value"""
        with self.context("dc"):
            committed = self.match_any_tag("DC=", "DC") is not None
            value = parse_value()
            if committed:
                value = self.expect(value, "dc_value")
            if value is None:
                return None
            return cls(value=value)

    def _parse_ac(self, parse_value: Callable, cls: Type) -> Optional[SourceValue]:
        """[AC | AC=] magnitude phase"""
        with self.context("ac"):
            start = self.pos
            if self.match_any_tag("AC=", "AC") is not None:
                magnitude = self.expect(parse_value(), "ac_magnitude")
                phase = self.expect(self.parse_angle(), "ac_phase")
            else:
                magnitude = parse_value()
                phase = self.parse_angle() if magnitude is not None else None
                if phase is None:
                    return self.reset(start)
            return cls(magnitude=magnitude, phase=phase)

    def parse_sine(self) -> Optional[SineVoltage]:
        """SIN(vo va freq [td] [damping] [phase])"""
        with self.context("SIN"):
            if not self.match_tag("SIN"):
                return None
            self.expect_tag("(")
            offset = self.expect(self.parse_voltage(), "vo")
            amplitude = self.expect(self.parse_voltage(), "va")
            frequency = self.expect(self.parse_frequency(), "freq")
            delay = self.parse_time()
            damping = self.parse_frequency()
            phase = self.parse_number()
            self.expect_tag(")")

            optionals = dict(delay=delay, damping=damping, phase=phase)
            optionals = {k: v for k, v in optionals.items() if v is not None}
            return SineVoltage(
                offset=offset, amplitude=amplitude, frequency=frequency, **optionals
            )

    def parse_pwl(self) -> Optional[PwlVoltage]:
        """PWL(t1 v1 [t2 v2 ...])"""
        with self.context("PWL"):
            if not self.match_tag("PWL"):
                return None
            self.expect_tag("(")
            points = []
            while True:
                t = self.expect(self.parse_time(), "pwl_time")
                v = self.expect(self.parse_voltage(), "pwl_value")
                points.append((t, v))
                if self.match_tag(")"):
                    break
            return PwlVoltage(points=points)

    def parse_pulse(self) -> Optional[PulseVoltage]:
        """PULSE(v0 v1 td tr tf pw period)"""
        with self.context("PULSE"):
            if not self.match_tag("PULSE"):
                return None
            self.expect_tag("(")
            initial = self.expect(self.parse_voltage(), "v0")
            pulsed = self.expect(self.parse_voltage(), "v1")
            delay = self.expect(self.parse_time(), "td")
            rise = self.expect(self.parse_time(), "tr")
            fall = self.expect(self.parse_time(), "tf")
            width = self.expect(self.parse_time(), "tw")
            period = self.expect(self.parse_time(), "to")
            self.expect_tag(")")
            return PulseVoltage(
                initial=initial,
                pulsed=pulsed,
                delay=delay,
                rise=rise,
                fall=fall,
                width=width,
                period=period,
            )

    # Simulation commands

    def parse_sim_command(self) -> Optional[SimCommand]:
        return self.parse_first(
            self.parse_dc_command, self.parse_ac_command, self.parse_tran_command
        )

    def parse_dc_command(self) -> Optional[DcCommand]:
        """.DC src start stop step"""
        with self.context("dc_command"):
            if not self.match_keyword(".DC"):
                return None
            src_name = self.expect(self.parse_ident(), "src_name")
            start = self.expect(self.parse_voltage(), "start_value")
            stop = self.expect(self.parse_voltage(), "stop_value")
            step = self.expect(self.parse_voltage(), "step_value")
            return DcCommand(src_name=src_name, start=start, stop=stop, step=step)

    def parse_ac_command(self) -> Optional[AcCommand]:
        """.AC {LIN|DEC|OCT} points fstart fstop"""
        with self.context("ac_command"):
            if not self.match_keyword(".AC"):
                return None
            sweep = self.expect(self.match_any_keyword("LIN", "DEC", "OCT"), "sweep_type")
            points = self.expect(self.parse_uint(), "points")
            f_start = self.expect(self.parse_frequency(), "f_start")
            f_stop = self.expect(self.parse_frequency(), "f_stop")
            return AcCommand(
                sweep_type=AcSweepType(sweep),
                points=points,
                f_start=f_start,
                f_stop=f_stop,
            )

    def parse_tran_command(self) -> Optional[TranCommand]:
        """.TRAN tstep tstop [tstart [tmax]] [UIC]"""
        with self.context("tran_command"):
            if not self.match_keyword(".TRAN"):
                return None
            t_step = self.expect(self.parse_time(), "t_step")
            t_stop = self.expect(self.parse_time(), "t_stop")
            t_start = self.parse_time()
            t_max = self.parse_time()
            uic = False
            pos = self.pos
            flag = self.parse_ident()
            if flag is not None:
                if flag.upper() != "UIC":
                    self.fail("expected UIC or end of line", pos=pos)
                uic = True
            return TranCommand(
                t_step=t_step, t_stop=t_stop, t_start=t_start, t_max=t_max, uic=uic
            )

    # Measurements

    def parse_measure(self) -> Optional[MeasureCommand]:
        """.MEAS analysis name {TRIG ... TARG ... | stat ... | FIND ... WHEN ...}"""
        with self.context("measure"):
            if self.match_any_keyword(".MEASURE", ".MEAS") is None:
                return None
            analysis = self.expect(
                self.match_any_keyword("TRAN", "AC", "DC"), "analysis_type"
            )
            analysis = AnalysisType(analysis)
            name = self.expect(self.parse_ident(), "measure_name")
            rv = self.parse_first(
                lambda: self.parse_measure_rise(analysis, name),
                lambda: self.parse_measure_stat(analysis, name),
                lambda: self.parse_measure_find(analysis, name),
            )
            return self.expect(rv, "measure_kind")

    def parse_measure_rise(self, analysis: AnalysisType, name: str) -> Optional[MeasureRise]:
        """TRIG condition TARG condition"""
        if not self.match_keyword("TRIG"):
            return None
        with self.context("trig"):
            trig = self.parse_trigger_condition()
        self.expect_keyword("TARG")
        with self.context("targ"):
            targ = self.parse_trigger_condition()
        return MeasureRise(analysis=analysis, name=name, trig=trig, targ=targ)

    def parse_trigger_condition(self) -> TriggerCondition:
        """var VAL=value {RISE|FALL}=count. Only called once committed."""
        variable = self.expect(self.parse_output_variable(), "output_variable")
        self.expect_tag("VAL=")
        value = self.expect(self.parse_measure_value(), "value")
        edge = self.expect(self.match_any_keyword("RISE", "FALL"), "edge")
        self.expect_tag("=")
        count = self.expect(self.parse_uint(), "count")
        return TriggerCondition(
            variable=variable, value=value, edge=EdgeType(edge), count=count
        )

    def parse_measure_stat(
        self, analysis: AnalysisType, name: str
    ) -> Optional[MeasureBasicStat]:
        """{AVG|RMS|MIN|MAX|PP|DERIV|INTEGRATE} var FROM=time TO=time"""
        stat = self.match_any_keyword(*[f.value for f in MeasureFunction])
        if stat is None:
            return None
        variable = self.expect(self.parse_output_variable(), "output_variable")
        self.expect_tag("FROM=")
        from_time = self.expect(self.parse_time(), "from_time")
        self.expect_tag("TO=")
        to_time = self.expect(self.parse_time(), "to_time")
        return MeasureBasicStat(
            analysis=analysis,
            name=name,
            stat=MeasureFunction(stat),
            variable=variable,
            from_time=from_time,
            to_time=to_time,
        )

    def parse_measure_find(
        self, analysis: AnalysisType, name: str
    ) -> Optional[MeasureFindWhen]:
        """FIND var WHEN var=value"""
        if not self.match_keyword("FIND"):
            return None
        variable = self.expect(self.parse_output_variable(), "output_variable")
        self.expect_keyword("WHEN")
        when_variable = self.expect(self.parse_output_variable(), "when_variable")
        self.expect_tag("=")
        when_value = self.expect(self.parse_measure_value(), "when_value")
        return MeasureFindWhen(
            analysis=analysis,
            name=name,
            variable=variable,
            when_variable=when_variable,
            when_value=when_value,
        )

    def parse_measure_value(self) -> Optional[Number]:
        """Number, with any trailing unit letters (e.g. `1V`) discarded"""
        return self.parse_unit_number(suffixes["number"], Number, unit_word=True)

    def parse_output_variable(self) -> Optional[OutputVariable]:
        """V(node1[, node2]) or I(element)"""
        start = self.pos
        kind = self.match_any_tag("V", "I")
        if kind is None or not self.match_tag("("):
            return self.reset(start)
        inner = self.token(pats[Tokens.PAREN_CONTENT])
        if inner is None or not self.match_tag(")"):
            return self.reset(start)
        inner = inner.strip()
        suffix = output_suffix(inner)

        if kind == "V":
            parts = [part.strip() for part in inner.split(",")]
            node2 = parts[1] if len(parts) > 1 else None
            return VoltageVariable(node1=parts[0], node2=node2, suffix=suffix)
        return CurrentVariable(element_name=inner, suffix=suffix)

    # Hierarchy

    def parse_instance(self) -> Optional[Instance]:
        """Xname pin1 pin2 ... subckt"""
        with self.context("instance"):
            start = self.pos
            name = self.parse_ident()
            if name is None or name[0].upper() != "X":
                return self.reset(start)
            nodes = self.parse_list(self.parse_node)
            if not nodes:
                self.fail("missing subckt name")
            return Instance(name=name, pins=nodes[:-1], subckt_name=nodes[-1])

    def parse_subckt(self) -> Optional[Subckt]:
        """.SUBCKT name ports ... (components and instances) ... .ENDS"""
        with self.context("subckt"):
            if not self.match_keyword(".SUBCKT"):
                return None
            name = self.expect(self.parse_ident(), "subckt_name")
            ports = self.parse_list(self.parse_node)
            self.expect_line_end()
            subckt = Subckt(name=name, ports=ports)

            while True:  # Loop over body lines
                self.eat_blanks()
                if self.at_end:
                    self.fail("missing .ENDS")
                if self.txt[self.pos : self.pos + 5].lower() == ".ends":
                    nl = self.txt.find("\n", self.pos)
                    self.pos = len(self.txt) if nl < 0 else nl + 1
                    return subckt

                line_start = self.pos
                entry = self.parse_component()
                if entry is not None:
                    subckt.components.append(entry)
                else:
                    entry = self.expect(self.parse_instance(), "unknown line in subckt")
                    subckt.instances.append(entry)
                entry.source_info = self.source_info(line_start)
                self.expect_line_end()

    def parse_model(self) -> Optional[Model]:
        """.MODEL name kind (key=val ...)"""
        with self.context("model"):
            if not self.match_keyword(".MODEL"):
                return None
            name = self.expect(self.parse_ident(), "model_name")
            pos = self.peek_pos()
            kind = self.expect(self.parse_ident(), "model_kind").upper()
            if kind not in ModelKind.__members__:
                self.fail("unknown model kind", pos=pos)
            self.expect_tag("(")
            parameters = dict(self.parse_list(self.parse_param_pair))
            self.expect_tag(")")
            return Model(name=name, kind=ModelKind[kind], parameters=parameters)

    # Control statements

    def parse_control(self) -> Optional[Statement]:
        """.TITLE, .INCLUDE, and .END"""
        if self.match_keyword(".TITLE"):
            text = self.token(pats[Tokens.REST_OF_LINE])
            return Title(text=text.strip())
        if self.match_any_keyword(".INCLUDE", ".INC") is not None:
            with self.context("include"):
                path = self.expect(self.token(pats[Tokens.PATH]), "include_path")
            return Include(path=path.strip("\"'"))
        if self.match_keyword(".END"):
            return End()
        return None


def output_suffix(txt: str) -> Optional[OutputSuffix]:
    """Sniff the AC qualifier from the trailing letters of an output-variable's inner text.
    Checked in a fixed order: `M`, `DB`, `P`, `R`, `I`."""
    for suffix in (
        OutputSuffix.MAGNITUDE,
        OutputSuffix.DECIBEL,
        OutputSuffix.PHASE,
        OutputSuffix.REAL,
        OutputSuffix.IMAG,
    ):
        if txt.endswith(suffix.value):
            return suffix
    return None
