"""
# LEF Dialect Parsing

Technology-library subset of the Library Exchange Format:
the library header, `UNITS`, and `LAYER` blocks of type CUT, IMPLANT, ROUTING, MASTERSLICE and OVERLAP.

LEF is whitespace-insensitive and semicolon-terminated. Keywords are case-sensitive.
Each layer body is a fixed sequence of optional and repeated clauses,
closed by `END <name>` where `<name>` must equal the layer's opening name.
"""

# Std-Lib Imports
from warnings import warn
from typing import Optional, Tuple

# Local Imports
from ..data import *
from ..lex import Tokens, pats
from .base import DialectParser


# Accepted `BUSBITCHARS` and `DIVIDERCHAR` values, less their quotes
BUSBITCHARS = ("[]", "{}", "<>")
DIVIDERCHARS = ("/", "\\", "%", "$")

# `LEF58_TYPE` property values
LEF58_TYPES = {f"TYPE {tp.value}": tp for tp in Lef58Type}

# Optional `UNITS` sub-clauses: keyword, unit-keyword, and `LefUnits` field
UNIT_CLAUSES = (
    ("TIME", "NANOSECONDS", "time"),
    ("CAPACITANCE", "PICOFARADS", "capacitance"),
    ("RESISTANCE", "OHMS", "resistance"),
    ("POWER", "MILLIWATTS", "power"),
    ("CURRENT", "MILLIAMPS", "current"),
    ("VOLTAGE", "VOLTS", "voltage"),
    ("FREQUENCY", "MEGAHERTZ", "frequency"),
)


class LefDialectParser(DialectParser):
    """LEF-Format Dialect Parser"""

    enum = Dialects.LEF
    ident_pattern = pats[Tokens.LEF_IDENT]
    float_pattern = pats[Tokens.LEF_FLOAT]
    nocase = False

    def eat_idle(self) -> None:
        """Skip all whitespace, including newlines, and `#` comments."""
        txt, pos, end = self.txt, self.pos, len(self.txt)
        while pos < end:
            c = txt[pos]
            if c.isspace():
                pos += 1
            elif c == "#":
                nl = txt.find("\n", pos)
                pos = end if nl < 0 else nl + 1
            else:
                break
        self.pos = pos

    def parse_tech_library(self) -> LefTechLibrary:
        """Library header, then zero or more layers.
        Stops at the first text which does not start a `LAYER`, leaving it for the caller."""
        with self.context("tech_library"):
            version = self.parse_version()
            busbitchars = self.parse_busbitchars()
            dividerchar = self.parse_dividerchar()
            units = self.parse_units()
            manufacturing_grid = self.parse_manufacturing_grid()
            use_min_spacing = self.parse_use_min_spacing()

            layers = []
            while True:
                start = self.peek_pos()
                layer = self.parse_layer()
                if layer is None:
                    break
                layer.source_info = self.source_info(start)
                layers.append(layer)

            return LefTechLibrary(
                version=version,
                busbitchars=busbitchars,
                dividerchar=dividerchar,
                units=units,
                manufacturing_grid=manufacturing_grid,
                use_min_spacing=use_min_spacing,
                layers=layers,
            )

    # Header statements

    def parse_version(self) -> float:
        """VERSION number ;"""
        self.expect_keyword("VERSION")
        version = self.expect(self.parse_float(), "version")
        self.expect_tag(";")
        return version

    def parse_busbitchars(self) -> str:
        """BUSBITCHARS "delimiterPair" ;"""
        self.expect_keyword("BUSBITCHARS")
        value = self.parse_quoted()
        if value not in BUSBITCHARS:
            self.fail("expected one of " + " ".join(f'"{v}"' for v in BUSBITCHARS))
        self.expect_tag(";")
        return value

    def parse_dividerchar(self) -> str:
        """DIVIDERCHAR "character" ;"""
        self.expect_keyword("DIVIDERCHAR")
        value = self.parse_quoted()
        if value not in DIVIDERCHARS:
            self.fail("expected one of " + " ".join(f'"{v}"' for v in DIVIDERCHARS))
        self.expect_tag(";")
        return value

    def parse_units(self) -> LefUnits:
        """UNITS [clause ;] ... END UNITS"""
        with self.context("units"):
            self.expect_keyword("UNITS")
            units = LefUnits()
            while True:
                if self.match_keyword("DATABASE"):
                    self.expect_keyword("MICRONS")
                    units.database_microns = self.expect(self.parse_uint(), "microns")
                    self.expect_tag(";")
                    continue
                for kw, unit, attr in UNIT_CLAUSES:
                    if self.match_keyword(kw):
                        self.expect_keyword(unit)
                        setattr(units, attr, self.expect(self.parse_float(), attr))
                        self.expect_tag(";")
                        break
                else:  # No clause matched
                    break
            self.expect_keyword("END")
            self.expect_keyword("UNITS")
            return units

    def parse_manufacturing_grid(self) -> Optional[float]:
        """[MANUFACTURINGGRID value ;]"""
        if not self.match_keyword("MANUFACTURINGGRID"):
            return None
        grid = self.expect(self.parse_float(), "manufacturing_grid")
        self.expect_tag(";")
        return grid

    def parse_use_min_spacing(self) -> Optional[LefUseMinSpacing]:
        """[USEMINSPACING {ON|OFF} ;]"""
        if not self.match_keyword("USEMINSPACING"):
            return None
        value = self.match_any_keyword("ON", "OFF")
        if value is None:
            self.fail("expected USEMINSPACING ON or OFF")
        if value == "OFF":
            warn("USEMINSPACING OFF is read as ON")
        self.expect_tag(";")
        return LefUseMinSpacing.ON

    # Layers

    def parse_layer(self) -> Optional[LefLayer]:
        """LAYER name TYPE type ; body END name"""
        if not self.match_keyword("LAYER"):
            return None
        with self.context("layer"):
            name = self.expect(self.parse_ident(), "layer_name")
            self.expect_keyword("TYPE")
            pos = self.peek_pos()
            tp = self.expect(self.parse_ident(), "layer_type")
            self.expect_tag(";")

            if tp == "CUT":
                layer = self.parse_cut_layer(name)
            elif tp == "IMPLANT":
                layer = self.parse_implant_layer(name)
            elif tp == "ROUTING":
                layer = self.parse_routing_layer(name)
            elif tp in ("MASTERSLICE", "OVERLAP"):
                layer = self.parse_special_layer(name, LefSpecialLayerType(tp))
            else:
                self.fail("expected layer type", pos=pos)

            self.parse_end(name)
            return layer

    def parse_end(self, name: str) -> None:
        """END name, where `name` must match the opening name"""
        self.expect_keyword("END")
        pos = self.peek_pos()
        end_name = self.expect(self.parse_ident(), "end_name")
        if end_name != name:
            self.fail(f"mismatched END name: expected {name}", pos=pos)

    def parse_mask(self) -> Optional[int]:
        """[MASK maskNum ;]"""
        if not self.match_keyword("MASK"):
            return None
        mask = self.expect(self.parse_uint(), "mask")
        self.expect_tag(";")
        return mask

    def parse_float_clause(self, kw: str) -> Optional[float]:
        """[kw value ;]"""
        if not self.match_keyword(kw):
            return None
        value = self.expect(self.parse_float(), kw.lower())
        self.expect_tag(";")
        return value

    def parse_cut_layer(self, name: str) -> LefCutLayer:
        """
        [MASK maskNum ;]
        [SPACING ... ;] ...
        [WIDTH minWidth ;]
        [ENCLOSURE ... ;] ...
        """
        with self.context("cut_layer"):
            mask = self.parse_mask()
            spacing = self.parse_list(self.parse_cut_spacing)
            width = self.parse_float_clause("WIDTH")
            enclosures = self.parse_list(self.parse_enclosure)
            return LefCutLayer(
                name=name,
                mask=mask,
                width=width,
                spacing=spacing,
                enclosures=enclosures,
            )

    def parse_cut_spacing(self) -> Optional[LefCutSpacing]:
        """
        SPACING cutSpacing
            [CENTERTOCENTER]
            [SAMENET]
            [ LAYER secondLayerName [STACK]
            | ADJACENTCUTS {2 | 3 | 4} WITHIN cutWithin [EXCEPTSAMEPGNET]
            | PARALLELOVERLAP
            | AREA cutArea
            ]
        ;
        """
        if not self.match_keyword("SPACING"):
            return None
        with self.context("cut_spacing"):
            spacing = self.expect(self.parse_float(), "cut_spacing")
            center_to_center = self.match_keyword("CENTERTOCENTER")
            same_net = self.match_keyword("SAMENET")

            constraint = None
            if self.match_keyword("LAYER"):
                layer = self.expect(self.parse_ident(), "second_layer_name")
                stack = self.match_keyword("STACK")
                constraint = LefCutSpacingLayer(name=layer, stack=stack)
            elif self.match_keyword("ADJACENTCUTS"):
                count = self.expect(self.parse_uint(), "adjacent_cuts")
                self.expect_keyword("WITHIN")
                within = self.expect(self.parse_float(), "cut_within")
                except_pg = self.match_keyword("EXCEPTSAMEPGNET")
                constraint = LefCutSpacingAdjacentCuts(
                    count=count, within=within, except_same_pg_net=except_pg
                )
            elif self.match_keyword("PARALLELOVERLAP"):
                constraint = LefCutSpacingParallelOverlap()
            elif self.match_keyword("AREA"):
                area = self.expect(self.parse_float(), "cut_area")
                constraint = LefCutSpacingArea(value=area)

            self.expect_tag(";")
            return LefCutSpacing(
                spacing=spacing,
                center_to_center=center_to_center,
                same_net=same_net,
                constraint=constraint,
            )

    def parse_enclosure(self) -> Optional[LefEnclosure]:
        """
        ENCLOSURE [ABOVE | BELOW] overhang1 overhang2
            [ WIDTH minWidth [EXCEPTEXTRACUT cutWithin]
            | LENGTH minLength]
        ;
        """
        if not self.match_keyword("ENCLOSURE"):
            return None
        with self.context("enclosure"):
            above = self.match_any_keyword("ABOVE", "BELOW") != "BELOW"
            overhang1 = self.expect(self.parse_float(), "overhang1")
            overhang2 = self.expect(self.parse_float(), "overhang2")

            constraint = None
            if self.match_keyword("WIDTH"):
                min_width = self.expect(self.parse_float(), "min_width")
                except_extra_cut = None
                if self.match_keyword("EXCEPTEXTRACUT"):
                    except_extra_cut = self.expect(self.parse_float(), "cut_within")
                constraint = LefEnclosureWidth(
                    min_width=min_width, except_extra_cut=except_extra_cut
                )
            elif self.match_keyword("LENGTH"):
                min_length = self.expect(self.parse_float(), "min_length")
                constraint = LefEnclosureLength(min_length=min_length)

            self.expect_tag(";")
            return LefEnclosure(
                overhang1=overhang1,
                overhang2=overhang2,
                above=above,
                constraint=constraint,
            )

    def parse_implant_layer(self, name: str) -> LefImplantLayer:
        """
        [MASK maskNum ;]
        [WIDTH minWidth ;]
        [SPACING minSpacing [LAYER layerName2] ;] ...
        [SPACING propName propVal ;] ...
        """
        with self.context("implant_layer"):
            mask = self.parse_mask()
            width = self.parse_float_clause("WIDTH")
            spacings = self.parse_list(self.parse_implant_spacing)
            properties = self.parse_list(self.parse_implant_property)
            return LefImplantLayer(
                name=name,
                mask=mask,
                width=width,
                spacings=spacings,
                properties=properties,
            )

    def parse_implant_spacing(self) -> Optional[LefImplantSpacing]:
        """SPACING minSpacing [LAYER layerName2] ;"""
        start = self.pos
        if not self.match_keyword("SPACING"):
            return None
        spacing = self.parse_float()
        if spacing is None:  # Perhaps a property; leave it for `parse_implant_property`
            return self.reset(start)
        with self.context("implant_spacing"):
            layer = None
            if self.match_keyword("LAYER"):
                layer = self.expect(self.parse_ident(), "layer_name")
            self.expect_tag(";")
            return LefImplantSpacing(spacing=spacing, layer=layer)

    def parse_implant_property(self) -> Optional[LefProperty]:
        """SPACING propName propVal ;"""
        if not self.match_keyword("SPACING"):
            return None
        with self.context("implant_property"):
            key = self.expect(self.parse_ident(), "property_name")
            value = self.expect(self.parse_ident(), "property_value")
            self.expect_tag(";")
            return LefProperty(key=key, value=value)

    def parse_routing_layer(self, name: str) -> LefRoutingLayer:
        """
        [MASK maskNum ;]
        DIRECTION {HORIZONTAL | VERTICAL | DIAG45 | DIAG135} ;
        PITCH {distance | xDistance yDistance} ;
        WIDTH defaultWidth ;
        [AREA minArea ;]
        [SPACING minSpacing [constraint] ;] ...
        [MAXWIDTH width ;]
        [MINWIDTH width ;]
        """
        with self.context("routing_layer"):
            mask = self.parse_mask()

            self.expect_keyword("DIRECTION")
            directions = [d.value for d in LefDirection]
            direction = self.expect(self.match_any_keyword(*directions), "direction")
            self.expect_tag(";")

            self.expect_keyword("PITCH")
            x = self.expect(self.parse_float(), "pitch")
            y = self.parse_float()
            self.expect_tag(";")

            self.expect_keyword("WIDTH")
            width = self.expect(self.parse_float(), "width")
            self.expect_tag(";")

            area = self.parse_float_clause("AREA")
            spacing_rules = self.parse_list(self.parse_routing_spacing)
            max_width = self.parse_float_clause("MAXWIDTH")
            min_width = self.parse_float_clause("MINWIDTH")

            return LefRoutingLayer(
                name=name,
                mask=mask,
                direction=LefDirection(direction),
                pitch=LefPitch(x=x, y=y),
                width=width,
                area=area,
                spacing_rules=spacing_rules,
                max_width=max_width,
                min_width=min_width,
            )

    def parse_routing_spacing(self) -> Optional[LefRoutingSpacing]:
        """
        SPACING minSpacing
            [ RANGE minWidth maxWidth
            | LENGTHTHRESHOLD maxLength
            | SAMENET [PGONLY]
            | ENDOFLINE eolWidth WITHIN eolWithin
            | NOTCHLENGTH minNotchLength
            ]
        ;
        """
        if not self.match_keyword("SPACING"):
            return None
        with self.context("routing_spacing"):
            spacing = self.expect(self.parse_float(), "min_spacing")

            constraint = None
            if self.match_keyword("RANGE"):
                lo, hi = self.parse_float_pair("range")
                constraint = LefSpacingRange(min=lo, max=hi)
            elif self.match_keyword("LENGTHTHRESHOLD"):
                max_length = self.expect(self.parse_float(), "max_length")
                constraint = LefSpacingLengthThreshold(max_length=max_length)
            elif self.match_keyword("SAMENET"):
                constraint = LefSpacingSameNet(pg_only=self.match_keyword("PGONLY"))
            elif self.match_keyword("ENDOFLINE"):
                eol_width = self.expect(self.parse_float(), "eol_width")
                self.expect_keyword("WITHIN")
                eol_within = self.expect(self.parse_float(), "eol_within")
                constraint = LefSpacingEndOfLine(width=eol_width, within=eol_within)
            elif self.match_keyword("NOTCHLENGTH"):
                length = self.expect(self.parse_float(), "notch_length")
                constraint = LefSpacingNotchLength(length=length)

            self.expect_tag(";")
            return LefRoutingSpacing(spacing=spacing, constraint=constraint)

    def parse_float_pair(self, label: str) -> Tuple[float, float]:
        first = self.expect(self.parse_float(), label)
        second = self.expect(self.parse_float(), label)
        return first, second

    def parse_special_layer(
        self, name: str, layer_type: LefSpecialLayerType
    ) -> LefSpecialLayer:
        """
        [MASK maskNum ;]
        [PROPERTY propName "propVal" ;] ...

        Two property names are parsed into their own fields:
        `LEF58_TYPE "TYPE <type>"` and `LEF58_TRIMMEDMETAL "TRIMMEDMETAL <layer> [MASK num]"`.
        """
        with self.context("special_layer"):
            layer = LefSpecialLayer(
                name=name, layer_type=layer_type, mask=self.parse_mask()
            )
            while True:
                pos = self.peek_pos()
                prop = self.parse_property()
                if prop is None:
                    break
                if prop.key == "LEF58_TYPE":
                    tp = LEF58_TYPES.get(_normalize_property(prop.value).upper())
                    if tp is not None:
                        layer.lef58_type = tp
                elif prop.key == "LEF58_TRIMMEDMETAL":
                    layer.lef58_trimmed_metal = self.parse_trimmed_metal(prop.value, pos)
                else:
                    layer.properties.append(prop)
            return layer

    def parse_property(self) -> Optional[LefProperty]:
        """PROPERTY propName "propVal" ;"""
        if not self.match_keyword("PROPERTY"):
            return None
        with self.context("property"):
            key = self.expect(self.parse_ident(), "property_name")
            value = self.expect(self.parse_quoted(), "property_value")
            self.expect_tag(";")
            return LefProperty(key=key, value=value)

    def parse_trimmed_metal(self, value: str, pos: int) -> Lef58TrimmedMetal:
        """Parse the `LEF58_TRIMMEDMETAL` property value `TRIMMEDMETAL metalLayer [MASK maskNum]`.
        Failures are reported at `pos`, the start of the property in our own input."""
        sub = LefDialectParser(_normalize_property(value))
        try:
            sub.expect_keyword("TRIMMEDMETAL")
            metal_layer = sub.expect(sub.parse_ident(), "metal_layer")
            mask = None
            if sub.match_keyword("MASK"):
                mask = sub.expect(sub.parse_uint(), "mask")
            sub.eat_idle()
            if not sub.at_end:
                sub.fail("unexpected trailing content")
        except NetlistParseError as e:
            self.fail(f"invalid LEF58_TRIMMEDMETAL value: {e.label}", pos=pos)
        return Lef58TrimmedMetal(metal_layer=metal_layer, mask=mask)


def _normalize_property(value: str) -> str:
    """Strip a LEF58 property payload of its trailing `;` and surplus whitespace."""
    return " ".join(value.strip().rstrip(";").split())
