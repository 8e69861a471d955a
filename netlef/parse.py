"""
# Netlist & Tech-Library Parsing

Document-level drivers and primary entry points.
The dialect parsers produce values or raise `NetlistParseError`s located by character offset.
The drivers here sequence their statements into documents,
and convert those offsets into line-numbered `NetlistReadError`s.
"""

import os, codecs
from pathlib import Path
from warnings import warn
from typing import List, Optional, Tuple, Union
from pydantic.dataclasses import dataclass

# Local Imports
from .dialects import DialectParser, SpiceDialectParser, LefDialectParser
from .data import *


@dataclass
class ParseOptions:
    """Parse Options"""

    dialect: Optional[Dialects] = None  # Input dialect. Inferred if not provided.


def parse_files(
    src: os.PathLike, *, options: Optional[ParseOptions] = None
) -> Union[SpiceDocument, LefTechLibrary]:
    """
    Primary file-parsing entry point.
    Parse the SPICE netlist or LEF technology library at path `src`.
    Optional argument `options` sets all behavior laid out by the `ParseOptions` class.
    """

    if options is None:  # If not provided, create the default `ParseOptions`.
        options = ParseOptions()

    # If a dialect has not been provided, infer it from the file name
    dialect = options.dialect
    if dialect is None:
        dialect = default_dialect(src)

    p = Path(src).absolute()
    if not p.exists() or not p.is_file():
        raise FileNotFoundError(p)

    with codecs.open(p, "r", encoding="utf-8", errors="replace") as f:
        txt = f.read()

    rv = parse_str(txt, options=ParseOptions(dialect=dialect))

    if isinstance(rv, SpiceDocument):
        for inc in rv.includes:
            warn(f"Included file {inc.path} is not parsed")
    return rv


def parse_str(
    src: str, *, options: Optional[ParseOptions] = None
) -> Union[SpiceDocument, LefTechLibrary]:
    """Parse netlist or tech-library content from a string. Defaults to SPICE."""

    if options is None:
        options = ParseOptions()
    if options.dialect is None or options.dialect == Dialects.SPICE:
        return parse_spice(src)
    if options.dialect == Dialects.LEF:
        return parse_lef(src)
    raise ValueError(f"Unsupported dialect {options.dialect}")


def parse_spice(txt: str) -> SpiceDocument:
    """Parse SPICE netlist text into a `SpiceDocument`"""
    return SpiceDocParser(txt).parse()


def parse_lef(txt: str) -> LefTechLibrary:
    """Parse LEF text into a `LefTechLibrary`"""
    return LefDocParser(txt).parse()


def default_dialect(path: os.PathLike) -> Dialects:
    """
    Infer a default dialect from a file name, particularly its suffix.
    Files with suffix `lef` are parsed as LEF; all others as SPICE.
    """

    p = Path(path).absolute()
    if not p.exists() or not p.is_file():
        raise FileNotFoundError(p)
    if p.suffix.lower() == ".lef":
        return Dialects.LEF
    return Dialects.SPICE


class DocParser:
    """Single-Document Parser Base Class.
    Owns a `DialectParser`, and converts its errors into line-numbered `NetlistReadError`s."""

    dialect_cls = DialectParser

    def __init__(self, txt: str):
        self.txt = txt
        self.dialect_parser = self.dialect_cls(txt)

    def unknown(self, pos: int) -> UnknownStatementError:
        """Unknown-statement error for the line starting at `pos`"""
        line = self.txt[pos:].split("\n", 1)[0].strip()
        return UnknownStatementError(self.dialect_parser.line_num(pos), line)

    def read_error(self, e: NetlistParseError) -> NetlistReadError:
        """Convert a `NetlistParseError` into a document-level `NetlistReadError`"""
        line = self.dialect_parser.line_num(e.pos)
        trace = render_trace(self.txt, e.errors)
        return NetlistReadError(line, f"Error at line {line}:\n{trace}")


class SpiceDocParser(DocParser):
    """SPICE Document Parser
    Parses one statement per logical line, sorting each into its `SpiceDocument` list."""

    dialect_cls = SpiceDialectParser

    def parse(self) -> SpiceDocument:
        p = self.dialect_parser
        doc = SpiceDocument()

        while True:  # Main loop over statements
            p.eat_blanks()
            if p.at_end:
                break
            start = p.pos

            try:  # Catch errors in primary parsing routines
                stmt = p.parse_statement()
                if stmt is not None:
                    p.expect_line_end()
            except NetlistParseError as e:
                e.txt = self.txt
                raise self.read_error(e) from e

            if stmt is None:
                raise self.unknown(start)
            if isinstance(stmt, End):
                break

            stmt.source_info = p.source_info(start)
            self.add(doc, stmt)

        return doc

    def add(self, doc: SpiceDocument, stmt: Statement) -> None:
        """Sort `stmt` into its list on `doc`"""
        if isinstance(stmt, Source):
            doc.sources.append(stmt)
        elif isinstance(stmt, (DcCommand, AcCommand, TranCommand)):
            doc.simulation.append(stmt)
        elif isinstance(stmt, (MeasureRise, MeasureBasicStat, MeasureFindWhen)):
            doc.measures.append(stmt)
        elif isinstance(stmt, Instance):
            doc.instances.append(stmt)
        elif isinstance(stmt, Subckt):
            doc.subckts.append(stmt)
        elif isinstance(stmt, Model):
            doc.models.append(stmt)
        elif isinstance(stmt, Include):
            doc.includes.append(stmt)
        elif isinstance(stmt, Title):
            doc.title = stmt.text
        else:  # All remaining statements are components
            doc.components.append(stmt)


class LefDocParser(DocParser):
    """LEF Document Parser
    Header and layers, then an optional `END LIBRARY`."""

    dialect_cls = LefDialectParser

    def parse(self) -> LefTechLibrary:
        p = self.dialect_parser
        try:
            lib = p.parse_tech_library()
            if p.match_keyword("END"):
                p.expect_keyword("LIBRARY")
        except NetlistParseError as e:
            e.txt = self.txt
            raise self.read_error(e) from e

        start = p.peek_pos()
        if start < len(self.txt):
            raise self.unknown(start)
        return lib


def render_trace(txt: str, errors: List[Tuple[int, str]]) -> str:
    """Render a `NetlistParseError` context stack, innermost first.
    Each entry shows its line, label, the source line, and a caret under the offending column."""
    lines = []
    for i, (pos, label) in enumerate(errors):
        line_num, col, line = locate(txt, pos)
        lines.append(f"{i}: at line {line_num}, in {label}:")
        lines.append(line)
        lines.append(" " * col + "^")
    return "\n".join(lines)


def locate(txt: str, pos: int) -> Tuple[int, int, str]:
    """(1-based line number, 0-based column, line text) of offset `pos` in `txt`"""
    pos = min(pos, len(txt))
    line_start = txt.rfind("\n", 0, pos) + 1
    line_end = txt.find("\n", pos)
    if line_end < 0:
        line_end = len(txt)
    line_num = txt.count("\n", 0, pos) + 1
    return line_num, pos - line_start, txt[line_start:line_end]
