"""
# Dialect-Parser Base Class

Scannerless, backtracking recursive-descent parsing over an in-memory string.

Every `parse_*` method follows the same contract:

* On success it returns its value, with the cursor `pos` advanced past what it consumed.
* On a recoverable no-match it returns `None`, with `pos` restored to where it began.
  Enclosing alternations then try their next alternative.
* Once a production has *committed*, e.g. after recognizing its keyword,
  any later failure is promoted to a `NetlistParseError` via `expect`.
  These propagate past all enclosing alternations, collecting `context` labels on the way.
"""

# Std-Lib Imports
from bisect import bisect_left
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Pattern, Type, TypeVar

# Local Imports
from ..data import *
from ..lex import U32_MAX, Tokens, SuffixTable, pats, keyword, tag, suffixes

T = TypeVar("T")


class DialectParser:
    """Dialect-Parsing Base-Class"""

    enum: Optional[Dialects] = None
    # Dialect-specific token patterns and keyword case-sensitivity, set by sub-classes
    ident_pattern: Pattern = pats[Tokens.SPICE_IDENT]
    float_pattern: Pattern = pats[Tokens.SPICE_FLOAT]
    nocase: bool = True

    def __init__(self, txt: str, pos: int = 0):
        self.txt = txt
        self.pos = pos
        self._newlines: Optional[List[int]] = None

    @classmethod
    def from_str(cls, txt: str) -> "DialectParser":
        """Create from a multi-line input string"""
        return cls(txt)

    @classmethod
    def from_enum(cls, dialect: Optional[Dialects] = None) -> Type["DialectParser"]:
        """Return a Dialect sub-class based on the `Dialects` enum.
        Returns the default (SPICE) class if argument `dialect` is not provided or `None`."""
        from .spice import SpiceDialectParser
        from .lef import LefDialectParser

        if dialect is None or dialect == Dialects.SPICE:
            return SpiceDialectParser
        if dialect == Dialects.LEF:
            return LefDialectParser
        raise ValueError(f"Unsupported dialect {dialect}")

    @property
    def rest(self) -> str:
        """Remaining, unparsed input"""
        return self.txt[self.pos :]

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.txt)

    def line_num(self, pos: Optional[int] = None) -> int:
        """1-based line number of offset `pos`, by default the cursor"""
        if pos is None:
            pos = self.pos
        if self._newlines is None:
            self._newlines = [i for i, c in enumerate(self.txt) if c == "\n"]
        return bisect_left(self._newlines, pos) + 1

    def source_info(self, pos: int) -> SourceInfo:
        return SourceInfo(line=self.line_num(pos), dialect=self.enum)

    def eat_idle(self) -> None:
        """Skip insignificant whitespace (and comments) at the cursor. Dialect-specific."""
        raise NotImplementedError

    def peek_pos(self) -> int:
        """Offset of the next significant character, without moving the cursor"""
        start = self.pos
        self.eat_idle()
        rv = self.pos
        self.pos = start
        return rv

    def reset(self, pos: int) -> None:
        """Restore the cursor to `pos`. Returns `None`, for use as a no-match result."""
        self.pos = pos
        return None

    # Recoverable matching

    def token(self, pattern: Pattern) -> Optional[str]:
        """Match `pattern` at the next significant character.
        Skips idle text on both sides on success; consumes nothing on failure."""
        start = self.pos
        self.eat_idle()
        m = pattern.match(self.txt, self.pos)
        if m is None:
            return self.reset(start)
        self.pos = m.end()
        self.eat_idle()
        return m.group()

    def match_keyword(self, kw: str) -> bool:
        """Boolean indication of whether the next token is keyword `kw`.
        Advances past it if so."""
        return self.token(keyword(kw, nocase=self.nocase)) is not None

    def match_any_keyword(self, *kws: str) -> Optional[str]:
        """Match the first of `kws` present. Returns it in the form given, or `None`."""
        for kw in kws:
            if self.match_keyword(kw):
                return kw
        return None

    def match_tag(self, txt: str) -> bool:
        """Match literal text `txt` as a plain prefix, e.g. punctuation or `DC=`."""
        return self.token(tag(txt, nocase=self.nocase)) is not None

    def match_any_tag(self, *txts: str) -> Optional[str]:
        for txt in txts:
            if self.match_tag(txt):
                return txt
        return None

    # Promotion to fatal errors

    def fail(self, label: str, pos: Optional[int] = None) -> None:
        """Raise a committed failure at `pos`, by default the next significant character."""
        if pos is None:
            pos = self.peek_pos()
        NetlistParseError.throw(pos, label)

    def expect(self, value: Optional[T], label: str) -> T:
        """Promote a recoverable no-match (`None`) to a fatal `NetlistParseError`."""
        if value is None:
            self.fail(label)
        return value

    def expect_keyword(self, kw: str, label: Optional[str] = None) -> None:
        if not self.match_keyword(kw):
            self.fail(label or f"expected {kw}")

    def expect_tag(self, txt: str, label: Optional[str] = None) -> None:
        if not self.match_tag(txt):
            self.fail(label or f"expected '{txt}'")

    @contextmanager
    def context(self, label: str) -> Iterator[None]:
        """Add `label` to any `NetlistParseError` raised within, located at the cursor on entry."""
        start = self.pos
        try:
            yield
        except NetlistParseError as e:
            e.push(start, label)
            raise

    # Lists and alternation

    def parse_list(self, parse_item: Callable[[], Optional[T]]) -> List[T]:
        """Zero or more items parsable by `parse_item`, stopping at its first no-match."""
        rv = []
        while True:
            start = self.pos
            item = parse_item()
            if item is None:
                break
            rv.append(item)
            if self.pos == start:  # Matched without consuming anything
                break
        return rv

    def parse_first(self, *funcs: Callable[[], Optional[Any]]) -> Optional[Any]:
        """Ordered alternation. Returns the first non-`None` result."""
        for func in funcs:
            rv = func()
            if rv is not None:
                return rv
        return None

    def parse(self, f: Callable[[], Optional[T]]) -> T:
        """Perform parsing. Succeeds if the entire input is parsable by function `f`."""
        rv = self.expect(f(), "no match")
        if self.rest.strip():
            self.fail("unexpected trailing content")
        return rv

    # Primitives

    def parse_ident(self) -> Optional[str]:
        return self.token(self.ident_pattern)

    def parse_uint(self) -> Optional[int]:
        """Unsigned 32-bit integer"""
        start = self.pos
        txt = self.token(pats[Tokens.UINT])
        if txt is None:
            return None
        val = int(txt)
        if val > U32_MAX:
            return self.reset(start)
        return val

    def parse_float(self) -> Optional[float]:
        txt = self.token(self.float_pattern)
        if txt is None:
            return None
        return float(txt.replace("_", ""))

    def parse_quoted(self) -> Optional[str]:
        """Quoted string. Returns its content, less the quotes."""
        txt = self.token(pats[Tokens.QUOTESTR])
        if txt is None:
            return None
        return txt[1:-1]

    def parse_unit_number(
        self, table: SuffixTable, cls: Type[Number], *, unit_word: bool = False
    ) -> Optional[Number]:
        """Float magnitude directly followed by an optional scale suffix from `table`.
        If `unit_word`, a trailing run of letters (e.g. the `V` of `1V`) is also consumed and discarded."""
        start = self.pos
        self.eat_idle()
        m = self.float_pattern.match(self.txt, self.pos)
        if m is None:
            return self.reset(start)
        value = float(m.group().replace("_", ""))
        self.pos = m.end()

        suffix = Suffix.NONE
        s = table.pattern.match(self.txt, self.pos)
        if s is not None:
            suffix = table.suffix(s.group())
            self.pos = s.end()
        if unit_word:
            while self.pos < len(self.txt) and self.txt[self.pos].isalpha():
                self.pos += 1

        self.eat_idle()
        return cls(value, suffix)

    def parse_number(self) -> Optional[Number]:
        return self.parse_unit_number(suffixes["number"], Number)

    def parse_voltage(self) -> Optional[Voltage]:
        return self.parse_unit_number(suffixes["voltage"], Voltage)

    def parse_current(self) -> Optional[Current]:
        return self.parse_unit_number(suffixes["current"], Current)

    def parse_resistance(self) -> Optional[Resistance]:
        return self.parse_unit_number(suffixes["resistance"], Resistance)

    def parse_capacitance(self) -> Optional[Capacitance]:
        return self.parse_unit_number(suffixes["capacitance"], Capacitance)

    def parse_inductance(self) -> Optional[Inductance]:
        return self.parse_unit_number(suffixes["inductance"], Inductance)

    def parse_time(self) -> Optional[Time]:
        return self.parse_unit_number(suffixes["time"], Time)

    def parse_frequency(self) -> Optional[Frequency]:
        return self.parse_unit_number(suffixes["frequency"], Frequency)

    def parse_angle(self) -> Optional[Angle]:
        return self.parse_unit_number(suffixes["angle"], Angle)
