"""
# Lexical Patterns

Regular-expression token patterns and scale-suffix tables shared by the SPICE and LEF grammars.
There is no separate tokenizing pass: the dialect parsers match these patterns
directly against their input text, at the current cursor position.
"""

import re
from functools import lru_cache
from typing import Dict, List, Pattern, Tuple

from .data import Suffix

# Largest value accepted as an unsigned integer
U32_MAX = 2**32 - 1

# Master mapping of tokens <=> patterns
_patterns = dict(
    SPICE_IDENT=r"[A-Za-z_][A-Za-z0-9_.]*",  # Dots allowed, as in hierarchical names
    LEF_IDENT=r"[A-Za-z_][A-Za-z0-9_]*",
    NODE=r"[A-Za-z0-9_.]+",  # May lead with a digit, e.g. ground-node "0"
    UINT=r"\d+",
    SPICE_FLOAT=r"-?\d+(\.\d*)?([eE][+-]?\d+)?",  # 1 or 1.5 or -1. or 1e-3
    LEF_FLOAT=r"-?\d[\d_]*(\.(\d[\d_]*)?)?([eE][+-]?\d+)?",  # Also 1_000
    QUOTESTR=r"\"[^\"]*\"",  # No escapes; the first closing quote ends it
    REST_OF_LINE=r"[^\n]*",
    PAREN_CONTENT=r"[^)\n]*",  # Up to, not including, the closing paren
    PATH=r"\"[^\"\n]*\"|'[^'\n]*'|\S+",  # Quoted or bare file path
)
pats: Dict[str, Pattern] = {key: re.compile(val) for key, val in _patterns.items()}
# Create an enum-ish class of these token-types
Tokens = type("Tokens", (object,), {k: k for k in _patterns.keys()})

# Characters which may not directly follow a keyword
_word_end = r"(?![A-Za-z0-9_])"


@lru_cache(maxsize=None)
def keyword(kw: str, *, nocase: bool = False) -> Pattern:
    """Pattern matching keyword `kw`, only when followed by a non-word character."""
    flags = re.IGNORECASE if nocase else 0
    return re.compile(re.escape(kw) + _word_end, flags)


@lru_cache(maxsize=None)
def tag(txt: str, *, nocase: bool = False) -> Pattern:
    """Pattern matching literal `txt` as a plain prefix, e.g. punctuation or `DC=`."""
    flags = re.IGNORECASE if nocase else 0
    return re.compile(re.escape(txt), flags)


# Generic scale suffixes, for dimensionless numbers.
# Order matters: the first match wins, so `meg` must precede `m`.
_generic: List[Tuple[str, Suffix]] = [
    ("g", Suffix.MEGA),
    ("meg", Suffix.MEGA),
    ("k", Suffix.KILO),
    ("m", Suffix.MILLI),
    ("u", Suffix.MICRO),
    ("n", Suffix.NANO),
    ("p", Suffix.PICO),
]


def _unit_suffixes(unit: str) -> List[Tuple[str, Suffix]]:
    """Suffix table for a quantity with unit-letter `unit`.
    Unit-qualified forms (`kV`, `megV`) come first, then the generic scales, then the bare unit letter."""
    qualified = [(txt + unit, suffix) for txt, suffix in _generic]
    return qualified + _generic + [(unit, Suffix.NONE)]


class SuffixTable:
    """Ordered, case-insensitive table of scale-suffix tokens"""

    def __init__(self, entries: List[Tuple[str, Suffix]]):
        self.entries = entries
        # Regex alternation tries its branches in order, same as our table
        alts = "|".join(re.escape(txt) for txt, _ in entries)
        self.pattern = re.compile(alts, re.IGNORECASE)
        self.lookup = {txt.lower(): suffix for txt, suffix in entries}

    def suffix(self, txt: str) -> Suffix:
        return self.lookup[txt.lower()]


# Suffix tables per quantity.
# Frequency and angle use the dimensionless table.
suffixes: Dict[str, SuffixTable] = dict(
    number=SuffixTable(_generic),
    voltage=SuffixTable(_unit_suffixes("v")),
    current=SuffixTable(_unit_suffixes("a")),
    resistance=SuffixTable(_unit_suffixes("Ω")),
    capacitance=SuffixTable(_unit_suffixes("f")),
    inductance=SuffixTable(_unit_suffixes("h")),
    time=SuffixTable(_unit_suffixes("s")),
)
suffixes["frequency"] = suffixes["number"]
suffixes["angle"] = suffixes["number"]
