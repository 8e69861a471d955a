"""
# File & Entry-Point Tests

"""

from textwrap import dedent

import pytest

LEF = dedent(
    """\
    VERSION 5.8 ;
    BUSBITCHARS "[]" ;
    DIVIDERCHAR "/" ;
    UNITS
      DATABASE MICRONS 1000 ;
    END UNITS
    LAYER M1 TYPE ROUTING ;
      DIRECTION VERTICAL ;
      PITCH 0.2 ;
      WIDTH 0.1 ;
    END M1
    END LIBRARY
    """
)


def test_default_dialect(tmp_path):
    from netlef import default_dialect, Dialects

    sp = tmp_path / "circuit.sp"
    sp.write_text("R1 a b 1k\n")
    lef = tmp_path / "tech.lef"
    lef.write_text(LEF)

    assert default_dialect(sp) == Dialects.SPICE
    assert default_dialect(lef) == Dialects.LEF
    with pytest.raises(FileNotFoundError):
        default_dialect(tmp_path / "nope.sp")


def test_dialects_get():
    from netlef import Dialects

    assert Dialects.get("lef") == Dialects.LEF
    assert Dialects.get(Dialects.SPICE) == Dialects.SPICE
    with pytest.raises(ValueError):
        Dialects.get("spectre")


def test_parse_files(tmp_path):
    from netlef import parse_files, SpiceDocument, LefTechLibrary

    sp = tmp_path / "circuit.sp"
    sp.write_text("R1 a b 1k\nC1 b 0 1p\n")
    doc = parse_files(sp)
    assert isinstance(doc, SpiceDocument)
    assert len(doc.components) == 2

    lef = tmp_path / "tech.lef"
    lef.write_text(LEF)
    lib = parse_files(lef)
    assert isinstance(lib, LefTechLibrary)
    assert lib.layer("M1").width == 0.1

    with pytest.raises(FileNotFoundError):
        parse_files(tmp_path / "missing.sp")


def test_parse_files_dialect_option(tmp_path):
    """An explicit dialect overrides the file suffix"""
    from netlef import parse_files, ParseOptions, Dialects, LefTechLibrary

    path = tmp_path / "tech.txt"
    path.write_text(LEF)
    lib = parse_files(path, options=ParseOptions(dialect=Dialects.LEF))
    assert isinstance(lib, LefTechLibrary)


def test_from_file(tmp_path):
    from netlef import SpiceDocument, LefTechLibrary

    sp = tmp_path / "circuit.cir"
    sp.write_text("V1 a 0 DC 1\n")
    doc = SpiceDocument.from_file(sp)
    assert len(doc.sources) == 1

    lef = tmp_path / "tech.tlef"
    lef.write_text(LEF)
    lib = LefTechLibrary.from_file(lef)
    assert [layer.name for layer in lib.layers] == ["M1"]


def test_include_warning(tmp_path):
    from netlef import parse_files

    sp = tmp_path / "top.sp"
    sp.write_text('.include "models.sp"\nR1 a b 1k\n')
    with pytest.warns(UserWarning, match="models.sp"):
        doc = parse_files(sp)
    assert doc.includes[0].path == "models.sp"


def test_parse_str():
    from netlef import parse_str, ParseOptions, Dialects, SpiceDocument, LefTechLibrary

    assert isinstance(parse_str("R1 a b 1k\n"), SpiceDocument)
    lib = parse_str(LEF, options=ParseOptions(dialect=Dialects.LEF))
    assert isinstance(lib, LefTechLibrary)


def test_source_info():
    from netlef import parse_spice, parse_lef, SourceInfo, Dialects

    doc = parse_spice("\n\nR1 a b 1k\n")
    assert doc.components[0].source_info == SourceInfo(line=3, dialect=Dialects.SPICE)

    lib = parse_lef(LEF)
    assert lib.layers[0].source_info == SourceInfo(line=7, dialect=Dialects.LEF)
