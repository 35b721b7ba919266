import pytest

from elfcopyflat_py.formats.elf import format_flags
from elfcopyflat_py.formats.elf_structures import PF_R, PF_W, PF_X
from elfcopyflat_py.utils.flags import parse_address, parse_flags


@pytest.mark.parametrize("text,mask", [
    ("", 0),
    ("r", PF_R),
    ("w", PF_W),
    ("x", PF_X),
    ("rx", PF_R | PF_X),
    ("XWR", PF_R | PF_W | PF_X),
])
def test_parse_flags(text, mask):
    assert parse_flags(text) == mask


def test_unknown_flag():
    with pytest.raises(ValueError, match="Unknown flag 'a'"):
        parse_flags("ra")


def test_duplicate_flag_is_reported_in_lower_case():
    with pytest.raises(ValueError, match="Duplicate flag 'w'"):
        parse_flags("wW")


def test_format_flags():
    assert format_flags(0) == "---"
    assert format_flags(PF_R | PF_X) == "r-x"
    assert format_flags(PF_R | PF_W | PF_X) == "rwx"


@pytest.mark.parametrize("text,value", [
    ("0", 0),
    ("4096", 0x1000),
    ("0x1000", 0x1000),
    ("0XFFFFFFFF80000000", 0xFFFFFFFF80000000),
    (" 0x20 ", 0x20),
    (0x400, 0x400),
])
def test_parse_address(text, value):
    assert parse_address(text) == value


@pytest.mark.parametrize("text", ["", "0x", "ten", "-5", "0xg"])
def test_parse_address_rejects(text):
    with pytest.raises(ValueError):
        parse_address(text)


@pytest.mark.parametrize("value", [True, False, 4096.0, None])
def test_parse_address_rejects_other_types(value):
    with pytest.raises(ValueError, match="Invalid address"):
        parse_address(value)
