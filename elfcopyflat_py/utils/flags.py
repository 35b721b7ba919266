"""
Segment flag and address string helpers.
"""

from typing import Union

from ..formats.elf_structures import PF_R, PF_W, PF_X

FLAG_CHARS = {
    'r': PF_R,
    'w': PF_W,
    'x': PF_X,
}


def parse_flags(s: str) -> int:
    """
    Convert a flag string such as "rx" into a PF_* mask.

    Args:
        s: Characters among "rwx", case-insensitive, each at most once

    Returns:
        The combined mask

    Raises:
        ValueError: On an unknown or repeated flag character
    """
    flags = 0
    for c in s:
        val = FLAG_CHARS.get(c.lower())
        if val is None:
            raise ValueError(f"Unknown flag '{c}'")
        if flags & val:
            raise ValueError(f"Duplicate flag '{c.lower()}'")
        flags |= val
    return flags


def parse_address(value: Union[str, int]) -> int:
    """
    Parse an address given as an int, a decimal string or a 0x-prefixed hex string.

    Raises:
        ValueError: If the value is not a non-negative integer
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid address: {value!r}")
    if isinstance(value, int):
        address = value
    elif isinstance(value, str):
        text = value.strip()
        if text.lower().startswith('0x'):
            address = int(text[2:], 16)
        else:
            address = int(text, 10)
    else:
        raise ValueError(f"Invalid address: {value!r}")
    if address < 0:
        raise ValueError(f"Address must not be negative: {value}")
    return address
