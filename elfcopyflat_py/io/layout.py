"""
Binary layout field descriptors.

This module provides helpers for declaring dataclass fields with an exact
on-disk width, and for compiling such a dataclass into a ``struct.Struct``
for a given byte order.
"""

import struct
from dataclasses import field, fields, is_dataclass
from functools import lru_cache
from typing import Any, Dict, Type, TypeVar

T = TypeVar('T')

# Byte order prefixes accepted by the struct module
LITTLE_ENDIAN = '<'
BIG_ENDIAN = '>'

# Unsigned struct codes by field width
STRUCT_FORMAT: Dict[int, str] = {
    1: 'B',
    2: 'H',
    4: 'I',
    8: 'Q',
}


def binary_field(binary_size: int, default: int = 0):
    """
    Create a dataclass field stored on disk as an unsigned integer.

    Args:
        binary_size: Width of the field in bytes (1, 2, 4 or 8)
        default: Default value for the field

    Returns:
        A dataclass field with layout metadata

    Example:
        @dataclass
        class Elf32_Phdr:
            p_type: int = binary_field(4)
            p_offset: int = binary_field(4)
    """
    if binary_size not in STRUCT_FORMAT:
        raise ValueError(f"Unsupported field width: {binary_size}")
    return field(default=default, metadata={'binary_size': binary_size})


def array_field(array_length: int):
    """Create a dataclass field holding a fixed-size byte array."""
    return field(default=b'\x00' * array_length, metadata={'array_length': array_length})


def _field_format(field_info) -> str:
    metadata = field_info.metadata or {}
    if 'binary_size' in metadata:
        return STRUCT_FORMAT[metadata['binary_size']]
    if 'array_length' in metadata:
        return f"{metadata['array_length']}s"
    raise TypeError(f"Field '{field_info.name}' has no binary layout")


@lru_cache(maxsize=None)
def struct_for(cls: type, byte_order: str) -> struct.Struct:
    """
    Compile a layout dataclass into a struct for the given byte order.

    Every field must carry layout metadata. The explicit byte order prefix
    disables native alignment, so fields are packed exactly as declared.
    """
    if byte_order not in (LITTLE_ENDIAN, BIG_ENDIAN):
        raise ValueError(f"Invalid byte order prefix: {byte_order!r}")
    if not is_dataclass(cls):
        raise TypeError(f"{cls.__name__} is not a dataclass")
    return struct.Struct(byte_order + ''.join(_field_format(f) for f in fields(cls)))


def sizeof(cls: type) -> int:
    """Get the on-disk size of a layout dataclass."""
    return struct_for(cls, LITTLE_ENDIAN).size


def unpack_class(cls: Type[T], data: bytes, byte_order: str) -> T:
    """Decode exactly one instance of ``cls`` from ``data``."""
    values = struct_for(cls, byte_order).unpack(data)
    return cls(*values)


def pack_class(instance: Any, byte_order: str) -> bytes:
    """Encode a layout dataclass instance."""
    cls = type(instance)
    values = [getattr(instance, f.name) for f in fields(cls)]
    return struct_for(cls, byte_order).pack(*values)
