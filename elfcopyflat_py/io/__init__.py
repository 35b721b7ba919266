"""
IO module for binary stream handling.
"""

from .binary_stream import BinaryStream
from .layout import binary_field, array_field, sizeof, BIG_ENDIAN, LITTLE_ENDIAN

__all__ = ['BinaryStream', 'binary_field', 'array_field', 'sizeof', 'BIG_ENDIAN', 'LITTLE_ENDIAN']
