"""
Executable format parsers.

Supports:
- ELF (32-bit and 64-bit, little-endian and big-endian)
"""

from .elf import (
    ElfFile, ElfIdent, ElfHeader, ProgramHeader,
    read_elf_header, read_program_headers, decode_program_header,
)
from .segments import SegmentOverlap, select_segments, find_overlaps, check_overlaps
from .elf_structures import *

__all__ = [
    'ElfFile', 'ElfIdent', 'ElfHeader', 'ProgramHeader',
    'read_elf_header', 'read_program_headers', 'decode_program_header',
    'SegmentOverlap', 'select_segments', 'find_overlaps', 'check_overlaps',
]
