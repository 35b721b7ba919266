"""
elfcopyflat
A tool for copying the loadable segments of an ELF file into a flat binary.

Handles ELF32 and ELF64 files of either byte order.
"""

__version__ = "0.1.0"
__author__ = "elfcopyflat contributors"

from .config import Config
from .converter import ConversionResult, convert
from .formats.elf import ElfFile, ElfHeader, ProgramHeader

__all__ = ['Config', 'ConversionResult', 'convert', 'ElfFile', 'ElfHeader', 'ProgramHeader', '__version__']
