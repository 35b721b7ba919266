"""
Exceptions raised while reading ELF files and writing flat binaries.
"""

from typing import List, Sequence


class ElfError(ValueError):
    """Base class for invalid or unsupported ELF input."""


class MalformedMagic(ElfError):
    """The identity block does not start with the ELF magic."""

    def __init__(self, magic: bytes):
        self.magic = magic
        super().__init__(f"Invalid ELF magic: {magic!r}")


class UnsupportedClass(ElfError):
    """EI_CLASS is neither ELFCLASS32 nor ELFCLASS64."""

    def __init__(self, ei_class: int):
        self.ei_class = ei_class
        super().__init__(f"Invalid class: {ei_class}")


class UnsupportedEndianness(ElfError):
    """EI_DATA is neither ELFDATA2LSB nor ELFDATA2MSB."""

    def __init__(self, ei_data: int):
        self.ei_data = ei_data
        super().__init__(f"Invalid data (endianness): {ei_data}")


class UnsupportedVersion(ElfError):
    """EI_VERSION is not EV_CURRENT."""

    def __init__(self, version: int):
        self.version = version
        super().__init__(f"Invalid version: {version}")


class SegmentHeaderSizeMismatch(ElfError):
    """e_phentsize does not match the program header size for the class."""

    def __init__(self, phentsize: int, expected: int):
        self.phentsize = phentsize
        self.expected = expected
        super().__init__(f"Invalid e_phentsize: {phentsize} (expected {expected})")


class ExtendedSegmentCountUnsupported(ElfError):
    """e_phnum holds PN_XNUM, which would move the count into section 0."""

    def __init__(self):
        super().__init__("Too many segments, unimplemented PN_XNUM")


class SegmentBelowBase(ElfError):
    """A selected segment starts below the flat binary base address."""

    def __init__(self, address: int, base: int):
        self.address = address
        self.base = base
        super().__init__(f"Segment at 0x{address:x} lies below base address 0x{base:x}")


class OverlapDetected(ElfError):
    """
    Selected segments overlap in memory.

    Attributes:
        overlaps: Every offending adjacent pair, in address order
        address: Start of the first overlapping segment
        memory_size: Memory size of the first overlapping segment
        next_address: Start of the segment it runs into
    """

    def __init__(self, overlaps: Sequence):
        self.overlaps: List = list(overlaps)
        first = self.overlaps[0]
        self.address = first.address
        self.memory_size = first.memory_size
        self.next_address = first.next_address
        super().__init__("Overlapping segments (Use --allow-overlaps to use it anyway)")


class TruncatedReadError(EOFError):
    """The input ended before a structure or segment could be read in full."""

    def __init__(self, what: str, offset: int, expected: int, actual: int):
        self.what = what
        self.offset = offset
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Truncated input reading {what} at offset 0x{offset:x}: "
            f"expected {expected} bytes, got {actual}"
        )
