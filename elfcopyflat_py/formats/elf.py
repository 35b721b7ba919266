"""
ELF header parser for flat binary extraction.

Supports ELF32 and ELF64 files in both byte orders. Headers are decoded
with the layout for their class and byte order, then widened into one
canonical form, so later stages never look at the class or byte order
again.
"""

import logging
from dataclasses import dataclass, fields
from typing import Dict, List, NamedTuple, Tuple

from ..errors import (
    MalformedMagic,
    UnsupportedClass,
    UnsupportedEndianness,
    UnsupportedVersion,
    SegmentHeaderSizeMismatch,
    ExtendedSegmentCountUnsupported,
)
from ..io.binary_stream import BinaryStream
from ..io.layout import BIG_ENDIAN, LITTLE_ENDIAN, sizeof, unpack_class
from .elf_structures import (
    Elf_Ident,
    Elf32_Ehdr, Elf64_Ehdr,
    Elf32_Phdr, Elf64_Phdr,
    ELFMAG, EI_NIDENT,
    ELFCLASS32, ELFCLASS64,
    ELFDATA2LSB, ELFDATA2MSB,
    EV_CURRENT, PN_XNUM,
    PT_LOAD, PF_X, PF_W, PF_R,
    CLASS_NAMES, DATA_NAMES, TYPE_NAMES, MACHINE_NAMES,
)

logger = logging.getLogger(__name__)


class ElfLayout(NamedTuple):
    """On-disk layouts for one (class, byte order) combination."""
    header: type
    program_header: type
    byte_order: str


ELF_LAYOUTS: Dict[Tuple[int, int], ElfLayout] = {
    (ELFCLASS32, ELFDATA2LSB): ElfLayout(Elf32_Ehdr, Elf32_Phdr, LITTLE_ENDIAN),
    (ELFCLASS32, ELFDATA2MSB): ElfLayout(Elf32_Ehdr, Elf32_Phdr, BIG_ENDIAN),
    (ELFCLASS64, ELFDATA2LSB): ElfLayout(Elf64_Ehdr, Elf64_Phdr, LITTLE_ENDIAN),
    (ELFCLASS64, ELFDATA2MSB): ElfLayout(Elf64_Ehdr, Elf64_Phdr, BIG_ENDIAN),
}


def layout_for(ei_class: int, ei_data: int) -> ElfLayout:
    """
    Select the layouts for a class and byte order.

    Raises:
        UnsupportedClass: If ei_class is not ELFCLASS32 or ELFCLASS64
        UnsupportedEndianness: If ei_data is not ELFDATA2LSB or ELFDATA2MSB
    """
    if ei_class not in CLASS_NAMES:
        raise UnsupportedClass(ei_class)
    if ei_data not in DATA_NAMES:
        raise UnsupportedEndianness(ei_data)
    return ELF_LAYOUTS[(ei_class, ei_data)]


def format_flags(flags: int) -> str:
    """Render a PF_* mask as an "rwx" triplet with '-' for clear bits."""
    return ''.join(c if flags & bit else '-' for c, bit in (('r', PF_R), ('w', PF_W), ('x', PF_X)))


@dataclass(frozen=True)
class ElfIdent:
    """Decoded e_ident block."""
    magic: bytes
    ei_class: int
    ei_data: int
    ei_version: int
    ei_osabi: int = 0
    ei_abiversion: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> 'ElfIdent':
        """
        Decode the 16 identification bytes.

        Raises:
            MalformedMagic: If the data does not start with ELFMAG
        """
        raw = unpack_class(Elf_Ident, data, LITTLE_ENDIAN)
        if raw.ei_magic != ELFMAG:
            raise MalformedMagic(raw.ei_magic)
        return cls(
            magic=raw.ei_magic,
            ei_class=raw.ei_class,
            ei_data=raw.ei_data,
            ei_version=raw.ei_version,
            ei_osabi=raw.ei_osabi,
            ei_abiversion=raw.ei_abiversion,
        )

    @classmethod
    def read(cls, stream: BinaryStream) -> 'ElfIdent':
        """Read the identification block at the current stream position."""
        return cls.from_bytes(stream.read_exact(EI_NIDENT, "ELF identification"))

    def validate(self) -> None:
        """Check class, byte order and version."""
        layout_for(self.ei_class, self.ei_data)
        if self.ei_version != EV_CURRENT:
            raise UnsupportedVersion(self.ei_version)

    @property
    def layout(self) -> ElfLayout:
        return layout_for(self.ei_class, self.ei_data)

    @property
    def is_64bit(self) -> bool:
        return self.ei_class == ELFCLASS64

    def describe(self) -> str:
        return f"{CLASS_NAMES.get(self.ei_class, '?')} {DATA_NAMES.get(self.ei_data, '?')}"


@dataclass(frozen=True)
class ElfHeader:
    """
    ELF file header in canonical form.

    All addresses and offsets hold the unsigned value from the file,
    whatever the class it was read from.
    """
    ident: ElfIdent
    e_type: int = 0
    e_machine: int = 0
    e_version: int = 0
    e_entry: int = 0
    e_phoff: int = 0
    e_shoff: int = 0
    e_flags: int = 0
    e_ehsize: int = 0
    e_phentsize: int = 0
    e_phnum: int = 0
    e_shentsize: int = 0
    e_shnum: int = 0
    e_shstrndx: int = 0

    @classmethod
    def from_raw(cls, raw) -> 'ElfHeader':
        """Widen an Elf32_Ehdr or Elf64_Ehdr."""
        values = {f.name: getattr(raw, f.name) for f in fields(raw) if f.name != 'e_ident'}
        return cls(ident=ElfIdent.from_bytes(raw.e_ident), **values)

    def validate(self) -> None:
        """
        Check the header for consistency.

        Raises:
            SegmentHeaderSizeMismatch: If e_phentsize is not the exact program
                header size for the class
            ExtendedSegmentCountUnsupported: If e_phnum is PN_XNUM
        """
        self.ident.validate()

        expected = sizeof(self.ident.layout.program_header)
        if self.e_phentsize != expected:
            raise SegmentHeaderSizeMismatch(self.e_phentsize, expected)

        if self.e_phnum == PN_XNUM:
            raise ExtendedSegmentCountUnsupported()

    @property
    def ph_offset(self) -> int:
        return self.e_phoff

    @property
    def ph_entry_size(self) -> int:
        return self.e_phentsize

    @property
    def ph_size(self) -> int:
        """Total size of the program header table in bytes."""
        return self.e_phentsize * self.e_phnum

    def describe(self) -> str:
        """One-line summary for diagnostics."""
        type_name = TYPE_NAMES.get(self.e_type, f"0x{self.e_type:x}")
        machine = MACHINE_NAMES.get(self.e_machine, f"0x{self.e_machine:x}")
        return f"{self.ident.describe()} {type_name} {machine}, entry 0x{self.e_entry:x}"


@dataclass(frozen=True)
class ProgramHeader:
    """ELF program header in canonical (64-bit) form."""
    p_type: int = 0
    p_flags: int = 0
    p_offset: int = 0
    p_vaddr: int = 0
    p_paddr: int = 0
    p_filesz: int = 0
    p_memsz: int = 0
    p_align: int = 0

    @classmethod
    def from_raw(cls, raw) -> 'ProgramHeader':
        """Widen an Elf32_Phdr or Elf64_Phdr."""
        return cls(**{f.name: getattr(raw, f.name) for f in fields(raw)})

    @property
    def is_load(self) -> bool:
        return self.p_type == PT_LOAD

    @property
    def readable(self) -> bool:
        return bool(self.p_flags & PF_R)

    @property
    def writable(self) -> bool:
        return bool(self.p_flags & PF_W)

    @property
    def executable(self) -> bool:
        return bool(self.p_flags & PF_X)

    @property
    def address(self) -> int:
        return self.p_vaddr

    @property
    def file_offset(self) -> int:
        return self.p_offset

    @property
    def file_size(self) -> int:
        return self.p_filesz

    @property
    def memory_size(self) -> int:
        return self.p_memsz

    @property
    def end_address(self) -> int:
        """First address past the segment in memory."""
        return self.p_vaddr + self.p_memsz

    @property
    def flags_string(self) -> str:
        return format_flags(self.p_flags)

    def describe(self) -> str:
        return (
            f"{self.flags_string} 0x{self.p_offset:x} + 0x{self.p_filesz:x} bytes in file, "
            f"0x{self.p_vaddr:x} + 0x{self.p_memsz:x} bytes in memory"
        )


def read_elf_header(stream: BinaryStream) -> ElfHeader:
    """
    Read and validate the ELF header at the current stream position.

    The identification block is read first to pick the layout, then the
    stream is rewound and the whole header decoded in that layout.
    """
    start = stream.position
    ident = ElfIdent.read(stream)
    ident.validate()
    layout = ident.layout

    stream.position = start
    raw = stream.read_class(layout.header, byte_order=layout.byte_order, what="ELF header")
    header = ElfHeader.from_raw(raw)
    header.validate()

    logger.debug("Read %s header at 0x%x: %s", layout.header.__name__, start, header.describe())
    return header


def decode_program_header(data: bytes, ei_class: int, ei_data: int) -> ProgramHeader:
    """
    Decode a single program header entry.

    Args:
        data: Exactly one entry's worth of bytes
        ei_class: ELFCLASS32 or ELFCLASS64
        ei_data: ELFDATA2LSB or ELFDATA2MSB

    Returns:
        The widened program header
    """
    layout = layout_for(ei_class, ei_data)
    return ProgramHeader.from_raw(unpack_class(layout.program_header, data, layout.byte_order))


def read_program_headers(stream: BinaryStream, header: ElfHeader) -> List[ProgramHeader]:
    """Read the whole program header table, in table order."""
    stream.position = header.ph_offset
    table = stream.read_exact(header.ph_size, "program header table")

    entry_size = header.ph_entry_size
    ident = header.ident
    phdrs = [
        decode_program_header(table[i:i + entry_size], ident.ei_class, ident.ei_data)
        for i in range(0, len(table), entry_size)
    ]
    logger.debug("Read %d program headers at 0x%x", len(phdrs), header.ph_offset)
    return phdrs


class ElfFile:
    """
    ELF file opened for segment extraction.

    Reads the file header and program header table on construction.
    """

    def __init__(self, stream: BinaryStream):
        self._stream = stream
        self._load()

    def _load(self) -> None:
        """Load ELF structures."""
        self._stream.position = 0
        self.header = read_elf_header(self._stream)
        self.program_headers = read_program_headers(self._stream, self.header)

    @property
    def stream(self) -> BinaryStream:
        return self._stream
