"""
ELF format structure definitions.

Each dataclass mirrors one on-disk structure field for field; the
``binary_field`` widths fix the layout independently of byte order.
"""

from dataclasses import dataclass

from ..io.layout import binary_field, array_field

# ELF Constants
ELFMAG = b'\x7fELF'
EI_NIDENT = 16

ELFCLASSNONE = 0
ELFCLASS32 = 1
ELFCLASS64 = 2

ELFDATANONE = 0
ELFDATA2LSB = 1
ELFDATA2MSB = 2

EV_CURRENT = 1

# e_phnum value that moves the real count into section header 0
PN_XNUM = 0xFFFF

ET_NONE = 0
ET_REL = 1
ET_EXEC = 2
ET_DYN = 3
ET_CORE = 4

EM_386 = 3
EM_68K = 4
EM_MIPS = 8
EM_PPC = 20
EM_PPC64 = 21
EM_ARM = 40
EM_X86_64 = 62
EM_AARCH64 = 183
EM_RISCV = 243

PT_NULL = 0
PT_LOAD = 1
PT_DYNAMIC = 2
PT_INTERP = 3
PT_NOTE = 4
PT_SHLIB = 5
PT_PHDR = 6
PT_TLS = 7

PF_X = 1
PF_W = 2
PF_R = 4

CLASS_NAMES = {ELFCLASS32: "ELF32", ELFCLASS64: "ELF64"}
DATA_NAMES = {ELFDATA2LSB: "little-endian", ELFDATA2MSB: "big-endian"}
TYPE_NAMES = {ET_NONE: "NONE", ET_REL: "REL", ET_EXEC: "EXEC", ET_DYN: "DYN", ET_CORE: "CORE"}
MACHINE_NAMES = {
    EM_386: "x86",
    EM_68K: "m68k",
    EM_MIPS: "MIPS",
    EM_PPC: "PowerPC",
    EM_PPC64: "PowerPC64",
    EM_ARM: "ARM",
    EM_X86_64: "x86_64",
    EM_AARCH64: "AArch64",
    EM_RISCV: "RISC-V",
}


@dataclass
class Elf_Ident:
    """ELF identification bytes (e_ident)."""
    ei_magic: bytes = array_field(4)
    ei_class: int = binary_field(1)
    ei_data: int = binary_field(1)
    ei_version: int = binary_field(1)
    ei_osabi: int = binary_field(1)
    ei_abiversion: int = binary_field(1)
    ei_pad: bytes = array_field(EI_NIDENT - 9)


@dataclass
class Elf32_Ehdr:
    """ELF32 file header."""
    e_ident: bytes = array_field(EI_NIDENT)
    e_type: int = binary_field(2)
    e_machine: int = binary_field(2)
    e_version: int = binary_field(4)
    e_entry: int = binary_field(4)
    e_phoff: int = binary_field(4)
    e_shoff: int = binary_field(4)
    e_flags: int = binary_field(4)
    e_ehsize: int = binary_field(2)
    e_phentsize: int = binary_field(2)
    e_phnum: int = binary_field(2)
    e_shentsize: int = binary_field(2)
    e_shnum: int = binary_field(2)
    e_shstrndx: int = binary_field(2)


@dataclass
class Elf64_Ehdr:
    """ELF64 file header."""
    e_ident: bytes = array_field(EI_NIDENT)
    e_type: int = binary_field(2)
    e_machine: int = binary_field(2)
    e_version: int = binary_field(4)
    e_entry: int = binary_field(8)
    e_phoff: int = binary_field(8)
    e_shoff: int = binary_field(8)
    e_flags: int = binary_field(4)
    e_ehsize: int = binary_field(2)
    e_phentsize: int = binary_field(2)
    e_phnum: int = binary_field(2)
    e_shentsize: int = binary_field(2)
    e_shnum: int = binary_field(2)
    e_shstrndx: int = binary_field(2)


@dataclass
class Elf32_Phdr:
    """ELF32 program header."""
    p_type: int = binary_field(4)
    p_offset: int = binary_field(4)
    p_vaddr: int = binary_field(4)
    p_paddr: int = binary_field(4)
    p_filesz: int = binary_field(4)
    p_memsz: int = binary_field(4)
    p_flags: int = binary_field(4)
    p_align: int = binary_field(4)


@dataclass
class Elf64_Phdr:
    """ELF64 program header."""
    p_type: int = binary_field(4)
    p_flags: int = binary_field(4)
    p_offset: int = binary_field(8)
    p_vaddr: int = binary_field(8)
    p_paddr: int = binary_field(8)
    p_filesz: int = binary_field(8)
    p_memsz: int = binary_field(8)
    p_align: int = binary_field(8)
