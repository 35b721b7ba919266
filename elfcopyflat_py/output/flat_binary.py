"""
Flat binary writer.

Copies the file contents of each selected segment to its position
relative to the base address. Nothing is written for the memory-only
tail of a segment (p_memsz beyond p_filesz) or for gaps between
segments; on a regular file or BytesIO those holes read back as zeros.
"""

import logging
from typing import Optional, Sequence

from ..errors import SegmentBelowBase
from ..formats.elf import ProgramHeader
from ..io.binary_stream import BinaryStream

logger = logging.getLogger(__name__)


def resolve_base(segments: Sequence[ProgramHeader], base: Optional[int] = None) -> int:
    """
    Get the address the flat binary starts at.

    Args:
        segments: Selected segments
        base: Explicit base address, if one was given

    Returns:
        The explicit base, else the lowest segment address, else 0
    """
    if base is not None:
        return base
    return min((phdr.address for phdr in segments), default=0)


def check_base(segments: Sequence[ProgramHeader], base: int) -> None:
    """
    Check that no segment starts below the base address.

    Raises:
        SegmentBelowBase: For the first segment that does
    """
    for phdr in segments:
        if phdr.address < base:
            raise SegmentBelowBase(phdr.address, base)


def write_flat_binary(
    source: BinaryStream,
    sink: BinaryStream,
    segments: Sequence[ProgramHeader],
    base: int
) -> int:
    """
    Write the file bytes of each segment to ``sink``.

    Args:
        source: The ELF file
        sink: Seekable output
        segments: Segments in address order
        base: Address that maps to output offset 0

    Returns:
        Total number of bytes copied

    Raises:
        SegmentBelowBase: If a segment starts before ``base``
        TruncatedReadError: If a segment's file data runs past the end of the input
    """
    check_base(segments, base)

    total = 0
    for phdr in segments:
        dest = phdr.address - base
        logger.debug(
            "Copying 0x%x bytes from file offset 0x%x to output offset 0x%x",
            phdr.file_size, phdr.file_offset, dest
        )
        total += source.copy_to(
            sink, phdr.file_offset, phdr.file_size, dest,
            what=f"segment at 0x{phdr.address:x}"
        )
    return total
