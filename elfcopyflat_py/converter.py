"""
ELF to flat binary conversion.

Runs one conversion from top to bottom: headers, segment selection,
overlap check, base address, copy.
"""

import logging
from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional, Union

from .config import Config
from .formats.elf import ElfFile, ElfHeader, ProgramHeader
from .formats.segments import SegmentOverlap, select_segments, find_overlaps, check_overlaps
from .io.binary_stream import BinaryStream
from .output.flat_binary import resolve_base, write_flat_binary

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    """Everything a caller may want to report about a conversion."""
    header: ElfHeader
    segments: List[ProgramHeader] = field(default_factory=list)
    overlaps: List[SegmentOverlap] = field(default_factory=list)
    base: int = 0
    bytes_copied: int = 0


def plan(elf: ElfFile, config: Config) -> ConversionResult:
    """
    Select the segments to copy and resolve the base address.

    Overlaps are recorded in the result but not escalated here.
    """
    segments = select_segments(elf.program_headers, config.if_mask, config.if_not_mask)
    overlaps = find_overlaps(segments)
    base = resolve_base(segments, config.base)
    return ConversionResult(header=elf.header, segments=segments, overlaps=overlaps, base=base)


def convert(
    source: Union[bytes, BinaryIO],
    sink: BinaryIO,
    config: Optional[Config] = None
) -> ConversionResult:
    """
    Convert an ELF file into a flat binary.

    Args:
        source: ELF file contents, or a readable and seekable binary file
        sink: Writable and seekable binary file for the flat binary
        config: Selection and overlap options (defaults if None)

    Returns:
        The conversion result

    Raises:
        ElfError: On invalid or unsupported input, or disallowed overlaps
        TruncatedReadError: If the input is cut short
    """
    config = config or Config()
    input_stream = BinaryStream(source)
    output_stream = BinaryStream(sink)

    elf = ElfFile(input_stream)
    result = plan(elf, config)
    check_overlaps(result.overlaps, config.allow_overlaps)

    result.bytes_copied = write_flat_binary(input_stream, output_stream, result.segments, result.base)
    logger.debug(
        "Copied %d bytes from %d segments, base 0x%x",
        result.bytes_copied, len(result.segments), result.base
    )
    return result
