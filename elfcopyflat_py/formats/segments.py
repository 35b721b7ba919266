"""
Loadable segment selection and overlap checks.

Segments are filtered to PT_LOAD entries matching the requested flags and
sorted by virtual address. Once sorted, comparing each segment with the
next one is enough to find every overlap: if a segment overlaps any later
segment, it overlaps the one directly after it.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from ..errors import OverlapDetected
from .elf import ProgramHeader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SegmentOverlap:
    """A segment whose memory range runs into the next segment."""
    address: int
    memory_size: int
    next_address: int

    @property
    def end_address(self) -> int:
        return self.address + self.memory_size

    def __str__(self) -> str:
        return (
            f"Segment at 0x{self.address:x} has size 0x{self.memory_size:x}, "
            f"which overlaps the next segment at 0x{self.next_address:x}"
        )


def matches_flags(phdr: ProgramHeader, if_flags: Optional[int] = None, if_not_flags: Optional[int] = None) -> bool:
    """
    Check a segment's flags against the include and exclude masks.

    Args:
        phdr: The program header to test
        if_flags: Every one of these PF_* bits must be set (None for no constraint)
        if_not_flags: None of these PF_* bits may be set (None for no constraint)
    """
    if if_flags is not None and phdr.p_flags & if_flags != if_flags:
        return False
    if if_not_flags is not None and phdr.p_flags & if_not_flags:
        return False
    return True


def select_segments(
    phdrs: Iterable[ProgramHeader],
    if_flags: Optional[int] = None,
    if_not_flags: Optional[int] = None
) -> List[ProgramHeader]:
    """
    Select the loadable segments to copy.

    Returns:
        PT_LOAD segments matching both masks, sorted by virtual address.
        The sort is stable, so equal addresses keep their table order.
    """
    selected = [
        phdr for phdr in phdrs
        if phdr.is_load and matches_flags(phdr, if_flags, if_not_flags)
    ]
    selected.sort(key=lambda phdr: phdr.address)
    logger.debug("Selected %d loadable segments", len(selected))
    return selected


def find_overlaps(segments: Sequence[ProgramHeader]) -> List[SegmentOverlap]:
    """
    Find segments that overlap the following segment.

    Args:
        segments: Segments sorted by address, as returned by select_segments

    Returns:
        One report per overlapping adjacent pair, in address order
    """
    overlaps = []
    for current, following in zip(segments, segments[1:]):
        if current.end_address > following.address:
            overlap = SegmentOverlap(current.address, current.memory_size, following.address)
            logger.debug("%s", overlap)
            overlaps.append(overlap)
    return overlaps


def check_overlaps(overlaps: Sequence[SegmentOverlap], allow_overlaps: bool = False) -> None:
    """
    Turn overlap reports into an error unless overlaps are allowed.

    Raises:
        OverlapDetected: If there is at least one overlap and allow_overlaps is False
    """
    if overlaps and not allow_overlaps:
        raise OverlapDetected(overlaps)
