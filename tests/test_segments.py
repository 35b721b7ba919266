import itertools
import random

import pytest

from elfcopyflat_py.errors import OverlapDetected
from elfcopyflat_py.formats.elf import ProgramHeader
from elfcopyflat_py.formats.elf_structures import PT_LOAD, PT_NOTE, PT_TLS, PF_R, PF_W, PF_X
from elfcopyflat_py.formats.segments import (
    SegmentOverlap, check_overlaps, find_overlaps, matches_flags, select_segments,
)


def seg(address, memsz=0x100, flags=PF_R, p_type=PT_LOAD, offset=0):
    return ProgramHeader(p_type=p_type, p_flags=flags, p_offset=offset, p_vaddr=address, p_memsz=memsz)


def test_only_loadable_segments_are_kept():
    phdrs = [seg(0x1000), seg(0x2000, p_type=PT_NOTE), seg(0x3000, p_type=PT_TLS), seg(0x4000)]
    assert [p.address for p in select_segments(phdrs)] == [0x1000, 0x4000]


def test_include_executable_ignores_other_bits():
    phdrs = [
        seg(0x1000, flags=PF_R),
        seg(0x2000, flags=PF_R | PF_X),
        seg(0x3000, flags=PF_R | PF_W | PF_X),
        seg(0x4000, flags=PF_W),
        seg(0x5000, flags=PF_X),
    ]
    selected = select_segments(phdrs, if_flags=PF_X)
    assert [p.address for p in selected] == [0x2000, 0x3000, 0x5000]
    assert all(p.executable for p in selected)


def test_include_mask_requires_every_bit():
    phdrs = [seg(0x1000, flags=PF_R), seg(0x2000, flags=PF_X), seg(0x3000, flags=PF_R | PF_X)]
    assert [p.address for p in select_segments(phdrs, if_flags=PF_R | PF_X)] == [0x3000]


def test_exclude_mask_rejects_any_bit():
    phdrs = [seg(0x1000, flags=PF_R), seg(0x2000, flags=PF_R | PF_W), seg(0x3000, flags=PF_W | PF_X)]
    assert [p.address for p in select_segments(phdrs, if_not_flags=PF_W | PF_X)] == [0x1000]


def test_both_masks():
    phdrs = [seg(0x1000, flags=PF_R | PF_X), seg(0x2000, flags=PF_R | PF_W), seg(0x3000, flags=PF_R | PF_W | PF_X)]
    selected = select_segments(phdrs, if_flags=PF_R, if_not_flags=PF_W)
    assert [p.address for p in selected] == [0x1000]


def test_no_masks_means_no_constraint():
    assert matches_flags(seg(0, flags=0))
    assert matches_flags(seg(0, flags=PF_R | PF_W | PF_X))
    assert matches_flags(seg(0, flags=0), if_flags=0, if_not_flags=0)


def test_sorted_by_address():
    phdrs = [seg(0x3000), seg(0x1000), seg(0x2000)]
    assert [p.address for p in select_segments(phdrs)] == [0x1000, 0x2000, 0x3000]


def test_sort_is_stable_for_equal_addresses():
    phdrs = [seg(0x2000, offset=1), seg(0x1000, offset=2), seg(0x2000, offset=3), seg(0x2000, offset=4)]
    assert [p.file_offset for p in select_segments(phdrs)] == [2, 1, 3, 4]


def test_overlap_detected():
    overlaps = find_overlaps(select_segments([seg(0x2000, 0x100), seg(0x1000, 0x2000)]))
    assert overlaps == [SegmentOverlap(0x1000, 0x2000, 0x2000)]
    assert overlaps[0].end_address == 0x3000
    assert str(overlaps[0]) == (
        "Segment at 0x1000 has size 0x2000, which overlaps the next segment at 0x2000"
    )


def test_separate_segments_do_not_overlap():
    assert find_overlaps(select_segments([seg(0x1000, 0x100), seg(0x2000, 0x200)])) == []


def test_touching_segments_do_not_overlap():
    assert find_overlaps([seg(0x1000, 0x1000), seg(0x2000, 0x10)]) == []


def test_every_adjacent_overlap_is_reported():
    segments = [seg(0x1000, 0x1800), seg(0x2000, 0x10), seg(0x3000, 0x2000), seg(0x4000, 0x10)]
    assert [o.address for o in find_overlaps(segments)] == [0x1000, 0x3000]


def test_overlap_with_non_adjacent_segment_is_found():
    # The first segment covers both of the others
    segments = [seg(0x1000, 0x5000), seg(0x2000, 0x10), seg(0x3000, 0x10)]
    assert find_overlaps(select_segments(segments))


def test_result_is_independent_of_table_order():
    segments = [seg(0x1000, 0x1800), seg(0x2000, 0x10), seg(0x3000, 0x800), seg(0x3400, 0x10)]
    expected = find_overlaps(select_segments(segments))
    for permutation in itertools.permutations(segments):
        assert find_overlaps(select_segments(permutation)) == expected


def _any_pair_overlaps(segments):
    for a, b in itertools.combinations(segments, 2):
        if max(a.address, b.address) < min(a.end_address, b.end_address):
            return True
    return False


def test_adjacent_scan_agrees_with_pairwise_check():
    rng = random.Random(1234)
    for _ in range(300):
        segments = [
            seg(rng.randrange(0, 0x100) * 0x10, rng.randrange(1, 0x80) * 0x10)
            for _ in range(rng.randrange(0, 6))
        ]
        found = bool(find_overlaps(select_segments(segments)))
        assert found == _any_pair_overlaps(segments)


def test_check_overlaps_raises_with_addresses():
    overlaps = [SegmentOverlap(0x1000, 0x2000, 0x2000), SegmentOverlap(0x5000, 0x20, 0x5010)]
    with pytest.raises(OverlapDetected) as excinfo:
        check_overlaps(overlaps)
    err = excinfo.value
    assert err.address == 0x1000
    assert err.memory_size == 0x2000
    assert err.next_address == 0x2000
    assert err.overlaps == overlaps
    assert "--allow-overlaps" in str(err)


def test_check_overlaps_can_be_overridden():
    check_overlaps([SegmentOverlap(0x1000, 0x2000, 0x2000)], allow_overlaps=True)
    check_overlaps([])
