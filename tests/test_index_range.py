import pytest

from treeselect import index_range
from treeselect.index_path import IndexPath
from treeselect.index_range import IndexRange, IndexRanges


def test_range_validation_and_count():
    assert IndexRange(2, 4).count == 3
    assert 3 in IndexRange(2, 4)
    assert 5 not in IndexRange(2, 4)
    with pytest.raises(ValueError):
        IndexRange(3, 2)
    with pytest.raises(ValueError):
        IndexRange(-1, 2)


def test_add_merges_adjacent_leaves_into_one_range():
    ranges = IndexRanges()
    ranges.add(IndexPath(0, 1))
    ranges.add(IndexPath(0, 2))
    ranges.add(IndexPath(0, 0))
    assert ranges.get_ranges(IndexPath(0)) == (IndexRange(0, 2),)


def test_add_reports_only_new_indexes():
    ranges = [IndexRange(0, 2), IndexRange(6, 8)]
    added = []
    assert index_range.add(ranges, IndexRange(1, 7), added) == 3
    assert added == [IndexRange(3, 5)]
    assert ranges == [IndexRange(0, 8)]

    assert index_range.add(ranges, IndexRange(4, 4)) == 0
    assert ranges == [IndexRange(0, 8)]


def test_add_keeps_disjoint_ranges_sorted():
    ranges = [IndexRange(0, 1), IndexRange(10, 12)]
    assert index_range.add(ranges, IndexRange(5, 6)) == 2
    assert ranges == [IndexRange(0, 1), IndexRange(5, 6), IndexRange(10, 12)]

    assert index_range.add(ranges, IndexRange(2, 4)) == 3
    assert ranges == [IndexRange(0, 6), IndexRange(10, 12)]


def test_remove_splits_ranges():
    ranges = [IndexRange(0, 9)]
    removed = []
    assert index_range.remove(ranges, IndexRange(3, 5), removed) == 3
    assert removed == [IndexRange(3, 5)]
    assert ranges == [IndexRange(0, 2), IndexRange(6, 9)]


def test_remove_across_several_ranges():
    ranges = [IndexRange(0, 2), IndexRange(5, 7)]
    assert index_range.remove(ranges, IndexRange(1, 6)) == 4
    assert ranges == [IndexRange(0, 0), IndexRange(7, 7)]
    assert index_range.remove(ranges, IndexRange(3, 4)) == 0


def test_contains_count_and_ordinal_lookup():
    ranges = [IndexRange(0, 2), IndexRange(5, 7)]
    assert index_range.contains(ranges, 1)
    assert not index_range.contains(ranges, 3)
    assert index_range.contains(ranges, 5)
    assert not index_range.contains(ranges, 8)
    assert not index_range.contains(None, 0)

    assert index_range.get_count(ranges) == 6
    assert index_range.get_at(ranges, 0) == 0
    assert index_range.get_at(ranges, 3) == 5
    assert index_range.get_at(ranges, 5) == 7
    with pytest.raises(IndexError):
        index_range.get_at(ranges, 6)
    assert list(index_range.iter_indexes(ranges)) == [0, 1, 2, 5, 6, 7]


def test_intersect():
    ranges = [IndexRange(0, 2), IndexRange(5, 7)]
    assert index_range.intersect(ranges, IndexRange(2, 5)) == [IndexRange(2, 2), IndexRange(5, 5)]
    assert index_range.intersect(ranges, IndexRange(3, 4)) == []


def test_shift_insertion_splits_straddling_range():
    assert index_range.shift([IndexRange(0, 4)], 2, 3) == [IndexRange(0, 1), IndexRange(5, 7)]
    assert index_range.shift([IndexRange(0, 1)], 2, 3) == [IndexRange(0, 1)]


def test_shift_removal_drops_window_and_merges():
    assert index_range.shift([IndexRange(0, 1), IndexRange(4, 6)], 2, -2) == [IndexRange(0, 4)]
    assert index_range.shift([IndexRange(1, 3)], 2, -1) == [IndexRange(1, 2)]
    assert index_range.shift([IndexRange(2, 2)], 2, -1) == []


def test_index_ranges_iteration_and_lookup():
    ranges = IndexRanges()
    ranges.add(IndexPath(1, 0))
    ranges.add(IndexPath(0, 5))
    ranges.add(IndexPath(0, 1))

    assert list(ranges) == [IndexPath(0, 1), IndexPath(0, 5), IndexPath(1, 0)]
    assert len(ranges) == 3
    assert ranges.get_path_at(2) == IndexPath(1, 0)
    assert IndexPath(0, 5) in ranges
    assert IndexPath(0, 4) not in ranges
    with pytest.raises(IndexError):
        ranges.get_path_at(3)


def test_index_ranges_remove_drops_empty_parent():
    ranges = IndexRanges()
    ranges.add(IndexPath(2, 3))
    assert ranges.remove(IndexPath(2, 3)) == 1
    assert not ranges
    assert ranges.items() == []
    assert ranges.remove(IndexPath(2, 3)) == 0


def test_index_ranges_rejects_root_path():
    with pytest.raises(ValueError):
        IndexRanges().add(IndexPath())


def _sample():
    ranges = IndexRanges()
    ranges.add(IndexPath(0, 3))
    ranges.add(IndexPath(0, 3, 1))
    ranges.add(IndexPath(0, 1))
    return ranges


def test_index_ranges_shift_rekeys_descendants():
    ranges = _sample()
    ranges.shift(IndexPath(0), 2, 1)
    assert list(ranges) == [IndexPath(0, 1), IndexPath(0, 4), IndexPath(0, 4, 1)]


def test_index_ranges_negative_shift_drops_removed_subtree():
    ranges = _sample()
    ranges.shift(IndexPath(0), 3, -1)
    assert list(ranges) == [IndexPath(0, 1)]


def test_index_ranges_discard_window():
    ranges = IndexRanges()
    for path in (IndexPath(0, 1), IndexPath(0, 2), IndexPath(0, 2, 0), IndexPath(0, 5)):
        ranges.add(path)
    ranges.discard_window(IndexPath(0), IndexRange(1, 2))
    assert list(ranges) == [IndexPath(0, 5)]
