import pytest
from sequence import Sequence


class TestDropping:
    """Test rest, drop and drop_while"""

    def test_rest(self):
        seq = Sequence.of([1, 2, 3]).rest()
        assert seq.to_list() == [2, 3]
        assert seq.to_list() == [2, 3], "Should be repeatedly consumable"

    def test_rest_with_start(self):
        assert Sequence.range().rest(3).take(3).to_list() == [3, 4, 5]

    def test_drop(self):
        seq = Sequence.of([1, 2, 3, 4, 5]).drop(3)
        assert seq.to_list() == [4, 5]
        assert seq.to_list() == [4, 5]

    def test_drop_more_than_length(self):
        assert Sequence.of([1, 2]).drop(5).to_list() == []

    def test_drop_while(self):
        seq = Sequence.of([1, 1, 1, 1, 1, 2, 3, 1, 5]).drop_while(lambda x: x == 1)
        assert seq.to_list() == [2, 3, 1, 5], "Only leading matches are dropped"
        assert seq.to_list() == [2, 3, 1, 5]

    def test_drop_while_everything(self):
        assert Sequence.of([1, 1]).drop_while(lambda x: x == 1).to_list() == []

    def test_drop_while_on_infinite_source(self):
        assert Sequence.range().drop_while(lambda x: x < 5).take(3).to_list() == [5, 6, 7]


class TestFiltering:
    """Test filter, remove, distinct, dedupe and compact"""

    def test_filter(self):
        seq = Sequence.of([1, 2, 3, 4, 5]).filter(lambda x: x % 2 == 1)
        assert seq.to_list() == [1, 3, 5]
        assert seq.to_list() == [1, 3, 5]

    def test_remove(self):
        seq = Sequence.of([1, 2, 3, 4, 5]).remove(lambda x: x % 2 == 0)
        assert seq.to_list() == [1, 3, 5]
        assert seq.to_list() == [1, 3, 5]

    def test_distinct(self):
        seq = Sequence.of([1, 2, 3, 1, 2, 3, 1, 2, 3]).distinct()
        assert seq.to_list() == [1, 2, 3]
        assert seq.to_list() == [1, 2, 3], "Seen-set must be fresh per traversal"

    def test_distinct_unhashable(self):
        assert Sequence.of([[1], [1], [2]]).distinct().to_list() == [[1], [2]]

    def test_dedupe(self):
        seq = Sequence.of([1, 1, 2, 2, 1]).dedupe()
        assert seq.to_list() == [1, 2, 1]
        assert seq.to_list() == [1, 2, 1]

    def test_dedupe_on_infinite_source(self):
        result = Sequence.of_items(1, 1, 2).cycle().dedupe().take(4).to_list()
        assert result == [1, 2, 1, 2], f"Unexpected result: {result}"

    def test_dedupe_keeps_leading_none(self):
        assert Sequence.of([None, None, 1]).dedupe().to_list() == [None, 1]

    def test_compact(self):
        seq = Sequence.range().take(5).compact()
        assert seq.to_list() == [1, 2, 3, 4]
        assert seq.to_list() == [1, 2, 3, 4]

    def test_compact_removes_all_falsy(self):
        seq = Sequence.of([0, "", None, False, [], "a", 1])
        assert seq.compact().to_list() == ["a", 1]

    def test_compact_void_only(self):
        seq = Sequence.of_items(None, 0, None, 1, None, 2, None, 3, 4, None).compact(True)
        assert seq.to_list() == [0, 1, 2, 3, 4]


class TestTaking:
    """Test take, take_while, take_last, take_nth, but_last and slice"""

    def test_take(self):
        seq = Sequence.of([1, 2, 3, 4, 5, 6, 7, 8, 9, 10]).take(5)
        assert seq.to_list() == [1, 2, 3, 4, 5]
        assert seq.to_list() == [1, 2, 3, 4, 5]

    def test_take_from_small_sequence(self):
        assert Sequence.of([1, 2, 3, 4]).take(5).to_list() == [1, 2, 3, 4]

    def test_take_from_empty_sequence(self):
        assert Sequence.of([]).take(5).to_list() == []

    def test_take_zero(self):
        assert Sequence.range().take(0).to_list() == []

    def test_take_while(self):
        seq = Sequence.of([1, 2, 3, 4, 5, 6, 7, 8, 9, 10]).take_while(lambda x: x <= 5)
        assert seq.to_list() == [1, 2, 3, 4, 5]
        assert seq.to_list() == [1, 2, 3, 4, 5]

    def test_take_while_on_infinite_source(self):
        assert Sequence.range().take_while(lambda x: x < 5).to_list() == [0, 1, 2, 3, 4]

    def test_take_last(self):
        seq = Sequence.of([1, 2, 3, 4, 5, 6, 7, 8, 9, 10]).take_last(5)
        assert seq.to_list() == [6, 7, 8, 9, 10]
        assert seq.to_list() == [6, 7, 8, 9, 10]

    def test_take_last_from_small_sequence(self):
        assert Sequence.of([1, 2, 3, 4]).take_last(5).to_list() == [1, 2, 3, 4]

    def test_take_last_from_empty_sequence(self):
        assert Sequence.of([]).take_last(5).to_list() == []

    def test_take_nth(self):
        seq = Sequence.of([1, 2, 3, 4, 5, 6, 7, 8, 9, 10]).take_nth(3)
        assert seq.to_list() == [1, 4, 7, 10]
        assert seq.to_list() == [1, 4, 7, 10]

    def test_take_nth_from_small_sequence(self):
        assert Sequence.of([1, 2, 3, 4]).take_nth(6).to_list() == [1]

    def test_take_nth_from_empty_sequence(self):
        assert Sequence.of([]).take_nth(5).to_list() == []

    def test_take_nth_on_infinite_source(self):
        assert Sequence.range().take_nth(3).take(4).to_list() == [0, 3, 6, 9]

    def test_but_last(self):
        seq = Sequence.range(1, 5).but_last()
        assert seq.to_list() == [1, 2, 3]
        assert seq.to_list() == [1, 2, 3]

    def test_but_last_of_empty_and_single(self):
        assert Sequence.of([]).but_last().to_list() == []
        assert Sequence.of([1]).but_last().to_list() == []

    def test_slice_open_ended(self):
        assert Sequence.range().slice(2).take(5).to_list() == [2, 3, 4, 5, 6]

    def test_slice_bounded(self):
        seq = Sequence.range().slice(2, 7)
        assert seq.to_list() == [2, 3, 4, 5, 6]
        assert seq.to_list() == [2, 3, 4, 5, 6]

    def test_slice_matches_list_slicing(self):
        data = list(range(10))
        for start, end in [(0, 3), (3, 3), (5, 2), (8, 20)]:
            assert Sequence.of(data).slice(start, end).to_list() == data[start:end]
