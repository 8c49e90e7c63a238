"""Tests for the packed contour store."""

import pytest

from contourjoin.core.store import PackedContourStore
from contourjoin.domain import EndSelector, Frame, Point, RawContour
from contourjoin.exceptions import InputInconsistencyError, StoreError


def pts(*coords: tuple[int, int]) -> list[Point]:
    return [Point(x, y) for x, y in coords]


@pytest.fixture
def store() -> PackedContourStore:
    """Store with one closed square and two open fragments."""
    s = PackedContourStore()
    s.append(pts((0, 0), (4, 0), (4, 4), (0, 4)), label=1)
    s.append(pts((0, 0), (1, 0), (2, 0)), label=2, closed=False)
    s.append(pts((2, 0), (2, 1)), label=2, closed=False)
    return s


class TestAppend:
    """Tests for building a store."""

    def test_ids_are_dense(self, store: PackedContourStore) -> None:
        """Test that ids follow append order."""
        assert store.contour_ids() == [0, 1, 2]
        assert store.open_ids() == [1, 2]
        assert len(store) == 3
        assert store.number_of_points == 9

    def test_points_and_metadata(self, store: PackedContourStore) -> None:
        """Test that points and metadata are kept as given."""
        assert list(store.points_of(1)) == pts((0, 0), (1, 0), (2, 0))
        assert store.label(0) == 1
        assert store.is_closed(0)
        assert not store.is_closed(1)
        assert store.head(1) == Point(0, 0)
        assert store.tail(1) == Point(2, 0)

    def test_open_fragment_needs_two_points(self) -> None:
        """Test that a single-point fragment is rejected."""
        with pytest.raises(InputInconsistencyError):
            PackedContourStore().append(pts((0, 0)), label=1, closed=False)

    def test_closed_contour_needs_three_points(self) -> None:
        """Test that a two-point closed contour is rejected."""
        with pytest.raises(InputInconsistencyError) as exc_info:
            PackedContourStore().append(pts((0, 0), (1, 0)), label=1)
        assert exc_info.value.contour_id == 0

    def test_from_frames_orders_by_frame_id(self) -> None:
        """Test that ids do not depend on mapping order."""
        first = RawContour(points=pts((5, 0), (5, 5)), label=1, closed=False)
        second = RawContour(points=pts((0, 0), (0, 5)), label=1, closed=False)
        frames = {
            1: Frame(frame_id=1, layer=3),
            2: Frame(frame_id=2, layer=0),
        }

        store = PackedContourStore.from_frames({2: [first], 1: [second]}, frames)

        assert store.head(0) == Point(0, 0)
        assert store.record(0).frame_id == 1
        assert store.record(0).layer == 3
        assert store.record(1).frame_id == 2

    def test_from_raw_without_frames(self) -> None:
        """Test that contours without a known frame get layer 0."""
        raw = [RawContour(points=pts((0, 0), (1, 0), (1, 1)), label=4, frame_id=9)]
        store = PackedContourStore.from_raw(raw)
        assert store.record(0).layer == 0
        assert store.record(0).frame_id == 9


class TestSplice:
    """Tests for splicing open fragments."""

    def test_tail_to_head(self) -> None:
        """Test the common case of a tail meeting a head."""
        store = PackedContourStore()
        a = store.append(pts((0, 0), (1, 0), (2, 0)), label=1, closed=False)
        b = store.append(pts((2, 0), (2, 1)), label=1, closed=False)

        survivor = store.splice(a, EndSelector.TAIL, b, EndSelector.HEAD)

        assert survivor == a
        assert list(store.points_of(a)) == pts((0, 0), (1, 0), (2, 0), (2, 1))
        assert not store.is_alive(b)
        assert store.contour_ids() == [a]
        assert store.record(a).parts == [a, b]
        assert store.record(a).merged

    def test_tail_to_tail_reverses_second(self) -> None:
        """Test that the absorbed fragment is reversed when needed."""
        store = PackedContourStore()
        a = store.append(pts((0, 0), (1, 0), (2, 0)), label=1, closed=False)
        b = store.append(pts((2, 1), (2, 0)), label=1, closed=False)

        store.splice(a, EndSelector.TAIL, b, EndSelector.TAIL)

        assert list(store.points_of(a)) == pts((0, 0), (1, 0), (2, 0), (2, 1))

    def test_head_to_head(self) -> None:
        """Test joining two heads."""
        store = PackedContourStore()
        a = store.append(pts((0, 0), (1, 0)), label=1, closed=False)
        b = store.append(pts((0, 0), (0, 1)), label=1, closed=False)

        store.splice(a, EndSelector.HEAD, b, EndSelector.HEAD)

        assert list(store.points_of(a)) == pts((0, 1), (0, 0), (1, 0))

    def test_head_to_tail(self) -> None:
        """Test joining a head to a tail."""
        store = PackedContourStore()
        a = store.append(pts((0, 0), (1, 0)), label=1, closed=False)
        b = store.append(pts((0, 1), (0, 0)), label=1, closed=False)

        store.splice(a, EndSelector.HEAD, b, EndSelector.TAIL)

        assert list(store.points_of(a)) == pts((0, 1), (0, 0), (1, 0))

    def test_point_count_drops_by_one(self, store: PackedContourStore) -> None:
        """Test that a splice removes exactly the duplicated vertex."""
        before = store.number_of_points
        store.splice(1, EndSelector.TAIL, 2, EndSelector.HEAD)
        assert store.number_of_points == before - 1

    def test_junction_is_tracked(self, store: PackedContourStore) -> None:
        """Test that the kept junction vertex is flagged."""
        store.splice(1, EndSelector.TAIL, 2, EndSelector.HEAD)
        assert store.junction_flags(1) == [False, False, True, False]
        assert store.is_junction(1, 2)

    def test_existing_view_is_unchanged(self, store: PackedContourStore) -> None:
        """Test that a view taken before a splice keeps the old contour."""
        view = store.points_of(1)
        store.splice(1, EndSelector.TAIL, 2, EndSelector.HEAD)
        assert list(view) == pts((0, 0), (1, 0), (2, 0))

    def test_repeated_splices_chain(self) -> None:
        """Test several splices on both ends of one survivor."""
        store = PackedContourStore()
        a = store.append(pts((1, 0), (2, 0)), label=1, closed=False)
        b = store.append(pts((2, 0), (3, 0)), label=1, closed=False)
        c = store.append(pts((1, 0), (0, 0)), label=1, closed=False)
        d = store.append(pts((4, 0), (3, 0)), label=1, closed=False)

        store.splice(a, EndSelector.TAIL, b, EndSelector.HEAD)
        store.splice(a, EndSelector.HEAD, c, EndSelector.HEAD)
        store.splice(a, EndSelector.TAIL, d, EndSelector.TAIL)

        assert list(store.points_of(a)) == pts((0, 0), (1, 0), (2, 0), (3, 0), (4, 0))
        assert store.points_of(a)[-2] == Point(3, 0)
        assert store.points_of(a)[1:3] == pts((1, 0), (2, 0))

    def test_long_chain_grows_at_both_ends(self) -> None:
        """Test a survivor absorbing many short fragments on either side."""
        store = PackedContourStore()
        a = store.append(pts((0, 0), (1, 0)), label=1, closed=False)
        for i in range(1, 40):
            b = store.append(pts((i, 0), (i + 1, 0)), label=1, closed=False)
            store.splice(a, EndSelector.TAIL, b, EndSelector.HEAD)
            c = store.append(pts((-i, 0), (1 - i, 0)), label=1, closed=False)
            store.splice(a, EndSelector.HEAD, c, EndSelector.TAIL)
        view = store.points_of(a)

        d = store.append(pts((41, 0), (40, 0)), label=1, closed=False)
        store.splice(a, EndSelector.TAIL, d, EndSelector.TAIL)

        assert list(store.points_of(a)) == [Point(x, 0) for x in range(-39, 42)]
        assert store.number_of_points == 81
        assert len(store.record(a).parts) == 80
        assert sum(store.junction_flags(a)) == 79
        assert len(view) == 80

    def test_short_survivor_absorbs_long_chain(self) -> None:
        """Test splicing a two-point survivor with a much longer fragment."""
        store = PackedContourStore()
        long = store.append(pts((1, 0), (2, 0)), label=1, closed=False)
        for i in range(2, 10):
            b = store.append(pts((i, 0), (i + 1, 0)), label=1, closed=False)
            store.splice(long, EndSelector.TAIL, b, EndSelector.HEAD)
        head = store.append(pts((0, 0), (1, 0)), label=1, closed=False)
        tail = store.append(pts((10, 0), (11, 0)), label=1, closed=False)

        store.splice(head, EndSelector.TAIL, long, EndSelector.HEAD)
        store.splice(tail, EndSelector.HEAD, head, EndSelector.TAIL)

        assert store.contour_ids() == [tail]
        assert list(store.points_of(tail)) == [Point(x, 0) for x in range(12)]
        assert store.record(tail).parts[0] == tail
        assert sum(store.junction_flags(tail)) == 10

    def test_cannot_splice_with_itself(self, store: PackedContourStore) -> None:
        """Test that closing goes through close()."""
        with pytest.raises(StoreError):
            store.splice(1, EndSelector.TAIL, 1, EndSelector.HEAD)

    def test_cannot_splice_closed(self, store: PackedContourStore) -> None:
        """Test that closed contours take no part in splicing."""
        with pytest.raises(StoreError):
            store.splice(0, EndSelector.TAIL, 1, EndSelector.HEAD)

    def test_cannot_use_absorbed_contour(self, store: PackedContourStore) -> None:
        """Test that tombstoned ids are rejected."""
        store.splice(1, EndSelector.TAIL, 2, EndSelector.HEAD)
        with pytest.raises(StoreError):
            store.points_of(2)

    def test_unknown_id(self, store: PackedContourStore) -> None:
        with pytest.raises(StoreError):
            store.record(42)


class TestClose:
    """Tests for closing fragments."""

    def test_close_drops_duplicate_tail(self) -> None:
        """Test that the repeated head vertex is removed."""
        store = PackedContourStore()
        cid = store.append(pts((0, 0), (3, 0), (3, 3), (0, 0)), label=1, closed=False)

        store.close(cid)

        assert store.is_closed(cid)
        assert list(store.points_of(cid)) == pts((0, 0), (3, 0), (3, 3))
        assert store.is_junction(cid, 0)
        assert store.open_ids() == []

    def test_close_within_tolerance(self) -> None:
        """Test closing when head and tail only nearly coincide."""
        store = PackedContourStore()
        cid = store.append(pts((0, 0), (3, 0), (3, 3), (1, 0)), label=1, closed=False)

        store.close(cid, tolerance=(1, 0))

        assert list(store.points_of(cid)) == pts((0, 0), (3, 0), (3, 3))

    def test_close_rejects_distant_ends(self) -> None:
        """Test that a fragment with distant ends cannot be closed."""
        store = PackedContourStore()
        cid = store.append(pts((0, 0), (3, 0), (3, 3)), label=1, closed=False)
        with pytest.raises(StoreError):
            store.close(cid)

    def test_close_rejects_closed(self, store: PackedContourStore) -> None:
        with pytest.raises(StoreError):
            store.close(0)


class TestCopyAndCompact:
    """Tests for copying, compacting and freezing."""

    def test_copy_is_independent(self, store: PackedContourStore) -> None:
        """Test that splicing a copy leaves the original alone."""
        other = store.copy()
        other.splice(1, EndSelector.TAIL, 2, EndSelector.HEAD)

        assert store.contour_ids() == [0, 1, 2]
        assert list(store.points_of(1)) == pts((0, 0), (1, 0), (2, 0))
        assert other.contour_ids() == [0, 1]

    def test_compact_drops_tombstones(self, store: PackedContourStore) -> None:
        """Test that compacted ids are contiguous."""
        store.splice(1, EndSelector.TAIL, 2, EndSelector.HEAD)
        compacted = store.compact()

        assert compacted.contour_ids() == [0, 1]
        assert compacted.contour_ids(alive_only=False) == [0, 1]
        assert list(compacted.points_of(1)) == pts((0, 0), (1, 0), (2, 0), (2, 1))
        assert compacted.number_of_points == store.number_of_points

    def test_compact_with_order(self, store: PackedContourStore) -> None:
        """Test that compact follows the requested order."""
        compacted = store.compact([2, 0])
        assert compacted.head(0) == Point(2, 0)
        assert compacted.is_closed(1)
        assert len(compacted) == 2

    def test_frozen_store_rejects_mutation(self, store: PackedContourStore) -> None:
        """Test that a finalized store is read-only."""
        store.freeze()
        assert store.frozen
        with pytest.raises(StoreError):
            store.append(pts((0, 0), (1, 0)), label=1, closed=False)
        with pytest.raises(StoreError):
            store.splice(1, EndSelector.TAIL, 2, EndSelector.HEAD)

    def test_to_dict_and_back(self, store: PackedContourStore) -> None:
        """Test the transport format keeps contours and layers."""
        data = store.to_dict()
        restored = PackedContourStore.from_dict(data)

        assert [list(p) for _, p in restored] == [list(p) for _, p in store]
        assert [restored.is_closed(c) for c in restored.contour_ids()] == [True, False, False]
        assert data["contours"][0]["layer"] == 0

    def test_to_raw_contours(self, store: PackedContourStore) -> None:
        raw = store.to_raw_contours()
        assert [c.closed for c in raw] == [True, False, False]
        assert raw[2].points == pts((2, 0), (2, 1))

    def test_iteration_yields_ids_and_points(self, store: PackedContourStore) -> None:
        ids = [cid for cid, _ in store]
        assert ids == [0, 1, 2]
