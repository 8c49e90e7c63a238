"""Tests for topology finalization."""

import pytest

from contourjoin.config import JoinConfig, UnresolvedPolicy
from contourjoin.core.endpoints import EndpointIndex
from contourjoin.core.finalizer import (
    JoinResult,
    TopologyFinalizer,
    drop_seam_vertices,
    reverse_closed,
    validate_closed,
)
from contourjoin.core.geometry import doubled_signed_area
from contourjoin.core.merger import FragmentMerger, MergeOutcome
from contourjoin.core.store import PackedContourStore
from contourjoin.domain import DefectReason, Point, WindingDirection
from contourjoin.exceptions import DegenerateGeometryError


def pts(*coords: tuple[int, int]) -> list[Point]:
    return [Point(x, y) for x, y in coords]


def finalize(store: PackedContourStore, config: JoinConfig | None = None) -> JoinResult:
    """Merge a store and finalize it."""
    index = EndpointIndex.build(store, (config or JoinConfig()).tolerance.as_tuple())
    outcome = FragmentMerger(store, index).run()
    return TopologyFinalizer(config).finalize(store, outcome)


OUTER_CCW = pts((0, 0), (10, 0), (10, 10), (0, 10))
HOLE_CCW = pts((2, 2), (8, 2), (8, 8), (2, 8))
ISLAND_CCW = pts((4, 4), (6, 4), (6, 6), (4, 6))


class TestOrientation:
    """Tests for the winding convention."""

    def test_outer_keeps_ccw(self) -> None:
        """Test that a correctly wound outer boundary is untouched."""
        store = PackedContourStore()
        store.append(OUTER_CCW, label=1)

        result = finalize(store)

        assert list(result.store.points_of(0)) == OUTER_CCW
        assert result.windings() == [WindingDirection.COUNTER_CLOCKWISE]

    def test_hole_is_reversed(self) -> None:
        """Test that a hole gets the opposite winding, keeping its start."""
        store = PackedContourStore()
        store.append(OUTER_CCW, label=1)
        store.append(HOLE_CCW, label=1)

        result = finalize(store)

        assert list(result.store.points_of(1)) == pts((2, 2), (2, 8), (8, 8), (8, 2))
        assert result.windings() == [
            WindingDirection.COUNTER_CLOCKWISE,
            WindingDirection.CLOCKWISE,
        ]

    def test_island_in_hole_is_outer(self) -> None:
        """Test nesting parity two levels deep."""
        store = PackedContourStore()
        store.append(list(reversed(OUTER_CCW)), label=1)
        store.append(HOLE_CCW, label=1)
        store.append(list(reversed(ISLAND_CCW)), label=1)

        result = finalize(store)

        assert result.windings() == [
            WindingDirection.COUNTER_CLOCKWISE,
            WindingDirection.CLOCKWISE,
            WindingDirection.COUNTER_CLOCKWISE,
        ]

    def test_nesting_is_per_label(self) -> None:
        """Test that a region of another label inside is its own outer."""
        store = PackedContourStore()
        store.append(OUTER_CCW, label=1)
        store.append(HOLE_CCW, label=2)

        result = finalize(store)

        assert result.windings() == [
            WindingDirection.COUNTER_CLOCKWISE,
            WindingDirection.COUNTER_CLOCKWISE,
        ]

    def test_clockwise_outer_convention(self) -> None:
        """Test the configurable outer winding."""
        store = PackedContourStore()
        store.append(OUTER_CCW, label=1)
        store.append(HOLE_CCW, label=1)
        config = JoinConfig(outer_winding=WindingDirection.CLOCKWISE)

        result = finalize(store, config)

        assert result.windings() == [
            WindingDirection.CLOCKWISE,
            WindingDirection.COUNTER_CLOCKWISE,
        ]


class TestOutput:
    """Tests for result ordering and defects."""

    def test_untouched_then_merged_then_open(self) -> None:
        """Test the deterministic output order."""
        store = PackedContourStore()
        store.append(pts((20, 0), (21, 0), (20, 9)), label=3, closed=False)
        store.append(pts((0, 5), (0, 0), (5, 0)), label=1, closed=False)
        store.append(pts((30, 30), (31, 30), (31, 31)), label=2)
        store.append(pts((5, 0), (5, 5), (0, 5)), label=1, closed=False)

        result = finalize(store)

        assert [result.store.label(c) for c in result.store.contour_ids()] == [2, 1, 3]
        assert [result.store.is_closed(c) for c in result.store.contour_ids()] == [
            True,
            True,
            False,
        ]
        assert {d.contour_id for d in result.defects} == {2}
        assert all(d.reason is DefectReason.UNRESOLVED_ENDPOINT for d in result.defects)
        assert result.splices == 1
        assert result.closures == 1

    def test_merged_contour_starts_at_min_vertex(self) -> None:
        """Test that merged contours start at their lowest (y, x) vertex."""
        store = PackedContourStore()
        store.append(pts((0, 5), (0, 0), (5, 0)), label=1, closed=False)
        store.append(pts((5, 0), (5, 5), (0, 5)), label=1, closed=False)

        result = finalize(store)

        assert list(result.store.points_of(0)) == pts((0, 0), (5, 0), (5, 5), (0, 5))

    def test_degenerate_merge_is_defect(self) -> None:
        """Test that a merge collapsing to a line is rejected."""
        store = PackedContourStore()
        store.append(pts((0, 0), (5, 0)), label=1, closed=False)
        store.append(pts((5, 0), (0, 0)), label=1, closed=False)

        result = finalize(store)

        assert result.store.number_of_contours == 0
        assert len(result.defects) == 1
        assert result.defects[0].reason is DefectReason.DEGENERATE_GEOMETRY
        assert result.has_defects

    def test_discard_policy(self) -> None:
        """Test that unresolved fragments can be dropped."""
        store = PackedContourStore()
        store.append(pts((0, 0), (5, 0)), label=1, closed=False)
        store.append(pts((30, 30), (31, 30), (31, 31)), label=2)
        config = JoinConfig(unresolved_policy=UnresolvedPolicy.DISCARD)

        result = finalize(store, config)

        assert result.store.number_of_contours == 1
        assert result.discarded == 1
        assert result.defects == []

    def test_result_store_is_frozen(self) -> None:
        store = PackedContourStore()
        store.append(OUTER_CCW, label=1)

        result = TopologyFinalizer().finalize(store, MergeOutcome())

        assert result.store.frozen

    def test_drop_seam_vertices_option(self) -> None:
        """Test that straight junction vertices can be removed."""
        store = PackedContourStore()
        store.append(pts((0, 5), (0, 0), (5, 0)), label=1, closed=False)
        store.append(pts((5, 0), (10, 0), (10, 5), (5, 5), (0, 5)), label=1, closed=False)
        config = JoinConfig(drop_seam_vertices=True)

        result = finalize(store, config)

        # (5, 0) was a junction; (5, 5) is straight too but was traced
        assert list(result.store.points_of(0)) == pts(
            (0, 0), (10, 0), (10, 5), (5, 5), (0, 5)
        )


class TestHelpers:
    """Tests for finalizer helper functions."""

    def test_drop_seam_vertices_only_junctions(self) -> None:
        """Test that collinear vertices not at junctions are kept."""
        points = pts((0, 0), (5, 0), (10, 0), (10, 5), (0, 5))

        assert drop_seam_vertices(points, [False, True, False, False, False]) == pts(
            (0, 0), (10, 0), (10, 5), (0, 5)
        )
        assert drop_seam_vertices(points, [False] * 5) == points

    def test_drop_seam_vertices_keeps_corners(self) -> None:
        points = pts((0, 0), (5, 0), (5, 5))
        assert drop_seam_vertices(points, [True, True, True]) == points

    def test_validate_closed_duplicate(self) -> None:
        with pytest.raises(DegenerateGeometryError):
            validate_closed(0, pts((0, 0), (5, 0), (5, 0), (5, 5)))

    def test_validate_closed_wraparound_duplicate(self) -> None:
        """Test that a last vertex equal to the first is rejected."""
        with pytest.raises(DegenerateGeometryError):
            validate_closed(0, pts((0, 0), (5, 0), (5, 5), (0, 0)))

    def test_validate_closed_zero_area(self) -> None:
        with pytest.raises(DegenerateGeometryError) as exc_info:
            validate_closed(7, pts((0, 0), (5, 0), (9, 0)))
        assert exc_info.value.contour_id == 7

    def test_validate_closed_accepts_square(self) -> None:
        validate_closed(0, OUTER_CCW)

    def test_reverse_closed_keeps_start(self) -> None:
        """Test that reversal only flips direction."""
        reversed_points = reverse_closed(OUTER_CCW)
        assert reversed_points[0] == OUTER_CCW[0]
        assert doubled_signed_area(reversed_points) == -doubled_signed_area(OUTER_CCW)
