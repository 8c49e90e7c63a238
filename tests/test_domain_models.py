"""Tests for domain models to verify they work correctly."""

import pytest

from contourjoin.domain import (
    Defect,
    DefectReason,
    EndSelector,
    Frame,
    Point,
    RawContour,
    WindingDirection,
)


class TestPoint:
    """Tests for Point class."""

    def test_point_creation(self) -> None:
        """Test basic point creation."""
        p = Point(100, 200)
        assert p.x == 100
        assert p.y == 200

    def test_point_to_tuple(self) -> None:
        """Test point to tuple conversion."""
        assert Point(3, 4).to_tuple() == (3, 4)

    def test_point_from_list_coerces_ints(self) -> None:
        """Test that file values like 3.0 become integers."""
        p = Point.from_list([3.0, "4"])
        assert p == Point(3, 4)
        assert isinstance(p.x, int)

    def test_point_from_list_rejects_wrong_arity(self) -> None:
        """Test that a point needs exactly two coordinates."""
        with pytest.raises(ValueError):
            Point.from_list([1, 2, 3])

    def test_point_immutable(self) -> None:
        """Test that point is immutable."""
        p = Point(1, 2)
        with pytest.raises(AttributeError):
            p.x = 3  # type: ignore

    def test_point_hashable(self) -> None:
        """Test that equal points collapse in a set."""
        assert len({Point(1, 1), Point(1, 1), Point(2, 1)}) == 2


class TestWindingDirection:
    """Tests for WindingDirection enum."""

    def test_opposite(self) -> None:
        """Test that opposite flips the direction."""
        assert WindingDirection.CLOCKWISE.opposite() is WindingDirection.COUNTER_CLOCKWISE
        assert WindingDirection.COUNTER_CLOCKWISE.opposite() is WindingDirection.CLOCKWISE

    def test_of_area(self) -> None:
        """Test direction from the sign of the area."""
        assert WindingDirection.of_area(4) is WindingDirection.COUNTER_CLOCKWISE
        assert WindingDirection.of_area(-0.5) is WindingDirection.CLOCKWISE
        assert WindingDirection.of_area(0) is None

    def test_values(self) -> None:
        """Test the short names used on the command line and in files."""
        assert WindingDirection("ccw") is WindingDirection.COUNTER_CLOCKWISE
        assert WindingDirection("cw") is WindingDirection.CLOCKWISE


class TestEndSelector:
    """Tests for EndSelector enum."""

    def test_other(self) -> None:
        assert EndSelector.HEAD.other() is EndSelector.TAIL
        assert EndSelector.TAIL.other() is EndSelector.HEAD


class TestRawContour:
    """Tests for RawContour class."""

    def test_defaults(self) -> None:
        """Test that contours are closed and frameless by default."""
        contour = RawContour(points=[Point(0, 0), Point(1, 0), Point(1, 1)], label=3)
        assert contour.closed is True
        assert contour.frame_id is None

    def test_serialization(self) -> None:
        """Test contour serialization and deserialization."""
        contour = RawContour(
            points=[Point(0, 0), Point(5, 0)],
            label=7,
            closed=False,
            frame_id=2,
        )
        data = contour.to_dict()

        assert data == {
            "frame": 2,
            "label": 7,
            "closed": False,
            "points": [[0, 0], [5, 0]],
        }
        assert RawContour.from_dict(data) == contour

    def test_from_dict_defaults_to_closed(self) -> None:
        """Test that a missing closed flag means a closed contour."""
        contour = RawContour.from_dict({"label": 1, "points": [[0, 0], [1, 0], [1, 1]]})
        assert contour.closed is True
        assert contour.frame_id is None


class TestFrame:
    """Tests for Frame class."""

    def test_bounds(self) -> None:
        """Test bound properties."""
        frame = Frame(frame_id=0, x=10, y=20, width=5, height=4)
        assert frame.has_bounds
        assert frame.max_x == 15
        assert frame.max_y == 24

    def test_frame_without_bounds(self) -> None:
        """Test that a frame without bounds accepts everything."""
        frame = Frame(frame_id=0)
        assert not frame.has_bounds
        assert frame.contains(Point(-100, 100))
        assert frame.on_border(Point(3, 3))

    def test_contains(self) -> None:
        """Test containment including the border and slack."""
        frame = Frame(frame_id=0, x=0, y=0, width=5, height=5)
        assert frame.contains(Point(5, 5))
        assert not frame.contains(Point(6, 2))
        assert frame.contains(Point(6, 2), slack=1)

    def test_on_border(self) -> None:
        """Test border detection."""
        frame = Frame(frame_id=0, x=0, y=0, width=5, height=5)
        assert frame.on_border(Point(5, 2))
        assert frame.on_border(Point(2, 0))
        assert not frame.on_border(Point(2, 2))
        assert frame.on_border(Point(4, 2), slack_x=1)

    def test_shares_border_with_side_neighbour(self) -> None:
        """Test adjacency of frames sharing a side."""
        left = Frame(frame_id=0, x=0, y=0, width=5, height=5)
        right = Frame(frame_id=1, x=5, y=0, width=5, height=5)
        below = Frame(frame_id=2, x=0, y=5, width=5, height=5)
        assert left.shares_border_with(right)
        assert right.shares_border_with(left)
        assert left.shares_border_with(below)

    def test_corner_neighbour_is_not_adjacent(self) -> None:
        """Test that frames meeting at one corner are not adjacent."""
        a = Frame(frame_id=0, x=0, y=0, width=5, height=5)
        b = Frame(frame_id=1, x=5, y=5, width=5, height=5)
        assert not a.shares_border_with(b)

    def test_other_layer_is_not_adjacent(self) -> None:
        """Test that frames on different layers are never adjacent."""
        a = Frame(frame_id=0, x=0, y=0, width=5, height=5, layer=0)
        b = Frame(frame_id=1, x=5, y=0, width=5, height=5, layer=1)
        assert not a.shares_border_with(b)

    def test_serialization(self) -> None:
        """Test frame serialization and deserialization."""
        frame = Frame(frame_id=4, x=0, y=5, width=5, height=5, layer=2)
        data = frame.to_dict()
        assert data["id"] == 4
        assert Frame.from_dict(data) == frame


class TestDefect:
    """Tests for Defect class."""

    def test_serialization(self) -> None:
        """Test defect serialization uses the reason's string value."""
        defect = Defect(
            contour_id=3,
            point=Point(5, 2),
            reason=DefectReason.LABEL_MISMATCH,
            label=9,
            frame_id=1,
        )
        data = defect.to_dict()

        assert data == {
            "contour": 3,
            "point": [5, 2],
            "reason": "label_mismatch",
            "label": 9,
            "frame": 1,
        }
        assert Defect.from_dict(data) == defect

    def test_defect_immutable(self) -> None:
        """Test that defect is immutable."""
        defect = Defect(0, Point(0, 0), DefectReason.UNRESOLVED_ENDPOINT, 1)
        with pytest.raises(AttributeError):
            defect.label = 2  # type: ignore
