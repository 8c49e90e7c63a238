"""Core geometric types for contour representation.

This module defines the fundamental types handed over by a per-frame tracer:
- Point: An integer 2D point in global (whole-image) coordinates
- RawContour: One traced contour, closed or open, with its label and frame
- WindingDirection: Enum for contour winding direction
- EndSelector: Enum naming the two extremities of an open fragment
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class WindingDirection(Enum):
    """Contour winding direction.

    With the y axis pointing up, counter-clockwise contours have positive
    signed area and clockwise contours negative signed area. With the y axis
    pointing down (image rows) the visual sense flips but the sign does not,
    so the sign of the signed area is what the joiner relies on.
    """

    CLOCKWISE = "cw"
    COUNTER_CLOCKWISE = "ccw"

    def opposite(self) -> "WindingDirection":
        """Return the other winding direction."""
        if self is WindingDirection.CLOCKWISE:
            return WindingDirection.COUNTER_CLOCKWISE
        return WindingDirection.CLOCKWISE

    @classmethod
    def of_area(cls, area: float) -> "WindingDirection | None":
        """Winding direction for a signed area, or None for zero area."""
        if area > 0:
            return cls.COUNTER_CLOCKWISE
        if area < 0:
            return cls.CLOCKWISE
        return None


class EndSelector(Enum):
    """Which extremity of an open fragment an endpoint is."""

    HEAD = "head"
    TAIL = "tail"

    def other(self) -> "EndSelector":
        """Return the opposite extremity."""
        return EndSelector.TAIL if self is EndSelector.HEAD else EndSelector.HEAD


@dataclass(frozen=True, slots=True)
class Point:
    """A point on the integer grid of the whole image.

    Immutable and hashable for use in sets/dicts.

    Attributes:
        x: Column coordinate
        y: Row coordinate
    """

    x: int
    y: int

    def to_tuple(self) -> tuple[int, int]:
        """Convert to simple (x, y) tuple."""
        return (self.x, self.y)

    def to_list(self) -> list[int]:
        """Serialize to a two-element list, the file format's point shape."""
        return [self.x, self.y]

    @classmethod
    def from_list(cls, data: Iterable[int]) -> "Point":
        """Deserialize from an ``[x, y]`` pair.

        Args:
            data: Two integers

        Returns:
            Point instance
        """
        x, y = data
        return cls(int(x), int(y))


@dataclass
class RawContour:
    """A contour as produced by the per-frame tracer.

    Points must already be translated into global coordinates. For open
    fragments the first point is the head and the last point the tail, and
    both lie on the border of the producing frame.

    Attributes:
        points: Ordered contour vertices
        label: Identifier of the region bounded by this contour
        closed: False for a fragment awaiting join
        frame_id: Frame that produced the contour (None if unknown)
    """

    points: list[Point]
    label: int
    closed: bool = True
    frame_id: int | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC and files.

        Returns:
            Dictionary representation of the contour
        """
        return {
            "frame": self.frame_id,
            "label": self.label,
            "closed": self.closed,
            "points": [p.to_list() for p in self.points],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RawContour":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of a contour

        Returns:
            RawContour instance
        """
        return cls(
            points=[Point.from_list(p) for p in data["points"]],
            label=int(data["label"]),
            closed=bool(data.get("closed", True)),
            frame_id=data.get("frame"),
        )
