"""Frame (tile) placement in the global coordinate space."""

from dataclasses import dataclass
from typing import Any

from contourjoin.domain.contour import Point


@dataclass(frozen=True)
class Frame:
    """A rectangular sub-region of the label map that was traced on its own.

    Bounds are optional; without them the frame takes no part in adjacency
    tie-breaks or placement validation.

    Attributes:
        frame_id: Identifier used by contours to name their frame
        x: Left edge in global coordinates
        y: Top edge in global coordinates
        width: Width in grid units
        height: Height in grid units
        layer: Discrete third coordinate (stacked frame layers)
    """

    frame_id: int
    x: int | None = None
    y: int | None = None
    width: int | None = None
    height: int | None = None
    layer: int = 0

    @property
    def has_bounds(self) -> bool:
        return None not in (self.x, self.y, self.width, self.height)

    @property
    def max_x(self) -> int:
        assert self.x is not None and self.width is not None
        return self.x + self.width

    @property
    def max_y(self) -> int:
        assert self.y is not None and self.height is not None
        return self.y + self.height

    def contains(self, point: Point, slack: int = 0) -> bool:
        """Check whether a point lies inside the frame or on its border.

        Args:
            point: Point in global coordinates
            slack: Extra margin allowed on every side

        Returns:
            True if inside (or no bounds are known)
        """
        if not self.has_bounds:
            return True
        assert self.x is not None and self.y is not None
        return (
            self.x - slack <= point.x <= self.max_x + slack
            and self.y - slack <= point.y <= self.max_y + slack
        )

    def on_border(self, point: Point, slack_x: int = 0, slack_y: int = 0) -> bool:
        """Check whether a point lies on the frame border (within slack)."""
        if not self.has_bounds:
            return True
        assert self.x is not None and self.y is not None
        return (
            abs(point.x - self.x) <= slack_x
            or abs(point.x - self.max_x) <= slack_x
            or abs(point.y - self.y) <= slack_y
            or abs(point.y - self.max_y) <= slack_y
        )

    def shares_border_with(self, other: "Frame") -> bool:
        """Check whether two frames share a border segment of positive length.

        Frames touching at a single corner are not adjacent.
        """
        if not (self.has_bounds and other.has_bounds) or self.layer != other.layer:
            return False
        assert self.x is not None and self.y is not None
        assert other.x is not None and other.y is not None

        overlap_x = min(self.max_x, other.max_x) - max(self.x, other.x)
        overlap_y = min(self.max_y, other.max_y) - max(self.y, other.y)

        if self.max_x == other.x or other.max_x == self.x:
            return overlap_y > 0
        if self.max_y == other.y or other.max_y == self.y:
            return overlap_x > 0
        return False

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.frame_id,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "layer": self.layer,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Frame":
        """Deserialize from dictionary.

        Raises:
            ValueError: If a bound or id is not an integer
        """
        return cls(
            frame_id=int(data["id"]),
            x=_optional_int(data.get("x")),
            y=_optional_int(data.get("y")),
            width=_optional_int(data.get("width")),
            height=_optional_int(data.get("height")),
            layer=int(data.get("layer", 0)),
        )


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)
