"""Defects reported by a join.

A defect is an endpoint or contour that could not be turned into a valid
closed contour. Defects are returned as data; they never abort a join.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from contourjoin.domain.contour import Point


class DefectReason(str, Enum):
    """Why a defect was recorded."""

    UNRESOLVED_ENDPOINT = "unresolved_endpoint"
    LABEL_MISMATCH = "label_mismatch"
    DEGENERATE_GEOMETRY = "degenerate_geometry"


@dataclass(frozen=True)
class Defect:
    """One unresolved endpoint or rejected contour.

    Attributes:
        contour_id: Id in the result store for open defects; id in the working
            store for degenerate contours, which are excluded from the result
        point: The remaining open end point (first vertex for degenerate contours)
        reason: Defect category
        label: Label of the affected contour
        frame_id: Frame the affected endpoint came from, if known
    """

    contour_id: int
    point: Point
    reason: DefectReason
    label: int
    frame_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "contour": self.contour_id,
            "point": self.point.to_list(),
            "reason": self.reason.value,
            "label": self.label,
            "frame": self.frame_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Defect":
        return cls(
            contour_id=int(data["contour"]),
            point=Point.from_list(data["point"]),
            reason=DefectReason(data["reason"]),
            label=int(data["label"]),
            frame_id=data.get("frame"),
        )
