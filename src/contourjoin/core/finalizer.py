"""Topology finalization after merging.

This module turns the working store left by the merger into the result of a
join:
- Merged contours are validated (no repeated consecutive vertices, non-zero
  area); failures become defects and are excluded
- Merged contours are rotated to start at their minimum (y, x) vertex
- Every closed contour is classified as outer boundary or hole by nesting
  parity among closed contours of the same label and layer, then oriented
  to the configured winding convention
- The store is compacted in a deterministic order: untouched closed input
  contours, merged contours by completion, then open defects
"""

from collections import defaultdict
from dataclasses import dataclass, field

import structlog

from contourjoin.config import JoinConfig, UnresolvedPolicy
from contourjoin.core.geometry import (
    bbox_contains,
    bounding_box,
    doubled_signed_area,
    find_duplicate_consecutive,
    interior_probe,
    is_straight_through,
    point_in_polygon,
    rotate_to_min,
)
from contourjoin.core.merger import MergeOutcome
from contourjoin.core.store import PackedContourStore
from contourjoin.domain import Defect, DefectReason, Point, WindingDirection
from contourjoin.exceptions import DegenerateGeometryError

logger = structlog.get_logger(__name__)


@dataclass
class JoinResult:
    """Finalized contours plus everything that could not be resolved.

    Attributes:
        store: Frozen result store (closed contours, then open defects)
        defects: Unresolved endpoints and rejected contours
        splices: Two-fragment splices performed
        closures: Fragments closed onto themselves
        seams: Shared seams cut out of closed pieces
        discarded: Unresolved fragments dropped under the discard policy
    """

    store: PackedContourStore
    defects: list[Defect] = field(default_factory=list)
    splices: int = 0
    closures: int = 0
    seams: int = 0
    discarded: int = 0

    @property
    def has_defects(self) -> bool:
        return len(self.defects) > 0

    def windings(self) -> list[WindingDirection | None]:
        """Winding of every result contour (None for open defects)."""
        return [
            WindingDirection.of_area(doubled_signed_area(pts))
            if self.store.is_closed(cid)
            else None
            for cid, pts in self.store
        ]


def drop_seam_vertices(points: list[Point], junctions: list[bool]) -> list[Point]:
    """Remove junction vertices lying straight between their neighbours.

    Only vertices created by splicing are candidates; every other vertex
    is kept as traced.
    """
    pts = list(points)
    flags = list(junctions)
    changed = True
    while changed and len(pts) > 3:
        changed = False
        for i in range(len(pts)):
            if flags[i] and is_straight_through(pts[i - 1], pts[i], pts[(i + 1) % len(pts)]):
                del pts[i]
                del flags[i]
                changed = True
                break
    return pts


def validate_closed(contour_id: int, points: list[Point]) -> None:
    """Check a closed contour for splice damage.

    Raises:
        DegenerateGeometryError: On fewer than 3 vertices, a vertex repeated
            consecutively, or zero enclosed area
    """
    if len(points) < 3:
        raise DegenerateGeometryError(contour_id, f"only {len(points)} vertices")
    duplicate = find_duplicate_consecutive(points)
    if duplicate is not None:
        raise DegenerateGeometryError(
            contour_id, f"vertex {points[duplicate].to_tuple()} repeated at index {duplicate}"
        )
    if doubled_signed_area(points) == 0:
        raise DegenerateGeometryError(contour_id, "zero enclosed area")


def reverse_closed(points: list[Point]) -> list[Point]:
    """Reverse traversal of a closed contour, keeping its start vertex."""
    return points[:1] + points[:0:-1]


@dataclass
class _Closed:
    contour_id: int
    label: int
    layer: int
    points: list[Point]
    bbox: tuple[int, int, int, int] = (0, 0, 0, 0)
    area2: int = 0


class TopologyFinalizer:
    """Validates, orients and compacts the merged contour set.

    Args:
        config: Join configuration (winding convention, unresolved policy,
            seam vertex removal)
    """

    def __init__(self, config: JoinConfig | None = None) -> None:
        self.config = config or JoinConfig()

    def finalize(self, store: PackedContourStore, outcome: MergeOutcome) -> JoinResult:
        """Build the result store and defect list.

        Args:
            store: Working store after merging
            outcome: Merger outcome

        Returns:
            JoinResult with a frozen store
        """
        defects: list[Defect] = []

        untouched: list[_Closed] = []
        for cid in store.contour_ids():
            rec = store.record(cid)
            if rec.closed and not rec.merged:
                untouched.append(
                    _Closed(cid, rec.label, rec.layer, list(store.points_of(cid)))
                )

        merged: list[_Closed] = []
        for cid in outcome.completed:
            rec = store.record(cid)
            points = list(store.points_of(cid))
            if self.config.drop_seam_vertices:
                points = drop_seam_vertices(points, store.junction_flags(cid))
            try:
                validate_closed(cid, points)
            except DegenerateGeometryError as e:
                logger.warning(
                    "Dropping degenerate contour",
                    contour=cid,
                    label=rec.label,
                    reason=e.reason,
                )
                defects.append(
                    Defect(
                        contour_id=cid,
                        point=points[0],
                        reason=DefectReason.DEGENERATE_GEOMETRY,
                        label=rec.label,
                        frame_id=rec.frame_id,
                    )
                )
                continue
            merged.append(_Closed(cid, rec.label, rec.layer, rotate_to_min(points)))

        self._orient(untouched + merged)

        result = PackedContourStore()
        for item in untouched + merged:
            rec = store.record(item.contour_id)
            result.append(item.points, rec.label, True, rec.frame_id, rec.layer)

        discarded = 0
        unresolved_by_contour: dict[int, list[tuple[Point, DefectReason, int | None]]] = (
            defaultdict(list)
        )
        for endpoint, reason in outcome.unresolved:
            unresolved_by_contour[endpoint.contour_id].append(
                (endpoint.point, reason, endpoint.frame_id)
            )

        for cid in store.open_ids():
            rec = store.record(cid)
            if self.config.unresolved_policy is UnresolvedPolicy.DISCARD:
                logger.info(
                    "Discarding unresolved fragment",
                    contour=cid,
                    label=rec.label,
                    points=rec.length,
                )
                discarded += 1
                continue
            new_id = result.append(store.points_of(cid), rec.label, False, rec.frame_id, rec.layer)
            for point, reason, frame_id in unresolved_by_contour.get(cid, []):
                logger.warning(
                    "Unresolved endpoint",
                    contour=new_id,
                    point=point.to_tuple(),
                    label=rec.label,
                    reason=reason.value,
                )
                defects.append(Defect(new_id, point, reason, rec.label, frame_id))

        result.freeze()
        return JoinResult(
            store=result,
            defects=defects,
            splices=outcome.splices,
            closures=outcome.closures,
            discarded=discarded,
        )

    def _orient(self, contours: list[_Closed]) -> None:
        """Apply the winding convention in place, using nesting parity."""
        groups: dict[tuple[int, int], list[_Closed]] = defaultdict(list)
        for item in contours:
            item.bbox = bounding_box(item.points)
            item.area2 = doubled_signed_area(item.points)
            groups[(item.label, item.layer)].append(item)

        outer = self.config.outer_winding
        for group in groups.values():
            for item in group:
                depth = self._nesting_depth(item, group)
                wanted = outer if depth % 2 == 0 else outer.opposite()
                if item.area2 != 0 and WindingDirection.of_area(item.area2) is not wanted:
                    item.points = reverse_closed(item.points)
                    item.area2 = -item.area2

    @staticmethod
    def _nesting_depth(item: _Closed, group: list[_Closed]) -> int:
        x, y = interior_probe(item.points)
        depth = 0
        for other in group:
            if other is item or abs(other.area2) <= abs(item.area2):
                continue
            if not bbox_contains(other.bbox, item.bbox):
                continue
            if point_in_polygon(x, y, other.points):
                depth += 1
        return depth
