"""Seam cutting for closed per-frame pieces.

A tracer that closes every contour inside its frame produces, for a region
crossing a frame border, one closed piece per frame. Two neighbouring pieces
run along the shared border in opposite directions. Cutting the overlapping
parts out of both pieces leaves open fragments whose endpoints sit at the cut
points; the fragment merger then splices them into the union outline.

Seams are detected exactly: edges must lie on the same line, run in opposite
directions and overlap over a positive length.
"""

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from math import gcd

import structlog

from contourjoin.core.store import PackedContourStore
from contourjoin.domain import Point

logger = structlog.get_logger(__name__)

LineKey = tuple[int, int, int]


@dataclass
class _Edge:
    """One non-degenerate polygon edge, parameterised along its line.

    ``step`` is the primitive lattice step from start to end and ``count``
    the number of steps, so the edge visits ``start + s * step`` for
    ``s in [0, count]``. ``t0``/``t1`` are positions along the shared line
    direction, comparable between edges with the same line key.
    """

    contour_id: int
    start: Point
    step: tuple[int, int]
    count: int
    forward: bool
    t0: int
    t1: int
    removed: list[tuple[int, int]] = field(default_factory=list)

    def s_of(self, t: int) -> int:
        """Step index of line position ``t`` on this edge."""
        return abs(t - self.t0) // self._norm()

    def _norm(self) -> int:
        return self.step[0] ** 2 + self.step[1] ** 2

    def point_at(self, s: int) -> Point:
        return Point(self.start.x + s * self.step[0], self.start.y + s * self.step[1])


@dataclass
class SeamCutResult:
    """Outcome of a seam cutting pass.

    Attributes:
        cut_contours: Ids of the closed pieces that were opened (now tombstoned)
        fragments: Ids of the open fragments appended in their place
        seams: Number of overlapping edge pairs found
    """

    cut_contours: list[int] = field(default_factory=list)
    fragments: list[int] = field(default_factory=list)
    seams: int = 0


def _make_edge(contour_id: int, p: Point, q: Point) -> tuple[LineKey, _Edge] | None:
    dx, dy = q.x - p.x, q.y - p.y
    if dx == 0 and dy == 0:
        return None
    g = gcd(abs(dx), abs(dy))
    ux, uy = dx // g, dy // g
    a, b = ux, uy
    forward = a > 0 or (a == 0 and b > 0)
    if not forward:
        a, b = -a, -b
    edge = _Edge(
        contour_id=contour_id,
        start=p,
        step=(ux, uy),
        count=g,
        forward=forward,
        t0=a * p.x + b * p.y,
        t1=a * q.x + b * q.y,
    )
    return (a, b, a * p.y - b * p.x), edge


def _merge_intervals(intervals: list[tuple[int, int]]) -> list[tuple[int, int]]:
    merged: list[tuple[int, int]] = []
    for lo, hi in sorted(intervals):
        if merged and lo <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], hi))
        else:
            merged.append((lo, hi))
    return merged


def _split_contour(
    points: Sequence[Point], edges: dict[int, _Edge]
) -> list[list[Point]] | None:
    """Split a closed contour into the runs of edges that were not removed.

    Returns:
        The open runs in contour order, or None if every edge was removed
    """
    vertices: list[Point] = []
    kept: list[bool] = []
    n = len(points)
    for i in range(n):
        edge = edges.get(i)
        if edge is None or not edge.removed:
            vertices.append(points[i])
            kept.append(True)
            continue
        removed = _merge_intervals(edge.removed)
        cuts = sorted({0, edge.count, *(s for iv in removed for s in iv)})
        for s_lo, s_hi in zip(cuts, cuts[1:]):
            vertices.append(edge.point_at(s_lo))
            kept.append(not any(lo <= s_lo and s_hi <= hi for lo, hi in removed))

    if not any(kept):
        return None

    m = len(vertices)
    start = next(j for j in range(m) if kept[j] and not kept[j - 1])
    runs: list[list[Point]] = []
    current: list[Point] = []
    for offset in range(m):
        j = (start + offset) % m
        if kept[j]:
            current.append(vertices[j])
        elif current:
            # the kept run ends where the removed edge begins
            current.append(vertices[j])
            runs.append(current)
            current = []
    return runs


class SeamCutter:
    """Opens closed pieces of the same label along the segments they share."""

    def cut(self, store: PackedContourStore) -> SeamCutResult:
        """Cut shared seams out of the closed contours of a store, in place.

        Closed contours with at least one seam are tombstoned and replaced by
        open fragments appended at the end of the store, in contour order.

        Args:
            store: Working store (mutated)

        Returns:
            SeamCutResult describing what was cut
        """
        result = SeamCutResult()
        groups: dict[tuple[int, int, LineKey], list[_Edge]] = defaultdict(list)
        edges_by_contour: dict[int, dict[int, _Edge]] = {}

        for cid in store.contour_ids():
            rec = store.record(cid)
            if not rec.closed:
                continue
            pts = list(store.points_of(cid))
            own: dict[int, _Edge] = {}
            for i in range(len(pts)):
                made = _make_edge(cid, pts[i], pts[(i + 1) % len(pts)])
                if made is None:
                    continue
                key, edge = made
                own[i] = edge
                groups[(rec.label, rec.layer, key)].append(edge)
            edges_by_contour[cid] = own

        touched: set[int] = set()
        for group in groups.values():
            if len(group) < 2:
                continue
            forward = [e for e in group if e.forward]
            backward = [e for e in group if not e.forward]
            for e in forward:
                for f in backward:
                    if e.contour_id == f.contour_id:
                        continue
                    lo = max(min(e.t0, e.t1), min(f.t0, f.t1))
                    hi = min(max(e.t0, e.t1), max(f.t0, f.t1))
                    if hi <= lo:
                        continue
                    for edge in (e, f):
                        s_a, s_b = edge.s_of(lo), edge.s_of(hi)
                        edge.removed.append((min(s_a, s_b), max(s_a, s_b)))
                    touched.update((e.contour_id, f.contour_id))
                    result.seams += 1

        for cid in sorted(touched):
            rec = store.record(cid)
            runs = _split_contour(list(store.points_of(cid)), edges_by_contour[cid])
            if runs is None:
                logger.warning("Contour fully covered by seams, left intact", contour=cid)
                continue
            store.discard(cid)
            result.cut_contours.append(cid)
            for run in runs:
                result.fragments.append(
                    store.append(run, rec.label, closed=False, frame_id=rec.frame_id, layer=rec.layer)
                )

        if result.seams:
            logger.debug(
                "Cut shared seams",
                seams=result.seams,
                contours=len(result.cut_contours),
                fragments=len(result.fragments),
            )
        return result
