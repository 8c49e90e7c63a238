"""Spatial index of open-fragment endpoints.

Endpoints are bucketed on a grid whose cells are one unit wider than the
tolerance along each axis, so every endpoint within tolerance of a query lies
in the query's cell or one of its 26 neighbours. Lookup cost therefore
depends on local density, not on the total number of open endpoints.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from itertools import product

from contourjoin.core.store import PackedContourStore
from contourjoin.domain import EndSelector, Frame, Point

CellKey = tuple[int, int, int]


@dataclass(eq=False)
class Endpoint:
    """One extremity of an open fragment.

    Endpoints compare by identity. ``contour_id`` and ``end`` follow the
    fragment through splices; ``point``, ``layer`` and ``frame_id`` describe
    where the endpoint was traced and never change.

    Attributes:
        point: Endpoint position
        contour_id: Fragment currently owning this end
        end: Which extremity of that fragment it is
        label: Region label of the fragment
        layer: Layer of the producing frame
        frame_id: Producing frame, if known
        consumed: True once the endpoint took part in a merge
    """

    point: Point
    contour_id: int
    end: EndSelector
    label: int
    layer: int = 0
    frame_id: int | None = None
    consumed: bool = False

    def sort_key(self) -> tuple[int, int]:
        return (self.contour_id, 0 if self.end is EndSelector.HEAD else 1)


class EndpointIndex:
    """Tolerance-based candidate lookup over unconsumed endpoints.

    Args:
        tolerance: (dx, dy, dz) maximum per-axis distance for a match
        frames: Frame placements used for the adjacency tie-break
    """

    def __init__(
        self,
        tolerance: tuple[int, int, int] = (0, 0, 0),
        frames: Mapping[int, Frame] | None = None,
    ) -> None:
        if any(t < 0 for t in tolerance):
            raise ValueError(f"Tolerances must be non-negative, got {tolerance}")
        self.tolerance = tolerance
        self._frames = dict(frames) if frames else {}
        self._cells: dict[CellKey, list[Endpoint]] = {}
        self._size = 0

    @classmethod
    def build(
        cls,
        store: PackedContourStore,
        tolerance: tuple[int, int, int] = (0, 0, 0),
        frames: Mapping[int, Frame] | None = None,
    ) -> "EndpointIndex":
        """Index both ends of every live open fragment in a store."""
        index = cls(tolerance, frames)
        for cid in store.open_ids():
            rec = store.record(cid)
            for end in (EndSelector.HEAD, EndSelector.TAIL):
                index.add(
                    Endpoint(
                        point=store.end_point(cid, end),
                        contour_id=cid,
                        end=end,
                        label=rec.label,
                        layer=rec.layer,
                        frame_id=rec.frame_id,
                    )
                )
        return index

    def _cell(self, point: Point, layer: int) -> CellKey:
        dx, dy, dz = self.tolerance
        return (point.x // (dx + 1), point.y // (dy + 1), layer // (dz + 1))

    def add(self, endpoint: Endpoint) -> None:
        """Insert an unconsumed endpoint."""
        endpoint.consumed = False
        self._cells.setdefault(self._cell(endpoint.point, endpoint.layer), []).append(endpoint)
        self._size += 1

    def consume(self, endpoint: Endpoint) -> None:
        """Remove an endpoint that took part in a merge."""
        key = self._cell(endpoint.point, endpoint.layer)
        bucket = self._cells.get(key, [])
        for i, item in enumerate(bucket):
            if item is endpoint:
                del bucket[i]
                break
        else:
            raise KeyError(f"Endpoint {endpoint.point.to_tuple()} is not indexed")
        if not bucket:
            del self._cells[key]
        endpoint.consumed = True
        self._size -= 1

    def within_tolerance(self, a: Endpoint, b: Endpoint) -> bool:
        """Check the per-axis tolerance between two endpoints."""
        dx, dy, dz = self.tolerance
        return (
            abs(a.point.x - b.point.x) <= dx
            and abs(a.point.y - b.point.y) <= dy
            and abs(a.layer - b.layer) <= dz
        )

    def _nearby(self, endpoint: Endpoint) -> Iterator[Endpoint]:
        cx, cy, cz = self._cell(endpoint.point, endpoint.layer)
        for ox, oy, oz in product((-1, 0, 1), repeat=3):
            for other in self._cells.get((cx + ox, cy + oy, cz + oz), ()):
                if other is not endpoint and self.within_tolerance(endpoint, other):
                    yield other

    def _adjacent(self, a: Endpoint, b: Endpoint) -> bool:
        if a.frame_id is None or b.frame_id is None:
            return False
        frame_a = self._frames.get(a.frame_id)
        frame_b = self._frames.get(b.frame_id)
        if frame_a is None or frame_b is None:
            return False
        return frame_a.shares_border_with(frame_b)

    def _rank(self, endpoint: Endpoint, other: Endpoint) -> tuple[int, int, int, int, int, int]:
        p, q = endpoint.point, other.point
        distance2 = (p.x - q.x) ** 2 + (p.y - q.y) ** 2 + (endpoint.layer - other.layer) ** 2
        return (
            distance2,
            # the fragment's own other end loses ties against a splice
            1 if other.contour_id == endpoint.contour_id else 0,
            0 if self._adjacent(endpoint, other) else 1,
            0 if other.end is not endpoint.end else 1,
            *other.sort_key(),
        )

    def candidates(self, endpoint: Endpoint, include_own: bool = False) -> list[Endpoint]:
        """Matching endpoints with the same label, best first.

        Ranking: Euclidean distance, then splice before self-closing, then
        frames sharing a border, then complementary ends (tail to head), then
        ascending contour id.

        Args:
            endpoint: Endpoint looking for a partner
            include_own: Also offer the other end of the same fragment
        """
        found = [
            other
            for other in self._nearby(endpoint)
            if other.label == endpoint.label
            and (include_own or other.contour_id != endpoint.contour_id)
        ]
        found.sort(key=lambda other: self._rank(endpoint, other))
        return found

    def best(self, endpoint: Endpoint, include_own: bool = False) -> Endpoint | None:
        """The top-ranked candidate, or None."""
        found = self.candidates(endpoint, include_own)
        return found[0] if found else None

    def nearby_other_labels(self, endpoint: Endpoint) -> bool:
        """Check whether endpoints with a different label lie within tolerance."""
        return any(other.label != endpoint.label for other in self._nearby(endpoint))

    def unconsumed(self) -> list[Endpoint]:
        """All indexed endpoints in (contour id, head, tail) order."""
        return sorted(self, key=Endpoint.sort_key)

    def __iter__(self) -> Iterator[Endpoint]:
        for bucket in self._cells.values():
            yield from bucket

    def __len__(self) -> int:
        return self._size
