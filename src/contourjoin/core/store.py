"""Packed contour store.

All contour vertices live in one append-only ``array('q')`` of interleaved
x, y coordinates (the arena). A contour is a metadata record plus a chain of
segments, each a ``(slot, length, reversed)`` view into the arena. Appending
a traced contour adds one segment. Splicing two contours concatenates their
segment chains without touching point data, and the absorbed record is
tombstoned. Points are copied again only once, when the store is compacted.

Because the arena never changes once written, a ``ContourPoints`` view taken
before a splice stays valid: it keeps showing the contour as it was.
"""

from array import array
from collections import deque
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any, overload

from contourjoin.domain import EndSelector, Frame, Point, RawContour
from contourjoin.exceptions import InputInconsistencyError, StoreError

Segment = tuple[int, int, bool]


@dataclass
class ContourRecord:
    """Metadata of one contour in the store.

    Attributes:
        segments: Chain of (first slot, length, reversed) arena views
        label: Region label
        closed: Closed loop or open fragment
        frame_id: Frame that produced the contour (survivor's frame after a splice)
        layer: Discrete third coordinate of the producing frame
        merged: True once the contour took part in a splice or self-closing
        alive: False once absorbed by a splice (tombstone)
        parts: Ids of the input contours that make up this contour
        junctions: Arena slots of vertices kept at splice junctions
    """

    segments: deque[Segment]
    label: int
    closed: bool
    frame_id: int | None = None
    layer: int = 0
    merged: bool = False
    alive: bool = True
    parts: list[int] = field(default_factory=list)
    junctions: set[int] = field(default_factory=set)

    @property
    def length(self) -> int:
        return sum(seg[1] for seg in self.segments)


def _segment_slots(segment: Segment) -> range:
    start, length, rev = segment
    if rev:
        return range(start + length - 1, start - 1, -1)
    return range(start, start + length)


def _first_slot(segments: deque[Segment]) -> int:
    start, length, rev = segments[0]
    return start + length - 1 if rev else start


def _last_slot(segments: deque[Segment]) -> int:
    start, length, rev = segments[-1]
    return start if rev else start + length - 1


def _reverse_chain(segments: deque[Segment]) -> deque[Segment]:
    return deque((start, length, not rev) for start, length, rev in reversed(segments))


def _drop_first(segments: deque[Segment]) -> None:
    """Remove the first vertex of a chain in place, dropping a segment left empty."""
    start, length, rev = segments.popleft()
    if length > 1:
        segments.appendleft((start, length - 1, True) if rev else (start + 1, length - 1, False))


def _drop_last(segments: deque[Segment]) -> None:
    """Remove the last vertex of a chain in place, dropping a segment left empty."""
    start, length, rev = segments.pop()
    if length > 1:
        segments.append((start + 1, length - 1, True) if rev else (start, length - 1, False))


def _concat(left: deque[Segment], right: deque[Segment]) -> deque[Segment]:
    """Join two chains by moving the shorter one onto the longer."""
    if len(left) >= len(right):
        left.extend(right)
        return left
    right.extendleft(reversed(left))
    return right


class ContourPoints(Sequence[Point]):
    """Lazy, read-only view of a contour's points.

    Indexing walks the segment chain; nothing is copied until a slice or
    ``list()`` asks for it.
    """

    __slots__ = ("_coords", "_segments", "_length")

    def __init__(self, coords: array, segments: Iterable[Segment]) -> None:
        self._coords = coords
        self._segments = tuple(segments)
        self._length = sum(seg[1] for seg in self._segments)

    def slots(self) -> Iterator[int]:
        """Iterate over the arena slots of the contour's vertices, in order."""
        for segment in self._segments:
            yield from _segment_slots(segment)

    def _point_at_slot(self, slot: int) -> Point:
        return Point(self._coords[2 * slot], self._coords[2 * slot + 1])

    def __len__(self) -> int:
        return self._length

    def __iter__(self) -> Iterator[Point]:
        for slot in self.slots():
            yield self._point_at_slot(slot)

    @overload
    def __getitem__(self, index: int) -> Point: ...

    @overload
    def __getitem__(self, index: slice) -> list[Point]: ...

    def __getitem__(self, index: int | slice) -> Point | list[Point]:
        if isinstance(index, slice):
            return list(self)[index]
        if index < 0:
            index += self._length
        if not 0 <= index < self._length:
            raise IndexError("contour point index out of range")
        for start, length, rev in self._segments:
            if index < length:
                return self._point_at_slot(start + length - 1 - index if rev else start + index)
            index -= length
        raise IndexError("contour point index out of range")

    def __repr__(self) -> str:
        return f"ContourPoints({[p.to_tuple() for p in self]})"


class PackedContourStore:
    """Arena-backed contour storage with in-place splicing.

    Contour ids are dense integers given in append order. Splicing keeps the
    first contour's id and tombstones the second. ``compact`` builds a fresh
    store with contiguous ids and drops tombstones.

    Example:
        store = PackedContourStore()
        a = store.append([Point(5, 1), Point(5, 5), Point(0, 5)], label=1, closed=False)
        b = store.append([Point(0, 5), Point(0, 0), Point(5, 0)], label=1, closed=False)
        store.splice(a, EndSelector.TAIL, b, EndSelector.HEAD)
    """

    def __init__(self) -> None:
        self._coords: array = array("q")
        self._records: list[ContourRecord] = []
        self._frozen = False

    # -- construction ---------------------------------------------------

    def append(
        self,
        points: Iterable[Point],
        label: int,
        closed: bool = True,
        frame_id: int | None = None,
        layer: int = 0,
    ) -> int:
        """Add a contour and return its id.

        Args:
            points: Ordered vertices; the head is first for open fragments
            label: Region label
            closed: False for an open fragment awaiting join
            frame_id: Producing frame, if known
            layer: Layer of the producing frame

        Returns:
            The new contour id

        Raises:
            InputInconsistencyError: If the contour has too few points
            StoreError: If the store is frozen
        """
        self._check_mutable()
        points = list(points)
        minimum = 3 if closed else 2
        if len(points) < minimum:
            kind = "closed contour" if closed else "open fragment"
            raise InputInconsistencyError(
                f"{kind} needs at least {minimum} points, got {len(points)}",
                contour_id=len(self._records),
            )

        slot = len(self._coords) // 2
        for p in points:
            self._coords.append(p.x)
            self._coords.append(p.y)

        contour_id = len(self._records)
        self._records.append(
            ContourRecord(
                segments=deque([(slot, len(points), False)]),
                label=label,
                closed=closed,
                frame_id=frame_id,
                layer=layer,
                parts=[contour_id],
            )
        )
        return contour_id

    @classmethod
    def from_raw(
        cls,
        contours: Iterable[RawContour],
        frames: Mapping[int, Frame] | None = None,
    ) -> "PackedContourStore":
        """Build a store from tracer output, in iteration order.

        The layer of each contour is taken from its frame when known.
        """
        store = cls()
        for raw in contours:
            layer = 0
            if frames is not None and raw.frame_id is not None and raw.frame_id in frames:
                layer = frames[raw.frame_id].layer
            store.append(raw.points, raw.label, raw.closed, raw.frame_id, layer)
        return store

    @classmethod
    def from_frames(
        cls,
        contours_by_frame: Mapping[int, Iterable[RawContour]],
        frames: Mapping[int, Frame] | None = None,
    ) -> "PackedContourStore":
        """Build a store from a frame id -> contours mapping.

        Frames are visited in ascending id order so that the resulting ids do
        not depend on mapping order. A contour's own ``frame_id`` is
        overridden by the mapping key.
        """
        ordered: list[RawContour] = []
        for frame_id in sorted(contours_by_frame):
            for raw in contours_by_frame[frame_id]:
                ordered.append(replace(raw, frame_id=frame_id))
        return cls.from_raw(ordered, frames)

    # -- queries --------------------------------------------------------

    def record(self, contour_id: int) -> ContourRecord:
        """Metadata record of a contour (treat as read-only)."""
        if contour_id < 0:
            raise StoreError(f"No contour with id {contour_id}")
        try:
            return self._records[contour_id]
        except IndexError:
            raise StoreError(f"No contour with id {contour_id}") from None

    def points_of(self, contour_id: int) -> ContourPoints:
        """Lazy view of a live contour's points."""
        rec = self._live(contour_id)
        return ContourPoints(self._coords, rec.segments)

    def end_point(self, contour_id: int, end: EndSelector) -> Point:
        """Head or tail point of a contour."""
        pts = self.points_of(contour_id)
        return pts[0] if end is EndSelector.HEAD else pts[-1]

    def head(self, contour_id: int) -> Point:
        return self.end_point(contour_id, EndSelector.HEAD)

    def tail(self, contour_id: int) -> Point:
        return self.end_point(contour_id, EndSelector.TAIL)

    def label(self, contour_id: int) -> int:
        return self.record(contour_id).label

    def is_closed(self, contour_id: int) -> bool:
        return self.record(contour_id).closed

    def is_alive(self, contour_id: int) -> bool:
        return self.record(contour_id).alive

    def is_junction(self, contour_id: int, index: int) -> bool:
        """Check whether the vertex at ``index`` was kept at a splice junction."""
        rec = self._live(contour_id)
        slots = list(ContourPoints(self._coords, rec.segments).slots())
        return slots[index] in rec.junctions

    def junction_flags(self, contour_id: int) -> list[bool]:
        """Per-vertex flags marking splice junction vertices."""
        rec = self._live(contour_id)
        return [
            slot in rec.junctions
            for slot in ContourPoints(self._coords, rec.segments).slots()
        ]

    def contour_ids(self, alive_only: bool = True) -> list[int]:
        """Ids in ascending order, skipping tombstones by default."""
        return [
            cid for cid, rec in enumerate(self._records) if rec.alive or not alive_only
        ]

    def open_ids(self) -> list[int]:
        """Ids of live open fragments in ascending order."""
        return [cid for cid, rec in enumerate(self._records) if rec.alive and not rec.closed]

    @property
    def number_of_contours(self) -> int:
        """Number of live contours."""
        return sum(1 for rec in self._records if rec.alive)

    @property
    def number_of_points(self) -> int:
        """Number of points across live contours."""
        return sum(rec.length for rec in self._records if rec.alive)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return self.number_of_contours

    def __iter__(self) -> Iterator[tuple[int, ContourPoints]]:
        for cid in self.contour_ids():
            yield cid, self.points_of(cid)

    # -- mutation -------------------------------------------------------

    def splice(
        self,
        a: int,
        end_a: EndSelector,
        b: int,
        end_b: EndSelector,
    ) -> int:
        """Concatenate contour ``b`` onto contour ``a`` at the matched ends.

        The matched end vertex of ``b`` is dropped; ``a``'s vertex is kept as
        the junction. ``b`` is reversed where needed so the result reads as
        one chain. ``b`` is tombstoned.

        Args:
            a: Surviving contour
            end_a: End of ``a`` being joined
            b: Contour absorbed into ``a``
            end_b: End of ``b`` being joined

        Returns:
            The surviving id (always ``a``)

        Raises:
            StoreError: On self-splice, closed or dead contours
        """
        self._check_mutable()
        if a == b:
            raise StoreError(f"Cannot splice contour {a} with itself; use close()")
        rec_a = self._live(a)
        rec_b = self._live(b)
        if rec_a.closed or rec_b.closed:
            raise StoreError(f"Cannot splice closed contours ({a}, {b})")

        chain_a = rec_a.segments
        chain_b = rec_b.segments

        if end_a is EndSelector.TAIL:
            # a ... a_tail | b continuing from its matched end
            if end_b is EndSelector.TAIL:
                chain_b = _reverse_chain(chain_b)
            junction = _last_slot(chain_a)
            _drop_first(chain_b)
            segments = _concat(chain_a, chain_b)
        else:
            # b leading into its matched end | a_head ... a
            if end_b is EndSelector.HEAD:
                chain_b = _reverse_chain(chain_b)
            junction = _first_slot(chain_a)
            _drop_last(chain_b)
            segments = _concat(chain_b, chain_a)

        # smaller junction set goes into the larger one
        if len(rec_b.junctions) > len(rec_a.junctions):
            rec_a.junctions, rec_b.junctions = rec_b.junctions, rec_a.junctions
        rec_a.junctions.update(rec_b.junctions)
        rec_a.junctions.add(junction)
        rec_a.segments = segments
        rec_a.merged = True
        rec_a.parts.extend(rec_b.parts)

        rec_b.alive = False
        rec_b.segments = deque()
        rec_b.junctions = set()
        return a

    def close(self, contour_id: int, tolerance: tuple[int, int] = (0, 0)) -> None:
        """Mark an open fragment closed once its head and tail coincide.

        The tail vertex is dropped and the head is kept as the junction, the
        same snapping a splice applies to the absorbed end. Under a positive
        tolerance the dropped tail may differ from the head by at most
        ``tolerance`` on each axis; ends further apart are refused.

        Args:
            contour_id: Fragment to close
            tolerance: (dx, dy) within which head and tail count as coincident

        Raises:
            StoreError: If the contour is closed, dead, or its ends do not meet
        """
        self._check_mutable()
        rec = self._live(contour_id)
        if rec.closed:
            raise StoreError(f"Contour {contour_id} is already closed")
        head = self.head(contour_id)
        tail = self.tail(contour_id)
        if abs(head.x - tail.x) > tolerance[0] or abs(head.y - tail.y) > tolerance[1]:
            raise StoreError(
                f"Cannot close contour {contour_id}: head {head.to_tuple()} "
                f"and tail {tail.to_tuple()} do not coincide"
            )
        rec.junctions.add(_first_slot(rec.segments))
        _drop_last(rec.segments)
        rec.closed = True
        rec.merged = True

    def discard(self, contour_id: int) -> None:
        """Tombstone a contour without merging it anywhere."""
        self._check_mutable()
        rec = self._live(contour_id)
        rec.alive = False
        rec.segments = deque()

    def freeze(self) -> None:
        """Make the store immutable."""
        self._frozen = True

    # -- copying --------------------------------------------------------

    def copy(self) -> "PackedContourStore":
        """Independent mutable copy sharing no state with this store."""
        other = PackedContourStore()
        other._coords = array("q", self._coords)
        other._records = [
            replace(
                rec,
                segments=deque(rec.segments),
                parts=list(rec.parts),
                junctions=set(rec.junctions),
            )
            for rec in self._records
        ]
        return other

    def compact(self, order: Iterable[int] | None = None) -> "PackedContourStore":
        """Copy live contours into a fresh store with contiguous ids.

        Args:
            order: Contour ids in output order (default: ascending live ids)

        Returns:
            New store; each point is copied exactly once
        """
        ids = self.contour_ids() if order is None else list(order)
        result = PackedContourStore()
        for cid in ids:
            rec = self._live(cid)
            result.append(
                self.points_of(cid),
                rec.label,
                rec.closed,
                rec.frame_id,
                rec.layer,
            )
        return result

    def to_raw_contours(self) -> list[RawContour]:
        """Live contours as tracer-style records, in id order."""
        return [
            RawContour(
                points=list(self.points_of(cid)),
                label=self._records[cid].label,
                closed=self._records[cid].closed,
                frame_id=self._records[cid].frame_id,
            )
            for cid in self.contour_ids()
        ]

    def to_dict(self) -> dict[str, Any]:
        """Serialize live contours for IPC and files."""
        contours = []
        for cid in self.contour_ids():
            rec = self._records[cid]
            item = RawContour(
                points=list(self.points_of(cid)),
                label=rec.label,
                closed=rec.closed,
                frame_id=rec.frame_id,
            ).to_dict()
            item["layer"] = rec.layer
            contours.append(item)
        return {"contours": contours}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PackedContourStore":
        """Deserialize a store written by ``to_dict``."""
        store = cls()
        for item in data["contours"]:
            raw = RawContour.from_dict(item)
            store.append(raw.points, raw.label, raw.closed, raw.frame_id, int(item.get("layer", 0)))
        return store

    # -- internals ------------------------------------------------------

    def _live(self, contour_id: int) -> ContourRecord:
        rec = self.record(contour_id)
        if not rec.alive:
            raise StoreError(f"Contour {contour_id} was absorbed by a splice")
        return rec

    def _check_mutable(self) -> None:
        if self._frozen:
            raise StoreError("Store is finalized and can no longer be modified")

    def __repr__(self) -> str:
        return (
            f"PackedContourStore(contours={self.number_of_contours}, "
            f"points={self.number_of_points}, frozen={self._frozen})"
        )
