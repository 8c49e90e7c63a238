"""Contour joiner: the entry point of the joining engine.

``ContourJoiner.join`` runs one label map's contour set through the whole
pipeline on a private copy of the caller's store:

1. Validate the input against the tracer contract
2. Cut seams shared by closed per-frame pieces
3. Index open-fragment endpoints
4. Merge fragments to a fixed point
5. Finalize topology and emit a frozen result store
"""

import time
from collections.abc import Iterable, Mapping

import structlog

from contourjoin.config import JoinConfig, ToleranceConfig
from contourjoin.core.endpoints import EndpointIndex
from contourjoin.core.finalizer import JoinResult, TopologyFinalizer
from contourjoin.core.merger import FragmentMerger
from contourjoin.core.seams import SeamCutter
from contourjoin.core.store import PackedContourStore
from contourjoin.domain import Frame, RawContour
from contourjoin.exceptions import InputInconsistencyError

logger = structlog.get_logger(__name__)


def _frame_map(frames: Mapping[int, Frame] | Iterable[Frame] | None) -> dict[int, Frame]:
    if frames is None:
        return {}
    if isinstance(frames, Mapping):
        return dict(frames)
    return {frame.frame_id: frame for frame in frames}


class ContourJoiner:
    """Rebuilds whole-image contours from per-frame contours.

    The joiner is stateless between calls and never mutates the store it is
    given. Independent label maps may be joined concurrently with separate
    stores.

    Example:
        joiner = ContourJoiner(JoinConfig(tolerance=ToleranceConfig(dx=1, dy=1)))
        result = joiner.join(store)
        for cid, points in result.store:
            ...
    """

    def __init__(
        self,
        config: JoinConfig | None = None,
        frames: Mapping[int, Frame] | Iterable[Frame] | None = None,
    ) -> None:
        self.config = config or JoinConfig()
        self.frames = _frame_map(frames)

    def join(self, store: PackedContourStore) -> JoinResult:
        """Join a complete per-frame contour set.

        Args:
            store: All per-frame contours in global coordinates

        Returns:
            JoinResult with the finalized store and the defect list

        Raises:
            InputInconsistencyError: If the input violates the tracer contract
        """
        start_time = time.time()
        self.validate(store)

        work = store.copy()
        tolerance = self.config.tolerance.as_tuple()

        seams = 0
        if self.config.cut_shared_seams:
            seams = SeamCutter().cut(work).seams

        index = EndpointIndex.build(work, tolerance, self.frames)
        open_count = len(index) // 2
        outcome = FragmentMerger(work, index).run()
        result = TopologyFinalizer(self.config).finalize(work, outcome)
        result.seams = seams

        logger.info(
            "Contours joined",
            contours_in=store.number_of_contours,
            open_fragments=open_count,
            seams=seams,
            splices=result.splices,
            closures=result.closures,
            contours_out=result.store.number_of_contours,
            defects=len(result.defects),
            duration_ms=round((time.time() - start_time) * 1000, 2),
        )
        return result

    def validate(self, store: PackedContourStore) -> None:
        """Check the input against the tracer contract.

        Raises:
            InputInconsistencyError: On an unknown frame id, a contour
                outside its frame, an open end off the frame border, or
                overlapping frames on one layer
        """
        if not self.frames:
            return

        for cid in store.contour_ids():
            frame_id = store.record(cid).frame_id
            if frame_id is not None and frame_id not in self.frames:
                raise InputInconsistencyError(f"unknown frame {frame_id}", contour_id=cid)

        if not self.config.validate_frames:
            return

        self._check_frame_layout()

        dx, dy, _ = self.config.tolerance.as_tuple()
        for cid in store.contour_ids():
            rec = store.record(cid)
            frame = self.frames.get(rec.frame_id) if rec.frame_id is not None else None
            if frame is None or not frame.has_bounds:
                continue
            points = store.points_of(cid)
            for point in points:
                if not frame.contains(point, slack=max(dx, dy)):
                    raise InputInconsistencyError(
                        f"point {point.to_tuple()} lies outside frame {frame.frame_id}",
                        contour_id=cid,
                    )
            if not rec.closed:
                for point in (points[0], points[-1]):
                    if not frame.on_border(point, dx, dy):
                        raise InputInconsistencyError(
                            f"open end {point.to_tuple()} is not on the border "
                            f"of frame {frame.frame_id}",
                            contour_id=cid,
                        )

    def _check_frame_layout(self) -> None:
        bounded = sorted(
            (f for f in self.frames.values() if f.has_bounds), key=lambda f: f.frame_id
        )
        for i, a in enumerate(bounded):
            for b in bounded[i + 1:]:
                if a.layer != b.layer:
                    continue
                assert a.x is not None and a.y is not None
                assert b.x is not None and b.y is not None
                overlap_x = min(a.max_x, b.max_x) - max(a.x, b.x)
                overlap_y = min(a.max_y, b.max_y) - max(a.y, b.y)
                if overlap_x > 0 and overlap_y > 0:
                    raise InputInconsistencyError(
                        f"frames {a.frame_id} and {b.frame_id} overlap on layer {a.layer}"
                    )


def join_contours(
    contours: Iterable[RawContour] | Mapping[int, Iterable[RawContour]],
    frames: Mapping[int, Frame] | Iterable[Frame] | None = None,
    config: JoinConfig | None = None,
    tolerance: tuple[int, ...] | None = None,
) -> JoinResult:
    """Join tracer output in one call.

    Args:
        contours: Raw contours, or a frame id -> contours mapping
        frames: Frame placements (optional)
        config: Join configuration (defaults apply when None)
        tolerance: Shortcut overriding ``config.tolerance`` with 1-3 values

    Returns:
        JoinResult
    """
    frame_map = _frame_map(frames)
    if isinstance(contours, Mapping):
        store = PackedContourStore.from_frames(contours, frame_map)
    else:
        store = PackedContourStore.from_raw(contours, frame_map)

    config = config or JoinConfig()
    if tolerance is not None:
        config = config.model_copy(update={"tolerance": ToleranceConfig.from_sequence(tolerance)})
    return ContourJoiner(config, frame_map).join(store)
