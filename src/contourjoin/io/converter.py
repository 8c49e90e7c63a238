"""Converters between contour documents and domain models.

This module handles the conversion between the JSON document layout of a
contour file and our domain models (Frame, RawContour, PackedContourStore,
JoinResult).
"""

from typing import Any

from contourjoin.core.finalizer import JoinResult
from contourjoin.core.geometry import doubled_signed_area
from contourjoin.core.store import PackedContourStore
from contourjoin.domain import Frame, RawContour, WindingDirection


def document_to_domain(
    data: dict[str, Any],
) -> tuple[dict[int, Frame], PackedContourStore]:
    """Convert a parsed contour document to frames and a store.

    Contours are appended in document order, so store ids are the positions
    of the contours in the ``"contours"`` list.

    Args:
        data: Parsed JSON document

    Returns:
        Tuple of (frame id -> Frame mapping, store)

    Raises:
        KeyError: If a required key is missing
        ValueError: If a value has the wrong shape
        InputInconsistencyError: If a contour has too few points
    """
    if not isinstance(data, dict):
        raise ValueError("document root must be an object")

    frames: dict[int, Frame] = {}
    for item in data.get("frames", []):
        frame = Frame.from_dict(item)
        if frame.frame_id in frames:
            raise ValueError(f"duplicate frame id {frame.frame_id}")
        frames[frame.frame_id] = frame

    contours = [RawContour.from_dict(item) for item in data["contours"]]
    store = PackedContourStore.from_raw(contours, frames)
    return frames, store


def result_to_document(
    result: JoinResult,
    frames: dict[int, Frame] | None = None,
) -> dict[str, Any]:
    """Convert a join result to a contour document.

    Each contour gets its ``"winding"`` (``"cw"``/``"ccw"``, or None for open
    defects) and the top level gets the ``"defects"`` list.

    Args:
        result: Finalized join result
        frames: Frames to echo back into the document

    Returns:
        JSON-serializable document
    """
    contours: list[dict[str, Any]] = []
    for cid, points in result.store:
        item = RawContour(
            points=list(points),
            label=result.store.label(cid),
            closed=result.store.is_closed(cid),
            frame_id=result.store.record(cid).frame_id,
        ).to_dict()
        winding = None
        if item["closed"]:
            direction = WindingDirection.of_area(doubled_signed_area(points))
            winding = direction.value if direction is not None else None
        item["winding"] = winding
        contours.append(item)

    return {
        "frames": [frame.to_dict() for _, frame in sorted((frames or {}).items())],
        "contours": contours,
        "defects": [defect.to_dict() for defect in result.defects],
    }
