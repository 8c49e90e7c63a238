"""Core joining algorithms for contourjoin.

This module contains the core algorithms for:

- Packed contour storage (arena of points, segment chains, splicing)
- Endpoint indexing (tolerance-based spatial hash)
- Fragment merging (greedy work-queue splicing to a fixed point)
- Seam cutting (opening closed per-frame pieces along shared borders)
- Topology finalization (validation, winding, deterministic output order)

A join is single-threaded and deterministic. Parallelism across independent
files lives in ``contourjoin.core.processor``, which depends on the I/O layer
and is therefore not imported here.

Key functions:
- doubled_signed_area: Exact shoelace area of an integer polygon
- point_in_polygon: Test if point is inside polygon
- join_contours: One-call join of tracer output

Key classes:
- PackedContourStore: Arena-backed contour storage
- EndpointIndex: Candidate lookup for open endpoints
- FragmentMerger: Splices fragments into closed loops
- SeamCutter: Cuts shared seams out of closed pieces
- TopologyFinalizer: Orients and compacts the result
- ContourJoiner: Runs the whole pipeline
"""

from contourjoin.core.endpoints import Endpoint, EndpointIndex
from contourjoin.core.finalizer import JoinResult, TopologyFinalizer
from contourjoin.core.geometry import (
    doubled_signed_area,
    point_in_polygon,
    signed_area,
)
from contourjoin.core.joiner import ContourJoiner, join_contours
from contourjoin.core.merger import FragmentMerger, MergeOutcome
from contourjoin.core.seams import SeamCutResult, SeamCutter
from contourjoin.core.store import ContourPoints, ContourRecord, PackedContourStore

__all__ = [
    # Joiner
    "ContourJoiner",
    # Store
    "ContourPoints",
    "ContourRecord",
    # Endpoints
    "Endpoint",
    "EndpointIndex",
    # Merger
    "FragmentMerger",
    # Finalizer
    "JoinResult",
    "MergeOutcome",
    "PackedContourStore",
    # Seams
    "SeamCutResult",
    "SeamCutter",
    "TopologyFinalizer",
    # Geometry functions
    "doubled_signed_area",
    "join_contours",
    "point_in_polygon",
    "signed_area",
]
