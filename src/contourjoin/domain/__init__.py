"""Domain models for contourjoin.

This module contains the domain models exchanged with the per-frame tracer
and with downstream consumers. All models are designed to be:

- Immutable where possible (using frozen dataclasses)
- Serializable for inter-process communication (parallel processing)
- Independent of the packed storage used during a join

Key classes:
- Point: An integer 2D point in global coordinates
- RawContour: A traced contour with label, frame and closed flag
- Frame: Placement of a traced frame in the whole image
- Defect: An endpoint or contour that could not be resolved
"""

from contourjoin.domain.contour import EndSelector, Point, RawContour, WindingDirection
from contourjoin.domain.defect import Defect, DefectReason
from contourjoin.domain.frame import Frame

__all__: list[str] = [
    # Enums
    "WindingDirection",
    "EndSelector",
    "DefectReason",
    # Core types
    "Point",
    "RawContour",
    "Frame",
    "Defect",
]
