"""Contour file I/O layer for contourjoin.

This module handles reading and writing JSON contour files. It provides a
clean abstraction layer between the on-disk document layout and the domain
models.

Key responsibilities:
- Load frame placements and traced contours
- Convert documents to a packed contour store
- Write join results with windings and defects
- Naming convention for output files

Key classes:
- ContourReader: Load contour files
- ContourWriter: Save join results
"""

from contourjoin.io.converter import document_to_domain, result_to_document
from contourjoin.io.reader import ContourReader
from contourjoin.io.writer import ContourWriter

__all__ = [
    "ContourReader",
    "ContourWriter",
    "document_to_domain",
    "result_to_document",
]
