"""Contour file reader.

This module provides the ContourReader class for loading JSON contour files
and turning them into frames and a packed contour store.
"""

import json
from pathlib import Path

from contourjoin.core.store import PackedContourStore
from contourjoin.domain import Frame
from contourjoin.exceptions import ContourLoadError
from contourjoin.io.converter import document_to_domain


class ContourReader:
    """Loads a contour file produced by a per-frame tracer.

    Example:
        reader = ContourReader(Path("frames.json"))
        reader.load()
        print(reader.contour_count, reader.open_count)
        store = reader.store
    """

    def __init__(self, path: Path) -> None:
        """Initialize the reader.

        Args:
            path: Path to the JSON contour file
        """
        self._path = path
        self._frames: dict[int, Frame] | None = None
        self._store: PackedContourStore | None = None

    def load(self) -> None:
        """Load and parse the contour file.

        Raises:
            FileNotFoundError: If the file does not exist
            ContourLoadError: If the file is not a valid contour document
            InputInconsistencyError: If a contour has too few points
        """
        if not self._path.exists():
            raise FileNotFoundError(f"Contour file not found: {self._path}")

        try:
            with self._path.open(encoding="utf-8") as f:
                data = json.load(f)
            self._frames, self._store = document_to_domain(data)
        except json.JSONDecodeError as e:
            raise ContourLoadError(str(self._path), f"invalid JSON: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            raise ContourLoadError(str(self._path), f"malformed document: {e!r}") from e

    def _require_loaded(self) -> PackedContourStore:
        if self._store is None:
            raise RuntimeError("Contour file not loaded. Call load() first.")
        return self._store

    @property
    def store(self) -> PackedContourStore:
        """Loaded contours, with ids in document order."""
        return self._require_loaded()

    @property
    def frames(self) -> dict[int, Frame]:
        """Loaded frames by id."""
        self._require_loaded()
        assert self._frames is not None
        return self._frames

    @property
    def contour_count(self) -> int:
        return self._require_loaded().number_of_contours

    @property
    def open_count(self) -> int:
        """Number of open fragments awaiting join."""
        return len(self._require_loaded().open_ids())

    def __enter__(self) -> "ContourReader":
        """Context manager entry."""
        self.load()
        return self

    def __exit__(self, _exc_type: object, _exc_val: object, _exc_tb: object) -> None:
        """Context manager exit."""
        self._frames = None
        self._store = None
