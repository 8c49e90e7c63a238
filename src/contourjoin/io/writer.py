"""Contour file writer.

This module provides the ContourWriter class for writing join results as JSON
contour files with the joined naming convention.
"""

import json
from pathlib import Path

from contourjoin.core.finalizer import JoinResult
from contourjoin.domain import Frame
from contourjoin.exceptions import ContourSaveError
from contourjoin.io.converter import result_to_document


class ContourWriter:
    """Writes a join result to a JSON contour file.

    Example:
        writer = ContourWriter(result, Path("frames-joined.json"), frames)
        writer.save()
    """

    def __init__(
        self,
        result: JoinResult,
        output_path: Path,
        frames: dict[int, Frame] | None = None,
    ) -> None:
        """Initialize the writer.

        Args:
            result: Finalized join result
            output_path: Path where the file will be saved
            frames: Frames to echo into the output document
        """
        self._result = result
        self._output_path = output_path
        self._frames = frames

    def save(self) -> None:
        """Write the result document to the output path.

        Raises:
            ContourSaveError: If the file cannot be written
        """
        document = result_to_document(self._result, self._frames)
        try:
            self._output_path.parent.mkdir(parents=True, exist_ok=True)
            with self._output_path.open("w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
                f.write("\n")
        except OSError as e:
            raise ContourSaveError(str(self._output_path), str(e)) from e

    @staticmethod
    def get_joined_path(input_path: Path, output_dir: Path | None = None) -> Path:
        """Generate output path with the joined naming convention.

        Converts: frames.json -> frames-joined.json
                  tiles/scan-0042.json -> tiles/scan-0042-joined.json

        Args:
            input_path: Original contour file path
            output_dir: Directory for the output (input's directory if None)

        Returns:
            Path with -joined suffix before extension
        """
        parent = output_dir if output_dir is not None else input_path.parent
        return parent / f"{input_path.stem}-joined{input_path.suffix or '.json'}"
