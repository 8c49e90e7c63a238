"""Exception hierarchy for contourjoin."""


class ContourJoinError(Exception):
    """Base exception for all contourjoin errors."""

    pass


class InputError(ContourJoinError):
    """Errors in the contour set handed to the joiner."""

    pass


class InputInconsistencyError(InputError):
    """The caller violated the input contract; the whole join is aborted."""

    def __init__(self, reason: str, contour_id: int | None = None) -> None:
        self.reason = reason
        self.contour_id = contour_id
        where = f" (contour {contour_id})" if contour_id is not None else ""
        super().__init__(f"Inconsistent input{where}: {reason}")


class GeometryError(ContourJoinError):
    """Errors in geometric validation."""

    pass


class DegenerateGeometryError(GeometryError):
    """A closed contour has zero area or repeated consecutive vertices."""

    def __init__(self, contour_id: int, reason: str) -> None:
        self.contour_id = contour_id
        self.reason = reason
        super().__init__(f"Degenerate contour {contour_id}: {reason}")


class StoreError(ContourJoinError):
    """Invalid use of a packed contour store."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ContourFileError(ContourJoinError):
    """Errors related to contour file loading or saving."""

    pass


class ContourLoadError(ContourFileError):
    """Error loading a contour file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load contours '{path}': {reason}")


class ContourSaveError(ContourFileError):
    """Error saving a contour file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to save contours '{path}': {reason}")
