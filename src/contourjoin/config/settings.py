"""Configuration settings for contourjoin."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from contourjoin.domain import WindingDirection


class UnresolvedPolicy(str, Enum):
    """What to do with fragments that could not be closed."""

    SURFACE = "surface"
    DISCARD = "discard"


class ToleranceConfig(BaseModel):
    """Per-axis endpoint matching tolerances in grid units.

    Zero everywhere means exact-match joining. ``dz`` applies to the frame
    layer axis; at zero, fragments only join within the same layer.
    """

    dx: int = Field(default=0, ge=0, description="Tolerance along x")
    dy: int = Field(default=0, ge=0, description="Tolerance along y")
    dz: int = Field(default=0, ge=0, description="Tolerance across frame layers")

    def as_tuple(self) -> tuple[int, int, int]:
        """Return ``(dx, dy, dz)``."""
        return (self.dx, self.dy, self.dz)

    @classmethod
    def from_sequence(cls, values: list[int] | tuple[int, ...]) -> "ToleranceConfig":
        """Build from a 1-3 element sequence; missing axes default to 0.

        A single value applies to both x and y.
        """
        if not 1 <= len(values) <= 3:
            raise ValueError(f"Expected 1-3 tolerance values, got {len(values)}")
        if len(values) == 1:
            return cls(dx=values[0], dy=values[0])
        if len(values) == 2:
            return cls(dx=values[0], dy=values[1])
        return cls(dx=values[0], dy=values[1], dz=values[2])


class JoinConfig(BaseModel):
    """Configuration for contour joining."""

    tolerance: ToleranceConfig = Field(default_factory=ToleranceConfig)
    unresolved_policy: UnresolvedPolicy = Field(
        default=UnresolvedPolicy.SURFACE,
        description="Keep unresolved fragments as flagged open contours, or drop them",
    )
    outer_winding: WindingDirection = Field(
        default=WindingDirection.COUNTER_CLOCKWISE,
        description="Winding of outer boundaries; holes get the opposite",
    )
    cut_shared_seams: bool = Field(
        default=True,
        description="Open closed per-frame pieces along segments they share with another piece",
    )
    drop_seam_vertices: bool = Field(
        default=False,
        description="Remove collinear vertices left at splice junctions",
    )
    validate_frames: bool = Field(
        default=True,
        description="Check contour placement against known frame bounds",
    )


class ProcessingConfig(BaseModel):
    """Configuration for batch processing."""

    max_workers: int | None = Field(
        default=None,
        description="Max worker processes (None = auto)",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class JoinerSettings(BaseModel):
    """Main application settings."""

    join: JoinConfig = Field(default_factory=JoinConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> JoinerSettings:
    """Get default application settings."""
    return JoinerSettings()
