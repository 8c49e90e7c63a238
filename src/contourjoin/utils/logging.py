"""Logging utilities for contourjoin."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import structlog


@dataclass
class JoinStats:
    """Statistics from a batch run."""

    processed_count: int = 0
    error_count: int = 0
    contours_in: int = 0
    contours_out: int = 0
    splices: int = 0
    defect_count: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)
    file_timings_ms: list[float] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None
    was_cancelled: bool = False
    cancelled_count: int = 0

    @property
    def duration_seconds(self) -> float:
        """Calculate processing duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0

    @property
    def avg_file_time_ms(self) -> float | None:
        if not self.file_timings_ms:
            return None
        return sum(self.file_timings_ms) / len(self.file_timings_ms)

    @property
    def min_file_time_ms(self) -> float | None:
        return min(self.file_timings_ms) if self.file_timings_ms else None

    @property
    def max_file_time_ms(self) -> float | None:
        return max(self.file_timings_ms) if self.file_timings_ms else None


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure dual-output structured logging.

    Args:
        log_file: Path to log file (no file output if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output except errors

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.ERROR if quiet else getattr(logging, console_level.upper()))
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("contourjoin")
    logger.info(
        "Logging initialized",
        log_file=str(log_file) if log_file else None,
        level=file_level,
    )

    return logger


class JoinLogger:
    """Logger for tracking batch progress and statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._stats = JoinStats()

    def log_file_start(self, file_name: str) -> None:
        """Log start of file processing."""
        self._logger.debug("Joining file", file=file_name)

    def log_file_complete(
        self,
        file_name: str,
        contours_in: int,
        contours_out: int,
        splices: int,
        defects: int,
        duration_ms: float,
    ) -> None:
        """Log successful file processing."""
        self._logger.info(
            "File joined",
            file=file_name,
            contours_in=contours_in,
            contours_out=contours_out,
            splices=splices,
            defects=defects,
            duration_ms=round(duration_ms, 2),
        )
        self._stats.processed_count += 1
        self._stats.contours_in += contours_in
        self._stats.contours_out += contours_out
        self._stats.splices += splices
        self._stats.defect_count += defects
        self._stats.file_timings_ms.append(duration_ms)

    def log_file_error(
        self,
        file_name: str,
        error: Exception,
        traceback: str | None = None,
    ) -> None:
        """Log file processing error."""
        self._logger.error(
            "File join failed",
            file=file_name,
            error=str(error),
            error_type=type(error).__name__,
            traceback=traceback,
        )
        self._stats.error_count += 1
        self._stats.errors.append((file_name, str(error)))

    @property
    def stats(self) -> JoinStats:
        """Get current processing statistics."""
        return self._stats
