"""Parallel processing orchestration for batches of contour files.

Every contour file holds one label map and is joined with its own store, so
files are independent and can be processed in separate worker processes
using ProcessPoolExecutor. A single join stays single-threaded.

Key components:
- process_file: Top-level picklable function for parallel execution
- BatchProcessor: Main orchestrator class for batch processing
"""

import time
import traceback
from collections.abc import Callable
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Any

from contourjoin.config import JoinConfig, JoinerSettings
from contourjoin.core.joiner import ContourJoiner
from contourjoin.io import ContourReader, ContourWriter
from contourjoin.utils import JoinLogger, JoinStats, configure_logging


def process_file(
    input_path: str,
    output_path: str,
    config_dict: dict[str, Any],
) -> dict[str, Any]:
    """Join the contours of a single file.

    Top-level function designed to be picklable for use with ProcessPoolExecutor.
    Loads the file, runs the joiner, writes the result and returns a summary.
    It never raises; failures come back as an error dictionary.

    Args:
        input_path: Contour file to join
        output_path: Where to write the joined contours
        config_dict: Serialized join configuration

    Returns:
        Dictionary containing either:
        - Success: {"file": str, "output": str, "contours_in": int,
          "contours_out": int, "splices": int, "closures": int, "seams": int,
          "defects": int, "discarded": int, "duration_ms": float}
        - Error: {"error": str, "error_type": str, "file": str,
          "traceback": str, "duration_ms": float}
    """
    start_time = time.time()

    try:
        config = JoinConfig(**config_dict)

        reader = ContourReader(Path(input_path))
        reader.load()

        joiner = ContourJoiner(config, reader.frames)
        result = joiner.join(reader.store)

        ContourWriter(result, Path(output_path), reader.frames).save()

        duration_ms = (time.time() - start_time) * 1000
        return {
            "file": input_path,
            "output": output_path,
            "contours_in": reader.contour_count,
            "contours_out": result.store.number_of_contours,
            "splices": result.splices,
            "closures": result.closures,
            "seams": result.seams,
            "defects": len(result.defects),
            "discarded": result.discarded,
            "duration_ms": duration_ms,
        }

    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        return {
            "error": str(e),
            "error_type": type(e).__name__,
            "file": input_path,
            "traceback": traceback.format_exc(),
            "duration_ms": duration_ms,
        }


class BatchProcessor:
    """Orchestrates parallel joining of contour files.

    Manages the complete workflow:
    1. Resolve an output path for every input file
    2. Join files in parallel using worker processes
    3. Collect results and update statistics

    Example:
        settings = JoinerSettings()
        processor = BatchProcessor(settings)
        stats = processor.process(
            paths=[Path("a.json"), Path("b.json")],
            output_dir=Path("joined"),
            max_workers=4
        )
    """

    def __init__(self, config: JoinerSettings) -> None:
        """Initialize batch processor with configuration.

        Args:
            config: Settings containing join, processing and logging config
        """
        self.config = config
        self.logger = configure_logging(
            log_file=config.logging.log_file,
            console_level=config.logging.log_level,
            file_level=config.logging.file_log_level,
            quiet=False,
        )
        self.join_logger = JoinLogger(self.logger)

    def process(
        self,
        paths: list[Path],
        output_dir: Path | None = None,
        max_workers: int | None = None,
        progress_callback: Callable[[int, int, str, bool], None] | None = None,
    ) -> JoinStats:
        """Join a batch of contour files.

        Args:
            paths: Input contour files
            output_dir: Directory for outputs (next to each input if None)
            max_workers: Maximum worker processes (None = use config)
            progress_callback: Optional callback(completed, total, file_name, success)
                for progress updates

        Returns:
            JoinStats with counts, timing, and error details

        Raises:
            KeyboardInterrupt: If processing is cancelled by user
        """
        stats = self.join_logger.stats
        stats.start_time = time.time()

        if max_workers is None:
            max_workers = self.config.processing.max_workers

        tasks = {
            str(path): str(ContourWriter.get_joined_path(path, output_dir))
            for path in paths
        }

        self.logger.info(
            "Starting batch",
            file_count=len(tasks),
            output_dir=str(output_dir) if output_dir else None,
            max_workers=max_workers,
        )

        if tasks:
            self._process_parallel(tasks, max_workers, stats, progress_callback)
        else:
            self.logger.info("No files to process")

        stats.end_time = time.time()

        self.logger.info(
            "Batch complete",
            processed=stats.processed_count,
            errors=stats.error_count,
            splices=stats.splices,
            defects=stats.defect_count,
            duration_seconds=round(stats.duration_seconds, 2),
        )

        return stats

    def _process_parallel(
        self,
        tasks: dict[str, str],
        max_workers: int | None,
        stats: JoinStats,
        progress_callback: Callable[[int, int, str, bool], None] | None = None,
    ) -> None:
        """Run process_file for every task in a ProcessPoolExecutor.

        Args:
            tasks: Input path -> output path
            max_workers: Maximum worker processes
            stats: Statistics object to update
            progress_callback: Optional progress callback
        """
        config_dict = self.config.join.model_dump()

        total = len(tasks)
        completed = 0
        pending_futures: dict = {}

        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            for input_path, output_path in tasks.items():
                self.join_logger.log_file_start(input_path)
                future = executor.submit(process_file, input_path, output_path, config_dict)
                pending_futures[future] = input_path

            try:
                for future in as_completed(pending_futures):
                    file_name = pending_futures.pop(future)
                    success = False

                    try:
                        result = future.result()

                        if "error" in result:
                            self.join_logger.log_file_error(
                                file_name=result["file"],
                                error=Exception(result["error"]),
                                traceback=result.get("traceback"),
                            )
                        else:
                            success = True
                            self.join_logger.log_file_complete(
                                file_name=file_name,
                                contours_in=result["contours_in"],
                                contours_out=result["contours_out"],
                                splices=result["splices"],
                                defects=result["defects"],
                                duration_ms=result.get("duration_ms", 0.0),
                            )

                    except Exception as e:
                        # Executor-level error (e.g. a worker died)
                        self.join_logger.log_file_error(
                            file_name=file_name,
                            error=e,
                            traceback=traceback.format_exc(),
                        )

                    completed += 1
                    if progress_callback is not None:
                        progress_callback(completed, total, file_name, success)

            except KeyboardInterrupt:
                self.logger.info("Cancellation requested by user")
                for f in pending_futures:
                    f.cancel()

                stats.was_cancelled = True
                stats.cancelled_count = len(pending_futures)

                executor.shutdown(wait=True, cancel_futures=True)
                raise
