"""CLI application entry point for contourjoin.

This module provides the main CLI interface using Typer.
"""

import os
from pathlib import Path
from typing import Annotated

import typer

from contourjoin import __version__
from contourjoin.cli.output import (
    SYM_OK,
    console,
    create_progress,
    print_cancellation_notice,
    print_cancellation_summary,
    print_dry_run_table,
    print_error,
    print_file_errors,
    print_header,
    print_inputs,
    print_processing_info,
    print_step,
    print_success,
)
from contourjoin.config import (
    JoinConfig,
    JoinerSettings,
    LoggingConfig,
    ProcessingConfig,
    ToleranceConfig,
    UnresolvedPolicy,
)
from contourjoin.core.processor import BatchProcessor
from contourjoin.domain import WindingDirection
from contourjoin.exceptions import ContourJoinError, ContourLoadError
from contourjoin.io import ContourReader

# Create the Typer app
app = typer.Typer(
    name="contourjoin",
    help="Join per-frame contour fragments into whole-image closed contours.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]contourjoin[/bold blue] v{__version__}")
        raise typer.Exit()


@app.command()
def join(
    inputs: Annotated[
        list[Path],
        typer.Argument(
            help="JSON contour files, one label map per file",
            show_default=False,
        ),
    ],
    output_dir: Annotated[
        Path | None,
        typer.Option(
            "--output-dir",
            "-o",
            help="Output directory (default: next to each input, as {name}-joined.json)",
        ),
    ] = None,
    dx: Annotated[
        int,
        typer.Option("--dx", help="Endpoint tolerance along x", min=0),
    ] = 0,
    dy: Annotated[
        int,
        typer.Option("--dy", help="Endpoint tolerance along y", min=0),
    ] = 0,
    dz: Annotated[
        int,
        typer.Option("--dz", help="Endpoint tolerance across frame layers", min=0),
    ] = 0,
    discard_unresolved: Annotated[
        bool,
        typer.Option(
            "--discard-unresolved",
            help="Drop fragments that cannot be closed instead of keeping them as defects",
        ),
    ] = False,
    outer_winding: Annotated[
        str,
        typer.Option(
            "--outer-winding",
            help="Winding of outer boundaries (ccw|cw); holes get the opposite",
        ),
    ] = "ccw",
    no_seams: Annotated[
        bool,
        typer.Option(
            "--no-seams",
            help="Do not cut seams shared by closed per-frame pieces",
        ),
    ] = False,
    drop_seam_vertices: Annotated[
        bool,
        typer.Option(
            "--drop-seam-vertices",
            help="Remove collinear vertices left where fragments were spliced",
        ),
    ] = False,
    workers: Annotated[
        int | None,
        typer.Option(
            "--workers",
            "-j",
            help="Number of parallel workers (default: auto)",
            min=1,
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Report open and closed contour counts without joining",
        ),
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbose console output",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Join per-frame contour fragments into whole-image closed contours.

    Every input file holds the frames and traced contours of one label map.
    Fragments cut by frame borders are spliced back together, closed contours
    are oriented (outer boundaries counter-clockwise by default, holes the
    other way) and anything that cannot be closed is reported as a defect.

    Example:
        contourjoin frames.json --dx 1 --dy 1

    This will create frames-joined.json next to frames.json.
    """
    if verbose and quiet:
        print_error("Cannot use --verbose and --quiet together")
        raise typer.Exit(code=1)

    for path in inputs:
        if not path.is_file():
            print_error(
                f"Input file not found: {path}",
                details=f"The file '{path}' does not exist or is not a file.",
            )
            raise typer.Exit(code=1)

    try:
        winding = WindingDirection(outer_winding.lower())
    except ValueError:
        print_error(
            f"Invalid outer winding: {outer_winding}",
            details="Valid values: ccw, cw",
        )
        raise typer.Exit(code=1)

    if not quiet:
        print_header(__version__)

    settings = JoinerSettings(
        join=JoinConfig(
            tolerance=ToleranceConfig(dx=dx, dy=dy, dz=dz),
            unresolved_policy=(
                UnresolvedPolicy.DISCARD if discard_unresolved else UnresolvedPolicy.SURFACE
            ),
            outer_winding=winding,
            cut_shared_seams=not no_seams,
            drop_seam_vertices=drop_seam_vertices,
        ),
        processing=ProcessingConfig(
            max_workers=workers,
        ),
        logging=LoggingConfig(
            log_file=log_file,
            log_level=log_level if not quiet else "ERROR",
        ),
    )

    try:
        if dry_run:
            _handle_dry_run(inputs, quiet)
            raise typer.Exit(code=0)

        if not quiet:
            print_step("Loading")
            print_inputs(len(inputs), settings.join.tolerance.as_tuple(), verbose)

            actual_workers = workers if workers else os.cpu_count() or 1
            print_step("Joining")
            print_processing_info(actual_workers, is_auto=(workers is None))

        processor = BatchProcessor(settings)
        stats = None

        try:
            if not quiet:
                with create_progress() as progress:
                    task_id = progress.add_task(
                        f"Joining {len(inputs)} files",
                        total=len(inputs),
                    )

                    def update_progress(
                        completed: int, *_: object
                    ) -> None:
                        progress.update(task_id, completed=completed)

                    stats = processor.process(
                        paths=inputs,
                        output_dir=output_dir,
                        max_workers=workers,
                        progress_callback=update_progress,
                    )
            else:
                stats = processor.process(
                    paths=inputs,
                    output_dir=output_dir,
                    max_workers=workers,
                )
        except KeyboardInterrupt:
            if not quiet:
                stats = processor.join_logger.stats
                print_cancellation_notice()
                print_cancellation_summary(
                    processed=stats.processed_count,
                    cancelled=stats.cancelled_count,
                )
            raise typer.Exit(code=130) from None  # Standard Unix SIGINT exit code

        if not quiet:
            print_success(
                total_time_s=stats.duration_seconds,
                processed=stats.processed_count,
                splices=stats.splices,
                defects=stats.defect_count,
                errors=stats.error_count,
                avg_time_ms=stats.avg_file_time_ms,
                min_time_ms=stats.min_file_time_ms,
                max_time_ms=stats.max_file_time_ms,
            )
        if stats.errors:
            print_file_errors(stats.errors)
            raise typer.Exit(code=1)

    except ContourLoadError as e:
        print_error(f"Could not load contours: {e.reason}")
        raise typer.Exit(code=1)
    except ContourJoinError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except typer.Exit:
        raise
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)


def _handle_dry_run(paths: list[Path], quiet: bool) -> None:
    """Handle --dry-run mode.

    Args:
        paths: Input contour files
        quiet: Suppress output
    """
    if not quiet:
        print_step("Analyzing (dry run)")

    rows: list[tuple[str, int, int, int]] = []
    for path in paths:
        with ContourReader(path) as reader:
            total = reader.contour_count
            open_count = reader.open_count
        rows.append((str(path), total, total - open_count, open_count))

    if not quiet:
        console.print()
        print_dry_run_table(rows)
        console.print(f"\n[bold green]{SYM_OK} Dry run complete[/bold green] - no files written")


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
