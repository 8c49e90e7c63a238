"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with progress bars, tables, and formatted messages.
"""


from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_DOT = "·"  # Separator/secondary info


def create_progress() -> Progress:
    """Create a rich progress bar for file processing.

    Returns:
        Configured Progress instance with bar and time elapsed.
    """
    return Progress(
        TextColumn("  "),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]contourjoin[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_inputs(file_count: int, tolerance: tuple[int, int, int], verbose: bool) -> None:
    """Print the input summary.

    Args:
        file_count: Number of input files
        tolerance: (dx, dy, dz) matching tolerance
        verbose: Whether to show the tolerance line
    """
    plural = "file" if file_count == 1 else "files"
    console.print(f"  [green]{file_count}[/green] contour {plural}")
    if verbose:
        dx, dy, dz = tolerance
        console.print(f"  tolerance dx={dx} {SYM_DOT} dy={dy} {SYM_DOT} dz={dz}")


def print_dry_run_table(rows: list[tuple[str, int, int, int]]) -> None:
    """Print per-file contour counts for a dry run.

    Args:
        rows: (file name, contours, closed, open) per file
    """
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("File")
    table.add_column("Contours", justify="right")
    table.add_column("Closed", justify="right")
    table.add_column("Open", justify="right")
    for name, total, closed, open_count in rows:
        # Use Text to safely handle paths with special characters
        table.add_row(Text(name), str(total), str(closed), str(open_count))
    console.print(table)


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def print_processing_info(workers: int, is_auto: bool = False) -> None:
    """Print processing configuration.

    Args:
        workers: Number of parallel workers
        is_auto: Whether the count was auto-detected
    """
    auto_suffix = " (auto)" if is_auto else ""
    console.print(f"  {workers} workers{auto_suffix} {SYM_DOT} Ctrl+C to cancel")


def print_success(
    total_time_s: float,
    processed: int,
    splices: int,
    defects: int,
    errors: int,
    avg_time_ms: float | None = None,
    min_time_ms: float | None = None,
    max_time_ms: float | None = None,
) -> None:
    """Print success message with summary.

    Args:
        total_time_s: Total processing time in seconds
        processed: Number of files joined
        splices: Total number of splices performed
        defects: Total number of defects reported
        errors: Number of files that failed
        avg_time_ms: Average processing time per file in milliseconds
        min_time_ms: Minimum processing time per file in milliseconds
        max_time_ms: Maximum processing time per file in milliseconds
    """
    time_str = _format_time(total_time_s)

    console.print(f"\n[bold green]{SYM_OK} Complete[/bold green] in {time_str}")

    defect_style = "yellow" if defects > 0 else "green"
    error_style = "red" if errors > 0 else "green"
    console.print(
        f"  {processed} files {SYM_DOT} {splices} splices {SYM_DOT} "
        f"[{defect_style}]{defects} defects[/{defect_style}] {SYM_DOT} "
        f"[{error_style}]{errors} errors[/{error_style}]"
    )

    if avg_time_ms is not None:
        timing_str = f"{avg_time_ms:.1f}ms avg"
        if min_time_ms is not None and max_time_ms is not None:
            timing_str += f" ({min_time_ms:.1f}–{max_time_ms:.1f}ms range)"
        console.print(f"  {timing_str}")


def print_file_errors(errors: list[tuple[str, str]]) -> None:
    """Print the files that failed and why.

    Args:
        errors: (file name, error message) pairs
    """
    for file_name, message in errors:
        line = Text(f"  {SYM_ERR} ", style="red")
        line.append(file_name, style="bold")
        line.append(f": {message}")
        console.print(line)


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")


def print_cancellation_notice() -> None:
    """Print cancellation acknowledgment."""
    console.print(f"\n{SYM_DOT} Cancelling... waiting for in-progress files")


def print_cancellation_summary(processed: int, cancelled: int) -> None:
    """Print cancellation summary.

    Args:
        processed: Number of files successfully joined before cancellation
        cancelled: Number of pending tasks that were cancelled
    """
    console.print(f"\n{SYM_DOT} [bold]Cancelled[/bold]")
    console.print(f"  {processed} files completed {SYM_DOT} {cancelled} tasks cancelled")
