"""Command-line interface for contourjoin.

This module provides the CLI using Typer with rich output for
user-friendly feedback and progress reporting.

Key features:
- Progress bars for batch joining
- Verbose/quiet output modes
- Dry-run mode for inspecting inputs
- Detailed error reporting
"""

from contourjoin.cli.app import cli, main

__all__ = ["cli", "main"]
