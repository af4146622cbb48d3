"""
Command-line interface for the Twintag SDK.

This module provides commands to create bags, list, upload and download
their files, read their metadata and manage stored profiles.
"""
import sys
from typing import Optional, List

from twintag.cli.commands import main_cli
from twintag.cli.utils import print_colored, format_table, format_size

__all__ = [
    'main_cli',
    'run_cli',
    'print_colored',
    'format_table',
    'format_size'
]


def run_cli(argv: Optional[List[str]] = None) -> int:
    """
    Run the CLI with the provided arguments.

    Args:
        argv: List of arguments (use sys.argv if None)

    Returns:
        Exit code
    """
    if argv is None:
        argv = sys.argv[1:]

    return main_cli(argv)
