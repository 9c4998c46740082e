"""Command-line entry point for the dining simulation."""

from __future__ import annotations

import sys
from typing import Optional, Sequence

from .args import ArgumentError, parse_settings
from .table import Table

__all__ = ["main"]


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the simulation with the given arguments; return the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        settings = parse_settings(args)
    except ArgumentError:
        print("Invalid Argument")
        return 1
    Table(settings).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())