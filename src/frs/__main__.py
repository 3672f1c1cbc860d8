"""CLI entry point for frs.

Usage:
    frs with env FOO bar
    frs run -- ./app
    python -m frs inspect
"""

import sys


def main() -> int:
    """Main entry point for the frs CLI."""
    from frs.cli import run_cli

    return run_cli(sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
