"""Entry point for running dirpoll from the command line.

Usage:
    python -m dirpoll PATH [PATH ...]

    # Stop after a fixed time by closing stdin:
    sleep 60 | python -m dirpoll ./inbox --interval 0.5
"""

import sys


def main() -> int:
    """Run the dirpoll CLI."""
    from dirpoll.cli import run_cli

    return run_cli(sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
