# main.py
"""CLI entry point for the FutureLetter enhancement orchestrator."""

from __future__ import annotations

import argparse
import sys

from orchestration.cli_runner import run


def main() -> None:
    """Parse command-line arguments and enhance a letter draft."""
    parser = argparse.ArgumentParser(
        description="Enhance a letter to your future self with AI suggestions."
    )
    parser.add_argument("draft", help="Path to a YAML file with title, goal, content and send_date")
    parser.add_argument(
        "--apply-all",
        action="store_true",
        help="Apply every suggestion to the draft and print the result",
    )
    args = parser.parse_args()
    sys.exit(run(args.draft, apply_all=args.apply_all))


if __name__ == "__main__":
    main()
