"""Subcommand dispatcher for framelayout.

Usage:
    framelayout inspect --manifest timeline.yaml [--frame 45] [--json]
    framelayout preview --manifest timeline.yaml --output frame.png --frame 45
    framelayout preview --manifest timeline.yaml --output timeline.mp4
"""

import argparse
import sys


COMMANDS = {"inspect", "preview"}


def main(args=None):
    parser = argparse.ArgumentParser(
        prog="framelayout",
        description="Frame layout inspection and wireframe previews for timeline manifests.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # Register subcommands. Each delegates to its own module's main().
    subparsers.add_parser("inspect", help="Print the frame layout or a frame snapshot")
    subparsers.add_parser("preview", help="Render a wireframe frame or timeline video")

    # Parse only the subcommand name, pass the rest to the subcommand's parser.
    parsed, remaining = parser.parse_known_args(args)

    if parsed.command not in COMMANDS:
        parser.print_help()
        sys.exit(1)

    if parsed.command == "inspect":
        from .inspect_cli import main as inspect_main
        inspect_main(remaining)
    elif parsed.command == "preview":
        from .preview_cli import main as preview_main
        preview_main(remaining)


if __name__ == "__main__":
    main()
