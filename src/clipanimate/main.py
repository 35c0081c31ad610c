"""Subcommand dispatcher for clipanimate.

Usage:
    clipanimate render --manifest scene.yaml --output out.mp4
    clipanimate still  --manifest scene.yaml --frame 120 --output frame.png
"""

import argparse
import sys


def main(args=None):
    parser = argparse.ArgumentParser(
        prog="clipanimate",
        description="Keyframe animation and timeline compositing.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # Register subcommands. Each delegates to its own module's main().
    subparsers.add_parser("render", help="Export every frame of a scene manifest")
    subparsers.add_parser("still", help="Render a single frame to PNG")

    # Parse only the subcommand name, pass the rest to the subcommand's parser.
    parsed, remaining = parser.parse_known_args(args)

    if parsed.command is None:
        parser.print_help()
        sys.exit(1)

    if parsed.command == "render":
        from .cli import main as render_main
        render_main(remaining)
    elif parsed.command == "still":
        from .still_cli import main as still_main
        still_main(remaining)


if __name__ == "__main__":
    main()
