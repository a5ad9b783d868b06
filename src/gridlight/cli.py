"""Command-line interface for Gridlight."""

import argparse
import os
import sys

import uvicorn

from gridlight import __version__
from gridlight.logging_config import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gridlight",
        description="Gridlight - animated light particles on a tessellated grid",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind to (default: 8000)",
    )
    parser.add_argument(
        "--shape",
        choices=["square", "hex"],
        help="Grid shape (overrides GRIDLIGHT_SHAPE)",
    )
    parser.add_argument(
        "--cell-size",
        type=float,
        help="Cell size in pixels (overrides GRIDLIGHT_CELL_SIZE)",
    )
    parser.add_argument(
        "--size",
        metavar="WxH",
        help="Initial region size, e.g. 1280x720",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def parse_size(value: str) -> tuple[float, float]:
    """Parse ``"WxH"`` into (width, height).

    Raises:
        ValueError: If the value is not two numbers separated by 'x'.
    """
    width, sep, height = value.lower().partition("x")
    if not sep:
        raise ValueError(f"Expected WxH, got {value!r}")
    return float(width), float(height)


def apply_overrides(parsed: argparse.Namespace) -> None:
    """Export command-line options as GRIDLIGHT_* variables for the server."""
    if parsed.shape:
        os.environ["GRIDLIGHT_SHAPE"] = parsed.shape
    if parsed.cell_size is not None:
        os.environ["GRIDLIGHT_CELL_SIZE"] = str(parsed.cell_size)
    if parsed.size:
        width, height = parse_size(parsed.size)
        os.environ["GRIDLIGHT_VIEWPORT_WIDTH"] = str(width)
        os.environ["GRIDLIGHT_VIEWPORT_HEIGHT"] = str(height)


def main(args: list[str] | None = None) -> int:
    """Run the Gridlight server.

    Args:
        args: Command-line arguments. If None, uses sys.argv[1:].

    Returns:
        Exit code (0 for success).
    """
    parser = build_parser()
    parsed = parser.parse_args(args)

    try:
        apply_overrides(parsed)
    except ValueError as e:
        parser.error(str(e))

    configure_logging()

    print(f"Starting Gridlight server at http://{parsed.host}:{parsed.port}")
    print("Press Ctrl+C to stop")

    uvicorn.run(
        "gridlight.server.app:app",
        host=parsed.host,
        port=parsed.port,
        reload=parsed.reload,
    )

    return 0


if __name__ == "__main__":
    sys.exit(main())
