"""Tests for the command-line interface."""

from __future__ import annotations

import os
from collections.abc import Iterator
from unittest.mock import patch

import pytest

from gridlight.cli import apply_overrides, build_parser, main, parse_size


@pytest.fixture(autouse=True)
def clean_environment() -> Iterator[None]:
    """Drop GRIDLIGHT_* overrides and restore the environment afterwards."""
    with patch.dict(os.environ):
        for name in list(os.environ):
            if name.startswith("GRIDLIGHT_"):
                del os.environ[name]
        yield


class TestParseSize:
    """Tests for parse_size()."""

    def test_parses(self) -> None:
        """Width and height split on x, either case."""
        assert parse_size("1280x720") == (1280.0, 720.0)
        assert parse_size("800X600") == (800.0, 600.0)

    @pytest.mark.parametrize("value", ["1280", "wide x tall", "x"])
    def test_rejects_garbage(self, value: str) -> None:
        """Anything but two numbers raises ValueError."""
        with pytest.raises(ValueError):
            parse_size(value)


class TestApplyOverrides:
    """Tests for apply_overrides()."""

    def test_exports_options(self) -> None:
        """Options become GRIDLIGHT_* variables read by the server."""
        parsed = build_parser().parse_args(["--shape", "hex", "--cell-size", "24", "--size", "640x480"])

        apply_overrides(parsed)

        assert os.environ["GRIDLIGHT_SHAPE"] == "hex"
        assert os.environ["GRIDLIGHT_CELL_SIZE"] == "24.0"
        assert os.environ["GRIDLIGHT_VIEWPORT_WIDTH"] == "640.0"
        assert os.environ["GRIDLIGHT_VIEWPORT_HEIGHT"] == "480.0"

    def test_no_options_no_changes(self) -> None:
        """Without options the environment is untouched."""
        apply_overrides(build_parser().parse_args([]))

        assert "GRIDLIGHT_SHAPE" not in os.environ
        assert "GRIDLIGHT_CELL_SIZE" not in os.environ


class TestMain:
    """Tests for main()."""

    def test_runs_uvicorn(self) -> None:
        """main() starts uvicorn with the app import string."""
        with (
            patch("gridlight.cli.uvicorn.run") as run,
            patch("gridlight.cli.configure_logging") as configure,
        ):
            code = main(["--host", "0.0.0.0", "--port", "9000"])

        assert code == 0
        configure.assert_called_once()
        run.assert_called_once_with("gridlight.server.app:app", host="0.0.0.0", port=9000, reload=False)

    def test_bad_size_exits(self) -> None:
        """A malformed --size is a usage error."""
        with patch("gridlight.cli.uvicorn.run") as run, pytest.raises(SystemExit) as exc:
            main(["--size", "huge"])

        assert exc.value.code == 2
        run.assert_not_called()

    def test_bad_shape_exits(self) -> None:
        """Shapes are limited to square and hex."""
        with pytest.raises(SystemExit):
            main(["--shape", "triangle"])
