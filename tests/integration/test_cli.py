"""Integration tests for the command-line interface."""

from pathlib import Path

import pytest
from PIL import Image
from typer.testing import CliRunner

from retrace import __version__
from retrace.cli.app import app
from retrace.io import BitmapReader

runner = CliRunner()


@pytest.fixture
def ring_bitmap(tmp_path: Path) -> Path:
    """A 5x5 PBM with a square ring."""
    image = Image.new("1", (5, 5), 1)
    for y in range(5):
        for x in range(5):
            if x in (0, 4) or y in (0, 4):
                image.putpixel((x, y), 0)
    path = tmp_path / "ring.pbm"
    image.save(path)
    return path


class TestCli:
    """Tests for the retrace command."""

    def test_version(self):
        """--version prints the version and exits."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_default_output(self, ring_bitmap):
        """The SVG is written next to the input by default."""
        result = runner.invoke(app, [str(ring_bitmap), "-q"])
        assert result.exit_code == 0, result.stdout
        assert ring_bitmap.with_suffix(".svg").exists()

    def test_explicit_output_and_options(self, ring_bitmap, tmp_path):
        """All tracing options are accepted together."""
        output = tmp_path / "custom.svg"
        result = runner.invoke(
            app,
            [
                str(ring_bitmap),
                "-o", str(output),
                "-m", "outline",
                "-z", "black",
                "-e", "0.5",
                "-t", "1.0",
                "-c", "45",
                "--optimize-exhaustive",
                "-s", "2",
                "-p", "pixel,pre_fit,tangent",
                "--pass-scale", "0.5",
            ],
        )
        assert result.exit_code == 0, result.stdout
        text = output.read_text()
        assert 'viewBox="0 0 10 10"' in text
        assert "<circle" in text
        assert "Complete" in result.stdout

    def test_center_mode(self, ring_bitmap, tmp_path):
        """Center mode writes stroked paths."""
        output = tmp_path / "center.svg"
        result = runner.invoke(app, [str(ring_bitmap), "-o", str(output), "-m", "center", "-q"])
        assert result.exit_code == 0, result.stdout
        assert 'fill="none"' in output.read_text()

    def test_missing_input(self, tmp_path):
        """A missing input file exits with status 1."""
        result = runner.invoke(app, [str(tmp_path / "missing.pbm")])
        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_invalid_mode(self, ring_bitmap):
        """Unknown modes are rejected."""
        result = runner.invoke(app, [str(ring_bitmap), "-m", "sideways"])
        assert result.exit_code == 1
        assert "Invalid mode" in result.stdout

    def test_invalid_pass(self, ring_bitmap):
        """Unknown debug passes are rejected."""
        result = runner.invoke(app, [str(ring_bitmap), "-p", "pixel,bogus"])
        assert result.exit_code == 1

    def test_invalid_threshold(self, ring_bitmap, tmp_path):
        """Out of range thresholds exit with status 1 and write nothing."""
        output = tmp_path / "bad.svg"
        result = runner.invoke(app, [str(ring_bitmap), "-o", str(output), "-e", "-1"])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.stdout
        assert not output.exists()

    def test_verbose_and_quiet(self, ring_bitmap):
        """--verbose and --quiet are mutually exclusive."""
        result = runner.invoke(app, [str(ring_bitmap), "-v", "-q"])
        assert result.exit_code == 1

    def test_not_a_bitmap(self, tmp_path):
        """Files that are not netpbm images exit with status 1."""
        path = tmp_path / "notes.pbm"
        path.write_text("hello")
        result = runner.invoke(app, [str(path)])
        assert result.exit_code == 1
        assert "Could not load bitmap" in result.stdout

    def test_empty_bitmap(self, tmp_path):
        """A blank bitmap still produces a document and a notice."""
        path = tmp_path / "blank.pbm"
        Image.new("1", (4, 4), 1).save(path)
        result = runner.invoke(app, [str(path)])
        assert result.exit_code == 0, result.stdout
        assert "no foreground" in result.stdout
        assert path.with_suffix(".svg").exists()

    def test_workers(self, ring_bitmap, tmp_path):
        """Multiple workers produce the same document as one."""
        one = tmp_path / "one.svg"
        two = tmp_path / "two.svg"
        assert runner.invoke(app, [str(ring_bitmap), "-o", str(one), "-q"]).exit_code == 0
        assert runner.invoke(app, [str(ring_bitmap), "-o", str(two), "-q", "-j", "2"]).exit_code == 0
        assert one.read_text() == two.read_text()

    def test_bitmap_decoded_once(self, ring_bitmap, tmp_path, monkeypatch):
        """The bitmap is read a single time even when its info is printed."""
        loads = []
        original_load = BitmapReader.load

        def counting_load(reader):
            loads.append(reader)
            original_load(reader)

        monkeypatch.setattr(BitmapReader, "load", counting_load)
        result = runner.invoke(app, [str(ring_bitmap), "-o", str(tmp_path / "once.svg")])
        assert result.exit_code == 0, result.stdout
        assert "PBM" in result.stdout
        assert len(loads) == 1

    def test_console_script_entry_point(self):
        """The package exports only the console script target."""
        import retrace.cli

        assert retrace.cli.__all__ == ["cli"]
        assert callable(retrace.cli.cli)
        assert not hasattr(retrace.cli.app, "main")
