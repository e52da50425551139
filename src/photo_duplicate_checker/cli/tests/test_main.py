"""Tests for the command line interface."""

import json
from datetime import datetime
from pathlib import Path

import pytest
from PIL import ExifTags, Image

from ... import __version__
from ...core import Asset, DuplicateGroup, ScanState
from ..main import EXIT_CANCELLED, create_parser, main, print_scan_results, scan_directory_cli


def write_photo(path: Path, size: tuple[int, int] = (40, 30), taken: str = "2021:01:02 10:30:00"):
    """Create a small image stamped with an EXIF DateTime."""
    exif = Image.Exif()
    exif[ExifTags.Base.DateTime] = taken
    Image.new("RGB", size, "red").save(path, exif=exif.tobytes())
    return path


@pytest.fixture
def photo_dir(tmp_path: Path) -> Path:
    """Directory with one pair of duplicates and one unrelated photo."""
    write_photo(tmp_path / "IMG_0001.jpg")
    write_photo(tmp_path / "IMG_0001 (1).jpg")
    write_photo(tmp_path / "IMG_0002.jpg", taken="2021:03:04 08:00:00")
    return tmp_path


class TestCreateParser:
    """Test cases for argument parsing."""

    def test_defaults(self) -> None:
        """Test the defaults when launching the GUI."""
        args = create_parser().parse_args([])

        assert args.scan is None
        assert args.no_recursive is False
        assert args.detailed is False
        assert args.output_format == "text"
        assert args.log_level == "INFO"

    def test_scan_options(self) -> None:
        """Test command-line scan options."""
        args = create_parser().parse_args(
            ["--scan", "photos", "--no-recursive", "--detailed", "--output-format", "json"]
        )

        assert args.scan == Path("photos")
        assert args.no_recursive is True
        assert args.detailed is True
        assert args.output_format == "json"

    def test_version(self, capsys) -> None:
        """Test the version flag."""
        with pytest.raises(SystemExit) as exc_info:
            create_parser().parse_args(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestScanDirectoryCli:
    """Test cases for scan_directory_cli."""

    def test_finds_duplicates(self, photo_dir: Path, capsys) -> None:
        """Test a full scan of a directory."""
        state = scan_directory_cli(photo_dir)

        assert state.total_count == 3
        assert state.processed_count == 3
        assert state.group_count == 1
        assert state.cancelled is False
        assert "found 1 duplicate group" in capsys.readouterr().out

    def test_missing_directory(self, tmp_path: Path) -> None:
        """Test that a missing directory is reported."""
        with pytest.raises(FileNotFoundError):
            scan_directory_cli(tmp_path / "missing")

    def test_file_instead_of_directory(self, photo_dir: Path) -> None:
        """Test that a file path is rejected."""
        with pytest.raises(NotADirectoryError):
            scan_directory_cli(photo_dir / "IMG_0001.jpg")


class TestPrintScanResults:
    """Test cases for print_scan_results."""

    def setup_method(self) -> None:
        """Set up test fixtures."""
        taken = datetime(2021, 1, 2, 10, 30, 0)
        self.representative = Asset(
            asset_id="a",
            creation_timestamp=taken,
            pixel_width=40,
            pixel_height=30,
            file_path=Path("/photos/IMG_0001.jpg"),
        )
        self.member = Asset(
            asset_id="b",
            creation_timestamp=taken,
            pixel_width=40,
            pixel_height=30,
            file_path=Path("/photos/IMG_0001 (1).jpg"),
        )
        self.state = ScanState(
            total_count=2,
            processed_count=2,
            groups=[DuplicateGroup(representative=self.representative, members=[self.member])],
        )

    def test_summary(self, capsys) -> None:
        """Test the summary lines."""
        print_scan_results(self.state)
        out = capsys.readouterr().out

        assert "SCAN RESULTS" in out
        assert "Photos checked: 2 of 2" in out
        assert "Duplicate groups: 1" in out
        assert "Group 1: 'IMG_0001.jpg'" in out
        assert "Captured: 2021-01-02 10:30:00" in out
        assert "IMG_0001 (1).jpg" not in out

    def test_detailed_lists_every_asset(self, capsys) -> None:
        """Test that detailed output marks the representative."""
        print_scan_results(self.state, detailed=True)
        out = capsys.readouterr().out

        assert "* IMG_0001.jpg (2021-01-02 10:30:00, 40x30)" in out
        assert "- IMG_0001 (1).jpg (2021-01-02 10:30:00, 40x30)" in out
        assert "Path: /photos/IMG_0001.jpg" in out

    def test_no_duplicates(self, capsys) -> None:
        """Test output for a scan without groups."""
        print_scan_results(ScanState(total_count=1, processed_count=1))

        assert "No duplicates found." in capsys.readouterr().out

    def test_cancelled_scan(self, capsys) -> None:
        """Test that a stopped scan is labelled."""
        print_scan_results(ScanState(total_count=5, processed_count=2, cancelled=True))

        assert "SCAN RESULTS (CANCELLED)" in capsys.readouterr().out


class TestMain:
    """Test cases for the main entry point."""

    def test_text_output(self, photo_dir: Path, capsys) -> None:
        """Test a command-line scan with text output."""
        exit_code = main(["--scan", str(photo_dir), "--log-level", "WARNING"])

        assert exit_code == 0
        assert "Duplicate groups: 1" in capsys.readouterr().out

    def test_json_output(self, photo_dir: Path, capsys) -> None:
        """Test a command-line scan with JSON output."""
        exit_code = main(["--scan", str(photo_dir), "--output-format", "json"])

        assert exit_code == 0
        out = capsys.readouterr().out
        payload = json.loads(out[out.index("{"):])
        assert payload["total_count"] == 3
        assert payload["cancelled"] is False
        assert len(payload["groups"]) == 1
        assert len(payload["groups"][0]["members"]) == 1

    def test_missing_directory(self, tmp_path: Path, capsys) -> None:
        """Test the exit code for a missing directory."""
        exit_code = main(["--scan", str(tmp_path / "missing")])

        assert exit_code == 1
        assert "Error: Directory not found" in capsys.readouterr().out

    def test_cancelled_scan_exit_code(self, photo_dir: Path, monkeypatch) -> None:
        """Test that a stopped scan exits with the interrupt status."""
        from .. import main as main_module

        cancelled = ScanState(total_count=3, processed_count=1, cancelled=True)
        monkeypatch.setattr(main_module, "scan_directory_cli", lambda **kwargs: cancelled)

        assert main(["--scan", str(photo_dir)]) == EXIT_CANCELLED
