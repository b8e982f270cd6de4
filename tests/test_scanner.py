# tests/test_scanner.py
from pathlib import Path

import pathspec
import pytest

from ncmerge.config import DEFAULT_IGNORE_PATTERNS, IGNORE_FILENAME
from ncmerge.core.ignore import bootstrap_ncignore, is_path_ignored, load_ignore_spec
from ncmerge.core.merger import merge
from ncmerge.core.scanner import ProgramScanner, is_binary_file, read_nc_file
from ncmerge.core.validator import validate
from ncmerge.models import NCFile


@pytest.fixture
def shop_folder(tmp_path):
    """
    A folder of programs:
    1. plain programs (.nc, .tap)
    2. an ignored backup directory
    3. a binary file with an NC extension
    4. a non-NC file
    5. an .ncignore with a forced inclusion
    """
    (tmp_path / "ops").mkdir()
    (tmp_path / "backup").mkdir()

    (tmp_path / "10_face.nc").write_text("G00 X0\nM30\n", encoding="utf-8")
    (tmp_path / "ops" / "20_drill.tap").write_text("G81 X1 Y1 Z-2 R1\nM30\n", encoding="utf-8")
    (tmp_path / "ops" / "old.nc").write_text("G00 X9\n", encoding="utf-8")
    (tmp_path / "backup" / "10_face.nc").write_text("G00 X0\n", encoding="utf-8")
    (tmp_path / "setup.pdf").write_bytes(b"%PDF-1.4\x00\x01")
    (tmp_path / "broken.nc").write_bytes(b"G00\x00\x00X0")
    (tmp_path / "README.md").write_text("# Shop notes", encoding="utf-8")

    (tmp_path / IGNORE_FILENAME).write_text("backup/\nops/*.nc\n!ops/old.nc\n", encoding="utf-8")
    return tmp_path


def test_load_ignore_spec_with_extra_patterns(tmp_path):
    ignore_file = tmp_path / IGNORE_FILENAME
    ignore_file.write_text("*.bak\n", encoding="utf-8")
    spec = load_ignore_spec(ignore_file, extra_patterns=["merged.nc"])

    assert spec.match_file("part.bak")
    assert spec.match_file("merged.nc")
    assert not spec.match_file("part.nc")


def test_load_ignore_spec_missing_file(tmp_path):
    spec = load_ignore_spec(tmp_path / IGNORE_FILENAME)
    assert not spec.match_file("anything.nc")


def test_is_path_ignored():
    spec = pathspec.PathSpec.from_lines("gitwildmatch", ["backup/", "*.tmp", "!keep.tmp"])

    assert is_path_ignored(Path("backup"), spec, is_directory=True) is True
    assert is_path_ignored(Path("backup/a.nc"), spec) is True
    assert is_path_ignored(Path("x.tmp"), spec) is True
    assert is_path_ignored(Path("keep.tmp"), spec) is False
    assert is_path_ignored(Path("ops/part.nc"), spec) is False


def test_bootstrap_creates_defaults(tmp_path):
    ignore_file = bootstrap_ncignore(tmp_path, "out.nc")
    text = ignore_file.read_text(encoding="utf-8")

    assert ignore_file.name == IGNORE_FILENAME
    for pattern in DEFAULT_IGNORE_PATTERNS:
        assert pattern in text
    assert "out.nc" in text


def test_bootstrap_copies_gitignore_when_asked(tmp_path):
    (tmp_path / ".gitignore").write_text("scratch/\n", encoding="utf-8")
    ignore_file = bootstrap_ncignore(tmp_path, copy_gitignore=True)
    text = ignore_file.read_text(encoding="utf-8")

    assert "scratch/" in text
    assert "__pycache__/" not in text


def test_bootstrap_appends_output_name_once(tmp_path):
    ignore_file = tmp_path / IGNORE_FILENAME
    ignore_file.write_text("*.bak\n", encoding="utf-8")

    bootstrap_ncignore(tmp_path, "combined.nc")
    bootstrap_ncignore(tmp_path, "combined.nc")

    assert ignore_file.read_text(encoding="utf-8").count("combined.nc") == 1


def test_is_binary_file(shop_folder):
    assert is_binary_file(shop_folder / "broken.nc") is True
    assert is_binary_file(shop_folder / "10_face.nc") is False
    assert is_binary_file(shop_folder / "missing.nc") is True


def test_read_nc_file_normalizes_line_endings(tmp_path):
    path = tmp_path / "win.nc"
    path.write_bytes(b"G00 X0\r\nM30\r\n")
    nc_file = read_nc_file(path)

    assert nc_file.filename == "win.nc"
    assert nc_file.content == "G00 X0\nM30\n"


def test_scanner_default_extensions(shop_folder):
    spec = load_ignore_spec(shop_folder / IGNORE_FILENAME)
    files = ProgramScanner(shop_folder, spec).scan()
    names = [f.filename for f in files]

    # Sorted by relative path; binary, ignored and non-NC files skipped
    assert names == ["10_face.nc", "ops/20_drill.tap", "ops/old.nc"]
    assert files[0].content == "G00 X0\nM30\n"


def test_scanner_specific_extensions(shop_folder):
    spec = load_ignore_spec(shop_folder / IGNORE_FILENAME)
    files = ProgramScanner(shop_folder, spec, {".tap"}).scan()
    assert [f.filename for f in files] == ["ops/20_drill.tap"]


def test_scanner_match_all(shop_folder):
    spec = load_ignore_spec(shop_folder / IGNORE_FILENAME)
    names = [f.filename for f in ProgramScanner(shop_folder, spec, {"*"}).scan()]

    assert "README.md" in names
    assert IGNORE_FILENAME in names
    assert "setup.pdf" not in names
    assert "backup/10_face.nc" not in names


def test_read_nc_file_drops_byte_order_mark(tmp_path):
    path = tmp_path / "bom.nc"
    path.write_bytes(b"\xef\xbb\xbf%\nO0002\nG01 X2\nM30\n%\n")
    nc_file = read_nc_file(path)

    assert nc_file.content == "%\nO0002\nG01 X2\nM30\n%\n"
    assert validate(nc_file.content).warnings == []

    result = merge([NCFile("a.nc", "G01 X1\nM30"), nc_file])
    assert result.content == "G01 X1\nG01 X2\nM30"
