"""
Workflow tests for the CLI interface.

Tests the complete command-line interface including argument parsing,
project loading, and output generation.
"""
import sys
import zipfile

import pytest

from tex2web.cli import main


def _run(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["tex2web", *map(str, args)])
    main()


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_help(self, monkeypatch, capsys):
        """CLI --help displays usage information."""
        with pytest.raises(SystemExit) as exc_info:
            _run(monkeypatch, "--help")
        assert exc_info.value.code == 0
        assert "usage" in capsys.readouterr().out.lower()

    def test_cli_default_output_path(self, monkeypatch, temp_tex):
        """CLI writes <source>.html next to the source when -o is omitted."""
        _run(monkeypatch, temp_tex)
        output = temp_tex.with_suffix(".html")
        assert output.exists()
        page = output.read_text(encoding="utf-8")
        assert page.startswith("<!DOCTYPE html>")
        assert '<div id="preview">' in page
        assert "<h1>Introduction</h1>" in page

    def test_cli_output_flag(self, monkeypatch, capsys, temp_tex, tmp_path):
        output = tmp_path / "out" / "page.html"
        output.parent.mkdir()
        _run(monkeypatch, temp_tex, "-o", output)
        assert output.exists()
        assert str(output) in capsys.readouterr().out

    def test_cli_fragment(self, monkeypatch, temp_tex, tmp_path):
        """--fragment writes the bare fragment without the page shell."""
        output = tmp_path / "fragment.html"
        _run(monkeypatch, temp_tex, "--fragment", "-o", output)
        fragment = output.read_text(encoding="utf-8")
        assert "<!DOCTYPE" not in fragment
        assert fragment.startswith('<header class="title">')


class TestCLIProjects:
    """Test images and project archives."""

    def test_cli_image_flag(self, monkeypatch, tmp_path, png_bytes):
        image = tmp_path / "photo.png"
        image.write_bytes(png_bytes)
        tex = tmp_path / "doc.tex"
        tex.write_text(r"\includegraphics{photo}", encoding="utf-8")
        output = tmp_path / "doc.html"
        _run(monkeypatch, tex, "-i", image, "--fragment", "-o", output)
        assert 'src="data:image/png;base64,' in output.read_text(encoding="utf-8")

    def test_cli_zip_project(self, monkeypatch, temp_zip, tmp_path):
        output = tmp_path / "project.html"
        _run(monkeypatch, temp_zip, "--fragment", "-o", output)
        fragment = output.read_text(encoding="utf-8")
        assert 'src="data:image/png;base64,' in fragment
        assert "old preview" not in fragment

    def test_cli_export_zip(self, monkeypatch, temp_tex, tmp_path):
        """--export-zip saves main.tex and a fresh index.html."""
        archive_path = tmp_path / "export.zip"
        _run(monkeypatch, temp_tex, "--export-zip", archive_path)
        with zipfile.ZipFile(archive_path) as archive:
            names = archive.namelist()
            assert "main.tex" in names
            assert "index.html" in names
            assert "Notes on Groups" in archive.read("index.html").decode("utf-8")

    def test_cli_open(self, monkeypatch, temp_tex):
        opened = []
        monkeypatch.setattr("webbrowser.open", opened.append)
        _run(monkeypatch, temp_tex, "--open")
        assert opened == [temp_tex.with_suffix(".html").absolute().as_uri()]


class TestCLIErrors:
    """Test error reporting."""

    def test_cli_missing_file(self, monkeypatch, capsys, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            _run(monkeypatch, tmp_path / "absent.tex")
        assert exc_info.value.code == 1
        assert "not found" in capsys.readouterr().err

    def test_cli_unsupported_source(self, monkeypatch, capsys, tmp_path):
        source = tmp_path / "notes.md"
        source.write_text("# hi", encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            _run(monkeypatch, source)
        assert exc_info.value.code == 1
        assert "Conversion failed" in capsys.readouterr().err

    def test_cli_missing_image(self, monkeypatch, capsys, temp_tex, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            _run(monkeypatch, temp_tex, "-i", tmp_path / "nope.png")
        assert exc_info.value.code == 1
        assert "nope.png" in capsys.readouterr().err
