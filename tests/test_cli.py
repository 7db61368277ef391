"""Tests for the toepub command line interface."""

import json

from typer.testing import CliRunner

from conftest import OPF_NS, parse_xml, read_zip
from toepub import __version__
from toepub.cli import app
from toepub.commands.convert import (
    EXIT_FILE_NOT_FOUND,
    EXIT_FORMAT_ERROR,
    EXIT_GENERAL_ERROR,
    EXIT_INTERNAL_ERROR,
    EXIT_NOT_WRITABLE,
    exit_code_for,
)
from toepub.core.errors import (
    InputNotFoundError,
    NoInputError,
    OutputNotWritableError,
    ParseError,
    UnsupportedFormatError,
)
from toepub.epub.errors import ArchiveWriteError, MissingTitleError, RenderError

runner = CliRunner()


class TestExitCodes:
    """Tests for mapping errors to exit codes."""

    def test_mapping(self):
        assert exit_code_for(InputNotFoundError("x")) == EXIT_FILE_NOT_FOUND
        assert exit_code_for(UnsupportedFormatError("x")) == EXIT_FORMAT_ERROR
        assert exit_code_for(ParseError("x")) == EXIT_FORMAT_ERROR
        assert exit_code_for(OutputNotWritableError("x")) == EXIT_NOT_WRITABLE
        assert exit_code_for(RenderError("x")) == EXIT_INTERNAL_ERROR
        assert exit_code_for(ArchiveWriteError("x")) == EXIT_INTERNAL_ERROR
        assert exit_code_for(MissingTitleError()) == EXIT_GENERAL_ERROR
        assert exit_code_for(NoInputError("x")) == EXIT_GENERAL_ERROR


class TestConvertCommand:
    """Tests for `toepub convert`."""

    def test_human_output(self, markdown_file, tmp_path):
        out = tmp_path / "book.epub"
        result = runner.invoke(app, ["convert", str(markdown_file), "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert out.exists()
        assert "Created" in result.output
        assert "1 chapters" in result.output

    def test_default_output_next_to_input(self, markdown_file):
        result = runner.invoke(app, ["convert", str(markdown_file)])
        assert result.exit_code == 0, result.output
        assert markdown_file.with_suffix(".epub").exists()

    def test_json_output(self, markdown_file, tmp_path):
        out = tmp_path / "book.epub"
        result = runner.invoke(
            app, ["convert", str(markdown_file), "-o", str(out), "--format", "json"]
        )
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["success"] is True
        assert payload["output"] == str(out)
        assert payload["stats"]["input_format"] == "markdown"
        assert payload["stats"]["chapters"] == 1
        assert payload["stats"]["output_size"] == out.stat().st_size
        assert "error" not in payload

    def test_metadata_options(self, markdown_file, tmp_path):
        out = tmp_path / "book.epub"
        result = runner.invoke(
            app,
            [
                "convert",
                str(markdown_file),
                "-o",
                str(out),
                "-t",
                "Flag Title",
                "-a",
                "One",
                "-a",
                "Two",
                "-l",
                "es",
            ],
        )
        assert result.exit_code == 0, result.output
        root = parse_xml(read_zip(out.read_bytes()).read("OEBPS/content.opf"))
        md = root.find("opf:metadata", namespaces=OPF_NS)
        assert md.findtext("dc:title", namespaces=OPF_NS) == "Flag Title"
        assert [c.text for c in md.findall("dc:creator", namespaces=OPF_NS)] == ["One", "Two"]
        assert md.findtext("dc:language", namespaces=OPF_NS) == "es"

    def test_missing_input(self, tmp_path):
        result = runner.invoke(app, ["convert", str(tmp_path / "missing.md")])
        assert result.exit_code == EXIT_FILE_NOT_FOUND
        assert "Error" in result.output

    def test_missing_input_json(self, tmp_path):
        result = runner.invoke(
            app, ["convert", str(tmp_path / "missing.md"), "--format", "json"]
        )
        assert result.exit_code == EXIT_FILE_NOT_FOUND
        payload = json.loads(result.stdout)
        assert payload["success"] is False
        assert payload["error"]["code"] == EXIT_FILE_NOT_FOUND
        assert "missing.md" in payload["error"]["message"]

    def test_unsupported_format(self, tmp_path):
        source = tmp_path / "notes.txt"
        source.write_text("x")
        result = runner.invoke(app, ["convert", str(source)])
        assert result.exit_code == EXIT_FORMAT_ERROR

    def test_unwritable_output(self, markdown_file, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        result = runner.invoke(
            app, ["convert", str(markdown_file), "-o", str(blocker / "out.epub")]
        )
        assert result.exit_code == EXIT_NOT_WRITABLE

    def test_invalid_format_option(self, markdown_file):
        result = runner.invoke(app, ["convert", str(markdown_file), "--format", "xml"])
        assert result.exit_code == 2

    def test_invalid_input_format_option(self, markdown_file):
        result = runner.invoke(
            app, ["convert", str(markdown_file), "--input-format", "docx"]
        )
        assert result.exit_code == 2

    def test_missing_argument(self):
        result = runner.invoke(app, ["convert"])
        assert result.exit_code == 2

    def test_stdin(self, tmp_path):
        out = tmp_path / "stdin.epub"
        result = runner.invoke(
            app,
            ["convert", "-", "-o", str(out), "--format", "json"],
            input="# From Stdin\n\nBody\n",
        )
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["stats"]["input_files"] == 1
        root = parse_xml(read_zip(out.read_bytes()).read("OEBPS/content.opf"))
        assert root.findtext("opf:metadata/dc:title", namespaces=OPF_NS) == "From Stdin"

    def test_stdin_cannot_mix_with_files(self, markdown_file):
        result = runner.invoke(app, ["convert", "-", str(markdown_file)])
        assert result.exit_code == 2


class TestVersionCommand:
    """Tests for `toepub version`."""

    def test_prints_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output
