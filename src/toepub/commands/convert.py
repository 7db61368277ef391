"""Convert command implementation."""

import logging
from pathlib import Path
from typing import Literal

import typer
from pydantic import BaseModel
from rich.console import Console
from rich.markup import escape

from toepub.core.converter import Converter, ConvertOptions
from toepub.core.errors import (
    ConversionError,
    InputNotFoundError,
    OutputNotWritableError,
    ParseError,
    UnsupportedFormatError,
)
from toepub.epub.errors import ArchiveWriteError, EpubError, RenderError
from toepub.models.result import ConversionResult

log = logging.getLogger(__name__)

# Exit codes following BSD sysexits.h conventions
EXIT_SUCCESS = 0
EXIT_GENERAL_ERROR = 1
EXIT_INVALID_ARGS = 2
EXIT_FILE_NOT_FOUND = 64
EXIT_FORMAT_ERROR = 65
EXIT_NOT_WRITABLE = 66
EXIT_INTERNAL_ERROR = 70

SYMBOL_SUCCESS = "✓"
SYMBOL_WARNING = "⚠"
SYMBOL_ERROR = "✗"


class JsonStats(BaseModel):
    input_format: str
    input_files: int
    chapters: int
    images: int
    output_size: int
    duration_ms: int


class JsonError(BaseModel):
    code: int
    message: str


class JsonOutput(BaseModel):
    """Machine-readable conversion report."""

    success: bool
    output: str | None = None
    stats: JsonStats | None = None
    warnings: list[str] | None = None
    error: JsonError | None = None


def exit_code_for(error: Exception) -> int:
    """Map a pipeline error to a process exit code."""
    if isinstance(error, InputNotFoundError):
        return EXIT_FILE_NOT_FOUND
    if isinstance(error, (UnsupportedFormatError, ParseError)):
        return EXIT_FORMAT_ERROR
    if isinstance(error, OutputNotWritableError):
        return EXIT_NOT_WRITABLE
    if isinstance(error, (RenderError, ArchiveWriteError)):
        return EXIT_INTERNAL_ERROR
    return EXIT_GENERAL_ERROR


def print_result(
    result: ConversionResult,
    output_format: Literal["human", "json"],
    console: Console,
    err_console: Console,
) -> None:
    """Report a successful conversion."""
    if output_format == "json":
        stats = result.stats
        payload = JsonOutput(
            success=True,
            output=result.output_path,
            stats=JsonStats(
                input_format=stats.input_format,
                input_files=stats.input_files,
                chapters=stats.chapter_count,
                images=stats.image_count,
                output_size=stats.output_size,
                duration_ms=int(stats.duration * 1000),
            ),
            warnings=result.warnings or None,
        )
        typer.echo(payload.model_dump_json(indent=2, exclude_none=True))
        return

    for warning in result.warnings:
        err_console.print(f"[yellow]{SYMBOL_WARNING} Warning: {escape(warning)}[/]")

    size_kb = result.stats.output_size // 1024
    console.print(
        f"[green]{SYMBOL_SUCCESS}[/] Created [bold]{escape(result.output_path)}[/] ({size_kb} KB)"
    )
    console.print(f"  - {result.stats.chapter_count} chapters")
    console.print(f"  - {result.stats.image_count} images")
    console.print(f"  - Duration: {result.stats.duration:.1f}s")


def print_error(
    error: Exception,
    output_format: Literal["human", "json"],
    err_console: Console,
) -> int:
    """Report a failed conversion and return the exit code."""
    code = exit_code_for(error)
    if output_format == "json":
        payload = JsonOutput(success=False, error=JsonError(code=code, message=str(error)))
        typer.echo(payload.model_dump_json(indent=2, exclude_none=True))
    else:
        err_console.print(f"[red]{SYMBOL_ERROR} Error: {escape(str(error))}[/]")
    return code


def execute_convert(
    inputs: list[Path],
    options: ConvertOptions,
    output_format: Literal["human", "json"],
    console: Console,
    err_console: Console,
    stdin_content: bytes | None = None,
) -> int:
    """Execute the convert command and return the exit code.

    ``stdin_content`` replaces ``inputs`` when reading from standard input.
    """
    if output_format == "human" and stdin_content is None:
        if len(inputs) == 1:
            kind = "directory" if inputs[0].is_dir() else "file"
            err_console.print(f"[dim]Converting {kind}: {escape(str(inputs[0]))}[/]")
        else:
            err_console.print(f"[dim]Converting {len(inputs)} files...[/]")

    converter = Converter()
    try:
        if stdin_content is not None:
            result = converter.convert_content(stdin_content, options)
        else:
            result = converter.convert(inputs, options)
    except (ConversionError, EpubError) as e:
        log.debug("Conversion failed", exc_info=True)
        return print_error(e, output_format, err_console)

    print_result(result, output_format, console, err_console)
    return EXIT_SUCCESS
