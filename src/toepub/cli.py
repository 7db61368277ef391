"""Main CLI application."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from toepub import __version__
from toepub.commands.convert import EXIT_SUCCESS, execute_convert
from toepub.core.converter import ConvertOptions
from toepub.core.parser_factory import ParserFactory
from toepub.models.extraction import InputFormat
from toepub.models.metadata import Metadata

app = typer.Typer(
    name="toepub",
    help="Convert Markdown, HTML, and PDF to EPUB 3.",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

STDIN_ARG = "-"


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show debug logging",
        ),
    ] = False,
) -> None:
    """Convert Markdown, HTML, and PDF documents to valid EPUB 3 e-books.

    Multiple files or a directory are combined into a single book.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.command()
def convert(
    inputs: Annotated[
        list[str],
        typer.Argument(
            help="Input files or directories; '-' reads Markdown from stdin",
        ),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option(
            "--output",
            "-o",
            help="Output file path (default: {input_name}.epub)",
        ),
    ] = None,
    output_format: Annotated[
        str,
        typer.Option(
            "--format",
            "-f",
            help="Output format: human or json",
        ),
    ] = "human",
    title: Annotated[
        Optional[str],
        typer.Option(
            "--title",
            "-t",
            help="Override book title",
        ),
    ] = None,
    authors: Annotated[
        Optional[list[str]],
        typer.Option(
            "--author",
            "-a",
            help="Override author (can be used multiple times)",
        ),
    ] = None,
    language: Annotated[
        Optional[str],
        typer.Option(
            "--language",
            "-l",
            help="Book language (BCP 47 code, e.g. en, fr-CA)",
        ),
    ] = None,
    cover: Annotated[
        Optional[Path],
        typer.Option(
            "--cover",
            "-c",
            help="Cover image path",
        ),
    ] = None,
    input_format: Annotated[
        Optional[str],
        typer.Option(
            "--input-format",
            help="Force input format: md, html, or pdf",
        ),
    ] = None,
) -> None:
    """Convert input file(s) to EPUB format."""
    if output_format not in ("human", "json"):
        raise typer.BadParameter(
            f"Invalid format: {output_format}. Use human or json.",
            param_hint="'--format'",
        )

    if input_format and ParserFactory.format_from_name(input_format) == InputFormat.UNKNOWN:
        raise typer.BadParameter(
            f"Unknown input format: {input_format}. Use md, html, or pdf.",
            param_hint="'--input-format'",
        )

    if STDIN_ARG in inputs and len(inputs) > 1:
        raise typer.BadParameter(
            "'-' cannot be combined with other inputs", param_hint="'INPUTS...'"
        )

    cli_metadata = Metadata(
        title=title or "",
        authors=[a for a in authors or [] if a],
        language=language or "",
        cover_image=str(cover) if cover else "",
    )
    options = ConvertOptions(
        output_path=output,
        input_format=input_format,
        cli_metadata=cli_metadata,
    )

    stdin_content = None
    if inputs == [STDIN_ARG]:
        stdin_content = typer.get_binary_stream("stdin").read()

    code = execute_convert(
        inputs=[Path(p) for p in inputs if p != STDIN_ARG],
        options=options,
        output_format=output_format,  # type: ignore
        console=console,
        err_console=err_console,
        stdin_content=stdin_content,
    )
    if code != EXIT_SUCCESS:
        raise typer.Exit(code)


@app.command()
def version() -> None:
    """Print version information."""
    console.print(f"toepub version {__version__}")
    console.print("EPUB 3.3 compliant output")


if __name__ == "__main__":
    app()
