"""Conversion pipeline: inputs -> parsed Document -> EPUB file."""

import logging
import re
import time
from dataclasses import dataclass
from pathlib import Path

from toepub.core.errors import (
    ConversionError,
    ImageError,
    InputNotFoundError,
    NoInputError,
    UnsupportedFormatError,
)
from toepub.core.image_handler import ImageHandler, extension_for_media_type
from toepub.core.output_writer import write_atomically
from toepub.core.parser_factory import ParserFactory
from toepub.core.xhtml import unique_file_name, unique_id
from toepub.epub.builder import EpubBuilder
from toepub.models.document import Document
from toepub.models.extraction import ImageReference, InputFormat, ParseOutput
from toepub.models.metadata import Metadata
from toepub.models.result import ConversionResult, ConversionStats
from toepub.models.toc import TOCEntry

log = logging.getLogger(__name__)

DEFAULT_OUTPUT_NAME = "output.epub"
UNTITLED = "Untitled Document"
COVER_ID = "cover-image"

IMAGE_SRC_RE = re.compile(r'src="\.\./(images/[^"]+)"')


@dataclass
class ConvertOptions:
    """Options for a single conversion run."""

    output_path: Path | None = None
    input_format: str | None = None  # "md", "html", "pdf"; detected when unset
    cli_metadata: Metadata | None = None  # Overrides from the command line


def default_output_path(inputs: list[Path]) -> Path:
    """Derive the output path from the inputs.

    A single file maps to ``<stem>.epub`` next to it, a directory to
    ``<dirname>.epub``; anything else becomes ``output.epub``.
    """
    if len(inputs) != 1:
        return Path(DEFAULT_OUTPUT_NAME)

    source = inputs[0]
    if source.is_dir():
        return Path(f"{source.resolve().name}.epub")
    return source.with_suffix(".epub")


def expand_inputs(inputs: list[Path]) -> list[Path]:
    """Expand directories (non-recursively) and sort the resulting files.

    Raises:
        InputNotFoundError: If an input path does not exist
    """
    files: list[Path] = []
    for source in inputs:
        if not source.exists():
            raise InputNotFoundError(f"File not found: {source}")
        if source.is_dir():
            files.extend(
                p for p in source.iterdir() if p.is_file() and ParserFactory.is_supported(p)
            )
        else:
            files.append(source)

    return sorted(files, key=str)


class Converter:
    """Orchestrate parsing, merging, image loading, building and writing."""

    def __init__(self) -> None:
        self.builder = EpubBuilder()
        self.image_handler = ImageHandler()

    def convert(self, inputs: list[Path], options: ConvertOptions) -> ConversionResult:
        """Convert one or more input files into a single EPUB.

        Args:
            inputs: Files or directories; directories are expanded to
                their supported files
            options: Output path, forced input format and metadata overrides

        Returns:
            ConversionResult with output path, stats and warnings

        Raises:
            ConversionError: For input, parse and output failures
            EpubError: If the EPUB cannot be built
        """
        start = time.perf_counter()
        result = ConversionResult()

        if not inputs:
            raise NoInputError("No input files specified")

        files = expand_inputs(inputs)
        if not files:
            raise NoInputError("No supported files found")

        input_format = ParserFactory.detect_format(files[0], options.input_format)
        if input_format == InputFormat.UNKNOWN:
            raise UnsupportedFormatError(f"Unsupported input format: {files[0]}")
        parser = ParserFactory.create(input_format)

        doc = Document()
        images: list[ImageReference] = []
        for index, file in enumerate(files):
            log.debug("Parsing %s as %s", file, input_format.value)
            try:
                content = file.read_bytes()
            except OSError as e:
                raise ConversionError(f"Cannot read {file}: {e}") from e

            parsed = parser.parse(content, file.parent)
            for warning in parsed.warnings:
                result.add_warning(f"{file.name}: {warning}")
            self._merge(doc, parsed, first=index == 0, images=images)

        if not doc.metadata.title:
            doc.metadata.title = files[0].stem

        output_path = options.output_path or default_output_path(inputs)
        return self._finish(
            doc,
            images,
            options,
            result,
            input_format=input_format,
            input_files=len(files),
            cover_base=files[0].parent,
            output_path=output_path,
            start=start,
        )

    def convert_content(self, content: bytes, options: ConvertOptions) -> ConversionResult:
        """Convert raw content (stdin) into an EPUB; Markdown unless told otherwise."""
        start = time.perf_counter()
        result = ConversionResult()

        input_format = InputFormat.MARKDOWN
        if options.input_format:
            input_format = ParserFactory.format_from_name(options.input_format)
            if input_format == InputFormat.UNKNOWN:
                input_format = InputFormat.MARKDOWN

        parsed = ParserFactory.create(input_format).parse(content, Path.cwd())
        for warning in parsed.warnings:
            result.add_warning(warning)

        doc = Document()
        images: list[ImageReference] = []
        self._merge(doc, parsed, first=True, images=images)
        if not doc.metadata.title:
            doc.metadata.title = UNTITLED

        return self._finish(
            doc,
            images,
            options,
            result,
            input_format=input_format,
            input_files=1,
            cover_base=Path.cwd(),
            output_path=options.output_path or Path(DEFAULT_OUTPUT_NAME),
            start=start,
        )

    def _finish(
        self,
        doc: Document,
        images: list[ImageReference],
        options: ConvertOptions,
        result: ConversionResult,
        *,
        input_format: InputFormat,
        input_files: int,
        cover_base: Path,
        output_path: Path,
        start: float,
    ) -> ConversionResult:
        """Apply overrides, load images, build and write the EPUB."""
        if options.cli_metadata is not None:
            doc.metadata.merge(options.cli_metadata)
            # A cover given on the command line is relative to the working directory
            if options.cli_metadata.cover_image:
                cover_base = Path.cwd()

        self._load_images(doc, images, result)
        if doc.metadata.cover_image:
            self._add_cover(doc, cover_base, result)

        data = self.builder.build(doc)
        write_atomically(output_path, data)

        result.success = True
        result.output_path = str(output_path)
        result.stats = ConversionStats(
            input_format=input_format.value,
            input_files=input_files,
            chapter_count=len(doc.chapters),
            image_count=sum(1 for r in doc.resources if r.media_type.startswith("image/")),
            output_size=len(data),
            duration=time.perf_counter() - start,
        )
        log.debug("Conversion finished in %.3fs", result.stats.duration)
        return result

    def _merge(
        self,
        doc: Document,
        parsed: ParseOutput,
        first: bool,
        images: list[ImageReference],
    ) -> None:
        """Append a parsed document's chapters, TOC and resources to ``doc``.

        Chapters are renumbered to continue after the existing ones, and TOC
        links are rewritten to match. The first document's metadata is kept.
        Image references are added to ``images``; a target name already taken
        by a different source file is suffixed and the chapter links follow.
        """
        source = parsed.document
        if first:
            doc.metadata = source.metadata.model_copy(deep=True)

        image_renames = _merge_images(images, parsed.images)

        renamed: dict[str, str] = {}
        offset = len(doc.chapters)
        for i, chapter in enumerate(source.ordered_chapters()):
            order = offset + i
            number = order + 1
            new_file = f"content/chapter-{number:03d}.xhtml"
            renamed[chapter.file_name] = new_file
            doc.add_chapter(
                chapter.model_copy(
                    update={
                        "id": f"chapter-{number:03d}",
                        "file_name": new_file,
                        "order": order,
                        "content": _rewrite_image_links(chapter.content, image_renames),
                    }
                )
            )

        for entry in source.toc.entries:
            doc.toc.add_entry(_rewrite_href(entry, renamed))

        known = {r.file_name for r in doc.resources}
        for resource in source.resources:
            if resource.file_name in known:
                log.debug("Skipping duplicate resource %s", resource.file_name)
                continue
            used_ids = {r.id for r in doc.resources}
            doc.add_resource(resource.model_copy(update={"id": unique_id(resource.id, used_ids)}))
            known.add(resource.file_name)

    def _load_images(
        self, doc: Document, images: list[ImageReference], result: ConversionResult
    ) -> None:
        """Load referenced images as resources; failures become warnings."""
        used_ids = {c.id for c in doc.chapters} | {r.id for r in doc.resources}
        known = {r.file_name for r in doc.resources}

        for ref in images:
            if ref.file_name in known:
                continue
            try:
                resource = self.image_handler.process_image(ref.source_path, Path.cwd())
            except ImageError as e:
                result.add_warning(f"Image {ref.src}: {e}")
                continue

            doc.add_resource(
                resource.model_copy(
                    update={
                        "id": unique_id(resource.id, used_ids),
                        "file_name": ref.file_name,
                    }
                )
            )
            known.add(ref.file_name)

    def _add_cover(self, doc: Document, base_path: Path, result: ConversionResult) -> None:
        """Embed ``metadata.cover_image`` as the cover resource."""
        try:
            resource = self.image_handler.process_image(doc.metadata.cover_image, base_path)
        except ImageError as e:
            result.add_warning(f"Cover image: {e}")
            return

        for existing in doc.resources:
            existing.is_cover = False

        # The cover may already be embedded as a content image
        for existing in doc.resources:
            if existing.data == resource.data:
                existing.is_cover = True
                return

        used_ids = {c.id for c in doc.chapters} | {r.id for r in doc.resources}
        used_files = {r.file_name for r in doc.resources}
        ext = extension_for_media_type(resource.media_type)
        doc.add_resource(
            resource.model_copy(
                update={
                    "id": unique_id(COVER_ID, used_ids),
                    "file_name": unique_file_name(f"images/cover{ext}", used_files),
                    "is_cover": True,
                }
            )
        )


def _merge_images(
    merged: list[ImageReference], incoming: list[ImageReference]
) -> dict[str, str]:
    """Append ``incoming`` to ``merged``, renaming clashing targets.

    Returns the renames as old target file name -> new target file name.
    """
    owners = {ref.file_name: ref.source_path for ref in merged}
    used = set(owners) | {ref.file_name for ref in incoming}
    renames: dict[str, str] = {}

    for ref in incoming:
        owner = owners.get(ref.file_name)
        if owner is not None and owner != ref.source_path:
            new_name = unique_file_name(ref.file_name, used)
            log.debug("Renaming image %s to %s", ref.file_name, new_name)
            renames[ref.file_name] = new_name
            ref = ref.model_copy(update={"file_name": new_name})
        owners.setdefault(ref.file_name, ref.source_path)
        merged.append(ref)

    return renames


def _rewrite_image_links(content: str, renames: dict[str, str]) -> str:
    if not renames:
        return content
    return IMAGE_SRC_RE.sub(
        lambda m: f'src="../{renames.get(m.group(1), m.group(1))}"', content
    )


def _rewrite_href(entry: TOCEntry, renamed: dict[str, str]) -> TOCEntry:
    """Copy a TOC entry with chapter file names replaced throughout."""
    file_name, sep, fragment = entry.href.partition("#")
    href = renamed.get(file_name, file_name) + sep + fragment
    return entry.model_copy(
        update={
            "href": href,
            "children": [_rewrite_href(child, renamed) for child in entry.children],
        }
    )
