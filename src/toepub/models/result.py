"""Conversion outcome models."""

from pydantic import BaseModel, Field


class ConversionStats(BaseModel):
    """Metrics about a finished conversion."""

    input_format: str = ""  # "markdown", "html", "pdf"
    input_files: int = 0
    chapter_count: int = 0
    image_count: int = 0
    output_size: int = 0  # Bytes
    duration: float = 0.0  # Seconds


class ConversionResult(BaseModel):
    """Outcome of a conversion operation."""

    success: bool = False
    output_path: str = ""
    warnings: list[str] = Field(default_factory=list)
    stats: ConversionStats = Field(default_factory=ConversionStats)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)
