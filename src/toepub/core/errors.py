"""Conversion pipeline errors."""


class ConversionError(Exception):
    """Base error for the conversion pipeline."""


class NoInputError(ConversionError):
    """No input files specified or found."""


class InputNotFoundError(ConversionError):
    """An input path does not exist."""


class UnsupportedFormatError(ConversionError):
    """Input format cannot be detected or has no parser."""


class ParseError(ConversionError):
    """An input file could not be parsed."""


class OutputNotWritableError(ConversionError):
    """The output EPUB could not be written."""


class ImageError(ConversionError):
    """Base error for image handling."""


class ImageNotFoundError(ImageError):
    """Image file not found."""


class UnsupportedImageError(ImageError):
    """Image format is not supported."""
