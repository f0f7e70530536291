"""Failure conditions raised while turning an upload into page text."""


class UnsupportedFormatError(ValueError):
    """The payload is neither a PDF nor a raster image."""

    def __init__(
        self, message: str = "Unsupported file type. Please upload a PDF or Image."
    ) -> None:
        super().__init__(message)


class OCRProcessingError(RuntimeError):
    """The document could not be rasterised or recognised."""
