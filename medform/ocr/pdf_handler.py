"""PDF page rasterisation for OCR.

Renders every page of a PDF to an RGB numpy array using pdf2image, which
shells out to poppler.
"""

from functools import partial
from pathlib import Path

import numpy as np
from pdf2image import convert_from_bytes, convert_from_path
from pdf2image.exceptions import (
    PDFInfoNotInstalledError,
    PDFPageCountError,
    PDFPopplerTimeoutError,
    PDFSyntaxError,
)

from medform.utils.logger import get_logger

from .errors import OCRProcessingError

logger = get_logger(__name__)

_RENDER_ERRORS = (
    PDFInfoNotInstalledError,
    PDFPageCountError,
    PDFPopplerTimeoutError,
    PDFSyntaxError,
)


class PDFHandler:
    """Renders PDF pages for OCR.

    Args:
        dpi: Rendering resolution. Higher values improve recognition of
            small handwriting and checkbox marks at the cost of memory.
        thread_count: Number of poppler rendering threads.
    """

    def __init__(self, dpi: int = 300, thread_count: int = 1) -> None:
        self.dpi = dpi
        self.thread_count = thread_count

    def pdf_to_images(self, pdf_source: Path | bytes) -> list[np.ndarray]:
        """Render every page of a PDF.

        Args:
            pdf_source: Path to a PDF file or raw PDF bytes.

        Returns:
            Page images in page order.

        Raises:
            FileNotFoundError: If a path is given and the file does not exist.
            OCRProcessingError: If poppler cannot render the PDF.
        """
        if isinstance(pdf_source, bytes):
            render = partial(convert_from_bytes, pdf_source)
        else:
            path = Path(pdf_source)
            if not path.exists():
                raise FileNotFoundError(f"PDF file not found: {path}")
            render = partial(convert_from_path, str(path))

        try:
            pages = render(dpi=self.dpi, thread_count=self.thread_count)
        except _RENDER_ERRORS as exc:
            raise OCRProcessingError(f"PDF conversion failed: {exc}") from exc

        logger.info("Rendered %d PDF pages at %d DPI", len(pages), self.dpi)
        return [np.array(page.convert("RGB")) for page in pages]
