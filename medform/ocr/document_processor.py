"""Upload-to-page-text pipeline.

Detects whether a payload is a PDF or a raster image, rasterises PDFs page
by page and runs OCR on each page, reporting progress through an optional
callback.
"""

import io
import mimetypes
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from medform.utils.config import AppConfig
from medform.utils.logger import get_logger

from .errors import OCRProcessingError, UnsupportedFormatError
from .pdf_handler import PDFHandler
from .tesseract_engine import TesseractEngine

logger = get_logger(__name__)

ProgressCallback = Callable[[str, float], None]

_PDF_MAGIC = b"%PDF"
_GENERIC_CONTENT_TYPES = {None, "", "application/octet-stream"}


@dataclass
class DocumentResult:
    """Recognised text of every page of a document."""

    source_file: str
    page_texts: list[str]
    combined_text: str

    @property
    def page_count(self) -> int:
        return len(self.page_texts)


def _report(on_progress: ProgressCallback | None, message: str, value: float) -> None:
    if on_progress is not None:
        on_progress(message, value)


class DocumentProcessor:
    """Turns PDF or image payloads into per-page OCR text.

    Args:
        config: Application configuration object.
    """

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self.pdf_handler = PDFHandler(
            dpi=config.ocr.pdf_dpi, thread_count=config.ocr.pdf_thread_count
        )
        self.ocr_engine = TesseractEngine(
            tesseract_cmd=config.ocr.tesseract_cmd,
            default_lang=config.ocr.default_lang,
            psm=config.ocr.psm,
        )

    def process(
        self,
        source: Path | bytes,
        filename: str = "document",
        content_type: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> DocumentResult:
        """Recognise the text of a document.

        Args:
            source: Path to a document file, or raw file bytes.
            filename: Display name for the source document.
            content_type: MIME type of the payload, if known. Guessed from
                the file suffix for paths.
            on_progress: Called with a status message and a progress
                fraction in [0, 1].

        Returns:
            The recognised page texts and their joined text.

        Raises:
            UnsupportedFormatError: If the payload is neither a PDF nor an
                image.
            OCRProcessingError: If rendering or recognition fails.
        """
        if isinstance(source, bytes):
            content = source
        else:
            path = Path(source)
            content_type = content_type or mimetypes.guess_type(path.name)[0]
            content = path.read_bytes()

        logger.info("Processing document: %s", filename)
        if self._is_pdf(content, content_type):
            page_texts = self._process_pdf(content, on_progress)
        else:
            image = self._load_image(content, content_type)
            page_texts = self._process_image(image, on_progress)

        logger.info("Recognised %d pages from %s", len(page_texts), filename)
        return DocumentResult(
            source_file=filename,
            page_texts=page_texts,
            combined_text=self.config.extraction.page_delimiter.join(page_texts),
        )

    @staticmethod
    def _is_pdf(content: bytes, content_type: str | None) -> bool:
        return content_type == "application/pdf" or content[:4] == _PDF_MAGIC

    @staticmethod
    def _load_image(content: bytes, content_type: str | None) -> np.ndarray:
        """Decode an image payload.

        A declared ``image/*`` payload that fails to decode is corrupt; an
        undeclared payload that fails to decode is unsupported.
        """
        declared_image = bool(content_type) and content_type.startswith("image/")
        if not declared_image and content_type not in _GENERIC_CONTENT_TYPES:
            raise UnsupportedFormatError()

        try:
            img = Image.open(io.BytesIO(content))
            return np.array(img.convert("RGB"))
        except (UnidentifiedImageError, OSError) as exc:
            if declared_image:
                raise OCRProcessingError(f"Could not read image: {exc}") from exc
            raise UnsupportedFormatError() from exc

    def _process_image(
        self, image: np.ndarray, on_progress: ProgressCallback | None
    ) -> list[str]:
        _report(on_progress, "Initializing Tesseract...", 0.0)
        _report(on_progress, "Recognizing text...", 0.5)
        result = self.ocr_engine.extract_text(image)
        _report(on_progress, "Completed", 1.0)
        return [result.text]

    def _process_pdf(
        self, content: bytes, on_progress: ProgressCallback | None
    ) -> list[str]:
        _report(on_progress, "Loading PDF...", 0.0)
        images = self.pdf_handler.pdf_to_images(content)
        total = len(images)
        page_texts: list[str] = []

        for i, image in enumerate(images, 1):
            _report(on_progress, f"Processing page {i} of {total}...", (i - 1) / total)
            _report(on_progress, f"OCR on page {i}...", (i - 0.5) / total)
            page_texts.append(self.ocr_engine.extract_text(image).text)

        _report(on_progress, "Completed", 1.0)
        return page_texts
