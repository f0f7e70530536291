"""Tesseract OCR wrapper returning plain page text."""

import shutil
from dataclasses import dataclass

import numpy as np
import pytesseract
from PIL import Image

from medform.utils.logger import get_logger

from .errors import OCRProcessingError

logger = get_logger(__name__)


@dataclass
class OCRResult:
    """Recognised text of one page."""

    text: str
    language: str


class TesseractEngine:
    """Runs Tesseract on page images.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: Default OCR language code.
        psm: Tesseract page segmentation mode.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng",
        psm: int = 3,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang
        self.psm = psm

    @staticmethod
    def is_available() -> bool:
        """Return whether a Tesseract executable can be found."""
        return shutil.which(pytesseract.pytesseract.tesseract_cmd) is not None

    def extract_text(
        self, image: np.ndarray | Image.Image, lang: str | None = None
    ) -> OCRResult:
        """Recognise the text of a single page image.

        Args:
            image: Page image as a numpy array or PIL image.
            lang: OCR language code. Defaults to the engine default.

        Returns:
            OCRResult with the raw recognised text.

        Raises:
            OCRProcessingError: If Tesseract fails on the image.
        """
        lang = lang or self.default_lang
        pil_image = image if isinstance(image, Image.Image) else Image.fromarray(image)

        try:
            text = pytesseract.image_to_string(
                pil_image, lang=lang, config=f"--psm {self.psm}"
            )
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as exc:
            raise OCRProcessingError(f"Text recognition failed: {exc}") from exc

        logger.info("OCR recognised %d characters", len(text))
        return OCRResult(text=text, language=lang)
