"""Configuration management for the clinical form extraction system.

Loads and validates YAML configuration with defaults for OCR, extraction
and export settings.
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from medform.extraction.export import DEFAULT_FILENAME_PREFIX
from medform.extraction.models import PAGE_DELIMITER

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "MEDFORM_CONFIG"
DEFAULT_CONFIG_PATH = "configs/config.yaml"


class OCRConfig(BaseModel):
    """Configuration for the Tesseract OCR collaborator."""

    tesseract_cmd: str | None = None
    default_lang: str = "eng"
    psm: int = 3
    pdf_dpi: int = 300
    pdf_thread_count: int = 1


class ExtractionConfig(BaseModel):
    """Configuration for template classification and field extraction."""

    default_template_hint: str = "auto"
    page_delimiter: str = PAGE_DELIMITER


class ExportConfig(BaseModel):
    """Configuration for the downloadable JSON artifact."""

    filename_prefix: str = DEFAULT_FILENAME_PREFIX
    indent: int = 2


class ServerConfig(BaseModel):
    """Bind address for the API server."""

    host: str = "0.0.0.0"
    port: int = 8000


class AppConfig(BaseModel):
    """Top-level application configuration."""

    ocr: OCRConfig = Field(default_factory=OCRConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file. Defaults to the
            ``MEDFORM_CONFIG`` environment variable, then configs/config.yaml.

    Returns:
        Validated application configuration. A missing or empty file
        yields the defaults.

    Raises:
        pydantic.ValidationError: If a section holds values of the wrong type.
    """
    if path is None:
        path = Path(os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH))

    if not path.exists():
        logger.info("No config file found at %s, using defaults", path)
        return AppConfig()

    logger.info("Loading configuration from %s", path)
    raw = yaml.safe_load(path.read_text()) or {}
    return AppConfig.model_validate(raw)
