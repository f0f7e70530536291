"""FastAPI application for the Clinical Form Extraction API.

Provides REST endpoints for document upload extraction, text-only
extraction, JSON export of edited records, template listing, and health
checks.
"""

import time
import uuid
from typing import Annotated

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from medform.extraction.export import export_filename, field_paths, record_to_dict
from medform.extraction.extractor import extract_data
from medform.extraction.field_tables import TEMPLATE_VARIANTS
from medform.extraction.models import CommonFields, ExtractionRecord
from medform.ocr.document_processor import DocumentProcessor
from medform.ocr.errors import OCRProcessingError, UnsupportedFormatError
from medform.ocr.tesseract_engine import TesseractEngine
from medform.utils.config import AppConfig, load_config
from medform.utils.logger import get_logger

from .schemas import (
    ExtractionResponse,
    HealthResponse,
    TemplateInfo,
    TemplatesResponse,
    TextExtractionRequest,
)

logger = get_logger(__name__)

API_VERSION = "1.0.0"

app = FastAPI(
    title="Clinical Form Extraction API",
    description="Extract structured fields from scanned clinical forms",
    version=API_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_config() -> AppConfig:
    return load_config()


def _get_processor(config: AppConfig) -> DocumentProcessor:
    """Build the OCR document processor for a request."""
    return DocumentProcessor(config)


_ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/tiff",
    "image/bmp",
    "image/webp",
    "application/pdf",
    "application/octet-stream",
}


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status."""
    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        tesseract_available=TesseractEngine.is_available(),
    )


@app.post("/extract", response_model=ExtractionResponse)
async def extract_document(
    file: Annotated[UploadFile, File(...)],
    template_hint: Annotated[str | None, Query()] = None,
) -> ExtractionResponse:
    """Recognise an uploaded form and extract its fields.

    Args:
        file: Uploaded document (PDF or raster image).
        template_hint: ``auto`` or an explicit template id. Defaults to the
            configured hint; unrecognised values fall back to automatic
            detection.

    Returns:
        Extraction record with the recognised text.
    """
    start_time = time.time()

    if file.content_type and file.content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {file.content_type}",
        )

    try:
        config = _get_config()
        processor = _get_processor(config)
        content = await file.read()
        doc_result = processor.process(
            content, file.filename or "document", content_type=file.content_type
        )
        record = extract_data(
            doc_result.page_texts,
            template_hint or config.extraction.default_template_hint,
            delimiter=config.extraction.page_delimiter,
        )
    except UnsupportedFormatError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except OCRProcessingError as exc:
        logger.error("OCR failed for %s: %s", file.filename, exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except Exception as exc:
        logger.error("Extraction failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return ExtractionResponse(
        success=True,
        document_id=str(uuid.uuid4()),
        template=record.template.value,
        record=record,
        raw_text=doc_result.combined_text,
        page_count=doc_result.page_count,
        processing_time_ms=(time.time() - start_time) * 1000,
    )


@app.post("/extract/text", response_model=ExtractionResponse)
async def extract_text(request: TextExtractionRequest) -> ExtractionResponse:
    """Extract fields from page texts recognised elsewhere."""
    start_time = time.time()
    config = _get_config()
    delimiter = config.extraction.page_delimiter

    hint = request.template_hint or config.extraction.default_template_hint
    record = extract_data(request.pages, hint, delimiter=delimiter)
    return ExtractionResponse(
        success=True,
        document_id=str(uuid.uuid4()),
        template=record.template.value,
        record=record,
        raw_text=delimiter.join(request.pages),
        page_count=len(request.pages),
        processing_time_ms=(time.time() - start_time) * 1000,
    )


@app.post("/export")
async def export_record(record: ExtractionRecord) -> JSONResponse:
    """Return an (edited) record as a downloadable JSON attachment."""
    config = _get_config()
    filename = export_filename(config.export.filename_prefix)
    logger.info("Exporting record as %s", filename)
    return JSONResponse(
        content=record_to_dict(record),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.get("/templates", response_model=TemplatesResponse)
async def list_templates() -> TemplatesResponse:
    """List supported form templates and the fields each one fills."""
    common = field_paths(CommonFields, "common")
    templates = []
    for template_id, variant in TEMPLATE_VARIANTS.items():
        field_info = ExtractionRecord.model_fields[variant.attribute]
        templates.append(
            TemplateInfo(
                name=template_id.value,
                description=variant.description,
                supported_fields=common
                + field_paths(
                    field_info.annotation, field_info.alias or variant.attribute
                ),
            )
        )
    return TemplatesResponse(templates=templates)
