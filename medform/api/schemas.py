"""Pydantic request/response schemas for the FastAPI endpoints."""

from pydantic import BaseModel, Field

from medform.extraction.models import ExtractionRecord


class TextExtractionRequest(BaseModel):
    """Request schema for extracting fields from already recognised text."""

    pages: list[str] = Field(min_length=1)
    template_hint: str | None = None


class ExtractionResponse(BaseModel):
    """Response schema for a document extraction request."""

    success: bool
    document_id: str
    template: str
    record: ExtractionRecord
    raw_text: str
    page_count: int
    processing_time_ms: float


class TemplateInfo(BaseModel):
    """Information about a supported form template."""

    name: str
    description: str
    supported_fields: list[str]


class TemplatesResponse(BaseModel):
    """Response schema listing available form templates."""

    templates: list[TemplateInfo]


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    tesseract_available: bool
