from typing import Any

from pydantic import BaseModel, Field


class ExportRequest(BaseModel):
    # Left untyped so a non-object plan gets the MISSING_PLAN error rather than a validation error.
    plan: Any = None
    format: str = Field(default="docx", min_length=1, max_length=16)


class ErrorResponse(BaseModel):
    success: bool = False
    code: str
    message: str


class SectionDescriptor(BaseModel):
    key: str
    title: str
    group: str
    accessible: bool


class SectionView(BaseModel):
    key: str
    title: str
    group: str
    text: str
    summary: str
    locked: bool


class GeneratePlanResponse(BaseModel):
    success: bool = True
    tier: str
    data: dict[str, str]
    sections: list[SectionView]
    source_document: dict[str, Any] | None = None
