from __future__ import annotations

import logging
from typing import Callable

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from projectworks.api.contracts import ErrorResponse, ExportRequest, GeneratePlanResponse, SectionDescriptor
from projectworks.auth import resolve_request_tier
from projectworks.config import settings
from projectworks.export import (
    DOCX_MEDIA_TYPE,
    EXPORT_FILENAME,
    JSON_FALLBACK_FILENAME,
    JSON_MEDIA_TYPE,
    SUPPORTED_EXPORT_FORMATS,
    DocumentExportError,
    build_plan_docx,
    render_json_fallback,
)
from projectworks.generation import BedrockPlanGenerator, build_user_prompt
from projectworks.parsers import extract_plain_text
from projectworks.plan.parser import coerce_plan_record
from projectworks.plan.tiers import PlanTier, can_download_word, filter_sections_for_tier
from projectworks.plan.views import build_section_views, describe_sections

logger = logging.getLogger("projectworks.api")

PlanGeneratorGetter = Callable[[], BedrockPlanGenerator]

_GENERATION_FAILURE_STATUS = {
    "AUTH_ERROR": 502,
    "RATE_LIMIT": 503,
    "GENERATION_FAILED": 502,
}
_ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    status: {"model": ErrorResponse} for status in (400, 401, 403, 413, 502, 503)
}


def api_error(status_code: int, code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={"success": False, "code": code, "message": message},
    )


def _attachment(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _read_upload(file: UploadFile | None) -> tuple[str, dict[str, object] | None]:
    if file is None or not file.filename:
        return "", None

    content = file.file.read(settings.max_upload_file_bytes + 1)
    if len(content) > settings.max_upload_file_bytes:
        raise api_error(
            413,
            "FILE_TOO_LARGE",
            f"Uploaded file exceeds the {settings.max_upload_file_bytes} byte limit.",
        )

    extraction = extract_plain_text(
        content=content,
        file_name=file.filename,
        content_type=file.content_type or "",
    )
    text = extraction.text
    return text, {
        "file_name": file.filename,
        "parser_id": extraction.parser_id,
        "chars": len(text),
        "error": extraction.error,
    }


def build_plans_router(*, get_plan_generator: PlanGeneratorGetter) -> APIRouter:
    router = APIRouter()

    @router.get("/sections", response_model=list[SectionDescriptor])
    def list_sections(tier: PlanTier = Depends(resolve_request_tier)) -> list[dict[str, object]]:
        return describe_sections(tier)

    @router.post("/generate", response_model=GeneratePlanResponse, responses=_ERROR_RESPONSES)
    def generate_plan(
        prompt: str = Form(default=""),
        file: UploadFile | None = File(default=None),
        tier: PlanTier = Depends(resolve_request_tier),
    ) -> dict[str, object]:
        document_text, source_document = _read_upload(file)
        if not prompt.strip() and not document_text.strip():
            raise api_error(400, "MISSING_INPUT", "Provide a project brief or a readable document.")

        user_prompt = build_user_prompt(
            prompt,
            document_text,
            max_prompt_chars=settings.max_prompt_chars,
            max_document_chars=settings.max_document_chars,
        )
        result = get_plan_generator().generate(user_prompt)
        if not result.success:
            logger.warning(
                "plan_generation_failed",
                extra={
                    "event": "plan_generation_failed",
                    "code": result.code,
                    "attempts": result.attempts,
                    "error": result.message,
                },
            )
            raise api_error(_GENERATION_FAILURE_STATUS.get(result.code, 502), result.code, result.message)

        logger.info(
            "plan_generated",
            extra={
                "event": "plan_generated",
                "tier": tier.value,
                "attempts": result.attempts,
                "model_id": result.model_id,
                "filled_sections": sum(1 for value in result.data.values() if value.strip()),
            },
        )
        return {
            "success": True,
            "tier": tier.value,
            "data": filter_sections_for_tier(result.data, tier),
            "sections": build_section_views(result.data, tier),
            "source_document": source_document,
        }

    @router.post("/export", response_model=None, responses=_ERROR_RESPONSES)
    def export_plan(
        payload: ExportRequest,
        tier: PlanTier = Depends(resolve_request_tier),
    ) -> Response:
        if not isinstance(payload.plan, dict):
            raise api_error(400, "MISSING_PLAN", "Plan data is required.")

        export_format = payload.format.strip().lower()
        record = coerce_plan_record(payload.plan)

        if export_format == "json":
            visible = filter_sections_for_tier(record, tier)
            return _attachment(render_json_fallback(visible), JSON_MEDIA_TYPE, JSON_FALLBACK_FILENAME)

        if export_format not in SUPPORTED_EXPORT_FORMATS:
            raise api_error(400, "UNSUPPORTED_FORMAT", f"Export format '{payload.format}' is not supported.")
        if not can_download_word(tier):
            raise api_error(403, "UPGRADE_REQUIRED", "Word export is available on the Pro plan.")

        try:
            content = build_plan_docx(record)
        except DocumentExportError as exc:
            logger.warning(
                "docx_export_fell_back_to_json",
                extra={"event": "docx_export_fell_back_to_json", "error": str(exc)},
            )
            return _attachment(render_json_fallback(record), JSON_MEDIA_TYPE, JSON_FALLBACK_FILENAME)

        return _attachment(content, DOCX_MEDIA_TYPE, EXPORT_FILENAME)

    return router
