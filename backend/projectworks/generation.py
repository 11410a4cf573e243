from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time
from typing import Any

from projectworks.config import Settings
from projectworks.plan.parser import PlanRecord, has_content, parse_plan_record

logger = logging.getLogger("projectworks.generation")

SYSTEM_PROMPT = """You are the foremost project manager in the world. Your project plans set the standard. \
You produce comprehensive, submission-ready plans that leave nothing to chance. Write in detail: every section \
must be substantial (multiple paragraphs, 3-6+ where appropriate). No one-sentence summaries. Return ONLY valid \
JSON. No markdown. Escape quotes and newlines in strings (use \\n for newlines, \\" for quotes).

INDEX: Tabulated table of contents with optional page numbers. One line per section. Format: Number TAB Section \
title TAB Page (e.g. "1\\tBackground\\t1", "2\\tScope\\t2"). Use page numbers 1, 2, 3... if known, or "—" for \
page. Include all main sections and appendices in order.

MAIN SECTIONS (use these exact keys; each value must be DETAILED plain text, several paragraphs, not short):
- "index": tabulated list (No. TAB Section name TAB Page), one line per section
- "background": full project background, client, objectives, constraints, context (detailed)
- "scope": comprehensive scope of works, inclusions, exclusions, boundaries, interfaces
- "projectOrganisationStructure": organisation chart narrative, roles, responsibilities, reporting lines, key personnel
- "plantAndEquipment": full list and description of plant, machinery, equipment, capacity, maintenance approach
- "constructionMethodStatement": methodology per work package/WBS; sequence, resources, quality and safety per \
activity; reference to tender/spec
- "qualityManagement": quality plan, standards, inspections, ITP, hold points, records, non-conformance process
- "riskManagement": risk process, risk matrix summary, key risks and mitigations; reference Appendix A
- "safetyManagement": safety plan, SWMS, inductions, PPE, emergency procedures, client requirements
- "constructionSchedule": narrative plus key phases and dates; reference Appendix B (Program)
- "projectReference": all applicable standards (Main Roads, AS, client specs); cite tender and technical spec \
where relevant.

APPENDICES (detailed content, not one line):
- "appendixRiskMatrix": full risk matrix table content (risk description, likelihood, impact, rating, mitigation)
- "appendixProjectProgram": program summary, key dates, milestones, critical path notes
- "appendixInspectionAndTestPlan": ITP table or detailed inspection and test requirements
- "appendixReferenceNotes": reference list, document register, revision notes

JSON structure (every string value must be lengthy and detailed):
{
  "index": "1\\tBackground\\n2\\tScope\\n...",
  "background": "",
  "scope": "",
  "projectOrganisationStructure": "",
  "plantAndEquipment": "",
  "constructionMethodStatement": "",
  "qualityManagement": "",
  "riskManagement": "",
  "safetyManagement": "",
  "constructionSchedule": "",
  "projectReference": "",
  "appendixRiskMatrix": "",
  "appendixProjectProgram": "",
  "appendixInspectionAndTestPlan": "",
  "appendixReferenceNotes": ""
}"""

_AUTH_ERROR_MARKERS = ("api key", "401", "unrecognizedclient", "accessdenied", "security token")
_RATE_LIMIT_MARKERS = ("rate exceeded", "rate limit", "throttl", "too many requests")


class PlanGenerationError(RuntimeError):
    """Raised when the model call fails or returns no usable output."""


@dataclass
class PlanGenerationResult:
    success: bool
    data: PlanRecord = field(default_factory=dict)
    code: str = ""
    message: str = ""
    attempts: int = 0
    model_id: str = ""


def classify_generation_error(message: str) -> str:
    lowered = message.lower()
    if any(marker in lowered for marker in _AUTH_ERROR_MARKERS):
        return "AUTH_ERROR"
    if any(marker in lowered for marker in _RATE_LIMIT_MARKERS):
        return "RATE_LIMIT"
    return "GENERATION_FAILED"


def build_user_prompt(prompt: str, document_text: str = "", *, max_prompt_chars: int, max_document_chars: int) -> str:
    brief = prompt.strip()[:max_prompt_chars]
    document = document_text.strip()
    if len(document) > max_document_chars:
        document = document[:max_document_chars].rstrip() + "\n[document truncated]"

    parts: list[str] = []
    if brief:
        parts.append(f"Project brief:\n{brief}")
    if document:
        parts.append(f"Client documents (extracted text):\n{document}")
    if not parts:
        parts.append("Project brief:\nGeneral civil construction project.")
    return "\n\n".join(parts)


class BedrockPlanGenerator:
    def __init__(self, settings: Settings, client: Any | None = None) -> None:
        self._settings = settings
        self._client = client or self._create_bedrock_client()

    def generate(self, user_prompt: str) -> PlanGenerationResult:
        """Ask the model for a plan and parse it, trying at most the configured number of times.

        Attempts alternate between the primary and the fallback model. No
        waiting happens between attempts.
        """
        max_attempts = max(1, self._settings.plan_generation_max_attempts)
        last_error = "AI generation failed"
        model_id = ""

        for attempt in range(1, max_attempts + 1):
            model_id = self._model_for_attempt(attempt)
            try:
                text = self._invoke_model(model_id, SYSTEM_PROMPT, user_prompt)
            except PlanGenerationError as exc:
                last_error = str(exc)
                continue

            record = parse_plan_record(text)
            if has_content(record):
                return PlanGenerationResult(
                    success=True,
                    data=record,
                    attempts=attempt,
                    model_id=model_id,
                )
            last_error = "Model response did not contain any plan sections."
            logger.warning(
                "plan_generation_empty",
                extra={"event": "plan_generation_empty", "model_id": model_id, "attempt": attempt},
            )

        return PlanGenerationResult(
            success=False,
            code=classify_generation_error(last_error),
            message=last_error,
            attempts=max_attempts,
            model_id=model_id,
        )

    def _model_for_attempt(self, attempt: int) -> str:
        fallback = self._settings.bedrock_fallback_model_id.strip()
        if fallback and attempt % 2 == 0:
            return fallback
        return self._settings.bedrock_model_id

    def _create_bedrock_client(self) -> Any:
        try:
            import boto3  # type: ignore
        except ImportError as exc:
            raise PlanGenerationError("boto3 is required for Bedrock plan generation.") from exc

        return boto3.client("bedrock-runtime", region_name=self._settings.aws_region)

    def _invoke_model(self, model_id: str, system_prompt: str, user_prompt: str) -> str:
        if not model_id:
            raise PlanGenerationError("Bedrock model ID is not configured.")

        started = time.perf_counter()
        try:
            response = self._client.converse(
                modelId=model_id,
                system=[{"text": system_prompt}],
                messages=[{"role": "user", "content": [{"text": user_prompt}]}],
                inferenceConfig={
                    "temperature": self._settings.agent_temperature,
                    "maxTokens": self._settings.agent_max_tokens,
                },
            )
        except Exception as exc:
            duration_ms = round((time.perf_counter() - started) * 1000, 2)
            logger.warning(
                "bedrock_invoke_failed",
                extra={
                    "event": "bedrock_invoke_failed",
                    "model_id": model_id,
                    "duration_ms": duration_ms,
                    "error": str(exc),
                },
            )
            raise PlanGenerationError(f"Bedrock invocation failed for model '{model_id}': {exc}") from exc

        text = self._extract_text(response)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            "bedrock_invoke_completed",
            extra={
                "event": "bedrock_invoke_completed",
                "model_id": model_id,
                "duration_ms": duration_ms,
                "user_prompt_chars": len(user_prompt),
                "response_chars": len(text),
            },
        )
        return text

    @staticmethod
    def _extract_text(response: Any) -> str:
        outputs = response.get("output", {}).get("message", {}).get("content", [])
        parts: list[str] = []
        for item in outputs:
            text = item.get("text")
            if isinstance(text, str) and text.strip():
                parts.append(text)
        if not parts:
            raise PlanGenerationError("Empty or invalid AI response.")
        return "\n".join(parts).strip()
