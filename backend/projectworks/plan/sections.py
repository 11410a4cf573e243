from __future__ import annotations

import json
import re
from types import MappingProxyType
from typing import Any, Mapping

from projectworks.plan.extraction import extract_root_object, repair_newlines_in_strings, strip_trailing_commas

BODY_SECTION_KEYS: tuple[str, ...] = (
    "index",
    "background",
    "scope",
    "projectOrganisationStructure",
    "plantAndEquipment",
    "constructionMethodStatement",
    "qualityManagement",
    "riskManagement",
    "safetyManagement",
    "constructionSchedule",
    "projectReference",
)

APPENDIX_KEYS: tuple[str, ...] = (
    "appendixRiskMatrix",
    "appendixProjectProgram",
    "appendixInspectionAndTestPlan",
    "appendixReferenceNotes",
)

ALL_SECTION_KEYS: tuple[str, ...] = BODY_SECTION_KEYS + APPENDIX_KEYS

INDEX_KEY = "index"
EMPTY_PLACEHOLDER = "—"
SUMMARY_ELLIPSIS = "…"

SECTION_DISPLAY_NAMES: Mapping[str, str] = MappingProxyType(
    {
        "index": "Index",
        "background": "Background",
        "scope": "Scope",
        "projectOrganisationStructure": "Project Organisation Structure",
        "plantAndEquipment": "Plant and Equipment",
        "constructionMethodStatement": "Construction Method Statement (Methodology)",
        "qualityManagement": "Quality Management",
        "riskManagement": "Risk Management",
        "safetyManagement": "Safety Management",
        "constructionSchedule": "Construction Schedule (Gantt)",
        "projectReference": "Project Reference",
        "appendixRiskMatrix": "Appendix A – Risk Matrix",
        "appendixProjectProgram": "Appendix B – Project Program",
        "appendixInspectionAndTestPlan": "Appendix C – Inspection and Test Plan",
        "appendixReferenceNotes": "Appendix D – Reference Notes",
    }
)

_PARAGRAPH_BREAK_PATTERN = re.compile(r"\n\s*\n")
_FULL_RECORD_MIN_CHARS = 100


def section_title(key: str) -> str:
    return SECTION_DISPLAY_NAMES.get(key, key)


def section_group(key: str) -> str:
    return "appendix" if key in APPENDIX_KEYS else "body"


def coerce_section_value(value: Any) -> str:
    """Turn an arbitrary JSON value into section text.

    ``None`` becomes ``""``; numbers and booleans use their JSON spelling and
    nested objects or arrays are serialized compactly.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def looks_like_full_json(value: str) -> bool:
    text = value.strip()
    return (
        len(text) > _FULL_RECORD_MIN_CHARS
        and text.startswith("{")
        and '"index"' in text
        and '"background"' in text
    )


def sanitize_section_value(key: str, value: str) -> str:
    """Replace a value that holds a whole serialized record with the record's own ``key`` field.

    Only one level is unwrapped; if the embedded object cannot be parsed or has
    no string ``key`` field the value is returned unchanged.
    """
    if not value or not looks_like_full_json(value):
        return value
    root = extract_root_object(value)
    if root is None:
        return value
    try:
        parsed = json.loads(strip_trailing_commas(repair_newlines_in_strings(root)))
    except (ValueError, RecursionError):
        return value
    if isinstance(parsed, dict) and isinstance(parsed.get(key), str):
        return parsed[key]
    return value


def get_outline_for_display(data: Mapping[str, Any] | None) -> dict[str, str]:
    if not isinstance(data, Mapping):
        return {}
    return {section_title(key): coerce_section_value(data.get(key)) for key in ALL_SECTION_KEYS}


def get_main_sections_only(data: Mapping[str, Any] | None) -> dict[str, str]:
    if not isinstance(data, Mapping):
        return {}
    return {
        section_title(key): sanitize_section_value(key, coerce_section_value(data.get(key)))
        for key in BODY_SECTION_KEYS
    }


def to_summary(text: str, max_chars: int = 280) -> str:
    trimmed = text.strip()
    if not trimmed:
        return EMPTY_PLACEHOLDER
    first_paragraph = _PARAGRAPH_BREAK_PATTERN.split(trimmed)[0].strip() or trimmed
    if len(first_paragraph) <= max_chars:
        return first_paragraph
    return first_paragraph[:max_chars].strip() + SUMMARY_ELLIPSIS


def split_paragraphs(text: str) -> list[str]:
    """Blank-line delimited blocks with inner newlines collapsed to spaces."""
    blocks: list[str] = []
    for block in _PARAGRAPH_BREAK_PATTERN.split(text.strip()):
        if not block.strip():
            continue
        blocks.append(block.replace("\n", " ").strip())
    return blocks
