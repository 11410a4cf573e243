from __future__ import annotations

import json
import logging
from typing import Any, Callable, Mapping

from projectworks.plan.extraction import (
    extract_root_object,
    extract_string_to_closing_quote,
    find_key_value_start,
    repair_newlines_in_strings,
    strip_code_fences,
    strip_trailing_commas,
)
from projectworks.plan.sections import ALL_SECTION_KEYS, coerce_section_value

logger = logging.getLogger("projectworks.parser")

PlanRecord = dict[str, str]
ParseAttempt = Callable[[str], "dict[str, Any] | None"]


def _loads_object(text: str) -> dict[str, Any] | None:
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        return None
    return parsed if isinstance(parsed, dict) else None


def _root_candidate(text: str) -> str:
    candidate = extract_root_object(text) or text
    return strip_trailing_commas(candidate).replace("\r\n", "\n")


def _parse_direct(text: str) -> dict[str, Any] | None:
    return _loads_object(text)


def _parse_root_object(text: str) -> dict[str, Any] | None:
    return _loads_object(_root_candidate(text))


def _parse_repaired_root_object(text: str) -> dict[str, Any] | None:
    return _loads_object(repair_newlines_in_strings(_root_candidate(text)))


# Ordered from strictest to most permissive; the first object returned wins.
PARSE_ATTEMPTS: tuple[tuple[str, ParseAttempt], ...] = (
    ("direct", _parse_direct),
    ("root_object", _parse_root_object),
    ("repaired_root_object", _parse_repaired_root_object),
)


def empty_plan_record() -> PlanRecord:
    return {key: "" for key in ALL_SECTION_KEYS}


def salvage_parse(text: str) -> PlanRecord:
    """Recover whatever known sections can be found in ``text``. Never fails.

    The root object is repaired and parsed once more; if that still fails,
    every known key is scanned for directly as ``"key": "value"``.
    """
    result = empty_plan_record()
    root = extract_root_object(text)
    if root is None:
        return result

    parsed = _loads_object(strip_trailing_commas(repair_newlines_in_strings(root)))
    if parsed is not None:
        for key in ALL_SECTION_KEYS:
            value = parsed.get(key)
            if isinstance(value, str):
                result[key] = value
        return result

    for key in ALL_SECTION_KEYS:
        start = find_key_value_start(root, key)
        if start >= 0:
            result[key] = extract_string_to_closing_quote(root, start)
    return result


def safe_json_parse(raw: str) -> dict[str, Any]:
    """Parse model output into a mapping, repairing as much as needed.

    Never raises: when no structural parse succeeds the result comes from
    :func:`salvage_parse`, whose worst case is a record of empty strings.
    """
    if not isinstance(raw, str):
        raw = ""
    cleaned = strip_code_fences(raw)

    for stage, attempt in PARSE_ATTEMPTS:
        parsed = attempt(cleaned)
        if parsed is not None:
            logger.debug(
                "plan_parse_succeeded",
                extra={"event": "plan_parse_succeeded", "stage": stage, "input_chars": len(cleaned)},
            )
            return parsed

    salvaged = salvage_parse(cleaned)
    logger.warning(
        "plan_parse_salvaged",
        extra={
            "event": "plan_parse_salvaged",
            "input_chars": len(cleaned),
            "recovered_keys": sorted(key for key, value in salvaged.items() if value),
        },
    )
    return salvaged


def coerce_plan_record(data: Mapping[str, Any] | None) -> PlanRecord:
    if not isinstance(data, Mapping):
        return empty_plan_record()
    return {key: coerce_section_value(data.get(key)) for key in ALL_SECTION_KEYS}


def parse_plan_record(raw: str) -> PlanRecord:
    return coerce_plan_record(safe_json_parse(raw))


def has_content(record: Mapping[str, str]) -> bool:
    return any(str(value).strip() for value in record.values())
