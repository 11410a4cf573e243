from __future__ import annotations

from typing import Any, Mapping

from projectworks.plan.index import get_index_content_for_table, index_lines
from projectworks.plan.sections import (
    ALL_SECTION_KEYS,
    BODY_SECTION_KEYS,
    EMPTY_PLACEHOLDER,
    INDEX_KEY,
    coerce_section_value,
    sanitize_section_value,
    section_group,
    section_title,
    to_summary,
)
from projectworks.plan.tiers import PlanTier, can_access_section

INDEX_SUMMARY = "Table of contents"


def build_section_views(
    record: Mapping[str, Any],
    tier: PlanTier | str | None,
    *,
    summary_chars: int = 280,
) -> list[dict[str, object]]:
    views: list[dict[str, object]] = []
    for key in ALL_SECTION_KEYS:
        text = coerce_section_value(record.get(key))
        if key in BODY_SECTION_KEYS:
            text = sanitize_section_value(key, text)

        locked = not can_access_section(key, tier)
        if locked:
            text = ""
            summary = ""
        elif key == INDEX_KEY:
            text = get_index_content_for_table(text)
            summary = INDEX_SUMMARY if index_lines(text) else EMPTY_PLACEHOLDER
        else:
            summary = to_summary(text, summary_chars)

        views.append(
            {
                "key": key,
                "title": section_title(key),
                "group": section_group(key),
                "text": text,
                "summary": summary,
                "locked": locked,
            }
        )
    return views


def describe_sections(tier: PlanTier | str | None) -> list[dict[str, object]]:
    return [
        {
            "key": key,
            "title": section_title(key),
            "group": section_group(key),
            "accessible": can_access_section(key, tier),
        }
        for key in ALL_SECTION_KEYS
    ]
