from projectworks.plan.index import IndexEntry, get_index_content_for_table, index_entries, parse_index_line
from projectworks.plan.parser import PlanRecord, coerce_plan_record, parse_plan_record, safe_json_parse
from projectworks.plan.sections import (
    ALL_SECTION_KEYS,
    APPENDIX_KEYS,
    BODY_SECTION_KEYS,
    SECTION_DISPLAY_NAMES,
    get_main_sections_only,
    get_outline_for_display,
    to_summary,
)
from projectworks.plan.tiers import PlanTier, can_access_section, filter_sections_for_tier

__all__ = [
    "ALL_SECTION_KEYS",
    "APPENDIX_KEYS",
    "BODY_SECTION_KEYS",
    "IndexEntry",
    "PlanRecord",
    "PlanTier",
    "SECTION_DISPLAY_NAMES",
    "can_access_section",
    "coerce_plan_record",
    "filter_sections_for_tier",
    "get_index_content_for_table",
    "get_main_sections_only",
    "get_outline_for_display",
    "index_entries",
    "parse_index_line",
    "parse_plan_record",
    "safe_json_parse",
    "to_summary",
]
