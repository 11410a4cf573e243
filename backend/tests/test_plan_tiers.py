from __future__ import annotations

from projectworks.plan.parser import empty_plan_record
from projectworks.plan.sections import ALL_SECTION_KEYS
from projectworks.plan.tiers import (
    FREE_SECTION_KEYS,
    PRO_ONLY_SECTION_KEYS,
    PlanTier,
    can_access_section,
    can_download_word,
    coerce_tier,
    filter_sections_for_tier,
    is_pro_user,
)
from projectworks.plan.views import build_section_views, describe_sections


def _record() -> dict[str, str]:
    record = empty_plan_record()
    record.update(
        {
            "index": "1\tBackground\t1\n2\tScope\t2",
            "background": "Background paragraph.\n\nMore detail.",
            "scope": "Scope text.",
            "riskManagement": "Risk text.",
            "appendixRiskMatrix": "Matrix.",
        }
    )
    return record


def test_free_and_pro_key_sets_partition_all_sections() -> None:
    assert FREE_SECTION_KEYS == {"index", "background", "scope", "constructionMethodStatement"}
    assert set(PRO_ONLY_SECTION_KEYS) | FREE_SECTION_KEYS == set(ALL_SECTION_KEYS)
    assert not set(PRO_ONLY_SECTION_KEYS) & FREE_SECTION_KEYS


def test_can_access_section_by_tier() -> None:
    assert can_access_section("background", PlanTier.FREE)
    assert can_access_section("background", None)
    assert not can_access_section("riskManagement", PlanTier.FREE)
    assert not can_access_section("riskManagement", None)
    assert can_access_section("riskManagement", PlanTier.PRO)
    assert can_access_section("riskManagement", "PRO")


def test_coerce_tier_defaults_to_free() -> None:
    assert coerce_tier("pro") is PlanTier.PRO
    assert coerce_tier(" PRO ") is PlanTier.PRO
    assert coerce_tier("enterprise") is PlanTier.FREE
    assert coerce_tier(None) is PlanTier.FREE
    assert is_pro_user(PlanTier.PRO)
    assert not is_pro_user(None)
    assert can_download_word(PlanTier.PRO)
    assert not can_download_word(PlanTier.FREE)


def test_pro_filter_returns_full_record() -> None:
    record = _record()
    assert filter_sections_for_tier(record, PlanTier.PRO) == record


def test_free_filter_keeps_whitelisted_keys_only() -> None:
    filtered = filter_sections_for_tier(_record(), PlanTier.FREE)
    assert set(filtered) == set(FREE_SECTION_KEYS)
    assert filtered["background"].startswith("Background paragraph.")


def test_free_filter_fails_open_when_nothing_is_visible() -> None:
    record = {"riskManagement": "Risk text.", "appendixRiskMatrix": "Matrix."}
    assert filter_sections_for_tier(record, PlanTier.FREE) == record


def test_section_views_lock_pro_sections_for_free_tier() -> None:
    views = build_section_views(_record(), PlanTier.FREE)
    assert [view["key"] for view in views] == list(ALL_SECTION_KEYS)

    by_key = {view["key"]: view for view in views}
    assert by_key["index"]["summary"] == "Table of contents"
    assert by_key["index"]["text"] == "1\tBackground\t1\n2\tScope\t2"
    assert by_key["background"]["summary"] == "Background paragraph."
    assert by_key["constructionMethodStatement"]["summary"] == "—"
    assert by_key["riskManagement"]["locked"] is True
    assert by_key["riskManagement"]["text"] == ""
    assert by_key["appendixRiskMatrix"]["group"] == "appendix"


def test_section_views_unlock_everything_for_pro() -> None:
    views = build_section_views(_record(), PlanTier.PRO)
    assert not any(view["locked"] for view in views)
    by_key = {view["key"]: view for view in views}
    assert by_key["riskManagement"]["text"] == "Risk text."


def test_empty_index_view_shows_placeholder() -> None:
    views = build_section_views(empty_plan_record(), PlanTier.PRO)
    assert views[0]["key"] == "index"
    assert views[0]["summary"] == "—"


def test_describe_sections_reports_access() -> None:
    described = {item["key"]: item for item in describe_sections(PlanTier.FREE)}
    assert described["scope"]["accessible"] is True
    assert described["qualityManagement"]["accessible"] is False
    assert described["appendixReferenceNotes"]["title"] == "Appendix D – Reference Notes"
