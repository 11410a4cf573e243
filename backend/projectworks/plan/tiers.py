from __future__ import annotations

from enum import Enum
from typing import Mapping, TypeVar

from projectworks.plan.sections import ALL_SECTION_KEYS


class PlanTier(str, Enum):
    FREE = "FREE"
    PRO = "PRO"


FREE_SECTION_KEYS: frozenset[str] = frozenset(
    {
        "index",
        "background",
        "scope",
        "constructionMethodStatement",
    }
)

PRO_ONLY_SECTION_KEYS: tuple[str, ...] = tuple(key for key in ALL_SECTION_KEYS if key not in FREE_SECTION_KEYS)

_V = TypeVar("_V")


def coerce_tier(value: object) -> PlanTier:
    if isinstance(value, PlanTier):
        return value
    normalized = str(value or "").strip().upper()
    if normalized == PlanTier.PRO.value:
        return PlanTier.PRO
    return PlanTier.FREE


def is_pro_user(tier: PlanTier | str | None) -> bool:
    return tier is not None and coerce_tier(tier) is PlanTier.PRO


def can_access_section(key: str, tier: PlanTier | str | None) -> bool:
    if key in FREE_SECTION_KEYS:
        return True
    return is_pro_user(tier)


def can_download_word(tier: PlanTier | str | None) -> bool:
    return is_pro_user(tier)


def filter_sections_for_tier(record: Mapping[str, _V], tier: PlanTier | str | None) -> dict[str, _V]:
    """Keep the sections ``tier`` may see.

    An empty result means the tier table and the record disagree entirely, so
    the unfiltered record is returned instead of nothing.
    """
    filtered = {key: value for key, value in record.items() if can_access_section(key, tier)}
    if not filtered:
        return dict(record)
    return filtered
