from __future__ import annotations

from dataclasses import dataclass
import json
import re

from projectworks.plan.extraction import extract_root_object, strip_trailing_commas
from projectworks.plan.sections import BODY_SECTION_KEYS, EMPTY_PLACEHOLDER, INDEX_KEY, section_title

_TAB_ROW_PATTERN = re.compile(r"^\d+\t")
_NUMBERED_ROW_PATTERN = re.compile(r"^\d+[.)]\s*\S")
_LOOSE_ROW_PATTERN = re.compile(r"^(\d+)[.)\s]+(.+)$")
_LINE_BREAK_PATTERN = re.compile(r"\r?\n")


@dataclass(frozen=True)
class IndexEntry:
    num: str
    section: str
    page: str = EMPTY_PLACEHOLDER

    def as_dict(self) -> dict[str, str]:
        return {"num": self.num, "section": self.section, "page": self.page}


def is_tabulated_index(text: str) -> bool:
    return bool(_TAB_ROW_PATTERN.match(text) or _NUMBERED_ROW_PATTERN.match(text))


def default_index_content() -> str:
    return "\n".join(
        f"{position}\t{section_title(key)}" for position, key in enumerate(BODY_SECTION_KEYS, start=1)
    )


def _embedded_index(text: str) -> str | None:
    root = extract_root_object(text)
    if root is None:
        return None
    try:
        parsed = json.loads(strip_trailing_commas(root))
    except (ValueError, RecursionError):
        return None
    if not isinstance(parsed, dict):
        return None
    inner = parsed.get(INDEX_KEY)
    if not isinstance(inner, str):
        return None
    inner = inner.strip()
    if inner and is_tabulated_index(inner):
        return inner
    return None


def get_index_content_for_table(value: str) -> str:
    """Return tab-delimited ``number<TAB>title[<TAB>page]`` lines for an index value.

    Well-formed text passes through. A whole record dumped into the field is
    unwrapped to its own ``index``. Anything else is replaced by the canonical
    body section list, so callers never receive raw JSON.
    """
    text = value.strip()
    if not text:
        return ""
    if is_tabulated_index(text):
        return text
    if text.startswith("{"):
        embedded = _embedded_index(text)
        if embedded is not None:
            return embedded
    return default_index_content()


def parse_index_line(line: str, row_index: int) -> IndexEntry:
    trimmed = line.strip()
    fields = trimmed.split("\t")

    if len(fields) >= 3:
        return IndexEntry(
            num=fields[0].strip(),
            section=fields[1].strip(),
            page=fields[2].strip() or EMPTY_PLACEHOLDER,
        )
    if len(fields) == 2:
        return IndexEntry(num=fields[0].strip(), section="\t".join(fields[1:]).strip())

    match = _LOOSE_ROW_PATTERN.match(trimmed)
    if match:
        return IndexEntry(num=match.group(1), section=match.group(2).strip())
    return IndexEntry(num=str(row_index + 1), section=trimmed)


def index_lines(value: str) -> list[str]:
    content = get_index_content_for_table(value)
    return [line for line in _LINE_BREAK_PATTERN.split(content) if line.strip()]


def index_entries(value: str) -> list[IndexEntry]:
    return [parse_index_line(line, position) for position, line in enumerate(index_lines(value))]
