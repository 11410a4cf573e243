from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class ParsedPage:
    page: int
    text: str


@dataclass(frozen=True)
class ParseResult:
    parser_id: str
    pages: list[ParsedPage] = field(default_factory=list)
    error: str | None = None

    @property
    def text(self) -> str:
        return "\n\n".join(page.text for page in self.pages).strip()


class DocumentParser(Protocol):
    parser_id: str

    def supports(self, *, file_name: str, content_type: str) -> bool:
        ...

    def parse(self, *, content: bytes, file_name: str, content_type: str) -> ParseResult:
        ...
