from __future__ import annotations

import io
import json
import logging
import re
from typing import Any, Mapping

from projectworks.plan.index import index_entries
from projectworks.plan.sections import (
    APPENDIX_KEYS,
    BODY_SECTION_KEYS,
    EMPTY_PLACEHOLDER,
    INDEX_KEY,
    coerce_section_value,
    sanitize_section_value,
    section_title,
    split_paragraphs,
)

logger = logging.getLogger("projectworks.export")

EXPORT_FILENAME = "project-plan.docx"
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
JSON_FALLBACK_FILENAME = "project-plan.json"
JSON_MEDIA_TYPE = "application/json"
SUPPORTED_EXPORT_FORMATS = frozenset({"docx"})

DOCUMENT_TITLE = "Project Plan"
APPENDICES_HEADING = "Appendices"
INDEX_TABLE_HEADERS = ("No.", "Section", "Page")

FONT_NAME = "Calibri"
PAGE_MARGIN_INCHES = 1.0
# Point sizes.
TITLE_SIZE = 16
HEADING_SIZE = 14
SUBHEADING_SIZE = 12
BODY_SIZE = 11
# Paragraph spacing in points.
SPACE_AFTER_TITLE = 18
SPACE_AFTER_PARAGRAPH = 10
SPACE_BEFORE_HEADING = 12
SPACE_AFTER_HEADING = 14
SPACE_AFTER_SUBHEADING = 6

# Control characters Word XML cannot carry; tab, newline and carriage return are allowed.
_XML_INVALID_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


class DocumentExportError(RuntimeError):
    """Raised when the office document cannot be built."""


def build_plan_docx(plan: Mapping[str, Any]) -> bytes:
    """Render a plan record into a ``.docx`` document and return its bytes."""
    try:
        from docx import Document
    except ImportError as exc:
        raise DocumentExportError("python-docx is required for Word export.") from exc

    try:
        document = Document()
        _configure_document(document)
        _add_styled_paragraph(
            document,
            DOCUMENT_TITLE,
            style="Title",
            size=TITLE_SIZE,
            bold=True,
            space_after=SPACE_AFTER_TITLE,
        )

        for key in BODY_SECTION_KEYS:
            text = sanitize_section_value(key, coerce_section_value(plan.get(key)))
            _add_heading(document, section_title(key))
            if key == INDEX_KEY and text.strip():
                _add_index_table(document, text)
            else:
                _add_body_paragraphs(document, text)

        _add_heading(document, APPENDICES_HEADING)
        for key in APPENDIX_KEYS:
            _add_styled_paragraph(
                document,
                section_title(key),
                style="Heading 2",
                size=SUBHEADING_SIZE,
                bold=True,
                space_before=SPACE_BEFORE_HEADING,
                space_after=SPACE_AFTER_SUBHEADING,
            )
            _add_body_paragraphs(document, coerce_section_value(plan.get(key)))

        buffer = io.BytesIO()
        document.save(buffer)
    except Exception as exc:
        logger.exception("docx_build_failed", extra={"event": "docx_build_failed"})
        raise DocumentExportError(f"Word export failed: {exc}") from exc

    return buffer.getvalue()


def render_json_fallback(plan: Mapping[str, Any]) -> bytes:
    return json.dumps(dict(plan), indent=2, ensure_ascii=False, default=str).encode("utf-8")


def _configure_document(document: Any) -> None:
    from docx.shared import Inches, Pt

    normal = document.styles["Normal"]
    normal.font.name = FONT_NAME
    normal.font.size = Pt(BODY_SIZE)
    normal.paragraph_format.space_after = Pt(SPACE_AFTER_PARAGRAPH)

    margin = Inches(PAGE_MARGIN_INCHES)
    for section in document.sections:
        section.top_margin = margin
        section.right_margin = margin
        section.bottom_margin = margin
        section.left_margin = margin


def _xml_safe(text: str) -> str:
    return _XML_INVALID_CHARS.sub("", text)


def _add_styled_paragraph(
    document: Any,
    text: str,
    *,
    style: str | None = None,
    size: int = BODY_SIZE,
    bold: bool = False,
    space_before: int | None = None,
    space_after: int | None = SPACE_AFTER_PARAGRAPH,
) -> Any:
    from docx.shared import Pt

    paragraph = document.add_paragraph(style=style)
    run = paragraph.add_run(_xml_safe(text))
    run.font.name = FONT_NAME
    run.font.size = Pt(size)
    run.bold = bold
    if space_before is not None:
        paragraph.paragraph_format.space_before = Pt(space_before)
    if space_after is not None:
        paragraph.paragraph_format.space_after = Pt(space_after)
    return paragraph


def _add_heading(document: Any, text: str) -> None:
    _add_styled_paragraph(
        document,
        text,
        style="Heading 1",
        size=HEADING_SIZE,
        bold=True,
        space_before=SPACE_BEFORE_HEADING,
        space_after=SPACE_AFTER_HEADING,
    )


def _add_body_paragraphs(document: Any, text: str) -> None:
    blocks = split_paragraphs(text)
    if not blocks:
        _add_styled_paragraph(document, text.strip() or EMPTY_PLACEHOLDER)
        return
    for block in blocks:
        _add_styled_paragraph(document, block)


def _set_cell_text(cell: Any, text: str, *, bold: bool = False) -> None:
    from docx.shared import Pt

    run = cell.paragraphs[0].add_run(_xml_safe(text))
    run.font.name = FONT_NAME
    run.font.size = Pt(BODY_SIZE)
    run.bold = bold


def _add_index_table(document: Any, value: str) -> None:
    table = document.add_table(rows=1, cols=len(INDEX_TABLE_HEADERS))
    table.style = "Table Grid"
    table.autofit = True
    for cell, header in zip(table.rows[0].cells, INDEX_TABLE_HEADERS):
        _set_cell_text(cell, header, bold=True)

    for entry in index_entries(value):
        cells = table.add_row().cells
        _set_cell_text(cells[0], entry.num)
        _set_cell_text(cells[1], entry.section)
        _set_cell_text(cells[2], entry.page)
