from __future__ import annotations

from io import BytesIO
import json

import pytest

from projectworks.export import DocumentExportError, build_plan_docx, render_json_fallback
from projectworks.plan.parser import empty_plan_record


def _open(content: bytes):
    from docx import Document

    return Document(BytesIO(content))


def _plan() -> dict[str, str]:
    plan = empty_plan_record()
    plan.update(
        {
            "index": "1\tBackground\t1\n2\tScope\t2\nConstruction Method",
            "background": "The client is the city council.\nWorks are on Bridge Street.\n\nSecond block.",
            "scope": "Earthworks and drainage.",
            "appendixRiskMatrix": "Risk 1: flooding. Likelihood: medium.",
        }
    )
    return plan


def test_docx_contains_title_sections_and_appendices() -> None:
    document = _open(build_plan_docx(_plan()))
    texts = [paragraph.text for paragraph in document.paragraphs]

    assert texts[0] == "Project Plan"
    assert "Background" in texts
    assert "Construction Method Statement (Methodology)" in texts
    assert "Appendices" in texts
    assert "Appendix D – Reference Notes" in texts
    assert texts.index("Project Reference") < texts.index("Appendices") < texts.index("Appendix A – Risk Matrix")

    assert "The client is the city council. Works are on Bridge Street." in texts
    assert "Second block." in texts
    assert "Risk 1: flooding. Likelihood: medium." in texts


def test_empty_sections_render_placeholder() -> None:
    document = _open(build_plan_docx(_plan()))
    texts = [paragraph.text for paragraph in document.paragraphs]
    heading_position = texts.index("Quality Management")
    assert texts[heading_position + 1] == "—"


def test_index_renders_as_three_column_table() -> None:
    document = _open(build_plan_docx(_plan()))
    assert len(document.tables) == 1
    rows = [[cell.text for cell in row.cells] for row in document.tables[0].rows]
    assert rows[0] == ["No.", "Section", "Page"]
    assert rows[1] == ["1", "Background", "1"]
    assert rows[2] == ["2", "Scope", "2"]
    assert rows[3] == ["3", "Construction Method", "—"]


def test_index_embedded_record_is_normalized_before_rendering() -> None:
    plan = empty_plan_record()
    plan["index"] = '{"index": "1\\tBackground\\n2\\tScope", "background": "x"}'
    document = _open(build_plan_docx(plan))
    rows = [[cell.text for cell in row.cells] for row in document.tables[0].rows]
    assert rows[1:] == [["1", "Background", "—"], ["2", "Scope", "—"]]


def test_empty_index_renders_placeholder_instead_of_table() -> None:
    document = _open(build_plan_docx(empty_plan_record()))
    assert document.tables == []
    texts = [paragraph.text for paragraph in document.paragraphs]
    assert texts[texts.index("Index") + 1] == "—"


def test_page_margins_are_one_inch() -> None:
    from docx.shared import Inches

    section = _open(build_plan_docx(_plan())).sections[0]
    assert section.top_margin == Inches(1)
    assert section.right_margin == Inches(1)
    assert section.bottom_margin == Inches(1)
    assert section.left_margin == Inches(1)


def test_build_failures_are_wrapped(monkeypatch: pytest.MonkeyPatch) -> None:
    import projectworks.export.docx_writer as writer

    def explode(*args, **kwargs):
        raise ValueError("boom")

    monkeypatch.setattr(writer, "_add_index_table", explode)
    with pytest.raises(DocumentExportError, match="boom"):
        build_plan_docx(_plan())


def test_json_fallback_is_pretty_printed_plan() -> None:
    content = render_json_fallback({"background": "B"})
    assert json.loads(content.decode("utf-8")) == {"background": "B"}
    assert b"\n  " in content


def test_control_characters_are_dropped_from_document_text() -> None:
    plan = _plan()
    plan["background"] = "Stage 1\u000bStage 2\x00"
    plan["index"] = "1\tBack\u000cground\t1"
    document = _open(build_plan_docx(plan))

    texts = [paragraph.text for paragraph in document.paragraphs]
    assert "Stage 1Stage 2" in texts
    assert document.tables[0].rows[1].cells[1].text == "Background"
