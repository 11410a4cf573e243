from __future__ import annotations

from io import BytesIO

from projectworks.parsers import ParserRegistry, extract_plain_text


def _build_pdf_bytes(text: str) -> bytes:
    from pypdf import PdfWriter
    from pypdf.generic import DecodedStreamObject, DictionaryObject, NameObject

    writer = PdfWriter()
    page = writer.add_blank_page(width=612, height=792)

    font = DictionaryObject(
        {
            NameObject("/Type"): NameObject("/Font"),
            NameObject("/Subtype"): NameObject("/Type1"),
            NameObject("/BaseFont"): NameObject("/Helvetica"),
        }
    )
    font_ref = writer._add_object(font)
    resources = DictionaryObject({NameObject("/Font"): DictionaryObject({NameObject("/F1"): font_ref})})
    page[NameObject("/Resources")] = resources

    safe_text = text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
    content_stream = DecodedStreamObject()
    content_stream.set_data(f"BT /F1 12 Tf 72 720 Td ({safe_text}) Tj ET".encode("utf-8"))
    content_ref = writer._add_object(content_stream)
    page[NameObject("/Contents")] = content_ref

    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def _build_docx_bytes(text: str, table_rows: list[list[str]] | None = None) -> bytes:
    from docx import Document

    doc = Document()
    doc.add_paragraph(text)
    if table_rows:
        table = doc.add_table(rows=0, cols=len(table_rows[0]))
        for row in table_rows:
            cells = table.add_row().cells
            for cell, value in zip(cells, row):
                cell.text = value
    buffer = BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def test_pdf_docx_and_text_uploads_extract_text() -> None:
    scenarios = [
        ("pdf", "tender.pdf", "application/pdf", _build_pdf_bytes("Scope of works for culvert renewal"), "culvert"),
        (
            "docx",
            "brief.docx",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            _build_docx_bytes("Program milestones and hold points."),
            "hold points",
        ),
        ("text", "notes.txt", "text/plain", b"Site access via Main Road.\f\fSecond page", "Main Road"),
    ]

    for parser_id, file_name, content_type, content, expected in scenarios:
        result = extract_plain_text(content=content, file_name=file_name, content_type=content_type)
        assert result.parser_id == parser_id
        assert result.error is None
        assert expected in result.text


def test_docx_tables_are_flattened_to_tab_rows() -> None:
    content = _build_docx_bytes("ITP", [["Activity", "Hold Point"], ["Compaction", "H1"]])
    result = extract_plain_text(content=content, file_name="itp.docx", content_type="")
    assert "Activity\tHold Point" in result.text
    assert "Compaction\tH1" in result.text


def test_text_pages_are_split_on_form_feed() -> None:
    result = extract_plain_text(content=b"Page one\r\nmore\fPage two", file_name="a.txt", content_type="text/plain")
    assert [page.page for page in result.pages] == [1, 2]
    assert result.text == "Page one\nmore\n\nPage two"


def test_corrupt_upload_reports_error_instead_of_raising() -> None:
    result = extract_plain_text(content=b"not a real docx", file_name="broken.docx", content_type="")
    assert result.parser_id == "docx"
    assert result.error is not None
    assert result.text == ""


def test_unknown_file_type_has_no_parser() -> None:
    result = ParserRegistry().parse(content=b"\x00\x01", file_name="drawing.dwg", content_type="application/octet-stream")
    assert result.parser_id == "none"
    assert result.pages == []
    assert result.error
