from __future__ import annotations

import logging

from projectworks.parsers.base import DocumentParser, ParseResult
from projectworks.parsers.docx_parser import DocxDocumentParser
from projectworks.parsers.pdf_parser import PdfDocumentParser
from projectworks.parsers.text_parser import TextDocumentParser

logger = logging.getLogger("projectworks.parsers")


class ParserRegistry:
    def __init__(self, parsers: list[DocumentParser] | None = None) -> None:
        self._parsers = parsers or [
            PdfDocumentParser(),
            DocxDocumentParser(),
            TextDocumentParser(),
        ]

    def parse(self, *, content: bytes, file_name: str, content_type: str) -> ParseResult:
        for parser in self._parsers:
            if not parser.supports(file_name=file_name, content_type=content_type):
                continue
            return parser.parse(content=content, file_name=file_name, content_type=content_type)
        return ParseResult(parser_id="none", error="No parser registered for this file type.")


def extract_plain_text(*, content: bytes, file_name: str, content_type: str) -> ParseResult:
    """Best-effort text for an uploaded brief. Failures are reported on the result, never raised."""
    result = ParserRegistry().parse(content=content, file_name=file_name, content_type=content_type or "")
    if result.error:
        logger.warning(
            "upload_text_extraction_failed",
            extra={
                "event": "upload_text_extraction_failed",
                "parser_id": result.parser_id,
                "file_name": file_name,
                "error": result.error,
            },
        )
    return result
