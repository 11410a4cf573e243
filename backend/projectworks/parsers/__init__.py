from projectworks.parsers.base import ParseResult, ParsedPage
from projectworks.parsers.registry import ParserRegistry, extract_plain_text

__all__ = ["ParseResult", "ParsedPage", "ParserRegistry", "extract_plain_text"]
