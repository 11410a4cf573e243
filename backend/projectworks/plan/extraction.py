from __future__ import annotations

import re

_TRAILING_COMMA_PATTERN = re.compile(r",(\s*[}\]])")
_CODE_FENCE_PATTERN = re.compile(r"```(?:json)?")


def strip_code_fences(text: str) -> str:
    return _CODE_FENCE_PATTERN.sub("", text).strip()


def strip_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA_PATTERN.sub(r"\1", text)


def extract_root_object(text: str) -> str | None:
    """Return the span of the first balanced top-level ``{...}`` object in ``text``.

    Single- and double-quoted strings are skipped, and the closing quote must
    match the opening one. A backslash inside a string consumes exactly one
    following character. Returns ``None`` when no object closes.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escape = False
    quote = ""
    for index in range(start, len(text)):
        char = text[index]
        if escape:
            escape = False
            continue
        if in_string:
            if char == "\\":
                escape = True
            elif char == quote:
                in_string = False
            continue
        if char in {'"', "'"}:
            in_string = True
            quote = char
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


def repair_newlines_in_strings(text: str) -> str:
    """Escape raw CR/LF characters that sit inside double-quoted string literals.

    Characters outside strings and already-escaped sequences are copied as-is,
    so the result of a valid JSON document is the document itself.
    """
    parts: list[str] = []
    in_string = False
    escape = False
    for char in text:
        if escape:
            parts.append(char)
            escape = False
            continue
        if in_string:
            if char == "\\":
                escape = True
                parts.append(char)
            elif char == '"':
                in_string = False
                parts.append(char)
            elif char == "\n":
                parts.append("\\n")
            elif char == "\r":
                parts.append("\\r")
            else:
                parts.append(char)
            continue
        if char == '"':
            in_string = True
        parts.append(char)
    return "".join(parts)


def find_key_value_start(text: str, key: str) -> int:
    """Index of the first character of ``key``'s string value, or -1.

    Only the first occurrence of the quoted key token is considered, and the
    value must be a string literal (``"key" : "...``).
    """
    token = f'"{key}"'
    position = text.find(token)
    if position == -1:
        return -1

    cursor = position + len(token)
    length = len(text)
    while cursor < length and text[cursor].isspace():
        cursor += 1
    if cursor >= length or text[cursor] != ":":
        return -1
    cursor += 1
    while cursor < length and text[cursor].isspace():
        cursor += 1
    if cursor >= length or text[cursor] != '"':
        return -1
    return cursor + 1


_SALVAGE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}


def extract_string_to_closing_quote(text: str, start: int) -> str:
    """Copy a string value from ``start`` up to its unescaped closing quote.

    Escapes are decoded as they are copied (``\\n``, ``\\t`` and ``\\r`` to
    control characters, anything else to the escaped character itself). An
    unterminated value runs to the end of ``text``.
    """
    parts: list[str] = []
    index = start
    length = len(text)
    while index < length:
        char = text[index]
        if char == "\\" and index + 1 < length:
            following = text[index + 1]
            parts.append(_SALVAGE_ESCAPES.get(following, following))
            index += 2
            continue
        if char == '"':
            break
        parts.append(char)
        index += 1
    return "".join(parts)
