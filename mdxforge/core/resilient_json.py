# mdxforge/core/resilient_json.py
"""
ResilientTextParser: 尽力解码语言模型输出的 JSON。

Models wrap JSON in code fences, emit raw newlines inside strings, forget to
escape quotes and backslashes, or answer with plain text. ``loads_resilient``
tries the text as-is first and only then runs a cleanup pass. It never
validates the shape of the result; ``parse_generated_documents`` does that
for the generation response contract.
"""

import json
import re
from typing import Any, Dict, List

from .errors import JSONRecoveryFailure, DocumentShapeError
from .models import NamedDocument
from .outline import slugify
from ..utils.console import get_logger

logger = get_logger(__name__)

# 整段文本就是一个代码块时取到最后一个 ```，否则取第一个代码块
WHOLE_FENCE_PATTERN = re.compile(r"^\s*```(?:json)?[^\n]*\n(.*)```\s*$", re.DOTALL)
FENCE_PATTERN = re.compile(r"```(?:json)?\s*\n(.*?)```", re.DOTALL)

BOM = "\ufeff"
_VALID_ESCAPES = set('"\\/bfnrtu')
_CONTROL_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t", "\b": "\\b", "\f": "\\f"}
_HEX4 = re.compile(r"[0-9a-fA-F]{4}")
_STRING_CLOSERS = ",:}]"


def extract_fenced_block(text: str) -> str:
    match = WHOLE_FENCE_PATTERN.match(text) or FENCE_PATTERN.search(text)
    return match.group(1).strip() if match else text


def _escape_in_string(text: str, i: int, out: List[str]) -> int:
    """Append the repaired form of text[i] (inside a string literal); return the next index."""
    ch = text[i]
    if ch == "\\":
        nxt = text[i + 1] if i + 1 < len(text) else ""
        if nxt and nxt in _VALID_ESCAPES and (nxt != "u" or _HEX4.fullmatch(text[i + 2:i + 6])):
            out.append(ch + nxt)
            return i + 2
        out.append("\\\\")
        return i + 1
    if ch < " ":
        out.append(_CONTROL_ESCAPES.get(ch, ""))
        return i + 1
    out.append(ch)
    return i + 1


def _closes_string(text: str, pos: int) -> bool:
    while pos < len(text) and text[pos] in " \t\r\n":
        pos += 1
    return pos >= len(text) or text[pos] in _STRING_CLOSERS


def _repair_structured(text: str) -> str:
    out: List[str] = []
    in_string = False
    i = 0
    while i < len(text):
        ch = text[i]
        if not in_string:
            if ch == '"':
                in_string = True
                out.append(ch)
            elif ch >= " " or ch in "\n\r\t":
                out.append(ch)
            i += 1
        elif ch == '"':
            if _closes_string(text, i + 1):
                in_string = False
                out.append(ch)
            else:
                out.append('\\"')
            i += 1
        else:
            i = _escape_in_string(text, i, out)
    return "".join(out)


def _escape_loose(text: str) -> str:
    out: List[str] = []
    i = 0
    while i < len(text):
        if text[i] == '"':
            out.append('\\"')
            i += 1
        else:
            i = _escape_in_string(text, i, out)
    return "".join(out)


def loads_resilient(text: str) -> Any:
    """
    Decode model output as JSON, repairing it if the plain parse fails.

    Raises:
        JSONRecoveryFailure: carrying the error of the first, unmodified parse.
    """
    candidate = extract_fenced_block(text)
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as original_error:
        logger.debug("Standard JSON parse failed (%s), attempting cleanup", original_error)
        cleaned = candidate.lstrip(BOM).strip()
        try:
            if cleaned.startswith(("{", "[")):
                return json.loads(_repair_structured(cleaned))
            wrapped = '{"content": "' + _escape_loose(cleaned) + '"}'
            return json.loads(wrapped)["content"]
        except json.JSONDecodeError:
            raise JSONRecoveryFailure(original_error) from original_error


def parse_generated_documents(text: str) -> List[NamedDocument]:
    """
    Decode a generation response: a JSON array of ``{filename, content}``.

    Items are normalized the way the generator has always tolerated them:
    plain strings and objects without a filename become ``part-N.mdx``,
    objects without string content keep their JSON text as content.
    """
    data = loads_resilient(text)
    if not isinstance(data, list):
        raise DocumentShapeError(
            f"Expected a JSON array of documents, got {type(data).__name__}"
        )

    by_name: Dict[str, str] = {}
    for index, item in enumerate(data, start=1):
        fallback_name = f"part-{index}.mdx"
        if isinstance(item, str):
            filename, content = fallback_name, item
        elif isinstance(item, dict):
            filename = str(item.get("filename") or fallback_name)
            content = item.get("content")
            if not isinstance(content, str):
                content = json.dumps(item, ensure_ascii=False)
        else:
            filename, content = fallback_name, json.dumps(item, ensure_ascii=False)
        if filename in by_name:
            logger.warning("Duplicate document '%s' in generation response, keeping the last one", filename)
        by_name[filename] = content

    return [NamedDocument(filename=name, content=content) for name, content in by_name.items()]


def split_markdown_sections(text: str) -> List[NamedDocument]:
    """Split plain markdown on level-1 headings, one document per heading."""
    documents: List[NamedDocument] = []
    pieces = re.split(r"^# ", text, flags=re.MULTILINE)
    for index, piece in enumerate(pieces):
        if not piece.strip():
            continue
        first_line = piece.split("\n", 1)[0].strip()
        stem = slugify(first_line).strip("-") or f"section-{len(documents) + 1}"
        content = f"# {piece.rstrip()}" if index > 0 else piece.strip()
        documents.append(NamedDocument(filename=f"{stem}.mdx", content=content))

    if not documents:
        documents.append(NamedDocument(filename="documentation.mdx", content=text))
    return documents
