# mdxforge/core/patch_parser.py
"""
PatchProtocolParser: 从 AI 聊天回复中解析出一个结构化编辑操作。

The model is asked to answer with exactly one marker block::

    MDX_UPDATE_START
    filename: getting-started.mdx
    content:
    # Getting Started
    ...
    MDX_UPDATE_END

``MDX_ADD_START``/``MDX_ADD_END`` add a file, ``MDX_DELETE_START``/
``MDX_DELETE_END`` (no ``content:``) delete one. Blocks are tried in the
order update, add, delete and the first match wins.

When no block is present and heuristics are enabled, the parser looks for a
natural-language fix suggestion with fenced code. That path favours recall
over precision; construct the parser with ``allow_heuristics=False`` to only
accept marker blocks.
"""

import re
from typing import List, Optional, Sequence

from .models import EditOperation, OperationKind
from ..utils.console import get_logger

logger = get_logger(__name__)

UPDATE_PATTERN = re.compile(r"MDX_UPDATE_START\s+filename:\s*([^\n]+)\s+content:\s*(.*?)\s*MDX_UPDATE_END", re.DOTALL)
ADD_PATTERN = re.compile(r"MDX_ADD_START\s+filename:\s*([^\n]+)\s+content:\s*(.*?)\s*MDX_ADD_END", re.DOTALL)
DELETE_PATTERN = re.compile(r"MDX_DELETE_START\s+filename:\s*([^\n]+?)\s*MDX_DELETE_END", re.DOTALL)

# --- 启发式解析 ---

STRUCTURED_FIX_PATTERN = re.compile(
    r"I've identified the syntax error in \[?([^\]]+?)\]?\.\s.*?"
    r"problematic section:\s*```(?:mdx|jsx)?\s*(.*?)```.*?"
    r"fixed version:\s*```(?:mdx|jsx)?\s*(.*?)```",
    re.DOTALL | re.IGNORECASE,
)
FIX_EXPLANATION_PATTERN = re.compile(r"The fix involves (.*?)(?:$|\.)", re.DOTALL)
CODE_BLOCK_PATTERN = re.compile(r"```(?:mdx|jsx|typescript|javascript)?\s*(.*?)```", re.DOTALL)

FIX_INTENT_CUES = (
    "I've identified",
    "found the issue",
    "syntax error",
    "Here's the fix",
    "I recommend fixing this by",
    "Here is the fixed version",
    "This is how you can fix it",
    "The issue can be fixed by",
)

FILENAME_PATTERNS = (
    re.compile(r"[\"'`]([^\"'`\s]+\.mdx)[\"'`]", re.IGNORECASE),
    re.compile(r"\b(?:in|file)\s+([^\"'`\s]+\.mdx)\b", re.IGNORECASE),
    re.compile(r"([^\"'`\s]+\.mdx)\b", re.IGNORECASE),
)

_KEYWORD_KINDS = (
    (re.compile(r"\badd\b", re.IGNORECASE), OperationKind.ADD),
    (re.compile(r"\bremove\b", re.IGNORECASE), OperationKind.DELETE),
    (re.compile(r"\b(?:replace|edit)\b", re.IGNORECASE), OperationKind.UPDATE),
)


def parse_marker_block(message: str) -> Optional[EditOperation]:
    match = UPDATE_PATTERN.search(message)
    if match:
        return EditOperation.update(match.group(1).strip(), match.group(2).strip())

    match = ADD_PATTERN.search(message)
    if match:
        return EditOperation.add(match.group(1).strip(), match.group(2).strip())

    match = DELETE_PATTERN.search(message)
    if match:
        return EditOperation.delete(match.group(1).strip())

    return None


def _find_filename(message: str) -> Optional[str]:
    for pattern in FILENAME_PATTERNS:
        match = pattern.search(message)
        if match:
            return match.group(1)
    return None


def _classify(message: str) -> OperationKind:
    for pattern, kind in _KEYWORD_KINDS:
        if pattern.search(message):
            return kind
    # 通用 "fix" 视为更新
    return OperationKind.UPDATE


def _explanation_lines(message: str) -> str:
    lines = [
        line.strip() for line in message.splitlines()
        if not line.startswith("```") and len(line.strip()) > 15
        and any(word in line for word in ("issue", "error", "fix"))
    ]
    return " ".join(lines[:2])


class PatchProtocolParser:
    def __init__(self, allow_heuristics: bool = True):
        self.allow_heuristics = allow_heuristics

    def parse(self, message: str, files_in_scope: Sequence[str] = ()) -> Optional[EditOperation]:
        """
        Extract at most one edit operation from ``message``.

        ``files_in_scope`` are the filenames the user had selected; the first
        one is the default target of a heuristic fix that names no file.
        Returns None when the message carries no actionable edit.
        """
        operation = parse_marker_block(message)
        if operation is not None or not self.allow_heuristics:
            return operation

        operation = self._parse_structured_fix(message) or self._parse_fix_suggestion(message, files_in_scope)
        if operation is None:
            operation = self._parse_bare_mdx_block(message, files_in_scope)
        if operation is not None:
            logger.info("Heuristic %s of '%s' extracted from chat message", operation.kind.value, operation.filename)
        return operation

    def _parse_structured_fix(self, message: str) -> Optional[EditOperation]:
        match = STRUCTURED_FIX_PATTERN.search(message)
        if not match:
            return None
        filename, before, after = (group.strip() for group in match.groups())
        explanation_match = FIX_EXPLANATION_PATTERN.search(message)
        explanation = explanation_match.group(1).strip() if explanation_match else "Applying syntax fix"
        return EditOperation.update(
            filename, after,
            source="heuristic", explanation=explanation, original_section=before,
        )

    def _parse_fix_suggestion(self, message: str, files_in_scope: Sequence[str]) -> Optional[EditOperation]:
        if not any(cue in message for cue in FIX_INTENT_CUES):
            return None

        filename = _find_filename(message)
        if filename is None and files_in_scope:
            filename = files_in_scope[0]
            logger.debug("No filename in fix suggestion, defaulting to '%s'", filename)
        if filename is None:
            return None

        kind = _classify(message)
        blocks: List[str] = [block.strip() for block in CODE_BLOCK_PATTERN.findall(message)]
        before = after = None
        if len(blocks) == 1:
            after = blocks[0]
        elif len(blocks) >= 2:
            before, after = blocks[0], blocks[1]

        meta = dict(source="heuristic", explanation=_explanation_lines(message), original_section=before)
        if kind is OperationKind.DELETE:
            return EditOperation.delete(filename, **meta)
        if not after:
            return None
        return EditOperation(kind, filename, after, **meta)

    def _parse_bare_mdx_block(self, message: str, files_in_scope: Sequence[str]) -> Optional[EditOperation]:
        if not files_in_scope:
            return None
        for block in CODE_BLOCK_PATTERN.findall(message):
            block = block.strip()
            if "<" in block and ">" in block:
                return EditOperation.update(
                    files_in_scope[0], block,
                    source="heuristic", explanation="Apply this fix to resolve the syntax issue",
                )
        return None


def parse_chat_response(message: str, files_in_scope: Sequence[str] = (), allow_heuristics: bool = True) -> Optional[EditOperation]:
    return PatchProtocolParser(allow_heuristics=allow_heuristics).parse(message, files_in_scope)
