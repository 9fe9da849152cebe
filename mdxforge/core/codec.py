# mdxforge/core/codec.py
"""
DocumentCodec: 把多个命名文档打包为一个快照文本，或反向解包。

Block format::

    # <filename>

    <content>

Blocks are joined with ``DELIMITER``. The delimiter is not escaped, so a
document containing it verbatim, or ending in a "---" rule that fuses with the
next delimiter, cannot round-trip; ``encode`` rejects such documents unless
``strict=False``.
"""

import re
from typing import Iterable, List, Tuple

from .errors import DelimiterCollisionError
from .models import NamedDocument
from ..utils.console import get_logger

logger = get_logger(__name__)

DELIMITER = "\n\n---\n\n"
FILENAME_HEADING = re.compile(r"^# (.*)$", re.MULTILINE)
SYNTHETIC_FILENAME = "section-{n}.mdx"


def _splits_on_decode(block: str, followed: bool) -> bool:
    """True when ``block`` would not come back as a single block."""
    if DELIMITER in block:
        return True
    # 结尾的 "\n\n---" 会与后面的分隔符拼成一个假的分隔点
    return followed and (block + DELIMITER).find(DELIMITER) < len(block)


def encode(files: Iterable[NamedDocument], strict: bool = True) -> str:
    docs = list(files)
    blocks = [f"# {doc.filename}\n\n{doc.content}" for doc in docs]
    for index, (doc, block) in enumerate(zip(docs, blocks)):
        if "\n" in doc.filename or _splits_on_decode(block, followed=index < len(blocks) - 1):
            if strict:
                raise DelimiterCollisionError(doc.filename)
            logger.warning("Document '%s' collides with the snapshot delimiter; round-trip will split it", doc.filename)
    return DELIMITER.join(blocks)


def decode_with_report(blob: str) -> Tuple[List[NamedDocument], List[str]]:
    """
    Decode ``blob`` and also return the filenames that had to be synthesized
    for blocks without a leading ``# filename`` heading.
    """
    if not blob or not blob.strip():
        return [], []

    documents: List[NamedDocument] = []
    synthesized: List[str] = []
    for block in blob.split(DELIMITER):
        match = FILENAME_HEADING.search(block)
        if match:
            filename = match.group(1)
            content = (block[:match.start()] + block[match.end():]).strip()
            documents.append(NamedDocument(filename=filename, content=content))
        else:
            filename = SYNTHETIC_FILENAME.format(n=len(synthesized) + 1)
            synthesized.append(filename)
            documents.append(NamedDocument(filename=filename, content=block.strip()))

    if synthesized:
        logger.warning("Snapshot blocks without a filename heading were named %s", ", ".join(synthesized))
    return documents, synthesized


def decode(blob: str) -> List[NamedDocument]:
    documents, _ = decode_with_report(blob)
    return documents
