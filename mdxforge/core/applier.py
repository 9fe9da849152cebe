# mdxforge/core/applier.py
"""
ChangeApplier: 把一个编辑操作应用到文档集合上，返回新的集合。

Inputs are never mutated. Update of an unknown file adds it, Add of an
existing file replaces it in place, Delete of an unknown file is a no-op.
"""

import re
from typing import Iterable, List, Sequence

from .models import EditOperation, NamedDocument, OperationKind
from ..utils.console import get_logger

logger = get_logger(__name__)

MDX_SUFFIX = ".mdx"

SECTION_TEMPLATE = """# {title}

## Overview
Add an overview of this section here...

## Getting Started
Start with the basics...

## Features
List the main features...

## Examples
Show some examples...

## Reference
Add detailed reference documentation...
"""


def _upsert(files: List[NamedDocument], filename: str, content: str) -> List[NamedDocument]:
    updated = False
    result = []
    for doc in files:
        if doc.filename == filename:
            result.append(NamedDocument(filename=filename, content=content))
            updated = True
        else:
            result.append(doc)
    if not updated:
        result.append(NamedDocument(filename=filename, content=content))
    return result


def apply_operation(files: Sequence[NamedDocument], op: EditOperation) -> List[NamedDocument]:
    files = list(files)
    exists = any(doc.filename == op.filename for doc in files)

    if op.kind is OperationKind.DELETE:
        if not exists:
            logger.warning("Delete of unknown file '%s' ignored", op.filename)
            return files
        return [doc for doc in files if doc.filename != op.filename]

    if op.kind is OperationKind.UPDATE and not exists:
        logger.info("Update target '%s' not found, adding it", op.filename)
    elif op.kind is OperationKind.ADD and exists:
        logger.info("Add target '%s' already exists, replacing its content", op.filename)
    return _upsert(files, op.filename, op.content)


def reorder_documents(files: Sequence[NamedDocument], order: Iterable[str]) -> List[NamedDocument]:
    """
    Put the files named in ``order`` first, in that order. Unknown names are
    ignored and files missing from ``order`` keep their relative order at the end.
    """
    by_name = {doc.filename: doc for doc in files}
    ordered: List[NamedDocument] = []
    seen = set()
    for filename in order:
        if filename in by_name and filename not in seen:
            ordered.append(by_name[filename])
            seen.add(filename)
    ordered.extend(doc for doc in files if doc.filename not in seen)
    return ordered


def format_mdx_filename(name: str) -> str:
    """'Rate Limits' -> 'rate-limits.mdx'"""
    stem = re.sub(r"\s+", "-", name.strip().lower())
    if stem.endswith(MDX_SUFFIX):
        stem = stem[:-len(MDX_SUFFIX)]
    stem = re.sub(r"[^a-z0-9-]", "", stem)
    return f"{stem}{MDX_SUFFIX}"


def section_title_from_filename(filename: str) -> str:
    """'rate-limits.mdx' -> 'Rate Limits'"""
    stem = filename[:-len(MDX_SUFFIX)] if filename.endswith(MDX_SUFFIX) else filename
    return " ".join(word[:1].upper() + word[1:] for word in stem.split("-"))


def new_section_document(name: str) -> NamedDocument:
    filename = format_mdx_filename(name)
    if filename == MDX_SUFFIX:
        raise ValueError(f"Cannot derive a filename from {name!r}")
    return NamedDocument(
        filename=filename,
        content=SECTION_TEMPLATE.format(title=section_title_from_filename(filename)),
    )
