# mdxforge/core/outline.py
"""
OutlineBuilder: 从文档标题 (#, ##, ###) 生成导航用的层级目录。

Each document becomes one top-level node whose id is the filename stem. A
``#`` heading only renames that node; ``##`` headings become its children and
``###`` headings nest under the most recent ``##`` of the same document.
A ``###`` seen before any ``##`` is dropped unless ``attach_orphans`` is set.
"""

import re
from typing import Iterable, List, Optional, Dict, Any

from .models import NamedDocument, OutlineNode

HEADING_PATTERN = re.compile(r"^(#{1,3})\s+(.+)$", re.MULTILINE)
_NON_ALNUM = re.compile(r"[^a-z0-9]+")
MDX_SUFFIX = ".mdx"


def slugify(text: str) -> str:
    """'Getting Started!' -> 'getting-started-'"""
    return _NON_ALNUM.sub("-", text.lower())


def _stem(filename: str) -> str:
    return filename[:-len(MDX_SUFFIX)] if filename.endswith(MDX_SUFFIX) else filename


def build_document_outline(doc: NamedDocument, attach_orphans: bool = False) -> OutlineNode:
    stem = _stem(doc.filename)
    section = OutlineNode(id=stem, title=stem.replace("-", " "))
    last_level2: Optional[OutlineNode] = None

    for match in HEADING_PATTERN.finditer(doc.content):
        level = len(match.group(1))
        text = match.group(2).strip()
        if level == 1:
            section.title = text
        elif level == 2:
            last_level2 = OutlineNode(id=slugify(text), title=text)
            section.children.append(last_level2)
        elif last_level2 is not None:
            last_level2.children.append(OutlineNode(id=slugify(text), title=text))
        elif attach_orphans:
            section.children.append(OutlineNode(id=slugify(text), title=text))

    return section


def build_outline(files: Iterable[NamedDocument], attach_orphans: bool = False) -> List[OutlineNode]:
    return [build_document_outline(doc, attach_orphans=attach_orphans) for doc in files]


def outline_to_dict(outline: List[OutlineNode]) -> List[Dict[str, Any]]:
    return [node.to_dict() for node in outline]
