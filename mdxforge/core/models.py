# mdxforge/core/models.py
"""
定义 MdxForge 核心数据结构: NamedDocument, OutlineNode, EditOperation。
Snapshot 由 snapstore 库提供，这里重新导出。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Dict, Any

from snapstore.models import Snapshot


@dataclass(frozen=True)
class NamedDocument:
    """ 单个逻辑文档：文件名 + 文本内容。 """
    filename: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"filename": self.filename, "content": self.content}


@dataclass
class OutlineNode:
    id: str
    title: str
    children: List['OutlineNode'] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "children": [child.to_dict() for child in self.children],
        }


class OperationKind(Enum):
    UPDATE = "update"
    ADD = "add"
    DELETE = "delete"


@dataclass(frozen=True)
class EditOperation:
    """
    描述对单个文件的一次编辑操作。

    ``content`` is empty for DELETE. ``source``, ``explanation`` and
    ``original_section`` are informational only.
    """
    kind: OperationKind
    filename: str
    content: str = ""
    source: str = "marker"  # marker | heuristic
    explanation: Optional[str] = None
    original_section: Optional[str] = None

    @classmethod
    def update(cls, filename: str, content: str, **meta) -> 'EditOperation':
        return cls(OperationKind.UPDATE, filename, content, **meta)

    @classmethod
    def add(cls, filename: str, content: str, **meta) -> 'EditOperation':
        return cls(OperationKind.ADD, filename, content, **meta)

    @classmethod
    def delete(cls, filename: str, **meta) -> 'EditOperation':
        return cls(OperationKind.DELETE, filename, "", **meta)


__all__ = ['NamedDocument', 'OutlineNode', 'OperationKind', 'EditOperation', 'Snapshot']
