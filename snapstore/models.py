"""
SnapStore 核心数据模型
Snapshot 是一次完整编码后的文档集合，创建后不可修改。
"""

import hashlib
from dataclasses import dataclass, asdict
from typing import Dict, Any

from .utils.id_generator import generate_id, generate_timestamp


def text_checksum(full_text: str) -> str:
    """SHA256 of the UTF-8 encoded snapshot text"""
    return hashlib.sha256(full_text.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class Snapshot:
    id: str
    full_text: str
    created_at: str  # ISO-8601, UTC
    checksum: str = ""

    @classmethod
    def create(cls, full_text: str) -> 'Snapshot':
        return cls(
            id=generate_id(),
            full_text=full_text,
            created_at=generate_timestamp(),
            checksum=text_checksum(full_text),
        )

    def matches(self, full_text: str) -> bool:
        return self.checksum == text_checksum(full_text)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Snapshot':
        full_text = data.get("full_text", "")
        return cls(
            id=data["id"],
            full_text=full_text,
            created_at=data.get("created_at", ""),
            checksum=data.get("checksum") or text_checksum(full_text),
        )
