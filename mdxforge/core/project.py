# mdxforge/core/project.py
"""
DocProject: 单个文档项目的服务层。

It owns the project's VersionHistory, reads and writes snapshots through an
ISnapshotStore and notifies a ChangeEventBus after every stored snapshot.
Every write is "read current, change in memory, append": without
``optimistic=True`` concurrent writers follow last-write-wins.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from snapstore import ISnapshotStore, open_store

from . import codec
from .applier import apply_operation, new_section_document, reorder_documents
from .config import ForgeConfig
from .errors import DocumentShapeError, JSONRecoveryFailure
from .events import ChangeEventBus
from .history import VersionHistory
from .models import EditOperation, NamedDocument, OutlineNode, Snapshot
from .outline import build_outline
from .patch_parser import PatchProtocolParser
from .resilient_json import extract_fenced_block, parse_generated_documents, split_markdown_sections
from ..utils.console import get_logger

logger = get_logger(__name__)

APPLIED = "applied"
NO_EDIT = "no_edit"


@dataclass
class ChatApplyResult:
    status: str  # applied | no_edit
    operation: Optional[EditOperation] = None
    snapshot: Optional[Snapshot] = None
    documents: List[NamedDocument] = field(default_factory=list)

    @property
    def applied(self) -> bool:
        return self.status == APPLIED


class DocProject:
    def __init__(
        self,
        project_id: str,
        store: ISnapshotStore,
        config: Optional[ForgeConfig] = None,
        event_bus: Optional[ChangeEventBus] = None,
    ):
        self.project_id = project_id
        self.store = store
        self.config = config or ForgeConfig(project_id=project_id, project_title=project_id)
        self.event_bus = event_bus or ChangeEventBus()
        self.parser = PatchProtocolParser(allow_heuristics=self.config.allow_heuristics)
        self.history = VersionHistory(max_length=self.config.history_max_length)
        self._loaded_head_id: Optional[str] = None
        self.reload()

    @classmethod
    def from_config(cls, config: ForgeConfig, event_bus: Optional[ChangeEventBus] = None) -> 'DocProject':
        store = open_store(config.storage_dir)
        return cls(config.project_id, store, config=config, event_bus=event_bus)

    # ------------------------------
    # 读取
    # ------------------------------

    def reload(self) -> VersionHistory:
        snapshots = self.store.list_snapshots(self.project_id)
        self.history = VersionHistory.from_snapshots(snapshots, max_length=self.config.history_max_length)
        self._loaded_head_id = snapshots[0].id if snapshots else None
        return self.history

    def documents(self) -> List[NamedDocument]:
        """Documents of the snapshot currently being viewed."""
        current = self.history.current
        return codec.decode(current.full_text) if current else []

    def document(self, filename: str) -> Optional[NamedDocument]:
        for doc in self.documents():
            if doc.filename == filename:
                return doc
        return None

    def outline(self) -> List[OutlineNode]:
        return build_outline(self.documents(), attach_orphans=self.config.attach_orphan_subsections)

    # ------------------------------
    # 写入
    # ------------------------------

    def save(self, documents: Sequence[NamedDocument], optimistic: bool = False) -> Snapshot:
        """
        Encode ``documents`` and append them as the newest snapshot.

        With ``optimistic=True`` the store rejects the append with
        StaleSnapshotError when another writer appended since the last reload.
        """
        full_text = codec.encode(documents, strict=self.config.strict_delimiter)
        latest = self.history.latest
        if self.config.skip_identical and latest is not None and latest.matches(full_text):
            logger.info("Project '%s' unchanged, keeping version %s", self.project_id, latest.id)
            self.history.revert(0)
            return latest

        expected_head_id = self._loaded_head_id if optimistic else None
        snapshot = self.store.append_snapshot(self.project_id, full_text, expected_head_id=expected_head_id)
        self.history.append(snapshot)
        self._loaded_head_id = snapshot.id
        self.event_bus.emit(self.project_id, snapshot)
        return snapshot

    def import_generation(self, response_text: str) -> Snapshot:
        """Store the documents of an AI generation response as a new version."""
        try:
            documents = parse_generated_documents(response_text)
        except (JSONRecoveryFailure, DocumentShapeError):
            if not self.config.markdown_fallback:
                raise
            logger.warning("Generation response is not a JSON array, splitting it on level-1 headings")
            documents = split_markdown_sections(extract_fenced_block(response_text))

        if not documents:
            raise DocumentShapeError("Generation response contains no documents")
        return self.save(documents)

    def revert(self, index: int) -> List[NamedDocument]:
        """View version ``index`` (0 = latest). Nothing is written."""
        snapshot = self.history.revert(index)
        return codec.decode(snapshot.full_text)

    def commit_current(self, optimistic: bool = False) -> Snapshot:
        """Make the viewed version the latest by saving its content again."""
        return self.save(self.documents(), optimistic=optimistic)

    def apply(self, operation: EditOperation, optimistic: bool = False) -> Snapshot:
        return self.save(apply_operation(self.documents(), operation), optimistic=optimistic)

    def apply_chat_response(
        self,
        message: str,
        files_in_scope: Optional[Sequence[str]] = None,
        optimistic: bool = False,
    ) -> ChatApplyResult:
        documents = self.documents()
        scope = list(files_in_scope) if files_in_scope else [doc.filename for doc in documents]
        operation = self.parser.parse(message, scope)
        if operation is None:
            return ChatApplyResult(status=NO_EDIT, documents=documents)

        updated = apply_operation(documents, operation)
        snapshot = self.save(updated, optimistic=optimistic)
        return ChatApplyResult(status=APPLIED, operation=operation, snapshot=snapshot, documents=updated)

    def add_section(self, name: str) -> NamedDocument:
        doc = new_section_document(name)
        if self.document(doc.filename) is not None:
            raise ValueError(f"File {doc.filename} already exists")
        self.apply(EditOperation.add(doc.filename, doc.content))
        return doc

    def write_document(self, filename: str, content: str) -> Snapshot:
        return self.apply(EditOperation.update(filename, content))

    def delete_document(self, filename: str) -> Optional[str]:
        """
        Delete ``filename``. Returns the first remaining filename ("" when the
        project is now empty), or None when the file did not exist.
        """
        if self.document(filename) is None:
            return None
        self.apply(EditOperation.delete(filename))
        remaining = self.documents()
        return remaining[0].filename if remaining else ""

    def reorder(self, order: Sequence[str]) -> Snapshot:
        return self.save(reorder_documents(self.documents(), order))
