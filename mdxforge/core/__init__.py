# mdxforge/core/__init__.py
from .codec import encode, decode, decode_with_report, DELIMITER
from .outline import build_outline, build_document_outline, slugify
from .history import VersionHistory
from .patch_parser import PatchProtocolParser, parse_chat_response
from .resilient_json import loads_resilient, parse_generated_documents
from .applier import apply_operation, reorder_documents
from .models import NamedDocument, OutlineNode, OperationKind, EditOperation, Snapshot
from .project import DocProject, ChatApplyResult

__all__ = [
    'encode', 'decode', 'decode_with_report', 'DELIMITER',
    'build_outline', 'build_document_outline', 'slugify',
    'VersionHistory', 'PatchProtocolParser', 'parse_chat_response',
    'loads_resilient', 'parse_generated_documents',
    'apply_operation', 'reorder_documents',
    'NamedDocument', 'OutlineNode', 'OperationKind', 'EditOperation', 'Snapshot',
    'DocProject', 'ChatApplyResult',
]
