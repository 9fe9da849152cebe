# mdxforge/core/errors.py
"""
MdxForge 异常层次。

"Could not understand the AI response" (JSONRecoveryFailure, DocumentShapeError)
must stay distinguishable from "no edit was requested", which is not an
exception at all: PatchProtocolParser returns None for it.
"""

import json


class MdxForgeError(Exception):
    """Base class for every error raised by mdxforge."""


class JSONRecoveryFailure(MdxForgeError, ValueError):
    """Model output could not be decoded even after the cleanup pass.

    ``original`` holds the JSONDecodeError of the first, unmodified parse.
    """

    def __init__(self, original: json.JSONDecodeError):
        self.original = original
        super().__init__(str(original))


class DocumentShapeError(MdxForgeError, ValueError):
    """Decoded JSON is valid but is not a list of documents."""


class DelimiterCollisionError(MdxForgeError, ValueError):
    """A document would be split or renamed by the snapshot block delimiter."""

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(
            f"Document '{filename}' collides with the snapshot delimiter and cannot be encoded losslessly"
        )


class ConfigError(MdxForgeError):
    """Invalid or unreadable configuration."""
