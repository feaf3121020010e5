"""Shared testing fixtures for the lecture_quiz test suite."""

from .chat_client import ChatClientStub  # noqa: F401
from .slides import build_pptx, corrupt_member  # noqa: F401
from .pdf_renderer import CSSStub, HTMLStub  # noqa: F401
from .workspace import WorkspaceBuilder, build_tree  # noqa: F401

__all__ = [
    "CSSStub",
    "ChatClientStub",
    "HTMLStub",
    "WorkspaceBuilder",
    "build_pptx",
    "build_tree",
    "corrupt_member",
]
