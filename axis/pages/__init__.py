"""
Page object browser support - filesystem introspection.
"""

from .introspection import (
    DirectoryEntry,
    EntryKind,
    PageObjectIntrospector,
    RepoSummary,
)

__all__ = [
    "DirectoryEntry",
    "EntryKind",
    "PageObjectIntrospector",
    "RepoSummary",
]
