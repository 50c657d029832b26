"""
Page object introspection - discovers and lists a project's page folder.

Used by the page browser panel. No test-framework assumptions, just the
filesystem. Every failure degrades to an empty result so the panel can
always render something.

Expected layout:
  <repo>/
    pages/
      login/
        login.page.ts
      cart.page.ts
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

DEFAULT_PAGES_DIRNAME = "pages"
WEB_STORE_DIRNAME = "web_store"


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "dir"


@dataclass(frozen=True)
class DirectoryEntry:
    """One file or directory found under a scanned root."""
    name: str
    path: Path
    kind: EntryKind

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    def to_dict(self) -> dict:
        return {"name": self.name, "path": str(self.path), "kind": self.kind.value}


@dataclass(frozen=True)
class RepoSummary:
    """A workspace repository. Only repos with a page folder are listed."""
    name: str
    path: Path
    has_web_store: bool

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "path": str(self.path),
            "has_web_store": self.has_web_store,
        }


def _sorted(entries: list[DirectoryEntry]) -> list[DirectoryEntry]:
    return sorted(entries, key=lambda e: e.name)


class PageObjectIntrospector:
    """
    Locates and enumerates the page object folder of a project.

    Stateless: each call reflects the filesystem at that moment.
    """

    def __init__(self, pages_dirname: str = DEFAULT_PAGES_DIRNAME):
        self.pages_dirname = pages_dirname

    def resolve_default_root(self, repo_root: Optional[PathLike]) -> Optional[Path]:
        """
        Pick the page root for a project.

        Returns <repo>/pages when it is a directory, else the repo root
        when it exists, else None.
        """
        if not repo_root:
            return None
        try:
            root = Path(repo_root)
            pages = root / self.pages_dirname
            if pages.is_dir():
                return pages
            return root if root.exists() else None
        except (OSError, ValueError) as e:
            logger.debug(f"Cannot resolve page root for {repo_root}: {e}")
            return None

    def list_subfolders(self, repo_root: Optional[PathLike]) -> list[DirectoryEntry]:
        """Immediate child directories of the resolved page root, by name."""
        root = self.resolve_default_root(repo_root)
        if root is None:
            return []
        return self._list_children(root, EntryKind.DIRECTORY)

    def list_files(self, root: Optional[PathLike]) -> list[DirectoryEntry]:
        """Immediate child files of ``root``, by name."""
        if not root:
            return []
        return self._list_children(Path(root), EntryKind.FILE)

    def scan(self, root: Optional[PathLike]) -> list[DirectoryEntry]:
        """
        Walk everything under ``root`` depth-first.

        Each directory is emitted before its contents. If any part of the
        walk fails the whole result is discarded and [] is returned.
        """
        if not root:
            return []
        root = Path(root)

        found: list[DirectoryEntry] = []
        try:
            if not root.exists():
                return []
            # Explicit stack so tree depth is not bounded by the recursion limit.
            # Children go on reversed so they pop in name order.
            pending = list(reversed(self._children(root)))
            while pending:
                entry = pending.pop()
                found.append(entry)
                if entry.is_dir:
                    pending.extend(reversed(self._children(entry.path)))
        except (OSError, ValueError) as e:
            logger.warning(f"Scan of {root} failed, discarding partial results: {e}")
            return []
        return found

    def _children(self, directory: Path) -> list[DirectoryEntry]:
        """Files and directories directly under ``directory``, by name. Raises OSError."""
        entries = []
        with os.scandir(directory) as it:
            for child in it:
                if child.is_dir(follow_symlinks=False):
                    kind = EntryKind.DIRECTORY
                elif child.is_file(follow_symlinks=False):
                    kind = EntryKind.FILE
                else:
                    continue
                entries.append(DirectoryEntry(child.name, directory / child.name, kind))
        return _sorted(entries)

    def _list_children(self, directory: Path, kind: EntryKind) -> list[DirectoryEntry]:
        entries = []
        try:
            with os.scandir(directory) as it:
                for child in it:
                    if kind is EntryKind.DIRECTORY:
                        matches = child.is_dir(follow_symlinks=False)
                    else:
                        matches = child.is_file(follow_symlinks=False)
                    if matches:
                        entries.append(DirectoryEntry(child.name, directory / child.name, kind))
        except (OSError, ValueError) as e:
            logger.debug(f"Cannot list {directory}: {e}")
            return []
        return _sorted(entries)

    # ── Workspace ────────────────────────────────────────────────────

    def list_workspace_repos(self, workspace_root: Optional[PathLike]) -> list[RepoSummary]:
        """
        Repositories directly under ``workspace_root`` that have a page folder.
        """
        if not workspace_root:
            return []
        workspace = Path(workspace_root)

        repos = []
        try:
            with os.scandir(workspace) as it:
                candidates = [c.name for c in it if c.is_dir(follow_symlinks=False)]

            for name in candidates:
                repo_path = workspace / name
                pages = repo_path / self.pages_dirname
                if not pages.is_dir():
                    continue
                repos.append(RepoSummary(
                    name=name,
                    path=repo_path,
                    has_web_store=(pages / WEB_STORE_DIRNAME).is_dir(),
                ))
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to list workspace repos under {workspace}: {e}")
            return []

        return sorted(repos, key=lambda r: r.name)
