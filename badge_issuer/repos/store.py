from __future__ import annotations

import base64
from typing import Protocol, runtime_checkable

from badge_issuer.models.catalog import CommitRecord, Directory, Leaf, TreeEntry

# Commits per history page; read_history(depth) fetches `depth` pages.
HISTORY_PAGE_SIZE = 100


@runtime_checkable
class RemoteStore(Protocol):
    async def read_tree(self, path: str = "") -> list[TreeEntry]:
        """List files and one level of directories under ``path``."""
        ...

    async def read_history(self, depth: int = 1) -> list[CommitRecord]:
        """Commit records, newest first, ``depth`` pages deep."""
        ...

    async def write_file(self, path: str, commit_message: str, content_b64: str) -> dict:
        """Create ``path`` in a single new commit."""
        ...


class InMemoryStore:
    """Append-only in-memory store for tests and local runs.

    Mirrors the remote contract: one commit per write, history newest
    first, no overwriting of an existing path.
    """

    def __init__(self) -> None:
        self._files: dict[str, str] = {}
        self._commits: list[CommitRecord] = []

    async def read_tree(self, path: str = "") -> list[TreeEntry]:
        prefix = f"{path.strip('/')}/" if path.strip("/") else ""
        leaves: set[str] = set()
        dirs: dict[str, set[str]] = {}
        for file_path in self._files:
            if not file_path.startswith(prefix):
                continue
            parts = file_path[len(prefix):].split("/")
            if len(parts) == 1:
                leaves.add(parts[0])
            else:
                children = dirs.setdefault(parts[0], set())
                if len(parts) == 2:
                    children.add(parts[1])

        entries: list[TreeEntry] = [Leaf(name) for name in leaves]
        entries += [Directory(name, tuple(sorted(c))) for name, c in dirs.items()]
        return sorted(entries, key=lambda e: e.name)

    async def read_history(self, depth: int = 1) -> list[CommitRecord]:
        newest_first = list(reversed(self._commits))
        return newest_first[: depth * HISTORY_PAGE_SIZE]

    async def write_file(self, path: str, commit_message: str, content_b64: str) -> dict:
        path = path.strip("/")
        if path in self._files:
            raise FileExistsError(path)
        # Reject payloads the remote API would reject
        base64.b64decode(content_b64, validate=True)
        self._files[path] = content_b64
        commit = CommitRecord(message=commit_message, sha=f"{len(self._commits) + 1:040x}")
        self._commits.append(commit)
        return {"content": {"path": path}, "commit": {"sha": commit.sha, "message": commit_message}}

    def read_file(self, path: str) -> bytes:
        return base64.b64decode(self._files[path.strip("/")])

    def paths(self) -> list[str]:
        return list(self._files)

    def commit_messages(self) -> list[str]:
        """Messages oldest first."""
        return [c.message for c in self._commits]
