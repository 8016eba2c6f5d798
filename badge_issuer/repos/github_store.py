"""GitHub implementation of RemoteStore.

Uses the REST contents API for listing and writing files and the
commits API for history.  Every PUT to /contents creates exactly one
commit, which is what makes the commit log usable as an ordering signal.

No retries or rate-limit handling: HTTP failures surface unchanged as
httpx.HTTPStatusError.
"""

from __future__ import annotations

import logging

import httpx

from badge_issuer.models.catalog import CommitRecord, Directory, Leaf, TreeEntry
from badge_issuer.repos.store import HISTORY_PAGE_SIZE

logger = logging.getLogger(__name__)


class GitHubStore:
    """Satisfies the RemoteStore Protocol for one ``user/repo``."""

    def __init__(
        self,
        *,
        token: str,
        user: str,
        repo: str,
        api_url: str = "https://api.github.com",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._user = user
        self._repo = repo
        headers = {
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github+json",
        }
        if client is None:
            client = httpx.AsyncClient(base_url=api_url, timeout=30)
        elif not str(client.base_url):
            # An injected client keeps its own base_url when it has one
            client.base_url = api_url
        client.headers.update(headers)
        self._client = client

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self._user}/{self._repo}"

    async def __aenter__(self) -> GitHubStore:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _list_dir(self, path: str) -> list[dict] | None:
        url = f"{self._repo_path}/contents/{path.strip('/')}"
        resp = await self._client.get(url)
        if resp.status_code == 404:
            # Brand-new repository without any commit yet
            return None
        resp.raise_for_status()
        return resp.json()

    async def read_tree(self, path: str = "") -> list[TreeEntry]:
        items = await self._list_dir(path)
        if items is None:
            logger.info("Empty tree at %r", path, extra={"repo": self._repo})
            return []

        entries: list[TreeEntry] = []
        for item in items:
            if item["type"] == "dir":
                children = await self._list_dir(item["path"]) or []
                entries.append(
                    Directory(
                        name=item["name"],
                        children=tuple(c["name"] for c in children if c["type"] == "file"),
                    )
                )
            else:
                entries.append(Leaf(item["name"]))
        return entries

    async def read_history(self, depth: int = 1) -> list[CommitRecord]:
        records: list[CommitRecord] = []
        for page in range(1, depth + 1):
            resp = await self._client.get(
                f"{self._repo_path}/commits",
                params={"per_page": HISTORY_PAGE_SIZE, "page": page},
            )
            if resp.status_code == 409:
                # GitHub answers 409 Conflict for a repository with no commits
                return records
            resp.raise_for_status()
            batch = resp.json()
            records.extend(
                CommitRecord(message=item["commit"]["message"], sha=item.get("sha"))
                for item in batch
            )
            if len(batch) < HISTORY_PAGE_SIZE:
                break
        return records

    async def write_file(self, path: str, commit_message: str, content_b64: str) -> dict:
        resp = await self._client.put(
            f"{self._repo_path}/contents/{path.strip('/')}",
            json={"message": commit_message, "content": content_b64},
        )
        resp.raise_for_status()
        logger.debug(
            "Committed %s",
            path,
            extra={"repo": self._repo, "path": path, "commit_message": commit_message},
        )
        return resp.json()
