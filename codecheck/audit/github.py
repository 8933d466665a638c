# codecheck/audit/github.py
import logging
from typing import Any, List, Optional
from urllib.parse import quote

import httpx

from codecheck.config import Settings, get_settings
from codecheck.errors import NetworkError, RepoNotFound, UnknownError
from codecheck.schemas import RepoFile
from codecheck.audit.utils import file_type_for

logger = logging.getLogger(__name__)


class GitHubFetcher:
    """
    Lists a repository through the GitHub contents API and flattens it into
    the HTML/CSS/JavaScript files it contains, depth-first in listing order.

    A caller may pass its own ``httpx.AsyncClient`` (tests use a MockTransport);
    otherwise one client is opened per ``fetch_repo`` call.
    """

    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or get_settings()
        self._client = client

    async def fetch_repo(self, owner: str, repo: str) -> List[RepoFile]:
        if self._client is not None:
            return await self._collect(self._client, owner, repo)

        async with httpx.AsyncClient(timeout=self.settings.GITHUB_TIMEOUT_S) as client:
            return await self._collect(client, owner, repo)

    async def _collect(self, client: httpx.AsyncClient, owner: str, repo: str) -> List[RepoFile]:
        files: List[RepoFile] = []
        await self._fetch_directory(client, owner, repo, "", 0, files)
        return files

    async def _fetch_directory(
        self,
        client: httpx.AsyncClient,
        owner: str,
        repo: str,
        path: str,
        depth: int,
        files: List[RepoFile],
    ) -> None:
        if depth > self.settings.MAX_TREE_DEPTH:
            raise UnknownError(f"Repository tree exceeds maximum depth of {self.settings.MAX_TREE_DEPTH}")

        for item in await self._list(client, owner, repo, path):
            kind = item.get("type")
            name = item.get("name") or ""

            if kind == "file":
                file_type = file_type_for(name)
                if file_type is None:
                    continue
                files.append(
                    RepoFile(
                        name=item["path"],
                        path=item["path"],
                        type=file_type,
                        url=item.get("download_url") or "",
                    )
                )
            elif kind == "dir":
                await self._fetch_directory(client, owner, repo, item["path"], depth + 1, files)
            # symlinks and submodules are not followed

    async def _list(self, client: httpx.AsyncClient, owner: str, repo: str, path: str) -> List[dict]:
        api_url = f"{self.settings.GITHUB_API_URL.rstrip('/')}/repos/{owner}/{repo}/contents/{quote(path)}"
        logger.debug("Listing %s", api_url)

        try:
            resp = await client.get(api_url, headers=self.settings.github_headers)
        except httpx.TransportError as exc:
            logger.error("GitHub unreachable for %s/%s: %s", owner, repo, exc)
            raise NetworkError(f"Failed to reach GitHub: {exc}") from exc

        if resp.status_code == 404:
            raise RepoNotFound(f"Repository not found: {owner}/{repo}/{path}".rstrip("/"))
        if not resp.is_success:
            logger.error("[GitHub] HTTP %s for %s. Body: %s", resp.status_code, api_url, resp.text[:500])
            raise UnknownError(f"GitHub API responded with status: {resp.status_code}")

        try:
            data: Any = resp.json()
        except ValueError as exc:
            raise UnknownError(f"GitHub API returned invalid JSON for {path or '/'}") from exc

        if not isinstance(data, list):
            raise UnknownError(f"GitHub API did not return a directory listing for {path or '/'}")
        return [item for item in data if isinstance(item, dict)]
