import aiohttp
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from src.domain.exceptions import GitHubApiError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
PAGE_SIZE = 100

class GitHubRestClient:
    """
    Client for interacting with the GitHub REST API.
    Handles authentication, pagination through the Link header and the git plumbing endpoints.
    No retries and no rate-limit handling: the first failure is raised to the caller.
    """

    def __init__(self, token: str, api_url: str = DEFAULT_API_URL):
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": "github-activity-tracker",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        self.api_url = api_url.rstrip("/")

    @staticmethod
    def _strip_refs_prefix(ref: str) -> str:
        # "refs/heads/main" -> "heads/main", the form the git/ref endpoints expect
        return ref[len("refs/"):] if ref.startswith("refs/") else ref

    @staticmethod
    def _next_page(response: aiohttp.ClientResponse) -> Optional[int]:
        next_link = response.links.get("next")
        if not next_link:
            return None
        page = next_link["url"].query.get("page")
        return int(page) if page else None

    async def _request(
        self,
        session: aiohttp.ClientSession,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Any, Optional[int]]:
        """
        Executes one API call.

        Returns:
            Tuple of (decoded JSON body, next page number or None).
        """
        url = f"{self.api_url}{path}"
        async with session.request(method, url, params=params, json=payload, headers=self.headers) as response:
            if response.status >= 400:
                message = "GitHub API request failed."
                try:
                    body = await response.json()
                    if isinstance(body, dict):
                        message = body.get("message", message)
                except (aiohttp.ContentTypeError, ValueError):
                    pass
                raise GitHubApiError(status=response.status, url=url, message=message)

            try:
                data = await response.json()
            except ValueError as e:
                raise GitHubApiError(status=response.status, url=url, message="invalid JSON body.") from e
            return data, self._next_page(response)

    async def get_current_user(self, session: aiohttp.ClientSession) -> Dict[str, Any]:
        user, _ = await self._request(session, "GET", "/user")
        return user

    async def list_user_events(
        self, session: aiohttp.ClientSession, login: str, page: int = 1,
    ) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        """Fetches one page of events performed by `login`, private ones included when the token allows it."""
        return await self._request(
            session, "GET", f"/users/{login}/events",
            params={"per_page": PAGE_SIZE, "page": page},
        )

    async def list_owned_repositories(
        self, session: aiohttp.ClientSession, login: str, page: int = 1,
    ) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        return await self._request(
            session, "GET", f"/users/{login}/repos",
            params={"type": "owner", "per_page": PAGE_SIZE, "page": page},
        )

    async def list_commits(
        self,
        session: aiohttp.ClientSession,
        owner: str,
        repo: str,
        since: datetime,
        author: str,
    ) -> List[Dict[str, Any]]:
        commits, _ = await self._request(
            session, "GET", f"/repos/{owner}/{repo}/commits",
            params={"since": since.isoformat(), "author": author, "per_page": PAGE_SIZE},
        )
        return commits

    async def get_repository(self, session: aiohttp.ClientSession, owner: str, repo: str) -> Dict[str, Any]:
        repository, _ = await self._request(session, "GET", f"/repos/{owner}/{repo}")
        return repository

    async def get_ref(self, session: aiohttp.ClientSession, owner: str, repo: str, ref: str) -> Dict[str, Any]:
        raw_ref, _ = await self._request(
            session, "GET", f"/repos/{owner}/{repo}/git/ref/{self._strip_refs_prefix(ref)}",
        )
        return raw_ref

    async def create_tree(
        self,
        session: aiohttp.ClientSession,
        owner: str,
        repo: str,
        base_sha: str,
        entries: List[Dict[str, str]],
    ) -> Dict[str, Any]:
        raw_tree, _ = await self._request(
            session, "POST", f"/repos/{owner}/{repo}/git/trees",
            payload={"base_tree": base_sha, "tree": entries},
        )
        return raw_tree

    async def get_commit(self, session: aiohttp.ClientSession, owner: str, repo: str, sha: str) -> Dict[str, Any]:
        raw_commit, _ = await self._request(session, "GET", f"/repos/{owner}/{repo}/git/commits/{sha}")
        return raw_commit

    async def create_commit(
        self,
        session: aiohttp.ClientSession,
        owner: str,
        repo: str,
        message: str,
        tree_sha: str,
        parent_shas: List[str],
    ) -> Dict[str, Any]:
        raw_commit, _ = await self._request(
            session, "POST", f"/repos/{owner}/{repo}/git/commits",
            payload={"message": message, "tree": tree_sha, "parents": parent_shas},
        )
        return raw_commit

    async def update_ref(
        self,
        session: aiohttp.ClientSession,
        owner: str,
        repo: str,
        ref: str,
        sha: str,
        force: bool = False,
    ) -> Dict[str, Any]:
        raw_ref, _ = await self._request(
            session, "PATCH", f"/repos/{owner}/{repo}/git/refs/{self._strip_refs_prefix(ref)}",
            payload={"sha": sha, "force": force},
        )
        return raw_ref
