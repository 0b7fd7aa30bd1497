import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Dict, Iterator, List, Optional, Set

import aiohttp

from src.infrastructure.github_client import GitHubRestClient
from src.infrastructure.acl import GitHubTranslator
from src.domain.models import ActivityWindow, RepositoryActivity
from src.domain.exceptions import CollectionError, GitHubApiError

logger = logging.getLogger(__name__)

TRACKED_EVENT_TYPES = frozenset({"PushEvent", "PullRequestEvent"})

# Errors the client can raise for one call
API_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, GitHubApiError)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ActivitySet:
    """
    Insertion-ordered set of RepositoryActivity keyed by repository id.
    The first record added for a repository wins; later duplicates are ignored.
    """

    def __init__(self) -> None:
        self._by_id: Dict[int, RepositoryActivity] = {}
        self._full_names: Set[str] = set()

    def add(self, activity: RepositoryActivity) -> bool:
        if activity.id in self._by_id:
            return False
        self._by_id[activity.id] = activity
        self._full_names.add(activity.full_name)
        return True

    def has_full_name(self, full_name: str) -> bool:
        return full_name in self._full_names

    def to_list(self) -> List[RepositoryActivity]:
        return list(self._by_id.values())

    def __iter__(self) -> Iterator[RepositoryActivity]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)


class ActivityCollector(ABC):
    """Common plumbing for the collectors: the API client and the clock used to compute windows."""

    def __init__(
        self,
        github_client: GitHubRestClient,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.github_client = github_client
        self.clock = clock or utc_now

    def window(self, window_days: int) -> ActivityWindow:
        return ActivityWindow.ending_at(self.clock(), window_days)

    @abstractmethod
    async def collect(
        self, session: aiohttp.ClientSession, login: str, window_days: int,
    ) -> List[RepositoryActivity]:
        """Returns the repositories active inside the last `window_days`, in first-seen order."""


class EventActivityCollector(ActivityCollector):
    """
    Discovers repositories from the user's performed-events feed.

    Only push and pull-request events inside the window count, and only repositories
    that are public and carry a description are kept.
    """

    async def collect(
        self, session: aiohttp.ClientSession, login: str, window_days: int,
    ) -> List[RepositoryActivity]:
        window = self.window(window_days)
        activities = ActivitySet()
        page = 1

        logger.info(f"Collecting events for {login} since {window.since.isoformat()} ({window_days}d).")

        while True:
            try:
                events, next_page = await self.github_client.list_user_events(session, login, page)
            except API_ERRORS as e:
                raise CollectionError(f"failed to list events: {e}") from e

            for event in events:
                await self._consider(session, event, window, activities)

            if next_page is None:
                break
            page = next_page

        logger.info(f"Found {len(activities)} active repositories in the last {window_days}d.")
        return activities.to_list()

    async def _consider(
        self,
        session: aiohttp.ClientSession,
        event: dict,
        window: ActivityWindow,
        activities: ActivitySet,
    ) -> None:
        try:
            created_at = GitHubTranslator.parse_timestamp(event.get('created_at'))
        except ValueError:
            return

        if not window.contains(created_at):
            return

        if event.get('type') not in TRACKED_EVENT_TYPES:
            return

        repo = event.get('repo')
        if not repo:
            return

        full_name = repo.get('name')
        parsed = GitHubTranslator.split_full_name(full_name)
        if parsed is None:
            return
        owner, name = parsed

        if activities.has_full_name(full_name):
            return

        try:
            raw_repo = await self.github_client.get_repository(session, owner, name)
        except API_ERRORS as e:
            logger.warning(f"Error getting details for {full_name}: {e}")
            return

        if not GitHubTranslator.is_public(raw_repo) or not GitHubTranslator.description_of(raw_repo):
            return

        if activities.add(GitHubTranslator.to_activity(raw_repo, owner, name, created_at)):
            logger.debug(f"Recorded {full_name} from {event.get('type')} at {created_at.isoformat()}.")


class CommitActivityCollector(ActivityCollector):
    """
    Discovers repositories owned by the user that received at least one commit
    authored by the user inside the window.
    """

    async def collect(
        self, session: aiohttp.ClientSession, login: str, window_days: int,
    ) -> List[RepositoryActivity]:
        window = self.window(window_days)
        activities = ActivitySet()
        page = 1

        logger.info(f"Collecting commits for {login} since {window.since.isoformat()} ({window_days}d).")

        while True:
            try:
                repos, next_page = await self.github_client.list_owned_repositories(session, login, page)
            except API_ERRORS as e:
                raise CollectionError(f"failed to list repositories: {e}") from e

            for raw_repo in repos:
                owner = (raw_repo.get('owner') or {}).get('login', login)
                name = raw_repo.get('name', '')

                try:
                    commits = await self.github_client.list_commits(session, owner, name, window.since, login)
                except API_ERRORS as e:
                    logger.warning(f"Error getting commits for {owner}/{name}: {e}")
                    continue

                if not commits:
                    continue

                try:
                    committed_at = GitHubTranslator.commit_author_date(commits[0])
                except ValueError:
                    logger.warning(f"Commit in {owner}/{name} has no author date, skipping.")
                    continue

                activities.add(GitHubTranslator.to_activity(raw_repo, owner, name, committed_at))

            if next_page is None:
                break
            page = next_page

        logger.info(f"Found {len(activities)} repositories with commits in the last {window_days}d.")
        return activities.to_list()
