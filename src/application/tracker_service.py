import logging
from typing import List, Optional, Sequence

import aiohttp

from src.application.activity_collector import (
    API_ERRORS,
    ActivityCollector,
    CommitActivityCollector,
    EventActivityCollector,
)
from src.application.formatter import MessageFormatter
from src.application.publisher import Publisher
from src.config import COMMIT_SOURCE, TrackerSettings
from src.domain.exceptions import CollectionError, PublishError, TrackerException
from src.domain.models import GitCommit, PublishedDocument, RepositoryActivity
from src.infrastructure.github_client import GitHubRestClient

logger = logging.getLogger(__name__)


class ActivityTrackerService:
    """
    Service orchestrating one tracking run: resolve the authenticated user, collect
    activity for the configured windows, render the document and publish it.
    """

    def __init__(
        self,
        settings: TrackerSettings,
        github_client: GitHubRestClient,
        collector: Optional[ActivityCollector] = None,
        publisher: Optional[Publisher] = None,
    ):
        self.settings = settings
        self.github_client = github_client
        self.collector = collector or self._build_collector()
        self.publisher = publisher or Publisher(github_client)

    def _build_collector(self) -> ActivityCollector:
        if self.settings.activity_source == COMMIT_SOURCE:
            return CommitActivityCollector(self.github_client)
        return EventActivityCollector(self.github_client)

    def _build_formatter(self, login: str) -> MessageFormatter:
        return MessageFormatter(
            profile_username=self.settings.resolve_profile_username(login),
            intro=self.settings.intro,
            footer_heading=self.settings.footer_heading,
            footer_links=self.settings.footer_links,
        )

    def has_real_activity(self, activity_lists: Sequence[Sequence[RepositoryActivity]], target_repo: str) -> bool:
        records = [activity for activities in activity_lists for activity in activities]
        if not records:
            return False
        if self.settings.activity_source == COMMIT_SOURCE:
            # Commits to the tracking repository alone come from previous runs, not from real work
            return any(activity.name != target_repo for activity in records)
        return True

    async def _collect(
        self, session: aiohttp.ClientSession, login: str, window_days: int, label: str,
    ) -> List[RepositoryActivity]:
        try:
            return await self.collector.collect(session, login, window_days)
        except CollectionError as e:
            raise CollectionError(f"failed to get {label} repos: {e}") from e

    async def run(self) -> Optional[GitCommit]:
        """
        Performs one full run.

        Returns:
            Optional[GitCommit]: The published commit, or None when there was nothing to publish.

        Raises:
            TrackerException: Resolving the user, collecting or publishing failed.
        """
        async with aiohttp.ClientSession() as session:
            try:
                user = await self.github_client.get_current_user(session)
            except API_ERRORS as e:
                raise TrackerException(f"failed to get user: {e}") from e

            login = user.get('login')
            if not login:
                raise TrackerException("failed to get user: response has no login.")
            logger.info(f"Tracking activity for {login}.")

            extended = None
            if self.settings.extended_window_days:
                extended = await self._collect(session, login, self.settings.extended_window_days, "last month")
            recent = await self._collect(session, login, self.settings.recent_window_days, "recent")

            owner = self.settings.resolve_owner(login)
            repo = self.settings.resolve_repo(login)

            activity_lists = [recent] if extended is None else [recent, extended]
            if not self.has_real_activity(activity_lists, repo):
                logger.info("No repository activity found. Skipping publish.")
                return None

            document = PublishedDocument(
                path=self.settings.file_path,
                content=self._build_formatter(login).format(recent, extended),
            )

            try:
                return await self.publisher.publish(session, owner, repo, self.settings.target_branch, document)
            except PublishError as e:
                raise TrackerException(f"failed to update tracking repo: {e}") from e
