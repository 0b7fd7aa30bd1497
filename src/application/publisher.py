import logging
from typing import Any, Awaitable, Callable, Optional

import aiohttp

from src.application.activity_collector import API_ERRORS
from src.infrastructure.github_client import GitHubRestClient
from src.infrastructure.acl import GitHubTranslator
from src.domain.models import GitCommit, PublishedDocument
from src.domain.exceptions import PublishError

logger = logging.getLogger(__name__)

COMMIT_MESSAGE = "Update repository activity"
REGULAR_FILE_MODE = "100644"


class Publisher:
    """
    Replaces one file's content in a repository by committing on top of the current branch head.

    The steps run strictly in order: get ref, create tree, get parent commit, create commit,
    update ref. The ref is only moved last, so a failure before that leaves the branch untouched.
    Nothing is rolled back: a failed ref update leaves an unreferenced tree and commit behind.
    """

    def __init__(self, github_client: GitHubRestClient, commit_message: str = COMMIT_MESSAGE):
        self.github_client = github_client
        self.commit_message = commit_message

    @staticmethod
    async def _step(
        step: str,
        call: Awaitable[Any],
        translate: Optional[Callable[[Any], Any]] = None,
    ) -> Any:
        try:
            raw = await call
            return translate(raw) if translate else raw
        except (*API_ERRORS, ValueError) as e:
            raise PublishError(step, e) from e

    async def publish(
        self,
        session: aiohttp.ClientSession,
        owner: str,
        repo: str,
        branch_ref: str,
        document: PublishedDocument,
    ) -> GitCommit:
        """
        Publishes the document and returns the new commit.

        Raises:
            PublishError: One of the five steps failed; `step` names which.
        """
        client = self.github_client

        ref = await self._step(
            "get_ref", client.get_ref(session, owner, repo, branch_ref), GitHubTranslator.to_ref,
        )
        logger.info(f"{owner}/{repo} {branch_ref} is at {ref.sha}.")

        entries = [{
            "path": document.path,
            "mode": REGULAR_FILE_MODE,
            "type": "blob",
            "content": document.content,
        }]
        tree = await self._step(
            "create_tree", client.create_tree(session, owner, repo, ref.sha, entries), GitHubTranslator.to_tree,
        )

        parent = await self._step(
            "get_commit", client.get_commit(session, owner, repo, ref.sha), GitHubTranslator.to_commit,
        )

        commit = await self._step(
            "create_commit",
            client.create_commit(session, owner, repo, self.commit_message, tree.sha, [parent.sha]),
            GitHubTranslator.to_commit,
        )

        await self._step("update_ref", client.update_ref(session, owner, repo, branch_ref, commit.sha, force=False))
        logger.info(f"Published {document.path} to {owner}/{repo} as {commit.sha}.")
        return commit
