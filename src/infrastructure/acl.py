from datetime import datetime
from typing import Any, Dict, Optional, Tuple
from src.domain.models import GitCommit, GitRef, GitTree, RepositoryActivity

class GitHubTranslator:
    """
    Anti-corruption layer that translates raw GitHub REST JSON payloads into domain models.
    """

    @staticmethod
    def parse_timestamp(raw_date: Optional[str]) -> datetime:
        if not raw_date:
            raise ValueError("A timestamp is required.")
        return datetime.fromisoformat(raw_date.replace("Z", "+00:00"))

    @staticmethod
    def split_full_name(full_name: Optional[str]) -> Optional[Tuple[str, str]]:
        """
        Splits an "owner/name" repository identifier.

        Returns:
            Optional[Tuple[str, str]]: (owner, name), or None when the identifier is malformed.
        """
        parts = (full_name or "").split("/")
        if len(parts) != 2 or not all(parts):
            return None
        return parts[0], parts[1]

    @staticmethod
    def is_public(raw_repo: Dict[str, Any]) -> bool:
        visibility = raw_repo.get('visibility')
        if visibility is None:
            return raw_repo.get('private') is False
        return visibility == "public"

    @staticmethod
    def description_of(raw_repo: Dict[str, Any]) -> str:
        # The API sends null for repositories without a description
        return raw_repo.get('description') or ""

    @staticmethod
    def to_activity(
        raw_repo: Dict[str, Any],
        owner: str,
        name: str,
        occurred_at: datetime,
    ) -> RepositoryActivity:
        """
        Builds a RepositoryActivity from a repository payload and the moment of its triggering event.

        Args:
            raw_repo (Dict[str, Any]): The repository JSON as returned by GET /repos/{owner}/{repo}.
            owner (str): Owner parsed from the event or listing.
            name (str): Repository name parsed from the event or listing.
            occurred_at (datetime): When the qualifying event or commit happened.

        Returns:
            RepositoryActivity: The domain model instance for this repository.
        """
        return RepositoryActivity(
            id=raw_repo.get('id', 0),
            name=name,
            owner=owner,
            description=GitHubTranslator.description_of(raw_repo),
            last_activity_at=occurred_at,
        )

    @staticmethod
    def commit_author_date(raw_commit: Dict[str, Any]) -> datetime:
        """Reads the author timestamp of an item from GET /repos/{owner}/{repo}/commits."""
        author = raw_commit.get('commit', {}).get('author') or {}
        return GitHubTranslator.parse_timestamp(author.get('date'))

    @staticmethod
    def to_ref(raw_ref: Dict[str, Any]) -> GitRef:
        object_data = raw_ref.get('object') or {}
        sha = object_data.get('sha')
        if not sha:
            raise ValueError("object.sha is required to build GitRef.")
        return GitRef(ref=raw_ref.get('ref', ''), sha=sha)

    @staticmethod
    def to_tree(raw_tree: Dict[str, Any]) -> GitTree:
        if not raw_tree.get('sha'):
            raise ValueError("sha is required to build GitTree.")
        return GitTree(sha=raw_tree['sha'])

    @staticmethod
    def to_commit(raw_commit: Dict[str, Any]) -> GitCommit:
        """Transforms a git commit object (GET or POST /repos/{owner}/{repo}/git/commits) into a GitCommit."""
        if not raw_commit.get('sha'):
            raise ValueError("sha is required to build GitCommit.")

        tree_data = raw_commit.get('tree') or {}
        author_data = raw_commit.get('author') or {}
        raw_date = author_data.get('date')

        return GitCommit(
            sha=raw_commit['sha'],
            tree_sha=tree_data.get('sha', ''),
            message=raw_commit.get('message', ''),
            parent_shas=[parent.get('sha', '') for parent in raw_commit.get('parents', [])],
            author_date=GitHubTranslator.parse_timestamp(raw_date) if raw_date else None,
        )
