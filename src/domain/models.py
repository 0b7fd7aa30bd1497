from datetime import datetime, timedelta
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

class RepositoryActivity(BaseModel):
    """
    Immutable domain model representing one repository's most recent qualifying activity.
    Built once per collection run and discarded after the message is rendered.
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Numeric repository identifier from GitHub")
    name: str = Field(..., description="Short name of the repository")
    owner: str = Field(..., description="Login name of the owning account")
    description: str = Field("", description="Repository description, empty when unset")
    last_activity_at: datetime = Field(..., description="Timestamp of the triggering event or commit")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


class ActivityWindow(BaseModel):
    """A lower time boundary: everything created at or after `since` is recent enough."""
    model_config = ConfigDict(frozen=True)

    days: int = Field(..., ge=0)
    since: datetime

    @classmethod
    def ending_at(cls, now: datetime, days: int) -> "ActivityWindow":
        return cls(days=days, since=now - timedelta(days=days))

    def contains(self, moment: datetime) -> bool:
        return moment >= self.since


class ExternalLink(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    url: str


class PublishedDocument(BaseModel):
    """Rendered Markdown plus the path it will overwrite in the tracking repository."""
    model_config = ConfigDict(frozen=True)

    path: str
    content: str


class GitRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    ref: str
    sha: str


class GitTree(BaseModel):
    model_config = ConfigDict(frozen=True)

    sha: str


class GitCommit(BaseModel):
    model_config = ConfigDict(frozen=True)

    sha: str
    tree_sha: str
    message: str = ""
    parent_shas: List[str] = Field(default_factory=list)
    author_date: Optional[datetime] = None
