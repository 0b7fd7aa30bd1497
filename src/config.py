import os
from typing import Mapping, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from src.domain.exceptions import ConfigurationError
from src.domain.models import ExternalLink
from src.infrastructure.github_client import DEFAULT_API_URL

EVENT_SOURCE = "events"
COMMIT_SOURCE = "commits"

DEFAULT_INTRO = "Currently exploring backend, devops and genai stuff."
DEFAULT_FOOTER_HEADING = "Open Source Contributions:"
DEFAULT_FOOTER_LINKS: Tuple[ExternalLink, ...] = (
    ExternalLink(
        label="glasskube",
        url="https://github.com/glasskube/glasskube/issues?q=is%3Aissue+assignee%3AMridulDhiman+is%3Aclosed",
    ),
    ExternalLink(label="blog", url="https://mridul.bearblog.dev"),
)


class TrackerSettings(BaseModel):
    """
    Immutable run configuration, read once at process start and passed to the tracker service.
    """
    model_config = ConfigDict(frozen=True)

    github_token: str = Field(..., min_length=1)
    api_url: str = DEFAULT_API_URL
    # Target defaults are resolved against the authenticated login when left unset
    target_owner: Optional[str] = None
    target_repo: Optional[str] = None
    target_branch: str = "refs/heads/main"
    file_path: str = "README.md"
    profile_username: Optional[str] = None
    activity_source: str = EVENT_SOURCE
    recent_window_days: int = Field(1, ge=0)
    extended_window_days: int = Field(30, ge=0)
    intro: str = DEFAULT_INTRO
    footer_heading: str = DEFAULT_FOOTER_HEADING
    footer_links: Tuple[ExternalLink, ...] = DEFAULT_FOOTER_LINKS

    @field_validator('activity_source')
    @classmethod
    def _known_source(cls, value: str) -> str:
        if value not in (EVENT_SOURCE, COMMIT_SOURCE):
            raise ValueError(f"must be '{EVENT_SOURCE}' or '{COMMIT_SOURCE}'")
        return value

    @field_validator('footer_links', mode="before")
    @classmethod
    def _parse_links(cls, value):
        # "label=url;label=url", split on the first "=" so query strings survive
        if not isinstance(value, str):
            return value
        links = []
        for entry in filter(None, (part.strip() for part in value.split(";"))):
            label, sep, url = entry.partition("=")
            if not sep or not label.strip() or not url.strip():
                raise ValueError(f"footer link '{entry}' must look like label=url")
            links.append(ExternalLink(label=label.strip(), url=url.strip()))
        return tuple(links)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "TrackerSettings":
        """
        Builds settings from environment variables.

        Raises:
            ConfigurationError: GITHUB_TOKEN is missing or a value does not validate.
        """
        env = os.environ if environ is None else environ

        token = env.get("GITHUB_TOKEN")
        if not token:
            raise ConfigurationError("GITHUB_TOKEN is not set in the environment.")

        mapping = {
            "api_url": "GITHUB_API_URL",
            "target_owner": "TRACKER_OWNER",
            "target_repo": "TRACKER_REPO",
            "target_branch": "TRACKER_BRANCH",
            "file_path": "TRACKER_FILE_PATH",
            "profile_username": "TRACKER_PROFILE_USERNAME",
            "activity_source": "TRACKER_SOURCE",
            "recent_window_days": "TRACKER_RECENT_DAYS",
            "extended_window_days": "TRACKER_EXTENDED_DAYS",
            "intro": "TRACKER_INTRO",
            "footer_heading": "TRACKER_FOOTER_HEADING",
            "footer_links": "TRACKER_FOOTER_LINKS",
        }
        values = {field: env[var] for field, var in mapping.items() if env.get(var)}

        try:
            return cls(github_token=token, **values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid tracker configuration: {e}") from e

    def resolve_owner(self, login: str) -> str:
        return self.target_owner or login

    def resolve_repo(self, login: str) -> str:
        # A profile README lives in the repository named after its owner
        return self.target_repo or self.resolve_owner(login)

    def resolve_profile_username(self, login: str) -> str:
        return self.profile_username or self.resolve_owner(login)
