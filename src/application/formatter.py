from typing import List, Optional, Sequence

from src.domain.models import ExternalLink, RepositoryActivity

GITHUB_HOST = "https://github.com"
RECENT_HEADING = "Repos I'm currently working on:"
EXTENDED_HEADING = "Actively Committed Repos (since last month):"


class MessageFormatter:
    """
    Renders activity records into the Markdown document published to the tracking repository.
    Pure: no I/O, and the same ordered input always yields the same string.
    """

    def __init__(
        self,
        profile_username: str,
        intro: str,
        footer_heading: str,
        footer_links: Sequence[ExternalLink],
        host: str = GITHUB_HOST,
    ):
        self.profile_username = profile_username
        self.intro = intro
        self.footer_heading = footer_heading
        self.footer_links = tuple(footer_links)
        self.host = host.rstrip("/")

    def repository_url(self, activity: RepositoryActivity) -> str:
        owner = activity.owner
        if owner.lower() == self.profile_username.lower():
            owner = self.profile_username
        return f"{self.host}/{owner}/{activity.name}"

    def _section(self, heading: str, activities: Sequence[RepositoryActivity]) -> List[str]:
        lines = [heading, ""]
        lines.extend(
            f"- [{activity.name}]({self.repository_url(activity)}): {activity.description}"
            for activity in activities
        )
        return lines

    def format(
        self,
        primary: Sequence[RepositoryActivity],
        extended: Optional[Sequence[RepositoryActivity]] = None,
    ) -> str:
        """
        Builds the document.

        Args:
            primary (Sequence[RepositoryActivity]): Records for the recent window, in collection order.
            extended (Optional[Sequence[RepositoryActivity]]): Records for the extended window.
                The second section is only rendered when this is given.

        Returns:
            str: The Markdown document, newline-terminated.
        """
        lines = [self.intro, ""]
        lines.extend(self._section(RECENT_HEADING, primary))

        if extended is not None:
            lines.append("")
            lines.extend(self._section(EXTENDED_HEADING, extended))

        if self.footer_links:
            lines.append("")
            lines.append(self.footer_heading)
            lines.append("")
            lines.extend(f"- [{link.label}]({link.url})" for link in self.footer_links)

        return "\n".join(lines) + "\n"
