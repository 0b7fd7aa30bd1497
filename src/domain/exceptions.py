class TrackerException(Exception):
    """Base exception for all activity-tracker errors."""
    pass

class ConfigurationError(TrackerException):
    """Raised when required configuration is missing or invalid."""
    pass

class GitHubApiError(TrackerException):
    """Raised when the GitHub REST API answers with a non-success status."""
    def __init__(self, status: int, url: str, message: str = "GitHub API request failed."):
        self.status = status
        self.url = url
        super().__init__(f"{message} Status {status} for {url}")

class CollectionError(TrackerException):
    """Raised when a paginated listing call fails and the whole collection is aborted."""
    pass

class PublishError(TrackerException):
    """Raised when one step of the publish sequence fails."""
    def __init__(self, step: str, cause: Exception):
        self.step = step
        self.cause = cause
        super().__init__(f"failed to {step.replace('_', ' ')}: {cause}")
