import asyncio
import sys
import logging
from dotenv import load_dotenv

from src.config import TrackerSettings
from src.domain.exceptions import ConfigurationError, TrackerException
from src.infrastructure.github_client import GitHubRestClient
from src.application.tracker_service import ActivityTrackerService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger(__name__)

async def main():
    # Load environment variables from .env file
    load_dotenv()

    try:
        settings = TrackerSettings.from_env()
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)

    github_client = GitHubRestClient(token=settings.github_token, api_url=settings.api_url)
    tracker_service = ActivityTrackerService(settings=settings, github_client=github_client)

    try:
        commit = await tracker_service.run()
    except TrackerException as e:
        logger.error(f"Error tracking GitHub activity: {e}")
        return
    except Exception as e:
        logger.exception(f"An unexpected error occurred: {e}")
        return

    if commit is not None:
        logger.info(f"Tracking repository updated to {commit.sha}.")

if __name__ == "__main__":
    asyncio.run(main())
