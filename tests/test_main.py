import unittest
from unittest.mock import AsyncMock, patch

from src import main as entry_point
from src.config import TrackerSettings
from src.domain.exceptions import ConfigurationError, TrackerException
from src.domain.models import GitCommit


class TestMain(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        patcher = patch("src.main.load_dotenv")
        patcher.start()
        self.addCleanup(patcher.stop)

    async def test_missing_token_logs_and_exits_with_status_one(self) -> None:
        error = ConfigurationError("GITHUB_TOKEN is not set in the environment.")

        with patch("src.main.TrackerSettings.from_env", side_effect=error), \
                patch("src.main.ActivityTrackerService.run", new_callable=AsyncMock) as run:
            with self.assertLogs("src.main", level="ERROR") as logs:
                with self.assertRaises(SystemExit) as ctx:
                    await entry_point.main()

        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("GITHUB_TOKEN is not set", logs.output[0])
        run.assert_not_called()

    async def test_run_failure_is_logged_and_returns_normally(self) -> None:
        settings = TrackerSettings(github_token="t")
        error = TrackerException("failed to get user: bad credentials")

        with patch("src.main.TrackerSettings.from_env", return_value=settings), \
                patch("src.main.ActivityTrackerService.run", new_callable=AsyncMock, side_effect=error):
            with self.assertLogs("src.main", level="ERROR") as logs:
                result = await entry_point.main()

        self.assertIsNone(result)
        self.assertIn("failed to get user", logs.output[0])

    async def test_unexpected_error_is_logged_and_returns_normally(self) -> None:
        settings = TrackerSettings(github_token="t")

        with patch("src.main.TrackerSettings.from_env", return_value=settings), \
                patch("src.main.ActivityTrackerService.run", new_callable=AsyncMock, side_effect=RuntimeError("boom")):
            with self.assertLogs("src.main", level="ERROR") as logs:
                result = await entry_point.main()

        self.assertIsNone(result)
        self.assertIn("An unexpected error occurred: boom", logs.output[0])

    async def test_successful_run_logs_new_commit(self) -> None:
        settings = TrackerSettings(github_token="t")
        commit = GitCommit(sha="new-sha", tree_sha="tree-sha")

        with patch("src.main.TrackerSettings.from_env", return_value=settings), \
                patch("src.main.ActivityTrackerService.run", new_callable=AsyncMock, return_value=commit):
            with self.assertLogs("src.main", level="INFO") as logs:
                await entry_point.main()

        self.assertTrue(any("new-sha" in line for line in logs.output))
