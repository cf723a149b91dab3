"""Tests for the database-backed episode store."""

import unittest
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, patch
from uuid import uuid4

from sqlalchemy.exc import OperationalError

from narrator.db.store import DatabaseEpisodeStore
from narrator.exceptions import NotFoundError, PersistenceError


class TestDatabaseEpisodeStore(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.session = AsyncMock()

        @asynccontextmanager
        async def session_factory():
            yield self.session

        self.store = DatabaseEpisodeStore(session_factory=session_factory)
        self.episode_id = uuid4()

        patcher = patch("narrator.db.store.EpisodeRepository")
        self.repo_cls = patcher.start()
        self.addCleanup(patcher.stop)
        self.repo = self.repo_cls.return_value
        self.repo.update_status = AsyncMock(return_value=object())

    async def test_mark_completed_commits(self):
        await self.store.mark_completed(
            self.episode_id,
            audio_url="https://cdn.example.com/episode-1.mp3",
            duration=10,
            file_size=160000,
            tts_provider="google",
        )
        self.repo.update_status.assert_awaited_once_with(
            self.episode_id,
            "completed",
            audio_url="https://cdn.example.com/episode-1.mp3",
            duration=10,
            file_size=160000,
            tts_provider="google",
        )
        self.session.commit.assert_awaited_once()

    async def test_mark_failed_records_error(self):
        await self.store.mark_failed(self.episode_id, "Google TTS API error: quota")
        self.repo.update_status.assert_awaited_once_with(
            self.episode_id, "failed", error="Google TTS API error: quota"
        )

    async def test_missing_episode(self):
        self.repo.update_status.return_value = None
        with self.assertRaises(NotFoundError):
            await self.store.mark_processing(self.episode_id)
        self.session.commit.assert_not_awaited()

    async def test_database_error_is_wrapped(self):
        self.session.commit.side_effect = OperationalError("UPDATE", {}, Exception("gone"))
        with self.assertRaises(PersistenceError) as ctx:
            await self.store.mark_processing(self.episode_id)
        self.assertEqual(ctx.exception.message, "Failed to update episode")


if __name__ == "__main__":
    unittest.main()
