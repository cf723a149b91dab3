"""Tests for adding, editing and deleting articles."""

import unittest
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from narrator.exceptions import NotEditableError, NotFoundError, ValidationError
from narrator.services.articles import (
    add_text_article,
    add_url_article,
    check_content_length,
    delete_article,
    update_article,
)
from narrator.web_scraper import ExtractedContent
from tests.fakes import ArticleRecord, EpisodeRecord, FakeStorage


def make_repos():
    article_repo = AsyncMock()
    episode_repo = AsyncMock()
    settings_repo = AsyncMock()

    article_repo.get_by_url.return_value = None
    article_repo.create.side_effect = lambda **fields: ArticleRecord(**fields)
    settings_repo.get_or_create_default.return_value = MagicMock(default_tts_provider="elevenlabs")
    return article_repo, episode_repo, settings_repo


class TestContentLength(unittest.TestCase):
    def test_limit_is_inclusive(self):
        check_content_length("a" * 50000)
        with self.assertRaises(ValidationError) as ctx:
            check_content_length("a" * 50001)
        self.assertEqual(ctx.exception.message, "Article too long")
        self.assertEqual(ctx.exception.details, "Maximum 50,000 characters allowed")

    def test_counts_characters_not_bytes(self):
        check_content_length("é" * 50000)


class TestAddTextArticle(unittest.IsolatedAsyncioTestCase):
    async def test_creates_editable_article_with_pending_episode(self):
        article_repo, episode_repo, settings_repo = make_repos()

        article = await add_text_article(
            article_repo, episode_repo, settings_repo,
            title="  Mon titre ", content=" Du texte. ", author="  ",
        )

        self.assertEqual(article.title, "Mon titre")
        self.assertEqual(article.content, "Du texte.")
        self.assertIsNone(article.author)
        self.assertIsNone(article.url)
        self.assertEqual(article.source_type, "text")
        self.assertTrue(article.is_editable)
        episode_repo.create.assert_awaited_once_with(
            article_id=article.id,
            audio_url="",
            status="pending",
            tts_provider="elevenlabs",
        )

    async def test_accepts_content_at_limit(self):
        repos = make_repos()
        article = await add_text_article(*repos, title="T", content="a" * 50000)
        self.assertEqual(len(article.content), 50000)

    async def test_rejects_content_over_limit(self):
        article_repo, episode_repo, settings_repo = make_repos()
        with self.assertRaises(ValidationError) as ctx:
            await add_text_article(
                article_repo, episode_repo, settings_repo, title="T", content="a" * 50001
            )
        self.assertEqual(ctx.exception.status_code, 400)
        article_repo.create.assert_not_awaited()
        episode_repo.create.assert_not_awaited()

    async def test_requires_title_and_content(self):
        repos = make_repos()
        with self.assertRaises(ValidationError):
            await add_text_article(*repos, title=" ", content="Texte")
        with self.assertRaises(ValidationError):
            await add_text_article(*repos, title="Titre", content="")


class TestAddUrlArticle(unittest.IsolatedAsyncioTestCase):
    async def test_extracts_and_creates(self):
        repos = make_repos()
        extractor = AsyncMock(
            return_value=ExtractedContent(
                title="Titre", content="Contenu.", author="Auteur", url="https://ex.com/a"
            )
        )

        article, created = await add_url_article(*repos, url=" https://ex.com/a ", extractor=extractor)

        self.assertTrue(created)
        extractor.assert_awaited_once_with("https://ex.com/a")
        self.assertEqual(article.url, "https://ex.com/a")
        self.assertEqual(article.author, "Auteur")
        self.assertEqual(article.source_type, "url")
        self.assertFalse(article.is_editable)
        repos[1].create.assert_awaited_once()

    async def test_existing_url_is_returned(self):
        article_repo, episode_repo, settings_repo = make_repos()
        existing = ArticleRecord(title="Déjà là", content="...", url="https://ex.com/a")
        article_repo.get_by_url.return_value = existing
        extractor = AsyncMock()

        article, created = await add_url_article(
            article_repo, episode_repo, settings_repo, url="https://ex.com/a", extractor=extractor
        )

        self.assertIs(article, existing)
        self.assertFalse(created)
        extractor.assert_not_awaited()
        article_repo.create.assert_not_awaited()

    async def test_rejects_non_http_url(self):
        repos = make_repos()
        for url in ["", "ftp://ex.com/file", "not a url"]:
            with self.subTest(url=url):
                with self.assertRaises(ValidationError):
                    await add_url_article(*repos, url=url, extractor=AsyncMock())

    async def test_rejects_extracted_content_over_limit(self):
        repos = make_repos()
        extractor = AsyncMock(
            return_value=ExtractedContent(
                title="T", content="a" * 50001, author=None, url="https://ex.com/a"
            )
        )
        with self.assertRaises(ValidationError):
            await add_url_article(*repos, url="https://ex.com/a", extractor=extractor)
        repos[0].create.assert_not_awaited()


class TestUpdateArticle(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.article = ArticleRecord(
            title="Titre", content="Texte.", author="Moi", source_type="text", is_editable=True
        )
        self.repo = AsyncMock()
        self.repo.get_by_id.return_value = self.article
        self.repo.update.return_value = self.article

    async def test_updates_given_fields(self):
        await update_article(self.repo, self.article.id, title=" Nouveau ", content="Autre.")
        self.repo.update.assert_awaited_once_with(
            self.article.id, title="Nouveau", content="Autre."
        )

    async def test_blank_fields_are_ignored(self):
        await update_article(self.repo, self.article.id, title=" ", content="Autre.")
        self.repo.update.assert_awaited_once_with(self.article.id, content="Autre.")

    async def test_author_can_be_cleared(self):
        await update_article(self.repo, self.article.id, author=None)
        self.repo.update.assert_awaited_once_with(self.article.id, author=None)

    async def test_nothing_to_update(self):
        with self.assertRaises(ValidationError):
            await update_article(self.repo, self.article.id, title="", content=" ")

    async def test_content_limit(self):
        await update_article(self.repo, self.article.id, content="a" * 50000)
        with self.assertRaises(ValidationError):
            await update_article(self.repo, self.article.id, content="a" * 50001)

    async def test_url_article_is_not_editable(self):
        self.article.is_editable = False
        with self.assertRaises(NotEditableError) as ctx:
            await update_article(self.repo, self.article.id, title="Nouveau")
        self.assertEqual(ctx.exception.status_code, 403)
        self.repo.update.assert_not_awaited()

    async def test_missing_article(self):
        self.repo.get_by_id.return_value = None
        with self.assertRaises(NotFoundError):
            await update_article(self.repo, uuid4(), title="Nouveau")


class TestDeleteArticle(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.article = ArticleRecord(title="Titre", content="Texte.")
        self.episode = EpisodeRecord(
            article_id=self.article.id,
            audio_url="https://cdn.example.com/episode-abc.mp3",
            status="completed",
        )
        self.article_repo = AsyncMock()
        self.article_repo.get_by_id.return_value = self.article
        self.episode_repo = AsyncMock()
        self.episode_repo.get_by_article.return_value = self.episode

    async def test_deletes_audio_then_article(self):
        storage = FakeStorage()
        await delete_article(self.article_repo, self.episode_repo, self.article.id, storage)
        self.assertEqual(storage.deleted, ["episode-abc.mp3"])
        self.article_repo.delete.assert_awaited_once_with(self.article.id)

    async def test_storage_failure_does_not_block_deletion(self):
        storage = FakeStorage(fail_delete=True)
        with self.assertLogs("narrator.services.articles", level="ERROR"):
            await delete_article(self.article_repo, self.episode_repo, self.article.id, storage)
        self.article_repo.delete.assert_awaited_once_with(self.article.id)

    async def test_no_audio_skips_storage(self):
        self.episode.audio_url = ""
        storage = FakeStorage(fail_delete=True)
        await delete_article(self.article_repo, self.episode_repo, self.article.id, storage)
        self.article_repo.delete.assert_awaited_once_with(self.article.id)

    async def test_missing_article(self):
        self.article_repo.get_by_id.return_value = None
        with self.assertRaises(NotFoundError):
            await delete_article(self.article_repo, self.episode_repo, uuid4(), FakeStorage())
        self.article_repo.delete.assert_not_awaited()


if __name__ == "__main__":
    unittest.main()
