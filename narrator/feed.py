"""Podcast RSS feed rendering."""

from datetime import datetime
from email.utils import format_datetime
from typing import Iterable, Optional

from narrator.config import settings


def escape_xml(text: Optional[str]) -> str:
    """Escape the five XML special characters (``&`` first)."""
    if text is None:
        return ""
    return (
        str(text)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def format_duration(seconds: int) -> str:
    """Seconds as HH:MM:SS."""
    seconds = max(0, int(seconds or 0))
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_pub_date(value: Optional[datetime]) -> str:
    """RFC 2822 date; naive datetimes are taken as local time."""
    value = value or datetime.now()
    if value.tzinfo is None:
        value = value.astimezone()
    return format_datetime(value)


def _render_item(episode, podcast) -> str:
    article = episode.article
    description = f"Article: {article.title}"
    if article.author:
        description += f" par {article.author}"

    link = f"\n      <link>{escape_xml(article.url)}</link>" if article.url else ""
    return f"""
    <item>
      <title>{escape_xml(article.title)}</title>{link}
      <guid isPermaLink="false">{escape_xml(str(episode.id))}</guid>
      <pubDate>{format_pub_date(episode.completed_at)}</pubDate>
      <description>{escape_xml(description)}</description>
      <enclosure url="{escape_xml(episode.audio_url)}" length="{int(episode.file_size or 0)}" type="audio/mpeg" />
      <itunes:duration>{format_duration(episode.duration)}</itunes:duration>
      <itunes:explicit>false</itunes:explicit>
      <itunes:author>{escape_xml(article.author or podcast.podcast_author)}</itunes:author>
    </item>"""


def render_feed(podcast, episodes: Iterable, app_url: Optional[str] = None) -> str:
    """
    Render the podcast feed.

    Args:
        podcast: PodcastSettings row (title, description, author, cover)
        episodes: Completed episodes with ``article`` loaded; re-sorted by
            completion time, newest first
        app_url: Channel link (default: APP_URL)

    Returns:
        RSS 2.0 document with iTunes extensions
    """
    app_url = app_url or settings.APP_URL
    ordered = sorted(
        (e for e in episodes if e.status == "completed" and e.article is not None),
        key=lambda e: e.completed_at or datetime.min,
        reverse=True,
    )

    title = escape_xml(podcast.podcast_title)
    description = escape_xml(podcast.podcast_description)
    author = escape_xml(podcast.podcast_author)
    link = escape_xml(app_url)

    rss = f"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd" xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>{title}</title>
    <link>{link}</link>
    <description>{description}</description>
    <language>{escape_xml(settings.TTS_LANGUAGE_CODE)}</language>
    <itunes:author>{author}</itunes:author>
    <itunes:summary>{description}</itunes:summary>
    <itunes:owner>
      <itunes:name>{author}</itunes:name>
    </itunes:owner>"""

    if podcast.podcast_cover_url:
        cover = escape_xml(podcast.podcast_cover_url)
        rss += f"""
    <itunes:image href="{cover}" />
    <image>
      <url>{cover}</url>
      <title>{title}</title>
      <link>{link}</link>
    </image>"""

    rss += f"""
    <itunes:category text="{escape_xml(settings.FEED_CATEGORY)}" />
    <itunes:explicit>false</itunes:explicit>"""

    for episode in ordered:
        rss += _render_item(episode, podcast)

    rss += """
  </channel>
</rss>"""
    return rss
