"""Article content extraction using trafilatura."""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx
import trafilatura
from trafilatura.settings import use_config

from narrator.exceptions import ValidationError
from narrator.url_validator import validate_url

logger = logging.getLogger(__name__)

# Bound the time trafilatura may spend on one page
TRAFILATURA_CONFIG = use_config()
TRAFILATURA_CONFIG.set("DEFAULT", "EXTRACTION_TIMEOUT", "30")

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


@dataclass
class ExtractedContent:
    """Main content of a web article."""
    title: str
    content: str
    author: Optional[str]
    url: str


def parse_html(html: str, url: str) -> ExtractedContent:
    """Extract main text and metadata from a downloaded page.

    Raises:
        ValidationError: page has no extractable main content
    """
    extracted = trafilatura.extract(
        html,
        include_comments=False,
        include_tables=False,
        favor_precision=True,
        config=TRAFILATURA_CONFIG,
    )
    if not extracted or not extracted.strip():
        raise ValidationError(
            "Content extraction failed", details="Failed to parse article content"
        )

    metadata = trafilatura.extract_metadata(html)
    title = (metadata.title if metadata else None) or "Untitled Article"
    author = metadata.author if metadata else None

    return ExtractedContent(title=title, content=extracted, author=author, url=url)


async def extract(url: str, client: Optional[httpx.AsyncClient] = None) -> ExtractedContent:
    """
    Fetch a page and extract its article content.

    Args:
        url: Public http(s) URL
        client: Optional client (a short-lived one is created otherwise)

    Raises:
        ValidationError: invalid/internal URL, failed fetch or no main content
    """
    try:
        validate_url(url)
    except ValueError as e:
        raise ValidationError("Invalid URL", details=str(e)) from e

    try:
        if client is not None:
            response = await _fetch(client, url)
        else:
            async with httpx.AsyncClient(timeout=30.0) as own_client:
                response = await _fetch(own_client, url)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch {url}: {e}")
        raise ValidationError("Content extraction failed", details=f"Failed to fetch article: {e}") from e

    return parse_html(response.text, url)


async def _fetch(client: httpx.AsyncClient, url: str) -> httpx.Response:
    return await client.get(
        url,
        headers={
            "User-Agent": USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        },
        follow_redirects=True,
    )
