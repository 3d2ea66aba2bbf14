"""Source collaborators: fan-fiction web crawl and local text files.

Everything here returns ``SourceDocument`` values: one per chapter page or
file, each an ordered tuple of raw paragraph strings for the classifier.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup
from bs4.element import Tag

from nanogen.core.classification import SourceDocument

logger = logging.getLogger(__name__)

DEFAULT_INDEX_URL = "https://www.fanfiction.net/tv/Doctor-Who/"
DEFAULT_BASE_URL = "https://www.fanfiction.net"
DEFAULT_USER_AGENT = "nanogen_harvester/0.1 (respectful crawler; personal research use)"
DEFAULT_CRAWL_DELAY_SECONDS = 1.1
DEFAULT_TIMEOUT_SECONDS = 30.0

STORY_LINK_SELECTOR = "a.stitle"
CHAPTER_OPTION_SELECTOR = "select#chap_select option"
STORY_TEXT_SELECTOR = "#storytext p"

_FIRST_CHAPTER_SEGMENT = re.compile(r"/1/")
_BLANK_LINES = re.compile(r"\n\s*\n")


@dataclass(frozen=True)
class HarvestArgs:
    index_url: str
    base_url: str
    crawl_delay_seconds: float
    max_pages: int | None
    timeout_seconds: float
    user_agent: str


def parse_story_links(html: str, base_url: str) -> list[str]:
    """Chapter-one URLs for every story linked from an index page."""
    soup = BeautifulSoup(html, "html.parser")
    urls: list[str] = []
    for anchor in soup.select(STORY_LINK_SELECTOR):
        href = anchor.get("href")
        if not isinstance(href, str) or not href.strip():
            continue
        url = urljoin(base_url, href.strip())
        if url not in urls:
            urls.append(url)
    return urls


def parse_chapter_urls(html: str, chapter_one_url: str) -> list[str]:
    """Sibling chapter URLs from the chapter selector on a chapter-one page."""
    soup = BeautifulSoup(html, "html.parser")
    urls: list[str] = []
    for option in soup.select(CHAPTER_OPTION_SELECTOR):
        value = option.get("value")
        if not isinstance(value, str) or not value.strip():
            continue
        url = _FIRST_CHAPTER_SEGMENT.sub(f"/{value.strip()}/", chapter_one_url, count=1)
        if url not in urls:
            urls.append(url)
    return urls


def parse_paragraphs(html: str) -> tuple[str, ...]:
    """Raw paragraph text of a chapter page, story body first."""
    soup = BeautifulSoup(html, "html.parser")
    nodes = soup.select(STORY_TEXT_SELECTOR) or soup.find_all("p")
    paragraphs: list[str] = []
    for node in nodes:
        if not isinstance(node, Tag):
            continue
        text = node.get_text("\n", strip=False).replace("\r\n", "\n").strip()
        if text:
            paragraphs.append(text)
    return tuple(paragraphs)


class _PoliteFetcher:
    """Sequential GETs with a pause between consecutive requests."""

    def __init__(self, client: httpx.Client, delay_seconds: float) -> None:
        self._client = client
        self._delay_seconds = delay_seconds
        self._fetched = 0

    def get_text(self, url: str) -> str:
        if self._fetched > 0 and self._delay_seconds > 0:
            time.sleep(self._delay_seconds)
        self._fetched += 1
        response = self._client.get(url)
        response.raise_for_status()
        return response.text


def collect_page_urls(
    fetcher: _PoliteFetcher, args: HarvestArgs
) -> tuple[list[str], dict[str, str]]:
    """Every chapter page reachable from the index, plus already-fetched HTML."""
    index_html = fetcher.get_text(args.index_url)
    story_urls = parse_story_links(index_html, args.base_url)
    logger.info("harvest.index url=%s stories=%s", args.index_url, len(story_urls))

    page_urls: list[str] = []
    fetched_html: dict[str, str] = {}
    for chapter_one_url in story_urls:
        if args.max_pages is not None and len(page_urls) >= args.max_pages:
            break
        try:
            html = fetcher.get_text(chapter_one_url)
        except httpx.HTTPError as exc:
            logger.warning("harvest.skip url=%s error=%s", chapter_one_url, exc)
            continue
        page_urls.append(chapter_one_url)
        fetched_html[chapter_one_url] = html
        for url in parse_chapter_urls(html, chapter_one_url):
            if url not in page_urls:
                page_urls.append(url)

    if args.max_pages is not None:
        page_urls = page_urls[: args.max_pages]
    logger.info("harvest.pages count=%s", len(page_urls))
    return page_urls, fetched_html


def harvest_documents(args: HarvestArgs) -> list[SourceDocument]:
    """Crawl the index and return one document per chapter page that loaded."""
    headers = {"User-Agent": args.user_agent}
    documents: list[SourceDocument] = []
    with httpx.Client(
        headers=headers, timeout=args.timeout_seconds, follow_redirects=True
    ) as client:
        fetcher = _PoliteFetcher(client, args.crawl_delay_seconds)
        page_urls, fetched_html = collect_page_urls(fetcher, args)
        for index, url in enumerate(page_urls, start=1):
            html = fetched_html.get(url)
            if html is None:
                try:
                    html = fetcher.get_text(url)
                except httpx.HTTPError as exc:
                    logger.warning("harvest.skip url=%s error=%s", url, exc)
                    continue
            paragraphs = parse_paragraphs(html)
            documents.append(SourceDocument(source=url, paragraphs=paragraphs))
            logger.info(
                "harvest.page %s/%s url=%s paragraphs=%s",
                index,
                len(page_urls),
                url,
                len(paragraphs),
            )
    return documents


def split_paragraphs(text: str) -> tuple[str, ...]:
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    return tuple(part.strip() for part in _BLANK_LINES.split(normalized) if part.strip())


def _expand_text_paths(paths: Iterable[Path | str]) -> list[Path]:
    expanded: list[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            expanded.extend(sorted(path.glob("*.txt")))
        else:
            expanded.append(path)
    return expanded


def load_text_documents(paths: Iterable[Path | str]) -> list[SourceDocument]:
    """One document per UTF-8 text file; directories contribute their ``*.txt``.

    Files that cannot be read as UTF-8 text are logged and skipped.
    """
    documents: list[SourceDocument] = []
    for path in _expand_text_paths(paths):
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("source.skip path=%s error=%s", path, exc)
            continue
        documents.append(SourceDocument(source=str(path), paragraphs=split_paragraphs(text)))
        logger.info("source.file path=%s", path)
    return documents
