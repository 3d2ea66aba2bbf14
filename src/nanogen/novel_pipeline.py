"""End-to-end novel run: gather sources, classify, generate, render.

Corpus sources, in order of preference:
- a cached corpus (``use_cache``), which must load or the run fails
- local text files (``source_paths``)
- a live crawl of the index page
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from pathlib import Path

from nanogen.adapters.json_corpus_store import load_corpus, save_corpus
from nanogen.core.classification import DEFAULT_BANNED_WORDS, SourceDocument, classify_documents
from nanogen.core.corpus import Corpus, EmptyBucketError
from nanogen.core.story_generation import GenerationSettings, generate
from nanogen.harvester import (
    DEFAULT_BASE_URL,
    DEFAULT_CRAWL_DELAY_SECONDS,
    DEFAULT_INDEX_URL,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    HarvestArgs,
    harvest_documents,
    load_text_documents,
)
from nanogen.pipelines.results import NovelResult
from nanogen.rendering import write_story

logger = logging.getLogger(__name__)

DEFAULT_CORPUS_PATH = "work/corpus.json"
DEFAULT_OUTPUT_DIR = "work/novel"


@dataclass(frozen=True)
class NovelArgs:
    index_url: str = DEFAULT_INDEX_URL
    base_url: str = DEFAULT_BASE_URL
    source_paths: tuple[str, ...] = ()
    use_cache: bool = False
    corpus_path: str = DEFAULT_CORPUS_PATH
    crawl_delay_seconds: float = DEFAULT_CRAWL_DELAY_SECONDS
    max_pages: int | None = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT
    banned_words: tuple[str, ...] = DEFAULT_BANNED_WORDS
    generation: GenerationSettings = field(default_factory=GenerationSettings)
    seed: int | None = None
    output_dir: str = DEFAULT_OUTPUT_DIR


def _gather_documents(args: NovelArgs) -> list[SourceDocument]:
    if args.source_paths:
        return load_text_documents(args.source_paths)
    return harvest_documents(
        HarvestArgs(
            index_url=args.index_url,
            base_url=args.base_url,
            crawl_delay_seconds=args.crawl_delay_seconds,
            max_pages=args.max_pages,
            timeout_seconds=args.timeout_seconds,
            user_agent=args.user_agent,
        )
    )


def build_corpus(args: NovelArgs) -> Corpus:
    """Load the cached corpus, or classify fresh sources and refresh the cache.

    A rebuild that leaves any bucket empty raises ``EmptyBucketError`` and
    leaves the existing cache file untouched.
    """
    if args.use_cache:
        return load_corpus(args.corpus_path)
    documents = _gather_documents(args)
    corpus = classify_documents(documents, banned_words=args.banned_words)
    empty = corpus.empty_buckets()
    if empty:
        logger.warning("corpus.keep_cache path=%s empty=%s", args.corpus_path, ",".join(empty))
        raise EmptyBucketError(empty)
    save_corpus(corpus, args.corpus_path)
    return corpus


def run_novel_pipeline(args: NovelArgs, *, rng: random.Random | None = None) -> NovelResult:
    """Generate the whole story in memory before any story file is written."""
    corpus = build_corpus(args)
    logger.info(
        "novel.corpus %s",
        " ".join(f"{bucket}={count}" for bucket, count in corpus.counts().items()),
    )
    story = generate(corpus, args.generation, rng or random.Random(args.seed))
    markdown_path, html_path = write_story(story, Path(args.output_dir))
    logger.info("novel.done markdown=%s html=%s", markdown_path, html_path)
    return NovelResult(
        corpus_path=Path(args.corpus_path),
        markdown_path=markdown_path,
        html_path=html_path,
        title=story.title,
        chapter_count=len(story.chapters),
        word_count=story.word_count(),
    )
