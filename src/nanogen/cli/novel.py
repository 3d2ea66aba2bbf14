"""CLI for harvesting a corpus and generating a novel from it."""

from __future__ import annotations

import argparse
import logging

import httpx

from nanogen.adapters.json_corpus_store import CorpusUnavailableError
from nanogen.adapters.observability import configure_runtime_logging
from nanogen.core.classification import DEFAULT_BANNED_WORDS
from nanogen.core.corpus import EmptyBucketError
from nanogen.core.story_generation import (
    DEFAULT_CHAPTER_COUNT,
    DEFAULT_DIALOGUE_RATE,
    DEFAULT_MAX_SENTENCES_PER_DIALOGUE,
    DEFAULT_MAX_SENTENCES_PER_PARAGRAPH,
    DEFAULT_SOLITARY_RATE,
    DEFAULT_WORD_GOAL,
    GenerationSettings,
)
from nanogen.core.titles import TitleExtractionError
from nanogen.harvester import (
    DEFAULT_BASE_URL,
    DEFAULT_CRAWL_DELAY_SECONDS,
    DEFAULT_INDEX_URL,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)
from nanogen.novel_pipeline import (
    DEFAULT_CORPUS_PATH,
    DEFAULT_OUTPUT_DIR,
    NovelArgs,
    run_novel_pipeline,
)

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Recombine harvested sentences into a synthetic novel.",
    )
    parser.add_argument("--index-url", default=DEFAULT_INDEX_URL)
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL)
    parser.add_argument(
        "--source-path",
        action="append",
        default=[],
        help="Local .txt file or directory to use instead of crawling; repeatable.",
    )
    parser.add_argument(
        "--use-cache",
        action="store_true",
        help="Load the classified corpus from --corpus-path instead of rebuilding it.",
    )
    parser.add_argument("--corpus-path", default=DEFAULT_CORPUS_PATH)
    parser.add_argument("--crawl-delay-seconds", type=float, default=DEFAULT_CRAWL_DELAY_SECONDS)
    parser.add_argument("--max-pages", type=int, default=0)
    parser.add_argument("--timeout-seconds", type=float, default=DEFAULT_TIMEOUT_SECONDS)
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT)
    parser.add_argument("--word-goal", type=int, default=DEFAULT_WORD_GOAL)
    parser.add_argument("--chapter-count", type=int, default=DEFAULT_CHAPTER_COUNT)
    parser.add_argument("--solitary-rate", type=float, default=DEFAULT_SOLITARY_RATE)
    parser.add_argument("--dialogue-rate", type=float, default=DEFAULT_DIALOGUE_RATE)
    parser.add_argument(
        "--max-sentences-per-paragraph", type=int, default=DEFAULT_MAX_SENTENCES_PER_PARAGRAPH
    )
    parser.add_argument(
        "--max-sentences-per-dialogue", type=int, default=DEFAULT_MAX_SENTENCES_PER_DIALOGUE
    )
    parser.add_argument(
        "--banned-words",
        default="",
        help="Comma-separated substrings that exclude a sentence; empty uses the built-in list.",
    )
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--output-dir", default=DEFAULT_OUTPUT_DIR)
    parser.add_argument(
        "--log-level",
        default="",
        help="Root log level such as DEBUG or WARNING; empty defers to NANOGEN_LOG_LEVEL.",
    )
    parser.add_argument(
        "--log-path",
        default="",
        help="Rotating log file; empty defers to NANOGEN_LOG_PATH.",
    )
    return parser


def _banned_words(raw: str) -> tuple[str, ...]:
    words = tuple(part.strip() for part in raw.split(",") if part.strip())
    return words or DEFAULT_BANNED_WORDS


def _args_from_namespace(namespace: argparse.Namespace) -> NovelArgs:
    max_pages_raw = int(namespace.max_pages)
    return NovelArgs(
        index_url=str(namespace.index_url),
        base_url=str(namespace.base_url),
        source_paths=tuple(str(path) for path in namespace.source_path),
        use_cache=bool(namespace.use_cache),
        corpus_path=str(namespace.corpus_path),
        crawl_delay_seconds=max(0.0, float(namespace.crawl_delay_seconds)),
        max_pages=max_pages_raw if max_pages_raw > 0 else None,
        timeout_seconds=max(1.0, float(namespace.timeout_seconds)),
        user_agent=str(namespace.user_agent),
        banned_words=_banned_words(str(namespace.banned_words)),
        generation=GenerationSettings(
            word_goal=int(namespace.word_goal),
            chapter_count=int(namespace.chapter_count),
            solitary_rate=float(namespace.solitary_rate),
            dialogue_rate=float(namespace.dialogue_rate),
            max_sentences_per_paragraph=int(namespace.max_sentences_per_paragraph),
            max_sentences_per_dialogue=int(namespace.max_sentences_per_dialogue),
        ),
        seed=int(namespace.seed) if namespace.seed is not None else None,
        output_dir=str(namespace.output_dir),
    )


def _request_url(exc: httpx.HTTPError) -> str:
    try:
        return str(exc.request.url)
    except RuntimeError:
        return "<unknown url>"


def main(argv: list[str] | None = None) -> None:
    parser = build_arg_parser()
    parsed = parser.parse_args(argv)
    configure_runtime_logging(level=str(parsed.log_level), log_path=str(parsed.log_path))
    args = _args_from_namespace(parsed)
    try:
        args.generation.validate()
    except ValueError as exc:
        parser.error(str(exc))
    try:
        result = run_novel_pipeline(args)
    except (CorpusUnavailableError, EmptyBucketError, TitleExtractionError) as exc:
        logger.error("novel.failed error=%s", exc)
        print(f"[novel] failed: {exc}")
        raise SystemExit(1)
    except httpx.HTTPError as exc:
        url = _request_url(exc)
        logger.error("novel.fetch_failed url=%s error=%s", url, exc)
        print(f"[novel] failed: could not fetch {url}: {exc}")
        raise SystemExit(1)
    print(f"[novel] {result.title!r}: {result.chapter_count} chapters, {result.word_count} words")
    print(f"[novel] wrote {result.markdown_path} and {result.html_path}")


if __name__ == "__main__":
    main()
