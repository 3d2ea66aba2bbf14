"""Positional sentence classification into corpus buckets."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Final

from nanogen.core.corpus import BUCKETS, Bucket, Corpus
from nanogen.core.segmentation import segment_paragraphs

logger = logging.getLogger(__name__)

QUOTE_MARK: Final = '"'

# Cruft that survives paragraph extraction on fan-fiction pages.
DEFAULT_BANNED_WORDS: Final[tuple[str, ...]] = (
    "A/N",
    "Author's Note",
    "Author's note",
    "Disclaimer:",
    "DISCLAIMER",
    "CHAPTER",
    "Please review",
    "please review",
    "Read and review",
    "read and review",
    "R&R",
    "REVIEW",
)


@dataclass(frozen=True)
class SourceDocument:
    """One harvested document as an ordered list of raw paragraph strings."""

    source: str
    paragraphs: tuple[str, ...]


def is_banned(sentence: str, banned_words: Iterable[str]) -> bool:
    return any(word in sentence for word in banned_words)


def classify_sentence(
    sentence: str,
    *,
    paragraph_index: int,
    sentence_index: int,
    paragraph_count: int,
    paragraph_length: int,
) -> Bucket:
    """Resolve the bucket for one sentence; the first matching rule wins."""
    if paragraph_index == 0 and sentence_index == 0:
        return "start_chapter"
    if paragraph_index == paragraph_count - 1 and sentence_index == paragraph_length - 1:
        return "end_chapter"
    if QUOTE_MARK in sentence:
        return "dialogue"
    if paragraph_length == 1:
        return "solitary"
    if sentence_index == 0:
        return "start_paragraph"
    if sentence_index == paragraph_length - 1:
        return "end_paragraph"
    return "mid_paragraph"


def classify(
    paragraphs: Sequence[Sequence[str]],
    *,
    banned_words: Iterable[str] = (),
) -> Corpus:
    """Classify every sentence of one document.

    Positions are taken from the input as given: a banned sentence is dropped
    without promoting its neighbours into its position.
    """
    banned = tuple(banned_words)
    collected: dict[Bucket, list[str]] = {bucket: [] for bucket in BUCKETS}
    paragraph_count = len(paragraphs)
    for paragraph_index, sentences in enumerate(paragraphs):
        paragraph_length = len(sentences)
        for sentence_index, sentence in enumerate(sentences):
            if is_banned(sentence, banned):
                continue
            bucket = classify_sentence(
                sentence,
                paragraph_index=paragraph_index,
                sentence_index=sentence_index,
                paragraph_count=paragraph_count,
                paragraph_length=paragraph_length,
            )
            collected[bucket].append(sentence)
    return Corpus.from_mapping(collected)


def classify_documents(
    documents: Iterable[SourceDocument],
    *,
    banned_words: Iterable[str] = DEFAULT_BANNED_WORDS,
) -> Corpus:
    """Segment and classify each document, merging results in document order."""
    banned = tuple(banned_words)
    corpus = Corpus()
    document_count = 0
    for document in documents:
        paragraphs = segment_paragraphs(document.paragraphs)
        if not paragraphs:
            logger.info("classify.skip source=%s reason=no_sentences", document.source)
            continue
        corpus = corpus.merged(classify(paragraphs, banned_words=banned))
        document_count += 1
    logger.info(
        "classify.done documents=%s sentences=%s",
        document_count,
        corpus.total_sentences(),
    )
    return corpus
