"""JSON cache for classified corpora."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Final, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from nanogen.core.corpus import BUCKETS, Bucket, Corpus

logger = logging.getLogger(__name__)

CORPUS_SCHEMA_VERSION: Final[Literal["corpus.v1"]] = "corpus.v1"


class CorpusUnavailableError(RuntimeError):
    """Raised when a cached corpus is missing or cannot be decoded."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"corpus cache unavailable at {self.path}: {reason}")


class CorpusPayload(BaseModel):
    """On-disk corpus shape; sentence text is kept byte-for-byte."""

    model_config = ConfigDict(extra="forbid")

    schema_version: Literal["corpus.v1"] = CORPUS_SCHEMA_VERSION
    buckets: dict[Bucket, list[str]] = Field(default_factory=dict)


def dump_corpus(corpus: Corpus) -> str:
    payload = CorpusPayload(
        buckets={bucket: list(corpus.sentences(bucket)) for bucket in BUCKETS},
    )
    return json.dumps(payload.model_dump(mode="json"), ensure_ascii=False, indent=2) + "\n"


def parse_corpus(text: str) -> Corpus:
    """Decode a cached corpus; raises ``ValueError`` subclasses on bad input."""
    payload = CorpusPayload.model_validate(json.loads(text))
    return Corpus.from_mapping(payload.buckets)


def save_corpus(corpus: Corpus, path: Path | str) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(dump_corpus(corpus), encoding="utf-8")
    logger.info("corpus.save path=%s sentences=%s", target, corpus.total_sentences())
    return target


def load_corpus(path: Path | str) -> Corpus:
    source = Path(path)
    try:
        raw = source.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise CorpusUnavailableError(source, "file not found") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise CorpusUnavailableError(source, f"unreadable ({exc})") from exc
    try:
        corpus = parse_corpus(raw)
    except json.JSONDecodeError as exc:
        raise CorpusUnavailableError(source, f"invalid JSON ({exc.msg})") from exc
    except ValidationError as exc:
        raise CorpusUnavailableError(
            source, f"schema mismatch ({exc.error_count()} error(s))"
        ) from exc
    logger.info("corpus.load path=%s sentences=%s", source, corpus.total_sentences())
    return corpus
