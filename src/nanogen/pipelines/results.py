"""Typed result objects returned by workflow pipelines."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class NovelResult:
    """Filesystem outputs produced by one novel run."""

    corpus_path: Path
    markdown_path: Path
    html_path: Path
    title: str
    chapter_count: int
    word_count: int
