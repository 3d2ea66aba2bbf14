"""Title extraction from quoted dialogue."""

from __future__ import annotations

import random
import re
from typing import Final

from nanogen.core.corpus import Corpus

DEFAULT_TITLE_ATTEMPTS: Final = 1000

_QUOTED_SPAN = re.compile(r'"(?P<span>[^"]*)"')
_TITLE_STRIP = re.compile(r'[,."]')


class TitleExtractionError(RuntimeError):
    """Raised when no usable quoted span turns up within the retry budget."""

    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(
            f"no dialogue sentence yielded a non-empty quoted span after {attempts} attempts"
        )


def title_from_sentence(sentence: str) -> str | None:
    """Return the cleaned first quoted span of a sentence, or None when unusable."""
    match = _QUOTED_SPAN.search(sentence)
    if match is None:
        return None
    title = _TITLE_STRIP.sub("", match.group("span")).strip()
    return title or None


def extract_title(
    corpus: Corpus,
    rng: random.Random,
    *,
    max_attempts: int = DEFAULT_TITLE_ATTEMPTS,
) -> str:
    """Sample dialogue until a sentence with a quoted span produces a title."""
    if max_attempts < 1:
        raise ValueError("max_attempts must be positive.")
    corpus.require_populated(("dialogue",))
    for _ in range(max_attempts):
        title = title_from_sentence(corpus.sample("dialogue", rng))
        if title is not None:
            return title
    raise TitleExtractionError(max_attempts)
