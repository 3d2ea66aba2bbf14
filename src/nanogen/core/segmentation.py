"""Regex sentence segmentation for harvested prose.

The pattern is deliberately approximate. It does not know about abbreviations,
decimal numbers or nested quotes; downstream classification relies on its exact
boundaries, so keep changes to it covered by tests.

Text after the last possible sentence end is cut off before matching. Every
match attempt over what remains succeeds, so a long unterminated tail cannot
make the scan quadratic.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

_LINE_BREAKS = re.compile(r"\r\n|\r|\n")
_SENTENCE_PATTERN = re.compile(
    r"""
    (?=[^\s.!?])                        # opens on a visible, non-terminal character
    (?:
        [^.!?"]                         # ordinary text
      | "[^"]*"(?!\s|$)                 # quoted span glued to the following text
      | "[^"]*"(?<![.!?]")(?=\s|$)      # quoted span that does not close on a terminator
      | "(?![^"]*")                     # stray quote with no partner
      | [.!?](?!["']?(?:\s|$))          # terminator inside a word or a run of marks
    )*
    (?:
        "[^"]*[.!?]"                    # quoted span closing on a terminator
      | [.!?]["']?                      # bare terminator with optional closing quote
    )
    (?=\s|$)
    """,
    re.VERBOSE,
)
_SENTENCE_END = re.compile(r"[.!?][\"']?(?=\s|$)")


def segment(text: str) -> list[str]:
    """Split one block of raw text into sentences.

    A block without any terminator yields an empty list.
    """
    flattened = _LINE_BREAKS.sub(" ", text)
    cut = 0
    for boundary in _SENTENCE_END.finditer(flattened):
        cut = boundary.end()
    return [match.group(0) for match in _SENTENCE_PATTERN.finditer(flattened[:cut])]


def segment_paragraphs(paragraphs: Iterable[str]) -> list[list[str]]:
    """Segment each paragraph, dropping paragraphs with no sentence content."""
    segmented: list[list[str]] = []
    for paragraph in paragraphs:
        sentences = segment(paragraph)
        if sentences:
            segmented.append(sentences)
    return segmented
