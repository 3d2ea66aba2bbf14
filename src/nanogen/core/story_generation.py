"""Stochastic story assembly from a classified corpus."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Final, Literal

from nanogen.core.corpus import Corpus
from nanogen.core.titles import DEFAULT_TITLE_ATTEMPTS, extract_title

logger = logging.getLogger(__name__)

BlockKind = Literal["chapter_opening", "solitary", "dialogue", "paragraph", "chapter_closing"]
SectionKind = Literal["solitary", "dialogue", "paragraph"]

THE_END: Final = "The End"
DEFAULT_WORD_GOAL: Final = 50000
DEFAULT_CHAPTER_COUNT: Final = 10
DEFAULT_SOLITARY_RATE: Final = 0.1
DEFAULT_DIALOGUE_RATE: Final = 0.3
DEFAULT_MAX_SENTENCES_PER_PARAGRAPH: Final = 6
DEFAULT_MAX_SENTENCES_PER_DIALOGUE: Final = 4


@dataclass(frozen=True)
class GenerationSettings:
    """Knobs for one generation run."""

    word_goal: int = DEFAULT_WORD_GOAL
    chapter_count: int = DEFAULT_CHAPTER_COUNT
    solitary_rate: float = DEFAULT_SOLITARY_RATE
    dialogue_rate: float = DEFAULT_DIALOGUE_RATE
    max_sentences_per_paragraph: int = DEFAULT_MAX_SENTENCES_PER_PARAGRAPH
    max_sentences_per_dialogue: int = DEFAULT_MAX_SENTENCES_PER_DIALOGUE
    max_title_attempts: int = DEFAULT_TITLE_ATTEMPTS

    def validate(self) -> None:
        if self.chapter_count < 1:
            raise ValueError("chapter_count must be at least 1.")
        if self.word_goal < self.chapter_count:
            raise ValueError("word_goal must be at least chapter_count.")
        if self.solitary_rate < 0 or self.dialogue_rate < 0:
            raise ValueError("solitary_rate and dialogue_rate must be non-negative.")
        if self.max_sentences_per_paragraph < 2:
            raise ValueError("max_sentences_per_paragraph must be at least 2.")
        if self.max_sentences_per_dialogue < 0:
            raise ValueError("max_sentences_per_dialogue must be non-negative.")

    @property
    def chapter_target_words(self) -> int:
        return self.word_goal // self.chapter_count


@dataclass(frozen=True)
class StoryBlock:
    """One rendered unit of chapter content."""

    kind: BlockKind
    sentences: tuple[str, ...]

    @property
    def text(self) -> str:
        return " ".join(self.sentences)

    def word_count(self) -> int:
        return len(self.text.split())


@dataclass(frozen=True)
class StoryChapter:
    number: int
    title: str
    blocks: tuple[StoryBlock, ...]

    def word_count(self) -> int:
        return sum(block.word_count() for block in self.blocks)


@dataclass(frozen=True)
class Story:
    """Generated story tree: chapters, then blocks, then sentence strings."""

    title: str
    chapters: tuple[StoryChapter, ...]
    closing: str = THE_END

    def word_count(self) -> int:
        return sum(chapter.word_count() for chapter in self.chapters)


def choose_section(settings: GenerationSettings, rng: random.Random) -> SectionKind:
    """Roll for the next section kind; plain paragraphs carry a weight of 1."""
    total = 1 + settings.solitary_rate + settings.dialogue_rate
    roll = rng.random() * total
    if roll < settings.solitary_rate:
        return "solitary"
    if roll < settings.solitary_rate + settings.dialogue_rate:
        return "dialogue"
    return "paragraph"


def _section_blocks(
    kind: SectionKind,
    corpus: Corpus,
    settings: GenerationSettings,
    rng: random.Random,
) -> list[StoryBlock]:
    if kind == "solitary":
        return [StoryBlock(kind="solitary", sentences=(corpus.sample("solitary", rng),))]
    if kind == "dialogue":
        # A zero draw still yields one line.
        lines = max(1, rng.randint(0, settings.max_sentences_per_dialogue))
        return [
            StoryBlock(kind="dialogue", sentences=(corpus.sample("dialogue", rng),))
            for _ in range(lines)
        ]
    count = rng.randint(2, settings.max_sentences_per_paragraph)
    sentences = [corpus.sample("start_paragraph", rng)]
    sentences.extend(corpus.sample("mid_paragraph", rng) for _ in range(count - 2))
    sentences.append(corpus.sample("end_paragraph", rng))
    return [StoryBlock(kind="paragraph", sentences=tuple(sentences))]


def generate(
    corpus: Corpus,
    settings: GenerationSettings,
    rng: random.Random,
) -> Story:
    """Assemble a story chapter by chapter until the word goal is met.

    Chapter ``c`` keeps adding sections while the running word count of the
    whole story is below ``chapter_target_words * c``. The last chapter runs
    to ``word_goal`` itself, so integer division never leaves the story short.
    The running count covers block text only, not titles.
    """
    settings.validate()
    corpus.require_populated()
    logger.info(
        "generation.start word_goal=%s chapters=%s corpus_sentences=%s",
        settings.word_goal,
        settings.chapter_count,
        corpus.total_sentences(),
    )

    story_title = extract_title(corpus, rng, max_attempts=settings.max_title_attempts)
    chapters: list[StoryChapter] = []
    words_so_far = 0
    for number in range(1, settings.chapter_count + 1):
        chapter_title = extract_title(corpus, rng, max_attempts=settings.max_title_attempts)
        if number == settings.chapter_count:
            threshold = settings.word_goal
        else:
            threshold = settings.chapter_target_words * number

        opening = StoryBlock(
            kind="chapter_opening", sentences=(corpus.sample("start_chapter", rng),)
        )
        blocks = [opening]
        words_so_far += opening.word_count()
        while words_so_far < threshold:
            kind = choose_section(settings, rng)
            for block in _section_blocks(kind, corpus, settings, rng):
                blocks.append(block)
                words_so_far += block.word_count()

        closing = StoryBlock(kind="chapter_closing", sentences=(corpus.sample("end_chapter", rng),))
        blocks.append(closing)
        words_so_far += closing.word_count()
        chapters.append(StoryChapter(number=number, title=chapter_title, blocks=tuple(blocks)))
        logger.debug(
            "generation.chapter number=%s blocks=%s words_so_far=%s",
            number,
            len(blocks),
            words_so_far,
        )

    story = Story(title=story_title, chapters=tuple(chapters))
    logger.info(
        "generation.done title=%r chapters=%s words=%s",
        story.title,
        len(story.chapters),
        words_so_far,
    )
    return story
