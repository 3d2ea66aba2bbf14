from __future__ import annotations

import random
from typing import cast

import pytest

from nanogen.core.corpus import BUCKETS, Corpus, EmptyBucketError
from nanogen.core.story_generation import (
    THE_END,
    GenerationSettings,
    choose_section,
    generate,
)


def _corpus() -> Corpus:
    return Corpus.from_mapping(
        {
            "start_chapter": ["The ship woke slowly.", "Morning came to the valley."],
            "end_chapter": ["Nothing was the same after that.", "The lights went out."],
            "solitary": ["Silence.", "She waited."],
            "dialogue": [
                '"Where are we?" asked the Doctor.',
                '"Run, now," she said.',
                '"I know," he replied.',
            ],
            "start_paragraph": ["The corridor stretched on.", "Rose looked up."],
            "mid_paragraph": ["Something hummed below.", "The air tasted of metal."],
            "end_paragraph": ["Then it stopped.", "They moved on."],
        }
    )


def _words(story_text: list[str]) -> int:
    return sum(len(text.split()) for text in story_text)


def test_generate_meets_word_goal_with_exact_chapter_count() -> None:
    settings = GenerationSettings(word_goal=1000, chapter_count=10)
    story = generate(_corpus(), settings, random.Random(42))

    assert len(story.chapters) == 10
    assert [chapter.number for chapter in story.chapters] == list(range(1, 11))
    block_text = [block.text for chapter in story.chapters for block in chapter.blocks]
    assert _words(block_text) >= 1000
    assert story.word_count() == _words(block_text)
    assert story.closing == THE_END


def test_generate_reaches_goal_when_goal_does_not_divide_evenly() -> None:
    settings = GenerationSettings(word_goal=1009, chapter_count=10)
    story = generate(_corpus(), settings, random.Random(5))
    assert story.word_count() >= 1009


def test_chapters_open_and_close_from_boundary_buckets() -> None:
    corpus = _corpus()
    story = generate(corpus, GenerationSettings(word_goal=300, chapter_count=3), random.Random(1))
    for chapter in story.chapters:
        assert chapter.blocks[0].kind == "chapter_opening"
        assert chapter.blocks[0].text in corpus.sentences("start_chapter")
        assert chapter.blocks[-1].kind == "chapter_closing"
        assert chapter.blocks[-1].text in corpus.sentences("end_chapter")
        assert chapter.title
        assert not set(chapter.title) & {",", ".", '"'}
    assert story.title in {"Where are we?", "Run now", "I know"}


def test_paragraph_blocks_follow_start_mid_end_shape() -> None:
    corpus = _corpus()
    settings = GenerationSettings(
        word_goal=400,
        chapter_count=2,
        solitary_rate=0.0,
        dialogue_rate=0.0,
        max_sentences_per_paragraph=5,
    )
    story = generate(corpus, settings, random.Random(9))
    inner = [block for chapter in story.chapters for block in chapter.blocks[1:-1]]
    assert inner
    for block in inner:
        assert block.kind == "paragraph"
        assert 2 <= len(block.sentences) <= 5
        assert block.sentences[0] in corpus.sentences("start_paragraph")
        assert block.sentences[-1] in corpus.sentences("end_paragraph")
        for sentence in block.sentences[1:-1]:
            assert sentence in corpus.sentences("mid_paragraph")
        assert block.text == " ".join(block.sentences)


def test_zero_length_dialogue_draw_still_emits_one_line() -> None:
    settings = GenerationSettings(
        word_goal=200,
        chapter_count=1,
        solitary_rate=0.0,
        dialogue_rate=1000.0,
        max_sentences_per_dialogue=0,
    )
    story = generate(_corpus(), settings, random.Random(11))
    dialogue = [block for block in story.chapters[0].blocks if block.kind == "dialogue"]
    assert dialogue
    assert all(len(block.sentences) == 1 for block in dialogue)


def test_generate_is_reproducible_with_same_seed() -> None:
    settings = GenerationSettings(word_goal=500, chapter_count=4)
    first = generate(_corpus(), settings, random.Random(2024))
    second = generate(_corpus(), settings, random.Random(2024))
    assert first == second


def test_generate_does_not_mutate_corpus() -> None:
    corpus = _corpus()
    before = corpus.counts()
    generate(corpus, GenerationSettings(word_goal=300, chapter_count=2), random.Random(0))
    assert corpus.counts() == before
    assert corpus == _corpus()


class _FixedRoll:
    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.mark.parametrize("missing", BUCKETS)
def test_generate_fails_fast_on_empty_bucket(missing: str) -> None:
    buckets = {bucket: list(_corpus().sentences(bucket)) for bucket in BUCKETS}
    buckets[missing] = []  # type: ignore[index]
    corpus = Corpus.from_mapping(buckets)  # type: ignore[arg-type]

    # Any draw from this source would raise AttributeError instead.
    no_draws = cast(random.Random, object())
    with pytest.raises(EmptyBucketError, match=missing):
        generate(corpus, GenerationSettings(word_goal=100, chapter_count=1), no_draws)


@pytest.mark.parametrize(
    ("settings", "message"),
    [
        (GenerationSettings(chapter_count=0), "chapter_count"),
        (GenerationSettings(word_goal=3, chapter_count=4), "word_goal"),
        (GenerationSettings(solitary_rate=-0.1), "non-negative"),
        (GenerationSettings(max_sentences_per_paragraph=1), "max_sentences_per_paragraph"),
        (GenerationSettings(max_sentences_per_dialogue=-1), "max_sentences_per_dialogue"),
    ],
)
def test_generate_rejects_invalid_settings(settings: GenerationSettings, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        generate(_corpus(), settings, random.Random(0))


def test_choose_section_uses_cumulative_thresholds() -> None:
    settings = GenerationSettings(solitary_rate=0.5, dialogue_rate=0.5)
    # Total weight is 2.0, so the roll is value * 2.
    assert choose_section(settings, cast(random.Random, _FixedRoll(0.1))) == "solitary"
    assert choose_section(settings, cast(random.Random, _FixedRoll(0.4))) == "dialogue"
    assert choose_section(settings, cast(random.Random, _FixedRoll(0.6))) == "paragraph"
