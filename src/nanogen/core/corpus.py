"""In-memory corpus of classified sentences."""

from __future__ import annotations

import random
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Final, Literal

Bucket = Literal[
    "start_chapter",
    "end_chapter",
    "solitary",
    "dialogue",
    "start_paragraph",
    "end_paragraph",
    "mid_paragraph",
]

BUCKETS: Final[tuple[Bucket, ...]] = (
    "start_chapter",
    "end_chapter",
    "solitary",
    "dialogue",
    "start_paragraph",
    "end_paragraph",
    "mid_paragraph",
)


class EmptyBucketError(RuntimeError):
    """Raised when a bucket needed for sampling holds no sentences."""

    def __init__(self, buckets: Iterable[str]) -> None:
        self.buckets = tuple(buckets)
        super().__init__(
            "corpus bucket(s) empty, cannot sample: " + ", ".join(self.buckets)
        )


def _empty_buckets() -> dict[Bucket, tuple[str, ...]]:
    return {bucket: () for bucket in BUCKETS}


@dataclass(frozen=True)
class Corpus:
    """Sentences grouped by structural role, in discovery order."""

    buckets: dict[Bucket, tuple[str, ...]] = field(default_factory=_empty_buckets)

    def __post_init__(self) -> None:
        unknown = set(self.buckets) - set(BUCKETS)
        if unknown:
            raise ValueError(f"unknown corpus bucket(s): {', '.join(sorted(unknown))}")
        normalized = {bucket: tuple(self.buckets.get(bucket, ())) for bucket in BUCKETS}
        object.__setattr__(self, "buckets", normalized)

    @classmethod
    def from_mapping(cls, mapping: Mapping[Bucket, Iterable[str]]) -> Corpus:
        return cls(buckets={bucket: tuple(sentences) for bucket, sentences in mapping.items()})

    def sentences(self, bucket: Bucket) -> tuple[str, ...]:
        return self.buckets[bucket]

    def size(self, bucket: Bucket) -> int:
        return len(self.buckets[bucket])

    def total_sentences(self) -> int:
        return sum(len(sentences) for sentences in self.buckets.values())

    def empty_buckets(self) -> list[Bucket]:
        return [bucket for bucket in BUCKETS if not self.buckets[bucket]]

    def require_populated(self, buckets: Iterable[Bucket] = BUCKETS) -> None:
        """Fail fast, naming every empty bucket, before any sampling happens."""
        missing = [bucket for bucket in buckets if not self.buckets[bucket]]
        if missing:
            raise EmptyBucketError(missing)

    def sample(self, bucket: Bucket, rng: random.Random) -> str:
        """Pick one sentence uniformly from the bucket, with replacement."""
        sentences = self.buckets[bucket]
        if not sentences:
            raise EmptyBucketError([bucket])
        return rng.choice(sentences)

    def merged(self, other: Corpus) -> Corpus:
        """Return a corpus holding this corpus's sentences followed by ``other``'s."""
        return Corpus(
            buckets={bucket: self.buckets[bucket] + other.buckets[bucket] for bucket in BUCKETS}
        )

    def counts(self) -> dict[Bucket, int]:
        return {bucket: len(self.buckets[bucket]) for bucket in BUCKETS}
