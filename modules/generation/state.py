"""Generation status variants and the in-memory history."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Iterator, Optional, Tuple, Union


class GenerationStatus(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(slots=True, frozen=True)
class Idle:
    status: ClassVar[GenerationStatus] = GenerationStatus.IDLE


@dataclass(slots=True, frozen=True)
class Generating:
    status: ClassVar[GenerationStatus] = GenerationStatus.GENERATING


@dataclass(slots=True, frozen=True)
class Completed:
    """A finished generation; always carries the produced prompt."""

    prompt: str
    status: ClassVar[GenerationStatus] = GenerationStatus.COMPLETED

    def __post_init__(self) -> None:
        if not self.prompt:
            raise ValueError("Completed state requires a non-empty prompt")


@dataclass(slots=True, frozen=True)
class Errored:
    """A failed generation; always carries a user-facing message."""

    error: str
    status: ClassVar[GenerationStatus] = GenerationStatus.ERROR

    def __post_init__(self) -> None:
        if not self.error:
            raise ValueError("Errored state requires a non-empty message")


GenerationState = Union[Idle, Generating, Completed, Errored]


@dataclass(slots=True, frozen=True)
class HistoryEntry:
    """One successful generation, recorded once and never changed."""

    identifier: str
    created_at: float
    original_input: str
    produced_prompt: str


@dataclass(slots=True, frozen=True)
class History:
    """Immutable most-recent-first sequence of history entries."""

    entries: Tuple[HistoryEntry, ...] = ()

    def prepend(self, entry: HistoryEntry) -> "History":
        return History((entry,) + self.entries)

    def clear(self) -> "History":
        return History()

    def find(self, identifier: str) -> Optional[HistoryEntry]:
        for entry in self.entries:
            if entry.identifier == identifier:
                return entry
        return None

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> HistoryEntry:
        return self.entries[index]
