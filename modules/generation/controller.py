"""Single-request-at-a-time orchestration of prompt generation."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from typing import Callable, Optional, Protocol

from modules.generation.errors import EmptyResponseError, GenerationError
from modules.generation.state import (
    Completed,
    Errored,
    GenerationState,
    GenerationStatus,
    Generating,
    History,
    HistoryEntry,
    Idle,
)

logger = logging.getLogger(__name__)


class PromptGenerator(Protocol):
    def generate(self, user_input: str) -> str:
        ...


def _new_identifier() -> str:
    return uuid.uuid4().hex


class GenerationController:
    """Own the status state machine and the session history.

    Submission is gated on status, so at most one client call is ever
    outstanding for a controller. ``submit`` runs a whole cycle; ``begin``
    and ``finish`` expose the two halves so a UI can render the
    ``generating`` state while the call is pending.
    """

    def __init__(
        self,
        client: PromptGenerator,
        clock: Callable[[], float] = time.time,
        id_factory: Callable[[], str] = _new_identifier,
    ) -> None:
        self.client = client
        self._clock = clock
        self._id_factory = id_factory
        self.state: GenerationState = Idle()
        self.history = History()
        self._history_lock = threading.Lock()
        self._pending_input: Optional[str] = None

    @property
    def status(self) -> GenerationStatus:
        return self.state.status

    def can_submit(self, user_input: Optional[str]) -> bool:
        """Return True when *user_input* may start a new generation."""
        if self.status is GenerationStatus.GENERATING:
            return False
        return bool(user_input and user_input.strip())

    def begin(self, user_input: Optional[str]) -> bool:
        """Move to ``generating`` for *user_input*; no-op when not allowed."""
        if not self.can_submit(user_input):
            logger.debug("Submission rejected (status=%s)", self.status.value)
            return False
        self._pending_input = user_input
        self.state = Generating()
        logger.debug("Generation started")
        return True

    def finish(self) -> GenerationState:
        """Resolve the pending generation and return the resulting state."""
        if self._pending_input is None or self.status is not GenerationStatus.GENERATING:
            raise RuntimeError("No generation is pending")

        user_input = self._pending_input
        try:
            prompt = self.client.generate(user_input)
        except GenerationError as exc:
            self.state = Errored(exc.message)
            logger.info("Generation failed: %s", exc.message)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected failure while generating")
            self.state = Errored(str(exc).strip() or GenerationError.default_message)
        else:
            if not prompt:
                self.state = Errored(EmptyResponseError.default_message)
                return self.state
            entry = HistoryEntry(
                identifier=self._id_factory(),
                created_at=self._clock(),
                original_input=user_input,
                produced_prompt=prompt,
            )
            with self._history_lock:
                self.history = self.history.prepend(entry)
            self.state = Completed(prompt)
            logger.debug("Generation completed (history size=%d)", len(self.history))
        finally:
            self._pending_input = None
        return self.state

    def submit(self, user_input: Optional[str]) -> GenerationState:
        """Run one full generation cycle for *user_input*."""
        if not self.begin(user_input):
            return self.state
        return self.finish()

    def clear_history(self) -> None:
        """Drop every history entry; the current status is untouched."""
        with self._history_lock:
            self.history = self.history.clear()
