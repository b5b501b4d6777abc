"""GenerationController state machine tests."""

from __future__ import annotations

import itertools
import threading
from typing import Optional

import pytest

from config.settings import AppConfig
from modules.generation.client import GenerationClient
from modules.generation.controller import GenerationController
from modules.generation.errors import EmptyResponseError, ServiceError
from modules.generation.state import (
    Completed,
    Errored,
    GenerationStatus,
    Generating,
    History,
    HistoryEntry,
    Idle,
)


class DummyClient:
    """Stub generation client capturing inputs."""

    def __init__(self, reply: str = "Full shot, solid green background #00FF00") -> None:
        self.reply = reply
        self.error: Optional[Exception] = None
        self.calls: list[str] = []

    def generate(self, user_input: str) -> str:
        self.calls.append(user_input)
        if self.error is not None:
            raise self.error
        return self.reply


def build_controller(client: DummyClient | None = None) -> GenerationController:
    counter = itertools.count(1)
    ticks = itertools.count(1000)
    return GenerationController(
        client or DummyClient(),
        clock=lambda: float(next(ticks)),
        id_factory=lambda: f"entry-{next(counter)}",
    )


def test_starts_idle_with_empty_history():
    controller = build_controller()

    assert controller.state == Idle()
    assert controller.status is GenerationStatus.IDLE
    assert len(controller.history) == 0


def test_phoenix_scenario():
    reply = "Full shot of a burning phoenix... solid green background #00FF00..."
    controller = build_controller(DummyClient(reply))

    state = controller.submit("a burning phoenix")

    assert state == Completed(reply)
    entry = controller.history[0]
    assert entry.original_input == "a burning phoenix"
    assert entry.produced_prompt == reply
    assert entry.identifier == "entry-1"
    assert entry.created_at == 1000.0


@pytest.mark.parametrize("user_input", ["", "   ", "\n\t", None])
def test_blank_input_is_a_no_op(user_input):
    client = DummyClient()
    controller = build_controller(client)

    state = controller.submit(user_input)

    assert state == Idle()
    assert client.calls == []


def test_begin_blocks_further_submissions_until_finished():
    client = DummyClient()
    controller = build_controller(client)

    assert controller.begin("rocket") is True
    assert controller.state == Generating()
    assert controller.can_submit("another rocket") is False
    assert controller.begin("another rocket") is False
    assert controller.submit("another rocket") == Generating()
    assert client.calls == []

    controller.finish()

    assert client.calls == ["rocket"]
    assert controller.status is GenerationStatus.COMPLETED
    assert controller.can_submit("another rocket") is True


def test_finish_without_pending_request_raises():
    controller = build_controller()

    with pytest.raises(RuntimeError):
        controller.finish()


def test_failure_sets_error_and_keeps_history():
    client = DummyClient()
    controller = build_controller(client)
    controller.submit("first")

    client.error = ServiceError("quota exceeded")
    state = controller.submit("second")

    assert state == Errored("quota exceeded")
    assert len(controller.history) == 1
    assert controller.history[0].original_input == "first"


def test_empty_response_is_reported_like_service_error():
    client = DummyClient()
    client.error = EmptyResponseError()
    controller = build_controller(client)

    state = controller.submit("rocket")

    assert isinstance(state, Errored)
    assert state.error == "No text generated from model"
    assert len(controller.history) == 0


def test_unexpected_exception_does_not_leave_controller_generating():
    client = DummyClient()
    client.error = KeyError("boom")
    controller = build_controller(client)

    state = controller.submit("rocket")

    assert isinstance(state, Errored)
    assert controller.can_submit("rocket") is True


def test_missing_credential_scenario_makes_no_network_call():
    real_client = GenerationClient(AppConfig())
    real_client.clear_backends()
    controller = GenerationController(real_client)

    state = controller.submit("rocket")

    assert isinstance(state, Errored)
    assert "API Key" in state.error
    assert len(controller.history) == 0


def test_resubmit_after_error_discards_previous_result():
    client = DummyClient()
    client.error = ServiceError("offline")
    controller = build_controller(client)
    controller.submit("rocket")

    client.error = None
    assert controller.begin("rocket") is True
    assert controller.state == Generating()
    assert controller.finish() == Completed(client.reply)


def test_identical_submissions_create_distinct_entries_newest_first():
    controller = build_controller()

    controller.submit("rocket")
    controller.submit("rocket")

    first, second = controller.history
    assert first.identifier == "entry-2"
    assert second.identifier == "entry-1"
    assert first.created_at > second.created_at
    assert first.original_input == second.original_input == "rocket"


def test_history_order_is_preserved_on_prepend():
    client = DummyClient()
    controller = build_controller(client)
    for text in ("one", "two", "three"):
        client.reply = f"prompt {text}"
        controller.submit(text)

    assert [entry.original_input for entry in controller.history] == ["three", "two", "one"]


def test_clear_history_keeps_status_and_later_success_appends():
    controller = build_controller()
    controller.submit("rocket")
    status_before = controller.state

    controller.clear_history()

    assert len(controller.history) == 0
    assert controller.state == status_before

    controller.submit("phoenix")
    assert len(controller.history) == 1
    assert controller.history[0].original_input == "phoenix"


def test_clear_history_while_generating():
    controller = build_controller()
    controller.submit("rocket")
    controller.begin("phoenix")

    controller.clear_history()

    assert controller.state == Generating()
    controller.finish()
    assert [entry.original_input for entry in controller.history] == ["phoenix"]


def test_state_variants_reject_empty_payloads():
    with pytest.raises(ValueError):
        Completed("")
    with pytest.raises(ValueError):
        Errored("")


def test_history_is_immutable():
    entry = HistoryEntry(identifier="a", created_at=1.0, original_input="in", produced_prompt="out")
    history = History().prepend(entry)

    assert history.clear() == History()
    assert len(history) == 1
    assert history.find("a") is entry
    assert history.find("missing") is None
    with pytest.raises(AttributeError):
        entry.produced_prompt = "changed"  # type: ignore[misc]


def test_clear_from_another_thread_during_generation_is_kept():
    controller = build_controller()
    controller.submit("old")

    class ClearingClient:
        """Clears history on a worker thread while the call is in flight."""

        def generate(self, user_input: str) -> str:
            worker = threading.Thread(target=controller.clear_history)
            worker.start()
            worker.join()
            return "Full shot of a phoenix"

    controller.client = ClearingClient()
    controller.submit("phoenix")

    assert [entry.original_input for entry in controller.history] == ["phoenix"]
