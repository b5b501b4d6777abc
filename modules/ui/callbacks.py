"""Callback implementations for the Gradio interface."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from config.settings import AppConfig
from modules.generation.client import GenerationClient
from modules.generation.controller import GenerationController, PromptGenerator
from modules.generation.state import Errored
from modules.ui import view

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ViewModel:
    """Everything the page needs to re-render after an action."""

    status: str
    error: str
    result: str
    history: str
    history_choices: list[tuple[str, str]]
    submit_enabled: bool


def build_callbacks(
    config: AppConfig,
    client: Optional[PromptGenerator] = None,
) -> dict[str, Any]:
    """Return a dictionary of Gradio callback functions."""

    generator: PromptGenerator = client if client is not None else GenerationClient(config)

    def _snapshot(controller: GenerationController, user_input: Optional[str]) -> ViewModel:
        state = controller.state
        return ViewModel(
            status=view.render_status(state),
            error=state.error if isinstance(state, Errored) else "",
            result=view.render_result(state),
            history=view.render_history(controller.history),
            history_choices=view.history_choices(controller.history),
            submit_enabled=view.submit_enabled(state, user_input),
        )

    def new_session() -> GenerationController:
        return GenerationController(generator)

    def on_input_change(user_input: str, controller: GenerationController) -> bool:
        return view.submit_enabled(controller.state, user_input)

    def on_submit(user_input: str, controller: GenerationController) -> Iterator[ViewModel]:
        if not controller.begin(user_input):
            yield _snapshot(controller, user_input)
            return
        yield _snapshot(controller, user_input)
        controller.finish()
        yield _snapshot(controller, user_input)

    def on_clear_history(user_input: str, controller: GenerationController) -> ViewModel:
        controller.clear_history()
        logger.info("History cleared")
        return _snapshot(controller, user_input)

    def on_select_history(identifier: Optional[str], controller: GenerationController) -> str:
        if not identifier:
            return ""
        entry = controller.history.find(identifier)
        return entry.produced_prompt if entry is not None else ""

    return {
        "new_session": new_session,
        "on_input_change": on_input_change,
        "on_submit": on_submit,
        "on_clear_history": on_clear_history,
        "on_select_history": on_select_history,
    }
