"""Presentation helpers turning controller state into display values."""

from __future__ import annotations

import time
from typing import Optional

from modules.generation.state import (
    Completed,
    Errored,
    GenerationState,
    GenerationStatus,
    History,
)

STATUS_IDLE = "准备就绪。"
STATUS_GENERATING = "⏳ 正在生成提示词 (Generating)…"
STATUS_COMPLETED = "✅ 提示词已生成，可复制使用。"
STATUS_ERROR = "❌ 生成失败 (Generation failed)"


def format_timestamp(created_at: float) -> str:
    """Render a history timestamp as local wall-clock time."""
    return time.strftime("%H:%M:%S", time.localtime(created_at))


def submit_enabled(state: GenerationState, user_input: Optional[str]) -> bool:
    if state.status is GenerationStatus.GENERATING:
        return False
    return bool(user_input and user_input.strip())


def render_status(state: GenerationState) -> str:
    if isinstance(state, Errored):
        return STATUS_ERROR
    if state.status is GenerationStatus.GENERATING:
        return STATUS_GENERATING
    if isinstance(state, Completed):
        return STATUS_COMPLETED
    return STATUS_IDLE


def render_result(state: GenerationState) -> str:
    if isinstance(state, Completed):
        return state.prompt
    return ""


def render_history(history: History) -> str:
    """Markdown listing of history entries, newest first."""
    if not len(history):
        return "_暂无历史记录 (No history yet)_"

    blocks: list[str] = []
    for entry in history:
        blocks.append(
            "\n".join(
                [
                    f"**{format_timestamp(entry.created_at)}** · INPUT: {entry.original_input}",
                    "",
                    "```text",
                    entry.produced_prompt,
                    "```",
                ]
            )
        )
    return "\n\n---\n\n".join(blocks)


def history_choices(history: History) -> list[tuple[str, str]]:
    """(label, identifier) pairs for the history selector."""
    choices: list[tuple[str, str]] = []
    for entry in history:
        label = entry.original_input.strip().replace("\n", " ")
        if len(label) > 40:
            label = label[:39] + "…"
        choices.append((f"{format_timestamp(entry.created_at)} · {label}", entry.identifier))
    return choices
