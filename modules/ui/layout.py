"""Gradio layout for the green screen prompt generator."""

from __future__ import annotations

from typing import Any, Iterator, Optional

try:
    import gradio as gr
except ImportError:  # pragma: no cover
    gr = None  # type: ignore

from config.settings import AppConfig
from modules.generation.client import GenerationClient
from modules.generation.controller import GenerationController
from modules.generation.state import GenerationStatus, History
from modules.ui import view
from modules.ui.callbacks import ViewModel, build_callbacks

COPY_TO_CLIPBOARD_JS = "(text) => { if (text) { navigator.clipboard.writeText(text); } }"

CSS = """
#submit-btn { background: #00ff00; color: #000; font-weight: 700; }
#error-panel { border: 1px solid #7f1d1d; border-radius: 12px; padding: 12px; }
"""


def _to_updates(model: ViewModel, include_submit: bool = True) -> tuple[Any, ...]:
    return (
        gr.update(value=model.status),
        gr.update(value=f"**Error**\n\n{model.error}" if model.error else "", visible=bool(model.error)),
        gr.update(visible=bool(model.result)),
        gr.update(value=model.result),
        gr.update(value=model.history),
        gr.update(choices=model.history_choices, value=None),
        gr.update(interactive=model.submit_enabled) if include_submit else gr.update(),
    )


def build_handlers(callbacks_map: dict[str, Any]) -> dict[str, Any]:
    """Wrap the plain callbacks into Gradio event handlers."""

    def submit(user_input: str, controller: GenerationController) -> Iterator[tuple[Any, ...]]:
        # The resolved view leaves the button to the chained input check.
        for model in callbacks_map["on_submit"](user_input, controller):
            pending = controller.status is GenerationStatus.GENERATING
            yield _to_updates(model, include_submit=pending)

    def clear(user_input: str, controller: GenerationController) -> tuple[Any, ...]:
        model = callbacks_map["on_clear_history"](user_input, controller)
        return (*_to_updates(model), "")

    def input_change(user_input: str, controller: GenerationController) -> Any:
        return gr.update(interactive=callbacks_map["on_input_change"](user_input, controller))

    return {"submit": submit, "clear": clear, "input_change": input_change}


def build_app(config: AppConfig, client: Optional[GenerationClient] = None) -> Any:
    """Compose and return the Gradio application."""
    if gr is None:
        raise RuntimeError("Gradio 未安装，请先执行依赖安装。")

    generation_client = client if client is not None else GenerationClient(config)
    callbacks_map = build_callbacks(config, client=generation_client)
    handlers = build_handlers(callbacks_map)

    with gr.Blocks(title="Green Screen VFX Prompt Generator", css=CSS) as demo:
        session = gr.State(callbacks_map["new_session"])

        gr.Markdown("# 绿幕特效提示词生成器\nGreen Screen VFX Prompt Generator")

        with gr.Group():
            user_input = gr.Textbox(
                label="描述您需要的素材 (支持中文)",
                lines=4,
                placeholder="例如：一只燃烧的火凤凰，正在展翅高飞...",
            )
            submit_btn = gr.Button(
                "生成提示词 (Generate Prompt)",
                variant="primary",
                interactive=False,
                elem_id="submit-btn",
            )

        status = gr.Markdown(view.STATUS_IDLE)
        error_panel = gr.Markdown(visible=False, elem_id="error-panel")

        with gr.Column(visible=False) as result_panel:
            result_box = gr.Textbox(
                label="PROMPT OUTPUT",
                lines=6,
                interactive=False,
                show_copy_button=True,
            )
            copy_btn = gr.Button("Copy Text", size="sm")

        with gr.Accordion("历史记录 (History)", open=True):
            history_md = gr.Markdown(view.render_history(History()))
            with gr.Row():
                history_select = gr.Dropdown(
                    label="选择历史记录 (Select entry)",
                    choices=[],
                    value=None,
                    scale=4,
                )
                clear_btn = gr.Button("Clear", size="sm", scale=1)
            history_prompt = gr.Textbox(
                label="Generated Prompt",
                lines=4,
                interactive=False,
                show_copy_button=True,
            )

        view_outputs = [
            status,
            error_panel,
            result_panel,
            result_box,
            history_md,
            history_select,
            submit_btn,
        ]

        user_input.change(
            fn=handlers["input_change"],
            inputs=[user_input, session],
            outputs=[submit_btn],
            queue=False,
        )
        submit_btn.click(
            fn=handlers["submit"],
            inputs=[user_input, session],
            outputs=view_outputs,
        ).then(
            fn=handlers["input_change"],
            inputs=[user_input, session],
            outputs=[submit_btn],
            queue=False,
        )
        copy_btn.click(fn=None, inputs=[result_box], outputs=None, js=COPY_TO_CLIPBOARD_JS)
        history_select.change(
            fn=callbacks_map["on_select_history"],
            inputs=[history_select, session],
            outputs=[history_prompt],
            queue=False,
        )
        clear_btn.click(
            fn=handlers["clear"],
            inputs=[user_input, session],
            outputs=view_outputs + [history_prompt],
        )

    return demo
