"""Green screen prompt generation via third-party LLM APIs."""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from config.settings import AppConfig
from modules.generation.errors import (
    ConfigurationError,
    EmptyResponseError,
    GenerationError,
    ServiceError,
)
from modules.generation.prompt_template import CHROMA_KEY_SYSTEM_INSTRUCTION

logger = logging.getLogger(__name__)

GENERATION_TEMPERATURE = 0.7


@dataclass(slots=True, frozen=True)
class BackendRequest:
    """Information passed to backend callables."""

    system_instruction: str
    user_content: str
    temperature: float
    model: str


BackendCallable = Callable[[BackendRequest], Optional[str]]


class GenerationClient:
    """Single-call wrapper turning a short description into a chroma key prompt."""

    def __init__(
        self,
        config: AppConfig,
        system_instruction: str = CHROMA_KEY_SYSTEM_INSTRUCTION,
    ) -> None:
        self.config = config
        self.system_instruction = system_instruction
        self._backends: Dict[str, BackendCallable] = {}
        self._models: Dict[str, str] = {}
        self.warnings: list[str] = []
        self._auto_register_backends()

    def register_backend(
        self, name: str, backend: BackendCallable, model: Optional[str] = None
    ) -> None:
        """Register a generation backend, optionally pinning its model id."""
        key = name.lower()
        self._backends[key] = backend
        if model:
            self._models[key] = model

    def clear_backends(self) -> None:
        """Remove all backends (mainly for tests)."""
        self._backends.clear()
        self._models.clear()

    def has_backend(self, name: str) -> bool:
        """Return True when backend exists."""
        return name.lower() in self._backends

    def available_backends(self) -> list[str]:
        """Return the list of registered backends ordered by preference."""
        priority = {"gemini": 0, "gpt": 1}
        return sorted(
            self._backends.keys(),
            key=lambda item: (priority.get(item, 99), item),
        )

    def default_backend(self) -> str:
        """Return the configured backend, or the preferred registered one."""
        preferred = self.config.prompt_backend.lower()
        if preferred in self._backends:
            return preferred
        choices = self.available_backends()
        if choices:
            return choices[0]
        return preferred

    def generate(self, user_input: str) -> str:
        """Return the trimmed prompt produced for *user_input*.

        Raises:
            ValueError: If the input is empty or whitespace only.
            ConfigurationError: If no credential is available for the backend.
            ServiceError: If the backend call fails.
            EmptyResponseError: If the backend returns no usable text.
        """
        if not user_input or not user_input.strip():
            raise ValueError("user_input must contain non-whitespace text")

        name = self.default_backend()
        backend = self._backends.get(name)
        if backend is None:
            message = self._missing_backend_message(name)
            logger.error("Prompt generation aborted before dispatch: %s", message)
            raise ConfigurationError(message)

        request = BackendRequest(
            system_instruction=self.system_instruction,
            user_content=user_input,
            temperature=GENERATION_TEMPERATURE,
            model=self._models.get(name, ""),
        )
        logger.info(
            "Dispatching prompt generation (backend=%s, model=%s, input_chars=%d)",
            name,
            request.model or "-",
            len(user_input),
        )
        try:
            text = backend(request)
        except GenerationError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception("Prompt generation failed in backend %s", name)
            raise ServiceError(str(exc)) from exc

        if not isinstance(text, str) or not text.strip():
            logger.warning("Backend %s returned no text", name)
            raise EmptyResponseError()
        return text.strip()

    # Internal helpers ---------------------------------------------------------
    def _missing_backend_message(self, name: str) -> str:
        key_present = {
            "gemini": bool(self.config.gemini_key),
            "gpt": bool(self.config.openai_key),
        }.get(name, False)
        if key_present and self.warnings:
            return "SDK 未安装或初始化失败：" + "; ".join(self.warnings)
        return ConfigurationError.default_message

    def _auto_register_backends(self) -> None:
        """Register backends automatically when credentials are configured."""
        self._register_gemini_backend()
        self._register_openai_backend()

    def _register_gemini_backend(self) -> None:
        if not self.config.gemini_key:
            return
        try:
            genai_module = importlib.import_module("google.genai")
        except ImportError as exc:
            self.warnings.append(f"无法导入 google-genai：{exc}")
            return

        client = genai_module.Client(api_key=self.config.gemini_key)
        logger.info("Registered Gemini backend (key …%s)", self.config.gemini_key[-4:])

        def _gemini_backend(request: BackendRequest) -> Optional[str]:
            response = client.models.generate_content(
                model=request.model,
                contents=request.user_content,
                config={
                    "system_instruction": request.system_instruction,
                    "temperature": request.temperature,
                },
            )
            return getattr(response, "text", None)

        self.register_backend("gemini", _gemini_backend, model=self.config.gemini_model)

    def _extract_openai_text(self, completion: Any) -> Optional[str]:
        choices = getattr(completion, "choices", None)
        if not choices:
            return None
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        return content if isinstance(content, str) else None

    def _register_openai_backend(self) -> None:
        if not self.config.openai_key:
            return
        try:
            openai_module = importlib.import_module("openai")
        except ImportError as exc:
            self.warnings.append(f"无法导入 openai：{exc}")
            return

        base_url = self.config.metadata.get("openai_base_url")
        client_kwargs = {"api_key": self.config.openai_key}
        if base_url:
            client_kwargs["base_url"] = base_url
        client = openai_module.OpenAI(**client_kwargs)
        logger.info("Registered OpenAI-compatible backend (base_url=%s)", base_url or "default")

        def _gpt_backend(request: BackendRequest) -> Optional[str]:
            completion = client.chat.completions.create(
                model=request.model,
                messages=[
                    {"role": "system", "content": request.system_instruction},
                    {"role": "user", "content": request.user_content},
                ],
                temperature=request.temperature,
            )
            return self._extract_openai_text(completion)

        self.register_backend("gpt", _gpt_backend, model=self.config.openai_model)
