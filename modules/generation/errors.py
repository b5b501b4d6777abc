"""Failures raised by the generation client."""

from __future__ import annotations


class GenerationError(RuntimeError):
    """Base class for every failure the controller turns into an error state."""

    default_message = "Failed to generate prompt"

    def __init__(self, message: str = "") -> None:
        self.message = message.strip() or self.default_message
        super().__init__(self.message)


class ConfigurationError(GenerationError):
    """No usable credential or SDK; raised before any network attempt."""

    default_message = "API Key not found."


class ServiceError(GenerationError):
    """Transport or service-side failure from the external model."""


class EmptyResponseError(GenerationError):
    """The service answered without any usable text."""

    default_message = "No text generated from model"
