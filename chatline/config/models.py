"""Centralized model configuration for chatline."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

LOGGER = logging.getLogger(__name__)

# Environment variable that overrides the model used for every query.
MODEL_ENV_VAR = "CHAT_MODEL"


@dataclass(frozen=True)
class ModelConfig:
    """Configuration metadata for a Gemini model."""

    id: str
    full_id: str
    display_name: str
    description: str
    context_window: int
    max_output_tokens: int
    supports_function_calling: bool
    deprecated: bool = False
    replacement: Optional[str] = None

    @property
    def api_id(self) -> str:
        """Return the identifier that should be sent to the API."""

        return self.full_id or self.id


class ModelRegistry:
    """Registry providing a single source of truth for Gemini models."""

    FLASH_LATEST = ModelConfig(
        id="gemini-flash-latest",
        full_id="gemini-flash-latest",
        display_name="Gemini Flash (Latest)",
        description="Latest Flash model, a fast general-purpose default for chat.",
        context_window=1_048_576,
        max_output_tokens=65_536,
        supports_function_calling=True,
    )

    FLASH_LITE_LATEST = ModelConfig(
        id="gemini-flash-lite-latest",
        full_id="gemini-flash-lite-latest",
        display_name="Gemini Flash Lite (Latest)",
        description="Small workhorse model, optimized for cost efficiency and low latency.",
        context_window=1_048_576,
        max_output_tokens=8_192,
        supports_function_calling=True,
    )

    FLASH_25 = ModelConfig(
        id="gemini-2.5-flash",
        full_id="gemini-2.5-flash",
        display_name="Gemini 2.5 Flash",
        description="Pinned 2.5 Flash release with thinking support.",
        context_window=1_048_576,
        max_output_tokens=65_536,
        supports_function_calling=True,
    )

    PRO_25 = ModelConfig(
        id="gemini-2.5-pro",
        full_id="gemini-2.5-pro",
        display_name="Gemini 2.5 Pro",
        description="Thinking model for complex reasoning over code, math, and STEM.",
        context_window=1_048_576,
        max_output_tokens=65_536,
        supports_function_calling=True,
    )

    _ALL_MODELS: Tuple[ModelConfig, ...] = (
        FLASH_LATEST,
        FLASH_LITE_LATEST,
        FLASH_25,
        PRO_25,
    )

    # Short names accepted in CHAT_MODEL / --model.
    _ALIASES: Dict[str, str] = {
        "gemini-flash": "gemini-flash-latest",
        "gemini-flash-lite": "gemini-flash-lite-latest",
        "gemini-pro": "gemini-2.5-pro",
    }

    DEFAULT = FLASH_LATEST

    @classmethod
    def all_models(cls) -> Tuple[ModelConfig, ...]:
        """Return all registered models."""

        return cls._ALL_MODELS

    @classmethod
    def _indexed_models(cls) -> Dict[str, ModelConfig]:
        """Return a mapping of model identifiers to configuration objects."""

        if not hasattr(cls, "_cached_indexed_models"):
            cls._cached_indexed_models = {model.id: model for model in cls.all_models()}
        return cls._cached_indexed_models

    @classmethod
    def get_by_id(cls, model_id: Optional[str]) -> Optional[ModelConfig]:
        """Return configuration for ``model_id`` (or one of its aliases) if known."""

        if not model_id:
            return None

        clean_id = model_id.removeprefix("models/")
        models = cls._indexed_models()

        model = models.get(clean_id)
        if model:
            return model

        target = cls._ALIASES.get(clean_id)
        if target:
            return models.get(target)
        return None

    @classmethod
    def validate_model_id(cls, model_id: Optional[str]) -> Tuple[bool, Optional[str]]:
        """Validate ``model_id`` returning ``(is_valid, error_message)``."""

        if not model_id:
            return False, "Model identifier cannot be empty"

        model = cls.get_by_id(model_id)
        if not model:
            return False, f"Unknown model or alias: {model_id}"

        if model.deprecated:
            message = f"Model {model.id} is deprecated."
            if model.replacement:
                message += f" Use {model.replacement} instead."
            return False, message

        return True, None


DEFAULT_MODEL_ID = ModelRegistry.DEFAULT.id


def resolve_model_id() -> str:
    """Return the model identifier for the next query.

    The ``CHAT_MODEL`` override is returned exactly as given; validation
    happens when a backend is built for it.
    """

    env_model = os.environ.get(MODEL_ENV_VAR)
    if env_model is not None:
        return env_model
    return DEFAULT_MODEL_ID
