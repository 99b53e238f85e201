"""
LLM helpers for the generation nodes.

- get_llm_config / get_image_config: cascading configuration
- create_client: GeminiClient built from the resolved configuration
- call_llm_structured: one structured call, decoded into a result model

One attempt per call. Failures go to the caller, which decides whether to
re-run the whole invocation.
"""
from typing import Optional, Type, TypeVar

import structlog
from pydantic import BaseModel

from studio_shared.context import StudioContext
from studio_shared.gemini_client import (
    DEFAULT_BASE_URL,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_TEXT_MODEL,
    DEFAULT_TIMEOUT,
    GeminiClient,
)

from .decoder import decode
from .schemas import (
    IMAGE_MODEL_REGISTRY,
    TEXT_MODEL_REGISTRY,
    ImageConfig,
    LLMConfig,
    resolve_model,
)
from .shapes import Shape
from .utils import resolve_concurrency

logger = structlog.get_logger()

T = TypeVar("T", bound=BaseModel)

MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0


def _parse_float(value: Optional[str]) -> Optional[float]:
    if value is None or value.strip() == "":
        return None
    try:
        return float(value)
    except ValueError:
        logger.warning("invalid_float_setting", value=value)
        return None


def get_llm_config(ctx: StudioContext, llm_config: Optional[LLMConfig] = None) -> dict:
    """
    Get text-generation configuration with cascading priority.

    Resolution order (first non-None wins):
    1. llm_config (friendly name like "Gemini 2.5 Flash" or a raw model id)
    2. Environment (LLM_MODEL, LLM_TEMPERATURE)
    3. Defaults (gemini-2.5-flash, provider default temperature)
    """
    model = None
    temperature = None

    if llm_config:
        model = resolve_model(llm_config.model, TEXT_MODEL_REGISTRY)
        # Temperature can be 0, so check for None explicitly
        if llm_config.temperature is not None:
            temperature = llm_config.temperature

    if not model:
        model = resolve_model(ctx.get_secret("LLM_MODEL"), TEXT_MODEL_REGISTRY) or DEFAULT_TEXT_MODEL
    if temperature is None:
        temperature = _parse_float(ctx.get_secret("LLM_TEMPERATURE"))
        if temperature is not None and not MIN_TEMPERATURE <= temperature <= MAX_TEMPERATURE:
            logger.warning("invalid_float_setting", name="LLM_TEMPERATURE", value=temperature)
            temperature = None

    return {
        "model": model,
        "temperature": temperature,  # None means use provider default
        "google_api_key": ctx.get_secret("GOOGLE_API_KEY") or ctx.get_secret("GEMINI_API_KEY"),
        "base_url": ctx.get_secret("GEMINI_BASE_URL") or DEFAULT_BASE_URL,
        "timeout": _parse_float(ctx.get_secret("GEMINI_TIMEOUT")) or DEFAULT_TIMEOUT,
    }


def get_image_config(ctx: StudioContext, image_config: Optional[ImageConfig] = None) -> dict:
    """Get image-generation configuration (params -> environment -> defaults)."""
    model = None
    max_concurrency = None

    if image_config:
        model = resolve_model(image_config.model, IMAGE_MODEL_REGISTRY)
        max_concurrency = image_config.max_concurrency

    if not model:
        model = resolve_model(ctx.get_secret("IMAGE_MODEL"), IMAGE_MODEL_REGISTRY) or DEFAULT_IMAGE_MODEL
    if max_concurrency is None:
        max_concurrency = resolve_concurrency(ctx.get_secret("IMAGE_MAX_CONCURRENCY"))

    return {
        "image_model": model,
        "max_concurrency": max_concurrency,
    }


def create_client(
    ctx: StudioContext,
    llm_config: Optional[LLMConfig] = None,
    image_config: Optional[ImageConfig] = None,
) -> GeminiClient:
    """Create a GeminiClient from context secrets and optional overrides."""
    config = get_llm_config(ctx, llm_config)
    images = get_image_config(ctx, image_config)
    return GeminiClient(
        api_key=config["google_api_key"],
        model=config["model"],
        image_model=images["image_model"],
        temperature=config["temperature"],
        base_url=config["base_url"],
        timeout=config["timeout"],
    )


async def call_llm_structured(
    client: GeminiClient,
    prompt: str,
    shape: Shape,
    response_model: Type[T],
) -> T:
    """
    Call the model once with the shape as responseSchema and decode the reply.

    Raises:
        TransportError: provider unreachable or error status
        MalformedResponseError: reply not parseable into response_model
    """
    raw = await client.generate_structured(prompt, shape.to_response_schema())
    return decode(raw, shape, response_model)
