import asyncio

import pytest

from studio_nodes.llm import create_client, get_image_config, get_llm_config
from studio_nodes.pipeline import generate_video_script
from studio_nodes.schemas import ImageConfig, LLMConfig, VideoScriptRequest
from studio_shared.context import StudioContext
from studio_shared.errors import TransportError
from studio_shared.gemini_client import DEFAULT_BASE_URL, DEFAULT_IMAGE_MODEL, DEFAULT_TEXT_MODEL


def test_defaults(ctx):
    config = get_llm_config(ctx)

    assert config["model"] == DEFAULT_TEXT_MODEL
    assert config["temperature"] is None
    assert config["google_api_key"] == "test-key"
    assert config["base_url"] == DEFAULT_BASE_URL
    assert get_image_config(ctx) == {"image_model": DEFAULT_IMAGE_MODEL, "max_concurrency": 4}


def test_environment_overrides_defaults(ctx, monkeypatch):
    monkeypatch.setenv("LLM_MODEL", "Gemini 2.5 Pro")
    monkeypatch.setenv("LLM_TEMPERATURE", "0.7")
    monkeypatch.setenv("IMAGE_MODEL", "Nano Banana Pro")
    monkeypatch.setenv("IMAGE_MAX_CONCURRENCY", "2")

    config = get_llm_config(ctx)
    images = get_image_config(ctx)

    assert config["model"] == "gemini-2.5-pro"
    assert config["temperature"] == 0.7
    assert images == {"image_model": "gemini-3-pro-image-preview", "max_concurrency": 2}


def test_params_override_environment(ctx, monkeypatch):
    monkeypatch.setenv("LLM_MODEL", "gemini-2.5-pro")
    monkeypatch.setenv("LLM_TEMPERATURE", "0.7")

    config = get_llm_config(ctx, LLMConfig(model="Gemini 2.5 Flash Lite", temperature=0))
    images = get_image_config(ctx, ImageConfig(model="custom-image-model", max_concurrency=6))

    assert config["model"] == "gemini-2.5-flash-lite"
    assert config["temperature"] == 0
    assert images == {"image_model": "custom-image-model", "max_concurrency": 6}


def test_invalid_temperature_falls_back_to_provider_default(ctx, monkeypatch):
    monkeypatch.setenv("LLM_TEMPERATURE", "warm")
    assert get_llm_config(ctx)["temperature"] is None


def test_gemini_api_key_alias(profile_store, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "alias-key")
    ctx = StudioContext(profile_store=profile_store)

    client = create_client(ctx)

    assert client.api_key == "alias-key"
    assert client.model == DEFAULT_TEXT_MODEL


def test_missing_key_is_a_transport_error_at_call_time(profile_store):
    ctx = StudioContext(profile_store=profile_store)

    with pytest.raises(TransportError, match="GOOGLE_API_KEY"):
        asyncio.run(generate_video_script(ctx, VideoScriptRequest(topic="Thừa kế")))


@pytest.mark.parametrize("raw", ["5", "-1", "2.01"])
def test_out_of_range_temperature_is_ignored(ctx, monkeypatch, raw):
    monkeypatch.setenv("LLM_TEMPERATURE", raw)
    assert get_llm_config(ctx)["temperature"] is None


def test_temperature_range_bounds_are_inclusive(ctx, monkeypatch):
    monkeypatch.setenv("LLM_TEMPERATURE", "2")
    assert get_llm_config(ctx)["temperature"] == 2.0
    monkeypatch.setenv("LLM_TEMPERATURE", "0")
    assert get_llm_config(ctx)["temperature"] == 0.0
