from __future__ import annotations

import asyncio
import json
import socket
from typing import Any, Dict, List, Optional, Union

import pytest
import structlog

from studio_shared.context import StudioContext
from studio_shared.handoff import ContentHandoffRegistry
from studio_shared.profile_store import LocalKeyValueStore, StyleProfileStore


class NetworkBlockedError(RuntimeError):
    pass


def _blocked(*_args: Any, **_kwargs: Any) -> Any:
    raise NetworkBlockedError("Network access is disabled during tests.")


@pytest.fixture(autouse=True)
def _disable_network(monkeypatch: pytest.MonkeyPatch) -> None:
    """Prevent accidental outbound network calls in unit tests."""
    monkeypatch.setattr(socket, "create_connection", _blocked)
    monkeypatch.setattr(socket, "getaddrinfo", _blocked)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep a developer's local settings out of the tests."""
    for key in (
        "GOOGLE_API_KEY",
        "GEMINI_API_KEY",
        "LLM_MODEL",
        "LLM_TEMPERATURE",
        "IMAGE_MODEL",
        "IMAGE_MAX_CONCURRENCY",
        "GEMINI_BASE_URL",
        "GEMINI_TIMEOUT",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("STUDIO_DATA_DIR", str(tmp_path / "data"))


@pytest.fixture(autouse=True)
def _reset_logging():
    """The CLI configures structlog globally; undo it after each test."""
    yield
    structlog.reset_defaults()


# =============================================================================
# FAKE GENERATION CLIENT
# =============================================================================

class FakeClient:
    """
    Stands in for GeminiClient.

    - structured: responses returned by generate_structured, in call order
      (an Exception instance is raised instead of returned)
    - image_delays: seconds to sleep per image prompt before answering
    - image_errors: exception to raise per image prompt
    Images are b"img:<prompt>" unless overridden in `images`.
    """

    def __init__(
        self,
        structured: Optional[List[Union[str, Exception]]] = None,
        images: Optional[Dict[str, bytes]] = None,
        image_delays: Optional[Dict[str, float]] = None,
        image_errors: Optional[Dict[str, Exception]] = None,
    ):
        self.structured = list(structured or [])
        self.images = images or {}
        self.image_delays = image_delays or {}
        self.image_errors = image_errors or {}

        self.structured_calls: List[Dict[str, Any]] = []
        self.image_calls: List[Dict[str, Any]] = []
        self.image_completed: List[str] = []
        self.image_cancelled: List[str] = []
        self.active_images = 0
        self.max_active_images = 0
        self.closed = False

    async def generate_structured(self, prompt: str, response_schema: Optional[dict] = None) -> str:
        self.structured_calls.append({"prompt": prompt, "response_schema": response_schema})
        if not self.structured:
            raise AssertionError("FakeClient ran out of structured responses")
        response = self.structured.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def generate_image(self, prompt: str, style: str = "default") -> bytes:
        self.image_calls.append({"prompt": prompt, "style": style})
        self.active_images += 1
        self.max_active_images = max(self.max_active_images, self.active_images)
        try:
            await asyncio.sleep(self.image_delays.get(prompt, 0))
            if prompt in self.image_errors:
                raise self.image_errors[prompt]
            self.image_completed.append(prompt)
            return self.images.get(prompt, f"img:{prompt}".encode())
        except asyncio.CancelledError:
            self.image_cancelled.append(prompt)
            raise
        finally:
            self.active_images -= 1

    async def close(self) -> None:
        self.closed = True


# =============================================================================
# CANNED RESPONSES
# =============================================================================

def infographic_payload(slide_count: int = 3, points_per_slide: int = 3) -> Dict[str, Any]:
    return {
        "mainTitle": "Hợp đồng vô hiệu do giả tạo",
        "slides": [
            {
                "title": f"Slide {i + 1}",
                "points": [f"Point {i + 1}.{j + 1}" for j in range(points_per_slide)],
                "imagePrompt": f"p{i}",
                "iconSuggestion": "Gavel",
            }
            for i in range(slide_count)
        ],
        "keywords": ["hợp đồng", "vô hiệu", "giả tạo"],
        "facebookPost": "Vuốt qua các ảnh để xem chi tiết! #phapluat",
    }


def video_payload(scene_count: int = 3) -> Dict[str, Any]:
    return {
        "hook": "Bạn có biết?",
        "scenes": [
            {
                "scene": i + 1,
                "dialogue": f"Dialogue {i + 1}",
                "visualSuggestion": f"Visual {i + 1}",
            }
            for i in range(scene_count)
        ],
        "cta": "Theo dõi để biết thêm!",
    }


def news_payload(point_count: int = 2) -> Dict[str, Any]:
    return {
        "suggestedTitle": "Luật Đất đai 2024: những thay đổi then chốt",
        "summary": "Luật Đất đai mới có hiệu lực từ năm 2024 và thay đổi cách định giá đất.",
        "talkingPoints": [
            {
                "point": f"Góc nhìn {i + 1}",
                "elaboration": f"Giải thích chi tiết số {i + 1} về tác động pháp lý.",
            }
            for i in range(point_count)
        ],
    }


def as_json(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def kv_store(tmp_path) -> LocalKeyValueStore:
    return LocalKeyValueStore(tmp_path / "store" / "local_storage.json")


@pytest.fixture
def profile_store(kv_store) -> StyleProfileStore:
    return StyleProfileStore(kv_store)


@pytest.fixture
def ctx(profile_store) -> StudioContext:
    return StudioContext(
        profile_store=profile_store,
        handoff=ContentHandoffRegistry(),
        secrets={"GOOGLE_API_KEY": "test-key"},
    )
