"""
Pydantic schemas for node inputs and outputs.

Requests are the three generation kinds (a tagged union on `kind`);
results are frozen once the core produces them. Result fields accept the
camelCase names the model is asked to emit (e.g. `points`, `facebookPost`)
as aliases of the snake_case attributes.
"""
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from studio_shared.models import StyleProfile


# =============================================================================
# MODEL REGISTRY
# =============================================================================
# Maps user-friendly model names to the Gemini API model ID

TEXT_MODEL_REGISTRY: Dict[str, str] = {
    "Gemini 2.5 Pro": "gemini-2.5-pro",
    "Gemini 2.5 Flash": "gemini-2.5-flash",
    "Gemini 2.5 Flash Lite": "gemini-2.5-flash-lite",
}

IMAGE_MODEL_REGISTRY: Dict[str, str] = {
    "Nano Banana": "gemini-2.5-flash-image",
    "Nano Banana Pro": "gemini-3-pro-image-preview",
}


def resolve_model(model_name: Optional[str], registry: Dict[str, str]) -> Optional[str]:
    """
    Resolve a friendly model name to its API model ID.

    Unknown names are assumed to already be API model IDs.
    """
    if not model_name:
        return None
    return registry.get(model_name, model_name)


# =============================================================================
# CONFIGURATION
# =============================================================================

class LLMConfig(BaseModel):
    """
    Text-generation overrides for a single call.

    Resolution order (first non-None wins):
    1. This object
    2. Environment variables (LLM_MODEL, LLM_TEMPERATURE)
    3. Defaults (gemini-2.5-flash, provider temperature)
    """
    model: Optional[str] = Field(
        default=None,
        description="Model to use (e.g., 'Gemini 2.5 Flash' or 'gemini-2.5-flash')"
    )
    temperature: Optional[float] = Field(
        default=None,
        ge=0,
        le=2,
        description="Sampling temperature (0=deterministic, 2=max creativity)"
    )


class ImageConfig(BaseModel):
    """Image-generation overrides for a single call."""
    model: Optional[str] = Field(
        default=None,
        description="Image model (e.g., 'Nano Banana' or 'gemini-2.5-flash-image')"
    )
    max_concurrency: Optional[int] = Field(
        default=None,
        ge=1,
        description="Max simultaneous image requests for one infographic"
    )


# =============================================================================
# ENUMS
# =============================================================================

class ImageStyle(str, Enum):
    DEFAULT = "default"
    VECTOR = "vector"
    CLAY = "clay"
    WATERCOLOR = "watercolor"


class IconKey(str, Enum):
    GAVEL = "Gavel"
    SCALES_OF_JUSTICE = "ScalesOfJustice"
    BOOK = "Book"
    DOCUMENT = "Document"
    HANDSHAKE = "Handshake"


# =============================================================================
# REQUESTS
# =============================================================================

MIN_SLIDES = 3
MAX_SLIDES = 10
HANDOFF_SLIDE_COUNT = 5


class InfographicRequest(BaseModel):
    """Input for generate_infographic."""
    kind: Literal["infographic"] = "infographic"
    case_summary: str = Field(description="Case summary text (required)")
    case_analysis: str = Field(default="", description="Optional legal analysis text")
    slide_count: int = Field(default=5, ge=MIN_SLIDES, le=MAX_SLIDES)
    image_style: ImageStyle = ImageStyle.DEFAULT


class VideoScriptRequest(BaseModel):
    """Input for generate_video_script."""
    kind: Literal["video_script"] = "video_script"
    topic: str


class NewsAnalysisRequest(BaseModel):
    """Input for generate_news_analysis."""
    kind: Literal["news_analysis"] = "news_analysis"
    article_text: str


GenerationRequest = Annotated[
    Union[InfographicRequest, VideoScriptRequest, NewsAnalysisRequest],
    Field(discriminator="kind"),
]


# =============================================================================
# RESULTS
# =============================================================================

class _Result(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Slide(_Result):
    """One carousel slide. rendered_image is filled after text generation."""
    title: str
    bullet_points: List[str] = Field(alias="points")
    image_prompt: str = Field(alias="imagePrompt")
    icon_key: IconKey = Field(alias="iconSuggestion")
    rendered_image: Optional[bytes] = None


class InfographicResult(_Result):
    main_title: str = Field(alias="mainTitle")
    slides: List[Slide]
    keywords: List[str] = Field(default_factory=list)
    social_post: str = Field(alias="facebookPost")


class Scene(_Result):
    scene_number: int = Field(alias="scene", ge=1)
    dialogue: str
    visual_suggestion: str = Field(alias="visualSuggestion")


class VideoScriptResult(_Result):
    hook: str
    scenes: List[Scene]
    call_to_action: str = Field(alias="cta")


class TalkingPoint(_Result):
    point: str
    elaboration: str


class NewsAnalysisResult(_Result):
    suggested_title: str = Field(alias="suggestedTitle")
    summary: str
    talking_points: List[TalkingPoint] = Field(alias="talkingPoints")


class ContentAtom(_Result):
    """A finished news analysis waiting to seed another tool."""
    source_text: str
    analysis: NewsAnalysisResult


__all__ = [
    "StyleProfile",
    "LLMConfig",
    "ImageConfig",
    "ImageStyle",
    "IconKey",
    "InfographicRequest",
    "VideoScriptRequest",
    "NewsAnalysisRequest",
    "GenerationRequest",
    "Slide",
    "InfographicResult",
    "Scene",
    "VideoScriptResult",
    "TalkingPoint",
    "NewsAnalysisResult",
    "ContentAtom",
]
