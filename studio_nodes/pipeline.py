"""
Generation nodes for the content studio.

- generate_infographic: validate -> decompose text -> fan out slide images -> assemble
- generate_video_script: single structured call
- generate_news_analysis: single structured call, publishes a hand-off atom
- generate_*_from_handoff: consume the pending analysis and run another tool on it

Every node takes the StudioContext first and raises a ContentStudioError
subclass on failure. Nothing here retries: a failed invocation is abandoned
and the caller starts it again from scratch.
"""
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator, List, Optional, Tuple

import structlog

from studio_shared.context import StudioContext
from studio_shared.errors import (
    DecompositionError,
    HandoffEmptyError,
    InvalidRequestError,
    MalformedResponseError,
)
from studio_shared.gemini_client import GeminiClient

from .decoder import decode
from .llm import call_llm_structured, create_client, get_image_config
from .prompts import (
    build_infographic_prompt,
    build_news_analysis_prompt,
    build_video_script_prompt,
    compose_case_text,
)
from .schemas import (
    HANDOFF_SLIDE_COUNT,
    MAX_SLIDES,
    MIN_SLIDES,
    ContentAtom,
    ImageConfig,
    ImageStyle,
    InfographicRequest,
    InfographicResult,
    LLMConfig,
    NewsAnalysisRequest,
    NewsAnalysisResult,
    VideoScriptRequest,
    VideoScriptResult,
)
from .shapes import cardinality_problems
from .utils import gather_in_order, is_blank

logger = structlog.get_logger()


@asynccontextmanager
async def _client_scope(
    ctx: StudioContext,
    client: Optional[GeminiClient],
    llm_config: Optional[LLMConfig] = None,
    image_config: Optional[ImageConfig] = None,
) -> AsyncIterator[GeminiClient]:
    """Use the caller's client, or create one for this invocation and close it afterwards."""
    if client is not None:
        yield client
        return
    owned = create_client(ctx, llm_config, image_config)
    try:
        yield owned
    finally:
        await owned.close()


def _raise_on_cardinality(result, shape, raw_text: str = "") -> None:
    problems = cardinality_problems(result.model_dump(by_alias=True), shape)
    if problems:
        logger.error("llm_cardinality_mismatch", problems=problems)
        raise MalformedResponseError(
            f"AI response has the wrong number of items: {'; '.join(problems)}",
            raw_text=raw_text,
            problems=problems,
        )


def _report_failure(ctx: StudioContext, node: str, error: Exception) -> None:
    logger.error(f"{node}_failed", error_type=type(error).__name__, error=str(error))
    ctx.report_output({"status": "error", "error": str(error)})


# =============================================================================
# INFOGRAPHIC PIPELINE
# =============================================================================

class PipelineState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    DECOMPOSING_TEXT = "decomposing_text"
    GENERATING_IMAGES = "generating_images"
    ASSEMBLED = "assembled"
    ERRORED = "errored"


class InfographicPipeline:
    """
    One infographic invocation.

    States: IDLE -> VALIDATING -> DECOMPOSING_TEXT -> GENERATING_IMAGES -> ASSEMBLED,
    with ERRORED reachable from any step. Decomposition finishes before any
    image request starts (image prompts come from its output).

    Image fan-out is all-or-nothing: the first failing image cancels the
    requests still in flight and fails the invocation with that error.
    Successful images from the same run are discarded.
    """

    def __init__(
        self,
        ctx: StudioContext,
        client: GeminiClient,
        max_concurrency: int,
    ):
        self.ctx = ctx
        self.client = client
        self.max_concurrency = max_concurrency
        self.state = PipelineState.IDLE
        self.history: List[PipelineState] = [PipelineState.IDLE]
        self.error: Optional[Exception] = None

    def _transition(self, state: PipelineState) -> None:
        logger.info("infographic_state", from_state=self.state.value, to_state=state.value)
        self.state = state
        self.history.append(state)

    async def run(self, request: InfographicRequest) -> InfographicResult:
        try:
            self._transition(PipelineState.VALIDATING)
            self._validate(request)

            self._transition(PipelineState.DECOMPOSING_TEXT)
            base = await self._decompose(request)

            self._transition(PipelineState.GENERATING_IMAGES)
            images = await self._generate_images(base, request.image_style)

            result = self._assemble(base, images)
            self._transition(PipelineState.ASSEMBLED)
        except Exception as e:
            self.error = e
            self._transition(PipelineState.ERRORED)
            _report_failure(self.ctx, "infographic", e)
            raise

        self.ctx.report_progress(100, "Infographic ready")
        self.ctx.report_output({
            "status": "success",
            "main_title": result.main_title,
            "slide_count": len(result.slides),
            "keywords": result.keywords,
        })
        return result

    def _validate(self, request: InfographicRequest) -> None:
        self.ctx.report_progress(5, "Checking input...")
        if is_blank(request.case_summary):
            raise InvalidRequestError(
                "Content must not be empty. Please type it in or upload a file."
            )
        if not MIN_SLIDES <= request.slide_count <= MAX_SLIDES:
            raise InvalidRequestError(
                f"Slide count must be between {MIN_SLIDES} and {MAX_SLIDES}, got {request.slide_count}"
            )

    async def _decompose(self, request: InfographicRequest) -> InfographicResult:
        self.ctx.report_progress(15, "Analyzing and splitting content using your brand profile...")

        text = compose_case_text(request.case_summary, request.case_analysis)
        prompt, shape = build_infographic_prompt(text, request.slide_count, self.ctx.style_profile)

        raw = await self.client.generate_structured(prompt, shape.to_response_schema())
        base = decode(raw, shape, InfographicResult)

        if not base.slides:
            logger.error("infographic_no_slides", response_preview=raw[:200])
            raise DecompositionError(
                "AI could not break the content into slides. Please try again with more detailed text.",
                raw_text=raw,
            )
        if len(base.slides) != request.slide_count:
            raise MalformedResponseError(
                f"AI returned {len(base.slides)} slides, expected exactly {request.slide_count}",
                raw_text=raw,
                problems=[f"$.slides: expected exactly {request.slide_count} items, got {len(base.slides)}"],
            )
        _raise_on_cardinality(base, shape, raw)

        logger.info("infographic_decomposed", slide_count=len(base.slides), main_title=base.main_title)
        return base

    async def _generate_images(self, base: InfographicResult, style: ImageStyle) -> List[bytes]:
        total = len(base.slides)
        completed = 0
        self.ctx.report_progress(40, f"Generating {total} illustrations...")

        def image_done(index: int) -> None:
            nonlocal completed
            completed += 1
            pct = int(40 + (completed / total * 55))  # 40-95%
            self.ctx.report_progress(pct, f"Image {completed}/{total} done")
            logger.info("slide_image_generated", slide_index=index, completed=completed, total=total)

        factories = [
            (lambda prompt=slide.image_prompt: self.client.generate_image(prompt, style.value))
            for slide in base.slides
        ]
        return await gather_in_order(factories, self.max_concurrency, on_done=image_done)

    def _assemble(self, base: InfographicResult, images: List[bytes]) -> InfographicResult:
        slides = [
            slide.model_copy(update={"rendered_image": image})
            for slide, image in zip(base.slides, images)
        ]
        return base.model_copy(update={"slides": slides})


async def generate_infographic(
    ctx: StudioContext,
    request: InfographicRequest,
    client: Optional[GeminiClient] = None,
    llm_config: Optional[LLMConfig] = None,
    image_config: Optional[ImageConfig] = None,
) -> InfographicResult:
    """
    Generate a complete infographic: slide text plus one illustration per slide.

    Returns a fully assembled result or raises; never a partial one.
    """
    max_concurrency = get_image_config(ctx, image_config)["max_concurrency"]

    ctx.report_input({
        "kind": request.kind,
        "summary_len": len(request.case_summary or ""),
        "analysis_len": len(request.case_analysis or ""),
        "slide_count": request.slide_count,
        "image_style": request.image_style.value,
        "max_concurrency": max_concurrency,
    })

    async with _client_scope(ctx, client, llm_config, image_config) as active_client:
        pipeline = InfographicPipeline(ctx, active_client, max_concurrency)
        return await pipeline.run(request)


# =============================================================================
# SINGLE-STEP NODES
# =============================================================================

def _check_scene_numbers(script: VideoScriptResult) -> None:
    numbers = [scene.scene_number for scene in script.scenes]
    expected = list(range(1, len(numbers) + 1))
    if numbers != expected:
        raise MalformedResponseError(
            f"Scene numbers must run contiguously from 1, got {numbers}",
            problems=[f"$.scenes: expected scene numbers {expected}, got {numbers}"],
        )


async def generate_video_script(
    ctx: StudioContext,
    request: VideoScriptRequest,
    client: Optional[GeminiClient] = None,
    llm_config: Optional[LLMConfig] = None,
) -> VideoScriptResult:
    """Generate a 30-60 second short-video script for a topic."""
    ctx.report_input({"kind": request.kind, "topic": request.topic[:200]})

    try:
        if is_blank(request.topic):
            raise InvalidRequestError("Topic must not be empty.")

        prompt, shape = build_video_script_prompt(request.topic, ctx.style_profile)

        async with _client_scope(ctx, client, llm_config) as active_client:
            script = await call_llm_structured(active_client, prompt, shape, VideoScriptResult)

        _raise_on_cardinality(script, shape)
        _check_scene_numbers(script)
    except Exception as e:
        _report_failure(ctx, "video_script", e)
        raise

    ctx.report_output({
        "status": "success",
        "scene_count": len(script.scenes),
        "hook_preview": script.hook[:100],
    })
    return script


async def generate_news_analysis(
    ctx: StudioContext,
    request: NewsAnalysisRequest,
    client: Optional[GeminiClient] = None,
    llm_config: Optional[LLMConfig] = None,
) -> NewsAnalysisResult:
    """
    Summarize an article and propose talking points.

    A new analysis drops any pending hand-off atom before calling the model;
    on success the result is published as the new atom.
    """
    ctx.report_input({"kind": request.kind, "article_len": len(request.article_text or "")})

    try:
        if is_blank(request.article_text):
            raise InvalidRequestError("Article text must not be empty.")

        ctx.handoff.clear()
        prompt, shape = build_news_analysis_prompt(request.article_text, ctx.style_profile)

        async with _client_scope(ctx, client, llm_config) as active_client:
            analysis = await call_llm_structured(active_client, prompt, shape, NewsAnalysisResult)

        _raise_on_cardinality(analysis, shape)
    except Exception as e:
        _report_failure(ctx, "news_analysis", e)
        raise

    ctx.handoff.set(ContentAtom(source_text=request.article_text, analysis=analysis))
    ctx.report_output({
        "status": "success",
        "suggested_title": analysis.suggested_title,
        "talking_point_count": len(analysis.talking_points),
    })
    return analysis


# =============================================================================
# HAND-OFF NODES
# =============================================================================

def infographic_request_from_atom(atom: ContentAtom) -> InfographicRequest:
    """Summary followed by bulleted talking points, 5 slides, default style."""
    talking_points = "\n\n".join(
        f"* {tp.point}:\n{tp.elaboration}" for tp in atom.analysis.talking_points
    )
    return InfographicRequest(
        case_summary=f"{atom.analysis.summary}\n\n{talking_points}",
        slide_count=HANDOFF_SLIDE_COUNT,
        image_style=ImageStyle.DEFAULT,
    )


def video_script_request_from_atom(atom: ContentAtom) -> VideoScriptRequest:
    return VideoScriptRequest(topic=atom.analysis.suggested_title)


def _consume_atom(ctx: StudioContext) -> ContentAtom:
    if not ctx.handoff.has_pending:
        raise HandoffEmptyError("No analysis is waiting to be reused. Run a news analysis first.")
    return ctx.handoff.consume()


async def generate_infographic_from_handoff(
    ctx: StudioContext,
    client: Optional[GeminiClient] = None,
    llm_config: Optional[LLMConfig] = None,
    image_config: Optional[ImageConfig] = None,
) -> Tuple[InfographicRequest, InfographicResult]:
    """
    Turn the pending analysis into an infographic.

    The hand-off slot is cleared as soon as the atom is read, so it stays
    empty even if the generation below fails.
    """
    request = infographic_request_from_atom(_consume_atom(ctx))
    result = await generate_infographic(ctx, request, client, llm_config, image_config)
    return request, result


async def generate_video_script_from_handoff(
    ctx: StudioContext,
    client: Optional[GeminiClient] = None,
    llm_config: Optional[LLMConfig] = None,
) -> Tuple[VideoScriptRequest, VideoScriptResult]:
    """Use the pending analysis' suggested title as the video topic."""
    request = video_script_request_from_atom(_consume_atom(ctx))
    result = await generate_video_script(ctx, request, client, llm_config)
    return request, result
