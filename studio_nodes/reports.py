"""
Plain-text renderings of generation results.

Used by the CLI to print a script or analysis the way a user would paste it
into a post editor.
"""
import base64
from typing import Any, Dict

from .schemas import InfographicResult, NewsAnalysisResult, VideoScriptResult


def render_video_script_text(script: VideoScriptResult) -> str:
    scenes = "\n\n".join(
        f"Scene {scene.scene_number}:\n"
        f"- Dialogue: {scene.dialogue}\n"
        f"- Visual: {scene.visual_suggestion}"
        for scene in script.scenes
    )
    return (
        f"**Hook:**\n{script.hook}\n\n"
        f"**Scenes:**\n{scenes}\n\n"
        f"**Call to action:**\n{script.call_to_action}"
    )


def render_news_analysis_text(analysis: NewsAnalysisResult) -> str:
    points = "\n\n".join(
        f"- {tp.point}:\n  {tp.elaboration}"
        for tp in analysis.talking_points
    )
    return (
        f"**Suggested title:**\n{analysis.suggested_title}\n\n"
        f"**Summary:**\n{analysis.summary}\n\n"
        f"**Talking points:**\n{points}"
    )


def infographic_to_json(result: InfographicResult) -> Dict[str, Any]:
    """JSON-safe dict of an infographic; slide images become base64 strings."""
    data = result.model_dump(mode="python", exclude={"slides"})
    data["slides"] = []
    for slide in result.slides:
        slide_data = slide.model_dump(mode="json", exclude={"rendered_image"})
        slide_data["rendered_image"] = (
            base64.b64encode(slide.rendered_image).decode("ascii")
            if slide.rendered_image is not None
            else None
        )
        data["slides"].append(slide_data)
    return data
