import base64
import json

from conftest import infographic_payload, news_payload, video_payload
from studio_nodes.reports import (
    infographic_to_json,
    render_news_analysis_text,
    render_video_script_text,
)
from studio_nodes.schemas import InfographicResult, NewsAnalysisResult, VideoScriptResult


def test_render_video_script_text():
    script = VideoScriptResult.model_validate(video_payload(3))

    text = render_video_script_text(script)

    assert text.startswith("**Hook:**\nBạn có biết?")
    assert "Scene 2:\n- Dialogue: Dialogue 2\n- Visual: Visual 2" in text
    assert text.endswith("**Call to action:**\nTheo dõi để biết thêm!")


def test_render_news_analysis_text():
    analysis = NewsAnalysisResult.model_validate(news_payload(2))

    text = render_news_analysis_text(analysis)

    assert text.startswith(f"**Suggested title:**\n{analysis.suggested_title}")
    assert f"**Summary:**\n{analysis.summary}" in text
    assert "- Góc nhìn 2:\n  Giải thích chi tiết số 2 về tác động pháp lý." in text


def test_infographic_to_json_encodes_images():
    result = InfographicResult.model_validate(infographic_payload(3))
    slides = [
        slide.model_copy(update={"rendered_image": b"\x89PNG" if i else None})
        for i, slide in enumerate(result.slides)
    ]
    result = result.model_copy(update={"slides": slides})

    data = infographic_to_json(result)

    json.dumps(data)
    assert data["main_title"] == result.main_title
    assert data["slides"][0]["rendered_image"] is None
    assert base64.b64decode(data["slides"][1]["rendered_image"]) == b"\x89PNG"
    assert data["slides"][1]["icon_key"] == "Gavel"
