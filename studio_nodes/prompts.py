"""
Prompt templates and response shapes for the generation nodes.

All prompt constants are centralized here for easier maintenance and
iteration. The build_* functions are pure: they take domain input plus the
user's StyleProfile and return (prompt, shape). Input text is validated by
the nodes before it gets here.
"""
import json
from typing import Tuple

from studio_shared.models import StyleProfile

from .schemas import IconKey
from .shapes import Shape, arr, integer, obj, string


# =============================================================================
# STYLE PROFILE PREAMBLE
# =============================================================================

PREAMBLE_HEADER = (
    "Before you start, strictly follow the user's PERSONAL BRAND PROFILE "
    "so the content matches their voice:\n"
)
PREAMBLE_VOICE_LABEL = "Voice & style"
PREAMBLE_AUDIENCE_LABEL = "Target audience"
PREAMBLE_INSTRUCTIONS_LABEL = "Additional instructions"
PREAMBLE_SEPARATOR = "\n---\n\n"


def build_preamble(profile: StyleProfile) -> str:
    """
    Render the profile as a labeled block to prepend to every prompt.

    Only non-empty fields get a line. An empty profile yields "".
    """
    lines = [
        (PREAMBLE_VOICE_LABEL, profile.voice_description),
        (PREAMBLE_AUDIENCE_LABEL, profile.target_audience),
        (PREAMBLE_INSTRUCTIONS_LABEL, profile.custom_instructions),
    ]
    filled = [(label, value.strip()) for label, value in lines if value and value.strip()]
    if not filled:
        return ""

    preamble = PREAMBLE_HEADER
    for label, value in filled:
        preamble += f"- **{label}:** {value}\n"
    return preamble + PREAMBLE_SEPARATOR


def format_response_schema(shape: Shape) -> str:
    """OUTPUT FORMAT section body, rendered from the same shape sent to the provider."""
    schema = json.dumps(shape.to_response_schema(), indent=2, ensure_ascii=False)
    return f"Respond with JSON matching this schema:\n```json\n{schema}\n```"


# =============================================================================
# RESPONSE SHAPES
# =============================================================================

ICON_CHOICES = [icon.value for icon in IconKey]


def infographic_shape(slide_count: int) -> Shape:
    slide = obj({
        "title": string("Title for this slide (at most 7 words).", non_blank=True),
        "points": arr(
            string(non_blank=True),
            description="2-4 short key points for this slide.",
            min_items=2,
            max_items=4,
        ),
        "imagePrompt": string(
            "A detailed, visual prompt for an illustration that fits the legal content of this "
            "slide. Describe a concrete scene, never an abstract concept, and never ask for text "
            "in the image. Example: instead of 'symbol of justice', describe 'antique bronze "
            "scales of justice on a thick law book, light falling on the heavier pan'."
        ),
        "iconSuggestion": string(
            "The icon from the enum that best fits this slide.",
            enum=ICON_CHOICES,
        ),
    })
    return obj({
        "mainTitle": string("One overarching title for the whole carousel (at most 10 words)."),
        "slides": arr(
            slide,
            description=(
                f"Exactly {slide_count} slides in logical order, telling the case from "
                "beginning to end."
            ),
            min_items=slide_count,
            max_items=slide_count,
        ),
        "keywords": arr(string(), description="3-5 important legal keywords or phrases."),
        "facebookPost": string(
            "A complete social media post introducing the carousel: an engaging hook, a short "
            "summary of the issue, a call to action such as 'Swipe through the images for the "
            "details!', and 3-5 relevant hashtags."
        ),
    })


VIDEO_SCRIPT_SHAPE = obj({
    "hook": string(
        "A 3-5 second opening line that sparks curiosity or surprise to keep viewers watching."
    ),
    "scenes": arr(
        obj({
            "scene": integer("Scene number, starting at 1."),
            "dialogue": string("Short, direct dialogue for this scene (under 15 seconds)."),
            "visualSuggestion": string("Suggested action or visual for this shot."),
        }),
        description="3-4 scenes forming a complete video of roughly 30-60 seconds.",
        min_items=3,
        max_items=4,
    ),
    "cta": string(
        "A short call to action at the end of the video (e.g. 'Follow for more legal tips!')."
    ),
})


NEWS_ANALYSIS_SHAPE = obj({
    "suggestedTitle": string(
        "An engaging, professional title for a social media analysis post about this article."
    ),
    "summary": string("A concise summary (3-4 sentences) of the core of the article."),
    "talkingPoints": arr(
        obj({
            "point": string("An insightful angle, argument or analytical question."),
            "elaboration": string(
                "A short explanation (2-3 sentences) of this angle, highlighting its legal "
                "significance or impact."
            ),
        }),
        description="2-3 key analytical angles a legal professional can build a post on.",
        min_items=2,
        max_items=3,
    ),
})


# =============================================================================
# INFOGRAPHIC PROMPT
# =============================================================================

CASE_SUMMARY_HEADER = "CASE SUMMARY:"
CASE_ANALYSIS_HEADER = "LEGAL ANALYSIS:"

INFOGRAPHIC_PROMPT = """### ROLE
You are a professional legal assistant who turns complex legal texts into social media infographic carousels for legal professionals and interested readers.

### TASK
Analyze the text below carefully. It is split into "{summary_header}" and "{analysis_header}".

**Important:** For titles and key points, **prefer precise, specialist legal terminology**. Avoid oversimplified or popularized phrasing; the goal is to show expertise and depth.

1.  Split the whole content into **exactly {slide_count} parts (slides)**, logically and sequentially, telling the story from beginning to end (setup -> developments -> analysis -> outcome).
2.  For each slide, write a short title, 2-4 key points, an image-generation prompt describing a concrete visual scene (never request text inside the image), and an icon suggestion from the allowed list: {icon_choices}.
3.  Write one main title for the whole carousel.
4.  Write a complete social media post introducing the carousel.
5.  Write all text in the same language as the source text.

---

### DATA INPUTS

<source_text>
{text}
</source_text>

---

### OUTPUT FORMAT
{response_schema}"""


def compose_case_text(case_summary: str, case_analysis: str = "") -> str:
    """Join the two request fields into the labeled text the infographic prompt expects."""
    return (
        f"{CASE_SUMMARY_HEADER}\n{case_summary}\n\n"
        f"{CASE_ANALYSIS_HEADER}\n{case_analysis}"
    )


def build_infographic_prompt(
    text: str,
    slide_count: int,
    profile: StyleProfile,
) -> Tuple[str, Shape]:
    shape = infographic_shape(slide_count)
    prompt = build_preamble(profile) + INFOGRAPHIC_PROMPT.format(
        summary_header=CASE_SUMMARY_HEADER,
        analysis_header=CASE_ANALYSIS_HEADER,
        slide_count=slide_count,
        icon_choices=", ".join(ICON_CHOICES),
        text=text,
        response_schema=format_response_schema(shape),
    )
    return prompt, shape


# =============================================================================
# VIDEO SCRIPT PROMPT
# =============================================================================

VIDEO_SCRIPT_PROMPT = """### ROLE
You are a TikTok and Reels content creator specializing in law.

### TASK
Write a short video script (30-60 seconds) on the topic below:
1.  One hook that grabs attention in the first 3-5 seconds.
2.  3-4 scenes, each with dialogue and a visual suggestion.
3.  One call to action to close.

The script must be clearly structured and easy to follow for people without legal training. Focus on quick, practical value. Write in the same language as the topic.

---

### DATA INPUTS

<topic>
{topic}
</topic>

---

### OUTPUT FORMAT
{response_schema}"""


def build_video_script_prompt(topic: str, profile: StyleProfile) -> Tuple[str, Shape]:
    shape = VIDEO_SCRIPT_SHAPE
    prompt = build_preamble(profile) + VIDEO_SCRIPT_PROMPT.format(
        topic=topic,
        response_schema=format_response_schema(shape),
    )
    return prompt, shape


# =============================================================================
# NEWS ANALYSIS PROMPT
# =============================================================================

NEWS_ANALYSIS_PROMPT = """### ROLE
You are a seasoned legal analyst.

### TASK
Read and analyze the text below carefully, then provide:
1.  A summary of 3-4 sentences.
2.  2-3 in-depth angles or talking points that a lawyer could use to write an expert opinion post on social media. Give each one a short elaboration of its legal significance.
3.  A suggested title for that post.

The goal is to turn this news or legal text into valuable content that shows depth of knowledge. Write in the same language as the article.

---

### DATA INPUTS

<article>
{article}
</article>

---

### OUTPUT FORMAT
{response_schema}"""


def build_news_analysis_prompt(article: str, profile: StyleProfile) -> Tuple[str, Shape]:
    shape = NEWS_ANALYSIS_SHAPE
    prompt = build_preamble(profile) + NEWS_ANALYSIS_PROMPT.format(
        article=article,
        response_schema=format_response_schema(shape),
    )
    return prompt, shape
