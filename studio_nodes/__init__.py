"""
Node functions for the Legal Content Studio.

This package contains the generation nodes and the state nodes the UI calls.
"""

from .pipeline import (
    # Infographic pipeline
    PipelineState,
    InfographicPipeline,
    generate_infographic,
    # Single-step nodes
    generate_video_script,
    generate_news_analysis,
    # Hand-off nodes
    infographic_request_from_atom,
    video_script_request_from_atom,
    generate_infographic_from_handoff,
    generate_video_script_from_handoff,
)

from .state import (
    get_handoff,
    set_handoff,
    clear_handoff,
    get_style_profile,
    save_style_profile,
    clear_style_profile,
)

from .prompts import (
    build_preamble,
    build_infographic_prompt,
    build_video_script_prompt,
    build_news_analysis_prompt,
)

from .decoder import (
    decode,
    strip_code_fences,
)

from .reports import (
    render_video_script_text,
    render_news_analysis_text,
    infographic_to_json,
)
