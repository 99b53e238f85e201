"""
CLI entrypoint. Use from project root:
  python -m studio_nodes infographic --summary "..." [--slides 5] [--style vector] [--out result.json]
  python -m studio_nodes video --topic "..."
  python -m studio_nodes news --article-file article.txt [--then infographic|video]
  python -m studio_nodes profile show|set|clear
  python -m studio_nodes extract scan.png
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import structlog
from dotenv import load_dotenv
from pydantic import ValidationError

from studio_shared.context import StudioContext, create_context
from studio_shared.errors import ContentStudioError, InvalidRequestError
from studio_shared.ingestion import extract_text_from_file

from .llm import create_client
from .pipeline import (
    generate_infographic,
    generate_infographic_from_handoff,
    generate_news_analysis,
    generate_video_script,
    generate_video_script_from_handoff,
)
from .reports import infographic_to_json, render_news_analysis_text, render_video_script_text
from .schemas import (
    MAX_SLIDES,
    MIN_SLIDES,
    ImageStyle,
    InfographicRequest,
    NewsAnalysisRequest,
    VideoScriptRequest,
)
from .state import clear_style_profile, get_style_profile, save_style_profile

LOG_LEVELS = ["debug", "info", "warning", "error"]


def configure_logging(level: str) -> None:
    """Send structlog output to stderr so stdout stays clean for results."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _read_text(value: Optional[str], path: Optional[str]) -> str:
    if path:
        return Path(path).read_text(encoding="utf-8")
    return value or ""


def _build_request(model, **fields):
    """Construct a request model, reporting field errors as InvalidRequestError."""
    try:
        return model(**fields)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise InvalidRequestError(f"Invalid request: {problems}") from e


def _write_output(text: str, out: Optional[str]) -> None:
    if out:
        Path(out).write_text(text, encoding="utf-8")
        print(f"Wrote {out}", file=sys.stderr)
    else:
        print(text)


def _print_progress(pct: int, message: str) -> None:
    print(f"[{pct:3d}%] {message}", file=sys.stderr)


# =============================================================================
# COMMANDS
# =============================================================================

async def _run_infographic(ctx: StudioContext, args) -> None:
    request = _build_request(
        InfographicRequest,
        case_summary=_read_text(args.summary, args.summary_file),
        case_analysis=_read_text(args.analysis, args.analysis_file),
        slide_count=args.slides,
        image_style=args.style,
    )
    result = await generate_infographic(ctx, request)
    _write_output(json.dumps(infographic_to_json(result), ensure_ascii=False, indent=2), args.out)


async def _run_video(ctx: StudioContext, args) -> None:
    request = _build_request(VideoScriptRequest, topic=args.topic)
    script = await generate_video_script(ctx, request)
    print(render_video_script_text(script))


async def _run_news(ctx: StudioContext, args) -> None:
    request = _build_request(
        NewsAnalysisRequest,
        article_text=_read_text(args.article, args.article_file),
    )
    analysis = await generate_news_analysis(ctx, request)
    print(render_news_analysis_text(analysis))

    if args.then == "infographic":
        _, result = await generate_infographic_from_handoff(ctx)
        _write_output(json.dumps(infographic_to_json(result), ensure_ascii=False, indent=2), args.out)
    elif args.then == "video":
        _, script = await generate_video_script_from_handoff(ctx)
        print()
        print(render_video_script_text(script))


def _run_profile(ctx: StudioContext, args) -> None:
    if args.action == "set":
        current = get_style_profile(ctx)
        updates = {
            "voice_description": args.voice,
            "target_audience": args.audience,
            "custom_instructions": args.instructions,
        }
        profile = current.model_copy(update={k: v for k, v in updates.items() if v is not None})
        save_style_profile(ctx, profile)
    elif args.action == "clear":
        clear_style_profile(ctx)

    profile = get_style_profile(ctx)
    print(json.dumps(profile.model_dump(by_alias=True), ensure_ascii=False, indent=2))


async def _run_extract(ctx: StudioContext, args) -> None:
    async with create_client(ctx) as client:
        text = await extract_text_from_file(client, args.path, args.mime_type)
    print(text)


# =============================================================================
# ENTRYPOINT
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="studio_nodes",
        description="Generate legal social media content with Gemini",
    )
    parser.add_argument(
        "--log-level",
        type=str.lower,
        choices=LOG_LEVELS,
        default="warning",
        help="structlog level (default: warning)",
    )
    parser.add_argument("--store", help="Path of the local key-value store file")
    sub = parser.add_subparsers(dest="command", required=True)

    info = sub.add_parser("infographic", help="Case text -> infographic carousel (JSON)")
    summary = info.add_mutually_exclusive_group(required=True)
    summary.add_argument("--summary", help="Case summary text")
    summary.add_argument("--summary-file", help="File holding the case summary")
    info.add_argument("--analysis", help="Legal analysis text")
    info.add_argument("--analysis-file", help="File holding the legal analysis")
    info.add_argument(
        "--slides",
        type=int,
        default=5,
        help=f"Number of slides ({MIN_SLIDES}-{MAX_SLIDES}, default 5)",
    )
    info.add_argument(
        "--style",
        choices=[style.value for style in ImageStyle],
        default=ImageStyle.DEFAULT.value,
        help="Illustration style",
    )
    info.add_argument("--out", help="Write JSON here instead of stdout")

    video = sub.add_parser("video", help="Topic -> short video script")
    video.add_argument("--topic", required=True, help="Video topic")

    news = sub.add_parser("news", help="Article -> summary and talking points")
    article = news.add_mutually_exclusive_group(required=True)
    article.add_argument("--article", help="Article text")
    article.add_argument("--article-file", help="File holding the article")
    news.add_argument(
        "--then",
        choices=["infographic", "video"],
        help="Reuse the analysis right away for another tool",
    )
    news.add_argument("--out", help="With --then infographic: write JSON here")

    profile = sub.add_parser("profile", help="Show or edit the personal style profile")
    profile.add_argument("action", choices=["show", "set", "clear"])
    profile.add_argument("--voice", help="Voice and writing style")
    profile.add_argument("--audience", help="Target audience")
    profile.add_argument("--instructions", help="Additional instructions")

    extract = sub.add_parser("extract", help="Print the text of a JPEG, PNG or PDF file")
    extract.add_argument("path")
    extract.add_argument("--mime-type", help="Override the type guessed from the file name")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    ctx = create_context(store_path=args.store, on_progress=_print_progress)

    try:
        if args.command == "profile":
            _run_profile(ctx, args)
        elif args.command == "infographic":
            asyncio.run(_run_infographic(ctx, args))
        elif args.command == "video":
            asyncio.run(_run_video(ctx, args))
        elif args.command == "news":
            asyncio.run(_run_news(ctx, args))
        elif args.command == "extract":
            asyncio.run(_run_extract(ctx, args))
    except ContentStudioError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
