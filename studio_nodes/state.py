"""
Read/write nodes for the process-wide state held by the context.

The UI calls these instead of reaching into the registry or the store.
"""
from typing import Optional

from studio_shared.context import StudioContext
from studio_shared.models import StyleProfile

from .schemas import ContentAtom


# =============================================================================
# CONTENT HAND-OFF
# =============================================================================

def get_handoff(ctx: StudioContext) -> Optional[ContentAtom]:
    return ctx.handoff.get()


def set_handoff(ctx: StudioContext, atom: Optional[ContentAtom]) -> None:
    ctx.handoff.set(atom)


def clear_handoff(ctx: StudioContext) -> None:
    ctx.handoff.clear()


# =============================================================================
# STYLE PROFILE
# =============================================================================

def get_style_profile(ctx: StudioContext) -> StyleProfile:
    """Persisted profile, or the all-empty default when nothing usable is stored."""
    return ctx.profile_store.load()


def save_style_profile(ctx: StudioContext, profile: StyleProfile) -> None:
    ctx.profile_store.save(profile)


def clear_style_profile(ctx: StudioContext) -> None:
    ctx.profile_store.clear()
