"""
Shared collaborators for the content studio nodes.
"""
from .context import StudioContext, create_context
from .errors import (
    ContentStudioError,
    DecompositionError,
    HandoffEmptyError,
    InvalidRequestError,
    MalformedResponseError,
    NoImageProducedError,
    TransportError,
    UnsupportedFileTypeError,
)
from .gemini_client import GeminiClient
from .handoff import ContentHandoffRegistry
from .models import StyleProfile
from .profile_store import LocalKeyValueStore, StyleProfileStore

__all__ = [
    "StudioContext",
    "create_context",
    "ContentStudioError",
    "DecompositionError",
    "HandoffEmptyError",
    "InvalidRequestError",
    "MalformedResponseError",
    "NoImageProducedError",
    "TransportError",
    "UnsupportedFileTypeError",
    "GeminiClient",
    "ContentHandoffRegistry",
    "StyleProfile",
    "LocalKeyValueStore",
    "StyleProfileStore",
]
