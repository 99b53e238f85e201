"""
Execution context passed to every generation node.

The context owns the process-wide state (style profile store and content
hand-off registry), resolves secrets, and records what each invocation
reports so the UI or CLI can follow an invocation while it runs.
"""
import os
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import structlog

from .handoff import ContentHandoffRegistry
from .models import StyleProfile
from .profile_store import LocalKeyValueStore, StyleProfileStore

logger = structlog.get_logger()

ProgressCallback = Callable[[int, str], None]


class StudioContext:
    """
    Created once at application start and shared by reference.

    Usage:
        ctx = create_context()
        result = await generate_infographic(ctx, request)
    """

    def __init__(
        self,
        profile_store: StyleProfileStore,
        handoff: Optional[ContentHandoffRegistry] = None,
        secrets: Optional[Mapping[str, str]] = None,
        on_progress: Optional[ProgressCallback] = None,
    ):
        self.profile_store = profile_store
        self.handoff = handoff or ContentHandoffRegistry()
        self._secrets = dict(secrets or {})
        self._on_progress = on_progress

        self.inputs: List[Dict[str, Any]] = []
        self.outputs: List[Dict[str, Any]] = []
        self.progress: List[Tuple[int, str]] = []

    def get_secret(self, key: str) -> Optional[str]:
        """Explicit secrets first, then the environment. Empty values count as unset."""
        value = self._secrets.get(key)
        if value:
            return value
        return os.environ.get(key) or None

    @property
    def style_profile(self) -> StyleProfile:
        """Current profile, read from the store on every access."""
        return self.profile_store.load()

    def report_input(self, data: Dict[str, Any]) -> None:
        self.inputs.append(data)
        logger.info("node_input", **data)

    def report_output(self, data: Dict[str, Any]) -> None:
        self.outputs.append(data)
        logger.info("node_output", **data)

    def report_progress(self, pct: int, message: str) -> None:
        self.progress.append((pct, message))
        logger.info("node_progress", pct=pct, message=message)
        if self._on_progress is not None:
            self._on_progress(pct, message)


def create_context(
    store_path: Optional[str] = None,
    secrets: Optional[Mapping[str, str]] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> StudioContext:
    """Build a context with a file-backed profile store and an empty hand-off slot."""
    profile_store = StyleProfileStore(LocalKeyValueStore(store_path))
    return StudioContext(
        profile_store=profile_store,
        handoff=ContentHandoffRegistry(),
        secrets=secrets,
        on_progress=on_progress,
    )
