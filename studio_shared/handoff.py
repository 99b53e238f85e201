"""
Content hand-off registry.

Holds at most one ContentAtom (the latest news analysis) so another tool can
pick it up and turn it into its own input. Last write wins; there is no
history and overwriting a pending atom drops it without warning.
"""
from typing import TYPE_CHECKING, Optional

import structlog

if TYPE_CHECKING:
    from studio_nodes.schemas import ContentAtom

logger = structlog.get_logger()


class ContentHandoffRegistry:
    """Single-slot holder for the latest ContentAtom."""

    def __init__(self):
        self._atom: Optional["ContentAtom"] = None

    def set(self, atom: Optional["ContentAtom"]) -> None:
        """Replace the slot. Passing None clears it."""
        if atom is not None and self._atom is not None:
            logger.debug("handoff_atom_replaced")
        self._atom = atom
        logger.info("handoff_set", has_atom=atom is not None)

    def get(self) -> Optional["ContentAtom"]:
        """Peek at the pending atom without consuming it."""
        return self._atom

    def clear(self) -> None:
        self.set(None)

    def consume(self) -> Optional["ContentAtom"]:
        """
        Read-then-clear.

        The slot is emptied as soon as the atom is read, whatever happens to
        the generation that uses it afterwards.
        """
        atom = self._atom
        self._atom = None
        if atom is not None:
            logger.info("handoff_consumed", source_len=len(atom.source_text))
        return atom

    @property
    def has_pending(self) -> bool:
        return self._atom is not None
