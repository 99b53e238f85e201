"""
Error taxonomy for the content studio.

Every error raised by the generation core derives from ContentStudioError,
so callers (UI, CLI) can catch one type and show the message.
"""
from typing import List, Optional


class ContentStudioError(Exception):
    """Base class for all content studio errors."""


class InvalidRequestError(ContentStudioError):
    """Required input is empty or out of range. Raised before any network call."""


class HandoffEmptyError(InvalidRequestError):
    """A hand-off flow was triggered but no analysis is waiting in the registry."""


class TransportError(ContentStudioError):
    """Provider unreachable, misconfigured, or returned an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(ContentStudioError):
    """
    Model output could not be turned into the expected structure.

    Carries the raw response text for diagnostics and the list of
    problems found (missing fields, wrong types, wrong cardinality).
    """

    def __init__(
        self,
        message: str,
        raw_text: str = "",
        problems: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.raw_text = raw_text
        self.problems = list(problems or [])


class DecompositionError(MalformedResponseError):
    """The model returned no slides for the infographic text."""


class NoImageProducedError(ContentStudioError):
    """Image call succeeded at the transport level but returned no image payload."""


class UnsupportedFileTypeError(ContentStudioError):
    """File ingestion was given something other than JPEG, PNG or PDF."""

    def __init__(self, mime_type: str):
        super().__init__(f"Unsupported file type: {mime_type or 'unknown'}")
        self.mime_type = mime_type
