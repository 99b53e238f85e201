"""
File ingestion: turn an uploaded JPEG, PNG or PDF into plain text.

Images go through the Gemini text-extraction call; PDFs are read locally
with pdfplumber. Anything else raises UnsupportedFileTypeError.
"""
import io
import mimetypes
from pathlib import Path
from typing import Optional, Union

import pdfplumber
import structlog

from .errors import UnsupportedFileTypeError
from .gemini_client import GeminiClient

logger = structlog.get_logger()

IMAGE_MIME_TYPES = ("image/jpeg", "image/png")
PDF_MIME_TYPE = "application/pdf"
ACCEPTED_MIME_TYPES = IMAGE_MIME_TYPES + (PDF_MIME_TYPE,)


def guess_mime_type(filename: str) -> str:
    mime_type, _ = mimetypes.guess_type(filename)
    return mime_type or ""


def extract_text_from_pdf(data: bytes) -> str:
    """Concatenate the text of every page, one line per page."""
    pages = []
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        for page in pdf.pages:
            pages.append(page.extract_text() or "")
    return "".join(f"{text}\n" for text in pages)


async def extract_text_from_bytes(
    client: GeminiClient,
    data: bytes,
    mime_type: str,
) -> str:
    if mime_type in IMAGE_MIME_TYPES:
        text = await client.extract_text(data, mime_type)
    elif mime_type == PDF_MIME_TYPE:
        text = extract_text_from_pdf(data)
    else:
        raise UnsupportedFileTypeError(mime_type)

    logger.info("file_text_extracted", mime_type=mime_type, size=len(data), text_len=len(text))
    return text


async def extract_text_from_file(
    client: GeminiClient,
    path: Union[str, Path],
    mime_type: Optional[str] = None,
) -> str:
    """Read a file from disk and extract its text. MIME type is guessed from the name if omitted."""
    path = Path(path)
    mime_type = mime_type or guess_mime_type(path.name)
    if mime_type not in ACCEPTED_MIME_TYPES:
        raise UnsupportedFileTypeError(mime_type)
    return await extract_text_from_bytes(client, path.read_bytes(), mime_type)
