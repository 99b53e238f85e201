"""
Gemini REST client for all generation calls.

One request/response round trip per call:
- generate_structured: text prompt (+ optional responseSchema) -> raw JSON text
- generate_image: text prompt + style key -> image bytes
- extract_text: image bytes + mime type -> plain text

No retries and no caching. The client holds no per-call state, so a single
instance can be shared by concurrent image requests.

API docs: https://ai.google.dev/gemini-api/docs/text-generation
"""
import base64
from typing import Any, Dict, List, Optional

import httpx
import structlog

from .errors import NoImageProducedError, TransportError

logger = structlog.get_logger()

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_TEXT_MODEL = "gemini-2.5-flash"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
DEFAULT_TIMEOUT = 120

# Style phrase appended to every slide image prompt
IMAGE_STYLE_PHRASES: Dict[str, str] = {
    "default": "minimalist abstract art, digital painting",
    "vector": "minimalist vector illustration, clean lines, flat colors, corporate style",
    "clay": "3d claymation style, soft textures, vibrant colors, playful",
    "watercolor": "watercolor painting style, soft edges, blended colors, elegant",
}

EXTRACT_TEXT_INSTRUCTION = (
    "Extract all text from this image. "
    "Output only the raw text, without any commentary."
)


def build_image_prompt(prompt: str, style: str = "default") -> str:
    """Append the style phrase and the no-text rule to a slide image prompt."""
    style_key = getattr(style, "value", style)
    phrase = IMAGE_STYLE_PHRASES.get(style_key, IMAGE_STYLE_PHRASES["default"])
    return f"{prompt}, {phrase}. No text in the image."


class GeminiClient:
    """
    Thin async client for the Gemini generateContent endpoint.

    The underlying httpx.AsyncClient is created lazily and reused; pass
    http_client to inject one (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_TEXT_MODEL,
        image_model: str = DEFAULT_IMAGE_MODEL,
        temperature: Optional[float] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.image_model = image_model
        self.temperature = temperature
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = http_client
        self._owns_client = http_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def close(self):
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "GeminiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _generate_content(self, model: str, request_body: dict) -> dict:
        """POST to models/{model}:generateContent and return the decoded JSON body."""
        if not (self.api_key or "").strip():
            raise TransportError("GOOGLE_API_KEY not set")

        url = f"{self.base_url}/models/{model}:generateContent"
        client = await self._get_client()

        try:
            response = await client.post(
                url,
                headers={
                    "Content-Type": "application/json",
                    "x-goog-api-key": self.api_key,
                },
                json=request_body,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(
                "gemini_http_error",
                model=model,
                status_code=status,
                body_preview=e.response.text[:200],
            )
            raise TransportError(
                f"Gemini returned HTTP {status} for model {model}",
                status_code=status,
            ) from e
        except httpx.RequestError as e:
            logger.error("gemini_request_failed", model=model, error=str(e))
            raise TransportError(f"Gemini request failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise TransportError("Gemini returned a non-JSON body") from e

    @staticmethod
    def _candidate_parts(data: dict) -> List[Dict[str, Any]]:
        """Return the parts of the first candidate, raising if the provider returned none."""
        candidates = data.get("candidates") or []
        if not candidates:
            block_reason = (data.get("promptFeedback") or {}).get("blockReason")
            logger.error("gemini_no_candidates", block_reason=block_reason)
            raise TransportError(
                f"Gemini returned no candidates (block reason: {block_reason or 'none'})"
            )
        return (candidates[0].get("content") or {}).get("parts") or []

    async def generate_structured(
        self,
        prompt: str,
        response_schema: Optional[dict] = None,
    ) -> str:
        """
        Generate JSON text for a prompt, constrained by responseSchema when given.

        Returns the raw response text; decoding happens in the caller.
        """
        generation_config: Dict[str, Any] = {"responseMimeType": "application/json"}
        if response_schema:
            generation_config["responseSchema"] = response_schema
        if self.temperature is not None:
            generation_config["temperature"] = self.temperature

        logger.info(
            "calling_gemini",
            model=self.model,
            prompt_len=len(prompt),
            has_response_schema=response_schema is not None,
            temperature=self.temperature,
        )

        data = await self._generate_content(
            self.model,
            {
                "contents": [{"parts": [{"text": prompt}]}],
                "generationConfig": generation_config,
            },
        )

        parts = self._candidate_parts(data)
        content = "".join(part.get("text", "") for part in parts if "text" in part)
        logger.info(
            "gemini_response",
            content_len=len(content),
            content_preview=content[:200] if content else "EMPTY",
        )
        return content

    async def generate_image(self, prompt: str, style: str = "default") -> bytes:
        """
        Generate one illustration and return its raw bytes.

        Raises NoImageProducedError when the response holds no inline image data.
        """
        full_prompt = build_image_prompt(prompt, style)

        data = await self._generate_content(
            self.image_model,
            {
                "contents": [{"parts": [{"text": full_prompt}]}],
                "generationConfig": {"responseModalities": ["IMAGE"]},
            },
        )

        for part in self._candidate_parts(data):
            inline = part.get("inlineData") or part.get("inline_data")
            if inline and inline.get("data"):
                try:
                    image_bytes = base64.b64decode(inline["data"])
                except (ValueError, TypeError) as e:
                    raise NoImageProducedError("Gemini returned undecodable image data") from e
                if image_bytes:
                    logger.info(
                        "gemini_image_generated",
                        model=self.image_model,
                        prompt=prompt[:50],
                        mime_type=inline.get("mimeType") or inline.get("mime_type"),
                        size=len(image_bytes),
                    )
                    return image_bytes

        logger.error("gemini_image_missing", model=self.image_model, prompt=prompt[:50])
        raise NoImageProducedError(f"Gemini produced no image for prompt: {prompt[:80]}")

    async def extract_text(self, image_bytes: bytes, mime_type: str) -> str:
        """Run the fixed text-extraction instruction over an image."""
        data = await self._generate_content(
            self.model,
            {
                "contents": [
                    {
                        "parts": [
                            {
                                "inlineData": {
                                    "mimeType": mime_type,
                                    "data": base64.b64encode(image_bytes).decode("ascii"),
                                }
                            },
                            {"text": EXTRACT_TEXT_INSTRUCTION},
                        ]
                    }
                ],
            },
        )

        parts = self._candidate_parts(data)
        text = "".join(part.get("text", "") for part in parts if "text" in part)
        logger.info("gemini_text_extracted", mime_type=mime_type, text_len=len(text))
        return text
