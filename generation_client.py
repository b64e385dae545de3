import asyncio
import base64
import logging
import os
import time

from google import genai
from google.genai import types
from google.genai.types import Modality

from app_state import EncodedImage, GenerationResult
from errors import GenerationError, ServiceInitError
from system_prompt import STYLE_TRANSFER_PROMPT

logger = logging.getLogger(__name__)

IMAGE_MODELS = [
    "gemini-2.5-flash-image-preview",
    "gemini-3.1-flash-image-preview",
]


def build_contents(input_image, concept_image):
    """Content image, then style image, then the instruction. Order matters to the model."""
    return [
        types.Part.from_bytes(
            data=base64.b64decode(input_image.data), mime_type=input_image.mime_type,
        ),
        types.Part.from_bytes(
            data=base64.b64decode(concept_image.data), mime_type=concept_image.mime_type,
        ),
        types.Part.from_text(text=STYLE_TRANSFER_PROMPT),
    ]


def parse_response(response):
    """Fold response parts into one result; the last text and the last image win."""
    text = None
    image = None

    candidates = getattr(response, "candidates", None) or []
    if not candidates or candidates[0].content is None:
        return GenerationResult()

    for part in candidates[0].content.parts or []:
        if part.text:
            text = part.text
        elif part.inline_data and part.inline_data.data:
            b64 = base64.b64encode(part.inline_data.data).decode("utf-8")
            mime = part.inline_data.mime_type or "image/png"
            image = EncodedImage(data=b64, mime_type=mime)

    return GenerationResult(image=image, text=text)


class GenerationClient:
    def __init__(self, client, model=None):
        self._client = client
        self.model = model or IMAGE_MODELS[0]

    @classmethod
    def from_env(cls):
        """Build a client from GEMINI_API_KEY and friends, or raise ServiceInitError."""
        api_key = os.environ.get("GEMINI_API_KEY", "").strip()
        if not api_key:
            raise ServiceInitError("GEMINI_API_KEY is not set")

        http_options = None
        timeout = os.environ.get("GEMINI_TIMEOUT_MS", "").strip()
        if timeout:
            try:
                http_options = types.HttpOptions(timeout=int(timeout))
            except ValueError as e:
                raise ServiceInitError(f"GEMINI_TIMEOUT_MS is not an integer: {timeout!r}") from e

        try:
            client = genai.Client(api_key=api_key, http_options=http_options)
        except Exception as e:
            raise ServiceInitError(f"Could not create Gemini client: {e}") from e

        return cls(client, model=os.environ.get("GEMINI_IMAGE_MODEL") or None)

    async def generate(self, input_image, concept_image, cancel=None) -> GenerationResult:
        """Send both images to the model and return what came back.

        Any failure, including `cancel` being set before the reply arrives,
        raises GenerationError; partial parts are never returned.
        """
        config = types.GenerateContentConfig(
            response_modalities=[Modality.IMAGE, Modality.TEXT],
        )
        contents = build_contents(input_image, concept_image)

        start = time.time()
        try:
            response = await self._request(contents, config, cancel)
            result = parse_response(response)
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"{type(e).__name__}: {e}") from e

        logger.info(
            "Generation with %s finished in %.1fs (image=%s, text=%s)",
            self.model, time.time() - start, result.image is not None, result.text is not None,
        )
        return result

    async def _request(self, contents, config, cancel):
        call = self._client.aio.models.generate_content(
            model=self.model, contents=contents, config=config,
        )
        if cancel is None:
            return await call

        request = asyncio.ensure_future(call)
        waiter = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait(
                {request, waiter}, return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            waiter.cancel()
            if not request.done():
                request.cancel()

        if request not in done:
            raise GenerationError("Generation cancelled")
        return request.result()
