"""Generative AI gateway used by the storyboard orchestrator and assistant.

The gateway is the only component that talks to OpenAI. It exposes three
operations with plain-Python signatures so that callers (and tests) never
deal with SDK response objects:

- ``segment(script)`` splits a script into ordered scene descriptions,
- ``synthesize(prompt)`` renders one storyboard panel as a ``data:`` URI,
- ``open_chat()`` starts a stateful assistant conversation.

Every failure surfaces as a subclass of `GatewayError`.
"""

import logging
import os
from typing import List, Optional

from openai import AsyncOpenAI

from services.openai.chat_session import ChatSession
from services.openai.errors import GatewayConfigError, SegmentationError, SynthesisError
from services.openai.prompts import build_segmentation_prompt, build_segmentation_system_prompt
from services.openai.response_parser import extract_usage, first_image_b64, parse_scenes
from services.openai.scene_schema import TEXT_FORMAT
from services.panel_images import PanelImageEncoder

LOGGER = logging.getLogger(__name__)
DEFAULT_MODEL = os.getenv("OPENAI_MODEL", "gpt-4.1-mini")
DEFAULT_IMAGE_MODEL = os.getenv("OPENAI_IMAGE_MODEL", "dall-e-3")
# Closest 16:9 landscape size offered by the image models.
DEFAULT_IMAGE_SIZE = os.getenv("OPENAI_IMAGE_SIZE", "1792x1024")

SEGMENTATION_FAILED = "Failed to parse script. Please check the script format and try again."
SYNTHESIS_FAILED = "Failed to generate image for the scene."
MISSING_API_KEY = "OPENAI_API_KEY environment variable is not set"


class StoryboardGateway:
    """Wrap one shared `AsyncOpenAI` client behind the storyboard operations."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI],
        *,
        model: str = DEFAULT_MODEL,
        image_model: str = DEFAULT_IMAGE_MODEL,
        image_size: str = DEFAULT_IMAGE_SIZE,
        encoder: Optional[PanelImageEncoder] = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            client: Async OpenAI client; None leaves the gateway unconfigured so that
                every operation raises `GatewayConfigError`.
            model: Text model used for segmentation and chat.
            image_model: Image model used for panel synthesis.
            image_size: Requested panel size.
            encoder: Optional panel encoder for dependency injection.
        """
        self.client = client
        self.model = model
        self.image_model = image_model
        self.image_size = image_size
        self.encoder = encoder or PanelImageEncoder()

    @classmethod
    def from_env(cls) -> "StoryboardGateway":
        """Build a gateway from ``OPENAI_API_KEY``; unconfigured when the key is missing."""
        if not os.getenv("OPENAI_API_KEY"):
            LOGGER.warning("%s; storyboard runs will fail until it is provided.", MISSING_API_KEY)
            return cls(None)
        return cls(AsyncOpenAI())

    @property
    def configured(self) -> bool:
        return self.client is not None

    def _resolve_client(self) -> AsyncOpenAI:
        """Return a usable OpenAI client or raise if missing."""
        if self.client is None:
            raise GatewayConfigError(MISSING_API_KEY)
        return self.client

    async def segment(self, script: str) -> List[str]:
        """Split a script into ordered, one-sentence scene descriptions.

        Raises:
            GatewayConfigError: If no client is configured.
            SegmentationError: If the request fails or the output is malformed.
        """
        client = self._resolve_client()
        try:
            response = await client.responses.create(
                model=self.model,
                input=[
                    {
                        "type": "message",
                        "role": "system",
                        "content": [{"type": "input_text", "text": build_segmentation_system_prompt()}],
                    },
                    {
                        "type": "message",
                        "role": "user",
                        "content": [{"type": "input_text", "text": build_segmentation_prompt(script)}],
                    },
                ],
                text=TEXT_FORMAT,
            )
            scenes = parse_scenes(response)
        except Exception as exc:
            LOGGER.error("Error parsing script to scenes: %s", exc)
            raise SegmentationError(SEGMENTATION_FAILED) from exc

        LOGGER.info("Script segmented into %d scenes (usage: %s)", len(scenes), extract_usage(response))
        return scenes

    async def synthesize(self, prompt: str) -> str:
        """Render exactly one storyboard panel and return it as a ``data:`` URI.

        Raises:
            GatewayConfigError: If no client is configured.
            SynthesisError: If the request fails or no usable image comes back.
        """
        client = self._resolve_client()
        try:
            response = await client.images.generate(
                model=self.image_model,
                prompt=prompt,
                n=1,
                size=self.image_size,
                response_format="b64_json",
            )
            b64 = first_image_b64(response)
            if not b64:
                raise ValueError("No image was generated.")
            return self.encoder.to_data_uri(b64)
        except Exception as exc:
            LOGGER.error("Error generating image: %s", exc)
            raise SynthesisError(SYNTHESIS_FAILED) from exc

    def open_chat(self) -> ChatSession:
        """Start a new assistant conversation.

        Raises:
            GatewayConfigError: If no client is configured.
        """
        return ChatSession(self._resolve_client(), self.model)
