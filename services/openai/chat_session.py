"""Stateful assistant conversation on top of the Responses API."""

from __future__ import annotations

import logging
from typing import Optional

from openai import AsyncOpenAI

from services.openai.errors import ChatError
from services.openai.prompts import CHAT_SYSTEM_INSTRUCTION
from services.openai.response_parser import extract_text

LOGGER = logging.getLogger(__name__)


class ChatSession:
    """Opaque handle to one conversation tracked server-side by OpenAI.

    The only local state is the id of the last response, which the next
    request chains onto via ``previous_response_id``.
    """

    def __init__(self, client: AsyncOpenAI, model: str, instructions: str = CHAT_SYSTEM_INSTRUCTION) -> None:
        if client is None:
            raise ValueError("AsyncOpenAI client is required.")
        self.client = client
        self.model = model
        self.instructions = instructions
        self._previous_response_id: Optional[str] = None

    @property
    def previous_response_id(self) -> Optional[str]:
        return self._previous_response_id

    async def send(self, text: str) -> str:
        """Send one user message and return the assistant's reply text.

        Raises:
            ChatError: If the request fails or the reply is empty.
        """
        try:
            response = await self.client.responses.create(
                model=self.model,
                instructions=self.instructions,
                input=text,
                previous_response_id=self._previous_response_id,
            )
        except Exception as exc:
            LOGGER.error("Chat request failed: %s", exc)
            raise ChatError("Failed to get a reply from the assistant.") from exc

        reply = extract_text(response).strip()
        if not reply:
            raise ChatError("The assistant returned an empty reply.")
        self._previous_response_id = getattr(response, "id", None) or self._previous_response_id
        return reply
