"""Assistant chat: lazy session ownership and a single-slot send gate."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from models.session_models import ChatMessage, new_message_id
from services.openai.chat_session import ChatSession
from services.openai.gateway import StoryboardGateway
from services.openai.prompts import CHAT_FALLBACK_REPLY, CHAT_GREETING

LOGGER = logging.getLogger(__name__)

Listener = Callable[[], None]


class ChatSessionManager:
    """Own at most one assistant session and the transcript built on it.

    The session is opened on the first `activate` and kept for the lifetime of
    the manager; hiding the assistant does not close it.
    """

    def __init__(self, gateway: StoryboardGateway) -> None:
        if gateway is None:
            raise ValueError("Storyboard gateway is required.")
        self.gateway = gateway
        self._session: Optional[ChatSession] = None
        self._messages: List[ChatMessage] = []
        self.busy = False
        self.visible = False
        self._listeners: List[Listener] = []

    @property
    def session(self) -> Optional[ChatSession]:
        return self._session

    @property
    def messages(self) -> List[ChatMessage]:
        return list(self._messages)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener and return a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def _append(self, role: str, content: str) -> ChatMessage:
        message = ChatMessage(id=new_message_id(role), role=role, content=content)
        self._messages.append(message)
        self._notify()
        return message

    def activate(self) -> bool:
        """Show the assistant, opening a session if none exists yet.

        Returns:
            True when a new session was opened by this call.

        Raises:
            GatewayConfigError: If the gateway has no client to open a session with.
        """
        if self._session is not None:
            self.visible = True
            self._notify()
            return False
        self._session = self.gateway.open_chat()
        self.visible = True
        LOGGER.info("Assistant session opened")
        self._append("assistant", CHAT_GREETING)
        return True

    def deactivate(self) -> None:
        """Hide the assistant; the session stays alive."""
        self.visible = False
        self._notify()

    def try_begin(self, text: str) -> bool:
        """Admit a send: append the user message and take the busy slot.

        Returns False, leaving the transcript unchanged, for blank text, a send
        already in flight, or no session. A True result must be followed by
        `complete(text)`.
        """
        if not text or not text.strip() or self.busy or self._session is None:
            return False
        self._append("user", text)
        self.busy = True
        self._notify()
        return True

    async def complete(self, text: str) -> ChatMessage:
        """Await the reply for an admitted send and release the busy slot."""
        try:
            reply = await self._session.send(text)
            return self._append("assistant", reply)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            LOGGER.error("Chat error: %s", exc)
            return self._append("assistant", CHAT_FALLBACK_REPLY)
        finally:
            self.busy = False
            self._notify()

    async def send(self, text: str) -> Optional[ChatMessage]:
        """Send a user message and append the assistant's reply.

        Returns:
            The appended assistant message, or None when the send was dropped
            (blank text, another send in flight, or no session).
        """
        if not self.try_begin(text):
            return None
        return await self.complete(text)

    def snapshot(self) -> Dict[str, Any]:
        """Return a JSON-serializable view of the assistant panel."""
        return {
            "active": self._session is not None,
            "visible": self.visible,
            "busy": self.busy,
            "messages": [message.to_dict() for message in self._messages],
        }
