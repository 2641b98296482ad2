"""
Pytest Configuration and Fixtures

Shared fakes for the gateway and its chat sessions.
"""

import asyncio
import base64
import io
from typing import List, Optional, Sequence

import pytest
from PIL import Image

from services.openai.errors import ChatError, SegmentationError, SynthesisError

FAKE_IMAGE = "data:image/png;base64,iVBORw0KGgo="


class FakeChatSession:
    """Chat session double that can answer, fail, or hold a reply until released."""

    def __init__(self, replies: Sequence[str] = (), fail: bool = False, block: bool = False, delay: float = 0.0):
        self.replies = list(replies)
        self.fail = fail
        self.delay = delay
        self.release = asyncio.Event()
        if not block:
            self.release.set()
        self.sent: List[str] = []

    async def send(self, text: str) -> str:
        self.sent.append(text)
        await self.release.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise ChatError("Failed to get a reply from the assistant.")
        return self.replies.pop(0) if self.replies else f"echo: {text}"


class FakeGateway:
    """In-memory gateway recording every call made by the orchestrator and chat."""

    def __init__(
        self,
        scenes: Optional[Sequence[str]] = None,
        segment_error: Optional[Exception] = None,
        fail_on: Sequence[str] = (),
        chat_replies: Sequence[str] = (),
        chat_fail: bool = False,
        chat_block: bool = False,
        chat_delay: float = 0.0,
    ):
        self.scenes = list(scenes or [])
        self.segment_error = segment_error
        self.fail_on = list(fail_on)
        self.chat_replies = chat_replies
        self.chat_fail = chat_fail
        self.chat_block = chat_block
        self.chat_delay = chat_delay
        self.segment_calls: List[str] = []
        self.synthesize_calls: List[str] = []
        self.sessions: List[FakeChatSession] = []
        self.configured = True

    async def segment(self, script: str) -> List[str]:
        self.segment_calls.append(script)
        if self.segment_error is not None:
            raise self.segment_error
        return list(self.scenes)

    async def synthesize(self, prompt: str) -> str:
        self.synthesize_calls.append(prompt)
        if any(marker in prompt for marker in self.fail_on):
            raise SynthesisError("Failed to generate image for the scene.")
        return FAKE_IMAGE

    def open_chat(self) -> FakeChatSession:
        session = FakeChatSession(self.chat_replies, fail=self.chat_fail, block=self.chat_block, delay=self.chat_delay)
        self.sessions.append(session)
        return session


@pytest.fixture
def fake_gateway():
    """Gateway returning two scenes and succeeding everywhere."""
    return FakeGateway(scenes=["A chef chops vegetables.", "A waiter carries plates."])


@pytest.fixture
def failing_segment_gateway():
    return FakeGateway(segment_error=SegmentationError("Failed to parse script. Please check the script format and try again."))


@pytest.fixture
def png_b64() -> str:
    """A real 32x18 PNG, base64-encoded."""
    buffer = io.BytesIO()
    Image.new("RGB", (32, 18), (200, 40, 40)).save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("utf-8")


@pytest.fixture
def jpeg_b64() -> str:
    buffer = io.BytesIO()
    Image.new("RGB", (64, 36), (10, 120, 200)).save(buffer, format="JPEG")
    return base64.b64encode(buffer.getvalue()).decode("utf-8")
