"""
Tests for the OpenAI-backed gateway.

Tests for services/openai/gateway.py and services/openai/chat_session.py
"""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from services.openai.errors import ChatError, GatewayConfigError, SegmentationError, SynthesisError
from services.openai.gateway import SEGMENTATION_FAILED, SYNTHESIS_FAILED, StoryboardGateway
from services.openai.prompts import CHAT_SYSTEM_INSTRUCTION


def _client(text_response=None, image_response=None, text_error=None, image_error=None):
    client = MagicMock()
    client.responses.create = AsyncMock(return_value=text_response, side_effect=text_error)
    client.images.generate = AsyncMock(return_value=image_response, side_effect=image_error)
    return client


def _text(output_text, response_id="resp_1"):
    return SimpleNamespace(id=response_id, output_text=output_text, output=[], usage=None)


class TestSegment:

    @pytest.mark.asyncio
    async def test_returns_scenes_in_order(self):
        payload = json.dumps({"scenes": ["First scene.", "Second scene."]})
        client = _client(text_response=_text(payload))
        gateway = StoryboardGateway(client, model="text-model")

        scenes = await gateway.segment("INT. KITCHEN - DAY")

        assert scenes == ["First scene.", "Second scene."]
        kwargs = client.responses.create.await_args.kwargs
        assert kwargs["model"] == "text-model"
        assert kwargs["text"]["format"]["type"] == "json_schema"
        assert kwargs["text"]["format"]["schema"]["required"] == ["scenes"]
        user_prompt = kwargs["input"][1]["content"][0]["text"]
        assert "INT. KITCHEN - DAY" in user_prompt
        assert "characters, setting, and key actions" in user_prompt

    @pytest.mark.asyncio
    async def test_reads_message_content_when_output_text_missing(self):
        content = SimpleNamespace(type="output_text", text=json.dumps({"scenes": ["Only scene."]}))
        response = SimpleNamespace(id="r", output_text="", output=[SimpleNamespace(type="message", content=[content])])
        gateway = StoryboardGateway(_client(text_response=response))

        assert await gateway.segment("script") == ["Only scene."]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "output_text",
        ["", "not json", json.dumps({"panels": []}), json.dumps({"scenes": [1, 2]}), json.dumps(["a"])],
    )
    async def test_malformed_output_is_segmentation_error(self, output_text):
        gateway = StoryboardGateway(_client(text_response=_text(output_text)))

        with pytest.raises(SegmentationError) as excinfo:
            await gateway.segment("script")
        assert str(excinfo.value) == SEGMENTATION_FAILED

    @pytest.mark.asyncio
    async def test_request_failure_is_segmentation_error(self):
        gateway = StoryboardGateway(_client(text_error=RuntimeError("network down")))

        with pytest.raises(SegmentationError):
            await gateway.segment("script")


class TestSynthesize:

    @pytest.mark.asyncio
    async def test_requests_one_landscape_image(self, png_b64):
        response = SimpleNamespace(data=[SimpleNamespace(b64_json=png_b64)])
        client = _client(image_response=response)
        gateway = StoryboardGateway(client, image_model="image-model", image_size="1792x1024")

        uri = await gateway.synthesize("Create a panel")

        assert uri == f"data:image/png;base64,{png_b64}"
        kwargs = client.images.generate.await_args.kwargs
        assert kwargs["model"] == "image-model"
        assert kwargs["prompt"] == "Create a panel"
        assert kwargs["n"] == 1
        assert kwargs["size"] == "1792x1024"
        assert kwargs["response_format"] == "b64_json"

    @pytest.mark.asyncio
    async def test_detects_jpeg(self, jpeg_b64):
        response = SimpleNamespace(data=[SimpleNamespace(b64_json=jpeg_b64)])
        gateway = StoryboardGateway(_client(image_response=response))

        assert (await gateway.synthesize("p")).startswith("data:image/jpeg;base64,")

    @pytest.mark.asyncio
    async def test_zero_images_is_a_failure(self):
        gateway = StoryboardGateway(_client(image_response=SimpleNamespace(data=[])))

        with pytest.raises(SynthesisError) as excinfo:
            await gateway.synthesize("p")
        assert str(excinfo.value) == SYNTHESIS_FAILED

    @pytest.mark.asyncio
    async def test_undecodable_image_is_a_failure(self):
        response = SimpleNamespace(data=[SimpleNamespace(b64_json="bm90IGFuIGltYWdl")])
        gateway = StoryboardGateway(_client(image_response=response))

        with pytest.raises(SynthesisError):
            await gateway.synthesize("p")

    @pytest.mark.asyncio
    async def test_request_failure_is_a_failure(self):
        gateway = StoryboardGateway(_client(image_error=RuntimeError("rate limited")))

        with pytest.raises(SynthesisError):
            await gateway.synthesize("p")


class TestChat:

    @pytest.mark.asyncio
    async def test_session_chains_previous_response(self):
        client = _client()
        client.responses.create = AsyncMock(side_effect=[_text("Hi there.", "resp_a"), _text("Sure.", "resp_b")])
        session = StoryboardGateway(client, model="chat-model").open_chat()

        assert await session.send("hello") == "Hi there."
        assert await session.send("and then?") == "Sure."

        first, second = client.responses.create.await_args_list
        assert first.kwargs["previous_response_id"] is None
        assert second.kwargs["previous_response_id"] == "resp_a"
        assert first.kwargs["instructions"] == CHAT_SYSTEM_INSTRUCTION
        assert second.kwargs["input"] == "and then?"
        assert session.previous_response_id == "resp_b"

    @pytest.mark.asyncio
    async def test_failure_raises_chat_error(self):
        session = StoryboardGateway(_client(text_error=RuntimeError("boom"))).open_chat()

        with pytest.raises(ChatError):
            await session.send("hello")
        assert session.previous_response_id is None

    @pytest.mark.asyncio
    async def test_empty_reply_is_chat_error(self):
        session = StoryboardGateway(_client(text_response=_text("   "))).open_chat()

        with pytest.raises(ChatError):
            await session.send("hello")


class TestUnconfigured:

    @pytest.mark.asyncio
    async def test_every_operation_reports_missing_key(self):
        gateway = StoryboardGateway(None)

        assert gateway.configured is False
        with pytest.raises(GatewayConfigError):
            await gateway.segment("script")
        with pytest.raises(GatewayConfigError):
            await gateway.synthesize("prompt")
        with pytest.raises(GatewayConfigError):
            gateway.open_chat()

    def test_from_env_without_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)

        assert StoryboardGateway.from_env().configured is False

    def test_from_env_with_key(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

        assert StoryboardGateway.from_env().configured is True
