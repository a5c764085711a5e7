# -*- coding: utf-8 -*-
"""
Tests for the message pipeline: admission, extraction, translation, reply
"""
import json

import httpx
import pytest
import respx

from models import PipelineOutcome, RoleEntry, RoleKind
from transbot.platform import PlatformError

from conftest import OLLAMA_GENERATE, OLLAMA_URL, image_attachment, make_message

IMAGE_URL = "https://cdn.example/shot.png"


@pytest.fixture
def routed(services):
    services.store.set_ollama_url(OLLAMA_URL)
    services.store.set_route("c1", "spanish", guild_id="g1", channel_name="general")
    return services


def ollama_replies(*texts: str):
    return [httpx.Response(200, json={"response": text}) for text in texts]


def fake_ollama(request: httpx.Request) -> httpx.Response:
    """Reads the image, then translates by looking at the tail of the prompt"""
    body = json.loads(request.content)
    if body.get("images"):
        return httpx.Response(200, json={"response": "STOP"})
    answer = "ALTO" if body["prompt"].endswith("STOP") else "Hola"
    return httpx.Response(200, json={"response": answer})


class TestTextTranslation:
    @pytest.mark.asyncio
    @respx.mock
    async def test_hello_to_spanish(self, routed, platform):
        respx.post(OLLAMA_GENERATE).mock(side_effect=ollama_replies("Hola"))

        outcome = await routed.pipeline.process(make_message())

        assert outcome is PipelineOutcome.DELIVERED
        records = routed.history.latest()
        assert len(records) == 1
        assert records[0].original == "Hello"
        assert records[0].translation == "Hola"
        assert records[0].channel == "general"
        assert records[0].author == "alice"
        assert records[0].is_ocr is False
        assert routed.stats.snapshot()["totalTranslations"] == 1
        assert routed.stats.snapshot()["languages"] == {"spanish": 1}

        _, reply = platform.replies[0]
        assert [f.name for f in reply.fields] == ["Original", "Translated (spanish)"]
        assert reply.fields[1].value == "Hola"

    @pytest.mark.asyncio
    async def test_unrouted_channel_is_skipped(self, routed, platform):
        outcome = await routed.pipeline.process(make_message(channel_id="elsewhere"))

        assert outcome is PipelineOutcome.SKIPPED
        assert platform.replies == []
        assert len(routed.history) == 0

    @pytest.mark.asyncio
    async def test_bot_author_leaves_no_trace(self, routed):
        before = len(routed.events)

        outcome = await routed.pipeline.process(make_message(author_is_bot=True))

        assert outcome is PipelineOutcome.SKIPPED
        assert len(routed.events) == before

    @pytest.mark.asyncio
    async def test_blank_message_without_image_is_skipped(self, routed, platform):
        outcome = await routed.pipeline.process(make_message(content="   "))

        assert outcome is PipelineOutcome.SKIPPED
        assert platform.replies == []

    @pytest.mark.asyncio
    @respx.mock
    async def test_hosted_provider_without_key_fails(self, routed, platform):
        routed.store.set_provider("openai")
        route = respx.post("https://api.openai.com/v1/chat/completions")

        outcome = await routed.pipeline.process(make_message())

        assert outcome is PipelineOutcome.FAILED
        assert not route.called
        assert platform.replies == []
        assert len(routed.history) == 0
        assert routed.stats.snapshot()["totalTranslations"] == 0
        assert any(e.type == "error" for e in routed.events.recent())

    @pytest.mark.asyncio
    @respx.mock
    async def test_reply_failure_keeps_records(self, routed, platform):
        respx.post(OLLAMA_GENERATE).mock(side_effect=ollama_replies("Hola"))
        platform.reply_error = PlatformError("Missing Permissions")

        outcome = await routed.pipeline.process(make_message())

        assert outcome is PipelineOutcome.FAILED
        assert len(routed.history) == 1
        assert routed.events.recent(include_debug=False)[0].type == "error"


class TestImageExtraction:
    @pytest.fixture
    def ocr_enabled(self, routed):
        routed.store.update_route("c1", enable_ocr=True)
        return routed

    @pytest.mark.asyncio
    @respx.mock
    async def test_download_failure_still_translates_text(self, ocr_enabled, platform):
        route = respx.post(OLLAMA_GENERATE).mock(side_effect=ollama_replies("Hola"))

        outcome = await ocr_enabled.pipeline.process(
            make_message(attachments=[image_attachment(IMAGE_URL)])
        )

        assert outcome is PipelineOutcome.DELIVERED
        assert route.call_count == 1
        _, reply = platform.replies[0]
        assert [f.name for f in reply.fields] == ["Original", "Translated (spanish)"]
        assert any(e.message.startswith("OCR failed") for e in ocr_enabled.events.recent())

    @pytest.mark.asyncio
    @respx.mock
    async def test_extracted_text_comes_first(self, ocr_enabled, platform):
        platform.files[IMAGE_URL] = b"\x89PNG"
        respx.post(OLLAMA_GENERATE).mock(side_effect=fake_ollama)

        outcome = await ocr_enabled.pipeline.process(
            make_message(attachments=[image_attachment(IMAGE_URL)])
        )

        assert outcome is PipelineOutcome.DELIVERED
        _, reply = platform.replies[0]
        assert [f.name for f in reply.fields] == [
            "📷 Extracted Text",
            "📷 Translated (spanish)",
            "Original",
            "Translated (spanish)",
        ]
        assert reply.fields[0].value == "STOP"
        ocr_records = [r for r in ocr_enabled.history.latest() if r.is_ocr]
        assert len(ocr_records) == 1
        assert ocr_records[0].original == "STOP"
        assert ocr_enabled.stats.snapshot()["totalTranslations"] == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_image_only_message(self, ocr_enabled, platform):
        platform.files[IMAGE_URL] = b"\x89PNG"
        respx.post(OLLAMA_GENERATE).mock(side_effect=fake_ollama)

        outcome = await ocr_enabled.pipeline.process(
            make_message(content="", attachments=[image_attachment(IMAGE_URL)])
        )

        assert outcome is PipelineOutcome.DELIVERED
        _, reply = platform.replies[0]
        assert [f.value for f in reply.fields] == ["STOP", "ALTO"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_one_failed_translation_keeps_the_other(self, ocr_enabled, platform):
        platform.files[IMAGE_URL] = b"\x89PNG"

        def extracted_text_breaks(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            if body.get("images"):
                return httpx.Response(200, json={"response": "STOP"})
            if body["prompt"].endswith("STOP"):
                return httpx.Response(500, text="model crashed")
            return httpx.Response(200, json={"response": "Hola"})

        respx.post(OLLAMA_GENERATE).mock(side_effect=extracted_text_breaks)

        outcome = await ocr_enabled.pipeline.process(
            make_message(attachments=[image_attachment(IMAGE_URL)])
        )

        assert outcome is PipelineOutcome.DELIVERED
        _, reply = platform.replies[0]
        assert [f.name for f in reply.fields] == ["Original", "Translated (spanish)"]
        records = ocr_enabled.history.latest()
        assert len(records) == 1
        assert records[0].is_ocr is False

    @pytest.mark.asyncio
    @respx.mock
    async def test_ocr_role_lookup_failure_translates_text_only(self, ocr_enabled, platform):
        platform.files[IMAGE_URL] = b"\x89PNG"
        ocr_enabled.store.add_role(RoleKind.OCR, "c1", RoleEntry(id="OCR", name="Scanners"))
        platform.role_error = PlatformError("Missing Access")
        route = respx.post(OLLAMA_GENERATE).mock(side_effect=fake_ollama)

        outcome = await ocr_enabled.pipeline.process(
            make_message(attachments=[image_attachment(IMAGE_URL)])
        )

        assert outcome is PipelineOutcome.DELIVERED
        assert route.call_count == 1
        _, reply = platform.replies[0]
        assert [f.name for f in reply.fields] == ["Original", "Translated (spanish)"]

    @pytest.mark.asyncio
    async def test_image_without_ocr_flag_is_ignored(self, routed, platform):
        platform.files[IMAGE_URL] = b"\x89PNG"

        outcome = await routed.pipeline.process(
            make_message(content="", attachments=[image_attachment(IMAGE_URL)])
        )

        assert outcome is PipelineOutcome.SKIPPED


class TestDashboardTranslate:
    @pytest.mark.asyncio
    @respx.mock
    async def test_records_dashboard_source(self, routed):
        respx.post(OLLAMA_GENERATE).mock(side_effect=ollama_replies("Bonjour"))

        assert await routed.pipeline.translate("Hello", "french") == "Bonjour"

        record = routed.history.latest()[0]
        assert record.channel == "dashboard"
        assert record.author == "dashboard"
