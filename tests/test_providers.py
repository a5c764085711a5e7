# -*- coding: utf-8 -*-
"""
Tests for the provider strategies and the registry, HTTP mocked with respx
"""
import json

import httpx
import pytest
import respx

from models import AIConfig
from providers import ProviderCallFailure, ProviderConfigError, ProviderRegistry

from conftest import OLLAMA_GENERATE, OLLAMA_TAGS, OLLAMA_URL


def ai_config(provider: str = "ollama", **overrides) -> AIConfig:
    fields = dict(provider=provider, ocr_model="llava", ollama_url=OLLAMA_URL)
    fields.update(overrides)
    return AIConfig(**fields)


class TestOllamaProvider:
    @pytest.mark.asyncio
    @respx.mock
    async def test_translate_trims_response(self, registry: ProviderRegistry):
        route = respx.post(OLLAMA_GENERATE).mock(
            return_value=httpx.Response(200, json={"response": "  Hola  \n"})
        )

        result = await registry.translate("Hello", "spanish", ai_config(model="gemma3"))

        assert result == "Hola"
        body = json.loads(route.calls.last.request.content)
        assert body["model"] == "gemma3"
        assert body["stream"] is False
        assert body["prompt"].startswith("Translate the following message to spanish.")
        assert body["prompt"].endswith("\n\nHello")

    @pytest.mark.asyncio
    @respx.mock
    async def test_extract_text_sends_image_with_ocr_model(self, registry: ProviderRegistry):
        route = respx.post(OLLAMA_GENERATE).mock(
            return_value=httpx.Response(200, json={"response": "STOP\n"})
        )

        # Extraction always goes to the local backend, whatever provider is active
        result = await registry.extract_text("aGVsbG8=", ai_config("openai", api_key="sk-test"))

        assert result == "STOP"
        body = json.loads(route.calls.last.request.content)
        assert body["model"] == "llava"
        assert body["images"] == ["aGVsbG8="]

    @pytest.mark.asyncio
    @respx.mock
    async def test_status_online_lists_models(self, registry: ProviderRegistry):
        respx.get(OLLAMA_TAGS).mock(
            return_value=httpx.Response(200, json={"models": [{"name": "gemma3"}, {"name": "llava"}]})
        )

        status = await registry.check_status(ai_config())

        assert status.available is True
        assert status.status == "online"
        assert status.models == ["gemma3", "llava"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_status_offline_on_connection_error(self, registry: ProviderRegistry):
        respx.get(OLLAMA_TAGS).mock(side_effect=httpx.ConnectError("refused"))

        status = await registry.check_status(ai_config())

        assert status.available is False
        assert status.status == "offline"
        assert status.error

    @pytest.mark.asyncio
    @respx.mock
    async def test_list_models_failure(self, registry: ProviderRegistry):
        respx.get(OLLAMA_TAGS).mock(return_value=httpx.Response(500))

        with pytest.raises(ProviderCallFailure):
            await registry.list_models(ai_config())


class TestHostedProviders:
    @pytest.mark.asyncio
    @respx.mock
    async def test_openai_envelope(self, registry: ProviderRegistry):
        route = respx.post("https://api.openai.com/v1/chat/completions").mock(
            return_value=httpx.Response(
                200, json={"choices": [{"message": {"content": " Bonjour "}}]}
            )
        )

        result = await registry.translate("Hello", "french", ai_config("openai", api_key="sk-test"))

        assert result == "Bonjour"
        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer sk-test"
        body = json.loads(request.content)
        assert body["model"] == "gpt-4o"
        assert body["messages"][0]["role"] == "system"
        assert body["messages"][1] == {"role": "user", "content": "Hello"}

    @pytest.mark.asyncio
    @respx.mock
    async def test_base_url_override(self, registry: ProviderRegistry):
        route = respx.post("https://proxy.example/v1/chat/completions").mock(
            return_value=httpx.Response(200, json={"choices": [{"message": {"content": "Hallo"}}]})
        )

        config = ai_config(
            "deepseek", api_key="k", base_url="https://proxy.example/v1/", model="deepseek-chat"
        )
        assert await registry.translate("Hello", "german", config) == "Hallo"
        assert route.called

    @pytest.mark.asyncio
    @respx.mock
    async def test_anthropic_envelope(self, registry: ProviderRegistry):
        route = respx.post("https://api.anthropic.com/v1/messages").mock(
            return_value=httpx.Response(200, json={"content": [{"type": "text", "text": "Ciao"}]})
        )

        result = await registry.translate("Hello", "italian", ai_config("anthropic", api_key="ak"))

        assert result == "Ciao"
        request = route.calls.last.request
        assert request.headers["x-api-key"] == "ak"
        assert request.headers["anthropic-version"] == "2023-06-01"
        assert "italian" in json.loads(request.content)["system"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_google_envelope(self, registry: ProviderRegistry):
        url = "https://generativelanguage.googleapis.com/v1beta/models/gemini-1.5-flash:generateContent"
        route = respx.post(url).mock(
            return_value=httpx.Response(
                200, json={"candidates": [{"content": {"parts": [{"text": "Olá\n"}]}}]}
            )
        )

        config = ai_config("google", api_key="gk", model="gemini-1.5-flash")
        assert await registry.translate("Hello", "portuguese", config) == "Olá"
        assert route.calls.last.request.headers["x-goog-api-key"] == "gk"

    @pytest.mark.asyncio
    @respx.mock
    async def test_missing_key_rejected_before_network(self, registry: ProviderRegistry):
        route = respx.post("https://api.mistral.ai/v1/chat/completions")

        with pytest.raises(ProviderConfigError, match="not configured"):
            await registry.translate("Hello", "french", ai_config("mistral"))
        assert not route.called

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_2xx_is_call_failure(self, registry: ProviderRegistry):
        respx.post("https://api.x.ai/v1/chat/completions").mock(return_value=httpx.Response(429))

        with pytest.raises(ProviderCallFailure, match="HTTP 429"):
            await registry.translate("Hello", "french", ai_config("xai", api_key="k"))

    @pytest.mark.asyncio
    @respx.mock
    async def test_malformed_body_is_call_failure(self, registry: ProviderRegistry):
        respx.post("https://api.openai.com/v1/chat/completions").mock(
            return_value=httpx.Response(200, json={"choices": []})
        )

        with pytest.raises(ProviderCallFailure, match="Malformed"):
            await registry.translate("Hello", "french", ai_config("openai", api_key="k"))

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout_is_call_failure(self, registry: ProviderRegistry):
        respx.post(OLLAMA_GENERATE).mock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(ProviderCallFailure, match="timed out"):
            await registry.translate("Hello", "french", ai_config())

    @pytest.mark.asyncio
    async def test_hosted_status(self, registry: ProviderRegistry):
        offline = await registry.check_status(ai_config("openai"))
        assert offline.status == "offline"
        assert offline.error == "API key not configured"

        configured = await registry.check_status(ai_config("openai", api_key="k"))
        assert configured.available is True
        assert configured.status == "configured"

    @pytest.mark.asyncio
    async def test_hosted_list_models_is_catalogue(self, registry: ProviderRegistry):
        models = await registry.list_models(ai_config("deepseek", api_key="k"))
        assert models == ["deepseek-chat", "deepseek-coder"]


class TestRegistry:
    @pytest.mark.asyncio
    async def test_unknown_provider(self, registry: ProviderRegistry):
        with pytest.raises(ProviderConfigError, match="Unknown provider"):
            await registry.translate("Hello", "french", ai_config("babelfish"))

    def test_catalogue(self, registry: ProviderRegistry):
        keys = [info.key for info in registry.catalogue()]

        assert keys == ["ollama", "openai", "anthropic", "google", "deepseek", "xai", "mistral"]
        assert [info.key for info in registry.catalogue() if info.supports_ocr] == ["ollama"]
        assert "ollama" in registry
        assert "babelfish" not in registry
