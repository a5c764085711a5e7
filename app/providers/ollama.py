# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/11 16:48
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Self-hosted Ollama backend, the only one able to read images
"""
from typing import List

from httpx import HTTPError
from loguru import logger

from models import AIConfig
from prompts import OCR_PROMPT
from providers.base import TranslationProvider, build_prompt
from providers.errors import ProviderCallFailure
from providers.models import ProviderRequest, ProviderStatus
from settings import settings


class OllamaProvider(TranslationProvider):
    key = "ollama"
    display_name = "Ollama (Local)"
    default_base_url = settings.DEFAULT_OLLAMA_URL
    default_model = settings.DEFAULT_MODEL
    requires_api_key = False
    supports_ocr = True
    response_path = ("response",)

    def resolve_base_url(self, config: AIConfig) -> str:
        return (config.ollama_url or self.default_base_url).rstrip("/")

    def build_translation_request(
        self, text: str, language: str, config: AIConfig
    ) -> ProviderRequest:
        return ProviderRequest(
            url=f"{self.resolve_base_url(config)}/api/generate",
            payload={
                "model": self.resolve_model(config),
                "prompt": build_prompt(text, language),
                "stream": False,
            },
        )

    async def extract_text(self, image_base64: str, config: AIConfig) -> str:
        request = ProviderRequest(
            url=f"{self.resolve_base_url(config)}/api/generate",
            payload={
                "model": config.ocr_model,
                "prompt": OCR_PROMPT,
                "images": [image_base64],
                "stream": False,
            },
        )
        data = await self._post_json(request, timeout=self.ocr_timeout)
        return self.parse_response(data)

    async def _fetch_tags(self, config: AIConfig, timeout: float) -> List[str]:
        response = await self._client.get(f"{self.resolve_base_url(config)}/api/tags", timeout=timeout)
        response.raise_for_status()
        models = response.json().get("models") or []
        return [m.get("name", "unknown") for m in models if isinstance(m, dict)]

    async def list_models(self, config: AIConfig) -> List[str]:
        try:
            return await self._fetch_tags(config, self.translate_timeout)
        except (HTTPError, ValueError, AttributeError) as err:
            raise ProviderCallFailure(f"Failed to fetch models from Ollama: {err}") from err

    async def check_status(self, config: AIConfig) -> ProviderStatus:
        try:
            models = await self._fetch_tags(config, self.status_timeout)
        except (HTTPError, ValueError, AttributeError) as err:
            logger.debug(f"Ollama status probe failed: {err!r}")
            return ProviderStatus(
                available=False, provider=self.key, status="offline", error=str(err) or repr(err)
            )
        return ProviderStatus(available=True, provider=self.key, status="online", models=models)
