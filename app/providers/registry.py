# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/11 17:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Closed set of translation backends keyed by provider id
"""
from typing import Dict, List, Type

from httpx import AsyncClient
from loguru import logger

from models import AIConfig
from providers.base import TranslationProvider
from providers.errors import ProviderConfigError
from providers.hosted import (
    OpenAIProvider,
    AnthropicProvider,
    GoogleProvider,
    DeepSeekProvider,
    XAIProvider,
    MistralProvider,
)
from providers.models import ProviderInfo, ProviderStatus
from providers.ollama import OllamaProvider

PROVIDER_CLASSES: List[Type[TranslationProvider]] = [
    OllamaProvider,
    OpenAIProvider,
    AnthropicProvider,
    GoogleProvider,
    DeepSeekProvider,
    XAIProvider,
    MistralProvider,
]

# Image text extraction is only offered by the self-hosted backend
OCR_PROVIDER = OllamaProvider.key


class ProviderRegistry:
    """
    Uniform `translate` / `extract_text` contract over every backend

    All backends share one HTTP client. The active backend is chosen per call
    from the `AIConfig` snapshot, so switching providers takes effect on the
    next call without touching calls already in flight.
    """

    def __init__(self, client: AsyncClient | None = None, **provider_kwargs):
        self._owns_client = client is None
        self._client = client or AsyncClient()
        self._providers: Dict[str, TranslationProvider] = {
            cls.key: cls(self._client, **provider_kwargs) for cls in PROVIDER_CLASSES
        }

    @property
    def keys(self) -> List[str]:
        return list(self._providers)

    def __contains__(self, key: str) -> bool:
        return key in self._providers

    def get(self, key: str) -> TranslationProvider:
        try:
            return self._providers[key]
        except KeyError:
            raise ProviderConfigError(
                f"Unknown provider '{key}'. Available: {', '.join(self._providers)}"
            ) from None

    def catalogue(self) -> List[ProviderInfo]:
        return [provider.info() for provider in self._providers.values()]

    async def translate(self, text: str, language: str, config: AIConfig) -> str:
        provider = self.get(config.provider)
        logger.debug(f"Translating {len(text)} chars to {language} via {provider.key}")
        return await provider.translate(text, language, config)

    async def extract_text(self, image_base64: str, config: AIConfig) -> str:
        provider = self.get(OCR_PROVIDER)
        logger.debug(f"Extracting text from image with {config.ocr_model}")
        return await provider.extract_text(image_base64, config)

    async def list_models(self, config: AIConfig) -> List[str]:
        return await self.get(config.provider).list_models(config)

    async def check_status(self, config: AIConfig) -> ProviderStatus:
        return await self.get(config.provider).check_status(config)

    async def aclose(self):
        if self._owns_client:
            await self._client.aclose()
