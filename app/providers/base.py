# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/11 16:20
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Common shape of a translation backend
"""
from abc import ABC, abstractmethod
from typing import Any, ClassVar, List, Sequence, Tuple

from httpx import AsyncClient, HTTPError, HTTPStatusError, TimeoutException
from loguru import logger

from models import AIConfig
from prompts import TRANSLATION_PROMPT_TEMPLATE, TRANSLATION_SYSTEM_TEMPLATE
from providers.errors import ProviderCallFailure, ProviderConfigError
from providers.models import ProviderInfo, ProviderRequest, ProviderStatus
from settings import settings

ResponsePath = Tuple[str | int, ...]


def dig(data: Any, path: ResponsePath) -> Any:
    """
    Walk a decoded JSON body along `path`

    String steps index objects, integer steps index arrays. Any mismatch means
    the backend answered with a shape we do not understand.
    """
    node = data
    for step in path:
        if isinstance(step, int):
            if not isinstance(node, list) or not -len(node) <= step < len(node):
                raise ProviderCallFailure(f"Malformed response: missing index {step}")
        elif not isinstance(node, dict) or step not in node:
            raise ProviderCallFailure(f"Malformed response: missing key '{step}'")
        node = node[step]
    return node


def build_prompt(text: str, language: str) -> str:
    return TRANSLATION_PROMPT_TEMPLATE.format(language=language, text=text)


def build_system_instruction(language: str) -> str:
    return TRANSLATION_SYSTEM_TEMPLATE.format(language=language)


class TranslationProvider(ABC):
    """
    One AI backend

    Subclasses only describe how a request is built and where the generated
    text lives in the response; sending, error mapping and trimming are shared.
    """

    key: ClassVar[str]
    display_name: ClassVar[str]
    default_base_url: ClassVar[str] = ""
    default_model: ClassVar[str] = ""
    known_models: ClassVar[Sequence[str]] = ()
    requires_api_key: ClassVar[bool] = True
    supports_ocr: ClassVar[bool] = False
    response_path: ClassVar[ResponsePath]

    def __init__(
        self,
        client: AsyncClient,
        *,
        translate_timeout: float = settings.TRANSLATE_TIMEOUT,
        ocr_timeout: float = settings.OCR_TIMEOUT,
        status_timeout: float = settings.STATUS_TIMEOUT,
    ):
        self._client = client
        self.translate_timeout = translate_timeout
        self.ocr_timeout = ocr_timeout
        self.status_timeout = status_timeout

    @classmethod
    def info(cls) -> ProviderInfo:
        return ProviderInfo(
            key=cls.key,
            name=cls.display_name,
            requires_api_key=cls.requires_api_key,
            default_base_url=cls.default_base_url,
            default_model=cls.default_model,
            supports_ocr=cls.supports_ocr,
        )

    def resolve_base_url(self, config: AIConfig) -> str:
        return (config.base_url or self.default_base_url).rstrip("/")

    def resolve_model(self, config: AIConfig) -> str:
        return config.model or self.default_model

    def ensure_configured(self, config: AIConfig) -> None:
        """Reject the call before any network traffic when the credential is missing"""
        if self.requires_api_key and not config.api_key:
            raise ProviderConfigError(f"{self.display_name} is not configured: API key missing")

    @abstractmethod
    def build_translation_request(
        self, text: str, language: str, config: AIConfig
    ) -> ProviderRequest:
        raise NotImplementedError

    def parse_response(self, data: Any) -> str:
        value = dig(data, self.response_path)
        if not isinstance(value, str):
            raise ProviderCallFailure(f"{self.display_name} returned a non-text completion")
        return value.strip()

    async def translate(self, text: str, language: str, config: AIConfig) -> str:
        self.ensure_configured(config)
        request = self.build_translation_request(text, language, config)
        data = await self._post_json(request, timeout=self.translate_timeout)
        return self.parse_response(data)

    async def extract_text(self, image_base64: str, config: AIConfig) -> str:
        raise ProviderConfigError(f"{self.display_name} does not support image text extraction")

    async def list_models(self, config: AIConfig) -> List[str]:
        return list(self.known_models)

    async def check_status(self, config: AIConfig) -> ProviderStatus:
        if self.requires_api_key and not config.api_key:
            return ProviderStatus(
                available=False, provider=self.key, status="offline", error="API key not configured"
            )
        return ProviderStatus(available=True, provider=self.key, status="configured")

    async def _post_json(self, request: ProviderRequest, *, timeout: float) -> Any:
        logger.debug(f"[{self.key}] POST {request.url.split('?')[0]}")
        try:
            response = await self._client.post(
                request.url, json=request.payload, headers=request.headers, timeout=timeout
            )
            response.raise_for_status()
            return response.json()
        except TimeoutException as err:
            raise ProviderCallFailure(f"{self.display_name} timed out after {timeout:g}s") from err
        except HTTPStatusError as err:
            raise ProviderCallFailure(
                f"{self.display_name} returned HTTP {err.response.status_code}"
            ) from err
        except HTTPError as err:
            raise ProviderCallFailure(f"{self.display_name} request failed: {err}") from err
        except ValueError as err:
            raise ProviderCallFailure(f"{self.display_name} returned a malformed body") from err
