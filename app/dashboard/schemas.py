# -*- coding: utf-8 -*-
"""
Request bodies of the admin HTTP surface
"""
from pydantic import Field

from models import CamelModel


class ChannelCreate(CamelModel):
    channel_id: str = Field(min_length=1)
    language: str = Field(min_length=1)
    guild_id: str | None = None


class ChannelUpdate(CamelModel):
    language: str | None = None
    enabled: bool | None = None
    enable_ocr: bool | None = None


class RoleRequest(CamelModel):
    role_id: str = Field(min_length=1)
    guild_id: str | None = None


class SettingsUpdate(CamelModel):
    """
    Partial update; only the keys present in the body are applied, so an
    explicit `null` clears a value while an absent key leaves it alone
    """

    show_debug: bool | None = None
    log_channel: str | None = None
    debug_log_channel: str | None = None
    model: str | None = None
    ocr_model: str | None = None
    ai_provider: str | None = None
    ai_api_key: str | None = None
    ai_base_url: str | None = None
    ollama_url: str | None = None


class TranslateRequest(CamelModel):
    text: str = Field(min_length=1)
    language: str = Field(min_length=1)


class OcrRequest(CamelModel):
    image: str = Field(min_length=1, description="Base64 encoded image")


class OcrTranslateRequest(OcrRequest):
    language: str = Field(min_length=1)
