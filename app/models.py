# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/11 14:20
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Data model shared by the pipeline, the command front-ends and the dashboard
"""

from datetime import datetime, UTC
from enum import Enum
from typing import Any, List, Dict, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CamelModel(BaseModel):
    """Serialized with camelCase keys, accepts both spellings on input"""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True, extra="ignore"
    )


class RoleEntry(CamelModel):
    id: str
    name: str


class ChannelRoute(CamelModel):
    language: str = Field(description="Target language of the translation")
    guild_id: str | None = Field(default=None)
    channel_name: str | None = Field(default=None, description="Display name cached at creation")
    enabled: bool = Field(default=True)
    enable_ocr: bool = Field(default=False)


class BotConfig(CamelModel):
    """The persisted configuration document"""

    channels: Dict[str, ChannelRoute] = Field(default_factory=dict)
    ignored_users: List[str] = Field(default_factory=list)
    allowed_roles: Dict[str, List[RoleEntry]] = Field(default_factory=dict)
    ocr_roles: Dict[str, List[RoleEntry]] = Field(default_factory=dict)
    admin_roles: List[RoleEntry] = Field(default_factory=list)
    log_channel: str | None = Field(default=None)
    debug_log_channel: str | None = Field(default=None)
    model: str | None = Field(default=None, description="Translation model, falls back to DEFAULT_MODEL")
    ocr_model: str | None = Field(default=None, description="Extraction model, falls back to `model`")
    ai_provider: str = Field(default="ollama")
    ai_api_key: str = Field(default="")
    ai_base_url: str = Field(default="", description="Base URL override for hosted providers")
    ollama_url: str | None = Field(default=None)


class AIConfig(BaseModel):
    """Snapshot of the active provider settings, resolved once per call"""

    model_config = ConfigDict(frozen=True)

    provider: str
    api_key: str = ""
    base_url: str = ""
    model: str | None = Field(default=None, description="None lets the provider pick its default")
    ocr_model: str
    ollama_url: str


class RoleKind(str, Enum):
    ALLOWED = "allowed"
    """
    Roles allowed to have their messages translated
    """

    OCR = "ocr"
    """
    Roles allowed to trigger image text extraction
    """


LogType = Literal["info", "error", "translation", "ocr", "debug"]


class LogEntry(BaseModel):
    type: LogType
    message: str
    time: datetime = Field(default_factory=_utcnow)


class TranslationRecord(CamelModel):
    original: str
    translation: str
    language: str
    channel: str
    author: str
    is_ocr: bool = False
    time: datetime = Field(default_factory=_utcnow)


class UserInfo(BaseModel):
    username: str
    avatar: str | None = None


class Attachment(BaseModel):
    url: str
    content_type: str | None = None
    filename: str | None = None

    @property
    def is_image(self) -> bool:
        return bool(self.content_type) and self.content_type.startswith("image/")


class InboundMessage(BaseModel):
    """Platform-neutral view of a chat message"""

    message_id: str
    author_id: str
    author_name: str
    author_avatar: str | None = None
    author_is_bot: bool = False
    guild_id: str | None = Field(default=None, description="None for direct messages")
    channel_id: str
    channel_name: str | None = None
    content: str = ""
    attachments: List[Attachment] = Field(default_factory=list)
    raw: Any = Field(default=None, exclude=True, description="Native platform object")

    @property
    def image_attachments(self) -> List[Attachment]:
        return [a for a in self.attachments if a.is_image]


class ReplyField(BaseModel):
    name: str
    value: str


class Reply(BaseModel):
    author_name: str
    author_avatar: str | None = None
    fields: List[ReplyField] = Field(default_factory=list)


class AdmissionReason(str, Enum):
    ADMITTED = "admitted"
    BOT_AUTHOR = "bot_author"
    DIRECT_MESSAGE = "direct_message"
    COMMAND = "command"
    NO_ROUTE = "no_route"
    DISABLED = "disabled"
    IGNORED_USER = "ignored_user"
    MISSING_ROLE = "missing_role"
    ROLE_LOOKUP_FAILED = "role_lookup_failed"


class PipelineOutcome(str, Enum):
    SKIPPED = "skipped"
    """
    Admission failed or there was nothing to translate, no reply is sent
    """

    DELIVERED = "delivered"
    """
    The reply carrying every produced translation was sent
    """

    FAILED = "failed"
    """
    No translation could be produced, or the reply could not be sent
    """
