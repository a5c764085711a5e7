# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/12 14:30
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Admission → extraction → translation → reply for one channel message
"""
import asyncio
import base64
from typing import List, Tuple

from loguru import logger

from models import (
    AdmissionReason,
    AIConfig,
    Attachment,
    InboundMessage,
    PipelineOutcome,
    Reply,
    ReplyField,
    TranslationRecord,
)
from providers import ProviderError, ProviderRegistry
from transbot.platform import ChatPlatform, PlatformError
from transbot.services.access_control import AccessGate
from transbot.services.config_store import ConfigStore
from transbot.services.directory_service import DirectoryLookup
from transbot.services.event_log import EventLog
from transbot.services.stats_service import StatsAggregator, TranslationHistory
from utils import preview, truncate

DASHBOARD_SOURCE = "dashboard"


class MessagePipeline:
    """
    Orchestrates one inbound message end to end

    Each stage isolates its own failures: a failed extraction still lets the
    text be translated, a failed translation does not cancel the other one,
    and a failed reply keeps the recorded translations.
    """

    def __init__(
        self,
        store: ConfigStore,
        gate: AccessGate,
        registry: ProviderRegistry,
        directory: DirectoryLookup,
        platform: ChatPlatform,
        events: EventLog,
        history: TranslationHistory,
        stats: StatsAggregator,
    ):
        self._store = store
        self._gate = gate
        self._registry = registry
        self._directory = directory
        self._platform = platform
        self._events = events
        self._history = history
        self._stats = stats

    async def process(self, message: InboundMessage) -> PipelineOutcome:
        admission = await self._gate.evaluate(message)
        if admission.reason is AdmissionReason.BOT_AUTHOR:
            # No trace: mirrored debug entries are bot posts themselves
            return PipelineOutcome.SKIPPED

        channel = message.channel_name or await self._directory.channel_label(
            message.guild_id, message.channel_id
        )
        self._events.debug(
            f'Message received from {message.author_name} in #{channel}: "{preview(message.content)}"'
        )
        if not admission.proceed:
            self._events.debug(f"Skipping message in #{channel}: {admission.reason.value}")
            return PipelineOutcome.SKIPPED

        route = admission.route
        config = self._store.ai_config()

        extracted = None
        if admission.ocr_allowed:
            extracted = await self._extract(message.image_attachments[0], config, message, channel)

        text = message.content if message.content.strip() else ""
        if not text and not extracted:
            self._events.debug(f"No content to translate for #{channel}")
            return PipelineOutcome.SKIPPED

        jobs: List[Tuple[str, bool]] = []
        if extracted:
            jobs.append((extracted, True))
        if text:
            jobs.append((text, False))

        self._events.debug(f"Processing {len(jobs)} translation(s) for #{channel} to {route.language}")
        results = await asyncio.gather(
            *(
                self.translate(
                    source,
                    route.language,
                    channel=channel,
                    author=message.author_name,
                    is_ocr=is_ocr,
                    config=config,
                )
                for source, is_ocr in jobs
            ),
            return_exceptions=True,
        )

        fields: List[ReplyField] = []
        ocr_delivered = False
        for (source, is_ocr), result in zip(jobs, results):
            if isinstance(result, BaseException):
                if not isinstance(result, ProviderError):
                    logger.opt(exception=result).error("Unexpected translation failure")
                continue
            if is_ocr:
                ocr_delivered = True
                fields.append(ReplyField(name="📷 Extracted Text", value=truncate(source)))
                fields.append(
                    ReplyField(name=f"📷 Translated ({route.language})", value=truncate(result))
                )
            else:
                fields.append(ReplyField(name="Original", value=truncate(source)))
                fields.append(
                    ReplyField(name=f"Translated ({route.language})", value=truncate(result))
                )

        if not fields:
            return PipelineOutcome.FAILED

        reply = Reply(
            author_name=message.author_name, author_avatar=message.author_avatar, fields=fields
        )
        try:
            await self._platform.send_reply(message, reply)
        except PlatformError as err:
            self._events.error(f"Failed to send translation to #{channel}: {err}")
            return PipelineOutcome.FAILED

        self._events.translation(
            f"#{channel}: {message.author_name} → {route.language}{' (OCR)' if ocr_delivered else ''}"
        )
        return PipelineOutcome.DELIVERED

    async def _extract(
        self, attachment: Attachment, config: AIConfig, message: InboundMessage, channel: str
    ) -> str | None:
        self._events.debug(f"Starting OCR for image in #{channel}")
        try:
            image = await self._platform.download_attachment(attachment.url)
            extracted = await self._registry.extract_text(
                base64.b64encode(image).decode("ascii"), config
            )
        except (PlatformError, ProviderError) as err:
            self._events.error(f"OCR failed: {err}")
            return None

        self._events.ocr(f"#{channel}: {message.author_name} - Extracted text from image")
        self._events.debug(f"OCR completed, extracted {len(extracted)} characters")
        return extracted or None

    async def translate(
        self,
        text: str,
        language: str,
        *,
        channel: str = DASHBOARD_SOURCE,
        author: str = DASHBOARD_SOURCE,
        is_ocr: bool = False,
        config: AIConfig | None = None,
    ) -> str:
        """
        Translate through the active provider and record the result

        A success appends one history record and bumps the counters. A failure
        is written to the event log and re-raised.
        """
        config = config or self._store.ai_config()
        try:
            translation = await self._registry.translate(text, language, config)
        except ProviderError as err:
            self._events.error(f"Translation failed ({config.provider}): {err}")
            raise

        self._history.record(
            TranslationRecord(
                original=text,
                translation=translation,
                language=language,
                channel=channel,
                author=author,
                is_ocr=is_ocr,
            )
        )
        self._stats.record(language)
        self._events.debug(f'Translation complete: "{preview(translation)}"')
        return translation

    async def extract_text(self, image_base64: str) -> str:
        """Image text extraction for the dashboard; not recorded in history"""
        try:
            return await self._registry.extract_text(image_base64, self._store.ai_config())
        except ProviderError as err:
            self._events.error(f"OCR failed: {err}")
            raise
