# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/13 17:10
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Routes guild messages to the prefix commands or the translation pipeline
"""
import discord
from loguru import logger

from models import Attachment, InboundMessage, PipelineOutcome
from transbot.container import Services
from transbot.handlers.command_handler import handle_prefix_command


def to_inbound(message: discord.Message) -> InboundMessage:
    author = message.author
    return InboundMessage(
        message_id=str(message.id),
        author_id=str(author.id),
        author_name=author.name,
        author_avatar=author.display_avatar.url,
        author_is_bot=author.bot,
        guild_id=str(message.guild.id) if message.guild else None,
        channel_id=str(message.channel.id),
        channel_name=getattr(message.channel, "name", None),
        content=message.content or "",
        attachments=[
            Attachment(url=a.url, content_type=a.content_type, filename=a.filename)
            for a in message.attachments
        ],
        raw=message,
    )


async def handle_message(services: Services, message: discord.Message, prefix: str) -> None:
    if message.guild and not message.author.bot and message.content.startswith(prefix):
        if await handle_prefix_command(services.commands, services.directory, message, prefix):
            return

    outcome = await services.pipeline.process(to_inbound(message))
    if outcome is not PipelineOutcome.SKIPPED:
        logger.debug(f"Message {message.id} in #{message.channel} -> {outcome.value}")
