# -*- coding: utf-8 -*-
"""
Discord embeds for translation replies, log mirrors and command results
"""
from datetime import datetime, UTC

import discord

from models import LogEntry, Reply
from transbot.services.command_service import CommandResult

BLURPLE = 0x5865F2
GREEN = 0x3BA55C
RED = 0xED4245
AMBER = 0xF0A500

LOG_COLORS = {"error": RED, "translation": GREEN, "debug": AMBER}


def reply_embed(reply: Reply) -> discord.Embed:
    embed = discord.Embed(color=BLURPLE, timestamp=datetime.now(UTC))
    embed.set_author(name=reply.author_name, icon_url=reply.author_avatar)
    for f in reply.fields:
        embed.add_field(name=f.name, value=f.value, inline=False)
    return embed


def log_embed(entry: LogEntry) -> discord.Embed:
    title = f"Debug: {entry.type}" if entry.type == "debug" else f"Log: {entry.type}"
    return discord.Embed(
        color=LOG_COLORS.get(entry.type, BLURPLE),
        title=title,
        description=entry.message[:4096],
        timestamp=entry.time,
    )


def result_embed(result: CommandResult) -> discord.Embed:
    embed = discord.Embed(
        color=BLURPLE if result.ok else RED, title=result.title, description=result.text or None
    )
    for f in result.fields:
        embed.add_field(name=f.name, value=f.value[:1024], inline=False)
    return embed
