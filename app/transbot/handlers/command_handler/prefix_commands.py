# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/13 16:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : `$translate <verb> ...` text commands
"""
from typing import List, Tuple

import discord
from loguru import logger

from transbot.embeds import result_embed
from transbot.services import CommandContext, CommandResult, CommandService, DirectoryLookup
from utils import parse_channel_mention

COMMAND_NAME = "translate"


def parse_prefix_command(content: str, prefix: str) -> Tuple[str, List[str]] | None:
    """
    从消息文本中提取 translate 子命令和参数

    Returns:
        (verb, args), with an empty verb when none was given, or None when the
        text is not a `translate` command
    """
    if not content.startswith(prefix):
        return None

    parts = content[len(prefix) :].strip().split()
    if not parts or parts[0].lower() != COMMAND_NAME:
        return None

    verb = parts[1].lower() if len(parts) > 1 else ""
    return verb, parts[2:]


def usage_text(prefix: str) -> str:
    return "Available commands:\n" + "\n".join(
        f.name for f in CommandService.help(f"{prefix}{COMMAND_NAME}").fields
    )


async def _channel_arg(
    directory: DirectoryLookup, ctx: CommandContext, token: str | None
) -> Tuple[str, str]:
    """Channel named by a `<#id>` mention, else the channel the command was sent in"""
    if channel_id := parse_channel_mention(token):
        return channel_id, await directory.channel_label(ctx.guild_id, channel_id)
    return ctx.channel_id, ctx.channel_name


async def dispatch(
    service: CommandService,
    directory: DirectoryLookup,
    ctx: CommandContext,
    verb: str,
    args: List[str],
    prefix: str,
) -> CommandResult:
    first = args[0] if args else None

    if verb == "set":
        if parse_channel_mention(first):
            channel_id, channel_name = await _channel_arg(directory, ctx, first)
            language = " ".join(args[1:])
        else:
            channel_id, channel_name = ctx.channel_id, ctx.channel_name
            language = " ".join(args)
        if not language:
            return CommandResult(text=f"Usage: {prefix}{COMMAND_NAME} set #channel <language>", ok=False)
        return await service.set_channel(ctx, channel_id, channel_name, language)

    if verb == "remove":
        channel_id, channel_name = await _channel_arg(directory, ctx, first)
        return await service.remove_channel(ctx, channel_id, channel_name)

    if verb == "list":
        return await service.list_channels(ctx)

    if verb == "status":
        return await service.status(ctx)

    if verb == "logs":
        return await service.logs(ctx)

    if verb == "logchannel":
        action = first.lower() if first else None
        if parse_channel_mention(first):
            action, mention = "set", first
        else:
            mention = args[1] if len(args) > 1 else None
        channel_id, channel_name = await _channel_arg(directory, ctx, mention)
        return await service.set_log_channel(ctx, action, channel_id, channel_name)

    if verb == "ocr":
        channel_id, channel_name = await _channel_arg(
            directory, ctx, args[1] if len(args) > 1 else None
        )
        return await service.set_ocr(ctx, first, channel_id, channel_name)

    if verb == "model":
        return await service.model(ctx, first)

    if verb == "ocrmodel":
        return await service.ocr_model(ctx, first)

    if verb == "provider":
        return await service.provider(ctx, first)

    if verb == "help":
        return service.help(f"{prefix}{COMMAND_NAME}")

    return CommandResult(text=usage_text(prefix))


async def handle_prefix_command(
    service: CommandService, directory: DirectoryLookup, message: discord.Message, prefix: str
) -> bool:
    """
    Run a prefix command and reply to it

    Returns:
        False when the message is not a `translate` command
    """
    parsed = parse_prefix_command(message.content, prefix)
    if parsed is None:
        return False
    verb, args = parsed

    author = message.author
    permissions = getattr(author, "guild_permissions", None)
    ctx = CommandContext(
        guild_id=str(message.guild.id) if message.guild else None,
        user_id=str(author.id),
        channel_id=str(message.channel.id),
        channel_name=getattr(message.channel, "name", None) or str(message.channel.id),
        can_manage_guild=bool(permissions and permissions.manage_guild),
    )

    logger.debug(f"Prefix command {verb or '<none>'} from user {ctx.user_id}")
    result = await dispatch(service, directory, ctx, verb, args, prefix)

    try:
        if result.is_embed:
            await message.reply(embed=result_embed(result))
        else:
            await message.reply(result.text)
    except discord.HTTPException as err:
        logger.error(f"Failed to reply to prefix command {verb}: {err}")
    return True
