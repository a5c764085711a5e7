# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/13 16:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : `/translate` application command group
"""
import discord
from discord import app_commands
from loguru import logger

from transbot.embeds import result_embed
from transbot.services import CommandContext, CommandResult, CommandService


def _context(interaction: discord.Interaction) -> CommandContext:
    user = interaction.user
    can_manage = isinstance(user, discord.Member) and user.guild_permissions.manage_guild
    return CommandContext(
        guild_id=str(interaction.guild_id) if interaction.guild_id else None,
        user_id=str(user.id),
        channel_id=str(interaction.channel_id),
        channel_name=getattr(interaction.channel, "name", None) or str(interaction.channel_id),
        can_manage_guild=can_manage,
    )


async def _respond(interaction: discord.Interaction, result: CommandResult) -> None:
    try:
        if result.is_embed:
            await interaction.followup.send(embed=result_embed(result))
        else:
            await interaction.followup.send(result.text)
    except discord.HTTPException as err:
        logger.error(f"Failed to answer /translate {interaction.command.name}: {err}")


class TranslateGroup(app_commands.Group):
    """
    Every verb is deferred first: status and model listing may wait on the AI
    backend longer than the interaction acknowledgement window.
    """

    def __init__(self, service: CommandService):
        super().__init__(name="translate", description="Manage message translation")
        self.service = service

    @app_commands.command(name="set", description="Set a channel for translation")
    @app_commands.describe(channel="Channel to translate", language="Target language")
    async def set_channel(
        self, interaction: discord.Interaction, channel: discord.TextChannel, language: str
    ):
        await interaction.response.defer()
        result = await self.service.set_channel(
            _context(interaction), str(channel.id), channel.name, language
        )
        await _respond(interaction, result)

    @app_commands.command(name="remove", description="Remove translation from a channel")
    @app_commands.describe(channel="Channel to remove")
    async def remove_channel(self, interaction: discord.Interaction, channel: discord.TextChannel):
        await interaction.response.defer()
        result = await self.service.remove_channel(
            _context(interaction), str(channel.id), channel.name
        )
        await _respond(interaction, result)

    @app_commands.command(name="list", description="List all translation channels")
    async def list_channels(self, interaction: discord.Interaction):
        await interaction.response.defer()
        await _respond(interaction, await self.service.list_channels(_context(interaction)))

    @app_commands.command(name="status", description="Check bot and AI provider status")
    async def status(self, interaction: discord.Interaction):
        await interaction.response.defer()
        await _respond(interaction, await self.service.status(_context(interaction)))

    @app_commands.command(name="logs", description="View recent bot logs")
    async def logs(self, interaction: discord.Interaction):
        await interaction.response.defer()
        await _respond(interaction, await self.service.logs(_context(interaction)))

    @app_commands.command(name="logchannel", description="Configure log channel")
    @app_commands.describe(action="Action: set or remove", channel="Channel for logs")
    async def logchannel(
        self,
        interaction: discord.Interaction,
        action: str | None = None,
        channel: discord.TextChannel | None = None,
    ):
        await interaction.response.defer()
        ctx = _context(interaction)
        if channel is None and (action or "set").lower() == "set":
            result = CommandResult(
                text="Usage: /translate logchannel set #channel\n/translate logchannel remove",
                ok=False,
            )
        else:
            channel_id = str(channel.id) if channel else ctx.channel_id
            channel_name = channel.name if channel else ctx.channel_name
            result = await self.service.set_log_channel(ctx, action, channel_id, channel_name)
        await _respond(interaction, result)

    @app_commands.command(name="ocr", description="Enable/disable OCR for a channel")
    @app_commands.describe(action="Action: enable or disable", channel="Channel to configure")
    async def ocr(
        self, interaction: discord.Interaction, action: str, channel: discord.TextChannel
    ):
        await interaction.response.defer()
        result = await self.service.set_ocr(
            _context(interaction), action, str(channel.id), channel.name
        )
        await _respond(interaction, result)

    @app_commands.command(name="model", description="Get or set the translation model")
    @app_commands.describe(name="Model name (leave empty to see current)")
    async def model(self, interaction: discord.Interaction, name: str | None = None):
        await interaction.response.defer()
        await _respond(interaction, await self.service.model(_context(interaction), name))

    @app_commands.command(name="ocrmodel", description="Get or set the OCR model")
    @app_commands.describe(name="Model name (leave empty to see current)")
    async def ocrmodel(self, interaction: discord.Interaction, name: str | None = None):
        await interaction.response.defer()
        await _respond(interaction, await self.service.ocr_model(_context(interaction), name))

    @app_commands.command(name="provider", description="Get or set the AI provider")
    @app_commands.describe(
        name="Provider: ollama, openai, anthropic, google, deepseek, xai, mistral"
    )
    async def provider(self, interaction: discord.Interaction, name: str | None = None):
        await interaction.response.defer()
        await _respond(interaction, await self.service.provider(_context(interaction), name))

    @app_commands.command(name="help", description="Show available commands")
    async def help(self, interaction: discord.Interaction):
        await interaction.response.defer()
        await _respond(interaction, self.service.help("/translate"))
