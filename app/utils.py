# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/11 14:02
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Logging bootstrap and small text helpers shared by the bot and the dashboard
"""
from __future__ import annotations

import os
import re
import sys

from loguru import logger

# Discord caps an embed field value at 1024 characters
EMBED_FIELD_LIMIT = 1024

_CHANNEL_MENTION_PATTERN = re.compile(r"^<#(\d+)>$")


def init_log(**sink_channel):
    log_level = os.getenv("LOG_LEVEL", "DEBUG").upper()

    persistent_format = (
        "<g>{time:YYYY-MM-DD HH:mm:ss}</g> | "
        "<lvl>{level}</lvl>    | "
        "<c><u>{name}</u></c>:{function}:{line} | "
        "{message} - "
        "{extra}"
    )
    stdout_format = (
        "<g>{time:YYYY-MM-DD HH:mm:ss}</g> | "
        "<lvl>{level:<8}</lvl>    | "
        "<c>{name}</c>:<c>{function}</c>:<c>{line}</c> | "
        "<n>{message}</n>"
    )

    logger.remove()
    logger.add(sink=sys.stdout, colorize=True, level=log_level, format=stdout_format, diagnose=False)
    if sink_channel.get("error"):
        logger.add(
            sink=sink_channel.get("error"),
            level="ERROR",
            rotation="5 MB",
            retention="7 days",
            encoding="utf8",
            diagnose=False,
        )
    if sink_channel.get("runtime"):
        logger.add(
            sink=sink_channel.get("runtime"),
            level="TRACE",
            rotation="5 MB",
            retention="7 days",
            encoding="utf8",
            diagnose=False,
        )
    if sink_channel.get("serialize"):
        logger.add(
            sink=sink_channel.get("serialize"),
            level="DEBUG",
            format=persistent_format,
            encoding="utf8",
            diagnose=False,
            serialize=True,
        )
    return logger


def truncate(text: str, limit: int = EMBED_FIELD_LIMIT) -> str:
    """Cut `text` to `limit` characters, marking the cut with an ellipsis"""
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def preview(text: str | None, size: int = 50) -> str:
    """Short single-line excerpt used in debug traces"""
    if not text:
        return ""
    flat = " ".join(text.split())
    return flat if len(flat) <= size else f"{flat[:size]}..."


def parse_channel_mention(token: str | None) -> str | None:
    """Return the channel id of a `<#123>` mention, or None"""
    if not token:
        return None
    if match := _CHANNEL_MENTION_PATTERN.match(token.strip()):
        return match.group(1)
    return None
