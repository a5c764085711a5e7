# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/14 14:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Runs the Discord bot and the admin dashboard in one event loop
"""
import asyncio
import json
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from loguru import logger

from dashboard import create_app
from providers import ProviderRegistry
from settings import settings, LOG_DIR
from transbot.bot import TranslationBot
from transbot.services import ConfigStore
from transbot.task_manager import wait_for_all_tasks
from utils import init_log

init_log(
    runtime=LOG_DIR.joinpath("runtime.log"),
    error=LOG_DIR.joinpath("error.log"),
    serialize=LOG_DIR.joinpath("serialize.log"),
)


def _on_bot_exit(task: asyncio.Task):
    if task.cancelled():
        return
    if exc := task.exception():
        logger.opt(exception=exc).error(f"Discord client stopped: {exc}")


def build_app() -> FastAPI:
    store = ConfigStore()
    store.load()
    registry = ProviderRegistry()
    bot = TranslationBot(store, registry)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        token = settings.DISCORD_BOT_TOKEN.get_secret_value()
        bot_task = asyncio.create_task(bot.start(token), name="discord-client")
        bot_task.add_done_callback(_on_bot_exit)
        logger.success(
            f"Dashboard available at http://{settings.DASHBOARD_HOST}:{settings.DASHBOARD_PORT}"
        )
        try:
            yield
        finally:
            # uvicorn turns SIGINT/SIGTERM into this shutdown phase
            logger.info("Receiving a shutdown signal, flushing config and closing clients...")
            await bot.close()
            await asyncio.wait([bot_task], timeout=5)
            await wait_for_all_tasks(timeout=5)
            await bot.services.aclose()

    return create_app(bot.services, lifespan=lifespan)


def main() -> None:
    """Start the bot and the dashboard."""
    sp = settings.model_dump(mode="json")
    s = json.dumps(sp, indent=2, ensure_ascii=False, default=str)
    logger.success(f"Loading settings: {s}")

    if not settings.DISCORD_BOT_TOKEN.get_secret_value():
        logger.error("Please set DISCORD_BOT_TOKEN in .env file or environment variable")
        sys.exit(1)

    app = build_app()
    uvicorn.run(app, host=settings.DASHBOARD_HOST, port=settings.DASHBOARD_PORT, log_level="info")


if __name__ == "__main__":
    main()
