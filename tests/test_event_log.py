# -*- coding: utf-8 -*-
"""
Tests for the event feed and its mirroring to the log channels
"""
import asyncio

import pytest

from transbot.services import EventLog
from transbot.task_manager import wait_for_all_tasks


@pytest.fixture
def events(store, platform) -> EventLog:
    return EventLog(store, platform, capacity=5)


class TestEventLog:
    def test_capacity_and_order(self, store):
        events = EventLog(store, capacity=5)
        for n in range(8):
            events.info(f"event {n}")

        assert len(events) == 5
        assert [e.message for e in events.recent()] == [f"event {n}" for n in range(7, 2, -1)]

    def test_debug_filtered_from_api_unless_enabled(self, store):
        events = EventLog(store)
        events.debug("trace")
        events.info("started")

        assert [e.type for e in events.for_api()] == ["info"]

        events.show_debug = True
        assert [e.type for e in events.for_api()] == ["info", "debug"]

    def test_api_view_is_capped(self, store):
        events = EventLog(store, capacity=100)
        for n in range(80):
            events.error(f"boom {n}")

        assert len(events.for_api()) == 50


class TestMirroring:
    @pytest.mark.asyncio
    async def test_operational_entries_go_to_log_channel(self, events, store, platform):
        store.set_log_channel("logs")
        store.set_debug_log_channel("debug-logs")

        events.translation("#general: alice → spanish")
        events.debug("Message received")
        events.ocr("#general: alice - Extracted text from image")
        await wait_for_all_tasks(timeout=1)

        posted = {(channel, entry.type) for channel, entry in platform.log_posts}
        assert posted == {("logs", "translation"), ("debug-logs", "debug")}

    @pytest.mark.asyncio
    async def test_nothing_mirrored_without_channel(self, events, platform):
        events.info("started")
        await asyncio.sleep(0)

        assert platform.log_posts == []

    @pytest.mark.asyncio
    async def test_failed_mirror_is_not_fed_back(self, events, store, platform):
        store.set_log_channel("logs")
        platform.log_error = RuntimeError("channel deleted")

        events.error("something broke")
        await wait_for_all_tasks(timeout=1)

        assert len(events) == 1
