"""
语录插件 - 收录群友的发言并随机发送
Quote plugin - collects group members' messages and replays a random one.

用法 / Usage:
- 引用一条消息并发送 ``.收录``：收录被引用的消息
  Quote a message and send ``.收录`` to store it.
- 发送 ``.语录``：随机发送一条已收录的语录
  Send ``.语录`` to get a random stored quote.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import TYPE_CHECKING, Any

from OneBotHub.pack.base import Plugin
from OneBotHub.store.json_store import JsonStore

if TYPE_CHECKING:
    from OneBotHub.bot import Bot
    from OneBotHub.message.envelope import MessageEnvelope

logger = logging.getLogger(__name__)

# 收录时保留的消息段类型
KEPT_SEGMENT_TYPES = ("text", "at", "face")


class QuotePlugin(Plugin):
    name = "语录"
    description = "收录群友语录，随机发送 / Collect and replay group quotes"

    collect_command = "收录"
    show_command = "语录"

    def __init__(self) -> None:
        self._store: JsonStore | None = None
        # 每个群一把锁，串行化读-改-写
        self._locks: dict[int, asyncio.Lock] = {}

    @property
    def store(self) -> JsonStore:
        if self._store is None:
            self._store = JsonStore(self.data_path)
        return self._store

    def _lock_for(self, group_id: int) -> asyncio.Lock:
        lock = self._locks.get(group_id)
        if lock is None:
            lock = self._locks[group_id] = asyncio.Lock()
        return lock

    async def run(self, bot: Bot, envelope: MessageEnvelope) -> None:
        if not envelope.is_group or envelope.group_id is None:
            return

        if envelope.reply_target_id is not None and bot.check_command(
            envelope, self.collect_command
        ):
            await self.collect(bot, envelope.group_id, envelope.reply_target_id)
            return

        if bot.check_command(envelope, self.show_command):
            await self.show(bot, envelope.group_id)

    async def collect(self, bot: Bot, group_id: int, message_id: int) -> None:
        quoted = await bot.api.get_message(message_id)
        segments = [
            s.to_wire() for s in quoted.segments if s.type in KEPT_SEGMENT_TYPES
        ]
        if not segments:
            await bot.send("这条消息没有可以收录的内容", group_id)
            return

        async with self._lock_for(group_id):
            data = self.store.read(group_id, default=None) or {"quotes": []}
            data.setdefault("quotes", []).append(
                {"sender_id": quoted.sender_id, "segments": segments}
            )
            self.store.write(group_id, data)

        logger.info("群 %s 收录了一条语录 (来自 %s)", group_id, quoted.sender_id)
        await bot.send("收录成功", group_id)

    async def show(self, bot: Bot, group_id: int) -> None:
        data = self.store.read(group_id, default=None) or {}
        quotes: list[dict[str, Any]] = data.get("quotes") or []
        if not quotes:
            await bot.send("未收录任何语录", group_id)
            return

        quote = random.choice(quotes)
        sender_id = quote.get("sender_id")
        name = str(sender_id)
        if sender_id is not None:
            member = await bot.api.get_group_member_info(group_id, sender_id)
            name = (member or {}).get("card") or (member or {}).get("nickname") or name

        await bot.send([*quote["segments"], f"\n—— {name}"], group_id)
