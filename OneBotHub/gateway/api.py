"""
OneBot API - 常用的出站操作
OneBot API - the common outbound operations.

每个方法对应一个 OneBot 动作，失败时由传输层抛出 TransportError，
由发起调用的插件决定是否重试或上报。
Every method maps to one OneBot action; failures surface as TransportError
from the transport and the calling plugin decides whether to retry or report.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from OneBotHub.gateway.base import Transport
from OneBotHub.message.components import MessageContent, build_message
from OneBotHub.message.envelope import MessageEnvelope

logger = logging.getLogger(__name__)

AVATAR_URL = "http://q.qlogo.cn/headimg_dl?dst_uin={user_id}&spec=640&img_type=jpg"


class BotApi:
    """
    出站 API
    Outbound API.
    """

    def __init__(self, transport: Transport, http_timeout: float = 30.0) -> None:
        self._transport = transport
        self._http_timeout = http_timeout

    @property
    def transport(self) -> Transport:
        """用于其他 API 调用 / For actions not wrapped here."""
        return self._transport

    async def call(self, action: str, **params: Any) -> Any:
        return await self._transport.call(action, params)

    # ---- 消息 / messages ----

    async def send_message(
        self, content: MessageContent, target_id: int, is_group: bool = True
    ) -> int | None:
        """
        发送消息，返回消息 ID
        Send a message to a group (or a user when ``is_group`` is False).
        """
        params: dict[str, Any] = {"message": build_message(content)}
        if is_group:
            params["message_type"] = "group"
            params["group_id"] = target_id
        else:
            params["message_type"] = "private"
            params["user_id"] = target_id
        result = await self._transport.call("send_msg", params)
        return (result or {}).get("message_id")

    async def get_message(self, message_id: int) -> MessageEnvelope:
        """通过消息 ID 获取消息 / Fetch a message by id."""
        result = await self.call("get_msg", message_id=message_id)
        return MessageEnvelope.from_raw(result or {})

    async def delete_message(self, message_id: int) -> None:
        """撤回消息 / Recall a message."""
        await self.call("delete_msg", message_id=message_id)

    # ---- 信息查询 / lookups ----

    async def get_login_info(self) -> dict[str, Any]:
        """机器人自身的 QQ 信息 / The bot's own account info."""
        return await self.call("get_login_info")

    async def get_stranger_info(self, user_id: int) -> dict[str, Any]:
        return await self.call("get_stranger_info", user_id=user_id)

    async def get_group_info(self, group_id: int) -> dict[str, Any]:
        return await self.call("get_group_info", group_id=group_id)

    async def get_group_member_info(self, group_id: int, user_id: int) -> dict[str, Any]:
        return await self.call("get_group_member_info", group_id=group_id, user_id=user_id)

    async def get_friend_list(self) -> list[dict[str, Any]]:
        return await self.call("get_friend_list")

    async def get_group_list(self) -> list[dict[str, Any]]:
        return await self.call("get_group_list")

    async def get_group_member_list(self, group_id: int) -> list[dict[str, Any]]:
        return await self.call("get_group_member_list", group_id=group_id)

    async def get_group_muted_list(self, group_id: int) -> list[dict[str, Any]]:
        """当前被禁言的群成员 / Members currently muted in the group."""
        members = await self.get_group_member_list(group_id)
        return [m for m in members or [] if m.get("shut_up_timestamp", 0) > 0]

    async def is_admin_in_group(self, group_id: int) -> bool:
        """机器人在群中是否为管理员 / Whether the bot is an admin of the group."""
        me = await self.get_login_info()
        member = await self.get_group_member_info(group_id, me["user_id"])
        return member.get("role") == "admin"

    # ---- 群管理 / group moderation ----

    async def set_group_kick(
        self, group_id: int, user_id: int, reject_add_request: bool = False
    ) -> None:
        await self.call(
            "set_group_kick",
            group_id=group_id,
            user_id=user_id,
            reject_add_request=reject_add_request,
        )

    async def set_group_ban(self, group_id: int, user_id: int, duration: int = 600) -> None:
        """单人禁言，duration 为 0 表示解除 / Mute one member; 0 lifts it."""
        await self.call("set_group_ban", group_id=group_id, user_id=user_id, duration=duration)

    async def set_group_whole_ban(self, group_id: int, enable: bool = True) -> None:
        await self.call("set_group_whole_ban", group_id=group_id, enable=enable)

    async def set_group_admin(self, group_id: int, user_id: int, enable: bool = True) -> None:
        await self.call("set_group_admin", group_id=group_id, user_id=user_id, enable=enable)

    async def set_group_card(self, group_id: int, user_id: int, card: str = "") -> None:
        await self.call("set_group_card", group_id=group_id, user_id=user_id, card=card)

    async def set_group_name(self, group_id: int, name: str) -> None:
        await self.call("set_group_name", group_id=group_id, group_name=name)

    async def set_group_leave(self, group_id: int) -> None:
        await self.call("set_group_leave", group_id=group_id)

    async def set_group_special_title(
        self, group_id: int, user_id: int, title: str = ""
    ) -> None:
        """设置专属头衔，空字符串表示删除 / Empty title removes it."""
        await self.call(
            "set_group_special_title",
            group_id=group_id,
            user_id=user_id,
            special_title=title,
        )

    # ---- HTTP ----

    async def get_avatar(self, user_id: int) -> bytes | None:
        """
        下载 QQ 头像，失败时返回 None
        Download a QQ avatar; None on failure.
        """
        url = AVATAR_URL.format(user_id=user_id)
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    url, timeout=aiohttp.ClientTimeout(total=self._http_timeout)
                ) as resp:
                    if resp.status == 200:
                        return await resp.read()
                    logger.warning("获取头像失败: HTTP %d %s", resp.status, url)
        except (aiohttp.ClientError, asyncio.TimeoutError):
            logger.exception("获取头像失败: %s", url)
        return None
