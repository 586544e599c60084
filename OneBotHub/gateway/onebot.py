"""
OneBot 传输 - 通过正向 WebSocket 连接 OneBot v11 实现
OneBot transport - connects to a OneBot v11 implementation over forward WebSocket.

支持 NapCat、LagrangeCore 等 OneBot 实现。
Supports NapCat, LagrangeCore and other OneBot implementations.
API 调用通过 echo 字段与响应关联。
API calls are correlated with their responses through the ``echo`` field.
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from collections.abc import Mapping
from typing import Any

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from OneBotHub.errors import TransportError
from OneBotHub.gateway.base import Transport

logger = logging.getLogger(__name__)


class OneBotTransport(Transport):
    """
    OneBot 正向 WebSocket 传输
    OneBot forward WebSocket transport.
    """

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 3001,
        access_token: str = "",
        api_timeout: float = 30.0,
    ) -> None:
        super().__init__()
        self.host = host
        self.port = port
        self._access_token = access_token
        self._api_timeout = api_timeout
        self._connection: Any = None
        self._reader: asyncio.Task[None] | None = None
        # echo -> 等待响应的 Future
        self._pending: dict[str, asyncio.Future[dict[str, Any]]] = {}

    @property
    def url(self) -> str:
        url = f"ws://{self.host}:{self.port}/"
        if self._access_token:
            url += f"?access_token={self._access_token}"
        return url

    @property
    def connected(self) -> bool:
        return self._connection is not None

    async def connect(self) -> None:
        """
        建立连接并在后台读取事件
        Open the connection and start reading events in the background.
        """
        if self._connection is not None:
            return

        logger.info("正在连接 OneBot: %s:%s", self.host, self.port)
        try:
            connection = await websockets.connect(self.url)
        except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
            raise TransportError(
                f"无法连接到 OneBot {self.host}:{self.port}: {exc}", action="connect"
            ) from exc

        self._connection = connection
        self._generation += 1
        self._reader = asyncio.create_task(
            self._read_loop(connection), name="onebot-reader"
        )

    async def close(self) -> None:
        """关闭连接 / Close the connection."""
        connection, self._connection = self._connection, None
        if connection is not None:
            await connection.close()
        if self._reader is not None:
            await asyncio.gather(self._reader, return_exceptions=True)
            self._reader = None
        self._fail_pending(TransportError("连接已关闭 / connection closed"))

    async def call(self, action: str, params: Mapping[str, Any] | None = None) -> Any:
        connection = self._connection
        if connection is None:
            raise TransportError("OneBot 连接未建立 / not connected", action=action)

        echo = uuid.uuid4().hex
        future: asyncio.Future[dict[str, Any]] = asyncio.get_running_loop().create_future()
        self._pending[echo] = future
        request = {"action": action, "params": dict(params or {}), "echo": echo}

        try:
            await connection.send(json.dumps(request, ensure_ascii=False))
            response = await asyncio.wait_for(future, self._api_timeout)
        except asyncio.TimeoutError as exc:
            raise TransportError(
                f"API {action} 超时 ({self._api_timeout}s)", action=action
            ) from exc
        except ConnectionClosed as exc:
            raise TransportError(f"发送 {action} 时连接已断开", action=action) from exc
        finally:
            self._pending.pop(echo, None)

        retcode = response.get("retcode", 0)
        if response.get("status") == "failed" or retcode not in (0, None):
            raise TransportError(
                response.get("wording") or response.get("message") or f"API {action} 调用失败",
                action=action,
                retcode=retcode,
                details={"response": response},
            )
        return response.get("data")

    async def _read_loop(self, connection: Any) -> None:
        try:
            async for raw in connection:
                try:
                    data = json.loads(raw)
                except json.JSONDecodeError:
                    logger.warning("收到无效的 OneBot JSON 数据")
                    continue
                if not isinstance(data, dict):
                    continue
                self._route(data)
        except ConnectionClosed:
            logger.warning("OneBot 连接已断开")
        finally:
            if self._connection is connection:
                self._connection = None
            self._fail_pending(TransportError("连接已断开 / connection lost"))

    def _route(self, data: dict[str, Any]) -> None:
        # 有 echo 且不是事件的数据是 API 响应
        echo = data.get("echo")
        if echo is not None and "post_type" not in data:
            future = self._pending.pop(str(echo), None)
            if future is not None and not future.done():
                future.set_result(data)
            return
        self.publish(data)

    def _fail_pending(self, error: TransportError) -> None:
        pending, self._pending = self._pending, {}
        for future in pending.values():
            if not future.done():
                future.set_exception(error)
