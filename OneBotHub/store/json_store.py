"""
JSON 存储 - 以字符串为键的 JSON 数据块
JSON store - JSON blobs keyed by an opaque string.

供插件在自己的数据命名空间下持久化数据，核心本身不使用。
Used by plugins to persist data under their own namespace; the core never
touches it.
"""

from __future__ import annotations

import json
import logging
import os
import re
from typing import Any

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^\w.-]+")


class JsonStore:
    """
    JSON 存储 - 每个键对应目录下的一个 .json 文件
    JSON store - one ``.json`` file per key inside a directory.

    读取不存在的键返回默认值；写入前自动创建目录。
    Reading a missing key returns the default; writing creates the directory.
    """

    def __init__(self, directory: str) -> None:
        self._directory = directory

    @property
    def directory(self) -> str:
        return self._directory

    def path_for(self, key: str | int) -> str:
        safe_key = _UNSAFE_KEY_CHARS.sub("_", str(key)).strip("._") or "_"
        return os.path.join(self._directory, f"{safe_key}.json")

    def exists(self, key: str | int) -> bool:
        return os.path.isfile(self.path_for(key))

    def read(self, key: str | int, default: Any = None) -> Any:
        """
        读取键对应的数据
        Read the data stored under a key.
        """
        path = self.path_for(key)
        if not os.path.isfile(path):
            return default
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    def write(self, key: str | int, data: Any) -> None:
        """
        写入数据（先写临时文件再替换）
        Write data (to a temporary file, then replace).
        """
        os.makedirs(self._directory, exist_ok=True)
        path = self.path_for(key)
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)
        logger.debug("已写入 %s", path)

    def delete(self, key: str | int) -> bool:
        path = self.path_for(key)
        if not os.path.isfile(path):
            return False
        os.remove(path)
        return True
