"""
CLI 主入口 - 使用 Click 框架
CLI main entry - using Click framework.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys

import click

from OneBotHub.config.defaults import VERSION, build_default_config
from OneBotHub.config.manager import CONFIG_FILE, ConfigManager


@click.group()
def cli() -> None:
    """OneBotHub - OneBot 消息分发与插件框架"""


@cli.command()
@click.option("--config", "config_path", default=CONFIG_FILE, help="配置文件路径")
@click.option("--debug", is_flag=True, help="输出调试日志")
def run(config_path: str, debug: bool) -> None:
    """启动机器人 / Start the bot."""
    from OneBotHub.bot import Bot
    from OneBotHub.errors import OneBotHubError
    from OneBotHub.utils.logging import setup_logging

    async def main() -> None:
        config = ConfigManager(defaults=build_default_config(), config_path=config_path)
        await config.load()
        level = "DEBUG" if debug else config.get("logging.level", "INFO")
        setup_logging(level, config.get("logging.file"))

        bot = Bot.from_config(config, logger=logging.getLogger("OneBotHub.bot"))
        await bot.run_forever()

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logging.getLogger("OneBotHub").info("收到键盘中断信号")
    except OneBotHubError as exc:
        logging.getLogger("OneBotHub").error("启动失败: %s", exc)
        sys.exit(1)


@cli.command()
@click.option("--config", "config_path", default=CONFIG_FILE, help="配置文件路径")
def init(config_path: str) -> None:
    """初始化配置 / Initialize configuration."""
    os.makedirs(os.path.dirname(config_path) or ".", exist_ok=True)

    if os.path.exists(config_path):
        click.echo(f"配置文件已存在: {config_path}")
        if not click.confirm("是否覆盖?"):
            return

    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(build_default_config(), f, ensure_ascii=False, indent=2)

    click.echo(f"配置文件已创建: {config_path}")
    click.echo(
        "提示: 请在 OneBot 实现中将 message_post_format 设为 array；"
        "string 格式也可以使用，消息中的 CQ 码会被解析"
    )


@cli.command()
def version() -> None:
    """显示版本信息 / Show version info."""
    click.echo(f"OneBotHub v{VERSION}")


if __name__ == "__main__":
    cli()
