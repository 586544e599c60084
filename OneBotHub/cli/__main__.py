"""`python -m OneBotHub.cli` 的命令行启动入口。"""

from OneBotHub.cli.main import cli

if __name__ == "__main__":
    cli()
