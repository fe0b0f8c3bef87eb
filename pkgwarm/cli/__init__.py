"""pkgwarm 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

import logging
import os
import sys
from typing import NoReturn

import click

from pkgwarm import __version__
from pkgwarm.core.config import Config, load_config
from pkgwarm.core.exceptions import FATAL_EXIT_CODE
from pkgwarm.utils.logger import setup_logging

logger = logging.getLogger(__name__)


def _log_level() -> str:
    return os.getenv("PKGWARM_LOG_LEVEL", "INFO")


def _json_logs() -> bool:
    return os.getenv("PKGWARM_LOG_JSON", "") == "1"


def _build_config(config_path: str, **overrides: object) -> Config:
    """加载配置并应用 CLI 覆盖（None 表示未指定）"""
    return load_config(config_path).override(**overrides)


def _fatal(message: str) -> NoReturn:
    """统一的致命退出：记录消息并以 FATAL_EXIT_CODE 结束进程"""
    logger.error(message)
    click.echo(click.style(f"致命错误，退出: {message}", fg="red"), err=True)
    sys.exit(FATAL_EXIT_CODE)


def _crash(error: Exception) -> NoReturn:
    """未预期的异常：记录堆栈后按致命错误退出"""
    logger.exception("未预期的错误")
    _fatal(f"{type(error).__name__}: {error}")


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """pkgwarm - 本地包仓库批量安装预热工具"""
    setup_logging(level=_log_level(), json_output=_json_logs())


# 注册各领域子命令
from pkgwarm.cli.cmd_install import register as _reg_install  # noqa: E402
from pkgwarm.cli.cmd_cache import register as _reg_cache  # noqa: E402

_reg_install(main)
_reg_cache(main)
