"""pkgwarm 日志配置

两类日志：
- 应用事件日志：根日志器，输出到 stderr + 可选文件（每次运行覆盖）
- 命令输出日志：独立 logger，仅写文件，不向根日志器传播；
  作为 LogSink 显式注入 CommandRunner
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

COMMAND_LOGGER_NAME = "pkgwarm.command_output"

_TEXT_FORMAT = "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """结构化 JSON 日志格式器，便于 CI 流水线消费

    输出字段: timestamp / level / logger / message / module / function / line，
    有异常时附带 exception。
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            # record.created 为事件发生时间
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


def _close_handlers(log: logging.Logger) -> None:
    for handler in log.handlers[:]:
        log.removeHandler(handler)
        handler.close()


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: str | None = None,
) -> None:
    """配置根日志器

    参数:
        level: 日志级别字符串（DEBUG, INFO, WARNING, ERROR, CRITICAL）
        json_output: 为 True 时使用 JSON 格式（适用于 CI）
        log_file: 应用日志文件路径，每次运行以 "w" 模式覆盖；为空则只输出到 stderr
    """
    root = logging.getLogger()
    _close_handlers(root)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter: logging.Formatter = (
        JSONFormatter() if json_output else logging.Formatter(_TEXT_FORMAT)
    )

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)


def make_command_logger(log_file: str, name: str = COMMAND_LOGGER_NAME) -> logging.Logger:
    """创建命令输出日志器（仅文件，不传播到根日志器）

    子进程输出原样写入，不区分 stdout / stderr。
    """
    log = logging.getLogger(name)
    _close_handlers(log)
    log.setLevel(logging.INFO)
    log.propagate = False

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(message)s"))
    log.addHandler(handler)
    return log


def reset_logging() -> None:
    """清理根日志器和命令日志器的 handlers，常用于测试"""
    _close_handlers(logging.getLogger())
    _close_handlers(logging.getLogger(COMMAND_LOGGER_NAME))
