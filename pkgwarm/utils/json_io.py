"""JSON 文件读写工具

清单文件与版本缓存文件共用：大小限制、UTF-8、原子写入。
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# 版本缓存可能包含上千个包的全部版本，上限放宽到 64MB
MAX_FILE_SIZE = 64 * 1024 * 1024


def check_size(path: Path, limit: int = MAX_FILE_SIZE) -> None:
    """文件超过 limit 字节时抛 ValueError"""
    size = path.stat().st_size
    if size > limit:
        raise ValueError(f"文件过大: {path} ({size} 字节), 超过限制 {limit} 字节")


def atomic_write(path: Path, content: str) -> None:
    """原子写入：同目录临时文件写完后 os.replace，失败时清理临时文件"""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp, str(path))
    except Exception:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


def load_json(path: str | Path) -> Any:
    """读取 JSON 文件，异常原样抛出（由调用方转换为业务异常）"""
    p = Path(path)
    check_size(p)
    with open(p, encoding="utf-8") as f:
        return json.load(f)


def save_json(path: str | Path, data: Any) -> None:
    p = Path(path)
    atomic_write(p, json.dumps(data, ensure_ascii=False))
    logger.debug("已写入 %s", p)
