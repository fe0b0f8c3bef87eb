"""YAML 文件读取工具

配置文件与排除规则文件共用，统一 encoding="utf-8"、空值保护与大小限制。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from pkgwarm.utils.json_io import check_size

logger = logging.getLogger(__name__)


def load_yaml(path: str | Path) -> dict[str, Any]:
    """安全读取 YAML 映射

    参数:
        path: YAML 文件路径

    返回:
        dict: 解析后的字典。文件不存在、为空或顶层不是映射时返回空字典

    异常:
        yaml.YAMLError: YAML 格式错误
        OSError: 读取失败
        ValueError: 文件过大
    """
    p = Path(path)
    if not p.exists():
        return {}
    check_size(p)

    try:
        with open(p, encoding="utf-8") as f:
            result = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error("解析 YAML 文件失败: %s, 错误: %s", path, e)
        raise

    if result is None:
        return {}
    if not isinstance(result, dict):
        logger.warning(
            "%s 顶层不是映射 (实际类型: %s)，按空配置处理",
            path, type(result).__name__,
        )
        return {}
    return result
