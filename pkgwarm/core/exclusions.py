"""排除规则加载

支持两种 YAML 写法:

    exclusions:
      - module: sample1
        versions: ["1.0.0", "1.0.6"]

或直接以包名为键:

    sample1: ["1.0.0", "1.0.6"]
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from pkgwarm.core.exceptions import ValidationError
from pkgwarm.core.models import ExclusionRule
from pkgwarm.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)


def parse_exclusions(data: dict) -> list[ExclusionRule]:
    if "exclusions" in data:
        entries = data["exclusions"] or []
        if not isinstance(entries, list):
            raise ValidationError("exclusions 必须是列表")
        return [ExclusionRule.from_dict(e) for e in entries]

    rules = []
    errors = []
    for name, versions in data.items():
        if not isinstance(versions, list):
            errors.append(f"{name}: 版本必须是列表")
            continue
        rules.append(ExclusionRule(module_name=str(name), versions=frozenset(str(v) for v in versions)))
    if errors:
        raise ValidationError("排除规则格式错误", details=errors)
    return rules


def load_exclusions(path: str | Path) -> list[ExclusionRule]:
    """读取排除规则文件，不存在时返回空列表"""
    if not Path(path).exists():
        logger.info("未找到排除规则文件 %s，不排除任何版本", path)
        return []
    try:
        data = load_yaml(path)
    except yaml.YAMLError as e:
        raise ValidationError(f"排除规则文件格式错误: {path}", details=[str(e)]) from e
    rules = parse_exclusions(data)
    logger.info("已加载 %d 条排除规则: %s", len(rules), path)
    return rules
