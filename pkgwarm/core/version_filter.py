"""版本过滤 — 从解析结果中剔除已知有问题的版本"""

from __future__ import annotations

import logging
from typing import Sequence

from pkgwarm.core.models import ExclusionRule, PackageSpec

logger = logging.getLogger(__name__)


def find_rule(name: str, exclusions: Sequence[ExclusionRule]) -> ExclusionRule | None:
    """返回第一条匹配包名的排除规则"""
    return next((r for r in exclusions if r.module_name == name), None)


def remove_excluded_versions(
    modules: Sequence[PackageSpec],
    exclusions: Sequence[ExclusionRule],
) -> int:
    """原地过滤 modules 的版本列表，返回被移除的版本数

    versions 为标量的包不做排除，保持原样。
    """
    removed = 0
    for spec in modules:
        if spec.is_scalar:
            continue
        rule = find_rule(spec.name, exclusions)
        if rule is None:
            continue
        kept = []
        for version in spec.versions:
            if version in rule.versions:
                logger.info("从版本列表中排除: %s 版本: %s", spec.name, version)
                removed += 1
            else:
                kept.append(version)
        spec.versions = kept
    return removed
