"""核心数据模型

所有核心数据类集中定义，消除 packer ↔ scheduler ↔ runner 的循环依赖。
其他模块统一从此处导入 PackageSpec / ExclusionRule / InstallCommand / InstallReport。
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union

from pkgwarm.core.exceptions import ValidationError

# 仓库只发布了一个版本时，npm view 返回标量而非数组
Versions = Union[str, list[str]]


@dataclass
class PackageSpec:
    """单个包及其全部待安装版本

    versions 可能是标量（仅一个版本）或列表，两种形态在下游统一处理：
    打包时标量视为单元素序列，版本过滤时标量原样保留。
    """

    name: str
    versions: Versions = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValidationError("包名不能为空")

    @property
    def is_scalar(self) -> bool:
        return not isinstance(self.versions, list)

    @property
    def version_count(self) -> int:
        return 1 if self.is_scalar else len(self.versions)

    def to_dict(self) -> dict[str, Any]:
        return {"moduleName": self.name, "versions": self.versions}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PackageSpec:
        """从缓存文件条目构建，兼容 moduleName / name 两种键"""
        name = data.get("moduleName") or data.get("name") or ""
        versions = data.get("versions", [])
        if isinstance(versions, (list, tuple)):
            versions = [str(v) for v in versions]
        else:
            versions = str(versions)
        return cls(name=name, versions=versions)


@dataclass(frozen=True)
class ExclusionRule:
    """排除规则：某个包下不安装的版本集合（精确字符串匹配）"""

    module_name: str
    versions: frozenset[str] = frozenset()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExclusionRule:
        if not isinstance(data, dict):
            raise ValidationError(f"排除规则必须是映射: {data!r}")
        name = data.get("module") or data.get("moduleName") or ""
        if not name:
            raise ValidationError("排除规则缺少 module 字段")
        versions = data.get("versions") or []
        if not isinstance(versions, list):
            raise ValidationError(f"{name}: 版本必须是列表")
        return cls(module_name=name, versions=frozenset(str(v) for v in versions))


@dataclass(frozen=True)
class InstallCommand:
    """一次完整的安装调用，覆盖同一个包的一个或多个 name@version 目标

    invocation 为安装前缀（如 pnpm add --prefix <dir>），targets 为安装目标，
    marker_path 为执行完成后写入完成时间的标记文件。
    """

    package: str
    invocation: tuple[str, ...]
    targets: tuple[str, ...] = ()
    marker_path: str = ""

    @property
    def argv(self) -> list[str]:
        return [*self.invocation, *self.targets]

    @property
    def text(self) -> str:
        """渲染后的命令行，用于长度计算和日志"""
        return shlex.join(self.argv)

    def __str__(self) -> str:
        return self.text


@dataclass
class InstallReport:
    """一次批量安装的汇总结果"""

    started_at: datetime
    finished_at: datetime | None = None
    modules: int = 0
    commands: int = 0
    batch_results: list[list[int]] = field(default_factory=list)

    @property
    def exit_codes(self) -> list[int]:
        return [code for batch in self.batch_results for code in batch]

    @property
    def total(self) -> int:
        return len(self.exit_codes)

    @property
    def failed(self) -> int:
        """退出码非零的命令数（仅记录，不视为程序级失败）"""
        return sum(1 for code in self.exit_codes if code != 0)

    @property
    def duration(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    @property
    def success(self) -> bool:
        return self.finished_at is not None and self.failed == 0
