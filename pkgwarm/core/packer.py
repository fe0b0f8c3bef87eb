"""命令打包器 — 将 name@version 安装目标贪心装入长度受限的命令

规则（每个包独立处理，不跨包合并）：
  1. 每条命令以安装前缀开头（如 pnpm add --prefix <target_dir>）
  2. 按给定顺序逐个追加目标；追加后长度超过 max_length 即封口，
     另起一条同包命令继续
  3. 标量版本只生成一条命令

追加后才检查长度，单条命令最多超出阈值一个目标的长度；
阈值本身已低于平台命令行上限。
"""

from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Sequence

from pkgwarm.core.exceptions import ValidationError
from pkgwarm.core.models import InstallCommand, PackageSpec

logger = logging.getLogger(__name__)


def marker_path_for(package: str, marker_dir: str | Path) -> str:
    """每个包的完成标记文件路径，作用域包名中的 / 替换为 +"""
    return str(Path(marker_dir) / f"{package.replace('/', '+')}.log")


def install_invocation(package_manager: str, target_dir: str) -> tuple[str, ...]:
    return (package_manager, "add", "--prefix", target_dir)


class CommandPacker:
    """按包生成安装命令"""

    def __init__(
        self,
        max_length: int,
        *,
        invocation: Sequence[str],
        marker_dir: str | Path,
    ) -> None:
        if max_length < 1:
            raise ValidationError(f"max_length 必须 >= 1: {max_length}")
        if not invocation:
            raise ValidationError("安装前缀不能为空")
        self.max_length = max_length
        self.invocation = tuple(invocation)
        self.marker_dir = marker_dir
        self._base_length = len(shlex.join(self.invocation))

    def _close(self, package: str, targets: list[str]) -> InstallCommand:
        return InstallCommand(
            package=package,
            invocation=self.invocation,
            targets=tuple(targets),
            marker_path=marker_path_for(package, self.marker_dir),
        )

    def pack_module(self, spec: PackageSpec) -> list[InstallCommand]:
        """单个包的命令列表（至少一条）"""
        if spec.is_scalar:
            return [self._close(spec.name, [f"{spec.name}@{spec.versions}"])]

        commands: list[InstallCommand] = []
        targets: list[str] = []
        length = self._base_length
        for version in spec.versions:
            token = f"{spec.name}@{version}"
            targets.append(token)
            length += 1 + len(shlex.quote(token))
            if length > self.max_length:
                commands.append(self._close(spec.name, targets))
                targets = []
                length = self._base_length

        # 空版本列表也产出一条无目标命令
        if targets or not commands:
            commands.append(self._close(spec.name, targets))
        return commands

    def pack(self, modules: Sequence[PackageSpec]) -> list[InstallCommand]:
        commands: list[InstallCommand] = []
        for spec in modules:
            commands.extend(self.pack_module(spec))
        logger.debug("生成 %d 条命令（%d 个包）", len(commands), len(modules))
        return commands


def pack_commands(
    modules: Sequence[PackageSpec],
    max_length: int,
    *,
    invocation: Sequence[str],
    marker_dir: str | Path,
) -> list[InstallCommand]:
    """便捷函数：CommandPacker(...).pack(modules)"""
    return CommandPacker(max_length, invocation=invocation, marker_dir=marker_dir).pack(modules)
