"""安装编排器 - 串联解析、过滤、打包、批次执行

  resolve ──> remove_excluded_versions ──> CommandPacker ──> BatchScheduler ──> InstallReport
  (缓存/仓库)       (原地过滤)              (按包拆分命令)     (批内并发)

未在本地处理的异常一律向上抛出，由 CLI 统一以致命退出码结束。
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from pkgwarm.core.config import Config
from pkgwarm.core.exclusions import load_exclusions
from pkgwarm.core.models import ExclusionRule, InstallCommand, InstallReport, PackageSpec
from pkgwarm.core.packer import CommandPacker, install_invocation
from pkgwarm.core.protocols import CommandExecutor
from pkgwarm.core.registry import ModuleResolver, NpmVersionLister
from pkgwarm.core.runner import CommandRunner
from pkgwarm.core.scheduler import BatchScheduler
from pkgwarm.core.version_filter import remove_excluded_versions
from pkgwarm.services.environment import EnvironmentPreparer
from pkgwarm.utils.logger import make_command_logger

logger = logging.getLogger(__name__)


@dataclass
class InstallPlan:
    """执行前的安装计划"""

    modules: list[PackageSpec] = field(default_factory=list)
    commands: list[InstallCommand] = field(default_factory=list)
    excluded: int = 0


class Orchestrator:
    """批量安装编排器

    所有协作者均可注入；未注入时按 Config 构建默认实现。
    """

    def __init__(
        self,
        config: Config,
        *,
        resolver: ModuleResolver | None = None,
        exclusions: Sequence[ExclusionRule] | None = None,
        executor: CommandExecutor | None = None,
        preparer: EnvironmentPreparer | None = None,
    ) -> None:
        self.config = config
        self.resolver = resolver or ModuleResolver(
            config.manifest_file,
            config.cache_file,
            NpmVersionLister(config.registry_client),
        )
        self._exclusions = exclusions
        self._executor = executor
        self.preparer = preparer or EnvironmentPreparer(config)

    @property
    def exclusions(self) -> list[ExclusionRule]:
        if self._exclusions is None:
            self._exclusions = load_exclusions(self.config.exclusions_file)
        return list(self._exclusions)

    @property
    def executor(self) -> CommandExecutor:
        # 命令日志文件在首次需要执行时才创建
        if self._executor is None:
            self._executor = CommandRunner(make_command_logger(self.config.command_log_file))
        return self._executor

    def plan(self) -> InstallPlan:
        """解析 + 过滤 + 打包，不执行任何安装"""
        cfg = self.config
        modules = self.resolver.load()
        logger.info("待处理包数量: %d", len(modules))

        excluded = remove_excluded_versions(modules, self.exclusions)

        packer = CommandPacker(
            cfg.max_command_length,
            invocation=install_invocation(cfg.package_manager, cfg.target_dir),
            marker_dir=cfg.target_dir,
        )
        commands = packer.pack(modules)
        logger.info("待执行命令数量: %d", len(commands))

        logger.info("待安装的包:")
        for spec in modules:
            logger.info("  包: %s - 版本数: %d", spec.name, spec.version_count)

        return InstallPlan(modules=modules, commands=commands, excluded=excluded)

    async def run_async(self) -> InstallReport:
        cfg = self.config
        report = InstallReport(started_at=datetime.now())
        logger.info("开始时间: %s", report.started_at)

        if cfg.prepare_environment:
            self.preparer.prepare()

        plan = self.plan()
        report.modules = len(plan.modules)
        report.commands = len(plan.commands)

        scheduler = BatchScheduler(self.executor, cfg.batch_size)
        report.batch_results = await scheduler.run(plan.commands)
        report.finished_at = datetime.now()

        logger.info("开始时间: %s", report.started_at)
        logger.info("结束时间: %s", report.finished_at)
        logger.info(
            "完成: %d 条命令, %d 条退出码非零, 耗时 %.1f 秒",
            report.total, report.failed, report.duration,
        )
        return report

    def run(self) -> InstallReport:
        """同步入口"""
        return asyncio.run(self.run_async())
