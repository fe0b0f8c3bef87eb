"""批次调度器 - 固定大小批次内并发，批次之间严格串行

  commands ──partition──> [b0][b1]...[bn]
                            │
                            ├─ b0: gather(execute(c) for c in b0)   全部完成后
                            ├─ b1: gather(...)                      才启动下一批
                            └─ ...

同时运行的子进程数不超过 batch_size。批次内结果按提交顺序返回，
与完成顺序无关。退出码只收集不判断；等待过程中一旦抛出异常，
整个调度以 BatchExecutionError 中止，不重试、不返回部分结果。
"""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence, TypeVar, Union

from pkgwarm.core.exceptions import BatchExecutionError, ValidationError
from pkgwarm.core.models import InstallCommand
from pkgwarm.core.protocols import CommandExecutor

logger = logging.getLogger(__name__)

T = TypeVar("T")

Command = Union[InstallCommand, str]


def partition(items: Sequence[T], batch_size: int) -> list[list[T]]:
    """按原顺序切分为长度不超过 batch_size 的连续批次"""
    if batch_size < 1:
        raise ValidationError(f"batch_size 必须 >= 1: {batch_size}")
    return [list(items[i:i + batch_size]) for i in range(0, len(items), batch_size)]


class BatchScheduler:
    """按批次执行命令的调度器"""

    def __init__(self, executor: CommandExecutor, batch_size: int = 5) -> None:
        if batch_size < 1:
            raise ValidationError(f"batch_size 必须 >= 1: {batch_size}")
        self.executor = executor
        self.batch_size = batch_size

    async def run_batch(self, batch: Sequence[Command]) -> list[int]:
        """并发执行一个批次，等待全部完成

        某条命令抛异常时，同批其余命令仍会执行结束，随后抛出第一个异常。
        """
        outcomes = await asyncio.gather(
            *(self.executor.execute(c) for c in batch), return_exceptions=True,
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        return list(outcomes)

    async def run(
        self, commands: Sequence[Command], batch_size: int | None = None,
    ) -> list[list[int]]:
        """依次执行所有批次，返回每批的退出码列表"""
        size = self.batch_size if batch_size is None else batch_size
        batches = partition(commands, size)
        total = len(commands)
        results: list[list[int]] = []
        executed = 0

        for batch in batches:
            logger.info(
                "安装命令总数: %d - 已执行: %d - 剩余: %d",
                total, executed, total - executed,
            )
            try:
                results.append(await self.run_batch(batch))
            except Exception as e:
                logger.error("批次执行异常: %s", e)
                raise BatchExecutionError(
                    f"批次执行异常（第 {executed + 1}-{executed + len(batch)} 条命令）: {e}",
                    batch=[str(c) for c in batch],
                ) from e
            executed += len(batch)
            logger.info("本批 %d 条命令执行完毕", len(batch))

        return results
