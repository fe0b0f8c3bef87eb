"""领域协议定义

集中定义各层之间的接口契约（Protocol），上层依赖抽象而非具体实现。
测试时可注入 mock 实现，无需 patch subprocess 或 logging。
"""

from __future__ import annotations

from typing import Protocol, Union

from pkgwarm.core.models import InstallCommand, Versions


class LogSink(Protocol):
    """日志接收端 — logging.Logger 天然满足"""

    def info(self, msg: str, *args: object) -> None:
        ...


class CommandExecutor(Protocol):
    """异步命令执行器协议

    约定：以退出码完成，非零退出码是普通返回值；
    仅在进程机制本身失败（如无法启动）时抛异常。
    """

    async def execute(self, command: Union[InstallCommand, str]) -> int:
        ...


class VersionLister(Protocol):
    """查询单个包已发布的全部版本"""

    def __call__(self, package_name: str) -> Versions:
        ...
