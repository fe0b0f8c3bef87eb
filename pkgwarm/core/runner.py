"""命令执行器 - 启动单条安装命令，流式记录输出，返回退出码

非零退出码是普通数据，不会抛异常；只有进程机制本身失败
（如可执行文件不存在导致无法启动）才向上抛出，由批次调度器处理。
"""

from __future__ import annotations

import asyncio
import codecs
import logging
from datetime import datetime
from pathlib import Path
from typing import Union

from pkgwarm.core.models import InstallCommand
from pkgwarm.core.protocols import LogSink

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


def _now() -> str:
    return datetime.now().isoformat(sep=" ", timespec="seconds")


class CommandRunner:
    """基于 asyncio 子进程的命令执行器

    InstallCommand 以参数列表直接启动（不经过 shell）；
    普通字符串视为 shell 命令行，通过系统 shell 执行。
    stdout / stderr 合并后按块写入 sink，不在内存中累积。
    """

    def __init__(
        self,
        sink: LogSink,
        *,
        env: dict[str, str] | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.sink = sink
        self.env = env
        self.chunk_size = chunk_size

    async def _spawn(self, command: Union[InstallCommand, str]) -> asyncio.subprocess.Process:
        if isinstance(command, InstallCommand):
            return await asyncio.create_subprocess_exec(
                *command.argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                env=self.env,
            )
        return await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            env=self.env,
        )

    async def _stream(self, stream: asyncio.StreamReader) -> None:
        # 多字节字符可能跨块，解码器在块之间保留未完成的字节
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            chunk = await stream.read(self.chunk_size)
            text = decoder.decode(chunk, final=not chunk)
            if text:
                self.sink.info(text.rstrip("\n"))
            if not chunk:
                break

    def _write_marker(self, command: InstallCommand, returncode: int) -> None:
        marker = Path(command.marker_path)
        try:
            marker.parent.mkdir(parents=True, exist_ok=True)
            marker.write_text(
                f"FINISHED {command.package} AT {_now()} (rc={returncode})\n",
                encoding="utf-8",
            )
        except OSError as e:
            logger.warning("写入完成标记失败: %s (%s)", marker, e)

    async def execute(self, command: Union[InstallCommand, str]) -> int:
        """执行一条命令并返回其退出码"""
        self.sink.info(f"{_now()} {command}")
        proc = await self._spawn(command)
        if proc.stdout is not None:
            await self._stream(proc.stdout)
        returncode = await proc.wait()

        if isinstance(command, InstallCommand):
            if returncode != 0:
                logger.info("命令退出码 %d: %s", returncode, command.package)
            if command.marker_path:
                self._write_marker(command, returncode)
        return returncode
