"""同步 Shell 命令执行工具

用于环境准备与版本查询这类一次性、需要拿到完整输出的命令。
批量安装走异步的 pkgwarm.core.runner。
"""

from __future__ import annotations

import logging
import shlex
import subprocess

from pkgwarm.core.exceptions import ExecutionError

logger = logging.getLogger(__name__)


def run_cmd(
    args: list[str], *, cwd: str | None = None,
    env: dict[str, str] | None = None,
    label: str = "cmd",
) -> subprocess.CompletedProcess[str]:
    """执行命令（参数列表，不经过 shell），失败抛 ExecutionError

    Args:
        args: 命令参数列表
        cwd: 工作目录
        env: 环境变量（不传则继承当前进程）
        label: 日志标签
    """
    logger.info("  %s: %s", label, shlex.join(args))
    try:
        r = subprocess.run(
            args, capture_output=True, text=True,
            cwd=cwd, env=env, check=False,
        )
    except OSError as e:
        raise ExecutionError(f"{label}失败: 无法启动 {args[0]}: {e}") from e
    if r.returncode != 0:
        raise ExecutionError(f"{label}失败 (rc={r.returncode}): {r.stderr[:500]}")
    return r
