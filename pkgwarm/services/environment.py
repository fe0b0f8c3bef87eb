"""包管理器环境准备

批量安装前依次执行：
  1. 设置并回显 store-dir
  2. 将 registry 指向本地仓库
  3. 调高 fetch-retries（并发安装时请求之间可能互相锁等待）
  4. 清空 store 目录（可选）
  5. 清理 npm 缓存

任一配置命令失败抛 SetupError；store 目录删除失败只记录警告。
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Callable

from pkgwarm.core.config import Config
from pkgwarm.core.exceptions import ExecutionError, SetupError
from pkgwarm.utils.shell import run_cmd

logger = logging.getLogger(__name__)

CommandRunnerFn = Callable[..., "subprocess.CompletedProcess[str]"]


class EnvironmentPreparer:
    """按配置准备包管理器环境"""

    def __init__(self, config: Config, run: CommandRunnerFn = run_cmd) -> None:
        self.config = config
        self._run = run

    def _pm(self, *args: str, label: str) -> str:
        r = self._run([self.config.package_manager, *args], label=label)
        return (r.stdout or "").strip()

    def clean_store(self) -> None:
        store = Path(self.config.store_dir)
        logger.info("删除包存储目录，请稍候: %s", store)
        if not store.exists():
            return
        try:
            shutil.rmtree(store)
        except OSError as e:
            logger.warning("删除包存储目录失败: %s (%s)", store, e)

    def prepare(self) -> None:
        cfg = self.config
        try:
            self._pm("config", "set", "store-dir", cfg.store_dir, label="设置 store-dir")
            current = self._pm("config", "get", "store-dir", label="读取 store-dir")
            logger.info("当前 store-dir: %s", current)

            logger.info("设置 registry: %s", cfg.registry_url)
            self._pm("config", "set", "registry", cfg.registry_url, label="设置 registry")

            logger.info("设置 fetch-retries: %d", cfg.fetch_retries)
            self._pm("config", "set", "fetch-retries", str(cfg.fetch_retries), label="设置 fetch-retries")

            if cfg.clean_store:
                self.clean_store()

            logger.info("清理 npm 缓存")
            self._run([cfg.registry_client, "cache", "clean", "--force"], label="清理缓存")
        except ExecutionError as e:
            raise SetupError(f"环境准备失败: {e}") from e
