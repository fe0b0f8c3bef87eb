"""统一异常体系

所有业务异常继承 PkgwarmError，替代散落的 ValueError / RuntimeError。
CLI 层捕获 PkgwarmError 后统一以 FATAL_EXIT_CODE 退出。
"""

from __future__ import annotations

# 致命错误退出码（配置缺失、环境准备失败、批次执行异常）
FATAL_EXIT_CODE = -42


class PkgwarmError(Exception):
    """框架基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(PkgwarmError):
    """配置缺失或内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(PkgwarmError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class ExecutionError(PkgwarmError):
    """同步 shell 命令执行失败"""

    code = "EXECUTION_ERROR"


class SetupError(PkgwarmError):
    """包管理器环境准备失败"""

    code = "SETUP_ERROR"


class RegistryError(PkgwarmError):
    """仓库版本查询失败"""

    code = "REGISTRY_ERROR"


class ManifestError(PkgwarmError):
    """清单或缓存文件缺失、格式错误"""

    code = "MANIFEST_ERROR"


class BatchExecutionError(PkgwarmError):
    """批次并发等待过程中抛出异常（非退出码失败）"""

    code = "BATCH_EXECUTION_ERROR"

    def __init__(self, message: str, batch: list[str] | None = None) -> None:
        super().__init__(message)
        self.batch = batch or []
