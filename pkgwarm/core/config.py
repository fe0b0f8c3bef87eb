"""集中配置管理

启动时构建一次 Config 并显式向下传递，不再依赖进程级环境变量。
加载顺序: YAML 文件 -> 环境变量 -> CLI 覆盖。
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Mapping

import yaml

from pkgwarm.core.exceptions import ConfigError
from pkgwarm.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "PKGWARM_"

# 兼容原有 .env 约定的环境变量名
_LEGACY_ENV = {
    "target_dir": "WORKING_DIRECTORY",
    "store_dir": "XDG_STORE_HOME",
}


@dataclass
class Config:
    """全局配置"""

    # 文件
    manifest_file: str = "required_modules.json"
    cache_file: str = "allRequiredModulesCache.json"
    exclusions_file: str = "configs/exclusions.yml"
    app_log_file: str = "appLogger.log"
    command_log_file: str = "commandLogger.log"

    # 包管理器
    target_dir: str = ""
    store_dir: str = ""
    registry_url: str = "http://localhost:4873"
    package_manager: str = "pnpm"
    registry_client: str = "npm"
    fetch_retries: int = 10

    # 执行
    # Windows cmd 命令行上限 8192 字节，阈值留出余量
    max_command_length: int = 6184
    batch_size: int = 5
    prepare_environment: bool = True
    clean_store: bool = True

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = "configs/default.yml") -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        try:
            data = load_yaml(path)
        except yaml.YAMLError as e:
            raise ConfigError(f"配置文件格式错误: {path}: {e}") from e
        if not data:
            return cls()
        defaults = cls()
        known = {f.name for f in fields(cls)}
        matched = {
            k: _coerce_value(k, getattr(defaults, k), v)
            for k, v in data.items() if k in known and k != "extra"
        }
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def apply_env(self, environ: Mapping[str, str] | None = None) -> Config:
        """用环境变量覆盖字段（PKGWARM_<FIELD> 优先于兼容变量名）"""
        env = os.environ if environ is None else environ
        for f in fields(self):
            if f.name == "extra":
                continue
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None and f.name in _LEGACY_ENV:
                raw = env.get(_LEGACY_ENV[f.name])
            if raw is None or raw == "":
                continue
            setattr(self, f.name, _coerce(f.name, getattr(self, f.name), raw))
        return self

    def override(self, **values: Any) -> Config:
        """应用 CLI 覆盖，值为 None 的项忽略"""
        for key, value in values.items():
            if value is None:
                continue
            if not hasattr(self, key):
                raise ConfigError(f"未知配置项: {key}")
            setattr(self, key, value)
        return self

    def validate(self) -> Config:
        """校验必填项与数值范围，失败抛 ConfigError"""
        if not self.target_dir:
            raise ConfigError(
                "未设置安装目标目录 (target_dir / WORKING_DIRECTORY)"
            )
        if self.prepare_environment and not self.store_dir:
            raise ConfigError(
                "未设置包存储目录 (store_dir / XDG_STORE_HOME)"
            )
        if self.batch_size < 1:
            raise ConfigError(f"batch_size 必须 >= 1: {self.batch_size}")
        if self.max_command_length < 1:
            raise ConfigError(f"max_command_length 必须 >= 1: {self.max_command_length}")
        return self

    def to_dict(self) -> dict:
        return asdict(self)


def _coerce(name: str, current: Any, raw: str) -> Any:
    """按字段当前类型转换环境变量字符串"""
    if isinstance(current, bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(current, int):
        try:
            return int(raw)
        except ValueError as e:
            raise ConfigError(f"配置项 {name} 需要整数: {raw!r}") from e
    return raw


def _coerce_value(name: str, default: Any, value: Any) -> Any:
    """按字段默认值类型校验 YAML 中的取值，字符串按环境变量规则转换"""
    if value is None:
        return default
    if isinstance(value, str):
        return _coerce(name, default, value)
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise ConfigError(f"配置项 {name} 需要布尔值: {value!r}")
    elif isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"配置项 {name} 需要整数: {value!r}")
    elif isinstance(default, str):
        if not isinstance(value, (int, float)):
            raise ConfigError(f"配置项 {name} 需要字符串: {value!r}")
        return str(value)
    return value


def load_config(
    path: str = "configs/default.yml",
    environ: Mapping[str, str] | None = None,
) -> Config:
    """构建配置：YAML 文件 + 环境变量覆盖（不做校验）"""
    cfg = Config.from_file(path).apply_env(environ)
    logger.info("配置已加载: %s", path)
    return cfg
