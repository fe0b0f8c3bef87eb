"""待安装包解析

职责:
- 读取清单文件（包名或 name@latest）
- 通过包管理器 CLI 查询每个包已发布的全部版本
- 版本列表缓存的读写（存在缓存时跳过解析）
"""

from __future__ import annotations

import json
import logging
from json import JSONDecodeError
from pathlib import Path
from typing import Any

from pkgwarm.core.exceptions import ExecutionError, ManifestError, RegistryError
from pkgwarm.core.models import PackageSpec, Versions
from pkgwarm.core.protocols import VersionLister
from pkgwarm.utils.json_io import load_json, save_json
from pkgwarm.utils.shell import run_cmd

logger = logging.getLogger(__name__)

LATEST_SUFFIX = "@latest"


def parse_manifest_entry(entry: str) -> str:
    """去掉 @latest 后缀，返回包名（作用域包 @scope/name 保持不变）"""
    entry = entry.strip()
    if entry.endswith(LATEST_SUFFIX):
        return entry[: -len(LATEST_SUFFIX)]
    return entry


def load_manifest(path: str | Path) -> list[str]:
    """读取清单文件，返回包名列表"""
    data = _read_json(path, "清单文件")
    if not isinstance(data, list) or not all(isinstance(e, str) for e in data):
        raise ManifestError(f"清单文件必须是字符串数组: {path}")
    names = [parse_manifest_entry(e) for e in data]
    return [n for n in names if n]


def _read_json(path: str | Path, what: str) -> Any:
    try:
        return load_json(path)
    except FileNotFoundError as e:
        raise ManifestError(f"{what}不存在: {path}") from e
    except (JSONDecodeError, ValueError, OSError) as e:
        raise ManifestError(f"{what}读取失败: {path}: {e}") from e


def parse_versions(raw: str, package: str) -> Versions:
    """解析 `npm view <pkg> versions --json` 的输出

    多个版本时为数组，仅一个版本时为字符串，两种形态原样保留。
    """
    try:
        data = json.loads(raw)
    except JSONDecodeError as e:
        raise RegistryError(f"版本列表不是合法 JSON: {package}: {e}") from e
    if isinstance(data, list):
        return [str(v) for v in data]
    if isinstance(data, str):
        return data
    raise RegistryError(f"无法识别的版本列表格式: {package}: {type(data).__name__}")


def sort_versions(versions: Versions) -> Versions:
    """按字符串排序（标量原样返回）"""
    if isinstance(versions, list):
        return sorted(versions)
    return versions


class NpmVersionLister:
    """通过 `<client> view <name> versions --json` 查询版本"""

    def __init__(self, client: str = "npm") -> None:
        self.client = client

    def __call__(self, package_name: str) -> Versions:
        try:
            r = run_cmd(
                [self.client, "view", package_name, "versions", "--json"],
                label="版本查询",
            )
        except ExecutionError as e:
            raise RegistryError(f"查询 {package_name} 版本失败: {e}") from e
        return parse_versions(r.stdout, package_name)


def resolve_modules(names: list[str], list_versions: VersionLister) -> list[PackageSpec]:
    """逐个查询版本并排序"""
    modules = []
    for name in names:
        versions = sort_versions(list_versions(name))
        count = len(versions) if isinstance(versions, list) else 1
        logger.info("已解析 %s: %d 个版本", name, count)
        modules.append(PackageSpec(name=name, versions=versions))
    return modules


def load_cache(path: str | Path) -> list[PackageSpec] | None:
    """读取版本缓存，不存在时返回 None"""
    if not Path(path).exists():
        return None
    data = _read_json(path, "缓存文件")
    if not isinstance(data, list):
        raise ManifestError(f"缓存文件必须是数组: {path}")
    if not all(isinstance(item, dict) for item in data):
        raise ManifestError(f"缓存条目必须是对象: {path}")
    return [PackageSpec.from_dict(item) for item in data]


def save_cache(path: str | Path, modules: list[PackageSpec]) -> None:
    try:
        save_json(path, [m.to_dict() for m in modules])
    except OSError as e:
        raise ManifestError(f"写入缓存文件失败: {path}: {e}") from e
    logger.info("版本缓存已写入: %s (%d 个包)", path, len(modules))


class ModuleResolver:
    """待安装包来源：缓存优先，否则查询仓库并写缓存"""

    def __init__(
        self,
        manifest_file: str | Path,
        cache_file: str | Path,
        list_versions: VersionLister | None = None,
    ) -> None:
        self.manifest_file = manifest_file
        self.cache_file = cache_file
        self.list_versions = list_versions or NpmVersionLister()

    def resolve(self) -> list[PackageSpec]:
        """忽略缓存，重新查询并覆盖缓存"""
        names = load_manifest(self.manifest_file)
        logger.info("清单 %s: %d 个包", self.manifest_file, len(names))
        modules = resolve_modules(names, self.list_versions)
        save_cache(self.cache_file, modules)
        return modules

    def load(self) -> list[PackageSpec]:
        cached = load_cache(self.cache_file)
        if cached is not None:
            logger.info("使用版本缓存: %s", self.cache_file)
            return cached
        return self.resolve()
