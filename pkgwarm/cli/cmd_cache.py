"""CLI — 版本缓存命令"""

from __future__ import annotations

from pathlib import Path

import click

from pkgwarm.cli import _build_config, _crash, _fatal
from pkgwarm.core.exceptions import PkgwarmError


def register(group: click.Group) -> None:
    group.add_command(resolve)
    group.add_command(clear_cache)


@click.command()
@click.option("--config", "-c", "config_path", default="configs/default.yml", help="配置文件路径")
@click.option("--manifest", default=None, help="清单文件路径")
@click.option("--cache", "cache_file", default=None, help="版本缓存文件路径")
def resolve(config_path: str, manifest: str | None, cache_file: str | None) -> None:
    """重新查询全部版本并写入缓存"""
    from pkgwarm.core.registry import ModuleResolver, NpmVersionLister

    try:
        cfg = _build_config(config_path, manifest_file=manifest, cache_file=cache_file)
        modules = ModuleResolver(
            cfg.manifest_file, cfg.cache_file, NpmVersionLister(cfg.registry_client),
        ).resolve()
    except PkgwarmError as e:
        _fatal(str(e))
    except Exception as e:
        _crash(e)

    for spec in modules:
        click.echo(f"  {spec.name:40s} {spec.version_count:5d} 个版本")
    click.echo(f"已写入缓存: {cfg.cache_file}")


@click.command(name="clear-cache")
@click.option("--config", "-c", "config_path", default="configs/default.yml", help="配置文件路径")
@click.option("--cache", "cache_file", default=None, help="版本缓存文件路径")
def clear_cache(config_path: str, cache_file: str | None) -> None:
    """删除版本缓存文件，下次运行时重新查询"""
    try:
        cfg = _build_config(config_path, cache_file=cache_file)
        path = Path(cfg.cache_file)
        existed = path.exists()
        if existed:
            path.unlink()
    except PkgwarmError as e:
        _fatal(str(e))
    except Exception as e:
        _crash(e)

    if existed:
        click.echo(f"已删除: {path}")
    else:
        click.echo(f"缓存不存在: {path}")
