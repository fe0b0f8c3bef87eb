"""CLI — 批量安装与预览命令"""

from __future__ import annotations

import click

from pkgwarm.cli import _build_config, _crash, _fatal, _json_logs, _log_level
from pkgwarm.core.exceptions import PkgwarmError
from pkgwarm.utils.logger import setup_logging


def register(group: click.Group) -> None:
    group.add_command(install)
    group.add_command(plan)


def _common_options(func):  # type: ignore[no-untyped-def]
    options = [
        click.option("--config", "-c", "config_path", default="configs/default.yml", help="配置文件路径"),
        click.option("--manifest", default=None, help="清单文件路径（JSON 字符串数组）"),
        click.option("--cache", "cache_file", default=None, help="版本缓存文件路径"),
        click.option("--exclusions", default=None, help="排除规则文件路径（YAML）"),
        click.option("--target-dir", default=None, help="安装目标目录"),
        click.option("--max-length", type=int, default=None, help="单条命令长度阈值"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.command()
@_common_options
@click.option("--batch-size", "-b", type=int, default=None, help="每批并发命令数")
@click.option("--skip-setup", is_flag=True, help="跳过包管理器环境准备")
def install(
    config_path: str, manifest: str | None, cache_file: str | None,
    exclusions: str | None, target_dir: str | None, max_length: int | None,
    batch_size: int | None, skip_setup: bool,
) -> None:
    """解析全部版本并批量安装"""
    from pkgwarm.services.orchestrator import Orchestrator

    try:
        cfg = _build_config(
            config_path,
            manifest_file=manifest, cache_file=cache_file,
            exclusions_file=exclusions, target_dir=target_dir,
            max_command_length=max_length, batch_size=batch_size,
            prepare_environment=False if skip_setup else None,
        ).validate()
        setup_logging(level=_log_level(), json_output=_json_logs(), log_file=cfg.app_log_file)
        report = Orchestrator(cfg).run()
    except PkgwarmError as e:
        _fatal(str(e))
    except Exception as e:
        _crash(e)

    click.echo(click.style(f"开始时间: {report.started_at}", fg="green", bold=True))
    click.echo(click.style(f"结束时间: {report.finished_at}", fg="green", bold=True))
    click.echo(f"命令总数: {report.total}  退出码非零: {report.failed}")


@click.command()
@_common_options
def plan(
    config_path: str, manifest: str | None, cache_file: str | None,
    exclusions: str | None, target_dir: str | None, max_length: int | None,
) -> None:
    """预览将要执行的安装命令（不执行）"""
    from pkgwarm.services.orchestrator import Orchestrator

    try:
        cfg = _build_config(
            config_path,
            manifest_file=manifest, cache_file=cache_file,
            exclusions_file=exclusions, target_dir=target_dir,
            max_command_length=max_length, prepare_environment=False,
        ).validate()
        result = Orchestrator(cfg).plan()
    except PkgwarmError as e:
        _fatal(str(e))
    except Exception as e:
        _crash(e)

    for command in result.commands:
        click.echo(command.text)
    click.echo(
        f"共 {len(result.modules)} 个包, {len(result.commands)} 条命令, "
        f"排除 {result.excluded} 个版本",
    )
