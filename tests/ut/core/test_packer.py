"""命令打包器测试"""

from __future__ import annotations

from pathlib import Path

import pytest

from pkgwarm.core.exceptions import ValidationError
from pkgwarm.core.models import PackageSpec
from pkgwarm.core.packer import (
    CommandPacker,
    install_invocation,
    marker_path_for,
    pack_commands,
)

INVOCATION = ("pnpm", "add", "--prefix", "/t")  # "pnpm add --prefix /t" = 20 字符


def _packer(max_length: int, marker_dir: str = "/t") -> CommandPacker:
    return CommandPacker(max_length, invocation=INVOCATION, marker_dir=marker_dir)


def _versions(n: int) -> list[str]:
    return [f"1.0.{i}" for i in range(n)]


class TestPackModule:
    def test_single_command_when_under_threshold(self) -> None:
        cmds = _packer(10_000).pack_module(PackageSpec("a", _versions(3)))
        assert len(cmds) == 1
        assert cmds[0].targets == ("a@1.0.0", "a@1.0.1", "a@1.0.2")
        assert cmds[0].text == "pnpm add --prefix /t a@1.0.0 a@1.0.1 a@1.0.2"

    def test_split_after_threshold_exceeded(self) -> None:
        # 每个目标 +8 字符: 28, 36, 44(>40 封口)
        cmds = _packer(40).pack_module(PackageSpec("a", _versions(5)))
        assert [c.targets for c in cmds] == [
            ("a@1.0.0", "a@1.0.1", "a@1.0.2"),
            ("a@1.0.3", "a@1.0.4"),
        ]

    def test_exact_boundary_no_empty_trailing_command(self) -> None:
        cmds = _packer(40).pack_module(PackageSpec("a", _versions(3)))
        assert len(cmds) == 1
        assert len(cmds[0].targets) == 3

    def test_equal_to_threshold_does_not_split(self) -> None:
        # 28, 36 <= 36 不封口
        cmds = _packer(36).pack_module(PackageSpec("a", _versions(2)))
        assert len(cmds) == 1

    def test_empty_versions_yields_one_bare_command(self) -> None:
        cmds = _packer(40).pack_module(PackageSpec("a", []))
        assert len(cmds) == 1
        assert cmds[0].targets == ()
        assert cmds[0].text == "pnpm add --prefix /t"
        assert cmds[0].marker_path == str(Path("/t") / "a.log")

    def test_scalar_version(self) -> None:
        cmds = _packer(25).pack_module(PackageSpec("b", "2.14.2"))
        assert len(cmds) == 1
        assert cmds[0].targets == ("b@2.14.2",)

    def test_scoped_package_marker(self) -> None:
        cmds = _packer(1000, marker_dir="/out").pack_module(PackageSpec("@scope/pkg", ["1.0.0"]))
        assert cmds[0].targets == ("@scope/pkg@1.0.0",)
        assert cmds[0].marker_path == str(Path("/out") / "@scope+pkg.log")

    @pytest.mark.parametrize("max_length", [21, 30, 57, 100, 333])
    def test_length_bound_and_target_conservation(self, max_length: int) -> None:
        spec = PackageSpec("pkg", [f"{i}.{i % 7}.{i * 3}" for i in range(200)])
        cmds = _packer(max_length).pack_module(spec)

        longest_token = max(len(f"pkg@{v}") for v in spec.versions)
        for cmd in cmds:
            assert len(cmd.text) <= max_length + 1 + longest_token

        flattened = [t for c in cmds for t in c.targets]
        assert flattened == [f"pkg@{v}" for v in spec.versions]


class TestPack:
    def test_no_cross_module_packing(self) -> None:
        modules = [
            PackageSpec("a", ["1.0.0"]),
            PackageSpec("b", ["2.0.0", "2.0.1"]),
            PackageSpec("c", "3.0.0"),
        ]
        cmds = _packer(10_000).pack(modules)
        assert [c.package for c in cmds] == ["a", "b", "c"]
        for cmd in cmds:
            assert all(t.startswith(f"{cmd.package}@") for t in cmd.targets)

    def test_every_module_contributes_a_command(self) -> None:
        modules = [PackageSpec(f"m{i}", []) for i in range(4)]
        assert len(_packer(40).pack(modules)) == 4

    def test_pack_commands_helper(self) -> None:
        cmds = pack_commands(
            [PackageSpec("a", ["1.0.0"])], 100,
            invocation=install_invocation("pnpm", "/work"), marker_dir="/work",
        )
        assert cmds[0].argv == ["pnpm", "add", "--prefix", "/work", "a@1.0.0"]


class TestValidation:
    def test_non_positive_max_length(self) -> None:
        with pytest.raises(ValidationError, match="max_length"):
            _packer(0)

    def test_empty_invocation(self) -> None:
        with pytest.raises(ValidationError, match="安装前缀"):
            CommandPacker(100, invocation=(), marker_dir="/t")


def test_marker_path_for_replaces_slashes() -> None:
    assert marker_path_for("@a/b", "/logs") == str(Path("/logs") / "@a+b.log")
