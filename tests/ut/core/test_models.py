"""核心数据模型测试"""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from pkgwarm.core.exceptions import ValidationError
from pkgwarm.core.models import ExclusionRule, InstallCommand, InstallReport, PackageSpec


class TestPackageSpec:
    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValidationError, match="包名不能为空"):
            PackageSpec(name="", versions=["1.0.0"])

    @pytest.mark.parametrize(("versions", "scalar", "count"), [
        (["1.0.0", "1.0.1"], False, 2),
        ([], False, 0),
        ("2.0.0", True, 1),
    ])
    def test_scalar_and_count(self, versions, scalar: bool, count: int) -> None:
        spec = PackageSpec(name="pkg", versions=versions)
        assert spec.is_scalar is scalar
        assert spec.version_count == count

    def test_from_dict_cache_keys(self) -> None:
        spec = PackageSpec.from_dict({"moduleName": "sample1", "versions": ["1.0.0"]})
        assert spec.name == "sample1"
        assert spec.versions == ["1.0.0"]

        alt = PackageSpec.from_dict({"name": "sample2", "versions": "2.14.2"})
        assert alt.name == "sample2"
        assert alt.versions == "2.14.2"

    def test_to_dict_keeps_cache_format(self) -> None:
        spec = PackageSpec(name="@scope/pkg", versions="1.0.0")
        assert spec.to_dict() == {"moduleName": "@scope/pkg", "versions": "1.0.0"}


class TestExclusionRule:
    def test_from_dict(self) -> None:
        rule = ExclusionRule.from_dict({"module": "sample1", "versions": ["1.0.0", 2]})
        assert rule.module_name == "sample1"
        assert rule.versions == frozenset({"1.0.0", "2"})

    def test_missing_module(self) -> None:
        with pytest.raises(ValidationError, match="module"):
            ExclusionRule.from_dict({"versions": ["1.0.0"]})


class TestInstallCommand:
    def test_argv_and_text(self) -> None:
        cmd = InstallCommand(
            package="a",
            invocation=("pnpm", "add", "--prefix", "/t"),
            targets=("a@1.0.0", "a@1.0.1"),
        )
        assert cmd.argv == ["pnpm", "add", "--prefix", "/t", "a@1.0.0", "a@1.0.1"]
        assert cmd.text == "pnpm add --prefix /t a@1.0.0 a@1.0.1"
        assert str(cmd) == cmd.text

    def test_frozen(self) -> None:
        cmd = InstallCommand(package="a", invocation=("pnpm",))
        with pytest.raises(AttributeError):
            cmd.targets = ("a@1",)  # type: ignore[misc]


class TestInstallReport:
    def test_counts(self) -> None:
        start = datetime(2024, 1, 1, 12, 0, 0)
        report = InstallReport(
            started_at=start,
            finished_at=start + timedelta(seconds=90),
            batch_results=[[0, 1, 0], [0, 127]],
        )
        assert report.total == 5
        assert report.failed == 2
        assert report.duration == 90.0
        assert report.success is False

    def test_unfinished(self) -> None:
        report = InstallReport(started_at=datetime.now())
        assert report.duration == 0.0
        assert report.success is False

    def test_all_zero_is_success(self) -> None:
        now = datetime.now()
        report = InstallReport(started_at=now, finished_at=now, batch_results=[[0, 0]])
        assert report.success is True
