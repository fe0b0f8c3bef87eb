"""排除规则加载测试"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from pkgwarm.core.exceptions import ValidationError
from pkgwarm.core.exclusions import load_exclusions, parse_exclusions


class TestParseExclusions:
    def test_list_form(self) -> None:
        rules = parse_exclusions({"exclusions": [
            {"module": "sample1", "versions": ["1.0.0", "1.0.6"]},
        ]})
        assert len(rules) == 1
        assert rules[0].module_name == "sample1"
        assert rules[0].versions == frozenset({"1.0.0", "1.0.6"})

    def test_mapping_form(self) -> None:
        rules = parse_exclusions({"sample2": ["2.14.2"], "sample3": []})
        assert {r.module_name for r in rules} == {"sample2", "sample3"}

    def test_mapping_form_invalid(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            parse_exclusions({"sample2": "2.14.2"})
        assert excinfo.value.details == ["sample2: 版本必须是列表"]

    def test_empty_list(self) -> None:
        assert parse_exclusions({"exclusions": None}) == []

    @pytest.mark.parametrize("entry", ["sample1", ["sample1"], 3])
    def test_list_entry_must_be_mapping(self, entry: object) -> None:
        with pytest.raises(ValidationError, match="映射"):
            parse_exclusions({"exclusions": [entry]})

    def test_list_entry_versions_must_be_list(self) -> None:
        with pytest.raises(ValidationError, match="版本必须是列表"):
            parse_exclusions({"exclusions": [{"module": "sample1", "versions": "1.0.0"}]})


class TestLoadExclusions:
    def test_missing_file(self, tmp_path: Path) -> None:
        assert load_exclusions(tmp_path / "none.yml") == []

    def test_load_file(self, tmp_path: Path) -> None:
        path = tmp_path / "ex.yml"
        path.write_text(yaml.dump({"exclusions": [
            {"module": "sample1", "versions": ["1.0.0"]},
        ]}), encoding="utf-8")
        rules = load_exclusions(path)
        assert rules[0].versions == frozenset({"1.0.0"})

    def test_shipped_exclusions_parse(self) -> None:
        shipped = Path(__file__).resolve().parents[3] / "configs" / "exclusions.yml"
        rules = load_exclusions(shipped)
        assert [r.module_name for r in rules] == ["sample1", "sample2"]

    def test_malformed_yaml_is_validation_error(self, tmp_path: Path) -> None:
        path = tmp_path / "ex.yml"
        path.write_text("[unclosed", encoding="utf-8")
        with pytest.raises(ValidationError, match="格式错误") as excinfo:
            load_exclusions(path)
        assert excinfo.value.details
