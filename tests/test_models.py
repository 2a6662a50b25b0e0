import pytest

from conftest import index_line, make_crate
from crates_query.core.enums import DependencyKind
from crates_query.core.exceptions import ConfigError, VersionParseError
from crates_query.core.models import CratesQueryConfig, CrateVersion, Dependency


def test_version_record_from_index_line():
    record = CrateVersion.model_validate(
        index_line(
            "serde",
            "1.0.200",
            deps=[
                {
                    "name": "serde_derive",
                    "req": "=1.0.200",
                    "features": [],
                    "optional": True,
                    "default_features": True,
                    "target": None,
                    "kind": "normal",
                },
                {"name": "serde_derive", "req": "^1", "kind": "dev"},
            ],
            features={"default": ["std"], "std": []},
            rust_version="1.31",
        )
    )

    assert record.version == "1.0.200"
    assert [d.kind for d in record.dependencies] == [
        DependencyKind.NORMAL,
        DependencyKind.DEV,
    ]
    assert record.dependencies[0].optional
    assert record.rust_version == "1.31"


def test_features2_merged_after_features():
    record = CrateVersion.model_validate(
        index_line(
            "tokio",
            "1.0.0",
            features={"default": [], "full": ["rt"]},
            features2={"serde": ["dep:serde"]},
        )
    )

    assert list(record.features) == ["default", "full", "serde"]
    assert record.features["serde"] == ["dep:serde"]


def test_dependency_null_kind_is_normal():
    dep = Dependency.model_validate({"name": "log", "req": "^0.4", "kind": None})
    assert dep.kind == DependencyKind.NORMAL


def test_renamed_dependency_uses_package_name():
    dep = Dependency.model_validate(
        {"name": "futures01", "req": "^0.1", "package": "futures"}
    )
    assert dep.crate_name == "futures"


def test_highest_normal_version(left_pad):
    assert left_pad.highest_normal_version().version == "2.0.0"


def test_highest_normal_version_ignores_invalid_versions():
    crate = make_crate("odd", ["1.0.0", "not-a-version", "1.2"])
    assert crate.highest_normal_version().version == "1.0.0"


def test_highest_normal_version_none_without_releases():
    crate = make_crate("pre", ["1.0.0-rc.1"])
    assert crate.highest_normal_version() is None


def test_sorted_version_numbers(left_pad):
    assert left_pad.sorted_version_numbers() == [
        "1.0.0",
        "1.3.0",
        "2.0.0-beta.1",
        "2.0.0",
    ]


def test_sorted_version_numbers_semver_precedence():
    crate = make_crate(
        "order",
        ["1.10.0", "1.2.0", "1.0.0-rc.1", "1.0.0-alpha.beta", "1.0.0-alpha.1", "1.0.0"],
    )
    assert crate.sorted_version_numbers() == [
        "1.0.0-alpha.1",
        "1.0.0-alpha.beta",
        "1.0.0-rc.1",
        "1.0.0",
        "1.2.0",
        "1.10.0",
    ]


def test_sorted_version_numbers_rejects_invalid():
    crate = make_crate("broken", ["1.0.0", "1.0"])
    with pytest.raises(VersionParseError):
        crate.sorted_version_numbers()


def test_config_from_toml(tmp_path):
    config_file = tmp_path / "crates-query.toml"
    config_file.write_text(
        '[crates-query]\ncargo_bin = "/opt/cargo/bin/cargo"\nlog_level = "INFO"\n'
    )

    config = CratesQueryConfig.from_toml(config_file)

    assert config.cargo_bin == "/opt/cargo/bin/cargo"
    assert config.log_level == "INFO"
    assert config.index_path is None


def test_config_from_toml_without_table(tmp_path):
    config_file = tmp_path / "empty.toml"
    config_file.write_text("")

    assert CratesQueryConfig.from_toml(config_file) == CratesQueryConfig()


@pytest.mark.parametrize(
    "content", ["[crates-query\n", '[crates-query]\nlog_level = "LOUD"\n']
)
def test_config_from_toml_invalid(tmp_path, content):
    config_file = tmp_path / "bad.toml"
    config_file.write_text(content)

    with pytest.raises(ConfigError):
        CratesQueryConfig.from_toml(config_file)


def test_config_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        CratesQueryConfig.from_toml(tmp_path / "missing.toml")
