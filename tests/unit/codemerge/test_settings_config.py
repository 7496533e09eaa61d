from pathlib import Path

import pytest

from codemerge.config import EXCLUDED_DIRS
from codemerge.exceptions import ConfigError
from codemerge.settings import Settings, build_settings, load_config_file


@pytest.mark.unit
def test_settings_defaults() -> None:
    settings = Settings()

    assert settings.root.resolve() == Path.cwd().resolve()
    assert settings.output == Path("merged.txt")
    assert settings.dedupe is False
    assert settings.excluded_dirs == EXCLUDED_DIRS


@pytest.mark.unit
def test_excluded_dirs_extends_defaults() -> None:
    settings = Settings(exclude_dir=["vendor"])

    assert "vendor" in settings.excluded_dirs
    assert "build" in settings.excluded_dirs


@pytest.mark.unit
def test_build_settings_overlays_explicit_values_on_config(tmp_path: Path) -> None:
    config = tmp_path / "codemerge.yaml"
    config.write_text(
        "output: from_config.txt\ndedupe: true\nexclude_dir: [third_party]\n",
        encoding="utf-8",
    )

    settings = build_settings(
        {"output": Path("cli.txt"), "dedupe": None, "exclude_dir": ["vendor"]},
        config,
    )

    assert settings.output == Path("cli.txt")
    assert settings.dedupe is True
    assert settings.exclude_dir == ["third_party", "vendor"]


@pytest.mark.unit
def test_load_config_file_accepts_empty_file(tmp_path: Path) -> None:
    config = tmp_path / "empty.yaml"
    config.write_text("", encoding="utf-8")

    assert load_config_file(config) == {}


@pytest.mark.unit
@pytest.mark.parametrize("content", ["- a\n- b\n", "output: [unclosed\n"])
def test_load_config_file_rejects_bad_yaml(tmp_path: Path, content: str) -> None:
    config = tmp_path / "bad.yaml"
    config.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config_file(config)


@pytest.mark.unit
def test_build_settings_rejects_unknown_keys(tmp_path: Path) -> None:
    config = tmp_path / "codemerge.yaml"
    config.write_text("colour: blue\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        build_settings({}, config)


@pytest.mark.unit
@pytest.mark.parametrize("values", [{}, {"exclude_dir": ["third_party"]}])
def test_build_settings_rejects_scalar_exclude_dir(tmp_path: Path, values: dict) -> None:
    config = tmp_path / "codemerge.yaml"
    config.write_text("exclude_dir: vendor\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        build_settings(values, config)
