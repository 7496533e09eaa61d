from __future__ import annotations

from pathlib import Path

import pytest

from codemerge import __version__, cli


@pytest.mark.unit
def test_parse_args_defaults() -> None:
    settings = cli.parse_args([])

    assert settings.output == Path("merged.txt")
    assert settings.no_progress is False
    assert settings.exclude_dir == []


@pytest.mark.unit
def test_parse_args_parses_flags(tmp_path: Path) -> None:
    settings = cli.parse_args(
        [
            "--root",
            str(tmp_path),
            "--output",
            "out.txt",
            "--exclude-dir",
            "vendor",
            "--exclude-dir",
            "third_party",
            "--dedupe",
            "--no-progress",
        ],
    )

    assert settings.root == tmp_path
    assert settings.output == Path("out.txt")
    assert settings.exclude_dir == ["vendor", "third_party"]
    assert settings.dedupe is True
    assert settings.no_progress is True


@pytest.mark.unit
def test_parse_args_reads_config_file(tmp_path: Path) -> None:
    config = tmp_path / "codemerge.yaml"
    config.write_text("no_progress: true\noutput: configured.txt\n", encoding="utf-8")

    settings = cli.parse_args(["--config", str(config), "--output", "flag.txt"])

    assert settings.no_progress is True
    assert settings.output == Path("flag.txt")


@pytest.mark.unit
def test_parse_args_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.parse_args(["--version"])

    assert exc_info.value.code == 0
    captured = capsys.readouterr()
    assert __version__ in captured.out


@pytest.mark.unit
def test_main_returns_failure_on_invalid_config(tmp_path: Path) -> None:
    config = tmp_path / "codemerge.yaml"
    config.write_text("- not\n- a mapping\n", encoding="utf-8")

    assert cli.main(["--config", str(config)]) == 1
