from pathlib import Path

import pytest

from codexpreview.settings import (
    POLL_INTERVAL_DEFAULT,
    LogLevel,
    MonitorSettings,
    load_settings,
)
from codexpreview.errors import SettingsError


def test_defaults():
    settings = load_settings(None)

    assert settings == MonitorSettings()
    assert settings.poll_interval == POLL_INTERVAL_DEFAULT
    assert settings.show_diff_on_change is True
    assert settings.strict_context is False
    assert settings.project_root is None
    assert settings.log_level == LogLevel.info


def test_load_yaml_section(tmp_path: Path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "\n".join(
            [
                "other: 1",
                "preview:",
                "  poll_interval: 0.25",
                "  strict_context: true",
                "  project_root: ~/work",
                "  log_level: debug",
            ]
        ),
        encoding="utf-8",
    )

    settings = load_settings(cfg)

    assert settings.poll_interval == 0.25
    assert settings.strict_context is True
    assert settings.project_root == Path("~/work").expanduser()
    assert settings.log_level == LogLevel.debug


def test_load_flat_json5_with_env(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("PREVIEW_ROOT", str(tmp_path))
    cfg = tmp_path / "config.json5"
    cfg.write_text(
        "{\n  // comments are fine\n  show_diff_on_change: false,\n"
        "  project_root: '${env:PREVIEW_ROOT}',\n}\n",
        encoding="utf-8",
    )

    settings = load_settings(cfg)

    assert settings.show_diff_on_change is False
    assert settings.project_root == tmp_path


def test_empty_yaml_gives_defaults(tmp_path: Path):
    cfg = tmp_path / "empty.yml"
    cfg.write_text("", encoding="utf-8")

    assert load_settings(cfg) == MonitorSettings()


@pytest.mark.parametrize(
    "name, content",
    [
        ("bad.yaml", "preview:\n  poll_interval: 0\n"),
        ("bad.yaml", "preview:\n  poll_interval: fast\n"),
        ("bad.yaml", "preview: [1, 2]\n"),
        ("bad.yaml", "- just\n- a list\n"),
        ("bad.yaml", "preview: {poll_interval: 1\n"),
        ("bad.json5", "{nope"),
        ("bad.toml", "x = 1"),
        ("env.yaml", "project_root: ${env:CODEXPREVIEW_SURELY_UNSET}\n"),
    ],
)
def test_invalid_settings_raise(tmp_path: Path, name, content):
    cfg = tmp_path / name
    cfg.write_text(content, encoding="utf-8")

    with pytest.raises(SettingsError):
        load_settings(cfg)


def test_missing_file_raises(tmp_path: Path):
    with pytest.raises(SettingsError):
        load_settings(tmp_path / "nope.yaml")
