"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from witness.config import (
    ConfigError,
    ConfigManager,
    WitnessConfig,
    assign_nested,
    flatten_for_env,
    parse_env_overrides,
    resolve_with_precedence,
)


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager()


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path == tmp_path / ".witness" / "config.yaml"
    text = path.read_text(encoding="utf-8")
    assert "Witness configuration file" in text
    assert "Last updated:" in text

    config = manager.load(include_env=False)
    assert isinstance(config, WitnessConfig)
    assert config.source.provider == "static"


def test_resolve_with_precedence_respects_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.save({"source": {"provider": "store"}, "browse": {"related_limit": 3}})

    env = {"WITNESS__BROWSE__RELATED_LIMIT": "7", "WITNESS__SERVER__PORT": "9000"}
    cli = {"browse.related_limit": 2}

    config = manager.load(cli_overrides=cli, env_overrides=env)

    assert config.source.provider == "store"
    assert config.server.port == 9000
    # CLI overrides take precedence over environment
    assert config.browse.related_limit == 2


def test_environment_values_are_parsed_as_yaml() -> None:
    overrides = parse_env_overrides(
        {
            "WITNESS__RENDER__WRAP_LINES": "true",
            "WITNESS__ARCHIVE__STORAGE_BUCKET": "family-archive.appspot.com",
            "UNRELATED": "ignored",
        }
    )

    assert overrides == {
        "render": {"wrap_lines": True},
        "archive": {"storage_bucket": "family-archive.appspot.com"},
    }


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


def test_invalid_values_raise_config_error() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=WitnessConfig(), cli_overrides={"source.provider": "ftp"}
        )

    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=WitnessConfig(), file_overrides={"render": {"max_line_length": 2}}
        )


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(defaults=WitnessConfig(), file_overrides={"colour": "red"})


def test_assign_nested_refuses_to_descend_into_scalars() -> None:
    data = {"source": "static"}

    with pytest.raises(ConfigError):
        assign_nested(data, ["source", "provider"], "store")

    fresh: dict = {}
    assign_nested(fresh, ["archive", "base_url"], "https://example.org/archive")
    assert fresh == {"archive": {"base_url": "https://example.org/archive"}}


def test_flatten_for_env_round_trips_defaults() -> None:
    flat = flatten_for_env(WitnessConfig())

    assert flat["WITNESS__SOURCE__PROVIDER"] == "static"
    assert flat["WITNESS__SOURCE__MANIFEST"] == "null"
    assert flat["WITNESS__RENDER__MAX_LINE_LENGTH"] == "80"

    config = resolve_with_precedence(
        defaults=WitnessConfig(), env_overrides=parse_env_overrides(flat)
    )
    assert config == WitnessConfig()


def test_logging_level_is_case_normalized() -> None:
    config = resolve_with_precedence(
        defaults=WitnessConfig(), cli_overrides={"logging.level": "debug"}
    )

    assert config.logging.level == "DEBUG"


def test_unknown_logging_level_raises_config_error() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=WitnessConfig(), cli_overrides={"logging.level": "verbose"}
        )
