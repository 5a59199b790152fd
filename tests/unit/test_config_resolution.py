"""Configuration precedence, validation and ambient scoping."""

from __future__ import annotations

import logging

import pytest

from funcwrapper import make_wrapper
import funcwrapper.config as config_module
from funcwrapper.config import (
    FrozenConfig,
    Origin,
    config_scope,
    current_config,
    load_env,
    load_pyproject,
    reset_config,
    resolve_config,
)
from funcwrapper.errors import ConfigurationError

pytestmark = pytest.mark.unit


def _write_pyproject(tmp_path, body: str, monkeypatch):
    path = tmp_path / "pyproject.toml"
    path.write_text(body)
    monkeypatch.setenv("FUNCWRAPPER_PYPROJECT_PATH", str(path))
    return path


def test_defaults_when_no_sources():
    cfg, sources = resolve_config(explain=True)

    assert cfg == FrozenConfig()
    assert all(s.origin is Origin.DEFAULT for s in sources.values())


def test_project_file_layer(tmp_path, monkeypatch):
    path = _write_pyproject(
        tmp_path, "[tool.funcwrapper]\nvalidate_actions = true\n", monkeypatch
    )

    cfg, sources = resolve_config(explain=True)

    assert cfg.validate_actions is True
    assert sources["validate_actions"].origin is Origin.PROJECT
    assert sources["validate_actions"].file == str(path)


def test_env_beats_project_and_overrides_beat_env(tmp_path, monkeypatch):
    _write_pyproject(
        tmp_path,
        "[tool.funcwrapper]\nvalidate_actions = true\ntelemetry_enabled = false\n",
        monkeypatch,
    )
    monkeypatch.setenv("FUNCWRAPPER_VALIDATE_ACTIONS", "false")
    monkeypatch.setenv("FUNCWRAPPER_TELEMETRY_ENABLED", "yes")

    cfg, sources = resolve_config(overrides={"telemetry_enabled": False}, explain=True)

    assert cfg.validate_actions is False
    assert sources["validate_actions"].origin is Origin.ENV
    assert sources["validate_actions"].env_key == "FUNCWRAPPER_VALIDATE_ACTIONS"
    assert cfg.telemetry_enabled is False
    assert sources["telemetry_enabled"].origin is Origin.OVERRIDES


@pytest.mark.parametrize("raw", ["1", "true", "TRUE", " on ", "yes"])
def test_env_booleans_are_coerced(monkeypatch, raw):
    monkeypatch.setenv("FUNCWRAPPER_VALIDATE_ACTIONS", raw)
    assert load_env() == {"validate_actions": True}


def test_pyproject_path_variable_is_not_a_field(monkeypatch):
    assert "pyproject_path" not in load_env()


def test_missing_project_file_is_empty(tmp_path):
    assert load_pyproject(tmp_path / "nope.toml") == {}


def test_malformed_project_file_is_reported(tmp_path, monkeypatch):
    _write_pyproject(tmp_path, "[tool.funcwrapper\n", monkeypatch)

    with pytest.raises(ConfigurationError) as exc_info:
        resolve_config()

    assert "FUNCWRAPPER_PYPROJECT_PATH" in (exc_info.value.hint or "")


def test_invalid_value_names_its_origin(monkeypatch):
    monkeypatch.setenv("FUNCWRAPPER_LOG_LEVEL", "chatty")

    with pytest.raises(ConfigurationError) as exc_info:
        resolve_config()

    assert "log_level" in str(exc_info.value)
    assert "FUNCWRAPPER_LOG_LEVEL" in (exc_info.value.hint or "")


def test_log_level_is_normalized():
    cfg = resolve_config(overrides={"log_level": " debug "})

    assert cfg.log_level == "DEBUG"


def test_log_level_is_applied_by_the_process_default_only(monkeypatch):
    logger = logging.getLogger("funcwrapper")
    logger.setLevel(logging.NOTSET)
    monkeypatch.setenv("FUNCWRAPPER_LOG_LEVEL", "debug")

    resolve_config(overrides={"log_level": "warning"})
    assert logger.level == logging.NOTSET

    current_config()
    assert logger.level == logging.DEBUG


# --- Process default caching ---


def test_default_config_is_resolved_once(tmp_path, monkeypatch):
    _write_pyproject(
        tmp_path, "[tool.funcwrapper]\nvalidate_actions = true\n", monkeypatch
    )
    seen: list[object] = []
    real_load = config_module.load_pyproject

    def counting_load(path=None):
        seen.append(path)
        return real_load(path)

    monkeypatch.setattr(config_module, "load_pyproject", counting_load)

    first = make_wrapper(lambda work: work())
    second = make_wrapper(lambda work: work())

    assert first.validates_actions and second.validates_actions
    assert len(seen) == 1


def test_default_config_is_stable_until_reset(monkeypatch):
    assert current_config().validate_actions is False

    monkeypatch.setenv("FUNCWRAPPER_VALIDATE_ACTIONS", "1")
    assert current_config().validate_actions is False

    reset_config()
    assert current_config().validate_actions is True


def test_unknown_field_warns_once_across_constructions(tmp_path, monkeypatch):
    _write_pyproject(tmp_path, "[tool.funcwrapper]\ncolour = 'blue'\n", monkeypatch)

    with pytest.warns(UserWarning) as record:
        make_wrapper(lambda work: work())
        make_wrapper(before=lambda: None)

    assert len([w for w in record if "colour" in str(w.message)]) == 1


def test_config_scope_bypasses_the_cached_default():
    assert current_config().validate_actions is False

    with config_scope(validate_actions=True):
        assert make_wrapper(lambda work: work()).validates_actions is True

    assert make_wrapper(lambda work: work()).validates_actions is False


def test_unknown_fields_warn_and_are_kept_as_extra():
    with pytest.warns(UserWarning, match="unknown field 'colour'"):
        cfg = resolve_config(overrides={"colour": "blue"})

    assert cfg.extra == {"colour": "blue"}


def test_config_scope_is_ambient_and_restored():
    assert current_config().validate_actions is False

    with config_scope(validate_actions=True) as cfg:
        assert current_config() is cfg
        with config_scope(FrozenConfig(telemetry_enabled=True)) as inner:
            assert current_config() is inner
        assert current_config() is cfg

    assert current_config().validate_actions is False


@pytest.mark.allow_dotenv
def test_dotenv_file_is_loaded_once(tmp_path, monkeypatch):
    calls: list[int] = []
    monkeypatch.setattr(config_module, "_DOTENV_LOADED", False)
    monkeypatch.setattr("dotenv.load_dotenv", lambda *a, **k: calls.append(1))

    resolve_config()
    resolve_config()

    assert calls == [1]
