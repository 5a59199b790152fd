"""Configuration schema and resolution for funcwrapper.

The core principle is resolve-once, freeze-then-flow: the process default is
resolved from layered sources into an immutable ``FrozenConfig`` the first
time a wrapper needs it and reused afterwards, never on the hot invocation
path. ``reset_config()`` drops the cached default; ``config_scope`` bypasses it.

Precedence (last wins): defaults < ``[tool.funcwrapper]`` in pyproject.toml
< ``FUNCWRAPPER_*`` environment variables < programmatic overrides.
"""

from __future__ import annotations

from contextlib import contextmanager
import contextvars
from dataclasses import dataclass, field
from enum import Enum
from functools import cache
import logging
import os
from pathlib import Path
import tomllib
from typing import TYPE_CHECKING, Any, Literal, overload
import warnings

from pydantic import BaseModel, Field, ValidationError, field_validator

from funcwrapper.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Generator, Mapping

ENV_PREFIX = "FUNCWRAPPER_"
PYPROJECT_PATH_VAR = "FUNCWRAPPER_PYPROJECT_PATH"
CONFIG_TOOL_NAME = "funcwrapper"

# Meta/control variables that steer resolution but aren't config fields
META_ENV_FIELDS = {"pyproject_path"}

# --- Schema (Pydantic wall) ---


class Settings(BaseModel):
    """Pydantic schema for configuration validation and defaults."""

    # Check action shape against wrapper kind on every invocation
    validate_actions: bool = Field(default=False)
    telemetry_enabled: bool = Field(default=False)
    # Applied to the "funcwrapper" logger when set
    log_level: str | None = Field(default=None)

    model_config = {"extra": "allow"}

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        """Accept level names in any case; map empty strings to None."""
        if v is None:
            return None
        if isinstance(v, str):
            name = v.strip().upper()
            if not name:
                return None
            if name not in logging.getLevelNamesMapping():
                raise ValueError(f"unknown log level {v!r}")
            return name
        return v


@cache
def _default_settings() -> dict[str, Any]:
    return Settings().model_dump()


# --- Immutable runtime payload ---


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration captured by wrappers at construction."""

    validate_actions: bool = False
    telemetry_enabled: bool = False
    log_level: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)


class Origin(str, Enum):
    """Source origin for configuration field values."""

    DEFAULT = "default"
    PROJECT = "project"
    ENV = "env"
    OVERRIDES = "overrides"


@dataclass(frozen=True)
class FieldOrigin:
    """Tracks the origin and context of a configuration field value."""

    origin: Origin
    env_key: str | None = None  # e.g., "FUNCWRAPPER_VALIDATE_ACTIONS"
    file: str | None = None


SourceMap = dict[str, FieldOrigin]

# --- Loaders (pure data, no validation) ---


def _coerce_bool(v: str) -> bool:
    return v.strip().lower() in {"1", "true", "yes", "on"}


def load_env() -> dict[str, Any]:
    """Read ``FUNCWRAPPER_*`` variables into a plain mapping.

    Boolean schema fields are coerced with the usual conventions; other
    values are passed through as strings for the schema to validate.
    """
    config: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field_name = key[len(ENV_PREFIX) :].lower()
        if field_name in META_ENV_FIELDS:
            continue
        info = Settings.model_fields.get(field_name)
        if info is not None and info.annotation is bool:
            config[field_name] = _coerce_bool(value)
        else:
            config[field_name] = value
    return config


def get_pyproject_path() -> Path:
    override = os.environ.get(PYPROJECT_PATH_VAR)
    return Path(override) if override else Path.cwd() / "pyproject.toml"


def load_pyproject(path: Path | None = None) -> dict[str, Any]:
    """Return the ``[tool.funcwrapper]`` table, or an empty mapping.

    A missing file yields ``{}``; a file that is not valid TOML is reported
    as a ConfigurationError rather than silently ignored.
    """
    path = path if path is not None else get_pyproject_path()
    if not path.exists():
        return {}
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(
            f"Could not parse {path}: {e}",
            hint=f"Fix the TOML syntax or point {PYPROJECT_PATH_VAR} elsewhere.",
        ) from e
    table = data.get("tool", {}).get(CONFIG_TOOL_NAME, {})
    return dict(table) if isinstance(table, dict) else {}


# --- Ambient scope ---

_AMBIENT: contextvars.ContextVar[FrozenConfig | None] = contextvars.ContextVar(
    "funcwrapper_ambient_config", default=None
)

_DOTENV_LOADED: bool = False
_DEFAULT_CONFIG: FrozenConfig | None = None


def _try_load_dotenv() -> None:
    """Load a .env file once per process via python-dotenv."""
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    from dotenv import load_dotenv

    load_dotenv()
    _DOTENV_LOADED = True


@contextmanager
def config_scope(
    cfg_or_overrides: Mapping[str, Any] | FrozenConfig | None = None,
    **overrides: object,
) -> Generator[FrozenConfig]:
    """Make a configuration ambient for wrappers built inside the block.

    Thread-safe and async-safe: the scope is held in a ``ContextVar``.

    Example:
        with config_scope(validate_actions=True):
            wrapper = make_wrapper(logic)  # validates every call
    """
    if isinstance(cfg_or_overrides, FrozenConfig):
        cfg = cfg_or_overrides
    else:
        cfg = resolve_config(overrides={**(cfg_or_overrides or {}), **overrides})
    token = _AMBIENT.set(cfg)
    try:
        yield cfg
    finally:
        _AMBIENT.reset(token)


def current_config() -> FrozenConfig:
    """Return the ambient config, or the cached process default."""
    cfg = _AMBIENT.get()
    return cfg if cfg is not None else _default_config()


def _default_config() -> FrozenConfig:
    global _DEFAULT_CONFIG
    if _DEFAULT_CONFIG is None:
        cfg = resolve_config()
        # Applied once, when the process default is first resolved
        if cfg.log_level is not None:
            logging.getLogger("funcwrapper").setLevel(cfg.log_level)
        _DEFAULT_CONFIG = cfg
    return _DEFAULT_CONFIG


def reset_config() -> None:
    """Forget the cached process default so the next lookup re-resolves it.

    Useful after changing ``FUNCWRAPPER_*`` variables or the project file at
    runtime, and between tests.
    """
    global _DEFAULT_CONFIG
    _DEFAULT_CONFIG = None


# --- Public resolution API ---


@overload
def resolve_config(
    overrides: Mapping[str, Any] | None = ...,
    *,
    explain: Literal[True],
) -> tuple[FrozenConfig, SourceMap]: ...


@overload
def resolve_config(
    overrides: Mapping[str, Any] | None = ...,
    *,
    explain: Literal[False] = ...,
) -> FrozenConfig: ...


def resolve_config(
    overrides: Mapping[str, Any] | None = None,
    *,
    explain: bool = False,
) -> FrozenConfig | tuple[FrozenConfig, SourceMap]:
    """Resolve configuration from all sources into a FrozenConfig.

    Args:
        overrides: Programmatic configuration overrides.
        explain: If True, return tuple of (config, source_map) for audit.

    Raises:
        ConfigurationError: If configuration validation fails.
    """
    _try_load_dotenv()

    project_path = get_pyproject_path()
    merged, sources = _resolve_layers(
        overrides=overrides or {},
        env=load_env(),
        project=load_pyproject(project_path),
        project_file=str(project_path),
    )

    try:
        settings = Settings.model_validate(merged)
    except ValidationError as e:
        err = e.errors()[0]
        loc = ".".join(str(p) for p in err.get("loc", ()))
        msg = err.get("msg") or ""
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, ") :]
        origin = sources.get(loc)
        hint = (
            f"Value came from {origin.env_key or origin.file or origin.origin.value}."
            if origin is not None
            else None
        )
        raise ConfigurationError(
            f"Configuration validation failed for '{loc}': {msg}", hint=hint
        ) from e

    frozen = _freeze(settings, merged)
    return (frozen, sources) if explain else frozen


# --- Internal helpers ---


def _freeze(settings: Settings, merged: Mapping[str, Any]) -> FrozenConfig:
    known_fields = set(Settings.model_fields.keys())
    extra = {k: v for k, v in merged.items() if k not in known_fields}
    for name in extra:
        warnings.warn(
            f"Configuration: unknown field '{name}' ignored",
            UserWarning,
            stacklevel=4,
        )
    return FrozenConfig(
        validate_actions=settings.validate_actions,
        telemetry_enabled=settings.telemetry_enabled,
        log_level=settings.log_level,
        extra=extra,
    )


def _resolve_layers(
    *,
    overrides: Mapping[str, Any],
    env: Mapping[str, Any],
    project: Mapping[str, Any],
    project_file: str,
) -> tuple[dict[str, Any], SourceMap]:
    """Merge layers with last-wins precedence, recording each field's origin."""
    out: dict[str, Any] = dict(_default_settings())
    src: SourceMap = {k: FieldOrigin(origin=Origin.DEFAULT) for k in out}

    for k, v in project.items():
        out[k] = v
        src[k] = FieldOrigin(origin=Origin.PROJECT, file=project_file)
    for k, v in env.items():
        out[k] = v
        src[k] = FieldOrigin(origin=Origin.ENV, env_key=f"{ENV_PREFIX}{k.upper()}")
    for k, v in overrides.items():
        out[k] = v
        src[k] = FieldOrigin(origin=Origin.OVERRIDES)

    return out, src


__all__ = [
    "FieldOrigin",
    "FrozenConfig",
    "Origin",
    "Settings",
    "SourceMap",
    "config_scope",
    "current_config",
    "load_env",
    "load_pyproject",
    "reset_config",
    "resolve_config",
]
