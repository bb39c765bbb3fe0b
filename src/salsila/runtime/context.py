"""Process and request scoped access to the application configuration.

The configuration file is read once, on first use. ``with_context`` layers a
partial ``ConfigData`` on top of the active one for a block of code, which is
how tests and the CLI tweak single settings without rebuilding the rest.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from functools import cache
from typing import Any

from pydantic import BaseModel

from src.salsila.runtime.config.config_data import ConfigData
from src.salsila.runtime.config.config_template import load_config


@dataclass(frozen=True)
class AppContext:
    """Application-wide state visible to services."""

    config: ConfigData


_app_context: ContextVar[AppContext | None] = ContextVar("app_context", default=None)


@cache
def _process_context() -> AppContext:
    return AppContext(config=load_config())


def get_context() -> AppContext:
    return _app_context.get() or _process_context()


def set_context(context: AppContext) -> Token[AppContext | None]:
    return _app_context.set(context)


def get_config() -> ConfigData:
    return get_context().config


def set_config(config: ConfigData) -> None:
    """Replace the whole configuration for the current context."""
    set_context(replace(get_context(), config=config))


def _explicit_values(model: BaseModel) -> dict[str, Any]:
    """Fields assigned on ``model`` or any nested model, as plain data."""
    values: dict[str, Any] = {}
    for name in type(model).model_fields:
        value = getattr(model, name)
        if isinstance(value, BaseModel):
            nested = _explicit_values(value)
            if nested:
                values[name] = nested
                continue
        if name in model.model_fields_set:
            values[name] = value.model_dump() if isinstance(value, BaseModel) else value
    return values


def _overlay(base: dict[str, Any], top: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in top.items():
        below = merged.get(key)
        if isinstance(below, dict) and isinstance(value, dict):
            merged[key] = _overlay(below, value)
        else:
            merged[key] = value
    return merged


@contextmanager
def with_context(config_override: ConfigData | None = None) -> Iterator[None]:
    """Apply the explicitly set fields of ``config_override`` for the block.

    Example:
        override = ConfigData()
        override.security.password_min_length = 8
        with with_context(override):
            assert get_config().security.password_min_length == 8
    """
    if config_override is None:
        yield
        return

    if not isinstance(config_override, ConfigData):
        raise ValueError(
            f"config_override must be ConfigData or None, got {type(config_override)}"
        )

    current = get_context()
    merged = ConfigData.model_validate(
        _overlay(current.config.model_dump(), _explicit_values(config_override))
    )
    token = set_context(replace(current, config=merged))
    try:
        yield
    finally:
        _app_context.reset(token)
