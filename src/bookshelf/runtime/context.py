from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace

from pydantic import BaseModel

from src.bookshelf.runtime.config.config_data import ConfigData
from src.bookshelf.runtime.config.config_template import load_config


@dataclass
class AppContext:
    """Application context containing configuration."""

    config: ConfigData


_default_context = AppContext(config=load_config())

# Derived values are recomputed after a merge; dumping them could raise
_COMPUTED_FIELDS = {"database": {"password", "connection_string"}}

_app_context: ContextVar[AppContext] = ContextVar(
    "app_context", default=_default_context
)


def get_context() -> AppContext:
    """Get the current application context."""
    return _app_context.get()


def set_context(context: AppContext) -> Token[AppContext]:
    """Set the current application context.

    Args:
        context: AppContext instance to set as current.
    """
    return _app_context.set(context)


def _dump_explicit(model: BaseModel) -> dict:
    """Dump only the fields that were explicitly set, at every nesting level.

    A nested model assigned as a whole is dumped whole; otherwise only its
    own explicitly set fields are kept.
    """
    result = {}
    for field_name in model.__class__.model_fields:
        value = getattr(model, field_name)
        if field_name in model.model_fields_set:
            result[field_name] = (
                value.model_dump(exclude=_COMPUTED_FIELDS.get(field_name))
                if isinstance(value, BaseModel)
                else value
            )
        elif isinstance(value, BaseModel):
            nested = _dump_explicit(value)
            if nested:
                result[field_name] = nested
    return result


def _merge_dicts(base: dict, override: dict) -> dict:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def _merge_configs(base_config: ConfigData, override_config: ConfigData) -> ConfigData:
    """Overlay the explicitly set values of ``override_config`` on ``base_config``."""
    merged = _merge_dicts(
        base_config.model_dump(exclude={"database": _COMPUTED_FIELDS["database"]}),
        _dump_explicit(override_config),
    )
    return ConfigData.model_validate(merged)


@contextmanager
def with_context(config_override: ConfigData | None = None):
    """Temporarily override the application configuration.

    Only fields explicitly set on ``config_override`` replace the current
    values; everything else is inherited.

    Example:
        override = ConfigData()
        override.app.environment = "test"
        with with_context(override):
            assert get_config().app.environment == "test"
    """
    if config_override is None:
        yield
        return

    if not isinstance(config_override, ConfigData):
        raise ValueError(
            f"config_override must be ConfigData, or None, got {type(config_override)}"
        )

    merged_config = _merge_configs(get_context().config, config_override)
    token = set_context(replace(get_context(), config=merged_config))
    try:
        yield
    finally:
        _app_context.reset(token)


def set_config(config: ConfigData) -> None:
    """Replace the entire current configuration."""
    set_context(replace(get_context(), config=config))


def get_config() -> ConfigData:
    """Convenience function to get the current configuration."""
    return get_context().config
