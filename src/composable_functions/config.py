"""Configuration: a frozen Config plus an async-safe ambient scope.

Resolve once, freeze, then flow: ``get_config()`` returns the Config active
in the current context (set with ``config_scope``), falling back to one
resolved from the environment on first use. Every value passes through the
``Settings`` schema before it is frozen.
"""

from __future__ import annotations

from collections.abc import Mapping
from contextlib import contextmanager
import contextvars
from dataclasses import dataclass, field, replace
from functools import cache
import os
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from composable_functions.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Generator

LOG_TRACEBACKS_ENV = "COMPOSABLE_LOG_TRACEBACKS"

_HINTS = {
    "log_tracebacks": f"Use a boolean, e.g. {LOG_TRACEBACKS_ENV}=1 or log_tracebacks=True.",
    "default_context": "Contexts are key/value structures, e.g. {'user_id': 1}.",
}

# --- Schema ---


class Settings(BaseModel):
    """Validation schema for configuration values.

    Booleans accept the usual environment spellings (1/0, true/false,
    yes/no, on/off).
    """

    log_tracebacks: bool = Field(default=False)
    default_context: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")


def _validate(
    data: Mapping[str, Any], labels: Mapping[str, str] | None = None
) -> Settings:
    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        err = e.errors()[0]
        key = str(err["loc"][0]) if err["loc"] else ""
        label = (labels or {}).get(key, key or "configuration")
        msg = err.get("msg", "")
        if msg.startswith("Value error, "):
            msg = msg[13:]
        raise ConfigurationError(
            f"Invalid {label}: {msg}", hint=_HINTS.get(key)
        ) from e


# --- Immutable runtime payload ---


@dataclass(frozen=True)
class Config:
    """Immutable configuration for composable-functions.

    Example:
        with config_scope(log_tracebacks=True):
            result = await my_step(1)
    """

    #: Attach ``exc_info`` to the DEBUG record logged for each captured exception.
    log_tracebacks: bool = False
    #: Context used by validated steps when the caller passes none.
    default_context: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        """Validate through ``Settings`` and freeze the context."""
        settings = _validate(
            {
                "log_tracebacks": self.log_tracebacks,
                "default_context": self.default_context,
            }
        )
        object.__setattr__(self, "log_tracebacks", settings.log_tracebacks)
        object.__setattr__(
            self, "default_context", MappingProxyType(settings.default_context)
        )

    @classmethod
    def from_env(cls) -> Config:
        """Resolve a Config from environment variables (and a ``.env`` file).

        Unset or blank variables keep their defaults.
        """
        from dotenv import load_dotenv

        load_dotenv()
        raw: dict[str, Any] = {}
        value = os.environ.get(LOG_TRACEBACKS_ENV, "").strip().lower()
        if value:
            raw["log_tracebacks"] = value
        settings = _validate(raw, {"log_tracebacks": LOG_TRACEBACKS_ENV})
        return cls(log_tracebacks=settings.log_tracebacks)


_AMBIENT: contextvars.ContextVar[Config | None] = contextvars.ContextVar(
    "composable_functions_config", default=None
)


@cache
def _default_config() -> Config:
    return Config.from_env()


def get_config() -> Config:
    """Return the Config active in the current context."""
    return _AMBIENT.get() or _default_config()


@contextmanager
def config_scope(
    cfg_or_overrides: Config | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> Generator[Config]:
    """Run a block with a specific Config without touching global state.

    Accepts a full Config, or overrides applied on top of the current one.
    Safe across threads and asyncio tasks (backed by a ContextVar).
    """
    if isinstance(cfg_or_overrides, Config):
        cfg = replace(cfg_or_overrides, **overrides) if overrides else cfg_or_overrides
    else:
        combined = {**(cfg_or_overrides or {}), **overrides}
        try:
            cfg = replace(get_config(), **combined)
        except TypeError as e:
            raise ConfigurationError(
                f"Unknown configuration field in {sorted(combined)}",
                hint="Valid fields: log_tracebacks, default_context.",
            ) from e

    token = _AMBIENT.set(cfg)
    try:
        yield cfg
    finally:
        _AMBIENT.reset(token)


__all__ = ["Config", "config_scope", "get_config"]
