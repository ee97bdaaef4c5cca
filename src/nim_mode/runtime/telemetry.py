"""Structured logging for nim_mode, backed by telelog.

Callers use four names: ``configure``, ``get_logger``, ``record_event`` and
``span``. Editors own the terminal, so console output stays off unless
``NIM_MODE_LOG_CONSOLE`` asks for it.
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, Mapping, MutableMapping, Optional, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "NIM_MODE_"
DEFAULT_LOGGER_NAME = "nim_mode"

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True, slots=True)
class LogSettings:
    """Everything needed to build a telelog ``Config``."""

    level: str = "INFO"
    console: bool = False
    color: bool = True
    json: bool = False
    file: str = ""
    buffered: bool = False
    buffer_size: int = 2048
    profile: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LogSettings":
        env = os.environ if environ is None else environ

        def flag(name: str, default: bool) -> bool:
            raw = env.get(ENV_PREFIX + name)
            return default if raw is None else raw.strip().lower() in _TRUTHY

        return cls(
            level=env.get(ENV_PREFIX + "LOG_LEVEL", "INFO").upper(),
            console=flag("LOG_CONSOLE", False),
            color=not flag("NO_COLOR", False),
            json=flag("LOG_JSON", False),
            file=env.get(ENV_PREFIX + "LOG_FILE", ""),
            buffered=flag("LOG_BUFFERED", False),
            buffer_size=int(env.get(ENV_PREFIX + "LOG_BUFFER_SIZE", "2048")),
            profile=flag("PROFILE", True),
        )

    def for_preset(self, preset: str) -> "LogSettings":
        key = preset.lower()
        if key == "development":
            return replace(self, level="DEBUG", console=True, color=True, json=False)
        if key == "editor":
            # Hosted inside a UI: everything goes to a file.
            return replace(
                self,
                level="INFO",
                console=False,
                file=self.file or "nim_mode.log",
                buffered=True,
            )
        if key == "quiet":
            return replace(self, level="ERROR", console=False)
        raise ValueError(f"Unknown preset '{preset}'.")

    def build(self) -> Any:
        config = tl.Config()
        config.with_min_level(self.level)
        config.with_console_output(self.console)
        if self.console:
            config.with_colored_output(self.color)
        if self.json:
            config.with_json_format(True)
        if self.file:
            config.with_file_output(self.file)
        if self.buffered:
            config.with_buffering(True)
            config.with_buffer_size(self.buffer_size)
        config.with_profiling(self.profile)
        return config


_LOGGERS: MutableMapping[str, Any] = {}
_CONFIG: Optional[Any] = None


def configure(*, config: Optional[Any] = None, preset: Optional[str] = None) -> None:
    """Swap the active telelog configuration and drop cached loggers.

    ``config`` is a ready ``telelog.Config``; ``preset`` is one of
    ``development``, ``editor`` or ``quiet`` layered over the environment.
    """

    global _CONFIG
    if config is not None and preset:
        raise ValueError("Provide either `config` or `preset`, not both.")
    if config is None:
        settings = LogSettings.from_env()
        if preset:
            settings = settings.for_preset(preset)
        config = settings.build()
    _CONFIG = config
    _LOGGERS.clear()


def get_logger(name: Optional[str] = None) -> Any:
    """Cached ``telelog.Logger`` for ``name`` (default ``nim_mode``)."""

    global _CONFIG
    if _CONFIG is None:
        _CONFIG = LogSettings.from_env().build()
    logger_name = name or DEFAULT_LOGGER_NAME
    log = _LOGGERS.get(logger_name)
    if log is None:
        log = _LOGGERS[logger_name] = tl.Logger.with_config(logger_name, _CONFIG)
    return log


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return repr(value) if isinstance(value, (dict, list, tuple, set)) else str(value)


def _emit(log: Any, level: str, message: str, payload: Dict[str, Any]) -> None:
    name = level.lower()
    structured = getattr(log, f"{name}_with", None)
    if structured is not None:
        structured(message, [(str(key), _text(value)) for key, value in payload.items()])
        return
    plain = getattr(log, name, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    plain(f"{message} {payload}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Log ``event::<name>`` with ``data`` as structured fields."""

    _emit(get_logger(logger_name), level, f"event::{name}", {"event": name, **(data or {})})


@dataclass
class SpanHandle:
    """Yielded by ``span``; lets the block attach results to the span."""

    logger: Any
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _text(value)

    def fail(self, reason: str) -> None:
        payload: Dict[str, Any] = {"span": self.span_name, **self.metadata}
        if self.component_name:
            payload["component"] = self.component_name
        payload["reason"] = reason
        _emit(self.logger, "error", "span::fail", payload)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile a block, optionally tracked under ``component``.

    ``metadata`` is pushed as logger context while the block runs. Exceptions
    are logged as ``span::fail`` and re-raised.
    """

    log = get_logger(logger_name)
    context = {key: _text(value) for key, value in (metadata or {}).items()}
    for key, value in context.items():
        log.add_context(key, value)

    handle = SpanHandle(
        logger=log, span_name=name, component_name=component, metadata=dict(context)
    )
    try:
        with ExitStack() as stack:
            if component:
                stack.enter_context(log.track_component(component))
            stack.enter_context(log.profile(name))
            try:
                yield handle
            except Exception as exc:
                handle.fail(str(exc))
                raise
    finally:
        for key in context:
            log.remove_context(key)


__all__ = [
    "LogSettings",
    "SpanHandle",
    "configure",
    "get_logger",
    "record_event",
    "span",
]
