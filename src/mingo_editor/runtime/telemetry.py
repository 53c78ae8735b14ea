"""Telemetry for the editing core, built on telelog.

Public surface:

``configure(...)`` -- adopt an explicit telelog config or a named preset
``get_logger(name)`` -- cached logger bound to the active config
``record_event(name, ...)`` -- structured event at a chosen level
``span(name, ...)`` -- profile a block and optionally track it as a component
``add_listener(fn)`` -- observe recorded events in-process (status bars, tests)
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, MutableMapping, Optional, Tuple, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "MINGO_EDITOR_"
DEFAULT_LOGGER_NAME = os.getenv(f"{ENV_PREFIX}LOGGER", "mingo_editor")
DEFAULT_LOG_FILE = os.getenv(f"{ENV_PREFIX}LOG_FILE", "")

_LOGGER_CACHE: MutableMapping[str, Any] = {}
_ACTIVE_CONFIG: Optional[Any] = None

EventListener = Callable[[str, Dict[str, Any]], None]
_LISTENERS: List[EventListener] = []


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def _env_flag(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return repr(value) if isinstance(value, (dict, list, tuple, set)) else str(value)


def _format_pairs(data: Dict[str, Any]) -> list[tuple[str, str]]:
    return [(str(key), _stringify(value)) for key, value in data.items()]


def _log_path(fallback: str) -> str:
    return _env("LOG_FILE", DEFAULT_LOG_FILE) or fallback


def _development(config: Any) -> None:
    config.with_min_level("DEBUG")
    config.with_console_output(True)
    config.with_colored_output(True)
    config.with_json_format(False)


def _production(config: Any) -> None:
    config.with_min_level("INFO")
    config.with_console_output(False)
    config.with_file_output(_log_path("mingo_editor.log"))
    config.with_buffering(True)


def _quiet(config: Any) -> None:
    # Textual owns the terminal while the app runs.
    config.with_min_level("WARNING")
    config.with_console_output(False)
    log_file = _log_path("")
    if log_file:
        config.with_file_output(log_file)


_PRESETS = {
    "development": _development,
    "production": _production,
    "quiet": _quiet,
}


def _build_preset_config(preset: str) -> Any:
    builder = _PRESETS.get(preset.lower())
    if builder is None:
        raise ValueError(f"Unknown preset '{preset}'.")
    config = tl.Config()
    builder(config)
    config.with_profiling(True)
    return config


def _build_default_config() -> Any:
    config = tl.Config()
    config.with_min_level((_env("LOG_LEVEL") or "INFO").upper())

    if _env_flag("DISABLE_CONSOLE", False):
        config.with_console_output(False)
    else:
        config.with_console_output(True)
        config.with_colored_output(not _env_flag("NO_COLOR", False))

    if _env_flag("LOG_JSON", False):
        config.with_json_format(True)

    log_file = _log_path("")
    if log_file:
        config.with_file_output(log_file)

    if _env_flag("LOG_BUFFERED", False):
        config.with_buffering(True)
        config.with_buffer_size(int(_env("LOG_BUFFER_SIZE") or "2048"))

    config.with_profiling(True)
    return config


def configure(*, config: Optional[Any] = None, preset: Optional[str] = None) -> None:
    """Replace the active telelog configuration.

    ``config`` is an explicit ``telelog.Config``; ``preset`` names one of
    ``development``, ``production`` or ``quiet``. The two are mutually
    exclusive. Cached loggers are dropped so the next ``get_logger`` call
    picks up the new settings.
    """

    global _ACTIVE_CONFIG
    if config and preset:
        raise ValueError("Provide either `config` or `preset`, not both.")

    if preset:
        config = _build_preset_config(preset)
    elif config is None:
        config = _build_default_config()
    else:
        config.with_profiling(True)

    _ACTIVE_CONFIG = config
    _LOGGER_CACHE.clear()


def _ensure_config() -> Any:
    global _ACTIVE_CONFIG
    if _ACTIVE_CONFIG is None:
        _ACTIVE_CONFIG = _build_default_config()
    return _ACTIVE_CONFIG


def get_logger(name: Optional[str] = None) -> Any:
    """Return a cached ``telelog.Logger`` for ``name``."""

    logger_name = name or DEFAULT_LOGGER_NAME
    if logger_name not in _LOGGER_CACHE:
        _LOGGER_CACHE[logger_name] = tl.Logger.with_config(
            logger_name, _ensure_config()
        )
    return _LOGGER_CACHE[logger_name]


def _level_method(logger: Any, level: Any) -> Tuple[Any, bool]:
    name = str(level).lower()
    with_data = getattr(logger, f"{name}_with", None)
    if with_data is not None:
        return with_data, True
    plain = getattr(logger, name, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    return plain, False


def _emit(logger: Any, level: str, message: str, payload: Dict[str, Any]) -> None:
    method, accepts_data = _level_method(logger, level)
    if accepts_data:
        method(message, _format_pairs(payload))
    else:
        method(f"{message} {payload}")


def record_event(
    name: str,
    *,
    level: str | Any = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Emit ``event::<name>`` with ``data`` attached as key/value pairs."""

    payload = {"event": name, **(data or {})}
    _emit(get_logger(logger_name), level, f"event::{name}", payload)
    for listener in list(_LISTENERS):
        listener(name, dict(payload))


def add_listener(listener: EventListener) -> Callable[[], None]:
    """Call ``listener(name, payload)`` for every recorded event.

    Returns a function that detaches the listener again.
    """

    _LISTENERS.append(listener)

    def _remove() -> None:
        if listener in _LISTENERS:
            _LISTENERS.remove(listener)

    return _remove


@contextmanager
def capture_events(prefix: str = "") -> Iterator[List[Tuple[str, Dict[str, Any]]]]:
    """Collect events whose name starts with ``prefix`` while the block runs."""

    captured: List[Tuple[str, Dict[str, Any]]] = []

    def _collect(name: str, payload: Dict[str, Any]) -> None:
        if name.startswith(prefix):
            captured.append((name, payload))

    remove = add_listener(_collect)
    try:
        yield captured
    finally:
        remove()


@dataclass
class SpanHandle:
    """Yielded by ``span`` so callers can attach results to the span."""

    logger: Any
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _stringify(value)

    def _payload(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload = {"span": self.span_name, **self.metadata}
        if self.component_name:
            payload["component"] = self.component_name
        if extra:
            payload.update({key: _stringify(val) for key, val in extra.items()})
        return payload

    def fail(self, reason: str) -> None:
        _emit(self.logger, "error", "span::fail", self._payload({"reason": reason}))

    def cancel(self, reason: str | None = None) -> None:
        extra = {"reason": reason} if reason else None
        _emit(self.logger, "warning", "span::cancel", self._payload(extra))


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile a block with ``logger.profile`` and optional component tracking.

    ``component=True`` tracks the block under ``name``; a string tracks it
    under that identifier. ``metadata`` is pushed as logger context for the
    duration of the block and copied onto the yielded handle.
    """

    log = get_logger(logger_name)
    if component is True:
        component_name: Optional[str] = name
    elif isinstance(component, str):
        component_name = component
    else:
        component_name = None

    serialized = {key: _stringify(value) for key, value in (metadata or {}).items()}
    for key, value in serialized.items():
        log.add_context(key, value)

    with ExitStack() as stack:
        if component_name:
            stack.enter_context(log.track_component(component_name))
        stack.enter_context(log.profile(name))
        handle = SpanHandle(
            logger=log,
            span_name=name,
            component_name=component_name,
            metadata=dict(serialized),
        )
        try:
            yield handle
        except Exception as exc:
            handle.fail(str(exc))
            raise
        finally:
            for key in serialized:
                log.remove_context(key)


configure()
logger = get_logger()

__all__ = [
    "EventListener",
    "SpanHandle",
    "add_listener",
    "capture_events",
    "configure",
    "get_logger",
    "record_event",
    "span",
    "logger",
]
