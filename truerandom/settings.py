"""Setting registry with change notification.

Mirrors how the host registers module settings: a key, a label and hint for
the settings UI, a scope, a type, a default, an optional slider range and an
``on_change`` callback fired after a value actually changes.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .exceptions import SettingError

logger = logging.getLogger(__name__)

APIKEY = "APIKEY"
MAXCACHEDNUMBERS = "MAXCACHEDNUMBERS"
UPDATEPOINT = "UPDATEPOINT"
DEBUG = "DEBUG"
ENABLED = "ENABLED"
QUICKTOGGLE = "QUICKTOGGLE"
SHOWSEEDS = "SHOWSEEDS"


@dataclass
class SettingSpec:
    key: str
    name: str
    hint: str = ""
    scope: str = "world"
    type: type = str
    default: Any = None
    range: Optional[tuple] = None  # (min, max, step)
    on_change: Optional[Callable[[Any], None]] = None

    def coerce(self, value: Any) -> Any:
        if self.type is bool and isinstance(value, str):
            value = value.strip().lower() in ("1", "true", "yes", "on")
        try:
            value = self.type(value)
        except (TypeError, ValueError) as e:
            raise SettingError(f"{self.key}: cannot convert {value!r} to {self.type.__name__}") from e
        if self.range is not None:
            lo, hi = self.range[0], self.range[1]
            if not lo <= value <= hi:
                raise SettingError(f"{self.key}: {value} outside [{lo}, {hi}]")
        return value


class Settings:
    """In-memory store; ``values`` seeds stored values before registration."""

    def __init__(self, namespace: str = "truerandom", values: dict[str, Any] | None = None):
        self.namespace = namespace
        self._specs: dict[str, SettingSpec] = {}
        self._values: dict[str, Any] = dict(values or {})

    def register(self, key: str, **data) -> SettingSpec:
        spec = SettingSpec(key=key, **data)
        self._specs[key] = spec
        self._values.setdefault(key, spec.default)
        return spec

    def spec(self, key: str) -> SettingSpec:
        try:
            return self._specs[key]
        except KeyError:
            raise SettingError(f"Unknown setting {self.namespace}.{key}") from None

    def get(self, key: str) -> Any:
        self.spec(key)
        return self._values[key]

    def set(self, key: str, value: Any) -> Any:
        spec = self.spec(key)
        value = spec.coerce(value)
        if self._values.get(key) == value:
            return value
        self._values[key] = value
        if spec.on_change is not None:
            spec.on_change(value)
        return value

    def __contains__(self, key):
        return key in self._specs

    def snapshot(self) -> dict[str, Any]:
        return dict(self._values)


def register_defaults(settings: Settings, on_change: dict[str, Callable[[Any], None]] | None = None) -> Settings:
    """Register the module's settings; ``on_change`` maps keys to callbacks."""
    hooks = on_change or {}
    settings.register(APIKEY, name="Random.org API Key",
                      hint="Put your developer key from https://api.random.org/dashboard here",
                      scope="world", type=str, default="", on_change=hooks.get(APIKEY))
    settings.register(MAXCACHEDNUMBERS, name="Max Cached Numbers",
                      hint="Number of random numbers to pull in per client.",
                      scope="world", type=int, default=10, range=(5, 200, 1),
                      on_change=hooks.get(MAXCACHEDNUMBERS))
    settings.register(UPDATEPOINT, name="Update Point",
                      hint="Percentage of cached numbers before requesting more.",
                      scope="world", type=int, default=50, range=(1, 100, 1),
                      on_change=hooks.get(UPDATEPOINT))
    settings.register(DEBUG, name="Print Debug Messages", hint="Print debug messages to console",
                      scope="client", type=bool, default=True, on_change=hooks.get(DEBUG))
    settings.register(ENABLED, name="Enabled", hint="Enable or disable TrueRandom",
                      scope="world", type=bool, default=True, on_change=hooks.get(ENABLED))
    settings.register(QUICKTOGGLE, name="Show Quick Toggle Button",
                      hint="Show button above chat box to toggle TrueRandom",
                      scope="client", type=bool, default=True, on_change=hooks.get(QUICKTOGGLE))
    settings.register(SHOWSEEDS, name="Show Seeds in Chat",
                      hint="Display fetched random seeds in chat when retrieved",
                      scope="world", type=bool, default=False, on_change=hooks.get(SHOWSEEDS))
    return settings


def update_point_fraction(percent) -> float:
    return float(percent) * 0.01
