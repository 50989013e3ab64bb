"""Composition root: wires one supply cache into one host dice config."""
from __future__ import annotations
import logging
from typing import Callable, Optional

from . import debug
from .cache import SupplyCache
from .dice import DiceConfig
from .exceptions import TrueRandomError
from .pipeline import DrawInterceptionPipeline
from .seeds import ChatMessage, SeedAnnouncer
from .settings import (APIKEY, DEBUG, ENABLED, MAXCACHEDNUMBERS, QUICKTOGGLE, SHOWSEEDS,
                       UPDATEPOINT, Settings, register_defaults, update_point_fraction)
from .sources import RandomOrgSource, RandomSource
from .storage import API_KEY, LocalStorage
from .toggle import ToggleController

logger = logging.getLogger(__name__)


class TrueRandomModule:
    """Owns the cache, its pipeline and the settings reactions.

    ``init()`` replaces ``dice_config.random_uniform`` with the pipeline's
    draw; the function it replaces becomes the fallback generator.
    """

    def __init__(self, dice_config: DiceConfig, settings: Settings | None = None,
                 storage: LocalStorage | None = None,
                 alert: Callable[[str], None] | None = None,
                 chat: Callable[[ChatMessage], None] | None = None,
                 gm_ids: Callable[[], list[str]] = list,
                 source_factory: Callable[[str], RandomSource] = RandomOrgSource,
                 **cache_options):
        self.dice_config = dice_config
        self.settings = settings if settings is not None else Settings()
        self.storage = storage if storage is not None else LocalStorage()
        self._source_factory = source_factory
        self._original = dice_config.random_uniform
        self.cache = SupplyCache(fallback=self._original, alert=alert, **cache_options)
        self.pipeline = DrawInterceptionPipeline(self.cache)
        self.toggle: Optional[ToggleController] = None
        self.installed = False
        if chat is not None:
            self.cache.add_refill_listener(SeedAnnouncer(
                chat, lambda: self.settings.get(SHOWSEEDS), gm_ids, self._source_name))

    def _source_name(self) -> str:
        source = self.cache.source
        return source.name if source is not None else "random.org"

    def init(self) -> "TrueRandomModule":
        logger.debug("TrueRandom initializing...")
        register_defaults(self.settings, on_change={
            APIKEY: self.update_api_key,
            MAXCACHEDNUMBERS: self._on_capacity,
            UPDATEPOINT: self._on_update_point,
            DEBUG: self._on_debug,
            ENABLED: self._on_enabled,
            QUICKTOGGLE: self._on_quick_toggle,
        })
        self.install()
        debug.set_enabled(self.settings.get(DEBUG))
        self.cache.set_enabled(self.settings.get(ENABLED))
        self.cache.configure(int(self.settings.get(MAXCACHEDNUMBERS)),
                             update_point_fraction(self.settings.get(UPDATEPOINT)))
        self.load_api_key()
        return self

    def install(self) -> None:
        if self.installed:
            return
        if isinstance(getattr(self._original, "__self__", None), DrawInterceptionPipeline):
            raise TrueRandomError("A TrueRandom module is already installed on this dice config")
        self.dice_config.random_uniform = self.pipeline.draw
        self.installed = True

    def uninstall(self) -> None:
        if self.installed and self.dice_config.random_uniform == self.pipeline.draw:
            self.dice_config.random_uniform = self._original
        self.installed = False
        self.cache.cancel_refill()
        self.cache.close()

    def load_api_key(self) -> None:
        """Reconcile the configured credential with the local copy."""
        key = self.settings.get(APIKEY)
        if key:
            self.storage.set(API_KEY, key)
            self.cache.bind(self._source_factory(key))
            return
        saved = self.storage.get(API_KEY)
        if saved:
            logger.debug("Restoring API key from local storage")
            # fires update_api_key through the setting's on_change
            self.settings.set(APIKEY, saved)

    def update_api_key(self, key: str) -> None:
        logger.debug("New API KEY: %s", "<set>" if key else "<empty>")
        if key:
            self.storage.set(API_KEY, key)
            self.cache.bind(self._source_factory(key))
        else:
            self.storage.remove(API_KEY)
            self.cache.bind(None)

    def render_toggle(self, is_gm: bool = True) -> Optional[ToggleController]:
        """Create the quick toggle once, for GMs only."""
        if not is_gm or self.toggle is not None:
            return self.toggle
        self.toggle = ToggleController(
            read_enabled=lambda: self.settings.get(ENABLED),
            write_enabled=lambda value: self.settings.set(ENABLED, value),
            visible=self.settings.get(QUICKTOGGLE),
        )
        return self.toggle

    def _on_capacity(self, value) -> None:
        logger.debug("New Max Cached Numbers: %s", value)
        self.cache.configure(int(value), self.cache.policy.refill_threshold)

    def _on_update_point(self, value) -> None:
        logger.debug("New Update Point: %s", value)
        self.cache.configure(self.cache.policy.capacity, update_point_fraction(value))

    def _on_debug(self, value) -> None:
        debug.set_enabled(value)
        logger.debug("Debug mode: %s", value)

    def _on_enabled(self, value) -> None:
        logger.debug("Enabled/Disabled: %s", value)
        self.cache.set_enabled(value)
        if self.toggle is not None:
            self.toggle.sync(value)

    def _on_quick_toggle(self, value) -> None:
        if self.toggle is not None:
            self.toggle.set_visible(value)
