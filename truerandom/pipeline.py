"""Pre/post draw interception over :class:`SupplyCache`."""
from __future__ import annotations
import logging
from typing import Any, Callable, Optional

from .cache import SupplyCache
from .exchange import ExchangeCell, HookResult

logger = logging.getLogger(__name__)

DrawFunction = Callable[[], float]
PreDrawHook = Callable[[SupplyCache, ExchangeCell[DrawFunction]], Any]
PostDrawHook = Callable[[SupplyCache, ExchangeCell[float]], Any]


class DrawInterceptionPipeline:
    """The ``() -> float`` entry point installed into the host.

    A pre-draw hook sees the draw function about to run. Returning a truthy
    value sends this one draw to the fallback generator; returning
    ``HookResult(True, fn)`` or setting the cell swaps in ``fn`` instead.
    A post-draw hook sees the drawn value and may replace it the same way.
    Hooks are never composed: registering one replaces the previous.
    """

    def __init__(self, cache: SupplyCache):
        self.cache = cache
        self.pre_draw_hook: Optional[PreDrawHook] = None
        self.post_draw_hook: Optional[PostDrawHook] = None

    def on_pre_draw(self, hook: Optional[PreDrawHook]) -> None:
        self.pre_draw_hook = hook

    def on_post_draw(self, hook: Optional[PostDrawHook]) -> None:
        self.post_draw_hook = hook

    def _run_pre_hook(self, cell: ExchangeCell[DrawFunction]) -> None:
        hook = self.pre_draw_hook
        if hook is None:
            return
        try:
            signal = hook(self.cache, cell)
        except Exception:
            logger.exception("Pre-draw hook failed, drawing unchanged")
            return
        if isinstance(signal, HookResult):
            if signal.use_override:
                cell.set(signal.value)
        elif signal:
            cell.set(self.cache.fallback)

    def _run_post_hook(self, cell: ExchangeCell[float]) -> None:
        hook = self.post_draw_hook
        if hook is None:
            return
        before = cell.get()
        try:
            signal = hook(self.cache, cell)
        except Exception:
            logger.exception("Post-draw hook failed, keeping drawn value")
            cell.set(before)
            return
        if isinstance(signal, HookResult) and signal.use_override:
            cell.set(signal.value)

    def draw(self) -> float:
        cache = self.cache
        if not cache.check_draw():
            value = cache.fallback()
            cache.last_value = value
            return value

        func_cell: ExchangeCell[DrawFunction] = ExchangeCell(cache.take)
        self._run_pre_hook(func_cell)
        try:
            value = func_cell.get()()
        except Exception:
            logger.exception("Draw function %r failed, using fallback", func_cell.get())
            value = cache.fallback()
        # a bypassed draw still tops up a low buffer
        if cache.policy.wants_refill(len(cache)):
            cache.refill()

        value_cell = ExchangeCell(value)
        self._run_post_hook(value_cell)
        cache.last_value = value_cell.get()
        return cache.last_value

    __call__ = draw
