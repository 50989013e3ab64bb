"""Quick ON/OFF toggle shown above the chat box."""
from __future__ import annotations
import logging
from typing import Callable

logger = logging.getLogger(__name__)

ON, OFF = "ON", "OFF"
VISIBLE_CLASS, HIDDEN_CLASS = "trvisible", "trhidden"


class ToggleController:
    """Two states mapped onto the ``ENABLED`` flag.

    ``read_enabled``/``write_enabled`` go through the configuration store, so
    a click flows back to the cache via the setting's change notification.
    Visibility is separate and only changes the CSS class.
    """

    title = "Toggle TrueRandom"

    def __init__(self, read_enabled: Callable[[], bool], write_enabled: Callable[[bool], None],
                 visible: bool = True):
        self._read_enabled = read_enabled
        self._write_enabled = write_enabled
        self.visible = visible
        self.label = ON if read_enabled() else OFF

    @property
    def state(self) -> str:
        return self.label

    @property
    def css_class(self) -> str:
        return VISIBLE_CLASS if self.visible else HIDDEN_CLASS

    def click(self) -> str:
        enabled = not self._read_enabled()
        self._write_enabled(enabled)
        self.label = ON if enabled else OFF
        logger.debug("Quick toggle clicked: %s", self.label)
        return self.label

    def sync(self, enabled: bool) -> None:
        """Refresh the label after a configuration change."""
        self.label = ON if enabled else OFF

    def set_visible(self, visible: bool) -> None:
        self.visible = bool(visible)
