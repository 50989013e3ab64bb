"""TrueRandom: externally sourced random decimals for a host dice engine.

Usage:
    config = DiceConfig()
    module = TrueRandomModule(config).init()
    module.settings.set("APIKEY", "...")
    roll("3d6", config)
"""

from .cache import FillPolicy, SupplyCache
from .dice import DiceConfig, Roll, roll
from .exceptions import (FetchFailedError, MalformedResponseError, RandomOrgAPIError,
                         SettingError, SourceUnavailableError, TrueRandomError)
from .exchange import ExchangeCell, HookResult
from .module import TrueRandomModule
from .pipeline import DrawInterceptionPipeline
from .settings import Settings
from .sources import AnuQrngSource, RandomOrgSource, RandomSource
from .storage import LocalStorage
from .toggle import ToggleController

__all__ = [
    "SupplyCache",
    "FillPolicy",
    "DrawInterceptionPipeline",
    "ExchangeCell",
    "HookResult",
    "ToggleController",
    "TrueRandomModule",
    "Settings",
    "LocalStorage",
    "RandomSource",
    "RandomOrgSource",
    "AnuQrngSource",
    "DiceConfig",
    "Roll",
    "roll",
    "TrueRandomError",
    "SourceUnavailableError",
    "FetchFailedError",
    "MalformedResponseError",
    "RandomOrgAPIError",
    "SettingError",
]
