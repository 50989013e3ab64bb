"""Chat announcement of freshly fetched values ("Show Seeds in Chat")."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable

SPEAKER = "TrueRandom System"


@dataclass
class ChatMessage:
    content: str
    speaker: str = SPEAKER
    whisper: list[str] = field(default_factory=list)


def format_seeds(values, source_name: str = "random.org") -> str:
    seed_list = ", ".join(str(v) for v in values)
    return (f"TrueRandom Seeds Fetched:\n{seed_list}\n"
            f"Retrieved {len(values)} true random seeds from {source_name}")


class SeedAnnouncer:
    """Refill listener posting each batch to chat, whispered to GMs."""

    def __init__(self, post: Callable[[ChatMessage], None], show_seeds: Callable[[], bool],
                 gm_ids: Callable[[], list[str]] = list, source_name: Callable[[], str] = lambda: "random.org"):
        self._post = post
        self._show_seeds = show_seeds
        self._gm_ids = gm_ids
        self._source_name = source_name

    def __call__(self, values) -> None:
        if not self._show_seeds():
            return
        self._post(ChatMessage(format_seeds(values, self._source_name()), whisper=list(self._gm_ids())))
