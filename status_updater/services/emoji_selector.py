"""
Emoji selection strategies.

RandomEmojiSelector rerolls on every call, so two evaluations on the same day
may show different emojis. DailyEmojiSelector keeps one emoji per category for
a whole calendar day.
"""

import random
from abc import ABC, abstractmethod
from datetime import date, datetime

from status_updater.models.domain.rules_domain import RuleConfig, StatusKind

EMOJI_POLICIES = ("random", "daily")


class EmojiSelector(ABC):
    """Picks one emoji for a status kind."""

    def __init__(self, config: RuleConfig):
        self.config = config

    @abstractmethod
    def pick(self, kind: StatusKind, on: date | None = None) -> str:
        """Return one emoji from the candidates for `kind`."""


class RandomEmojiSelector(EmojiSelector):
    """Uniform random choice on every call."""

    def __init__(self, config: RuleConfig, rng: random.Random | None = None):
        super().__init__(config)
        self._rng = rng or random.Random()

    def pick(self, kind: StatusKind, on: date | None = None) -> str:
        return self._rng.choice(self.config.emojis_for(kind))


class DailyEmojiSelector(EmojiSelector):
    """
    Stable choice for a calendar day.

    The index is the sum of the code points of the ISO date string modulo the
    number of candidates, so every category rotates once per day.
    """

    def pick(self, kind: StatusKind, on: date | None = None) -> str:
        day = on or date.today()
        if isinstance(day, datetime):
            day = day.date()
        candidates = self.config.emojis_for(kind)
        seed = sum(ord(char) for char in day.isoformat())
        return candidates[seed % len(candidates)]


def create_emoji_selector(config: RuleConfig, policy: str = "random") -> EmojiSelector:
    """Build the selector for a configured policy name."""
    policy = policy.strip().lower()
    if policy == "random":
        return RandomEmojiSelector(config)
    if policy == "daily":
        return DailyEmojiSelector(config)
    raise ValueError(f"Unknown emoji policy '{policy}'. Available policies: {', '.join(EMOJI_POLICIES)}")
