from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

BotAction = Literal["play", "draw"]


@dataclass(frozen=True)
class BotDecision:
    action: BotAction
    card_id: str | None = None

    @staticmethod
    def draw() -> "BotDecision":
        return BotDecision(action="draw")

    @staticmethod
    def play(card_id: str) -> "BotDecision":
        return BotDecision(action="play", card_id=card_id)
