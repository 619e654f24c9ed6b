from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class GameMode(str, Enum):
    VS_BOT = "vs_bot"
    LOCAL_MULTIPLAYER = "local_multiplayer"
    TOURNAMENT = "tournament"


class Suit(str, Enum):
    # Declaration order is the sort order for hands and the tie-break order
    # for bot suit choice.
    HEARTS = "♥"
    DIAMONDS = "♦"
    CLUBS = "♣"
    SPADES = "♠"


class Rank(str, Enum):
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    ACE = "A"

    @property
    def value_order(self) -> int:
        return _RANK_VALUES[self]


_RANK_VALUES: dict[Rank, int] = {rank: i + 2 for i, rank in enumerate(Rank)}


class PendingChoice(str, Enum):
    """What the current player still owes before the turn can advance."""

    NONE = "none"
    SUIT = "suit"  # a Queen was played
    SWAP = "swap"  # a King was played with 3+ players


@dataclass(frozen=True)
class Card:
    id: str
    suit: Suit
    rank: Rank

    @staticmethod
    def of(suit: Suit, rank: Rank) -> "Card":
        return Card(id=f"{suit.value}-{rank.value}", suit=suit, rank=rank)

    @property
    def label(self) -> str:
        return f"{self.rank.value}{self.suit.value}"


@dataclass
class Player:
    id: str
    name: str
    avatar: str
    is_bot: bool
    hand: list[Card] = field(default_factory=list)

    def copy(self) -> "Player":
        return Player(
            id=self.id,
            name=self.name,
            avatar=self.avatar,
            is_bot=self.is_bot,
            hand=list(self.hand),
        )

