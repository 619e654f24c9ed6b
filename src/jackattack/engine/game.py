from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Sequence

from .deck import attack_value, create_deck, is_attack_card, is_black_jack, shuffle_deck, sort_hand
from .types import Card, Difficulty, GameMode, PendingChoice, Player, Rank, Suit

BOT_AVATARS = ("🐯", "🐼", "🦊", "🐨", "🦁", "🐸", "🦄", "🐙")
HUMAN_AVATAR = "😎"


class DeckExhaustedError(RuntimeError):
    pass


@dataclass(frozen=True)
class GameConfig:
    hand_size: int = 7
    min_players: int = 2
    max_players: int = 4
    easy_mistake_rate: float = 0.3
    hard_attack_threshold: int = 3  # opponent hand size that triggers aggression
    hard_default_opponent_hand: int = 7


@dataclass
class GameState:
    deck: list[Card]
    discard_pile: list[Card]
    players: list[Player]
    difficulty: Difficulty
    game_mode: GameMode
    current_player_index: int = 0
    direction: int = 1  # 1 = clockwise, -1 = counter-clockwise
    winner_id: str | None = None
    pending_pickup: int = 0
    last_action: str = ""

    pending: PendingChoice = PendingChoice.NONE
    chosen_suit: Suit | None = None
    peeking_card: Card | None = None
    peeking_player_id: str | None = None

    # Local multiplayer hand-off screen
    show_pass_screen: bool = False
    next_player_name: str = ""

    previous_state: GameState | None = None
    can_undo: bool = False

    config: GameConfig = field(default_factory=GameConfig)
    rng: random.Random = field(default_factory=random.Random, compare=False, repr=False)

    @property
    def pending_suit_choice(self) -> bool:
        return self.pending is PendingChoice.SUIT

    @property
    def pending_swap(self) -> bool:
        return self.pending is PendingChoice.SWAP

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    @property
    def top_card(self) -> Card:
        return self.discard_pile[-1]

    def player_by_id(self, player_id: str) -> Player | None:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def card_count(self) -> int:
        return len(self.deck) + len(self.discard_pile) + sum(len(p.hand) for p in self.players)

    def copy(self) -> "GameState":
        """Copy every mutable container. The undo snapshot is shared, never mutated."""
        return GameState(
            deck=list(self.deck),
            discard_pile=list(self.discard_pile),
            players=[p.copy() for p in self.players],
            difficulty=self.difficulty,
            game_mode=self.game_mode,
            current_player_index=self.current_player_index,
            direction=self.direction,
            winner_id=self.winner_id,
            pending_pickup=self.pending_pickup,
            last_action=self.last_action,
            pending=self.pending,
            chosen_suit=self.chosen_suit,
            peeking_card=self.peeking_card,
            peeking_player_id=self.peeking_player_id,
            show_pass_screen=self.show_pass_screen,
            next_player_name=self.next_player_name,
            previous_state=self.previous_state,
            can_undo=self.can_undo,
            config=self.config,
            rng=self.rng,
        )


def _advance_turn(state: GameState, steps: int = 1) -> None:
    n = len(state.players)
    nxt = state.current_player_index + state.direction * steps
    state.current_player_index = ((nxt % n) + n) % n


def create_new_game(
    num_players: int = 4,
    difficulty: Difficulty | str = Difficulty.MEDIUM,
    game_mode: GameMode | str = GameMode.VS_BOT,
    player_names: Sequence[str] | None = None,
    *,
    config: GameConfig | None = None,
    seed: int | None = None,
) -> GameState:
    cfg = config or GameConfig()
    num_players = max(cfg.min_players, min(cfg.max_players, num_players))
    difficulty = Difficulty(difficulty)
    game_mode = GameMode(game_mode)
    rng = random.Random(seed)

    deck = shuffle_deck(create_deck(), rng)
    avatars = list(BOT_AVATARS)
    rng.shuffle(avatars)

    players: list[Player] = []
    for i in range(num_players):
        # Only vs-bot seats bots; local multiplayer and tournament seats are all human.
        is_bot = game_mode == GameMode.VS_BOT and i > 0
        hand = deck[: cfg.hand_size]
        del deck[: cfg.hand_size]
        if i == 0 or game_mode == GameMode.LOCAL_MULTIPLAYER:
            hand = sort_hand(hand)

        if is_bot:
            default_name = f"Bot {i}"
        else:
            default_name = "You" if i == 0 else f"Player {i + 1}"
        name = player_names[i] if player_names and i < len(player_names) and player_names[i] else default_name

        players.append(
            Player(
                id=f"bot-{i}" if is_bot else f"player-{i}",
                name=name,
                avatar=HUMAN_AVATAR if (i == 0 and not is_bot) else avatars[i % len(avatars)],
                is_bot=is_bot,
                hand=hand,
            )
        )

    if not deck:
        raise DeckExhaustedError("No card left to start the discard pile.")
    start_card = deck.pop()

    return GameState(
        deck=deck,
        discard_pile=[start_card],
        players=players,
        difficulty=difficulty,
        game_mode=game_mode,
        last_action="Game started! Have fun!",
        show_pass_screen=game_mode == GameMode.LOCAL_MULTIPLAYER,
        next_player_name=players[0].name,
        config=cfg,
        rng=rng,
    )


def is_valid_move(card: Card, top_discard: Card, pending_pickup: int) -> bool:
    if pending_pickup > 0:
        # Under attack only a rank match defends (and stacks).
        return card.rank == top_discard.rank
    return card.suit == top_discard.suit or card.rank == top_discard.rank


def legal_moves(state: GameState) -> list[Card]:
    top = state.top_card
    return [c for c in state.current_player.hand if is_valid_move(c, top, state.pending_pickup)]


def _find_card(hand: Sequence[Card], card_id: str) -> int | None:
    for i, c in enumerate(hand):
        if c.id == card_id:
            return i
    return None


def play_card(state: GameState, card_id: str) -> GameState:
    """Play `card_id` from the current player's hand.

    Returns the input unchanged when the game is over or the card is not in
    the acting player's hand. Legality against the discard pile is the
    caller's concern (see `is_valid_move`).
    """
    if state.winner_id is not None:
        return state
    idx = _find_card(state.current_player.hand, card_id)
    if idx is None:
        return state

    new = state.copy()
    player = new.current_player
    card = player.hand.pop(idx)
    new.discard_pile.append(card)

    if not player.hand:
        new.winner_id = player.id
        new.last_action = f"{player.name} wins!"
        return new

    action = f"{player.name} played {card.label}"
    steps = 1
    two_players = len(new.players) == 2

    if is_attack_card(card):
        new.pending_pickup += attack_value(card)
        action = "+5 Cards MEGA Attack!" if is_black_jack(card) else "+2 Cards Attack!"
    elif card.rank == Rank.EIGHT:
        action = "SKIP!"
        steps = 0 if two_players else 2
    elif card.rank == Rank.ACE:
        action = "Reverse!"
        if two_players:
            steps = 0
        else:
            new.direction *= -1
    elif card.rank == Rank.QUEEN:
        new.pending = PendingChoice.SUIT
        action = "WILD! Choose a suit!"
        steps = 0
    elif card.rank == Rank.KING:
        if two_players:
            other = next(p for p in new.players if p.id != player.id)
            player.hand, other.hand = list(other.hand), list(player.hand)
            action = "SWAP! Hands exchanged!"
        else:
            new.pending = PendingChoice.SWAP
            action = "SWAP! Choose a player!"
            steps = 0
    elif card.rank == Rank.SEVEN:
        opponents = [p for p in new.players if p.id != player.id and p.hand]
        if opponents:
            target = opponents[new.rng.randrange(len(opponents))]
            new.peeking_card = target.hand[new.rng.randrange(len(target.hand))]
            new.peeking_player_id = target.id
            action = f"PEEK! Saw {target.name}'s card!"

    new.last_action = action
    if steps > 0:
        _advance_turn(new, steps)
    return new


def _recycle_discard(state: GameState) -> bool:
    if len(state.discard_pile) <= 1:
        return False
    top = state.discard_pile.pop()
    state.deck = shuffle_deck(state.discard_pile, state.rng)
    state.discard_pile = [top]
    return True


def draw_card(state: GameState) -> GameState:
    """Draw one card, or pay off the whole pending pickup, then pass the turn."""
    if state.winner_id is not None:
        return state

    new = state.copy()
    player = new.current_player
    to_draw = new.pending_pickup if new.pending_pickup > 0 else 1
    drawn = 0
    for _ in range(to_draw):
        if not new.deck and not _recycle_discard(new):
            break
        player.hand.append(new.deck.pop())
        drawn += 1

    if not player.is_bot:
        player.hand = sort_hand(player.hand)

    if new.pending_pickup > 0:
        new.last_action = f"{player.name} had to pick up {drawn}!"
    else:
        new.last_action = f"{player.name} drew a card"

    new.pending_pickup = 0
    _advance_turn(new, 1)
    return new


def choose_suit(state: GameState, suit: Suit | str) -> GameState:
    if state.winner_id is not None or not state.pending_suit_choice:
        return state
    new = state.copy()
    new.chosen_suit = Suit(suit)
    new.pending = PendingChoice.NONE
    new.last_action = f"Changed suit to {new.chosen_suit.value}!"
    _advance_turn(new, 1)
    return new


def swap_with(state: GameState, target_player_id: str) -> GameState:
    if state.winner_id is not None or not state.pending_swap:
        return state
    new = state.copy()
    target = new.player_by_id(target_player_id)
    if target is None:
        return state
    current = new.current_player
    current.hand, target.hand = list(target.hand), list(current.hand)
    new.pending = PendingChoice.NONE
    new.last_action = f"{current.name} swapped with {target.name}!"
    _advance_turn(new, 1)
    return new


def clear_peek(state: GameState) -> GameState:
    if state.winner_id is not None:
        return state
    new = state.copy()
    new.peeking_card = None
    new.peeking_player_id = None
    return new


def confirm_pass_screen(state: GameState) -> GameState:
    if state.winner_id is not None:
        return state
    new = state.copy()
    new.show_pass_screen = False
    return new


def trigger_pass_screen(state: GameState) -> GameState:
    if state.winner_id is not None:
        return state
    new = state.copy()
    new.show_pass_screen = True
    new.next_player_name = new.current_player.name
    return new
