"""Headless rules engine for Jack Attack.

Every transition takes a GameState and returns a new one; the input is
never modified. IMPORTANT: This package must never import from services
or perform I/O.
"""

from .actions import BotDecision
from .ai import bot_choose_suit, bot_choose_swap, get_bot_decision, perform_bot_turn, resolve_bot_pending
from .deck import create_deck, is_attack_card, is_black_jack, is_power_card, shuffle_deck, sort_hand
from .game import (
    DeckExhaustedError,
    GameConfig,
    GameState,
    choose_suit,
    clear_peek,
    confirm_pass_screen,
    create_new_game,
    draw_card,
    is_valid_move,
    legal_moves,
    play_card,
    swap_with,
    trigger_pass_screen,
)
from .types import Card, Difficulty, GameMode, PendingChoice, Player, Rank, Suit
from .undo import save_state_for_undo, undo_last_move

__all__ = [
    "BotDecision",
    "Card",
    "DeckExhaustedError",
    "Difficulty",
    "GameConfig",
    "GameMode",
    "GameState",
    "PendingChoice",
    "Player",
    "Rank",
    "Suit",
    "bot_choose_suit",
    "bot_choose_swap",
    "choose_suit",
    "clear_peek",
    "confirm_pass_screen",
    "create_deck",
    "create_new_game",
    "draw_card",
    "get_bot_decision",
    "is_attack_card",
    "is_black_jack",
    "is_power_card",
    "is_valid_move",
    "legal_moves",
    "perform_bot_turn",
    "play_card",
    "resolve_bot_pending",
    "save_state_for_undo",
    "shuffle_deck",
    "sort_hand",
    "swap_with",
    "trigger_pass_screen",
    "undo_last_move",
]
