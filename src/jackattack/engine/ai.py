from __future__ import annotations

from collections import Counter

from .actions import BotDecision
from .deck import is_attack_card
from .game import GameState, choose_suit, draw_card, legal_moves, play_card, swap_with
from .types import Card, Difficulty, Suit


def _suit_counts(hand: list[Card]) -> Counter[Suit]:
    return Counter(c.suit for c in hand)


def _human_hand_size(state: GameState) -> int:
    for p in state.players:
        if not p.is_bot:
            return len(p.hand)
    return state.config.hard_default_opponent_hand


def get_bot_decision(state: GameState) -> BotDecision:
    """Pick a move for the current player according to the game difficulty.

    easy:   random legal card, and when not under attack a chance to draw
            anyway (simulated mistake)
    medium: attack cards first, then shed the suit held most
    hard:   attack cards first only once the human is close to going out
            (otherwise hold them back), then empty the thinnest suit
    """
    bot = state.current_player
    valid = legal_moves(state)
    if not valid:
        return BotDecision.draw()

    if state.difficulty == Difficulty.EASY:
        if state.pending_pickup == 0 and state.rng.random() < state.config.easy_mistake_rate:
            return BotDecision.draw()
        return BotDecision.play(valid[state.rng.randrange(len(valid))].id)

    counts = _suit_counts(bot.hand)

    if state.difficulty == Difficulty.HARD:
        aggressive = _human_hand_size(state) <= state.config.hard_attack_threshold

        def hard_key(c: Card) -> tuple[int, int]:
            attack_first = 0 if is_attack_card(c) else 1
            if not aggressive:
                attack_first = 1 - attack_first
            return (attack_first, counts[c.suit])

        # sorted() is stable: ties keep hand order
        return BotDecision.play(sorted(valid, key=hard_key)[0].id)

    def medium_key(c: Card) -> tuple[int, int]:
        return (0 if is_attack_card(c) else 1, -counts[c.suit])

    return BotDecision.play(sorted(valid, key=medium_key)[0].id)


def bot_choose_suit(state: GameState) -> GameState:
    counts = _suit_counts(state.current_player.hand)
    best = Suit.HEARTS
    best_count = 0
    for suit in Suit:
        if counts[suit] > best_count:
            best, best_count = suit, counts[suit]
    return choose_suit(state, best)


def bot_choose_swap(state: GameState) -> GameState:
    bot = state.current_player
    others = [p for p in state.players if p.id != bot.id]
    target = min(others, key=lambda p: len(p.hand))  # first minimum wins ties
    return swap_with(state, target.id)


def resolve_bot_pending(state: GameState) -> GameState:
    if state.pending_suit_choice:
        return bot_choose_suit(state)
    if state.pending_swap:
        return bot_choose_swap(state)
    return state


def perform_bot_turn(state: GameState) -> GameState:
    """Decide, act, and settle any suit/swap choice the move opened."""
    if state.winner_id is not None:
        return state
    decision = get_bot_decision(state)
    if decision.action == "play" and decision.card_id is not None:
        state = play_card(state, decision.card_id)
    else:
        state = draw_card(state)
    return resolve_bot_pending(state)
