from __future__ import annotations

import pytest

from jackattack.engine import (
    Difficulty,
    GameMode,
    GameState,
    choose_suit,
    create_new_game,
    draw_card,
    perform_bot_turn,
    play_card,
    swap_with,
)


def _playout(seed: int, players: int, difficulty: Difficulty, max_turns: int = 600) -> list[GameState]:
    state = create_new_game(players, difficulty, GameMode.VS_BOT, seed=seed)
    # Every seat is bot-driven here, seat 0 included.
    states = [state]
    while state.winner_id is None and len(states) < max_turns:
        state = perform_bot_turn(state)
        states.append(state)
    return states


@pytest.mark.parametrize("seed", range(12))
@pytest.mark.parametrize("players", [2, 3, 4])
def test_seeded_playouts_hold_invariants(seed: int, players: int) -> None:
    difficulty = list(Difficulty)[seed % 3]
    for state in _playout(seed, players, difficulty):
        assert state.card_count() == 52
        ids = [c.id for c in state.deck + state.discard_pile] + [
            c.id for p in state.players for c in p.hand
        ]
        assert len(set(ids)) == 52
        assert 0 <= state.current_player_index < len(state.players)
        assert state.direction in (1, -1)
        assert state.pending_pickup >= 0
        assert state.discard_pile
        assert not state.pending_suit_choice
        assert not state.pending_swap


@pytest.mark.parametrize("seed", range(6))
def test_finished_games_are_frozen(seed: int) -> None:
    final = _playout(seed, 3, Difficulty.MEDIUM, max_turns=2000)[-1]
    if final.winner_id is None:
        pytest.skip("game did not finish within the turn limit")

    winner = final.player_by_id(final.winner_id)
    assert winner is not None and not winner.hand

    assert play_card(final, final.top_card.id) is final
    assert draw_card(final) is final
    assert choose_suit(final, "♥") is final
    assert swap_with(final, final.players[1].id) is final
    assert perform_bot_turn(final) is final
