from __future__ import annotations

from jackattack.engine.game import create_new_game, draw_card, is_valid_move, play_card
from jackattack.engine.serialize import snapshot
from jackattack.engine.undo import save_state_for_undo, undo_last_move


def test_fresh_game_has_nothing_to_undo() -> None:
    state = create_new_game(seed=1)
    assert not state.can_undo
    assert undo_last_move(state) is None


def test_undo_restores_state_before_draw() -> None:
    state = create_new_game(seed=2)
    before = snapshot(state, include_undo=False)

    after = draw_card(save_state_for_undo(state))
    assert after.can_undo
    assert len(after.players[0].hand) == 8

    restored = undo_last_move(after)
    assert restored is not None
    assert not restored.can_undo
    assert restored.previous_state is None
    assert restored.last_action == "Move undone!"

    got = snapshot(restored, include_undo=False)
    got.pop("last_action")
    before.pop("last_action")
    assert got == before


def test_undo_restores_state_before_play() -> None:
    state, card = next(
        (s, c)
        for s in (create_new_game(seed=seed) for seed in range(3, 200))
        for c in s.players[0].hand
        if is_valid_move(c, s.top_card, 0)
    )

    after = play_card(save_state_for_undo(state), card.id)
    assert card not in after.players[0].hand

    restored = undo_last_move(after)
    assert restored is not None
    assert card in restored.players[0].hand
    assert restored.top_card == state.top_card
    assert restored.current_player_index == 0


def test_only_one_level_is_kept() -> None:
    state = create_new_game(seed=4)
    once = draw_card(save_state_for_undo(state))
    twice = save_state_for_undo(once)
    assert twice.previous_state is not None
    assert twice.previous_state.previous_state is None
    assert not twice.previous_state.can_undo


def test_undo_cannot_be_chained() -> None:
    state = create_new_game(seed=5)
    after = draw_card(save_state_for_undo(state))
    restored = undo_last_move(after)
    assert restored is not None
    assert undo_last_move(restored) is None


def test_save_state_does_not_touch_input() -> None:
    state = create_new_game(seed=6)
    saved = save_state_for_undo(state)
    assert saved is not state
    assert not state.can_undo
    assert state.previous_state is None
