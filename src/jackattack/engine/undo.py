from __future__ import annotations

from .game import GameState


def save_state_for_undo(state: GameState) -> GameState:
    """Snapshot `state` so the next human action can be taken back.

    Only one level is kept: the snapshot never carries its own snapshot.
    Call this right before a human `play_card`/`draw_card`.
    """
    new = state.copy()
    snap = state.copy()
    snap.previous_state = None
    snap.can_undo = False
    new.previous_state = snap
    new.can_undo = True
    return new


def undo_last_move(state: GameState) -> GameState | None:
    if not state.can_undo or state.previous_state is None:
        return None
    restored = state.previous_state.copy()
    restored.can_undo = False
    restored.previous_state = None
    restored.last_action = "Move undone!"
    return restored
