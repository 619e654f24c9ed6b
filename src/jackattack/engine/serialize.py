from __future__ import annotations

import random
from typing import Mapping

from .game import GameConfig, GameState
from .types import Card, Difficulty, GameMode, PendingChoice, Player, Rank, Suit


def card_to_dict(c: Card) -> dict[str, object]:
    return {"id": c.id, "suit": c.suit.value, "rank": c.rank.value}


def _card_or_none(c: Card | None) -> dict[str, object] | None:
    if c is None:
        return None
    return card_to_dict(c)


def _player_to_dict(p: Player) -> dict[str, object]:
    return {
        "id": p.id,
        "name": p.name,
        "avatar": p.avatar,
        "is_bot": p.is_bot,
        "hand": [card_to_dict(c) for c in p.hand],
    }


def snapshot(state: GameState, *, include_undo: bool = True) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the game state."""
    out: dict[str, object] = {
        "deck": [card_to_dict(c) for c in state.deck],
        "discard_pile": [card_to_dict(c) for c in state.discard_pile],
        "players": [_player_to_dict(p) for p in state.players],
        "current_player_index": state.current_player_index,
        "direction": state.direction,
        "winner_id": state.winner_id,
        "pending_pickup": state.pending_pickup,
        "last_action": state.last_action,
        "difficulty": state.difficulty.value,
        "game_mode": state.game_mode.value,
        "pending": state.pending.value,
        "chosen_suit": state.chosen_suit.value if state.chosen_suit is not None else None,
        "peeking_card": _card_or_none(state.peeking_card),
        "peeking_player_id": state.peeking_player_id,
        "show_pass_screen": state.show_pass_screen,
        "next_player_name": state.next_player_name,
        "can_undo": state.can_undo,
    }
    if include_undo:
        prev = state.previous_state
        out["previous_state"] = snapshot(prev, include_undo=False) if prev is not None else None
    return out


def _card_from_dict(d: object) -> Card:
    if not isinstance(d, Mapping):
        raise ValueError("card must be an object")
    try:
        return Card.of(Suit(d["suit"]), Rank(d["rank"]))
    except (KeyError, ValueError) as e:
        raise ValueError(f"invalid card: {d!r}") from e


def _cards(raw: object, key: str) -> list[Card]:
    if not isinstance(raw, list):
        raise ValueError(f"{key} must be a list")
    return [_card_from_dict(c) for c in raw]


def state_from_snapshot(
    data: Mapping[str, object],
    *,
    config: GameConfig | None = None,
    rng: random.Random | None = None,
) -> GameState:
    """Rebuild a GameState from `snapshot` output (e.g. to resume a saved game)."""
    try:
        players_raw = data["players"]
        if not isinstance(players_raw, list) or not players_raw:
            raise ValueError("players must be a non-empty list")
        players = []
        for p in players_raw:
            if not isinstance(p, Mapping):
                raise ValueError("player must be an object")
            players.append(
                Player(
                    id=str(p["id"]),
                    name=str(p["name"]),
                    avatar=str(p.get("avatar", "")),
                    is_bot=bool(p["is_bot"]),
                    hand=_cards(p["hand"], "hand"),
                )
            )
        peek = data.get("peeking_card")
        chosen = data.get("chosen_suit")
        state = GameState(
            deck=_cards(data["deck"], "deck"),
            discard_pile=_cards(data["discard_pile"], "discard_pile"),
            players=players,
            difficulty=Difficulty(data["difficulty"]),
            game_mode=GameMode(data["game_mode"]),
            current_player_index=int(data["current_player_index"]),  # type: ignore[arg-type]
            direction=int(data["direction"]),  # type: ignore[arg-type]
            winner_id=data.get("winner_id"),  # type: ignore[arg-type]
            pending_pickup=int(data.get("pending_pickup", 0)),  # type: ignore[arg-type]
            last_action=str(data.get("last_action", "")),
            pending=PendingChoice(data.get("pending", "none")),
            chosen_suit=Suit(chosen) if chosen is not None else None,
            peeking_card=_card_from_dict(peek) if peek is not None else None,
            peeking_player_id=data.get("peeking_player_id"),  # type: ignore[arg-type]
            show_pass_screen=bool(data.get("show_pass_screen", False)),
            next_player_name=str(data.get("next_player_name", "")),
            can_undo=bool(data.get("can_undo", False)),
            config=config or GameConfig(),
            rng=rng or random.Random(),
        )
    except KeyError as e:
        raise ValueError(f"snapshot missing field: {e.args[0]}") from e

    if not state.discard_pile:
        raise ValueError("discard_pile must not be empty")
    if not 0 <= state.current_player_index < len(state.players):
        raise ValueError("current_player_index out of range")
    if state.direction not in (1, -1):
        raise ValueError("direction must be 1 or -1")

    prev = data.get("previous_state")
    if isinstance(prev, Mapping):
        state.previous_state = state_from_snapshot(prev, config=state.config, rng=state.rng)
    return state
