from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Sequence

from jackattack.engine import (
    Difficulty,
    GameConfig,
    GameMode,
    GameState,
    Suit,
    choose_suit,
    clear_peek,
    confirm_pass_screen,
    create_new_game,
    draw_card,
    is_attack_card,
    is_power_card,
    is_valid_move,
    perform_bot_turn,
    play_card,
    save_state_for_undo,
    swap_with,
    trigger_pass_screen,
    undo_last_move,
)
from jackattack.services.challenges import ChallengeResult, ChallengeService, GameSummary
from jackattack.services.inventory import InventoryService
from jackattack.services.stats import GameResult, StatsService
from jackattack.services.telemetry import TelemetryService

logger = logging.getLogger(__name__)

COMEBACK_DEFICIT = 10


class SessionError(RuntimeError):
    pass


@dataclass
class _Tracking:
    started_ms: int
    turns_played: int = 0
    cards_played: int = 0
    attack_cards_used: int = 0
    power_cards_used: int = 0
    cards_drawn: int = 0
    max_deficit: int = 0


@dataclass(frozen=True)
class GameOutcome:
    winner_id: str
    player_won: bool
    result: GameResult
    summary: GameSummary
    challenge: ChallengeResult | None = None


def _monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


class GameSession:
    """Drives one game at a time on behalf of a UI.

    Holds the authoritative GameState, funnels every change through the
    engine's transition functions, and reports the finished game to the
    meta-progression services. Seat 0 is the local player whose stats are
    recorded.
    """

    def __init__(
        self,
        *,
        stats: StatsService | None = None,
        challenges: ChallengeService | None = None,
        inventory: InventoryService | None = None,
        telemetry: TelemetryService | None = None,
        clock_ms: Callable[[], int] | None = None,
    ) -> None:
        self.stats = stats
        self.challenges = challenges
        self.inventory = inventory
        self.telemetry = telemetry
        self._clock_ms = clock_ms or _monotonic_ms
        self._state: GameState | None = None
        self._tracking: _Tracking | None = None
        self.outcome: GameOutcome | None = None

    # -------- State access --------
    @property
    def state(self) -> GameState:
        if self._state is None:
            raise SessionError("No game in progress.")
        return self._state

    @property
    def human_id(self) -> str:
        return self.state.players[0].id

    @property
    def finished(self) -> bool:
        return self._state is not None and self._state.winner_id is not None

    def _log(self, event_type: str, payload: dict[str, object]) -> None:
        if self.telemetry is not None:
            self.telemetry.log(event_type, payload)

    # -------- Lifecycle --------
    def new_game(
        self,
        num_players: int = 4,
        difficulty: Difficulty | str = Difficulty.MEDIUM,
        game_mode: GameMode | str = GameMode.VS_BOT,
        player_names: Sequence[str] | None = None,
        *,
        seed: int | None = None,
        config: GameConfig | None = None,
    ) -> GameState:
        self._state = create_new_game(
            num_players, difficulty, game_mode, player_names, config=config, seed=seed
        )
        self._start("game_started")
        return self._state

    def resume(self, state: GameState) -> GameState:
        """Continue a game rebuilt from a saved snapshot. Counters start from zero."""
        if state.winner_id is not None:
            raise SessionError("Cannot resume a finished game.")
        self._state = state
        self._start("game_resumed")
        return state

    def _start(self, event_type: str) -> None:
        state = self.state
        self._tracking = _Tracking(started_ms=self._clock_ms())
        self.outcome = None
        if self.telemetry is not None:
            self.telemetry.session_id = uuid.uuid4().hex
        self._log(
            event_type,
            {
                "players": len(state.players),
                "difficulty": state.difficulty.value,
                "game_mode": state.game_mode.value,
            },
        )

    def _commit(self, new: GameState) -> None:
        moved = self._state is None or new.current_player_index != self._state.current_player_index
        self._state = new
        self._track_deficit()
        if new.winner_id is not None:
            self._finish()
            return
        if new.game_mode == GameMode.LOCAL_MULTIPLAYER and moved:
            self._state = trigger_pass_screen(new)

    def _track_deficit(self) -> None:
        assert self._tracking is not None
        players = self.state.players
        mine = len(players[0].hand)
        best_other = min(len(p.hand) for p in players[1:])
        self._tracking.max_deficit = max(self._tracking.max_deficit, mine - best_other)

    def _require_human_turn(self) -> GameState:
        state = self.state
        if state.winner_id is not None:
            raise SessionError("Game is over.")
        if state.current_player.is_bot:
            raise SessionError("It is not a human player's turn.")
        return state

    # -------- Human actions --------
    def play(self, card_id: str) -> bool:
        """Play a card for the current human player. Returns False if rejected."""
        state = self._require_human_turn()
        if state.pending_suit_choice or state.pending_swap:
            return False
        player = state.current_player
        card = next((c for c in player.hand if c.id == card_id), None)
        if card is None or not is_valid_move(card, state.top_card, state.pending_pickup):
            return False

        new = play_card(save_state_for_undo(state), card_id)
        if state.current_player_index == 0:
            assert self._tracking is not None
            self._tracking.turns_played += 1
            self._tracking.cards_played += 1
            if is_attack_card(card):
                self._tracking.attack_cards_used += 1
            if is_power_card(card):
                self._tracking.power_cards_used += 1
        self._log("card_played", {"player": player.id, "card": card.id, "action": new.last_action})
        self._commit(new)
        return True

    def draw(self) -> int:
        """Draw for the current human player; returns how many cards arrived."""
        state = self._require_human_turn()
        if state.pending_suit_choice or state.pending_swap:
            return 0
        player = state.current_player
        before = len(player.hand)
        new = draw_card(save_state_for_undo(state))
        drawn = len(new.players[state.current_player_index].hand) - before
        if state.current_player_index == 0:
            assert self._tracking is not None
            self._tracking.turns_played += 1
            self._tracking.cards_drawn += drawn
        self._log("cards_drawn", {"player": player.id, "count": drawn})
        self._commit(new)
        return drawn

    def choose_suit(self, suit: Suit | str) -> bool:
        state = self._require_human_turn()
        new = choose_suit(state, suit)
        if new is state:
            return False
        self._commit(new)
        return True

    def swap_with(self, target_player_id: str) -> bool:
        state = self._require_human_turn()
        new = swap_with(state, target_player_id)
        if new is state:
            return False
        self._commit(new)
        return True

    def undo(self) -> bool:
        restored = undo_last_move(self.state)
        if restored is None:
            return False
        self._state = restored
        self._log("move_undone", {"player": restored.current_player.id})
        return True

    def dismiss_peek(self) -> None:
        self._state = clear_peek(self.state)

    def confirm_pass_screen(self) -> None:
        self._state = confirm_pass_screen(self.state)

    # -------- Bots --------
    def step_bot(self) -> bool:
        """Let the current bot take its whole turn. Returns False if it is not a bot's turn."""
        state = self.state
        if state.winner_id is not None or not state.current_player.is_bot:
            return False
        bot = state.current_player
        new = perform_bot_turn(state)
        self._log("bot_turn", {"player": bot.id, "action": new.last_action})
        self._commit(new)
        return True

    def run_bots(self, max_turns: int = 500) -> int:
        """Step bots until a human is up or the game ends."""
        turns = 0
        while turns < max_turns and self.step_bot():
            turns += 1
        return turns

    # -------- Results --------
    def _finish(self) -> None:
        if self.outcome is not None:
            return
        state = self.state
        tracking = self._tracking
        assert tracking is not None and state.winner_id is not None

        won = state.winner_id == self.human_id
        duration = max(0, self._clock_ms() - tracking.started_ms)
        result = GameResult(
            won=won,
            difficulty=state.difficulty.value,
            game_mode=state.game_mode.value,
            opponent_count=len(state.players) - 1,
            turns_played=tracking.turns_played,
            cards_played=tracking.cards_played,
            attack_cards_used=tracking.attack_cards_used,
            duration_ms=duration,
            perfect=won and tracking.cards_drawn == 0,
            comeback=won and tracking.max_deficit >= COMEBACK_DEFICIT,
        )
        summary = GameSummary(
            won=won,
            attack_cards_used=tracking.attack_cards_used,
            duration_ms=duration,
            deck_cards_remaining=len(state.deck),
            power_cards_used=tracking.power_cards_used,
            cards_drawn=tracking.cards_drawn,
        )

        if self.stats is not None:
            self.stats.record_game(result)

        challenge: ChallengeResult | None = None
        if self.challenges is not None:
            challenge = self.challenges.check_completion(summary)
            if challenge.newly_completed:
                self._grant_challenge_reward()

        self.outcome = GameOutcome(
            winner_id=state.winner_id,
            player_won=won,
            result=result,
            summary=summary,
            challenge=challenge,
        )
        self._log("game_ended", {"winner": state.winner_id, "won": won, "duration_ms": duration})
        logger.info("Game finished: winner=%s player_won=%s", state.winner_id, won)

    def _grant_challenge_reward(self) -> None:
        assert self.challenges is not None
        reward = self.challenges.todays_challenge().reward
        if self.stats is not None:
            self.stats.add_coins(reward.coins)
        if reward.unlock_id and self.inventory is not None:
            self.inventory.unlock(reward.unlock_id)
