from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Callable, Mapping

from jackattack.services.content import Challenge, ChallengeCatalog

logger = logging.getLogger(__name__)

DEFAULT_FAST_WIN_MS = 120_000
DEFAULT_CARDS_LEFT = 10
DEFAULT_POWER_CARDS = 5


@dataclass
class DailyProgress:
    date: str  # YYYY-MM-DD
    challenge_id: str
    completed: bool = False
    progress: float = 0.0  # percent, 0-100

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "DailyProgress | None":
        day = d.get("date")
        cid = d.get("challenge_id")
        if not isinstance(day, str) or not isinstance(cid, str):
            return None
        prog = d.get("progress", 0)
        return DailyProgress(
            date=day,
            challenge_id=cid,
            completed=bool(d.get("completed", False)),
            progress=float(prog) if isinstance(prog, (int, float)) else 0.0,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "date": self.date,
            "challenge_id": self.challenge_id,
            "completed": self.completed,
            "progress": self.progress,
        }


@dataclass(frozen=True)
class GameSummary:
    """Per-game facts a challenge can be judged on."""

    won: bool
    attack_cards_used: int
    duration_ms: int
    deck_cards_remaining: int
    power_cards_used: int
    cards_drawn: int


@dataclass(frozen=True)
class ChallengeResult:
    completed: bool
    progress: float
    newly_completed: bool = False


def _utc_today() -> date:
    return datetime.now(tz=timezone.utc).date()


def challenge_index(day: date, pool_size: int) -> int:
    # Epoch milliseconds of UTC midnight, so every client agrees on the pick.
    midnight = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
    return int(midnight.timestamp() * 1000) % pool_size


class ChallengeService:
    def __init__(
        self,
        path: Path,
        catalog: ChallengeCatalog,
        today: Callable[[], date] | None = None,
    ) -> None:
        if not catalog.challenges:
            raise ValueError("challenge catalog is empty")
        self._path = path
        self.catalog = catalog
        self._today = today or _utc_today

    def todays_challenge(self) -> Challenge:
        pool = self.catalog.challenges
        return pool[challenge_index(self._today(), len(pool))]

    def _load(self) -> DailyProgress | None:
        if not self._path.exists():
            return None
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to load daily progress from %s: %s", self._path, e)
            return None
        if not isinstance(raw, dict):
            return None
        progress = DailyProgress.from_dict(raw)
        if progress is None or progress.date != self._today().isoformat():
            return None
        return progress

    def _save(self, progress: DailyProgress) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(progress.to_dict(), indent=2), encoding="utf-8")

    def daily_progress(self) -> DailyProgress:
        existing = self._load()
        if existing is not None:
            return existing
        fresh = DailyProgress(date=self._today().isoformat(), challenge_id=self.todays_challenge().id)
        self._save(fresh)
        return fresh

    def check_completion(self, summary: GameSummary) -> ChallengeResult:
        challenge = self.todays_challenge()
        current = self.daily_progress()

        if current.completed:
            return ChallengeResult(completed=True, progress=100.0)
        if not summary.won:
            return ChallengeResult(completed=False, progress=current.progress)

        cond = challenge.condition
        progress = current.progress
        done = False
        if cond.type == "win":
            progress = min(100.0, progress + 100.0 / (cond.value or 1))
            done = progress >= 100.0
        elif cond.type == "win_without_attacks":
            done = summary.attack_cards_used == 0
        elif cond.type == "win_fast":
            done = summary.duration_ms < (cond.value or DEFAULT_FAST_WIN_MS)
        elif cond.type == "win_with_cards_left":
            done = summary.deck_cards_remaining >= (cond.value or DEFAULT_CARDS_LEFT)
        elif cond.type == "use_power_cards":
            done = summary.power_cards_used >= (cond.value or DEFAULT_POWER_CARDS)
        elif cond.type == "perfect_game":
            done = summary.cards_drawn == 0
        if done:
            progress = 100.0

        current.progress = progress
        current.completed = done
        self._save(current)
        if done:
            logger.info("Daily challenge %s completed", challenge.id)
        return ChallengeResult(completed=done, progress=progress, newly_completed=done)
