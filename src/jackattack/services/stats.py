from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Mapping

logger = logging.getLogger(__name__)

RECENT_GAMES_KEPT = 10
WIN_COINS = 10
COIN_MULTIPLIER = {"easy": 1, "medium": 2, "hard": 3}

# (min wins, name, emoji, next threshold), highest first
RANKS: tuple[tuple[int, str, str, int], ...] = (
    (100, "Legend", "👑", 100),
    (50, "Diamond", "💎", 100),
    (25, "Platinum", "🏆", 50),
    (10, "Gold", "🥇", 25),
    (5, "Silver", "🥈", 10),
    (1, "Bronze", "🥉", 5),
    (0, "Rookie", "🎮", 1),
)


class StatsError(RuntimeError):
    pass


@dataclass(frozen=True)
class GameResult:
    """What the driver knows about a finished game."""

    won: bool
    difficulty: str
    game_mode: str
    opponent_count: int
    turns_played: int
    cards_played: int
    attack_cards_used: int
    duration_ms: int
    perfect: bool = False  # won without drawing
    comeback: bool = False  # won after trailing by 10+ cards


@dataclass
class GameRecord:
    id: str
    date: str
    won: bool
    difficulty: str
    game_mode: str
    opponent_count: int
    turns_played: int
    cards_played: int
    attack_cards_used: int
    duration_ms: int

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "GameRecord":
        def _int(key: str) -> int:
            v = d.get(key, 0)
            return v if isinstance(v, int) else 0

        return GameRecord(
            id=str(d.get("id", "")),
            date=str(d.get("date", "")),
            won=bool(d.get("won", False)),
            difficulty=str(d.get("difficulty", "medium")),
            game_mode=str(d.get("game_mode", "vs_bot")),
            opponent_count=_int("opponent_count"),
            turns_played=_int("turns_played"),
            cards_played=_int("cards_played"),
            attack_cards_used=_int("attack_cards_used"),
            duration_ms=_int("duration_ms"),
        )

    def to_dict(self) -> dict[str, object]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class PlayerStats:
    total_games: int = 0
    wins: int = 0
    losses: int = 0

    current_win_streak: int = 0
    best_win_streak: int = 0
    current_lose_streak: int = 0

    total_cards_played: int = 0
    total_attack_cards_used: int = 0
    fastest_win_ms: int | None = None
    average_game_duration_ms: int = 0

    easy_wins: int = 0
    easy_losses: int = 0
    medium_wins: int = 0
    medium_losses: int = 0
    hard_wins: int = 0
    hard_losses: int = 0

    perfect_wins: int = 0
    comeback_wins: int = 0

    recent_games: list[GameRecord] = field(default_factory=list)
    coins: int = 0

    first_game_date: str | None = None
    last_game_date: str | None = None

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "PlayerStats":
        """Merge a stored dict over the defaults so older files gain new fields."""
        stats = PlayerStats()
        for f in fields(PlayerStats):
            if f.name not in d:
                continue
            v = d[f.name]
            if f.name == "recent_games":
                if isinstance(v, list):
                    stats.recent_games = [GameRecord.from_dict(r) for r in v if isinstance(r, dict)]
            elif f.name in ("fastest_win_ms",):
                stats.fastest_win_ms = v if isinstance(v, int) else None
            elif f.name in ("first_game_date", "last_game_date"):
                setattr(stats, f.name, v if isinstance(v, str) else None)
            elif isinstance(v, int) and not isinstance(v, bool):
                setattr(stats, f.name, v)
        return stats

    def to_dict(self) -> dict[str, object]:
        out: dict[str, object] = {f.name: getattr(self, f.name) for f in fields(self)}
        out["recent_games"] = [r.to_dict() for r in self.recent_games]
        return out


def win_rate(stats: PlayerStats) -> int:
    if stats.total_games == 0:
        return 0
    return round(stats.wins / stats.total_games * 100)


def rank_for(stats: PlayerStats) -> tuple[str, str, int]:
    """(name, emoji, wins needed for the next rank)"""
    for min_wins, name, emoji, next_at in RANKS:
        if stats.wins >= min_wins:
            return name, emoji, next_at
    raise StatsError("unreachable: RANKS must end at 0 wins")


def format_duration(ms: int | None) -> str:
    if ms is None:
        return "--:--"
    seconds = ms // 1000
    return f"{seconds // 60}:{seconds % 60:02d}"


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class StatsService:
    def __init__(self, path: Path, now: Callable[[], datetime] | None = None) -> None:
        self._path = path
        self._now = now or _utcnow
        self.stats = self._load_or_create()

    def _load_or_create(self) -> PlayerStats:
        if not self._path.exists():
            return PlayerStats()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to load stats from %s: %s", self._path, e)
            return PlayerStats()
        if not isinstance(raw, dict):
            logger.warning("Ignoring malformed stats file %s", self._path)
            return PlayerStats()
        return PlayerStats.from_dict(raw)

    def save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self.stats.to_dict(), indent=2), encoding="utf-8")

    def migrate_legacy(self, legacy_path: Path) -> bool:
        """Import wins/losses from the old stats file if no new file exists yet."""
        if self._path.exists() or not legacy_path.exists():
            return False
        try:
            old = json.loads(legacy_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to migrate stats from %s: %s", legacy_path, e)
            return False
        if not isinstance(old, dict):
            return False
        wins = old.get("wins", 0)
        losses = old.get("losses", 0)
        wins = wins if isinstance(wins, int) else 0
        losses = losses if isinstance(losses, int) else 0
        self.stats = PlayerStats(wins=wins, losses=losses, total_games=wins + losses)
        self.save()
        logger.info("Migrated legacy stats from %s", legacy_path)
        return True

    def record_game(self, result: GameResult) -> GameRecord:
        now = self._now()
        now_iso = now.isoformat()
        record = GameRecord(
            id=f"game-{int(now.timestamp() * 1000)}",
            date=now_iso,
            won=result.won,
            difficulty=result.difficulty,
            game_mode=result.game_mode,
            opponent_count=result.opponent_count,
            turns_played=result.turns_played,
            cards_played=result.cards_played,
            attack_cards_used=result.attack_cards_used,
            duration_ms=result.duration_ms,
        )

        s = self.stats
        s.total_games += 1
        s.last_game_date = now_iso
        if s.first_game_date is None:
            s.first_game_date = now_iso
        s.total_cards_played += result.cards_played
        s.total_attack_cards_used += result.attack_cards_used

        if result.won:
            s.wins += 1
            s.current_win_streak += 1
            s.current_lose_streak = 0
            s.best_win_streak = max(s.best_win_streak, s.current_win_streak)
            if s.fastest_win_ms is None or result.duration_ms < s.fastest_win_ms:
                s.fastest_win_ms = result.duration_ms
            s.coins += WIN_COINS * COIN_MULTIPLIER.get(result.difficulty, 1)
            if result.perfect:
                s.perfect_wins += 1
            if result.comeback:
                s.comeback_wins += 1
        else:
            s.losses += 1
            s.current_lose_streak += 1
            s.current_win_streak = 0

        key = f"{result.difficulty}_{'wins' if result.won else 'losses'}"
        if hasattr(s, key):
            setattr(s, key, getattr(s, key) + 1)

        total = s.average_game_duration_ms * (s.total_games - 1) + result.duration_ms
        s.average_game_duration_ms = round(total / s.total_games)

        s.recent_games = [record, *s.recent_games][:RECENT_GAMES_KEPT]
        self.save()
        return record

    def add_coins(self, amount: int) -> None:
        if amount <= 0:
            return
        self.stats.coins += amount
        self.save()

    def spend_coins(self, amount: int) -> bool:
        if amount < 0 or self.stats.coins < amount:
            return False
        self.stats.coins -= amount
        self.save()
        return True

    def reset(self) -> PlayerStats:
        self.stats = PlayerStats()
        self.save()
        return self.stats
