from __future__ import annotations

import json
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from jackattack.paths import get_paths
from jackattack.services.challenges import ChallengeService, GameSummary, challenge_index
from jackattack.services.content import ContentService
from jackattack.services.inventory import InventoryError, InventoryService
from jackattack.services.stats import (
    GameResult,
    PlayerStats,
    StatsService,
    format_duration,
    rank_for,
    win_rate,
)
from jackattack.services.telemetry import TelemetryService


def _content() -> ContentService:
    paths = get_paths()
    return ContentService(paths.data_dir, paths.schema_dir)


def _fixed_now() -> datetime:
    return datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _result(won: bool, difficulty: str = "medium", duration_ms: int = 60_000, **kw: object) -> GameResult:
    base: dict[str, object] = dict(
        won=won,
        difficulty=difficulty,
        game_mode="vs_bot",
        opponent_count=3,
        turns_played=12,
        cards_played=9,
        attack_cards_used=2,
        duration_ms=duration_ms,
    )
    base.update(kw)
    return GameResult(**base)  # type: ignore[arg-type]


def _summary(won: bool = True, **kw: object) -> GameSummary:
    base: dict[str, object] = dict(
        won=won,
        attack_cards_used=1,
        duration_ms=200_000,
        deck_cards_remaining=5,
        power_cards_used=0,
        cards_drawn=3,
    )
    base.update(kw)
    return GameSummary(**base)  # type: ignore[arg-type]


# -------- stats --------
def test_stats_start_empty_and_persist(tmp_path: Path) -> None:
    path = tmp_path / "stats.json"
    svc = StatsService(path, now=_fixed_now)
    assert svc.stats.total_games == 0

    record = svc.record_game(_result(True, "hard", 90_000, perfect=True))
    assert record.id == f"game-{int(_fixed_now().timestamp() * 1000)}"
    assert path.exists()

    again = StatsService(path)
    s = again.stats
    assert (s.total_games, s.wins, s.losses) == (1, 1, 0)
    assert s.hard_wins == 1
    assert s.perfect_wins == 1
    assert s.coins == 30
    assert s.fastest_win_ms == 90_000
    assert s.first_game_date == s.last_game_date == _fixed_now().isoformat()
    assert s.recent_games[0].difficulty == "hard"


def test_streaks_and_averages(tmp_path: Path) -> None:
    svc = StatsService(tmp_path / "stats.json", now=_fixed_now)
    svc.record_game(_result(True, duration_ms=40_000))
    svc.record_game(_result(True, duration_ms=20_000))
    svc.record_game(_result(False, duration_ms=90_000))
    s = svc.stats
    assert s.best_win_streak == 2
    assert s.current_win_streak == 0
    assert s.current_lose_streak == 1
    assert s.fastest_win_ms == 20_000
    assert s.average_game_duration_ms == 50_000
    assert s.medium_wins == 2 and s.medium_losses == 1
    assert s.total_cards_played == 27
    assert s.coins == 40
    assert win_rate(s) == 67


def test_recent_games_are_capped(tmp_path: Path) -> None:
    svc = StatsService(tmp_path / "stats.json", now=_fixed_now)
    for _ in range(12):
        svc.record_game(_result(False))
    assert len(svc.stats.recent_games) == 10


def test_corrupt_stats_file_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "stats.json"
    path.write_text("{oops", encoding="utf-8")
    assert StatsService(path).stats == PlayerStats()


def test_old_stats_file_gains_new_fields(tmp_path: Path) -> None:
    path = tmp_path / "stats.json"
    path.write_text(json.dumps({"wins": 4, "losses": 2, "total_games": 6}), encoding="utf-8")
    s = StatsService(path).stats
    assert s.wins == 4
    assert s.comeback_wins == 0
    assert s.recent_games == []


def test_legacy_migration(tmp_path: Path) -> None:
    legacy = tmp_path / "stats_v1.json"
    legacy.write_text(json.dumps({"wins": 3, "losses": 5}), encoding="utf-8")
    svc = StatsService(tmp_path / "stats.json")
    assert svc.migrate_legacy(legacy)
    assert (svc.stats.wins, svc.stats.losses, svc.stats.total_games) == (3, 5, 8)
    # a second run finds the new file and leaves it alone
    assert not StatsService(tmp_path / "stats.json").migrate_legacy(legacy)


def test_coins(tmp_path: Path) -> None:
    svc = StatsService(tmp_path / "stats.json")
    svc.add_coins(25)
    assert not svc.spend_coins(30)
    assert svc.spend_coins(20)
    assert svc.stats.coins == 5
    svc.reset()
    assert svc.stats.coins == 0


@pytest.mark.parametrize(
    ("wins", "name", "next_at"),
    [(0, "Rookie", 1), (1, "Bronze", 5), (9, "Silver", 10), (10, "Gold", 25), (50, "Diamond", 100), (250, "Legend", 100)],
)
def test_rank_for(wins: int, name: str, next_at: int) -> None:
    got_name, _, got_next = rank_for(PlayerStats(wins=wins))
    assert (got_name, got_next) == (name, next_at)


def test_format_duration() -> None:
    assert format_duration(None) == "--:--"
    assert format_duration(65_000) == "1:05"
    assert format_duration(999) == "0:00"


# -------- daily challenge --------
def test_challenge_index_is_stable_per_utc_day() -> None:
    assert challenge_index(date(2024, 1, 4), 7) == 0
    assert challenge_index(date(2024, 1, 6), 7) == 2
    assert challenge_index(date(2024, 1, 1), 7) == 4


def _challenges(tmp_path: Path, day: date) -> ChallengeService:
    return ChallengeService(tmp_path / "daily.json", _content().load_challenges(), today=lambda: day)


def test_win_count_challenge_is_all_or_nothing_for_one_win(tmp_path: Path) -> None:
    svc = _challenges(tmp_path, date(2024, 1, 4))
    assert svc.todays_challenge().id == "win_once"
    assert svc.daily_progress().progress == 0.0

    lost = svc.check_completion(_summary(won=False))
    assert not lost.completed

    won = svc.check_completion(_summary())
    assert won.completed and won.newly_completed
    assert won.progress == 100.0

    again = svc.check_completion(_summary())
    assert again.completed and not again.newly_completed


def test_win_three_accumulates(tmp_path: Path) -> None:
    svc = _challenges(tmp_path, date(2024, 1, 5))
    assert svc.todays_challenge().id == "win_three"
    first = svc.check_completion(_summary())
    assert not first.completed
    assert first.progress == pytest.approx(100 / 3)
    svc.check_completion(_summary())
    third = svc.check_completion(_summary())
    assert third.completed


def test_pacifist_needs_zero_attacks(tmp_path: Path) -> None:
    svc = _challenges(tmp_path, date(2024, 1, 6))
    assert svc.todays_challenge().id == "pacifist"
    assert not svc.check_completion(_summary(attack_cards_used=1)).completed
    assert svc.check_completion(_summary(attack_cards_used=0)).completed


@pytest.mark.parametrize(
    ("day", "good", "bad"),
    [
        (date(2024, 1, 7), {"duration_ms": 119_000}, {"duration_ms": 120_000}),
        (date(2024, 1, 1), {"deck_cards_remaining": 10}, {"deck_cards_remaining": 9}),
        (date(2024, 1, 2), {"power_cards_used": 5}, {"power_cards_used": 4}),
        (date(2024, 1, 3), {"cards_drawn": 0}, {"cards_drawn": 1}),
    ],
)
def test_threshold_challenges(tmp_path: Path, day: date, good: dict[str, int], bad: dict[str, int]) -> None:
    svc = _challenges(tmp_path, day)
    assert not svc.check_completion(_summary(**bad)).completed
    assert svc.check_completion(_summary(**good)).completed


def test_progress_resets_on_a_new_day(tmp_path: Path) -> None:
    day = [date(2024, 1, 4)]
    svc = ChallengeService(tmp_path / "daily.json", _content().load_challenges(), today=lambda: day[0])
    svc.check_completion(_summary())
    assert svc.daily_progress().completed

    day[0] = date(2024, 1, 5)
    fresh = svc.daily_progress()
    assert fresh.date == "2024-01-05"
    assert fresh.challenge_id == "win_three"
    assert not fresh.completed


# -------- inventory --------
def _inventory(tmp_path: Path) -> InventoryService:
    content = _content()
    return InventoryService(tmp_path / "inventory.json", content.load_powerups(), content.load_themes())


def test_inventory_defaults(tmp_path: Path) -> None:
    inv = _inventory(tmp_path)
    assert inv.is_unlocked("classic") and inv.is_unlocked("dark")
    assert not inv.is_unlocked("gold")
    assert inv.current_theme().id == "classic"
    assert [(t.id, ok) for t, ok in inv.themes_with_status()][:3] == [
        ("classic", True),
        ("dark", True),
        ("neon", False),
    ]


def test_purchase_and_use_powerups(tmp_path: Path) -> None:
    inv = _inventory(tmp_path)
    poor = inv.purchase("extra_turn", 10)
    assert not poor.ok and poor.coins == 10

    bought = inv.purchase("block_attack", 100)
    assert bought.ok and bought.coins == 70
    assert inv.quantity("block_attack") == 1
    assert not inv.purchase("nope", 100).ok

    reloaded = _inventory(tmp_path)
    assert reloaded.quantity("block_attack") == 1
    assert reloaded.use("block_attack")
    assert not reloaded.use("block_attack")


def test_unlock_and_select_theme(tmp_path: Path) -> None:
    inv = _inventory(tmp_path)
    assert not inv.select_theme("gold")
    assert inv.unlock("gold")
    assert not inv.unlock("gold")
    assert inv.select_theme("gold")
    assert _inventory(tmp_path).current_theme().id == "gold"
    with pytest.raises(InventoryError):
        inv.unlock("plaid")


# -------- telemetry --------
def test_telemetry_appends_json_lines(tmp_path: Path) -> None:
    tel = TelemetryService(tmp_path / "logs" / "t.jsonl")
    assert tel.read() == []
    tel.log("game_started", {"players": 4})
    tel.session_id = "abc"
    tel.log("game_ended", {"won": True})
    events = tel.read()
    assert [e["type"] for e in events] == ["game_started", "game_ended"]
    assert "session" not in events[0]
    assert events[1]["session"] == "abc"
    assert events[1]["payload"] == {"won": True}
