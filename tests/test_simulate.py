from __future__ import annotations

import json
from pathlib import Path

import pytest

from jackattack.cli.simulate import main, run
from jackattack.engine import Difficulty


def test_run_is_reproducible() -> None:
    a = run(games=5, players=3, difficulty=Difficulty.MEDIUM, seed=10, max_turns=1000)
    b = run(games=5, players=3, difficulty=Difficulty.MEDIUM, seed=10, max_turns=1000)
    assert a == b
    assert a.games_played == 5
    assert sum(a.seat_wins.values()) + a.unfinished == 5


def test_turn_limit_counts_unfinished() -> None:
    stats = run(games=2, players=4, difficulty=Difficulty.EASY, seed=1, max_turns=1)
    assert stats.unfinished == 2
    assert stats.average_turns == 1.0


def test_main_prints_summary_and_dumps(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    dump = tmp_path / "out" / "finals.json"
    code = main(["--games", "3", "--players", "2", "--difficulty", "hard", "--seed", "5", "--dump", str(dump)])
    assert code == 0

    out = capsys.readouterr().out
    assert "Games played: 3" in out
    assert "seat 1:" in out

    finals = json.loads(dump.read_text(encoding="utf-8"))
    assert len(finals) == 3
    for snap in finals:
        assert "previous_state" not in snap
        cards = len(snap["deck"]) + len(snap["discard_pile"]) + sum(len(p["hand"]) for p in snap["players"])
        assert cards == 52


def test_main_rejects_bad_player_count() -> None:
    with pytest.raises(SystemExit):
        main(["--players", "7"])
