"""Leaderboard ranking and persistence."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from broadside.ai.opponent import Difficulty
from broadside.engine.game import MatchSummary, Side
from broadside.leaderboard import (
    MAX_ENTRIES,
    InMemoryLeaderboardStore,
    JsonLeaderboardStore,
    Leaderboard,
    LeaderboardEntry,
    rank_entries,
)


def _entry(name: str, shots: int, seconds: int, day: int = 1, **kwargs) -> LeaderboardEntry:
    return LeaderboardEntry(
        name=name,
        shots_taken=shots,
        duration_seconds=seconds,
        date_iso=f"2024-03-{day:02d}T12:00:00+00:00",
        **kwargs,
    )


def test_entry_name_is_trimmed_and_bounded() -> None:
    assert _entry("  Ada  ", 40, 60).name == "Ada"
    with pytest.raises(ValueError):
        _entry("A", 40, 60)
    with pytest.raises(ValueError):
        _entry("x" * 21, 40, 60)
    assert _entry("x" * 20, 40, 60).name == "x" * 20


def test_entry_rejects_negative_numbers() -> None:
    with pytest.raises(ValueError):
        _entry("Ada", -1, 60)
    with pytest.raises(ValueError):
        _entry("Ada", 40, -5)


def test_unknown_difficulty_reads_as_medium() -> None:
    assert _entry("Ada", 40, 60, difficulty="legendary").difficulty is Difficulty.MEDIUM
    assert _entry("Ada", 40, 60, difficulty="hard").difficulty is Difficulty.HARD


def test_entry_from_won_summary() -> None:
    summary = MatchSummary(Side.PLAYER, 33, 95, Difficulty.HARD)
    when = datetime(2024, 5, 1, tzinfo=timezone.utc)

    entry = LeaderboardEntry.from_summary("Grace", summary, when)

    assert entry.shots_taken == 33
    assert entry.duration_seconds == 95
    assert entry.difficulty is Difficulty.HARD
    assert entry.date_iso == "2024-05-01T00:00:00+00:00"


def test_lost_summary_is_not_recorded() -> None:
    summary = MatchSummary(Side.AI, 50, 120, Difficulty.EASY)
    with pytest.raises(ValueError):
        LeaderboardEntry.from_summary("Grace", summary)


def test_ranking_prefers_fewer_shots_then_time_then_recency() -> None:
    entries = [
        _entry("slow", 30, 200, day=1),
        _entry("old", 30, 100, day=1),
        _entry("new", 30, 100, day=9),
        _entry("best", 25, 400, day=2),
    ]
    assert [entry.name for entry in rank_entries(entries)] == ["best", "new", "old", "slow"]


def test_ranking_keeps_only_top_entries() -> None:
    entries = [_entry(f"p{index:02d}", 20 + index, 60) for index in range(MAX_ENTRIES + 3)]
    ranked = rank_entries(reversed(entries))
    assert len(ranked) == MAX_ENTRIES
    assert ranked[0].name == "p00"
    assert ranked[-1].name == f"p{MAX_ENTRIES - 1:02d}"


def test_add_score_persists_ranked_table() -> None:
    store = InMemoryLeaderboardStore([_entry("Ada", 40, 60)])
    board = Leaderboard(store)

    ranked = board.add_score(_entry("Grace", 35, 90, day=2))

    assert [entry.name for entry in ranked] == ["Grace", "Ada"]
    assert store.load() == ranked


def test_add_score_drops_entries_outside_the_table() -> None:
    board = Leaderboard()
    for index in range(MAX_ENTRIES):
        board.add_score(_entry(f"p{index:02d}", 20, 60))

    ranked = board.add_score(_entry("late", 99, 999))

    assert len(ranked) == MAX_ENTRIES
    assert all(entry.name != "late" for entry in ranked)


def test_top_filters_by_difficulty_and_limit() -> None:
    board = Leaderboard()
    board.add_score(_entry("easy1", 30, 60, difficulty="easy"))
    board.add_score(_entry("hard1", 40, 60, difficulty="hard"))
    board.add_score(_entry("hard2", 35, 60, difficulty="hard"))

    assert [entry.name for entry in board.top(Difficulty.HARD)] == ["hard2", "hard1"]
    assert [entry.name for entry in board.top(limit=1)] == ["easy1"]

    board.clear()
    assert board.top() == []


def test_json_store_round_trips(tmp_path) -> None:
    path = tmp_path / "scores" / "leaderboard.json"
    store = JsonLeaderboardStore(path)
    assert store.load() == []

    Leaderboard(store).add_score(_entry("Ada", 40, 60, difficulty="hard"))

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw[0]["name"] == "Ada"
    assert raw[0]["difficulty"] == "hard"
    assert store.load()[0].difficulty is Difficulty.HARD

    store.clear()
    assert not path.exists()
    store.clear()


def test_json_store_tolerates_corrupt_content(tmp_path) -> None:
    path = tmp_path / "leaderboard.json"
    store = JsonLeaderboardStore(path)

    path.write_text("{not json", encoding="utf-8")
    assert store.load() == []

    path.write_text(json.dumps({"name": "Ada"}), encoding="utf-8")
    assert store.load() == []


def test_json_store_skips_invalid_entries(tmp_path) -> None:
    path = tmp_path / "leaderboard.json"
    good = _entry("Ada", 40, 60).model_dump(mode="json")
    bad_name = dict(good, name="A")
    path.write_text(json.dumps([good, bad_name, "junk", {"shots_taken": 3}]), encoding="utf-8")

    entries = JsonLeaderboardStore(path).load()

    assert [entry.name for entry in entries] == ["Ada"]
