"""Terminal front-end helpers and a scripted session."""

from __future__ import annotations

import builtins
import json
import sys

import pytest

from broadside import cli
from broadside.ai.opponent import Difficulty
from broadside.engine.board import ShotOutcome, ShotResult, create_empty_board
from broadside.engine.game import Match
from broadside.engine.ship import FLEET, Coordinate, ShipType
from broadside.settings import GameSettings


def _feed(monkeypatch: pytest.MonkeyPatch, answers: list[str]) -> list[str]:
    prompts: list[str] = []
    remaining = iter(answers)

    def fake_input(prompt: str = "") -> str:
        prompts.append(prompt)
        return next(remaining)

    monkeypatch.setattr(builtins, "input", fake_input)
    return prompts


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("A1", Coordinate(0, 0)),
        (" j10 ", Coordinate(9, 9)),
        ("C7", Coordinate(2, 6)),
        ("3 7", Coordinate(3, 7)),
    ],
)
def test_coordinate_from_input(text: str, expected: Coordinate) -> None:
    assert cli.coordinate_from_input(text) == expected


@pytest.mark.parametrize("text", ["", "K1", "A0", "A11", "Ax", "1", "1 2 3", "10 0"])
def test_coordinate_from_input_rejects(text: str) -> None:
    with pytest.raises(ValueError):
        cli.coordinate_from_input(text)


def test_labels_and_clock() -> None:
    assert cli.coordinate_label(Coordinate(2, 6)) == "C7"
    assert cli.format_clock(0) == "00:00"
    assert cli.format_clock(125) == "02:05"
    assert cli.format_clock(-3) == "00:00"


def test_format_board_hides_enemy_ships() -> None:
    board = create_empty_board()
    board.place_ship_at(ShipType.DESTROYER, Coordinate(0, 0), 2, True)
    board.apply_shot(Coordinate(0, 0))
    board.apply_shot(Coordinate(1, 1))

    own = cli.format_board(board, show_ships=True).splitlines()
    enemy = cli.format_board(board, show_ships=False).splitlines()

    assert len(own) == 11
    assert own[1].startswith("A |")
    assert own[1].split("|")[1].split()[:2] == ["X", "S"]
    assert enemy[1].split("|")[1].split()[:2] == ["X", "."]
    assert enemy[2].split("|")[1].split()[1] == "o"


def test_describe_shot_names_sunk_ship() -> None:
    board = create_empty_board()
    ship_id = board.place_ship_at(ShipType.DESTROYER, Coordinate(0, 0), 2, True)
    coord = Coordinate(0, 1)

    assert cli.describe_shot("AI", coord, ShotResult(ShotOutcome.MISS), board) == "AI: Miss (A2)."
    assert "Hit" in cli.describe_shot("AI", coord, ShotResult(ShotOutcome.HIT, ship_id), board)
    sunk = cli.describe_shot("Ada", coord, ShotResult(ShotOutcome.SUNK, ship_id), board)
    assert sunk == "Ada sank the Destroyer! (A2)."


def test_format_fleet_lists_catalog() -> None:
    lines = cli.format_fleet(create_empty_board()).splitlines()
    assert len(lines) == len(FLEET)
    assert "Carrier" in lines[0]


def test_manual_placement_retries_bad_input(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    match = Match(rng_seed=0)
    _feed(
        monkeypatch,
        [
            "x", "H", "A1",  # carrier after a bad orientation
            "H", "A1",  # battleship overlaps the carrier
            "H", "B1",
            "V", "Z9",  # cruiser with a bad row
            "H", "C1",
            "H", "D1",
            "H", "E1",
        ],
    )

    cli._manual_ship_placement(match)

    out = capsys.readouterr().out
    assert "Please enter H" in out
    assert "cannot be placed" in out
    assert "Invalid coordinate" in out
    assert match.next_ship_to_place() is None
    match.start()


def test_prompt_name_enforces_length(monkeypatch: pytest.MonkeyPatch) -> None:
    _feed(monkeypatch, ["A", "Grace"])
    assert cli._prompt_name("") == "Grace"
    _feed(monkeypatch, [""])
    assert cli._prompt_name("Ada") == "Ada"


def test_prompt_name_defaults_to_player(monkeypatch: pytest.MonkeyPatch) -> None:
    prompts = _feed(monkeypatch, [""])
    assert cli._prompt_name("") == "Player"
    assert "[Player]" in prompts[0]


def test_prompt_difficulty_uses_default(monkeypatch: pytest.MonkeyPatch) -> None:
    _feed(monkeypatch, ["", "hard", "bogus"])
    assert cli._prompt_difficulty(Difficulty.EASY) is Difficulty.EASY
    assert cli._prompt_difficulty(Difficulty.EASY) is Difficulty.HARD
    assert cli._prompt_difficulty(Difficulty.EASY) is Difficulty.MEDIUM


def test_prompt_for_coordinate_skips_used_cells(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    _feed(monkeypatch, ["A1", "nope", "B2"])
    coord = cli._prompt_for_coordinate([Coordinate(1, 1)])
    assert coord == Coordinate(1, 1)
    out = capsys.readouterr().out
    assert "already been targeted" in out
    assert "Invalid input" in out


def test_quit_exits(monkeypatch: pytest.MonkeyPatch) -> None:
    _feed(monkeypatch, ["q"])
    with pytest.raises(SystemExit):
        cli._prompt_for_coordinate([Coordinate(0, 0)])


def test_scripted_game_runs_to_completion(monkeypatch: pytest.MonkeyPatch, tmp_path, capsys) -> None:
    targets = iter(
        cli.coordinate_label(Coordinate(row, col)) for row in range(10) for col in range(10)
    )

    def fake_input(prompt: str = "") -> str:
        if prompt.startswith("Your name"):
            return "Ada"
        if prompt.startswith("Difficulty"):
            return "easy"
        if "manually" in prompt:
            return "n"
        if prompt.startswith("Enter target"):
            return next(targets)
        if prompt.startswith("Rematch"):
            return "n"
        raise AssertionError(f"unexpected prompt: {prompt}")

    monkeypatch.setattr(builtins, "input", fake_input)
    board_path = tmp_path / "leaderboard.json"

    cli.play_game(GameSettings(seed=5, leaderboard_path=board_path))

    out = capsys.readouterr().out
    assert "positioned automatically" in out
    if "Congratulations" in out:
        assert json.loads(board_path.read_text())[0]["name"] == "Ada"
    else:
        assert "AI won" in out
        assert not board_path.exists()


def test_main_builds_settings_from_arguments(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, GameSettings] = {}
    calls: list[str] = []
    monkeypatch.delenv("BROADSIDE_PLAYER_NAME", raising=False)
    monkeypatch.setattr(cli, "play_game", lambda settings: captured.setdefault("s", settings))
    monkeypatch.setattr(cli, "init_telemetry", lambda: calls.append("init"))
    monkeypatch.setattr(cli, "shutdown_tracing", lambda: calls.append("shutdown"))
    monkeypatch.setattr(
        sys, "argv", ["broadside", "--seed", "3", "--difficulty", "hard", "--name", "Ada"]
    )

    cli.main()

    settings = captured["s"]
    assert settings.seed == 3
    assert settings.difficulty is Difficulty.HARD
    assert settings.player_name == "Ada"
    assert calls == ["init", "shutdown"]


def test_manual_placement_can_restart(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    match = Match(rng_seed=0)
    enemy_layout = {k: v.cells for k, v in match.ai_board.ships.items()}
    _feed(
        monkeypatch,
        [
            "V", "A1",  # carrier down column 1
            "R",  # start over; the carrier is removed
            "H", "A1",
            "H", "B1",
            "H", "C1",
            "H", "D1",
            "H", "E1",
        ],
    )

    cli._manual_ship_placement(match)

    assert "Placement restarted" in capsys.readouterr().out
    carrier = next(iter(match.player_board.ships.values()))
    assert carrier.cells[-1] == Coordinate(0, 4)
    assert {k: v.cells for k, v in match.ai_board.ships.items()} == enemy_layout
