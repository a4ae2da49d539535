"""Command-line driver for playing Battleship against the computer."""

from __future__ import annotations

import argparse
from typing import Sequence

from broadside.ai.opponent import Difficulty
from broadside.engine.board import Board, ShotOutcome, ShotResult
from broadside.engine.game import GamePhase, Match, Side
from broadside.engine.instrumented_game import InstrumentedMatch
from broadside.engine.ship import GRID_SIZE, Coordinate, ShipSpec
from broadside.leaderboard import (
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    JsonLeaderboardStore,
    Leaderboard,
    LeaderboardEntry,
)
from broadside.settings import GameSettings
from broadside.telemetry import init_telemetry, shutdown_tracing

ROW_LABELS = "ABCDEFGHIJ"


def coordinate_from_input(text: str) -> Coordinate:
    """Parse ``A5`` (row letter, 1-based column) or ``"3 7"`` (0-based row/col)."""
    cleaned = text.strip().upper()
    if not cleaned:
        raise ValueError("Empty coordinate.")
    if cleaned[0].isalpha():
        if cleaned[0] not in ROW_LABELS:
            raise ValueError("Row must be between A and J.")
        row = ROW_LABELS.index(cleaned[0])
        try:
            col = int(cleaned[1:]) - 1
        except ValueError as exc:
            raise ValueError("Column must be a number between 1 and 10.") from exc
    else:
        parts = cleaned.split()
        if len(parts) != 2:
            raise ValueError("Use formats like A5 or '3 7'.")
        try:
            row, col = map(int, parts)
        except ValueError as exc:
            raise ValueError("Use formats like A5 or '3 7'.") from exc
    coord = Coordinate(row, col)
    if not coord.in_bounds():
        raise ValueError("Coordinates must be within the 10x10 board.")
    return coord


def coordinate_label(coord: Coordinate) -> str:
    return f"{ROW_LABELS[coord.row]}{coord.col + 1}"


def format_clock(total_seconds: int) -> str:
    minutes, seconds = divmod(max(0, int(total_seconds)), 60)
    return f"{minutes:02d}:{seconds:02d}"


def format_board(board: Board, show_ships: bool) -> str:
    header = "    " + " ".join(f"{col+1:>2}" for col in range(GRID_SIZE))
    rows = [header]
    for row in range(GRID_SIZE):
        symbols = []
        for col in range(GRID_SIZE):
            cell = board.grid[row][col]
            if cell.shot:
                symbol = "X" if cell.ship_id else "o"
            else:
                symbol = "S" if show_ships and cell.ship_id else "."
            symbols.append(f"{symbol:>2}")
        rows.append(f"{ROW_LABELS[row]} |" + " ".join(symbols))
    return "\n".join(rows)


def format_fleet(board: Board) -> str:
    return "\n".join(
        f"  {row.ship_type.value:<11} ({row.size}) {row.status.value:<8} {row.hits_taken}/{row.size}"
        for row in board.fleet_status()
    )


def describe_shot(shooter: str, coord: Coordinate, result: ShotResult, board: Board) -> str:
    where = coordinate_label(coord)
    if result.outcome is ShotOutcome.MISS:
        return f"{shooter}: Miss ({where})."
    if result.outcome is ShotOutcome.HIT:
        return f"{shooter}: Hit! ({where})."
    ship_type = board.get_ship_type(result.ship_id) if result.ship_id else None
    name = ship_type.value if ship_type else "ship"
    return f"{shooter} sank the {name}! ({where})."


def _prompt_for_coordinate(valid: Sequence[Coordinate]) -> Coordinate:
    valid_set = set(valid)
    while True:
        raw = input("Enter target coordinate (e.g., A5) or 'q' to quit: ").strip()
        if raw.lower() == "q":
            raise SystemExit("Goodbye!")
        try:
            coord = coordinate_from_input(raw)
        except ValueError as exc:
            print(f"Invalid input: {exc}")
            continue
        if coord not in valid_set:
            print("That cell has already been targeted. Choose another.")
            continue
        return coord


def _prompt_orientation(spec: ShipSpec) -> bool | None:
    """Return True for horizontal, False for vertical, None to restart placement."""
    while True:
        raw = (
            input(
                f"Place your {spec.ship_type.value} (length {spec.size}). "
                "Orientation [H/V, R to restart]: "
            )
            .strip()
            .upper()
        )
        if raw in {"H", "HOR", "HORIZONTAL"}:
            return True
        if raw in {"V", "VER", "VERTICAL"}:
            return False
        if raw in {"R", "RESTART"}:
            return None
        print("Please enter H for horizontal, V for vertical or R to restart.")


def _manual_ship_placement(match: Match) -> None:
    while True:
        spec = match.next_ship_to_place()
        if spec is None:
            return
        print("\nCurrent layout:")
        print(format_board(match.player_board, show_ships=True))
        horizontal = _prompt_orientation(spec)
        if horizontal is None:
            match.restart_placement()
            print("Placement restarted.")
            continue
        start_raw = input("Enter starting coordinate (e.g., A1): ")
        try:
            start = coordinate_from_input(start_raw)
        except ValueError as exc:
            print(f"Invalid coordinate: {exc}")
            continue
        if not match.place_next_ship(start, horizontal):
            print("Ship cannot be placed there (out of bounds or overlaps). Try again.")


def _prompt_yes_no(question: str, default: bool = True) -> bool:
    suffix = "[Y/n]" if default else "[y/N]"
    while True:
        raw = input(f"{question} {suffix}: ").strip().lower()
        if raw == "":
            return default
        if raw in {"y", "yes"}:
            return True
        if raw in {"n", "no"}:
            return False
        print("Please answer with 'y' or 'n'.")


def _prompt_name(default: str) -> str:
    while True:
        fallback = default or "Player"
        raw = input(f"Your name [{fallback}]: ").strip() or fallback
        if NAME_MIN_LENGTH <= len(raw) <= NAME_MAX_LENGTH:
            return raw
        print(f"Name must be {NAME_MIN_LENGTH}-{NAME_MAX_LENGTH} characters.")


def _prompt_difficulty(default: Difficulty) -> Difficulty:
    raw = input(f"Difficulty easy/medium/hard [{default.value}]: ").strip()
    return Difficulty.parse(raw) if raw else default


def _play_battle(match: Match, player_name: str) -> None:
    while match.phase is GamePhase.BATTLE:
        print("\nYour Board:")
        print(format_board(match.player_board, show_ships=True))
        print(format_fleet(match.player_board))
        print("\nEnemy Waters:")
        print(format_board(match.ai_board, show_ships=False))
        print(format_fleet(match.ai_board))
        print(f"Shots: {match.shots_taken} • Time: {format_clock(match.elapsed_seconds())}")

        coord = _prompt_for_coordinate(match.valid_moves())
        report = match.fire(coord)
        print(describe_shot(player_name, coord, report.result, match.ai_board))
        if report.ai_move is not None:
            move = report.ai_move
            print(describe_shot("AI", move.coord, move.result, match.player_board))


def _record_score(settings: GameSettings, player_name: str, match: Match) -> None:
    if settings.leaderboard_path is None:
        return
    leaderboard = Leaderboard(JsonLeaderboardStore(settings.leaderboard_path))
    entry = LeaderboardEntry.from_summary(player_name, match.summary())
    ranked = leaderboard.add_score(entry)
    print("\nLeaderboard:")
    for place, row in enumerate(ranked, start=1):
        print(
            f"{place:>3}. {row.name:<20} {row.shots_taken:>4} shots "
            f"{format_clock(row.duration_seconds)} {row.difficulty.value}"
        )


def play_game(settings: GameSettings) -> None:
    print("Welcome to Battleship!\n")
    player_name = _prompt_name(settings.player_name)
    difficulty = _prompt_difficulty(settings.difficulty)
    match = InstrumentedMatch(difficulty=difficulty, rng_seed=settings.seed)

    if _prompt_yes_no("Would you like to place your ships manually?"):
        _manual_ship_placement(match)
    else:
        match.randomize_player_fleet()
        print("\nYour ships have been positioned automatically.")
    match.start()

    while True:
        _play_battle(match, player_name)
        summary = match.summary()
        if summary.winner is Side.PLAYER:
            print("\nCongratulations, you won!")
        else:
            print("\nThe AI won this time. Better luck next battle!")
        print(f"Shots: {summary.shots_taken} • Time: {format_clock(summary.duration_seconds)}")
        if summary.winner is Side.PLAYER:
            _record_score(settings, player_name, match)
        if not _prompt_yes_no("Rematch with the same fleet layout?", default=False):
            break
        match.rematch()


def main() -> None:
    parser = argparse.ArgumentParser(description="Play Battleship via the CLI.")
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for reproducibility."
    )
    parser.add_argument(
        "--difficulty",
        choices=[difficulty.value for difficulty in Difficulty],
        default=None,
        help="Opponent difficulty (defaults to BROADSIDE_DIFFICULTY or medium).",
    )
    parser.add_argument("--name", default=None, help="Player name for the leaderboard.")
    args = parser.parse_args()

    settings = GameSettings.from_env(
        seed=args.seed, difficulty=args.difficulty, player_name=args.name
    )
    init_telemetry()
    try:
        play_game(settings)
    finally:
        shutdown_tracing()


if __name__ == "__main__":
    main()
