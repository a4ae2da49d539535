"""Human-versus-computer match controller."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from broadside.ai.opponent import AIMove, AIState, Difficulty, Opponent
from broadside.telemetry import get_meter, get_tracer

from .board import Board, ShotResult, create_empty_board, create_random_board
from .ship import FLEET, Coordinate, ShipSpec

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.engine.game")
meter = get_meter("broadside.engine.game")

MOVE_COUNTER = meter.create_counter(
    "broadside_engine_moves",
    unit="1",
    description="Number of shots fired by either side in a Match",
)


class GamePhase(Enum):
    """High-level lifecycle of a match."""

    SETUP = "setup"
    BATTLE = "battle"
    FINISHED = "finished"


class Side(Enum):
    PLAYER = "player"
    AI = "ai"


@dataclass(frozen=True)
class TurnReport:
    """What happened during one call to ``Match.fire``."""

    coord: Coordinate
    result: ShotResult
    ai_move: AIMove | None
    winner: Side | None


@dataclass(frozen=True)
class MatchSummary:
    """Final numbers handed to scoring; contains no board internals."""

    winner: Side
    shots_taken: int
    duration_seconds: int
    difficulty: Difficulty


class Match:
    """Sequences the human's shots and the opponent's replies."""

    def __init__(
        self,
        difficulty: Difficulty = Difficulty.MEDIUM,
        rng_seed: int | None = None,
        clock: Callable[[], float] = time.monotonic,
        opponent: Opponent | None = None,
    ) -> None:
        self._rng = random.Random(rng_seed)
        self._clock = clock
        self.opponent = opponent or self._build_opponent(difficulty)
        self.player_board: Board = create_empty_board(owner=Side.PLAYER.value)
        self.ai_board: Board = create_random_board(self._rng, owner=Side.AI.value)
        self.ai_state = AIState.initial()
        self.phase = GamePhase.SETUP
        self.winner: Side | None = None
        self.shots_taken = 0
        self.started_at: float | None = None
        self.ended_at: float | None = None

    def _build_opponent(self, difficulty: Difficulty) -> Opponent:
        return Opponent(difficulty=difficulty, rng=self._rng)

    @property
    def difficulty(self) -> Difficulty:
        return self.opponent.difficulty

    def set_difficulty(self, difficulty: Difficulty) -> None:
        self.opponent.difficulty = difficulty
        self.ai_state = AIState.initial()

    def next_ship_to_place(self) -> ShipSpec | None:
        """Return the next catalog entry the human still has to place."""
        placed = {ship.ship_type for ship in self.player_board.ships.values()}
        for spec in FLEET:
            if spec.ship_type not in placed:
                return spec
        return None

    def place_next_ship(self, start: Coordinate, horizontal: bool) -> bool:
        self._require_phase(GamePhase.SETUP)
        spec = self.next_ship_to_place()
        if spec is None:
            return False
        ship_id = self.player_board.place_ship_at(spec.ship_type, start, spec.size, horizontal)
        return ship_id is not None

    def restart_placement(self) -> None:
        """Discard the human's placed ships; the dealt enemy fleet stays."""
        self._require_phase(GamePhase.SETUP)
        self.player_board = create_empty_board(owner=Side.PLAYER.value)
        logger.info("placement_restarted", extra={"difficulty": self.difficulty.value})

    def randomize_player_fleet(self) -> None:
        self._require_phase(GamePhase.SETUP)
        self.player_board.random_placement(self._rng)

    def start(self) -> None:
        """Leave setup once the human's whole fleet is placed."""
        with tracer.start_as_current_span("game.start"):
            self._require_phase(GamePhase.SETUP)
            if self.next_ship_to_place() is not None:
                logger.error(
                    "start_rejected_fleet_incomplete",
                    extra={"placed": len(self.player_board.ships)},
                )
                raise RuntimeError("All ships must be placed before the battle starts.")
            self._begin_battle()

    def fire(self, coord: Coordinate) -> TurnReport:
        """Apply the human's shot and, unless it wins, the opponent's reply."""
        with tracer.start_as_current_span("game.fire") as span:
            span.set_attribute("row", coord.row)
            span.set_attribute("col", coord.col)
            self._require_phase(GamePhase.BATTLE)
            if not self.ai_board.is_valid_coordinate(coord) or self.ai_board.has_already_shot(
                coord
            ):
                logger.error(
                    "move_rejected_invalid_target", extra={"row": coord.row, "col": coord.col}
                )
                raise ValueError("Target is off the board or has already been fired at.")

            self.shots_taken += 1
            result = self.ai_board.apply_shot(coord)
            MOVE_COUNTER.add(1, attributes={"result": result.outcome.value, "side": "player"})
            if self.ai_board.all_ships_sunk():
                self._finish(Side.PLAYER)
                span.set_attribute("game.winner", Side.PLAYER.value)
                return TurnReport(coord, result, None, Side.PLAYER)

            move = self.opponent.take_turn(self.player_board, self.ai_state)
            self.ai_state = move.state
            MOVE_COUNTER.add(1, attributes={"result": move.result.outcome.value, "side": "ai"})
            if move.game_over:
                self._finish(Side.AI)
                span.set_attribute("game.winner", Side.AI.value)
            return TurnReport(coord, result, move, self.winner)

    def valid_moves(self) -> list[Coordinate]:
        """Return all coordinates the human can legally target."""
        if self.phase is not GamePhase.BATTLE:
            return []
        return self.ai_board.unshot_coordinates()

    def elapsed_seconds(self) -> int:
        if self.started_at is None:
            return 0
        end = self.ended_at if self.ended_at is not None else self._clock()
        return max(0, round(end - self.started_at))

    def summary(self) -> MatchSummary:
        if self.phase is not GamePhase.FINISHED or self.winner is None:
            raise RuntimeError("Match has not finished.")
        return MatchSummary(
            winner=self.winner,
            shots_taken=self.shots_taken,
            duration_seconds=self.elapsed_seconds(),
            difficulty=self.difficulty,
        )

    def rematch(self) -> None:
        """Replay with the same human layout against a freshly dealt enemy fleet."""
        if self.next_ship_to_place() is not None:
            raise RuntimeError("A rematch needs a complete fleet.")
        self.player_board = self.player_board.reset_for_rematch()
        self.ai_board = create_random_board(self._rng, owner=Side.AI.value)
        self._begin_battle()
        logger.info("match_rematch", extra={"difficulty": self.difficulty.value})

    def new_game(self) -> None:
        self.player_board = create_empty_board(owner=Side.PLAYER.value)
        self.ai_board = create_random_board(self._rng, owner=Side.AI.value)
        self.ai_state = AIState.initial()
        self.phase = GamePhase.SETUP
        self.winner = None
        self.shots_taken = 0
        self.started_at = None
        self.ended_at = None

    def _begin_battle(self) -> None:
        self.ai_state = AIState.initial()
        self.phase = GamePhase.BATTLE
        self.winner = None
        self.shots_taken = 0
        self.started_at = self._clock()
        self.ended_at = None
        logger.info(
            "match_started",
            extra={"phase": self.phase.value, "difficulty": self.difficulty.value},
        )

    def _finish(self, winner: Side) -> None:
        self.winner = winner
        self.phase = GamePhase.FINISHED
        self.ended_at = self._clock()
        logger.info(
            "match_finished",
            extra={
                "winner": winner.value,
                "shots_taken": self.shots_taken,
                "duration_seconds": self.elapsed_seconds(),
            },
        )

    def _require_phase(self, phase: GamePhase) -> None:
        if self.phase is not phase:
            logger.error(
                "move_rejected_wrong_phase",
                extra={"expected": phase.value, "phase": self.phase.value},
            )
            raise RuntimeError(f"Match is not in the {phase.value} phase.")
