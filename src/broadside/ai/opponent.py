"""Computer opponent: picks and fires one shot per turn at the human's board.

Three tiers are supported:

* ``easy`` fires at a uniformly random unshot cell and remembers nothing.
* ``medium`` is classic hunt/target. Hits push their orthogonal neighbours onto
  the front of a queue, so probing follows the most recent hit.
* ``hard`` recomputes its candidates every turn by fitting a line through the
  hits recorded for the ship being hunted.

``take_turn`` is pure with respect to the targeting state: the ``AIState``
passed in is never modified, and callers adopt the state returned in the
``AIMove``. The only side effect is the shot applied to ``board``.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum

from broadside.engine.board import Board, ShotOutcome, ShotResult
from broadside.engine.ship import Coordinate

logger = logging.getLogger(__name__)


class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: str | None) -> Difficulty:
        """Read a stored difficulty, falling back to medium."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.MEDIUM


@dataclass(frozen=True)
class AIState:
    """Targeting memory carried between turns."""

    pending_targets: tuple[Coordinate, ...] = ()
    current_ship_hit_cells: tuple[Coordinate, ...] = ()

    @classmethod
    def initial(cls) -> AIState:
        return cls()


@dataclass(frozen=True)
class AIMove:
    coord: Coordinate
    result: ShotResult
    state: AIState
    game_over: bool


def _unique(coords: list[Coordinate]) -> list[Coordinate]:
    return list(dict.fromkeys(coords))


def _open_neighbours(board: Board, coord: Coordinate) -> list[Coordinate]:
    return [
        n
        for n in coord.neighbours()
        if board.is_valid_coordinate(n) and not board.has_already_shot(n)
    ]


def rebuild_targets_from_hits(board: Board, hits: list[Coordinate]) -> list[Coordinate]:
    """Collect the open neighbours of every hit, first-seen order."""
    targets: list[Coordinate] = []
    for hit in hits:
        targets.extend(_open_neighbours(board, hit))
    return _unique(targets)


def hard_targets_from_hits(board: Board, hits: list[Coordinate]) -> list[Coordinate]:
    """Candidates for the hard tier, derived from the hunted ship's hits.

    Two or more hits on one row (or column) produce every unshot cell of the
    span plus one cell beyond each end. Hits that share neither fall back to
    neighbour rebuilding.
    """
    hits = [hit for hit in hits if board.is_valid_coordinate(hit)]
    if not hits:
        return []
    if len(hits) == 1:
        return _unique(_open_neighbours(board, hits[0]))

    same_row = all(hit.row == hits[0].row for hit in hits)
    same_col = all(hit.col == hits[0].col for hit in hits)
    if not same_row and not same_col:
        return rebuild_targets_from_hits(board, hits)

    if same_row:
        row = hits[0].row
        low = min(hit.col for hit in hits)
        high = max(hit.col for hit in hits)
        span = [Coordinate(row, col) for col in range(low, high + 1)]
        ends = [Coordinate(row, low - 1), Coordinate(row, high + 1)]
    else:
        col = hits[0].col
        low = min(hit.row for hit in hits)
        high = max(hit.row for hit in hits)
        span = [Coordinate(row, col) for row in range(low, high + 1)]
        ends = [Coordinate(low - 1, col), Coordinate(high + 1, col)]

    candidates = [coord for coord in span if not board.has_already_shot(coord)]
    candidates.extend(
        coord
        for coord in ends
        if board.is_valid_coordinate(coord) and not board.has_already_shot(coord)
    )
    return _unique(candidates)


def choose_random_unshot(board: Board, rng: random.Random) -> Coordinate:
    choices = board.unshot_coordinates()
    if not choices:
        logger.error("no_remaining_moves", extra={"owner": board.owner})
        raise RuntimeError("No remaining moves")
    return choices[int(rng.random() * len(choices))]


def take_turn(
    board: Board,
    state: AIState,
    difficulty: Difficulty = Difficulty.MEDIUM,
    rng: random.Random | None = None,
) -> AIMove:
    """Choose a coordinate, fire it at ``board`` and return the new state."""
    rng = rng or random.Random()
    pending = list(state.pending_targets)
    hit_cells = list(state.current_ship_hit_cells)

    if difficulty is Difficulty.EASY:
        pending, hit_cells = [], []
    elif difficulty is Difficulty.HARD:
        pending = hard_targets_from_hits(board, hit_cells)

    coord: Coordinate | None = None
    while pending:
        candidate = pending.pop(0)
        if not board.is_valid_coordinate(candidate) or board.has_already_shot(candidate):
            continue
        coord = candidate
        break
    from_queue = coord is not None
    if coord is None:
        coord = choose_random_unshot(board, rng)

    result = board.apply_shot(coord)

    if difficulty is Difficulty.EASY:
        pending, hit_cells = [], []
    elif difficulty is Difficulty.MEDIUM:
        if result.outcome is ShotOutcome.HIT:
            if coord not in hit_cells:
                hit_cells.append(coord)
            for neighbour in _open_neighbours(board, coord):
                if neighbour not in pending:
                    pending.insert(0, neighbour)
        elif result.outcome is ShotOutcome.SUNK and result.ship_id is not None:
            # Only one ship is tracked at a time; sinking drops every tracked hit.
            hit_cells = []
            pending = [
                cell
                for cell in board.get_ship_cells(result.ship_id)
                if not board.has_already_shot(cell)
            ]
    else:
        if result.outcome is ShotOutcome.HIT:
            if coord not in hit_cells:
                hit_cells.append(coord)
            pending = hard_targets_from_hits(board, hit_cells)
        elif result.outcome is ShotOutcome.SUNK:
            pending, hit_cells = [], []

    logger.debug(
        "opponent_turn",
        extra={
            "difficulty": difficulty.value,
            "row": coord.row,
            "col": coord.col,
            "outcome": result.outcome.value,
            "from_queue": from_queue,
            "pending": len(pending),
        },
    )
    return AIMove(
        coord=coord,
        result=result,
        state=AIState(tuple(pending), tuple(hit_cells)),
        game_over=board.all_ships_sunk(),
    )


@dataclass
class Opponent:
    """Binds a difficulty and randomness source; holds no targeting state."""

    difficulty: Difficulty = Difficulty.MEDIUM
    rng: random.Random = field(default_factory=random.Random)

    def take_turn(self, board: Board, state: AIState) -> AIMove:
        return take_turn(board, state, self.difficulty, self.rng)
