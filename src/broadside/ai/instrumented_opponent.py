"""Instrumented opponent emitting OpenTelemetry data."""

from __future__ import annotations

import time
from dataclasses import dataclass

from broadside.ai.opponent import AIMove, AIState, Opponent
from broadside.engine.board import Board
from broadside.telemetry import get_logger, get_tracer, record_distribution, record_game_metric


@dataclass
class InstrumentedOpponent(Opponent):
    """Opponent subclass that wraps each turn with traces/metrics/logging."""

    def __post_init__(self) -> None:
        self._logger = get_logger("broadside.opponent")
        self._tracer = get_tracer("broadside.opponent")

    def take_turn(self, board: Board, state: AIState) -> AIMove:
        start = time.perf_counter()
        with self._tracer.start_as_current_span("broadside.opponent.take_turn") as span:
            span.set_attribute("difficulty", self.difficulty.value)
            span.set_attribute("pending_before", len(state.pending_targets))
            span.set_attribute("tracked_hits_before", len(state.current_ship_hit_cells))

            move = super().take_turn(board, state)

            duration_ms = (time.perf_counter() - start) * 1000
            attrs = {"difficulty": self.difficulty.value, "outcome": move.result.outcome.value}
            record_game_metric("broadside_opponent_shots_total", 1, attrs)
            record_distribution(
                "broadside_opponent_turn_latency_ms",
                duration_ms,
                {"difficulty": self.difficulty.value},
            )
            span.set_attribute("coord.row", move.coord.row)
            span.set_attribute("coord.col", move.coord.col)
            span.set_attribute("outcome", move.result.outcome.value)
            span.set_attribute("pending_after", len(move.state.pending_targets))
            span.set_attribute("game_over", move.game_over)
            self._logger.info(
                "take_turn difficulty=%s coord=(%d,%d) outcome=%s pending=%d",
                self.difficulty.value,
                move.coord.row,
                move.coord.col,
                move.result.outcome.value,
                len(move.state.pending_targets),
            )
            return move
