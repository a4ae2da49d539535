"""Instrumented match with telemetry hooks."""

from __future__ import annotations

from broadside.ai.instrumented_opponent import InstrumentedOpponent
from broadside.ai.opponent import Difficulty, Opponent
from broadside.engine.game import GamePhase, Match, TurnReport
from broadside.engine.ship import Coordinate
from broadside.telemetry import get_logger, get_tracer, record_distribution, record_game_metric


class InstrumentedMatch(Match):
    """Wraps Match with tracing, metrics, and logging."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._logger = get_logger("broadside.engine")
        self._tracer = get_tracer("broadside.engine")
        self._match_span_cm = None
        self._match_span = None
        self._match_id_counter = 0

    def _build_opponent(self, difficulty: Difficulty) -> Opponent:
        return InstrumentedOpponent(difficulty=difficulty, rng=self._rng)

    def start(self) -> None:
        with self._tracer.start_as_current_span("broadside.engine.start") as span:
            super().start()
            self._open_match_span()
            span.set_attribute("player_ships", len(self.player_board.ships))
            span.set_attribute("ai_ships", len(self.ai_board.ships))
            record_game_metric(
                "broadside_match_started_total", 1, {"difficulty": self.difficulty.value}
            )
            self._logger.info("Match started difficulty=%s", self.difficulty.value)

    def rematch(self) -> None:
        with self._tracer.start_as_current_span("broadside.engine.rematch"):
            super().rematch()
            self._open_match_span()
            record_game_metric(
                "broadside_match_started_total",
                1,
                {"difficulty": self.difficulty.value, "rematch": True},
            )

    def fire(self, coord: Coordinate) -> TurnReport:
        with self._tracer.start_as_current_span("broadside.engine.fire") as span:
            span.set_attribute("match.id", self._match_id_counter)
            span.set_attribute("coord.row", coord.row)
            span.set_attribute("coord.col", coord.col)

            try:
                report = super().fire(coord)
            except (ValueError, RuntimeError) as exc:
                record_game_metric(
                    "broadside_match_invalid_moves_total",
                    1,
                    {"reason": type(exc).__name__},
                )
                span.record_exception(exc)
                span.set_attribute("error", True)
                self._logger.error(
                    "Invalid move at (%d,%d): %s", coord.row, coord.col, exc
                )
                raise

            span.set_attribute("shot_outcome", report.result.outcome.value)
            record_game_metric("broadside_shots_total", 1, {"side": "player"})
            record_game_metric(
                "broadside_shots_by_result_total",
                1,
                {"side": "player", "result": report.result.outcome.value},
            )
            if report.ai_move is not None:
                span.set_attribute("ai_outcome", report.ai_move.result.outcome.value)
                record_game_metric(
                    "broadside_shots_by_result_total",
                    1,
                    {"side": "ai", "result": report.ai_move.result.outcome.value},
                )

            self._logger.info(
                "fire coord=(%d,%d) outcome=%s",
                coord.row,
                coord.col,
                report.result.outcome.value,
            )

            if self.phase is GamePhase.FINISHED and self.winner:
                span.set_attribute("winner", self.winner.value)
                self._finish_match()

            return report

    def _open_match_span(self) -> None:
        self._close_match_span()
        self._match_id_counter += 1
        self._match_span_cm = self._tracer.start_as_current_span("broadside.engine.match")
        self._match_span = self._match_span_cm.__enter__()
        self._match_span.set_attribute("match.id", self._match_id_counter)
        self._match_span.set_attribute("difficulty", self.difficulty.value)

    def _finish_match(self) -> None:
        summary = self.summary()
        winner = summary.winner.value
        attrs = {"winner": winner, "difficulty": summary.difficulty.value}

        record_game_metric("broadside_match_completed_total", 1, attrs)
        record_distribution("broadside_match_duration_seconds", summary.duration_seconds, attrs)
        record_distribution("broadside_match_player_shots", summary.shots_taken, attrs)

        with self._tracer.start_as_current_span("broadside.engine.match_complete") as span:
            span.set_attribute("match.id", self._match_id_counter)
            span.set_attribute("winner", winner)
            span.set_attribute("shots", summary.shots_taken)
            span.set_attribute("duration_s", summary.duration_seconds)

        if self._match_span is not None:
            self._match_span.set_attribute("winner", winner)
            self._match_span.set_attribute("shots", summary.shots_taken)
            self._match_span.set_attribute("duration_s", summary.duration_seconds)

        self._logger.info(
            "Match finished. Winner=%s shots=%d duration_s=%d",
            winner,
            summary.shots_taken,
            summary.duration_seconds,
        )
        self._close_match_span()

    def _close_match_span(self) -> None:
        if self._match_span_cm is not None:
            self._match_span_cm.__exit__(None, None, None)
            self._match_span_cm = None
            self._match_span = None
