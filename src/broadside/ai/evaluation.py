"""Benchmark the opponent tiers by how many shots they need to clear a fleet."""

from __future__ import annotations

import argparse
import json
import logging
import os
import random
from dataclasses import asdict, dataclass
from pathlib import Path

import numpy as np
from opentelemetry.instrumentation.logging import LoggingInstrumentor

from broadside.ai.opponent import AIState, Difficulty, take_turn
from broadside.engine.board import create_random_board
from broadside.engine.ship import GRID_SIZE
from broadside.telemetry import (
    TelemetryConfig,
    configure_console_logging,
    get_tracer,
    init_telemetry,
    record_distribution,
    shutdown_tracing,
)

logger = logging.getLogger(__name__)

MAX_SHOTS = GRID_SIZE * GRID_SIZE


@dataclass
class EvaluationResult:
    difficulty: str
    games: int
    mean_shots: float
    std_shots: float
    min_shots: int
    max_shots: int
    median_shots: float


def play_solo_game(
    difficulty: Difficulty, rng: random.Random, fleet_rng: random.Random | None = None
) -> int:
    """Let the opponent fire at a random fleet until it is sunk; return shots used.

    ``fleet_rng`` deals the fleet and ``rng`` drives the opponent. They default
    to the same generator.
    """
    board = create_random_board(fleet_rng or rng, owner="benchmark")
    state = AIState.initial()
    for shot in range(1, MAX_SHOTS + 1):
        move = take_turn(board, state, difficulty, rng)
        state = move.state
        if move.game_over:
            return shot
    raise RuntimeError("Fleet survived a fully shot board.")


def evaluate_difficulty(
    difficulty: Difficulty, games: int = 100, seed: int | None = None
) -> EvaluationResult:
    if games < 1:
        raise ValueError("At least one game is required.")
    tracer = get_tracer()
    fleet_rng = random.Random(seed)
    shot_rng = random.Random(None if seed is None else seed + 1)
    with tracer.start_as_current_span("evaluate_difficulty") as span:
        shots = np.array(
            [play_solo_game(difficulty, shot_rng, fleet_rng) for _ in range(games)]
        )
        for value in shots:
            record_distribution(
                "broadside_benchmark_shots_to_win", int(value), {"difficulty": difficulty.value}
            )
        result = EvaluationResult(
            difficulty=difficulty.value,
            games=games,
            mean_shots=float(np.mean(shots)),
            std_shots=float(np.std(shots)),
            min_shots=int(np.min(shots)),
            max_shots=int(np.max(shots)),
            median_shots=float(np.median(shots)),
        )
        span.set_attribute("difficulty", difficulty.value)
        span.set_attribute("games", games)
        span.set_attribute("mean_shots", result.mean_shots)
        logger.info("evaluate_difficulty", extra=asdict(result))
        return result


def compare_difficulties(games: int = 100, seed: int | None = None) -> list[EvaluationResult]:
    """Run every tier against the same sequence of fleets."""
    if seed is None:
        seed = random.randrange(2**32)
    return [evaluate_difficulty(difficulty, games, seed) for difficulty in Difficulty]


def _configure_telemetry() -> None:
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    config = TelemetryConfig.from_env(
        service_name="broadside-benchmark",
        service_namespace="tools",
        enable_tracing=bool(endpoint),
        enable_metrics=bool(endpoint),
        enable_logging=bool(endpoint),
    )
    configure_console_logging(config.log_level)
    init_telemetry(config)
    LoggingInstrumentor().instrument()


def main() -> None:
    parser = argparse.ArgumentParser(description="Compare opponent difficulty tiers")
    parser.add_argument("--games", type=int, default=200)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Optional path to write the results as JSON.",
    )
    args = parser.parse_args()

    _configure_telemetry()
    results = compare_difficulties(games=args.games, seed=args.seed)

    print(f"{'difficulty':<10} {'mean':>7} {'std':>6} {'min':>4} {'median':>7} {'max':>4}")
    for result in results:
        print(
            f"{result.difficulty:<10} {result.mean_shots:>7.1f} {result.std_shots:>6.1f} "
            f"{result.min_shots:>4} {result.median_shots:>7.1f} {result.max_shots:>4}"
        )

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps([asdict(result) for result in results], indent=2))
        print(f"Results written to {output_path}")
    shutdown_tracing()


if __name__ == "__main__":
    main()
