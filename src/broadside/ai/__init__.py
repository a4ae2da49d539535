"""AI package exports."""

from .opponent import (
    AIMove,
    AIState,
    Difficulty,
    Opponent,
    hard_targets_from_hits,
    rebuild_targets_from_hits,
    take_turn,
)

__all__ = [
    "AIMove",
    "AIState",
    "Difficulty",
    "Opponent",
    "hard_targets_from_hits",
    "rebuild_targets_from_hits",
    "take_turn",
]
