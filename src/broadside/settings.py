"""Player-facing runtime settings."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, field_validator

from broadside.ai.opponent import Difficulty

DEFAULT_LEADERBOARD_PATH = Path.home() / ".broadside" / "leaderboard.json"


class GameSettings(BaseModel):
    """Defaults for a terminal session, overridable via `BROADSIDE_*`."""

    player_name: str = ""
    difficulty: Difficulty = Difficulty.MEDIUM
    seed: int | None = None
    leaderboard_path: Path | None = DEFAULT_LEADERBOARD_PATH

    @field_validator("difficulty", mode="before")
    @classmethod
    def _lenient_difficulty(cls, value: Any) -> Difficulty:
        if isinstance(value, Difficulty):
            return value
        return Difficulty.parse(str(value))

    @field_validator("player_name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> str:
        return str(value or "").strip()

    @classmethod
    def from_env(cls, **overrides: Any) -> GameSettings:
        data: dict[str, Any] = {}
        if os.getenv("BROADSIDE_PLAYER_NAME") is not None:
            data["player_name"] = os.environ["BROADSIDE_PLAYER_NAME"]
        if os.getenv("BROADSIDE_DIFFICULTY") is not None:
            data["difficulty"] = os.environ["BROADSIDE_DIFFICULTY"]
        seed = os.getenv("BROADSIDE_SEED")
        if seed:
            data["seed"] = int(seed)
        board_path = os.getenv("BROADSIDE_LEADERBOARD")
        if board_path is not None:
            # An empty value disables the leaderboard.
            data["leaderboard_path"] = Path(board_path).expanduser() if board_path else None
        data.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**data)
