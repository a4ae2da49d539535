"""Best-score table fed by finished matches.

Only the shot count and the duration of a won match reach this module. Entries
rank by fewest shots, then shortest time, then most recent, and only the top
``MAX_ENTRIES`` survive.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Protocol

from pydantic import BaseModel, Field, ValidationError, field_validator

from broadside.ai.opponent import Difficulty
from broadside.engine.game import MatchSummary, Side

logger = logging.getLogger(__name__)

MAX_ENTRIES = 10
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 20


class LeaderboardEntry(BaseModel):
    name: str
    shots_taken: int = Field(ge=0)
    duration_seconds: int = Field(ge=0)
    date_iso: str
    difficulty: Difficulty = Difficulty.MEDIUM

    @field_validator("name", mode="before")
    @classmethod
    def _valid_name(cls, value: Any) -> str:
        name = str(value).strip()
        if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
            raise ValueError(
                f"Name must be {NAME_MIN_LENGTH}-{NAME_MAX_LENGTH} characters."
            )
        return name

    @field_validator("difficulty", mode="before")
    @classmethod
    def _lenient_difficulty(cls, value: Any) -> Difficulty:
        if isinstance(value, Difficulty):
            return value
        return Difficulty.parse(None if value is None else str(value))

    @classmethod
    def from_summary(
        cls, name: str, summary: MatchSummary, when: datetime | None = None
    ) -> LeaderboardEntry:
        """Build an entry for a match the human won."""
        if summary.winner is not Side.PLAYER:
            raise ValueError("Only won matches are recorded.")
        when = when or datetime.now(timezone.utc)
        return cls(
            name=name,
            shots_taken=summary.shots_taken,
            duration_seconds=summary.duration_seconds,
            date_iso=when.isoformat(),
            difficulty=summary.difficulty,
        )


def rank_entries(entries: Iterable[LeaderboardEntry]) -> list[LeaderboardEntry]:
    """Sort best first and keep the top ``MAX_ENTRIES``."""
    newest_first = sorted(entries, key=lambda entry: entry.date_iso, reverse=True)
    ranked = sorted(newest_first, key=lambda entry: (entry.shots_taken, entry.duration_seconds))
    return ranked[:MAX_ENTRIES]


class LeaderboardStore(Protocol):
    def load(self) -> list[LeaderboardEntry]: ...

    def save(self, entries: list[LeaderboardEntry]) -> None: ...

    def clear(self) -> None: ...


class InMemoryLeaderboardStore:
    def __init__(self, entries: Iterable[LeaderboardEntry] = ()) -> None:
        self._entries = list(entries)

    def load(self) -> list[LeaderboardEntry]:
        return list(self._entries)

    def save(self, entries: list[LeaderboardEntry]) -> None:
        self._entries = list(entries)

    def clear(self) -> None:
        self._entries = []


class JsonLeaderboardStore:
    """Keeps the table in a JSON file; unreadable content loads as empty."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> list[LeaderboardEntry]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(
                "leaderboard_unreadable", extra={"path": str(self.path), "error": str(exc)}
            )
            return []
        if not isinstance(raw, list):
            logger.warning("leaderboard_malformed", extra={"path": str(self.path)})
            return []

        entries: list[LeaderboardEntry] = []
        for item in raw:
            if not isinstance(item, dict):
                continue
            try:
                entries.append(LeaderboardEntry.model_validate(item))
            except ValidationError:
                logger.debug("leaderboard_entry_skipped", extra={"entry": item})
        return entries

    def save(self, entries: list[LeaderboardEntry]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [entry.model_dump(mode="json") for entry in entries]
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class Leaderboard:
    """Ranking logic on top of a storage backend."""

    def __init__(self, store: LeaderboardStore | None = None) -> None:
        self.store: LeaderboardStore = store or InMemoryLeaderboardStore()

    def add_score(self, entry: LeaderboardEntry) -> list[LeaderboardEntry]:
        ranked = rank_entries([*self.store.load(), entry])
        self.store.save(ranked)
        logger.info(
            "leaderboard_score_added",
            extra={
                "player_name": entry.name,
                "shots_taken": entry.shots_taken,
                "duration_seconds": entry.duration_seconds,
                "kept": entry in ranked,
            },
        )
        return ranked

    def top(
        self, difficulty: Difficulty | None = None, limit: int = MAX_ENTRIES
    ) -> list[LeaderboardEntry]:
        entries = rank_entries(self.store.load())
        if difficulty is not None:
            entries = [entry for entry in entries if entry.difficulty is difficulty]
        return entries[:limit]

    def clear(self) -> None:
        self.store.clear()
