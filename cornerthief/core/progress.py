from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class Progress:
    unlocked_up_to: int = 1
    stars_by_level: Dict[int, int] = field(default_factory=dict)


def default_progress_path() -> Path:
    home = os.environ.get("CORNERTHIEF_HOME")
    base = Path(home) if home else Path.home() / ".cornerthief"
    return base / "progress.json"


class ProgressStore:
    """Stores the unlock frontier and best stars per level. Persists to disk across app restarts.
    File: ~/.cornerthief/progress.json unless CORNERTHIEF_HOME points elsewhere."""

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = file_path or default_progress_path()
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._progress = self._load()

    def load(self) -> Progress:
        """Return a copy of the current progress."""
        return Progress(
            unlocked_up_to=self._progress.unlocked_up_to,
            stars_by_level=dict(self._progress.stars_by_level),
        )

    def save(self, progress: Optional[Progress] = None) -> None:
        """Persist ``progress`` (or the current state) to disk."""
        if progress is not None:
            self._progress = Progress(
                unlocked_up_to=max(1, progress.unlocked_up_to),
                stars_by_level=dict(progress.stars_by_level),
            )
        self._save()

    def stars_for(self, level_index: int) -> int:
        return self._progress.stars_by_level.get(level_index, 0)

    def is_unlocked(self, level_index: int) -> bool:
        return level_index <= self._progress.unlocked_up_to

    def record_win(self, level_index: int, stars: int, last_index: int) -> Progress:
        """Merge a won level: keep the best stars and open the next level if this was the frontier."""
        current = self._progress
        if stars > current.stars_by_level.get(level_index, 0):
            current.stars_by_level[level_index] = stars
        if level_index >= current.unlocked_up_to and level_index < last_index:
            current.unlocked_up_to = level_index + 1
            logger.info("Unlocked level %d", current.unlocked_up_to)
        self._save()
        return self.load()

    def reset(self) -> None:
        """Clear all progress."""
        self._progress = Progress()
        self._save()

    def _load(self) -> Progress:
        progress = Progress()
        if not self._file_path.exists():
            return progress
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load progress from %s: %s", self._file_path, e)
            return progress
        if not isinstance(payload, dict):
            logger.warning("Ignoring malformed progress file %s", self._file_path)
            return progress

        try:
            progress.unlocked_up_to = max(1, int(payload.get("unlocked", 1)))
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid unlock frontier in %s", self._file_path)
        stars = payload.get("stars", {})
        if isinstance(stars, dict):
            for key, value in stars.items():
                try:
                    progress.stars_by_level[int(key)] = max(0, min(3, int(value)))
                except (TypeError, ValueError):
                    logger.warning("Ignoring invalid stars entry %r in %s", key, self._file_path)
        return progress

    def _save(self) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "unlocked": self._progress.unlocked_up_to,
            "stars": {str(key): value for key, value in sorted(self._progress.stars_by_level.items())},
        }
        try:
            self._file_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save progress to %s: %s", self._file_path, e)
