"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from cornerthief.core.levels import Level
from cornerthief.core.progress import ProgressStore


@dataclass
class LevelState:
    """UI state for a single level: best stars, unlock status, and selection."""

    level: Level
    unlocked: bool
    stars: int
    is_current: bool = False


def build_level_states(levels: List[Level], store: ProgressStore, unlock_all: bool = False) -> List[LevelState]:
    """Compute unlock/star state for every level and mark the first unlocked, unstarred one."""
    states = [
        LevelState(
            level=level,
            unlocked=unlock_all or store.is_unlocked(level.index),
            stars=store.stars_for(level.index),
        )
        for level in levels
    ]
    for state in states:
        if state.unlocked and state.stars == 0:
            state.is_current = True
            break
    return states
