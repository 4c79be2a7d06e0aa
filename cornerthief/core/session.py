from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

from cornerthief.core.graph import Graph
from cornerthief.core.levels import Level
from cornerthief.core.policy import legal_thief_moves, select_move

logger = logging.getLogger(__name__)


class GameState(Enum):
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"


class WinReason(Enum):
    CAPTURED = "captured"
    CONTAINED = "contained"


class LossReason(Enum):
    ESCAPED = "escaped"
    STEPS_EXHAUSTED = "steps_exhausted"


class Rejection(Enum):
    NOT_PLAYING = "not_playing"
    UNKNOWN_UNIT = "unknown_unit"
    NOT_ADJACENT = "not_adjacent"
    OCCUPIED = "occupied"


@dataclass(frozen=True)
class StartResult:
    started: bool
    problems: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MoveResult:
    """Outcome of a single police move request.

    For accepted moves ``thief_from``/``thief_to`` describe the thief's reply;
    ``thief_to`` is ``None`` when the thief did not move.
    """

    accepted: bool
    rejection: Optional[Rejection] = None
    thief_from: Optional[int] = None
    thief_to: Optional[int] = None


@dataclass(frozen=True)
class LevelResult:
    """What the progress store needs to know about a won level."""

    level_index: int
    stars: int


@dataclass(frozen=True)
class Snapshot:
    level_index: int
    police: Tuple[int, ...]
    thief: int
    exits: FrozenSet[int]
    steps: int
    step_limit: int
    state: GameState
    win_reason: Optional[WinReason] = None
    loss_reason: Optional[LossReason] = None
    stars: int = 0

    @property
    def steps_remaining(self) -> int:
        return max(0, self.step_limit - self.steps)


def star_rating(steps: int, optimal: int) -> int:
    """3 stars at or under ``optimal``, 2 within two extra steps, otherwise 1."""
    if steps <= optimal:
        return 3
    if steps <= optimal + 2:
        return 2
    return 1


class PursuitSession:
    """Turn-based state machine for one attempt at a level.

    Every police move is resolved synchronously, including the thief's
    reply, before ``attempt_move`` returns. Callers must not re-enter it.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        self._level: Optional[Level] = None
        self._graph: Optional[Graph] = None
        self._exits: FrozenSet[int] = frozenset()
        self._police: List[int] = []
        self._thief = -1
        self._steps = 0
        self._state: Optional[GameState] = None
        self._win_reason: Optional[WinReason] = None
        self._loss_reason: Optional[LossReason] = None
        self._stars = 0

    @property
    def level(self) -> Optional[Level]:
        return self._level

    @property
    def graph(self) -> Optional[Graph]:
        return self._graph

    @property
    def state(self) -> Optional[GameState]:
        """Current state, or ``None`` before any level has been started."""
        return self._state

    def start(self, level: Level) -> StartResult:
        problems = level.problems()
        if problems:
            logger.warning("Level %s rejected: %s", level.index, "; ".join(problems))
            return StartResult(started=False, problems=tuple(problems))

        self._level = level
        self._graph = Graph(level.node_count, level.edges)
        self._exits = frozenset(level.exits)
        self._police = list(level.police)
        self._thief = level.thief
        self._steps = 0
        self._state = GameState.PLAYING
        self._win_reason = None
        self._loss_reason = None
        self._stars = 0
        logger.info("Level %d '%s' started (%s thief)", level.index, level.name, level.tier.label)
        return StartResult(started=True)

    def restart(self) -> StartResult:
        if self._level is None:
            return StartResult(started=False, problems=("no level loaded",))
        return self.start(self._level)

    def unit_at(self, node: int) -> Optional[int]:
        try:
            return self._police.index(node)
        except ValueError:
            return None

    def legal_targets(self, unit: int) -> FrozenSet[int]:
        """Nodes police ``unit`` may move to; includes the thief's node (capture)."""
        if self._state is not GameState.PLAYING or not 0 <= unit < len(self._police):
            return frozenset()
        others = {pos for i, pos in enumerate(self._police) if i != unit}
        return frozenset(n for n in self._graph.neighbors(self._police[unit]) if n not in others)

    def thief_moves(self) -> FrozenSet[int]:
        if self._graph is None:
            return frozenset()
        return frozenset(legal_thief_moves(self._graph, self._thief, self._police))

    def attempt_move(self, unit: int, target: int) -> MoveResult:
        rejection = self._check_move(unit, target)
        if rejection is not None:
            logger.debug("Move of unit %s to %s rejected: %s", unit, target, rejection.value)
            return MoveResult(accepted=False, rejection=rejection)

        self._police[unit] = target
        self._steps += 1
        logger.debug("Unit %d moved to %d (step %d)", unit, target, self._steps)

        if target == self._thief:
            self._win(WinReason.CAPTURED)
            return MoveResult(accepted=True)

        if not self.thief_moves():
            self._win(WinReason.CONTAINED)
            return MoveResult(accepted=True)

        thief_from = self._thief
        reply = select_move(
            self._graph, self._thief, self._police, self._exits, self._level.tier, self._rng
        )
        if reply is None:
            self._win(WinReason.CONTAINED)
            return MoveResult(accepted=True)

        self._thief = reply
        logger.debug("Thief moved %d -> %d", thief_from, reply)
        result = MoveResult(accepted=True, thief_from=thief_from, thief_to=reply)

        if reply in self._exits:
            self._lose(LossReason.ESCAPED)
        elif not self.thief_moves():
            self._win(WinReason.CONTAINED)
        elif self._steps >= self._level.step_limit:
            self._lose(LossReason.STEPS_EXHAUSTED)
        return result

    def snapshot(self) -> Optional[Snapshot]:
        """Read-only view of the attempt; ``None`` before any level has started."""
        if self._level is None:
            return None
        return Snapshot(
            level_index=self._level.index,
            police=tuple(self._police),
            thief=self._thief,
            exits=self._exits,
            steps=self._steps,
            step_limit=self._level.step_limit,
            state=self._state,
            win_reason=self._win_reason,
            loss_reason=self._loss_reason,
            stars=self._stars,
        )

    def result(self) -> Optional[LevelResult]:
        if self._state is not GameState.WON:
            return None
        return LevelResult(level_index=self._level.index, stars=self._stars)

    def _check_move(self, unit: int, target: int) -> Optional[Rejection]:
        if self._state is not GameState.PLAYING:
            return Rejection.NOT_PLAYING
        if not 0 <= unit < len(self._police):
            return Rejection.UNKNOWN_UNIT
        if target not in self._graph.neighbors(self._police[unit]):
            return Rejection.NOT_ADJACENT
        if target in self._police:
            return Rejection.OCCUPIED
        return None

    def _win(self, reason: WinReason) -> None:
        self._state = GameState.WON
        self._win_reason = reason
        self._stars = star_rating(self._steps, self._level.optimal)
        logger.info(
            "Level %d won (%s) in %d steps: %d stars",
            self._level.index, reason.value, self._steps, self._stars,
        )

    def _lose(self, reason: LossReason) -> None:
        self._state = GameState.LOST
        self._loss_reason = reason
        logger.info("Level %d lost (%s) after %d steps", self._level.index, reason.value, self._steps)
