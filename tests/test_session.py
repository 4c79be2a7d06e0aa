"""Tests for cornerthief.core.session – the pursuit state machine."""

from __future__ import annotations

import random

import pytest

from cornerthief.core.levels import Level
from cornerthief.core.policy import Tier
from cornerthief.core.session import (
    GameState,
    LevelResult,
    LossReason,
    MoveResult,
    PursuitSession,
    Rejection,
    WinReason,
    star_rating,
)

SQUARE_EDGES = ((0, 1), (1, 2), (2, 3), (3, 0))


def _level(**overrides) -> Level:
    """Scenario A board: 4-cycle, police on 0 and 2, thief on 1, exit 3."""
    fields = dict(
        index=1,
        name="Square",
        node_count=4,
        edges=SQUARE_EDGES,
        police=(0, 2),
        thief=1,
        exits=(3,),
        step_limit=5,
        optimal=1,
        tier=Tier.MEDIUM,
    )
    fields.update(overrides)
    return Level(**fields)


def _path_level(n: int, **overrides) -> Level:
    edges = tuple((i, i + 1) for i in range(n - 1))
    return _level(node_count=n, edges=edges, **overrides)


@pytest.fixture()
def session() -> PursuitSession:
    return PursuitSession(rng=random.Random(0))


# ---------------------------------------------------------------------------
# star_rating
# ---------------------------------------------------------------------------

class TestStarRating:
    def test_optimal_is_three(self):
        assert star_rating(4, 4) == 3

    def test_under_optimal_is_three(self):
        assert star_rating(2, 4) == 3

    def test_two_over_is_two(self):
        assert star_rating(6, 4) == 2

    def test_one_over_is_two(self):
        assert star_rating(5, 4) == 2

    def test_three_over_is_one(self):
        assert star_rating(7, 4) == 1


# ---------------------------------------------------------------------------
# start / restart
# ---------------------------------------------------------------------------

class TestStart:
    def test_initial_state(self, session: PursuitSession):
        result = session.start(_level())
        assert result.started
        snap = session.snapshot()
        assert snap.police == (0, 2)
        assert snap.thief == 1
        assert snap.steps == 0
        assert snap.state is GameState.PLAYING
        assert snap.exits == frozenset({3})
        assert snap.steps_remaining == 5

    def test_snapshot_before_start_is_none(self, session: PursuitSession):
        assert session.snapshot() is None
        assert session.state is None

    @pytest.mark.parametrize(
        "overrides",
        [
            dict(police=(0, 0)),
            dict(police=(0, 9)),
            dict(thief=7),
            dict(thief=0),
            dict(exits=()),
            dict(step_limit=0),
            dict(edges=((0, 5),)),
            dict(tier=5),
            dict(tier=0),
            dict(tier="hard"),
        ],
    )
    def test_malformed_level_rejected(self, session: PursuitSession, overrides):
        result = session.start(_level(**overrides))
        assert not result.started
        assert result.problems
        assert session.snapshot() is None

    def test_plain_int_tier_accepted(self, session: PursuitSession):
        level = _level(tier=2)
        assert level.tier is Tier.MEDIUM
        assert session.start(level).started
        assert session.snapshot().state is GameState.PLAYING

    def test_bad_tier_leaves_previous_session_untouched(self, session: PursuitSession):
        session.start(_path_level(6, police=(0,), thief=3, exits=(5,)))
        session.attempt_move(0, 1)
        before = session.snapshot()
        result = session.start(_level(index=2, tier=5))
        assert not result.started
        assert any("tier" in p for p in result.problems)
        assert session.snapshot() == before

    def test_failed_start_keeps_previous_session(self, session: PursuitSession):
        session.start(_level())
        session.start(_level(index=2, police=(1, 1)))
        snap = session.snapshot()
        assert snap.level_index == 1
        assert snap.state is GameState.PLAYING

    def test_restart_resets_progress(self, session: PursuitSession):
        session.start(_path_level(6, police=(0,), thief=3, exits=(5,), step_limit=4))
        session.attempt_move(0, 1)
        assert session.snapshot().steps == 1
        assert session.restart().started
        snap = session.snapshot()
        assert snap.steps == 0
        assert snap.police == (0,)
        assert snap.thief == 3

    def test_restart_without_level(self, session: PursuitSession):
        assert not session.restart().started


# ---------------------------------------------------------------------------
# attempt_move – rejections
# ---------------------------------------------------------------------------

class TestRejections:
    def test_not_adjacent(self, session: PursuitSession):
        session.start(_level())
        result = session.attempt_move(0, 2)
        assert result == MoveResult(accepted=False, rejection=Rejection.NOT_ADJACENT)
        assert session.snapshot().steps == 0

    def test_non_neighbor_leaves_state_unchanged(self, session: PursuitSession):
        session.start(_path_level(6, police=(0,), thief=3, exits=(5,)))
        before = session.snapshot()
        result = session.attempt_move(0, 2)
        assert not result.accepted
        assert result.rejection is Rejection.NOT_ADJACENT
        assert session.snapshot() == before

    def test_occupied_by_other_unit(self, session: PursuitSession):
        session.start(_path_level(5, police=(0, 1), thief=3, exits=(4,)))
        result = session.attempt_move(0, 1)
        assert result.rejection is Rejection.OCCUPIED
        assert session.snapshot().police == (0, 1)

    @pytest.mark.parametrize("unit", [-1, 2, 10])
    def test_unknown_unit(self, session: PursuitSession, unit: int):
        session.start(_level())
        assert session.attempt_move(unit, 1).rejection is Rejection.UNKNOWN_UNIT

    def test_before_start(self, session: PursuitSession):
        assert session.attempt_move(0, 1).rejection is Rejection.NOT_PLAYING

    def test_after_game_over(self, session: PursuitSession):
        session.start(_level())
        session.attempt_move(0, 1)
        result = session.attempt_move(1, 3)
        assert result.rejection is Rejection.NOT_PLAYING
        assert session.snapshot().steps == 1


# ---------------------------------------------------------------------------
# attempt_move – outcomes
# ---------------------------------------------------------------------------

class TestOutcomes:
    def test_capture(self, session: PursuitSession):
        """4-cycle: police on 0 steps onto the thief at 1."""
        session.start(_level())
        result = session.attempt_move(0, 1)
        assert result.accepted
        assert result.thief_to is None
        snap = session.snapshot()
        assert snap.steps == 1
        assert snap.state is GameState.WON
        assert snap.win_reason is WinReason.CAPTURED
        assert snap.stars == 3
        assert session.result() == LevelResult(level_index=1, stars=3)

    def test_capture_on_last_step(self, session: PursuitSession):
        session.start(_level(step_limit=1))
        session.attempt_move(0, 1)
        assert session.snapshot().state is GameState.WON

    def test_containment(self, session: PursuitSession):
        """Path 0-1-2-3-4: moving 0 -> 1 leaves the thief on 2 boxed in by 1 and 3."""
        session.start(_path_level(5, police=(0, 3), thief=2, exits=(4,), optimal=2))
        result = session.attempt_move(0, 1)
        assert result.accepted
        snap = session.snapshot()
        assert snap.state is GameState.WON
        assert snap.win_reason is WinReason.CONTAINED
        assert snap.thief == 2
        assert snap.police == (1, 3)
        assert session.thief_moves() == frozenset()

    def test_escape(self, session: PursuitSession):
        """Path 0-1-2-3: after 0 -> 1 the thief's only free neighbour is the exit."""
        session.start(_path_level(4, police=(0,), thief=2, exits=(3,)))
        result = session.attempt_move(0, 1)
        assert result == MoveResult(accepted=True, thief_from=2, thief_to=3)
        snap = session.snapshot()
        assert snap.state is GameState.LOST
        assert snap.loss_reason is LossReason.ESCAPED
        assert snap.thief == 3
        assert session.result() is None

    def test_steps_exhausted(self, session: PursuitSession):
        """Path 0..5, limit 1: the thief steps 3 -> 4 and the budget runs out."""
        session.start(_path_level(6, police=(0,), thief=3, exits=(5,), step_limit=1))
        result = session.attempt_move(0, 1)
        assert result.thief_to == 4
        snap = session.snapshot()
        assert snap.steps == 1
        assert snap.state is GameState.LOST
        assert snap.loss_reason is LossReason.STEPS_EXHAUSTED
        assert snap.steps_remaining == 0

    def test_keeps_playing_within_budget(self, session: PursuitSession):
        session.start(_path_level(6, police=(0,), thief=3, exits=(5,), step_limit=3))
        session.attempt_move(0, 1)
        snap = session.snapshot()
        assert snap.state is GameState.PLAYING
        assert snap.thief == 4
        assert snap.steps == 1

    def test_stars_drop_with_extra_steps(self, session: PursuitSession):
        """Path 0..5 plus an unreachable exit: the chase takes four moves against optimal 2."""
        level = _level(
            node_count=7,
            edges=((0, 1), (1, 2), (2, 3), (3, 4), (4, 5)),
            police=(0,),
            thief=5,
            exits=(6,),
            step_limit=10,
            optimal=2,
        )
        session.start(level)
        session.attempt_move(0, 1)
        assert session.snapshot().thief == 4
        session.attempt_move(0, 2)
        assert session.snapshot().thief == 5
        session.attempt_move(0, 3)
        # Cornered on the leaf, the thief has to step next to the police.
        assert session.snapshot().thief == 4
        session.attempt_move(0, 4)
        snap = session.snapshot()
        assert snap.state is GameState.WON
        assert snap.win_reason is WinReason.CAPTURED
        assert snap.steps == 4
        assert snap.stars == 2
        assert session.result() == LevelResult(level_index=1, stars=2)


    def test_thief_reply_is_legal(self):
        level = _level(
            node_count=9,
            edges=((0, 1), (1, 2), (3, 4), (4, 5), (6, 7), (7, 8), (0, 3), (3, 6), (1, 4), (4, 7), (2, 5), (5, 8)),
            police=(0, 2, 6),
            thief=4,
            exits=(8,),
            step_limit=8,
            optimal=3,
            tier=Tier.EASY,
        )
        for seed in range(30):
            session = PursuitSession(rng=random.Random(seed))
            session.start(level)
            result = session.attempt_move(1, 5)
            assert result.accepted
            if result.thief_to is not None:
                assert result.thief_to in session.graph.neighbors(4)
                assert result.thief_to not in session.snapshot().police


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

class TestQueries:
    def test_unit_at(self, session: PursuitSession):
        session.start(_level())
        assert session.unit_at(2) == 1
        assert session.unit_at(1) is None

    def test_legal_targets_include_thief(self, session: PursuitSession):
        session.start(_level())
        assert session.legal_targets(0) == {1, 3}

    def test_legal_targets_skip_other_units(self, session: PursuitSession):
        session.start(_path_level(5, police=(0, 1), thief=3, exits=(4,)))
        assert session.legal_targets(0) == frozenset()
        assert session.legal_targets(1) == {2}

    def test_legal_targets_empty_when_finished(self, session: PursuitSession):
        session.start(_level())
        session.attempt_move(0, 1)
        assert session.legal_targets(1) == frozenset()

    def test_thief_moves_when_boxed_in(self, session: PursuitSession):
        session.start(_level())
        assert session.thief_moves() == frozenset()

    def test_snapshot_is_a_copy(self, session: PursuitSession):
        session.start(_path_level(6, police=(0,), thief=3, exits=(5,)))
        before = session.snapshot()
        session.attempt_move(0, 1)
        assert before.police == (0,)
        assert before.steps == 0
