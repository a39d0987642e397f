"""The SQLAlchemy-backed store honours the same ledger contract."""

from datetime import datetime, timedelta

import pytest

from conftest import make_user
from fitquest import db
from fitquest.errors import AlreadySpunToday, InsufficientBalance
from fitquest.models import User as UserRow
from fitquest.services import ledger, rewards
from fitquest.services import spin as spin_engine


def test_catalog_is_seeded(sql_store):
    titles = [r.title for r in sql_store.list_rewards()]
    assert titles[0] == "Premium Avatar"
    assert len(titles) == 5


def test_adjust_points_is_conditional(sql_store):
    user = make_user(sql_store, points=120)
    assert user.points == 120
    assert user.level == 2

    assert sql_store.adjust_points(user.id, -200) is None
    row = db.session.get(UserRow, user.id)
    assert row.points == 120
    assert row.level == 2

    updated = sql_store.adjust_points(user.id, -120)
    assert updated.points == 0
    assert updated.level == 1


def test_stale_balance_cannot_overdraw(sql_store):
    user = make_user(sql_store, points=300)
    reward = sql_store.get_reward(1)  # Premium Avatar, 200

    # another request spends first; ``user`` still reads 300
    ledger.apply_points(sql_store, user.id, -150)
    assert user.points == 300

    with pytest.raises(InsufficientBalance) as exc:
        rewards.redeem(sql_store, user.id, reward)

    assert exc.value.available == 150
    assert sql_store.get_user(user.id).points == 150
    assert sql_store.list_user_rewards(user.id) == []


def test_redeem_persists_grant(sql_store):
    user = make_user(sql_store, points=300)
    reward = sql_store.get_reward(1)

    user_reward = rewards.redeem(sql_store, user.id, reward)

    assert user_reward.id is not None
    assert sql_store.get_user(user.id).points == 100
    assert [r.id for r in sql_store.list_user_rewards(user.id)] == [reward.id]


def test_atomic_block_rolls_back_on_error(sql_store):
    user = make_user(sql_store, points=50)

    with pytest.raises(RuntimeError):
        with sql_store.atomic(user.id):
            sql_store.adjust_points(user.id, 25)
            sql_store.create_user_reward(user.id, 1)
            raise RuntimeError("boom")

    assert sql_store.get_user(user.id).points == 50
    assert sql_store.list_user_rewards(user.id) == []


def test_challenge_completion_once(sql_store):
    user = make_user(sql_store)
    challenge = sql_store.create_challenge(
        user_id=user.id,
        title="Mindfulness Break",
        description="Take 5 minutes for mindfulness meditation",
        category="Mindfulness",
        icon="brain",
        points=10,
        duration=5,
    )

    updated = ledger.update_challenge_progress(sql_store, challenge, 40)
    assert updated.progress == 40

    completed, awarded = ledger.complete_challenge(sql_store, challenge)
    assert (completed.is_complete, completed.progress, awarded) == (True, 100, 10)

    _, awarded_again = ledger.complete_challenge(sql_store, challenge)
    assert awarded_again == 0
    assert ledger.update_challenge_progress(sql_store, challenge, 5).progress == 100
    assert sql_store.get_user(user.id).points == 10


def test_workout_completion_and_count(sql_store):
    user = make_user(sql_store)
    workout = sql_store.create_workout(
        user_id=user.id,
        title="Leg day",
        description="",
        exercises="[]",
        duration=30,
    )

    completed, awarded = ledger.complete_workout(sql_store, workout)
    _, awarded_again = ledger.complete_workout(sql_store, workout)

    assert completed.completed_date is not None
    assert (awarded, awarded_again) == (30, 0)
    assert sql_store.count_completed_workouts(user.id) == 1
    assert sql_store.get_user(user.id).points == 30


def test_spin_gate_reads_persisted_history(sql_store):
    user = make_user(sql_store)
    now = datetime(2026, 5, 14, 10, 0)

    spin_engine.spin(sql_store, user.id, now=now - timedelta(days=1))
    spin_engine.spin(sql_store, user.id, now=now)
    with pytest.raises(AlreadySpunToday):
        spin_engine.spin(sql_store, user.id, now=now + timedelta(hours=1))

    assert len(sql_store.spin_history(user.id)) == 2


def test_leaderboard_orders_by_points(sql_store):
    make_user(sql_store, "low", points=10)
    make_user(sql_store, "high", points=500)
    make_user(sql_store, "mid", points=120)

    assert [u.username for u in sql_store.leaderboard(2)] == ["high", "mid"]


def test_profile_update_ignores_progression_fields(sql_store):
    user = make_user(sql_store, points=40)

    updated = sql_store.update_user_profile(
        user.id, {"points": 9999, "level": 50, "fitness_goal": "Build Strength"}
    )

    assert updated.points == 40
    assert updated.level == 1
    assert updated.fitness_goal == "Build Strength"
