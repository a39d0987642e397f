"""HTTP contract of the API surface."""

import json
from unittest.mock import MagicMock, patch

import pytest
import stripe

from conftest import FakePayments, register
from fitquest.storage import get_store

SHIPPING = {
    "shippingName": "Alice Doe",
    "shippingAddress": "1 Main St",
    "shippingCity": "Springfield",
    "shippingState": "IL",
    "shippingZip": "62701",
    "shippingCountry": "US",
}


def _give_points(user_id, points):
    get_store().adjust_points(user_id, points)


def _reward_id(client, title):
    rewards = client.get("/api/rewards").get_json()
    return next(r["id"] for r in rewards if r["title"] == title)


# -----------------------------
# Auth
# -----------------------------
def test_health(client):
    assert client.get("/api/health").get_json() == {"status": "ok"}


def test_register_starts_session_with_starter_challenges(client):
    user = register(client, fitnessGoal="Weight Loss", workoutDaysPerWeek=4)

    assert user["points"] == 0
    assert user["level"] == 1
    assert user["streakDays"] == 0
    assert user["fitnessGoal"] == "Weight Loss"
    assert user["workoutDaysPerWeek"] == 4
    assert "password" not in user and "passwordHash" not in user

    challenges = client.get("/api/challenges").get_json()
    assert [c["title"] for c in challenges] == [
        "Morning Workout",
        "Hydration Goal",
        "Mindfulness Break",
        "Healthy Meal",
    ]
    assert all(c["progress"] == 0 and not c["isComplete"] for c in challenges)


def test_password_is_hashed(client, store):
    register(client)
    stored = store.get_user_by_email("alice@example.com")
    assert stored.password_hash != "password123"


def test_register_validation_and_conflicts(client):
    resp = client.post("/api/auth/register", json={"email": "a@example.com"})
    assert resp.status_code == 400
    assert set(resp.get_json()["fields"]) == {"username", "password"}

    resp = client.post(
        "/api/auth/register",
        json={"email": "a@example.com", "username": "a", "password": "short"},
    )
    assert resp.status_code == 400

    register(client)
    resp = client.post(
        "/api/auth/register",
        json={"email": "ALICE@example.com", "username": "other", "password": "password123"},
    )
    assert resp.status_code == 409


def test_login_logout_flow(app):
    register(app.test_client())
    client = app.test_client()

    assert client.get("/api/auth/me").status_code == 401

    resp = client.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": "wrong-pass"}
    )
    assert resp.status_code == 401

    resp = client.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": "password123"}
    )
    assert resp.status_code == 200
    assert client.get("/api/auth/me").get_json()["user"]["username"] == "alice"

    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/api/challenges"),
        ("post", "/api/challenges/1/complete"),
        ("post", "/api/workouts/1/complete"),
        ("post", "/api/rewards/1/redeem"),
        ("post", "/api/spins"),
        ("get", "/api/spins"),
    ],
)
def test_core_endpoints_require_session(client, method, path):
    assert getattr(client, method)(path).status_code == 401


# -----------------------------
# Challenges
# -----------------------------
def test_progress_update_and_range_check(client):
    register(client)
    challenge_id = client.get("/api/challenges").get_json()[0]["id"]

    resp = client.patch(f"/api/challenges/{challenge_id}/progress", json={"progress": 45})
    assert resp.status_code == 200
    assert resp.get_json()["progress"] == 45

    for bad in (-5, 101, "fifty"):
        resp = client.patch(f"/api/challenges/{challenge_id}/progress", json={"progress": bad})
        assert resp.status_code == 400
        assert resp.get_json()["fields"] == ["progress"]

    resp = client.patch("/api/challenges/9999/progress", json={"progress": 10})
    assert resp.status_code == 404


def test_cannot_touch_another_users_challenge(app):
    owner = app.test_client()
    register(owner, "owner")
    challenge_id = owner.get("/api/challenges").get_json()[0]["id"]

    intruder = app.test_client()
    register(intruder, "intruder")

    resp = intruder.patch(f"/api/challenges/{challenge_id}/progress", json={"progress": 10})
    assert resp.status_code == 403
    resp = intruder.post(f"/api/challenges/{challenge_id}/complete")
    assert resp.status_code == 403
    assert intruder.get("/api/auth/me").get_json()["user"]["points"] == 0


def test_complete_challenge_awards_once(client):
    register(client)
    challenge = client.get("/api/challenges").get_json()[0]  # Morning Workout, 20 pts

    first = client.post(f"/api/challenges/{challenge['id']}/complete")
    second = client.post(f"/api/challenges/{challenge['id']}/complete")

    assert first.status_code == second.status_code == 200
    assert first.get_json()["isComplete"] is True
    assert first.get_json()["progress"] == 100
    assert client.get("/api/auth/me").get_json()["user"]["points"] == 20

    achievements = client.get("/api/social/achievements").get_json()
    assert [a["title"] for a in achievements] == ["Challenger"]


def test_create_challenge(client):
    register(client)
    resp = client.post(
        "/api/challenges",
        json={
            "title": "Early Night",
            "description": "In bed by 10pm",
            "category": "Sleep",
            "icon": "moon",
            "points": 10,
        },
    )
    assert resp.status_code == 201
    assert resp.get_json()["category"] == "Sleep"

    resp = client.post("/api/challenges", json={"title": "x", "points": -1})
    assert resp.status_code == 400
    assert "points" in resp.get_json()["fields"]


def test_create_challenge_rejects_unknown_category(client):
    register(client)
    resp = client.post(
        "/api/challenges",
        json={
            "title": "Inbox Zero",
            "description": "Clear the inbox",
            "category": "Productivity",
            "icon": "inbox",
            "points": 5,
        },
    )

    assert resp.status_code == 400
    assert resp.get_json()["fields"] == ["category"]
    assert len(client.get("/api/challenges").get_json()) == 4


# -----------------------------
# Workouts
# -----------------------------
def test_workout_completion_awards_bonus_and_streak(client):
    register(client)
    resp = client.post(
        "/api/workouts",
        json={
            "title": "Quick HIIT",
            "description": "Ten minute burner",
            "exercises": [{"name": "Burpees", "reps": 10}],
            "duration": 10,
        },
    )
    assert resp.status_code == 201
    workout = resp.get_json()
    assert workout["completedDate"] is None

    resp = client.post(f"/api/workouts/{workout['id']}/complete")
    assert resp.status_code == 200
    assert resp.get_json()["completedDate"] is not None

    # repeated completion: no second bonus, no second streak day
    client.post(f"/api/workouts/{workout['id']}/complete")

    user = client.get("/api/auth/me").get_json()["user"]
    assert user["points"] == 30
    assert user["streakDays"] == 1
    titles = [a["title"] for a in client.get("/api/social/achievements").get_json()]
    assert titles == ["First Quest"]


def test_workout_owner_check(app):
    owner = app.test_client()
    register(owner, "owner")
    workout = owner.post(
        "/api/workouts",
        json={"title": "Run", "description": "", "exercises": "[]", "duration": 30},
    ).get_json()

    intruder = app.test_client()
    register(intruder, "intruder")
    assert intruder.post(f"/api/workouts/{workout['id']}/complete").status_code == 403
    assert intruder.post("/api/workouts/9999/complete").status_code == 404


# -----------------------------
# Rewards
# -----------------------------
def test_redeem_digital_reward(client):
    user = register(client)
    _give_points(user["id"], 300)
    reward_id = _reward_id(client, "Premium Avatar")

    resp = client.post(f"/api/rewards/{reward_id}/redeem")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["isPhysicalReward"] is False
    assert "clientSecret" not in body
    assert body["userReward"]["rewardId"] == reward_id
    assert client.get("/api/auth/me").get_json()["user"]["points"] == 100
    assert [r["id"] for r in client.get("/api/rewards/mine").get_json()] == [reward_id]


def test_redeem_without_enough_points_reports_shortfall(client):
    user = register(client)
    _give_points(user["id"], 100)
    reward_id = _reward_id(client, "Exclusive Badge")  # 150

    resp = client.post(f"/api/rewards/{reward_id}/redeem")

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["shortfall"] == 50
    assert "50" in body["message"]
    assert client.get("/api/auth/me").get_json()["user"]["points"] == 100


def test_redeem_unknown_reward(client):
    register(client)
    assert client.post("/api/rewards/999/redeem").status_code == 404


@patch("stripe.PaymentIntent.create")
def test_redeem_physical_reward_returns_client_secret(mock_create, client):
    mock_create.return_value = MagicMock(client_secret="pi_123_secret_456")
    user = register(client)
    _give_points(user["id"], 600)
    reward_id = _reward_id(client, "$5 Gift Card")

    resp = client.post(f"/api/rewards/{reward_id}/redeem", json=SHIPPING)

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["isPhysicalReward"] is True
    assert body["clientSecret"] == "pi_123_secret_456"
    assert body["userReward"]["rewardId"] == reward_id

    kwargs = mock_create.call_args.kwargs
    assert kwargs["amount"] == 0
    assert kwargs["metadata"]["rewardTitle"] == "$5 Gift Card"
    assert kwargs["metadata"]["shippingZip"] == "62701"
    assert client.get("/api/auth/me").get_json()["user"]["points"] == 100


def test_redeem_physical_reward_requires_shipping(client, app):
    app.extensions["fitquest_payments"] = payments = FakePayments()
    user = register(client)
    _give_points(user["id"], 600)
    reward_id = _reward_id(client, "$5 Gift Card")

    resp = client.post(
        f"/api/rewards/{reward_id}/redeem", json=dict(SHIPPING, shippingCity="")
    )

    assert resp.status_code == 400
    assert resp.get_json()["fields"] == ["shippingCity"]
    assert payments.calls == []
    assert client.get("/api/auth/me").get_json()["user"]["points"] == 600
    assert client.get("/api/rewards/mine").get_json() == []


@patch("stripe.PaymentIntent.create")
def test_payment_provider_outage_is_reported(mock_create, client):
    mock_create.side_effect = stripe.StripeError("unavailable")
    user = register(client)
    _give_points(user["id"], 600)
    reward_id = _reward_id(client, "$5 Gift Card")

    resp = client.post(f"/api/rewards/{reward_id}/redeem", json=SHIPPING)

    assert resp.status_code == 502
    assert client.get("/api/auth/me").get_json()["user"]["points"] == 600


def test_standalone_payment_intent(client, app):
    app.extensions["fitquest_payments"] = payments = FakePayments("secret_abc")
    register(client)
    reward_id = _reward_id(client, "Wireless Earbuds")

    resp = client.post(
        "/api/rewards/payment-intent",
        json={"rewardId": reward_id, "shippingInfo": {"shippingName": "Alice"}},
    )

    assert resp.status_code == 200
    assert resp.get_json() == {"clientSecret": "secret_abc"}
    assert payments.calls[0]["shippingName"] == "Alice"
    assert client.post("/api/rewards/payment-intent", json={}).status_code == 400


def test_rewards_overview(client):
    user = register(client)
    _give_points(user["id"], 240)

    body = client.get("/api/rewards/overview").get_json()

    assert body["summary"]["points"] == 240
    assert body["summary"]["level"] == 3
    assert body["summary"]["nextLevelPoints"] == 300
    assert body["owned"] == []


# -----------------------------
# Spins
# -----------------------------
def test_daily_spin(client, app):
    app.extensions["fitquest_spin_rng"] = MagicMock(choice=lambda seq: seq[0])
    register(client)

    status = client.get("/api/spins").get_json()
    assert status == {"spins": [], "canSpinToday": True}

    resp = client.post("/api/spins")
    assert resp.status_code == 201
    assert resp.get_json()["reward"] == "points"
    assert resp.get_json()["points"] == 50

    status = client.get("/api/spins").get_json()
    assert status["canSpinToday"] is False
    assert len(status["spins"]) == 1

    resp = client.post("/api/spins")
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "You've already used your daily spin"
    assert client.get("/api/auth/me").get_json()["user"]["points"] == 50


# -----------------------------
# Profile & social
# -----------------------------
def test_profile_update_cannot_touch_points(client):
    register(client)

    resp = client.patch(
        "/api/profile",
        json={"points": 5000, "level": 40, "streakDays": 9, "avatarId": 3, "themeColor": 2},
    )

    assert resp.status_code == 200
    user = resp.get_json()["user"]
    assert (user["points"], user["level"], user["streakDays"]) == (0, 1, 0)
    assert (user["avatarId"], user["themeColor"]) == (3, 2)


@pytest.mark.parametrize(
    "body, bmi, category",
    [
        ({"weight": 70, "height": 175}, 22.9, "Healthy Weight"),
        ({"weight": 50, "height": 180}, 15.4, "Underweight"),
        ({"weight": 180, "height": 70, "units": "imperial"}, 25.8, "Overweight"),
        ({"weight": 110, "height": 170}, 38.1, "Obesity"),
    ],
)
def test_bmi(client, body, bmi, category):
    register(client)
    resp = client.post("/api/profile/bmi", json=body)
    assert resp.status_code == 200
    assert resp.get_json() == {"bmi": bmi, "category": category}


def test_bmi_rejects_bad_input(client):
    register(client)
    assert client.post("/api/profile/bmi", json={"weight": 0, "height": 170}).status_code == 400
    assert client.post("/api/profile/bmi", json={"weight": "x", "height": 170}).status_code == 400


@pytest.mark.parametrize(
    "raw, field",
    [
        ('{"weight": NaN, "height": 170}', "weight"),
        ('{"weight": 70, "height": Infinity}', "height"),
        ('{"weight": "-Infinity", "height": 170}', "weight"),
    ],
)
def test_bmi_rejects_non_finite_numbers(client, raw, field):
    register(client)

    resp = client.post("/api/profile/bmi", data=raw, content_type="application/json")

    assert resp.status_code == 400
    body = json.loads(resp.data)
    assert body["fields"] == [field]


def test_leaderboard_hides_credentials(app):
    for name, points in (("alice", 40), ("bob", 300), ("carol", 120)):
        c = app.test_client()
        user = register(c, name)
        _give_points(user["id"], points)

    body = app.test_client()
    register(body, "dave")
    rows = body.get("/api/social/leaderboard").get_json()["leaderboard"]

    assert [r["username"] for r in rows[:3]] == ["bob", "carol", "alice"]
    assert rows[0]["rank"] == 1
    assert all("email" not in r and "passwordHash" not in r for r in rows)
