# fitquest/services/accounts.py
import logging
import math
import re
from typing import Any, Dict, Optional, Tuple

from werkzeug.security import check_password_hash, generate_password_hash

from ..catalog import STARTER_CHALLENGES
from ..domain import User
from ..errors import Conflict, InvalidCredentials, NotFound, ValidationError
from ..storage import Store

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _optional_int(data: Dict[str, Any], key: str, field: str, errors: list) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        errors.append(field)
        return None


def register_user(
    store: Store,
    email: str,
    username: str,
    password: str,
    avatar_id: Optional[int] = None,
    fitness_goal: Optional[str] = None,
    workout_days_per_week: Optional[int] = None,
    theme_color: Optional[int] = None,
) -> User:
    """
    Create an account with zeroed progression and the starter challenges.
    The password is stored as a salted hash only.
    """
    email = (email or "").strip().lower()
    username = (username or "").strip()
    password = password or ""  # do NOT strip passwords

    missing = [
        name
        for name, value in (("email", email), ("username", username), ("password", password))
        if not value
    ]
    if missing:
        raise ValidationError(missing, "email, username and password are required")

    if not _EMAIL_RE.match(email):
        raise ValidationError(["email"], "email is not valid")

    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            ["password"], f"password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    if store.get_user_by_email(email):
        raise Conflict("User with this email already exists")

    if store.get_user_by_username(username):
        raise Conflict("username already in use")

    user = store.create_user(
        email=email,
        username=username,
        password_hash=generate_password_hash(password),
        avatar_id=avatar_id or 1,
        fitness_goal=fitness_goal or None,
        workout_days_per_week=workout_days_per_week or 3,
        theme_color=theme_color or 0,
    )

    for challenge in STARTER_CHALLENGES:
        store.create_challenge(user_id=user.id, **challenge)

    logger.info("user registered user_id=%s username=%s", user.id, user.username)
    return user


def registration_kwargs(data: Dict[str, Any]) -> Dict[str, Any]:
    """Map a camelCase register body onto ``register_user`` arguments."""
    errors: list = []
    kwargs = {
        "email": data.get("email"),
        "username": data.get("username"),
        "password": data.get("password"),
        "avatar_id": _optional_int(data, "avatarId", "avatarId", errors),
        "fitness_goal": data.get("fitnessGoal"),
        "workout_days_per_week": _optional_int(
            data, "workoutDaysPerWeek", "workoutDaysPerWeek", errors
        ),
        "theme_color": _optional_int(data, "themeColor", "themeColor", errors),
    }
    if errors:
        raise ValidationError(errors)
    return kwargs


def authenticate(store: Store, email: str, password: str) -> User:
    email = (email or "").strip().lower()
    password = password or ""
    if not email or not password:
        raise ValidationError(
            [n for n, v in (("email", email), ("password", password)) if not v],
            "email and password are required",
        )

    user = store.get_user_by_email(email)
    if not user or not check_password_hash(user.password_hash, password):
        raise InvalidCredentials("Invalid email or password")
    return user


_PROFILE_KEYS = {
    "username": "username",
    "avatarId": "avatar_id",
    "fitnessGoal": "fitness_goal",
    "workoutDaysPerWeek": "workout_days_per_week",
    "themeColor": "theme_color",
}
_INT_PROFILE_FIELDS = {"avatar_id", "workout_days_per_week", "theme_color"}


def update_profile(store: Store, user_id: int, data: Dict[str, Any]) -> User:
    """
    Apply the editable profile fields. Progression fields (points, level,
    streak) and identity fields are silently ignored.
    """
    fields: Dict[str, Any] = {}
    errors = []
    for key, attr in _PROFILE_KEYS.items():
        if key not in (data or {}):
            continue
        value = data[key]
        if attr in _INT_PROFILE_FIELDS:
            try:
                value = int(value)
            except (TypeError, ValueError):
                errors.append(key)
                continue
        fields[attr] = value
    if errors:
        raise ValidationError(errors)

    if "username" in fields:
        username = (fields["username"] or "").strip()
        if not username:
            raise ValidationError(["username"])
        other = store.get_user_by_username(username)
        if other and other.id != user_id:
            raise Conflict("username already in use")
        fields["username"] = username

    user = store.update_user_profile(user_id, fields)
    if not user:
        raise NotFound("user not found")
    return user


# ------------------------------
# BMI
# ------------------------------
def bmi_category(bmi: float) -> str:
    if bmi < 18.5:
        return "Underweight"
    if bmi < 25:
        return "Healthy Weight"
    if bmi < 30:
        return "Overweight"
    return "Obesity"


def compute_bmi(weight: float, height: float, units: str = "metric") -> Tuple[float, str]:
    """
    metric:   weight in kg, height in cm
    imperial: weight in lbs, height in inches
    Returns (bmi rounded to one decimal, category).
    """
    try:
        weight = float(weight)
        height = float(height)
    except (TypeError, ValueError):
        raise ValidationError(["weight", "height"], "weight and height must be numbers")

    bad = [
        name
        for name, value in (("weight", weight), ("height", height))
        if not math.isfinite(value) or value <= 0
    ]
    if bad:
        raise ValidationError(bad, "weight and height must be positive numbers")

    if units == "metric":
        bmi = weight / (height / 100) ** 2
    elif units == "imperial":
        bmi = (weight * 703) / height ** 2
    else:
        raise ValidationError(["units"], "units must be 'metric' or 'imperial'")

    bmi = round(bmi, 1)
    return bmi, bmi_category(bmi)
