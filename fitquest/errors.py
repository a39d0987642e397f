# fitquest/errors.py
"""
Error kinds raised by the core. The API surface turns each of them into a
JSON body of the form {"message": "...", ...details} with ``status_code``.
"""
from typing import Any, Dict, Iterable, List


class FitQuestError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def details(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        payload = {"message": self.message}
        payload.update(self.details())
        return payload


class ValidationError(FitQuestError):
    status_code = 400

    def __init__(self, fields: Iterable[str], message: str = None):
        self.fields: List[str] = list(fields)
        super().__init__(message or "invalid or missing: " + ", ".join(self.fields))

    def details(self):
        return {"fields": self.fields}


class NotFound(FitQuestError):
    status_code = 404
    message = "not found"


class Forbidden(FitQuestError):
    status_code = 403
    message = "not allowed"


class Conflict(FitQuestError):
    status_code = 409
    message = "already exists"


class InvalidCredentials(FitQuestError):
    status_code = 401
    message = "invalid credentials"


class InsufficientBalance(FitQuestError):
    status_code = 400

    def __init__(self, required: int, available: int):
        self.required = int(required)
        self.available = int(available)
        super().__init__(
            f"Not enough points: {self.shortfall} more needed"
        )

    @property
    def shortfall(self) -> int:
        return max(0, self.required - self.available)

    def details(self):
        return {
            "required": self.required,
            "available": self.available,
            "shortfall": self.shortfall,
        }


class AlreadySpunToday(FitQuestError):
    status_code = 400
    message = "You've already used your daily spin"


class ExternalCollaboratorFailure(FitQuestError):
    status_code = 502
    message = "Payment provider is unavailable, please try again later"
