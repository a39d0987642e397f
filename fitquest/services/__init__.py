# fitquest/services/__init__.py
from . import accounts, ledger, rewards, spin

__all__ = ["accounts", "ledger", "rewards", "spin"]
