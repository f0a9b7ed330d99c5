from coinstore.models.user import User
from coinstore.models.login_session import LoginSession
from coinstore.models.game import Game
from coinstore.models.game_entry import GameEntry, GameEntryHistory
from coinstore.models.payment import Payment
from coinstore.models.schedule import Schedule
from coinstore.models.game_login import GameLogin
from coinstore.models.audit_log import AuditLog
from coinstore.models.failed_job import FailedJob

__all__ = [
    "User",
    "LoginSession",
    "Game",
    "GameEntry",
    "GameEntryHistory",
    "Payment",
    "Schedule",
    "GameLogin",
    "AuditLog",
    "FailedJob",
]
