"""Core application services: settings, logging and the practice session engine."""

from lingua.core.practice_session import (
    PracticeSessionEngine,
    PracticeSessionState,
    SessionStats,
)
from lingua.core.settings import Settings, get_settings

__all__ = [
    "PracticeSessionEngine",
    "PracticeSessionState",
    "SessionStats",
    "Settings",
    "get_settings",
]
