"""Core services shared by the skills system."""

from .events import EventEmitter
from .exceptions import SkillNotFoundError
from .store import JsonFileStore, MemoryStore, StateStore

__all__ = [
    "EventEmitter",
    "JsonFileStore",
    "MemoryStore",
    "SkillNotFoundError",
    "StateStore",
]
