"""Event debouncing and alert management."""

from .debouncer import DebounceResult, DebounceState, EventDebouncer
from .manager import AlertEventManager

__all__ = ["DebounceState", "DebounceResult", "EventDebouncer", "AlertEventManager"]
