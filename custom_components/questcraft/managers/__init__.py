"""Manager modules for QuestCraft integration.

Managers orchestrate workflows and coordinate between engines.
They are stateful, event-aware, and handle cross-cutting concerns.
"""

from .activity_manager import ActivityManager
from .base_manager import BaseManager
from .economy_manager import EconomyManager
from .system_manager import SystemManager
from .task_manager import TaskManager

__all__ = [
    "ActivityManager",
    "BaseManager",
    "EconomyManager",
    "SystemManager",
    "TaskManager",
]
