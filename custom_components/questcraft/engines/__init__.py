"""Engine modules for QuestCraft integration.

Contains pure computation engines (no Home Assistant imports):
- progression_engine: Experience, levels, ranks and streaks
- task_engine: Task lifecycle state machine
- economy_engine: Purchases, adjustments and the build canvas
- schedule_engine: Daily reset and penalty sweep rules
"""

# Use relative imports within package to avoid mypy module resolution issues
from .economy_engine import EconomyEngine, EconomyResult
from .progression_engine import ProgressionEngine, RankInfo, RewardOutcome
from .schedule_engine import DailyResetResult, PenaltySweepResult, ScheduleEngine
from .task_engine import TaskEngine, TransitionResult

__all__ = [
    "DailyResetResult",
    "EconomyEngine",
    "EconomyResult",
    "PenaltySweepResult",
    "ProgressionEngine",
    "RankInfo",
    "RewardOutcome",
    "ScheduleEngine",
    "TaskEngine",
    "TransitionResult",
]
