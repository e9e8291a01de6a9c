"""Engine package - round cycle, roles, topics, scoring."""

from gavel.engine.criteria import CRITERIA, CRITERION_INFO, CriterionSelector
from gavel.engine.engine import (
    ALLOWED_PHASES,
    DispatchResult,
    GameEngine,
    available_intents,
)
from gavel.engine.roles import RoleAssigner
from gavel.engine.runner import GameRunner
from gavel.engine.scoreboard import ScoreBoard
from gavel.engine.snapshot import build_snapshot
from gavel.engine.topics import BASE_TOPICS, TopicDeck

__all__ = [
    # Criteria
    "CRITERIA",
    "CRITERION_INFO",
    "CriterionSelector",
    # Engine
    "ALLOWED_PHASES",
    "DispatchResult",
    "GameEngine",
    "available_intents",
    # Roles
    "RoleAssigner",
    # Runner
    "GameRunner",
    # Scoring
    "ScoreBoard",
    # Snapshot
    "build_snapshot",
    # Topics
    "BASE_TOPICS",
    "TopicDeck",
]
