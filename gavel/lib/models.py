"""Pydantic models for Gavel."""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from gavel.lib.clock import CountdownTimer, Urgency


# =============================================================================
# Enums
# =============================================================================


class GamePhase(str, Enum):
    """Phase of the round cycle."""

    ROLE_ASSIGNMENT = "role_assignment"
    TOPIC_REVEAL = "topic_reveal"
    DEBATE = "debate"
    CRITERION_ROLL = "criterion_roll"
    VERDICT = "verdict"
    SCOREBOARD = "scoreboard"
    END_GAME = "end_game"  # Terminal per game instance


class TeamTag(str, Enum):
    """Debating team."""

    A = "a"  # Attackers
    B = "b"  # Defenders


class Criterion(str, Enum):
    """Judging lens rolled before the verdict."""

    LOGIC = "logic"
    SPEED = "speed"
    SATIRE = "satire"


class Screen(str, Enum):
    """Top-level screen the presentation should show."""

    MENU = "menu"
    GAME = "game"


class Role(str, Enum):
    """Role a player holds during a round."""

    JUDGE = "judge"
    ATTACKER = "attacker"
    DEFENDER = "defender"


# =============================================================================
# Game State
# =============================================================================


class Player(BaseModel):
    """A seat at the table. Identity is the roster position."""

    name: str = Field(min_length=1, description="Display name")
    score: int = Field(default=0, ge=0, description="Rounds won")


class RoundState(BaseModel):
    """Roles, topic and outcome of the current round."""

    judge_index: int = Field(description="Roster index of the judge")
    team_a: list[int] = Field(default_factory=list, description="Attackers")
    team_b: list[int] = Field(default_factory=list, description="Defenders")
    topic: str = Field(default="", description="Topic under debate")
    criterion: Criterion | None = Field(default=None, description="Rolled criterion")
    winner: TeamTag | None = Field(default=None, description="Declared winning team")

    def members(self, team: TeamTag) -> list[int]:
        """Roster indices of a team."""
        return list(self.team_a if team == TeamTag.A else self.team_b)

    def role_of(self, index: int) -> Role:
        """Role held by a roster index this round."""
        if index == self.judge_index:
            return Role.JUDGE
        if index in self.team_a:
            return Role.ATTACKER
        return Role.DEFENDER


class GameSession(BaseModel):
    """One game from start to end game."""

    roster: list[Player] = Field(description="Ordered players")
    victory_threshold: int = Field(ge=1, description="Score that ends the game")
    round_index: int = Field(default=0, ge=0, description="Zero-based round counter")

    # Topic deck, frozen at game start
    topic_pool: list[str] = Field(default_factory=list)
    base_topic_count: int = Field(default=0, ge=0)
    used_topics: set[int] = Field(default_factory=set)

    # Round cycle
    phase: GamePhase = Field(default=GamePhase.ROLE_ASSIGNMENT)
    round_state: RoundState | None = Field(default=None)
    clock: CountdownTimer = Field(default_factory=CountdownTimer)
    rolling: bool = Field(default=False, description="Criterion roll in progress")
    roll_steps_remaining: int = Field(default=0, ge=0)

    started_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def round_number(self) -> int:
        """One-based round number for display."""
        return self.round_index + 1

    @property
    def scores(self) -> list[int]:
        return [player.score for player in self.roster]


class GameTable(BaseModel):
    """Everything the engine reduces over: setup topics plus the live session."""

    table_id: UUID = Field(default_factory=uuid4)
    custom_topics: list[str] = Field(default_factory=list)
    session: GameSession | None = Field(default=None)
    generation: int = Field(default=0, description="Bumped on every session reset")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def screen(self) -> Screen:
        return Screen.GAME if self.session is not None else Screen.MENU

    def touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = datetime.utcnow()


# =============================================================================
# Intents
# =============================================================================


class StartGame(BaseModel):
    """Create a session from setup input."""

    type: Literal["start_game"] = "start_game"
    names: list[str] = Field(description="Raw player names; blanks are dropped")
    victory_threshold: int | None = Field(
        default=None, description="Score that ends the game; settings default if omitted"
    )


class RevealTopic(BaseModel):
    type: Literal["reveal_topic"] = "reveal_topic"


class ChangeTopic(BaseModel):
    type: Literal["change_topic"] = "change_topic"


class StartDebate(BaseModel):
    type: Literal["start_debate"] = "start_debate"


class PauseClock(BaseModel):
    type: Literal["pause_clock"] = "pause_clock"


class ResumeClock(BaseModel):
    type: Literal["resume_clock"] = "resume_clock"


class ResetClock(BaseModel):
    type: Literal["reset_clock"] = "reset_clock"


class RollCriterion(BaseModel):
    type: Literal["roll_criterion"] = "roll_criterion"


class DeclareWinner(BaseModel):
    """Judge's verdict for the round."""

    type: Literal["declare_winner"] = "declare_winner"
    team: TeamTag = Field(description="Winning team")


class ContinueAfterVerdict(BaseModel):
    type: Literal["continue_after_verdict"] = "continue_after_verdict"


class NextRound(BaseModel):
    type: Literal["next_round"] = "next_round"


class Rematch(BaseModel):
    type: Literal["rematch"] = "rematch"


class ReturnToMenu(BaseModel):
    type: Literal["return_to_menu"] = "return_to_menu"


class AddCustomTopic(BaseModel):
    """Append a topic to the setup pool."""

    type: Literal["add_custom_topic"] = "add_custom_topic"
    text: str = Field(description="Topic text; trimmed before use")


class RemoveCustomTopic(BaseModel):
    """Remove a custom topic by its index in the custom list."""

    type: Literal["remove_custom_topic"] = "remove_custom_topic"
    index: int = Field(description="Index into custom topics")


class Tick(BaseModel):
    """Countdown tick scheduled by the runner."""

    type: Literal["tick"] = "tick"
    generation: int = Field(description="Session generation the timer belongs to")


class RollStep(BaseModel):
    """Roll animation step scheduled by the runner."""

    type: Literal["roll_step"] = "roll_step"
    generation: int = Field(description="Session generation the timer belongs to")


Intent = Annotated[
    Union[
        StartGame,
        RevealTopic,
        ChangeTopic,
        StartDebate,
        PauseClock,
        ResumeClock,
        ResetClock,
        RollCriterion,
        DeclareWinner,
        ContinueAfterVerdict,
        NextRound,
        Rematch,
        ReturnToMenu,
        AddCustomTopic,
        RemoveCustomTopic,
        Tick,
        RollStep,
    ],
    Field(discriminator="type"),
]

TIMER_INTENTS = frozenset({"tick", "roll_step"})


# =============================================================================
# Snapshot Models
# =============================================================================


class PlayerView(BaseModel):
    """A player as rendered on the table."""

    index: int
    name: str
    score: int
    role: Role | None = None


class StandingEntry(BaseModel):
    """One row of the ranked standings."""

    rank: int = Field(description="One-based position")
    index: int = Field(description="Roster index")
    name: str
    score: int


class ClockView(BaseModel):
    """Countdown state for display."""

    remaining: int
    running: bool
    duration: int
    display: str
    urgency: Urgency


class CriterionView(BaseModel):
    """A criterion with its presentation text."""

    value: Criterion
    label: str
    emoji: str
    description: str


class TopicPoolSummary(BaseModel):
    """Topic counts shown at setup."""

    base: int
    custom: int
    total: int


class GameSnapshot(BaseModel):
    """Read-only view of a table for the presentation layer."""

    table_id: UUID
    generation: int
    screen: Screen
    phase: GamePhase | None = None
    round_index: int | None = None
    round_number: int | None = None
    victory_threshold: int | None = None

    players: list[PlayerView] = Field(default_factory=list)
    judge_index: int | None = None
    team_a: list[int] = Field(default_factory=list)
    team_b: list[int] = Field(default_factory=list)

    topic: str | None = None
    clock: ClockView | None = None
    criterion: CriterionView | None = None
    rolling: bool = False

    winner: TeamTag | None = None
    winning_indices: list[int] = Field(default_factory=list)
    standings: list[StandingEntry] = Field(default_factory=list)
    champions: list[int] = Field(default_factory=list)

    custom_topics: list[str] = Field(default_factory=list)
    topic_pool: TopicPoolSummary
    available_intents: list[str] = Field(default_factory=list)


# =============================================================================
# API Request/Response Models
# =============================================================================


class CreateTableResponse(BaseModel):
    """Response after creating a table."""

    table_id: UUID
    snapshot: GameSnapshot


class DispatchResponse(BaseModel):
    """Response after an accepted intent."""

    accepted: bool = True
    snapshot: GameSnapshot


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"


class ConfigResponse(BaseModel):
    """Configuration options response."""

    limits: dict[str, Any]
    criteria: list[CriterionView]
    teams: list[dict[str, str]]
    phases: list[dict[str, str]]


class RosterCheckRequest(BaseModel):
    """Names typed so far on the setup screen."""

    names: list[str] = Field(default_factory=list)


class RosterCheckResponse(BaseModel):
    """Whether a game could start with these names."""

    names: list[str] = Field(description="Names after trimming and dropping blanks")
    count: int
    can_start: bool
