"""Round engine.

A reducer over ``GameTable``: every intent takes the current table and
returns a new one. The input table is never mutated, so a rejected intent
leaves the caller exactly where it was.

Round cycle::

    role_assignment -> topic_reveal -> debate -> criterion_roll
        -> verdict -> scoreboard -> role_assignment (next round)
                   \\-> end_game (victory reached)
"""

import logging
from typing import Any, Callable

from pydantic import BaseModel, Field

from gavel.config import Settings, get_settings
from gavel.engine.criteria import CriterionSelector
from gavel.engine.roles import RoleAssigner
from gavel.engine.scoreboard import ScoreBoard
from gavel.engine.setup import validate_roster, validate_threshold
from gavel.engine.topics import BASE_TOPICS, TopicDeck, build_pool, normalize_topic
from gavel.lib.clock import CountdownTimer
from gavel.lib.exceptions import (
    IntentRejectedError,
    InvariantViolationError,
    TopicError,
    ValidationError,
)
from gavel.lib.models import (
    TIMER_INTENTS,
    GamePhase,
    GameSession,
    GameTable,
    Intent,
)
from gavel.lib.randomness import RandomnessProvider, create_randomness

logger = logging.getLogger(__name__)


# =============================================================================
# Phase Rules
# =============================================================================

# Phases in which each in-game intent is accepted
ALLOWED_PHASES: dict[str, frozenset[GamePhase]] = {
    "reveal_topic": frozenset({GamePhase.ROLE_ASSIGNMENT}),
    "change_topic": frozenset({GamePhase.TOPIC_REVEAL}),
    "start_debate": frozenset({GamePhase.TOPIC_REVEAL}),
    "pause_clock": frozenset({GamePhase.DEBATE}),
    "resume_clock": frozenset({GamePhase.DEBATE}),
    "reset_clock": frozenset({GamePhase.DEBATE}),
    "tick": frozenset({GamePhase.DEBATE}),
    "roll_criterion": frozenset({GamePhase.DEBATE}),
    "roll_step": frozenset({GamePhase.CRITERION_ROLL}),
    "declare_winner": frozenset({GamePhase.CRITERION_ROLL}),
    "continue_after_verdict": frozenset({GamePhase.VERDICT}),
    "next_round": frozenset({GamePhase.SCOREBOARD}),
    "rematch": frozenset({GamePhase.END_GAME}),
    "return_to_menu": frozenset(GamePhase),
}


class DispatchResult(BaseModel):
    """Outcome of one dispatch."""

    table: GameTable = Field(description="Table after the intent")
    accepted: bool = Field(default=True)
    reason: str = Field(default="", description="Why the intent was refused")


def available_intents(table: GameTable) -> list[str]:
    """
    Intents the presentation may offer right now.

    Parameterized intents are listed by type; their arguments are still
    validated on dispatch.
    """
    session = table.session
    if session is None:
        intents = ["start_game", "add_custom_topic"]
        if table.custom_topics:
            intents.append("remove_custom_topic")
        return intents

    intents = []
    for intent_type, phases in ALLOWED_PHASES.items():
        if intent_type in TIMER_INTENTS or session.phase not in phases:
            continue
        if intent_type == "pause_clock" and not session.clock.running:
            continue
        if intent_type == "resume_clock" and (
            session.clock.running or session.clock.expired
        ):
            continue
        if intent_type == "declare_winner" and session.rolling:
            continue
        intents.append(intent_type)
    return intents


# =============================================================================
# Engine
# =============================================================================


class GameEngine:
    """
    Applies intents to tables.

    Holds no game state of its own, only the random source and settings,
    so one engine can serve any number of tables.
    """

    def __init__(
        self,
        rng: RandomnessProvider | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.rng = rng or create_randomness(self.settings)
        self.roles = RoleAssigner(self.rng)
        self.deck = TopicDeck(self.rng)
        self.selector = CriterionSelector(self.rng)

        self._handlers: dict[str, Callable[[GameTable, Any], None]] = {
            "start_game": self._start_game,
            "reveal_topic": self._reveal_topic,
            "change_topic": self._change_topic,
            "start_debate": self._start_debate,
            "pause_clock": self._pause_clock,
            "resume_clock": self._resume_clock,
            "reset_clock": self._reset_clock,
            "tick": self._tick,
            "roll_criterion": self._roll_criterion,
            "roll_step": self._roll_step,
            "declare_winner": self._declare_winner,
            "continue_after_verdict": self._continue_after_verdict,
            "next_round": self._next_round,
            "rematch": self._rematch,
            "return_to_menu": self._return_to_menu,
            "add_custom_topic": self._add_custom_topic,
            "remove_custom_topic": self._remove_custom_topic,
        }

    def dispatch(self, table: GameTable, intent: Intent) -> DispatchResult:
        """
        Apply one intent.

        Args:
            table: Current table (not modified)
            intent: Intent to apply

        Returns:
            DispatchResult with the new table, or the original table and a
            reason when the intent was refused

        Raises:
            InvariantViolationError: If the table is structurally broken
        """
        handler = self._handlers.get(intent.type)
        if handler is None:
            raise InvariantViolationError(f"Unknown intent type: {intent.type}")

        working = table.model_copy(deep=True)
        try:
            handler(working, intent)
        except IntentRejectedError as e:
            log = logger.debug if intent.type in TIMER_INTENTS else logger.info
            log(f"Rejected {intent.type}: {e.reason}")
            return DispatchResult(table=table, accepted=False, reason=e.reason)
        except ValidationError as e:
            logger.info(f"Rejected {intent.type}: {e.message}")
            return DispatchResult(table=table, accepted=False, reason=e.message)

        working.touch()
        return DispatchResult(table=working)

    # -------------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------------

    def _require(self, table: GameTable, intent_type: str) -> GameSession:
        """Return the live session if ``intent_type`` is valid in its phase."""
        session = table.session
        if session is None:
            raise IntentRejectedError("No game in progress", intent=intent_type)
        if session.phase not in ALLOWED_PHASES[intent_type]:
            raise IntentRejectedError(
                f"Cannot {intent_type.replace('_', ' ')} during {session.phase.value}",
                intent=intent_type,
                phase=session.phase.value,
            )
        if session.round_state is None:
            raise InvariantViolationError("Session has no round state")
        return session

    def _require_current(self, table: GameTable, intent: Any) -> GameSession:
        """Timer intents only count for the generation that scheduled them."""
        if intent.generation != table.generation:
            raise IntentRejectedError(
                f"Stale timer (generation {intent.generation}, table at {table.generation})",
                intent=intent.type,
            )
        return self._require(table, intent.type)

    def _require_setup(self, table: GameTable, intent_type: str) -> None:
        if table.session is not None:
            raise IntentRejectedError(
                "Topics are frozen while a game is in progress", intent=intent_type
            )

    # -------------------------------------------------------------------------
    # Setup
    # -------------------------------------------------------------------------

    def _start_game(self, table: GameTable, intent: Any) -> None:
        if table.session is not None:
            raise IntentRejectedError("A game is already in progress", intent=intent.type)

        roster = validate_roster(intent.names, self.settings)
        threshold = validate_threshold(
            intent.victory_threshold
            if intent.victory_threshold is not None
            else self.settings.default_victory_threshold
        )

        table.generation += 1
        table.session = GameSession(
            roster=roster,
            victory_threshold=threshold,
            topic_pool=build_pool(table.custom_topics),
            base_topic_count=len(BASE_TOPICS),
            clock=self._new_clock(),
        )
        logger.info(
            f"Game started on table {table.table_id}: {len(roster)} players, "
            f"first to {threshold}"
        )
        self._enter_role_assignment(table.session)

    def _add_custom_topic(self, table: GameTable, intent: Any) -> None:
        self._require_setup(table, intent.type)
        table.custom_topics.append(normalize_topic(intent.text))

    def _remove_custom_topic(self, table: GameTable, intent: Any) -> None:
        self._require_setup(table, intent.type)
        if not 0 <= intent.index < len(table.custom_topics):
            raise TopicError(
                f"No custom topic at index {intent.index}",
                field="index",
                value=intent.index,
            )
        del table.custom_topics[intent.index]

    # -------------------------------------------------------------------------
    # Round cycle
    # -------------------------------------------------------------------------

    def _new_clock(self) -> CountdownTimer:
        seconds = self.settings.debate_seconds
        return CountdownTimer(duration=seconds, remaining=seconds)

    def _enter_role_assignment(self, session: GameSession) -> None:
        session.round_state = self.roles.assign(len(session.roster), session.round_index)
        session.clock.stop()
        session.rolling = False
        session.roll_steps_remaining = 0
        session.phase = GamePhase.ROLE_ASSIGNMENT
        logger.info(
            f"Round {session.round_number}: judge is "
            f"{session.roster[session.round_state.judge_index].name}"
        )

    def _draw_topic(self, session: GameSession) -> None:
        topic, session.used_topics = self.deck.draw(
            session.topic_pool, session.used_topics
        )
        session.round_state.topic = topic
        logger.debug(f"Drew topic {topic!r} ({len(session.used_topics)} used)")

    def _reveal_topic(self, table: GameTable, intent: Any) -> None:
        session = self._require(table, intent.type)
        self._draw_topic(session)
        session.phase = GamePhase.TOPIC_REVEAL

    def _change_topic(self, table: GameTable, intent: Any) -> None:
        session = self._require(table, intent.type)
        self._draw_topic(session)

    def _start_debate(self, table: GameTable, intent: Any) -> None:
        session = self._require(table, intent.type)
        session.clock.start()
        session.phase = GamePhase.DEBATE

    def _pause_clock(self, table: GameTable, intent: Any) -> None:
        session = self._require(table, intent.type)
        if not session.clock.pause():
            raise IntentRejectedError("Clock is not running", intent=intent.type)

    def _resume_clock(self, table: GameTable, intent: Any) -> None:
        session = self._require(table, intent.type)
        if not session.clock.resume():
            raise IntentRejectedError(
                "Clock is already running or has run out", intent=intent.type
            )

    def _reset_clock(self, table: GameTable, intent: Any) -> None:
        session = self._require(table, intent.type)
        session.clock.reset()

    def _tick(self, table: GameTable, intent: Any) -> None:
        session = self._require_current(table, intent)
        if not session.clock.tick():
            raise IntentRejectedError("Clock is not running", intent=intent.type)
        if session.clock.expired:
            logger.debug("Debate clock ran out")

    def _roll_criterion(self, table: GameTable, intent: Any) -> None:
        session = self._require(table, intent.type)
        session.clock.pause()
        session.phase = GamePhase.CRITERION_ROLL

        steps = self.settings.roll_steps
        if steps > 0:
            session.rolling = True
            session.roll_steps_remaining = steps
            session.round_state.criterion = self.selector.select()
        else:
            self._settle_roll(session)

    def _roll_step(self, table: GameTable, intent: Any) -> None:
        session = self._require_current(table, intent)
        if not session.rolling:
            raise IntentRejectedError("No roll in progress", intent=intent.type)

        session.roll_steps_remaining -= 1
        if session.roll_steps_remaining > 0:
            session.round_state.criterion = self.selector.select()
        else:
            self._settle_roll(session)

    def _settle_roll(self, session: GameSession) -> None:
        # Final pick is drawn fresh, independent of the animation
        session.round_state.criterion = self.selector.select()
        session.rolling = False
        session.roll_steps_remaining = 0
        logger.info(f"Criterion settled on {session.round_state.criterion.value}")

    def _declare_winner(self, table: GameTable, intent: Any) -> None:
        session = self._require(table, intent.type)
        if session.rolling:
            raise IntentRejectedError("Criterion is still rolling", intent=intent.type)

        state = session.round_state
        state.winner = intent.team
        ScoreBoard(session.roster).award(state.members(intent.team))
        session.phase = GamePhase.VERDICT
        logger.info(
            f"Round {session.round_number} won by team {intent.team.value}; "
            f"scores now {session.scores}"
        )

    def _continue_after_verdict(self, table: GameTable, intent: Any) -> None:
        session = self._require(table, intent.type)
        board = ScoreBoard(session.roster)
        if board.has_victory(session.victory_threshold):
            session.phase = GamePhase.END_GAME
            names = [session.roster[i].name for i in board.champions()]
            logger.info(f"Game over on table {table.table_id}: {', '.join(names)}")
        else:
            session.phase = GamePhase.SCOREBOARD

    def _next_round(self, table: GameTable, intent: Any) -> None:
        session = self._require(table, intent.type)
        session.round_index += 1
        self._enter_role_assignment(session)

    def _rematch(self, table: GameTable, intent: Any) -> None:
        session = self._require(table, intent.type)
        ScoreBoard(session.roster).reset()
        session.round_index = 0
        session.used_topics = set()
        table.generation += 1
        logger.info(f"Rematch on table {table.table_id}")
        self._enter_role_assignment(session)

    def _return_to_menu(self, table: GameTable, intent: Any) -> None:
        self._require(table, intent.type)
        table.session = None
        table.generation += 1
        logger.info(f"Table {table.table_id} returned to menu")
