"""Read-only table views for the presentation layer."""

from gavel.engine.criteria import describe
from gavel.engine.engine import available_intents
from gavel.engine.scoreboard import ScoreBoard
from gavel.engine.topics import pool_summary
from gavel.lib.models import (
    ClockView,
    GamePhase,
    GameSnapshot,
    GameTable,
    PlayerView,
)

# Standings are only meaningful once a round has been scored
STANDINGS_PHASES = {GamePhase.VERDICT, GamePhase.SCOREBOARD, GamePhase.END_GAME}


def build_snapshot(table: GameTable) -> GameSnapshot:
    """Render everything the presentation needs from a table."""
    snapshot = GameSnapshot(
        table_id=table.table_id,
        generation=table.generation,
        screen=table.screen,
        custom_topics=list(table.custom_topics),
        topic_pool=pool_summary(table.custom_topics),
        available_intents=available_intents(table),
    )

    session = table.session
    if session is None:
        return snapshot

    state = session.round_state
    board = ScoreBoard(session.roster)

    snapshot.phase = session.phase
    snapshot.round_index = session.round_index
    snapshot.round_number = session.round_number
    snapshot.victory_threshold = session.victory_threshold
    snapshot.players = [
        PlayerView(
            index=i,
            name=player.name,
            score=player.score,
            role=state.role_of(i) if state else None,
        )
        for i, player in enumerate(session.roster)
    ]
    snapshot.clock = ClockView(
        remaining=session.clock.remaining,
        running=session.clock.running,
        duration=session.clock.duration,
        display=session.clock.display,
        urgency=session.clock.urgency,
    )
    snapshot.rolling = session.rolling

    if state is not None:
        snapshot.judge_index = state.judge_index
        snapshot.team_a = list(state.team_a)
        snapshot.team_b = list(state.team_b)
        snapshot.topic = state.topic or None
        if state.criterion is not None:
            snapshot.criterion = describe(state.criterion)
        if state.winner is not None:
            snapshot.winner = state.winner
            snapshot.winning_indices = state.members(state.winner)

    if session.phase in STANDINGS_PHASES:
        snapshot.standings = board.standings()
    if session.phase == GamePhase.END_GAME:
        snapshot.champions = board.champions()

    return snapshot
