"""Judge rotation and team assignment."""

import logging
import math

from gavel.lib.exceptions import InvariantViolationError
from gavel.lib.models import RoundState
from gavel.lib.randomness import RandomnessProvider, shuffle

logger = logging.getLogger(__name__)


class RoleAssigner:
    """
    Splits a roster into a judge and two debating teams.

    The judge rotates round-robin by round index so every player judges
    equally often. Everyone else is shuffled and split, with Team A taking
    the extra player when the remainder is odd.
    """

    def __init__(self, rng: RandomnessProvider):
        self.rng = rng

    def assign(self, roster_size: int, round_index: int) -> RoundState:
        """
        Assign roles for one round.

        Args:
            roster_size: Number of players at the table
            round_index: Zero-based round counter

        Returns:
            RoundState with judge and teams set, topic and outcome empty
        """
        if roster_size < 2:
            raise InvariantViolationError(
                f"Cannot assign roles to {roster_size} player(s)",
                details={"roster_size": roster_size},
            )

        judge = round_index % roster_size
        others = [i for i in range(roster_size) if i != judge]
        shuffled = shuffle(others, self.rng)
        half = math.ceil(len(shuffled) / 2)

        state = RoundState(
            judge_index=judge,
            team_a=shuffled[:half],
            team_b=shuffled[half:],
        )
        logger.debug(
            f"Round {round_index}: judge={judge} team_a={state.team_a} team_b={state.team_b}"
        )
        return state
