"""Score ledger, victory check and standings."""

from gavel.lib.exceptions import InvariantViolationError
from gavel.lib.models import Player, StandingEntry


class ScoreBoard:
    """
    Wraps a roster's scores.

    Mutates the players it is given; the engine hands it a copy of the
    session so the caller's state is untouched.
    """

    def __init__(self, roster: list[Player]):
        self.roster = roster

    def award(self, members: list[int]) -> None:
        """Give one point to each listed roster index."""
        for index in members:
            if not 0 <= index < len(self.roster):
                raise InvariantViolationError(
                    f"Roster index {index} out of range",
                    details={"index": index, "roster_size": len(self.roster)},
                )
            self.roster[index].score += 1

    def reset(self) -> None:
        for player in self.roster:
            player.score = 0

    @property
    def max_score(self) -> int:
        return max((player.score for player in self.roster), default=0)

    def has_victory(self, threshold: int) -> bool:
        return bool(self.roster) and self.max_score >= threshold

    def champions(self) -> list[int]:
        """Every index holding the top score. Ties are not broken."""
        top = self.max_score
        return [i for i, player in enumerate(self.roster) if player.score == top]

    def standings(self) -> list[StandingEntry]:
        """Score descending; equal scores keep roster order."""
        order = sorted(
            range(len(self.roster)), key=lambda i: self.roster[i].score, reverse=True
        )
        return [
            StandingEntry(
                rank=rank,
                index=i,
                name=self.roster[i].name,
                score=self.roster[i].score,
            )
            for rank, i in enumerate(order, start=1)
        ]
