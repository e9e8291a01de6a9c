"""Judging criteria and the criterion roll."""

from gavel.lib.models import Criterion, CriterionView
from gavel.lib.randomness import RandomnessProvider, choice

CRITERIA: list[Criterion] = [Criterion.LOGIC, Criterion.SPEED, Criterion.SATIRE]

CRITERION_INFO: dict[Criterion, CriterionView] = {
    Criterion.LOGIC: CriterionView(
        value=Criterion.LOGIC,
        label="Logic",
        emoji="🧠",
        description="The best-structured, most convincing argument wins.",
    ),
    Criterion.SPEED: CriterionView(
        value=Criterion.SPEED,
        label="Speed",
        emoji="⚡",
        description="Whoever was quickest, most direct and most forceful wins.",
    ),
    Criterion.SATIRE: CriterionView(
        value=Criterion.SATIRE,
        label="Satire",
        emoji="🤡",
        description="The funniest, most ironic or most absurd argument wins.",
    ),
}


def describe(criterion: Criterion) -> CriterionView:
    return CRITERION_INFO[criterion]


class CriterionSelector:
    """Uniform pick among the three criteria."""

    def __init__(self, rng: RandomnessProvider):
        self.rng = rng

    def select(self) -> Criterion:
        return choice(CRITERIA, self.rng)
