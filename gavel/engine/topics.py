"""Topic pool and the deduplicating draw."""

import logging

from gavel.lib.exceptions import InvariantViolationError, TopicError
from gavel.lib.models import TopicPoolSummary
from gavel.lib.randomness import RandomnessProvider

logger = logging.getLogger(__name__)


# =============================================================================
# Base Topics
# =============================================================================

BASE_TOPICS: list[str] = [
    "Dogs should have the right to vote",
    "Pineapple belongs on pizza",
    "Homework should be illegal",
    "Cats are secretly running the government",
    "Socks with sandals are peak fashion",
    "Breakfast is overrated",
    "Every city should replace its buses with zip lines",
    "Reality TV is the highest form of art",
    "Adults should be allowed to take naps at work",
    "The moon landing was filmed on a Tuesday",
    "Cereal is a soup",
    "Mondays should be abolished",
    "Everyone should be required to own a goat",
    "Sarcasm should be taught in schools",
    "Phones should be banned at dinner tables",
    "Hot dogs are sandwiches",
    "Robots deserve a weekend",
    "Winter is the best season",
    "Grandparents should run social media",
    "Spoilers improve movies",
    "Every household needs a fog machine",
    "Pigeons are the most elegant birds",
    "Karaoke should be an Olympic sport",
    "Tipping culture should be replaced with compliments",
    "Cooking shows ruined home cooking",
    "The customer is never right",
    "Board games end more friendships than they start",
    "Everyone should write their own national anthem",
    "Gardening is an extreme sport",
    "Cash should come back in style",
    "Superheroes should pay for property damage",
    "Ghosts deserve privacy",
    "The snooze button is a human right",
    "Influencers should need a licence",
    "Standing desks are a conspiracy",
    "Music was better before streaming",
    "Aliens would find us boring",
    "Pets should choose their owners",
    "Group projects build character",
    "Ketchup is a smoothie",
]


def normalize_topic(text: str) -> str:
    """Trim custom topic text; blank text is rejected."""
    cleaned = (text or "").strip()
    if not cleaned:
        raise TopicError("Topic text cannot be empty", field="text", value=text)
    return cleaned


def build_pool(custom_topics: list[str]) -> list[str]:
    """Base topics followed by the user's custom topics."""
    return [*BASE_TOPICS, *custom_topics]


def pool_summary(custom_topics: list[str]) -> TopicPoolSummary:
    """Counts shown at setup: base + custom = total."""
    return TopicPoolSummary(
        base=len(BASE_TOPICS),
        custom=len(custom_topics),
        total=len(BASE_TOPICS) + len(custom_topics),
    )


# =============================================================================
# Deck
# =============================================================================


class TopicDeck:
    """
    Draws topics without repetition until the pool is exhausted.

    Once every topic has been shown the used set is cleared and the cycle
    starts over, so a draw always succeeds even for a one-topic pool.
    """

    def __init__(self, rng: RandomnessProvider):
        self.rng = rng

    def draw(self, pool: list[str], used: set[int]) -> tuple[str, set[int]]:
        """
        Draw one topic.

        Args:
            pool: Full topic pool
            used: Indices already shown this game

        Returns:
            Tuple of (topic, updated used set)
        """
        if not pool:
            raise InvariantViolationError("Cannot draw from an empty topic pool")

        available = [i for i in range(len(pool)) if i not in used]
        if not available:
            logger.debug(f"Topic pool of {len(pool)} exhausted, starting a new cycle")
            used = set()
            available = list(range(len(pool)))

        index = available[self.rng.randbelow(len(available))]
        updated = set(used)
        updated.add(index)
        return pool[index], updated
