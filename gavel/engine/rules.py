"""Rulebook shown on the rules screen."""

from typing import Any

from gavel.config import Settings, get_settings
from gavel.engine.criteria import CRITERIA, describe

ROLES: list[dict[str, str]] = [
    {
        "id": "judge",
        "emoji": "👑",
        "title": "The Judge",
        "text": (
            "Impartial (or not so impartial) arbiter of the round. Rolls the die "
            "that sets the judging criterion, hears both sides and bangs the "
            "gavel on a verdict. Their word is law."
        ),
    },
    {
        "id": "attacker",
        "emoji": "😈",
        "title": "Team A - Attackers",
        "text": (
            "Must attack, oppose and demolish the topic. It doesn't matter if "
            "they agree with it in real life: their job is to be the fiercest "
            "opposition possible."
        ),
    },
    {
        "id": "defender",
        "emoji": "🕊️",
        "title": "Team B - Defenders",
        "text": (
            "Must defend, justify and support the topic, however ridiculous or "
            "controversial. Champions of the indefensible."
        ),
    },
]

TIPS: list[dict[str, str]] = [
    {"icon": "😂", "tip": "Don't take anything seriously. It's satire."},
    {"icon": "👑", "tip": "If you're the judge, enjoy the power. Make the verdict dramatic."},
    {"icon": "🎭", "tip": "The best arguments mix the absurd with a grain of truth."},
    {"icon": "🗣️", "tip": "Interrupting the other team is part of the show (in moderation)."},
    {"icon": "✏️", "tip": "Add your group's own topics to make it personal."},
    {"icon": "⚡", "tip": "When Speed comes up, whoever speaks first has the edge."},
]


def round_flow(settings: Settings) -> list[dict[str, Any]]:
    """The five steps of a round."""
    return [
        {
            "step": 1,
            "title": "Role Assignment",
            "text": (
                "One player becomes the judge (rotating every round). Everyone "
                "else is split at random into the attackers and the defenders."
            ),
        },
        {
            "step": 2,
            "title": "Topic Reveal",
            "text": (
                "A card with a controversial or absurd topic is drawn, e.g. "
                "\"Dogs should have the right to vote\". Defenders defend, "
                "attackers attack."
            ),
        },
        {
            "step": 3,
            "title": f"The Debate ({settings.debate_seconds} seconds)",
            "text": (
                "Both teams prepare and deliver their arguments against the "
                "clock. Anything goes: humour, invented facts, drama."
            ),
        },
        {
            "step": 4,
            "title": "The Criterion Die",
            "text": "The judge rolls the die that decides how the round is judged.",
        },
        {
            "step": 5,
            "title": "The Verdict",
            "text": (
                "The judge declares the winning team. Every member of the "
                "winning team scores one point."
            ),
        },
    ]


def victory_rules(settings: Settings) -> list[str]:
    options = ", ".join(str(v) for v in settings.victory_options)
    return [
        f"The group picks a victory target at setup (usually {options} points).",
        f"Without a choice the target is {settings.default_victory_threshold} points.",
        "The first player to reach the target wins.",
        "If several players reach the top score together, they share the title.",
        f"{settings.min_players} to {settings.max_players} players.",
    ]


def build_rulebook(settings: Settings | None = None) -> dict[str, Any]:
    """Assemble the full rulebook."""
    settings = settings or get_settings()
    return {
        "roles": ROLES,
        "flow": round_flow(settings),
        "criteria": [describe(c).model_dump(mode="json") for c in CRITERIA],
        "victory": victory_rules(settings),
        "tips": TIPS,
    }
