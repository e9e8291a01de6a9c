"""Setup-time validation for new games."""

from gavel.config import Settings, get_settings
from gavel.lib.exceptions import RosterError, ValidationError
from gavel.lib.models import Player


def clean_names(names: list[str]) -> list[str]:
    """Trim names and drop the blank ones."""
    return [name.strip() for name in names if name and name.strip()]


def validate_roster(names: list[str], settings: Settings | None = None) -> list[Player]:
    """
    Build a roster from raw setup names.

    Args:
        names: Names as typed, possibly with blanks
        settings: Limits to apply

    Returns:
        Players with zero scores, in entry order

    Raises:
        RosterError: If the cleaned roster is too small, too large, or a
            name is too long
    """
    settings = settings or get_settings()
    cleaned = clean_names(names)

    if len(cleaned) < settings.min_players:
        raise RosterError(
            f"Need at least {settings.min_players} players, got {len(cleaned)}",
            field="names",
            value=len(cleaned),
        )
    if len(cleaned) > settings.max_players:
        raise RosterError(
            f"At most {settings.max_players} players can play, got {len(cleaned)}",
            field="names",
            value=len(cleaned),
        )

    for name in cleaned:
        if len(name) > settings.max_name_length:
            raise RosterError(
                f"Name longer than {settings.max_name_length} characters: {name!r}",
                field="names",
                value=name,
            )

    return [Player(name=name) for name in cleaned]


def validate_threshold(threshold: int) -> int:
    """Victory threshold must be a positive score."""
    if threshold < 1:
        raise ValidationError(
            "Victory threshold must be at least 1",
            field="victory_threshold",
            value=threshold,
        )
    return threshold


def can_start(names: list[str], settings: Settings | None = None) -> bool:
    """Whether the start button should be enabled for these names."""
    try:
        validate_roster(names, settings)
    except RosterError:
        return False
    return True
