"""Debate countdown clock.

The clock only knows how to count down. It never changes the game phase:
expiry simply stops it, and the judge decides when the debate ends.
"""

from enum import Enum

from pydantic import BaseModel, Field

from gavel.config import DEBATE_SECONDS


class Urgency(str, Enum):
    """Colour band for the remaining time."""

    CALM = "calm"
    WARNING = "warning"  # 30 seconds or less
    CRITICAL = "critical"  # 10 seconds or less


class CountdownTimer(BaseModel):
    """A decrementing one-unit-per-tick clock."""

    duration: int = Field(default=DEBATE_SECONDS, ge=0)
    remaining: int = Field(default=DEBATE_SECONDS, ge=0)
    running: bool = Field(default=False)

    def start(self) -> None:
        """Rewind to the full duration and run."""
        self.remaining = self.duration
        self.running = self.remaining > 0

    def stop(self) -> None:
        """Rewind to the full duration without running."""
        self.remaining = self.duration
        self.running = False

    def pause(self) -> bool:
        if not self.running:
            return False
        self.running = False
        return True

    def resume(self) -> bool:
        """Resume a paused clock; an expired clock stays stopped."""
        if self.running or self.remaining <= 0:
            return False
        self.running = True
        return True

    def reset(self) -> None:
        """Rewind to the full duration, keeping the running flag."""
        self.remaining = self.duration

    def tick(self) -> bool:
        """Advance one unit. Returns False when nothing changed."""
        if not self.running or self.remaining <= 0:
            return False
        self.remaining -= 1
        if self.remaining == 0:
            self.running = False
        return True

    @property
    def expired(self) -> bool:
        return self.remaining == 0

    @property
    def display(self) -> str:
        minutes, seconds = divmod(self.remaining, 60)
        return f"{minutes}:{seconds:02d}"

    @property
    def urgency(self) -> Urgency:
        if self.remaining <= 10:
            return Urgency.CRITICAL
        if self.remaining <= 30:
            return Urgency.WARNING
        return Urgency.CALM
