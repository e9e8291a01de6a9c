"""Gavel - round engine for a party debate game."""

__version__ = "0.1.0"
