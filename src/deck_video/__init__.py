"""Deck Video: turn presentation decks into generated video clips."""

__version__ = "0.1.0"
