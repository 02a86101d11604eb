"""HTTP API for Deck Video."""
