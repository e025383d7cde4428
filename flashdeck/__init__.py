"""flashdeck: scheduling core for a spaced-repetition flashcard tool."""

__version__ = "0.1.0"
