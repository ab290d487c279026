"""Lingua - spaced-repetition practice and duplicate detection for flashcards."""

__version__ = "0.1.0"
