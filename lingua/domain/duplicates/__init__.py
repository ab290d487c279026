"""Duplicate detection context."""
