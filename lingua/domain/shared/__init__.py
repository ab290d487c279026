"""Shared enums and base classes for all bounded contexts."""
