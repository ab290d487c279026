"""Infrastructure adapters: messaging, storage and file access."""
