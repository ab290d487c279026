"""Learning context: cards, exercise scores, scheduling and practice queues."""
