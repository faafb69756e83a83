"""Installation lifecycle engine."""
